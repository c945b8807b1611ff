"""Tests for the aggregated comment."""

from pr_assistant.services.assistant.composer import (
    CLARITY_NOTES,
    NO_ENVIRONMENT_MESSAGE,
    NOTHING_ENABLED_MESSAGE,
    PURPOSE_PLACEHOLDER,
    SUMMARY_PLACEHOLDER,
    compose,
)
from pr_assistant.services.assistant.deployment import VercelDeploymentSpec, compute_deployment_spec
from pr_assistant.services.assistant.flags import RepoFeatures
from pr_assistant.services.assistant.state import (
    AssistantContext,
    DiffSummary,
    ExecutionInfo,
    PullRequestContext,
)
from pr_assistant.services.github.schemas import GithubIssue

ALL_FEATURES = RepoFeatures(
    support_multiple_features=True,
    support_diff_summary=True,
    support_purpose=True,
    support_deployment_summary=True,
    support_code_review=True,
)
SUMMARY_ONLY = RepoFeatures(support_diff_summary=True)


def make_context(**pr_fields) -> AssistantContext:
    return AssistantContext(
        execution=ExecutionInfo(process_id="vertesia/studio/pull/42", run_id="run-1"),
        pull_request=PullRequestContext(
            org="vertesia", repo="studio", number=42, branch="fix-42", **pr_fields
        ),
    )


class TestCompose:
    """Tests for compose."""

    def test_placeholders_with_headers(self):
        body = compose(make_context(), ALL_FEATURES)

        assert body.startswith("## Changes\n\n" + SUMMARY_PLACEHOLDER)
        assert "## Purpose\n\n" + PURPOSE_PLACEHOLDER in body
        assert "## Deployment\n\n" + NO_ENVIRONMENT_MESSAGE in body
        assert "## Code Review\n\n" in body

    def test_section_order(self):
        body = compose(make_context(), ALL_FEATURES)

        positions = [body.index(h) for h in ("## Changes", "## Purpose", "## Deployment", "## Code Review")]
        assert positions == sorted(positions)

    def test_single_feature_has_no_header(self):
        ctx = make_context()
        ctx.summary = DiffSummary(summary="Fix the flaky upload.")

        assert compose(ctx, SUMMARY_ONLY) == "Fix the flaky upload."

    def test_summary_with_breakdown(self):
        ctx = make_context()
        ctx.summary = DiffSummary(summary="Fix upload.", breakdown="* `src/upload.ts`: retry")

        assert compose(ctx, SUMMARY_ONLY) == "Fix upload.\n\n* `src/upload.ts`: retry"

    def test_disabled_sections_omitted(self):
        repo = RepoFeatures(support_multiple_features=True, support_diff_summary=True, support_code_review=True)
        body = compose(make_context(), repo)

        assert "## Purpose" not in body
        assert "## Deployment" not in body

    def test_nothing_enabled(self):
        assert compose(make_context(), RepoFeatures()) == NOTHING_ENABLED_MESSAGE

    def test_purpose_with_related_issues(self):
        issue = GithubIssue(org="vertesia", repo="studio", number=7, title="Upload fails")
        ctx = make_context(
            motivation="Uploads fail.",
            context="503 under load.",
            clearness=2,
            related_issues={issue.html_url: issue},
        )

        body = compose(ctx, ALL_FEATURES)

        assert "Uploads fail.\n\n503 under load." in body
        assert "* https://github.com/vertesia/studio/issues/7\n" in body
        assert CLARITY_NOTES[2] in body

    def test_purpose_without_related_issues(self):
        ctx = make_context(motivation="Uploads fail.", context="503 under load.")

        assert "Related issues: N/A" in compose(ctx, ALL_FEATURES)

    def test_clarity_notes(self):
        for score in range(1, 6):
            body = compose(make_context(motivation="m", context="c", clearness=score), ALL_FEATURES)
            assert CLARITY_NOTES[score] in body

    def test_out_of_range_clarity_is_silent(self):
        body = compose(make_context(motivation="m", context="c", clearness=9), ALL_FEATURES)

        assert "Note that the motivation" not in body

    def test_deployment_section(self):
        ctx = make_context()
        ctx.deployment = compute_deployment_spec("fix-42")
        ctx.deployment.vercel = VercelDeploymentSpec(studio_ui_url="https://unified.vercel.app")

        body = compose(ctx, ALL_FEATURES)

        assert "Your dev environment `dev-fix-42` will be deployed to GCP." in body
        assert "The Studio UI is available at <https://unified.vercel.app>." in body
        assert '"environment": "dev-fix-42"' in body

    def test_review_invitation(self):
        body = compose(make_context(), ALL_FEATURES)

        assert '"Vertesia, please review"' in body

    def test_idempotent(self):
        """Same context and features, byte-identical output."""
        ctx = make_context(motivation="m", context="c", clearness=3)
        ctx.summary = DiffSummary(summary="s", breakdown="b")
        ctx.deployment = compute_deployment_spec("feat-aws-1")

        assert compose(ctx, ALL_FEATURES) == compose(ctx.model_copy(deep=True), ALL_FEATURES)
