"""Render the aggregated pull request comment."""

import json
from typing import Optional

from pr_assistant.config import settings
from pr_assistant.services.assistant.deployment import DeploymentSpec
from pr_assistant.services.assistant.flags import RepoFeatures
from pr_assistant.services.assistant.state import AssistantContext, DiffSummary, PullRequestContext

SUMMARY_PLACEHOLDER = "_Summary is not available yet._"
PURPOSE_PLACEHOLDER = "_Purpose is not available yet._"
NO_ENVIRONMENT_MESSAGE = (
    "Your pull request does not contain a dev environment. To enable a dev environment,"
    ' please create a branch with the prefix "demo-", or contains keyword "feat" or "fix".'
)
NOTHING_ENABLED_MESSAGE = "_No assistance is enabled for this repository._"

_CLARITY_HINT = (
    " You can provide information in the pull request description or link this pull"
    " request to a GitHub issue."
)
CLARITY_NOTES = {
    1: "Note that the motivation and context are rated as very unclear (1/5), please explain"
    " the motivation and describe the problem to clarify the purpose of the pull request."
    + _CLARITY_HINT,
    2: "Note that the motivation and context are rated as unclear (2/5), please explain"
    " the motivation and describe the problem to clarify the purpose of the pull request."
    + _CLARITY_HINT,
    3: "Note that the motivation and context are rated as moderate (3/5), you can improve"
    " the motivation and the problem statement to clarify the purpose of the pull request."
    + _CLARITY_HINT,
    4: "Note that the motivation and context are rated as clear (4/5). The agent has a good"
    " understanding of the purpose of the pull request.",
    5: "Note that the motivation and context are rated as very clear (5/5). The agent has a"
    " very good understanding of the purpose of the pull request.",
}


def _header(title: str, include_header: bool) -> str:
    return f"## {title}\n\n" if include_header else ""


def render_diff_summary(summary: Optional[DiffSummary], include_header: bool) -> str:
    header = _header("Changes", include_header)
    if not summary:
        return f"{header}{SUMMARY_PLACEHOLDER}\n\n"

    content = f"{header}{summary.summary}"
    if summary.breakdown:
        content += f"\n\n{summary.breakdown}"
    return content + "\n\n"


def render_purpose(pr: PullRequestContext, include_header: bool) -> str:
    header = _header("Purpose", include_header)
    if not pr.motivation or not pr.context:
        return f"{header}{PURPOSE_PLACEHOLDER}\n\n"

    content = f"{header}{pr.motivation}\n\n{pr.context}\n\n"
    if pr.related_issues:
        content += "Related issues:\n\n"
        for url in pr.related_issues:
            content += f"* {url}\n"
        content += "\n"
    else:
        content += "Related issues: N/A\n\n"
    return content


def render_deployment(spec: Optional[DeploymentSpec], include_header: bool) -> str:
    header = _header("Deployment", include_header)
    if not spec:
        return f"{header}{NO_ENVIRONMENT_MESSAGE}\n\n"

    deployed_clouds = "GCP and AWS" if spec.aws else "GCP"
    preview = ""
    if spec.vercel:
        preview = f" The Studio UI is available at <{spec.vercel.studio_ui_url}>."
    spec_json = json.dumps(spec.model_dump(mode="json"), indent=2)

    return (
        f"{header}Your dev environment `{spec.environment}` will be deployed to"
        f" {deployed_clouds}.{preview}\n"
        "<details><summary><b>Click here</b> to learn more about your environment.</summary>\n\n"
        f"```json\n{spec_json}\n```\n"
        "</details>\n\n"
    )


def render_code_review(pr: PullRequestContext, include_header: bool) -> str:
    content = _header("Code Review", include_header)
    content += (
        f'You can start a code review by adding a comment: "{settings.review_trigger_phrase}".\n\n'
    )
    note = CLARITY_NOTES.get(pr.clearness) if pr.clearness is not None else None
    if note:
        content += note + "\n\n"
    return content


def compose(ctx: AssistantContext, repo: RepoFeatures) -> str:
    """Render the aggregated comment.

    Sections appear in a fixed order and only when the repository supports
    them. Section headers are used only by repositories supporting several
    features. The same context and features always give the same text.
    """
    include_header = repo.support_multiple_features

    comment = ""
    if repo.support_diff_summary:
        comment += render_diff_summary(ctx.summary, include_header)
    if repo.support_purpose:
        comment += render_purpose(ctx.pull_request, include_header)
    if repo.support_deployment_summary:
        comment += render_deployment(ctx.deployment, include_header)
    if repo.support_code_review:
        comment += render_code_review(ctx.pull_request, include_header)

    return comment.strip() or NOTHING_ENABLED_MESSAGE
