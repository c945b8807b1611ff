"""The per-pull-request assistant.

One PullRequestAssistant exists per pull request. It handles the first
``pull_request`` event, then consumes its inbox one event at a time until the
pull request is closed or merged. Every external effect goes through the
activities; every state change lands in ``AssistantState``, which the
instance checkpoints after each event.
"""

import asyncio
from datetime import datetime, timezone
from typing import Any, Optional, Protocol
from uuid import uuid4

from pr_assistant.config import settings
from pr_assistant.core.exceptions import ProcessAlreadyStartedError
from pr_assistant.core.issue_parser import contains_phrase, parse_issues_from_pull_request
from pr_assistant.core.logging import get_logger
from pr_assistant.services.assistant.composer import compose
from pr_assistant.services.assistant.deployment import (
    VercelDeploymentSpec,
    compute_deployment_spec,
    extract_preview_url,
    recompute_deployment_spec,
)
from pr_assistant.services.assistant.flags import (
    CHANGE_LOG_USERS,
    get_repo_features,
    get_user_flags,
    is_dependency_branch,
    is_excluded_base_branch,
    is_repository_enabled,
)
from pr_assistant.services.assistant.gate import (
    USE_CHANGE_LOG,
    USE_REPO_GUIDELINE,
    USE_SUBPROCESS_FOR_CODE_REVIEW,
    VersionedBehaviorGate,
)
from pr_assistant.services.assistant.schemas import (
    AssistantEvent,
    AssistantResult,
    IssueCommentEvent,
    PullRequestEvent,
    PullRequestEventPayload,
)
from pr_assistant.services.assistant.state import (
    AssistantContext,
    AssistantState,
    DiffSummary,
    ExecutionInfo,
    PullRequestContext,
)
from pr_assistant.services.changelog.schemas import (
    ChangeAuthor,
    ChangeCommit,
    ChangeLogEntryRequest,
    ChangePullRequest,
)
from pr_assistant.services.reviewer.schemas import ReviewRequest

logger = get_logger("assistant.workflow")


class ReviewLauncher(Protocol):
    def start_review(self, request: ReviewRequest) -> str: ...


def should_skip_assistance(payload: PullRequestEventPayload) -> Optional[AssistantResult]:
    """Gating predicates, in order. Returns the skip result of the first that fails."""
    repository = payload.repository
    pr = payload.pull_request
    user_login = pr.user.login

    if not is_repository_enabled(repository.full_name):
        logger.info(f"Skip the pull request for repository: {repository.full_name}")
        return AssistantResult(
            status="skipped",
            reason="Assistance is disabled for this repository.",
        )
    if get_user_flags(repository.full_name, user_login) is None:
        logger.info(f"Skip the pull request for user: {user_login}")
        return AssistantResult(
            status="skipped",
            reason="Assistance is disabled for this user.",
        )
    if is_excluded_base_branch(pr.base.ref):
        logger.info(f"Skip the pull request for base branch: {pr.base.ref}")
        return AssistantResult(
            status="skipped",
            reason=f"Assistance is disabled for the {pr.base.ref} branch.",
        )
    if is_dependency_branch(pr.head.ref):
        logger.info(f"Skip the pull request of a dependency update: {pr.head.ref}")
        return AssistantResult(
            status="skipped",
            reason="Assistance is disabled for automated dependency updates.",
        )
    return None


def compute_pull_request_context(payload: PullRequestEventPayload) -> PullRequestContext:
    pr = payload.pull_request
    return PullRequestContext(
        org=payload.repository.owner.login,
        repo=payload.repository.name,
        number=pr.number,
        branch=pr.head.ref,
        diff_url=pr.diff_url,
        commit_sha=pr.head.sha,
        title=pr.title or "",
        body=pr.body or "",
    )


def compute_assistant_context(
    payload: PullRequestEventPayload,
    process_id: str,
    run_id: str,
) -> AssistantContext:
    pull_request = compute_pull_request_context(payload)
    repo = get_repo_features(pull_request.org, pull_request.repo)

    deployment = None
    if repo.support_deployment_summary:
        deployment = compute_deployment_spec(pull_request.branch)

    return AssistantContext(
        deployment=deployment,
        execution=ExecutionInfo(process_id=process_id, run_id=run_id),
        pull_request=pull_request,
    )


def _epoch_seconds(iso_date: str) -> int:
    return int(datetime.fromisoformat(iso_date.replace("Z", "+00:00")).timestamp())


class PullRequestAssistant:
    """State machine of one pull request: initializing, active, terminal."""

    def __init__(
        self,
        state: AssistantState,
        activities: Any,
        reviews: ReviewLauncher,
        store: Any = None,
    ) -> None:
        self.state = state
        self.activities = activities
        self.reviews = reviews
        self.store = store
        self.gate = VersionedBehaviorGate(state.patches)
        self.logger = logger.bind(process_id=state.process_id)

    @property
    def process_id(self) -> str:
        return self.state.process_id

    @property
    def context(self) -> AssistantContext:
        return self.state.context

    # --- lifecycle ---

    async def run(self, inbox: asyncio.Queue) -> AssistantResult:
        """Process events until the pull request is closed or merged.

        A restored instance, whose context is already computed, goes straight
        to the event loop.
        """
        if self.state.context is None:
            event = await inbox.get()
            try:
                skip = should_skip_assistance(event.payload)
                if skip is not None:
                    return await self._complete(skip)

                self.state.context = compute_assistant_context(
                    event.payload, self.process_id, uuid4().hex
                )
                self.state.status = "active"
                await self.dispatch(event)
                await self.checkpoint()
            finally:
                inbox.task_done()

        while not self.is_closed():
            event = await inbox.get()
            try:
                await self.dispatch(event)
                await self.checkpoint()
            finally:
                inbox.task_done()

        self.state.status = "terminal"
        return await self._complete(await self.terminate())

    def is_closed(self) -> bool:
        event = self.state.last_pull_request_event
        return event is not None and event.is_terminal

    async def dispatch(self, event: AssistantEvent) -> None:
        """Handle one event. Failures are logged and the instance keeps running."""
        try:
            if isinstance(event, PullRequestEvent):
                self.state.last_pull_request_event = event
                await self.handle_pull_request_event(event)
            elif isinstance(event, IssueCommentEvent):
                await self.handle_comment_event(event)
        except Exception as e:
            self.logger.exception(f"Failed to handle the {event.kind} event: {e}")

    async def checkpoint(self) -> None:
        if self.store is not None:
            await asyncio.to_thread(self.store.save, self.state)

    async def _complete(self, result: AssistantResult) -> AssistantResult:
        self.state.status = "terminal"
        self.state.result = result
        await self.checkpoint()
        self.logger.info(f"Assistant {self.process_id} completed: {result.status}")
        return result

    # --- pull_request events ---

    async def handle_pull_request_event(self, event: PullRequestEvent) -> None:
        payload = event.payload
        pr = payload.pull_request

        # No redundant comment once the pull request is closed or merged
        if payload.action == "closed" or pr.merged:
            return

        self.logger.info(f"Handling pull_request event ({payload.action})")
        flags = get_user_flags(payload.repository.full_name, pr.user.login)
        if flags is None:
            self.logger.info(f"Assistance is no longer enabled for user: {pr.user.login}")
            return

        ctx = self.context
        ctx.pull_request.commit_sha = pr.head.sha
        ctx.pull_request.title = pr.title or ""
        ctx.pull_request.body = pr.body or ""

        repo = get_repo_features(ctx.pull_request.org, ctx.pull_request.repo)
        if repo.support_deployment_summary:
            ctx.deployment = recompute_deployment_spec(ctx.pull_request.branch, ctx.deployment)

        if self.gate.is_patched(USE_REPO_GUIDELINE):
            await self.load_guideline(pr.head.ref)
        else:
            self.logger.warning("Skip loading the guideline because the gate is not patched")

        if flags.is_diff_summary_enabled:
            await self.summarize_diff(flags.is_diff_summary_breakdown_enabled)
        else:
            self.logger.info("Diff summary is disabled for this user")

        if flags.is_purpose_enabled:
            await self.load_github_issues()

        await self.upsert_comment()

    async def load_guideline(self, ref: str) -> None:
        """Best-effort: a failure leaves the guideline as it was."""
        pr = self.context.pull_request
        try:
            resp = await self.activities.fetch_guideline(pr.org, pr.repo, ref)
        except Exception as e:
            self.logger.warning(f"Failed to load the guideline: {e}")
            return

        if resp.error:
            self.logger.warning(f"Failed to load the guideline: {resp.error}")
        else:
            self.context.guideline = resp.content

    async def summarize_diff(self, breakdown_enabled: bool) -> None:
        pr = self.context.pull_request
        diff = await self.activities.fetch_diff(pr.org, pr.repo, pr.number)
        resp = await self.activities.generate_diff_summary(
            diff, self.context.guideline, breakdown_enabled
        )
        self.logger.info(f"Diff summary of the PR: {resp.summary}")
        self.context.summary = DiffSummary(
            summary=resp.summary,
            breakdown=resp.to_breakdown() if breakdown_enabled else None,
        )

    async def load_github_issues(self) -> None:
        """Load the issues referenced by the PR, then infer its purpose."""
        pr = self.context.pull_request
        refs = parse_issues_from_pull_request(pr.org, pr.repo, pr.branch, pr.body)
        self.logger.info(f"Found {len(refs)} GitHub issues in the pull request")

        if all(url in pr.related_issues for url in refs):
            self.logger.info("Skip loading GitHub issues because they are already loaded")
        else:
            issues = await asyncio.gather(
                *(self.activities.fetch_issue(r.org, r.repo, r.number) for r in refs.values())
            )
            pr.related_issues = {issue.html_url: issue for issue in issues}
            self.logger.info(f"Loaded {len(pr.related_issues)} GitHub issues")

        issue_descriptions = [f"{i.title}\n\n{i.body}" for i in pr.related_issues.values()]
        resp = await self.activities.generate_purpose(
            f"{pr.title}\n\n{pr.body}", issue_descriptions
        )
        pr.motivation = resp.motivation
        pr.context = resp.context
        pr.clearness = resp.clearness

    async def upsert_comment(self) -> int:
        """Create the aggregated comment once, then update it in place."""
        pr = self.context.pull_request
        repo = get_repo_features(pr.org, pr.repo)
        body = compose(self.context, repo)

        comment_id = await self.activities.post_or_update_comment(
            pr.org, pr.repo, pr.number, body, pr.comment_id
        )
        if not pr.comment_id:
            pr.comment_id = comment_id
        return comment_id

    # --- issue_comment events ---

    async def handle_comment_event(self, event: IssueCommentEvent) -> None:
        comment = event.payload.comment
        login = comment.user.login
        self.logger.info(f"Handling comment event from {login}")

        deployment = self.context.deployment
        if login == settings.preview_bot_login and (deployment is None or deployment.vercel is None):
            await self.merge_preview_url(comment.body)
            return

        if not login.startswith(settings.assistant_login_prefix) and contains_phrase(
            comment.body, settings.review_trigger_phrase
        ):
            self.start_code_review()
            return

        self.logger.info(f"Skip comment event from user: {login}")

    async def merge_preview_url(self, content: str) -> None:
        pr = self.context.pull_request
        repo = get_repo_features(pr.org, pr.repo)
        if repo.support_deployment_summary:
            url = extract_preview_url(content)
            if not url:
                self.logger.warning("Failed to extract the preview URL from the comment")
                return
            self.logger.info(f"Extracted preview URL: {url}")
            if self.context.deployment:
                self.context.deployment.vercel = VercelDeploymentSpec(studio_ui_url=url)

        await self.upsert_comment()

    def start_code_review(self) -> Optional[str]:
        """Start the code review as an independent process, keyed by the PR."""
        self.gate.deprecate(USE_SUBPROCESS_FOR_CODE_REVIEW)
        pr = self.context.pull_request
        request = ReviewRequest(
            org=pr.org,
            repo=pr.repo,
            pull_request_number=pr.number,
            purpose=pr.purpose,
        )
        try:
            review_id = self.reviews.start_review(request)
        except ProcessAlreadyStartedError as e:
            self.logger.info(f"Code review already running, ignoring the trigger: {e.process_id}")
            return None

        self.logger.info(f"Code review started as an independent process: {review_id}")
        return review_id

    # --- termination ---

    async def terminate(self) -> AssistantResult:
        event = self.state.last_pull_request_event
        pr = event.payload.pull_request
        status = "merged" if pr.merged else "closed"
        self.logger.info(f"Pull request is {status} (state: {pr.state}, merged: {pr.merged})")

        if self.gate.is_patched(USE_CHANGE_LOG):
            if pr.merged and pr.user.login in CHANGE_LOG_USERS:
                await self.append_change_log_entry(event.payload)

        return AssistantResult(status=status)

    async def append_change_log_entry(self, payload: PullRequestEventPayload) -> None:
        """Record the merged pull request in the change log. Best-effort."""
        self.logger.info("Creating a change entry for the pull request")
        pr = payload.pull_request
        try:
            date = pr.updated_at or datetime.now(timezone.utc).isoformat()
            seconds = _epoch_seconds(date)
            request = ChangeLogEntryRequest(
                pull_request=ChangePullRequest(
                    number=pr.number,
                    owner=payload.repository.owner.login,
                    repository=payload.repository.name,
                    repository_full_name=payload.repository.full_name,
                    html_url=pr.html_url,
                ),
                commit=ChangeCommit(sha=pr.head.sha, date=date, date_in_second=seconds),
                author=ChangeAuthor(user_id=pr.user.login, date=date, date_in_second=seconds),
                title=pr.title or "",
                description=self.context.pull_request.purpose or "",
            )
            resp = await self.activities.append_change_log_entry(request)
        except Exception as e:
            self.logger.error(f"Failed to create a change entry: {e}")
            return

        self.logger.info(f"Created a change entry: {resp.entry_url}")
