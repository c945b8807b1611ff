"""
Activities: the external operations of the assistant.

Every call leaving the process (GitHub, content generation, content store)
goes through an activity. Activities are invoked through an ActivityProxy,
which applies a timeout to each attempt and retries failures with
exponential backoff before giving up with an ActivityError.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Optional

from pr_assistant.config import settings
from pr_assistant.core.exceptions import ActivityError
from pr_assistant.core.logging import get_logger
from pr_assistant.services.changelog.client import ContentStoreClient
from pr_assistant.services.changelog.schemas import ChangeLogEntryRequest, ChangeLogEntryResult
from pr_assistant.services.changelog.service import create_change_entry
from pr_assistant.services.generation import service as generation
from pr_assistant.services.generation.schemas import DiffSummaryResult, PurposeResult
from pr_assistant.services.github.client import GithubClientProvider
from pr_assistant.services.github.schemas import (
    ChangedFile,
    GithubIssue,
    GuidelineResult,
    ReviewSubmission,
)
from pr_assistant.services.github.service import GithubService
from pr_assistant.services.reviewer.schemas import LineComment

logger = get_logger("assistant.activities")


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded attempts, exponential backoff, per-attempt timeout."""

    start_to_close_timeout: float = 300.0
    initial_interval: float = 5.0
    backoff_coefficient: float = 2.0
    maximum_attempts: int = 3
    maximum_interval: float = 3000.0
    non_retryable_error_types: tuple[type[BaseException], ...] = ()

    @classmethod
    def from_settings(cls) -> "RetryPolicy":
        return cls(
            start_to_close_timeout=settings.activity_timeout_seconds,
            initial_interval=settings.activity_initial_interval,
            backoff_coefficient=settings.activity_backoff_coefficient,
            maximum_attempts=settings.activity_max_attempts,
            maximum_interval=settings.activity_max_interval,
        )

    def delay(self, attempt: int) -> float:
        """Delay after the failed attempt number `attempt` (1-based)."""
        return min(
            self.initial_interval * (self.backoff_coefficient ** (attempt - 1)),
            self.maximum_interval,
        )


class AssistantActivities:
    """Production activities, backed by GitHub, the LLM gateway and the content store."""

    def __init__(
        self,
        github: Optional[GithubService] = None,
        content_store: Optional[ContentStoreClient] = None,
    ) -> None:
        self.github = github or GithubService(GithubClientProvider())
        self.content_store = content_store or ContentStoreClient()

    async def fetch_issue(self, org: str, repo: str, number: int) -> GithubIssue:
        return await self.github.get_issue(org, repo, number)

    async def fetch_guideline(self, org: str, repo: str, ref: str) -> GuidelineResult:
        return await self.github.get_guideline(org, repo, ref)

    async def post_or_update_comment(
        self,
        org: str,
        repo: str,
        number: int,
        body: str,
        comment_id: Optional[int] = None,
    ) -> int:
        return await self.github.upsert_comment(org, repo, number, body, comment_id)

    async def list_changed_files(self, org: str, repo: str, number: int) -> list[ChangedFile]:
        return await self.github.get_pr_files(org, repo, number)

    async def fetch_diff(self, org: str, repo: str, number: int) -> str:
        return await self.github.get_pr_diff(org, repo, number)

    async def generate_diff_summary(
        self,
        diff: str,
        guideline: Optional[str] = None,
        breakdown_enabled: bool = False,
    ) -> DiffSummaryResult:
        return await generation.summarize_code_diff(diff, guideline, breakdown_enabled)

    async def generate_purpose(
        self,
        pr_description: str,
        issue_descriptions: list[str],
    ) -> PurposeResult:
        return await generation.determine_pull_request_purpose(pr_description, issue_descriptions)

    async def generate_line_comments(
        self,
        file_path: str,
        patch: str,
        purpose: Optional[str] = None,
    ) -> list[LineComment]:
        return await generation.review_file_patch(file_path, patch, purpose)

    async def submit_review(
        self,
        org: str,
        repo: str,
        number: int,
        body: Optional[str],
        comments: list[dict],
    ) -> ReviewSubmission:
        return await self.github.submit_review(org, repo, number, body, comments)

    async def append_change_log_entry(self, request: ChangeLogEntryRequest) -> ChangeLogEntryResult:
        return await create_change_entry(self.content_store, request)


class ActivityProxy:
    """Invoke activities by name with the retry policy applied.

        proxy = ActivityProxy(AssistantActivities(), RetryPolicy())
        issue = await proxy.fetch_issue("vertesia", "studio", 123)
    """

    def __init__(self, activities: Any, policy: Optional[RetryPolicy] = None) -> None:
        self._activities = activities
        self.policy = policy or RetryPolicy.from_settings()

    def __getattr__(self, name: str):
        if name.startswith("_"):
            raise AttributeError(name)
        fn = getattr(self._activities, name)

        async def call(*args, **kwargs):
            return await self.execute(name, fn, *args, **kwargs)

        return call

    async def execute(self, name: str, fn, *args, **kwargs):
        policy = self.policy
        attempt = 0
        while True:
            attempt += 1
            try:
                result = await asyncio.wait_for(
                    fn(*args, **kwargs), timeout=policy.start_to_close_timeout
                )
                if attempt > 1:
                    logger.info(f"Activity {name} succeeded on attempt {attempt}")
                return result
            except asyncio.CancelledError:
                raise
            except policy.non_retryable_error_types as e:
                logger.error(f"Activity {name} failed with a non-retryable error: {e!r}")
                raise ActivityError(name, attempt, e) from e
            except Exception as e:
                if attempt >= policy.maximum_attempts:
                    logger.error(f"Activity {name} failed after {attempt} attempts: {e!r}")
                    raise ActivityError(name, attempt, e) from e

                delay = policy.delay(attempt)
                logger.warning(
                    f"Activity {name} failed on attempt {attempt}/{policy.maximum_attempts}:"
                    f" {e!r}. Retrying in {delay:.1f}s..."
                )
                await asyncio.sleep(delay)
