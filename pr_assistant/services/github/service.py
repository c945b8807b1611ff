"""GitHub service - business logic layer."""

import asyncio

from pr_assistant.core.logging import get_logger
from pr_assistant.services.github.client import (
    GithubClientProvider,
    create_issue_comment,
    create_review,
    edit_issue_comment,
    fetch_file_contents,
    fetch_issue,
    fetch_pr_files,
    fetch_pull_request,
)
from pr_assistant.services.github.schemas import (
    ChangedFile,
    GithubIssue,
    GuidelineResult,
    ReviewSubmission,
)

logger = get_logger("github.service")

# Candidate locations of the repository guideline, first match wins
GUIDELINE_PATHS = ("VERTESIA.md", ".github/VERTESIA.md", "docs/VERTESIA.md")


class GithubService:
    """Async facade over the PyGithub data layer."""

    def __init__(self, provider: GithubClientProvider) -> None:
        self.provider = provider

    async def get_issue(self, owner: str, repo: str, number: int) -> GithubIssue:
        """Get an issue by owner/repo and number."""
        logger.info(f"Fetching issue: {owner}/{repo}#{number}")
        data = await asyncio.to_thread(fetch_issue, self.provider, owner, repo, number)
        return GithubIssue(org=owner, repo=repo, number=number, **data)

    async def get_guideline(self, owner: str, repo: str, ref: str) -> GuidelineResult:
        """Load the first guideline file found at `ref`; errors are returned, not raised."""
        errors = []
        for path in GUIDELINE_PATHS:
            try:
                content = await asyncio.to_thread(
                    fetch_file_contents, self.provider, owner, repo, path, ref
                )
                logger.info(f"Loaded guideline {path} from {owner}/{repo}@{ref}")
                return GuidelineResult(path=path, content=content)
            except Exception as e:
                errors.append(f"{path}: {e}")
        return GuidelineResult(error="; ".join(errors))

    async def get_pr_files(self, owner: str, repo: str, pr_number: int) -> list[ChangedFile]:
        """Get changed files from a PR."""

        def _load() -> list[dict]:
            pr = fetch_pull_request(self.provider, owner, repo, pr_number)
            return fetch_pr_files(pr)

        files = await asyncio.to_thread(_load)
        logger.info(f"Found {len(files)} files in PR {owner}/{repo}#{pr_number}")
        return [ChangedFile(**f) for f in files]

    async def get_pr_diff(self, owner: str, repo: str, pr_number: int) -> str:
        """Assemble the unified diff of a PR from its per-file patches."""
        files = await self.get_pr_files(owner, repo, pr_number)
        parts = []
        for f in files:
            parts.append(f"diff --git a/{f.filename} b/{f.filename}\n{f.patch}")
        return "\n".join(parts)

    async def upsert_comment(
        self,
        owner: str,
        repo: str,
        pr_number: int,
        body: str,
        comment_id: int | None = None,
    ) -> int:
        """Create the PR comment, or edit it in place when `comment_id` is known."""

        def _upsert() -> int:
            pr = fetch_pull_request(self.provider, owner, repo, pr_number)
            if comment_id:
                return edit_issue_comment(pr, comment_id, body)
            return create_issue_comment(pr, body)

        return await asyncio.to_thread(_upsert)

    async def submit_review(
        self,
        owner: str,
        repo: str,
        pr_number: int,
        body: str | None,
        comments: list[dict],
        event: str = "COMMENT",
    ) -> ReviewSubmission:
        """Submit a review to a PR."""

        def _submit() -> str | None:
            pr = fetch_pull_request(self.provider, owner, repo, pr_number)
            return create_review(pr, body, comments, event)

        html_url = await asyncio.to_thread(_submit)
        logger.info(f"Submitted review with {len(comments)} comments")
        return ReviewSubmission(html_url=html_url)
