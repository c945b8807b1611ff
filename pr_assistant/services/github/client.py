"""GitHub API client - data layer."""

import time
from typing import Optional

from github import Github, GithubException, GithubIntegration
from github.PullRequest import PullRequest
from github.Repository import Repository

from pr_assistant.config import settings
from pr_assistant.core.logging import get_logger

logger = get_logger("github.client")

# Refresh installation tokens this many seconds before they expire
TOKEN_REFRESH_MARGIN = 300


class GithubClientProvider:
    """Creates GitHub App installation clients, cached per owner.

    One provider is created at startup and passed to the services that need
    it; the cache lives on the provider instance.
    """

    def __init__(
        self,
        app_id: Optional[str] = None,
        private_key: Optional[str] = None,
    ) -> None:
        self._app_id = app_id if app_id is not None else settings.github_app_id
        self._private_key = private_key if private_key is not None else settings.github_private_key
        self._integration: Optional[GithubIntegration] = None
        self._clients: dict[str, tuple[Github, float]] = {}

    def _get_integration(self) -> GithubIntegration:
        if self._integration:
            return self._integration

        if not all([self._app_id, self._private_key]):
            raise ValueError("GitHub App credentials not configured")

        private_key = self._private_key.replace("\\n", "\n")
        self._integration = GithubIntegration(
            integration_id=int(self._app_id),
            private_key=private_key,
        )
        return self._integration

    def _get_installation_id(self, owner: str) -> int:
        integration = self._get_integration()
        try:
            return integration.get_org_installation(owner).id
        except GithubException:
            logger.info(f"No organization installation for {owner}, trying user installation")
            return integration.get_user_installation(owner).id

    def get_client(self, owner: str) -> Github:
        """Get an authenticated GitHub client for the installation on `owner`."""
        cached = self._clients.get(owner)
        if cached and cached[1] - TOKEN_REFRESH_MARGIN > time.time():
            return cached[0]

        integration = self._get_integration()
        authorization = integration.get_access_token(self._get_installation_id(owner))
        client = Github(authorization.token)
        expires_at = authorization.expires_at.timestamp() if authorization.expires_at else time.time() + 3600
        self._clients[owner] = (client, expires_at)

        logger.info(f"GitHub App client initialized for {owner}")
        return client

    def get_repo(self, owner: str, repo: str) -> Repository:
        return self.get_client(owner).get_repo(f"{owner}/{repo}")


def fetch_pull_request(provider: GithubClientProvider, owner: str, repo: str, pr_number: int) -> PullRequest:
    """Fetch a pull request from GitHub API."""
    return provider.get_repo(owner, repo).get_pull(pr_number)


def fetch_pr_files(pr: PullRequest) -> list[dict]:
    """Fetch changed files from a PR."""
    files = []
    for f in pr.get_files():
        files.append({
            "filename": f.filename,
            "status": f.status,
            "additions": f.additions,
            "deletions": f.deletions,
            "patch": f.patch or "",
        })
    return files


def fetch_issue(provider: GithubClientProvider, owner: str, repo: str, number: int) -> dict:
    """Fetch the title and body of an issue."""
    issue = provider.get_repo(owner, repo).get_issue(number)
    return {"title": issue.title or "", "body": issue.body or ""}


def fetch_file_contents(provider: GithubClientProvider, owner: str, repo: str, path: str, ref: str = "HEAD") -> str:
    """Fetch full file contents from repository."""
    repository = provider.get_repo(owner, repo)
    content = repository.get_contents(path, ref=ref)
    if isinstance(content, list):
        raise ValueError(f"Path {path} is a directory, not a file")
    return content.decoded_content.decode("utf-8")


def create_issue_comment(pr: PullRequest, body: str) -> int:
    """Create a comment on the PR conversation and return its ID."""
    comment = pr.create_issue_comment(body)
    logger.info(f"Created comment {comment.id} on PR #{pr.number}")
    return comment.id


def edit_issue_comment(pr: PullRequest, comment_id: int, body: str) -> int:
    """Replace the body of an existing PR conversation comment."""
    comment = pr.get_issue_comment(comment_id)
    comment.edit(body)
    logger.info(f"Updated comment {comment_id} on PR #{pr.number}")
    return comment_id


def create_review(
    pr: PullRequest,
    body: str | None,
    comments: list[dict],
    event: str = "COMMENT",
) -> str | None:
    """Create a review on a PR and return its HTML URL."""
    kwargs = {"event": event}
    if body:
        kwargs["body"] = body
    if comments:
        kwargs["comments"] = comments

    review = pr.create_review(**kwargs)
    logger.info(f"Created review with {len(comments)} comments")
    return review.html_url
