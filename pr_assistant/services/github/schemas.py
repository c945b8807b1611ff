"""Pydantic schemas for GitHub service."""

from pydantic import BaseModel


class GithubIssue(BaseModel):
    """An issue fetched from GitHub."""

    org: str
    repo: str
    number: int
    title: str = ""
    body: str = ""

    @property
    def html_url(self) -> str:
        return f"https://github.com/{self.org}/{self.repo}/issues/{self.number}"


class ChangedFile(BaseModel):
    """A file changed by a pull request."""

    filename: str
    status: str
    patch: str = ""
    additions: int = 0
    deletions: int = 0


class GuidelineResult(BaseModel):
    """Outcome of loading the repository guideline: content or error."""

    path: str | None = None
    content: str | None = None
    error: str | None = None


class ReviewSubmission(BaseModel):
    """A review posted on a pull request."""

    html_url: str | None = None


class WebhookResponse(BaseModel):
    """Response schema for webhook events."""

    message: str
    process_id: str | None = None
    action: str | None = None


class PingResponse(BaseModel):
    """Response schema for GitHub ping event."""

    message: str = "pong"
    zen: str = ""
