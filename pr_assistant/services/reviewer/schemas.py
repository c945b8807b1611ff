"""Pydantic schemas for reviewer service."""

from pydantic import BaseModel


class ReviewRequest(BaseModel):
    """Input of the code-review sub-process."""

    org: str
    repo: str
    pull_request_number: int
    purpose: str | None = None


class ReviewResult(BaseModel):
    """Result of the code-review sub-process."""

    html_url: str | None = None
    comments: int = 0
    dropped_comments: int = 0
    fallback: bool = False


class LineComment(BaseModel):
    """A line comment as returned by the generation service."""

    body: str
    line: int | None = None
    side: str | None = None
    start_line: int | None = None
    start_side: str | None = None


class ReviewComment(BaseModel):
    """A line comment bound to a file, with its computed applicability."""

    file_path: str
    body: str
    line: int | None = None
    side: str | None = None
    start_line: int | None = None
    start_side: str | None = None
    applicable: bool = False

    def to_github(self) -> dict:
        """Payload entry for the GitHub "create a review" API."""
        payload = {"path": self.file_path, "body": self.body}
        for key in ("line", "side", "start_line", "start_side"):
            value = getattr(self, key)
            if value is not None:
                payload[key] = value
        return payload
