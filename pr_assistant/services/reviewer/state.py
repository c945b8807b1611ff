"""Graph state schema for the code-review sub-process."""

from typing import TypedDict

from pr_assistant.services.github.schemas import ChangedFile
from pr_assistant.services.reviewer.schemas import ReviewComment


class ReviewState(TypedDict):
    """State for the code review graph."""

    # Request (immutable)
    org: str
    repo: str
    pull_request_number: int
    purpose: str | None

    # Files to review
    files: list[ChangedFile]

    # Accumulated results
    comments: list[ReviewComment]
    dropped_comments: list[ReviewComment]

    # Submission
    body: str | None
    html_url: str | None
    # first error raised by a node, routes to the fallback review
    error: str | None
    fallback: bool
