"""Events consumed by the assistant and results it produces.

Only the webhook fields read by the assistant are typed; every other field
is kept as-is (``extra="allow"``) and passed through untouched.
"""

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class _Payload(BaseModel):
    model_config = ConfigDict(extra="allow")


class GithubUser(_Payload):
    login: str


class GitRef(_Payload):
    ref: str
    sha: str = ""


class RepositoryPayload(_Payload):
    name: str
    full_name: str
    owner: GithubUser
    html_url: str = ""


class PullRequestPayload(_Payload):
    number: int
    state: str = "open"
    merged: bool = False
    title: Optional[str] = None
    body: Optional[str] = None
    html_url: str = ""
    diff_url: str = ""
    updated_at: Optional[str] = None
    user: GithubUser
    head: GitRef
    base: GitRef


class PullRequestEventPayload(_Payload):
    action: str
    pull_request: PullRequestPayload
    repository: RepositoryPayload


class CommentPayload(_Payload):
    id: int
    body: str = ""
    user: GithubUser


class IssuePayload(_Payload):
    number: int
    # present only when the issue is a pull request
    pull_request: Optional[dict[str, Any]] = None


class IssueCommentEventPayload(_Payload):
    action: str
    comment: CommentPayload
    issue: IssuePayload
    repository: RepositoryPayload


class PullRequestEvent(BaseModel):
    kind: Literal["pull_request"] = "pull_request"
    payload: PullRequestEventPayload

    @property
    def is_terminal(self) -> bool:
        """The pull request is closed or merged."""
        pr = self.payload.pull_request
        return pr.state == "closed" or pr.merged


class IssueCommentEvent(BaseModel):
    kind: Literal["issue_comment"] = "issue_comment"
    payload: IssueCommentEventPayload


AssistantEvent = Annotated[
    Union[PullRequestEvent, IssueCommentEvent],
    Field(discriminator="kind"),
]


class AssistantResult(BaseModel):
    """Final result of an assistant instance."""

    status: Literal["skipped", "closed", "merged"]
    reason: Optional[str] = None


def pull_request_process_id(org: str, repo: str, number: int) -> str:
    """Identity of the assistant instance of a pull request."""
    return f"{org}/{repo}/pull/{number}"


def code_review_process_id(org: str, repo: str, number: int) -> str:
    """Identity of the code-review sub-process of a pull request."""
    return f"{pull_request_process_id(org, repo, number)}:review"
