"""State of a pull request assistant instance."""

from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, Field

from pr_assistant.services.assistant.deployment import DeploymentSpec
from pr_assistant.services.assistant.schemas import AssistantResult, PullRequestEvent
from pr_assistant.services.github.schemas import GithubIssue

SERVICE_NAME = "pr-assistant"


class DiffSummary(BaseModel):
    """The summary of the code difference of the pull request."""

    summary: str
    breakdown: Optional[str] = None


class PullRequestContext(BaseModel):
    org: str
    repo: str
    number: int
    branch: str
    diff_url: str = ""
    # unset until the first comment is posted, then stable
    comment_id: Optional[int] = None
    # latest commit pushed to the pull request
    commit_sha: str = ""
    title: str = ""
    body: str = ""
    # keyed by canonical issue URL
    related_issues: dict[str, GithubIssue] = Field(default_factory=dict)
    # why the pull request is created
    motivation: Optional[str] = None
    # what problem the pull request is solving
    context: Optional[str] = None
    # how clear the motivation and context are, 1 to 5
    clearness: Optional[int] = None

    @property
    def purpose(self) -> Optional[str]:
        text = f"{self.motivation or ''}\n\n{self.context or ''}".strip()
        return text or None


class ExecutionInfo(BaseModel):
    """Where this assistant instance runs."""

    process_id: str
    run_id: str
    service: str = SERVICE_NAME
    started_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class AssistantContext(BaseModel):
    # None when the branch is not a dev or release branch
    deployment: Optional[DeploymentSpec] = None
    execution: ExecutionInfo
    pull_request: PullRequestContext
    summary: Optional[DiffSummary] = None
    # content of the repository guideline file
    guideline: Optional[str] = None


class AssistantState(BaseModel):
    """Durable snapshot of an assistant instance."""

    process_id: str
    status: Literal["initializing", "active", "terminal"] = "initializing"
    context: Optional[AssistantContext] = None
    # gate decision log, see gate.VersionedBehaviorGate
    patches: dict[str, bool] = Field(default_factory=dict)
    # closes the instance once it reports the pull request closed or merged
    last_pull_request_event: Optional[PullRequestEvent] = None
    result: Optional[AssistantResult] = None
