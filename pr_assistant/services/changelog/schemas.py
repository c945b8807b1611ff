"""Pydantic schemas for the change-log store."""

from pydantic import BaseModel, Field


class ChangePullRequest(BaseModel):
    number: int
    owner: str
    repository: str
    repository_full_name: str
    html_url: str


class ChangeCommit(BaseModel):
    sha: str
    date: str
    date_in_second: int


class ChangeAuthor(BaseModel):
    user_id: str
    date: str
    date_in_second: int


class ChangeLogEntryRequest(BaseModel):
    """A change entry describing one merged pull request."""

    pull_request: ChangePullRequest
    commit: ChangeCommit
    author: ChangeAuthor
    title: str
    description: str
    tags: list[str] = Field(default_factory=list)


class ChangeLogEntryResult(BaseModel):
    entry_id: str
    entry_url: str
