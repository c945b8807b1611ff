"""Structured outputs of the content-generation calls."""

from pydantic import BaseModel, Field

from pr_assistant.services.reviewer.schemas import LineComment


class DiffChange(BaseModel):
    """One entry of the per-path breakdown."""

    path_or_glob: str
    description: str


class DiffSummaryResult(BaseModel):
    """Summary of a code diff."""

    summary: str
    changes: list[DiffChange] = Field(default_factory=list)

    def to_breakdown(self) -> str | None:
        """Render the changes as a markdown list, None when there are none."""
        if not self.changes:
            return None
        return "\n".join(f"* `{c.path_or_glob}`: {c.description}" for c in self.changes)


class PurposeResult(BaseModel):
    """Purpose of a pull request."""

    motivation: str
    context: str
    clearness: int = Field(description="How clear the purpose is, from 1 to 5")


class LineCommentsResult(BaseModel):
    """Line comments for one file patch."""

    comments: list[LineComment] = Field(default_factory=list)
