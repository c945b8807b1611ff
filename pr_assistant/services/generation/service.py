"""Content generation service - summaries, purposes and line comments."""

from pr_assistant.core.llm import generate_structured
from pr_assistant.core.logging import get_logger
from pr_assistant.core.prompts import (
    render_diff_summary_prompt,
    render_line_review_prompt,
    render_purpose_prompt,
    render_system_prompt,
)
from pr_assistant.services.generation.schemas import (
    DiffSummaryResult,
    LineCommentsResult,
    PurposeResult,
)
from pr_assistant.services.reviewer.schemas import LineComment

logger = get_logger("generation.service")


async def summarize_code_diff(
    diff: str,
    guideline: str | None = None,
    breakdown_enabled: bool = False,
) -> DiffSummaryResult:
    """Summarize a code diff to a human-readable format."""
    result = await generate_structured(
        DiffSummaryResult,
        render_system_prompt("diff_summary_system"),
        render_diff_summary_prompt(diff, guideline, breakdown_enabled),
    )
    logger.info(f"Summarized diff ({len(diff)} chars, {len(result.changes)} changes)")
    return result


async def determine_pull_request_purpose(
    pull_request: str,
    issues: list[str],
) -> PurposeResult:
    """Determine the motivation, context and clearness of a pull request."""
    result = await generate_structured(
        PurposeResult,
        render_system_prompt("purpose_system"),
        render_purpose_prompt(pull_request, issues),
    )
    logger.info(f"Determined purpose with clearness {result.clearness}")
    return result


async def review_file_patch(
    file_path: str,
    patch: str,
    purpose: str | None = None,
) -> list[LineComment]:
    """Review a file patch and return line comments."""
    result = await generate_structured(
        LineCommentsResult,
        render_system_prompt("line_review_system"),
        render_line_review_prompt(file_path, patch, purpose),
    )
    logger.info(f"Reviewed {file_path}: {len(result.comments)} comments")
    return result.comments
