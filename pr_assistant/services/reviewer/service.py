"""Reviewer service - orchestration layer."""

from typing import Any

from pr_assistant.core.logging import get_logger
from pr_assistant.services.reviewer.graph import create_review_graph, initial_state
from pr_assistant.services.reviewer.schemas import ReviewRequest, ReviewResult

logger = get_logger("reviewer.service")


async def review_code_changes(request: ReviewRequest, activities: Any) -> ReviewResult:
    """Review the changed files of a pull request and submit one review.

    Failures are turned into a fallback review on the pull request, so this
    coroutine does not raise for activity errors.
    """
    logger.info(
        f"Starting code review: {request.org}/{request.repo}#{request.pull_request_number}"
    )

    graph = create_review_graph(activities)
    final_state = await graph.ainvoke(
        initial_state(
            request.org,
            request.repo,
            request.pull_request_number,
            request.purpose,
        )
    )

    result = ReviewResult(
        html_url=final_state.get("html_url"),
        comments=len(final_state.get("comments") or []),
        dropped_comments=len(final_state.get("dropped_comments") or []),
        fallback=final_state.get("fallback", False),
    )
    logger.info(
        f"Code review completed: {result.comments} comments, "
        f"{result.dropped_comments} dropped, fallback={result.fallback}"
    )
    return result
