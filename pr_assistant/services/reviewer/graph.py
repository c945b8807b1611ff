"""LangGraph graph for the code-review sub-process."""

import asyncio
from typing import Any, Literal

from langgraph.graph import END, StateGraph

from pr_assistant.core.logging import get_logger
from pr_assistant.services.assistant.flags import (
    SUPPORTED_EXTENSIONS,
    is_code_review_enabled_for_file,
)
from pr_assistant.services.github.schemas import ChangedFile
from pr_assistant.services.reviewer.patch_parser import (
    filter_applicable_comments,
    to_review_comments,
)
from pr_assistant.services.reviewer.schemas import ReviewComment
from pr_assistant.services.reviewer.state import ReviewState

logger = get_logger("reviewer.graph")

NO_COMMENT_BODY = (
    "Currently, the code review only supports the following file extensions: "
    + ", ".join(f"`{ext}`" for ext in SUPPORTED_EXTENSIONS)
    + "."
)
FALLBACK_BODY = (
    "Failed to create a code review. Please check the workflow execution for more details."
)


def is_reviewable(file: ChangedFile) -> bool:
    return file.status != "removed" and is_code_review_enabled_for_file(file.filename)


def create_review_graph(activities: Any):
    """Create the review graph.

    ``activities`` exposes the review activities (list_changed_files,
    generate_line_comments, submit_review), usually through an ActivityProxy.
    """

    async def list_files_node(state: ReviewState) -> dict:
        """Fetch the changed files and keep those the review supports."""
        try:
            files = await activities.list_changed_files(
                state["org"], state["repo"], state["pull_request_number"]
            )
        except Exception as e:
            logger.error(f"Failed to list changed files: {e}")
            return {"error": str(e)}

        reviewable = [f for f in files if is_reviewable(f)]
        logger.info(f"Found {len(files)} changed files, {len(reviewable)} reviewable")
        return {"files": reviewable}

    async def review_files_node(state: ReviewState) -> dict:
        """Generate line comments for every file concurrently."""
        files = state["files"]
        try:
            results = await asyncio.gather(
                *(
                    activities.generate_line_comments(f.filename, f.patch, state["purpose"])
                    for f in files
                )
            )
        except Exception as e:
            logger.error(f"Failed to generate line comments: {e}")
            return {"error": str(e)}

        comments: list[ReviewComment] = []
        for file, line_comments in zip(files, results):
            comments.extend(to_review_comments(file.filename, file.patch, line_comments))

        applicable, dropped = filter_applicable_comments(comments)
        if dropped:
            logger.warning(f"Dropped {len(dropped)}/{len(comments)} comments outside the diff")
        return {"comments": applicable, "dropped_comments": dropped}

    async def submit_review_node(state: ReviewState) -> dict:
        """Submit one review holding every applicable comment."""
        comments = state["comments"]
        body = None if comments else NO_COMMENT_BODY
        try:
            submission = await activities.submit_review(
                state["org"],
                state["repo"],
                state["pull_request_number"],
                body,
                [c.to_github() for c in comments],
            )
        except Exception as e:
            logger.error(f"Failed to submit review: {e}")
            return {"error": str(e), "body": body}

        logger.info(f"Review submitted with {len(comments)} comments: {submission.html_url}")
        return {"body": body, "html_url": submission.html_url}

    async def submit_fallback_node(state: ReviewState) -> dict:
        """Tell the author the review failed. Never raises."""
        try:
            submission = await activities.submit_review(
                state["org"],
                state["repo"],
                state["pull_request_number"],
                FALLBACK_BODY,
                [],
            )
        except Exception as e:
            logger.exception(f"Failed to submit fallback review: {e}")
            return {"fallback": True, "body": FALLBACK_BODY, "html_url": None}

        return {"fallback": True, "body": FALLBACK_BODY, "html_url": submission.html_url}

    def route_on_error(next_node: str):
        def route(state: ReviewState) -> Literal["next", "fallback"]:
            return "fallback" if state.get("error") else "next"

        route.__name__ = f"route_to_{next_node}"
        return route

    # Build the graph
    graph = StateGraph(ReviewState)

    # Add nodes
    graph.add_node("list_files", list_files_node)
    graph.add_node("review_files", review_files_node)
    graph.add_node("submit_review", submit_review_node)
    graph.add_node("submit_fallback", submit_fallback_node)

    # Set entry point
    graph.set_entry_point("list_files")

    # Add edges
    graph.add_conditional_edges(
        "list_files",
        route_on_error("review_files"),
        {"next": "review_files", "fallback": "submit_fallback"},
    )
    graph.add_conditional_edges(
        "review_files",
        route_on_error("submit_review"),
        {"next": "submit_review", "fallback": "submit_fallback"},
    )
    graph.add_conditional_edges(
        "submit_review",
        route_on_error(END),
        {"next": END, "fallback": "submit_fallback"},
    )
    graph.add_edge("submit_fallback", END)

    return graph.compile()


def initial_state(
    org: str,
    repo: str,
    pull_request_number: int,
    purpose: str | None,
) -> ReviewState:
    return {
        "org": org,
        "repo": repo,
        "pull_request_number": pull_request_number,
        "purpose": purpose,
        "files": [],
        "comments": [],
        "dropped_comments": [],
        "body": None,
        "html_url": None,
        "error": None,
        "fallback": False,
    }
