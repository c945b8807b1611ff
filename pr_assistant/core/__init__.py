"""Shared library utilities."""

from pr_assistant.core.issue_parser import (
    GithubIssueRef,
    contains_phrase,
    parse_issue_ids_from_branch,
    parse_issue_ids_from_comment,
    parse_issues_from_pull_request,
)
from pr_assistant.core.llm import get_chat_llm, get_structured_llm
from pr_assistant.core.logging import get_logger

__all__ = [
    "get_chat_llm",
    "get_structured_llm",
    "get_logger",
    "GithubIssueRef",
    "contains_phrase",
    "parse_issue_ids_from_branch",
    "parse_issue_ids_from_comment",
    "parse_issues_from_pull_request",
]
