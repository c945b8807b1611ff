"""GitHub service."""

from pr_assistant.services.github.client import GithubClientProvider
from pr_assistant.services.github.service import GithubService

__all__ = [
    "GithubClientProvider",
    "GithubService",
]
