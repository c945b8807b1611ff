"""Tests for the GitHub service."""

import asyncio
from unittest.mock import MagicMock, patch

from github import GithubException

from pr_assistant.services.github.service import GUIDELINE_PATHS, GithubService


class TestUpsertComment:
    """Tests for GithubService.upsert_comment."""

    @patch("pr_assistant.services.github.service.fetch_pull_request")
    def test_creates_without_comment_id(self, mock_fetch):
        pr = MagicMock()
        pr.create_issue_comment.return_value.id = 1001
        mock_fetch.return_value = pr

        comment_id = asyncio.run(
            GithubService(MagicMock()).upsert_comment("vertesia", "studio", 42, "body")
        )

        assert comment_id == 1001
        pr.create_issue_comment.assert_called_once_with("body")
        pr.get_issue_comment.assert_not_called()

    @patch("pr_assistant.services.github.service.fetch_pull_request")
    def test_edits_with_comment_id(self, mock_fetch):
        pr = MagicMock()
        mock_fetch.return_value = pr
        service = GithubService(MagicMock())

        first = asyncio.run(service.upsert_comment("vertesia", "studio", 42, "v1", 1001))
        second = asyncio.run(service.upsert_comment("vertesia", "studio", 42, "v2", 1001))

        assert (first, second) == (1001, 1001)
        pr.create_issue_comment.assert_not_called()
        pr.get_issue_comment.return_value.edit.assert_called_with("v2")


class TestGetGuideline:
    """Tests for GithubService.get_guideline."""

    @patch("pr_assistant.services.github.service.fetch_file_contents")
    def test_first_existing_path_wins(self, mock_fetch):
        def fetch(provider, owner, repo, path, ref):
            if path == ".github/VERTESIA.md":
                return "Be concise."
            raise GithubException(404, {"message": "Not Found"}, None)

        mock_fetch.side_effect = fetch

        result = asyncio.run(GithubService(MagicMock()).get_guideline("vertesia", "studio", "fix-42"))

        assert result.path == ".github/VERTESIA.md"
        assert result.content == "Be concise."
        assert result.error is None

    @patch("pr_assistant.services.github.service.fetch_file_contents")
    def test_error_when_missing(self, mock_fetch):
        mock_fetch.side_effect = GithubException(404, {"message": "Not Found"}, None)

        result = asyncio.run(GithubService(MagicMock()).get_guideline("vertesia", "studio", "fix-42"))

        assert result.content is None
        assert all(path in result.error for path in GUIDELINE_PATHS)


class TestGetPrDiff:
    """Tests for GithubService.get_pr_diff."""

    @patch("pr_assistant.services.github.service.fetch_pr_files")
    @patch("pr_assistant.services.github.service.fetch_pull_request")
    def test_assembles_patches(self, mock_fetch_pr, mock_fetch_files):
        mock_fetch_files.return_value = [
            {"filename": "a.ts", "status": "modified", "patch": "@@ -1 +1 @@\n-x\n+y"},
            {"filename": "b.py", "status": "added", "patch": "@@ -0,0 +1 @@\n+z"},
        ]

        diff = asyncio.run(GithubService(MagicMock()).get_pr_diff("vertesia", "studio", 42))

        assert diff == (
            "diff --git a/a.ts b/a.ts\n@@ -1 +1 @@\n-x\n+y\n"
            "diff --git a/b.py b/b.py\n@@ -0,0 +1 @@\n+z"
        )
