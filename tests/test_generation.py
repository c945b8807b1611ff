"""Tests for the content generation service and its prompts."""

import asyncio
from unittest.mock import AsyncMock, patch

from pr_assistant.core.prompts import render_diff_summary_prompt, render_purpose_prompt
from pr_assistant.services.generation.schemas import (
    DiffChange,
    DiffSummaryResult,
    LineCommentsResult,
    PurposeResult,
)
from pr_assistant.services.generation.service import (
    determine_pull_request_purpose,
    review_file_patch,
    summarize_code_diff,
)
from pr_assistant.services.reviewer.schemas import LineComment


class TestPrompts:
    """Tests for prompt rendering."""

    def test_diff_summary_with_guideline(self):
        prompt = render_diff_summary_prompt("+ retry()", "Be concise.", breakdown_enabled=True)

        assert prompt.startswith("Follow the guideline of this repository:\n\nBe concise.")
        assert "```diff\n+ retry()\n```" in prompt
        assert "may stay empty" not in prompt

    def test_diff_summary_without_guideline(self):
        prompt = render_diff_summary_prompt("+ retry()", None, breakdown_enabled=False)

        assert "guideline" not in prompt
        assert "may stay empty" in prompt

    def test_purpose_without_issues(self):
        prompt = render_purpose_prompt("Fix upload", [])

        assert "does not link to any issue" in prompt


class TestDiffSummaryResult:
    def test_breakdown(self):
        result = DiffSummaryResult(
            summary="s",
            changes=[
                DiffChange(path_or_glob="src/*.ts", description="Retry"),
                DiffChange(path_or_glob="README.md", description="Docs"),
            ],
        )

        assert result.to_breakdown() == "* `src/*.ts`: Retry\n* `README.md`: Docs"

    def test_no_breakdown(self):
        assert DiffSummaryResult(summary="s").to_breakdown() is None


class TestGenerationService:
    """Tests for the generation calls."""

    @patch("pr_assistant.services.generation.service.generate_structured", new_callable=AsyncMock)
    def test_summarize_code_diff(self, mock_generate):
        mock_generate.return_value = DiffSummaryResult(summary="Retry uploads.")

        result = asyncio.run(summarize_code_diff("+ retry()", "Be concise.", True))

        assert result.summary == "Retry uploads."
        output_model, system_prompt, prompt = mock_generate.await_args.args
        assert output_model is DiffSummaryResult
        assert "summarize the code changes" in system_prompt
        assert "Be concise." in prompt

    @patch("pr_assistant.services.generation.service.generate_structured", new_callable=AsyncMock)
    def test_determine_pull_request_purpose(self, mock_generate):
        mock_generate.return_value = PurposeResult(motivation="m", context="c", clearness=3)

        result = asyncio.run(determine_pull_request_purpose("Fix upload", ["Issue 7\n\n503"]))

        assert result.clearness == 3
        prompt = mock_generate.await_args.args[2]
        assert "Fix upload" in prompt
        assert "Issue 7\n\n503" in prompt

    @patch("pr_assistant.services.generation.service.generate_structured", new_callable=AsyncMock)
    def test_review_file_patch(self, mock_generate):
        mock_generate.return_value = LineCommentsResult(
            comments=[LineComment(body="Handle 429", line=52, side="RIGHT")]
        )

        comments = asyncio.run(review_file_patch("src/upload.ts", "@@ -1 +1 @@", "Fix uploads"))

        assert comments == [LineComment(body="Handle 429", line=52, side="RIGHT")]
        prompt = mock_generate.await_args.args[2]
        assert "File: src/upload.ts" in prompt
        assert "Fix uploads" in prompt
