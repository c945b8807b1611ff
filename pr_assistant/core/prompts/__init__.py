"""Prompt templates using Jinja2."""

from pathlib import Path

from jinja2 import Environment, FileSystemLoader

PROMPTS_DIR = Path(__file__).parent
_env = Environment(loader=FileSystemLoader(PROMPTS_DIR), keep_trailing_newline=True)


def render_system_prompt(name: str) -> str:
    """Render a static system prompt, e.g. "diff_summary_system"."""
    return _env.get_template(f"{name}.jinja2").render()


def render_diff_summary_prompt(
    diff: str,
    guideline: str | None,
    breakdown_enabled: bool,
) -> str:
    """Render the diff summary prompt."""
    template = _env.get_template("diff_summary.jinja2")
    return template.render(
        diff=diff,
        guideline=guideline,
        breakdown_enabled=breakdown_enabled,
    )


def render_purpose_prompt(pull_request: str, issues: list[str]) -> str:
    """Render the pull request purpose prompt."""
    template = _env.get_template("purpose.jinja2")
    return template.render(pull_request=pull_request, issues=issues)


def render_line_review_prompt(
    file_path: str,
    patch: str,
    purpose: str | None,
) -> str:
    """Render the line-level code review prompt."""
    template = _env.get_template("line_review.jinja2")
    return template.render(file_path=file_path, patch=patch, purpose=purpose)
