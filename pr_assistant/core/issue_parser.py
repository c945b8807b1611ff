"""Parse GitHub issue references from text and branch names."""

import re
from dataclasses import dataclass

GITHUB_BASE_URL = "https://github.com"


@dataclass(frozen=True)
class GithubIssueRef:
    """Reference to a GitHub issue. Its HTML URL is the canonical identity."""

    org: str
    repo: str
    number: int

    def to_html_url(self) -> str:
        return f"{GITHUB_BASE_URL}/{self.org}/{self.repo}/issues/{self.number}"


# "#123" preceded by start of line or whitespace
_ANCHOR_PATTERN = re.compile(r"(?:^|(?<=\s))#(\d+)\b")
# "vertesia/llumiverse#88" preceded by start of line or whitespace
_QUALIFIED_PATTERN = re.compile(r"(?:^|(?<=\s))([\w.-]+)/([\w.-]+)#(\d+)\b")
# https://github.com/org/repo/issues/123
_URL_PATTERN = re.compile(r"https?://[^/\s]+/([^/\s]+)/([^/\s]+)/issues/(\d+)")
# feat/123/my-feature, fix-42, 7-typo
_BRANCH_PATTERN = re.compile(r"(?:^|[/_-])(\d+)(?=$|[/_-])")


def parse_issue_ids_from_comment(
    comment: str,
    org: str,
    repo: str,
) -> dict[str, GithubIssueRef]:
    """
    Parse issue references from free text.

    Supported formats:
    - #123 -> issue in the current org/repo
    - owner/repo#123 -> issue in owner/repo
    - https://github.com/owner/repo/issues/123 -> issue in owner/repo

    Returns a map keyed by canonical issue URL, empty when nothing matches.
    """
    refs: dict[str, GithubIssueRef] = {}
    if not comment:
        return refs

    for match in _ANCHOR_PATTERN.finditer(comment):
        ref = GithubIssueRef(org=org, repo=repo, number=int(match.group(1)))
        refs.setdefault(ref.to_html_url(), ref)

    for match in _QUALIFIED_PATTERN.finditer(comment):
        ref = GithubIssueRef(
            org=match.group(1),
            repo=match.group(2),
            number=int(match.group(3)),
        )
        refs.setdefault(ref.to_html_url(), ref)

    for match in _URL_PATTERN.finditer(comment):
        ref = GithubIssueRef(
            org=match.group(1),
            repo=match.group(2),
            number=int(match.group(3)),
        )
        refs.setdefault(ref.to_html_url(), ref)

    return refs


def parse_issue_ids_from_branch(
    branch: str,
    org: str,
    repo: str,
) -> dict[str, GithubIssueRef]:
    """Parse the issue number embedded in a branch name, e.g. "feat/123/my-feature"."""
    refs: dict[str, GithubIssueRef] = {}
    if not branch:
        return refs

    match = _BRANCH_PATTERN.search(branch)
    if match:
        ref = GithubIssueRef(org=org, repo=repo, number=int(match.group(1)))
        refs[ref.to_html_url()] = ref
    return refs


def parse_issues_from_pull_request(
    org: str,
    repo: str,
    branch: str,
    body: str,
) -> dict[str, GithubIssueRef]:
    """Union of the references found in the PR body and its head branch."""
    refs = parse_issue_ids_from_comment(body, org, repo)
    for url, ref in parse_issue_ids_from_branch(branch, org, repo).items():
        refs.setdefault(url, ref)
    return refs


def contains_phrase(text: str, phrase: str) -> bool:
    """Check if the text contains the phrase, ignoring case."""
    return phrase.lower() in (text or "").lower()
