"""Feature tables: which repositories, users and files get assistance."""

from pydantic import BaseModel


class RepoFeatures(BaseModel):
    """Sections rendered in the aggregated comment of a repository."""

    support_multiple_features: bool = False
    support_diff_summary: bool = False
    support_purpose: bool = False
    support_deployment_summary: bool = False
    support_code_review: bool = False
    # None means every user of the repository
    enabled_users: frozenset[str] | None = None

    model_config = {"frozen": True}


class UserFeatures(BaseModel):
    """Work performed for a pull request author."""

    is_diff_summary_enabled: bool = True
    is_diff_summary_breakdown_enabled: bool = False
    is_purpose_enabled: bool = False

    model_config = {"frozen": True}


_SUMMARY_ONLY = RepoFeatures(support_diff_summary=True)

REPO_FEATURES: dict[str, RepoFeatures] = {
    "vertesia/composableai": _SUMMARY_ONLY,
    "vertesia/demo-github": _SUMMARY_ONLY,
    "vertesia/llumiverse": _SUMMARY_ONLY,
    "vertesia/memory": _SUMMARY_ONLY,
    "vertesia/studio": RepoFeatures(
        support_multiple_features=True,
        support_diff_summary=True,
        support_purpose=True,
        support_deployment_summary=True,
        support_code_review=True,
        enabled_users=frozenset({"mincong-h", "antoine-regnier"}),
    ),
}

USER_FEATURES: dict[str, UserFeatures] = {
    "mincong-h": UserFeatures(
        is_diff_summary_enabled=True,
        is_diff_summary_breakdown_enabled=True,
        is_purpose_enabled=True,
    ),
    "antoine-regnier": UserFeatures(
        is_diff_summary_enabled=True,
        is_diff_summary_breakdown_enabled=True,
        is_purpose_enabled=True,
    ),
}
DEFAULT_USER_FEATURES = UserFeatures()

# Authors whose merged pull requests are recorded in the change log
CHANGE_LOG_USERS = frozenset({"mincong-h"})

# Base branches whose diffs are too large to assist reliably
EXCLUDED_BASE_BRANCHES = frozenset({"preview"})

DEPENDENCY_BRANCH_PREFIXES = ("renovate/", "dependabot/")

SUPPORTED_EXTENSIONS = (".ts", ".tsx", ".js", ".jsx", ".mjs", ".py")


def is_repository_enabled(repo_full_name: str) -> bool:
    return repo_full_name in REPO_FEATURES


def get_repo_features(owner: str, repo: str) -> RepoFeatures:
    """Features of a repository; everything disabled when unknown."""
    return REPO_FEATURES.get(f"{owner}/{repo}", RepoFeatures())


def get_user_flags(repo_full_name: str, user_id: str) -> UserFeatures | None:
    """Flags of a user in a repository, None when the user gets no assistance."""
    repo = REPO_FEATURES.get(repo_full_name)
    if repo is None:
        return None
    if repo.enabled_users is not None and user_id not in repo.enabled_users:
        return None
    return USER_FEATURES.get(user_id, DEFAULT_USER_FEATURES)


def is_excluded_base_branch(ref: str) -> bool:
    return ref in EXCLUDED_BASE_BRANCHES


def is_dependency_branch(ref: str) -> bool:
    return ref.startswith(DEPENDENCY_BRANCH_PREFIXES)


def is_code_review_enabled_for_file(filename: str) -> bool:
    return filename.endswith(SUPPORTED_EXTENSIONS)
