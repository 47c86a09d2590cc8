"""
Run configuration using pydantic-settings.

Values come from three places, later ones winning: ``BACKPORT_*``
environment variables, then keyword arguments (the CLI passes the GitHub
Actions ``INPUT_*`` values this way).
"""

from __future__ import annotations

import re

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# GH Actions bot identity
# https://github.com/orgs/community/discussions/26560#discussioncomment-3252339
DEFAULT_COMMIT_AUTHOR_NAME = "GitHub Actions"
DEFAULT_COMMIT_AUTHOR_EMAIL = "41898282+github-actions[bot]@users.noreply.github.com"

_REPOSITORY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+/[A-Za-z0-9_.-]+$")


class RunConfiguration(BaseSettings):
    """Immutable configuration for a single backport run.

    Example:
        >>> config = RunConfiguration(
        ...     target_branch="release-1.2",
        ...     github_token="ghp_xxx",
        ...     repository="acme/widgets",
        ...     pr_labels="backport, release",
        ... )
        >>> config.extra_labels
        ['backport', 'release']
    """

    model_config = SettingsConfigDict(
        env_prefix="BACKPORT_",
        case_sensitive=False,
        frozen=True,
    )

    target_branch: str = Field(..., description="Branch the merged change is cherry-picked onto")
    submodule_name: str = Field(default="", description="Submodule to fast-forward first (empty: none)")
    pr_title_suffix: str = Field(default="[Cherry-Pick]", description="Appended to the original PR title")
    pr_assignee: str = Field(default="", description="Assignee override for the new PR")
    pr_labels: str = Field(default="", description="Comma-separated labels added to the new PR")
    github_token: SecretStr = Field(..., description="Token used to create the pull request")
    repository: str = Field(..., description="Repository slug in owner/name form")
    api_url: str = Field(default="https://api.github.com", description="GitHub API base URL")
    commit_author_name: str = Field(default=DEFAULT_COMMIT_AUTHOR_NAME)
    commit_author_email: str = Field(default=DEFAULT_COMMIT_AUTHOR_EMAIL)

    @field_validator("target_branch")
    @classmethod
    def validate_target_branch(cls, v: str) -> str:
        """Reject blank target branches."""
        if not v or not v.strip():
            raise ValueError("target_branch must not be empty")
        return v.strip()

    @field_validator("submodule_name")
    @classmethod
    def normalize_submodule_name(cls, v: str) -> str:
        """Strip whitespace and trailing slashes (``lib/`` and ``lib`` are the same path)."""
        return v.strip().rstrip("/")

    @field_validator("repository")
    @classmethod
    def validate_repository(cls, v: str) -> str:
        """Ensure the repository is an ``owner/name`` slug."""
        v = v.strip()
        if not _REPOSITORY_PATTERN.match(v):
            raise ValueError(f"repository must be in owner/name form, got: {v!r}")
        return v

    @field_validator("api_url")
    @classmethod
    def normalize_api_url(cls, v: str) -> str:
        return v.rstrip("/")

    @property
    def has_submodule(self) -> bool:
        """True when a submodule should be advanced before cherry-picking."""
        return self.submodule_name != ""

    @property
    def extra_labels(self) -> list[str]:
        """Labels from ``pr_labels``, stripped, de-duplicated, in input order."""
        labels: list[str] = []
        for raw in self.pr_labels.split(","):
            label = raw.strip()
            if label and label not in labels:
                labels.append(label)
        return labels

    @property
    def owner(self) -> str:
        return self.repository.split("/", 1)[0]

    @property
    def repo_name(self) -> str:
        return self.repository.split("/", 1)[1]
