"""Configuration for repo-backport runs."""

from repo_backport.config.settings import (
    DEFAULT_COMMIT_AUTHOR_EMAIL,
    DEFAULT_COMMIT_AUTHOR_NAME,
    RunConfiguration,
)

__all__ = [
    "DEFAULT_COMMIT_AUTHOR_EMAIL",
    "DEFAULT_COMMIT_AUTHOR_NAME",
    "RunConfiguration",
]
