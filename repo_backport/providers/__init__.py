"""Pull-request service providers."""

from repo_backport.providers.base import PullRequestService
from repo_backport.providers.github_rest import GitHubRestProvider

__all__ = ["GitHubRestProvider", "PullRequestService"]
