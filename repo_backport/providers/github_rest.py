"""GitHub pull-request service using PyGithub."""

import asyncio
from collections.abc import Callable
from typing import TypeVar

import structlog
from github import Auth, Github, GithubException  # type: ignore[import-not-found]
from github.Repository import Repository as GHRepository  # type: ignore[import-not-found]

from repo_backport.exceptions import ExternalServiceError
from repo_backport.providers.base import PullRequestService

log = structlog.get_logger(__name__)

T = TypeVar("T")


async def _run_sync(func: Callable[[], T]) -> T:
    """Run a blocking PyGithub call in a worker thread."""
    return await asyncio.to_thread(func)


class GitHubRestProvider(PullRequestService):
    """GitHub implementation of :class:`PullRequestService`."""

    def __init__(
        self,
        token: str,
        owner: str,
        repo: str,
        base_url: str = "https://api.github.com",
    ):
        """Initialize GitHub provider.

        Args:
            token: Token allowed to create pull requests in the repository
            owner: Repository owner (user or organization)
            repo: Repository name
            base_url: GitHub API base URL (for GitHub Enterprise)
        """
        self.token = token.strip() if token else token
        self.owner = owner
        self.repo = repo
        self.base_url = base_url.rstrip("/")
        self._client: Github | None = None
        self._repo: GHRepository | None = None

    async def connect(self) -> None:
        """Initialize the GitHub client and resolve the repository."""

        def _connect() -> tuple[Github, GHRepository]:
            client = Github(auth=Auth.Token(self.token), base_url=self.base_url)
            repo = client.get_repo(f"{self.owner}/{self.repo}")
            return client, repo

        try:
            self._client, self._repo = await _run_sync(_connect)
        except GithubException as e:
            log.error("github_connect_failed", owner=self.owner, repo=self.repo, error=str(e))
            raise ExternalServiceError(f"Cannot access repository {self.owner}/{self.repo}", e.status) from e

        log.info("github_connected", base_url=self.base_url, owner=self.owner, repo=self.repo)

    async def disconnect(self) -> None:
        """Close GitHub client."""
        if self._client:
            await _run_sync(self._client.close)
            self._client = None
            self._repo = None

    def _require_repo(self) -> GHRepository:
        if self._repo is None:
            raise ExternalServiceError("GitHub provider is not connected")
        return self._repo

    async def create_pull_request(self, title: str, head: str, base: str, body: str) -> int:
        """Create a pull request and return its number."""
        log.info("create_pull_request", title=title, head=head, base=base)
        repo = self._require_repo()

        try:
            gh_pr = await _run_sync(lambda: repo.create_pull(title=title, body=body, head=head, base=base))
        except GithubException as e:
            log.error("github_create_pr_failed", head=head, base=base, error=str(e))
            raise ExternalServiceError(f"Failed to create pull request {head} -> {base}", e.status) from e

        log.info("pull_request_created", number=gh_pr.number, url=gh_pr.html_url)
        return gh_pr.number

    async def add_labels(self, issue_number: int, labels: list[str]) -> None:
        """Add labels to the issue/PR."""
        if not labels:
            log.debug("add_labels_skipped", number=issue_number)
            return

        log.info("add_labels", number=issue_number, labels=labels)
        repo = self._require_repo()

        try:
            await _run_sync(lambda: repo.get_issue(issue_number).add_to_labels(*labels))
        except GithubException as e:
            log.error("github_add_labels_failed", number=issue_number, error=str(e))
            raise ExternalServiceError(f"Failed to add labels to #{issue_number}", e.status) from e

    async def add_assignee(self, issue_number: int, assignee: str | None) -> None:
        """Assign a user to the issue/PR."""
        if not assignee:
            log.debug("add_assignee_skipped", number=issue_number)
            return

        log.info("add_assignee", number=issue_number, assignee=assignee)
        repo = self._require_repo()

        try:
            await _run_sync(lambda: repo.get_issue(issue_number).add_to_assignees(assignee))
        except GithubException as e:
            log.error("github_add_assignee_failed", number=issue_number, error=str(e))
            raise ExternalServiceError(f"Failed to assign {assignee} to #{issue_number}", e.status) from e
