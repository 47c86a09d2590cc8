"""Pytest configuration and shared fixtures."""

from pathlib import Path
from unittest.mock import AsyncMock

import pytest
import structlog

from repo_backport.config.settings import RunConfiguration
from repo_backport.git.runner import GitCommandRunner
from repo_backport.models.domain import CommandResult, MergedPullRequestRef
from repo_backport.providers.base import PullRequestService

MERGE_SHA = "a1b2c3d4e5f60718293a4b5c6d7e8f9012345678"
HEAD_SHA = "ffeeddccbbaa99887766554433221100ffeeddcc"
AUTHOR = "Jane Doe <jane@example.com>"


class FakeGitRunner(GitCommandRunner):
    """GitCommandRunner that records commands instead of running git.

    Responses are scripted per exact argument tuple; anything unscripted
    succeeds with empty output. ``run_checked`` is inherited unchanged.
    """

    def __init__(self, repo_path: str | Path = ".") -> None:
        self.git_path = "/usr/bin/git"
        self.repo_path = Path(repo_path)
        self.timeout = None
        self.responses: dict[tuple[str, ...], CommandResult] = {}
        self.calls: list[tuple[str, ...]] = []
        self.cwds: list[str | Path | None] = []

    def script(self, *args: str, stdout: str = "", stderr: str = "", exit_code: int = 0) -> None:
        self.responses[args] = CommandResult(stdout=stdout, stderr=stderr, exit_code=exit_code)

    async def run(self, *args: str, cwd: str | Path | None = None) -> CommandResult:
        self.calls.append(args)
        self.cwds.append(cwd)
        return self.responses.get(args, CommandResult(stdout="", stderr="", exit_code=0))

    def called(self, *args: str) -> bool:
        return args in self.calls

    def index(self, *args: str) -> int:
        return self.calls.index(args)

    def count(self, command: str, *flags: str) -> int:
        """Number of calls to ``git <command>`` carrying every flag in ``flags``."""
        return sum(1 for call in self.calls if call[0] == command and all(flag in call for flag in flags))


@pytest.fixture(autouse=True)
def reset_structlog():
    """Undo any structlog configuration a test applied."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def fake_git() -> FakeGitRunner:
    """Fake git runner with the merge commit's author and HEAD scripted."""
    git = FakeGitRunner()
    git.script("log", "-1", "--pretty=format:%an <%ae>", MERGE_SHA, stdout=AUTHOR)
    git.script("rev-parse", "HEAD", stdout=HEAD_SHA)
    return git


@pytest.fixture
def merged_pr() -> MergedPullRequestRef:
    """A merged pull request as delivered by the event payload."""
    return MergedPullRequestRef(
        number=42,
        title="Fix login redirect",
        body="Redirect to the page the user came from.",
        head_branch_name="feature/login-redirect",
        merge_commit_sha=MERGE_SHA,
        author="jdoe",
        assignee="reviewer",
        labels=("bug",),
    )


@pytest.fixture
def run_config() -> RunConfiguration:
    """Run configuration without a submodule."""
    return RunConfiguration(
        target_branch="release-1.2",
        github_token="ghp_test_token_123",
        repository="acme/widgets",
        pr_labels="backport",
    )


@pytest.fixture
def submodule_config() -> RunConfiguration:
    """Run configuration advancing the ``lib`` submodule."""
    return RunConfiguration(
        target_branch="release-1.2",
        github_token="ghp_test_token_123",
        repository="acme/widgets",
        submodule_name="lib",
    )


@pytest.fixture
def mock_pull_requests() -> AsyncMock:
    """Mock pull-request service returning PR #101."""
    service = AsyncMock(spec=PullRequestService)
    service.create_pull_request = AsyncMock(return_value=101)
    service.add_labels = AsyncMock()
    service.add_assignee = AsyncMock()
    return service


@pytest.fixture
def merged_event() -> dict:
    """Minimal ``pull_request.closed`` payload for a merged PR."""
    return {
        "action": "closed",
        "pull_request": {
            "number": 42,
            "title": "Fix login redirect",
            "body": "Redirect to the page the user came from.",
            "merged": True,
            "merge_commit_sha": MERGE_SHA,
            "head": {"ref": "feature/login-redirect"},
            "user": {"login": "jdoe"},
            "assignee": {"login": "reviewer"},
            "labels": [{"name": "bug"}, {"name": "ui"}],
        },
    }
