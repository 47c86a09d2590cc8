"""Tests for repo_backport/main.py."""

from unittest.mock import AsyncMock, patch

import pytest
from click.testing import CliRunner

from repo_backport.exceptions import ExternalServiceError, PreconditionError, PushError
from repo_backport.main import cli
from repo_backport.models.domain import BackportResult, CherryPickOutcome

BASE_ARGS = [
    "run",
    "--target-branch",
    "release-1.2",
    "--token",
    "ghp_test_token_123",
    "--repository",
    "acme/widgets",
]


@pytest.fixture
def runner():
    """Create CLI runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def quiet_logging():
    with patch("repo_backport.main.configure_logging") as configure:
        yield configure


@pytest.fixture
def event_path(tmp_path):
    path = tmp_path / "event.json"
    path.write_text("{}")
    return path


@pytest.fixture
def completed_run():
    result = BackportResult(
        changed_paths=["a.txt"],
        branch="feature/login-redirect-cherry-pick",
        outcome=CherryPickOutcome.CLEAN,
        pr_number=101,
    )
    with patch("repo_backport.main._run_backport", new=AsyncMock(return_value=result)) as run:
        yield run


class TestCliGroup:
    def test_configures_logging(self, runner, quiet_logging):
        result = runner.invoke(cli, ["--log-level", "DEBUG", "--log-format", "console", "changes", "--help"])

        assert result.exit_code == 0
        quiet_logging.assert_called_once_with("DEBUG", "console")

    def test_help_lists_commands(self, runner):
        result = runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        assert "run" in result.output
        assert "changes" in result.output


class TestRunCommand:
    def test_prints_pr_number(self, runner, event_path, completed_run):
        result = runner.invoke(cli, [*BASE_ARGS, "--event-path", str(event_path)])

        assert result.exit_code == 0
        assert "101" in result.output
        config, repo_path, passed_event_path = completed_run.await_args.args
        assert config.target_branch == "release-1.2"
        assert config.repository == "acme/widgets"
        assert passed_event_path == event_path

    def test_writes_actions_output(self, runner, event_path, tmp_path, completed_run):
        output_file = tmp_path / "github_output"
        output_file.write_text("previous=1\n")

        result = runner.invoke(
            cli,
            [*BASE_ARGS, "--event-path", str(event_path), "--output-file", str(output_file)],
        )

        assert result.exit_code == 0
        assert output_file.read_text() == "previous=1\npr-number=101\n"

    def test_reads_action_inputs_from_environment(self, runner, event_path, completed_run):
        env = {
            "INPUT_TARGET-BRANCH": "release-2.0",
            "INPUT_PR-CREATOR-TOKEN": "ghp_env_token",
            "INPUT_SUBMODULE-NAME": "lib/",
            "INPUT_PR-LABELS": "backport, urgent",
            "GITHUB_EVENT_PATH": str(event_path),
            "GITHUB_REPOSITORY": "acme/widgets",
        }

        result = runner.invoke(cli, ["run"], env=env)

        assert result.exit_code == 0
        config = completed_run.await_args.args[0]
        assert config.target_branch == "release-2.0"
        assert config.github_token.get_secret_value() == "ghp_env_token"
        assert config.submodule_name == "lib"
        assert config.extra_labels == ["backport", "urgent"]

    def test_skip_message(self, runner, event_path):
        skipped = AsyncMock(return_value=BackportResult(changed_paths=[]))

        with patch("repo_backport.main._run_backport", new=skipped):
            result = runner.invoke(cli, [*BASE_ARGS, "--event-path", str(event_path)])

        assert result.exit_code == 0
        assert "Skipping cherry-pick. No changes between current branch and target branch: release-1.2" in result.output

    def test_invalid_repository(self, runner, event_path, completed_run):
        args = [*BASE_ARGS, "--event-path", str(event_path)]
        args[args.index("acme/widgets")] = "widgets"

        result = runner.invoke(cli, args)

        assert result.exit_code == 1
        assert "Invalid configuration" in result.output
        completed_run.assert_not_called()

    def test_missing_target_branch(self, runner, event_path):
        result = runner.invoke(
            cli,
            ["run", "--token", "t", "--repository", "acme/widgets", "--event-path", str(event_path)],
            env={"INPUT_TARGET-BRANCH": None, "BACKPORT_TARGET_BRANCH": None},
        )

        assert result.exit_code == 2
        assert "--target-branch" in result.output

    @pytest.mark.parametrize(
        "error",
        [
            PreconditionError("Can't cherry-pick PR '42', as it was not merged."),
            PushError("topic-cherry-pick", 1, "rejected"),
            ExternalServiceError("Failed to create pull request", 422),
        ],
    )
    def test_backport_errors_exit_1(self, runner, event_path, error):
        with patch("repo_backport.main._run_backport", new=AsyncMock(side_effect=error)):
            result = runner.invoke(cli, [*BASE_ARGS, "--event-path", str(event_path)])

        assert result.exit_code == 1
        assert f"Error: {error.message}" in result.output

    def test_unexpected_error_exit_1(self, runner, event_path):
        with patch("repo_backport.main._run_backport", new=AsyncMock(side_effect=RuntimeError("boom"))):
            result = runner.invoke(cli, [*BASE_ARGS, "--event-path", str(event_path)])

        assert result.exit_code == 1
        assert "Unexpected error: boom" in result.output


class TestChangesCommand:
    def test_lists_paths(self, runner):
        detector = AsyncMock()
        detector.changed_paths = AsyncMock(return_value=["a.txt", "docs/b.md"])

        with (
            patch("repo_backport.main.GitCommandRunner") as runner_class,
            patch("repo_backport.main.ChangeDetector", return_value=detector),
        ):
            result = runner.invoke(
                cli, ["changes", "--target-branch", "release-1.2", "--submodule-name", "lib/", "--repo-path", "."]
            )

        assert result.exit_code == 0
        assert result.output.splitlines() == ["a.txt", "docs/b.md"]
        runner_class.assert_called_once_with(".")
        detector.changed_paths.assert_awaited_once_with("release-1.2", "lib")
