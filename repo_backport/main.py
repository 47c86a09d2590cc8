"""CLI entry point for repo-backport."""

import asyncio
import sys
from pathlib import Path

import click
import structlog
from pydantic import ValidationError

from repo_backport.config.settings import RunConfiguration
from repo_backport.engine.events import load_merged_pull_request
from repo_backport.engine.orchestrator import BackportOrchestrator
from repo_backport.exceptions import BackportError, ConfigurationError
from repo_backport.git.changes import ChangeDetector
from repo_backport.git.runner import GitCommandRunner
from repo_backport.models.domain import BackportResult
from repo_backport.providers.github_rest import GitHubRestProvider
from repo_backport.utils.logging_config import configure_logging

log = structlog.get_logger(__name__)


@click.group()
@click.option("--log-level", default="INFO", envvar="BACKPORT_LOG_LEVEL", help="Logging level")
@click.option(
    "--log-format",
    type=click.Choice(["json", "console"]),
    default="json",
    envvar="BACKPORT_LOG_FORMAT",
    help="Log output format",
)
def cli(log_level: str, log_format: str) -> None:
    """repo-backport: cherry-pick merged pull requests onto another branch."""
    configure_logging(log_level, log_format)  # type: ignore[arg-type]


@cli.command(name="run")
@click.option(
    "--target-branch",
    envvar=["INPUT_TARGET-BRANCH", "BACKPORT_TARGET_BRANCH"],
    required=True,
    help="Branch to cherry-pick the merged change onto",
)
@click.option(
    "--token",
    envvar=["INPUT_PR-CREATOR-TOKEN", "BACKPORT_GITHUB_TOKEN", "GITHUB_TOKEN"],
    required=True,
    help="Token used to open the pull request",
)
@click.option(
    "--submodule-name",
    envvar=["INPUT_SUBMODULE-NAME", "BACKPORT_SUBMODULE_NAME"],
    default=None,
    help="Submodule to fast-forward to the target branch first",
)
@click.option(
    "--pr-title-suffix",
    envvar=["INPUT_PR-TITLE-SUFFIX", "BACKPORT_PR_TITLE_SUFFIX"],
    default=None,
    help="Suffix appended to the original PR title",
)
@click.option(
    "--pr-assignee",
    envvar=["INPUT_PR-ASSIGNEE", "BACKPORT_PR_ASSIGNEE"],
    default=None,
    help="Assignee of the new PR (default: the original PR's assignee)",
)
@click.option(
    "--pr-labels",
    envvar=["INPUT_PR-LABELS", "BACKPORT_PR_LABELS"],
    default=None,
    help="Comma-separated labels added to the new PR",
)
@click.option(
    "--event-path",
    envvar="GITHUB_EVENT_PATH",
    required=True,
    type=click.Path(dir_okay=False),
    help="Path of the triggering event payload",
)
@click.option(
    "--repository",
    envvar="GITHUB_REPOSITORY",
    required=True,
    help="Repository slug (owner/name)",
)
@click.option("--api-url", envvar="GITHUB_API_URL", default=None, help="GitHub API base URL")
@click.option(
    "--repo-path",
    default=".",
    type=click.Path(file_okay=False),
    help="Path of the git checkout",
)
@click.option(
    "--output-file",
    envvar="GITHUB_OUTPUT",
    default=None,
    type=click.Path(dir_okay=False),
    help="File the pr-number output is appended to",
)
def run_command(
    target_branch: str,
    token: str,
    submodule_name: str | None,
    pr_title_suffix: str | None,
    pr_assignee: str | None,
    pr_labels: str | None,
    event_path: str,
    repository: str,
    api_url: str | None,
    repo_path: str,
    output_file: str | None,
) -> None:
    """Cherry-pick the merged pull request and open a new one.

    Designed to run from a GitHub Actions workflow triggered by a closed
    pull request; inputs are read from the INPUT_* variables.

    Examples:

        backport run --target-branch release-1.2 \\
            --event-path event.json --repository acme/widgets
    """
    options = {
        "target_branch": target_branch,
        "github_token": token,
        "submodule_name": submodule_name,
        "pr_title_suffix": pr_title_suffix,
        "pr_assignee": pr_assignee,
        "pr_labels": pr_labels,
        "repository": repository,
        "api_url": api_url,
    }

    try:
        config = _build_configuration(options)
        result = asyncio.run(_run_backport(config, Path(repo_path), Path(event_path)))
        if result.skipped:
            click.echo(
                f"Skipping cherry-pick. No changes between current branch and target branch: {config.target_branch}"
            )
            return
        click.echo(str(result.pr_number))
        if output_file:
            _write_output(Path(output_file), "pr-number", str(result.pr_number))
    except BackportError as e:
        click.echo(f"Error: {e.message}", err=True)
        log.debug("backport_error", exc_info=True)
        sys.exit(1)
    except KeyboardInterrupt:
        click.echo("\nInterrupted by user", err=True)
        sys.exit(130)
    except Exception as e:
        click.echo(f"Unexpected error: {e}", err=True)
        log.error("backport_unexpected", exc_info=True)
        sys.exit(1)


@cli.command(name="changes")
@click.option(
    "--target-branch",
    envvar=["INPUT_TARGET-BRANCH", "BACKPORT_TARGET_BRANCH"],
    required=True,
    help="Branch to compare against",
)
@click.option(
    "--submodule-name",
    envvar=["INPUT_SUBMODULE-NAME", "BACKPORT_SUBMODULE_NAME"],
    default="",
    help="Submodule whose paths are excluded",
)
@click.option("--repo-path", default=".", type=click.Path(file_okay=False), help="Path of the git checkout")
def changes_command(target_branch: str, submodule_name: str, repo_path: str) -> None:
    """List files that differ from origin/<target-branch> (no changes made)."""
    try:
        detector = ChangeDetector(GitCommandRunner(repo_path))
        paths = asyncio.run(detector.changed_paths(target_branch, submodule_name.strip().rstrip("/")))
    except BackportError as e:
        click.echo(f"Error: {e.message}", err=True)
        sys.exit(1)

    for path in paths:
        click.echo(path)


def _build_configuration(options: dict[str, str | None]) -> RunConfiguration:
    """Create the run configuration from CLI values, leaving unset ones to the environment."""
    try:
        return RunConfiguration(**{key: value for key, value in options.items() if value is not None})
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


async def _run_backport(config: RunConfiguration, repo_path: Path, event_path: Path) -> BackportResult:
    merged_pr = load_merged_pull_request(event_path)
    git = GitCommandRunner(repo_path)
    provider = GitHubRestProvider(
        token=config.github_token.get_secret_value(),
        owner=config.owner,
        repo=config.repo_name,
        base_url=config.api_url,
    )

    await provider.connect()
    try:
        return await BackportOrchestrator(config, git, provider).run(merged_pr)
    finally:
        await provider.disconnect()


def _write_output(path: Path, name: str, value: str) -> None:
    """Append ``name=value`` to the Actions output file."""
    try:
        with path.open("a", encoding="utf-8") as f:
            f.write(f"{name}={value}\n")
    except OSError as e:
        raise ConfigurationError(f"Cannot write output file: {path}") from e


if __name__ == "__main__":
    cli()
