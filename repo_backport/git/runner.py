"""Non-throwing git command execution.

Every git invocation in repo-backport goes through :class:`GitCommandRunner`.
The runner never raises on a non-zero exit: callers inspect
``CommandResult.exit_code`` (or use :meth:`GitCommandRunner.run_checked`
when any failure is unexpected). A non-zero exit is logged as a warning by
``run``; only ``run_checked`` logs it as an error.

Example:
    >>> git = GitCommandRunner("/path/to/checkout")
    >>> result = await git.run("rev-parse", "HEAD")
    >>> if result.ok:
    ...     print(result.stdout)

Thread Safety:
    Each call spawns an independent subprocess, but git itself is not safe
    to drive concurrently against one checkout. The backport pipeline awaits
    every command before issuing the next.
"""

import asyncio
import os
import shutil
from pathlib import Path

import structlog

from repo_backport.exceptions import GitCommandError, GitNotFoundError
from repo_backport.models.domain import CommandResult

log = structlog.get_logger(__name__)

_CHUNK_SIZE = 64 * 1024

# Pinned so conflict markers are not translated and a missing credential
# fails instead of waiting for a prompt.
_GIT_ENV_OVERRIDES = {
    "LC_ALL": "C",
    "GIT_TERMINAL_PROMPT": "0",
}


async def _collect(stream: asyncio.StreamReader | None, chunks: list[bytes]) -> None:
    """Append everything read from ``stream`` to ``chunks`` until EOF."""
    if stream is None:
        return
    while True:
        chunk = await stream.read(_CHUNK_SIZE)
        if not chunk:
            return
        chunks.append(chunk)


class GitCommandRunner:
    """Runs git commands inside a repository checkout.

    The git executable is resolved when the runner is created, so a missing
    git installation fails before any command is attempted.

    Attributes:
        repo_path: Working directory for commands (the top-level checkout).
        git_path: Absolute path of the resolved git executable.
        timeout: Optional per-command timeout in seconds. None waits forever.
    """

    def __init__(
        self,
        repo_path: str | Path = ".",
        executable: str = "git",
        timeout: float | None = None,
    ) -> None:
        """Resolve the git executable.

        Args:
            repo_path: Path of the checkout commands run in
            executable: Name or path of the git binary
            timeout: Seconds before a command is killed (None: no limit)

        Raises:
            GitNotFoundError: If ``executable`` cannot be found on PATH
        """
        git_path = shutil.which(executable)
        if git_path is None:
            raise GitNotFoundError(f"Unable to locate executable file: {executable}")

        self.git_path = git_path
        self.repo_path = Path(repo_path)
        self.timeout = timeout

    async def run(self, *args: str, cwd: str | Path | None = None) -> CommandResult:
        """Run ``git <args>`` and capture its output.

        Never raises on a non-zero exit code.

        Args:
            *args: Git arguments, e.g. ``"checkout", "-b", "topic"``
            cwd: Directory to run in, relative to ``repo_path`` (default:
                ``repo_path`` itself). Used to operate inside a submodule.

        Returns:
            CommandResult with trimmed stdout/stderr and the exit code

        Raises:
            asyncio.TimeoutError: If a timeout is configured and exceeded
        """
        workdir = self.repo_path if cwd is None else self.repo_path / cwd
        command = list(args)

        process = await asyncio.create_subprocess_exec(
            self.git_path,
            *command,
            cwd=workdir,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            env={**os.environ, **_GIT_ENV_OVERRIDES},
        )

        stdout_chunks: list[bytes] = []
        stderr_chunks: list[bytes] = []
        try:
            await asyncio.wait_for(
                asyncio.gather(
                    _collect(process.stdout, stdout_chunks),
                    _collect(process.stderr, stderr_chunks),
                    process.wait(),
                ),
                timeout=self.timeout,
            )
        except TimeoutError:
            process.kill()
            await process.wait()
            log.error("git_command_timeout", args=command, timeout=self.timeout)
            raise

        result = CommandResult(
            stdout=b"".join(stdout_chunks).decode("utf-8", errors="replace").strip(),
            stderr=b"".join(stderr_chunks).decode("utf-8", errors="replace").strip(),
            exit_code=process.returncode or 0,
        )

        if not result.ok:
            log.warning(
                "git_command_nonzero_exit",
                args=command,
                cwd=str(workdir),
                exit_code=result.exit_code,
                stderr=result.stderr,
            )
        log.info(
            "git_command",
            args=command,
            cwd=str(workdir),
            exit_code=result.exit_code,
            output=result.stdout,
        )
        return result

    async def run_checked(self, *args: str, cwd: str | Path | None = None) -> CommandResult:
        """Run ``git <args>`` and raise if it exits non-zero.

        Raises:
            GitCommandError: If the command exits with a non-zero code
        """
        result = await self.run(*args, cwd=cwd)
        if not result.ok:
            log.error("git_command_failed", args=list(args), exit_code=result.exit_code, stderr=result.stderr)
            raise GitCommandError.from_result(list(args), result.exit_code, result.stderr)
        return result
