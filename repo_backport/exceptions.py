"""Custom exception hierarchy for repo-backport.

Exception Hierarchy:
    BackportError (base)
    ├── ConfigurationError
    ├── PreconditionError
    │   └── MissingMergeCommitError
    ├── GitOperationError
    │   ├── GitNotFoundError
    │   └── GitCommandError
    │       ├── CherryPickError
    │       └── PushError
    └── ExternalServiceError

Precondition failures are raised before the repository is touched. Git
failures may be raised after local mutations; nothing is rolled back, the
checkout is left as-is for a human to inspect.

Example Usage:
    >>> from repo_backport.exceptions import ConfigurationError
    >>> try:
    ...     payload = json.loads(path.read_text())
    ... except OSError as e:
    ...     raise ConfigurationError(f"Cannot read event payload: {path}") from e
"""


class BackportError(Exception):
    """Base exception for all repo-backport errors.

    Attributes:
        message: Human-readable error description
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigurationError(BackportError):
    """Run inputs are missing or invalid.

    Examples:
        - Empty target branch
        - Repository slug not in ``owner/name`` form
        - Event payload file missing or not valid JSON
    """

    pass


class PreconditionError(BackportError):
    """The triggering event cannot be backported.

    Raised before any repository mutation, e.g. when the event is not a
    pull-request event or the pull request was closed without merging.
    """

    pass


class MissingMergeCommitError(PreconditionError):
    """The merged pull request carries no merge commit SHA."""

    def __init__(self, pr_number: int) -> None:
        self.pr_number = pr_number
        super().__init__(f"Pull request #{pr_number} has no merge commit SHA")


class GitOperationError(BackportError):
    """Base class for git failures."""

    pass


class GitNotFoundError(GitOperationError):
    """The git executable could not be located on PATH."""

    pass


class GitCommandError(GitOperationError):
    """A git command exited with an unexpected non-zero code.

    Attributes:
        command: Git arguments that were executed (without the executable)
        exit_code: Process exit code
        stderr: Trimmed standard error text
    """

    def __init__(
        self,
        message: str,
        command: list[str] | None = None,
        exit_code: int | None = None,
        stderr: str = "",
    ) -> None:
        self.command = command or []
        self.exit_code = exit_code
        self.stderr = stderr
        super().__init__(message)

    @classmethod
    def from_result(cls, command: list[str], exit_code: int, stderr: str) -> "GitCommandError":
        """Build an error describing a failed ``git <command>`` invocation."""
        rendered = " ".join(command)
        message = f"git {rendered} failed with exit code {exit_code}"
        if stderr:
            message = f"{message}: {stderr}"
        return cls(message, command=command, exit_code=exit_code, stderr=stderr)


class CherryPickError(GitCommandError):
    """Cherry-pick failed for a reason other than merge conflicts."""

    pass


class PushError(GitCommandError):
    """Pushing the new branch to the remote failed.

    Local state is already mutated when this is raised: the branch exists
    locally with its commit and can be pushed by hand.

    Attributes:
        branch: Name of the branch that failed to push
    """

    def __init__(self, branch: str, exit_code: int, stderr: str) -> None:
        self.branch = branch
        super().__init__(
            f"Failure to push changes to {branch}. Exit code: {exit_code}; Message: {stderr}",
            command=["push", "origin", branch],
            exit_code=exit_code,
            stderr=stderr,
        )


class ExternalServiceError(BackportError):
    """Pull-request service communication errors.

    Attributes:
        status_code: HTTP status code reported by the API (if any)
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code

        full_message = message
        if status_code:
            full_message = f"{message} (HTTP {status_code})"

        super().__init__(full_message)
