"""
Domain models for the backport workflow.

All entities live for a single run: they are built from the triggering event
and the run configuration, passed through the pipeline, and discarded. The
git repository itself is the only durable store.

Example:
    Building the branch plan for a merged pull request::

        pr = MergedPullRequestRef.from_event(payload)
        plan = BranchPlan.for_pull_request(pr)
        plan.new_branch_name  # "feature/login-cherry-pick"
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from repo_backport.exceptions import MissingMergeCommitError, PreconditionError

NEW_BRANCH_SUFFIX = "-cherry-pick"
TEMPORARY_BRANCH_NAME = "temp-branch-for-cherry-pick"


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one git invocation.

    ``stdout`` and ``stderr`` are trimmed before the result is handed out.
    A non-zero ``exit_code`` is a command failure, but whether it is fatal
    is up to the caller.
    """

    stdout: str
    stderr: str
    exit_code: int

    @property
    def ok(self) -> bool:
        """True when the command exited with status 0."""
        return self.exit_code == 0

    @property
    def output(self) -> str:
        """Standard output and standard error joined, for text inspection."""
        return "\n".join(part for part in (self.stdout, self.stderr) if part)


class CherryPickOutcome(str, Enum):
    """Classification of a cherry-pick attempt."""

    CLEAN = "clean"
    """Cherry-pick applied without conflicts."""

    CONFLICTED = "conflicted"
    """Conflict markers were left in the working tree."""


class CherryPickState(str, Enum):
    """Progress of the cherry-pick coordinator.

    Start -> AuthorResolved -> BranchesPrepared -> CherryPicked
    -> {Conflicted | Clean} -> Committed -> Pushed | PushFailed
    """

    START = "start"
    AUTHOR_RESOLVED = "author_resolved"
    BRANCHES_PREPARED = "branches_prepared"
    CHERRY_PICKED = "cherry_picked"
    CONFLICTED = "conflicted"
    CLEAN = "clean"
    COMMITTED = "committed"
    PUSHED = "pushed"
    PUSH_FAILED = "push_failed"

    @property
    def is_terminal(self) -> bool:
        return self in (CherryPickState.PUSHED, CherryPickState.PUSH_FAILED)


class BackportStage(str, Enum):
    """Ordered pipeline stages run by the orchestrator."""

    DETECT_CHANGES = "detect_changes"
    CONFIGURE_IDENTITY = "configure_identity"
    ADVANCE_SUBMODULE = "advance_submodule"
    CHERRY_PICK = "cherry_pick"
    CLEANUP = "cleanup"
    OPEN_PULL_REQUEST = "open_pull_request"


@dataclass(frozen=True)
class MergedPullRequestRef:
    """The merged pull request that triggered the run.

    Read-only; built from the ``pull_request`` object of the event payload.
    ``merge_commit_sha`` may be missing in the payload, in which case any
    attempt to cherry-pick fails with :class:`MissingMergeCommitError`.
    """

    number: int
    title: str
    head_branch_name: str
    author: str
    body: str | None = None
    merge_commit_sha: str | None = None
    assignee: str | None = None
    labels: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_event(cls, payload: dict[str, Any]) -> "MergedPullRequestRef":
        """Parse the triggering event payload.

        Args:
            payload: Decoded webhook event (the contents of ``GITHUB_EVENT_PATH``)

        Returns:
            The merged pull request reference

        Raises:
            PreconditionError: If the event carries no pull request, or the
                pull request was closed without being merged
        """
        pr = payload.get("pull_request")
        if not pr:
            raise PreconditionError(
                "Action not running in a merged-pr event! Make sure to run only on PR events"
            )

        number = pr.get("number")
        if pr.get("merged") is not True:
            raise PreconditionError(f"Can't cherry-pick PR '{number}', as it was not merged.")

        assignee = pr.get("assignee") or {}
        user = pr.get("user") or {}

        return cls(
            number=int(number),
            title=pr.get("title") or "",
            body=pr.get("body"),
            head_branch_name=(pr.get("head") or {}).get("ref", ""),
            merge_commit_sha=pr.get("merge_commit_sha") or None,
            author=user.get("login", ""),
            assignee=assignee.get("login") or None,
            labels=tuple(label["name"] for label in pr.get("labels") or [] if label.get("name")),
        )

    def require_merge_commit(self) -> str:
        """Return the merge commit SHA or raise if the payload had none."""
        if not self.merge_commit_sha:
            raise MissingMergeCommitError(self.number)
        return self.merge_commit_sha


@dataclass(frozen=True)
class BranchPlan:
    """Branch names used by one run. Computed once, never persisted."""

    new_branch_name: str
    temporary_branch_name: str = TEMPORARY_BRANCH_NAME

    @classmethod
    def for_pull_request(cls, pr: MergedPullRequestRef) -> "BranchPlan":
        return cls(new_branch_name=f"{pr.head_branch_name}{NEW_BRANCH_SUFFIX}")


@dataclass
class BackportResult:
    """What a run produced.

    ``pr_number`` is None when the run was skipped because the target branch
    already had every change.
    """

    changed_paths: list[str]
    branch: str | None = None
    outcome: CherryPickOutcome | None = None
    pr_number: int | None = None
    labels: list[str] = field(default_factory=list)
    assignee: str | None = None

    @property
    def skipped(self) -> bool:
        return self.pr_number is None
