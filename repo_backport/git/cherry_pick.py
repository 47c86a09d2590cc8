"""
Cherry-pick the prepared commit onto a new branch off the target branch.

The coordinator walks a fixed sequence of states:

    Start -> AuthorResolved -> BranchesPrepared -> CherryPicked
          -> {Conflicted | Clean} -> Committed -> Pushed | PushFailed

Conflicts are not errors. A conflicted cherry-pick is committed as-is, with
the conflict markers, so a human can resolve it on the pull request. A clean
cherry-pick is amended to carry the original author.

Conflict detection looks for output lines starting with
:data:`CONFLICT_MARKER`. git runs with ``LC_ALL=C`` so the marker is not
translated; the exact string is pinned by a unit test.
"""

import structlog

from repo_backport.exceptions import CherryPickError, PushError
from repo_backport.git.runner import GitCommandRunner
from repo_backport.models.domain import (
    CherryPickOutcome,
    CherryPickState,
    MergedPullRequestRef,
)

log = structlog.get_logger(__name__)

CONFLICT_MARKER = "CONFLICT ("
"""Start of the line git prints for every conflicted path, e.g. ``CONFLICT (content): Merge conflict in README.md``."""

CONFLICT_COMMIT_MESSAGE = "Commit with unresolved merge conflicts"


def classify_cherry_pick_output(output: str) -> CherryPickOutcome:
    """Classify a cherry-pick by its captured text alone.

    Only lines that begin with :data:`CONFLICT_MARKER` count. A clean pick
    echoes the commit subject, which may contain the word itself.
    """
    if any(line.lstrip().startswith(CONFLICT_MARKER) for line in output.splitlines()):
        return CherryPickOutcome.CONFLICTED
    return CherryPickOutcome.CLEAN


def conflict_commit_message(submodule_name: str | None = None) -> str:
    """Message for a commit that carries unresolved conflict markers."""
    if submodule_name:
        return f"{CONFLICT_COMMIT_MESSAGE} outside of submodule '{submodule_name}'"
    return CONFLICT_COMMIT_MESSAGE


class CherryPickCoordinator:
    """Creates the backport branch, cherry-picks, commits and pushes.

    Attributes:
        git: Runner bound to the checkout
        state: Current position in the coordinator state machine
        outcome: Classification of the last cherry-pick, once known
    """

    def __init__(self, git: GitCommandRunner, remote: str = "origin") -> None:
        self.git = git
        self.remote = remote
        self.state = CherryPickState.START
        self.outcome: CherryPickOutcome | None = None

    def _transition(self, state: CherryPickState, **context: object) -> None:
        log.debug("cherry_pick_state", previous=self.state.value, state=state.value, **context)
        self.state = state

    async def cherry_pick(
        self,
        merged_pr: MergedPullRequestRef,
        target_branch: str,
        new_branch_name: str,
        submodule_name: str | None = None,
    ) -> CherryPickOutcome:
        """Cherry-pick HEAD onto ``new_branch_name`` and push it.

        HEAD is captured as the cherry-pick source before any checkout, so
        whatever commit the previous pipeline stage left there (the folded
        submodule commit, or the merge commit itself) is what gets picked.

        Args:
            merged_pr: The merged pull request (its merge commit supplies the
                author identity)
            target_branch: Branch the new branch is created from
            new_branch_name: Branch to create, commit on and push
            submodule_name: Submodule advanced before this step, if any; only
                changes the conflict commit message

        Returns:
            Whether the cherry-pick was clean or conflicted

        Raises:
            MissingMergeCommitError: If the PR has no merge commit SHA. Raised
                before any branch is created.
            CherryPickError: If cherry-pick fails without reporting conflicts
            PushError: If pushing ``new_branch_name`` fails. The local branch
                is left in place.
            GitCommandError: If any other git step fails
        """
        merge_commit_sha = merged_pr.require_merge_commit()

        author = await self.resolve_author(merge_commit_sha)
        self._transition(CherryPickState.AUTHOR_RESOLVED, author=author)

        source_sha = (await self.git.run_checked("rev-parse", "HEAD")).stdout
        await self.git.run_checked("checkout", target_branch)
        await self.git.run_checked("checkout", "-b", new_branch_name)
        self._transition(CherryPickState.BRANCHES_PREPARED, source=source_sha, branch=new_branch_name)

        result = await self.git.run("cherry-pick", source_sha)
        self._transition(CherryPickState.CHERRY_PICKED, exit_code=result.exit_code)

        self.outcome = classify_cherry_pick_output(result.output)
        if self.outcome is CherryPickOutcome.CONFLICTED:
            self._transition(CherryPickState.CONFLICTED)
            log.warning("cherry_pick_conflicted", source=source_sha, branch=new_branch_name)
            await self.git.run_checked("add", ".")
            await self.git.run_checked(
                "commit",
                "--author",
                author,
                "-am",
                conflict_commit_message(submodule_name),
            )
        else:
            if not result.ok:
                raise CherryPickError.from_result(["cherry-pick", source_sha], result.exit_code, result.stderr)
            self._transition(CherryPickState.CLEAN)
            await self.git.run_checked("commit", "--author", author, "--amend", "--no-edit")
        self._transition(CherryPickState.COMMITTED, outcome=self.outcome.value)

        await self.push(new_branch_name)
        return self.outcome

    async def resolve_author(self, commit_sha: str) -> str:
        """Return ``Name <email>`` of the commit's author."""
        result = await self.git.run_checked("log", "-1", "--pretty=format:%an <%ae>", commit_sha)
        return result.stdout

    async def push(self, branch: str) -> None:
        """Push ``branch`` to the remote.

        Raises:
            PushError: If the push exits non-zero
        """
        result = await self.git.run("push", self.remote, branch)
        if not result.ok:
            self._transition(CherryPickState.PUSH_FAILED, exit_code=result.exit_code)
            raise PushError(branch, result.exit_code, result.stderr)
        self._transition(CherryPickState.PUSHED)
        log.info("branch_pushed", branch=branch, remote=self.remote)
