"""Fast-forward a submodule to the tip of the target branch.

The submodule bump happens on a temporary branch. The bump commit is then
folded together with the merge commit it accompanies, so the commit that
gets cherry-picked carries the merge commit's message and contains both the
pull request's changes and the new submodule pointer.

Fold convention:
    HEAD is the merge commit M. After the bump commit S is made on top,
    ``reset --soft HEAD~2`` moves back to M's first parent with the changes
    of both M and S staged, and a single commit is re-created with M's
    message. The temporary branch is deleted by the orchestrator once the
    cherry-pick has captured this commit.
"""

import structlog

from repo_backport.exceptions import GitCommandError
from repo_backport.git.runner import GitCommandRunner
from repo_backport.models.domain import MergedPullRequestRef

log = structlog.get_logger(__name__)

# The merge commit plus the bump commit.
_FOLD_DEPTH = 2


class SubmoduleAdvancer:
    """Advances one submodule pointer inside an isolated temporary branch."""

    def __init__(self, git: GitCommandRunner) -> None:
        self.git = git

    async def advance(
        self,
        temporary_branch_name: str,
        submodule_name: str,
        target_branch: str,
        merged_pr: MergedPullRequestRef,
    ) -> bool:
        """Bump ``submodule_name`` to ``origin/<target_branch>`` and fold it into HEAD.

        Args:
            temporary_branch_name: Branch created to hold the bump
            submodule_name: Path of the submodule relative to the checkout
            target_branch: Branch the submodule is switched to and pulled
            merged_pr: The merged pull request; its merge commit message is
                reused for the folded commit

        Returns:
            True if the submodule pointer moved and was folded in, False if
            the submodule was already current (nothing committed)

        Raises:
            MissingMergeCommitError: If the PR has no merge commit SHA. Raised
                before anything is mutated.
            GitCommandError: If any git step fails
        """
        merge_commit_sha = merged_pr.require_merge_commit()

        log.info(
            "submodule_advance_started",
            submodule=submodule_name,
            target_branch=target_branch,
            temporary_branch=temporary_branch_name,
        )

        await self.git.run_checked("checkout", "-b", temporary_branch_name)
        await self.git.run_checked("checkout", target_branch, cwd=submodule_name)
        await self.git.run_checked("pull", "origin", target_branch, cwd=submodule_name)
        await self.git.run_checked("add", submodule_name)

        if not await self._has_staged_changes(submodule_name):
            log.info("submodule_already_current", submodule=submodule_name, target_branch=target_branch)
            return False

        await self.git.run_checked(
            "commit",
            "-m",
            f"Update submodule {submodule_name} to latest from {target_branch}",
        )

        merge_message = (await self.git.run_checked("log", "--format=%B", "-n", "1", merge_commit_sha)).stdout
        if not merge_message:
            merge_message = f"{merged_pr.title} (#{merged_pr.number})"

        await self.git.run_checked("reset", "--soft", f"HEAD~{_FOLD_DEPTH}")
        await self.git.run_checked("commit", "-m", merge_message)

        log.info("submodule_advanced", submodule=submodule_name, target_branch=target_branch)
        return True

    async def _has_staged_changes(self, submodule_name: str) -> bool:
        # --quiet exits 1 when there is a difference, 0 when there is none.
        result = await self.git.run("diff", "--cached", "--quiet", "--", submodule_name)
        if result.exit_code not in (0, 1):
            raise GitCommandError.from_result(
                ["diff", "--cached", "--quiet", "--", submodule_name],
                result.exit_code,
                result.stderr,
            )
        return result.exit_code == 1
