"""Detect which files differ between the checkout and the target branch.

The diff is taken against ``origin/<target_branch>`` with ``--name-only``.
Paths inside the configured submodule are dropped from the result: those
are brought forward by the submodule advance, not by the cherry-pick.

No git configuration is touched; the submodule exclusion is a pure filter
over the diff output.
"""

import structlog

from repo_backport.git.runner import GitCommandRunner

log = structlog.get_logger(__name__)


def split_diff_output(diff_output: str) -> list[str]:
    """Split ``git diff --name-only`` output into paths.

    An empty diff yields an empty list, never ``[""]``.
    """
    return [line for line in diff_output.split("\n") if line.strip()]


def filter_submodule_paths(paths: list[str], submodule_name: str | None) -> list[str]:
    """Drop every path located under ``<submodule_name>/``.

    Order is preserved and the filter is idempotent. A missing or empty
    submodule name returns the paths unchanged.

    Example:
        >>> filter_submodule_paths(["lib/x.txt", "README.md"], "lib")
        ['README.md']
    """
    if not submodule_name:
        return list(paths)
    prefix = f"{submodule_name.rstrip('/')}/"
    return [path for path in paths if not path.startswith(prefix)]


class ChangeDetector:
    """Computes the changed file set between HEAD and the remote target branch."""

    def __init__(self, git: GitCommandRunner, remote: str = "origin") -> None:
        self.git = git
        self.remote = remote

    async def changed_paths(self, target_branch: str, submodule_name: str | None = None) -> list[str]:
        """List paths that differ from ``<remote>/<target_branch>``.

        Args:
            target_branch: Branch name on the remote to compare against
            submodule_name: Submodule path whose contents are excluded

        Returns:
            Ordered list of changed paths (empty when there is nothing to
            backport)

        Raises:
            GitCommandError: If ``git diff`` fails, e.g. the remote branch
                does not exist
        """
        result = await self.git.run_checked("diff", f"{self.remote}/{target_branch}", "--name-only")
        paths = filter_submodule_paths(split_diff_output(result.stdout), submodule_name)

        log.info(
            "changed_paths_detected",
            target_branch=target_branch,
            submodule=submodule_name or None,
            count=len(paths),
        )
        return paths
