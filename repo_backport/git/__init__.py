"""Git operations for the backport pipeline.

Example:
    >>> from repo_backport.git import ChangeDetector, GitCommandRunner
    >>> git = GitCommandRunner(".")
    >>> paths = await ChangeDetector(git).changed_paths("release-1.2")
"""

from repo_backport.git.changes import ChangeDetector, filter_submodule_paths, split_diff_output
from repo_backport.git.cherry_pick import (
    CONFLICT_MARKER,
    CherryPickCoordinator,
    classify_cherry_pick_output,
    conflict_commit_message,
)
from repo_backport.git.runner import GitCommandRunner
from repo_backport.git.submodule import SubmoduleAdvancer

__all__ = [
    "CONFLICT_MARKER",
    "ChangeDetector",
    "CherryPickCoordinator",
    "GitCommandRunner",
    "SubmoduleAdvancer",
    "classify_cherry_pick_output",
    "conflict_commit_message",
    "filter_submodule_paths",
    "split_diff_output",
]
