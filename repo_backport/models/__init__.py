"""Domain models for repo-backport."""

from repo_backport.models.domain import (
    NEW_BRANCH_SUFFIX,
    TEMPORARY_BRANCH_NAME,
    BackportResult,
    BackportStage,
    BranchPlan,
    CherryPickOutcome,
    CherryPickState,
    CommandResult,
    MergedPullRequestRef,
)

__all__ = [
    "NEW_BRANCH_SUFFIX",
    "TEMPORARY_BRANCH_NAME",
    "BackportResult",
    "BackportStage",
    "BranchPlan",
    "CherryPickOutcome",
    "CherryPickState",
    "CommandResult",
    "MergedPullRequestRef",
]
