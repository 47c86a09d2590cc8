"""
Backport orchestrator.

Runs the pipeline for one merged pull request. Stages execute strictly in
order, each awaited before the next begins:

    detect_changes -> configure_identity -> advance_submodule (optional)
        -> cherry_pick -> cleanup (optional) -> open_pull_request

When the target branch already contains every change, the run stops after
``detect_changes`` without touching the repository or the remote service.

The submodule stage must finish before the cherry-pick stage starts: the
cherry-pick captures HEAD as its source, and HEAD is the folded submodule
commit only once the advance is done. ``completed_stages`` records the
order actually executed.

Example:
    >>> orchestrator = BackportOrchestrator(config, git, GitHubRestProvider(...))
    >>> result = await orchestrator.run(merged_pr)
    >>> result.pr_number
    128
"""

from collections.abc import Iterable

import structlog

from repo_backport.config.settings import RunConfiguration
from repo_backport.git.changes import ChangeDetector
from repo_backport.git.cherry_pick import CherryPickCoordinator
from repo_backport.git.runner import GitCommandRunner
from repo_backport.git.submodule import SubmoduleAdvancer
from repo_backport.models.domain import (
    BackportResult,
    BackportStage,
    BranchPlan,
    MergedPullRequestRef,
)
from repo_backport.providers.base import PullRequestService

log = structlog.get_logger(__name__)


def build_pull_request_title(merged_pr: MergedPullRequestRef, suffix: str) -> str:
    """Original title followed by the configured suffix."""
    suffix = suffix.strip()
    return f"{merged_pr.title} {suffix}" if suffix else merged_pr.title


def build_pull_request_body(merged_pr: MergedPullRequestRef) -> str:
    """Describe where the backport came from, quoting the original description."""
    lines = [
        "This PR was automatically cherry-picked based on the following PR:",
        f" - #{merged_pr.number}",
    ]
    if merged_pr.body and merged_pr.body.strip():
        lines += ["", "Original PR description:", "", "-----", merged_pr.body.strip()]
    return "\n".join(lines) + "\n"


def merge_labels(inherited: Iterable[str], extra: Iterable[str]) -> list[str]:
    """Inherited labels first, then extra ones, without duplicates."""
    labels: list[str] = []
    for label in (*inherited, *extra):
        if label and label not in labels:
            labels.append(label)
    return labels


class BackportOrchestrator:
    """Sequences change detection, submodule advance, cherry-pick and PR creation.

    Attributes:
        config: Run configuration
        git: Runner bound to the checkout
        pull_requests: Remote pull-request service
        detector: Computes changed paths against the target branch
        advancer: Bumps the submodule (used only when one is configured)
        coordinator: Cherry-picks and pushes the new branch
        completed_stages: Stages finished so far, in execution order
    """

    def __init__(
        self,
        config: RunConfiguration,
        git: GitCommandRunner,
        pull_requests: PullRequestService,
        detector: ChangeDetector | None = None,
        advancer: SubmoduleAdvancer | None = None,
        coordinator: CherryPickCoordinator | None = None,
    ) -> None:
        self.config = config
        self.git = git
        self.pull_requests = pull_requests
        self.detector = detector or ChangeDetector(git)
        self.advancer = advancer or SubmoduleAdvancer(git)
        self.coordinator = coordinator or CherryPickCoordinator(git)
        self.completed_stages: list[BackportStage] = []

    def _complete(self, stage: BackportStage) -> None:
        self.completed_stages.append(stage)
        log.info("stage_completed", stage=stage.value)

    async def run(self, merged_pr: MergedPullRequestRef) -> BackportResult:
        """Backport ``merged_pr`` onto the configured target branch.

        Args:
            merged_pr: The merged pull request from the triggering event

        Returns:
            BackportResult; ``skipped`` is True when there was nothing to do

        Raises:
            MissingMergeCommitError: If changes exist but the PR has no merge
                commit. Raised before the repository is mutated.
            GitCommandError: If a git step fails (PushError for the push)
            ExternalServiceError: If the pull-request service fails
        """
        target_branch = self.config.target_branch
        submodule_name = self.config.submodule_name or None
        plan = BranchPlan.for_pull_request(merged_pr)

        log.info(
            "backport_started",
            pr=merged_pr.number,
            target_branch=target_branch,
            new_branch=plan.new_branch_name,
            submodule=submodule_name,
        )

        changed_paths = await self.detector.changed_paths(target_branch, submodule_name)
        self._complete(BackportStage.DETECT_CHANGES)
        result = BackportResult(changed_paths=changed_paths)

        if not changed_paths:
            log.info(
                "cherry_pick_skipped",
                reason="No changes between current branch and target branch",
                target_branch=target_branch,
            )
            return result

        merged_pr.require_merge_commit()

        await self.git.run_checked("config", "user.name", self.config.commit_author_name)
        await self.git.run_checked("config", "user.email", self.config.commit_author_email)
        self._complete(BackportStage.CONFIGURE_IDENTITY)

        if self.config.has_submodule:
            await self.advancer.advance(
                plan.temporary_branch_name,
                self.config.submodule_name,
                target_branch,
                merged_pr,
            )
            self._complete(BackportStage.ADVANCE_SUBMODULE)

        result.outcome = await self.coordinator.cherry_pick(
            merged_pr,
            target_branch,
            plan.new_branch_name,
            submodule_name,
        )
        result.branch = plan.new_branch_name
        self._complete(BackportStage.CHERRY_PICK)

        if self.config.has_submodule:
            await self.git.run_checked("branch", "-D", plan.temporary_branch_name)
            self._complete(BackportStage.CLEANUP)

        result.pr_number = await self.pull_requests.create_pull_request(
            title=build_pull_request_title(merged_pr, self.config.pr_title_suffix),
            head=plan.new_branch_name,
            base=target_branch,
            body=build_pull_request_body(merged_pr),
        )
        result.labels = merge_labels(merged_pr.labels, self.config.extra_labels)
        result.assignee = self.config.pr_assignee or merged_pr.assignee
        await self.pull_requests.add_labels(result.pr_number, result.labels)
        await self.pull_requests.add_assignee(result.pr_number, result.assignee)
        self._complete(BackportStage.OPEN_PULL_REQUEST)

        log.info(
            "backport_completed",
            pr=merged_pr.number,
            new_pr=result.pr_number,
            outcome=result.outcome.value,
        )
        return result
