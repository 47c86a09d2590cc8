"""Load the triggering GitHub Actions event."""

import json
from pathlib import Path
from typing import Any

import structlog

from repo_backport.exceptions import ConfigurationError
from repo_backport.models.domain import MergedPullRequestRef

log = structlog.get_logger(__name__)


def load_event_payload(event_path: str | Path) -> dict[str, Any]:
    """Read and decode the webhook payload written by the Actions runner.

    Raises:
        ConfigurationError: If the file cannot be read or is not a JSON object
    """
    path = Path(event_path)
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Cannot read event payload: {path}") from e

    try:
        payload = json.loads(content)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Event payload is not valid JSON: {path}: {e}") from e

    if not isinstance(payload, dict):
        raise ConfigurationError(f"Event payload must be a JSON object: {path}")
    return payload


def load_merged_pull_request(event_path: str | Path) -> MergedPullRequestRef:
    """Load the event file and extract the merged pull request.

    Raises:
        ConfigurationError: If the event file is unreadable
        PreconditionError: If the event is not a merged pull request
    """
    merged_pr = MergedPullRequestRef.from_event(load_event_payload(event_path))
    log.info(
        "merged_pull_request_loaded",
        number=merged_pr.number,
        head=merged_pr.head_branch_name,
        merge_commit=merged_pr.merge_commit_sha,
    )
    return merged_pr
