"""Backport pipeline orchestration."""

from repo_backport.engine.events import load_event_payload, load_merged_pull_request
from repo_backport.engine.orchestrator import (
    BackportOrchestrator,
    build_pull_request_body,
    build_pull_request_title,
    merge_labels,
)

__all__ = [
    "BackportOrchestrator",
    "build_pull_request_body",
    "build_pull_request_title",
    "load_event_payload",
    "load_merged_pull_request",
    "merge_labels",
]
