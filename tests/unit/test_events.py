"""Tests for repo_backport/engine/events.py."""

import json

import pytest
from conftest import MERGE_SHA

from repo_backport.engine.events import load_event_payload, load_merged_pull_request
from repo_backport.exceptions import ConfigurationError, PreconditionError


@pytest.fixture
def event_file(tmp_path, merged_event):
    path = tmp_path / "event.json"
    path.write_text(json.dumps(merged_event))
    return path


class TestLoadEventPayload:
    """Tests for load_event_payload."""

    def test_reads_json_object(self, event_file):
        payload = load_event_payload(event_file)

        assert payload["action"] == "closed"
        assert payload["pull_request"]["number"] == 42

    def test_accepts_string_path(self, event_file):
        assert load_event_payload(str(event_file))["pull_request"]["merged"] is True

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Cannot read event payload"):
            load_event_payload(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "event.json"
        path.write_text("{not json")

        with pytest.raises(ConfigurationError, match="not valid JSON"):
            load_event_payload(path)

    def test_non_object(self, tmp_path):
        path = tmp_path / "event.json"
        path.write_text("[1, 2]")

        with pytest.raises(ConfigurationError, match="must be a JSON object"):
            load_event_payload(path)


class TestLoadMergedPullRequest:
    """Tests for load_merged_pull_request."""

    def test_builds_reference(self, event_file):
        pr = load_merged_pull_request(event_file)

        assert pr.number == 42
        assert pr.head_branch_name == "feature/login-redirect"
        assert pr.merge_commit_sha == MERGE_SHA
        assert pr.labels == ("bug", "ui")
        assert pr.assignee == "reviewer"

    def test_unmerged_pull_request(self, tmp_path, merged_event):
        merged_event["pull_request"]["merged"] = False
        path = tmp_path / "event.json"
        path.write_text(json.dumps(merged_event))

        with pytest.raises(PreconditionError, match="not merged"):
            load_merged_pull_request(path)

    def test_not_a_pull_request_event(self, tmp_path):
        path = tmp_path / "event.json"
        path.write_text(json.dumps({"ref": "refs/heads/main"}))

        with pytest.raises(PreconditionError):
            load_merged_pull_request(path)
