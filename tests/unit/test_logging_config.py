"""Tests for repo_backport/utils/logging_config.py."""

import json

import structlog

from repo_backport.utils.logging_config import configure_logging


class TestConfigureLogging:
    def test_json_to_stderr(self, capsys):
        configure_logging("INFO")

        structlog.get_logger("test").info("branch_pushed", branch="topic-cherry-pick")

        captured = capsys.readouterr()
        assert captured.out == ""
        entry = json.loads(captured.err.strip().splitlines()[-1])
        assert entry["event"] == "branch_pushed"
        assert entry["branch"] == "topic-cherry-pick"
        assert entry["level"] == "info"
        assert "timestamp" in entry

    def test_level_filtering(self, capsys):
        configure_logging("warning")
        log = structlog.get_logger("test")

        log.info("hidden")
        log.warning("shown")

        err = capsys.readouterr().err
        assert "hidden" not in err
        assert "shown" in err

    def test_console_format(self, capsys):
        configure_logging("DEBUG", "console")

        structlog.get_logger("test").debug("cherry_pick_state", state="clean")

        err = capsys.readouterr().err
        assert "cherry_pick_state" in err
        assert not err.lstrip().startswith("{")
