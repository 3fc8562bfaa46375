"""Tests for the feedback log."""

import json

import pytest

from sitebridge.errors import ValidationError

from .lib import FeedbackLog


class TestFeedbackLog:
    """Tests for FeedbackLog."""

    @pytest.mark.unit
    def test_report_appends_json_line(self, feedback_path):
        """Each report is one JSON object per line."""
        log = FeedbackLog(feedback_path)
        log.report("No way to rename a page", context="page tool", workaround="eval")
        log.report("Second")
        lines = feedback_path.read_text(encoding="utf-8").splitlines()
        assert len(lines) == 2
        first = json.loads(lines[0])
        assert first["description"] == "No way to rename a page"
        assert first["context"] == "page tool"
        assert first["workaround"] == "eval"
        assert first["timestamp"]

    @pytest.mark.unit
    def test_creates_parent_directory(self, tmp_path):
        log = FeedbackLog(tmp_path / "nested" / "dir" / "feedback.jsonl")
        log.report("hello")
        assert log.path.exists()

    @pytest.mark.unit
    def test_list_returns_most_recent(self, feedback_path):
        """list(limit) keeps the newest entries in order."""
        log = FeedbackLog(feedback_path)
        for i in range(5):
            log.report(f"entry {i}")
        assert [e.description for e in log.list(limit=2)] == ["entry 3", "entry 4"]

    @pytest.mark.unit
    def test_list_skips_invalid_lines(self, feedback_path):
        feedback_path.write_text('not json\n{"description": "ok"}\n', encoding="utf-8")
        entries = FeedbackLog(feedback_path).list()
        assert [e.description for e in entries] == ["ok"]

    @pytest.mark.unit
    def test_list_missing_file(self, feedback_path):
        assert FeedbackLog(feedback_path).list() == []

    @pytest.mark.unit
    def test_empty_description(self, feedback_path):
        with pytest.raises(ValidationError):
            FeedbackLog(feedback_path).report("   ")

    @pytest.mark.unit
    def test_env_path(self, tmp_path, monkeypatch):
        """FEEDBACK_LOG_PATH is used when no path is given."""
        target = tmp_path / "env.jsonl"
        monkeypatch.setenv("FEEDBACK_LOG_PATH", str(target))
        assert FeedbackLog().path == target
