"""Tests for the command line entry point."""

import json
import subprocess
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[2]


def _run(*args: str) -> subprocess.CompletedProcess:
    return subprocess.run(
        [sys.executable, ".", *args],
        capture_output=True,
        text=True,
        cwd=ROOT,
        timeout=60,
    )


@pytest.mark.integration
class TestCallCommand:
    """Tests for `python . call`."""

    def test_add_component(self):
        """call prints the success envelope as JSON."""
        result = _run("call", "component", "add", "--params", '{"html": "<h1>Hi</h1>"}')

        assert result.returncode == 0
        envelope = json.loads(result.stdout)
        assert envelope["success"] is True
        assert envelope["data"]["selection"]["website_id"] == "demo"

    def test_failure_exit_code(self):
        result = _run("call", "component", "explode")

        assert result.returncode == 2
        assert json.loads(result.stdout)["success"] is False

    def test_invalid_params(self):
        result = _run("call", "component", "add", "--params", "not json")

        assert result.returncode == 1


@pytest.mark.integration
class TestEnvCommand:
    """Tests for `python . env`."""

    def test_lists_variables(self):
        result = _run("env")

        assert result.returncode == 0
        assert "SITE_API_URL" in result.stdout
        assert "MCP_PORT" in result.stdout

    def test_unknown_category(self):
        result = _run("env", "--category", "nope")

        assert result.returncode == 1
