"""Tests for configuration management."""

from pathlib import Path

import pytest

from .lib import (
    EnvConfig,
    EnvVar,
    get_environment,
    get_environment_info,
    get_feedback_log_path,
    get_site_url,
    get_tree_limits,
    list_environment_variables,
)

# =============================================================================
# Tests for get_environment (main interface)
# =============================================================================


class TestGetEnvironment:
    """Tests for the unified get_environment interface."""

    @pytest.mark.unit
    def test_returns_default_when_not_set(self, monkeypatch):
        """Returns default value when env var is not set."""
        monkeypatch.delenv("MCP_PORT", raising=False)
        result = get_environment(EnvVar.MCP_PORT)
        assert result == 6807

    @pytest.mark.unit
    def test_override_takes_priority(self, monkeypatch):
        """Override parameter takes highest priority."""
        monkeypatch.setenv("MCP_PORT", "9999")
        result = get_environment(EnvVar.MCP_PORT, override=5000)
        assert result == 5000

    @pytest.mark.unit
    def test_env_var_overrides_default(self, monkeypatch):
        """Environment variable overrides default value."""
        monkeypatch.setenv("MCP_PORT", "12345")
        result = get_environment(EnvVar.MCP_PORT)
        assert result == 12345

    @pytest.mark.unit
    def test_float_type_conversion(self, monkeypatch):
        """Float type conversion from string."""
        monkeypatch.setenv("EDITOR_READY_TIMEOUT", "2.5")
        result = get_environment(EnvVar.EDITOR_READY_TIMEOUT)
        assert result == 2.5
        assert isinstance(result, float)

    @pytest.mark.unit
    def test_invalid_float_returns_default(self, monkeypatch):
        """Invalid float value returns default."""
        monkeypatch.setenv("SITE_API_TIMEOUT", "soon")
        result = get_environment(EnvVar.SITE_API_TIMEOUT)
        assert result == 10.0

    @pytest.mark.unit
    def test_invalid_int_returns_default(self, monkeypatch):
        """Invalid integer value returns default."""
        monkeypatch.setenv("TREE_MAX_COMPONENTS", "not-a-number")
        result = get_environment(EnvVar.TREE_MAX_COMPONENTS)
        assert result == 50

    @pytest.mark.unit
    def test_path_type(self, monkeypatch, tmp_path):
        """Path type converts strings to Path."""
        monkeypatch.setenv("FEEDBACK_LOG_PATH", str(tmp_path / "fb.jsonl"))
        result = get_environment(EnvVar.FEEDBACK_LOG_PATH)
        assert result == tmp_path / "fb.jsonl"
        assert isinstance(result, Path)


class TestGetEnvironmentInfo:
    """Tests for environment variable metadata."""

    @pytest.mark.unit
    def test_returns_env_config(self):
        """Returns EnvConfig dataclass."""
        info = get_environment_info(EnvVar.MCP_PORT)
        assert isinstance(info, EnvConfig)
        assert info.name == "MCP_PORT"
        assert info.default == 6807
        assert info.var_type is int
        assert info.category == "service"

    @pytest.mark.unit
    def test_description_present(self):
        """Description field is populated."""
        info = get_environment_info(EnvVar.SITE_API_URL)
        assert "site" in info.description.lower()


class TestListEnvironmentVariables:
    """Tests for listing environment variables."""

    @pytest.mark.unit
    def test_returns_all_variables(self):
        """Returns all EnvVar members when no category."""
        result = list_environment_variables()
        assert len(result) == len(EnvVar)

    @pytest.mark.unit
    def test_filter_by_category(self):
        """Filters by category correctly."""
        editor_vars = list_environment_variables("editor")
        assert EnvVar.EDITOR_READY_TIMEOUT in editor_vars
        assert EnvVar.TREE_DEFAULT_DEPTH in editor_vars
        assert EnvVar.MCP_PORT not in editor_vars


# =============================================================================
# Tests for convenience functions
# =============================================================================


class TestConvenience:
    """Tests for derived configuration helpers."""

    @pytest.mark.unit
    def test_site_url_strips_trailing_slash(self, monkeypatch):
        """Site URL never ends with a slash."""
        monkeypatch.setenv("SITE_API_URL", "http://example.test:6805/")
        assert get_site_url() == "http://example.test:6805"

    @pytest.mark.unit
    def test_site_url_override(self):
        """Override wins over environment."""
        assert get_site_url("http://other") == "http://other"

    @pytest.mark.unit
    def test_feedback_path_default(self, monkeypatch):
        """Default feedback path lives under the home directory."""
        monkeypatch.delenv("FEEDBACK_LOG_PATH", raising=False)
        result = get_feedback_log_path()
        assert result.name == "feedback.jsonl"
        assert result.parent.name == ".sitebridge"

    @pytest.mark.unit
    def test_feedback_path_override(self, tmp_path):
        """String overrides are converted to Path."""
        result = get_feedback_log_path(str(tmp_path / "x.jsonl"))
        assert result == tmp_path / "x.jsonl"

    @pytest.mark.unit
    def test_tree_limits(self, monkeypatch):
        """Tree limits come from the environment."""
        monkeypatch.setenv("TREE_DEFAULT_DEPTH", "4")
        monkeypatch.delenv("TREE_MAX_COMPONENTS", raising=False)
        assert get_tree_limits() == (4, 50)
