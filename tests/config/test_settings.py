"""
Unit tests for layered settings.
"""

from pathlib import Path

import pytest

from gitopskit.config.settings import (
    Settings,
    environment_settings,
    flatten_config,
    load_settings,
    load_yaml_config,
    parse_bool,
)
from gitopskit.core.exceptions import ConfigurationError


class TestParseBool:
    """Tests for parse_bool()."""

    @pytest.mark.parametrize("value", ["true", "True", "TRUE", True])
    def test_true_values(self, value):
        assert parse_bool(value) is True

    @pytest.mark.parametrize("value", ["false", "False", "FALSE", False])
    def test_false_values(self, value):
        assert parse_bool(value) is False

    @pytest.mark.parametrize("value", ["yes", "1", "tRuE", "", 1, None])
    def test_invalid_values(self, value):
        with pytest.raises(ConfigurationError, match="YAML 1.2"):
            parse_bool(value, "no-cache")


class TestSettings:
    """Tests for the Settings dataclass."""

    def test_defaults(self, isolated_home):
        settings = Settings()

        assert settings.version is None
        assert settings.no_cache is False
        assert settings.base_dir == Path.home() / ".gitops-cli"
        assert settings.owner == "mxcd"
        assert settings.repo == "gitops-cli"
        assert settings.max_retries == 3

    def test_frozen(self):
        settings = Settings()
        with pytest.raises(AttributeError):
            settings.version = "2.2.2"

    @pytest.mark.parametrize("timeout", [0, -1, "30"])
    def test_invalid_timeout(self, timeout):
        with pytest.raises(ConfigurationError, match="timeout"):
            Settings(timeout=timeout)

    def test_invalid_max_retries(self):
        with pytest.raises(ConfigurationError, match="max_retries"):
            Settings(max_retries=0)

    def test_with_overrides_ignores_none(self):
        settings = Settings(version="2.2.2").with_overrides(version=None, no_cache=True)

        assert settings.version == "2.2.2"
        assert settings.no_cache is True

    def test_with_overrides_coerces_types(self, tmp_path):
        settings = Settings().with_overrides(
            base_dir=str(tmp_path), no_cache="true", timeout="10"
        )

        assert settings.base_dir == tmp_path
        assert settings.no_cache is True
        assert settings.timeout == 10

    def test_with_overrides_unknown_setting(self):
        with pytest.raises(ConfigurationError, match="Unknown settings: colour"):
            Settings().with_overrides(colour="blue")

    def test_token_not_in_repr(self):
        assert "secret" not in repr(Settings(github_token="secret"))


class TestConfigFile:
    """Tests for YAML configuration loading."""

    def test_missing_optional_file(self, tmp_path):
        assert load_yaml_config(tmp_path / "missing.yaml") == {}

    def test_missing_required_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_yaml_config(tmp_path / "missing.yaml", required=True)

    def test_invalid_yaml(self, tmp_path):
        config = tmp_path / "gitopskit.yaml"
        config.write_text("version: [unclosed")

        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            load_yaml_config(config)

    def test_non_mapping(self, tmp_path):
        config = tmp_path / "gitopskit.yaml"
        config.write_text("- a\n- b\n")

        with pytest.raises(ConfigurationError, match="must be a mapping"):
            load_yaml_config(config)

    def test_flatten_sections(self, caplog):
        values = flatten_config(
            {
                "version": "2.2.2",
                "github": {"owner": "acme", "token": "t", "color": "red"},
                "download": {"max_retries": 5},
                "unknown": 1,
            }
        )

        assert values == {
            "version": "2.2.2",
            "owner": "acme",
            "github_token": "t",
            "max_retries": 5,
        }
        assert "Ignoring unknown setting: github.color" in caplog.text
        assert "Ignoring unknown setting: unknown" in caplog.text


class TestLoadSettings:
    """Tests for load_settings() layering."""

    def test_environment_settings(self, tmp_path):
        values = environment_settings(
            {
                "GITOPSKIT_HOME": str(tmp_path / "home"),
                "RUNNER_TOOL_CACHE": str(tmp_path / "cache"),
                "RUNNER_TEMP": str(tmp_path / "temp"),
                "GITHUB_TOKEN": "t",
                "UNRELATED": "x",
            }
        )

        assert values == {
            "base_dir": str(tmp_path / "home"),
            "tool_cache_dir": str(tmp_path / "cache"),
            "scratch_dir": str(tmp_path / "temp"),
            "github_token": "t",
        }

    def test_file_then_environment_then_overrides(self, tmp_path):
        """Test each layer overrides the one below it."""
        config = tmp_path / "gitopskit.yaml"
        config.write_text(
            "version: 2.1.0\n"
            "no_cache: true\n"
            f"tool_cache_dir: {tmp_path / 'file-cache'}\n"
            "download:\n"
            "  timeout: 5\n"
        )
        environ = {"RUNNER_TOOL_CACHE": str(tmp_path / "env-cache")}

        settings = load_settings(config, environ=environ, version="2.2.2")

        assert settings.version == "2.2.2"
        assert settings.no_cache is True
        assert settings.timeout == 5
        assert settings.tool_cache_dir == tmp_path / "env-cache"

    def test_default_config_file_in_cwd(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "gitopskit.yaml").write_text("github:\n  repo: fork\n")

        settings = load_settings(environ={})

        assert settings.repo == "fork"

    def test_explicit_config_must_exist(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_settings(tmp_path / "missing.yaml", environ={})

    def test_numeric_version_in_yaml(self, tmp_path):
        """Test an unquoted two-part version is kept as text."""
        config = tmp_path / "gitopskit.yaml"
        config.write_text("version: 2.2\n")

        assert load_settings(config, environ={}).version == "2.2"
