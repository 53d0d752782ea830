"""Tests for TOML config loader."""

from pathlib import Path

from mobile_native_workflow.infrastructure.config.toml_loader import _apply_env_overrides, load_config


class TestLoadConfig:
    """Tests for load_config function."""

    def test_loads_default_config(self):
        """Loads the repository's default.toml."""
        config = load_config()

        assert config.server.name == "sfmobile-native-mcp-server"
        assert config.server.transport == "stdio"
        assert config.workflow.max_build_retries == 3
        assert config.log_level == "INFO"

    def test_merges_development_config(self, tmp_path: Path):
        """Merges development.toml over default.toml."""
        (tmp_path / "default.toml").write_text(
            """
[workflow]
environment = "production"
max_build_retries = 3
"""
        )
        (tmp_path / "development.toml").write_text(
            """
[workflow]
environment = "test"
"""
        )
        config = load_config(tmp_path)

        assert config.workflow.environment == "test"
        assert config.workflow.max_build_retries == 3

    def test_handles_missing_files(self, tmp_path: Path):
        """Empty directory falls back to model defaults."""
        config = load_config(tmp_path)

        assert config.workflow.environment == "production"
        assert config.log_file == ""


class TestApplyEnvOverrides:
    """Tests for _apply_env_overrides function."""

    def test_environment_and_retries(self, monkeypatch):
        monkeypatch.setenv("WORKFLOW_ENVIRONMENT", " TEST ")
        monkeypatch.setenv("MAX_BUILD_RETRIES", "5")
        config = _apply_env_overrides({})

        assert config["workflow"] == {"environment": "test", "max_build_retries": 5}

    def test_invalid_number_ignored(self, monkeypatch):
        monkeypatch.setenv("MAX_BUILD_RETRIES", "many")
        monkeypatch.setenv("COMMAND_TIMEOUT", "soon")
        config = _apply_env_overrides({"workflow": {"max_build_retries": 2}})

        assert config["workflow"]["max_build_retries"] == 2
        assert "commands" not in config

    def test_log_level_upper_cased(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "debug")
        assert _apply_env_overrides({})["logging"]["level"] == "DEBUG"
