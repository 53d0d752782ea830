"""Tests for saved env vars and the well-known directory."""

import os
from pathlib import Path

from mobile_native_workflow.infrastructure.persistence.env_config import (
    load_and_set_env_vars,
    load_env_vars,
    parse_env_vars,
    save_env_vars,
)
from mobile_native_workflow.infrastructure.persistence.well_known_directory import (
    get_env_vars_path,
    get_well_known_directory,
    get_workflow_log_path,
)


class TestParseEnvVars:
    """Tests for parse_env_vars function."""

    def test_skips_comments_and_blank_lines(self):
        content = "# saved\n\nANDROID_HOME=/opt/sdk\nnot a pair\n JAVA_HOME = /opt/jdk \n"
        assert parse_env_vars(content) == {"ANDROID_HOME": "/opt/sdk", "JAVA_HOME": "/opt/jdk"}

    def test_value_may_contain_equals(self):
        assert parse_env_vars("OPTS=a=b") == {"OPTS": "a=b"}


class TestSaveAndLoad:
    """Tests for save and load."""

    def test_missing_file_is_empty(self, tmp_path: Path):
        assert load_env_vars(tmp_path / "env_vars") == {}

    def test_save_merges_existing_values(self, tmp_path: Path):
        path = tmp_path / "nested" / "env_vars"
        save_env_vars({"ANDROID_HOME": "/old"}, path)
        save_env_vars({"JAVA_HOME": "/jdk", "ANDROID_HOME": "/new"}, path)
        assert load_env_vars(path) == {"ANDROID_HOME": "/new", "JAVA_HOME": "/jdk"}


class TestLoadAndSetEnvVars:
    """Tests for load and set env vars."""

    def test_applies_existing_paths_only(self, tmp_path: Path, monkeypatch):
        monkeypatch.delenv("ANDROID_HOME", raising=False)
        monkeypatch.delenv("JAVA_HOME", raising=False)
        sdk = tmp_path / "sdk"
        sdk.mkdir()
        path = tmp_path / "env_vars"
        path.write_text(f"android_home={sdk}\nJAVA_HOME={tmp_path / 'missing'}\n", encoding="utf-8")

        applied = load_and_set_env_vars(path)

        assert applied == {"ANDROID_HOME": str(sdk)}
        assert os.environ["ANDROID_HOME"] == str(sdk)
        assert "JAVA_HOME" not in os.environ


class TestWellKnownDirectory:
    """Tests for .magen directory resolution."""

    def test_defaults_to_home(self, isolated_home: Path):
        assert get_well_known_directory() == isolated_home / ".magen"
        assert get_env_vars_path() == isolated_home / ".magen" / "env_vars"

    def test_project_path_env(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("PROJECT_PATH", str(tmp_path / "proj"))
        assert get_workflow_log_path() == tmp_path / "proj" / ".magen" / "workflow_logs.json"

    def test_explicit_base_dir_wins(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("PROJECT_PATH", "/elsewhere")
        assert get_well_known_directory(tmp_path) == tmp_path / ".magen"
