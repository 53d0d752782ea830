"""Well-known .magen directory holding workflow state, logs and saved env vars."""

import os
from pathlib import Path

WELL_KNOWN_DIR_NAME = ".magen"
WORKFLOW_STATE_FILE = "workflow-state.json"
WORKFLOW_LOG_FILE = "workflow_logs.json"
ENV_VARS_FILE = "env_vars"


def get_well_known_directory(base_dir: str | Path | None = None) -> Path:
    """Return <base>/.magen, where base is base_dir, $PROJECT_PATH or the user home."""
    base = base_dir or os.getenv("PROJECT_PATH") or Path.home()
    return Path(base).expanduser() / WELL_KNOWN_DIR_NAME


def get_workflow_state_path(base_dir: str | Path | None = None) -> Path:
    return get_well_known_directory(base_dir) / WORKFLOW_STATE_FILE


def get_workflow_log_path(base_dir: str | Path | None = None) -> Path:
    return get_well_known_directory(base_dir) / WORKFLOW_LOG_FILE


def get_env_vars_path() -> Path:
    """Saved env vars always live under the user home, independent of the project."""
    return Path.home() / WELL_KNOWN_DIR_NAME / ENV_VARS_FILE
