"""Saved environment variables (~/.magen/env_vars) for Android tooling."""

import logging
import os
from collections.abc import Mapping
from pathlib import Path

from mobile_native_workflow.infrastructure.persistence.well_known_directory import get_env_vars_path

logger = logging.getLogger(__name__)

# Env var -> accepted keys in the file, preferred first
KNOWN_ENV_VARS = {
    "ANDROID_HOME": ("ANDROID_HOME", "android_home"),
    "JAVA_HOME": ("JAVA_HOME", "java_home"),
}


def parse_env_vars(content: str) -> dict[str, str]:
    """Parse KEY=value lines. Blank lines, comments and lines without '=' are skipped."""
    env_vars: dict[str, str] = {}
    for line in content.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        key, sep, value = stripped.partition("=")
        key = key.strip()
        if not sep or not key:
            continue
        env_vars[key] = value.strip()
    return env_vars


def load_env_vars(path: Path | None = None) -> dict[str, str]:
    """Read the env vars file. Missing or unreadable file yields an empty mapping."""
    env_path = path or get_env_vars_path()
    try:
        content = env_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}
    except OSError as e:
        logger.warning("Could not read env vars file %s: %s", env_path, e)
        return {}
    return parse_env_vars(content)


def save_env_vars(updates: Mapping[str, str], path: Path | None = None) -> None:
    """Merge updates into the env vars file, rewriting it."""
    env_path = path or get_env_vars_path()
    merged = {**load_env_vars(env_path), **updates}
    env_path.parent.mkdir(parents=True, exist_ok=True)
    env_path.write_text("".join(f"{key}={value}\n" for key, value in merged.items()), encoding="utf-8")
    logger.info("Saved %s to %s", ", ".join(sorted(updates)), env_path)


def load_and_set_env_vars(path: Path | None = None) -> dict[str, str]:
    """Export known variables from the file into os.environ.

    A value is applied only when the directory it points to exists. Returns
    the variables that were set.
    """
    file_vars = load_env_vars(path)
    applied: dict[str, str] = {}
    for env_name, keys in KNOWN_ENV_VARS.items():
        value = next((file_vars[k] for k in keys if file_vars.get(k)), None)
        if value is None:
            continue
        if not Path(value).expanduser().exists():
            logger.warning("Ignoring saved %s: path does not exist: %s", env_name, value)
            continue
        os.environ[env_name] = value
        applied[env_name] = value
    if applied:
        logger.info("Loaded %s from saved env vars", ", ".join(sorted(applied)))
    return applied
