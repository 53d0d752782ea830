"""TOML configuration loader with env overrides."""

import logging
import os
import tomllib
from pathlib import Path

from mobile_native_workflow.domain.ports.config import (
    AppConfig,
    CommandsConfig,
    ServerConfig,
    TemplatesConfig,
    WorkflowConfig,
)

logger = logging.getLogger(__name__)


def _load_toml(path: Path) -> dict:
    """Load TOML file."""
    with open(path, "rb") as f:
        return tomllib.load(f)


def _apply_env_overrides(config: dict) -> dict:
    """Apply environment variable overrides."""
    if environment := os.getenv("WORKFLOW_ENVIRONMENT"):
        config.setdefault("workflow", {})["environment"] = environment.strip().lower()
    if retries := os.getenv("MAX_BUILD_RETRIES"):
        try:
            config.setdefault("workflow", {})["max_build_retries"] = int(retries)
        except ValueError:
            logger.warning("Invalid MAX_BUILD_RETRIES env value: %r, ignoring", retries)
    if project_path := os.getenv("PROJECT_PATH"):
        config.setdefault("workflow", {})["project_path"] = project_path.strip()
    if transport := os.getenv("MCP_TRANSPORT"):
        config.setdefault("server", {})["transport"] = transport.strip()
    if timeout := os.getenv("COMMAND_TIMEOUT"):
        try:
            config.setdefault("commands", {})["default_timeout"] = float(timeout)
        except ValueError:
            logger.warning("Invalid COMMAND_TIMEOUT env value: %r, ignoring", timeout)
    if source := os.getenv("TEMPLATES_SOURCE"):
        config.setdefault("templates", {})["source"] = source.strip()
    if level := os.getenv("LOG_LEVEL"):
        config.setdefault("logging", {})["level"] = level.upper()
    if path := os.getenv("LOG_FILE"):
        config.setdefault("logging", {})["file"] = path.strip()
    return config


def load_config(config_dir: Path | None = None) -> AppConfig:
    """Load configuration from TOML files with env overrides.

    Loads default.toml, then development.toml if exists.
    """
    if config_dir is None:
        config_dir = Path(__file__).resolve().parent.parent.parent.parent / "config"

    config: dict = {}

    default_path = config_dir / "default.toml"
    if default_path.exists():
        config = _load_toml(default_path)

    dev_path = config_dir / "development.toml"
    if dev_path.exists():
        dev_config = _load_toml(dev_path)
        for key, value in dev_config.items():
            if isinstance(value, dict) and key in config and isinstance(config[key], dict):
                config[key] = {**config[key], **value}
            else:
                config[key] = value

    config = _apply_env_overrides(config)

    logging_raw = config.get("logging") or {}

    return AppConfig(
        server=ServerConfig(**(config.get("server") or {})),
        workflow=WorkflowConfig(**(config.get("workflow") or {})),
        commands=CommandsConfig(**(config.get("commands") or {})),
        templates=TemplatesConfig(**(config.get("templates") or {})),
        log_level=logging_raw.get("level", "INFO"),
        log_file=(logging_raw.get("file") or "").strip(),
        log_rotation_max_mb=int(logging_raw.get("log_rotation_max_mb", 5)),
        log_rotation_backups=int(logging_raw.get("log_rotation_backups", 3)),
    )
