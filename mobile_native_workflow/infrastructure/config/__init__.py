"""Configuration loading - TOML files with env overrides."""

from mobile_native_workflow.infrastructure.config.toml_loader import load_config

__all__ = ["load_config"]
