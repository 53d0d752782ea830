"""Config Port - configuration models for the workflow server."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class ServerConfig(BaseModel):
    """MCP server settings."""

    name: str = "sfmobile-native-mcp-server"
    transport: Literal["stdio", "sse", "streamable-http"] = "stdio"

    model_config = ConfigDict(extra="ignore")


class WorkflowConfig(BaseModel):
    """Workflow engine settings."""

    environment: Literal["production", "test"] = "production"
    max_build_retries: int = Field(default=3, ge=1)
    recursion_limit: int = Field(default=100, ge=10)
    project_path: str = ""  # Base dir for .magen. Empty = user home.

    model_config = ConfigDict(extra="ignore")


class CommandsConfig(BaseModel):
    """External command execution settings."""

    default_timeout: float = 60.0

    model_config = ConfigDict(extra="ignore")


class TemplatesConfig(BaseModel):
    """Project template discovery settings."""

    source: str = ""

    model_config = ConfigDict(extra="ignore")


class AppConfig(BaseModel):
    """Root application configuration."""

    server: ServerConfig = ServerConfig()
    workflow: WorkflowConfig = WorkflowConfig()
    commands: CommandsConfig = CommandsConfig()
    templates: TemplatesConfig = TemplatesConfig()
    log_level: str = "INFO"
    log_file: str = ""
    log_rotation_max_mb: int = 5
    log_rotation_backups: int = 3

