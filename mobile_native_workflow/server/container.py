"""Dependency Injection Container - centralized service management."""

from functools import cached_property

from langgraph.graph import StateGraph

from mobile_native_workflow.application.orchestrator.use_case import OrchestratorTool, OrchestratorUseCase
from mobile_native_workflow.application.tools.base import AbstractTool
from mobile_native_workflow.application.tools.plan import (
    BuildRecoveryTool,
    BuildTool,
    GetInputTool,
    InputExtractionTool,
    ProjectGenerationTool,
    TemplateSelectionTool,
    UserInputTriageTool,
)
from mobile_native_workflow.application.tools.run import DeploymentTool
from mobile_native_workflow.application.tools.workflow import CompletionTool, FailureTool
from mobile_native_workflow.domain.ports.command_runner import CommandRunner
from mobile_native_workflow.domain.ports.config import AppConfig
from mobile_native_workflow.infrastructure.checkpointing.state_manager import WorkflowStateManager
from mobile_native_workflow.infrastructure.config import load_config
from mobile_native_workflow.infrastructure.execution.command_runner import AsyncCommandRunner
from mobile_native_workflow.infrastructure.persistence.well_known_directory import get_workflow_state_path
from mobile_native_workflow.infrastructure.persistence.workflow_state_persistence import (
    WorkflowStatePersistence,
)
from mobile_native_workflow.infrastructure.workflow.graph import build_mobile_native_graph


class Container:
    """Dependency Injection Container with lazy initialization.

    All dependencies are created on first access and cached.

    Usage:
        container = Container()
        server = create_server(container)
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        command_runner: CommandRunner | None = None,
    ):
        """Initialize container with optional config and command runner overrides."""
        self._config_override = config
        self._command_runner_override = command_runner

    @cached_property
    def config(self) -> AppConfig:
        """Application configuration."""
        if self._config_override:
            return self._config_override
        return load_config()

    @cached_property
    def command_runner(self) -> CommandRunner:
        """Subprocess runner for sf, xcrun and adb."""
        if self._command_runner_override is not None:
            return self._command_runner_override
        return AsyncCommandRunner(self.config.commands.default_timeout)

    @cached_property
    def state_manager(self) -> WorkflowStateManager:
        """Checkpointer lifecycle, file-backed outside the test environment."""
        persistence = WorkflowStatePersistence(get_workflow_state_path(self.config.workflow.project_path or None))
        return WorkflowStateManager(self.config.workflow.environment, persistence)

    def build_graph(self) -> StateGraph:
        """Fresh graph builder per orchestrator request."""
        return build_mobile_native_graph(
            self.command_runner,
            max_build_retries=self.config.workflow.max_build_retries,
            template_source=self.config.templates.source,
        )

    @cached_property
    def orchestrator_use_case(self) -> OrchestratorUseCase:
        return OrchestratorUseCase(
            self.build_graph,
            self.state_manager,
            recursion_limit=self.config.workflow.recursion_limit,
        )

    @cached_property
    def tools(self) -> list[AbstractTool]:
        """Every MCP tool the server exposes."""
        return [
            OrchestratorTool(self.orchestrator_use_case),
            UserInputTriageTool(),
            InputExtractionTool(),
            GetInputTool(),
            TemplateSelectionTool(),
            ProjectGenerationTool(self.config.templates.source),
            BuildTool(),
            BuildRecoveryTool(),
            CompletionTool(),
            FailureTool(),
            DeploymentTool(),
        ]
