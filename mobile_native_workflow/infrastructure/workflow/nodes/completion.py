"""Terminal nodes: report success or failure to the user."""

import logging

from mobile_native_workflow.domain.entities.tool_metadata import MCPToolInvocationData
from mobile_native_workflow.domain.entities.tool_schemas import COMPLETION_TOOL, FAILURE_TOOL
from mobile_native_workflow.domain.entities.workflow_state import MobileNativeState
from mobile_native_workflow.domain.ports.tool_executor import ToolExecutor
from mobile_native_workflow.infrastructure.workflow.nodes.base import AbstractToolNode


class CompletionNode(AbstractToolNode):
    def __init__(
        self,
        tool_executor: ToolExecutor | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        super().__init__("completion", tool_executor, logger)

    def execute(self, state: MobileNativeState) -> MobileNativeState:
        invocation = MCPToolInvocationData(
            metadata=COMPLETION_TOOL,
            input={"projectPath": state.get("projectPath"), "platform": state.get("platform")},
        )
        self.tool_executor.execute(invocation)
        return {}


class FailureNode(AbstractToolNode):
    """Describes an unrecoverable failure using every message the workflow collected."""

    def __init__(
        self,
        tool_executor: ToolExecutor | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        super().__init__("failure", tool_executor, logger)

    def execute(self, state: MobileNativeState) -> MobileNativeState:
        messages = list(state.get("workflowFatalErrorMessages") or [])
        if state.get("buildSuccessful") is False:
            attempts = state.get("buildAttemptCount") or 0
            messages.append(f"The project failed to build after {attempts} attempt(s).")
            messages.extend(state.get("buildErrorMessages") or [])
        if not messages:
            messages.append("The workflow could not continue.")

        self.logger.warning("Workflow failed: %s", messages)
        invocation = MCPToolInvocationData(metadata=FAILURE_TOOL, input={"messages": messages})
        self.tool_executor.execute(invocation)
        return {}
