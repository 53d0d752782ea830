"""Base classes for workflow nodes."""

import logging
from collections.abc import Mapping
from typing import Any, TypeVar

from pydantic import BaseModel

from mobile_native_workflow.domain.entities.tool_metadata import MCPToolInvocationData
from mobile_native_workflow.domain.entities.workflow_state import MobileNativeState
from mobile_native_workflow.domain.ports.tool_executor import ToolExecutor
from mobile_native_workflow.infrastructure.execution.tool_executor import (
    LangGraphToolExecutor,
    execute_tool_with_logging,
)

ResultT = TypeVar("ResultT", bound=BaseModel)


class BaseNode:
    """A named unit of work.

    execute(state) returns a partial state patch (or awaits one) and never
    mutates state or anything reachable from it.
    """

    def __init__(self, name: str, logger: logging.Logger | None = None) -> None:
        self.name = name
        self.logger = logger or logging.getLogger(f"{__name__}.{type(self).__name__}")

    def execute(self, state: MobileNativeState) -> MobileNativeState:
        raise NotImplementedError

    @staticmethod
    def fatal_error_patch(state: Mapping[str, Any], *messages: str) -> MobileNativeState:
        """Patch appending messages to a copy of workflowFatalErrorMessages."""
        existing = state.get("workflowFatalErrorMessages") or []
        return {"workflowFatalErrorMessages": [*existing, *messages]}


class AbstractToolNode(BaseNode):
    """A node that hands work to an MCP tool through a ToolExecutor."""

    def __init__(
        self,
        name: str,
        tool_executor: ToolExecutor | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        super().__init__(name, logger)
        self.tool_executor = tool_executor or LangGraphToolExecutor()

    def execute_tool_with_logging(
        self,
        invocation: MCPToolInvocationData,
        result_model: type[ResultT],
    ) -> ResultT:
        return execute_tool_with_logging(self.tool_executor, self.logger, invocation, result_model)
