"""Tool Executor Port - interface for handing a tool invocation to the LLM."""

from typing import Any, Protocol

from mobile_native_workflow.domain.entities.tool_metadata import MCPToolInvocationData


class ToolExecutor(Protocol):
    """Runs an MCP tool on behalf of a workflow node.

    Returns the raw result reported back for the invocation; callers validate it
    against the tool's result model.
    """

    def execute(self, invocation: MCPToolInvocationData) -> Any:
        """Execute the tool invocation and return its unvalidated result."""
        ...
