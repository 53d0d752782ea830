"""Tool execution through LangGraph interrupts."""

import logging
from collections.abc import Callable
from typing import Any, TypeVar

from langgraph.types import interrupt
from pydantic import BaseModel

from mobile_native_workflow.domain.entities.tool_metadata import MCPToolInvocationData
from mobile_native_workflow.domain.ports.tool_executor import ToolExecutor

ResultT = TypeVar("ResultT", bound=BaseModel)


class LangGraphToolExecutor:
    """Pauses the graph and hands the invocation to the orchestrator.

    The orchestrator turns the interrupt payload into instructions for the LLM;
    the LLM's structured result comes back as the resume value.
    """

    def execute(self, invocation: MCPToolInvocationData) -> Any:
        return interrupt(invocation.to_payload())


def execute_tool_with_logging(
    tool_executor: ToolExecutor,
    logger: logging.Logger,
    invocation: MCPToolInvocationData,
    result_model: type[ResultT],
    validator: Callable[[Any], ResultT] | None = None,
) -> ResultT:
    """Run a tool invocation and validate its result.

    Raises pydantic.ValidationError when the result does not match result_model
    (or whatever the custom validator raises).
    """
    tool_id = invocation.metadata.tool_id
    logger.debug("Invoking tool %s with input %r", tool_id, invocation.input)
    raw_result = tool_executor.execute(invocation)
    logger.debug("Tool %s returned %r", tool_id, raw_result)
    if validator is not None:
        return validator(raw_result)
    return result_model.model_validate(raw_result)
