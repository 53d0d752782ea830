"""Base classes for MCP tools.

A tool validates its arguments against the pydantic input model of its
ToolMetadata, renders a prompt and returns JSON text. Workflow tools append
the instructions that send the LLM back to the orchestrator.
"""

import inspect
import json
import logging
from typing import Annotated, Any

from mcp.server import FastMCP
from pydantic import BaseModel, Field

from mobile_native_workflow.application.tools.prompts import POST_TOOL_INVOCATION_INSTRUCTIONS
from mobile_native_workflow.domain.entities.tool_metadata import (
    USER_INPUT_PROPERTY,
    WORKFLOW_STATE_DATA_PROPERTY,
    ToolMetadata,
    WorkflowStateData,
    WorkflowToolOutput,
)
from mobile_native_workflow.domain.entities.tool_schemas import ORCHESTRATOR_TOOL

logger = logging.getLogger(__name__)


def _signature_for(model: type[BaseModel]) -> inspect.Signature:
    """Keyword-only signature mirroring the model's fields, for FastMCP's schema generation."""
    parameters = []
    for name, field in model.model_fields.items():
        default = inspect.Parameter.empty if field.is_required() else field.get_default(call_default_factory=True)
        parameters.append(
            inspect.Parameter(
                name,
                inspect.Parameter.KEYWORD_ONLY,
                default=default,
                annotation=Annotated[field.annotation, Field(description=field.description)],
            )
        )
    return inspect.Signature(parameters, return_annotation=str)


class AbstractTool:
    """An MCP tool described by a ToolMetadata."""

    def __init__(self, metadata: ToolMetadata) -> None:
        self.metadata = metadata
        self.logger = logging.getLogger(f"{__name__}.{type(self).__name__}")

    @property
    def tool_id(self) -> str:
        return self.metadata.tool_id

    async def handle_request(self, tool_input: Any) -> BaseModel | str:
        raise NotImplementedError

    async def invoke(self, arguments: dict[str, Any]) -> str:
        """Validate raw arguments, run the tool and serialize its output."""
        tool_input = self.metadata.input_model.model_validate(arguments)
        self.logger.debug("Tool %s invoked", self.tool_id)
        output = await self.handle_request(tool_input)
        return output if isinstance(output, str) else output.model_dump_json()

    def register(self, server: FastMCP) -> None:
        async def handler(**kwargs: Any) -> str:
            return await self.invoke(kwargs)

        handler.__signature__ = _signature_for(self.metadata.input_model)
        handler.__name__ = self.tool_id.replace("-", "_")
        handler.__doc__ = self.metadata.description
        server.add_tool(
            handler,
            name=self.tool_id,
            title=self.metadata.title,
            description=self.metadata.description,
            structured_output=False,
        )
        logger.debug("Registered tool %s", self.tool_id)


class AbstractWorkflowTool(AbstractTool):
    """A tool that takes part in the orchestrated workflow."""

    def finalize_workflow_tool_output(
        self,
        prompt: str,
        workflow_state_data: WorkflowStateData,
        result_schema: str | None = None,
    ) -> WorkflowToolOutput:
        """Append post-invocation instructions that route the result back to the orchestrator."""
        schema = result_schema or json.dumps(self.metadata.result_model.model_json_schema())
        instructions = POST_TOOL_INVOCATION_INSTRUCTIONS.format(
            result_schema=schema,
            orchestrator_id=ORCHESTRATOR_TOOL.tool_id,
            orchestrator_schema=json.dumps(ORCHESTRATOR_TOOL.input_model.model_json_schema()),
            user_input_property=USER_INPUT_PROPERTY,
            workflow_state_property=WORKFLOW_STATE_DATA_PROPERTY,
            workflow_state_data=workflow_state_data.model_dump_json(),
        )
        return WorkflowToolOutput(promptForLLM=prompt + instructions, resultSchema=schema)
