"""Tool metadata and the data exchanged between workflow nodes and MCP tools."""

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

USER_INPUT_PROPERTY = "userInput"
WORKFLOW_STATE_DATA_PROPERTY = "workflowStateData"


class WorkflowStateData(BaseModel):
    """Opaque workflow state round-tripped between the orchestrator and workflow tools."""

    thread_id: str = ""

    model_config = ConfigDict(extra="ignore")


class WorkflowToolInput(BaseModel):
    """Base input for every tool that participates in an orchestrated workflow."""

    workflowStateData: WorkflowStateData = Field(
        default_factory=WorkflowStateData,
        description="Workflow session state for continuation. Pass back to the orchestrator unchanged.",
    )


class EmptyResult(BaseModel):
    """Result of a tool that produces no structured output."""


class WorkflowToolOutput(BaseModel):
    """Output of a workflow tool: the prompt for the LLM and the result schema it must follow."""

    promptForLLM: str
    resultSchema: str


@dataclass(frozen=True)
class ToolMetadata:
    """Static description of an MCP tool.

    input_model describes the tool arguments; result_model is the shape the LLM
    must report back to the orchestrator when the tool is part of a workflow.
    """

    tool_id: str
    title: str
    description: str
    input_model: type[BaseModel]
    result_model: type[BaseModel] = EmptyResult


@dataclass
class MCPToolInvocationData:
    """A request, raised from inside a node, for the LLM to invoke a tool."""

    metadata: ToolMetadata
    input: dict[str, Any] = field(default_factory=dict)

    def to_payload(self) -> dict[str, Any]:
        """Serializable form stored in checkpoints and read back by the orchestrator."""
        return {
            "llmMetadata": {
                "name": self.metadata.tool_id,
                "description": self.metadata.description,
                "inputSchema": self.metadata.input_model.model_json_schema(),
            },
            "input": self.input,
        }
