"""Terminal workflow tools reporting success or failure."""

from mobile_native_workflow.application.tools import prompts
from mobile_native_workflow.application.tools.base import AbstractWorkflowTool
from mobile_native_workflow.domain.entities.tool_metadata import WorkflowToolOutput
from mobile_native_workflow.domain.entities.tool_schemas import (
    COMPLETION_TOOL,
    FAILURE_TOOL,
    CompletionInput,
    FailureInput,
)


class CompletionTool(AbstractWorkflowTool):
    def __init__(self) -> None:
        super().__init__(COMPLETION_TOOL)

    async def handle_request(self, tool_input: CompletionInput) -> WorkflowToolOutput:
        prompt = prompts.COMPLETION_PROMPT.format(platform=tool_input.platform, project_path=tool_input.projectPath)
        return self.finalize_workflow_tool_output(prompt, tool_input.workflowStateData)


class FailureTool(AbstractWorkflowTool):
    def __init__(self) -> None:
        super().__init__(FAILURE_TOOL)

    async def handle_request(self, tool_input: FailureInput) -> WorkflowToolOutput:
        messages = "\n".join(f"- {message}" for message in tool_input.messages)
        prompt = prompts.FAILURE_PROMPT.format(messages=messages)
        return self.finalize_workflow_tool_output(prompt, tool_input.workflowStateData)
