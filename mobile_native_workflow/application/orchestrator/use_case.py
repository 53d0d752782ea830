"""Orchestrator use case - drives the workflow graph one MCP tool call at a time.

Each call either starts a new thread or resumes the interrupted one with the
previous tool's result, runs the graph to its next interrupt and turns that
interrupt into instructions for the LLM.
"""

import json
import logging
import random
import string
import time
from collections.abc import Callable
from typing import Any

from langgraph.graph import StateGraph
from langgraph.types import Command

from mobile_native_workflow.application.tools import prompts
from mobile_native_workflow.application.tools.base import AbstractTool
from mobile_native_workflow.domain.entities.tool_metadata import (
    WORKFLOW_STATE_DATA_PROPERTY,
    WorkflowStateData,
)
from mobile_native_workflow.domain.entities.tool_schemas import (
    ORCHESTRATOR_TOOL,
    OrchestratorInput,
    OrchestratorOutput,
)
from mobile_native_workflow.infrastructure.checkpointing.state_manager import WorkflowStateManager
from mobile_native_workflow.infrastructure.workflow.graph import compile_workflow_graph

logger = logging.getLogger(__name__)

_BASE36 = string.digits + string.ascii_lowercase


class UnexpectedWorkflowStateError(RuntimeError):
    """The graph stopped before END without raising an interrupt."""


def generate_thread_id() -> str:
    suffix = "".join(random.choices(_BASE36, k=6))
    return f"mmw-{int(time.time() * 1000)}-{suffix}"


def _interrupt_value(result: Any, snapshot: Any) -> dict[str, Any] | None:
    interrupts = result.get("__interrupt__") if isinstance(result, dict) else None
    if interrupts:
        return interrupts[0].value
    for task in snapshot.tasks:
        if task.interrupts:
            return task.interrupts[0].value
    return None


class OrchestratorUseCase:
    """Runs the workflow to its next tool invocation."""

    def __init__(
        self,
        graph_factory: Callable[[], StateGraph],
        state_manager: WorkflowStateManager,
        recursion_limit: int = 100,
    ) -> None:
        self.graph_factory = graph_factory
        self.state_manager = state_manager
        self.recursion_limit = recursion_limit

    async def execute(self, request: OrchestratorInput) -> OrchestratorOutput:
        thread_id = request.workflowStateData.thread_id or generate_thread_id()
        workflow_state_data = WorkflowStateData(thread_id=thread_id)
        logger.info(
            "Processing orchestrator request thread=%s resumption=%s",
            thread_id,
            bool(request.workflowStateData.thread_id),
        )

        config = {"configurable": {"thread_id": thread_id}, "recursion_limit": self.recursion_limit}
        checkpointer = await self.state_manager.create_checkpointer()
        graph = compile_workflow_graph(self.graph_factory(), checkpointer=checkpointer)

        snapshot = await graph.aget_state(config)
        if any(task.interrupts for task in snapshot.tasks):
            logger.info("Resuming interrupted workflow %s", thread_id)
            result = await graph.ainvoke(Command(resume=request.userInput), config)
        else:
            logger.info("Starting new workflow %s", thread_id)
            result = await graph.ainvoke({"userInput": request.userInput}, config)

        snapshot = await graph.aget_state(config)
        if not snapshot.next:
            logger.info("Workflow %s concluded", thread_id)
            await self.state_manager.clear_state()
            return OrchestratorOutput(orchestrationInstructionsPrompt=prompts.WORKFLOW_CONCLUDED)

        invocation = _interrupt_value(result, snapshot)
        if invocation is None:
            logger.error("Workflow %s stopped without an MCP tool invocation", thread_id)
            raise UnexpectedWorkflowStateError("FATAL: Unexpected workflow state without an interrupt")

        logger.info("Next MCP tool: %s", invocation["llmMetadata"]["name"])
        prompt = self._orchestration_prompt(invocation, workflow_state_data)
        await self.state_manager.save_checkpointer_state(checkpointer)
        return OrchestratorOutput(orchestrationInstructionsPrompt=prompt)

    @staticmethod
    def _orchestration_prompt(invocation: dict[str, Any], workflow_state_data: WorkflowStateData) -> str:
        metadata = invocation["llmMetadata"]
        return prompts.ORCHESTRATION_PROMPT.format(
            orchestrator_id=ORCHESTRATOR_TOOL.tool_id,
            tool_name=metadata["name"],
            input_schema=json.dumps(metadata["inputSchema"]),
            input_values=json.dumps(invocation.get("input", {})),
            workflow_state_property=WORKFLOW_STATE_DATA_PROPERTY,
            workflow_state_data=workflow_state_data.model_dump_json(),
        )


class OrchestratorTool(AbstractTool):
    """The `sfmobile-native-project-manager` MCP tool."""

    def __init__(self, use_case: OrchestratorUseCase) -> None:
        super().__init__(ORCHESTRATOR_TOOL)
        self.use_case = use_case

    async def handle_request(self, tool_input: OrchestratorInput) -> OrchestratorOutput:
        return await self.use_case.execute(tool_input)
