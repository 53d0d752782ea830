"""Creates workflow checkpointers and persists their state between MCP requests."""

import logging
from typing import Literal

from langgraph.checkpoint.base import BaseCheckpointSaver
from langgraph.checkpoint.memory import MemorySaver

from mobile_native_workflow.infrastructure.checkpointing.json_checkpointer import JsonCheckpointSaver
from mobile_native_workflow.infrastructure.persistence.workflow_state_persistence import (
    WorkflowStatePersistence,
)

logger = logging.getLogger(__name__)

WorkflowEnvironment = Literal["production", "test"]


class WorkflowStateManager:
    """Owns checkpointer lifecycle for the orchestrator.

    production: a JsonCheckpointSaver restored from the state file and
    written back after every orchestrator step.
    test: one in-memory MemorySaver reused across steps; nothing touches disk.
    """

    def __init__(
        self,
        environment: WorkflowEnvironment = "production",
        persistence: WorkflowStatePersistence | None = None,
    ) -> None:
        self._environment = environment
        self._persistence = persistence or WorkflowStatePersistence()
        self._memory_saver: MemorySaver | None = None

    @property
    def environment(self) -> WorkflowEnvironment:
        return self._environment

    async def create_checkpointer(self) -> BaseCheckpointSaver:
        if self._environment == "test":
            if self._memory_saver is None:
                self._memory_saver = MemorySaver()
            return self._memory_saver
        saver = JsonCheckpointSaver()
        serialized = await self._persistence.read_state()
        if serialized:
            saver.import_state(serialized)
            logger.debug("Restored workflow checkpoints from %s", self._persistence.path)
        return saver

    async def save_checkpointer_state(self, checkpointer: BaseCheckpointSaver) -> None:
        if self._environment == "test":
            if isinstance(checkpointer, JsonCheckpointSaver):
                raise RuntimeError("JsonCheckpointSaver must not be used in the test environment")
            logger.debug("Test environment: skipping checkpoint persistence")
            return
        if not isinstance(checkpointer, JsonCheckpointSaver):
            logger.warning(
                "Cannot persist checkpointer of type %s, expected JsonCheckpointSaver",
                type(checkpointer).__name__,
            )
            return
        await self._persistence.write_state(checkpointer.export_state())

    async def clear_state(self) -> None:
        if self._environment == "test":
            self._memory_saver = None
            return
        await self._persistence.clear_state()
