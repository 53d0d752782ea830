"""Atomic file-backed store for the serialized workflow checkpoint state."""

import asyncio
import json
import logging
import os
from pathlib import Path

from mobile_native_workflow.infrastructure.persistence.well_known_directory import (
    get_workflow_state_path,
)

logger = logging.getLogger(__name__)


class InvalidSerializedStateError(ValueError):
    """The state handed to write_state is not valid JSON."""


class WorkflowStatePersistence:
    """Saves, restores and clears one JSON state file.

    Writes go to <path>.tmp and are renamed over the target, so readers see
    either the previous complete file or the new one. Callers serialize their
    own writes to a given path.
    """

    def __init__(self, path: str | Path | None = None) -> None:
        self._path = Path(path) if path is not None else get_workflow_state_path()

    @property
    def path(self) -> Path:
        return self._path

    async def write_state(self, serialized: str) -> None:
        """Validate and atomically write serialized state.

        Raises InvalidSerializedStateError before touching the filesystem if
        serialized is not JSON. OSError propagates.
        """
        try:
            json.loads(serialized)
        except (TypeError, ValueError) as e:
            raise InvalidSerializedStateError(f"Invalid serialized state: {e}") from e
        await asyncio.to_thread(self._write_atomic, serialized)

    def _write_atomic(self, serialized: str) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                f.write(serialized)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self._path)
        except OSError:
            try:
                tmp_path.unlink()
            except FileNotFoundError:
                pass
            raise
        logger.debug("Workflow state written to %s", self._path)

    async def read_state(self) -> str | None:
        """Return the stored state, or None when there is no usable state."""
        return await asyncio.to_thread(self._read)

    def _read(self) -> str | None:
        try:
            with open(self._path, "rb") as f:
                raw = f.read()
        except (FileNotFoundError, IsADirectoryError):
            return None
        except OSError as e:
            logger.warning("Workflow state unreadable at %s: %s", self._path, e)
            return None
        try:
            content = raw.decode("utf-8")
            json.loads(content)
        except ValueError as e:
            logger.warning("Ignoring corrupt workflow state at %s: %s", self._path, e)
            return None
        return content

    async def state_exists(self) -> bool:
        return await asyncio.to_thread(self._path.is_file)

    async def clear_state(self) -> None:
        """Delete the state file. Missing file is not an error; other OSErrors propagate."""
        try:
            await asyncio.to_thread(self._path.unlink)
        except FileNotFoundError:
            return
        logger.debug("Workflow state cleared at %s", self._path)
