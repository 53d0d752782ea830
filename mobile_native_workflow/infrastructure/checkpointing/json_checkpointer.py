"""LangGraph checkpoint saver whose whole state exports to a single JSON document."""

import base64
import json
import random
from collections.abc import AsyncIterator, Iterator, Sequence
from typing import Any

from langchain_core.runnables import RunnableConfig
from langgraph.checkpoint.base import (
    WRITES_IDX_MAP,
    BaseCheckpointSaver,
    ChannelVersions,
    Checkpoint,
    CheckpointMetadata,
    CheckpointTuple,
    get_checkpoint_id,
)

STATE_VERSION = 1


class CheckpointConfigError(ValueError):
    """A checkpoint config or exported document the saver cannot work with."""


class JsonCheckpointSaver(BaseCheckpointSaver[str]):
    """In-memory checkpoint saver with JSON export/import.

    Exported envelope:
        {"version": 1,
         "storage": {thread_id: [record, ...]},          # latest first
         "writes": {"<thread_id>:<checkpoint_id>": "<json {task:idx: [task, channel, type, b64]}>"}}

    Each record holds the serde-encoded checkpoint and metadata as base64
    strings together with their serde type tags, its checkpoint id and
    namespace, and parentId when it has a parent.
    """

    def __init__(self, *, serde: Any = None) -> None:
        super().__init__(serde=serde)
        self._storage: dict[str, list[dict[str, Any]]] = {}
        self._writes: dict[str, dict[str, list[Any]]] = {}

    # Encoding

    def _encode(self, obj: Any) -> tuple[str, str]:
        type_, data = self.serde.dumps_typed(obj)
        return type_, base64.b64encode(data).decode("ascii")

    def _decode(self, type_: str, data: str) -> Any:
        return self.serde.loads_typed((type_, base64.b64decode(data)))

    @staticmethod
    def _thread_id(config: RunnableConfig) -> str:
        thread_id = (config.get("configurable") or {}).get("thread_id")
        if not thread_id:
            raise CheckpointConfigError("Checkpoint config is missing configurable.thread_id")
        return str(thread_id)

    def _to_tuple(self, thread_id: str, record: dict[str, Any]) -> CheckpointTuple:
        checkpoint_id = record["checkpointId"]
        checkpoint_ns = record.get("checkpointNs", "")
        writes = self._writes.get(f"{thread_id}:{checkpoint_id}", {})
        pending_writes = [
            (task_id, channel, self._decode(type_, data)) for task_id, channel, type_, data in writes.values()
        ]
        parent_id = record.get("parentId")
        parent_config: RunnableConfig | None = None
        if parent_id:
            parent_config = {
                "configurable": {
                    "thread_id": thread_id,
                    "checkpoint_ns": checkpoint_ns,
                    "checkpoint_id": parent_id,
                }
            }
        return CheckpointTuple(
            config={
                "configurable": {
                    "thread_id": thread_id,
                    "checkpoint_ns": checkpoint_ns,
                    "checkpoint_id": checkpoint_id,
                }
            },
            checkpoint=self._decode(record["checkpointType"], record["checkpoint"]),
            metadata=self._decode(record["metadataType"], record["metadata"]),
            parent_config=parent_config,
            pending_writes=pending_writes,
        )

    # Sync API

    def get_tuple(self, config: RunnableConfig) -> CheckpointTuple | None:
        """Latest checkpoint of the thread, or the one named by checkpoint_id."""
        thread_id = self._thread_id(config)
        checkpoint_ns = (config.get("configurable") or {}).get("checkpoint_ns", "")
        checkpoint_id = get_checkpoint_id(config)
        for record in self._storage.get(thread_id, []):
            if record.get("checkpointNs", "") != checkpoint_ns:
                continue
            if checkpoint_id and record["checkpointId"] != checkpoint_id:
                continue
            return self._to_tuple(thread_id, record)
        return None

    def list(
        self,
        config: RunnableConfig | None,
        *,
        filter: dict[str, Any] | None = None,
        before: RunnableConfig | None = None,
        limit: int | None = None,
    ) -> Iterator[CheckpointTuple]:
        """Checkpoints newest first, optionally filtered by metadata and bounded by before/limit."""
        configurable = (config or {}).get("configurable") or {}
        thread_ids = [str(configurable["thread_id"])] if configurable.get("thread_id") else [*self._storage]
        checkpoint_ns = configurable.get("checkpoint_ns")
        config_checkpoint_id = get_checkpoint_id(config) if config else None
        before_id = get_checkpoint_id(before) if before else None

        remaining = limit
        for thread_id in thread_ids:
            for record in self._storage.get(thread_id, []):
                if checkpoint_ns is not None and record.get("checkpointNs", "") != checkpoint_ns:
                    continue
                if config_checkpoint_id and record["checkpointId"] != config_checkpoint_id:
                    continue
                if before_id and record["checkpointId"] >= before_id:
                    continue
                checkpoint_tuple = self._to_tuple(thread_id, record)
                if filter and not all(checkpoint_tuple.metadata.get(k) == v for k, v in filter.items()):
                    continue
                if remaining is not None:
                    if remaining <= 0:
                        return
                    remaining -= 1
                yield checkpoint_tuple

    def put(
        self,
        config: RunnableConfig,
        checkpoint: Checkpoint,
        metadata: CheckpointMetadata,
        new_versions: ChannelVersions,
    ) -> RunnableConfig:
        """Store checkpoint as the newest record of its thread."""
        thread_id = self._thread_id(config)
        configurable = config.get("configurable") or {}
        checkpoint_ns = configurable.get("checkpoint_ns", "")
        checkpoint_type, checkpoint_data = self._encode(checkpoint)
        metadata_type, metadata_data = self._encode(metadata)
        record: dict[str, Any] = {
            "checkpointId": checkpoint["id"],
            "checkpointNs": checkpoint_ns,
            "checkpoint": checkpoint_data,
            "checkpointType": checkpoint_type,
            "metadata": metadata_data,
            "metadataType": metadata_type,
        }
        if parent_id := configurable.get("checkpoint_id"):
            record["parentId"] = parent_id
        self._storage.setdefault(thread_id, []).insert(0, record)
        return {
            "configurable": {
                "thread_id": thread_id,
                "checkpoint_ns": checkpoint_ns,
                "checkpoint_id": checkpoint["id"],
            }
        }

    def put_writes(
        self,
        config: RunnableConfig,
        writes: Sequence[tuple[str, Any]],
        task_id: str,
        task_path: str = "",
    ) -> None:
        """Store intermediate writes linked to the checkpoint in config."""
        thread_id = self._thread_id(config)
        checkpoint_id = get_checkpoint_id(config)
        if not checkpoint_id:
            raise CheckpointConfigError("Checkpoint config is missing configurable.checkpoint_id")
        bucket = self._writes.setdefault(f"{thread_id}:{checkpoint_id}", {})
        for idx, (channel, value) in enumerate(writes):
            write_idx = WRITES_IDX_MAP.get(channel, idx)
            key = f"{task_id}:{write_idx}"
            # Regular writes are recorded once; special channels (errors, interrupts) overwrite
            if write_idx >= 0 and key in bucket:
                continue
            type_, data = self._encode(value)
            bucket[key] = [task_id, channel, type_, data]

    def delete_thread(self, thread_id: str) -> None:
        self._storage.pop(thread_id, None)
        prefix = f"{thread_id}:"
        for key in [k for k in self._writes if k.startswith(prefix)]:
            del self._writes[key]

    def get_next_version(self, current: str | None, channel: None = None) -> str:
        if current is None:
            current_v = 0
        elif isinstance(current, int):
            current_v = current
        else:
            current_v = int(current.split(".")[0])
        return f"{current_v + 1:032}.{random.random():016}"

    # Async API

    async def aget_tuple(self, config: RunnableConfig) -> CheckpointTuple | None:
        return self.get_tuple(config)

    async def alist(
        self,
        config: RunnableConfig | None,
        *,
        filter: dict[str, Any] | None = None,
        before: RunnableConfig | None = None,
        limit: int | None = None,
    ) -> AsyncIterator[CheckpointTuple]:
        for checkpoint_tuple in self.list(config, filter=filter, before=before, limit=limit):
            yield checkpoint_tuple

    async def aput(
        self,
        config: RunnableConfig,
        checkpoint: Checkpoint,
        metadata: CheckpointMetadata,
        new_versions: ChannelVersions,
    ) -> RunnableConfig:
        return self.put(config, checkpoint, metadata, new_versions)

    async def aput_writes(
        self,
        config: RunnableConfig,
        writes: Sequence[tuple[str, Any]],
        task_id: str,
        task_path: str = "",
    ) -> None:
        self.put_writes(config, writes, task_id, task_path)

    async def adelete_thread(self, thread_id: str) -> None:
        self.delete_thread(thread_id)

    # JSON export / import

    def export_state(self) -> str:
        """Serialize every thread's checkpoints and pending writes."""
        return json.dumps(
            {
                "version": STATE_VERSION,
                "storage": self._storage,
                "writes": {key: json.dumps(bucket) for key, bucket in self._writes.items()},
            }
        )

    def import_state(self, serialized: str) -> None:
        """Replace the saver contents with a previously exported document."""
        data = json.loads(serialized)
        version = data.get("version", STATE_VERSION)
        if version != STATE_VERSION:
            raise CheckpointConfigError(f"Unsupported checkpoint state version: {version}")
        self._storage = {
            thread_id: [{"checkpointNs": "", **record} for record in records]
            for thread_id, records in (data.get("storage") or {}).items()
        }
        self._writes = {
            key: json.loads(bucket) if isinstance(bucket, str) else dict(bucket)
            for key, bucket in (data.get("writes") or {}).items()
        }
