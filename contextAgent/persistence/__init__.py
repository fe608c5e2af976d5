"""Persistence: checkpoint stores and state serialization."""

from .checkpointer import (
    BaseCheckpointStore,
    Checkpoint,
    MemoryCheckpointStore,
    SqliteCheckpointStore,
    build_checkpointer,
)
from .serde import dumps_state, loads_state

__all__ = [
    "BaseCheckpointStore",
    "Checkpoint",
    "MemoryCheckpointStore",
    "SqliteCheckpointStore",
    "build_checkpointer",
    "dumps_state",
    "loads_state",
]
