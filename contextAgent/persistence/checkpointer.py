"""Checkpoint stores for per-thread state history.

A checkpoint is written after every node transition. Checkpoints are
append-only: sequence numbers for a thread start at 0, increase by one per
write and are never rewritten. Writes are serialized per thread id; different
threads never contend for the same lock.
"""

from __future__ import annotations

import logging
import os
import sqlite3
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

from .serde import dumps_state, loads_state

LOGGER = logging.getLogger("contextagent.persistence")


@dataclass(frozen=True, slots=True)
class Checkpoint:
    """Immutable, sequence-numbered snapshot of a thread's state."""

    thread_id: str
    sequence_number: int
    node: str
    """Node whose update produced this snapshot (``__start__`` for run input)."""
    state: Dict[str, Any]
    created_at: str = ""


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class BaseCheckpointStore(ABC):
    """Checkpoint persistence contract used by the graph engine."""

    def __init__(self) -> None:
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, thread_id: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(thread_id)
            if lock is None:
                lock = self._locks[thread_id] = threading.Lock()
            return lock

    def put(self, thread_id: str, state: Mapping[str, Any], *, node: str = "__external__") -> int:
        """Persist a snapshot and return its sequence number."""
        if not thread_id:
            raise ValueError("thread_id is required to write a checkpoint")
        payload = dumps_state(state)
        with self._lock_for(thread_id):
            sequence_number = self._append(thread_id, node, payload, _now())
        LOGGER.debug(f"Checkpoint {thread_id[:8]}#{sequence_number} written after '{node}'")
        return sequence_number

    def get(self, thread_id: str) -> List[Checkpoint]:
        """Return every checkpoint of a thread ordered by sequence number."""
        with self._lock_for(thread_id):
            rows = self._rows(thread_id)
        return [
            Checkpoint(
                thread_id=thread_id,
                sequence_number=seq,
                node=node,
                state=loads_state(payload),
                created_at=created_at,
            )
            for seq, node, payload, created_at in rows
        ]

    def latest(self, thread_id: str) -> Optional[Checkpoint]:
        """Return the most recent checkpoint of a thread, if any."""
        history = self.get(thread_id)
        return history[-1] if history else None

    @abstractmethod
    def _append(self, thread_id: str, node: str, payload: str, created_at: str) -> int:
        """Store one serialized snapshot and return its sequence number (lock held)."""

    @abstractmethod
    def _rows(self, thread_id: str) -> List[Tuple[int, str, str, str]]:
        """Return ``(seq, node, payload, created_at)`` rows ordered by seq."""

    @abstractmethod
    def list_threads(self) -> List[str]:
        """List thread ids that have at least one checkpoint."""

    @abstractmethod
    def delete_thread(self, thread_id: str) -> None:
        """Drop the whole history of a thread."""


class MemoryCheckpointStore(BaseCheckpointStore):
    """In-process checkpoint store (lost when the process exits)."""

    def __init__(self) -> None:
        super().__init__()
        self._threads: Dict[str, List[Tuple[int, str, str, str]]] = {}

    def _append(self, thread_id: str, node: str, payload: str, created_at: str) -> int:
        rows = self._threads.setdefault(thread_id, [])
        sequence_number = len(rows)
        rows.append((sequence_number, node, payload, created_at))
        return sequence_number

    def _rows(self, thread_id: str) -> List[Tuple[int, str, str, str]]:
        return list(self._threads.get(thread_id, []))

    def list_threads(self) -> List[str]:
        return list(self._threads)

    def delete_thread(self, thread_id: str) -> None:
        with self._lock_for(thread_id):
            self._threads.pop(thread_id, None)


class SqliteCheckpointStore(BaseCheckpointStore):
    """SQLite-backed checkpoint store.

    ``db_path=":memory:"`` keeps a single shared connection so the database
    survives between calls.
    """

    def __init__(self, db_path: str = "data/checkpoints.db"):
        super().__init__()
        self.db_path = db_path
        self._shared_conn: Optional[sqlite3.Connection] = None
        self._shared_guard = threading.Lock()

        if db_path == ":memory:":
            self._shared_conn = sqlite3.connect(db_path, check_same_thread=False)
        else:
            db_dir = os.path.dirname(db_path)
            if db_dir and not os.path.exists(db_dir):
                os.makedirs(db_dir, exist_ok=True)

        self._init_db()

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        if self._shared_conn is not None:
            with self._shared_guard:
                yield self._shared_conn
            return
        conn = sqlite3.connect(self.db_path, timeout=30)
        try:
            yield conn
        finally:
            conn.close()

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS checkpoints (
                    thread_id TEXT NOT NULL,
                    seq INTEGER NOT NULL,
                    node TEXT NOT NULL,
                    state_json TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    PRIMARY KEY (thread_id, seq)
                )
            """)
            conn.commit()

    def _append(self, thread_id: str, node: str, payload: str, created_at: str) -> int:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT COALESCE(MAX(seq), -1) + 1 FROM checkpoints WHERE thread_id = ?",
                (thread_id,),
            ).fetchone()
            sequence_number = int(row[0])
            conn.execute(
                """INSERT INTO checkpoints (thread_id, seq, node, state_json, created_at)
                   VALUES (?, ?, ?, ?, ?)""",
                (thread_id, sequence_number, node, payload, created_at),
            )
            conn.commit()
        return sequence_number

    def _rows(self, thread_id: str) -> List[Tuple[int, str, str, str]]:
        with self._connect() as conn:
            cursor = conn.execute(
                """SELECT seq, node, state_json, created_at FROM checkpoints
                   WHERE thread_id = ? ORDER BY seq""",
                (thread_id,),
            )
            return [tuple(row) for row in cursor.fetchall()]

    def list_threads(self) -> List[str]:
        with self._connect() as conn:
            cursor = conn.execute(
                """SELECT thread_id FROM checkpoints
                   GROUP BY thread_id ORDER BY MAX(created_at) DESC"""
            )
            return [row[0] for row in cursor.fetchall()]

    def delete_thread(self, thread_id: str) -> None:
        with self._lock_for(thread_id):
            with self._connect() as conn:
                conn.execute("DELETE FROM checkpoints WHERE thread_id = ?", (thread_id,))
                conn.commit()


def build_checkpointer(db_path: Optional[str] = None) -> BaseCheckpointStore:
    """Return a SQLite store when a path is configured, an in-memory one otherwise."""
    if db_path:
        LOGGER.info(f"Using SQLite checkpoint store: {db_path}")
        return SqliteCheckpointStore(db_path)
    LOGGER.info("Using in-memory checkpoint store")
    return MemoryCheckpointStore()


__all__ = [
    "BaseCheckpointStore",
    "Checkpoint",
    "MemoryCheckpointStore",
    "SqliteCheckpointStore",
    "build_checkpointer",
]
