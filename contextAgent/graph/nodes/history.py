"""History-merge node - widens the context with the thread's checkpoint history.

Messages from every checkpoint of the thread come first, in checkpoint
order, followed by in-flight messages not seen yet. A message id appearing
more than once is kept at its first occurrence. The result goes to
``history_context``; the message log itself is left untouched.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, List, Set

from langchain_core.messages import BaseMessage

from contextAgent.graph.state import ThreadState
from contextAgent.persistence.checkpointer import BaseCheckpointStore
from contextAgent.utils.logging_utils import log_node_entry, log_node_exit

LOGGER = logging.getLogger("contextagent.nodes.history")


def merge_message_histories(*histories: Iterable[BaseMessage]) -> List[BaseMessage]:
    """Concatenate message sequences, dropping repeated message ids."""
    merged: List[BaseMessage] = []
    seen: Set[str] = set()
    for history in histories:
        for message in history:
            if message.id is not None:
                if message.id in seen:
                    continue
                seen.add(message.id)
            merged.append(message)
    return merged


def build_history_merge_node(*, checkpointer: BaseCheckpointStore) -> Callable:
    def history_merge_node(state: ThreadState) -> dict:
        log_node_entry(LOGGER, "history_merge", state)

        thread_id = state.get("thread_id")
        checkpoints = checkpointer.get(thread_id) if thread_id else []
        merged = merge_message_histories(
            *(checkpoint.state.get("messages", []) for checkpoint in checkpoints),
            state.get("messages", []),
        )
        LOGGER.info(f"Merged {len(checkpoints)} checkpoint(s) into {len(merged)} message(s)")

        updates = {"history_context": merged}
        log_node_exit(LOGGER, "history_merge", updates)
        return updates

    return history_merge_node


__all__ = ["build_history_merge_node", "merge_message_histories"]
