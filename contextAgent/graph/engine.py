"""Directed-graph execution engine.

Build a graph over a TypedDict state schema, compile it, then run it per
conversation thread:

    graph = StateGraph(ThreadState)
    graph.add_node("orchestrator", orchestrator_node)
    graph.add_edge(START, "orchestrator")
    graph.add_conditional_edges("orchestrator", route_planner, {"runner": "runner"})
    ...
    app = graph.compile(checkpointer=MemoryCheckpointStore())
    final_state = await app.ainvoke({"task": "..."}, thread_id="t-1")

Execution is strictly sequential: run a node, merge its partial update into
the state (reducers for ``Annotated`` fields, overwrite otherwise), persist a
checkpoint, then resolve the next node from the unconditional edge or from the
router's label. A label missing from the path map is a fatal ``RoutingError``.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import types
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import (
    Annotated,
    Any,
    Callable,
    Dict,
    FrozenSet,
    Iterable,
    List,
    Literal,
    Mapping,
    Optional,
    Union,
    get_args,
    get_origin,
    get_type_hints,
)

from contextAgent.persistence.checkpointer import BaseCheckpointStore, Checkpoint
from contextAgent.utils.error_handler import (
    GraphDefinitionError,
    GraphRecursionError,
    InvalidUpdateError,
    RoutingError,
)
from contextAgent.utils.logging_utils import log_routing_decision

LOGGER = logging.getLogger("contextagent.engine")

START = "__start__"
END = "__end__"

NodeAction = Callable[[Dict[str, Any]], Any]
Router = Callable[[Dict[str, Any]], Any]
Reducer = Callable[[Any, Any], Any]


def _normalize_label(label: Any) -> Any:
    return label.value if isinstance(label, Enum) else label


def _labels_from_annotation(annotation: Any) -> Optional[FrozenSet[Any]]:
    """Extract the finite label set a ``Literal``/``Enum`` return type allows."""
    if annotation is None:
        return None
    origin = get_origin(annotation)
    if origin is Literal:
        return frozenset(_normalize_label(arg) for arg in get_args(annotation))
    if origin is Union or origin is types.UnionType:
        labels: set = set()
        for arg in get_args(annotation):
            part = _labels_from_annotation(arg)
            if part is None:
                return None
            labels |= part
        return frozenset(labels)
    if isinstance(annotation, type) and issubclass(annotation, Enum):
        return frozenset(member.value for member in annotation)
    return None


def router_labels(router: Router) -> Optional[FrozenSet[Any]]:
    """Return the labels a router can produce, from its return annotation."""
    target = router if inspect.isfunction(router) or inspect.ismethod(router) else getattr(router, "__call__", None)
    if target is None:
        return None
    try:
        hints = get_type_hints(target)
    except (NameError, TypeError) as e:
        LOGGER.warning(f"Cannot resolve annotations of router {router!r}: {e}")
        return None
    return _labels_from_annotation(hints.get("return"))


def state_reducers(state_schema: type) -> Dict[str, Optional[Reducer]]:
    """Map every state field to its reducer (``None`` means overwrite)."""
    hints = get_type_hints(state_schema, include_extras=True)
    reducers: Dict[str, Optional[Reducer]] = {}
    for name, hint in hints.items():
        reducer = None
        if get_origin(hint) is Annotated:
            reducer = next((meta for meta in hint.__metadata__ if callable(meta)), None)
        reducers[name] = reducer
    return reducers


@dataclass(frozen=True)
class Branch:
    """Conditional edge: a router plus its validated label → node table."""

    router: Router
    path_map: Mapping[Any, str]
    labels: FrozenSet[Any]


class StateGraph:
    """Mutable graph definition; call :meth:`compile` to get a runnable graph."""

    def __init__(self, state_schema: type) -> None:
        self.state_schema = state_schema
        self.reducers = state_reducers(state_schema)
        self.nodes: Dict[str, NodeAction] = {}
        self.edges: Dict[str, str] = {}
        self.branches: Dict[str, Branch] = {}
        self.entry_point: Optional[str] = None

    def add_node(self, name: str, action: NodeAction) -> "StateGraph":
        if name in (START, END):
            raise GraphDefinitionError(f"'{name}' is a reserved node name")
        if name in self.nodes:
            raise GraphDefinitionError(f"Node '{name}' already exists")
        if not callable(action):
            raise GraphDefinitionError(f"Node '{name}' action is not callable")
        self.nodes[name] = action
        return self

    def add_edge(self, source: str, target: str) -> "StateGraph":
        if source == END:
            raise GraphDefinitionError("END cannot have outgoing edges")
        if target == START:
            raise GraphDefinitionError("START cannot be an edge target")
        if source == START:
            return self.set_entry_point(target)
        if source in self.edges or source in self.branches:
            raise GraphDefinitionError(f"Node '{source}' already has an outgoing edge")
        self.edges[source] = target
        return self

    def add_conditional_edges(
        self,
        source: str,
        router: Router,
        path_map: Mapping[Any, str],
        *,
        labels: Optional[Iterable[Any]] = None,
    ) -> "StateGraph":
        """Route out of ``source`` by the label ``router`` returns.

        The router's possible labels come from ``labels`` or from its
        ``Literal[...]``/``Enum`` return annotation; all of them must be keys
        of ``path_map`` (checked at compile time).
        """
        if source in (START, END):
            raise GraphDefinitionError(f"Conditional edges from '{source}' are not supported")
        if source in self.edges or source in self.branches:
            raise GraphDefinitionError(f"Node '{source}' already has an outgoing edge")

        declared = frozenset(_normalize_label(label) for label in labels) if labels is not None else router_labels(router)
        if declared is None:
            raise GraphDefinitionError(
                f"Cannot determine the labels of router for '{source}': "
                "annotate its return type with Literal[...]/Enum or pass labels="
            )

        normalized_map = {_normalize_label(label): target for label, target in path_map.items()}
        self.branches[source] = Branch(router=router, path_map=normalized_map, labels=declared)
        return self

    def set_entry_point(self, name: str) -> "StateGraph":
        if self.entry_point is not None:
            raise GraphDefinitionError(f"Entry point already set to '{self.entry_point}'")
        self.entry_point = name
        return self

    def validate(self) -> None:
        """Fail fast on any inconsistency in the definition."""
        if self.entry_point is None:
            raise GraphDefinitionError("Graph has no entry point (add an edge from START)")
        if self.entry_point not in self.nodes:
            raise GraphDefinitionError(f"Entry point '{self.entry_point}' is not a node")

        known_targets = set(self.nodes) | {END}

        for source, target in self.edges.items():
            if source not in self.nodes:
                raise GraphDefinitionError(f"Edge source '{source}' is not a node")
            if target not in known_targets:
                raise GraphDefinitionError(f"Edge '{source}' → '{target}' points to an unknown node")

        for source, branch in self.branches.items():
            if source not in self.nodes:
                raise GraphDefinitionError(f"Conditional edge source '{source}' is not a node")
            for label, target in branch.path_map.items():
                if target not in known_targets:
                    raise GraphDefinitionError(
                        f"Label '{label}' of '{source}' points to an unknown node '{target}'"
                    )
            missing = branch.labels - set(branch.path_map)
            if missing:
                raise GraphDefinitionError(
                    f"Router of '{source}' can return unmapped label(s): {sorted(map(str, missing))}"
                )

        for name in self.nodes:
            if name not in self.edges and name not in self.branches:
                raise GraphDefinitionError(f"Node '{name}' has no outgoing edge")

    def compile(
        self,
        checkpointer: Optional[BaseCheckpointStore] = None,
        *,
        step_limit: Optional[int] = None,
    ) -> "CompiledGraph":
        self.validate()
        return CompiledGraph(
            nodes=dict(self.nodes),
            edges=dict(self.edges),
            branches=dict(self.branches),
            entry_point=self.entry_point,
            reducers=dict(self.reducers),
            checkpointer=checkpointer,
            step_limit=step_limit,
        )


def _snapshot(state: Mapping[str, Any]) -> Dict[str, Any]:
    """Copy handed to nodes and routers so they cannot mutate the live state."""
    return {key: list(value) if isinstance(value, list) else value for key, value in state.items()}


class CompiledGraph:
    """Executable graph bound to an (optional) checkpoint store."""

    def __init__(
        self,
        *,
        nodes: Dict[str, NodeAction],
        edges: Dict[str, str],
        branches: Dict[str, Branch],
        entry_point: str,
        reducers: Dict[str, Optional[Reducer]],
        checkpointer: Optional[BaseCheckpointStore],
        step_limit: Optional[int],
    ) -> None:
        self.nodes = nodes
        self.edges = edges
        self.branches = branches
        self.entry_point = entry_point
        self.reducers = reducers
        self.checkpointer = checkpointer
        self.step_limit = step_limit

    # ========== Public API ==========

    async def ainvoke(
        self,
        input: Optional[Mapping[str, Any]],
        *,
        thread_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Run the graph from its entry point; ``input=None`` resumes ``thread_id``."""
        if input is None:
            if thread_id is None:
                raise ValueError("thread_id is required to resume a run")
            return await self.aresume(thread_id)

        thread_id = thread_id or input.get("thread_id") or str(uuid.uuid4())
        seed = dict(input)
        if "thread_id" in self.reducers:
            seed["thread_id"] = thread_id

        state = self._merge({}, seed, node=START)
        await self._checkpoint(thread_id, state, START)
        LOGGER.info(f"Run started on thread {thread_id[:8]}... at '{self.entry_point}'")
        return await self._run(state, self.entry_point, thread_id)

    async def aresume(self, thread_id: str) -> Dict[str, Any]:
        """Continue an abandoned run from the thread's last checkpoint.

        A checkpoint not written by one of this graph's nodes (run input, or a
        snapshot stored directly through the checkpointer) restarts at the
        entry point.
        """
        if self.checkpointer is None:
            raise ValueError(f"No checkpoint found for thread {thread_id}")
        latest = await asyncio.to_thread(self.checkpointer.latest, thread_id)
        if latest is None:
            raise ValueError(f"No checkpoint found for thread {thread_id}")

        state = latest.state
        if latest.node in self.nodes:
            next_node = self._resolve_next(latest.node, state)
        else:
            if latest.node != START:
                LOGGER.warning(f"Checkpoint #{latest.sequence_number} was written by '{latest.node}', not a graph node")
            next_node = self.entry_point
        if next_node == END:
            LOGGER.info(f"Thread {thread_id[:8]}... already finished, nothing to resume")
            return state

        LOGGER.info(f"Resuming thread {thread_id[:8]}... at '{next_node}' (checkpoint #{latest.sequence_number})")
        return await self._run(state, next_node, thread_id)

    def invoke(self, input: Optional[Mapping[str, Any]], *, thread_id: Optional[str] = None) -> Dict[str, Any]:
        """Synchronous wrapper around :meth:`ainvoke`."""
        return asyncio.run(self.ainvoke(input, thread_id=thread_id))

    def get_state(self, thread_id: str) -> Optional[Checkpoint]:
        if self.checkpointer is None:
            return None
        return self.checkpointer.latest(thread_id)

    def get_state_history(self, thread_id: str) -> List[Checkpoint]:
        if self.checkpointer is None:
            return []
        return self.checkpointer.get(thread_id)

    # ========== Execution ==========

    async def _run(self, state: Dict[str, Any], current: str, thread_id: str) -> Dict[str, Any]:
        steps = 0
        while current != END:
            if self.step_limit is not None and steps >= self.step_limit:
                raise GraphRecursionError(
                    f"Step limit of {self.step_limit} reached on thread {thread_id} before END"
                )
            steps += 1
            LOGGER.debug(f"Step {steps}: running node '{current}'")

            update = self.nodes[current](_snapshot(state))
            if inspect.isawaitable(update):
                update = await update

            state = self._merge(state, update, node=current)
            await self._checkpoint(thread_id, state, current)
            current = self._resolve_next(current, state)

        LOGGER.info(f"Run on thread {thread_id[:8]}... reached END after {steps} step(s)")
        return state

    def _merge(self, state: Mapping[str, Any], update: Any, *, node: str) -> Dict[str, Any]:
        """Apply a partial update, returning a new state (the old one is untouched)."""
        if update is None:
            return dict(state)
        if not isinstance(update, Mapping):
            raise InvalidUpdateError(
                f"Node '{node}' returned {type(update).__name__}, expected a dict of state updates"
            )

        unknown = set(update) - set(self.reducers)
        if unknown:
            raise InvalidUpdateError(f"Node '{node}' returned unknown state key(s): {sorted(unknown)}")

        merged = dict(state)
        for key, value in update.items():
            reducer = self.reducers[key]
            if reducer is None:
                merged[key] = value
                continue
            try:
                merged[key] = reducer(state.get(key), value)
            except (TypeError, ValueError) as e:
                raise InvalidUpdateError(f"Node '{node}' produced an invalid '{key}' update: {e}") from e
        return merged

    async def _checkpoint(self, thread_id: str, state: Mapping[str, Any], node: str) -> None:
        # Store I/O (SQLite, locks) runs off the event loop
        if self.checkpointer is not None:
            await asyncio.to_thread(self.checkpointer.put, thread_id, state, node=node)

    def _resolve_next(self, node: str, state: Mapping[str, Any]) -> str:
        if node in self.edges:
            return self.edges[node]

        branch = self.branches[node]
        label = _normalize_label(branch.router(_snapshot(state)))
        try:
            target = branch.path_map[label]
        except (KeyError, TypeError):
            raise RoutingError(node, label, map(str, branch.path_map)) from None

        log_routing_decision(LOGGER, node, str(label), f"→ node '{target}'")
        return target


__all__ = [
    "END",
    "START",
    "Branch",
    "CompiledGraph",
    "StateGraph",
    "router_labels",
    "state_reducers",
]
