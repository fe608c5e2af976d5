"""JSON serialization of thread state snapshots.

LangChain messages and enums are tagged with ``__type__`` so snapshots come
back as the same objects they were written from.
"""

from __future__ import annotations

import importlib
import json
from enum import Enum
from typing import Any, Dict, Mapping

from langchain_core.messages import BaseMessage, message_to_dict, messages_from_dict


def _encode(obj: Any) -> Any:
    if isinstance(obj, BaseMessage):
        return {"__type__": "message", "data": message_to_dict(obj)}
    if isinstance(obj, Enum):
        cls = type(obj)
        return {"__type__": "enum", "cls": f"{cls.__module__}:{cls.__qualname__}", "value": obj.value}
    if isinstance(obj, Mapping):
        return {str(k): _encode(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_encode(item) for item in obj]
    if obj is None or isinstance(obj, (str, int, float, bool)):
        return obj
    raise TypeError(f"Cannot serialize state value of type {type(obj).__name__}")


def _load_enum(path: str, value: Any) -> Enum:
    module_name, _, qualname = path.partition(":")
    target: Any = importlib.import_module(module_name)
    for part in qualname.split("."):
        target = getattr(target, part)
    return target(value)


def _decode(obj: Any) -> Any:
    if isinstance(obj, dict):
        kind = obj.get("__type__")
        if kind == "message":
            return messages_from_dict([obj["data"]])[0]
        if kind == "enum":
            return _load_enum(obj["cls"], obj["value"])
        return {k: _decode(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_decode(item) for item in obj]
    return obj


def dumps_state(state: Mapping[str, Any]) -> str:
    """Serialize a state snapshot to a JSON string."""
    return json.dumps(_encode(state), ensure_ascii=False)


def loads_state(payload: str) -> Dict[str, Any]:
    """Rebuild a state snapshot from :func:`dumps_state` output."""
    return _decode(json.loads(payload))


__all__ = ["dumps_state", "loads_state"]
