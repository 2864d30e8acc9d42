"""
Context serialization for the file sink.
Never raises: cycles become "[Circular]", exceptions become
{name, message, stack}, anything else unknown falls back to str().
"""
from __future__ import annotations

import dataclasses
import json
import traceback
from collections.abc import Mapping
from typing import Any

CIRCULAR = "[Circular]"
UNSERIALIZABLE = "[Unserializable]"


def describe_error(exc: BaseException) -> dict[str, Any]:
    """Expand an exception into a plain {name, message, stack} mapping."""
    if exc.__traceback__ is not None:
        stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    else:
        stack = "".join(traceback.format_exception_only(type(exc), exc))
    return {
        "name": type(exc).__name__,
        "message": str(exc),
        "stack": stack.rstrip("\n"),
    }


def safe_stringify(obj: Any, indent: int = 2) -> str:
    try:
        return json.dumps(_plain(obj, set()), indent=indent, ensure_ascii=False, default=str)
    except Exception:
        # Best effort: RecursionError on absurd depth, a __str__ that raises, ...
        try:
            return repr(obj)
        except Exception:
            return UNSERIALIZABLE


def _plain(value: Any, ancestors: set[int]) -> Any:
    """Convert value into JSON-ready data. ancestors holds ids on the current path."""
    if value is None or isinstance(value, (str, int, float, bool)):
        return value

    if id(value) in ancestors:
        return CIRCULAR

    if isinstance(value, BaseException):
        return describe_error(value)

    ancestors.add(id(value))
    try:
        if isinstance(value, Mapping):
            return {str(k): _plain(v, ancestors) for k, v in value.items()}
        if isinstance(value, (list, tuple, set, frozenset)):
            return [_plain(v, ancestors) for v in value]
        if dataclasses.is_dataclass(value) and not isinstance(value, type):
            return {
                f.name: _plain(getattr(value, f.name), ancestors)
                for f in dataclasses.fields(value)
            }
        if isinstance(value, bytes):
            return value.decode("utf-8", errors="replace")
        return _to_text(value)
    finally:
        ancestors.discard(id(value))


def _to_text(value: Any) -> str:
    try:
        return str(value)
    except Exception:
        return UNSERIALIZABLE
