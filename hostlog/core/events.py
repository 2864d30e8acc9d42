"""
LogEntry: the generic record other subsystems (IPC handlers, bridges)
hand to the registry.
"""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

LEVEL_TAGS = ("debug", "info", "warn", "error")


def _as_context(value: Any) -> dict[str, Any] | None:
    # Scalars and lists are wrapped so the payload still reaches the sink
    if value is None:
        return None
    if isinstance(value, Mapping):
        return dict(value)
    return {"context": value}


@dataclass
class LogEntry:
    level: str
    message: str
    context: dict[str, Any] | None = None
    timestamp: str | None = None
    module: str | None = None

    @property
    def tag(self) -> str:
        """Normalised level tag; anything unrecognised is "info"."""
        tag = str(self.level).strip().lower()
        if tag == "warning":
            tag = "warn"
        return tag if tag in LEVEL_TAGS else "info"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "LogEntry":
        context = data.get("context")
        return cls(
            level=str(data.get("level", "info")),
            message=str(data.get("message", "")),
            context=_as_context(context),
            timestamp=data.get("timestamp"),
            module=data.get("module"),
        )
