"""
stdlib logging → LoggerRegistry bridge.
Lets third-party code that uses logging.getLogger() land in app.log.
"""
from __future__ import annotations

import logging
from typing import Any

from hostlog.core.serialize import describe_error
from hostlog.registry import LoggerRegistry, get_registry


def level_tag(levelno: int) -> str:
    if levelno >= logging.ERROR:
        return "error"  # CRITICAL included
    if levelno >= logging.WARNING:
        return "warn"
    if levelno >= logging.INFO:
        return "info"
    return "debug"


class RegistryHandler(logging.Handler):
    """Forwards each record to registry.log_event, module = record.name."""

    def __init__(self, registry: LoggerRegistry | None = None, level: int = logging.NOTSET) -> None:
        super().__init__(level)
        self._registry = registry

    @property
    def registry(self) -> LoggerRegistry:
        return self._registry or get_registry()

    def emit(self, record: logging.LogRecord) -> None:
        try:
            context: dict[str, Any] | None = None
            extra = getattr(record, "context", None)
            if isinstance(extra, dict):
                context = dict(extra)
            if record.exc_info and record.exc_info[1] is not None:
                context = dict(context or {})
                context["error"] = describe_error(record.exc_info[1])
            self.registry.log_event({
                "level": level_tag(record.levelno),
                "message": record.getMessage(),
                "context": context,
                "module": record.name,
            })
        except Exception:
            self.handleError(record)


def get_logger(name: str, registry: LoggerRegistry | None = None,
               level: str = "DEBUG") -> logging.Logger:
    """stdlib logger wired to the registry. Level filtering happens in hostlog too."""
    logger = logging.getLogger(name)
    if any(isinstance(h, RegistryHandler) for h in logger.handlers):
        return logger  # already configured

    logger.setLevel(getattr(logging, level.upper(), logging.DEBUG))
    logger.addHandler(RegistryHandler(registry))
    logger.propagate = False
    return logger
