"""
LoggerRegistry: default "app" logger + per-module logger cache + log_event
routing for entries coming from other subsystems (IPC, stdlib bridge).

One registry is normally created per process (get_registry) and flushed
before exit (flush_all_loggers). Tests build their own instances.
"""
from __future__ import annotations

import threading
from collections.abc import Mapping
from typing import Any

from hostlog.core.events import LogEntry
from hostlog.host.console import Console
from hostlog.host.filesystem import FileSystem
from hostlog.host.platform import HostPlatform, get_platform
from hostlog.logger import Logger, LoggerOptions, LogLevel

DEFAULT_MODULE = "app"
FALLBACK_MODULE = "renderer"

# Every cached module logger shares these settings
CACHED_LOGGER_OPTIONS = {"file_logging": True, "defer_init": True}


class LoggerRegistry:
    def __init__(
        self,
        platform: HostPlatform | None = None,
        fs: FileSystem | None = None,
        console: Console | None = None,
    ) -> None:
        self._platform = platform
        self._fs = fs
        self._console = console
        self._lock = threading.Lock()
        self._default: Logger | None = None
        self._cache: dict[str, Logger] = {}

    @property
    def platform(self) -> HostPlatform:
        if self._platform is None:
            self._platform = get_platform()
        return self._platform

    # ── Factories ────────────────────────────────────────────────────────
    def create_logger(
        self,
        module_name: str,
        options: LoggerOptions | Mapping[str, Any] | None = None,
    ) -> Logger:
        """Fresh, uncached logger sharing this registry's collaborators."""
        return Logger(
            module_name,
            options,
            platform=self._platform,
            fs=self._fs,
            console=self._console,
        )

    @property
    def default_logger(self) -> Logger:
        with self._lock:
            if self._default is None:
                # is_packaged() is a plain flag; the data dir is only needed later
                packaged = self.platform.is_packaged()
                self._default = self.create_logger(DEFAULT_MODULE, {
                    "level": LogLevel.INFO if packaged else LogLevel.DEBUG,
                    "file_logging": packaged,
                    "defer_init": True,
                })
            return self._default

    def get_cached_logger(self, module_name: str) -> Logger:
        with self._lock:
            logger = self._cache.get(module_name)
            if logger is None:
                logger = self.create_logger(module_name, CACHED_LOGGER_OPTIONS)
                self._cache[module_name] = logger
            return logger

    def cached_modules(self) -> list[str]:
        return list(self._cache.keys())

    # ── Routing ──────────────────────────────────────────────────────────
    def log_event(self, entry: LogEntry | Mapping[str, Any]) -> None:
        """Dispatch a generic entry to the cached logger for its module."""
        if not isinstance(entry, LogEntry):
            entry = LogEntry.from_dict(entry)
        logger = self.get_cached_logger(entry.module or FALLBACK_MODULE)
        getattr(logger, entry.tag)(entry.message, entry.context)

    # ── Lifecycle ────────────────────────────────────────────────────────
    def flush_all(self) -> None:
        with self._lock:
            loggers = list(self._cache.values())
            if self._default is not None:
                loggers.insert(0, self._default)
        for logger in loggers:
            logger.flush()

    def reset(self) -> None:
        """Flush everything, then forget the default and cached loggers."""
        self.flush_all()
        with self._lock:
            self._default = None
            self._cache.clear()


# ── Module-level singleton ─────────────────────────────────────────────────
_registry: LoggerRegistry | None = None
_registry_lock = threading.Lock()


def get_registry() -> LoggerRegistry:
    global _registry
    with _registry_lock:
        if _registry is None:
            _registry = LoggerRegistry()
        return _registry


def reset_registry() -> None:
    global _registry
    with _registry_lock:
        registry, _registry = _registry, None
    if registry is not None:
        registry.reset()


def create_logger(
    module_name: str,
    options: LoggerOptions | Mapping[str, Any] | None = None,
) -> Logger:
    return get_registry().create_logger(module_name, options)


def get_default_logger() -> Logger:
    return get_registry().default_logger


def log_event(entry: LogEntry | Mapping[str, Any]) -> None:
    get_registry().log_event(entry)


def flush_all_loggers() -> None:
    """Flush the default and every cached module logger. Call before exit."""
    get_registry().flush_all()
