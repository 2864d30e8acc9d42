"""
Module-scoped logger: leveled console output + optional app.log file sink.

File logging can be deferred to the first log call (defer_init) so a logger
may be built before the host platform can resolve its data directory.
Writes may be buffered (buffer_size) and the file is size-checked every
rotation_check_interval disk writes rather than on every write.

Nothing here raises to the caller once the logger exists: file problems are
reported on the console error channel and recorded on the instance.
"""
from __future__ import annotations

import dataclasses
import threading
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum, IntEnum
from pathlib import Path
from typing import Any

from hostlog.core.rotation import RotationOutcome, RotationResult, rotate_if_needed
from hostlog.core.serialize import describe_error, safe_stringify
from hostlog.host.console import Console, TerminalConsole
from hostlog.host.filesystem import FileSystem, LocalFileSystem
from hostlog.host.platform import HostPlatform, get_platform

LOGS_DIR_NAME = "logs"
LOG_FILE_NAME = "app.log"


class LogLevel(IntEnum):
    DEBUG = 0
    INFO = 1
    WARN = 2
    ERROR = 3

    @classmethod
    def parse(cls, value: "LogLevel | int | str") -> "LogLevel":
        if isinstance(value, str):
            name = value.strip().upper()
            if name == "WARNING":
                name = "WARN"
            try:
                return cls[name]
            except KeyError:
                raise ValueError(f"Unknown log level: {value!r}") from None
        return cls(value)


# Console channel per level
_CHANNELS = {
    LogLevel.DEBUG: "debug",
    LogLevel.INFO: "log",
    LogLevel.WARN: "warn",
    LogLevel.ERROR: "error",
}


@dataclass
class LoggerOptions:
    level: LogLevel = LogLevel.INFO
    file_logging: bool = False
    max_file_size: int = 10 * 1024 * 1024  # 10MB
    max_backups: int = 5
    defer_init: bool = False
    rotation_check_interval: int = 100
    buffer_size: int = 0  # 0 = write-through
    # Problems found while sanitising; the Logger reports them
    issues: list[ValueError] = field(default_factory=list, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        try:
            self.level = LogLevel.parse(self.level)
        except ValueError as exc:
            self.issues.append(ValueError(f"level: {exc}, using INFO"))
            self.level = LogLevel.INFO
        # Out-of-range values are raised to the minimum, unusable ones reset
        self.max_file_size = self._int_option("max_file_size", 1, 10 * 1024 * 1024)
        self.max_backups = self._int_option("max_backups", 1, 5)
        self.rotation_check_interval = self._int_option("rotation_check_interval", 1, 100)
        self.buffer_size = self._int_option("buffer_size", 0, 0)

    def _int_option(self, name: str, minimum: int, default: int) -> int:
        value = getattr(self, name)
        try:
            number = int(value)
        except (TypeError, ValueError):
            self.issues.append(ValueError(f"{name}={value!r} is not a number, using {default}"))
            return default
        if number < minimum:
            self.issues.append(ValueError(f"{name}={number} is below {minimum}, using {minimum}"))
            return minimum
        return number

    @classmethod
    def from_overlay(
        cls, overlay: "LoggerOptions | Mapping[str, Any] | None" = None
    ) -> "LoggerOptions":
        """Defaults with overlay applied. Unknown keys are ignored."""
        if overlay is None:
            return cls()
        if isinstance(overlay, LoggerOptions):
            copy = dataclasses.replace(overlay)
            copy.issues = list(overlay.issues)
            return copy
        names = {f.name for f in dataclasses.fields(cls) if f.init}
        return cls(**{k: v for k, v in overlay.items() if k in names})


class FileLoggingStatus(str, Enum):
    NOT_ATTEMPTED = "not_attempted"
    READY = "ready"
    DISABLED = "disabled"  # setup failed; permanent for this instance


def format_timestamp() -> str:
    """UTC ISO-8601 with milliseconds, e.g. 2024-05-01T09:30:00.123Z"""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class Logger:
    def __init__(
        self,
        module_name: str,
        options: LoggerOptions | Mapping[str, Any] | None = None,
        *,
        platform: HostPlatform | None = None,
        fs: FileSystem | None = None,
        console: Console | None = None,
    ) -> None:
        if not module_name:
            raise ValueError("module_name must be a non-empty string")
        self._module_name = module_name
        self.options = LoggerOptions.from_overlay(options)
        self._platform = platform
        self._fs = fs or LocalFileSystem()
        self.console = console or TerminalConsole()

        self._lock = threading.RLock()
        self._logs_dir: Path | None = None
        self._log_file_path: Path | None = None
        self._status = FileLoggingStatus.NOT_ATTEMPTED
        self._write_count = 0
        self._buffer: list[str] = []
        self.last_error: BaseException | None = None
        self.last_rotation: RotationResult | None = None

        for issue in self.options.issues:
            self.console.error("[Logger] Invalid option:", issue)
            self.last_error = issue

        if self.options.file_logging and not self.options.defer_init:
            self._init_file_logging()

    # ── Accessors ────────────────────────────────────────────────────────
    @property
    def module_name(self) -> str:
        return self._module_name

    @property
    def level(self) -> LogLevel:
        return self.options.level

    @level.setter
    def level(self, value: LogLevel | int | str) -> None:
        try:
            self.options.level = LogLevel.parse(value)
        except ValueError as exc:
            # Current level stays in force
            self.console.error("[Logger] Invalid log level:", exc)
            self.last_error = exc

    @property
    def file_logging_enabled(self) -> bool:
        return self.options.file_logging

    @property
    def file_status(self) -> FileLoggingStatus:
        return self._status

    @property
    def logs_dir(self) -> Path | None:
        return self._logs_dir

    @property
    def log_file_path(self) -> Path | None:
        return self._log_file_path

    @property
    def buffered_count(self) -> int:
        return len(self._buffer)

    @property
    def platform(self) -> HostPlatform:
        # Looked up lazily: resolving the default may read config files
        if self._platform is None:
            self._platform = get_platform()
        return self._platform

    # ── File logging setup ───────────────────────────────────────────────
    def _init_file_logging(self) -> None:
        with self._lock:
            if self._status is not FileLoggingStatus.NOT_ATTEMPTED:
                return
            try:
                logs_dir = Path(self.platform.user_data_dir()) / LOGS_DIR_NAME
                if not self._fs.exists(logs_dir):
                    self._fs.make_dirs(logs_dir)
            except Exception as exc:
                self.console.error("[Logger] Failed to initialize file logging:", exc)
                self.last_error = exc
                self.options.file_logging = False
                self._status = FileLoggingStatus.DISABLED
                return
            self._logs_dir = logs_dir
            self._log_file_path = logs_dir / LOG_FILE_NAME
            self._status = FileLoggingStatus.READY

    def _ensure_file_logging(self) -> None:
        if self.options.file_logging and self._status is FileLoggingStatus.NOT_ATTEMPTED:
            self._init_file_logging()

    # ── Leveled API ──────────────────────────────────────────────────────
    def debug(self, message: str, context: Mapping[str, Any] | None = None) -> None:
        self._log(LogLevel.DEBUG, message, context)

    def info(self, message: str, context: Mapping[str, Any] | None = None) -> None:
        self._log(LogLevel.INFO, message, context)

    def warn(self, message: str, context: Mapping[str, Any] | None = None) -> None:
        self._log(LogLevel.WARN, message, context)

    warning = warn

    def error(
        self,
        message: str,
        error: BaseException | Mapping[str, Any] | None = None,
    ) -> None:
        if isinstance(error, BaseException):
            context: Mapping[str, Any] | None = {"error": describe_error(error)}
        else:
            context = error
        self._log(LogLevel.ERROR, message, context)

    # ── Emission ─────────────────────────────────────────────────────────
    def _log(self, level: LogLevel, message: str, context: Mapping[str, Any] | None) -> None:
        if level < self.options.level:
            return

        prefix = f"[{format_timestamp()}] [{level.name}] [{self._module_name}]"

        args: list[Any] = [f"{prefix} {message}"]
        if context is not None:
            args.append(context)
        getattr(self.console, _CHANNELS[level])(*args)

        if self.options.file_logging:
            self._ensure_file_logging()
            if self._log_file_path is not None:
                self._file_log(prefix, message, context)

    def _file_log(self, prefix: str, message: str, context: Mapping[str, Any] | None) -> None:
        context_str = f" {safe_stringify(context)}" if context is not None else ""
        entry = f"{prefix} {message}{context_str}\n"

        with self._lock:
            if self.options.buffer_size > 0:
                self._buffer.append(entry)
                if len(self._buffer) >= self.options.buffer_size:
                    self._flush_buffer()
            else:
                self._write_to_file(entry)

    def _write_to_file(self, content: str) -> bool:
        if self._log_file_path is None:
            return False
        with self._lock:
            self._write_count += 1
            if self._write_count >= self.options.rotation_check_interval:
                try:
                    self._rotate_if_needed()
                finally:
                    self._write_count = 0
            try:
                self._fs.append_text(self._log_file_path, content)
            except Exception as exc:
                # Entry still reached the console
                self.console.error("[Logger] Failed to write to log file:", exc)
                self.last_error = exc
                return False
            return True

    def _flush_buffer(self) -> bool:
        with self._lock:
            if not self._buffer:
                return False
            pending, self._buffer = self._buffer, []
            return self._write_to_file("".join(pending))

    def flush(self) -> bool:
        """Write buffered entries now. Call before process exit."""
        return self._flush_buffer()

    def _rotate_if_needed(self) -> RotationResult | None:
        if self._log_file_path is None:
            return None
        result = rotate_if_needed(
            self._fs,
            self._log_file_path,
            self.options.max_file_size,
            self.options.max_backups,
        )
        self.last_rotation = result
        if result.outcome is RotationOutcome.FAILED:
            self.console.error("[Logger] Log rotation failed:", result.error)
            self.last_error = result.error
        return result

    def __repr__(self) -> str:
        return (
            f"Logger({self._module_name!r}, level={self.options.level.name}, "
            f"file={self._status.value})"
        )
