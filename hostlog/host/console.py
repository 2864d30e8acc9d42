"""
Console sink: four channels (debug / log / warn / error).
debug + log go to stdout, warn + error to stderr. ANSI only on a TTY.
"""
from __future__ import annotations

import pprint
import sys
import traceback
from abc import ABC, abstractmethod
from typing import Any, TextIO

_RESET  = "\033[0m"
_DIM    = "\033[2m"
_YELLOW = "\033[33m"
_RED    = "\033[31m"


class Console(ABC):
    """Positional-argument console, first argument is the prefixed message."""

    @abstractmethod
    def debug(self, *args: Any) -> None: ...

    @abstractmethod
    def log(self, *args: Any) -> None: ...

    @abstractmethod
    def warn(self, *args: Any) -> None: ...

    @abstractmethod
    def error(self, *args: Any) -> None: ...


def format_arg(arg: Any) -> str:
    """Render one console argument. Strings pass through unchanged."""
    if isinstance(arg, str):
        return arg
    if isinstance(arg, BaseException):
        return "".join(
            traceback.format_exception(type(arg), arg, arg.__traceback__)
        ).rstrip()
    try:
        # pprint marks recursive containers instead of looping
        return pprint.pformat(arg, indent=2, width=100, sort_dicts=False)
    except Exception:
        return object.__repr__(arg)


class TerminalConsole(Console):
    def __init__(self, stdout: TextIO | None = None, stderr: TextIO | None = None) -> None:
        self._stdout = stdout
        self._stderr = stderr

    # Resolved per call so pytest's capsys and redirect_stdout are honoured
    @property
    def stdout(self) -> TextIO:
        return self._stdout or sys.stdout

    @property
    def stderr(self) -> TextIO:
        return self._stderr or sys.stderr

    def debug(self, *args: Any) -> None:
        self._write(self.stdout, _DIM, args)

    def log(self, *args: Any) -> None:
        self._write(self.stdout, "", args)

    def warn(self, *args: Any) -> None:
        self._write(self.stderr, _YELLOW, args)

    def error(self, *args: Any) -> None:
        self._write(self.stderr, _RED, args)

    def _write(self, stream: TextIO, style: str, args: tuple[Any, ...]) -> None:
        text = " ".join(format_arg(a) for a in args)
        if style and _isatty(stream):
            text = f"{style}{text}{_RESET}"
        print(text, file=stream, flush=True)


def _isatty(stream: TextIO) -> bool:
    try:
        return stream.isatty()
    except (AttributeError, ValueError):
        return False
