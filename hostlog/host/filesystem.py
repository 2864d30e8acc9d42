"""
Filesystem primitives used by file logging and rotation.
Each call is a blocking black-box operation that may raise OSError.
"""
from __future__ import annotations

import os
from abc import ABC, abstractmethod
from pathlib import Path


class FileSystem(ABC):
    """The six primitives the logger needs. Swap in a fake for tests."""

    @abstractmethod
    def exists(self, path: Path) -> bool: ...

    @abstractmethod
    def make_dirs(self, path: Path) -> None:
        """Create path and any missing parents."""

    @abstractmethod
    def append_text(self, path: Path, content: str) -> None: ...

    @abstractmethod
    def size(self, path: Path) -> int:
        """Size of path in bytes."""

    @abstractmethod
    def rename(self, src: Path, dst: Path) -> None:
        """Move src to dst, replacing dst if present."""

    @abstractmethod
    def remove(self, path: Path) -> None: ...


class LocalFileSystem(FileSystem):
    def exists(self, path: Path) -> bool:
        return Path(path).exists()

    def make_dirs(self, path: Path) -> None:
        Path(path).mkdir(parents=True, exist_ok=True)

    def append_text(self, path: Path, content: str) -> None:
        with Path(path).open("a", encoding="utf-8") as f:
            f.write(content)

    def size(self, path: Path) -> int:
        return Path(path).stat().st_size

    def rename(self, src: Path, dst: Path) -> None:
        # os.replace overwrites on Windows too, os.rename does not
        os.replace(src, dst)

    def remove(self, path: Path) -> None:
        Path(path).unlink()
