"""
Size-based rotation with a shifting backup chain.

    app.log      live file
    app.log.1    most recently rotated
    app.log.N    oldest retained

The walk goes from max_backups-1 down to 1: the oldest retained slot is
deleted, every other existing backup moves up one index. Missing indices
are skipped, so a gap left by an interrupted rotation is carried down the
chain rather than treated as corruption. Finally the live file becomes .1.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from hostlog.host.filesystem import FileSystem


class RotationOutcome(str, Enum):
    MISSING = "missing"              # no live file yet
    BELOW_THRESHOLD = "below_threshold"
    ROTATED = "rotated"
    FAILED = "failed"


@dataclass
class RotationResult:
    outcome: RotationOutcome
    size: int | None = None
    error: BaseException | None = None

    @property
    def rotated(self) -> bool:
        return self.outcome is RotationOutcome.ROTATED


def backup_path(log_file: Path, index: int) -> Path:
    return log_file.with_name(f"{log_file.name}.{index}")


def rotate_if_needed(
    fs: FileSystem,
    log_file: Path,
    max_file_size: int,
    max_backups: int,
) -> RotationResult:
    """Rotate log_file when it has reached max_file_size. Never raises."""
    size: int | None = None
    try:
        if not fs.exists(log_file):
            return RotationResult(RotationOutcome.MISSING)

        size = fs.size(log_file)
        if size < max_file_size:
            return RotationResult(RotationOutcome.BELOW_THRESHOLD, size=size)

        # Slot max_backups is never produced by the walk; drop any stale copy
        stale = backup_path(log_file, max_backups)
        if max_backups > 1 and fs.exists(stale):
            fs.remove(stale)

        for i in range(max_backups - 1, 0, -1):
            src = backup_path(log_file, i)
            if not fs.exists(src):
                continue
            if i == max_backups - 1:
                fs.remove(src)
            else:
                fs.rename(src, backup_path(log_file, i + 1))

        fs.rename(log_file, backup_path(log_file, 1))
        return RotationResult(RotationOutcome.ROTATED, size=size)
    except Exception as exc:
        return RotationResult(RotationOutcome.FAILED, size=size, error=exc)
