"""
ProcessTracker: remembers spawned child processes so they can be killed
when the host quits instead of lingering as orphans.

A kill that finds the process already gone (ProcessLookupError) is normal.
Any other failure is logged and the bulk kill moves on to the next PID.
"""
from __future__ import annotations

import os
import signal
import time
from dataclasses import dataclass, field
from datetime import datetime

import psutil

from hostlog.logger import Logger

# Windows has no SIGKILL; TerminateProcess is what SIGTERM maps to there
SIGKILL = getattr(signal, "SIGKILL", signal.SIGTERM)


@dataclass
class ProcessInfo:
    pid: int
    name: str
    start_time: datetime = field(default_factory=datetime.now)


class ProcessTracker:
    def __init__(self, logger: Logger | None = None) -> None:
        self.log = logger or Logger("process-tracker")
        self._tracked: dict[int, ProcessInfo] = {}

    # ── Registration ─────────────────────────────────────────────────────
    def track_process(self, pid: int, name: str) -> None:
        if pid in self._tracked:
            self.log.info(f"Process {pid} ({name}) already tracked, updating")
        self._tracked[pid] = ProcessInfo(pid=pid, name=name)
        self.log.info(f"Now tracking process {pid} ({name}). Total: {len(self._tracked)}")

    def untrack_process(self, pid: int) -> None:
        info = self._tracked.pop(pid, None)
        if info:
            self.log.info(
                f"Untracked process {pid} ({info.name}). Remaining: {len(self._tracked)}"
            )

    def is_tracked(self, pid: int) -> bool:
        return pid in self._tracked

    @property
    def tracked_count(self) -> int:
        return len(self._tracked)

    def tracked_pids(self) -> list[int]:
        return list(self._tracked.keys())

    def get_process_info(self, pid: int) -> ProcessInfo | None:
        return self._tracked.get(pid)

    # ── Kill ─────────────────────────────────────────────────────────────
    def kill_process(self, pid: int, sig: int = signal.SIGTERM) -> bool:
        """Signal one tracked process. False if pid was not tracked."""
        info = self._tracked.get(pid)
        if not info:
            return False
        self._send(info, sig)
        # Untracked whatever the outcome
        self._tracked.pop(pid, None)
        return True

    def kill_all_tracked_processes(self, sig: int = signal.SIGTERM) -> None:
        count = len(self._tracked)
        if count == 0:
            self.log.info("No tracked processes to kill")
            return

        sig_name = _signal_name(sig)
        self.log.info(f"Killing {count} tracked processes with {sig_name}")
        for info in list(self._tracked.values()):
            self._send(info, sig)

        self._tracked.clear()
        self.log.info("All tracked processes cleared")

    def force_kill_all(self) -> None:
        self.kill_all_tracked_processes(SIGKILL)

    def _send(self, info: ProcessInfo, sig: int) -> None:
        try:
            os.kill(info.pid, sig)
            self.log.info(f"Sent {_signal_name(sig)} to process {info.pid} ({info.name})")
        except ProcessLookupError:
            self.log.info(f"Process {info.pid} ({info.name}) already exited")
        except Exception as exc:
            # PermissionError, or OverflowError/TypeError for a pid os.kill cannot take
            self.log.error(f"Failed to kill process {info.pid}", exc)

    # ── Status API ───────────────────────────────────────────────────────
    def status(self) -> list[dict]:
        result = []
        now = time.time()
        for pid, info in self._tracked.items():
            alive = psutil.pid_exists(pid)
            try:
                mem_mb = psutil.Process(pid).memory_info().rss / 1024 / 1024 if alive else 0
            except (psutil.NoSuchProcess, psutil.AccessDenied):
                mem_mb = 0
            result.append({
                "pid": pid,
                "name": info.name,
                "alive": alive,
                "mem_mb": round(mem_mb, 1),
                "uptime_s": round(now - info.start_time.timestamp(), 1),
            })
        return result


def _signal_name(sig: int) -> str:
    try:
        return signal.Signals(sig).name
    except ValueError:
        return str(sig)


# ── Module-level singleton ─────────────────────────────────────────────────
_tracker: ProcessTracker | None = None


def get_process_tracker() -> ProcessTracker:
    global _tracker
    if _tracker is None:
        _tracker = ProcessTracker()
    return _tracker


def dispose_process_tracker() -> None:
    """Kill everything tracked and drop the singleton. Call on app quit."""
    global _tracker
    if _tracker is not None:
        _tracker.kill_all_tracked_processes()
        _tracker.log.info("Disposed")
        _tracker = None
