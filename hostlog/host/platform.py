"""
Host platform: writable user-data directory + packaged-build detection.

The directory lookup may fail while the host is still starting up;
DesktopPlatform models that with a ready flag.
"""
from __future__ import annotations

import os
import sys
from abc import ABC, abstractmethod
from pathlib import Path


class PlatformNotReadyError(RuntimeError):
    pass


class HostPlatform(ABC):
    @abstractmethod
    def user_data_dir(self) -> Path:
        """Base writable directory. May raise before the host is ready."""

    @abstractmethod
    def is_packaged(self) -> bool:
        """True for a bundled/installed build, False for a dev checkout."""


class DesktopPlatform(HostPlatform):
    """
    Per-user application directory:
      Windows: %LOCALAPPDATA%/<app>  (falls back to %APPDATA%)
      macOS:   ~/Library/Application Support/<app>
      other:   $XDG_CONFIG_HOME/<app>  or  ~/.config/<app>
    """

    def __init__(
        self,
        app_name: str,
        data_dir: str | Path | None = None,
        packaged: bool | None = None,
        ready: bool = True,
    ) -> None:
        self.app_name = app_name
        self._data_dir = Path(data_dir).expanduser() if data_dir else None
        self._packaged = packaged
        self._ready = ready

    def mark_ready(self) -> None:
        self._ready = True

    @property
    def ready(self) -> bool:
        return self._ready

    def user_data_dir(self) -> Path:
        if not self._ready:
            raise PlatformNotReadyError(
                "user data directory requested before the platform is ready"
            )
        if self._data_dir is not None:
            return self._data_dir.resolve()
        return (_os_data_root() / self.app_name).resolve()

    def is_packaged(self) -> bool:
        if self._packaged is not None:
            return self._packaged
        # PyInstaller, cx_Freeze and py2exe all set sys.frozen
        return bool(getattr(sys, "frozen", False))


def _os_data_root() -> Path:
    if os.name == "nt":
        base = os.environ.get("LOCALAPPDATA") or os.environ.get("APPDATA")
        if base:
            return Path(base)
        return Path.home() / "AppData" / "Local"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support"
    xdg = os.environ.get("XDG_CONFIG_HOME", "")
    return Path(xdg) if xdg else Path.home() / ".config"


# ── Module-level singleton ─────────────────────────────────────────────────
_platform: HostPlatform | None = None


def get_platform() -> HostPlatform:
    global _platform
    if _platform is None:
        from hostlog.config import get_config
        cfg = get_config()
        _platform = DesktopPlatform(
            cfg.app_name, data_dir=cfg.data_dir, packaged=cfg.packaged,
        )
    return _platform


def set_platform(platform: HostPlatform | None) -> None:
    """Install the host's own platform object (None restores the default)."""
    global _platform
    _platform = platform
