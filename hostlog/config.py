"""
HostLogConfig: optional YAML file + environment overrides.
Feeds the default DesktopPlatform; logger options are set per logger.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

DEFAULT_CONFIG_PATH = Path(__file__).with_name("config.yaml")

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass
class HostLogConfig:
    app_name: str = "HostLog"
    # Overrides the platform's per-user directory when set
    data_dir: Path | None = None
    # None → detect from the interpreter (sys.frozen)
    packaged: bool | None = None

    @classmethod
    def load(cls, yaml_path: str | Path | None = None) -> "HostLogConfig":
        """Load config from YAML file + environment variable overrides."""
        cfg = cls()

        yaml_path = Path(yaml_path) if yaml_path is not None else DEFAULT_CONFIG_PATH
        if yaml_path.exists():
            with yaml_path.open(encoding="utf-8") as f:
                data: dict[str, Any] = yaml.safe_load(f) or {}
            cfg._apply_yaml(data)

        # ENV overrides (always win)
        cfg._apply_env()
        return cfg

    def _apply_yaml(self, data: dict[str, Any]) -> None:
        for key, val in data.items():
            if key == "data_dir":
                self.data_dir = Path(val).expanduser() if val else None
            elif key == "packaged":
                self.packaged = _parse_bool(val)
            elif hasattr(self, key):
                setattr(self, key, val)

    def _apply_env(self) -> None:
        app_name = os.environ.get("HOSTLOG_APP_NAME", "")
        if app_name:
            self.app_name = app_name
        data_dir = os.environ.get("HOSTLOG_DATA_DIR", "")
        if data_dir:
            self.data_dir = Path(data_dir).expanduser()
        packaged = os.environ.get("HOSTLOG_PACKAGED", "")
        if packaged:
            self.packaged = _parse_bool(packaged)


def _parse_bool(val: Any) -> bool | None:
    if val is None or isinstance(val, bool):
        return val
    text = str(val).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    return None


# Module-level singleton, loaded once on first use
_config: HostLogConfig | None = None


def get_config() -> HostLogConfig:
    global _config
    if _config is None:
        _config = HostLogConfig.load()
    return _config


def reload_config(yaml_path: str | Path | None = None) -> HostLogConfig:
    global _config
    _config = HostLogConfig.load(yaml_path)
    # The default platform was built from the previous config
    from hostlog.host.platform import set_platform
    set_platform(None)
    return _config
