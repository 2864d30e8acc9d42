"""Tests for hostlog host collaborators (platform, filesystem, console) and config loading."""
import os
import pytest
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from hostlog import config as config_module
from hostlog.config import HostLogConfig, get_config, reload_config
from hostlog.host import platform as platform_module
from hostlog.host.console import TerminalConsole
from hostlog.host.filesystem import LocalFileSystem
from hostlog.host.platform import DesktopPlatform, PlatformNotReadyError, get_platform

ENV_KEYS = ("HOSTLOG_APP_NAME", "HOSTLOG_DATA_DIR", "HOSTLOG_PACKAGED")


@pytest.fixture
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setattr(config_module, "_config", None)
    monkeypatch.setattr(platform_module, "_platform", None)


# ── DesktopPlatform ──────────────────────────────────────────────────────────

class TestDesktopPlatform:
    def test_not_ready_raises(self, tmp_path):
        p = DesktopPlatform("App", data_dir=tmp_path, ready=False)
        with pytest.raises(PlatformNotReadyError):
            p.user_data_dir()
        p.mark_ready()
        assert p.ready
        assert p.user_data_dir() == tmp_path.resolve()

    @pytest.mark.skipif(os.name == "nt" or sys.platform == "darwin",
                        reason="XDG layout only")
    def test_xdg_location(self, tmp_path, monkeypatch):
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        assert DesktopPlatform("App").user_data_dir() == (tmp_path / "App").resolve()

    def test_packaged_override(self):
        assert DesktopPlatform("App", packaged=True).is_packaged() is True
        assert DesktopPlatform("App", packaged=False).is_packaged() is False

    def test_packaged_detected_from_frozen(self, monkeypatch):
        monkeypatch.setattr(sys, "frozen", True, raising=False)
        assert DesktopPlatform("App").is_packaged() is True
        monkeypatch.delattr(sys, "frozen")
        assert DesktopPlatform("App").is_packaged() is False


# ── Config ───────────────────────────────────────────────────────────────────

class TestHostLogConfig:
    def test_defaults_without_file(self, clean_env, tmp_path):
        cfg = HostLogConfig.load(tmp_path / "missing.yaml")
        assert cfg.app_name == "HostLog"
        assert cfg.data_dir is None
        assert cfg.packaged is None

    def test_yaml_values(self, clean_env, tmp_path):
        path = tmp_path / "hostlog.yaml"
        path.write_text(
            f"app_name: Desk\ndata_dir: {tmp_path / 'data'}\npackaged: 'yes'\nunknown: 1\n",
            encoding="utf-8",
        )
        cfg = HostLogConfig.load(path)
        assert cfg.app_name == "Desk"
        assert cfg.data_dir == tmp_path / "data"
        assert cfg.packaged is True

    def test_env_wins(self, clean_env, tmp_path, monkeypatch):
        path = tmp_path / "hostlog.yaml"
        path.write_text("app_name: Desk\npackaged: true\n", encoding="utf-8")
        monkeypatch.setenv("HOSTLOG_APP_NAME", "FromEnv")
        monkeypatch.setenv("HOSTLOG_PACKAGED", "0")
        monkeypatch.setenv("HOSTLOG_DATA_DIR", str(tmp_path))
        cfg = HostLogConfig.load(path)
        assert cfg.app_name == "FromEnv"
        assert cfg.packaged is False
        assert cfg.data_dir == tmp_path

    def test_default_path_beside_module(self, clean_env):
        path = config_module.DEFAULT_CONFIG_PATH
        assert path.parent == Path(config_module.__file__).parent
        assert path.is_file()
        assert HostLogConfig.load(path).app_name == "HostLog"

    def test_singleton_and_reload(self, clean_env, tmp_path):
        assert get_config() is get_config()
        path = tmp_path / "hostlog.yaml"
        path.write_text(f"app_name: Reloaded\ndata_dir: {tmp_path}\n", encoding="utf-8")
        stale = get_platform()
        cfg = reload_config(path)
        assert get_config() is cfg
        fresh = get_platform()
        assert fresh is not stale
        assert fresh.app_name == "Reloaded"
        assert fresh.user_data_dir() == tmp_path.resolve()


# ── LocalFileSystem ──────────────────────────────────────────────────────────

class TestLocalFileSystem:
    def test_primitives(self, tmp_path):
        fs = LocalFileSystem()
        logs = tmp_path / "a" / "b"
        assert not fs.exists(logs)
        fs.make_dirs(logs)
        fs.make_dirs(logs)
        assert fs.exists(logs)

        live = logs / "app.log"
        fs.append_text(live, "one\n")
        fs.append_text(live, "two\n")
        assert live.read_text(encoding="utf-8") == "one\ntwo\n"
        assert fs.size(live) == 8

        target = logs / "app.log.1"
        target.write_text("old", encoding="utf-8")
        fs.rename(live, target)
        assert not fs.exists(live)
        assert target.read_text(encoding="utf-8") == "one\ntwo\n"

        fs.remove(target)
        assert not fs.exists(target)

    def test_failures_raise_oserror(self, tmp_path):
        fs = LocalFileSystem()
        with pytest.raises(OSError):
            fs.size(tmp_path / "nope")
        with pytest.raises(OSError):
            fs.remove(tmp_path / "nope")


# ── TerminalConsole ──────────────────────────────────────────────────────────

class TestTerminalConsole:
    def test_streams(self, capsys):
        console = TerminalConsole()
        console.debug("dbg")
        console.log("hello", {"a": 1})
        console.warn("careful")
        console.error("bad")
        out, err = capsys.readouterr()
        assert out == "dbg\nhello {'a': 1}\n"
        assert err == "careful\nbad\n"

    def test_exception_argument(self, capsys):
        TerminalConsole().error("[Logger] Failed:", ValueError("x"))
        err = capsys.readouterr().err
        assert err.startswith("[Logger] Failed: ValueError: x")

    def test_recursive_structure(self, capsys):
        ctx = {"k": 1}
        ctx["self"] = ctx
        TerminalConsole().log("cycle", ctx)
        assert "Recursion" in capsys.readouterr().out
