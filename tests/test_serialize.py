"""Tests for hostlog.core.serialize — safe_stringify and describe_error."""
import json
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from hostlog.core.serialize import CIRCULAR, UNSERIALIZABLE, describe_error, safe_stringify


@dataclass
class Point:
    x: int
    y: int


class Unprintable:
    def __str__(self):
        raise RuntimeError("no text for you")


class TestSafeStringify:
    def test_plain_mapping_two_space_indent(self):
        assert safe_stringify({"user": "u1", "n": 2}) == '{\n  "user": "u1",\n  "n": 2\n}'

    def test_self_reference_placeholder(self):
        ctx = {"key": "value"}
        ctx["self"] = ctx
        out = safe_stringify(ctx)
        assert json.loads(out) == {"key": "value", "self": CIRCULAR}

    def test_list_cycle(self):
        items = [1]
        items.append(items)
        assert json.loads(safe_stringify(items)) == [1, CIRCULAR]

    def test_shared_reference_is_not_a_cycle(self):
        shared = {"x": 1}
        out = json.loads(safe_stringify({"a": shared, "b": shared}))
        assert out == {"a": {"x": 1}, "b": {"x": 1}}

    def test_exception_expanded(self):
        out = json.loads(safe_stringify({"err": ValueError("bad")}))
        assert out["err"] == {"name": "ValueError", "message": "bad", "stack": "ValueError: bad"}

    def test_non_string_keys(self):
        assert json.loads(safe_stringify({1: "a", None: "b"})) == {"1": "a", "None": "b"}

    def test_containers_and_dataclasses(self):
        out = json.loads(safe_stringify({"t": (1, 2), "p": Point(3, 4), "b": b"raw"}))
        assert out == {"t": [1, 2], "p": {"x": 3, "y": 4}, "b": "raw"}

    def test_unknown_objects_use_str(self):
        stamp = datetime(2024, 5, 1, 9, 30)
        assert json.loads(safe_stringify({"at": stamp})) == {"at": str(stamp)}

    def test_broken_str_degrades(self):
        assert json.loads(safe_stringify({"obj": Unprintable()})) == {"obj": UNSERIALIZABLE}

    def test_never_raises_on_broken_mapping(self):
        class Broken(dict):
            def items(self):
                raise RuntimeError("items exploded")

        out = safe_stringify(Broken(a=1))
        assert isinstance(out, str)

    def test_unicode_kept(self):
        assert "héllo" in safe_stringify({"m": "héllo"})


class TestDescribeError:
    def test_without_traceback(self):
        info = describe_error(KeyError("missing"))
        assert info["name"] == "KeyError"
        assert info["stack"] == "KeyError: 'missing'"

    def test_with_traceback(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError as exc:
            info = describe_error(exc)
        assert info["message"] == "boom"
        assert info["stack"].startswith("Traceback")
        assert info["stack"].endswith("RuntimeError: boom")
