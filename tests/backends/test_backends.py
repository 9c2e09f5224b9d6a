"""Tests for encoder backends and their discovery."""

from __future__ import annotations

from types import SimpleNamespace
from typing import List

import pytest

from gloss.backends import BackendRegistry, EncoderBackend, JsonBackend


class EchoBackend(EncoderBackend):
    """Minimal backend used to validate registration and discovery."""

    name = "echo"

    def module_imports(self) -> List[str]:
        return ["import echo"]

    def return_type(self) -> str:
        return "echo.Value"

    def render_object(self, indent, fields, closing_indent) -> str:
        return "echo.object(" + ", ".join(key for key, _ in fields) + ")"

    def encode_empty_object(self, indent: str) -> str:
        return f"{indent}echo.empty()"

    def encode_string_literal(self, value: str) -> str:
        return f'echo.literal("{value}")'

    def encode_string(self, value_expr: str) -> str:
        return f"echo.string({value_expr})"

    def encode_int(self, value_expr: str) -> str:
        return f"echo.int({value_expr})"

    def encode_float(self, value_expr: str) -> str:
        return f"echo.float({value_expr})"

    def encode_bool(self, value_expr: str) -> str:
        return f"echo.bool({value_expr})"

    def encode_nullable(self, value_expr: str, inner_encoder: str) -> str:
        return f"echo.nullable({value_expr}, {inner_encoder})"

    def encode_array(self, value_expr: str, inner_encoder: str) -> str:
        return f"echo.array({value_expr}, {inner_encoder})"


def test_json_backend_renders_objects() -> None:
    backend = JsonBackend()

    rendered = backend.encode_object(
        "  ", [("name", "json.string(name)"), ("age", "json.int(age)")], "  "
    )

    assert rendered == (
        '  json.object([\n'
        '    #("name", json.string(name)),\n'
        '    #("age", json.int(age))\n'
        '  ])'
    )
    assert backend.encode_object("  ", [], "  ") == "  json.object([])"


def test_json_backend_primitives() -> None:
    backend = JsonBackend()

    assert backend.return_type() == "json.Json"
    assert backend.module_imports() == ["import gleam/json"]
    assert backend.encode_string_literal("circle") == 'json.string("circle")'
    assert backend.encode_float("x") == "json.float(x)"
    assert backend.encode_bool("x") == "json.bool(x)"
    assert backend.required_packages() == ["gleam_json"]


def test_registry_has_builtin_json_backend() -> None:
    registry = BackendRegistry()

    assert "json" in registry
    assert "JSON" in registry
    assert isinstance(registry.get("Json"), JsonBackend)
    assert registry.get("msgpack") is None


def test_with_backend_returns_extended_copy() -> None:
    registry = BackendRegistry()

    extended = registry.with_backend("Echo", EchoBackend)

    assert "echo" not in registry
    assert isinstance(extended.get("echo"), EchoBackend)
    assert sorted(extended.tags()) == ["echo", "json"]


def test_registry_rejects_non_backends() -> None:
    with pytest.raises(TypeError):
        BackendRegistry({"bad": object()})


def test_discover_loads_entry_points(monkeypatch) -> None:
    echo_entry = SimpleNamespace(name="echo", value="plugins:EchoBackend", load=lambda: EchoBackend)
    shadowed = SimpleNamespace(name="json", value="plugins:Other", load=lambda: EchoBackend)

    class DummyEntryPoints(list):
        def select(self, **kwargs):
            if kwargs.get("group") == "gloss.backends":
                return self
            return []

    monkeypatch.setattr(
        "gloss.backends.metadata.entry_points",
        lambda: DummyEntryPoints([echo_entry, shadowed]),
        raising=False,
    )

    registry = BackendRegistry.discover()

    assert isinstance(registry.get("echo"), EchoBackend)
    assert isinstance(registry.get("json"), JsonBackend)
