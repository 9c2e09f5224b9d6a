"""Tests for output units, import rendering and module text."""

from __future__ import annotations

import pytest

from gloss.backends import JsonBackend
from gloss.codecs import ensure_import
from gloss.config import OutputConfig
from gloss.errors import GenerationError
from gloss.models import ImportEntry, PathMode
from gloss.output import (
    GeneratedUnit,
    TypeCode,
    merge_units,
    render_import,
    render_imports,
    render_module,
)

HEADER = (
    "// This file was generated by gloss\n"
    "//\n"
    "// Do not modify this file directly.\n"
    "// Any changes will be overwritten when gloss regenerates this file.\n"
)


def _unit(**kwargs) -> GeneratedUnit:
    return GeneratedUnit(output_config=OutputConfig(), path_mode=PathMode.FILE_RELATIVE, **kwargs)


def test_render_import_exposes_types_and_values() -> None:
    entry = ImportEntry("models/user", "user", values={"User", "Admin"}, types={"User"})

    assert render_import(entry) == "import models/user.{type User, Admin, User}"
    assert render_import(ImportEntry("models/user", "models_user")) == "import models/user as models_user"


def test_render_imports_orders_standard_then_custom() -> None:
    custom = {}
    ensure_import(custom, "shop/order")
    ensure_import(custom, "models/user")

    rendered = render_imports(
        has_decoder=True,
        uses_option_helpers=True,
        has_encoder=True,
        backends=[JsonBackend(), JsonBackend()],
        custom_imports=custom,
    )

    assert rendered.splitlines() == [
        "import gleam/dynamic/decode",
        "import gleam/json",
        "import gleam/option",
        "import models/user as models_user",
        "import shop/order as shop_order",
    ]


def test_option_import_only_with_decoder() -> None:
    rendered = render_imports(uses_option_helpers=True, has_encoder=True, backends=[JsonBackend()])

    assert rendered == "import gleam/json"


def test_render_module_layout() -> None:
    text = render_module("import gleam/json", ["pub fn a() {}", "pub fn b() {}"])

    assert text == HEADER + "\nimport gleam/json\n\npub fn a() {}\n\npub fn b() {}\n"


def test_render_module_without_imports() -> None:
    assert render_module("", ["pub fn a() {}"]) == HEADER + "\npub fn a() {}\n"


def test_combined_code_interleaves_decoder_and_encoder() -> None:
    unit = _unit()
    unit.add_type(TypeCode("A", "app", ("A",), decoder="dec_a", encoder="enc_a"), {}, {"json": JsonBackend()}, False)
    unit.add_type(TypeCode("B", "app", ("B",), decoder="dec_b"), {}, {}, False)

    combined = unit.get_combined_code()

    assert combined.index("dec_a") < combined.index("enc_a") < combined.index("dec_b")
    assert "import gleam/dynamic/decode\nimport gleam/json\n" in combined
    assert unit.get_encoder_code(has_imports=False) == HEADER + "\nenc_a\n"
    assert "enc_a" not in unit.get_decoder_code()


def test_type_imports_are_optional() -> None:
    unit = _unit()
    unit.add_type(TypeCode("Color", "models/color", ("Red", "Green"), decoder="dec"), {}, {}, False)

    assert "import models/color" not in unit.get_decoder_code()
    assert "import models/color.{type Color, Green, Red} as models_color" in unit.get_decoder_code(
        include_type_imports=True
    )


def test_option_alias_conflict_is_rejected() -> None:
    imports = {}
    ensure_import(imports, "option")
    unit = _unit()

    with pytest.raises(GenerationError, match="import alias `option`"):
        unit.add_type(TypeCode("A", "app", decoder="dec"), imports, {}, True)


def test_merge_units_folds_types_and_flags() -> None:
    first = _unit()
    first.add_type(TypeCode("A", "app", decoder="dec_a"), {}, {}, False)
    second = _unit()
    imports = {}
    ensure_import(imports, "models/user")
    second.add_type(TypeCode("B", "app", encoder="enc_b"), imports, {"json": JsonBackend()}, True)

    merged = merge_units([first, second])

    assert [item.type_name for item in merged.types] == ["A", "B"]
    assert merged.uses_option_helpers is True
    assert list(merged.backends) == ["json"]
    assert "models/user" in merged.imports
    with pytest.raises(ValueError):
        merge_units([])
