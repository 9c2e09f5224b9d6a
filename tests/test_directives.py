"""Tests for gloss.directives."""

from __future__ import annotations

import logging

import pytest

from gloss.directives import (
    Scope,
    parse_directives,
    parse_field_directives,
    parse_file_directives,
    parse_type_directives,
    split_tokens,
)
from gloss.errors import DirectiveError
from gloss.models import FieldMarker, FieldNaming


def test_split_tokens_respects_quotes_and_parentheses() -> None:
    tokens = split_tokens('encoder(json), unknown_variant_message = "a, b", decoder_fn("x,y")')
    assert tokens == ['encoder(json)', 'unknown_variant_message = "a, b"', 'decoder_fn("x,y")']


def test_type_directives_collect_backends_and_flags() -> None:
    annotations = parse_type_directives(
        '/// gloss!: encoder(JSON), decoder, camelCase\n/// gloss!: type_tag = "kind", encoder(json)'
    )

    assert annotations.encoders == ["json"]
    assert annotations.generate_decoder is True
    assert annotations.field_naming is FieldNaming.CAMEL_CASE
    assert annotations.type_tag == "kind"
    assert annotations.disable_type_tag is False


def test_type_directives_build_overrides() -> None:
    annotations = parse_type_directives(
        '// gloss!: decoder, output_dir = "@/generated", separate_encoder_decoder = true, '
        'decoder_fn = "parse_{type_snake}", unknown_variant_message = "bad {type}"'
    )

    assert annotations.output_override is not None
    assert annotations.output_override.directory == "@/generated"
    assert annotations.output_override.separate_encoder_decoder is True
    assert annotations.fn_naming_override is not None
    assert annotations.fn_naming_override.decoder_function_naming == "parse_{type_snake}"
    assert annotations.fn_naming_override.encoder_function_naming is None
    assert annotations.unknown_variant_message == "bad {type}"


def test_type_without_directives_is_empty() -> None:
    annotations = parse_type_directives("/// A plain doc comment")

    assert annotations.encoders == []
    assert annotations.generate_decoder is False
    assert annotations.output_override is None


def test_field_optional_markers_win_over_required() -> None:
    annotations = parse_field_directives("// gloss!: must_exist, maybe_absent")
    assert annotations.marker is FieldMarker.OPTIONAL

    annotations = parse_field_directives("// gloss!: error_if_absent")
    assert annotations.marker is FieldMarker.REQUIRED

    assert parse_field_directives("").marker is FieldMarker.DEFAULT


def test_field_value_directives() -> None:
    annotations = parse_field_directives(
        '// gloss!: rename("user_name"), decoder_with = "profile/codec.name_decoder"'
    )

    assert annotations.rename == "user_name"
    assert annotations.decoder_with == "profile/codec.name_decoder"
    assert annotations.encoder_with is None


def test_file_directives_use_file_marker_only() -> None:
    config = parse_file_directives(
        [
            '// gloss-file!: output_dir = "./gen", encoder_fn = "encode_{type_snake}"',
            '// gloss!: output_dir = "ignored"',
        ]
    )

    assert config.output_override is not None
    assert config.output_override.directory == "./gen"
    assert config.fn_naming_override is not None
    assert config.fn_naming_override.encoder_function_naming == "encode_{type_snake}"


def test_unknown_directive_is_logged_and_ignored(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="gloss.directives"):
        directives = parse_directives("// gloss!: decoder, frobnicate", Scope.TYPE, context="type User")

    assert [directive.key for directive in directives] == ["decoder"]
    assert "Unknown directive `frobnicate` (type User)" in caplog.text


def test_strict_mode_rejects_unknown_and_misplaced_keys() -> None:
    with pytest.raises(DirectiveError):
        parse_directives("// gloss!: frobnicate", Scope.TYPE, strict=True)
    with pytest.raises(DirectiveError, match="not valid at field level"):
        parse_directives("// gloss!: decoder", Scope.FIELD, strict=True)


def test_value_kinds_are_validated() -> None:
    with pytest.raises(DirectiveError, match="does not take a value"):
        parse_directives("// gloss!: decoder(json)", Scope.TYPE, strict=True)
    with pytest.raises(DirectiveError, match="expects true or false"):
        parse_directives("// gloss!: separate_encoder_decoder = maybe", Scope.TYPE, strict=True)
    with pytest.raises(DirectiveError, match="requires a value"):
        parse_directives("// gloss!: encoder", Scope.TYPE, strict=True)
