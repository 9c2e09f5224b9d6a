"""Tests for encoding-mode planning and variant messages."""

from __future__ import annotations

from gloss.models import Constructor, Field
from gloss.planner import EncodingMode, determine_encoding_mode, expected_variants, unknown_variant_message
from gloss.types import NamedType

_FIELD = Field(label="value", type_expr=NamedType("Int"))


def test_all_zero_field_constructors_are_plain_strings() -> None:
    constructors = (Constructor("Red"), Constructor("Green"))

    assert determine_encoding_mode(constructors) is EncodingMode.PLAIN_STRING
    assert determine_encoding_mode((Constructor("Only"),)) is EncodingMode.PLAIN_STRING


def test_single_constructor_with_fields_has_no_tag() -> None:
    assert determine_encoding_mode((Constructor("User", (_FIELD,)),)) is EncodingMode.OBJECT_WITH_NO_TYPE_TAG


def test_mixed_constructors_use_type_tag() -> None:
    constructors = (Constructor("Circle", (_FIELD,)), Constructor("Empty"))

    assert determine_encoding_mode(constructors) is EncodingMode.OBJECT_WITH_TYPE_TAG


def test_disable_type_tag_wins() -> None:
    constructors = (Constructor("Circle", (_FIELD,)), Constructor("Square", (_FIELD,)))

    assert determine_encoding_mode(constructors, disable_type_tag=True) is EncodingMode.OBJECT_WITH_NO_TYPE_TAG


def test_expected_variants_are_sorted_and_deduplicated() -> None:
    constructors = (Constructor("Square"), Constructor("Circle"), Constructor("Square"))

    assert expected_variants(constructors) == "one of circle, square"
    assert expected_variants((Constructor("OnlyOne"),)) == "only_one"
    assert expected_variants(()) == "value"


def test_unknown_variant_message_template() -> None:
    constructors = (Constructor("A"), Constructor("B"))

    assert unknown_variant_message("Shape", "Unknown {type} variant", constructors) == "Unknown Shape variant"
    assert unknown_variant_message("Shape", None, constructors) == "one of a, b"
