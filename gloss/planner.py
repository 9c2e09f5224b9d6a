"""Choose the wire shape for a type from its constructors."""

from __future__ import annotations

from enum import Enum
from typing import Iterable, List, Sequence

from .models import Constructor
from .naming import to_snake_case


class EncodingMode(str, Enum):
    PLAIN_STRING = "plain_string"
    OBJECT_WITH_TYPE_TAG = "object_with_type_tag"
    OBJECT_WITH_NO_TYPE_TAG = "object_with_no_type_tag"


def determine_encoding_mode(constructors: Sequence[Constructor], disable_type_tag: bool = False) -> EncodingMode:
    """Pick how values are laid out.

    Types whose constructors carry no fields are plain strings. A single
    constructor with fields is an object without a discriminant. Everything
    else is an object whose first entry names the constructor, unless the type
    opted out with ``no_type_tag``.
    """
    if disable_type_tag:
        return EncodingMode.OBJECT_WITH_NO_TYPE_TAG
    if all(not constructor.fields for constructor in constructors):
        return EncodingMode.PLAIN_STRING
    if len(constructors) == 1:
        return EncodingMode.OBJECT_WITH_NO_TYPE_TAG
    return EncodingMode.OBJECT_WITH_TYPE_TAG


def constructor_tag(constructor: Constructor) -> str:
    return to_snake_case(constructor.name)


def expected_variants(constructors: Iterable[Constructor]) -> str:
    """Describe the accepted tags: `one of a, b`, a single tag, or `value`."""
    tags: List[str] = sorted({constructor_tag(constructor) for constructor in constructors})
    if not tags:
        return "value"
    if len(tags) == 1:
        return tags[0]
    return f"one of {', '.join(tags)}"


def unknown_variant_message(type_name: str, template: str | None, constructors: Iterable[Constructor]) -> str:
    if template is not None:
        return template.replace("{type}", type_name)
    return expected_variants(constructors)


__all__ = [
    "EncodingMode",
    "constructor_tag",
    "determine_encoding_mode",
    "expected_variants",
    "unknown_variant_message",
]
