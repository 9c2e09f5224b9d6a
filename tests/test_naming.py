"""Tests for gloss.naming."""

from __future__ import annotations

import pytest

from gloss.naming import (
    default_module_alias,
    has_backend_placeholder,
    module_alias,
    render_fn_pattern,
    to_camel_case,
    to_pascal_case,
    to_snake_case,
)


@pytest.mark.parametrize(
    ("value", "expected"),
    [("UserProfile", "user_profile"), ("User", "user"), ("already_snake", "already_snake")],
)
def test_to_snake_case(value: str, expected: str) -> None:
    assert to_snake_case(value) == expected


def test_to_camel_case_strips_underscores() -> None:
    assert to_camel_case("created_at") == "createdAt"
    assert to_camel_case("user_id_value") == "userIdValue"
    assert to_camel_case("Name") == "name"


def test_to_pascal_case() -> None:
    assert to_pascal_case("user_profile") == "UserProfile"
    assert to_pascal_case("UserProfile") == "UserProfile"


def test_render_fn_pattern_expands_every_placeholder() -> None:
    assert render_fn_pattern("{type_snake}_decoder", "UserProfile") == "user_profile_decoder"
    assert render_fn_pattern("decode{type_pascal}", "user_profile") == "decodeUserProfile"
    assert render_fn_pattern("{type}Codec", "User") == "UserCodec"
    assert render_fn_pattern("{type_snake}_to_{backend}", "User", "json") == "user_to_json"
    assert render_fn_pattern("to{backend_pascal}", "User", "msg_pack") == "toMsgPack"


def test_has_backend_placeholder() -> None:
    assert has_backend_placeholder("{type_snake}_to_{backend}")
    assert has_backend_placeholder("{type}{backend_pascal}")
    assert not has_backend_placeholder("encode_{type_snake}")


def test_module_aliases() -> None:
    assert module_alias("profile/codec") == "profile_codec"
    assert module_alias("models/user-data") == "models_user_data"
    assert module_alias("") == "module"
    assert default_module_alias("models/user") == "user"
    assert default_module_alias("user") == "user"
