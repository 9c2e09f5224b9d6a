"""Identifier case conversions and function-name pattern rendering."""

from __future__ import annotations

import re

_NON_ALNUM = re.compile(r"[^0-9A-Za-z]")


def to_snake_case(value: str) -> str:
    """`UserProfile` -> `user_profile`. Existing lowercase text is left alone."""
    result: list[str] = []
    for index, char in enumerate(value):
        if char.isupper():
            if index > 0:
                result.append("_")
            result.append(char.lower())
        else:
            result.append(char)
    return "".join(result)


def to_camel_case(value: str) -> str:
    """`created_at` -> `createdAt`."""
    result: list[str] = []
    capitalize_next = False
    for index, char in enumerate(value):
        if char == "_":
            capitalize_next = True
        elif index == 0:
            result.append(char.lower())
        elif capitalize_next:
            result.append(char.upper())
            capitalize_next = False
        else:
            result.append(char)
    return "".join(result)


def to_pascal_case(value: str) -> str:
    """`user_profile` -> `UserProfile`; already-Pascal names are unchanged."""
    result: list[str] = []
    capitalize_next = True
    for char in value:
        if char == "_":
            capitalize_next = True
        elif capitalize_next:
            result.append(char.upper())
            capitalize_next = False
        else:
            result.append(char)
    return "".join(result)


def render_fn_pattern(pattern: str, type_name: str, backend: str | None = None) -> str:
    """Expand a function naming pattern for ``type_name`` (and ``backend``)."""
    rendered = (
        pattern.replace("{type_snake}", to_snake_case(type_name))
        .replace("{type_pascal}", to_pascal_case(type_name))
        .replace("{type}", type_name)
    )
    if backend is not None:
        rendered = rendered.replace("{backend_pascal}", to_pascal_case(backend)).replace(
            "{backend}", backend
        )
    return rendered


def has_backend_placeholder(pattern: str) -> bool:
    return "{backend" in pattern


def module_alias(module_path: str) -> str:
    """Derive the import alias gloss uses for ``module_path``."""
    alias = _NON_ALNUM.sub("_", module_path)
    return alias or "module"


def default_module_alias(module_path: str) -> str:
    """The alias the host language binds when an import has no ``as`` clause."""
    return module_path.rsplit("/", 1)[-1]


__all__ = [
    "default_module_alias",
    "has_backend_placeholder",
    "module_alias",
    "render_fn_pattern",
    "to_camel_case",
    "to_pascal_case",
    "to_snake_case",
]
