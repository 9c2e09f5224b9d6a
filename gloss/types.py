"""Structural type expressions attached to constructor fields."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

from .errors import ParseError

OPTION_MODULE = "gleam/option"
PRIMITIVE_TYPES = ("String", "Int", "Float", "Bool")


@dataclass(frozen=True)
class NamedType:
    """A named type, optionally qualified by a module (alias or resolved path)."""

    name: str
    module: Optional[str] = None
    arguments: Tuple["TypeExpr", ...] = field(default_factory=tuple)

    def __str__(self) -> str:
        prefix = f"{self.module}." if self.module else ""
        if not self.arguments:
            return f"{prefix}{self.name}"
        return f"{prefix}{self.name}({', '.join(str(arg) for arg in self.arguments)})"


@dataclass(frozen=True)
class TupleType:
    elements: Tuple["TypeExpr", ...] = field(default_factory=tuple)

    def __str__(self) -> str:
        return f"#({', '.join(str(element) for element in self.elements)})"


@dataclass(frozen=True)
class FunctionType:
    arguments: Tuple["TypeExpr", ...]
    return_type: "TypeExpr"

    def __str__(self) -> str:
        args = ", ".join(str(arg) for arg in self.arguments)
        return f"fn({args}) -> {self.return_type}"


@dataclass(frozen=True)
class TypeVar:
    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class TypeHole:
    def __str__(self) -> str:
        return "_"


TypeExpr = Union[NamedType, TupleType, FunctionType, TypeVar, TypeHole]


def is_option(expr: TypeExpr) -> bool:
    """True when ``expr`` is literally the standard ``Option(a)``."""
    return (
        isinstance(expr, NamedType)
        and expr.name == "Option"
        and expr.module == OPTION_MODULE
        and len(expr.arguments) == 1
    )


def is_list(expr: TypeExpr) -> bool:
    return isinstance(expr, NamedType) and expr.name == "List" and len(expr.arguments) == 1


def is_primitive(expr: TypeExpr) -> bool:
    return isinstance(expr, NamedType) and expr.name in PRIMITIVE_TYPES and not expr.arguments


def is_wrapper(expr: TypeExpr) -> bool:
    return is_option(expr) or is_list(expr)


def describe(expr: TypeExpr) -> str:
    """Human-readable shape name used in error messages."""
    if isinstance(expr, TupleType):
        return f"tuple type `{expr}`"
    if isinstance(expr, FunctionType):
        return f"function type `{expr}`"
    if isinstance(expr, TypeVar):
        return f"generic type variable `{expr.name}`"
    if isinstance(expr, TypeHole):
        return "type hole `_`"
    if is_wrapper(expr):
        return f"nested wrapper type `{expr}`"
    return f"type `{expr}`"


_TOKEN_RE = re.compile(r"\s*(->|#\(|[A-Za-z_][A-Za-z0-9_]*|[(),./])")


def _tokenize(text: str) -> List[str]:
    tokens: List[str] = []
    position = 0
    stripped = text.rstrip()
    while position < len(stripped):
        match = _TOKEN_RE.match(stripped, position)
        if not match:
            raise ParseError(f"Unexpected character in type expression {text!r} at {position}")
        tokens.append(match.group(1))
        position = match.end()
    return tokens


class _TypeReader:
    def __init__(self, text: str) -> None:
        self.text = text
        self.tokens = _tokenize(text)
        self.index = 0

    def peek(self) -> Optional[str]:
        return self.tokens[self.index] if self.index < len(self.tokens) else None

    def take(self, expected: Optional[str] = None) -> str:
        token = self.peek()
        if token is None or (expected is not None and token != expected):
            wanted = expected or "a token"
            raise ParseError(f"Expected {wanted} in type expression {self.text!r}")
        self.index += 1
        return token

    def read(self) -> TypeExpr:
        token = self.take()
        if token == "#(":
            return TupleType(tuple(self._read_list(")")))
        if token == "fn":
            self.take("(")
            arguments = self._read_list(")")
            self.take("->")
            return FunctionType(tuple(arguments), self.read())
        if token == "_":
            return TypeHole()
        if not (token[0].isalpha() or token[0] == "_"):
            raise ParseError(f"Unexpected token {token!r} in type expression {self.text!r}")

        # Module paths are lowercase segments joined by `/`; the final `.` introduces the type.
        segments = [token]
        while self.peek() == "/":
            self.take("/")
            segments.append(self.take())
        module: Optional[str] = None
        name = segments[-1]
        if self.peek() == ".":
            self.take(".")
            module = "/".join(segments)
            name = self.take()
        elif len(segments) > 1:
            raise ParseError(f"Module path without type name in {self.text!r}")

        if not name[0].isupper() and module is None:
            return TypeVar(name)

        arguments: List[TypeExpr] = []
        if self.peek() == "(":
            self.take("(")
            arguments = self._read_list(")")
        return NamedType(name=name, module=module, arguments=tuple(arguments))

    def _read_list(self, closing: str) -> List[TypeExpr]:
        items: List[TypeExpr] = []
        if self.peek() == closing:
            self.take(closing)
            return items
        while True:
            items.append(self.read())
            token = self.take()
            if token == closing:
                return items
            if token != ",":
                raise ParseError(f"Expected `,` or `{closing}` in type expression {self.text!r}")
            if self.peek() == closing:  # trailing comma
                self.take(closing)
                return items


def parse_type_expression(text: str) -> TypeExpr:
    """Read a textual type such as ``List(option.Option(user.User))``."""
    reader = _TypeReader(text)
    expr = reader.read()
    if reader.peek() is not None:
        raise ParseError(f"Trailing input in type expression {text!r}")
    return expr


__all__ = [
    "FunctionType",
    "NamedType",
    "OPTION_MODULE",
    "PRIMITIVE_TYPES",
    "TupleType",
    "TypeExpr",
    "TypeHole",
    "TypeVar",
    "describe",
    "is_list",
    "is_option",
    "is_primitive",
    "is_wrapper",
    "parse_type_expression",
]
