"""Placeholder values for the failure branch of multi-constructor decoders."""

from __future__ import annotations

from typing import Optional, Set, Tuple

from .codecs import CodecContext, escape_string
from .models import Constructor, TypeDecl
from .types import FunctionType, NamedType, TupleType, TypeExpr, TypeVar, is_list, is_option, is_primitive

_PRIMITIVE_DEFAULTS = {
    "String": '""',
    "Int": "0",
    "Float": "0.0",
    "Bool": "False",
}

Visited = Set[Tuple[str, str]]


def panic_default(subject: str) -> str:
    message = escape_string(f"No default value for {subject}")
    return f'panic("{message}")'


def default_value(decl: TypeDecl, context: CodecContext) -> str:
    """Build a value of ``decl`` from its first constructor.

    Types are expanded recursively through the registry. A type that is already
    being expanded, or that cannot be expanded, becomes a ``panic`` expression so
    generation always succeeds.
    """
    value = _custom_type_default(decl, context, set())
    return value if value is not None else panic_default(decl.name)


def _custom_type_default(decl: TypeDecl, context: CodecContext, visited: Visited) -> Optional[str]:
    if decl.key in visited or not decl.constructors:
        return None
    visited.add(decl.key)
    try:
        return _constructor_expression(decl.constructors[0], decl.module_path, context, visited)
    finally:
        visited.discard(decl.key)


def _constructor_expression(
    constructor: Constructor, module_path: str, context: CodecContext, visited: Visited
) -> str:
    if module_path == context.current_module:
        prefix = constructor.name
    else:
        prefix = f"{context.ensure_import(module_path)}.{constructor.name}"
    if not constructor.fields:
        return prefix

    arguments = []
    for item in constructor.fields:
        value = _expression_default(item.type_expr, module_path, context, visited)
        arguments.append(f"{item.label}: {value}" if item.is_labeled else value)
    return f"{prefix}({', '.join(arguments)})"


def _expression_default(expr: TypeExpr, owner_module: str, context: CodecContext, visited: Visited) -> str:
    if isinstance(expr, NamedType):
        if is_primitive(expr):
            return _PRIMITIVE_DEFAULTS[expr.name]
        if is_list(expr):
            return "[]"
        if is_option(expr):
            context.uses_option_helpers = True
            return "option.None"

        module_path = expr.module or owner_module
        if module_path == context.current_module:
            subject = expr.name
        else:
            subject = f"{module_path.replace('/', '.')}.{expr.name}"
        decl = context.registry.find_declaration(expr.module, expr.name, owner_module)
        if decl is None:
            return panic_default(subject)
        value = _custom_type_default(decl, context, visited)
        return value if value is not None else panic_default(subject)

    if isinstance(expr, TupleType):
        elements = ", ".join(_expression_default(e, owner_module, context, visited) for e in expr.elements)
        return f"#({elements})"
    if isinstance(expr, FunctionType):
        return panic_default("function")
    if isinstance(expr, TypeVar):
        return panic_default("type variable")
    return panic_default("type hole")


__all__ = ["default_value", "panic_default"]
