"""Turn parsed modules into annotated type declarations."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Set, Tuple

from .directives import parse_field_directives, parse_file_directives, parse_type_directives
from .errors import GenerationError
from .logging import get_logger
from .models import (
    Constructor,
    ConstructorDeclaration,
    CustomTypeDeclaration,
    Field,
    FieldDeclaration,
    FileConfig,
    ImportDeclaration,
    ParsedModule,
    TypeDecl,
)
from .types import OPTION_MODULE, FunctionType, NamedType, TupleType, TypeExpr, is_option

logger = get_logger("declarations")


@dataclass
class OptionAvailability:
    """How the standard `Option` type can be spelled inside one module."""

    unqualified: bool = False
    aliases: Set[str] = field(default_factory=set)

    def resolves(self, module_hint: str | None) -> bool:
        if module_hint is None:
            return self.unqualified
        return module_hint == OPTION_MODULE or module_hint in self.aliases


def option_availability(imports: List[ImportDeclaration]) -> OptionAvailability:
    """Work out whether a bare or qualified `Option` refers to `gleam/option`."""
    availability = OptionAvailability()
    other_sources: Set[str] = set()

    for record in imports:
        if record.module == OPTION_MODULE:
            availability.aliases.add(record.bound_alias)
        if "Option" in record.unqualified_types:
            if record.module == OPTION_MODULE:
                availability.unqualified = True
            else:
                other_sources.add(record.module)

    if availability.unqualified and other_sources:
        raise GenerationError(
            "Conflicting imports for `Option`. gloss requires `Option` to come from "
            f"`{OPTION_MODULE}` when using optional fields (also imported from "
            f"{', '.join(sorted(other_sources))})."
        )
    if not availability.unqualified and not other_sources:
        # Nothing else claims the bare name, so it is the prelude-style Option.
        availability.unqualified = True
    return availability


def resolve_type_expression(expr: TypeExpr, availability: OptionAvailability) -> TypeExpr:
    """Rewrite `Option` references that denote the standard type to `gleam/option`."""
    if isinstance(expr, NamedType):
        arguments = tuple(resolve_type_expression(arg, availability) for arg in expr.arguments)
        module = expr.module
        if expr.name == "Option" and availability.resolves(module):
            module = OPTION_MODULE
        return NamedType(name=expr.name, module=module, arguments=arguments)
    if isinstance(expr, TupleType):
        return TupleType(tuple(resolve_type_expression(e, availability) for e in expr.elements))
    if isinstance(expr, FunctionType):
        return FunctionType(
            tuple(resolve_type_expression(arg, availability) for arg in expr.arguments),
            resolve_type_expression(expr.return_type, availability),
        )
    return expr


def extract_module(module: ParsedModule, *, strict: bool = False) -> Tuple[FileConfig, List[TypeDecl]]:
    """Return the file-level config and every type that requests generated code."""
    file_config = parse_file_directives(module.comments, strict=strict, context=str(module.path))
    availability = option_availability(module.imports)

    types: List[TypeDecl] = []
    for declaration in module.custom_types:
        decl = _extract_type(declaration, module.module_path, availability, strict=strict)
        if decl.is_requested:
            types.append(decl)
        else:
            logger.debug("Skipping %s.%s: no gloss directives", module.module_path, declaration.name)
    return file_config, types


def _extract_type(
    declaration: CustomTypeDeclaration,
    module_path: str,
    availability: OptionAvailability,
    *,
    strict: bool,
) -> TypeDecl:
    context = f"type {module_path}.{declaration.name}"
    annotations = parse_type_directives(declaration.doc, strict=strict, context=context)
    constructors = tuple(
        _extract_constructor(ctor, availability, strict=strict, context=context)
        for ctor in declaration.constructors
    )
    return TypeDecl(
        name=declaration.name,
        module_path=module_path,
        constructors=constructors,
        encoders=tuple(annotations.encoders),
        generate_decoder=annotations.generate_decoder,
        field_naming=annotations.field_naming,
        type_tag=annotations.type_tag,
        disable_type_tag=annotations.disable_type_tag,
        output_override=annotations.output_override,
        unknown_variant_message=annotations.unknown_variant_message,
        fn_naming_override=annotations.fn_naming_override,
    )


def _extract_constructor(
    constructor: ConstructorDeclaration,
    availability: OptionAvailability,
    *,
    strict: bool,
    context: str,
) -> Constructor:
    fields = tuple(
        _extract_field(item, index, availability, strict=strict, context=f"{context}, {constructor.name}")
        for index, item in enumerate(constructor.fields)
    )
    return Constructor(name=constructor.name, fields=fields)


def _extract_field(
    declaration: FieldDeclaration,
    position: int,
    availability: OptionAvailability,
    *,
    strict: bool,
    context: str,
) -> Field:
    type_expr = resolve_type_expression(declaration.type_expr, availability)
    label = declaration.label or None
    annotations = parse_field_directives(
        declaration.doc, strict=strict, context=f"{context} field {label or position}"
    )
    return Field(
        label=label,
        type_expr=type_expr,
        position=position,
        is_option=is_option(type_expr),
        marker=annotations.marker,
        rename=annotations.rename,
        decoder_with=annotations.decoder_with,
        encoder_with=annotations.encoder_with,
    )


__all__ = [
    "OptionAvailability",
    "extract_module",
    "option_availability",
    "resolve_type_expression",
]
