"""Render decoder and encoder function text for one annotated type."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from .backends import EncoderBackend
from .codecs import (
    CodecContext,
    escape_string,
    field_decoder,
    field_encoder,
    is_optional_field,
    json_key,
)
from .config import Config
from .defaults import default_value
from .errors import GenerationError
from .models import Constructor, Field, FieldNaming, ImportMap, TypeDecl
from .naming import to_snake_case
from .planner import EncodingMode, constructor_tag, determine_encoding_mode, unknown_variant_message
from .registry import TypeRegistry, encoder_fn_names


@dataclass
class DecoderOutput:
    code: str
    uses_option_helpers: bool = False


def generate_decoder(
    decl: TypeDecl,
    config: Config,
    registry: TypeRegistry,
    imports: ImportMap,
    unknown_message: Optional[str] = None,
) -> DecoderOutput:
    """Render ``pub fn <name>() -> decode.Decoder(T)`` for ``decl``.

    Module references made by the decoder are added to ``imports``.
    """
    context = CodecContext(registry=registry, current_module=decl.module_path, imports=imports)
    mode = determine_encoding_mode(decl.constructors, decl.disable_type_tag)
    naming = decl.field_naming or config.field_naming

    if len(decl.constructors) == 1 and mode is not EncodingMode.PLAIN_STRING:
        body = _constructor_decoder(decl, decl.constructors[0], mode, naming, config, context, nesting=0)
    else:
        fallback = default_value(decl, context)
        message = unknown_variant_message(decl.name, unknown_message, decl.constructors)
        body = _variant_decoder(decl, mode, naming, config, context, fallback, message)

    name = config.fn_naming.render_decoder_fn_name(decl.name)
    code = f"pub fn {name}() -> decode.Decoder({decl.name}) {body}"
    return DecoderOutput(code=code, uses_option_helpers=context.uses_option_helpers)


def _field_error(decl: TypeDecl, constructor: Constructor, item: Field, exc: GenerationError) -> GenerationError:
    return GenerationError(f"{decl.name}.{constructor.name} field `{item.binding}`: {exc}")


def _constructor_decoder(
    decl: TypeDecl,
    constructor: Constructor,
    mode: EncodingMode,
    naming: FieldNaming,
    config: Config,
    context: CodecContext,
    nesting: int,
) -> str:
    indent = " " * nesting
    if mode is EncodingMode.PLAIN_STRING or not constructor.fields:
        return f"{{\n{indent}  decode.success({constructor.name})\n{indent}}}"

    lines: List[str] = []
    for item in constructor.fields:
        key = escape_string(json_key(item, naming))
        try:
            decoder = field_decoder(item, context)
        except GenerationError as exc:
            raise _field_error(decl, constructor, item, exc) from exc
        if is_optional_field(item, config.absent_field_mode):
            context.uses_option_helpers = True
            lines.append(
                f'{indent}  use {item.binding} <- decode.optional_field("{key}", option.None, {decoder})'
            )
        else:
            lines.append(f'{indent}  use {item.binding} <- decode.field("{key}", {decoder})')

    arguments = ", ".join(
        f"{item.label}:" if item.is_labeled else item.binding for item in constructor.fields
    )
    lines.append(f"{indent}  decode.success({constructor.name}({arguments}))")
    return "{\n" + "\n".join(lines) + f"\n{indent}}}"


def _variant_decoder(
    decl: TypeDecl,
    mode: EncodingMode,
    naming: FieldNaming,
    config: Config,
    context: CodecContext,
    fallback: str,
    message: str,
) -> str:
    if mode is EncodingMode.PLAIN_STRING:
        discriminant = "use variant <- decode.then(decode.string)"
    else:
        discriminant = f'use variant <- decode.field("{escape_string(decl.tag_field)}", decode.string)'

    cases: List[str] = []
    for constructor in decl.constructors:
        tag = constructor_tag(constructor)
        if mode is EncodingMode.PLAIN_STRING or not constructor.fields:
            cases.append(f'    "{tag}" -> decode.success({constructor.name})')
            continue
        body = _constructor_decoder(decl, constructor, mode, naming, config, context, nesting=4)
        cases.append(f'    "{tag}" -> {body}')

    return (
        "{\n"
        f"  {discriminant}\n"
        "  case variant {\n"
        + "\n".join(cases)
        + f'\n    _ -> decode.failure({fallback}, "{escape_string(message)}")\n'
        "  }\n"
        "}"
    )


def generate_encoder(
    decl: TypeDecl,
    tag: str,
    backend: EncoderBackend,
    config: Config,
    registry: TypeRegistry,
    imports: ImportMap,
) -> str:
    """Render the encoder for ``decl`` using the backend registered under ``tag``."""
    context = CodecContext(registry=registry, current_module=decl.module_path, imports=imports)
    mode = determine_encoding_mode(decl.constructors, decl.disable_type_tag)
    naming = decl.field_naming or config.field_naming
    argument = to_snake_case(decl.name)

    if len(decl.constructors) == 1:
        body = _single_constructor_encoder(decl, argument, mode, naming, context, backend, tag)
    else:
        body = _variant_encoder(decl, argument, mode, naming, context, backend, tag)

    name = encoder_fn_names(decl, config.fn_naming)[tag]
    return f"pub fn {name}({argument}: {decl.name}) -> {backend.return_type()} {{\n{body}\n}}"


def _pattern(constructor: Constructor) -> str:
    if not constructor.fields:
        return constructor.name
    bindings = ", ".join(
        f"{item.label}:" if item.is_labeled else item.binding for item in constructor.fields
    )
    return f"{constructor.name}({bindings})"


def _object_entries(
    decl: TypeDecl,
    constructor: Constructor,
    mode: EncodingMode,
    naming: FieldNaming,
    context: CodecContext,
    backend: EncoderBackend,
    tag: str,
) -> List[Tuple[str, str]]:
    entries: List[Tuple[str, str]] = []
    if mode is EncodingMode.OBJECT_WITH_TYPE_TAG:
        entries.append(
            (escape_string(decl.tag_field), backend.encode_string_literal(constructor_tag(constructor)))
        )
    for item in constructor.fields:
        try:
            value = field_encoder(item, context, backend, tag)
        except GenerationError as exc:
            raise _field_error(decl, constructor, item, exc) from exc
        entries.append((escape_string(json_key(item, naming)), value))
    return entries


def _single_constructor_encoder(
    decl: TypeDecl,
    argument: str,
    mode: EncodingMode,
    naming: FieldNaming,
    context: CodecContext,
    backend: EncoderBackend,
    tag: str,
) -> str:
    indent = "  "
    constructor = decl.constructors[0]
    if mode is EncodingMode.PLAIN_STRING:
        return indent + backend.encode_string_literal(constructor_tag(constructor))
    if not constructor.fields:
        return backend.encode_empty_object(indent)

    unpacking = f"{indent}let {_pattern(constructor)} = {argument}\n"
    entries = _object_entries(decl, constructor, mode, naming, context, backend, tag)
    return unpacking + backend.encode_object(indent, entries, indent)


def _variant_encoder(
    decl: TypeDecl,
    argument: str,
    mode: EncodingMode,
    naming: FieldNaming,
    context: CodecContext,
    backend: EncoderBackend,
    tag: str,
) -> str:
    indent = "    "
    cases: List[str] = []
    for constructor in decl.constructors:
        if mode is EncodingMode.PLAIN_STRING:
            expression = backend.encode_string_literal(constructor_tag(constructor))
        else:
            entries = _object_entries(decl, constructor, mode, naming, context, backend, tag)
            expression = backend.encode_object(indent, entries, indent).strip()
        cases.append(f"{indent}{_pattern(constructor)} -> {expression}")
    return f"  case {argument} {{\n" + "\n".join(cases) + "\n  }"


__all__ = ["DecoderOutput", "generate_decoder", "generate_encoder"]
