"""Per-field codec derivation: JSON keys, presence policy and value codecs."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .backends import EncoderBackend
from .errors import GenerationError
from .models import AbsentFieldMode, Field, FieldMarker, FieldNaming, ImportEntry, ImportMap
from .naming import module_alias, to_camel_case
from .registry import TypeRegistry
from .types import NamedType, TypeExpr, describe, is_option, is_primitive, is_wrapper

ITEM_BINDING = "item"


@dataclass
class CodecContext:
    """State shared while generating code for one type.

    ``imports`` collects the modules referenced by the generated text, and
    ``uses_option_helpers`` records whether it mentions the `option` module.
    """

    registry: TypeRegistry
    current_module: str
    imports: ImportMap = field(default_factory=dict)
    uses_option_helpers: bool = False

    def ensure_import(self, module_path: str) -> str:
        return ensure_import(self.imports, module_path)


def ensure_import(imports: ImportMap, module_path: str) -> str:
    """Register ``module_path`` in ``imports`` and return the alias to qualify with."""
    entry = imports.get(module_path)
    if entry is None:
        entry = ImportEntry(module_path=module_path, alias=module_alias(module_path))
        imports[module_path] = entry
    return entry.alias


def escape_string(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")


def json_key(item: Field, naming: FieldNaming) -> str:
    if item.rename is not None:
        return item.rename
    if naming is FieldNaming.CAMEL_CASE:
        return to_camel_case(item.binding)
    return item.binding


def is_optional_field(item: Field, absent_field_mode: AbsentFieldMode) -> bool:
    """Whether the decoder tolerates the key being missing from the input."""
    if item.marker is FieldMarker.OPTIONAL:
        return True
    if item.marker is FieldMarker.REQUIRED:
        return False
    return absent_field_mode is AbsentFieldMode.MAYBE_ABSENT and item.is_option


@dataclass(frozen=True)
class FunctionReference:
    """A `module/path.function` reference given in `decoder_with` or `encoder_with`."""

    module_path: Optional[str]
    function: str

    @classmethod
    def parse(cls, value: str) -> "FunctionReference":
        trimmed = value.strip()
        if not trimmed:
            raise GenerationError("Function reference cannot be empty")
        module_path: Optional[str] = None
        function = trimmed
        if "." in trimmed:
            module_part, function_part = trimmed.rsplit(".", 1)
            if not function_part.strip():
                raise GenerationError(f"Invalid function reference: `{value}`")
            module_path = module_part.strip() or None
            function = function_part.strip()
        return cls(module_path=module_path, function=function)

    def render(self, context: CodecContext) -> str:
        if self.module_path is None or self.module_path == context.current_module:
            return self.function
        return f"{context.ensure_import(self.module_path)}.{self.function}"


def field_decoder(item: Field, context: CodecContext) -> str:
    """Decoder expression for a field's value."""
    if item.decoder_with is not None:
        return f"{FunctionReference.parse(item.decoder_with).render(context)}()"
    return type_decoder(item.type_expr, context)


def field_encoder(item: Field, context: CodecContext, backend: EncoderBackend, tag: str) -> str:
    """Encoder expression applied to the field's bound variable."""
    if item.encoder_with is not None:
        return f"{FunctionReference.parse(item.encoder_with).render(context)}({item.binding})"
    return type_encoder(item.binding, item.type_expr, context, backend, tag)


def type_decoder(expr: TypeExpr, context: CodecContext) -> str:
    if isinstance(expr, NamedType):
        if is_wrapper(expr):
            if is_wrapper(expr.arguments[0]):
                raise _underivable("decoder", expr)
            inner = type_decoder(expr.arguments[0], context)
            combinator = "optional" if is_option(expr) else "list"
            return f"decode.{combinator}({inner})"
        if is_primitive(expr):
            return f"decode.{expr.name.lower()}"
        entry = context.registry.require_decoder(expr.module, expr.name, context.current_module)
        if entry.module_path == context.current_module:
            return f"{entry.decoder_fn_name}()"
        return f"{context.ensure_import(entry.module_path)}.{entry.decoder_fn_name}()"
    raise _underivable("decoder", expr)


def type_encoder(
    value_expr: str,
    expr: TypeExpr,
    context: CodecContext,
    backend: EncoderBackend,
    tag: str,
) -> str:
    """Encoder expression for ``value_expr``; ``tag`` selects the registry names to call."""
    if isinstance(expr, NamedType):
        if is_wrapper(expr):
            if is_wrapper(expr.arguments[0]):
                raise _underivable("encoder", expr)
            inner_body = type_encoder(ITEM_BINDING, expr.arguments[0], context, backend, tag)
            inner = f"fn({ITEM_BINDING}) {{ {inner_body} }}"
            if is_option(expr):
                return backend.encode_nullable(value_expr, inner)
            return backend.encode_array(value_expr, inner)
        if is_primitive(expr):
            encode = {
                "String": backend.encode_string,
                "Int": backend.encode_int,
                "Float": backend.encode_float,
                "Bool": backend.encode_bool,
            }[expr.name]
            return encode(value_expr)
        entry = context.registry.require_encoder(
            expr.module, expr.name, context.current_module, tag
        )
        function = entry.encoder_fn_names[tag]
        if entry.module_path == context.current_module:
            return f"{function}({value_expr})"
        return f"{context.ensure_import(entry.module_path)}.{function}({value_expr})"
    raise _underivable("encoder", expr)


def _underivable(kind: str, expr: TypeExpr) -> GenerationError:
    return GenerationError(
        f"Cannot derive {kind} for {describe(expr)}. Provide `{kind}_with` override."
    )


__all__ = [
    "CodecContext",
    "FunctionReference",
    "escape_string",
    "ensure_import",
    "field_decoder",
    "field_encoder",
    "is_optional_field",
    "json_key",
    "type_decoder",
    "type_encoder",
]
