"""Directive parsing for `gloss!:` and `gloss-file!:` comment lines.

A directive line is a marker followed by comma separated tokens. A token is a
bare keyword (``decoder``), an assignment (``type_tag = "kind"``) or a call form
(``encoder(json)``). Recognised keys form a closed set; each key declares the
scopes it may appear in and the kind of value it takes. Unknown or misplaced keys
are logged and skipped, or rejected when ``strict`` is set.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Optional, Union

from .errors import DirectiveError
from .logging import get_logger
from .models import FieldMarker, FieldNaming, FileConfig, FnNamingOverride, OutputOverride

TYPE_MARKER = re.compile(r"gloss!:\s*(.*)")
FILE_MARKER = re.compile(r"gloss-file!:\s*(.*)")

_TOKEN_RE = re.compile(
    r"""^(?P<key>[A-Za-z_][A-Za-z0-9_]*)\s*
        (?:
            =\s*(?P<assigned>.+?)
          | \(\s*(?P<argument>[^)]*?)\s*\)
        )?\s*$""",
    re.VERBOSE,
)

logger = get_logger("directives")


class Scope(str, Enum):
    TYPE = "type"
    FIELD = "field"
    FILE = "file"


class ValueKind(str, Enum):
    FLAG = "flag"
    TEXT = "text"
    BOOL = "bool"


@dataclass(frozen=True)
class DirectiveRule:
    key: str
    kind: ValueKind
    scopes: FrozenSet[Scope]


_TYPE = frozenset({Scope.TYPE})
_FIELD = frozenset({Scope.FIELD})
_TYPE_AND_FILE = frozenset({Scope.TYPE, Scope.FILE})

DIRECTIVES: Dict[str, DirectiveRule] = {
    rule.key: rule
    for rule in (
        DirectiveRule("encoder", ValueKind.TEXT, _TYPE),
        DirectiveRule("decoder", ValueKind.FLAG, _TYPE),
        DirectiveRule("snake_case", ValueKind.FLAG, _TYPE),
        DirectiveRule("camelCase", ValueKind.FLAG, _TYPE),
        DirectiveRule("type_tag", ValueKind.TEXT, _TYPE),
        DirectiveRule("no_type_tag", ValueKind.FLAG, _TYPE),
        DirectiveRule("output_dir", ValueKind.TEXT, _TYPE_AND_FILE),
        DirectiveRule("separate_encoder_decoder", ValueKind.BOOL, _TYPE_AND_FILE),
        DirectiveRule("generated_file_naming", ValueKind.TEXT, _TYPE_AND_FILE),
        DirectiveRule("encode_module_naming", ValueKind.TEXT, _TYPE_AND_FILE),
        DirectiveRule("decode_module_naming", ValueKind.TEXT, _TYPE_AND_FILE),
        DirectiveRule("unknown_variant_message", ValueKind.TEXT, _TYPE_AND_FILE),
        DirectiveRule("encoder_fn", ValueKind.TEXT, _TYPE_AND_FILE),
        DirectiveRule("decoder_fn", ValueKind.TEXT, _TYPE_AND_FILE),
        DirectiveRule("maybe_absent", ValueKind.FLAG, _FIELD),
        DirectiveRule("optional", ValueKind.FLAG, _FIELD),
        DirectiveRule("must_exist", ValueKind.FLAG, _FIELD),
        DirectiveRule("required", ValueKind.FLAG, _FIELD),
        DirectiveRule("error_if_absent", ValueKind.FLAG, _FIELD),
        DirectiveRule("rename", ValueKind.TEXT, _FIELD),
        DirectiveRule("decoder_with", ValueKind.TEXT, _FIELD),
        DirectiveRule("encoder_with", ValueKind.TEXT, _FIELD),
    )
}

_OPTIONAL_KEYS = frozenset({"maybe_absent", "optional"})
_REQUIRED_KEYS = frozenset({"must_exist", "required", "error_if_absent"})
_OUTPUT_KEYS = {
    "output_dir": "directory",
    "separate_encoder_decoder": "separate_encoder_decoder",
    "generated_file_naming": "generated_file_naming",
    "encode_module_naming": "encode_module_naming",
    "decode_module_naming": "decode_module_naming",
}
_FN_NAMING_KEYS = {
    "encoder_fn": "encoder_function_naming",
    "decoder_fn": "decoder_function_naming",
}


@dataclass(frozen=True)
class Directive:
    """A recognised directive with its coerced value (True for bare flags)."""

    key: str
    value: Union[str, bool]


@dataclass
class TypeAnnotations:
    encoders: List[str] = field(default_factory=list)
    generate_decoder: bool = False
    field_naming: Optional[FieldNaming] = None
    type_tag: Optional[str] = None
    disable_type_tag: bool = False
    output_override: Optional[OutputOverride] = None
    unknown_variant_message: Optional[str] = None
    fn_naming_override: Optional[FnNamingOverride] = None


@dataclass
class FieldAnnotations:
    marker: FieldMarker = FieldMarker.DEFAULT
    rename: Optional[str] = None
    decoder_with: Optional[str] = None
    encoder_with: Optional[str] = None


def split_tokens(text: str) -> List[str]:
    """Split a directive argument list on commas outside quotes and parentheses."""
    tokens: List[str] = []
    current: List[str] = []
    depth = 0
    in_quote = False
    for char in text:
        if char == '"':
            in_quote = not in_quote
        elif not in_quote and char == "(":
            depth += 1
        elif not in_quote and char == ")" and depth:
            depth -= 1
        elif char == "," and not in_quote and depth == 0:
            token = "".join(current).strip()
            if token:
                tokens.append(token)
            current = []
            continue
        current.append(char)
    token = "".join(current).strip()
    if token:
        tokens.append(token)
    return tokens


def parse_directives(
    text: str,
    scope: Scope,
    *,
    strict: bool = False,
    context: str = "",
) -> List[Directive]:
    """Return the directives found on every marker line of ``text`` for ``scope``."""
    marker = FILE_MARKER if scope is Scope.FILE else TYPE_MARKER
    directives: List[Directive] = []
    for line in text.splitlines():
        match = marker.search(line)
        if not match:
            continue
        for token in split_tokens(match.group(1)):
            directive = _parse_token(token, scope, strict=strict, context=context)
            if directive is not None:
                directives.append(directive)
    return directives


def _parse_token(token: str, scope: Scope, *, strict: bool, context: str) -> Optional[Directive]:
    match = _TOKEN_RE.match(token)
    if not match:
        return _reject(f"Malformed directive `{token}`", strict, context)

    key = match.group("key")
    rule = DIRECTIVES.get(key)
    if rule is None:
        return _reject(f"Unknown directive `{key}`", strict, context)
    if scope not in rule.scopes:
        return _reject(f"Directive `{key}` is not valid at {scope.value} level", strict, context)

    raw = match.group("assigned")
    if raw is None:
        raw = match.group("argument")

    if rule.kind is ValueKind.FLAG:
        if raw is not None:
            return _reject(f"Directive `{key}` does not take a value", strict, context)
        return Directive(key, True)

    if raw is None or not raw.strip():
        return _reject(f"Directive `{key}` requires a value", strict, context)
    value = _unquote(raw.strip())

    if rule.kind is ValueKind.BOOL:
        lowered = value.lower()
        if lowered not in {"true", "false"}:
            return _reject(f"Directive `{key}` expects true or false, got `{value}`", strict, context)
        return Directive(key, lowered == "true")

    if not value:
        return _reject(f"Directive `{key}` requires a non-empty value", strict, context)
    return Directive(key, value)


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] == '"':
        return value[1:-1]
    return value


def _reject(message: str, strict: bool, context: str) -> None:
    located = f"{message} ({context})" if context else message
    if strict:
        raise DirectiveError(located)
    logger.warning("%s; ignoring", located)
    return None


def parse_type_directives(text: str, *, strict: bool = False, context: str = "") -> TypeAnnotations:
    """Fold type-level directives from a declaration's comment text."""
    annotations = TypeAnnotations()
    directives = parse_directives(text, Scope.TYPE, strict=strict, context=context)
    for directive in directives:
        key, value = directive.key, directive.value
        if key == "encoder":
            backend = str(value).lower()
            if backend not in annotations.encoders:
                annotations.encoders.append(backend)
        elif key == "decoder":
            annotations.generate_decoder = True
        elif key == "snake_case":
            annotations.field_naming = FieldNaming.SNAKE_CASE
        elif key == "camelCase":
            annotations.field_naming = FieldNaming.CAMEL_CASE
        elif key == "type_tag":
            annotations.type_tag = str(value)
        elif key == "no_type_tag":
            annotations.disable_type_tag = True

    annotations.output_override = _output_override(directives)
    annotations.fn_naming_override = _fn_naming_override(directives)
    annotations.unknown_variant_message = _last_text(directives, "unknown_variant_message")
    return annotations


def parse_field_directives(text: str, *, strict: bool = False, context: str = "") -> FieldAnnotations:
    """Fold field-level directives. Optional markers win over required ones."""
    annotations = FieldAnnotations()
    directives = parse_directives(text, Scope.FIELD, strict=strict, context=context)
    keys = {directive.key for directive in directives}
    if keys & _OPTIONAL_KEYS:
        annotations.marker = FieldMarker.OPTIONAL
    elif keys & _REQUIRED_KEYS:
        annotations.marker = FieldMarker.REQUIRED
    annotations.rename = _last_text(directives, "rename")
    annotations.decoder_with = _last_text(directives, "decoder_with")
    annotations.encoder_with = _last_text(directives, "encoder_with")
    return annotations


def parse_file_directives(
    comments: Iterable[str], *, strict: bool = False, context: str = ""
) -> FileConfig:
    """Collect `gloss-file!:` directives from every comment line of a file."""
    directives = parse_directives("\n".join(comments), Scope.FILE, strict=strict, context=context)
    return FileConfig(
        output_override=_output_override(directives),
        unknown_variant_message=_last_text(directives, "unknown_variant_message"),
        fn_naming_override=_fn_naming_override(directives),
    )


def _last_text(directives: Iterable[Directive], key: str) -> Optional[str]:
    found: Optional[str] = None
    for directive in directives:
        if directive.key == key:
            found = str(directive.value)
    return found


def _collect(directives: Iterable[Directive], mapping: Dict[str, str]) -> Dict[str, object]:
    values: Dict[str, object] = {}
    for directive in directives:
        target = mapping.get(directive.key)
        if target is not None:
            values[target] = directive.value
    return values


def _output_override(directives: List[Directive]) -> Optional[OutputOverride]:
    values = _collect(directives, _OUTPUT_KEYS)
    return OutputOverride(**values) if values else None  # type: ignore[arg-type]


def _fn_naming_override(directives: List[Directive]) -> Optional[FnNamingOverride]:
    values = _collect(directives, _FN_NAMING_KEYS)
    return FnNamingOverride(**values) if values else None  # type: ignore[arg-type]


__all__ = [
    "DIRECTIVES",
    "Directive",
    "DirectiveRule",
    "FieldAnnotations",
    "Scope",
    "TypeAnnotations",
    "parse_directives",
    "parse_field_directives",
    "parse_file_directives",
    "parse_type_directives",
    "split_tokens",
]
