"""Core data models shared across gloss components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple, Union

from .types import TypeExpr


class FieldNaming(str, Enum):
    """JSON key convention applied to field labels."""

    SNAKE_CASE = "snake_case"
    CAMEL_CASE = "camel_case"


class AbsentFieldMode(str, Enum):
    """Whether `Option(a)` fields may be missing from the input object."""

    ERROR_IF_ABSENT = "error_if_absent"
    MAYBE_ABSENT = "maybe_absent"


class FieldMarker(str, Enum):
    REQUIRED = "required"
    OPTIONAL = "optional"
    DEFAULT = "default"


class PathMode(str, Enum):
    """Anchor for an output directory."""

    FILE_RELATIVE = "file_relative"
    PROJECT_RELATIVE = "project_relative"


@dataclass(frozen=True)
class OutputOverride:
    """Output settings given by a file-level or type-level directive."""

    directory: Optional[str] = None
    separate_encoder_decoder: Optional[bool] = None
    encode_module_naming: Optional[str] = None
    decode_module_naming: Optional[str] = None
    generated_file_naming: Optional[str] = None


@dataclass(frozen=True)
class FnNamingOverride:
    encoder_function_naming: Optional[str] = None
    decoder_function_naming: Optional[str] = None


@dataclass(frozen=True)
class FileConfig:
    """Directives that apply to every type declared in one file."""

    output_override: Optional[OutputOverride] = None
    unknown_variant_message: Optional[str] = None
    fn_naming_override: Optional[FnNamingOverride] = None


@dataclass(frozen=True)
class Field:
    """A constructor field; ``label`` is None for positional fields."""

    label: Optional[str]
    type_expr: TypeExpr
    position: int = 0
    is_option: bool = False
    marker: FieldMarker = FieldMarker.DEFAULT
    rename: Optional[str] = None
    decoder_with: Optional[str] = None
    encoder_with: Optional[str] = None

    @property
    def is_labeled(self) -> bool:
        return self.label is not None

    @property
    def binding(self) -> str:
        """Variable name used for this field in generated code."""
        return self.label if self.label is not None else f"field{self.position}"


@dataclass(frozen=True)
class Constructor:
    name: str
    fields: Tuple[Field, ...] = ()


@dataclass(frozen=True)
class TypeDecl:
    """A custom type annotated for code generation."""

    name: str
    module_path: str
    constructors: Tuple[Constructor, ...]
    encoders: Tuple[str, ...] = ()
    generate_decoder: bool = False
    field_naming: Optional[FieldNaming] = None
    type_tag: Optional[str] = None
    disable_type_tag: bool = False
    output_override: Optional[OutputOverride] = None
    unknown_variant_message: Optional[str] = None
    fn_naming_override: Optional[FnNamingOverride] = None

    @property
    def key(self) -> Tuple[str, str]:
        return (self.module_path, self.name)

    @property
    def tag_field(self) -> str:
        return self.type_tag or "type"

    @property
    def is_requested(self) -> bool:
        return bool(self.encoders) or self.generate_decoder


@dataclass
class ImportEntry:
    """An import required by generated code, accumulated per output unit."""

    module_path: str
    alias: str
    values: Set[str] = field(default_factory=set)
    types: Set[str] = field(default_factory=set)

    def merge(self, other: "ImportEntry") -> None:
        self.values.update(other.values)
        self.types.update(other.types)

    def copy(self) -> "ImportEntry":
        return ImportEntry(self.module_path, self.alias, set(self.values), set(self.types))


ImportMap = Dict[str, ImportEntry]


# Parsed-module collaborator contract


@dataclass
class FieldDeclaration:
    label: Optional[str]
    type_expr: TypeExpr
    doc: str = ""


@dataclass
class ConstructorDeclaration:
    name: str
    fields: List[FieldDeclaration] = field(default_factory=list)


@dataclass
class CustomTypeDeclaration:
    """A custom type as delivered by the source parser, with its comment text."""

    name: str
    constructors: List[ConstructorDeclaration] = field(default_factory=list)
    doc: str = ""


@dataclass
class ImportDeclaration:
    module: str
    alias: Optional[str] = None
    unqualified_types: List[str] = field(default_factory=list)
    unqualified_values: List[str] = field(default_factory=list)

    @property
    def bound_alias(self) -> str:
        return self.alias or self.module.rsplit("/", 1)[-1]


Declaration = Union[CustomTypeDeclaration, ImportDeclaration]


@dataclass
class ParsedModule:
    """One host source file after parsing.

    ``module_path`` is the slash-joined path relative to the source root with the
    extension removed. ``comments`` holds every comment line in the file and is
    scanned for file-level directives.
    """

    path: Path
    module_path: str
    declarations: List[Declaration] = field(default_factory=list)
    comments: List[str] = field(default_factory=list)

    @property
    def custom_types(self) -> List[CustomTypeDeclaration]:
        return [decl for decl in self.declarations if isinstance(decl, CustomTypeDeclaration)]

    @property
    def imports(self) -> List[ImportDeclaration]:
        return [decl for decl in self.declarations if isinstance(decl, ImportDeclaration)]
