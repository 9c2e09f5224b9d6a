"""Group generated code into output units and render module text."""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from jinja2 import Environment, FileSystemLoader

from .backends import EncoderBackend
from .config import OutputConfig
from .errors import GenerationError
from .models import ImportEntry, ImportMap, PathMode
from .naming import default_module_alias, module_alias
from .types import OPTION_MODULE

HEADER_LINES = (
    "This file was generated by gloss",
    "",
    "Do not modify this file directly.",
    "Any changes will be overwritten when gloss regenerates this file.",
)
MODULE_TEMPLATE = "module.j2"
DECODE_IMPORT = "import gleam/dynamic/decode"
OPTION_IMPORT = f"import {OPTION_MODULE}"


@dataclass
class TypeCode:
    """Generated text for one type, in declaration order within its unit."""

    type_name: str
    module_path: str
    constructors: Tuple[str, ...] = ()
    decoder: Optional[str] = None
    encoder: Optional[str] = None


@dataclass
class GeneratedUnit:
    """Types from one source file that share an output destination."""

    output_config: OutputConfig
    path_mode: PathMode
    types: List[TypeCode] = field(default_factory=list)
    imports: ImportMap = field(default_factory=dict)
    backends: Dict[str, EncoderBackend] = field(default_factory=dict)
    uses_option_helpers: bool = False
    templates_dir: Optional[Path] = None

    def matches(self, output_config: OutputConfig, path_mode: PathMode) -> bool:
        return self.output_config == output_config and self.path_mode == path_mode

    def add_type(
        self,
        type_code: TypeCode,
        imports: ImportMap,
        backends: Dict[str, EncoderBackend],
        uses_option_helpers: bool,
    ) -> None:
        self.types.append(type_code)
        merge_imports(self.imports, imports)
        for tag, backend in backends.items():
            self.backends.setdefault(tag, backend)
        self.uses_option_helpers = self.uses_option_helpers or uses_option_helpers
        if self.uses_option_helpers:
            ensure_no_option_alias_conflict(self.imports)

    @property
    def has_decoder(self) -> bool:
        return any(item.decoder is not None for item in self.types)

    @property
    def has_encoder(self) -> bool:
        return any(item.encoder is not None for item in self.types)

    def build_import_map(self, include_type_imports: bool) -> ImportMap:
        imports = {path: entry.copy() for path, entry in self.imports.items()}
        if include_type_imports:
            for item in self.types:
                add_type_import(imports, item.module_path, item.type_name, item.constructors)
        return imports

    def get_decoder_code(self, has_imports: bool = True, include_type_imports: bool = False) -> str:
        imports = ""
        if has_imports:
            imports = render_imports(
                has_decoder=True,
                uses_option_helpers=self.uses_option_helpers,
                custom_imports=self.build_import_map(include_type_imports),
            )
        blocks = [item.decoder for item in self.types if item.decoder is not None]
        return render_module(imports, blocks, self.templates_dir)

    def get_encoder_code(self, has_imports: bool = True, include_type_imports: bool = False) -> str:
        imports = ""
        if has_imports:
            imports = render_imports(
                has_encoder=True,
                backends=self.backends.values(),
                custom_imports=self.build_import_map(include_type_imports),
            )
        blocks = [item.encoder for item in self.types if item.encoder is not None]
        return render_module(imports, blocks, self.templates_dir)

    def get_combined_code(self, has_imports: bool = True, include_type_imports: bool = False) -> str:
        """Decoder then encoder for each type, in declaration order."""
        imports = ""
        if has_imports and (self.has_decoder or self.has_encoder):
            imports = render_imports(
                has_decoder=self.has_decoder,
                uses_option_helpers=self.uses_option_helpers,
                has_encoder=self.has_encoder,
                backends=self.backends.values(),
                custom_imports=self.build_import_map(include_type_imports),
            )
        blocks: List[str] = []
        for item in self.types:
            if item.decoder is not None:
                blocks.append(item.decoder)
            if item.encoder is not None:
                blocks.append(item.encoder)
        return render_module(imports, blocks, self.templates_dir)


def merge_imports(target: ImportMap, source: ImportMap) -> None:
    for module_path, entry in source.items():
        existing = target.get(module_path)
        if existing is None:
            target[module_path] = entry.copy()
        else:
            existing.merge(entry)


def add_type_import(
    imports: ImportMap, module_path: str, type_name: str, constructors: Iterable[str]
) -> None:
    entry = imports.get(module_path)
    if entry is None:
        entry = ImportEntry(module_path=module_path, alias=module_alias(module_path))
        imports[module_path] = entry
    entry.types.add(type_name)
    entry.values.update(constructors)


def ensure_no_option_alias_conflict(imports: ImportMap) -> None:
    for entry in imports.values():
        if entry.alias == "option" and entry.module_path != OPTION_MODULE:
            raise GenerationError(
                f"Cannot generate code because import alias `option` is already used for "
                f"`{entry.module_path}`. Rename the conflicting import or its alias before "
                "running gloss."
            )


def render_import(entry: ImportEntry) -> str:
    line = f"import {entry.module_path}"
    exposures = [f"type {name}" for name in sorted(entry.types)] + sorted(entry.values)
    if exposures:
        line += ".{" + ", ".join(exposures) + "}"
    if entry.alias != default_module_alias(entry.module_path):
        line += f" as {entry.alias}"
    return line


def render_imports(
    *,
    has_decoder: bool = False,
    uses_option_helpers: bool = False,
    has_encoder: bool = False,
    backends: Iterable[EncoderBackend] = (),
    custom_imports: Optional[ImportMap] = None,
) -> str:
    """Standard imports (sorted, de-duplicated) followed by module references."""
    standard = set()
    if has_decoder:
        standard.add(DECODE_IMPORT)
        if uses_option_helpers:
            standard.add(OPTION_IMPORT)
    if has_encoder:
        for backend in backends:
            standard.update(backend.module_imports())

    lines = sorted(standard)
    custom = custom_imports or {}
    for module_path in sorted(custom):
        lines.append(render_import(custom[module_path]))
    return "\n".join(lines)


@lru_cache(maxsize=None)
def _environment(templates_dir: Optional[Path]) -> Environment:
    directories: List[str] = []
    if templates_dir is not None:
        directories.append(str(templates_dir))
    directories.append(str(Path(__file__).with_name("templates")))
    loader = FileSystemLoader(directories)
    return Environment(loader=loader, autoescape=False, trim_blocks=True, lstrip_blocks=True)


def render_module(imports: str, blocks: Sequence[str], templates_dir: Optional[Path] = None) -> str:
    """Render a generated module: header, import block, then code blocks."""
    template = _environment(templates_dir).get_template(MODULE_TEMPLATE)
    return template.render(header=HEADER_LINES, imports=imports, blocks=list(blocks))


def merge_units(units: Sequence[GeneratedUnit]) -> GeneratedUnit:
    """Fold several units into one, e.g. for writers that append to the source file."""
    if not units:
        raise ValueError("merge_units requires at least one unit")
    first = units[0]
    merged = GeneratedUnit(
        output_config=first.output_config,
        path_mode=first.path_mode,
        templates_dir=first.templates_dir,
    )
    for unit in units:
        merged.types.extend(unit.types)
        merge_imports(merged.imports, unit.imports)
        for tag, backend in unit.backends.items():
            merged.backends.setdefault(tag, backend)
        merged.uses_option_helpers = merged.uses_option_helpers or unit.uses_option_helpers
    if merged.uses_option_helpers:
        ensure_no_option_alias_conflict(merged.imports)
    return merged


__all__ = [
    "GeneratedUnit",
    "HEADER_LINES",
    "TypeCode",
    "add_type_import",
    "ensure_no_option_alias_conflict",
    "merge_imports",
    "merge_units",
    "render_import",
    "render_imports",
    "render_module",
]
