"""Configuration loading and cascading for gloss (gloss.toml)."""

from __future__ import annotations

import tomllib
from dataclasses import asdict, dataclass, field, replace
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, ValidationError
from pydantic import Field as ModelField

from .errors import ConfigError
from .logging import get_logger
from .models import (
    AbsentFieldMode,
    FieldNaming,
    FileConfig,
    FnNamingOverride,
    OutputOverride,
    PathMode,
    TypeDecl,
)
from .naming import render_fn_pattern

CONFIG_FILENAME = "gloss.toml"

DEFAULT_GENERATED_FILE_NAMING = "{module}_gloss.gleam"
DEFAULT_ENCODE_MODULE_NAMING = "encode_{module}.gleam"
DEFAULT_DECODE_MODULE_NAMING = "decode_{module}.gleam"
DEFAULT_ENCODER_FUNCTION_NAMING = "{type_snake}_to_{backend}"
DEFAULT_DECODER_FUNCTION_NAMING = "{type_snake}_decoder"

logger = get_logger("config")


class OutputSection(BaseModel):
    """The `[output]` table of a gloss.toml document."""

    model_config = ConfigDict(extra="ignore")

    directory: Optional[str] = None
    separate_files: bool = True
    separate_encoder_decoder: bool = False
    generated_file_naming: str = DEFAULT_GENERATED_FILE_NAMING
    encode_module_naming: str = DEFAULT_ENCODE_MODULE_NAMING
    decode_module_naming: str = DEFAULT_DECODE_MODULE_NAMING


class FnNamingSection(BaseModel):
    """The `[fn_naming]` table of a gloss.toml document."""

    model_config = ConfigDict(extra="ignore")

    encoder_function_naming: str = DEFAULT_ENCODER_FUNCTION_NAMING
    decoder_function_naming: str = DEFAULT_DECODER_FUNCTION_NAMING


class ConfigDocument(BaseModel):
    """One gloss.toml file. ``model_fields_set`` records which keys it sets."""

    model_config = ConfigDict(extra="ignore")

    field_naming_strategy: FieldNaming = ModelField(
        default=FieldNaming.SNAKE_CASE,
        validation_alias=AliasChoices("field_naming_strategy", "field_naming"),
    )
    absent_field_mode: AbsentFieldMode = AbsentFieldMode.ERROR_IF_ABSENT
    decoder_unknown_variant_message: Optional[str] = None
    output: OutputSection = ModelField(default_factory=OutputSection)
    fn_naming: FnNamingSection = ModelField(default_factory=FnNamingSection)


@dataclass(frozen=True)
class OutputConfig:
    """Where and how generated code for a group of types is written."""

    directory: Optional[str] = None
    generated_file_naming: str = DEFAULT_GENERATED_FILE_NAMING
    encode_module_naming: str = DEFAULT_ENCODE_MODULE_NAMING
    decode_module_naming: str = DEFAULT_DECODE_MODULE_NAMING
    separate_files: bool = True
    separate_encoder_decoder: bool = False

    def clean_directory(self) -> Optional[str]:
        """The directory with its path-mode prefix removed."""
        if self.directory is None:
            return None
        for prefix in ("@/", "@", "/", "./"):
            if self.directory.startswith(prefix):
                return self.directory[len(prefix):]
        return self.directory

    def merged(self, section: OutputSection) -> "OutputConfig":
        return replace(self, **{name: getattr(section, name) for name in section.model_fields_set})

    def with_override(self, override: OutputOverride) -> "OutputConfig":
        values = {
            name: value
            for name, value in asdict(override).items()
            if value is not None
        }
        return replace(self, **values)


@dataclass(frozen=True)
class FnNamingConfig:
    encoder_function_naming: str = DEFAULT_ENCODER_FUNCTION_NAMING
    decoder_function_naming: str = DEFAULT_DECODER_FUNCTION_NAMING

    def merged(self, section: FnNamingSection) -> "FnNamingConfig":
        return replace(self, **{name: getattr(section, name) for name in section.model_fields_set})

    def with_override(self, override: FnNamingOverride) -> "FnNamingConfig":
        values = {
            name: value
            for name, value in asdict(override).items()
            if value is not None
        }
        return replace(self, **values)

    def render_encoder_fn_name(self, type_name: str, backend: str) -> str:
        return render_fn_pattern(self.encoder_function_naming, type_name, backend)

    def render_decoder_fn_name(self, type_name: str) -> str:
        return render_fn_pattern(self.decoder_function_naming, type_name)


@dataclass(frozen=True)
class Config:
    """Effective settings after cascading documents and directive overrides."""

    field_naming: FieldNaming = FieldNaming.SNAKE_CASE
    absent_field_mode: AbsentFieldMode = AbsentFieldMode.ERROR_IF_ABSENT
    decoder_unknown_variant_message: Optional[str] = None
    output: OutputConfig = field(default_factory=OutputConfig)
    fn_naming: FnNamingConfig = field(default_factory=FnNamingConfig)

    def merged(self, document: ConfigDocument) -> "Config":
        """Layer ``document`` on top, overriding only the keys it sets."""
        updates: Dict[str, object] = {}
        explicit = document.model_fields_set
        if "field_naming_strategy" in explicit:
            updates["field_naming"] = document.field_naming_strategy
        if "absent_field_mode" in explicit:
            updates["absent_field_mode"] = document.absent_field_mode
        if "decoder_unknown_variant_message" in explicit:
            updates["decoder_unknown_variant_message"] = document.decoder_unknown_variant_message
        if "output" in explicit:
            updates["output"] = self.output.merged(document.output)
        if "fn_naming" in explicit:
            updates["fn_naming"] = self.fn_naming.merged(document.fn_naming)
        return replace(self, **updates)


@dataclass(frozen=True)
class ResolvedConfig:
    """Config plus the anchor of its output directory and the unknown-variant message."""

    config: Config
    path_mode: PathMode
    unknown_variant_message: Optional[str] = None


def infer_path_mode(directory: str, default: PathMode) -> PathMode:
    if directory.startswith("@") or directory.startswith("/"):
        return PathMode.PROJECT_RELATIVE
    if directory.startswith("./"):
        return PathMode.FILE_RELATIVE
    return default


def load_config(directory: Path) -> ConfigDocument:
    """Read ``directory/gloss.toml``; an absent file yields a document with nothing set."""
    path = directory / CONFIG_FILENAME
    if not path.is_file():
        return ConfigDocument()

    try:
        with path.open("rb") as handle:
            data = tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Failed to parse {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Failed to read {path}: {exc}") from exc

    try:
        return ConfigDocument.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration in {path}: {exc}") from exc


class ConfigResolver:
    """Resolve effective configuration for files and types within one project."""

    def __init__(self, project_root: Path) -> None:
        self.project_root = project_root.resolve()
        self._documents: Dict[Path, ConfigDocument] = {}

    def document(self, directory: Path) -> ConfigDocument:
        directory = directory.resolve()
        if directory not in self._documents:
            self._documents[directory] = load_config(directory)
        return self._documents[directory]

    def root_config(self) -> Config:
        """The project root layer. A malformed root document raises ConfigError."""
        return Config().merged(self.document(self.project_root))

    def load_cascaded(self, target_file: Path) -> Config:
        """Apply documents from the project root down to ``target_file``'s directory."""
        config = self.root_config()
        for directory in self._cascade_directories(target_file):
            document = self.document(directory)
            if document.model_fields_set:
                logger.debug(
                    "Applying %s from %s", ", ".join(sorted(document.model_fields_set)), directory
                )
            config = config.merged(document)
        return config

    def _cascade_directories(self, target_file: Path) -> List[Path]:
        """Directories between the project root (exclusive) and the file, furthest first."""
        file_dir = self._absolute(target_file).parent
        if not file_dir.is_relative_to(self.project_root):
            return []
        directories: List[Path] = []
        current = file_dir
        while current != self.project_root:
            directories.append(current)
            current = current.parent
        directories.reverse()
        return directories

    def _absolute(self, path: Path) -> Path:
        if not path.is_absolute():
            path = self.project_root / path
        return path.resolve()

    def for_file(self, target_file: Path, file_config: FileConfig) -> ResolvedConfig:
        """Cascaded config with the file's `gloss-file!:` directives layered on."""
        config = self.load_cascaded(target_file)
        directory = config.output.directory
        if directory is None:
            path_mode = PathMode.FILE_RELATIVE
        else:
            path_mode = infer_path_mode(directory, PathMode.PROJECT_RELATIVE)

        resolved = ResolvedConfig(config, path_mode, config.decoder_unknown_variant_message)
        return _layer(
            resolved,
            file_config.output_override,
            file_config.fn_naming_override,
            file_config.unknown_variant_message,
        )

    def for_type(self, file_context: ResolvedConfig, decl: TypeDecl) -> ResolvedConfig:
        """File-level context with the type's own directives layered on."""
        return _layer(
            file_context,
            decl.output_override,
            decl.fn_naming_override,
            decl.unknown_variant_message,
        )


def _layer(
    resolved: ResolvedConfig,
    output_override: Optional[OutputOverride],
    fn_naming_override: Optional[FnNamingOverride],
    unknown_variant_message: Optional[str],
) -> ResolvedConfig:
    config = resolved.config
    path_mode = resolved.path_mode

    if output_override is not None:
        config = replace(config, output=config.output.with_override(output_override))
    if output_override is not None and output_override.directory is not None:
        path_mode = infer_path_mode(output_override.directory, PathMode.FILE_RELATIVE)
    elif config.output.directory is not None:
        path_mode = infer_path_mode(config.output.directory, path_mode)

    if fn_naming_override is not None:
        config = replace(config, fn_naming=config.fn_naming.with_override(fn_naming_override))

    message = resolved.unknown_variant_message
    if unknown_variant_message is not None:
        message = unknown_variant_message
    config = replace(config, decoder_unknown_variant_message=message)
    return ResolvedConfig(config, path_mode, message)


__all__ = [
    "CONFIG_FILENAME",
    "Config",
    "ConfigDocument",
    "ConfigResolver",
    "FnNamingConfig",
    "FnNamingSection",
    "OutputConfig",
    "OutputSection",
    "ResolvedConfig",
    "infer_path_mode",
    "load_config",
]
