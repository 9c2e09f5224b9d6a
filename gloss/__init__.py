"""Generate decoders and encoders for Gleam custom types from comment directives."""

from .backends import BackendRegistry, EncoderBackend, JsonBackend
from .config import Config, ConfigResolver, OutputConfig
from .errors import ConfigError, DirectiveError, GenerationError, GlossError, ParseError
from .models import (
    ConstructorDeclaration,
    CustomTypeDeclaration,
    FieldDeclaration,
    ImportDeclaration,
    ParsedModule,
    PathMode,
)
from .orchestrator import GenerationResult, Orchestrator, generate_for_project
from .output import GeneratedUnit, merge_units
from .types import parse_type_expression

__all__ = [
    "BackendRegistry",
    "Config",
    "ConfigError",
    "ConfigResolver",
    "ConstructorDeclaration",
    "CustomTypeDeclaration",
    "DirectiveError",
    "EncoderBackend",
    "FieldDeclaration",
    "GeneratedUnit",
    "GenerationError",
    "GenerationResult",
    "GlossError",
    "ImportDeclaration",
    "JsonBackend",
    "Orchestrator",
    "OutputConfig",
    "ParseError",
    "ParsedModule",
    "PathMode",
    "generate_for_project",
    "merge_units",
    "parse_type_expression",
]
