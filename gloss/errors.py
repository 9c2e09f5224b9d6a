"""Exception hierarchy shared by every gloss stage."""

from __future__ import annotations


class GlossError(RuntimeError):
    """Base class for all gloss failures."""


class ParseError(GlossError):
    """Raised by source collaborators when host source cannot be parsed."""


class ConfigError(GlossError):
    """Raised when a gloss.toml document cannot be read or validated."""


class GenerationError(GlossError):
    """Raised when code for a type cannot be generated."""


class DirectiveError(GenerationError):
    """Raised in strict mode when a directive key is not recognised."""


__all__ = [
    "ConfigError",
    "DirectiveError",
    "GenerationError",
    "GlossError",
    "ParseError",
]
