"""Base class for encoder backends."""

from abc import ABC, abstractmethod
from typing import List, Sequence, Tuple


class EncoderBackend(ABC):
    """Contract for backends that render encoder expressions for one wire format."""

    name: str = ""

    @abstractmethod
    def module_imports(self) -> List[str]:
        """Import lines the generated encoders need, e.g. ``import gleam/json``."""

    @abstractmethod
    def return_type(self) -> str:
        """Type named in encoder signatures, e.g. ``json.Json``."""

    def encode_object(self, indent: str, fields: Sequence[Tuple[str, str]], closing_indent: str) -> str:
        """Render an object literal from ``(key, value expression)`` pairs."""
        if not fields:
            return self.encode_empty_object(closing_indent)
        return self.render_object(indent, fields, closing_indent)

    @abstractmethod
    def render_object(self, indent: str, fields: Sequence[Tuple[str, str]], closing_indent: str) -> str:
        """Render a non-empty object literal."""

    @abstractmethod
    def encode_empty_object(self, indent: str) -> str:
        ...

    @abstractmethod
    def encode_string_literal(self, value: str) -> str:
        ...

    @abstractmethod
    def encode_string(self, value_expr: str) -> str:
        ...

    @abstractmethod
    def encode_int(self, value_expr: str) -> str:
        ...

    @abstractmethod
    def encode_float(self, value_expr: str) -> str:
        ...

    @abstractmethod
    def encode_bool(self, value_expr: str) -> str:
        ...

    @abstractmethod
    def encode_nullable(self, value_expr: str, inner_encoder: str) -> str:
        ...

    @abstractmethod
    def encode_array(self, value_expr: str, inner_encoder: str) -> str:
        ...

    def required_packages(self) -> List[str]:
        """Host packages that must be declared in gleam.toml."""
        return []
