"""Built-in encoder backend targeting `gleam/json`."""

from __future__ import annotations

from typing import List, Sequence, Tuple

from .base import EncoderBackend


class JsonBackend(EncoderBackend):
    """Render encoders with the `gleam/json` package."""

    name = "json"
    alias = "json"

    def _qualify(self, function: str) -> str:
        return f"{self.alias}.{function}"

    def module_imports(self) -> List[str]:
        return ["import gleam/json"]

    def return_type(self) -> str:
        return self._qualify("Json")

    def render_object(self, indent: str, fields: Sequence[Tuple[str, str]], closing_indent: str) -> str:
        entries = ",\n".join(f'{indent}  #("{key}", {value})' for key, value in fields)
        return f"{closing_indent}{self._qualify('object')}([\n{entries}\n{closing_indent}])"

    def encode_empty_object(self, indent: str) -> str:
        return f"{indent}{self._qualify('object')}([])"

    def encode_string_literal(self, value: str) -> str:
        return f'{self._qualify("string")}("{value}")'

    def encode_string(self, value_expr: str) -> str:
        return f"{self._qualify('string')}({value_expr})"

    def encode_int(self, value_expr: str) -> str:
        return f"{self._qualify('int')}({value_expr})"

    def encode_float(self, value_expr: str) -> str:
        return f"{self._qualify('float')}({value_expr})"

    def encode_bool(self, value_expr: str) -> str:
        return f"{self._qualify('bool')}({value_expr})"

    def encode_nullable(self, value_expr: str, inner_encoder: str) -> str:
        return f"{self._qualify('nullable')}({value_expr}, {inner_encoder})"

    def encode_array(self, value_expr: str, inner_encoder: str) -> str:
        return f"{self._qualify('array')}({value_expr}, {inner_encoder})"

    def required_packages(self) -> List[str]:
        return ["gleam_json"]


__all__ = ["JsonBackend"]
