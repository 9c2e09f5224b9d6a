"""Encoder backend implementations and discovery utilities."""

from __future__ import annotations

from importlib import metadata
from typing import Callable, Dict, Iterable, Iterator, List, Optional

from ..logging import get_logger
from .base import EncoderBackend
from .json import JsonBackend

_ENTRY_POINT_GROUP = "gloss.backends"

_BUILTIN_FACTORIES: dict[str, Callable[[], EncoderBackend]] = {
    "json": JsonBackend,
}

logger = get_logger("backends")


class BackendRegistry:
    """Map backend tags (as written in `encoder(<tag>)`) to backend instances."""

    def __init__(self, backends: Optional[Dict[str, EncoderBackend]] = None) -> None:
        self._backends: Dict[str, EncoderBackend] = {}
        if backends is None:
            backends = {name: factory() for name, factory in _BUILTIN_FACTORIES.items()}
        for tag, backend in backends.items():
            self._backends[tag.lower()] = _coerce_backend(tag, backend)

    def with_backend(self, tag: str, backend: EncoderBackend) -> "BackendRegistry":
        """Return a copy of this registry with ``backend`` registered under ``tag``."""
        backends = dict(self._backends)
        backends[tag.lower()] = _coerce_backend(tag, backend)
        return BackendRegistry(backends)

    def get(self, tag: str) -> Optional[EncoderBackend]:
        return self._backends.get(tag.lower())

    def __contains__(self, tag: object) -> bool:
        return isinstance(tag, str) and tag.lower() in self._backends

    def __iter__(self) -> Iterator[str]:
        return iter(self._backends)

    def tags(self) -> List[str]:
        return list(self._backends)

    @classmethod
    def discover(cls) -> "BackendRegistry":
        """Built-in backends plus those published under the `gloss.backends` entry point group."""
        registry = cls()
        for entry in _iter_entry_points():
            name = entry.name.lower()
            if name in registry:
                logger.debug("Backend entry point %s shadowed by an existing backend", name)
                continue
            try:
                loaded = entry.load()
            except Exception as exc:  # pragma: no cover - depends on installed plugins
                raise RuntimeError(f"Failed to load backend entry point '{entry.name}': {exc}") from exc
            registry = registry.with_backend(name, _coerce_backend(name, loaded))
            logger.debug("Loaded backend %s from entry point %s", name, entry.value)
        return registry


def _coerce_backend(tag: str, obj: object) -> EncoderBackend:
    if isinstance(obj, EncoderBackend):
        return obj
    if isinstance(obj, type) and issubclass(obj, EncoderBackend):
        return obj()
    if callable(obj):
        instance = obj()
        if isinstance(instance, EncoderBackend):
            return instance
    raise TypeError(f"Backend '{tag}' must be an EncoderBackend instance, subclass or factory")


def _iter_entry_points() -> Iterable[metadata.EntryPoint]:
    return metadata.entry_points().select(group=_ENTRY_POINT_GROUP)


__all__ = [
    "BackendRegistry",
    "EncoderBackend",
    "JsonBackend",
]
