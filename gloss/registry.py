"""Project-wide registry of generated function names (pass 1)."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Sequence, Set, Tuple

from .config import FnNamingConfig
from .errors import GenerationError
from .logging import get_logger
from .models import TypeDecl
from .naming import has_backend_placeholder

logger = get_logger("registry")


@dataclass(frozen=True)
class RegistryEntry:
    """Canonical names gloss will generate for one declared type."""

    module_path: str
    type_name: str
    decoder_fn_name: Optional[str] = None
    encoder_fn_names: Dict[str, str] = field(default_factory=dict)

    @property
    def generates_decoder(self) -> bool:
        return self.decoder_fn_name is not None

    def generates_encoder(self, backend: str) -> bool:
        return backend in self.encoder_fn_names


def encoder_fn_names(decl: TypeDecl, naming: FnNamingConfig) -> Dict[str, str]:
    """Render one encoder name per distinct backend of ``decl``.

    When a type has several backends and the pattern has no ``{backend}``
    placeholder, each name gets a ``_<backend>`` suffix so they stay distinct.
    """
    backends = list(dict.fromkeys(decl.encoders))
    suffix = len(backends) > 1 and not has_backend_placeholder(naming.encoder_function_naming)
    names: Dict[str, str] = {}
    for backend in backends:
        name = naming.render_encoder_fn_name(decl.name, backend)
        if suffix:
            name = f"{name}_{backend}"
        names[backend] = name
    return names


class TypeRegistry:
    """Dense arena of registry entries keyed by (module path, type name).

    Entries are appended during pass 1 and keep their index for the rest of the
    run. Once frozen the registry only answers lookups.
    """

    def __init__(self) -> None:
        self._entries: List[RegistryEntry] = []
        self._declarations: List[TypeDecl] = []
        self._index: Dict[Tuple[str, str], int] = {}
        self._frozen = False

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[RegistryEntry]:
        return iter(self._entries)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        self._frozen = True
        logger.debug("Registry frozen with %d types", len(self._entries))

    def register(self, decl: TypeDecl, naming: FnNamingConfig) -> int:
        """Record the names generated for ``decl`` and return its stable index."""
        if self._frozen:
            raise RuntimeError("Type registry is frozen; register types during pass 1 only")
        if decl.key in self._index:
            raise GenerationError(
                f"Type `{decl.name}` is declared more than once in module `{decl.module_path}`"
            )

        entry = RegistryEntry(
            module_path=decl.module_path,
            type_name=decl.name,
            decoder_fn_name=naming.render_decoder_fn_name(decl.name) if decl.generate_decoder else None,
            encoder_fn_names=encoder_fn_names(decl, naming),
        )
        index = len(self._entries)
        self._entries.append(entry)
        self._declarations.append(decl)
        self._index[decl.key] = index
        logger.debug(
            "Registered %s.%s (decoder=%s, encoders=%s)",
            decl.module_path,
            decl.name,
            entry.decoder_fn_name,
            entry.encoder_fn_names or "-",
        )
        return index

    def register_all(self, items: Sequence[Tuple[TypeDecl, FnNamingConfig]]) -> List[int]:
        """Register one file's types together; on a conflict none of them are kept."""
        seen: Set[Tuple[str, str]] = set()
        for decl, _ in items:
            if decl.key in self._index or decl.key in seen:
                raise GenerationError(
                    f"Type `{decl.name}` is declared more than once in module `{decl.module_path}`"
                )
            seen.add(decl.key)
        return [self.register(decl, naming) for decl, naming in items]

    def entry(self, module_path: str, type_name: str) -> Optional[RegistryEntry]:
        index = self._index.get((module_path, type_name))
        return self._entries[index] if index is not None else None

    def _locate(self, module_hint: Optional[str], type_name: str, current_module: str) -> Optional[int]:
        if module_hint is None:
            return self._index.get((current_module, type_name))

        index = self._index.get((module_hint, type_name))
        if index is not None:
            return index
        for position, entry in enumerate(self._entries):
            if entry.type_name != type_name:
                continue
            if entry.module_path.rsplit("/", 1)[-1] == module_hint:
                return position
        return None

    def find(
        self, module_hint: Optional[str], type_name: str, current_module: str
    ) -> Optional[RegistryEntry]:
        """Look a type up by its (possibly aliased) module qualifier."""
        index = self._locate(module_hint, type_name, current_module)
        return self._entries[index] if index is not None else None

    def find_declaration(
        self, module_hint: Optional[str], type_name: str, current_module: str
    ) -> Optional[TypeDecl]:
        index = self._locate(module_hint, type_name, current_module)
        return self._declarations[index] if index is not None else None

    def require_decoder(
        self, module_hint: Optional[str], type_name: str, current_module: str
    ) -> RegistryEntry:
        entry = self.find(module_hint, type_name, current_module)
        if entry is None:
            raise GenerationError(
                f"Unable to determine decoder for type `{type_name}`. "
                "Add a gloss annotation for that type or specify `decoder_with`."
            )
        if not entry.generates_decoder:
            raise GenerationError(
                f"Decoder requested for type `{type_name}` but gloss is not generating one. "
                "Provide `decoder_with` override."
            )
        return entry

    def require_encoder(
        self, module_hint: Optional[str], type_name: str, current_module: str, backend: str
    ) -> RegistryEntry:
        entry = self.find(module_hint, type_name, current_module)
        if entry is None:
            raise GenerationError(
                f"Unable to determine encoder for type `{type_name}`. "
                "Add a gloss annotation for that type or specify `encoder_with`."
            )
        if not entry.generates_encoder(backend):
            raise GenerationError(
                f"Encoder requested for type `{type_name}` with backend `{backend}` but gloss "
                "is not generating one. Provide `encoder_with` override."
            )
        return entry


__all__ = ["RegistryEntry", "TypeRegistry", "encoder_fn_names"]
