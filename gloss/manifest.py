"""Backend dependency checks against the host project's gleam.toml."""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Dict, Iterable, Set

from .backends import EncoderBackend
from .errors import GenerationError
from .logging import get_logger

MANIFEST_FILENAME = "gleam.toml"
_DEPENDENCY_TABLES = ("dependencies", "dev-dependencies")

logger = get_logger("manifest")


def load_declared_packages(project_root: Path) -> Set[str]:
    """Package names declared in the `[dependencies]` and `[dev-dependencies]` tables."""
    path = project_root / MANIFEST_FILENAME
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise GenerationError(f"Failed to read {path}: {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise GenerationError(f"Failed to parse {path}: {exc}") from exc

    packages: Set[str] = set()
    for table in _DEPENDENCY_TABLES:
        entries = data.get(table)
        if isinstance(entries, dict):
            packages.update(entries.keys())
    return packages


def ensure_backend_dependencies(project_root: Path, backends: Iterable[EncoderBackend]) -> None:
    """Raise GenerationError unless every backend's packages are declared."""
    required: Dict[str, str] = {}
    for backend in backends:
        for package in backend.required_packages():
            required.setdefault(package, backend.name)
    if not required:
        return

    path = project_root / MANIFEST_FILENAME
    if not path.is_file():
        packages = "`, `".join(required)
        raise GenerationError(
            f"Generating encoders requires the `{packages}` dependency, but {path} was not found"
        )

    declared = load_declared_packages(project_root)
    for package, backend_name in required.items():
        if package not in declared:
            raise GenerationError(
                f"Generating encoders with the `{backend_name}` backend requires the `{package}` "
                f'dependency. Add `{package} = "~> 1"` (or your preferred version) to gleam.toml.'
            )
        logger.debug("Found %s for backend %s in %s", package, backend_name, path)


__all__ = ["MANIFEST_FILENAME", "ensure_backend_dependencies", "load_declared_packages"]
