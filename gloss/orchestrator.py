"""Pipeline orchestration: preconditions, registry pass and generation pass."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from .backends import BackendRegistry, EncoderBackend
from .config import ConfigResolver, ResolvedConfig
from .declarations import extract_module
from .errors import GenerationError, GlossError
from .generator import generate_decoder, generate_encoder
from .logging import configure_logging, get_logger
from .manifest import ensure_backend_dependencies
from .models import FileConfig, ImportMap, ParsedModule, TypeDecl
from .output import GeneratedUnit, TypeCode
from .registry import TypeRegistry


@dataclass
class GenerationResult:
    """Generated units per source file, plus the errors that stopped other files."""

    outputs: Dict[Path, List[GeneratedUnit]] = field(default_factory=dict)
    errors: Dict[Path, GlossError] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors

    def raise_for_errors(self) -> None:
        for error in self.errors.values():
            raise error


@dataclass
class _FilePlan:
    module: ParsedModule
    file_config: FileConfig
    types: List[TypeDecl]
    contexts: List[ResolvedConfig] = field(default_factory=list)


class Orchestrator:
    """Coordinates code generation across every parsed module of a project."""

    def __init__(
        self,
        backends: BackendRegistry | None = None,
        *,
        strict: bool = False,
        templates_dir: Path | None = None,
    ) -> None:
        self.backends = backends or BackendRegistry()
        self.strict = strict
        self.templates_dir = templates_dir
        self.logger = get_logger("orchestrator")

    def run(self, project_root: Path, modules: Sequence[ParsedModule]) -> GenerationResult:
        """Generate code for ``modules``.

        A malformed root gloss.toml, an unregistered backend or a missing
        backend dependency aborts the run. Any other failure is recorded against
        the file it happened in and the remaining files still generate.
        """
        self.logger.info("Starting gloss run for %s (%d modules)", project_root, len(modules))
        result = GenerationResult()
        resolver = ConfigResolver(project_root)
        resolver.root_config()

        plans: List[_FilePlan] = []
        for module in modules:
            try:
                file_config, types = extract_module(module, strict=self.strict)
            except GlossError as exc:
                self._record(result, module, exc)
                continue
            if types:
                plans.append(_FilePlan(module, file_config, types))
            else:
                self.logger.debug("No annotated types in %s", module.path)

        self._check_preconditions(project_root, plans)

        registry = TypeRegistry()
        for plan in list(plans):
            try:
                self._register(plan, resolver, registry)
            except GlossError as exc:
                self._record(result, plan.module, exc)
                plans.remove(plan)
        registry.freeze()
        self.logger.debug("Pass 1 registered %d types from %d files", len(registry), len(plans))

        for plan in plans:
            try:
                units = self._generate_file(plan, registry)
            except GlossError as exc:
                self._record(result, plan.module, exc)
                continue
            result.outputs[plan.module.path] = units
            self.logger.info(
                "Generated %d unit(s) for %s", len(units), plan.module.module_path
            )

        self.logger.info(
            "Finished gloss run: %d file(s) generated, %d failed",
            len(result.outputs),
            len(result.errors),
        )
        return result

    def _check_preconditions(self, project_root: Path, plans: Sequence[_FilePlan]) -> None:
        tags: List[str] = []
        for plan in plans:
            for decl in plan.types:
                for tag in decl.encoders:
                    if tag not in tags:
                        tags.append(tag)
        if not tags:
            return

        backends: List[EncoderBackend] = []
        for tag in tags:
            backend = self.backends.get(tag)
            if backend is None:
                raise GenerationError(f"No encoder backend registered for `{tag}`")
            backends.append(backend)
        ensure_backend_dependencies(project_root, backends)

    def _register(self, plan: _FilePlan, resolver: ConfigResolver, registry: TypeRegistry) -> None:
        file_context = resolver.for_file(plan.module.path, plan.file_config)
        plan.contexts = [resolver.for_type(file_context, decl) for decl in plan.types]
        registry.register_all(
            [(decl, context.config.fn_naming) for decl, context in zip(plan.types, plan.contexts)]
        )

    def _generate_file(self, plan: _FilePlan, registry: TypeRegistry) -> List[GeneratedUnit]:
        units: List[GeneratedUnit] = []
        for decl, context in zip(plan.types, plan.contexts):
            imports: ImportMap = {}
            backends: Dict[str, EncoderBackend] = {}
            decoder: Optional[str] = None
            encoder: Optional[str] = None
            uses_option_helpers = False

            if decl.generate_decoder:
                output = generate_decoder(
                    decl, context.config, registry, imports, context.unknown_variant_message
                )
                decoder = output.code
                uses_option_helpers = output.uses_option_helpers

            if decl.encoders:
                blocks: List[str] = []
                for tag in decl.encoders:
                    backend = self.backends.get(tag)
                    if backend is None:
                        raise GenerationError(f"No encoder backend registered for `{tag}`")
                    backends[tag] = backend
                    blocks.append(
                        generate_encoder(decl, tag, backend, context.config, registry, imports)
                    )
                encoder = "\n\n".join(blocks)

            type_code = TypeCode(
                type_name=decl.name,
                module_path=decl.module_path,
                constructors=tuple(constructor.name for constructor in decl.constructors),
                decoder=decoder,
                encoder=encoder,
            )
            unit = self._find_unit(units, context)
            unit.add_type(type_code, imports, backends, uses_option_helpers)
        return units

    def _find_unit(self, units: List[GeneratedUnit], context: ResolvedConfig) -> GeneratedUnit:
        output_config = context.config.output
        for unit in units:
            if unit.matches(output_config, context.path_mode):
                return unit
        unit = GeneratedUnit(
            output_config=output_config,
            path_mode=context.path_mode,
            templates_dir=self.templates_dir,
        )
        units.append(unit)
        return unit

    def _record(self, result: GenerationResult, module: ParsedModule, exc: GlossError) -> None:
        self.logger.error("Failed to generate code for %s: %s", module.path, exc)
        result.errors[module.path] = exc


def generate_for_project(
    project_root: Path,
    modules: Sequence[ParsedModule],
    backends: BackendRegistry | None = None,
    *,
    strict: bool = False,
    verbose: bool = False,
    log_file: Path | None = None,
) -> GenerationResult:
    """Run the full pipeline with a default orchestrator.

    Passing ``verbose`` or ``log_file`` installs gloss's own log handlers first;
    otherwise records propagate to whatever logging the caller configured.
    """
    if verbose or log_file is not None:
        configure_logging(verbose=verbose, log_file=log_file)
    return Orchestrator(backends, strict=strict).run(project_root, modules)


__all__ = ["GenerationResult", "Orchestrator", "generate_for_project"]
