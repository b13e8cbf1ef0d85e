from typing import List, Optional, Tuple

import structlog

from miraveja_digen.application.collector import DependencyCollector
from miraveja_digen.application.constructor_synthesizer import ConstructorSynthesizer
from miraveja_digen.application.conventions import Conventions
from miraveja_digen.application.emitter import SourceEmitter
from miraveja_digen.application.interface_synthesizer import InterfaceSynthesizer
from miraveja_digen.application.registration_builder import RegistrationGraphBuilder
from miraveja_digen.application.validator import GraphValidator
from miraveja_digen.domain import (
    DeclarationSet,
    Diagnostic,
    GenerationResult,
    GeneratorSettings,
    ISourceSink,
    ServiceEntry,
    SourceUnit,
)

logger = structlog.get_logger(__name__)


class DIGenerator:
    """Main entry point of the static dependency-injection compiler.

    Runs the whole-program pipeline over a complete declaration set:
    conventions, dependency collection, interface and initializer synthesis,
    registration graph construction, validation and emission. Each pass is a
    pure function of the declarations and of the results of earlier passes.

    Attributes:
        _settings: Annotation names, contextual types and emission options.
        _collector: Extracts dependency members and lifetimes.
        _validator: Reports duplicate lifetimes and missing dependencies.
        _emitter: Renders source units.
    """

    def __init__(self, settings: Optional[GeneratorSettings] = None) -> None:
        """Initialize the generator.

        Args:
            settings: Generation settings. Defaults to settings read from the environment.
        """
        self._settings = settings or GeneratorSettings()
        self._collector = DependencyCollector(self._settings)
        self._validator = GraphValidator(self._settings)
        self._emitter = SourceEmitter(self._settings)

    @property
    def settings(self) -> GeneratorSettings:
        return self._settings

    def generate(self, declarations: DeclarationSet) -> GenerationResult:
        """Run a generation pass.

        Args:
            declarations: The complete declaration set.

        Returns:
            Generated units, diagnostics and the intermediate plans.

        Raises:
            DeclarationError: If the declarations are not a valid input (e.g. cyclic inheritance).

        Example:
            >>> result = DIGenerator().generate(declarations)
            >>> for diagnostic in result.diagnostics:
            ...     print(diagnostic)
        """
        log = logger.bind(types=len(declarations.types))
        log.debug("generation_started")

        conventions = Conventions(declarations)
        collection = self._collector.collect(declarations)
        interfaces = InterfaceSynthesizer(conventions).synthesize()
        initializers = ConstructorSynthesizer(conventions, collection, self._settings).synthesize()
        graph = RegistrationGraphBuilder(conventions, collection, interfaces, initializers).build()

        # Validation only runs once the whole graph exists
        diagnostics: List[Diagnostic] = list(self._validator.validate(collection, graph))

        units: List[SourceUnit] = [self._emitter.emit_initializer(plan) for plan in initializers]
        units.extend(self._emitter.emit_interface(plan) for plan in interfaces)
        assembly = self._assembly_name(graph.services)
        if assembly is not None:
            registrations, skipped = self._emitter.emit_registrations(graph.services, assembly)
            units.append(registrations)
            diagnostics.extend(skipped)

        result = GenerationResult(
            units=tuple(units),
            diagnostics=tuple(diagnostics),
            services=graph.services,
            initializers=initializers,
            interfaces=interfaces,
        )
        log.info(
            "generation_completed",
            units=len(result.units),
            services=len(result.services),
            errors=len(result.errors),
            warnings=len(result.warnings),
        )
        return result

    def run(self, declarations: DeclarationSet, sink: ISourceSink) -> GenerationResult:
        """Generate and hand every unit to ``sink``.

        Args:
            declarations: The complete declaration set.
            sink: Destination for the generated units.

        Returns:
            The generation result.
        """
        result = self.generate(declarations)
        for unit in result.units:
            sink.add_source(unit)
        return result

    def _assembly_name(self, services: Tuple[ServiceEntry, ...]) -> Optional[str]:
        if self._settings.assembly_name:
            return self._settings.assembly_name
        if not services:
            return None
        return services[0].implementation.namespace.split(".")[0] or None
