"""Application layer - Registration graph validation."""

from typing import List, Set, Tuple

import structlog

from miraveja_digen.application.collector import DependencyCollection
from miraveja_digen.application.registration_builder import RegistrationGraph
from miraveja_digen.domain import (
    DUPLICATE_LIFETIME,
    MISSING_DEPENDENCY,
    Diagnostic,
    GeneratorSettings,
    TypeRef,
)

logger = structlog.get_logger(__name__)


class GraphValidator:
    """Runs the two non-fatal validation passes over a completed graph.

    Neither pass blocks emission: duplicate lifetimes fall back to priority
    order and missing dependencies may be supplied outside the generated table.
    """

    def __init__(self, settings: GeneratorSettings) -> None:
        self._settings = settings

    def validate(self, collection: DependencyCollection, graph: RegistrationGraph) -> Tuple[Diagnostic, ...]:
        return self.check_duplicate_lifetimes(collection) + self.check_missing_dependencies(graph)

    def check_duplicate_lifetimes(self, collection: DependencyCollection) -> Tuple[Diagnostic, ...]:
        """Report one error per distinct span carrying conflicting lifetimes."""
        diagnostics: List[Diagnostic] = []
        reported: Set[object] = set()
        for collected in collection.types:
            if not collected.has_duplicate_lifetimes:
                continue
            declaration = collected.declaration
            location = collected.lifetime_annotations[-1].location or declaration.location
            span = location if location is not None else declaration.ref.key
            if span in reported:
                continue
            reported.add(span)
            logger.debug(
                "duplicate_lifetime",
                type=declaration.full_name,
                resolved=str(collected.lifetime),
            )
            diagnostics.append(DUPLICATE_LIFETIME.create(location, declaration.full_name))
        return tuple(diagnostics)

    def check_missing_dependencies(self, graph: RegistrationGraph) -> Tuple[Diagnostic, ...]:
        """Report one warning per distinct unmet requirement of each implementation.

        Every implementation is checked on its own, which covers the whole graph
        transitively since each of its requirements is itself an implementation
        with requirements of its own.
        """
        registered = {entry.service for entry in graph.services}
        open_generics = {entry.service.key for entry in graph.services if entry.is_open_generic}

        diagnostics: List[Diagnostic] = []
        for edge in graph.edges:
            if self._is_satisfied(edge.required, registered, open_generics):
                continue
            logger.debug("missing_dependency", owner=edge.owner.full_name, required=str(edge.required))
            diagnostics.append(MISSING_DEPENDENCY.create(edge.location, edge.required))
        return tuple(diagnostics)

    def _is_satisfied(self, required: TypeRef, registered: Set[TypeRef], open_generics: Set[Tuple[str, str]]) -> bool:
        if required in registered:
            return True
        if required.is_generic and required.key in open_generics:
            return True
        return required.full_name in self._settings.external_services
