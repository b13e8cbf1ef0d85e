"""Application layer - Registration graph construction."""

from typing import Dict, List, Optional, Set, Tuple

from pydantic import BaseModel, ConfigDict

from miraveja_digen.application.collector import CollectedType, DependencyCollection
from miraveja_digen.application.conventions import Conventions
from miraveja_digen.domain import (
    DependencyEdge,
    InitializerPlan,
    InterfacePlan,
    ServiceEntry,
    SourceLocation,
    TypeRef,
)


class RegistrationGraph(BaseModel):
    """Service entries and the dependency edges of their implementations.

    Attributes:
        services: Entries in emission order.
        edges: Requirements of every implementation type, without duplicates.
    """

    model_config = ConfigDict(frozen=True)

    services: Tuple[ServiceEntry, ...] = ()
    edges: Tuple[DependencyEdge, ...] = ()


class RegistrationGraphBuilder:
    """Builds the requested-type to (implementation, lifetime) registry.

    Each annotated type contributes, in this order: itself, every interface of
    its full interface closure, and its auto-interface when that was written as
    the base type. Types follow declaration order so regeneration is diff-stable.
    """

    def __init__(
        self,
        conventions: Conventions,
        collection: DependencyCollection,
        interfaces: Tuple[InterfacePlan, ...],
        initializers: Tuple[InitializerPlan, ...],
    ) -> None:
        self._conventions = conventions
        self._collection = collection
        self._synthesized: Dict[Tuple[str, str], InterfacePlan] = {plan.ref.key: plan for plan in interfaces}
        self._initializers: Dict[Tuple[str, str], InitializerPlan] = {plan.owner.key: plan for plan in initializers}

    def build(self) -> RegistrationGraph:
        services: List[ServiceEntry] = []
        edges: List[DependencyEdge] = []
        for collected in self._collection.services:
            services.extend(self._entries(collected))
            edges.extend(self._edges(collected))
        return RegistrationGraph(services=tuple(services), edges=tuple(edges))

    def _entries(self, collected: CollectedType) -> List[ServiceEntry]:
        declaration = collected.declaration
        lifetime = collected.lifetime
        implementation = declaration.ref

        def entry(service: TypeRef) -> ServiceEntry:
            return ServiceEntry(
                service=service,
                implementation=implementation,
                lifetime=lifetime,
                location=declaration.location,
            )

        entries = [entry(implementation)]
        for interface in self._conventions.interface_closure(declaration, self._synthesized):
            entries.append(entry(interface))
        # Auto-interface written as the base type
        link = self._conventions.link(declaration)
        if link is not None and link.via_base and entry(link.interface) not in entries:
            entries.append(entry(link.interface))
        return entries

    def _edges(self, collected: CollectedType) -> List[DependencyEdge]:
        declaration = collected.declaration
        edges: List[DependencyEdge] = []
        seen: Set[TypeRef] = set()

        def add(required: TypeRef, member: str, own: bool, location: Optional[SourceLocation]) -> None:
            if required in seen:
                return
            seen.add(required)
            edges.append(
                DependencyEdge(
                    owner=declaration.ref,
                    required=required,
                    member=member,
                    location=(location if own else None) or declaration.location,
                )
            )

        # Every service is a collection root, so it always has an initializer
        plan = self._initializers[declaration.ref.key]
        for parameter in plan.parameters:
            own = parameter.declared_by.key == declaration.ref.key
            add(parameter.type, parameter.member.name, own, parameter.member.location)
        return edges
