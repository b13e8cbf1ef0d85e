"""Application layer - Naming-convention interface synthesis."""

from typing import Dict, List, Mapping, Optional, Set, Tuple

from miraveja_digen.application.conventions import (
    Conventions,
    bind_arguments,
    bind_plan_arguments,
    interface_parents,
    substitute,
)
from miraveja_digen.domain import (
    InterfacePlan,
    MemberDeclaration,
    MemberKind,
    TypeDeclaration,
    TypeRef,
    Visibility,
)

SURFACE_KINDS = (MemberKind.METHOD, MemberKind.PROPERTY, MemberKind.EVENT)


def is_public_surface(member: MemberDeclaration) -> bool:
    """Whether a member belongs on a synthesized interface."""
    return (
        member.visibility == Visibility.PUBLIC
        and member.kind in SURFACE_KINDS
        and not member.is_accessor
        and not member.is_static
    )


def bound_signature(member: MemberDeclaration, mapping: Mapping[str, TypeRef]) -> str:
    """Signature of ``member`` with the type parameters in ``mapping`` replaced."""
    if not mapping:
        return member.signature()
    parameters = tuple(
        parameter.model_copy(update={"type": substitute(parameter.type, mapping)}) for parameter in member.parameters
    )
    bound = member.model_copy(update={"type": substitute(member.type, mapping), "parameters": parameters})
    return bound.signature()


class InterfaceSynthesizer:
    """Builds ``I<Name>`` interfaces from a type's public surface.

    A type qualifies when its base or one of its interfaces is the pending
    ``I<Name>`` reference and no interface of that name is hand-authored. When
    the type's base is itself auto-interfaced, the base's synthesized interface
    becomes the first parent so consumers typed against it keep working.
    """

    def __init__(self, conventions: Conventions) -> None:
        self._conventions = conventions
        self._plans: Dict[Tuple[str, str], InterfacePlan] = {}
        self._in_progress: Set[Tuple[str, str]] = set()

    def synthesize(self) -> Tuple[InterfacePlan, ...]:
        """Synthesize every qualifying interface.

        Returns:
            One plan per qualifying type, in declaration order.
        """
        plans = []
        for declaration in self._conventions.declarations.types:
            if self._conventions.synthesizes_interface(declaration):
                plans.append(self._plan_for(declaration))
        return tuple(plans)

    def _plan_for(self, declaration: TypeDeclaration) -> InterfacePlan:
        if declaration.ref.key in self._plans:
            return self._plans[declaration.ref.key]

        self._in_progress.add(declaration.ref.key)
        link = self._conventions.link(declaration)
        parents: List[TypeRef] = []
        inherited: Set[str] = set()

        ancestors = self._conventions.ancestors(declaration)
        if ancestors and self._conventions.synthesizes_interface(ancestors[0].declaration):
            base_plan = self._plan_for(ancestors[0].declaration)
            parent = base_plan.ref.with_arguments(*ancestors[0].ref.arguments)
            parents.append(parent)
            inherited |= self._plan_signatures(base_plan, bind_plan_arguments(base_plan, parent), set())

        for ref in self._conventions.direct_interfaces(declaration, include_own_link=False):
            if ref == link.interface or ref in parents:
                continue
            parents.append(ref)
            inherited |= self._interface_signatures(ref, set())

        # Interfaces reached through plain ancestors are implemented already
        for ancestor in ancestors:
            for ref in self._conventions.direct_interfaces(ancestor.declaration):
                inherited |= self._interface_signatures(substitute(ref, ancestor.mapping), set())

        members = tuple(
            member
            for member in declaration.members
            if is_public_surface(member) and member.signature() not in inherited
        )
        plan = InterfacePlan(
            ref=link.interface.with_arguments(*declaration.ref.arguments),
            source=declaration.ref,
            parents=tuple(parents),
            members=members,
            bounds=declaration.bounds,
            location=declaration.location,
        )
        self._plans[declaration.ref.key] = plan
        self._in_progress.discard(declaration.ref.key)
        return plan

    def _plan_signatures(
        self,
        plan: InterfacePlan,
        mapping: Mapping[str, TypeRef],
        visited: Set[Tuple[str, str]],
    ) -> Set[str]:
        signatures = {bound_signature(member, mapping) for member in plan.members}
        for parent in plan.parents:
            signatures |= self._interface_signatures(substitute(parent, mapping), visited)
        return signatures

    def _interface_signatures(self, ref: TypeRef, visited: Set[Tuple[str, str]]) -> Set[str]:
        """Signatures of every member of ``ref`` and its parents, with ``ref``'s type arguments applied."""
        if ref.key in visited:
            return set()
        visited.add(ref.key)

        plan = self._synthesized(ref)
        if plan is not None:
            return self._plan_signatures(plan, bind_plan_arguments(plan, ref), visited)

        interface = self._conventions.declarations.find(ref)
        if interface is None:
            return set()
        mapping = bind_arguments(interface, ref)
        signatures = {bound_signature(member, mapping) for member in interface.members}
        for parent in interface_parents(interface):
            parent = self._conventions.bind(substitute(parent, mapping), interface.namespace)
            signatures |= self._interface_signatures(parent, visited)
        return signatures

    def _synthesized(self, ref: TypeRef) -> Optional[InterfacePlan]:
        link = self._conventions.interface_link(ref)
        if link is None or not link.synthesized or link.source.key in self._in_progress:
            return None
        return self._plan_for(self._conventions.declarations.find(link.source))
