"""Application layer - Chain-aware initializer synthesis."""

import keyword
from typing import List, Set, Tuple

from miraveja_digen.application.collector import DependencyCollection
from miraveja_digen.application.conventions import Conventions, substitute
from miraveja_digen.domain import (
    GeneratorSettings,
    InitializerParameter,
    InitializerPlan,
    MemberDeclaration,
    TypeDeclaration,
    TypeRef,
)


def parameter_name(member_name: str) -> str:
    """Parameter name for a dependency member: no leading underscores, never a keyword."""
    name = member_name.lstrip("_") or member_name
    if keyword.iskeyword(name) or name == "self":
        name += "_"
    return name


class ConstructorSynthesizer:
    """Builds initializers that accept a type's own and inherited dependencies.

    Parameters are the type's own dependency members in declaration order,
    followed by each ancestor's own dependency members, nearest ancestor first.
    Ancestor dependencies are forwarded positionally to the direct base's
    initializer, which forwards further upward on its own.

    Attributes:
        _conventions: Resolved ancestor chains.
        _collection: Collected dependency members per type.
        _settings: Contextual types and completion hook name.
    """

    def __init__(
        self,
        conventions: Conventions,
        collection: DependencyCollection,
        settings: GeneratorSettings,
    ) -> None:
        self._conventions = conventions
        self._collection = collection
        self._settings = settings

    def synthesize(self) -> Tuple[InitializerPlan, ...]:
        """Synthesize an initializer for every qualifying type.

        A type qualifies when it is a collection root (own dependencies,
        lifetime annotation, or type-level marker) or when any ancestor declares
        dependencies it has to forward.

        Returns:
            One plan per qualifying type, in declaration order.
        """
        qualifying = []
        for collected in self._collection.types:
            declaration = collected.declaration
            if declaration.is_interface:
                continue
            inherited = self._inherited_dependencies(declaration)
            if collected.is_root or inherited:
                qualifying.append((declaration, collected.dependencies, inherited))

        initialized = {declaration.ref.key for declaration, _, _ in qualifying}
        extended = {
            ancestor.declaration.ref.key
            for declaration, _, _ in qualifying
            for ancestor in self._conventions.ancestors(declaration)
        }
        return tuple(
            self._plan(declaration, own, inherited, initialized, declaration.ref.key in extended)
            for declaration, own, inherited in qualifying
        )

    def _inherited_dependencies(self, declaration: TypeDeclaration) -> List[Tuple[MemberDeclaration, TypeRef]]:
        inherited = []
        for ancestor in self._conventions.ancestors(declaration):
            mapping = ancestor.mapping
            for member in self._collection.dependencies_of(ancestor.declaration):
                inherited.append((member, substitute(member.type, mapping)))
        return inherited

    def _plan(
        self,
        declaration: TypeDeclaration,
        own: Tuple[MemberDeclaration, ...],
        inherited: List[Tuple[MemberDeclaration, TypeRef]],
        initialized: Set[Tuple[str, str]],
        extended: bool,
    ) -> InitializerPlan:
        used: Set[str] = set()
        own_parameters = [self._parameter(declaration, member, member.type, used) for member in own]
        base_parameters = [self._parameter(declaration, member, member_type, used) for member, member_type in inherited]

        ancestors = self._conventions.ancestors(declaration)
        # The direct base's __init__ resolves to the nearest generated one up the chain
        calls_base = any(ancestor.declaration.ref.key in initialized for ancestor in ancestors)
        hook = self._settings.completion_hook
        has_hook = declaration.declares_method(hook) or any(
            ancestor.declaration.declares_method(hook) for ancestor in ancestors
        )
        return InitializerPlan(
            owner=declaration.ref,
            parameters=tuple(own_parameters + base_parameters),
            assignments=tuple((member.name, parameter.name) for member, parameter in zip(own, own_parameters)),
            base=ancestors[0].ref if calls_base else None,
            forwarded=tuple(parameter.name for parameter in base_parameters),
            completion_hook=hook if has_hook else None,
            guard_completion=has_hook and extended,
            bounds=declaration.bounds,
            location=declaration.location,
        )

    def _parameter(
        self,
        declaration: TypeDeclaration,
        member: MemberDeclaration,
        member_type: TypeRef,
        used: Set[str],
    ) -> InitializerParameter:
        name = parameter_name(member.name)
        candidate, suffix = name, 2
        while candidate in used:
            candidate = f"{name}_{suffix}"
            suffix += 1
        used.add(candidate)

        return InitializerParameter(
            name=candidate,
            type=self._specialize(member_type, declaration.ref),
            member=member,
            declared_by=member.owner or declaration.ref,
        )

    def _specialize(self, member_type: TypeRef, owner: TypeRef) -> TypeRef:
        # Contextual handles are scoped to the type receiving them
        if not member_type.arguments and member_type.full_name in self._settings.contextual_types:
            return member_type.with_arguments(owner)
        return member_type
