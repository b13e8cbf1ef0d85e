"""Application layer - Dependency collection."""

from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, PrivateAttr

from miraveja_digen.domain import (
    Annotation,
    DeclarationSet,
    GeneratorSettings,
    Lifetime,
    MemberDeclaration,
    MemberKind,
    TypeDeclaration,
)

INJECTABLE_KINDS = (MemberKind.FIELD, MemberKind.PROPERTY)


class CollectedType(BaseModel):
    """Per-type result of dependency collection.

    Attributes:
        declaration: The scanned declaration.
        dependencies: Own dependency members, in declaration order.
        lifetime_annotations: Lifetime annotations found, in declaration order.
        lifetime: Winning lifetime by priority, if any annotation was found.
        is_root: Whether the type must receive an initializer on its own account.
    """

    model_config = ConfigDict(frozen=True)

    declaration: TypeDeclaration
    dependencies: Tuple[MemberDeclaration, ...] = ()
    lifetime_annotations: Tuple[Annotation, ...] = ()
    lifetime: Optional[Lifetime] = None
    is_root: bool = False

    @property
    def has_duplicate_lifetimes(self) -> bool:
        return len(self.lifetime_annotations) > 1


class DependencyCollection(BaseModel):
    """Immutable output of the collector, in declaration order."""

    model_config = ConfigDict(frozen=True)

    types: Tuple[CollectedType, ...] = ()

    _index: Dict[Tuple[str, str], CollectedType] = PrivateAttr(default_factory=dict)

    def model_post_init(self, __context: Any) -> None:
        self._index = {collected.declaration.ref.key: collected for collected in self.types}

    def get(self, declaration: TypeDeclaration) -> Optional[CollectedType]:
        return self._index.get(declaration.ref.key)

    def dependencies_of(self, declaration: TypeDeclaration) -> Tuple[MemberDeclaration, ...]:
        collected = self.get(declaration)
        return collected.dependencies if collected is not None else ()

    @property
    def services(self) -> Tuple[CollectedType, ...]:
        return tuple(collected for collected in self.types if collected.lifetime is not None)


class DependencyCollector:
    """Extracts declared dependency members and lifetime annotations per type.

    Only a type's own members are scanned; inherited dependencies are the
    constructor synthesizer's concern.
    """

    def __init__(self, settings: GeneratorSettings) -> None:
        self._settings = settings
        self._lifetimes: Dict[str, Lifetime] = dict(settings.lifetime_annotations())

    def collect(self, declarations: DeclarationSet) -> DependencyCollection:
        """Scan every declaration of the set.

        Args:
            declarations: The complete declaration set.

        Returns:
            One ``CollectedType`` per declaration, in declaration order.
        """
        return DependencyCollection(types=tuple(self.collect_type(declaration) for declaration in declarations.types))

    def collect_type(self, declaration: TypeDeclaration) -> CollectedType:
        """Scan one declaration.

        A type with a lifetime annotation (or a type-level dependency marker)
        but no dependency members is still a root with an empty dependency list.
        """
        if declaration.is_interface:
            return CollectedType(declaration=declaration)

        marker = self._settings.dependency_marker
        dependencies = tuple(
            member
            for member in declaration.members
            if member.kind in INJECTABLE_KINDS and not member.is_static and member.has_annotation(marker)
        )
        lifetime_annotations = declaration.annotations_named(*self._lifetimes)
        lifetime = None
        if lifetime_annotations:
            # Transient > Scoped > Singleton when several are declared
            declared = [self._lifetimes[annotation.name] for annotation in lifetime_annotations]
            lifetime = min(declared, key=lambda candidate: candidate.priority)

        return CollectedType(
            declaration=declaration,
            dependencies=dependencies,
            lifetime_annotations=lifetime_annotations,
            lifetime=lifetime,
            is_root=bool(dependencies) or lifetime is not None or declaration.has_annotation(marker),
        )
