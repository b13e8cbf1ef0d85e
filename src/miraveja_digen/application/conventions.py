"""Application layer - Naming-convention and inheritance-chain resolution."""

from typing import Dict, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from miraveja_digen.domain import (
    CircularInheritanceError,
    DeclarationSet,
    InterfacePlan,
    TypeDeclaration,
    TypeRef,
)

INTERFACE_PREFIX = "I"


def interface_name(name: str) -> str:
    """Name of the naming-convention interface for a type name."""
    return f"{INTERFACE_PREFIX}{name}"


def substitute(ref: TypeRef, mapping: Mapping[str, TypeRef]) -> TypeRef:
    """Replace type parameters in ``ref`` using ``mapping``.

    Args:
        ref: Reference possibly mentioning type parameters.
        mapping: Type parameter names mapped to the arguments replacing them.

    Returns:
        The substituted reference, or ``ref`` itself when nothing applies.
    """
    if not mapping:
        return ref
    if ref.is_type_parameter:
        return mapping.get(ref.name, ref)
    if not ref.arguments:
        return ref
    return ref.with_arguments(*(substitute(argument, mapping) for argument in ref.arguments))


class AutoInterfaceLink(BaseModel):
    """Resolved naming-convention link from a type to its ``I<Name>`` interface.

    Attributes:
        source: The type the interface is derived from.
        placeholder: The reference exactly as the declaration wrote it.
        interface: The placeholder bound to the source's namespace.
        via_base: Whether the placeholder was written as the base type.
        hand_authored: Whether an interface of that name is already declared.
    """

    model_config = ConfigDict(frozen=True)

    source: TypeRef
    placeholder: TypeRef
    interface: TypeRef
    via_base: bool
    hand_authored: bool

    @property
    def synthesized(self) -> bool:
        return not self.hand_authored


class Ancestor(BaseModel):
    """An ancestor as seen from a derived type.

    Attributes:
        declaration: The ancestor's declaration.
        ref: The base reference with type arguments bound from the derived type.
    """

    model_config = ConfigDict(frozen=True)

    declaration: TypeDeclaration
    ref: TypeRef

    @property
    def mapping(self) -> Dict[str, TypeRef]:
        return bind_arguments(self.declaration, self.ref)


class Conventions:
    """Resolves naming-convention links and ancestor chains once per pass.

    Both are computed eagerly for every declaration when constructed, so an
    inheritance cycle surfaces before any other pass runs.

    Attributes:
        _declarations: The whole-program declaration set.
        _links: Auto-interface links keyed by type identity.
        _chains: Strict ancestors, nearest first, keyed by type identity.
    """

    def __init__(self, declarations: DeclarationSet) -> None:
        """Resolve every link and chain.

        Args:
            declarations: The complete declaration set.

        Raises:
            CircularInheritanceError: If a base chain loops.
        """
        self._declarations = declarations
        self._links: Dict[Tuple[str, str], AutoInterfaceLink] = {}
        self._chains: Dict[Tuple[str, str], Tuple[Ancestor, ...]] = {}
        self._interfaces: Dict[Tuple[str, str], AutoInterfaceLink] = {}

        for declaration in declarations.types:
            link = self._resolve_link(declaration)
            if link is not None:
                self._links[declaration.ref.key] = link
                self._interfaces[link.interface.key] = link
        for declaration in declarations.types:
            self._chains[declaration.ref.key] = self._walk_chain(declaration)

    @property
    def declarations(self) -> DeclarationSet:
        return self._declarations

    def link(self, declaration: TypeDeclaration) -> Optional[AutoInterfaceLink]:
        return self._links.get(declaration.ref.key)

    def interface_link(self, ref: TypeRef) -> Optional[AutoInterfaceLink]:
        """The link whose interface ``ref`` names, if any."""
        return self._interfaces.get(ref.key)

    def bind(self, ref: TypeRef, namespace: str) -> TypeRef:
        """Bind a pending reference to the auto-interface of that name in ``namespace``."""
        if ref.is_pending and (namespace, ref.name) in self._interfaces:
            return ref.in_namespace(namespace)
        return ref

    def synthesizes_interface(self, declaration: TypeDeclaration) -> bool:
        link = self.link(declaration)
        return link is not None and link.synthesized

    def ancestors(self, declaration: TypeDeclaration) -> Tuple[Ancestor, ...]:
        return self._chains.get(declaration.ref.key, ())

    def interface_closure(
        self,
        declaration: TypeDeclaration,
        synthesized: Mapping[Tuple[str, str], InterfacePlan],
    ) -> Tuple[TypeRef, ...]:
        """Every interface the type implements directly or through inheritance.

        The type's own auto-interface placeholder is left out when it was
        written as the base type; ancestors' auto-interfaces are included.

        Args:
            declaration: The implementation type.
            synthesized: Synthesized interfaces keyed by their identity.

        Returns:
            Interfaces in first-seen order, without duplicates.
        """
        closure: List[TypeRef] = []

        def visit(ref: TypeRef, mapping: Mapping[str, TypeRef], namespace: str) -> None:
            ref = self.bind(substitute(ref, mapping), namespace)
            if ref in closure:
                return
            closure.append(ref)
            visit_parents(ref)

        def visit_parents(ref: TypeRef) -> None:
            interface = self._declarations.find(ref)
            if interface is not None and interface.is_interface:
                for parent in interface_parents(interface):
                    visit(parent, bind_arguments(interface, ref), interface.namespace)
            plan = synthesized.get(ref.key)
            if plan is not None:
                for parent in plan.parents:
                    visit(parent, bind_plan_arguments(plan, ref), plan.ref.namespace)

        levels = [(declaration, {})]
        levels += [(ancestor.declaration, ancestor.mapping) for ancestor in self.ancestors(declaration)]
        for owner, mapping in levels:
            own = owner is declaration
            for ref in self.direct_interfaces(owner, include_own_link=not own):
                visit(ref, mapping, owner.namespace)
            link = self.link(owner)
            if own and link is not None and link.via_base and link.hand_authored:
                # The placeholder itself is registered last, its parents belong to the closure
                visit_parents(link.interface)
        return tuple(closure)

    def direct_interfaces(self, owner: TypeDeclaration, include_own_link: bool = True) -> Tuple[TypeRef, ...]:
        """Interfaces a type names itself, an interface written as its base first.

        The auto-interface placeholder is replaced by the interface it links to.
        When ``include_own_link`` is false, a placeholder written as the base is
        left out.
        """
        link = self.link(owner)
        refs: List[TypeRef] = []
        if link is not None and link.via_base:
            if include_own_link:
                refs.append(link.interface)
        elif owner.base is not None and self.is_interface(owner.base, owner.namespace):
            refs.append(self.bind(owner.base, owner.namespace))
        for ref in owner.interfaces:
            if link is not None and not link.via_base and ref == link.placeholder:
                ref = link.interface
            refs.append(self.bind(ref, owner.namespace))
        return tuple(refs)

    def is_interface(self, ref: TypeRef, namespace: str) -> bool:
        """Whether ``ref`` names a declared or a synthesized interface."""
        bound = self.bind(ref, namespace)
        declaration = self._declarations.find(bound)
        if declaration is not None:
            return declaration.is_interface
        return self.interface_link(bound) is not None

    def _resolve_link(self, declaration: TypeDeclaration) -> Optional[AutoInterfaceLink]:
        if declaration.is_interface:
            return None
        expected = interface_name(declaration.name)
        candidates = [(declaration.base, True)] + [(ref, False) for ref in declaration.interfaces]
        for ref, via_base in candidates:
            if ref is None or ref.name != expected or ref.namespace not in ("", declaration.namespace):
                continue
            existing = self._declarations.get(declaration.namespace, expected)
            return AutoInterfaceLink(
                source=declaration.ref,
                placeholder=ref,
                interface=TypeRef(
                    namespace=declaration.namespace,
                    name=expected,
                    arguments=ref.arguments or declaration.ref.arguments,
                ),
                via_base=via_base,
                hand_authored=existing is not None and existing.is_interface,
            )
        return None

    def _walk_chain(self, declaration: TypeDeclaration) -> Tuple[Ancestor, ...]:
        visited = [declaration.full_name]
        chain: List[Ancestor] = []
        current, mapping = declaration, {}
        while True:
            base_ref = self._declared_base_ref(current)
            if base_ref is None:
                break
            base = self._declarations.find(base_ref)
            # Check if the base was already walked (circular inheritance)
            if base.full_name in visited:
                cycle_start_index = visited.index(base.full_name)
                raise CircularInheritanceError(visited[cycle_start_index:] + [base.full_name])
            visited.append(base.full_name)
            ancestor = Ancestor(declaration=base, ref=substitute(base_ref, mapping))
            chain.append(ancestor)
            current, mapping = base, ancestor.mapping
        return tuple(chain)

    def _declared_base_ref(self, declaration: TypeDeclaration) -> Optional[TypeRef]:
        if declaration.base is None:
            return None
        link = self._links.get(declaration.ref.key)
        if link is not None and link.via_base:
            return None
        base = self._declarations.find(declaration.base)
        if base is None or base.is_interface:
            return None
        return declaration.base


def interface_parents(interface: TypeDeclaration) -> Tuple[TypeRef, ...]:
    """Parents of a declared interface, its base first."""
    if interface.base is None or interface.base in interface.interfaces:
        return interface.interfaces
    return (interface.base,) + interface.interfaces


def bind_arguments(declaration: TypeDeclaration, ref: TypeRef) -> Dict[str, TypeRef]:
    """Map the type parameters of ``declaration`` to the arguments of ``ref``."""
    parameters = declaration.type_parameters
    if len(parameters) != len(ref.arguments):
        return {}
    return {parameter.name: argument for parameter, argument in zip(parameters, ref.arguments)}


def bind_plan_arguments(plan: InterfacePlan, ref: TypeRef) -> Dict[str, TypeRef]:
    parameters = [argument for argument in plan.ref.arguments if argument.is_type_parameter]
    if len(parameters) != len(ref.arguments):
        return {}
    return {parameter.name: argument for parameter, argument in zip(parameters, ref.arguments)}
