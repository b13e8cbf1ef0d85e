from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, model_validator

from miraveja_digen.domain.enums import DiagnosticSeverity, Lifetime, MemberKind, Visibility
from miraveja_digen.domain.exceptions import DeclarationError

BUILTINS_NAMESPACE = "builtins"


class TypeRef(BaseModel):
    """Value object referencing a type by namespace and name.

    A reference with an empty namespace that is not a type parameter is a
    pending reference: a name the declaration model could not bind, typically
    an interface that has not been generated yet.

    Attributes:
        namespace: Dotted module path owning the type.
        name: Simple name of the type.
        arguments: Generic type arguments, in order.
        is_type_parameter: Whether this reference names a type variable.
    """

    model_config = ConfigDict(frozen=True)

    namespace: str = Field(default="", description="Dotted namespace owning the type.")
    name: str = Field(..., description="Simple name of the type.")
    arguments: Tuple["TypeRef", ...] = Field(default=(), description="Generic type arguments.")
    is_type_parameter: bool = Field(default=False, description="Whether the reference is a type variable.")

    @property
    def key(self) -> Tuple[str, str]:
        return (self.namespace, self.name)

    @property
    def full_name(self) -> str:
        if not self.namespace:
            return self.name
        return f"{self.namespace}.{self.name}"

    @property
    def is_generic(self) -> bool:
        return bool(self.arguments)

    @property
    def is_pending(self) -> bool:
        return not self.namespace and not self.is_type_parameter

    @property
    def is_builtin(self) -> bool:
        return self.namespace == BUILTINS_NAMESPACE

    def with_arguments(self, *arguments: "TypeRef") -> "TypeRef":
        return self.model_copy(update={"arguments": tuple(arguments)})

    def in_namespace(self, namespace: str) -> "TypeRef":
        return self.model_copy(update={"namespace": namespace})

    def __str__(self) -> str:
        if not self.arguments:
            return self.full_name
        return f"{self.full_name}[{', '.join(str(argument) for argument in self.arguments)}]"


class SourceLocation(BaseModel):
    """A span inside a source file."""

    model_config = ConfigDict(frozen=True)

    path: str
    line: int = 1
    column: int = 0
    length: int = 0

    def __str__(self) -> str:
        return f"{self.path}:{self.line}:{self.column}"


class Annotation(BaseModel):
    """An annotation attached to a declaration, queried only by name."""

    model_config = ConfigDict(frozen=True)

    name: str
    location: Optional[SourceLocation] = None


class Parameter(BaseModel):
    """A method parameter. ``default`` holds the default value as source text."""

    model_config = ConfigDict(frozen=True)

    name: str
    type: TypeRef
    default: Optional[str] = None


class MemberDeclaration(BaseModel):
    """A member of a type declaration.

    Attributes:
        name: Member name.
        type: Declared type (return type for methods).
        kind: Field, property, method, event or constructor.
        visibility: Declared accessibility.
        owner: Back-reference to the declaring type.
        annotations: Annotations attached to the member.
        parameters: Method parameters, in order.
        is_accessor: Whether the method is a property/event accessor.
        is_static: Whether the member belongs to the type rather than instances.
        is_writable: Whether a property has a setter.
        location: Where the member is declared.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    type: TypeRef
    kind: MemberKind = MemberKind.FIELD
    visibility: Visibility = Visibility.PUBLIC
    owner: Optional[TypeRef] = None
    annotations: Tuple[Annotation, ...] = ()
    parameters: Tuple[Parameter, ...] = ()
    is_accessor: bool = False
    is_static: bool = False
    is_writable: bool = False
    location: Optional[SourceLocation] = None

    def has_annotation(self, name: str) -> bool:
        return any(annotation.name == name for annotation in self.annotations)

    def signature(self) -> str:
        """Full signature: kind, name, parameter types, names and defaults, type."""
        parameters = []
        for parameter in self.parameters:
            text = f"{parameter.type} {parameter.name}"
            if parameter.default is not None:
                text += f" = {parameter.default}"
            parameters.append(text)
        return f"{self.kind} {self.name}({', '.join(parameters)}) -> {self.type}"


class TypeBound(BaseModel):
    """Upper bound of a type parameter, e.g. ``T`` bound to ``Entity``."""

    model_config = ConfigDict(frozen=True)

    parameter: str
    bound: TypeRef


class TypeDeclaration(BaseModel):
    """A declared type as supplied by the declaration model.

    Attributes:
        ref: Identity of the type; type parameters appear as its arguments.
        base: Optional base-type reference.
        interfaces: Explicitly implemented interfaces.
        members: Members in declaration order.
        annotations: Annotations attached to the type.
        is_interface: Whether the declaration is itself an interface.
        bounds: Upper bounds of the type parameters that have one.
        location: Where the type is declared.
    """

    model_config = ConfigDict(frozen=True)

    ref: TypeRef
    base: Optional[TypeRef] = None
    interfaces: Tuple[TypeRef, ...] = ()
    members: Tuple[MemberDeclaration, ...] = ()
    annotations: Tuple[Annotation, ...] = ()
    is_interface: bool = False
    bounds: Tuple[TypeBound, ...] = ()
    location: Optional[SourceLocation] = None

    @model_validator(mode="before")
    @classmethod
    def _attach_owner(cls, data: Any) -> Any:
        if not isinstance(data, dict) or not data.get("members") or data.get("ref") is None:
            return data
        ref = data["ref"]
        owner = ref if isinstance(ref, TypeRef) else TypeRef.model_validate(ref)
        members = []
        for member in data["members"]:
            if isinstance(member, MemberDeclaration) and member.owner is None:
                member = member.model_copy(update={"owner": owner})
            elif isinstance(member, dict) and member.get("owner") is None:
                member = {**member, "owner": owner}
            members.append(member)
        return {**data, "members": tuple(members)}

    @property
    def name(self) -> str:
        return self.ref.name

    @property
    def namespace(self) -> str:
        return self.ref.namespace

    @property
    def full_name(self) -> str:
        return self.ref.full_name

    @property
    def type_parameters(self) -> Tuple[TypeRef, ...]:
        return tuple(argument for argument in self.ref.arguments if argument.is_type_parameter)

    @property
    def is_generic(self) -> bool:
        return bool(self.type_parameters)

    def has_annotation(self, name: str) -> bool:
        return any(annotation.name == name for annotation in self.annotations)

    def annotations_named(self, *names: str) -> Tuple[Annotation, ...]:
        return tuple(annotation for annotation in self.annotations if annotation.name in names)

    def declares_method(self, name: str) -> bool:
        return any(member.kind == MemberKind.METHOD and member.name == name for member in self.members)


class DeclarationSet(BaseModel):
    """The complete, whole-program set of declarations for one generation pass.

    Raises:
        DeclarationError: If two declarations share the same identity.
    """

    model_config = ConfigDict(frozen=True)

    types: Tuple[TypeDeclaration, ...] = ()

    _index: Dict[Tuple[str, str], TypeDeclaration] = PrivateAttr(default_factory=dict)

    def model_post_init(self, __context: Any) -> None:
        index: Dict[Tuple[str, str], TypeDeclaration] = {}
        for declaration in self.types:
            if declaration.ref.key in index:
                raise DeclarationError(f"Type {declaration.full_name} is declared more than once")
            index[declaration.ref.key] = declaration
        self._index = index

    def find(self, ref: Optional[TypeRef]) -> Optional[TypeDeclaration]:
        """Look up the declaration a reference points to, ignoring generic arguments."""
        if ref is None:
            return None
        return self._index.get(ref.key)

    def get(self, namespace: str, name: str) -> Optional[TypeDeclaration]:
        return self._index.get((namespace, name))


class ServiceEntry(BaseModel):
    """Binding of a requested service type to an implementation and lifetime."""

    model_config = ConfigDict(frozen=True)

    service: TypeRef
    implementation: TypeRef
    lifetime: Lifetime
    location: Optional[SourceLocation] = None

    @property
    def is_open_generic(self) -> bool:
        return self.implementation.is_generic


class DependencyEdge(BaseModel):
    """Derived requirement of ``owner`` on ``required``."""

    model_config = ConfigDict(frozen=True)

    owner: TypeRef
    required: TypeRef
    member: Optional[str] = None
    location: Optional[SourceLocation] = None


class Diagnostic(BaseModel):
    """A structured generation diagnostic."""

    model_config = ConfigDict(frozen=True)

    code: str
    severity: DiagnosticSeverity
    message: str
    arguments: Tuple[str, ...] = ()
    location: Optional[SourceLocation] = None

    def __str__(self) -> str:
        where = f"{self.location}: " if self.location else ""
        return f"{where}{self.severity} {self.code}: {self.message}"


class DiagnosticDescriptor(BaseModel):
    """Describes a diagnostic: its code, severity and positional message template."""

    model_config = ConfigDict(frozen=True)

    code: str
    title: str
    message_template: str
    severity: DiagnosticSeverity

    def create(self, location: Optional[SourceLocation], *arguments: Any) -> Diagnostic:
        return Diagnostic(
            code=self.code,
            severity=self.severity,
            message=self.message_template.format(*arguments),
            arguments=tuple(str(argument) for argument in arguments),
            location=location,
        )


class InitializerParameter(BaseModel):
    """One parameter of a synthesized initializer."""

    model_config = ConfigDict(frozen=True)

    name: str
    type: TypeRef
    member: MemberDeclaration
    declared_by: TypeRef


class InitializerPlan(BaseModel):
    """Synthesized initializer for one type.

    Attributes:
        owner: The type receiving the initializer.
        parameters: Own dependencies first, then ancestors' nearest first.
        assignments: ``(member name, parameter name)`` pairs for own members.
        base: Direct base whose initializer is called, when an ancestor has one.
        forwarded: Parameter names forwarded positionally to ``base``.
        completion_hook: Hook invoked last, when the type or an ancestor declares it.
        guard_completion: Whether the hook only runs when ``owner`` is the most-derived
            initialized type, since a derived initializer invokes it again.
        bounds: Bounds of the owner's type parameters.
    """

    model_config = ConfigDict(frozen=True)

    owner: TypeRef
    parameters: Tuple[InitializerParameter, ...] = ()
    assignments: Tuple[Tuple[str, str], ...] = ()
    base: Optional[TypeRef] = None
    forwarded: Tuple[str, ...] = ()
    completion_hook: Optional[str] = None
    guard_completion: bool = False
    bounds: Tuple[TypeBound, ...] = ()
    location: Optional[SourceLocation] = None


class InterfacePlan(BaseModel):
    """Synthesized naming-convention interface for one type."""

    model_config = ConfigDict(frozen=True)

    ref: TypeRef
    source: TypeRef
    parents: Tuple[TypeRef, ...] = ()
    members: Tuple[MemberDeclaration, ...] = ()
    bounds: Tuple[TypeBound, ...] = ()
    location: Optional[SourceLocation] = None


class SourceUnit(BaseModel):
    """A named generated source unit handed to the code sink."""

    model_config = ConfigDict(frozen=True)

    name: str
    namespace: str
    text: str


class GenerationResult(BaseModel):
    """Everything one generation pass produced."""

    model_config = ConfigDict(frozen=True)

    units: Tuple[SourceUnit, ...] = ()
    diagnostics: Tuple[Diagnostic, ...] = ()
    services: Tuple[ServiceEntry, ...] = ()
    initializers: Tuple[InitializerPlan, ...] = ()
    interfaces: Tuple[InterfacePlan, ...] = ()

    @property
    def errors(self) -> Tuple[Diagnostic, ...]:
        return tuple(d for d in self.diagnostics if d.severity == DiagnosticSeverity.ERROR)

    @property
    def warnings(self) -> Tuple[Diagnostic, ...]:
        return tuple(d for d in self.diagnostics if d.severity == DiagnosticSeverity.WARNING)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    def unit(self, name: str) -> Optional[SourceUnit]:
        return next((unit for unit in self.units if unit.name == name), None)
