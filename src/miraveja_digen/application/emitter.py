"""Application layer - Source emission for initializers, interfaces and registrations."""

from typing import Dict, Iterable, List, Optional, Set, Tuple

import structlog
from jinja2 import Environment, StrictUndefined, Template

from miraveja_digen.application import templates
from miraveja_digen.domain import (
    UNREGISTRABLE_SERVICE,
    Diagnostic,
    GeneratorSettings,
    InitializerPlan,
    InterfacePlan,
    MemberDeclaration,
    MemberKind,
    ServiceEntry,
    SourceUnit,
    TypeBound,
    TypeRef,
)

logger = structlog.get_logger(__name__)

STDLIB_MODULES = ("abc", "typing")
INITIALIZER_FUNCTION = "_initialize"


class ImportTable:
    """Tracks the names a generated unit refers to and renders its imports.

    The first type seen under a simple name keeps it; a later type with the same
    simple name from another namespace is imported under a namespace-qualified
    alias, so units never shadow one type with another.

    Attributes:
        _aliases: Local name per imported ``(namespace, name)``.
        _taken: Imported ``(namespace, name)`` per local name.
        _type_variables: Type parameters referenced, in first-seen order.
        _bounds: Upper bound per type parameter name.
    """

    def __init__(self, local: Iterable[TypeRef] = (), bounds: Iterable[TypeBound] = ()) -> None:
        self._aliases: Dict[Tuple[str, str], str] = {}
        self._taken: Dict[str, Tuple[str, str]] = {}
        self._local: Set[Tuple[str, str]] = set()
        self._type_variables: List[str] = []
        self._bounds: Dict[str, TypeRef] = {bound.parameter: bound.bound for bound in bounds}
        for ref in local:
            self._local.add(ref.key)
            self._taken[ref.name] = ref.key

    def require(self, namespace: str, name: str) -> str:
        """Import ``name`` from ``namespace`` and return the local name to use."""
        return self.name(TypeRef(namespace=namespace, name=name))

    def name(self, ref: TypeRef) -> str:
        """Local name of a reference, ignoring its generic arguments."""
        if ref.is_type_parameter:
            if ref.name not in self._type_variables:
                self._type_variables.append(ref.name)
            return ref.name
        if ref.is_builtin or ref.is_pending or ref.key in self._local:
            return ref.name
        if ref.key in self._aliases:
            return self._aliases[ref.key]

        alias = ref.name
        if alias in self._taken and self._taken[alias] != ref.key:
            alias = f"{ref.namespace.replace('.', '_')}_{ref.name}"
        self._aliases[ref.key] = alias
        self._taken[alias] = ref.key
        return alias

    def render(self, ref: TypeRef) -> str:
        """Render a reference with its generic arguments, e.g. ``Repository[User]``."""
        name = self.name(ref)
        if not ref.arguments:
            return name
        return f"{name}[{', '.join(self.render(argument) for argument in ref.arguments)}]"

    def type_variable_lines(self) -> List[str]:
        """``TypeVar`` declarations for every type parameter referenced so far.

        Call before ``lines()``, since rendering a bound imports it.
        """
        declarations = []
        # Bounds may mention further type parameters, which are appended as they are rendered
        index = 0
        while index < len(self._type_variables):
            name = self._type_variables[index]
            bound = self._bounds.get(name)
            if bound is None:
                declarations.append(f'{name} = TypeVar("{name}")')
            else:
                declarations.append(f'{name} = TypeVar("{name}", bound={self.render(bound)})')
            index += 1
        return declarations

    def lines(self) -> List[str]:
        """Import statements grouped standard library first, each group preceded by a blank line."""
        if self._type_variables:
            self.require("typing", "TypeVar")

        by_module: Dict[str, List[str]] = {}
        for (namespace, name), alias in self._aliases.items():
            entry = name if alias == name else f"{name} as {alias}"
            by_module.setdefault(namespace, []).append(entry)

        groups = [
            sorted(module for module in by_module if module in STDLIB_MODULES),
            sorted(module for module in by_module if module not in STDLIB_MODULES),
        ]
        lines: List[str] = []
        for modules in groups:
            if not modules:
                continue
            lines.append("")
            for module in modules:
                lines.append(f"from {module} import {', '.join(sorted(by_module[module]))}")
        return lines


def mangled(owner: str, member: str) -> str:
    """Attribute name as seen from outside the class body (private name mangling)."""
    if member.startswith("__") and not member.endswith("__"):
        return f"_{owner.lstrip('_')}{member}"
    return member


class SourceEmitter:
    """Renders generated source units.

    Output depends only on the plans and entries given, so identical inputs
    always produce byte-identical units.
    """

    def __init__(self, settings: GeneratorSettings) -> None:
        self._settings = settings
        self._env = Environment(
            autoescape=False,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined,
        )
        self._initializer_template = self._template(templates.INITIALIZER_TEMPLATE)
        self._interface_template = self._template(templates.INTERFACE_TEMPLATE)
        self._method_template = self._template(templates.METHOD_TEMPLATE)
        self._property_template = self._template(templates.PROPERTY_TEMPLATE)
        self._event_template = self._template(templates.EVENT_TEMPLATE)
        self._registration_template = self._template(templates.REGISTRATION_TEMPLATE)

    def _template(self, source: str) -> Template:
        return self._env.from_string(source)

    def emit_initializer(self, plan: InitializerPlan) -> SourceUnit:
        """Render the ``__init__`` attached to ``plan.owner``."""
        imports = ImportTable(bounds=plan.bounds)
        owner = imports.name(plan.owner)

        signature = ", ".join(
            ["self"] + [f"{parameter.name}: {imports.render(parameter.type)}" for parameter in plan.parameters]
        )
        body = [f"self.{mangled(plan.owner.name, member)} = {parameter}" for member, parameter in plan.assignments]
        if plan.base is not None:
            forwarded = ", ".join(["self", *plan.forwarded])
            body.append(f"{imports.name(plan.base)}.__init__({forwarded})")
        if plan.completion_hook and plan.guard_completion:
            body.append(f"if type(self).__init__ is {owner}.__init__:")
            body.append(f"    self.{plan.completion_hook}()")
        elif plan.completion_hook:
            body.append(f"self.{plan.completion_hook}()")
        if not body:
            body.append("pass")

        type_variables = imports.type_variable_lines()
        text = self._initializer_template.render(
            header=templates.HEADER,
            imports=imports.lines(),
            type_variables=type_variables,
            function=INITIALIZER_FUNCTION,
            signature=signature,
            body=body,
            owner=owner,
        )
        return SourceUnit(name=f"{plan.owner.full_name}.initializer.py", namespace=plan.owner.namespace, text=text)

    def emit_interface(self, plan: InterfacePlan) -> SourceUnit:
        """Render the abstract base class for a synthesized interface."""
        imports = ImportTable(local=[plan.ref], bounds=plan.bounds)
        abc = imports.require("abc", "ABC")

        parents = [imports.render(parent) for parent in plan.parents]
        type_parameters = [argument for argument in plan.ref.arguments if argument.is_type_parameter]
        if type_parameters:
            generic = imports.require("typing", "Generic")
            parents.append(f"{generic}[{', '.join(imports.render(parameter) for parameter in type_parameters)}]")
        parents.append(abc)

        members = [self._render_member(member, imports) for member in plan.members]
        type_variables = imports.type_variable_lines()
        text = self._interface_template.render(
            header=templates.HEADER,
            imports=imports.lines(),
            type_variables=type_variables,
            name=plan.ref.name,
            parents=", ".join(parents),
            source=plan.source.name,
            members=members,
        )
        return SourceUnit(name=f"{plan.ref.full_name}.interface.py", namespace=plan.ref.namespace, text=text)

    def _render_member(self, member: MemberDeclaration, imports: ImportTable) -> str:
        returns = imports.render(member.type)
        if member.kind == MemberKind.METHOD:
            imports.require("abc", "abstractmethod")
            parameters = ["self"]
            for parameter in member.parameters:
                text = f"{parameter.name}: {imports.render(parameter.type)}"
                if parameter.default is not None:
                    text += f" = {parameter.default}"
                parameters.append(text)
            rendered = self._method_template.render(name=member.name, signature=", ".join(parameters), returns=returns)
        elif member.kind == MemberKind.PROPERTY:
            imports.require("abc", "abstractmethod")
            rendered = self._property_template.render(name=member.name, returns=returns, writable=member.is_writable)
        else:
            rendered = self._event_template.render(name=member.name, returns=returns)
        return rendered.rstrip("\n")

    def emit_registrations(
        self,
        services: Tuple[ServiceEntry, ...],
        assembly: str,
    ) -> Tuple[SourceUnit, Tuple[Diagnostic, ...]]:
        """Render the registration table, skipping entries that cannot be expressed.

        Args:
            services: Entries in emission order.
            assembly: Namespace the table is generated for.

        Returns:
            The registration unit and a diagnostic for every skipped entry.
        """
        imports = ImportTable()
        collection_module, _, collection_name = self._settings.service_collection.rpartition(".")
        collection = imports.require(collection_module, collection_name)

        calls: List[str] = []
        diagnostics: List[Diagnostic] = []
        for entry in services:
            call = self._registration_call(entry, imports)
            if call is None:
                logger.warning("service_skipped", service=str(entry.service), implementation=str(entry.implementation))
                diagnostics.append(UNREGISTRABLE_SERVICE.create(entry.location, entry.service, entry.implementation))
                continue
            calls.append(call)

        text = self._registration_template.render(
            header=templates.HEADER,
            imports=imports.lines(),
            function=self._settings.registration_function,
            collection=collection,
            assembly=assembly,
            calls=calls,
        )
        unit = SourceUnit(name=f"{assembly}.service_registrations.py", namespace=assembly, text=text)
        return unit, tuple(diagnostics)

    def _registration_call(self, entry: ServiceEntry, imports: ImportTable) -> Optional[str]:
        method = f"add_{entry.lifetime.value}"
        if entry.is_open_generic:
            # Open mappings need the service to be generic over exactly the same parameters
            if entry.service.arguments != entry.implementation.arguments:
                return None
            return f".{method}({imports.name(entry.service)}, {imports.name(entry.implementation)})"
        return f".{method}({imports.render(entry.service)}, {imports.render(entry.implementation)})"
