"""
Domain layer - Declaration model, generation results and diagnostics.

This layer contains the immutable records exchanged between generation passes.
It has no dependencies on other layers.
"""

from .diagnostics import DUPLICATE_LIFETIME, MISSING_DEPENDENCY, UNREGISTRABLE_SERVICE
from .enums import DiagnosticSeverity, Lifetime, MemberKind, Visibility
from .exceptions import (
    CircularDependencyError,
    CircularInheritanceError,
    DeclarationError,
    DIGenException,
    LifetimeError,
    ScopeError,
    UnresolvableError,
)
from .interfaces import IServiceCollection, IServiceProvider, ISourceSink
from .models import (
    Annotation,
    DeclarationSet,
    DependencyEdge,
    Diagnostic,
    DiagnosticDescriptor,
    GenerationResult,
    InitializerParameter,
    InitializerPlan,
    InterfacePlan,
    MemberDeclaration,
    Parameter,
    ServiceEntry,
    SourceLocation,
    SourceUnit,
    TypeBound,
    TypeDeclaration,
    TypeRef,
)
from .settings import GeneratorSettings

# Resolve the self-referencing generic arguments of TypeRef
TypeRef.model_rebuild()

__all__ = [
    # Enums
    "Lifetime",
    "MemberKind",
    "Visibility",
    "DiagnosticSeverity",
    # Exceptions
    "DIGenException",
    "DeclarationError",
    "CircularInheritanceError",
    "CircularDependencyError",
    "UnresolvableError",
    "LifetimeError",
    "ScopeError",
    # Interfaces
    "ISourceSink",
    "IServiceCollection",
    "IServiceProvider",
    # Models
    "TypeRef",
    "SourceLocation",
    "Annotation",
    "Parameter",
    "MemberDeclaration",
    "TypeBound",
    "TypeDeclaration",
    "DeclarationSet",
    "ServiceEntry",
    "DependencyEdge",
    "Diagnostic",
    "DiagnosticDescriptor",
    "InitializerParameter",
    "InitializerPlan",
    "InterfacePlan",
    "SourceUnit",
    "GenerationResult",
    # Diagnostics
    "DUPLICATE_LIFETIME",
    "MISSING_DEPENDENCY",
    "UNREGISTRABLE_SERVICE",
    # Settings
    "GeneratorSettings",
]
