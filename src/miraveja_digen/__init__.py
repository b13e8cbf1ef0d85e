"""
miraveja-digen: Static dependency-injection code generator.

Turns a whole-program declaration set into initializers, naming-convention
interfaces and a registration table, and reports unmet dependencies and
conflicting lifetimes before the program runs.

Public API exports for the miraveja-digen package.
"""

# Application exports
from miraveja_digen.application.generator import DIGenerator

# Domain exports
from miraveja_digen.domain.enums import DiagnosticSeverity, Lifetime, MemberKind, Visibility
from miraveja_digen.domain.exceptions import (
    CircularDependencyError,
    CircularInheritanceError,
    DeclarationError,
    DIGenException,
    LifetimeError,
    ScopeError,
    UnresolvableError,
)
from miraveja_digen.domain.models import (
    Annotation,
    DeclarationSet,
    Diagnostic,
    GenerationResult,
    MemberDeclaration,
    Parameter,
    SourceLocation,
    SourceUnit,
    TypeDeclaration,
    TypeRef,
)
from miraveja_digen.domain.settings import GeneratorSettings

# Infrastructure exports
from miraveja_digen.infrastructure.runtime import ContextLogger, ServiceCollection, ServiceProvider
from miraveja_digen.infrastructure.sinks import FileSystemSourceSink, InMemorySourceSink

__version__ = "0.1.0"

__all__ = [
    # Generator
    "DIGenerator",
    "GeneratorSettings",
    # Declarations
    "TypeRef",
    "SourceLocation",
    "Annotation",
    "Parameter",
    "MemberDeclaration",
    "TypeDeclaration",
    "DeclarationSet",
    # Results
    "Diagnostic",
    "SourceUnit",
    "GenerationResult",
    # Sinks
    "InMemorySourceSink",
    "FileSystemSourceSink",
    # Runtime
    "ServiceCollection",
    "ServiceProvider",
    "ContextLogger",
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
]
