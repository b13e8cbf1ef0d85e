"""Diagnostic descriptors reported by the generation pipeline."""

from miraveja_digen.domain.enums import DiagnosticSeverity
from miraveja_digen.domain.models import DiagnosticDescriptor

DUPLICATE_LIFETIME = DiagnosticDescriptor(
    code="DIGEN001",
    title="Duplicate lifetime annotations not allowed",
    message_template=(
        "More than one lifetime annotation is specified on type '{0}'. A service may only have one lifetime."
    ),
    severity=DiagnosticSeverity.ERROR,
)

MISSING_DEPENDENCY = DiagnosticDescriptor(
    code="DIGEN002",
    title="Dependency not found",
    message_template="A required dependency '{0}' does not appear to be registered. Did you forget to register it?",
    severity=DiagnosticSeverity.WARNING,
)

UNREGISTRABLE_SERVICE = DiagnosticDescriptor(
    code="DIGEN003",
    title="Service cannot be registered",
    message_template="Service '{0}' cannot be mapped to open generic implementation '{1}' and was skipped.",
    severity=DiagnosticSeverity.WARNING,
)
