from enum import Enum


class Lifetime(str, Enum):
    """Defines the lifetime of a registered service.

    Declaration order is also the resolution priority used when a type carries
    more than one lifetime annotation.

    Attributes:
        TRANSIENT: New instance created on each resolution.
        SCOPED: Single instance per scope (e.g., per unit of work).
        SINGLETON: Single instance shared across the entire process.
    """

    TRANSIENT = "transient"
    SCOPED = "scoped"
    SINGLETON = "singleton"

    def __str__(self) -> str:
        return self.value

    @property
    def priority(self) -> int:
        """Lower value wins when several lifetimes are declared."""
        return list(Lifetime).index(self)


class MemberKind(str, Enum):
    """Kinds of members a type declaration may carry."""

    FIELD = "field"
    PROPERTY = "property"
    METHOD = "method"
    EVENT = "event"
    CONSTRUCTOR = "constructor"

    def __str__(self) -> str:
        return self.value


class Visibility(str, Enum):
    PUBLIC = "public"
    PROTECTED = "protected"
    INTERNAL = "internal"
    PRIVATE = "private"

    def __str__(self) -> str:
        return self.value


class DiagnosticSeverity(str, Enum):
    """Severity of a generation diagnostic."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"

    def __str__(self) -> str:
        return self.value
