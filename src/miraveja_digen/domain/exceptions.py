from typing import Any, List, Optional, Sequence, get_args, get_origin


class DIGenException(Exception):
    """Base exception for generator and runtime container errors."""


class DeclarationError(DIGenException):
    """Raised when the declaration set itself is invalid.

    This is a fatal input error and aborts the generation pass. It occurs when:
    - Two declarations share the same identity (namespace and name).
    - An inheritance chain loops back on itself.
    """


class CircularInheritanceError(DeclarationError):
    """Raised when following base references revisits a type.

    Attributes:
        chain: Full names of the types involved, ending with the repeated one.
    """

    def __init__(self, chain: Sequence[str]) -> None:
        self.chain = list(chain)
        super().__init__(f"Circular inheritance detected: {' -> '.join(self.chain)}")


class CircularDependencyError(DIGenException):
    """Raised when a circular dependency is detected during runtime resolution.

    Attributes:
        dependency_chain: List of types involved in the circular dependency.
    """

    def __init__(self, dependency_chain: List[Any]) -> None:
        self.dependency_chain = dependency_chain
        message = f"Circular dependency detected: {' -> '.join([type_name(cls) for cls in dependency_chain])}"
        super().__init__(message)


class UnresolvableError(DIGenException):
    """Raised when a service cannot be resolved by the runtime container.

    This occurs when:
    - No registration exists for the requested type.
    - Initializer parameters lack type hints.
    - The implementation raised while being constructed.

    Attributes:
        cls: The type that could not be resolved.
        reason: Optional reason for the failure.
    """

    def __init__(self, cls: Any, reason: Optional[str] = None) -> None:
        self.cls = cls
        self.reason = reason
        message = f"Cannot resolve dependency for type: {type_name(cls)}"
        if reason:
            message += f". Reason: {reason}"
        super().__init__(message)


class LifetimeError(DIGenException):
    """Raised for invalid lifetime configurations.

    This occurs when an unknown lifetime value reaches the runtime container.
    """


class ScopeError(DIGenException):
    """Raised for invalid scope operations.

    This occurs when:
    - Attempting to resolve a scoped service from the root provider.
    - Resolving from a scope that has already been disposed.
    """


def type_name(cls: Any) -> str:
    """Readable name of a service, with generic arguments, e.g. ``IRepository[User]``."""
    origin = get_origin(cls)
    if origin is not None:
        return f"{type_name(origin)}[{', '.join(type_name(argument) for argument in get_args(cls))}]"
    return getattr(cls, "__name__", None) or repr(cls)
