import inspect
from typing import TYPE_CHECKING, Any, Dict, TypeVar, get_args, get_origin, get_type_hints

from miraveja_digen.domain import CircularDependencyError, ScopeError, UnresolvableError

if TYPE_CHECKING:
    from miraveja_digen.infrastructure.runtime.provider import ServiceProvider


def type_arguments(implementation: Any) -> Dict[str, Any]:
    """Map the type variable names of a parameterized generic to its arguments.

    Names are used instead of ``TypeVar`` identity since a generated
    initializer declares type variables of its own.
    """
    origin = get_origin(implementation)
    if origin is None:
        return {}
    parameters = getattr(origin, "__parameters__", ())
    return {parameter.__name__: argument for parameter, argument in zip(parameters, get_args(implementation))}


def substitute(hint: Any, mapping: Dict[str, Any]) -> Any:
    """Replace type variables in ``hint`` by the types bound in ``mapping``."""
    if isinstance(hint, TypeVar):
        return mapping.get(hint.__name__, hint)
    origin = get_origin(hint)
    arguments = get_args(hint)
    if origin is None or not arguments or not mapping:
        return hint
    bound = tuple(substitute(argument, mapping) for argument in arguments)
    if bound == arguments:
        return hint
    return origin[bound]


class DependencyResolver:
    """Constructs implementations by resolving their initializer parameters.

    Generated initializers carry one annotated parameter per dependency, so the
    resolver reads the signature and type hints of ``__init__`` and asks the
    provider for each of them.
    """

    def construct(self, implementation: Any, provider: "ServiceProvider") -> Any:
        """Resolve every initializer parameter and create an instance.

        Args:
            implementation: Class, or parameterized generic class, to instantiate.
            provider: Provider the parameters are resolved from.

        Returns:
            The constructed instance.

        Raises:
            UnresolvableError: If a parameter lacks a type hint or cannot be resolved.

        Example:
            >>> class Handler:
            ...     def __init__(self, repository: IRepository[User]) -> None:
            ...         self.repository = repository
            >>>
            >>> handler = DependencyResolver().construct(Handler, scope)
        """
        cls = get_origin(implementation) or implementation
        mapping = type_arguments(implementation)
        try:
            signature = inspect.signature(cls.__init__)
            type_hints = get_type_hints(cls.__init__)
        except Exception as e:
            raise UnresolvableError(cls, f"Failed to inspect initializer: {e}") from e

        kwargs = {}
        for name, parameter in signature.parameters.items():
            if name == "self":
                continue
            if parameter.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
                continue
            if parameter.default is not inspect.Parameter.empty:
                continue
            if name not in type_hints:
                raise UnresolvableError(cls, f"Parameter '{name}' lacks type hint and has no default value.")

            try:
                kwargs[name] = provider.resolve(substitute(type_hints[name], mapping))
            except (CircularDependencyError, ScopeError):
                raise
            except Exception as e:
                raise UnresolvableError(cls, f"Failed to resolve dependency for parameter '{name}': {e}") from e

        return implementation(**kwargs)
