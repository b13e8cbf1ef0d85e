from typing import Any, Dict, Mapping, Optional, Tuple, Type, TypeVar, get_args, get_origin

import structlog

from miraveja_digen.domain import IServiceProvider, ScopeError, UnresolvableError
from miraveja_digen.infrastructure.runtime.descriptors import ServiceDescriptor
from miraveja_digen.infrastructure.runtime.lifetime_manager import LifetimeManager
from miraveja_digen.infrastructure.runtime.resolution_path import ResolutionPath
from miraveja_digen.infrastructure.runtime.resolver import DependencyResolver

T = TypeVar("T")

logger = structlog.get_logger(__name__)


class ServiceProvider(IServiceProvider):
    """Resolves services from a frozen set of registrations.

    The root provider owns singletons. Scopes created from it share those
    singletons and the registrations, and cache scoped instances of their own.

    Attributes:
        _descriptors: Registrations keyed by service.
        _resolver: Builds implementations from their initializer signature.
        _lifetime_manager: Caches instances per lifetime.
        _path: Services under construction on each thread, shared with scopes.
    """

    def __init__(
        self,
        descriptors: Mapping[Any, ServiceDescriptor],
        parent: Optional["ServiceProvider"] = None,
    ) -> None:
        self._descriptors: Dict[Any, ServiceDescriptor] = dict(descriptors)
        self._resolver = DependencyResolver()
        if parent is None:
            self._lifetime_manager = LifetimeManager()
            self._path = ResolutionPath()
        else:
            self._lifetime_manager = LifetimeManager(parent._lifetime_manager.get_singleton_cache())
            self._path = parent._path
        self._closed = False

    @property
    def is_scope(self) -> bool:
        return self._lifetime_manager.is_scope

    def resolve(self, service: Type[T]) -> T:
        """Resolve and return an instance of ``service``.

        Exact registrations win. A parameterized generic such as
        ``IRepository[User]`` otherwise falls back to an open-generic
        registration of ``IRepository``, closed over the same arguments.

        Raises:
            UnresolvableError: If no registration matches or construction fails.
            CircularDependencyError: If the service requires itself.
            ScopeError: If the provider is closed, or a scoped service is requested from the root.

        Example:
            >>> with provider.create_scope() as scope:
            ...     handler = scope.resolve(IOrderHandler)
        """
        if self._closed:
            raise ScopeError("Cannot resolve from a closed provider")
        if service in (IServiceProvider, ServiceProvider):
            return self  # type: ignore[return-value]

        descriptor, implementation = self._lookup(service)
        with self._path.entering(service):
            return self._lifetime_manager.get_or_create(
                service,
                descriptor.lifetime,
                lambda: self._create(descriptor, implementation),
            )

    def _create(self, descriptor: ServiceDescriptor, implementation: Any) -> Any:
        if descriptor.factory is not None:
            return descriptor.factory(self)
        return self._resolver.construct(implementation, self)

    def _lookup(self, service: Any) -> Tuple[ServiceDescriptor, Any]:
        descriptor = self._descriptors.get(service)
        if descriptor is not None:
            return descriptor, descriptor.implementation

        origin = get_origin(service)
        descriptor = self._descriptors.get(origin) if origin is not None else None
        if descriptor is not None and descriptor.is_open_generic:
            arguments = get_args(service)
            if len(arguments) != len(descriptor.type_parameters):
                reason = self._reason("Generic argument count does not match the open registration")
                raise UnresolvableError(service, reason)
            return descriptor, descriptor.implementation[arguments]

        raise UnresolvableError(service, self._reason("No registration found"))

    def _reason(self, reason: str) -> str:
        if not self._path.frames:
            return reason
        return f"{reason} (required by {self._path.describe()})"

    def create_scope(self) -> "ServiceProvider":
        """Create a child provider sharing registrations and singletons."""
        if self._closed:
            raise ScopeError("Cannot create a scope from a closed provider")
        logger.debug("scope_created", services=len(self._descriptors))
        return ServiceProvider(self._descriptors, parent=self)

    def close(self) -> None:
        """Drop scoped instances; closing the root also drops singletons."""
        self._lifetime_manager.clear_scoped_cache()
        if not self.is_scope:
            self._lifetime_manager.get_singleton_cache().clear()
        self._closed = True

    def __enter__(self) -> "ServiceProvider":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
