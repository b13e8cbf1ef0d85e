from typing import Any, Callable, Dict, Iterator, Optional, Union

import structlog

from miraveja_digen.domain import IServiceCollection, Lifetime, LifetimeError
from miraveja_digen.infrastructure.runtime.context_logger import ContextLogger
from miraveja_digen.infrastructure.runtime.descriptors import ServiceDescriptor
from miraveja_digen.infrastructure.runtime.provider import ServiceProvider

logger = structlog.get_logger(__name__)


class ServiceCollection(IServiceCollection):
    """Mutable set of registrations, the target of generated registration tables.

    Every ``add`` method returns the collection so calls can be chained:

    Example:
        >>> provider = (
        ...     ServiceCollection()
        ...     .add_logging()
        ...     .add_singleton(IClock, SystemClock)
        ...     .add_transient(OrderService, OrderService)
        ...     .build_provider()
        ... )

    A later registration of the same service replaces the earlier one.
    """

    def __init__(self) -> None:
        self._descriptors: Dict[Any, ServiceDescriptor] = {}

    def add(
        self,
        lifetime: Union[Lifetime, str],
        service: Any,
        implementation: Optional[Any] = None,
    ) -> "ServiceCollection":
        """Register ``implementation`` for ``service``.

        Args:
            lifetime: The lifetime, or its name.
            service: The type requested at resolution time.
            implementation: The type to construct. Defaults to ``service``.

        Raises:
            LifetimeError: If ``lifetime`` is not a known lifetime.
        """
        try:
            lifetime = Lifetime(lifetime)
        except ValueError as e:
            raise LifetimeError(f"Unknown lifetime: {lifetime!r}") from e

        descriptor = ServiceDescriptor(
            service=service,
            implementation=service if implementation is None else implementation,
            lifetime=lifetime,
        )
        if service in self._descriptors:
            logger.debug("service_replaced", service=repr(service), lifetime=str(lifetime))
        self._descriptors[service] = descriptor
        return self

    def add_transient(self, service: Any, implementation: Optional[Any] = None) -> "ServiceCollection":
        return self.add(Lifetime.TRANSIENT, service, implementation)

    def add_scoped(self, service: Any, implementation: Optional[Any] = None) -> "ServiceCollection":
        return self.add(Lifetime.SCOPED, service, implementation)

    def add_singleton(self, service: Any, implementation: Optional[Any] = None) -> "ServiceCollection":
        return self.add(Lifetime.SINGLETON, service, implementation)

    def add_factory(
        self,
        lifetime: Union[Lifetime, str],
        service: Any,
        factory: Callable[[ServiceProvider], Any],
    ) -> "ServiceCollection":
        """Register a builder called with the resolving provider instead of constructing a type.

        Example:
            >>> services.add_factory(Lifetime.SINGLETON, Settings, lambda provider: Settings.from_env())
        """
        self.add(lifetime, service)
        self._descriptors[service] = self._descriptors[service].model_copy(update={"factory": factory})
        return self

    def add_logging(self) -> "ServiceCollection":
        """Register ``ContextLogger[T]`` as one singleton per consuming type."""
        return self.add_singleton(ContextLogger, ContextLogger)

    def get(self, service: Any) -> Optional[ServiceDescriptor]:
        return self._descriptors.get(service)

    def build_provider(self) -> ServiceProvider:
        """Freeze the current registrations into a root provider."""
        logger.debug("provider_built", services=len(self._descriptors))
        return ServiceProvider(self._descriptors)

    def __contains__(self, service: Any) -> bool:
        return service in self._descriptors

    def __iter__(self) -> Iterator[ServiceDescriptor]:
        return iter(self._descriptors.values())

    def __len__(self) -> int:
        return len(self._descriptors)
