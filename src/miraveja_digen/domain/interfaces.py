from abc import ABC, abstractmethod
from typing import Any, Optional, Type, TypeVar

from miraveja_digen.domain.enums import Lifetime
from miraveja_digen.domain.models import SourceUnit

T = TypeVar("T")


class ISourceSink(ABC):
    """Abstract destination for generated source units."""

    @abstractmethod
    def add_source(self, unit: SourceUnit) -> None:
        """Accept one generated unit.

        Args:
            unit: The unit to store. Names are unique within a pass.
        """


class IServiceCollection(ABC):
    """Abstract mutable registration collection targeted by the generated table."""

    @abstractmethod
    def add(self, lifetime: Lifetime, service: Any, implementation: Optional[Any] = None) -> "IServiceCollection":
        """Register ``implementation`` for ``service`` and return the collection for chaining."""

    @abstractmethod
    def build_provider(self) -> "IServiceProvider":
        """Freeze the registrations into a root provider."""


class IServiceProvider(ABC):
    """Abstract interface for runtime service resolution."""

    @abstractmethod
    def resolve(self, service: Type[T]) -> T:
        """Resolve and return an instance of the requested service.

        Args:
            service: The type to resolve.
        """

    @abstractmethod
    def create_scope(self) -> "IServiceProvider":
        """Create and return a new scoped provider."""

    @abstractmethod
    def close(self) -> None:
        """Release cached scoped instances."""
