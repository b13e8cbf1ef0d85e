from typing import Any, Callable, Dict, Optional

from miraveja_digen.domain import CircularDependencyError, Lifetime, LifetimeError, ScopeError, UnresolvableError


class LifetimeManager:
    """Caches instances according to their lifetime.

    A root manager owns the singleton cache. Every scope created from it gets a
    manager sharing that cache and holding a scoped cache of its own.

    Attributes:
        _singleton_cache: Singleton instances, shared with every scope.
        _scoped_cache: Scoped instances of this scope only.
        _is_scope: Whether scoped instances may be cached here.
    """

    def __init__(self, parent_singleton_cache: Optional[Dict[Any, Any]] = None) -> None:
        """Initialize the lifetime manager.

        Args:
            parent_singleton_cache: Singleton cache of the root provider. Passing
                one turns this manager into a scope manager.
        """
        self._is_scope = parent_singleton_cache is not None
        self._singleton_cache: Dict[Any, Any] = parent_singleton_cache if parent_singleton_cache is not None else {}
        self._scoped_cache: Dict[Any, Any] = {}

    @property
    def is_scope(self) -> bool:
        return self._is_scope

    def get_or_create(self, key: Any, lifetime: Lifetime, factory: Callable[[], Any]) -> Any:
        """Return the cached instance for ``key`` or create one with ``factory``.

        Args:
            key: The requested service.
            lifetime: Lifetime of the matching registration.
            factory: Builds a new instance.

        Returns:
            - Singleton: the process-wide instance.
            - Scoped: the instance of the current scope.
            - Transient: a new instance on every call.

        Raises:
            ScopeError: If a scoped service is requested outside a scope.
            LifetimeError: If ``lifetime`` is not a known lifetime.
            UnresolvableError: If ``factory`` raised.
        """
        if lifetime == Lifetime.SINGLETON:
            if key not in self._singleton_cache:
                self._singleton_cache[key] = self._create(key, factory)
            return self._singleton_cache[key]

        if lifetime == Lifetime.SCOPED:
            if not self._is_scope:
                raise ScopeError(f"Scoped service {key!r} cannot be resolved from the root provider")
            if key not in self._scoped_cache:
                self._scoped_cache[key] = self._create(key, factory)
            return self._scoped_cache[key]

        if lifetime == Lifetime.TRANSIENT:
            return self._create(key, factory)

        raise LifetimeError(f"Unknown lifetime: {lifetime!r}")

    def _create(self, key: Any, factory: Callable[[], Any]) -> Any:
        try:
            return factory()
        except (UnresolvableError, CircularDependencyError, ScopeError):
            raise
        except Exception as e:
            raise UnresolvableError(key, f"Failed to create instance: {e}") from e

    def clear_scoped_cache(self) -> None:
        self._scoped_cache.clear()

    def get_singleton_cache(self) -> Dict[Any, Any]:
        return self._singleton_cache
