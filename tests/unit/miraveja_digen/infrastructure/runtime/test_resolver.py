"""Unit tests for DependencyResolver."""

from typing import Generic, List, Optional, TypeVar

import pytest

from miraveja_digen.domain import UnresolvableError
from miraveja_digen.infrastructure.runtime import DependencyResolver
from miraveja_digen.infrastructure.runtime.resolver import substitute, type_arguments

T = TypeVar("T")


class User:
    pass


class Store(Generic[T]):
    pass


class Repository(Generic[T]):
    def __init__(self, store: Store[T]) -> None:
        self.store = store


class FakeProvider:
    """Records requested services and answers with a marker tuple."""

    def __init__(self):
        self.requested = []

    def resolve(self, service):
        self.requested.append(service)
        return ("resolved", service)


class TestTypeSubstitution:
    """Test cases for generic helpers."""

    def test_type_arguments_by_name(self):
        assert type_arguments(Repository[User]) == {"T": User}
        assert type_arguments(Repository) == {}

    def test_substitute_by_type_variable_name(self):
        """Test that a different TypeVar object with the same name is substituted."""
        other_t = TypeVar("T")

        assert substitute(Store[other_t], {"T": User}) == Store[User]
        assert substitute(List[Store[other_t]], {"T": User}) == list[Store[User]]
        assert substitute(other_t, {"T": User}) is User

    def test_substitute_leaves_plain_types(self):
        assert substitute(User, {"T": int}) is User
        assert substitute(Store[User], {}) == Store[User]


class TestDependencyResolver:
    """Test cases for initializer introspection."""

    def test_resolves_annotated_parameters(self):
        class Orders:
            def __init__(self, user: User, limit: int = 10) -> None:
                self.user = user
                self.limit = limit

        provider = FakeProvider()

        orders = DependencyResolver().construct(Orders, provider)

        assert provider.requested == [User]
        assert orders.user == ("resolved", User)
        assert orders.limit == 10

    def test_closed_generic_substitutes_parameters(self):
        provider = FakeProvider()

        repository = DependencyResolver().construct(Repository[User], provider)

        assert provider.requested == [Store[User]]
        assert isinstance(repository, Repository)
        assert repository.__orig_class__ == Repository[User]

    def test_class_without_initializer(self):
        assert isinstance(DependencyResolver().construct(User, FakeProvider()), User)

    def test_varargs_are_skipped(self):
        class Flexible:
            def __init__(self, *args, **kwargs) -> None:
                self.args = args

        assert DependencyResolver().construct(Flexible, FakeProvider()).args == ()

    def test_missing_type_hint(self):
        class Untyped:
            def __init__(self, dependency) -> None:
                self.dependency = dependency

        with pytest.raises(UnresolvableError) as exc_info:
            DependencyResolver().construct(Untyped, FakeProvider())

        assert "lacks type hint" in str(exc_info.value)

    def test_dependency_failure_is_wrapped(self):
        class FailingProvider:
            def resolve(self, service):
                raise KeyError(service)

        class Orders:
            def __init__(self, user: Optional[User]) -> None:
                self.user = user

        with pytest.raises(UnresolvableError) as exc_info:
            DependencyResolver().construct(Orders, FailingProvider())

        assert "parameter 'user'" in str(exc_info.value)
