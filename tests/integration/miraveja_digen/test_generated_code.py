"""Integration tests running generated units against the runtime container."""

from typing import Generic, TypeVar

import pytest

from miraveja_digen import DIGenerator
from miraveja_digen.domain import DeclarationSet, GeneratorSettings, ScopeError
from miraveja_digen.infrastructure.testing import (
    build_provider,
    dependency,
    exec_unit,
    installed_module,
    method,
    plain_type,
    ref,
    service_type,
    type_param,
)

T = TypeVar("T")

CONTEXT_LOGGER = ref("miraveja_digen.infrastructure.runtime.ContextLogger")


def generate(*types):
    return DIGenerator(GeneratorSettings()).generate(DeclarationSet(types=types))


class TestScenario:
    """Test the generated wiring of A(B, C) with transient A and B and singleton C."""

    @pytest.fixture
    def provider(self):
        result = generate(
            service_type("shop.A", dependency("_b", ref("shop.B")), dependency("_c", ref("shop.C"))),
            service_type("shop.B"),
            service_type("shop.C", lifetimes=["Singleton"]),
        )

        class A:
            pass

        class B:
            pass

        class C:
            pass

        with installed_module("shop", A=A, B=B, C=C):
            yield build_provider(result, "shop")

    def test_dependencies_are_assigned(self, provider):
        from shop import A, B, C

        a = provider.resolve(A)

        assert isinstance(a._b, B)
        assert isinstance(a._c, C)

    def test_lifetimes_across_scopes(self, provider):
        from shop import A

        with provider.create_scope() as first, provider.create_scope() as second:
            a1 = first.resolve(A)
            a2 = second.resolve(A)

        assert a1 is not a2
        assert a1._b is not a2._b
        assert a1._c is a2._c


class TestInheritedDependencies:
    """Test initializers forwarding inherited dependencies up the chain."""

    def test_chain_is_initialized_at_every_level(self):
        result = generate(
            plain_type("shop.Root", dependency("_clock", ref("shop.Clock"))),
            plain_type("shop.Middle", dependency("_repository", ref("shop.Repository")), base=ref("shop.Root")),
            service_type("shop.Leaf", dependency("__mailer", ref("shop.Mailer")), base=ref("shop.Middle")),
            service_type("shop.Clock", lifetimes=["Singleton"]),
            service_type("shop.Repository"),
            service_type("shop.Mailer"),
        )

        class Clock:
            pass

        class Repository:
            pass

        class Mailer:
            pass

        class Root:
            pass

        class Middle(Root):
            pass

        class Leaf(Middle):
            def mailer(self):
                return self.__mailer

        with installed_module(
            "shop", Root=Root, Middle=Middle, Leaf=Leaf, Clock=Clock, Repository=Repository, Mailer=Mailer
        ):
            leaf = build_provider(result, "shop").resolve(Leaf)

        assert isinstance(leaf.mailer(), Mailer)
        assert isinstance(leaf._repository, Repository)
        assert isinstance(leaf._clock, Clock)

    def test_completion_hook_runs_after_assignments(self):
        result = generate(
            service_type(
                "shop.Orders",
                dependency("_clock", ref("shop.Clock")),
                method("on_initialized", ref("builtins.None")),
            ),
            service_type("shop.Clock"),
        )

        class Clock:
            pass

        class Orders:
            def on_initialized(self):
                self.ready = isinstance(self._clock, Clock)

        with installed_module("shop", Orders=Orders, Clock=Clock):
            orders = build_provider(result, "shop").resolve(Orders)

        assert orders.ready is True

    def test_inherited_completion_hook_runs_once(self):
        result = generate(
            service_type("shop.Base", method("on_initialized", ref("builtins.None"))),
            service_type("shop.Derived", dependency("_clock", ref("shop.Clock")), base=ref("shop.Base")),
            service_type("shop.Clock"),
        )

        class Clock:
            pass

        class Base:
            def on_initialized(self):
                self.calls = getattr(self, "calls", 0) + 1
                self.ready = isinstance(getattr(self, "_clock", None), Clock) or type(self) is Base

        class Derived(Base):
            pass

        with installed_module("shop", Base=Base, Derived=Derived, Clock=Clock):
            provider = build_provider(result, "shop")
            base = provider.resolve(Base)
            derived = provider.resolve(Derived)

        assert (base.ready, base.calls) == (True, 1)
        assert (derived.ready, derived.calls) == (True, 1)


class TestInterfaces:
    """Test resolving services through synthesized interfaces."""

    def test_service_resolves_through_generated_interface(self):
        result = generate(
            service_type("shop.Clock", method("now", ref("builtins.str")), interfaces=[ref("IClock")]),
            service_type("shop.Orders", dependency("_clock", ref("shop.IClock"))),
        )
        IClock = exec_unit(result.unit("shop.IClock.interface.py"))["IClock"]

        class Clock(IClock):
            def now(self):
                return "12:00"

        class Orders:
            pass

        with installed_module("shop", IClock=IClock, Clock=Clock, Orders=Orders):
            provider = build_provider(result, "shop")
            orders = provider.resolve(Orders)

        assert isinstance(provider.resolve(IClock), Clock)
        assert orders._clock.now() == "12:00"

    def test_generated_interface_is_abstract(self):
        result = generate(service_type("shop.Clock", method("now", ref("builtins.str")), interfaces=[ref("IClock")]))
        IClock = exec_unit(result.unit("shop.IClock.interface.py"))["IClock"]

        with pytest.raises(TypeError):
            IClock()


class TestOpenGenerics:
    """Test open-generic registrations closed at resolution time."""

    def test_closed_interface_resolves_to_closed_implementation(self):
        result = generate(
            service_type(
                "shop.Repository",
                dependency("_store", ref("shop.Store", type_param("T"))),
                method("count", ref("builtins.int")),
                type_parameters=["T"],
                lifetimes=["Scoped"],
                interfaces=[ref("IRepository", type_param("T"))],
            ),
            service_type("shop.Store", type_parameters=["T"], lifetimes=["Singleton"]),
        )
        IRepository = exec_unit(result.unit("shop.IRepository.interface.py"))["IRepository"]

        class User:
            pass

        class Store(Generic[T]):
            pass

        class Repository(IRepository[T]):
            def count(self):
                return 0

        with installed_module("shop", IRepository=IRepository, Repository=Repository, Store=Store, User=User):
            provider = build_provider(result, "shop")
            with provider.create_scope() as scope:
                repository = scope.resolve(IRepository[User])
                same = scope.resolve(IRepository[User])

        assert isinstance(repository, Repository)
        assert repository is same
        assert isinstance(repository._store, Store)
        assert repository._store is provider.resolve(Store[User])

    def test_scoped_service_needs_a_scope(self):
        result = generate(service_type("shop.Session", lifetimes=["Scoped"]))

        class Session:
            pass

        with installed_module("shop", Session=Session):
            provider = build_provider(result, "shop")

        with pytest.raises(ScopeError):
            provider.resolve(Session)


class TestContextualLogger:
    """Test loggers specialized with their consuming type."""

    def test_logger_is_named_after_its_owner(self):
        result = generate(service_type("shop.Orders", dependency("_log", CONTEXT_LOGGER)))

        class Orders:
            pass

        with installed_module("shop", Orders=Orders):
            orders = build_provider(result, "shop").resolve(Orders)

        assert result.diagnostics == ()
        assert orders._log.name.startswith("shop.")
        assert orders._log.name.endswith("Orders")
