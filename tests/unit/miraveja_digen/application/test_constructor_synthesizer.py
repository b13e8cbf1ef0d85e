"""Unit tests for ConstructorSynthesizer."""

from miraveja_digen.application.collector import DependencyCollector
from miraveja_digen.application.constructor_synthesizer import ConstructorSynthesizer, parameter_name
from miraveja_digen.application.conventions import Conventions
from miraveja_digen.domain import DeclarationSet, GeneratorSettings, MemberDeclaration, MemberKind
from miraveja_digen.infrastructure.testing import (
    dependency,
    interface_type,
    method,
    plain_type,
    ref,
    service_type,
    type_param,
)

CONTEXT_LOGGER = ref("miraveja_digen.infrastructure.runtime.ContextLogger")


def synthesize(*types, **overrides):
    settings = GeneratorSettings(**overrides)
    declarations = DeclarationSet(types=types)
    collection = DependencyCollector(settings).collect(declarations)
    plans = ConstructorSynthesizer(Conventions(declarations), collection, settings).synthesize()
    return {plan.owner.name: plan for plan in plans}


class TestParameterName:
    """Test cases for parameter naming."""

    def test_leading_underscores_are_stripped(self):
        assert parameter_name("_clock") == "clock"
        assert parameter_name("__clock") == "clock"
        assert parameter_name("clock") == "clock"

    def test_keywords_are_escaped(self):
        assert parameter_name("_class") == "class_"
        assert parameter_name("self") == "self_"


class TestOwnDependencies:
    """Test cases for types without inherited dependencies."""

    def test_scenario_parameters_follow_declaration_order(self):
        a = service_type("app.A", dependency("_b", ref("app.B")), dependency("_c", ref("app.C")))
        b = service_type("app.B")
        c = service_type("app.C", lifetimes=["Singleton"])

        plans = synthesize(a, b, c)

        plan = plans["A"]
        assert [(parameter.name, parameter.type) for parameter in plan.parameters] == [
            ("b", ref("app.B")),
            ("c", ref("app.C")),
        ]
        assert plan.assignments == (("_b", "b"), ("_c", "c"))
        assert plan.base is None
        assert plan.forwarded == ()

    def test_roots_without_dependencies_get_empty_initializer(self):
        plans = synthesize(service_type("app.B"))

        assert plans["B"].parameters == ()

    def test_plain_types_and_interfaces_get_nothing(self):
        plans = synthesize(plain_type("app.Plain"), interface_type("app.IClock"))

        assert plans == {}

    def test_completion_hook_only_when_declared(self):
        hooked = service_type("app.Hooked", method("on_initialized", ref("builtins.None")))
        plain = service_type("app.Plain")

        plans = synthesize(hooked, plain)

        assert plans["Hooked"].completion_hook == "on_initialized"
        assert plans["Plain"].completion_hook is None

    def test_custom_completion_hook(self):
        hooked = service_type("app.Hooked", method("post_init", ref("builtins.None")))

        plans = synthesize(hooked, completion_hook="post_init")

        assert plans["Hooked"].completion_hook == "post_init"


class TestInheritedDependencies:
    """Test cases for chain-aware initializers."""

    def chain(self):
        root = plain_type("app.Root", dependency("_clock", ref("app.Clock")))
        middle = plain_type("app.Middle", dependency("_repository", ref("app.Repository")), base=ref("app.Root"))
        leaf = service_type(
            "app.Leaf",
            dependency("_mailer", ref("app.Mailer")),
            dependency("_sender", ref("app.Sender")),
            base=ref("app.Middle"),
        )
        return synthesize(root, middle, leaf)

    def test_parameter_count_is_own_plus_inherited(self):
        """Test that own parameters come first, then each ancestor's, nearest first."""
        plan = self.chain()["Leaf"]

        assert [parameter.name for parameter in plan.parameters] == ["mailer", "sender", "repository", "clock"]
        assert [parameter.declared_by.name for parameter in plan.parameters] == ["Leaf", "Leaf", "Middle", "Root"]

    def test_inherited_parameters_are_forwarded_to_direct_base(self):
        plans = self.chain()

        assert plans["Leaf"].base == ref("app.Middle")
        assert plans["Leaf"].forwarded == ("repository", "clock")
        assert plans["Leaf"].assignments == (("_mailer", "mailer"), ("_sender", "sender"))
        assert plans["Middle"].base == ref("app.Root")
        assert plans["Middle"].forwarded == ("clock",)
        assert plans["Root"].base is None

    def test_derived_type_without_own_dependencies_still_forwards(self):
        root = plain_type("app.Root", dependency("_clock", ref("app.Clock")))
        derived = plain_type("app.Derived", base=ref("app.Root"))

        plan = synthesize(root, derived)["Derived"]

        assert [parameter.name for parameter in plan.parameters] == ["clock"]
        assert plan.assignments == ()
        assert plan.forwarded == ("clock",)

    def test_same_member_name_on_several_levels(self):
        root = plain_type("app.Root", dependency("_clock", ref("app.Clock")))
        leaf = service_type("app.Leaf", dependency("_clock", ref("app.LocalClock")), base=ref("app.Root"))

        plan = synthesize(root, leaf)["Leaf"]

        assert [parameter.name for parameter in plan.parameters] == ["clock", "clock_2"]
        assert plan.assignments == (("_clock", "clock"),)
        assert plan.forwarded == ("clock_2",)

    def test_generic_base_dependencies_are_substituted(self):
        base = plain_type("app.Base", dependency("_store", ref("app.Store", type_param("T"))), type_parameters=["T"])
        derived = service_type("app.Derived", base=ref("app.Base", ref("app.User")))

        plan = synthesize(base, derived)["Derived"]

        assert plan.parameters[0].type == ref("app.Store", ref("app.User"))
        assert plan.base == ref("app.Base", ref("app.User"))

    def test_type_parameter_bounds_are_carried(self):
        repository = service_type(
            "app.Repository",
            dependency("_store", ref("app.Store", type_param("T"))),
            type_parameters=["T"],
            bounds={"T": ref("app.Entity")},
        )

        plan = synthesize(repository)["Repository"]

        assert [(bound.parameter, bound.bound) for bound in plan.bounds] == [("T", ref("app.Entity"))]

    def test_base_initializer_without_dependencies_is_still_called(self):
        base = service_type("app.Base")
        derived = service_type("app.Derived", dependency("_clock", ref("app.Clock")), base=ref("app.Base"))

        plan = synthesize(base, derived)["Derived"]

        assert plan.base == ref("app.Base")
        assert plan.forwarded == ()

    def test_base_without_initializer_is_not_called(self):
        base = plain_type("app.Base")
        derived = service_type("app.Derived", dependency("_clock", ref("app.Clock")), base=ref("app.Base"))

        assert synthesize(base, derived)["Derived"].base is None

    def test_inherited_completion_hook_runs_once_for_the_derived_type(self):
        base = service_type("app.Base", method("on_initialized", ref("builtins.None")))
        derived = service_type("app.Derived", dependency("_clock", ref("app.Clock")), base=ref("app.Base"))

        plans = synthesize(base, derived)

        assert plans["Derived"].completion_hook == "on_initialized"
        assert not plans["Derived"].guard_completion
        assert plans["Base"].completion_hook == "on_initialized"
        assert plans["Base"].guard_completion


class TestContextualTypes:
    """Test cases for contextual type specialization."""

    def test_contextual_type_receives_owner(self):
        orders = service_type("app.Orders", dependency("_log", CONTEXT_LOGGER))

        plan = synthesize(orders)["Orders"]

        assert plan.parameters[0].type == CONTEXT_LOGGER.with_arguments(ref("app.Orders"))

    def test_explicit_arguments_are_kept(self):
        explicit = CONTEXT_LOGGER.with_arguments(ref("app.Other"))
        orders = service_type("app.Orders", dependency("_log", explicit))

        assert synthesize(orders)["Orders"].parameters[0].type == explicit

    def test_other_types_are_not_specialized(self):
        orders = service_type(
            "app.Orders",
            MemberDeclaration(
                name="_log",
                type=ref("app.Logger"),
                kind=MemberKind.PROPERTY,
                annotations=dependency("_x", ref("app.X")).annotations,
            ),
        )

        assert synthesize(orders)["Orders"].parameters[0].type == ref("app.Logger")
