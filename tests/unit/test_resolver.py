"""Unit tests for reference resolution."""

from collections.abc import Callable

import pytest

from doclink.config import ResolverConfig
from doclink.core.diagnostics import DiagnosticKind
from doclink.core.models import ElementKind, ExecutableElement, TypeElement
from doclink.core.session import DocSession


@pytest.fixture
def imports_session(make_session: Callable[..., DocSession]) -> DocSession:
    """p.User imports q.Widget and r.*; r.Gadget has a nested r.Gadget.Part."""
    return make_session(
        [
            {"package": "q", "name": "Widget", "modifiers": ["public"]},
            {"package": "r", "name": "Gadget", "modifiers": ["public"]},
            {"package": "r", "name": "Gadget.Part", "modifiers": ["public", "static"]},
            {
                "package": "p",
                "name": "User",
                "modifiers": ["public"],
                "imports": ["q.Widget", "r.*", "static q.Widget.helper"],
                "methods": [
                    {
                        "name": "use",
                        "modifiers": ["public"],
                        "parameters": [{"name": "w", "type": "q.Widget"}],
                    },
                    {
                        "name": "log",
                        "modifiers": ["public"],
                        "parameters": [{"name": "values", "type": "java.util.List<T>"}],
                        "type_parameters": {"T": None},
                    },
                ],
            },
        ]
    )


class TestResolveSignature:
    """Tests for resolving references from the global scope and from a context."""

    def test_type(self, zoo: DocSession) -> None:
        found = zoo.resolve_signature(None, "zoo.Dog")
        assert found is not None and found.qualified_name == "zoo.Dog"

    def test_package(self, zoo: DocSession) -> None:
        found = zoo.resolve_signature(None, "zoo")
        assert found is not None and found.kind == ElementKind.PACKAGE

    def test_method_by_parameter_types(self, zoo: DocSession) -> None:
        found = zoo.resolve_signature(None, "zoo.Animal#eat(zoo.Food,int)")
        assert found is not None and found.qualified_name == "zoo.Animal#eat(zoo.Food,int)"

    def test_arity_and_types_must_match(self, zoo: DocSession) -> None:
        assert zoo.resolve_signature(None, "zoo.Animal#eat(zoo.Food)") is None
        assert zoo.resolve_signature(None, "zoo.Animal#eat(int,zoo.Food)") is None

    def test_overload_by_unresolved_parameter_name(self, zoo: DocSession) -> None:
        # java.lang.String is outside the model; it still matches by name.
        found = zoo.resolve_signature(None, "zoo.Food#of(java.lang.String)")
        assert found is not None and found.name == "of"
        records = zoo.diagnostics.records(DiagnosticKind.UNRESOLVED_PARAMETER_TYPE)
        assert [d.subject for d in records] == ["java.lang.String"]

    def test_field(self, zoo: DocSession) -> None:
        found = zoo.resolve_signature(None, "zoo.Food#NONE")
        assert found is not None and found.kind == ElementKind.FIELD

    def test_field_reference_does_not_match_method(self, zoo: DocSession) -> None:
        assert zoo.resolve_signature(None, "zoo.Food#mix") is None

    def test_inherited_member_via_search_path(self, zoo: DocSession) -> None:
        found = zoo.resolve_signature(None, "zoo.Puppy#eat(zoo.Food,int)")
        assert found is not None and found.qualified_name == "zoo.Dog#eat(zoo.Food,int)"

    def test_interface_member_via_search_path(self, zoo: DocSession) -> None:
        found = zoo.resolve_signature(None, "zoo.Puppy#name()")
        assert found is not None and found.qualified_name == "zoo.Pet#name()"

    def test_member_of_context(self, zoo: DocSession) -> None:
        dog = zoo.require_type("zoo.Dog")
        found = zoo.resolve_signature(dog, "#speak()")
        assert found is not None and found.qualified_name == "zoo.Dog#speak()"

    def test_context_from_member(self, zoo: DocSession) -> None:
        speak = zoo.require("zoo.Puppy#speak()")
        found = zoo.resolve_signature(speak, "#eat(Food,int)")
        assert found is not None and found.qualified_name == "zoo.Dog#eat(zoo.Food,int)"

    def test_sibling_type(self, zoo: DocSession) -> None:
        dog = zoo.require_type("zoo.Dog")
        found = zoo.resolve_signature(dog, "Keeper")
        assert found is not None and found.qualified_name == "zoo.Keeper"

    def test_constructor(self, zoo: DocSession) -> None:
        found = zoo.resolve_signature(None, "zoo.Dog#Dog()")
        assert found is not None and found.kind == ElementKind.CONSTRUCTOR

    def test_constructor_not_inherited(self, zoo: DocSession) -> None:
        assert zoo.require("zoo.Animal#Animal()").kind == ElementKind.CONSTRUCTOR
        assert zoo.resolve_signature(None, "zoo.Dog#Animal()") is None
        assert zoo.resolve_signature(None, "zoo.Puppy#Dog()") is None

    def test_not_found_records_diagnostic(self, zoo: DocSession) -> None:
        assert zoo.resolve_signature(None, "zoo.Cat") is None
        (diag,) = zoo.diagnostics.records(DiagnosticKind.UNRESOLVED_REFERENCE)
        assert diag.subject == "zoo.Cat"

    def test_malformed_is_recorded_not_raised(self, zoo: DocSession) -> None:
        assert zoo.resolve_signature(None, "zoo.Dog#(") is None
        assert len(zoo.diagnostics.records(DiagnosticKind.MALFORMED_SIGNATURE)) == 1

    def test_member_of_package(self, zoo: DocSession) -> None:
        assert zoo.resolve_signature(None, "zoo#speak()") is None
        assert len(zoo.diagnostics.records(DiagnosticKind.MEMBER_OF_NON_TYPE)) == 1

    def test_member_without_context(self, zoo: DocSession) -> None:
        assert zoo.resolve_signature(None, "#speak()") is None


class TestImports:
    """Tests for names resolved through import declarations."""

    def test_single_type_import(self, imports_session: DocSession) -> None:
        user = imports_session.require_type("p.User")
        found = imports_session.resolve_signature(user, "Widget")
        assert found is not None and found.qualified_name == "q.Widget"

    def test_on_demand_import(self, imports_session: DocSession) -> None:
        user = imports_session.require_type("p.User")
        found = imports_session.resolve_signature(user, "Gadget")
        assert found is not None and found.qualified_name == "r.Gadget"

    def test_nested_through_import(self, imports_session: DocSession) -> None:
        user = imports_session.require_type("p.User")
        found = imports_session.resolve_signature(user, "Gadget.Part")
        assert found is not None and found.qualified_name == "r.Gadget.Part"

    def test_parameter_type_through_import(self, imports_session: DocSession) -> None:
        user = imports_session.require_type("p.User")
        found = imports_session.resolve_signature(user, "#use(Widget)")
        assert found is not None and found.name == "use"

    def test_unresolved_parameter_expanded_by_import(
        self, make_session: Callable[..., DocSession]
    ) -> None:
        session = make_session(
            [
                {
                    "package": "p",
                    "name": "A",
                    "imports": ["java.util.List"],
                    "methods": [
                        {
                            "name": "take",
                            "modifiers": ["public"],
                            "parameters": [{"name": "l", "type": "java.util.List<java.lang.String>"}],
                        }
                    ],
                }
            ]
        )
        a = session.require_type("p.A")
        found = session.resolve_signature(a, "#take(List)")
        assert found is not None and found.name == "take"

    def test_generic_parameter_matches_erasure(self, imports_session: DocSession) -> None:
        found = imports_session.resolve_signature(None, "p.User#log(java.util.List)")
        assert found is not None and found.name == "log"


class TestAmbiguityAndModules:
    """Tests for module-qualified references and ambiguous names."""

    @pytest.fixture
    def two_modules(self, make_session: Callable[..., DocSession]) -> DocSession:
        return make_session(
            [
                {"package": "a", "name": "Thing", "module": "m2", "modifiers": ["public"]},
                {"package": "a", "name": "Thing", "module": "m1", "modifiers": ["public"]},
                {"package": "b", "name": "User", "module": "m2", "modifiers": ["public"]},
            ],
            modules=[{"name": "m1"}, {"name": "m2"}],
        )

    def test_ambiguous_returns_one_candidate(self, two_modules: DocSession) -> None:
        found = two_modules.resolve_signature(None, "a.Thing")
        assert found is not None
        assert two_modules.universe.get_module_of(found).name == "m1"
        assert len(two_modules.diagnostics.records(DiagnosticKind.AMBIGUOUS_TYPE)) == 1

    def test_context_module_preferred(self, two_modules: DocSession) -> None:
        user = two_modules.require_type("b.User")
        found = two_modules.resolve_signature(user, "a.Thing")
        assert two_modules.universe.get_module_of(found).name == "m2"

    def test_module_qualified(self, two_modules: DocSession) -> None:
        found = two_modules.resolve_signature(None, "m2/a.Thing")
        assert two_modules.universe.get_module_of(found).name == "m2"

    def test_module_only(self, two_modules: DocSession) -> None:
        found = two_modules.resolve_signature(None, "m1/")
        assert found is not None and found.kind == ElementKind.MODULE

    def test_unknown_module(self, two_modules: DocSession) -> None:
        assert two_modules.resolve_signature(None, "m9/a.Thing") is None


class TestImplicitNamespace:
    """Tests for the implicitly imported namespace."""

    def test_simple_name_found_in_implicit_namespace(
        self, make_session: Callable[..., DocSession]
    ) -> None:
        session = make_session([{"package": "lang", "name": "Text", "modifiers": ["public"]}])
        assert session.resolve_signature(None, "Text") is None

        session = make_session(
            [{"package": "lang", "name": "Text", "modifiers": ["public"]}],
            config=ResolverConfig(implicit_namespace="lang"),
        )
        found = session.resolve_signature(None, "Text")
        assert found is not None and found.qualified_name == "lang.Text"

    def test_unqualified_parameter_outside_model(self, zoo: DocSession) -> None:
        food = zoo.require_type("zoo.Food")
        of = zoo.require("zoo.Food#of(java.lang.String)")
        assert zoo.resolve_signature(food, "#of(String)") is of
        records = zoo.diagnostics.records(DiagnosticKind.UNRESOLVED_PARAMETER_TYPE)
        assert "String" in [d.subject for d in records]

    def test_unqualified_parameter_uses_configured_namespace(
        self, make_session: Callable[..., DocSession]
    ) -> None:
        session = make_session(
            [
                {
                    "package": "p",
                    "name": "A",
                    "methods": [
                        {
                            "name": "take",
                            "modifiers": ["public"],
                            "parameters": [{"name": "t", "type": "lang.Text"}],
                        }
                    ],
                }
            ],
            config=ResolverConfig(implicit_namespace="lang"),
        )
        found = session.resolve_signature(None, "p.A#take(Text)")
        assert found is not None and found.name == "take"


class TestSearchPath:
    """Tests for the level-order search path."""

    def test_search_path_levels(self, zoo: DocSession) -> None:
        puppy = zoo.require_type("zoo.Puppy")
        path = zoo.resolver.search_path([puppy])
        assert [t.name for t in path] == ["Puppy", "Dog", "Animal", "Pet"]


def member_reference(owner: TypeElement, member: ExecutableElement) -> str:
    name = owner.name if member.kind == ElementKind.CONSTRUCTOR else member.name
    params = ",".join(str(t) for t in member.erased_parameter_types())
    return f"{owner.qualified_name}#{name}({params})"


class TestRoundTrip:
    """Every executable member resolves from its own erased signature."""

    @pytest.mark.parametrize("fixture", ["zoo", "imports_session"])
    def test_executables_resolve_to_themselves(
        self, fixture: str, request: pytest.FixtureRequest
    ) -> None:
        session: DocSession = request.getfixturevalue(fixture)
        checked = 0
        for owner in session.universe.types:
            for member in owner.members:
                if member.kind not in (ElementKind.METHOD, ElementKind.CONSTRUCTOR):
                    continue
                reference = member_reference(owner, member)
                assert session.resolve_signature(None, reference) is member, reference
                checked += 1
        assert checked > 0
        assert session.diagnostics.records(DiagnosticKind.UNRESOLVED_REFERENCE) == []
