"""Unit tests for element classification."""

from collections.abc import Callable

import pytest

from doclink.core.models import Deprecation
from doclink.core.session import DocSession

PUBLIC = ["public"]


def qnames(elements) -> set[str]:
    return {e.qualified_name for e in elements}


@pytest.fixture
def deprecated_session(make_session: Callable[..., DocSession]) -> DocSession:
    """A deprecated with advice; B extends A; C extends B; D annotated; E tag without text."""
    return make_session(
        [
            {
                "package": "p",
                "name": "A",
                "modifiers": PUBLIC,
                "doc": {"body": "Old.", "tags": [{"tag": "deprecated", "text": "use D"}]},
                "methods": [{"name": "m", "modifiers": PUBLIC}],
            },
            {
                "package": "p",
                "name": "B",
                "modifiers": PUBLIC,
                "superclass": "p.A",
                "methods": [
                    {"name": "m", "modifiers": PUBLIC},
                    {"name": "n", "modifiers": PUBLIC},
                ],
            },
            {"package": "p", "name": "C", "modifiers": PUBLIC, "superclass": "p.B"},
            {
                "package": "p",
                "name": "D",
                "modifiers": PUBLIC,
                "annotations": ["java.lang.Deprecated"],
            },
            {
                "package": "p",
                "name": "E",
                "modifiers": PUBLIC,
                "doc": {"body": "Gone.", "tags": [{"tag": "deprecated"}]},
            },
            {"package": "p", "name": "F", "modifiers": PUBLIC},
        ]
    )


@pytest.fixture
def excluded_session(make_session: Callable[..., DocSession]) -> DocSession:
    """Hidden is excluded; Impl implements it; Base.m is excluded and Sub.m overrides it."""
    return make_session(
        [
            {
                "package": "p",
                "name": "Hidden",
                "kind": "interface",
                "modifiers": PUBLIC,
                "doc": {"body": "Internal.", "tags": [{"tag": "undocumented"}]},
            },
            {"package": "p", "name": "Impl", "modifiers": PUBLIC, "interfaces": ["p.Hidden"]},
            {
                "package": "p",
                "name": "Base",
                "modifiers": PUBLIC,
                "methods": [
                    {
                        "name": "m",
                        "modifiers": PUBLIC,
                        "doc": {"body": "", "tags": [{"tag": "undocumented"}]},
                    },
                    {"name": "k", "modifiers": PUBLIC},
                ],
            },
            {
                "package": "p",
                "name": "Sub",
                "modifiers": PUBLIC,
                "superclass": "p.Base",
                "methods": [
                    {"name": "m", "modifiers": PUBLIC},
                    {"name": "k", "modifiers": PUBLIC},
                ],
            },
        ]
    )


class TestExclusion:
    """Tests for the excluded quality."""

    def test_tagged_type_excluded(self, excluded_session: DocSession) -> None:
        assert excluded_session.get_qualities(excluded_session.require("p.Hidden")).excluded

    def test_subtype_of_excluded_type(self, excluded_session: DocSession) -> None:
        assert excluded_session.get_qualities(excluded_session.require("p.Impl")).excluded

    def test_members_of_excluded_type(self, excluded_session: DocSession) -> None:
        ctor = excluded_session.require("p.Impl#Impl()")
        assert excluded_session.get_qualities(ctor).excluded

    def test_overrider_of_excluded_method(self, excluded_session: DocSession) -> None:
        session = excluded_session
        assert not session.get_qualities(session.require("p.Sub")).excluded
        assert session.get_qualities(session.require("p.Sub#m()")).excluded
        assert not session.get_qualities(session.require("p.Sub#k()")).excluded

    def test_excluded_elements(self, excluded_session: DocSession) -> None:
        assert qnames(excluded_session.classification.excluded_elements) == {
            "p.Hidden",
            "p.Impl",
            "p.Impl#Impl()",
            "p.Base#m()",
            "p.Sub#m()",
        }


class TestDeprecation:
    """Tests for the deprecation quality."""

    def test_advised(self, deprecated_session: DocSession) -> None:
        q = deprecated_session.get_qualities(deprecated_session.require("p.A"))
        assert q.deprecation == Deprecation.ADVISED
        assert q.causes == frozenset()

    def test_marked_by_annotation(self, deprecated_session: DocSession) -> None:
        q = deprecated_session.get_qualities(deprecated_session.require("p.D"))
        assert q.deprecation == Deprecation.MARKED

    def test_marked_by_empty_tag(self, deprecated_session: DocSession) -> None:
        q = deprecated_session.get_qualities(deprecated_session.require("p.E"))
        assert q.deprecation == Deprecation.MARKED

    def test_implied_by_supertype(self, deprecated_session: DocSession) -> None:
        session = deprecated_session
        a = session.require("p.A")
        q = session.get_qualities(session.require("p.B"))
        assert q.deprecation == Deprecation.IMPLIED
        assert q.causes == frozenset({a})

    def test_causes_propagate_transitively(self, deprecated_session: DocSession) -> None:
        session = deprecated_session
        q = session.get_qualities(session.require("p.C"))
        assert q.deprecation == Deprecation.IMPLIED
        assert qnames(q.causes) == {"p.A"}

    def test_implied_by_container(self, deprecated_session: DocSession) -> None:
        session = deprecated_session
        q = session.get_qualities(session.require("p.B#n()"))
        assert q.deprecation == Deprecation.IMPLIED
        assert qnames(q.causes) == {"p.A"}

    def test_members_of_explicitly_deprecated_type(self, deprecated_session: DocSession) -> None:
        session = deprecated_session
        q = session.get_qualities(session.require("p.A#m()"))
        assert q.deprecation == Deprecation.IMPLIED
        assert qnames(q.causes) == {"p.A"}

    def test_not_deprecated(self, deprecated_session: DocSession) -> None:
        q = deprecated_session.get_qualities(deprecated_session.require("p.F"))
        assert q.deprecation == Deprecation.NONE
        assert not q.deprecation.is_deprecated

    def test_deprecated_elements(self, deprecated_session: DocSession) -> None:
        deprecated = deprecated_session.classification.deprecated_elements
        assert {e.qualified_name for e in deprecated} >= {"p.A", "p.B", "p.C", "p.D", "p.E"}
        assert "p.F" not in qnames(deprecated)


class TestIndexes:
    """Tests for the usage indexes."""

    def test_producers(self, zoo: DocSession) -> None:
        food = zoo.require_type("zoo.Food")
        assert qnames(zoo.classification.lookup(zoo.producers, food)) == {"zoo.Food#NONE"}

    def test_consumers(self, zoo: DocSession) -> None:
        food = zoo.require_type("zoo.Food")
        assert qnames(zoo.classification.lookup(zoo.consumers, food)) == {
            "zoo.Keeper#feed(zoo.Food)",
            "zoo.Animal#eat(zoo.Food,int)",
            "zoo.Dog#eat(zoo.Food,int)",
        }

    def test_transformer_removed_from_producers_and_consumers(self, zoo: DocSession) -> None:
        food = zoo.require_type("zoo.Food")
        mix = zoo.require("zoo.Food#mix(zoo.Food)")
        assert zoo.transformers[food] == frozenset({mix})
        assert mix not in zoo.classification.lookup(zoo.producers, food)
        assert mix not in zoo.classification.lookup(zoo.consumers, food)

    def test_pseudo_constructors(self, zoo: DocSession) -> None:
        food = zoo.require_type("zoo.Food")
        assert qnames(zoo.pseudo_constructors[food]) == {"zoo.Food#of(java.lang.String)"}
        assert not any(m.name == "of" for m in zoo.classification.lookup(zoo.producers, food))

    def test_known_subtypes(self, zoo: DocSession) -> None:
        animal = zoo.require_type("zoo.Animal")
        pet = zoo.require_type("zoo.Pet")
        assert qnames(zoo.known_subtypes[animal]) == {"zoo.Dog", "zoo.Puppy"}
        assert qnames(zoo.known_direct_subtypes[animal]) == {"zoo.Dog"}
        assert qnames(zoo.known_subtypes[pet]) == {"zoo.Dog", "zoo.Puppy"}
        assert qnames(zoo.known_direct_subtypes[pet]) == {"zoo.Dog"}

    def test_direct_subtypes_within_subtypes(self, zoo: DocSession) -> None:
        for key, direct in zoo.known_direct_subtypes.items():
            assert direct <= zoo.known_subtypes[key]

    def test_missing_key(self, zoo: DocSession) -> None:
        keeper = zoo.require_type("zoo.Keeper")
        assert zoo.classification.lookup(zoo.producers, keeper) == frozenset()
        assert keeper not in zoo.known_subtypes

    def test_excluded_types_are_not_indexed(self, excluded_session: DocSession) -> None:
        hidden = excluded_session.require_type("p.Hidden")
        assert hidden not in excluded_session.known_subtypes


class TestClassificationOrder:
    """Tests for the two-phase classification."""

    def test_every_visible_member_of_included_type_classified(self, zoo: DocSession) -> None:
        for t in zoo.universe.types:
            for member in t.members:
                if member.kind.is_member and member.is_visible:
                    assert zoo.get_qualities(member) is not None

    def test_excluded_type_not_included(self, make_session: Callable[..., DocSession]) -> None:
        session = make_session(
            [
                {"package": "p", "name": "Lib", "modifiers": PUBLIC, "included": False},
                {"package": "p", "name": "App", "modifiers": PUBLIC, "superclass": "p.Lib"},
            ]
        )
        assert session.get_qualities(session.require("p.Lib")) is None
        assert session.get_qualities(session.require("p.App")).deprecation == Deprecation.NONE

    def test_private_members_not_classified(self, make_session: Callable[..., DocSession]) -> None:
        session = make_session(
            [
                {
                    "package": "p",
                    "name": "A",
                    "modifiers": PUBLIC,
                    "fields": [{"name": "secret", "type": "int", "modifiers": ["private"]}],
                }
            ]
        )
        assert session.get_qualities(session.require("p.A#secret")) is None
