"""Shared fixtures: small program models and sessions built from them."""

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from doclink.config import ResolverConfig
from doclink.core.session import DocSession
from doclink.model import load_model_dict

PUBLIC = ["public"]


def zoo_types() -> list[dict[str, Any]]:
    """A small class hierarchy with documented and undocumented members.

    Puppy extends Dog extends Animal, Dog implements Pet. Food has a field,
    a factory, and a method that both takes and returns Food.
    """
    return [
        {
            "package": "zoo",
            "name": "Animal",
            "modifiers": PUBLIC,
            "doc": "An animal. Lives somewhere.",
            "methods": [
                {
                    "name": "speak",
                    "modifiers": PUBLIC,
                    "returns": "java.lang.String",
                    "doc": {
                        "body": "Makes a sound.",
                        "tags": [{"tag": "return", "text": "the sound"}],
                    },
                },
                {
                    "name": "eat",
                    "modifiers": PUBLIC,
                    "parameters": [
                        {"name": "food", "type": "zoo.Food"},
                        {"name": "amount", "type": "int"},
                    ],
                    "doc": {
                        "body": "Eats food.",
                        "tags": [
                            {"tag": "param", "name": "food", "text": "what to eat"},
                            {"tag": "param", "name": "amount", "text": "how much"},
                            {"tag": "throws", "name": "zoo.ZooException", "text": "on zoo trouble"},
                            {
                                "tag": "throws",
                                "name": "zoo.FoodException",
                                "text": "if the food is bad",
                            },
                        ],
                    },
                },
            ],
        },
        {
            "package": "zoo",
            "name": "Pet",
            "kind": "interface",
            "modifiers": PUBLIC,
            "doc": "A pet.",
            "methods": [
                {
                    "name": "name",
                    "modifiers": ["public", "abstract"],
                    "returns": "java.lang.String",
                    "doc": "The pet's name.",
                }
            ],
        },
        {
            "package": "zoo",
            "name": "Dog",
            "modifiers": PUBLIC,
            "superclass": "zoo.Animal",
            "interfaces": ["zoo.Pet"],
            "doc": "A dog.",
            "methods": [
                {"name": "speak", "modifiers": PUBLIC, "returns": "java.lang.String"},
                {
                    "name": "eat",
                    "modifiers": PUBLIC,
                    "parameters": [
                        {"name": "meal", "type": "zoo.Food"},
                        {"name": "grams", "type": "int"},
                    ],
                },
            ],
        },
        {
            "package": "zoo",
            "name": "Puppy",
            "modifiers": PUBLIC,
            "superclass": "zoo.Dog",
            "methods": [{"name": "speak", "modifiers": PUBLIC, "returns": "java.lang.String"}],
        },
        {
            "package": "zoo",
            "name": "Food",
            "modifiers": PUBLIC,
            "doc": "Food.",
            "fields": [
                {
                    "name": "NONE",
                    "type": "zoo.Food",
                    "modifiers": ["public", "static", "final"],
                    "doc": "No food at all.",
                }
            ],
            "methods": [
                {
                    "name": "of",
                    "modifiers": ["public", "static"],
                    "parameters": [{"name": "name", "type": "java.lang.String"}],
                    "returns": "zoo.Food",
                    "doc": {"body": "Looks food up.", "tags": [{"tag": "constructor"}]},
                },
                {
                    "name": "mix",
                    "modifiers": PUBLIC,
                    "parameters": [{"name": "other", "type": "zoo.Food"}],
                    "returns": "zoo.Food",
                    "doc": "Mixes two foods.",
                },
            ],
        },
        {
            "package": "zoo",
            "name": "Keeper",
            "modifiers": PUBLIC,
            "doc": "Looks after animals.",
            "methods": [
                {
                    "name": "feed",
                    "modifiers": PUBLIC,
                    "parameters": [{"name": "food", "type": "zoo.Food"}],
                    "doc": "Hands out food.",
                }
            ],
        },
        {
            "package": "zoo",
            "name": "ZooException",
            "modifiers": PUBLIC,
            "doc": "Trouble at the zoo.",
        },
        {
            "package": "zoo",
            "name": "FoodException",
            "modifiers": PUBLIC,
            "superclass": "zoo.ZooException",
            "doc": "Bad food.",
        },
    ]


@pytest.fixture
def make_session() -> Callable[..., DocSession]:
    """Build a session from type declarations (and optional modules/packages)."""

    def _make(
        types: list[dict[str, Any]],
        modules: list[dict[str, Any]] | None = None,
        packages: list[dict[str, Any]] | None = None,
        config: ResolverConfig | None = None,
    ) -> DocSession:
        data = {"modules": modules or [], "packages": packages or [], "types": types}
        return DocSession(load_model_dict(data), config)

    return _make


@pytest.fixture
def zoo(make_session: Callable[..., DocSession]) -> DocSession:
    """Session over the zoo model."""
    return make_session(zoo_types())


@pytest.fixture
def zoo_file(tmp_path: Path) -> Path:
    """The zoo model written to a JSON file."""
    path = tmp_path / "zoo.json"
    path.write_text(json.dumps({"types": zoo_types()}))
    return path
