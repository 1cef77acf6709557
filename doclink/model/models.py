"""Data models for loaded program models."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

from doclink.core.models import Element, ModuleElement, PackageElement, TypeElement


@dataclass
class ProgramModel:
    """Every declared element of a program, as produced by a loader.

    ``types`` lists nested types as well as top-level ones, outer types first.
    """

    modules: list[ModuleElement] = field(default_factory=list)
    packages: list[PackageElement] = field(default_factory=list)
    types: list[TypeElement] = field(default_factory=list)
    source: Path | None = None

    def elements(self) -> Iterator[Element]:
        """All elements: modules, packages, types, then members of each type."""
        yield from self.modules
        yield from self.packages
        yield from self.types
        for t in self.types:
            for member in t.members:
                if not member.kind.is_type:
                    yield member

    def __len__(self) -> int:
        return sum(1 for _ in self.elements())

    def __repr__(self) -> str:
        return (
            f"ProgramModel(modules={len(self.modules)}, packages={len(self.packages)}, "
            f"types={len(self.types)})"
        )
