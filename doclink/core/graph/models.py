"""Data models for graph operations."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class RelationKind(Enum):
    """Labels for edges of an element graph."""

    ENCLOSES = "encloses"
    EXTENDS = "extends"
    IMPLEMENTS = "implements"
    OVERRIDDEN_BY = "overridden_by"
    SUPERTYPE_OF = "supertype_of"
    SUBTYPE_OF = "subtype_of"


@dataclass(frozen=True)
class Relation:
    """A directed, labelled edge between two element ids."""

    source_id: int
    target_id: int
    kind: RelationKind

    @property
    def is_class_step(self) -> bool:
        """Whether following the edge moves one class level up."""
        return self.kind == RelationKind.EXTENDS
