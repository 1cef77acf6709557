"""Core ElementGraph class with adjacency list representation."""

from __future__ import annotations

from doclink.core.graph.models import Relation, RelationKind
from doclink.core.models import Element


class ElementGraph:
    """Directed graph over program elements.

    Uses adjacency lists for O(1) neighbor lookup. Parallel edges are kept,
    so a type implementing the same interface twice via different paths still
    has one edge per declaration.
    """

    __slots__ = ("_out", "_in", "_elements", "_relations")

    def __init__(self) -> None:
        self._out: dict[int, list[tuple[int, Relation]]] = {}
        self._in: dict[int, list[tuple[int, Relation]]] = {}
        self._elements: dict[int, Element] = {}
        self._relations: list[Relation] = []

    def add_element(self, element: Element) -> None:
        """Add an element node. O(1)."""
        self._elements[element.id] = element
        if element.id not in self._out:
            self._out[element.id] = []
        if element.id not in self._in:
            self._in[element.id] = []

    def add_relation(self, source: Element, target: Element, kind: RelationKind) -> Relation:
        """Add a labelled edge, registering both ends as nodes. O(1)."""
        self.add_element(source)
        self.add_element(target)
        relation = Relation(source.id, target.id, kind)
        self._relations.append(relation)
        self._out[source.id].append((target.id, relation))
        self._in[target.id].append((source.id, relation))
        return relation

    def get_element(self, element_id: int) -> Element | None:
        """Get element by ID. O(1)."""
        return self._elements.get(element_id)

    def successors(
        self, element_id: int, *kinds: RelationKind
    ) -> list[tuple[Element, Relation]]:
        """Get direct successors, optionally restricted to some labels. O(out-degree)."""
        return [
            (self._elements[tid], rel)
            for tid, rel in self._out.get(element_id, [])
            if not kinds or rel.kind in kinds
        ]

    def predecessors(
        self, element_id: int, *kinds: RelationKind
    ) -> list[tuple[Element, Relation]]:
        """Get direct predecessors, optionally restricted to some labels. O(in-degree)."""
        return [
            (self._elements[sid], rel)
            for sid, rel in self._in.get(element_id, [])
            if not kinds or rel.kind in kinds
        ]

    def out_degree(self, element_id: int) -> int:
        return len(self._out.get(element_id, []))

    def in_degree(self, element_id: int) -> int:
        return len(self._in.get(element_id, []))

    def __contains__(self, element: Element) -> bool:
        return element.id in self._elements

    @property
    def num_nodes(self) -> int:
        return len(self._elements)

    @property
    def num_edges(self) -> int:
        return len(self._relations)

    @property
    def elements(self) -> dict[int, Element]:
        return self._elements

    def __repr__(self) -> str:
        return f"ElementGraph(nodes={self.num_nodes}, edges={self.num_edges})"
