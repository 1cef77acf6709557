"""Inheritance order: the sequence in which ancestors are searched for docs."""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

from doclink.core.exceptions import MalformedModelError
from doclink.core.graph import ElementGraph, RelationKind
from doclink.core.graph.analysis import topological_sort
from doclink.core.graph.traversal import gather_distances
from doclink.core.models import TypeElement

if TYPE_CHECKING:
    from doclink.core.universe import SymbolUniverse


def compute_inheritance_order(
    universe: SymbolUniverse, start: TypeElement
) -> list[TypeElement]:
    """All supertypes of ``start``, most specific and nearest first.

    A subtype always precedes its supertypes. Unrelated types are ordered by
    their distance from ``start`` (see ``gather_distances``), then by the
    order in which they were discovered.

    Raises:
        MalformedModelError: if the supertype relation is cyclic.
    """
    distances = gather_distances(universe.supertype_graph, start.id)
    ancestors = [universe.supertype_graph.get_element(eid) for eid in distances]

    graph = ElementGraph()
    for a in ancestors:
        graph.add_element(a)
    for a in ancestors:
        for b in ancestors:
            if a is not b and universe.is_subtype(a, b):
                graph.add_relation(a, b, RelationKind.SUBTYPE_OF)

    ordered = topological_sort(graph, key=lambda e: distances[e.id])
    if ordered is None:
        raise MalformedModelError(
            f"Supertypes of {start.qualified_name} form a cycle",
            [a.qualified_name for a in ancestors],
        )
    return ordered


class InheritanceOrder:
    """Memoized ``compute_inheritance_order`` for one universe.

    Safe to share between threads. Two threads asking for the same type at
    once may both compute it; the results are identical.
    """

    def __init__(self, universe: SymbolUniverse) -> None:
        self.universe = universe
        self._cache: dict[int, tuple[TypeElement, ...]] = {}
        self._lock = threading.Lock()

    def get(self, start: TypeElement) -> tuple[TypeElement, ...]:
        with self._lock:
            cached = self._cache.get(start.id)
        if cached is not None:
            return cached
        order = tuple(compute_inheritance_order(self.universe, start))
        with self._lock:
            self._cache[start.id] = order
        return order

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)
