"""Supertype walks over EXTENDS/IMPLEMENTS edges.

Edges run from a type to its declared supertypes, superclass first and then
interfaces in declaration order.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from doclink.core.graph.models import RelationKind

if TYPE_CHECKING:
    from doclink.core.graph.base import ElementGraph
    from doclink.core.models import Element

_SUPER_KINDS = (RelationKind.EXTENDS, RelationKind.IMPLEMENTS)


def supertype_closure(graph: ElementGraph, root_id: int) -> list[Element]:
    """Collect all transitive supertypes of a type in search order.

    The direct supertypes of a type are appended before any of their own
    supertypes are visited, and each ancestor is listed once at its first
    discovery. The root itself is not included unless a cycle leads back to it.
    """
    seen: set[int] = set()
    result: list[Element] = []

    def visit(node_id: int) -> None:
        fresh: list[int] = []
        for target, _ in graph.successors(node_id, *_SUPER_KINDS):
            if target.id not in seen:
                seen.add(target.id)
                result.append(target)
                fresh.append(target.id)
        for target_id in fresh:
            visit(target_id)

    visit(root_id)
    return result


def gather_distances(graph: ElementGraph, root_id: int) -> dict[int, int]:
    """Record how far each ancestor of a type is from it.

    Direct supertypes of the root are at distance 1. Beyond that a superclass
    is one further than its subclass, while an interface shares the distance
    of the type that declares it. An ancestor is walked again only when
    reached at a strictly smaller distance. Keys keep first-discovery order.
    """
    distances: dict[int, int] = {}

    def visit(node_id: int, distance: int) -> None:
        if distance >= distances.get(node_id, distance + 1):
            return
        distances[node_id] = distance
        for target, rel in graph.successors(node_id, *_SUPER_KINDS):
            visit(target.id, distance + 1 if rel.is_class_step else distance)

    for target, _ in graph.successors(root_id, *_SUPER_KINDS):
        visit(target.id, 1)
    distances.pop(root_id, None)
    return distances
