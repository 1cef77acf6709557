"""Graph analysis: cycle reporting and topological sort."""

from __future__ import annotations

import heapq
from collections import deque
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from doclink.core.graph.base import ElementGraph
    from doclink.core.models import Element


def find_cycles(graph: ElementGraph, max_cycles: int = 10) -> list[list[Element]]:
    """Find cycles in the graph, at most ``max_cycles`` of them."""
    cycles: list[list[Element]] = []
    visited: set[int] = set()
    stack: list[int] = []
    stack_set: set[int] = set()

    def dfs(node_id: int) -> None:
        if len(cycles) >= max_cycles:
            return

        visited.add(node_id)
        stack.append(node_id)
        stack_set.add(node_id)

        for target_id, _ in graph._out.get(node_id, []):
            if target_id not in visited:
                dfs(target_id)
            elif target_id in stack_set:
                idx = stack.index(target_id)
                cycles.append([graph.elements[n] for n in stack[idx:]])

        stack.pop()
        stack_set.remove(node_id)

    for nid in graph.elements:
        if nid not in visited:
            dfs(nid)

    return cycles


def topological_sort(
    graph: ElementGraph, key: Callable[[Element], Any] | None = None
) -> list[Element] | None:
    """Topological sort using Kahn's algorithm.

    Without ``key`` ready nodes are taken in insertion order, O(V + E). With
    ``key`` the ready node with the smallest key goes first, ties broken by
    insertion order, O((V + E) log V).

    Returns None if graph has cycles.
    """
    in_degree = {eid: len(graph._in.get(eid, [])) for eid in graph.elements}
    position = {eid: i for i, eid in enumerate(graph.elements)}
    result: list[Element] = []

    if key is None:
        queue: deque[int] = deque(eid for eid, d in in_degree.items() if d == 0)
        while queue:
            node_id = queue.popleft()
            result.append(graph.elements[node_id])
            for target_id, _ in graph._out.get(node_id, []):
                in_degree[target_id] -= 1
                if in_degree[target_id] == 0:
                    queue.append(target_id)
        return result if len(result) == len(graph.elements) else None

    def entry(eid: int) -> tuple[Any, int, int]:
        return (key(graph.elements[eid]), position[eid], eid)

    heap = [entry(eid) for eid, d in in_degree.items() if d == 0]
    heapq.heapify(heap)
    while heap:
        _, _, node_id = heapq.heappop(heap)
        result.append(graph.elements[node_id])
        for target_id, _ in graph._out.get(node_id, []):
            in_degree[target_id] -= 1
            if in_degree[target_id] == 0:
                heapq.heappush(heap, entry(target_id))

    return result if len(result) == len(graph.elements) else None
