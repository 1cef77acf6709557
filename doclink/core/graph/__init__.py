"""
Element graph data structures and algorithms.

This module provides in-memory graph operations over program elements:

Data Structures:
    - ElementGraph: Adjacency list representation with O(1) lookups
    - Relation: A labelled edge (encloses, extends, implements, ...)

Algorithms:
    - traversal: supertype closure, inheritance distances
    - analysis: Cycle reporting, topological sort with tie-break
"""

from doclink.core.graph.base import ElementGraph
from doclink.core.graph.models import Relation, RelationKind

__all__ = [
    "ElementGraph",
    "Relation",
    "RelationKind",
]
