"""
Component 1: Search Graph Abstraction

Types for the generic A* search engine:
- Edge: directed, weighted connection between two nodes
- Graph: protocol for anything that can enumerate outgoing edges
- SearchResult: path and cost returned by a successful search

The graph is pure: it knows nothing about search progress. Nodes only need
to be hashable and comparable for equality.

Author: StackPlan Development Team
Date: 2026-03-02
"""

from dataclasses import dataclass, field
from typing import Generic, Hashable, List, Protocol, TypeVar

NodeT = TypeVar("NodeT", bound=Hashable)


@dataclass(frozen=True)
class Edge(Generic[NodeT]):
    """
    A directed edge in a graph.

    Attributes:
        source: Node the edge leaves from
        target: Node the edge leads to
        cost: Non-negative traversal cost
    """

    source: NodeT
    target: NodeT
    cost: float = 1.0

    def __post_init__(self):
        if self.cost < 0:
            raise ValueError(f"Edge cost must be non-negative, got {self.cost}")


class Graph(Protocol[NodeT]):
    """A directed graph that can be searched by a_star_search()."""

    def outgoing_edges(self, node: NodeT) -> List[Edge[NodeT]]:
        """Compute the edges that leave from a node."""
        ...


@dataclass
class SearchResult(Generic[NodeT]):
    """
    Result of a successful search.

    Attributes:
        path: Nodes from the start node to the goal node (both included)
        cost: Total cost of the path
        expansions: Number of nodes expanded during the search
        generated: Number of frontier insertions during the search
    """

    path: List[NodeT] = field(default_factory=list)
    cost: float = 0.0
    expansions: int = 0
    generated: int = 0

    @property
    def goal(self) -> NodeT:
        return self.path[-1]
