"""
Component 2: A* Search Engine

Generic best-first (A*) search over any Graph whose nodes are hashable.

The engine:
- Keeps a heap frontier ordered by f = g + h, ties broken by insertion order
- Records the best known g and the predecessor for every discovered node
- Tests the goal on the dequeued node (optimal for admissible heuristics)
- Never reopens a node once it has been expanded (closed set)
- Checks a wall-clock deadline once per iteration

Outcomes are exactly one of:
- SearchResult on success
- PlanNotFoundError when the frontier is exhausted
- SearchTimeoutError when the time budget elapsed
- SearchBudgetExceededError when the optional expansion cap was reached

The engine holds no state between calls, so independent searches can run
side by side.

Author: StackPlan Development Team
Date: 2026-03-02
"""

import math
import time
from heapq import heappop, heappush
from itertools import count
from typing import Callable, Dict, List, Optional, Set, Tuple

from component_1_search_graph import Graph, NodeT, SearchResult
from component_15_logging_config import PerformanceLogger, get_logger
from stackplan_exceptions import (
    PlanNotFoundError,
    SearchBudgetExceededError,
    SearchTimeoutError,
)

logger = get_logger(__name__)


def _estimate(heuristic: Callable[[NodeT], float], node: NodeT) -> float:
    """Evaluate the heuristic and reject values A* cannot work with."""
    value = float(heuristic(node))
    if not math.isfinite(value) or value < 0:
        raise ValueError(f"Heuristic must be finite and non-negative, got {value}")
    return value


def reconstruct_path(parents: Dict[NodeT, NodeT], goal: NodeT) -> List[NodeT]:
    """Follow predecessor links from goal back to the start node."""
    path = [goal]
    current = goal
    while current in parents:
        current = parents[current]
        path.append(current)
    path.reverse()
    return path


def a_star_search(
    graph: Graph[NodeT],
    start: NodeT,
    goal: Callable[[NodeT], bool],
    heuristic: Callable[[NodeT], float],
    timeout: float,
    max_expansions: Optional[int] = None,
    clock: Callable[[], float] = time.monotonic,
) -> SearchResult[NodeT]:
    """
    A* search from start to any node satisfying goal.

    Args:
        graph: Graph to search
        start: Initial node
        goal: Predicate that is True for goal nodes
        heuristic: Estimate of the remaining cost from a node to a goal
        timeout: Maximum time (in seconds) to spend searching
        max_expansions: Optional cap on the number of expanded nodes. The node
            popped once the cap is reached is still goal-tested
        clock: Monotonic time source (seconds), injectable for tests

    Returns:
        SearchResult with the path from start to the first goal node dequeued

    Raises:
        PlanNotFoundError: No goal node is reachable from start
        SearchTimeoutError: The time budget elapsed first
        SearchBudgetExceededError: max_expansions was reached first
        ValueError: Negative edge cost or invalid heuristic value
    """
    deadline = clock() + timeout
    tie_breaker = count()

    g_scores: Dict[NodeT, float] = {start: 0.0}
    parents: Dict[NodeT, NodeT] = {}
    closed: Set[NodeT] = set()
    frontier: List[Tuple[float, int, NodeT]] = [
        (_estimate(heuristic, start), next(tie_breaker), start)
    ]

    expansions = 0
    generated = 1

    logger.debug(
        "A* search started", extra={"timeout": timeout, "max_expansions": max_expansions}
    )

    with PerformanceLogger(logger.logger, "A* search", timeout=timeout) as perf:
        while frontier:
            if clock() > deadline:
                logger.warning(
                    "A* search timed out",
                    extra={"timeout": timeout, "expansions": expansions},
                )
                raise SearchTimeoutError(
                    "Search time budget exceeded",
                    timeout_seconds=timeout,
                    expansions=expansions,
                )

            _, _, current = heappop(frontier)

            # Stale entry: a cheaper copy of this node was already expanded
            if current in closed:
                continue

            current_g = g_scores[current]

            if goal(current):
                path = reconstruct_path(parents, current)
                logger.debug(
                    "A* search reached goal",
                    extra={
                        "cost": current_g,
                        "path_length": len(path),
                        "expansions": expansions,
                    },
                )
                perf.record(expansions=expansions, generated=generated, cost=current_g)
                return SearchResult(
                    path=path,
                    cost=current_g,
                    expansions=expansions,
                    generated=generated,
                )

            # A goal popped at the limit is still returned
            if max_expansions is not None and expansions >= max_expansions:
                logger.warning(
                    "A* search hit the expansion limit",
                    extra={"max_expansions": max_expansions},
                )
                raise SearchBudgetExceededError(
                    "Search expansion limit reached", expansions=expansions
                )

            closed.add(current)
            expansions += 1

            for edge in graph.outgoing_edges(current):
                if edge.cost < 0:
                    raise ValueError(f"Negative edge cost {edge.cost}")

                neighbour = edge.target
                if neighbour in closed:
                    continue

                tentative_g = current_g + edge.cost
                if tentative_g < g_scores.get(neighbour, math.inf):
                    g_scores[neighbour] = tentative_g
                    parents[neighbour] = current
                    f_score = tentative_g + _estimate(heuristic, neighbour)
                    heappush(frontier, (f_score, next(tie_breaker), neighbour))
                    generated += 1

    logger.warning("A* search exhausted the frontier", extra={"expansions": expansions})
    raise PlanNotFoundError(
        "No path to a goal node exists",
        expansions=expansions,
        reason="frontier_exhausted",
    )
