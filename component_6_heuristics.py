"""
Component 6: Planning Heuristics

Heuristic functions that guide A* search towards states satisfying a DNF
goal formula:
- WeightedBlockHeuristic: buried-object penalties plus arm travel (greedy)
- AdmissibleBlockHeuristic: provable lower bound on remaining actions
- ZeroHeuristic: no guidance (uniform-cost search)

Heuristics only guide search; correctness never depends on them. Every
estimate is a pure, finite, non-negative function of the state and the
formula. bind() attaches a formula and an LRU cache so the search engine
can call the heuristic with a state alone.

Author: StackPlan Development Team
Date: 2026-03-02
"""

import math
from typing import Callable, Optional

from cachetools import LRUCache, cached

from common.constants import (
    BURIED_OBJECT_WEIGHT,
    FLOOR,
    HELD_OPERAND_PENALTY,
    HEURISTIC_CACHE_MAXSIZE,
)
from component_15_logging_config import get_logger
from component_4_world_state import WorldState
from component_5_goal_formula import (
    DNFFormula,
    Literal,
    Relation,
    is_goal,
    literal_holds,
)
from stackplan_exceptions import InvalidConfigError

logger = get_logger(__name__)


class Heuristic:
    """Base class for planning heuristics."""

    def __init__(self, cache_size: int = HEURISTIC_CACHE_MAXSIZE):
        self.cache_size = cache_size

    def estimate(self, state: WorldState, formula: DNFFormula) -> float:
        """Estimate cost from state to some state satisfying formula."""
        raise NotImplementedError

    def bind(self, formula: DNFFormula) -> Callable[[WorldState], float]:
        """
        Fix the formula and return a cached state -> estimate function.

        Each call creates a fresh cache, so bound heuristics are never
        shared between searches.
        """

        @cached(cache=LRUCache(maxsize=self.cache_size))
        def bound(state: WorldState) -> float:
            return self.estimate(state, formula)

        return bound


class ZeroHeuristic(Heuristic):
    """Always 0; turns A* into uniform-cost search."""

    def estimate(self, state: WorldState, formula: DNFFormula) -> float:
        return 0.0


class WeightedBlockHeuristic(Heuristic):
    """
    Buried-object heuristic.

    For every literal of every conjunction the estimate adds:
    - buried_weight for each object stacked above an operand (the first
      operand is skipped for "under", the second for "above")
    - HELD_OPERAND_PENALTY for an operand that is held or cannot be found
    - for holding(x): the arm distance to x
    - for ontop/inside/under/above: the column distance between operands
    - the arm distance to the nearer operand

    The minimum over all literals is returned, since satisfying one
    conjunction is enough.

    Not admissible for buried_weight > 2: one buried object may cost only a
    pick and a drop. Plans are therefore not guaranteed to be shortest;
    use AdmissibleBlockHeuristic when optimality matters.
    """

    def __init__(
        self,
        buried_weight: float = BURIED_OBJECT_WEIGHT,
        cache_size: int = HEURISTIC_CACHE_MAXSIZE,
    ):
        super().__init__(cache_size)
        self.buried_weight = buried_weight

    def estimate(self, state: WorldState, formula: DNFFormula) -> float:
        if is_goal(state, formula):
            return 0.0

        estimates = [
            self._literal_estimate(state, lit)
            for conjunction in formula
            for lit in conjunction
        ]
        return min(estimates) if estimates else 0.0

    def _operand_cost(self, state: WorldState, name: str, count_buried: bool) -> float:
        if name == FLOOR:
            return 0.0
        if state.locate(name) is None:
            return HELD_OPERAND_PENALTY
        if count_buried:
            return self.buried_weight * state.objects_above(name)
        return 0.0

    def _literal_estimate(self, state: WorldState, lit: Literal) -> float:
        relation = lit.relation
        active = lit.args[0]
        dest = lit.args[1] if len(lit.args) > 1 else None

        h = self._operand_cost(state, active, relation is not Relation.UNDER)
        if dest is not None:
            h += self._operand_cost(state, dest, relation is not Relation.ABOVE)

        # Columns of stacked operands; held/unknown operands sit under the arm
        col_active = _column_or_arm(state, active)
        col_dest = _column_or_arm(state, dest) if dest not in (None, FLOOR) else None

        if relation is Relation.HOLDING:
            h += abs(col_active - state.arm)

        if relation.is_support or relation in (Relation.UNDER, Relation.ABOVE):
            if col_dest is not None:
                h += abs(col_active - col_dest)

        nearest = abs(col_active - state.arm)
        if col_dest is not None:
            nearest = min(nearest, abs(col_dest - state.arm))
        h += nearest

        return float(h)


class AdmissibleBlockHeuristic(Heuristic):
    """
    Lower bound on the number of remaining actions.

    Per violated literal:
    - holding(x): drop the current object (if any), pick and drop every
      object above x, travel to x's column, pick x
    - anything else: at least one operand has to be picked and dropped
      again (or just dropped, if it is held). The cheapest operand is used:
      clearing it (2 actions per object above), travelling to it, picking
      and dropping it (2), plus a drop if the arm holds something else

    Positions of an operand only change when it is picked up (objects below
    it cannot move first), which is why a violated literal needs one of its
    operands to move. A conjunction costs the maximum of its literal bounds;
    the formula costs the minimum over conjunctions that can be satisfied.
    """

    def estimate(self, state: WorldState, formula: DNFFormula) -> float:
        best = math.inf
        for conjunction in formula:
            bound = 0.0
            for lit in conjunction:
                lit_bound = self._literal_bound(state, lit)
                if lit_bound is None:
                    break
                bound = max(bound, lit_bound)
            else:
                best = min(best, bound)
        return 0.0 if math.isinf(best) else best

    def _literal_bound(self, state: WorldState, lit: Literal) -> Optional[float]:
        """Lower bound for one literal; None if it can never be satisfied."""
        if literal_holds(lit, state):
            return 0.0

        holding_other = 1.0 if state.holding is not None else 0.0

        if lit.relation is Relation.HOLDING and lit.polarity:
            name = lit.args[0]
            position = state.locate(name)
            if position is None:
                return None
            col, _ = position
            return (
                holding_other
                + 2.0 * state.objects_above(name)
                + 1.0
                + abs(col - state.arm)
            )

        best = math.inf
        for name in lit.args:
            if name == FLOOR:
                continue
            if state.holding == name:
                best = min(best, 1.0)
                continue
            position = state.locate(name)
            if position is None:
                continue
            col, _ = position
            best = min(
                best,
                holding_other
                + 2.0 * state.objects_above(name)
                + 2.0
                + abs(col - state.arm),
            )
        return None if math.isinf(best) else best


def _column_or_arm(state: WorldState, name: str) -> int:
    position = state.locate(name)
    return state.arm if position is None else position[0]


HEURISTICS = {
    "weighted": WeightedBlockHeuristic,
    "admissible": AdmissibleBlockHeuristic,
    "zero": ZeroHeuristic,
}


def make_heuristic(
    name: str,
    buried_weight: float = BURIED_OBJECT_WEIGHT,
    cache_size: int = HEURISTIC_CACHE_MAXSIZE,
) -> Heuristic:
    """
    Create a heuristic by name ("weighted", "admissible" or "zero").

    Raises:
        InvalidConfigError: Unknown heuristic name
    """
    if name not in HEURISTICS:
        raise InvalidConfigError(
            f"Unknown heuristic '{name}'",
            context={"heuristic": name, "available": sorted(HEURISTICS)},
        )
    if name == "weighted":
        return WeightedBlockHeuristic(buried_weight=buried_weight, cache_size=cache_size)
    return HEURISTICS[name](cache_size=cache_size)
