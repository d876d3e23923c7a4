"""
Component 8: Block-World Planner

Top-level driver that turns goal interpretations into arm plans:
- Plans each DNF interpretation independently with A* search
- Renders the node path into action tokens (optionally narrated)
- Validates and simulates plans against a world state
- Rejects goals that only mention unknown objects without searching

Every search builds its own heuristic cache and search bookkeeping, so
planning one interpretation never affects another.

Author: StackPlan Development Team
Date: 2026-03-02
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from common.constants import ALREADY_SATISFIED, FLOOR
from component_2_astar_search import a_star_search
from component_4_world_state import WorldGraph, WorldState
from component_5_goal_formula import (
    DNFFormula,
    is_goal,
    parse_formula,
    referenced_objects,
    stringify_formula,
)
from component_6_heuristics import Heuristic, make_heuristic
from component_7_plan_renderer import action_tokens, render_plan
from component_15_logging_config import get_logger
from stackplan_config import get_config
from stackplan_exceptions import (
    IllegalActionError,
    PlanNotFoundError,
    StackPlanException,
)

logger = get_logger(__name__)

WorldLike = Union[WorldState, Mapping[str, Any]]


@dataclass
class PlanResult:
    """
    Plan for one goal interpretation.

    Attributes:
        formula: The interpretation that was planned for
        plan: Action tokens, possibly with narration, or [ALREADY_SATISFIED]
        cost: Total action cost of the plan
        path: World states visited by the plan (start state first)
        expansions: Nodes expanded by the search
    """

    formula: DNFFormula
    plan: List[str]
    cost: float = 0.0
    path: List[WorldState] = field(default_factory=list)
    expansions: int = 0

    @property
    def actions(self) -> List[str]:
        """Action tokens only (narration and sentinel removed)."""
        return action_tokens(self.plan)

    @property
    def already_satisfied(self) -> bool:
        return self.plan == [ALREADY_SATISFIED]


def stringify(result: PlanResult) -> str:
    return ", ".join(result.plan)


def _as_state(state: WorldLike) -> WorldState:
    if isinstance(state, WorldState):
        return state
    return WorldState.from_dict(state)


class BlockWorldPlanner:
    """
    A*-based planner for the block world.

    Unset arguments fall back to the planner configuration
    (stackplan_config.get_config()).
    """

    def __init__(
        self,
        heuristic: Optional[str] = None,
        timeout: Optional[float] = None,
        max_expansions: Optional[int] = None,
        narrate: Optional[bool] = None,
        buried_weight: Optional[float] = None,
    ):
        config = get_config()

        self.heuristic_name: str = heuristic or config.get("heuristic")
        self.timeout: float = (
            timeout if timeout is not None else config.get("search_timeout_seconds")
        )
        self.max_expansions: Optional[int] = (
            max_expansions
            if max_expansions is not None
            else config.get("search_max_expansions")
        )
        self.narrate: bool = narrate if narrate is not None else config.get("narrate_plan")
        self.buried_weight: float = (
            buried_weight
            if buried_weight is not None
            else config.get("heuristic_buried_weight")
        )
        self.cache_size: int = config.get("heuristic_cache_size")

        # Fail fast on an unknown heuristic name
        make_heuristic(self.heuristic_name, self.buried_weight, self.cache_size)

        self.stats: Dict[str, int] = {"searches": 0, "expansions": 0, "generated": 0}
        self.logger = get_logger(__name__, heuristic=self.heuristic_name)

        self.logger.debug(
            "BlockWorldPlanner initialized",
            extra={
                "timeout": self.timeout,
                "max_expansions": self.max_expansions,
            },
        )

    def _make_heuristic(self) -> Heuristic:
        return make_heuristic(self.heuristic_name, self.buried_weight, self.cache_size)

    def plan(
        self, interpretations: Sequence[Sequence[Any]], state: WorldLike
    ) -> List[PlanResult]:
        """
        Plan every interpretation of a command.

        Args:
            interpretations: DNF formulas (as Literals or literal dicts)
            state: Current world state

        Returns:
            One PlanResult per interpretation that could be planned

        Raises:
            StackPlanException: The first error, if no interpretation could
                be planned
        """
        start = _as_state(state)
        errors: List[StackPlanException] = []
        results: List[PlanResult] = []

        for interpretation in interpretations:
            try:
                results.append(self.plan_formula(interpretation, start))
            except StackPlanException as e:
                self.logger.info(
                    "Interpretation could not be planned",
                    extra={"error": type(e).__name__},
                )
                errors.append(e)

        if results:
            return results
        if errors:
            # only raise the first error found
            self.logger.log_exception(
                errors[0], "No interpretation could be planned", interpretations=len(errors)
            )
            raise errors[0]
        raise PlanNotFoundError("No interpretations to plan for", reason="no_interpretations")

    def plan_formula(self, formula: Sequence[Sequence[Any]], state: WorldLike) -> PlanResult:
        """
        Find a plan that makes formula true.

        Raises:
            PlanNotFoundError: The goal cannot be reached
            SearchTimeoutError: The search ran out of time
            SearchBudgetExceededError: The search hit the expansion limit
            MalformedFormulaError: A literal is malformed
        """
        goal_formula = parse_formula(formula)
        start = _as_state(state)

        self.logger.info("Planning", extra={"goal": stringify_formula(goal_formula)})

        if is_goal(start, goal_formula):
            self.logger.info("Goal already satisfied")
            return PlanResult(formula=goal_formula, plan=[ALREADY_SATISFIED], path=[start])

        self._check_known_objects(goal_formula, start)

        result = a_star_search(
            WorldGraph(),
            start,
            lambda node: is_goal(node, goal_formula),
            self._make_heuristic().bind(goal_formula),
            self.timeout,
            max_expansions=self.max_expansions,
        )

        self.stats["searches"] += 1
        self.stats["expansions"] += result.expansions
        self.stats["generated"] += result.generated

        plan = render_plan(result.path, narrate=self.narrate, objects=start.objects)
        self.logger.info(
            "Plan found",
            extra={"length": len(result.path) - 1, "expansions": result.expansions},
        )
        return PlanResult(
            formula=goal_formula,
            plan=plan,
            cost=result.cost,
            path=result.path,
            expansions=result.expansions,
        )

    @staticmethod
    def _check_known_objects(formula: DNFFormula, state: WorldState) -> None:
        """
        Reject formulas whose every conjunction mentions an object that is
        neither stacked nor held. Defined objects missing from the world
        count as unknown.
        """
        if not formula:
            raise PlanNotFoundError("Goal formula has no conjunctions", reason="empty_formula")

        known = set(state.positions)
        if state.holding is not None:
            known.add(state.holding)
        known.add(FLOOR)

        if all(names - known for names in referenced_objects(formula)):
            unknown = sorted(set().union(*referenced_objects(formula)) - known)
            logger.warning("Goal mentions unknown objects", extra={"unknown": unknown})
            raise PlanNotFoundError(
                "Every conjunction mentions an object that is not in the world",
                reason="unknown_objects",
                context={"unknown_objects": unknown},
            )

    # ------------------------------------------------------------------
    # Plan validation / simulation
    # ------------------------------------------------------------------

    def simulate_plan(self, state: WorldLike, plan: Sequence[str]) -> List[WorldState]:
        """
        Execute plan and return the state trajectory (start state included).

        Narration lines and the ALREADY_SATISFIED sentinel are skipped.

        Raises:
            IllegalActionError: An action is not possible when it is reached
        """
        current = _as_state(state)
        states = [current]
        for token in action_tokens(plan):
            current = current.apply(token)
            states.append(current)
        return states

    def validate_plan(
        self,
        state: WorldLike,
        plan: Sequence[str],
        formula: Sequence[Sequence[Any]],
    ) -> Tuple[bool, Optional[str]]:
        """
        Check that plan is executable and achieves formula.

        Returns:
            (success, error_message)
        """
        goal_formula = parse_formula(formula)
        try:
            states = self.simulate_plan(state, plan)
        except IllegalActionError as e:
            return False, f"Action {e.context.get('action')} failed: {e.message}"

        if not is_goal(states[-1], goal_formula):
            return False, "Final state does not satisfy goal"

        return True, None


def main():
    """Example usage: put a small ball into a large box."""
    world = {
        "stacks": [["a"], ["b"]],
        "arm": 0,
        "holding": None,
        "objects": {
            "a": {"form": "ball", "size": "small", "color": "white"},
            "b": {"form": "box", "size": "large", "color": "red"},
        },
    }
    goal = [[{"relation": "inside", "args": ["a", "b"], "polarity": True}]]

    planner = BlockWorldPlanner(narrate=True)
    for result in planner.plan([goal], world):
        print(f"{stringify_formula(result.formula)}: {stringify(result)}")


if __name__ == "__main__":
    main()
