"""
tests/test_block_planner.py

Integration tests for the block-world planner (component_8_block_planner).

Tests cover:
- Plans for reachable goals, including the sentinel for satisfied goals
- Unreachable goals and unknown objects
- Time and expansion budgets, kept distinct from unreachable goals
- Optimality with the admissible and zero heuristics
- Multiple interpretations
- Plan validation and simulation
"""

import functools
import logging

import pytest

import component_8_block_planner
from common.constants import ALREADY_SATISFIED
from component_2_astar_search import a_star_search
from component_4_world_state import make_world
from component_5_goal_formula import Literal, is_goal
from component_8_block_planner import BlockWorldPlanner, PlanResult, stringify
from stackplan_exceptions import (
    IllegalActionError,
    InvalidConfigError,
    PlanNotFoundError,
    SearchBudgetExceededError,
    SearchTimeoutError,
)


def lit(relation, *args, polarity=True):
    return Literal(relation, args, polarity)


def literal_dict(relation, *args, polarity=True):
    return {"relation": relation, "args": list(args), "polarity": polarity}


class FakeClock:
    """Monotonic clock that advances one second on every reading."""

    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        value = self.now
        self.now += 1.0
        return value


@pytest.fixture
def fake_clock_search(monkeypatch):
    """Route the planner's searches through a fake clock."""
    monkeypatch.setattr(
        component_8_block_planner,
        "a_star_search",
        functools.partial(a_star_search, clock=FakeClock()),
    )


# ============================================================================
# Basic Planning
# ============================================================================


class TestPlanFormula:
    """Planning a single interpretation."""

    def test_ball_into_box(self, ball_box_world):
        """Test the canonical pick, move, drop plan."""
        planner = BlockWorldPlanner()
        result = planner.plan_formula([[lit("inside", "a", "b")]], ball_box_world)

        assert result.plan == ["p", "r", "d"]
        assert result.cost == 3
        assert result.path[0] == ball_box_world
        assert result.path[-1].stacks == ((), ("b", "a"))
        assert stringify(result) == "p, r, d"

    def test_narrated_plan(self, ball_box_world):
        planner = BlockWorldPlanner(narrate=True)
        result = planner.plan_formula([[lit("inside", "a", "b")]], ball_box_world)

        assert result.plan == [
            "Picking up the small white ball",
            "p",
            "r",
            "Dropping the small white ball",
            "d",
        ]
        assert result.actions == ["p", "r", "d"]

    def test_dict_input(self, ball_box_world):
        """Test that worlds and literals in their external format are accepted."""
        planner = BlockWorldPlanner()
        result = planner.plan_formula(
            [[literal_dict("inside", "a", "b")]], ball_box_world.to_dict()
        )

        assert result.plan == ["p", "r", "d"]

    def test_already_satisfied(self, ball_box_world):
        planner = BlockWorldPlanner()
        result = planner.plan_formula([[lit("ontop", "a", "floor")]], ball_box_world)

        assert result.plan == [ALREADY_SATISFIED]
        assert result.already_satisfied
        assert result.actions == []
        assert result.cost == 0
        assert result.path == [ball_box_world]
        assert planner.stats["searches"] == 0

    def test_plan_reaches_goal(self, four_column_world):
        formula = [[lit("ontop", "e", "d")], [lit("leftof", "a", "c")]]
        result = BlockWorldPlanner().plan_formula(formula, four_column_world)

        assert is_goal(result.path[-1], formula)
        assert len(result.actions) == len(result.path) - 1

    def test_independent_searches(self, four_column_world):
        planner = BlockWorldPlanner()
        formula = [[lit("holding", "c")]]

        first = planner.plan_formula(formula, four_column_world)
        second = planner.plan_formula(formula, four_column_world)

        assert first.plan == second.plan
        assert planner.stats["searches"] == 2
        assert planner.stats["expansions"] == first.expansions + second.expansions


# ============================================================================
# Failures
# ============================================================================


class TestPlanFailures:
    """Unreachable goals and budgets."""

    def test_large_ball_into_small_box(self, large_ball_small_box_world):
        """Test that a goal forbidden by the physical laws is not found."""
        planner = BlockWorldPlanner()

        with pytest.raises(PlanNotFoundError) as exc_info:
            planner.plan_formula([[lit("inside", "a", "b")]], large_ball_small_box_world)

        assert exc_info.value.context["reason"] == "frontier_exhausted"

    def test_unknown_objects_rejected_without_search(self, ball_box_world):
        planner = BlockWorldPlanner(max_expansions=0)

        with pytest.raises(PlanNotFoundError) as exc_info:
            planner.plan_formula([[lit("inside", "zz", "b")]], ball_box_world)

        assert exc_info.value.context["reason"] == "unknown_objects"
        assert exc_info.value.context["unknown_objects"] == ["zz"]

    def test_defined_but_absent_object_rejected(self, objects):
        # c has a definition but is neither stacked nor held
        world = make_world([["a"], ["b"]], objects)
        planner = BlockWorldPlanner(max_expansions=0)

        with pytest.raises(PlanNotFoundError) as exc_info:
            planner.plan_formula([[lit("ontop", "c", "floor")]], world)

        assert exc_info.value.context["reason"] == "unknown_objects"
        assert exc_info.value.context["unknown_objects"] == ["c"]

    def test_held_object_is_known(self, objects):
        world = make_world([["a"], []], objects, holding="b")
        planner = BlockWorldPlanner()

        assert planner.plan_formula([[lit("ontop", "b", "floor")]], world).actions == ["r", "d"]

    def test_unknown_objects_in_one_conjunction(self, ball_box_world):
        planner = BlockWorldPlanner()
        formula = [[lit("inside", "zz", "b")], [lit("holding", "a")]]

        assert planner.plan_formula(formula, ball_box_world).plan == ["p"]

    def test_empty_formula(self, ball_box_world):
        with pytest.raises(PlanNotFoundError) as exc_info:
            BlockWorldPlanner().plan_formula([], ball_box_world)
        assert exc_info.value.context["reason"] == "empty_formula"

    def test_timeout(self, ball_box_world, fake_clock_search):
        """Test that running out of time is reported as a timeout, not as failure."""
        planner = BlockWorldPlanner(timeout=1.5)

        with pytest.raises(SearchTimeoutError) as exc_info:
            planner.plan_formula([[lit("inside", "a", "b")]], ball_box_world)

        assert not isinstance(exc_info.value, PlanNotFoundError)

    def test_timeout_on_unreachable_goal(self, large_ball_small_box_world, fake_clock_search):
        planner = BlockWorldPlanner(timeout=1.5)

        with pytest.raises(SearchTimeoutError):
            planner.plan_formula([[lit("inside", "a", "b")]], large_ball_small_box_world)

    def test_expansion_limit(self, ball_box_world):
        planner = BlockWorldPlanner(max_expansions=1)

        with pytest.raises(SearchBudgetExceededError) as exc_info:
            planner.plan_formula([[lit("inside", "a", "b")]], ball_box_world)

        assert not isinstance(exc_info.value, SearchTimeoutError)

    def test_unknown_heuristic(self):
        with pytest.raises(InvalidConfigError):
            BlockWorldPlanner(heuristic="manhattan")


# ============================================================================
# Optimality
# ============================================================================


class TestOptimality:
    """Admissible and zero heuristics give shortest plans."""

    @pytest.mark.parametrize(
        "formula,expected_cost",
        [
            ([[lit("ontop", "e", "d")]], 5),
            ([[lit("holding", "c")]], 5),
            ([[lit("ontop", "e", "floor")]], 3),
            ([[lit("holding", "a")]], 3),
        ],
    )
    @pytest.mark.parametrize("heuristic", ["admissible", "zero"])
    def test_shortest_plan(self, four_column_world, formula, expected_cost, heuristic):
        result = BlockWorldPlanner(heuristic=heuristic).plan_formula(formula, four_column_world)

        assert result.cost == expected_cost
        assert len(result.actions) == expected_cost

    @pytest.mark.parametrize(
        "formula",
        [
            [[lit("inside", "e", "b")]],
            [[lit("leftof", "a", "c")]],
            [[lit("ontop", "e", "c", polarity=False), lit("beside", "c", "b")]],
        ],
    )
    def test_admissible_matches_uniform_cost(self, four_column_world, formula):
        admissible = BlockWorldPlanner(heuristic="admissible").plan_formula(
            formula, four_column_world
        )
        uniform = BlockWorldPlanner(heuristic="zero").plan_formula(formula, four_column_world)

        assert admissible.cost == uniform.cost
        assert admissible.expansions <= uniform.expansions

    def test_weighted_plan_is_valid(self, four_column_world):
        formula = [[lit("inside", "e", "b")]]
        planner = BlockWorldPlanner(heuristic="weighted")
        result = planner.plan_formula(formula, four_column_world)
        optimal = BlockWorldPlanner(heuristic="zero").plan_formula(formula, four_column_world)

        assert planner.validate_plan(four_column_world, result.plan, formula) == (True, None)
        assert result.cost >= optimal.cost


# ============================================================================
# Multiple Interpretations
# ============================================================================


class TestPlanInterpretations:
    """plan() over several interpretations."""

    def test_all_succeed(self, ball_box_world):
        interpretations = [[[lit("inside", "a", "b")]], [[lit("holding", "b")]]]
        results = BlockWorldPlanner().plan(interpretations, ball_box_world)

        assert [r.plan for r in results] == [["p", "r", "d"], ["r", "p"]]
        assert all(isinstance(r, PlanResult) for r in results)

    def test_failures_dropped(self, ball_box_world):
        interpretations = [[[lit("holding", "zz")]], [[lit("holding", "a")]]]
        results = BlockWorldPlanner().plan(interpretations, ball_box_world)

        assert len(results) == 1
        assert results[0].plan == ["p"]

    def test_all_fail_raises_first(self, large_ball_small_box_world):
        interpretations = [[[lit("holding", "zz")]], [[lit("inside", "a", "b")]]]

        with pytest.raises(PlanNotFoundError) as exc_info:
            BlockWorldPlanner().plan(interpretations, large_ball_small_box_world)

        assert exc_info.value.context["reason"] == "unknown_objects"

    def test_all_fail_logged(self, large_ball_small_box_world, caplog):
        interpretations = [[[lit("holding", "zz")]], [[lit("inside", "a", "b")]]]

        with caplog.at_level(logging.ERROR, logger="component_8_block_planner"):
            with pytest.raises(PlanNotFoundError) as exc_info:
                BlockWorldPlanner().plan(interpretations, large_ball_small_box_world)

        errors = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert len(errors) == 1
        assert errors[0].exc_info[1] is exc_info.value
        assert errors[0].extra_info["interpretations"] == 2

    def test_no_interpretations(self, ball_box_world):
        with pytest.raises(PlanNotFoundError) as exc_info:
            BlockWorldPlanner().plan([], ball_box_world)
        assert exc_info.value.context["reason"] == "no_interpretations"

    def test_dict_world(self, ball_box_world):
        results = BlockWorldPlanner().plan(
            [[[literal_dict("holding", "a")]]], ball_box_world.to_dict()
        )
        assert results[0].plan == ["p"]


# ============================================================================
# Validation and Simulation
# ============================================================================


class TestValidatePlan:
    """Checking plans against a world and a goal."""

    def test_valid_plan(self, ball_box_world):
        planner = BlockWorldPlanner()
        formula = [[lit("inside", "a", "b")]]

        assert planner.validate_plan(ball_box_world, ["p", "r", "d"], formula) == (True, None)

    def test_narrated_plan_valid(self, ball_box_world):
        planner = BlockWorldPlanner(narrate=True)
        formula = [[lit("inside", "a", "b")]]
        result = planner.plan_formula(formula, ball_box_world)

        assert planner.validate_plan(ball_box_world, result.plan, formula) == (True, None)

    def test_illegal_action(self, ball_box_world):
        ok, message = BlockWorldPlanner().validate_plan(
            ball_box_world, ["d"], [[lit("inside", "a", "b")]]
        )

        assert not ok
        assert "Action d failed" in message

    def test_goal_not_reached(self, ball_box_world):
        ok, message = BlockWorldPlanner().validate_plan(
            ball_box_world, ["p"], [[lit("inside", "a", "b")]]
        )

        assert not ok
        assert message == "Final state does not satisfy goal"


class TestSimulatePlan:
    """State trajectories."""

    def test_trajectory(self, ball_box_world):
        states = BlockWorldPlanner().simulate_plan(ball_box_world, ["p", "r", "d"])

        assert len(states) == 4
        assert states[0] == ball_box_world
        assert states[1].holding == "a"
        assert states[3].stacks == ((), ("b", "a"))

    def test_sentinel_plan(self, ball_box_world):
        assert BlockWorldPlanner().simulate_plan(ball_box_world, [ALREADY_SATISFIED]) == [
            ball_box_world
        ]

    def test_illegal_action(self, ball_box_world):
        with pytest.raises(IllegalActionError):
            BlockWorldPlanner().simulate_plan(ball_box_world, ["l"])

    def test_matches_search_path(self, four_column_world):
        planner = BlockWorldPlanner()
        result = planner.plan_formula([[lit("inside", "e", "b")]], four_column_world)

        assert planner.simulate_plan(four_column_world, result.plan) == result.path
