"""
Centralized constants for the StackPlan block-world planner.

This module provides a single source of truth for the magic numbers,
sentinels and default configuration values used throughout the planner.

Organization:
    - World Vocabulary: Object forms, sizes and the floor sentinel
    - Search Defaults: Time budget, action cost and expansion limits
    - Heuristic Tuning: Weights and cache sizes for heuristic estimation
    - Plan Rendering: Sentinel messages emitted to the caller

Usage:
    from common.constants import DEFAULT_SEARCH_TIMEOUT_SECONDS, FLOOR

Note:
    These constants define default values. Most of them can be overridden via
    stackplan_config.get_config() (see stackplan.yaml) or constructor
    parameters of BlockWorldPlanner.
"""

from typing import FrozenSet, Tuple

# =============================================================================
# World Vocabulary
# =============================================================================

FLOOR: str = "floor"
"""
Identifier used by goal literals to refer to the floor under every column.

The floor never appears in a stack. Goal literals such as ontop(a, floor)
are satisfied when the object rests at row 0 of any column.
"""

FORMS: FrozenSet[str] = frozenset(
    {"brick", "plank", "ball", "pyramid", "box", "table", "floor"}
)
"""Object forms known to the physical laws."""

SIZES: FrozenSet[str] = frozenset({"small", "large"})
"""Object sizes known to the physical laws."""

FLOOR_POSITION: Tuple[int, int] = (-1, -1)
"""
Special (column, row) position reported for the floor.

Used by:
    - component_5_goal_formula.py: position_of()
"""

# =============================================================================
# Search Defaults
# =============================================================================

DEFAULT_SEARCH_TIMEOUT_SECONDS: float = 100.0
"""
Wall-clock budget for a single A* search (seconds).

Rationale:
    Large worlds with many columns can take tens of seconds with the
    weighted heuristic. 100 seconds keeps interactive sessions responsive
    while leaving room for the occasional hard interpretation.

Tuning:
    - Lower values fail faster (SearchTimeoutError) on hard goals
    - Higher values trade responsiveness for completeness
"""

DEFAULT_MAX_EXPANSIONS: None = None
"""Expansion cap for A* search. None means unbounded (time budget only)."""

ACTION_COST: float = 1.0
"""Cost of one primitive arm action (move left/right, pick, drop)."""

# =============================================================================
# Heuristic Tuning
# =============================================================================

DEFAULT_HEURISTIC: str = "weighted"
"""
Heuristic used when none is configured.

- "weighted": fast, greedy, inadmissible (component_6_heuristics)
- "admissible": provable lower bound, optimal plans
- "zero": uniform-cost search, optimal but slow
"""

BURIED_OBJECT_WEIGHT: float = 4.0
"""
Penalty per object stacked above a goal operand (weighted heuristic).

Rationale:
    Relocating one object costs at least a pick and a drop, usually with
    arm travel in between, so four actions is a realistic average. Any
    weight above 2 can overestimate, which makes the weighted heuristic
    inadmissible. See DESIGN.md.
"""

HELD_OPERAND_PENALTY: float = 1.0
"""Penalty added when a goal operand is currently held by the arm."""

HEURISTIC_CACHE_MAXSIZE: int = 50_000
"""
Maximum number of cached heuristic estimates per search.

Each BlockWorldPlanner search owns its own LRU cache, so this bounds the
memory of a single search rather than the whole process.
"""

# =============================================================================
# Plan Rendering
# =============================================================================

ALREADY_SATISFIED: str = "That is already true!"
"""Plan sentinel returned when the start state already satisfies the goal."""
