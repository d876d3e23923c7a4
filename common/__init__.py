"""
Common constants for the StackPlan project.

This package provides centralized configuration defaults and sentinels used
throughout the planner.
"""

from common.constants import *

__all__ = [
    # World Vocabulary
    "FLOOR",
    "FORMS",
    "SIZES",
    "FLOOR_POSITION",
    # Search Defaults
    "DEFAULT_SEARCH_TIMEOUT_SECONDS",
    "DEFAULT_MAX_EXPANSIONS",
    "ACTION_COST",
    # Heuristic Tuning
    "DEFAULT_HEURISTIC",
    "BURIED_OBJECT_WEIGHT",
    "HELD_OPERAND_PENALTY",
    "HEURISTIC_CACHE_MAXSIZE",
    # Plan Rendering
    "ALREADY_SATISFIED",
]
