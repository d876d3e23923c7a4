"""
Component 7: Plan Renderer

Turns the node path found by the search into primitive action tokens:
- "r" / "l" when the arm column increases / decreases
- "p" when the arm goes from empty to holding an object
- "d" when the arm goes from holding an object to empty

Optionally interleaves free-text narration before picks and drops. An
empty plan becomes the single ALREADY_SATISFIED notice.

Author: StackPlan Development Team
Date: 2026-03-02
"""

from typing import List, Mapping, Optional, Sequence

from common.constants import ALREADY_SATISFIED
from component_3_world_objects import ObjectDefinition
from component_4_world_state import ActionToken, WorldState

TOKEN_VALUES = frozenset(token.value for token in ActionToken)


def step_token(before: WorldState, after: WorldState) -> ActionToken:
    """
    The action that turns one node into the next.

    Raises:
        ValueError: The two nodes are not one primitive action apart
    """
    if after.arm > before.arm:
        return ActionToken.MOVE_RIGHT
    if after.arm < before.arm:
        return ActionToken.MOVE_LEFT
    if before.holding is None and after.holding is not None:
        return ActionToken.PICK
    if before.holding is not None and after.holding is None:
        return ActionToken.DROP
    raise ValueError(f"No single action leads from {before} to {after}")


def _describe(name: str, objects: Mapping[str, ObjectDefinition]) -> str:
    definition = objects.get(name)
    return f"the {definition.describe()}" if definition else name


def render_plan(
    path: Sequence[WorldState],
    narrate: bool = False,
    objects: Optional[Mapping[str, ObjectDefinition]] = None,
) -> List[str]:
    """
    Render a node path as a list of plan entries.

    Args:
        path: Nodes from the start node to the goal node
        narrate: Add a narration line before every pick and drop
        objects: Definitions used for narration (defaults to the path's own)

    Returns:
        Action tokens (possibly interleaved with narration), or
        [ALREADY_SATISFIED] if the path contains no actions
    """
    if objects is None and path:
        objects = path[0].objects
    objects = objects or {}

    plan: List[str] = []
    for before, after in zip(path, path[1:]):
        token = step_token(before, after)
        if narrate and token is ActionToken.PICK:
            plan.append(f"Picking up {_describe(after.holding, objects)}")
        elif narrate and token is ActionToken.DROP:
            plan.append(f"Dropping {_describe(before.holding, objects)}")
        plan.append(token.value)

    if not plan:
        plan.append(ALREADY_SATISFIED)
    return plan


def action_tokens(plan: Sequence[str]) -> List[str]:
    """Strip narration and sentinel entries, keeping only action tokens."""
    return [entry for entry in plan if entry in TOKEN_VALUES]
