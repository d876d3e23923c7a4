"""
Component 4: Block-World State Model

The node type searched by the planner:
- WorldState: immutable configuration (stacks, arm column, held object)
- ActionToken: the four primitive arm actions
- WorldGraph: Graph adapter that turns neighbours into unit-cost edges

Value semantics:
    Stacks are tuples of tuples and the dataclass is frozen. Every successor
    is a new WorldState with its own tuples, so no two nodes ever share
    mutable storage. Equality and hashing cover stacks, arm and holding; the
    shared object table is reference data and excluded.

Author: StackPlan Development Team
Date: 2026-03-02
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from functools import cached_property
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from common.constants import ACTION_COST
from component_1_search_graph import Edge
from component_3_world_objects import ObjectDefinition, can_place
from component_15_logging_config import get_logger
from stackplan_exceptions import IllegalActionError, InvalidWorldStateError

logger = get_logger(__name__)

Stacks = Tuple[Tuple[str, ...], ...]


class ActionToken(Enum):
    """Primitive arm actions and their plan tokens."""

    MOVE_LEFT = "l"
    MOVE_RIGHT = "r"
    PICK = "p"
    DROP = "d"


@dataclass(frozen=True)
class WorldState:
    """
    One configuration of the block world.

    Attributes:
        stacks: Columns left to right, each listing object ids bottom to top
        arm: Index of the column under the arm
        holding: Id of the object held by the arm, if any
        objects: Shared object definitions (not part of equality)
    """

    stacks: Stacks
    arm: int = 0
    holding: Optional[str] = None
    objects: Mapping[str, ObjectDefinition] = field(
        default_factory=dict, compare=False, hash=False, repr=False
    )

    def __post_init__(self):
        if not isinstance(self.stacks, tuple) or not all(
            isinstance(column, tuple) for column in self.stacks
        ):
            object.__setattr__(
                self, "stacks", tuple(tuple(column) for column in self.stacks)
            )
        if not self.stacks:
            raise InvalidWorldStateError("A world needs at least one column")
        if not 0 <= self.arm < len(self.stacks):
            raise InvalidWorldStateError(
                f"Arm column {self.arm} outside of world",
                context={"arm": self.arm, "columns": len(self.stacks)},
            )

    # ------------------------------------------------------------------
    # Construction / conversion
    # ------------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "WorldState":
        """
        Build a validated state from the external world-state format.

        Expected keys: stacks, arm, holding, objects ({id: {form, size, color}}).
        """
        objects = {
            name: definition
            if isinstance(definition, ObjectDefinition)
            else ObjectDefinition.from_dict(definition)
            for name, definition in data.get("objects", {}).items()
        }
        state = cls(
            stacks=data["stacks"],
            arm=data.get("arm", 0),
            holding=data.get("holding"),
            objects=objects,
        )
        state.validate()
        return state

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stacks": [list(column) for column in self.stacks],
            "arm": self.arm,
            "holding": self.holding,
            "objects": {
                name: definition.to_dict() for name, definition in self.objects.items()
            },
        }

    def validate(self) -> None:
        """
        Check the invariants that are too expensive to check per node.

        Raises:
            InvalidWorldStateError: An object appears twice, or the held
                object also appears in a stack
        """
        seen = set()
        for column in self.stacks:
            for name in column:
                if name in seen:
                    raise InvalidWorldStateError(
                        f"Object '{name}' appears more than once",
                        context={"object": name},
                    )
                seen.add(name)
        if self.holding is not None and self.holding in seen:
            raise InvalidWorldStateError(
                f"Held object '{self.holding}' is also in a stack",
                context={"object": self.holding},
            )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @cached_property
    def positions(self) -> Dict[str, Tuple[int, int]]:
        """(column, row) of every object in a stack."""
        return {
            name: (col, row)
            for col, column in enumerate(self.stacks)
            for row, name in enumerate(column)
        }

    def locate(self, name: str) -> Optional[Tuple[int, int]]:
        """(column, row) of an object, or None if it is held or unknown."""
        return self.positions.get(name)

    def objects_above(self, name: str) -> int:
        """Number of objects stacked on top of name (0 if not in a stack)."""
        position = self.locate(name)
        if position is None:
            return 0
        col, row = position
        return len(self.stacks[col]) - 1 - row

    def top_of(self, column: int) -> Optional[str]:
        stack = self.stacks[column]
        return stack[-1] if stack else None

    def can_drop(self) -> bool:
        """
        Whether the held object may be dropped on the current column.

        Objects without a definition can only be dropped on an empty column.
        """
        if self.holding is None:
            return False
        top = self.top_of(self.arm)
        if top is None:
            return True
        held_def = self.objects.get(self.holding)
        top_def = self.objects.get(top)
        if held_def is None or top_def is None:
            return False
        return can_place(held_def, top_def)

    # ------------------------------------------------------------------
    # Successors
    # ------------------------------------------------------------------

    def _with_column(self, column: Tuple[str, ...]) -> Stacks:
        return self.stacks[: self.arm] + (column,) + self.stacks[self.arm + 1 :]

    def _picked(self) -> "WorldState":
        column = self.stacks[self.arm]
        return replace(self, stacks=self._with_column(column[:-1]), holding=column[-1])

    def _dropped(self) -> "WorldState":
        column = self.stacks[self.arm] + (self.holding,)
        return replace(self, stacks=self._with_column(column), holding=None)

    def neighbours(self) -> List["WorldState"]:
        """
        All states reachable with one primitive action.

        Order: move left, move right, then pick or drop when legal.
        """
        nodes: List[WorldState] = []

        if self.arm > 0:
            nodes.append(replace(self, arm=self.arm - 1))

        if self.arm < len(self.stacks) - 1:
            nodes.append(replace(self, arm=self.arm + 1))

        if self.holding is None:
            if self.stacks[self.arm]:
                nodes.append(self._picked())
        elif self.can_drop():
            nodes.append(self._dropped())

        return nodes

    def apply(self, action: Union[ActionToken, str]) -> "WorldState":
        """
        Apply one action token and return the resulting state.

        Raises:
            IllegalActionError: The action is not possible in this state
        """
        try:
            token = ActionToken(action)
        except ValueError as e:
            raise IllegalActionError(
                f"Unknown action '{action}'", action=str(action)
            ) from e

        if token is ActionToken.MOVE_LEFT:
            if self.arm == 0:
                raise IllegalActionError("Arm is already at the leftmost column", action=token.value)
            return replace(self, arm=self.arm - 1)

        if token is ActionToken.MOVE_RIGHT:
            if self.arm == len(self.stacks) - 1:
                raise IllegalActionError("Arm is already at the rightmost column", action=token.value)
            return replace(self, arm=self.arm + 1)

        if token is ActionToken.PICK:
            if self.holding is not None:
                raise IllegalActionError("Arm is already holding an object", action=token.value)
            if not self.stacks[self.arm]:
                raise IllegalActionError("Nothing to pick in this column", action=token.value)
            return self._picked()

        if self.holding is None:
            raise IllegalActionError("Arm is not holding anything", action=token.value)
        if not self.can_drop():
            raise IllegalActionError(
                f"Cannot drop '{self.holding}' on column {self.arm}",
                action=token.value,
                context={"top": self.top_of(self.arm)},
            )
        return self._dropped()

    def __str__(self) -> str:
        stacks = ", ".join("[" + ",".join(column) + "]" for column in self.stacks)
        return f"[{stacks}] arm={self.arm} holding={self.holding}"


class WorldGraph:
    """Graph over WorldState nodes; every primitive action costs ACTION_COST."""

    def outgoing_edges(self, node: WorldState) -> List[Edge[WorldState]]:
        return [Edge(node, neighbour, ACTION_COST) for neighbour in node.neighbours()]


def make_world(
    stacks: Sequence[Sequence[str]],
    objects: Mapping[str, Mapping[str, Any]],
    arm: int = 0,
    holding: Optional[str] = None,
) -> WorldState:
    """Convenience constructor from plain lists and dicts."""
    return WorldState.from_dict(
        {"stacks": stacks, "arm": arm, "holding": holding, "objects": objects}
    )
