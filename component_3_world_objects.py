"""
Component 3: World Objects and Physical Laws

Immutable object definitions (form, size, color) and the physical laws that
decide whether one object may rest on another.

The laws are pure predicates over object definitions. They never look at
the live stack geometry; the caller identifies the supporting object (the
top of a column, or the floor for an empty column).

Laws:
- Objects are "inside" boxes and "ontop" of everything else
- Nothing rests on a ball
- A ball rests only inside a box or directly on the floor
- A large object never rests on a small one
- Boxes cannot contain pyramids, planks or boxes of the same size
- Small boxes cannot be supported by small bricks, pyramids or small boxes
- Large boxes cannot be supported by large boxes

Author: StackPlan Development Team
Date: 2026-03-02
"""

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from common.constants import FLOOR, FORMS, SIZES
from stackplan_exceptions import InvalidWorldStateError

INSIDE = "inside"
ONTOP = "ontop"


@dataclass(frozen=True)
class ObjectDefinition:
    """
    Physical definition of a world object.

    Attributes:
        form: brick, plank, ball, pyramid, box, table or floor
        size: small or large (None for the floor)
        color: Free-text color, only used for narration
    """

    form: str
    size: Optional[str] = None
    color: Optional[str] = None

    def __post_init__(self):
        if self.form not in FORMS:
            raise InvalidWorldStateError(
                f"Unknown object form '{self.form}'", context={"form": self.form}
            )
        if self.size is not None and self.size not in SIZES:
            raise InvalidWorldStateError(
                f"Unknown object size '{self.size}'", context={"size": self.size}
            )

    @property
    def is_floor(self) -> bool:
        return self.form == FLOOR

    def describe(self) -> str:
        """Human-readable description, e.g. 'small white ball'."""
        parts = [p for p in (self.size, self.color, self.form) if p]
        return " ".join(parts)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ObjectDefinition":
        return cls(form=data["form"], size=data.get("size"), color=data.get("color"))

    def to_dict(self) -> Dict[str, Any]:
        return {"form": self.form, "size": self.size, "color": self.color}


FLOOR_OBJECT = ObjectDefinition(form=FLOOR)


def support_relation(support: ObjectDefinition) -> str:
    """The relation an object has with its support: inside boxes, ontop otherwise."""
    return INSIDE if support.form == "box" else ONTOP


def obeys_laws(obj: ObjectDefinition, support: ObjectDefinition, relation: str) -> bool:
    """
    Check whether obj may stand in relation (ontop/inside) to support.

    Args:
        obj: The object being placed
        support: The object directly beneath it (FLOOR_OBJECT for the floor)
        relation: "ontop" or "inside"

    Returns:
        True if the placement obeys every physical law
    """
    if relation != support_relation(support):
        return False

    if support.is_floor:
        return True

    if support.form == "ball":
        return False

    if obj.form == "ball" and support.form != "box":
        return False

    if obj.size == "large" and support.size == "small":
        return False

    if support.form == "box" and obj.size == support.size:
        if obj.form in ("pyramid", "plank", "box"):
            return False

    if obj.form == "box":
        if obj.size == "small":
            if support.size == "small" and support.form in ("brick", "box"):
                return False
            if support.form == "pyramid":
                return False
        elif obj.size == "large":
            if support.size == "large" and support.form == "box":
                return False

    return True


def can_place(obj: ObjectDefinition, support: Optional[ObjectDefinition]) -> bool:
    """
    Check whether obj can be dropped onto support.

    A missing support means an empty column, i.e. the floor.
    """
    if support is None:
        support = FLOOR_OBJECT
    return obeys_laws(obj, support, support_relation(support))
