"""
Component 5: Goal Formulas and Goal Predicate

Goals are formulas in disjunctive normal form (DNF):
- Literal: one relation over one or two objects, with a polarity
- Conjunction: literals that must all hold
- DNFFormula: conjunctions of which at least one must hold

This module parses the external literal format, renders formulas back to
text, resolves object positions and evaluates goal satisfaction.

Position semantics:
- Objects in a stack resolve to (column, row)
- The floor resolves to FLOOR_POSITION (-1, -1)
- Held or unknown objects do not resolve; any literal that needs them is
  false, which makes the containing conjunction false without raising

Author: StackPlan Development Team
Date: 2026-03-02
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Mapping, Optional, Sequence, Set, Tuple, Union

from common.constants import FLOOR, FLOOR_POSITION
from component_4_world_state import WorldState
from stackplan_exceptions import MalformedFormulaError

Position = Tuple[int, int]


class Relation(Enum):
    """Relations that can appear in goal literals."""

    LEFTOF = "leftof"
    RIGHTOF = "rightof"
    INSIDE = "inside"
    ONTOP = "ontop"
    UNDER = "under"
    BESIDE = "beside"
    ABOVE = "above"
    HOLDING = "holding"

    @property
    def arity(self) -> int:
        return 1 if self is Relation.HOLDING else 2

    @property
    def is_support(self) -> bool:
        """ontop and inside both mean 'directly on top of'."""
        return self in (Relation.ONTOP, Relation.INSIDE)


@dataclass(frozen=True)
class Literal:
    """
    A relation that is intended to hold (or not hold) among objects.

    Attributes:
        relation: The relation in question
        args: Object ids (or "floor") the relation applies to
        polarity: True if the relation should hold, False if it should not
    """

    relation: Relation
    args: Tuple[str, ...]
    polarity: bool = True

    def __post_init__(self):
        if not isinstance(self.relation, Relation):
            try:
                object.__setattr__(self, "relation", Relation(self.relation))
            except ValueError as e:
                raise MalformedFormulaError(
                    f"Unknown relation '{self.relation}'", relation=str(self.relation)
                ) from e
        object.__setattr__(self, "args", tuple(self.args))
        if len(self.args) != self.relation.arity:
            raise MalformedFormulaError(
                f"Relation '{self.relation.value}' expects {self.relation.arity} "
                f"argument(s), got {len(self.args)}",
                relation=self.relation.value,
                context={"args": self.args},
            )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Literal":
        try:
            return cls(
                relation=data["relation"],
                args=tuple(data["args"]),
                polarity=bool(data.get("polarity", True)),
            )
        except KeyError as e:
            raise MalformedFormulaError(
                f"Literal is missing field {e}", context={"literal": dict(data)}
            ) from e

    def __str__(self) -> str:
        return stringify_literal(self)


Conjunction = List[Literal]
DNFFormula = List[Conjunction]

LiteralLike = Union[Literal, Mapping[str, Any]]


def parse_formula(formula: Sequence[Sequence[LiteralLike]]) -> DNFFormula:
    """
    Normalise a formula given as nested lists of dicts or Literals.

    Raises:
        MalformedFormulaError: A literal has an unknown relation or wrong arity
    """
    return [
        [lit if isinstance(lit, Literal) else Literal.from_dict(lit) for lit in conjunction]
        for conjunction in formula
    ]


def stringify_literal(lit: Literal) -> str:
    return ("" if lit.polarity else "-") + lit.relation.value + "(" + ",".join(lit.args) + ")"


def stringify_formula(formula: DNFFormula) -> str:
    """Render a formula, e.g. 'ontop(a,floor) & holding(b) | inside(a,c)'."""
    return " | ".join(
        " & ".join(stringify_literal(lit) for lit in conjunction) for conjunction in formula
    )


def referenced_objects(formula: DNFFormula) -> List[Set[str]]:
    """Object ids referenced by each conjunction (the floor excluded)."""
    return [
        {arg for lit in conjunction for arg in lit.args if arg != FLOOR}
        for conjunction in formula
    ]


# ============================================================================
# Goal Predicate
# ============================================================================


def position_of(state: WorldState, name: str) -> Optional[Position]:
    """
    Find the column and row of an object.

    Returns:
        (column, row) for stacked objects, FLOOR_POSITION for the floor, or
        None for held or unknown objects
    """
    if name == FLOOR:
        return FLOOR_POSITION
    return state.locate(name)


def _relation_holds(relation: Relation, args: Tuple[str, ...], state: WorldState) -> Optional[bool]:
    """
    Evaluate a positive relation.

    Returns None when an operand's position cannot be resolved.
    """
    if relation is Relation.HOLDING:
        return state.holding == args[0]

    p0 = position_of(state, args[0])
    p1 = position_of(state, args[1])
    if p0 is None or p1 is None:
        return None

    # The floor only supports things; it is not to the left/right/beside anything
    if p0 == FLOOR_POSITION:
        return False
    if p1 == FLOOR_POSITION:
        if relation.is_support:
            return p0[1] == 0
        if relation is Relation.ABOVE:
            return True
        return False

    (col0, row0), (col1, row1) = p0, p1

    if relation is Relation.LEFTOF:
        return col0 < col1
    if relation is Relation.RIGHTOF:
        return col0 > col1
    if relation.is_support:
        return col0 == col1 and row0 == row1 + 1
    if relation is Relation.UNDER:
        return col0 == col1 and row0 < row1
    if relation is Relation.ABOVE:
        return col0 == col1 and row0 > row1
    if relation is Relation.BESIDE:
        return abs(col0 - col1) == 1
    return False


def literal_holds(lit: Literal, state: WorldState) -> bool:
    """
    Whether a single literal is satisfied.

    Negative literals invert the relation, but a literal whose operands
    cannot be located is false regardless of polarity.
    """
    holds = _relation_holds(lit.relation, lit.args, state)
    if holds is None:
        return False
    return holds if lit.polarity else not holds


def conjunction_holds(conjunction: Conjunction, state: WorldState) -> bool:
    return all(literal_holds(lit, state) for lit in conjunction)


def is_goal(state: WorldState, formula: DNFFormula) -> bool:
    """True iff at least one conjunction of formula holds in state."""
    return any(conjunction_holds(conjunction, state) for conjunction in formula)
