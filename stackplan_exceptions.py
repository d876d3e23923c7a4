"""
stackplan_exceptions.py

Central exception hierarchy for the StackPlan planner.
Defines specialised exception classes for the different failure scenarios.

Exception hierarchy:
    StackPlanException (base)
    ├── PlanningException
    │   ├── PlanNotFoundError
    │   └── SearchBudgetExceededError
    │       └── SearchTimeoutError
    ├── WorldModelException
    │   ├── InvalidWorldStateError
    │   └── IllegalActionError
    ├── FormulaException
    │   └── MalformedFormulaError
    └── ConfigurationException
        └── InvalidConfigError

Usage:
    from stackplan_exceptions import PlanNotFoundError, SearchTimeoutError

    try:
        result = planner.plan_formula(formula, state)
    except SearchTimeoutError as e:
        logger.warning(f"Search ran out of time: {e}")
    except PlanNotFoundError as e:
        logger.info(f"Goal unreachable: {e.context}")
"""

from typing import Any, Dict, Optional, Type


class StackPlanException(Exception):
    """
    Base exception for all StackPlan-specific errors.

    Carries a message, a context dict and, when wrapping another error, the
    original exception. Keyword fields given by subclasses (expansions,
    action, ...) are added to the context.
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[BaseException] = None,
        **fields: Any,
    ):
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = {**(context or {}), **fields}
        self.original_exception = original_exception

    def __str__(self) -> str:
        parts = [self.message]
        if self.context:
            parts.append("Context: " + ", ".join(f"{k}={v}" for k, v in self.context.items()))
        if self.original_exception is not None:
            cause = self.original_exception
            parts.append(f"Caused by: {type(cause).__name__}: {cause}")
        return " | ".join(parts)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, context={self.context!r})"


# ----------------------------------------------------------------------------
# Planning
# ----------------------------------------------------------------------------


class PlanningException(StackPlanException):
    """Base exception for search and planning failures."""


class PlanNotFoundError(PlanningException):
    """
    The search exhausted the reachable state space without reaching the goal.

    Causes:
    - The goal violates the physical laws (e.g. a large box on a small brick)
    - The goal references objects that do not exist in the world
    - Every conjunction of the formula is contradictory
    """

    def __init__(
        self,
        message: str,
        expansions: Optional[int] = None,
        reason: Optional[str] = None,
        **kwargs: Any,
    ):
        super().__init__(message, expansions=expansions, reason=reason, **kwargs)


class SearchBudgetExceededError(PlanningException):
    """
    The search stopped because its budget ran out before a result was found.

    More search might have succeeded, so callers may retry with a larger
    budget. Never raised for goals that are provably unreachable.
    """

    def __init__(self, message: str, expansions: Optional[int] = None, **kwargs: Any):
        super().__init__(message, expansions=expansions, **kwargs)


class SearchTimeoutError(SearchBudgetExceededError):
    """The wall-clock time budget elapsed before the search resolved."""

    def __init__(
        self,
        message: str,
        timeout_seconds: Optional[float] = None,
        expansions: Optional[int] = None,
        **kwargs: Any,
    ):
        super().__init__(
            message, expansions=expansions, timeout_seconds=timeout_seconds, **kwargs
        )


# ----------------------------------------------------------------------------
# World model
# ----------------------------------------------------------------------------


class WorldModelException(StackPlanException):
    """Base exception for world-state errors."""


class InvalidWorldStateError(WorldModelException):
    """
    A world state violates its structural invariants.

    Causes:
    - Arm column outside the range of existing columns
    - Held object also present in a stack
    - An object appearing in more than one place
    """


class IllegalActionError(WorldModelException):
    """
    An action token cannot be applied to a world state.

    Causes:
    - Moving the arm past the first or last column
    - Picking from an empty column or while already holding an object
    - Dropping an object where the physical laws forbid it
    """

    def __init__(self, message: str, action: Optional[str] = None, **kwargs: Any):
        super().__init__(message, action=action, **kwargs)


# ----------------------------------------------------------------------------
# Goal formulas
# ----------------------------------------------------------------------------


class FormulaException(StackPlanException):
    """Base exception for goal formula errors."""


class MalformedFormulaError(FormulaException):
    """
    A goal literal could not be built.

    Causes:
    - Unknown relation name
    - Number of arguments does not match the relation's arity
    """

    def __init__(self, message: str, relation: Optional[str] = None, **kwargs: Any):
        super().__init__(message, relation=relation, **kwargs)


# ----------------------------------------------------------------------------
# Configuration
# ----------------------------------------------------------------------------


class ConfigurationException(StackPlanException):
    """Base exception for configuration errors."""


class InvalidConfigError(ConfigurationException):
    """
    Invalid configuration.

    Causes:
    - Unknown configuration keys
    - Values of the wrong type
    - Unreadable or malformed YAML file
    """


# ----------------------------------------------------------------------------
# Helpers
# ----------------------------------------------------------------------------


def wrap_exception(
    exc: BaseException,
    stackplan_exception_class: Type[StackPlanException],
    message: str,
    **context: Any,
) -> StackPlanException:
    """
    Convert a generic exception into a StackPlan-specific exception.

    Example:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise wrap_exception(e, InvalidConfigError, "Cannot parse config", path=path) from e
    """
    return stackplan_exception_class(message, context=context, original_exception=exc)


_FRIENDLY_MESSAGES: Dict[Type[StackPlanException], str] = {
    PlanNotFoundError: "I cannot find a way to do that in this world.",
    SearchTimeoutError: "Planning took too long. Try a simpler command or a larger time budget.",
    SearchBudgetExceededError: "I gave up searching for a plan. Try a simpler command.",
    InvalidWorldStateError: "The world description is inconsistent.",
    IllegalActionError: "The plan contains a move the arm cannot perform.",
    MalformedFormulaError: "I could not understand the goal.",
    InvalidConfigError: "Invalid configuration. Please check the settings.",
}

_DEFAULT_MESSAGE = "An unexpected error occurred."


def _friendly_text(exc: BaseException) -> str:
    if isinstance(exc, PlanNotFoundError) and exc.context.get("reason") == "unknown_objects":
        return "The goal mentions objects that are not in the world."
    if isinstance(exc, SearchTimeoutError) and exc.context.get("timeout_seconds"):
        seconds = exc.context["timeout_seconds"]
        return f"Planning took longer than {seconds:g} seconds. Try a simpler command."
    for cls in type(exc).__mro__:
        if cls in _FRIENDLY_MESSAGES:
            return _FRIENDLY_MESSAGES[cls]
    return _DEFAULT_MESSAGE


def get_user_friendly_message(exc: BaseException, include_details: bool = False) -> str:
    """
    Message for the person who issued the command.

    Args:
        exc: Exception to describe
        include_details: Append the technical message and context (debug mode)
    """
    user_message = f"[ERROR] {_friendly_text(exc)}"

    if include_details and isinstance(exc, StackPlanException):
        user_message += f"\n\nTechnical details: {exc.message}"
        if exc.context:
            user_message += f"\n   Context: {exc.context}"

    return user_message
