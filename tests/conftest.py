"""
tests/conftest.py

Shared fixtures for the StackPlan test suite.
"""

import pytest

from component_4_world_state import make_world
from stackplan_config import CONFIG_ENV_VAR, reset_config

# ============================================================================
# Object tables
# ============================================================================

OBJECTS = {
    "a": {"form": "ball", "size": "small", "color": "white"},
    "b": {"form": "box", "size": "large", "color": "red"},
    "c": {"form": "brick", "size": "small", "color": "blue"},
    "d": {"form": "plank", "size": "large", "color": "green"},
    "e": {"form": "pyramid", "size": "small", "color": "yellow"},
}


@pytest.fixture(autouse=True)
def fresh_config(monkeypatch):
    """Every test starts with the built-in configuration."""
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def objects():
    return dict(OBJECTS)


@pytest.fixture
def ball_box_world():
    """Small white ball in column 0, large red box in column 1."""
    return make_world(
        [["a"], ["b"]],
        {"a": OBJECTS["a"], "b": OBJECTS["b"]},
    )


@pytest.fixture
def large_ball_small_box_world():
    """A world in which the ball can never go into the box."""
    return make_world(
        [["a"], ["b"]],
        {
            "a": {"form": "ball", "size": "large", "color": "white"},
            "b": {"form": "box", "size": "small", "color": "red"},
        },
    )


@pytest.fixture
def four_column_world():
    """
    Column 0: small brick c with small pyramid e on top
    Column 1: empty
    Column 2: large box b containing small ball a
    Column 3: large plank d
    """
    return make_world([["c", "e"], [], ["b", "a"], ["d"]], OBJECTS)
