"""Pytest configuration and shared fixtures for flowcanvas tests."""

import pytest

from flowcanvas import DiagramStore, InteractionController, NodeKind, Point


@pytest.fixture
def store():
    """Empty DiagramStore."""
    return DiagramStore()


@pytest.fixture
def controller(store):
    """Controller driving the empty store, with tracing enabled."""
    return InteractionController(store, debug=True)


@pytest.fixture
def two_steps(store):
    """Two step nodes side by side: A at (100,100), B at (400,100)."""
    a = store.add_node(NodeKind.STEP, Point(172, 140))
    b = store.add_node(NodeKind.STEP, Point(472, 140))
    return a, b


@pytest.fixture
def condition_and_steps(store):
    """A condition node at (300,300) between a step above and a step below."""
    cond = store.add_node(NodeKind.CONDITION, Point(372, 340))
    upper = store.add_node(NodeKind.STEP, Point(372, 80))
    lower = store.add_node(NodeKind.STEP, Point(372, 600))
    return cond, upper, lower
