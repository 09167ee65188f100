"""Unit tests for the geometry module."""

import pytest

from flowcanvas.geometry import (
    NODE_HEIGHT,
    NODE_WIDTH,
    as_point,
    clamp_position,
    contains_point,
    default_label,
    distance,
    node_bounds,
    placement_for_click,
    port_for_side,
    ports_for,
)
from flowcanvas.models import Node, NodeKind, Point, PortRole, PortSide


def make_node(kind, x=100, y=100, node_id="n"):
    return Node(node_id, kind, "", Point(x, y))


class TestFootprint:
    """Tests for the fixed node footprint."""

    def test_footprint_constants(self):
        """Footprint is 144x80."""
        assert NODE_WIDTH == 144
        assert NODE_HEIGHT == 80

    @pytest.mark.parametrize("kind", list(NodeKind))
    def test_bounds_same_for_every_kind(self, kind):
        """Every kind occupies the same bounding box."""
        b = node_bounds(make_node(kind, 10, 20))
        assert (b.x, b.y, b.width, b.height) == (10, 20, 144, 80)


class TestPortsFor:
    """Tests for ports_for."""

    def test_condition_ports(self):
        """Condition: top entry, left/right quarter exits."""
        ports = ports_for(make_node(NodeKind.CONDITION))
        assert [(p.side, p.role, p.x, p.y) for p in ports] == [
            (PortSide.TOP, PortRole.ENTRY, 172, 100),
            (PortSide.LEFT, PortRole.EXIT, 136, 140),
            (PortSide.RIGHT, PortRole.EXIT, 208, 140),
        ]

    @pytest.mark.parametrize("kind", [NodeKind.STEP, NodeKind.NOTIFICATION])
    def test_rectangle_ports(self, kind):
        """Step/notification: four dynamic ports, one per side."""
        ports = ports_for(make_node(kind))
        assert [(p.side, p.x, p.y) for p in ports] == [
            (PortSide.LEFT, 100, 140),
            (PortSide.TOP, 172, 100),
            (PortSide.BOTTOM, 172, 180),
            (PortSide.RIGHT, 244, 140),
        ]
        assert all(p.role == PortRole.DYNAMIC for p in ports)

    def test_ports_carry_node_id(self):
        ports = ports_for(make_node(NodeKind.STEP, node_id="node-7"))
        assert {p.node_id for p in ports} == {"node-7"}

    def test_ports_follow_position(self):
        """Ports are recomputed from the current position."""
        node = make_node(NodeKind.STEP, 0, 0)
        before = ports_for(node)
        node.position = Point(50, 30)
        after = ports_for(node)
        for old, new in zip(before, after):
            assert new.x - old.x == 50
            assert new.y - old.y == 30


class TestPortForSide:
    """Tests for port_for_side."""

    def test_existing_side(self):
        port = port_for_side(make_node(NodeKind.STEP), PortSide.RIGHT)
        assert port.point == Point(244, 140)

    def test_condition_has_no_bottom(self):
        """Condition nodes have no bottom port."""
        assert port_for_side(make_node(NodeKind.CONDITION), PortSide.BOTTOM) is None


class TestContainsPoint:
    """Tests for contains_point."""

    def test_rectangle_corner_inside(self):
        node = make_node(NodeKind.STEP, 0, 0)
        assert contains_point(node, Point(1, 1))

    def test_diamond_corner_outside(self):
        """The bounding-box corner lies outside the diamond."""
        node = make_node(NodeKind.CONDITION, 0, 0)
        assert not contains_point(node, Point(1, 1))

    def test_diamond_center_inside(self):
        node = make_node(NodeKind.CONDITION, 0, 0)
        assert contains_point(node, Point(72, 40))

    def test_outside_bounds(self):
        node = make_node(NodeKind.STEP, 0, 0)
        assert not contains_point(node, Point(200, 40))


class TestPositions:
    """Tests for clamping and click placement."""

    def test_clamp_negative(self):
        assert clamp_position(Point(-5, -10)) == Point(0, 0)

    def test_clamp_keeps_positive(self):
        assert clamp_position(Point(5, 10)) == Point(5, 10)

    def test_placement_centres_node(self):
        """Click point minus half the footprint."""
        assert placement_for_click(Point(172, 140)) == Point(100, 100)

    def test_placement_clamped(self):
        assert placement_for_click(Point(10, 10)) == Point(0, 0)


class TestHelpers:
    """Tests for small geometry helpers."""

    def test_distance(self):
        assert distance(Point(0, 0), Point(3, 4)) == 5

    def test_as_point_tuple(self):
        assert as_point((1, 2)) == Point(1, 2)

    def test_as_point_passthrough(self):
        p = Point(1, 2)
        assert as_point(p) is p

    def test_default_labels(self):
        assert default_label(NodeKind.STEP) == "Process Step"
        assert default_label(NodeKind.CONDITION) == "Decision Point"
        assert default_label(NodeKind.NOTIFICATION) == "Notification"
