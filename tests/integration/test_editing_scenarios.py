"""Integration tests for complete editing sessions.

These drive the controller with raw pointer/keyboard events only, the way
a host application would, and check the resulting diagram.
"""

import itertools
import random

from flowcanvas import (
    DiagramStore,
    InteractionController,
    NodeKind,
    Point,
    PortRole,
    PortSide,
    find_nearest_port,
    port_for_side,
    route_connection,
)


def assert_store_invariants(store):
    node_ids = {n.id for n in store.nodes}
    pairs = set()
    ports = set()
    for conn in store.connections:
        assert conn.source_id in node_ids
        assert conn.target_id in node_ids
        assert conn.source_id != conn.target_id
        pair = frozenset((conn.source_id, conn.target_id))
        assert pair not in pairs
        pairs.add(pair)
        for node_id, side in (
            (conn.source_id, conn.source_port),
            (conn.target_id, conn.target_port),
        ):
            if side is not None:
                assert (node_id, side) not in ports
                ports.add((node_id, side))
    for node in store.nodes:
        assert node.position.x >= 0
        assert node.position.y >= 0


class TestScenarioA:
    """Connect two steps right-to-left by dragging."""

    def test_drag_right_port_to_left_port(self):
        controller = InteractionController(DiagramStore())
        first = controller.add_node(NodeKind.STEP, Point(172, 140))
        second = controller.add_node(NodeKind.STEP, Point(472, 140))
        assert first.position == Point(100, 100)
        assert second.position == Point(400, 100)

        start = port_for_side(first, PortSide.RIGHT).point
        end = port_for_side(second, PortSide.LEFT).point

        controller.pointer_down(start)
        for step in range(1, 10):
            controller.pointer_move(
                Point(start.x + (end.x - start.x) * step / 10, start.y + step)
            )
        result = controller.pointer_up(end)

        assert result.accepted
        conn = result.connection
        assert conn.source_port == PortSide.RIGHT
        assert conn.target_port == PortSide.LEFT

        route = route_connection(conn, controller.nodes)
        assert route.points[0] == start
        assert route.points[-1] == end


class TestScenarioB:
    """Dragging from a condition's top port is an entry-role drag."""

    def test_condition_top_offers_only_exit_compatible_ports(self):
        store = DiagramStore()
        controller = InteractionController(store)
        cond = controller.add_node(NodeKind.CONDITION, Point(372, 340))
        other_cond = controller.add_node(NodeKind.CONDITION, Point(672, 340))
        step = controller.add_node(NodeKind.STEP, Point(372, 80))

        top = port_for_side(cond, PortSide.TOP).point
        controller.pointer_down(top)
        assert controller.state.drag_role == PortRole.ENTRY

        # The other condition's entry is never a valid drop target
        other_top = port_for_side(other_cond, PortSide.TOP).point
        controller.pointer_move(other_top)
        assert controller.state.snapped_port is None

        # Its exits are, and so are dynamic step ports
        other_left = port_for_side(other_cond, PortSide.LEFT).point
        controller.pointer_move(other_left)
        assert controller.state.snapped_port.role == PortRole.EXIT

        step_bottom = port_for_side(step, PortSide.BOTTOM).point
        controller.pointer_move(step_bottom)
        assert controller.state.snapped_port.role == PortRole.DYNAMIC

        result = controller.pointer_up(step_bottom)
        assert result.connection.source_id == step.id
        assert result.connection.target_id == cond.id

    def test_resolver_never_offers_entry_ports(self):
        store = DiagramStore()
        origin = store.add_node(NodeKind.CONDITION, Point(372, 340))
        for x, y in itertools.product(range(100, 900, 150), range(100, 700, 150)):
            store.add_node(NodeKind.CONDITION, Point(x, y))
        for x, y in itertools.product(range(0, 1000, 13), range(0, 800, 17)):
            port = find_nearest_port(
                Point(x, y), store.nodes, origin.id, drag_role=PortRole.ENTRY
            )
            assert port is None or port.role != PortRole.ENTRY


class TestScenarioC:
    """Deleting a node removes all of its connections at once."""

    def test_delete_node_with_two_connections(self):
        store = DiagramStore()
        controller = InteractionController(store)
        hub = controller.add_node(NodeKind.STEP, Point(472, 340))
        left = controller.add_node(NodeKind.STEP, Point(172, 340))
        right = controller.add_node(NodeKind.NOTIFICATION, Point(772, 340))

        controller.pointer_down(port_for_side(left, PortSide.RIGHT).point)
        assert controller.pointer_up(port_for_side(hub, PortSide.LEFT).point).accepted
        controller.pointer_down(port_for_side(hub, PortSide.RIGHT).point)
        assert controller.pointer_up(port_for_side(right, PortSide.LEFT).point).accepted
        assert len(store.connections) == 2

        events = []
        store.subscribe(events.append)
        controller.select_node(hub.id)
        controller.key_down("Delete")

        assert store.get_node(hub.id) is None
        assert store.connections == []
        assert len(events) == 3
        assert_store_invariants(store)


class TestScenarioD:
    """Adding the same edge twice leaves exactly one connection."""

    def test_add_connection_twice(self):
        store = DiagramStore()
        a = store.add_node(NodeKind.STEP, Point(172, 140))
        b = store.add_node(NodeKind.STEP, Point(472, 140))
        assert store.connect(a.id, b.id).accepted
        assert not store.connect(a.id, b.id).accepted
        assert not store.connect(b.id, a.id).accepted
        between = [c for c in store.connections if c.touches(a.id) and c.touches(b.id)]
        assert len(between) == 1


class TestRandomSessions:
    """Invariants hold across long random event sequences."""

    def test_random_event_sequences(self):
        rng = random.Random(2024)
        store = DiagramStore()
        controller = InteractionController(store)
        kinds = list(NodeKind)

        for _ in range(8):
            controller.add_node(
                rng.choice(kinds), Point(rng.uniform(0, 900), rng.uniform(0, 700))
            )

        for _ in range(600):
            action = rng.random()
            point = Point(rng.uniform(-50, 950), rng.uniform(-50, 750))
            if action < 0.2:
                nodes = store.nodes
                if nodes:
                    node = rng.choice(nodes)
                    port = rng.choice(
                        [p for p in (port_for_side(node, s) for s in PortSide) if p]
                    )
                    controller.pointer_down(port.point)
            elif action < 0.35:
                controller.pointer_down(point)
            elif action < 0.7:
                controller.pointer_move(point)
            elif action < 0.9:
                controller.pointer_up(point)
            elif action < 0.93:
                controller.key_down("Escape")
            elif action < 0.95:
                controller.key_down("Delete")
            elif action < 0.97:
                controller.double_click(point)
            else:
                controller.add_node(rng.choice(kinds), point)

            assert_store_invariants(store)
