#!/usr/bin/env python3
"""
Examples of driving the flowchart canvas engine.

Each example replays a short editing session through the interaction
controller, the way a host UI would feed it pointer events, and saves a
PNG snapshot of the result.
"""

import logging

from flowcanvas import (
    DiagramStore,
    InteractionController,
    NodeKind,
    Point,
    PortSide,
    port_for_side,
    render_snapshot,
)


def drag_connection(controller, source, source_side, target, target_side):
    """Press on one port, sweep the pointer across, release on another."""
    start = port_for_side(source, source_side).point
    end = port_for_side(target, target_side).point
    controller.pointer_down(start)
    for step in range(1, 6):
        controller.pointer_move(
            Point(
                start.x + (end.x - start.x) * step / 6,
                start.y + (end.y - start.y) * step / 6,
            )
        )
    return controller.pointer_up(end)


def example_linear():
    """Three steps in a row"""
    print("Example 1: Linear Flow")

    controller = InteractionController(DiagramStore())
    a = controller.add_node(NodeKind.STEP, Point(112, 80))
    b = controller.add_node(NodeKind.STEP, Point(362, 80))
    c = controller.add_node(NodeKind.NOTIFICATION, Point(612, 80))
    controller.submit_label(c.id, "Send Email")

    drag_connection(controller, a, PortSide.RIGHT, b, PortSide.LEFT)
    drag_connection(controller, b, PortSide.RIGHT, c, PortSide.LEFT)

    render_snapshot(controller.store, "example_linear.png", controller, scale=2)
    print("  Saved: example_linear.png\n")


def example_decision():
    """A condition with two outcomes"""
    print("Example 2: Decision")

    controller = InteractionController(DiagramStore())
    start = controller.add_node(NodeKind.STEP, Point(362, 60))
    check = controller.add_node(NodeKind.CONDITION, Point(362, 240))
    approve = controller.add_node(NodeKind.STEP, Point(132, 420))
    reject = controller.add_node(NodeKind.NOTIFICATION, Point(592, 420))
    controller.submit_label(check.id, "Valid?")

    drag_connection(controller, start, PortSide.BOTTOM, check, PortSide.TOP)
    drag_connection(controller, check, PortSide.LEFT, approve, PortSide.TOP)
    drag_connection(controller, check, PortSide.RIGHT, reject, PortSide.TOP)

    render_snapshot(controller.store, "example_decision.png", controller, scale=2)
    print("  Saved: example_decision.png\n")


def example_obstacle():
    """A connection routed around a node in its way"""
    print("Example 3: Obstacle Avoidance")

    controller = InteractionController(DiagramStore())
    left = controller.add_node(NodeKind.STEP, Point(112, 100))
    right = controller.add_node(NodeKind.STEP, Point(712, 260))
    controller.add_node(NodeKind.NOTIFICATION, Point(462, 180))

    drag_connection(controller, left, PortSide.RIGHT, right, PortSide.LEFT)

    render_snapshot(controller.store, "example_obstacle.png", controller, scale=2)
    print("  Saved: example_obstacle.png\n")


def example_live_preview():
    """Snapshot taken mid-drag, showing the snapped preview"""
    print("Example 4: Live Preview")

    controller = InteractionController(DiagramStore(), debug=True)
    a = controller.add_node(NodeKind.STEP, Point(112, 100))
    b = controller.add_node(NodeKind.CONDITION, Point(462, 260))

    controller.pointer_down(port_for_side(a, PortSide.BOTTOM).point)
    controller.pointer_move(port_for_side(b, PortSide.TOP).point.offset(12, -9))

    render_snapshot(controller.store, "example_preview.png", controller, scale=2)
    print("  Saved: example_preview.png")
    print(controller.get_trace().summary())
    print()


def main():
    """Run all examples."""
    logging.basicConfig(level=logging.INFO)

    print("=" * 50)
    print("Flowchart Canvas Examples")
    print("=" * 50)
    print()

    example_linear()
    example_decision()
    example_obstacle()
    example_live_preview()

    print("=" * 50)
    print("All examples generated!")
    print("=" * 50)


if __name__ == "__main__":
    main()
