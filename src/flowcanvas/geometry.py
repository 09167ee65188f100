"""
Geometry and port model for flowchart nodes.

Maps a node (kind + position) to its footprint and attachment ports.
Every function here is pure: results depend only on the node's kind and
position, so callers must query again after a node moves instead of
holding on to old ports.

Kind-specific behaviour is kept in kind-indexed tables of functions
rather than in node subclasses.
"""

import math
from typing import Callable, Dict, List, Optional

from .models import Bounds, Node, NodeKind, Point, Port, PortRole, PortSide

# =============================================================================
# NODE FOOTPRINT - fixed contract shared with any renderer
# =============================================================================

# Every node kind occupies the same bounding box. Condition nodes draw a
# diamond inscribed in it.
NODE_WIDTH = 144
NODE_HEIGHT = 80

HALF_WIDTH = NODE_WIDTH // 2  # 72
HALF_HEIGHT = NODE_HEIGHT // 2  # 40

# Condition exits sit halfway between the diamond's centre and its side
# vertices.
QUARTER_WIDTH = NODE_WIDTH // 4  # 36

DEFAULT_LABELS: Dict[NodeKind, str] = {
    NodeKind.STEP: "Process Step",
    NodeKind.CONDITION: "Decision Point",
    NodeKind.NOTIFICATION: "Notification",
}

# =============================================================================


def _rectangle_ports(node: Node) -> List[Port]:
    """Four dynamic ports, one per side: left, top, bottom, right."""
    x, y = node.position.x, node.position.y
    return [
        Port(node.id, PortSide.LEFT, PortRole.DYNAMIC, x, y + HALF_HEIGHT),
        Port(node.id, PortSide.TOP, PortRole.DYNAMIC, x + HALF_WIDTH, y),
        Port(
            node.id, PortSide.BOTTOM, PortRole.DYNAMIC, x + HALF_WIDTH, y + NODE_HEIGHT
        ),
        Port(node.id, PortSide.RIGHT, PortRole.DYNAMIC, x + NODE_WIDTH, y + HALF_HEIGHT),
    ]


def _diamond_ports(node: Node) -> List[Port]:
    """One entry at the top vertex, two exits at the left/right quarters."""
    x, y = node.position.x, node.position.y
    return [
        Port(node.id, PortSide.TOP, PortRole.ENTRY, x + HALF_WIDTH, y),
        Port(node.id, PortSide.LEFT, PortRole.EXIT, x + QUARTER_WIDTH, y + HALF_HEIGHT),
        Port(
            node.id,
            PortSide.RIGHT,
            PortRole.EXIT,
            x + NODE_WIDTH - QUARTER_WIDTH,
            y + HALF_HEIGHT,
        ),
    ]


def _rectangle_contains(node: Node, point: Point) -> bool:
    return node_bounds(node).contains(point)


def _diamond_contains(node: Node, point: Point) -> bool:
    bounds = node_bounds(node)
    dx = abs(point.x - bounds.center_x) / HALF_WIDTH
    dy = abs(point.y - bounds.center_y) / HALF_HEIGHT
    return dx + dy <= 1.0


PORT_LAYOUTS: Dict[NodeKind, Callable[[Node], List[Port]]] = {
    NodeKind.STEP: _rectangle_ports,
    NodeKind.CONDITION: _diamond_ports,
    NodeKind.NOTIFICATION: _rectangle_ports,
}

HIT_TESTS: Dict[NodeKind, Callable[[Node, Point], bool]] = {
    NodeKind.STEP: _rectangle_contains,
    NodeKind.CONDITION: _diamond_contains,
    NodeKind.NOTIFICATION: _rectangle_contains,
}


def ports_for(node: Node) -> List[Port]:
    """
    Compute the attachment ports of a node.

    Args:
        node: Node to inspect

    Returns:
        Ports in enumeration order (condition: top, left, right;
        step/notification: left, top, bottom, right)
    """
    return PORT_LAYOUTS[node.kind](node)


def port_for_side(node: Node, side: PortSide) -> Optional[Port]:
    """Get the port on ``side`` of a node, or None if the kind has none."""
    for port in ports_for(node):
        if port.side == side:
            return port
    return None


def node_bounds(node: Node) -> Bounds:
    """Bounding box of a node's footprint."""
    return Bounds(node.position.x, node.position.y, NODE_WIDTH, NODE_HEIGHT)


def contains_point(node: Node, point: Point) -> bool:
    """Check whether ``point`` falls on the node's drawn shape."""
    return HIT_TESTS[node.kind](node, point)


def clamp_position(position: Point) -> Point:
    """Clamp a node position to the non-negative quadrant."""
    return Point(max(0, position.x), max(0, position.y))


def placement_for_click(click: Point) -> Point:
    """Top-left position that centres a new node on a click point."""
    return clamp_position(click.offset(-HALF_WIDTH, -HALF_HEIGHT))


def distance(a: Point, b: Point) -> float:
    """Euclidean distance between two points."""
    return math.hypot(a.x - b.x, a.y - b.y)


def default_label(kind: NodeKind) -> str:
    return DEFAULT_LABELS[kind]


def as_point(value) -> Point:
    """Accept a Point or an (x, y) pair."""
    if isinstance(value, Point):
        return value
    x, y = value
    return Point(x, y)
