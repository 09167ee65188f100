"""
Orthogonal path routing for flowchart connections.

Turns two endpoints plus a set of obstacle nodes into a polyline made of
horizontal and vertical segments only. The router is a pure function of
``(start, end, obstacles)``: it keeps no state between calls, so renderers
and tests can call it once per frame with identical results.

Routing is best-effort. A single bend line is placed between the two
endpoints; if it crosses an obstacle, it is pushed outside that obstacle.
Only the first intersecting obstacle is dodged, so several overlapping
obstacles are not guaranteed to be avoided.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Union

from .geometry import as_point, node_bounds, port_for_side, ports_for
from .models import Bounds, Connection, Node, Point, PortSide

# =============================================================================
# ROUTING CONFIGURATION - Adjust these values to tune routing behavior
# =============================================================================

# Where the bend sits between start and end along the dominant axis
# (0.0 = at start, 1.0 = at end)
BEND_FRACTION = 0.6

# Clearance kept around obstacle nodes when dodging them (in pixels)
OBSTACLE_PADDING = 20

# Sides used for connections committed without port information
DEFAULT_SOURCE_SIDE = PortSide.RIGHT
DEFAULT_TARGET_SIDE = PortSide.LEFT

# =============================================================================


Obstacle = Union[Node, Bounds]


@dataclass
class RoutedConnection:
    """A committed connection together with its drawable polyline."""

    connection: Connection
    points: List[Point]

    @property
    def start(self) -> Point:
        return self.points[0]

    @property
    def end(self) -> Point:
        return self.points[-1]


def validate_routing_params(bend_fraction: float, padding: float) -> None:
    """Raise ValueError for routing parameters outside their valid range."""
    if not 0.0 <= bend_fraction <= 1.0:
        raise ValueError("bend_fraction must be between 0.0 and 1.0")
    if padding < 0:
        raise ValueError("padding must be non-negative")


def _as_bounds(obstacle: Obstacle) -> Bounds:
    if isinstance(obstacle, Bounds):
        return obstacle
    return node_bounds(obstacle)


def _dodge(
    bend: float,
    start_along: float,
    cross_lo: float,
    cross_hi: float,
    boxes: List[Bounds],
    horizontal: bool,
) -> float:
    """
    Push the bend coordinate out of the first obstacle it crosses.

    Args:
        bend: Bend coordinate on the dominant axis
        start_along: Start coordinate on the dominant axis
        cross_lo: Lower end of the bend segment on the cross axis
        cross_hi: Upper end of the bend segment on the cross axis
        boxes: Padded obstacle boxes
        horizontal: True when the dominant axis is x

    Returns:
        The (possibly moved) bend coordinate
    """
    for box in boxes:
        if horizontal:
            lo, hi, c_lo, c_hi, centre = box.x, box.x2, box.y, box.y2, box.center_x
        else:
            lo, hi, c_lo, c_hi, centre = box.y, box.y2, box.x, box.x2, box.center_y

        if not lo <= bend <= hi:
            continue
        if cross_hi < c_lo or cross_lo > c_hi:
            continue

        # Stay on the side of the obstacle the path starts from
        return lo if start_along < centre else hi

    return bend


def route_orthogonal(
    start,
    end,
    obstacles: Iterable[Obstacle] = (),
    bend_fraction: float = BEND_FRACTION,
    padding: float = OBSTACLE_PADDING,
) -> List[Point]:
    """
    Route an orthogonal polyline from ``start`` to ``end``.

    The dominant axis is horizontal when ``|dx| >= |dy|``. The path leaves
    ``start`` along that axis, turns once at the bend line, crosses over,
    and turns again into ``end``.

    Args:
        start: First point (Point or (x, y))
        end: Last point (Point or (x, y))
        obstacles: Nodes or Bounds to keep the bend line out of; any whose
            footprint contains start or end is ignored
        bend_fraction: Bend position between start and end on the dominant axis
        padding: Clearance added around every obstacle

    Returns:
        Four points: start, two bend corners, end. The first and last
        points are exactly ``start`` and ``end``.
    """
    validate_routing_params(bend_fraction, padding)
    start = as_point(start)
    end = as_point(end)
    boxes = []
    for obstacle in obstacles:
        bounds = _as_bounds(obstacle)
        # A node holding an endpoint is the route's own source or target
        if bounds.contains(start) or bounds.contains(end):
            continue
        boxes.append(bounds.expanded(padding))

    dx = end.x - start.x
    dy = end.y - start.y

    if abs(dx) >= abs(dy):
        bend = start.x + dx * bend_fraction
        bend = _dodge(
            bend, start.x, min(start.y, end.y), max(start.y, end.y), boxes, True
        )
        return [start, Point(bend, start.y), Point(bend, end.y), end]

    bend = start.y + dy * bend_fraction
    bend = _dodge(bend, start.y, min(start.x, end.x), max(start.x, end.x), boxes, False)
    return [start, Point(start.x, bend), Point(end.x, bend), end]


def _endpoint(node: Node, side: Optional[PortSide], default: PortSide) -> Point:
    port = port_for_side(node, side or default)
    if port is None:
        port = ports_for(node)[0]
    return port.point


def route_connection(
    connection: Connection,
    nodes: Union[Dict[str, Node], Iterable[Node]],
    bend_fraction: float = BEND_FRACTION,
    padding: float = OBSTACLE_PADDING,
) -> Optional[RoutedConnection]:
    """
    Route a committed connection between its nodes' ports.

    Ports come from the connection's stored sides; without them the edge
    runs from the source's right side to the target's left side. Every
    node other than the two endpoints is an obstacle.

    Returns:
        RoutedConnection, or None if an endpoint node is missing
    """
    if not isinstance(nodes, dict):
        nodes = {node.id: node for node in nodes}

    source = nodes.get(connection.source_id)
    target = nodes.get(connection.target_id)
    if source is None or target is None:
        return None

    start = _endpoint(source, connection.source_port, DEFAULT_SOURCE_SIDE)
    end = _endpoint(target, connection.target_port, DEFAULT_TARGET_SIDE)
    obstacles = [
        node for node_id, node in nodes.items() if not connection.touches(node_id)
    ]
    points = route_orthogonal(start, end, obstacles, bend_fraction, padding)
    return RoutedConnection(connection=connection, points=points)


def route_connections(
    connections: Iterable[Connection],
    nodes: Iterable[Node],
    bend_fraction: float = BEND_FRACTION,
    padding: float = OBSTACLE_PADDING,
) -> List[RoutedConnection]:
    """Route every connection, skipping any with a missing endpoint."""
    by_id = {node.id: node for node in nodes}
    routes = []
    for conn in connections:
        route = route_connection(conn, by_id, bend_fraction, padding)
        if route is not None:
            routes.append(route)
    return routes


def path_length(points: List[Point]) -> float:
    """Total length of an orthogonal polyline."""
    total = 0.0
    for a, b in zip(points, points[1:]):
        total += abs(b.x - a.x) + abs(b.y - a.y)
    return total


def count_bends(points: List[Point]) -> int:
    """Number of direction changes along a polyline (zero-length legs ignored)."""
    directions = []
    for a, b in zip(points, points[1:]):
        if a == b:
            continue
        direction = "h" if a.y == b.y else "v"
        if not directions or directions[-1] != direction:
            directions.append(direction)
    return max(0, len(directions) - 1)
