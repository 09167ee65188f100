"""
Nearest-port resolution for connection drawing.

While the user drags a connection, the pointer position is resolved to the
closest port that could legally end the connection. A port qualifies when:

- it belongs to a node other than the origin node
- its role is compatible with the drag role
- its node is not already joined to the origin node (either direction)
- it is not already consumed by another connection
- it lies strictly within the snap radius of the pointer

Ties on exact distance go to the first candidate in node-then-port
enumeration order. The order is deterministic but carries no meaning.
"""

from typing import Iterable, Optional, Set, Tuple

from .geometry import as_point, distance, ports_for
from .models import Connection, Node, Port, PortRole, PortSide

# Default maximum pointer-to-port distance, in canvas pixels
DEFAULT_SNAP_RADIUS = 50


def is_role_compatible(drag_role: PortRole, port_role: PortRole) -> bool:
    """
    Check whether a port may end a drag of the given role.

    An exit drag lands on entry ports, an entry drag on exit ports, and
    dynamic ports (or a dynamic drag) match anything.
    """
    if drag_role == PortRole.DYNAMIC or port_role == PortRole.DYNAMIC:
        return True
    return drag_role != port_role


def ports_in_use(connections: Iterable[Connection]) -> Set[Tuple[str, PortSide]]:
    """Collect (node_id, side) pairs already consumed by connections."""
    used = set()
    for conn in connections:
        if conn.source_port is not None:
            used.add((conn.source_id, conn.source_port))
        if conn.target_port is not None:
            used.add((conn.target_id, conn.target_port))
    return used


def connected_nodes(node_id: Optional[str], connections: Iterable[Connection]) -> Set[str]:
    """Nodes joined to ``node_id`` by an existing connection, either way."""
    if node_id is None:
        return set()
    neighbours = set()
    for conn in connections:
        other = conn.other_end(node_id)
        if other is not None:
            neighbours.add(other)
    return neighbours


def find_nearest_port(
    cursor,
    nodes: Iterable[Node],
    exclude_node_id: Optional[str] = None,
    existing_connections: Iterable[Connection] = (),
    drag_role: PortRole = PortRole.EXIT,
    snap_radius: float = DEFAULT_SNAP_RADIUS,
) -> Optional[Port]:
    """
    Find the best valid target port near the pointer.

    Args:
        cursor: Pointer position (Point or (x, y))
        nodes: Candidate nodes, in enumeration order
        exclude_node_id: Origin node of the drag; its ports are never offered
        existing_connections: Committed connections
        drag_role: Role of the drag (role of the origin port)
        snap_radius: Ports at this distance or further are ignored

    Returns:
        The closest qualifying Port, or None if nothing is in range
    """
    cursor = as_point(cursor)
    connections = list(existing_connections)
    blocked_nodes = connected_nodes(exclude_node_id, connections)
    used = ports_in_use(connections)

    nearest: Optional[Port] = None
    min_distance = float("inf")

    for node in nodes:
        if node.id == exclude_node_id or node.id in blocked_nodes:
            continue
        for port in ports_for(node):
            if not is_role_compatible(drag_role, port.role):
                continue
            if (port.node_id, port.side) in used:
                continue
            dist = distance(cursor, port.point)
            # Strict comparison keeps the first candidate on ties
            if dist < min_distance:
                min_distance = dist
                nearest = port

    if nearest is not None and min_distance < snap_radius:
        return nearest
    return None
