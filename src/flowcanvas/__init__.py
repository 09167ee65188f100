"""
flowcanvas - interaction and geometry engine for visual flowchart builders

Places typed nodes, derives their attachment ports, snaps connection drags
to the nearest valid port, routes orthogonal connection paths around other
nodes, and drives all of it from raw pointer/keyboard events through an
explicit gesture state machine. Rendering is left to the host application.

Example:
    >>> from flowcanvas import DiagramStore, InteractionController, Point
    >>> controller = InteractionController(DiagramStore())
    >>> a = controller.add_node("step", Point(172, 140))
    >>> b = controller.add_node("step", Point(472, 140))
    >>> controller.pointer_down(Point(244, 140))
    >>> controller.pointer_up(Point(400, 140)).accepted
    True

Debug Mode Example:
    >>> controller = InteractionController(DiagramStore(), debug=True)
    >>> controller.pointer_down(Point(10, 10))
    >>> print(controller.get_trace().summary())
"""

import logging

from .controller import (
    ConnectionDrawing,
    Idle,
    InteractionController,
    LabelEditing,
    NodeDragging,
)
from .geometry import NODE_HEIGHT, NODE_WIDTH, node_bounds, port_for_side, ports_for
from .models import Bounds, Connection, Node, NodeKind, Point, Port, PortRole, PortSide
from .resolver import DEFAULT_SNAP_RADIUS, find_nearest_port
from .router import RoutedConnection, route_connection, route_orthogonal
from .snapshot import SnapshotRenderer, render_snapshot
from .store import (
    ConnectionRejection,
    ConnectionResult,
    DiagramStore,
    StoreEvent,
    StoreEventKind,
)
from .tracer import GestureTrace, SnapRecord, TransitionRecord

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    # Data model
    "Node",
    "NodeKind",
    "Port",
    "PortRole",
    "PortSide",
    "Point",
    "Bounds",
    "Connection",
    # Geometry
    "NODE_WIDTH",
    "NODE_HEIGHT",
    "ports_for",
    "port_for_side",
    "node_bounds",
    # Store
    "DiagramStore",
    "ConnectionResult",
    "ConnectionRejection",
    "StoreEvent",
    "StoreEventKind",
    # Resolver
    "find_nearest_port",
    "DEFAULT_SNAP_RADIUS",
    # Router
    "route_orthogonal",
    "route_connection",
    "RoutedConnection",
    # Controller
    "InteractionController",
    "Idle",
    "NodeDragging",
    "ConnectionDrawing",
    "LabelEditing",
    # Debug/Tracing (for development and debugging)
    "GestureTrace",
    "TransitionRecord",
    "SnapRecord",
    "SnapshotRenderer",
    "render_snapshot",
]
