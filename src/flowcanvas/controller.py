"""
Interaction controller for the flowchart canvas.

An explicit finite state machine that turns normalized pointer and keyboard
events into store commands. Exactly one gesture is active at a time:

    Idle --press on port--------> ConnectionDrawing --release/Escape--> Idle
    Idle --press on node body---> NodeDragging ------release----------> Idle
    Idle --begin_label_edit-----> LabelEditing ------submit/cancel----> Idle

Presses received during an active drag are ignored until it resolves.
Selection is kept apart from the gesture state: deleting the selected node
with the Delete key never changes the current state.

Every handler works only from the coordinates carried by its own event and
finishes its store mutation before returning, so events cannot overwrite
each other out of order.
"""

import logging
from dataclasses import dataclass, replace
from typing import List, Optional, Union

from .geometry import as_point, contains_point, distance, ports_for
from .models import Connection, Node, NodeKind, Point, Port, PortRole
from .resolver import DEFAULT_SNAP_RADIUS, find_nearest_port
from .router import (
    BEND_FRACTION,
    OBSTACLE_PADDING,
    route_connections,
    route_orthogonal,
    validate_routing_params,
)
from .store import ConnectionResult, DiagramStore
from .tracer import GestureTrace

logger = logging.getLogger(__name__)

# Pointer distance at which a press counts as "on" a port
PORT_HIT_RADIUS = 8

# Pointer distance at which a click counts as "on" a connection path
PATH_HIT_TOLERANCE = 8

ESCAPE_KEY = "Escape"
DELETE_KEY = "Delete"


# =============================================================================
# GESTURE STATES
# =============================================================================


@dataclass(frozen=True)
class Idle:
    """No gesture in progress."""


@dataclass(frozen=True)
class NodeDragging:
    """
    A node follows the pointer.

    Attributes:
        node_id: Node being dragged
        grab_offset: Pointer position relative to the node's top-left corner
            at press time
    """

    node_id: str
    grab_offset: Point


@dataclass(frozen=True)
class ConnectionDrawing:
    """
    A connection is being dragged out of a port.

    Attributes:
        origin_node_id: Node the drag started on
        origin_port: Port the drag started on
        drag_role: Role the origin plays (exit drags end on entries and
            vice versa)
        preview_end: Where the live preview currently ends
        snapped_port: Port the preview is snapped to, if any
    """

    origin_node_id: str
    origin_port: Port
    drag_role: PortRole
    preview_end: Point
    snapped_port: Optional[Port] = None


@dataclass(frozen=True)
class LabelEditing:
    """A node's label is open in the (external) text editor."""

    node_id: str


GestureState = Union[Idle, NodeDragging, ConnectionDrawing, LabelEditing]


def state_name(state: GestureState) -> str:
    return type(state).__name__


def drag_role_for(port: Port) -> PortRole:
    """
    Role a connection drag takes when it starts on ``port``.

    Condition ports carry a fixed role (top entry, left/right exit).
    Dynamic ports on step and notification nodes always start exit drags.
    """
    if port.role == PortRole.DYNAMIC:
        return PortRole.EXIT
    return port.role


def _distance_to_segment(p: Point, a: Point, b: Point) -> float:
    dx, dy = b.x - a.x, b.y - a.y
    length_sq = dx * dx + dy * dy
    if length_sq == 0:
        return distance(p, a)
    t = ((p.x - a.x) * dx + (p.y - a.y) * dy) / length_sq
    t = max(0.0, min(1.0, t))
    return distance(p, Point(a.x + t * dx, a.y + t * dy))


class InteractionController:
    """
    Drives the store from raw pointer and keyboard events.

    Example:
        >>> store = DiagramStore()
        >>> controller = InteractionController(store)
        >>> a = controller.add_node("step", Point(172, 140))
        >>> b = controller.add_node("step", Point(472, 140))
        >>> controller.pointer_down(Point(244, 140))   # a's right port
        >>> controller.pointer_move(Point(395, 138))
        >>> result = controller.pointer_up(Point(400, 140))  # b's left port
        >>> result.accepted
        True
    """

    def __init__(
        self,
        store: Optional[DiagramStore] = None,
        snap_radius: float = DEFAULT_SNAP_RADIUS,
        port_hit_radius: float = PORT_HIT_RADIUS,
        bend_fraction: float = BEND_FRACTION,
        padding: float = OBSTACLE_PADDING,
        debug: bool = False,
    ):
        """
        Initialize the controller.

        Args:
            store: Store to drive (default: a new empty DiagramStore)
            snap_radius: Maximum pointer-to-port distance for snapping
            port_hit_radius: Maximum press-to-port distance to start a
                connection drag
            bend_fraction: Bend position used for the live preview route
            padding: Obstacle clearance used for the live preview route
            debug: Record every handled event in a GestureTrace
        """
        if snap_radius <= 0:
            raise ValueError("snap_radius must be positive")
        if port_hit_radius < 0:
            raise ValueError("port_hit_radius must be non-negative")
        validate_routing_params(bend_fraction, padding)

        self.store = store if store is not None else DiagramStore()
        self.snap_radius = snap_radius
        self.port_hit_radius = port_hit_radius
        self.bend_fraction = bend_fraction
        self.padding = padding
        self.debug = debug

        self._state: GestureState = Idle()
        self._selected_node_id: Optional[str] = None
        self._trace: Optional[GestureTrace] = GestureTrace() if debug else None

    # ------------------------------------------------------------------
    # Read-only view for renderers
    # ------------------------------------------------------------------

    @property
    def state(self) -> GestureState:
        return self._state

    @property
    def selected_node_id(self) -> Optional[str]:
        return self._selected_node_id

    @property
    def is_idle(self) -> bool:
        return isinstance(self._state, Idle)

    @property
    def nodes(self) -> List[Node]:
        return self.store.nodes

    @property
    def connections(self) -> List[Connection]:
        return self.store.connections

    def get_trace(self) -> Optional[GestureTrace]:
        """Return the gesture trace (None unless built with debug=True)."""
        return self._trace

    def routes(self):
        """Routed polylines for every committed connection."""
        return route_connections(
            self.store.connections,
            self.store.nodes,
            self.bend_fraction,
            self.padding,
        )

    def preview_path(self) -> Optional[List[Point]]:
        """
        Routed live preview of the connection being drawn.

        Returns:
            Polyline from the origin port to the preview end, or None when
            no connection is being drawn
        """
        state = self._state
        if not isinstance(state, ConnectionDrawing):
            return None
        skip = {state.origin_node_id}
        if state.snapped_port is not None:
            skip.add(state.snapped_port.node_id)
        obstacles = [n for n in self.store.nodes if n.id not in skip]
        return route_orthogonal(
            state.origin_port.point,
            state.preview_end,
            obstacles,
            self.bend_fraction,
            self.padding,
        )

    # ------------------------------------------------------------------
    # Hit testing
    # ------------------------------------------------------------------

    def port_at(self, point) -> Optional[Port]:
        """Closest port within the press radius, topmost node first on ties."""
        point = as_point(point)
        best: Optional[Port] = None
        best_dist = float("inf")
        for node in reversed(self.store.nodes):
            for port in ports_for(node):
                dist = distance(point, port.point)
                if dist <= self.port_hit_radius and dist < best_dist:
                    best, best_dist = port, dist
        return best

    def node_at(self, point) -> Optional[Node]:
        """Topmost node whose shape contains the point."""
        point = as_point(point)
        for node in reversed(self.store.nodes):
            if contains_point(node, point):
                return node
        return None

    def connection_at(self, point, tolerance: float = PATH_HIT_TOLERANCE):
        """Connection whose routed path passes within ``tolerance`` of the point."""
        point = as_point(point)
        for route in reversed(self.routes()):
            for a, b in zip(route.points, route.points[1:]):
                if _distance_to_segment(point, a, b) <= tolerance:
                    return route.connection
        return None

    # ------------------------------------------------------------------
    # Pointer events
    # ------------------------------------------------------------------

    def pointer_down(self, point) -> None:
        """Start a gesture: connection drag on a port, node drag on a body."""
        point = as_point(point)
        before = self._state

        if isinstance(before, (NodeDragging, ConnectionDrawing)):
            self._record("pointer_down", before, "ignored: gesture active")
            return

        if isinstance(before, LabelEditing):
            # Pressing outside the editor closes it without committing
            self._state = Idle()
            self._record("pointer_down", before, "closed label editor")
            return

        port = self.port_at(point)
        if port is not None:
            if port.side in self.store.used_ports(port.node_id):
                self._record("pointer_down", before, "ignored: port in use")
                return
            node = self.store.get_node(port.node_id)
            role = drag_role_for(port)
            self._state = ConnectionDrawing(
                origin_node_id=node.id,
                origin_port=port,
                drag_role=role,
                preview_end=port.point,
            )
            self._record(
                "pointer_down", before, f"{node.id}:{port.side.value} as {role.value}"
            )
            return

        node = self.node_at(point)
        if node is not None:
            self._selected_node_id = node.id
            offset = Point(point.x - node.position.x, point.y - node.position.y)
            self._state = NodeDragging(node_id=node.id, grab_offset=offset)
            self._record("pointer_down", before, f"grabbed {node.id}")
            return

        self._selected_node_id = None
        self._record("pointer_down", before, "empty canvas")

    def pointer_move(self, point) -> None:
        """Move the dragged node or update the connection preview."""
        point = as_point(point)
        state = self._state

        if isinstance(state, NodeDragging):
            self.store.move_node(
                state.node_id,
                Point(point.x - state.grab_offset.x, point.y - state.grab_offset.y),
            )
        elif isinstance(state, ConnectionDrawing):
            port = self._resolve(state, point)
            self._state = replace(
                state,
                preview_end=port.point if port is not None else point,
                snapped_port=port,
            )

    def pointer_up(self, point) -> Optional[ConnectionResult]:
        """
        Finish the current gesture.

        Returns:
            The store's ConnectionResult when a connection commit was
            attempted, otherwise None
        """
        point = as_point(point)
        state = self._state

        if isinstance(state, NodeDragging):
            self._state = Idle()
            self._record("pointer_up", state, f"dropped {state.node_id}")
            return None

        if not isinstance(state, ConnectionDrawing):
            return None

        self._state = Idle()
        port = self._resolve(state, point)
        if port is None:
            self._record("pointer_up", state, "discarded: no port in range")
            return None

        result = self._commit(state, port)
        detail = "committed" if result.accepted else f"rejected: {result.reason.value}"
        self._record("pointer_up", state, detail)
        return result

    def double_click(self, point) -> bool:
        """
        Delete the node (or else the connection) under the pointer.

        Only acts while idle. Returns True if something was deleted.
        """
        point = as_point(point)
        if not self.is_idle:
            return False

        node = self.node_at(point)
        if node is not None:
            return self.request_delete_node(node.id)

        conn = self.connection_at(point)
        if conn is not None:
            return self.request_delete_connection(conn.id)
        return False

    def context_menu(self, point) -> Optional[Point]:
        """
        Handle a right-click.

        A right-click on a connection path deletes it. Anywhere else the
        click point is returned so the (external) add-node menu can open
        there.
        """
        point = as_point(point)
        if not self.is_idle:
            return None
        conn = self.connection_at(point)
        if conn is not None:
            self.request_delete_connection(conn.id)
            return None
        return point

    # ------------------------------------------------------------------
    # Keyboard events
    # ------------------------------------------------------------------

    def key_down(self, key: str) -> None:
        """Handle ``Escape`` (cancel gesture) and ``Delete`` (delete selection)."""
        state = self._state

        if key == ESCAPE_KEY:
            if isinstance(state, (ConnectionDrawing, LabelEditing)):
                self._state = Idle()
                self._record(f"key_down:{key}", state, "cancelled")
            return

        if key == DELETE_KEY and self._selected_node_id is not None:
            node_id = self._selected_node_id
            self.request_delete_node(node_id)
            self._record(f"key_down:{key}", state, f"deleted {node_id}")

    # ------------------------------------------------------------------
    # Intents
    # ------------------------------------------------------------------

    def add_node(self, kind: Union[NodeKind, str], position) -> Optional[Node]:
        """Create a node centred on ``position``."""
        return self.store.add_node(kind, position)

    def select_node(self, node_id: Optional[str]) -> bool:
        """Select a node (None clears the selection)."""
        if node_id is not None and self.store.get_node(node_id) is None:
            return False
        self._selected_node_id = node_id
        return True

    def request_delete_node(self, node_id: str) -> bool:
        """Delete a node and its connections; returns False for unknown ids."""
        if self.store.get_node(node_id) is None:
            return False
        self.store.delete_node(node_id)
        if self._selected_node_id == node_id:
            self._selected_node_id = None
        return True

    def request_delete_connection(self, connection_id: str) -> bool:
        return self.store.delete_connection(connection_id)

    def begin_label_edit(self, node_id: str) -> bool:
        """Open a node's label for editing (idle only)."""
        before = self._state
        if not isinstance(before, Idle) or self.store.get_node(node_id) is None:
            return False
        self._state = LabelEditing(node_id=node_id)
        self._record("begin_label_edit", before, node_id)
        return True

    def submit_label(self, node_id: str, text: str) -> bool:
        """Commit a label; closes the editor if it was open on this node."""
        state = self._state
        if isinstance(state, LabelEditing) and state.node_id == node_id:
            self._state = Idle()
        updated = self.store.update_label(node_id, text)
        self._record("submit_label", state, node_id if updated else "unknown node")
        return updated

    def cancel_label_edit(self) -> None:
        state = self._state
        if isinstance(state, LabelEditing):
            self._state = Idle()
            self._record("cancel_label_edit", state)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _resolve(self, state: ConnectionDrawing, point: Point) -> Optional[Port]:
        port = find_nearest_port(
            point,
            self.store.nodes,
            exclude_node_id=state.origin_node_id,
            existing_connections=self.store.connections,
            drag_role=state.drag_role,
            snap_radius=self.snap_radius,
        )
        if self._trace is not None:
            self._trace.add_snap(point, port)
        return port

    def _commit(self, state: ConnectionDrawing, port: Port) -> ConnectionResult:
        """Add the drawn connection, oriented by the drag role."""
        if state.drag_role == PortRole.ENTRY:
            # Dragged out of an entry: the dropped-on node feeds the origin
            return self.store.connect(
                port.node_id,
                state.origin_node_id,
                port.side,
                state.origin_port.side,
            )
        return self.store.connect(
            state.origin_node_id,
            port.node_id,
            state.origin_port.side,
            port.side,
        )

    def _record(self, event: str, before: GestureState, detail: str = "") -> None:
        logger.debug(
            "%s: %s -> %s %s",
            event,
            state_name(before),
            state_name(self._state),
            detail,
        )
        if self._trace is not None:
            self._trace.add_transition(
                event, state_name(before), state_name(self._state), detail
            )
