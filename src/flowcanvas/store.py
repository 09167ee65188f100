"""
Entity store for the flowchart canvas.

The store exclusively owns the node and connection collections. All
commands are synchronous and total: invalid input (unknown ids, self
loops, duplicate edges, unknown or consumed ports) leaves the store
untouched and is reported through the return value, never by raising.

Duplicate detection treats a node pair as unordered, while stored
connections keep their source/target direction for rendering. The
unordered edge index is a networkx Graph kept in step with the
connection list.
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from itertools import count
from typing import Any, Callable, Dict, List, Optional, Set, Union

import networkx as nx

from .geometry import (
    as_point,
    clamp_position,
    default_label,
    placement_for_click,
    port_for_side,
    ports_for,
)
from .models import Connection, Node, NodeKind, Point, PortSide

logger = logging.getLogger(__name__)


class ConnectionRejection(Enum):
    """Why ``add_connection`` refused a connection."""

    SELF_LOOP = "self_loop"
    DUPLICATE_EDGE = "duplicate_edge"
    DUPLICATE_ID = "duplicate_id"
    PORT_IN_USE = "port_in_use"
    UNKNOWN_NODE = "unknown_node"
    UNKNOWN_PORT = "unknown_port"


@dataclass(frozen=True)
class ConnectionResult:
    """Outcome of ``add_connection``."""

    accepted: bool
    connection: Optional[Connection] = None
    reason: Optional[ConnectionRejection] = None

    def __bool__(self) -> bool:
        return self.accepted


class StoreEventKind(Enum):
    """Kinds of mutation announced to subscribers."""

    NODE_ADDED = "node_added"
    NODE_MOVED = "node_moved"
    NODE_DELETED = "node_deleted"
    LABEL_CHANGED = "label_changed"
    CONNECTION_ADDED = "connection_added"
    CONNECTION_DELETED = "connection_deleted"


@dataclass(frozen=True)
class StoreEvent:
    """
    Notification sent to subscribers after a successful mutation.

    Attributes:
        kind: What changed.
        payload: The affected Node or Connection.
    """

    kind: StoreEventKind
    payload: Any


Listener = Callable[[StoreEvent], None]

_INVALID_SIDE = object()


def _coerce_side(value):
    """PortSide for an enum member or its string value; None stays None."""
    if value is None or isinstance(value, PortSide):
        return value
    try:
        return PortSide(value)
    except (ValueError, TypeError):
        return _INVALID_SIDE


class DiagramStore:
    """
    Owns nodes and connections and enforces their invariants.

    Invariants kept after every command:
    - every connection references two existing, distinct nodes
    - at most one connection per unordered node pair
    - a (node, side) port is used by at most one connection

    Example:
        >>> store = DiagramStore()
        >>> a = store.add_node("step", Point(172, 140))
        >>> b = store.add_node("step", Point(472, 140))
        >>> store.connect(a.id, b.id, PortSide.RIGHT, PortSide.LEFT).accepted
        True
    """

    def __init__(self):
        self._nodes: Dict[str, Node] = {}
        self._connections: Dict[str, Connection] = {}
        self._edges = nx.Graph()
        self._node_ids = count(1)
        self._connection_ids = count(1)
        self._listeners: List[Listener] = []

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def nodes(self) -> List[Node]:
        """Nodes in insertion order (later nodes are drawn on top)."""
        return list(self._nodes.values())

    @property
    def connections(self) -> List[Connection]:
        """Connections in insertion order."""
        return list(self._connections.values())

    def get_node(self, node_id: str) -> Optional[Node]:
        return self._nodes.get(node_id)

    def get_connection(self, connection_id: str) -> Optional[Connection]:
        return self._connections.get(connection_id)

    def has_edge(self, a: str, b: str) -> bool:
        """Check for a connection between ``a`` and ``b`` in either direction."""
        return self._edges.has_edge(a, b)

    def connections_for(self, node_id: str) -> List[Connection]:
        """All connections touching a node."""
        return [c for c in self._connections.values() if c.touches(node_id)]

    def used_ports(self, node_id: str) -> Set[PortSide]:
        """Sides of a node already consumed by a connection."""
        used = set()
        for conn in self._connections.values():
            if conn.source_id == node_id and conn.source_port is not None:
                used.add(conn.source_port)
            if conn.target_id == node_id and conn.target_port is not None:
                used.add(conn.target_port)
        return used

    def free_ports(self, node_id: str) -> List[PortSide]:
        """Sides of a node still available, in port enumeration order."""
        node = self._nodes.get(node_id)
        if node is None:
            return []
        used = self.used_ports(node_id)
        return [port.side for port in ports_for(node) if port.side not in used]

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a callback for store mutations.

        Args:
            listener: Called with a StoreEvent after each successful command

        Returns:
            A function that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, kind: StoreEventKind, payload: Any) -> None:
        event = StoreEvent(kind, payload)
        for listener in list(self._listeners):
            listener(event)

    # ------------------------------------------------------------------
    # Node commands
    # ------------------------------------------------------------------

    def add_node(
        self, kind: Union[NodeKind, str], position, label: Optional[str] = None
    ) -> Optional[Node]:
        """
        Create a node centred on a click point.

        Args:
            kind: NodeKind or its string value
            position: Click point; the node's top-left corner becomes the
                click point minus half the footprint, clamped to >= 0
            label: Initial label (default: the kind's default label)

        Returns:
            The new Node, or None for an unknown kind
        """
        try:
            node_kind = NodeKind(kind)
        except ValueError:
            logger.debug("add_node rejected: unknown kind %r", kind)
            return None

        node = Node(
            id=f"node-{next(self._node_ids)}",
            kind=node_kind,
            label=label if label is not None else default_label(node_kind),
            position=placement_for_click(as_point(position)),
        )
        self._nodes[node.id] = node
        self._edges.add_node(node.id)
        logger.debug("Added %s %s at %s", node.kind.value, node.id, node.position)
        self._notify(StoreEventKind.NODE_ADDED, node)
        return node

    def move_node(self, node_id: str, position) -> bool:
        """Move a node's top-left corner, clamped to non-negative coordinates."""
        node = self._nodes.get(node_id)
        if node is None:
            return False
        node.position = clamp_position(as_point(position))
        self._notify(StoreEventKind.NODE_MOVED, node)
        return True

    def update_label(self, node_id: str, text: str) -> bool:
        """Replace a node's label."""
        node = self._nodes.get(node_id)
        if node is None:
            return False
        node.label = text
        self._notify(StoreEventKind.LABEL_CHANGED, node)
        return True

    def delete_node(self, node_id: str) -> List[Connection]:
        """
        Remove a node and every connection referencing it.

        Both removals happen before any subscriber is notified, so no
        observer ever sees a connection whose endpoint is gone.

        Returns:
            The connections removed by the cascade (empty for unknown ids)
        """
        node = self._nodes.pop(node_id, None)
        if node is None:
            return []

        removed = self.connections_for(node_id)
        for conn in removed:
            del self._connections[conn.id]
        self._edges.remove_node(node_id)

        logger.debug("Deleted %s with %d connection(s)", node_id, len(removed))
        for conn in removed:
            self._notify(StoreEventKind.CONNECTION_DELETED, conn)
        self._notify(StoreEventKind.NODE_DELETED, node)
        return removed

    # ------------------------------------------------------------------
    # Connection commands
    # ------------------------------------------------------------------

    def next_connection_id(self, source_id: str, target_id: str) -> str:
        """Generate an unused connection id for a source/target pair."""
        while True:
            candidate = f"{source_id}-{target_id}-{next(self._connection_ids)}"
            if candidate not in self._connections:
                return candidate

    def check_connection(self, connection: Connection) -> Optional[ConnectionRejection]:
        """Return why a connection would be rejected, or None if it is valid."""
        source, target = connection.source_id, connection.target_id
        if source not in self._nodes or target not in self._nodes:
            return ConnectionRejection.UNKNOWN_NODE
        if source == target:
            return ConnectionRejection.SELF_LOOP
        if connection.id in self._connections:
            return ConnectionRejection.DUPLICATE_ID
        if self.has_edge(source, target):
            return ConnectionRejection.DUPLICATE_EDGE

        ends = (
            (source, _coerce_side(connection.source_port)),
            (target, _coerce_side(connection.target_port)),
        )
        for node_id, side in ends:
            if side is None:
                continue
            if side is _INVALID_SIDE:
                return ConnectionRejection.UNKNOWN_PORT
            # Condition nodes have no bottom port
            if port_for_side(self._nodes[node_id], side) is None:
                return ConnectionRejection.UNKNOWN_PORT
        for node_id, side in ends:
            if side is not None and side in self.used_ports(node_id):
                return ConnectionRejection.PORT_IN_USE
        return None

    def add_connection(self, connection: Connection) -> ConnectionResult:
        """
        Commit a connection if it keeps every store invariant.

        Returns:
            ConnectionResult; on rejection the store is unchanged and
            ``reason`` says why
        """
        reason = self.check_connection(connection)
        if reason is not None:
            logger.debug(
                "Rejected connection %s -> %s: %s",
                connection.source_id,
                connection.target_id,
                reason.value,
            )
            return ConnectionResult(False, None, reason)

        connection = replace(
            connection,
            source_port=_coerce_side(connection.source_port),
            target_port=_coerce_side(connection.target_port),
        )
        self._connections[connection.id] = connection
        self._edges.add_edge(
            connection.source_id, connection.target_id, connection=connection.id
        )
        logger.debug(
            "Connected %s -> %s as %s",
            connection.source_id,
            connection.target_id,
            connection.id,
        )
        self._notify(StoreEventKind.CONNECTION_ADDED, connection)
        return ConnectionResult(True, connection, None)

    def connect(
        self,
        source_id: str,
        target_id: str,
        source_port: Optional[Union[PortSide, str]] = None,
        target_port: Optional[Union[PortSide, str]] = None,
    ) -> ConnectionResult:
        """
        Build a connection with a generated id and add it.

        Port sides may be given as PortSide members or their string values
        ("right"); anything else is rejected as an unknown port.
        """
        connection = Connection(
            id=self.next_connection_id(source_id, target_id),
            source_id=source_id,
            target_id=target_id,
            source_port=source_port,
            target_port=target_port,
        )
        return self.add_connection(connection)

    def delete_connection(self, connection_id: str) -> bool:
        """Remove a connection by id."""
        conn = self._connections.pop(connection_id, None)
        if conn is None:
            return False
        self._edges.remove_edge(conn.source_id, conn.target_id)
        logger.debug("Deleted connection %s", connection_id)
        self._notify(StoreEventKind.CONNECTION_DELETED, conn)
        return True

    def clear(self) -> None:
        """Delete every node (and therefore every connection)."""
        for node_id in list(self._nodes):
            self.delete_node(node_id)
