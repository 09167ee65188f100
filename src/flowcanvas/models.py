"""
Data models for the flowchart canvas.

This module contains the dataclasses and enums shared by every part of the
engine: node kinds, port sides and roles, canvas points, nodes, derived
ports and connections. Ports are never stored; they are computed from a
node's kind and position by the geometry module.

Classes:
    NodeKind: Kind of a node (step, condition, notification).
    PortSide: Which side of a node a port sits on.
    PortRole: Whether a port starts edges, ends them, or both.
    Point: Canvas-relative coordinate.
    Bounds: Axis-aligned bounding box.
    Node: A placed flowchart node.
    Port: A derived attachment point on a node.
    Connection: A committed edge between two nodes.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class NodeKind(Enum):
    """Kind of a flowchart node."""

    STEP = "step"
    CONDITION = "condition"
    NOTIFICATION = "notification"


class PortSide(Enum):
    """Which side of a node a port is on."""

    LEFT = "left"
    TOP = "top"
    RIGHT = "right"
    BOTTOM = "bottom"


class PortRole(Enum):
    """What a port may be used for when drawing a connection."""

    ENTRY = "entry"
    EXIT = "exit"
    DYNAMIC = "dynamic"  # Usable as entry or exit


@dataclass(frozen=True)
class Point:
    """A canvas-relative coordinate."""

    x: float
    y: float

    def offset(self, dx: float, dy: float) -> "Point":
        """Return a new point shifted by (dx, dy)."""
        return Point(self.x + dx, self.y + dy)

    def as_tuple(self):
        """Return the point as an (x, y) tuple."""
        return (self.x, self.y)


@dataclass(frozen=True)
class Bounds:
    """Axis-aligned bounding box."""

    x: float
    y: float
    width: float
    height: float

    @property
    def x2(self) -> float:
        """Right edge."""
        return self.x + self.width

    @property
    def y2(self) -> float:
        """Bottom edge."""
        return self.y + self.height

    @property
    def center_x(self) -> float:
        """Horizontal centre."""
        return self.x + self.width / 2

    @property
    def center_y(self) -> float:
        """Vertical centre."""
        return self.y + self.height / 2

    def expanded(self, margin: float) -> "Bounds":
        """Return these bounds grown by ``margin`` on every side."""
        return Bounds(
            self.x - margin,
            self.y - margin,
            self.width + 2 * margin,
            self.height + 2 * margin,
        )

    def contains(self, point: Point) -> bool:
        """Check whether a point lies inside or on the edge."""
        return self.x <= point.x <= self.x2 and self.y <= point.y <= self.y2


@dataclass
class Node:
    """
    A flowchart node placed on the canvas.

    Attributes:
        id: Unique node identifier (e.g. "node-3").
        kind: Node kind, selects the footprint shape and port layout.
        label: Display text.
        position: Top-left corner of the node's bounding box.
    """

    id: str
    kind: NodeKind
    label: str
    position: Point


@dataclass(frozen=True)
class Port:
    """
    A derived attachment point on a node's boundary.

    Attributes:
        node_id: Owning node.
        side: Side of the node the port is on.
        role: Entry, exit or dynamic.
        x: Absolute x coordinate.
        y: Absolute y coordinate.
    """

    node_id: str
    side: PortSide
    role: PortRole
    x: float
    y: float

    @property
    def point(self) -> Point:
        return Point(self.x, self.y)


@dataclass(frozen=True)
class Connection:
    """
    A committed edge between two nodes.

    Source and target keep their direction for rendering (arrow heads),
    while duplicate detection in the store treats the pair as unordered.

    Attributes:
        id: Unique connection identifier.
        source_id: Node the edge leaves from.
        target_id: Node the edge arrives at.
        source_port: Side used on the source node, if known.
        target_port: Side used on the target node, if known.
    """

    id: str
    source_id: str
    target_id: str
    source_port: Optional[PortSide] = None
    target_port: Optional[PortSide] = None

    def touches(self, node_id: str) -> bool:
        """Check whether either endpoint is ``node_id``."""
        return self.source_id == node_id or self.target_id == node_id

    def other_end(self, node_id: str) -> Optional[str]:
        """Return the opposite endpoint of ``node_id``, or None."""
        if self.source_id == node_id:
            return self.target_id
        if self.target_id == node_id:
            return self.source_id
        return None
