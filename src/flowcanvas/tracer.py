"""
Gesture tracing for the interaction controller.

When the controller runs with ``debug=True`` it records every event it
handles, the state transition that followed, and every snapping decision
made while a connection is being drawn. This is useful for:

1. Debugging gesture bugs (why did a drag end up in the wrong state?)
2. Understanding snapping (which port won, and from where?)
3. Writing targeted tests against the exact event sequence

Usage:
    >>> controller = InteractionController(store, debug=True)
    >>> controller.pointer_down(Point(10, 10))
    >>> trace = controller.get_trace()
    >>> print(trace.summary())
    >>> trace.dump_to_file("gesture_trace.txt")
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .models import Point, Port


@dataclass
class TransitionRecord:
    """
    Record of one handled event.

    Attributes:
        event: Event name (e.g. "pointer_down", "key_down:Escape")
        from_state: State name before the event
        to_state: State name after the event
        detail: Free-form note about what the handler did
    """

    event: str
    from_state: str
    to_state: str
    detail: str = ""

    def __str__(self) -> str:
        arrow = f"{self.from_state} -> {self.to_state}"
        if self.detail:
            return f"{self.event}: {arrow} [{self.detail}]"
        return f"{self.event}: {arrow}"


@dataclass
class SnapRecord:
    """
    Record of one nearest-port lookup during connection drawing.

    Attributes:
        cursor: Pointer position used for the lookup
        port: Port the pointer snapped to, if any
    """

    cursor: Point
    port: Optional[Port] = None

    def __str__(self) -> str:
        where = f"({self.cursor.x:g},{self.cursor.y:g})"
        if self.port is None:
            return f"{where}: no port in range"
        return f"{where}: snapped to {self.port.node_id}:{self.port.side.value}"


@dataclass
class GestureTrace:
    """
    Complete trace of the events a controller handled.

    Attributes:
        transitions: Every handled event, in order
        snaps: Every nearest-port lookup, in order
    """

    transitions: List[TransitionRecord] = field(default_factory=list)
    snaps: List[SnapRecord] = field(default_factory=list)

    def add_transition(
        self, event: str, from_state: str, to_state: str, detail: str = ""
    ) -> None:
        self.transitions.append(TransitionRecord(event, from_state, to_state, detail))

    def add_snap(self, cursor: Point, port: Optional[Port]) -> None:
        self.snaps.append(SnapRecord(cursor, port))

    def get_transitions_to(self, state_name: str) -> List[TransitionRecord]:
        """Get all records that ended in ``state_name``."""
        return [t for t in self.transitions if t.to_state == state_name]

    def get_transitions_by_event(self, event_substring: str) -> List[TransitionRecord]:
        """Get all records whose event name contains ``event_substring``."""
        return [t for t in self.transitions if event_substring in t.event]

    def state_changes(self) -> List[TransitionRecord]:
        """Records where the state actually changed."""
        return [t for t in self.transitions if t.from_state != t.to_state]

    def clear(self) -> None:
        self.transitions.clear()
        self.snaps.clear()

    def summary(self) -> str:
        """
        Generate a human-readable summary of the trace.

        Returns a string with event counts, state changes and snap hit rate.
        """
        lines = [
            "=" * 60,
            "GESTURE TRACE SUMMARY",
            "=" * 60,
            "",
            f"Events handled: {len(self.transitions)}",
            f"State changes: {len(self.state_changes())}",
        ]

        hits = sum(1 for s in self.snaps if s.port is not None)
        lines.append(f"Snap lookups: {len(self.snaps)} ({hits} snapped)")
        lines.append("")

        event_counts: Dict[str, int] = {}
        for t in self.transitions:
            event_counts[t.event] = event_counts.get(t.event, 0) + 1

        lines.append("Events by name:")
        for name, count in sorted(event_counts.items(), key=lambda x: -x[1]):
            lines.append(f"  {name}: {count}")

        return "\n".join(lines)

    def dump(self) -> str:
        """Generate a complete dump: summary, then every record."""
        lines = [self.summary(), "", "TRANSITIONS:", "-" * 40]
        lines.extend(str(t) for t in self.transitions)
        lines.extend(["", "SNAPS:", "-" * 40])
        lines.extend(str(s) for s in self.snaps)
        return "\n".join(lines)

    def dump_to_file(self, filename: str) -> None:
        """Write the complete trace dump to a file."""
        with open(filename, "w", encoding="utf-8") as f:
            f.write(self.dump())
