"""Unit tests for the tracer module."""

from flowcanvas.models import Point, Port, PortRole, PortSide
from flowcanvas.tracer import GestureTrace, SnapRecord, TransitionRecord


class TestRecords:
    """Tests for TransitionRecord and SnapRecord."""

    def test_transition_str(self):
        record = TransitionRecord("pointer_up", "NodeDragging", "Idle", "dropped node-1")
        assert str(record) == "pointer_up: NodeDragging -> Idle [dropped node-1]"

    def test_transition_str_without_detail(self):
        record = TransitionRecord("cancel_label_edit", "LabelEditing", "Idle")
        assert str(record) == "cancel_label_edit: LabelEditing -> Idle"

    def test_snap_str_hit(self):
        port = Port("node-2", PortSide.LEFT, PortRole.DYNAMIC, 400, 140)
        assert str(SnapRecord(Point(398, 141), port)) == "(398,141): snapped to node-2:left"

    def test_snap_str_miss(self):
        assert str(SnapRecord(Point(1.5, 2))) == "(1.5,2): no port in range"


class TestGestureTrace:
    """Tests for GestureTrace queries and dumps."""

    def make_trace(self):
        trace = GestureTrace()
        trace.add_transition("pointer_down", "Idle", "NodeDragging", "grabbed node-1")
        trace.add_transition("pointer_down", "NodeDragging", "NodeDragging", "ignored")
        trace.add_transition("pointer_up", "NodeDragging", "Idle")
        trace.add_snap(Point(0, 0), None)
        return trace

    def test_get_transitions_to(self):
        trace = self.make_trace()
        assert len(trace.get_transitions_to("Idle")) == 1

    def test_get_transitions_by_event(self):
        trace = self.make_trace()
        assert len(trace.get_transitions_by_event("down")) == 2

    def test_state_changes(self):
        trace = self.make_trace()
        assert len(trace.state_changes()) == 2

    def test_summary(self):
        summary = self.make_trace().summary()
        assert "GESTURE TRACE SUMMARY" in summary
        assert "Events handled: 3" in summary
        assert "Snap lookups: 1 (0 snapped)" in summary
        assert "pointer_down: 2" in summary

    def test_dump_to_file(self, tmp_path):
        path = tmp_path / "trace.txt"
        self.make_trace().dump_to_file(str(path))
        content = path.read_text(encoding="utf-8")
        assert "TRANSITIONS:" in content
        assert "grabbed node-1" in content

    def test_clear(self):
        trace = self.make_trace()
        trace.clear()
        assert trace.transitions == []
        assert trace.snaps == []
