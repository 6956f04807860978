"""Tests for the match debugger."""

from pitchmind.engine.spatial import Vector3
from pitchmind.utils.debug import MatchDebugger


class TestMatchDebugger:
    """File logging and the recent-events buffer."""

    def test_creates_session_file(self, tmp_path) -> None:
        """The log file is created inside the output directory."""
        debugger = MatchDebugger(str(tmp_path / "logs"))
        debugger.close()
        assert debugger.log_path.exists()
        assert debugger.log_path.parent == tmp_path / "logs"
        assert debugger.log_path.read_text(encoding="utf-8").startswith("=== AI Debug Session")

    def test_error_line_format(self, tmp_path) -> None:
        """Errors carry their type and details."""
        debugger = MatchDebugger(str(tmp_path))
        debugger.log_error("DECISION_FAILED", "red striker: boom")
        debugger.close()
        content = debugger.log_path.read_text(encoding="utf-8")
        assert "ERROR: Type: DECISION_FAILED | Details: red striker: boom" in content

    def test_recent_events_are_numbered_and_limited(self, tmp_path) -> None:
        """Only the latest entries are returned, with running line numbers."""
        debugger = MatchDebugger(str(tmp_path), recent_limit=3)
        for index in range(5):
            debugger.log_match_event(float(index), "PASS", f"pass {index}")
        events = debugger.get_recent_events(limit=10)
        debugger.close()
        assert len(events) == 3
        assert events[0].startswith("00003 ")
        assert "pass 4" in events[-1]
        assert len(debugger.get_recent_events(limit=1)) == 1

    def test_state_lines(self, tmp_path) -> None:
        """Agent and ball state lines include positions and possession."""
        debugger = MatchDebugger(str(tmp_path))
        debugger.log_agent_state(1.5, "red striker", Vector3(1.0, 2.0, 3.0), None, 80.0, True)
        debugger.log_ball_state(1.5, Vector3(), Vector3(1.0, 0.0, 0.0), "red striker")
        events = debugger.get_recent_events()
        debugger.close()
        assert "AGENT_STATE" in events[0] and "Has Ball: True" in events[0]
        assert "Target" not in events[0]
        assert "Possession: red striker" in events[1]

    def test_close_is_idempotent(self, tmp_path) -> None:
        """Closing twice is harmless and later writes only reach memory."""
        debugger = MatchDebugger(str(tmp_path))
        debugger.close()
        debugger.close()
        debugger.log_error("LATE", "after close")
        assert "LATE" in debugger.get_recent_events()[-1]
