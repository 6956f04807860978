# Copyright (C) 2025 Richard Owen
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.
"""Structured logging used to trace AI decisions during a match."""
import time
from collections import deque
from pathlib import Path
from threading import Lock
from typing import TYPE_CHECKING, Deque, List, Optional, TextIO, Tuple

if TYPE_CHECKING:
    from pitchmind.engine.spatial import Vector3


def _fmt(point: "Vector3") -> str:
    """Format a vector compactly for log lines.

    Parameters
    ----------
    point : Vector3
        Vector to format.

    Returns
    -------
    str
        ``(x, y, z)`` with one decimal place.
    """
    return f"({point.x:.1f}, {point.y:.1f}, {point.z:.1f})"


class MatchDebugger:
    """Streams AI telemetry for one session to a text file.

    Parameters
    ----------
    output_dir : str, default="debug_logs"
        Directory where session logs are created; created when missing.
    recent_limit : int, default=200
        Number of recent lines kept in memory for live displays.
    """

    def __init__(self, output_dir: str = "debug_logs", recent_limit: int = 200) -> None:
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.log_file: Optional[TextIO] = None
        self.session_start = time.strftime("%Y%m%d_%H%M%S")
        self._lock = Lock()
        self._line_number = 1
        self._recent_events: Deque[Tuple[int, str]] = deque(maxlen=recent_limit)
        self.start_new_session()

    @property
    def log_path(self) -> Path:
        """Return the path of the current session file.

        Returns
        -------
        Path
            Location of ``ai_debug_<session>.txt``.
        """
        return self.output_dir / f"ai_debug_{self.session_start}.txt"

    def start_new_session(self) -> None:
        """Open a fresh log file, closing any previous one."""
        if self.log_file:
            self.log_file.close()

        self.log_file = open(self.log_path, "w", encoding="utf-8")
        self.log_file.write(f"=== AI Debug Session: {time.strftime('%Y-%m-%d %H:%M:%S')} ===\n\n")

    def log_decision(self, match_time: float, label: str, detail: str) -> None:
        """Log the outcome of one agent decision.

        Parameters
        ----------
        match_time : float
            Match clock in seconds.
        label : str
            Agent label, ``"<team> <role>"``.
        detail : str
            Action followed by ``key=value`` context.
        """
        self._write_log("DECISION", f"Time: {match_time:.2f}s | {label} | {detail}")

    def log_agent_state(
        self,
        match_time: float,
        label: str,
        position: "Vector3",
        target: Optional["Vector3"],
        stamina: float,
        has_ball: bool,
    ) -> None:
        """Log where an agent is and where it is heading.

        Parameters
        ----------
        match_time : float
            Match clock in seconds.
        label : str
            Agent label.
        position : Vector3
            Current position.
        target : Vector3, optional
            Current target position.
        stamina : float
            Stamina percentage.
        has_ball : bool
            Possession flag.
        """
        target_str = f" | Target: {_fmt(target)}" if target is not None else ""
        self._write_log(
            "AGENT_STATE",
            f"Time: {match_time:.2f}s | {label} | Pos: {_fmt(position)}"
            f"{target_str} | Stamina: {stamina:.1f} | Has Ball: {has_ball}",
        )

    def log_ball_state(
        self,
        match_time: float,
        position: "Vector3",
        velocity: "Vector3",
        possessor: Optional[str] = None,
    ) -> None:
        """Log the current state of the ball.

        Parameters
        ----------
        match_time : float
            Match clock in seconds.
        position : Vector3
            Ball position.
        velocity : Vector3
            Ball velocity.
        possessor : str, optional
            Label of the possessing player, when any.
        """
        possession_str = f" | Possession: {possessor}" if possessor else ""
        self._write_log(
            "BALL_STATE",
            f"Time: {match_time:.2f}s | Pos: {_fmt(position)} | Vel: {_fmt(velocity)}{possession_str}",
        )

    def log_match_event(self, match_time: float, event_type: str, description: str) -> None:
        """Log a match event such as a pass, shot or possession change.

        Parameters
        ----------
        match_time : float
            Match clock in seconds.
        event_type : str
            Short label identifying the event category.
        description : str
            Human-readable summary of the event.
        """
        self._write_log("MATCH_EVENT", f"Time: {match_time:.2f}s | Event: {event_type} | Details: {description}")

    def log_error(self, error_type: str, description: str) -> None:
        """Log a contained failure.

        Parameters
        ----------
        error_type : str
            Label describing the error classification.
        description : str
            Human-readable explanation of the issue.
        """
        self._write_log("ERROR", f"Type: {error_type} | Details: {description}")

    def _write_log(self, event_type: str, details: str) -> None:
        """Append a log entry to the file and the in-memory buffer.

        Parameters
        ----------
        event_type : str
            Category label for the log entry.
        details : str
            Formatted message body to persist.
        """
        timestamp = time.strftime("%H:%M:%S")
        log_entry = f"[{timestamp}] {event_type}: {details}"

        with self._lock:
            line_no = self._line_number
            self._line_number += 1
            self._recent_events.append((line_no, log_entry))

            if self.log_file:
                self.log_file.write(f"{log_entry}\n")
                self.log_file.flush()

    def get_recent_events(self, limit: int = 20) -> List[str]:
        """Return the latest entries with line numbers for live displays.

        Parameters
        ----------
        limit : int
            Maximum number of entries to return.

        Returns
        -------
        List[str]
            Up to ``limit`` most recent log lines with prefixed line numbers.
        """
        with self._lock:
            selected = list(self._recent_events)[-limit:]
        return [f"{line_no:05d} {entry}" for line_no, entry in selected]

    def close(self) -> None:
        """Close the log file."""
        if self.log_file:
            self.log_file.close()
            self.log_file = None
