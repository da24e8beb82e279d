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
"""Structured logging utilities used to trace match simulations."""
import itertools
import time
from collections import deque
from pathlib import Path
from threading import Lock
from typing import Deque, List, Optional, TextIO, Tuple

_session_counter = itertools.count(1)


class MatchDebugger:
    """Thread-safe writer for structured match telemetry.

    Lines take the form ``[HH:MM:SS] CATEGORY: details``. They are appended to a
    session file when ``output_dir`` is set and always kept in a ring buffer for
    live displays.

    Parameters
    ----------
    output_dir : str | None, default=None
        Directory where session logs are created; created automatically when
        missing. ``None`` keeps telemetry in memory only.
    recent_buffer : int, default=200
        Number of recent lines retained for :meth:`get_recent_events`.
    label : str, default="match"
        Prefix for the session file name.
    """

    def __init__(self, output_dir: Optional[str] = None, recent_buffer: int = 200, label: str = "match") -> None:
        self.output_dir = Path(output_dir) if output_dir else None
        self.log_file: Optional[TextIO] = None
        self.session_start = time.strftime("%Y%m%d_%H%M%S")
        self.label = label
        self._lock = Lock()
        self._line_number = 1
        self._recent_events: Deque[Tuple[int, str]] = deque(maxlen=recent_buffer)
        if self.output_dir is not None:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            self.start_new_session()

    @property
    def log_path(self) -> Optional[Path]:
        """Return the path of the current session file, if one is open."""
        if self.log_file is None:
            return None
        return Path(self.log_file.name)

    def start_new_session(self) -> None:
        """Start a new debug logging session."""
        if self.output_dir is None:
            return
        if self.log_file:
            self.log_file.close()

        filename = f"{self.label}_debug_{self.session_start}_{next(_session_counter):03d}.txt"
        self.log_file = open(self.output_dir / filename, "w", encoding="utf-8")
        self.log_file.write(f"=== Match Debug Session: {time.strftime('%Y-%m-%d %H:%M:%S')} ===\n\n")

    def log_state_change(self, minute: int, old_state: str, new_state: str) -> None:
        """Log a lifecycle transition.

        Parameters
        ----------
        minute : int
            Match minute at the time of the transition.
        old_state : str
            State being left.
        new_state : str
            State being entered.
        """
        self._write_log("STATE", f"Minute: {minute} | {old_state} -> {new_state}")

    def log_minute(self, minute: int, score: Tuple[int, int], possession: str) -> None:
        """Log the outcome of one simulated minute.

        Parameters
        ----------
        minute : int
            Minute that was processed.
        score : Tuple[int, int]
            ``(home, away)`` goals after the minute.
        possession : str
            Label of the side that had the ball.
        """
        self._write_log("MINUTE", f"Minute: {minute} | Score: {score[0]}-{score[1]} | Possession: {possession}")

    def log_match_event(self, minute: int, event_type: str, description: str) -> None:
        """Log a match event (goal, shot, etc.).

        Parameters
        ----------
        minute : int
            Match minute of the event.
        event_type : str
            Short label identifying the event category.
        description : str
            Human-readable summary of the event.
        """
        self._write_log("MATCH_EVENT", f"Minute: {minute} | Event: {event_type} | Details: {description}")

    def log_result(self, scoreline: str, duration: int, early_terminated: bool) -> None:
        """Log the final result of a match.

        Parameters
        ----------
        scoreline : str
            Formatted final score.
        duration : int
            Minutes played.
        early_terminated : bool
            Whether the match was stopped before full time.
        """
        suffix = " | Stopped early" if early_terminated else ""
        self._write_log("RESULT", f"{scoreline} | Duration: {duration}{suffix}")

    def log_error(self, error_type: str, description: str) -> None:
        """Log an error or warning.

        Parameters
        ----------
        error_type : str
            Label describing the error classification.
        description : str
            Human-readable explanation of the issue.
        """
        self._write_log("ERROR", f"Type: {error_type} | Details: {description}")

    def _write_log(self, event_type: str, details: str) -> None:
        """Write a log entry to the buffer and, when open, the session file.

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
        """Return the latest debug entries with line numbers for live displays.

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
        with self._lock:
            if self.log_file:
                self.log_file.close()
                self.log_file = None
