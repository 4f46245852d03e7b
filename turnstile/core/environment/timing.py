"""
Run Timing Utilities.

Tracks how long a run spent waiting for devices and how long the child
command ran. Used by RootOrchestrator for the final summary.
"""

import time
from typing import Dict, Optional, Protocol


class TimeTrackerProtocol(Protocol):
    """Protocol for run duration tracking."""

    def start(self) -> None:
        """Record run start time."""
        ...  # pragma: no cover

    def mark(self, label: str) -> float:
        """Record a named checkpoint and return seconds since start."""
        ...  # pragma: no cover

    def stop(self) -> float:
        """Record stop time and return elapsed seconds."""
        ...  # pragma: no cover

    @property
    def elapsed_seconds(self) -> float:
        """Total elapsed time in seconds."""
        ...  # pragma: no cover


def format_duration(total_seconds: float) -> str:
    """Human-readable duration (e.g., '1h 23m 45s')."""
    hours, remainder = divmod(int(total_seconds), 3600)
    minutes, seconds = divmod(remainder, 60)

    if hours > 0:
        return f"{hours}h {minutes}m {seconds}s"
    elif minutes > 0:
        return f"{minutes}m {seconds}s"
    else:
        return f"{total_seconds:.1f}s"


class TimeTracker:
    """
    Default implementation of TimeTrackerProtocol.

    Uses a monotonic clock so wall-clock adjustments during a long wait do
    not distort the reported durations.
    """

    def __init__(self) -> None:
        self._start_time: Optional[float] = None
        self._end_time: Optional[float] = None
        self.marks: Dict[str, float] = {}

    def start(self) -> None:
        self._start_time = time.monotonic()
        self._end_time = None
        self.marks.clear()

    def mark(self, label: str) -> float:
        elapsed = self.elapsed_seconds
        self.marks[label] = elapsed
        return elapsed

    def stop(self) -> float:
        self._end_time = time.monotonic()
        return self.elapsed_seconds

    @property
    def elapsed_seconds(self) -> float:
        if self._start_time is None:
            return 0.0
        end = self._end_time if self._end_time is not None else time.monotonic()
        return end - self._start_time
