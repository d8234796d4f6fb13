"""Clock abstraction for the trade window.

WallClock: real local wall-clock time (scheduled runs)
SimClock: fixed time (tests, replays of old logs)

The bot writes naive local timestamps, so both clocks return naive
datetimes that compare directly against parsed log times.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Protocol


class IClock(Protocol):
    """Clock interface used by the run pipeline."""

    def now(self) -> datetime:
        """Current time as a naive local datetime."""
        ...


class WallClock:
    """Real wall-clock time."""

    def now(self) -> datetime:
        return datetime.now()


class SimClock:
    """Fixed clock that only moves when told to."""

    def __init__(self, start: datetime | None = None) -> None:
        self._time = start or datetime(2024, 1, 1)

    def now(self) -> datetime:
        return self._time

    def set_time(self, t: datetime) -> None:
        """Move the clock. Must be monotonically increasing."""
        if t < self._time:
            raise ValueError(
                f"SimClock cannot go backwards: {t} < {self._time}"
            )
        self._time = t

    def advance_seconds(self, seconds: float) -> None:
        self.set_time(self._time + timedelta(seconds=seconds))
