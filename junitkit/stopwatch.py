"""Stopwatch for recording when something started and how long it took.

The start time comes from the wall clock, while elapsed durations are measured with the
monotonic clock so that they are unaffected by clock adjustments.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone


@dataclass(frozen=True)
class StopwatchEnd:
    """A finished measurement: when it started and how long it lasted."""

    start_time: datetime
    duration: timedelta


@dataclass(frozen=True)
class StopwatchStart:
    """A running stopwatch."""

    start_time: datetime
    instant: float

    @classmethod
    def now(cls) -> "StopwatchStart":
        """Start a stopwatch at the current moment."""
        return cls(start_time=datetime.now(timezone.utc), instant=time.monotonic())

    def elapsed(self) -> timedelta:
        """Return the time elapsed since the stopwatch was started."""
        return timedelta(seconds=max(time.monotonic() - self.instant, 0.0))

    def end(self) -> StopwatchEnd:
        """Stop the stopwatch, returning the start time and the elapsed duration."""
        return StopwatchEnd(start_time=self.start_time, duration=self.elapsed())