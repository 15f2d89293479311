"""
Date and time utility functions.

Session expiry is tracked as POSIX seconds (floats). Anything that needs
"now" takes a ``Clock`` so tests can move time without sleeping.
"""

import time
from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], float]


def system_clock() -> float:
    """Current POSIX time in seconds."""
    return time.time()


def get_current_timestamp() -> datetime:
    """Get current UTC timestamp."""
    return datetime.now(timezone.utc)


def iso_timestamp() -> str:
    """Current UTC time in ISO-8601, as used in response bodies."""
    return get_current_timestamp().isoformat()


class ManualClock:
    """Clock that only moves when told to; used by tests and local tooling."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds
