"""
Block Clock

Time source for the host platform. Timestamps are unix seconds, the unit
vault delivery thresholds are expressed in.
"""

from __future__ import annotations

import time
from typing import Optional, Protocol


# 2026-01-01T00:00:00Z
DEFAULT_FROZEN_TIME = 1767225600


class Clock(Protocol):
    """
    Protocol for time source.

    Can be real time or frozen for deterministic testing.
    """
    def now(self) -> int:
        """Get current unix timestamp in seconds."""
        ...


class RealClock:
    """Real-time clock implementation."""

    def now(self) -> int:
        return int(time.time())


class FrozenClock:
    """
    Frozen clock for deterministic testing.

    Returns the same time until explicitly moved.
    """

    def __init__(self, frozen_time: Optional[int] = None) -> None:
        self._time = DEFAULT_FROZEN_TIME if frozen_time is None else frozen_time

    def now(self) -> int:
        return self._time

    def set_time(self, timestamp: int) -> None:
        """Set the frozen time."""
        self._time = timestamp

    def advance(self, seconds: int) -> int:
        """Move time forward and return the new timestamp."""
        self._time += seconds
        return self._time
