"""
Core Module - Clock.

============================================================
RESPONSIBILITY
============================================================
Provides a testable clock for the only wall-clock value the
pipeline produces: the estimated time of each future block.

- Production runs read the system clock once
- Tests and reproducible runs pin the anchor time

============================================================
DESIGN PRINCIPLES
============================================================
- UTC only
- Whole-second resolution for the anchor
- Mockable for testing

============================================================
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Optional


# ============================================================
# CLOCK PROTOCOL
# ============================================================

class ClockProtocol(ABC):
    """Abstract interface for the pipeline clock."""

    @abstractmethod
    def now(self) -> datetime:
        """Get current UTC datetime."""
        pass

    def anchor(self) -> datetime:
        """Current UTC time truncated to whole seconds."""
        return self.now().replace(microsecond=0)

    @staticmethod
    def parse_iso(iso_string: str) -> datetime:
        """Parse ISO 8601 string to an aware UTC datetime."""
        if iso_string.endswith("Z"):
            iso_string = iso_string[:-1] + "+00:00"
        dt = datetime.fromisoformat(iso_string)
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc)


# ============================================================
# SYSTEM CLOCK (PRODUCTION)
# ============================================================

class SystemClock(ClockProtocol):
    """Production clock using actual system time."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


# ============================================================
# MOCK CLOCK (TESTING)
# ============================================================

class MockClock(ClockProtocol):
    """
    Mock clock for testing.

    Allows time manipulation for deterministic tests.
    """

    def __init__(self, initial_time: Optional[datetime] = None):
        """
        Initialize mock clock.

        Args:
            initial_time: Starting time (defaults to current UTC)
        """
        initial_time = initial_time or datetime.now(timezone.utc)
        if initial_time.tzinfo is None:
            initial_time = initial_time.replace(tzinfo=timezone.utc)
        self._time = initial_time

    def now(self) -> datetime:
        return self._time

    def advance(self, seconds: float = 0, **kwargs) -> None:
        """Advance time by the given amount (kwargs go to timedelta)."""
        self._time = self._time + timedelta(seconds=seconds, **kwargs)
