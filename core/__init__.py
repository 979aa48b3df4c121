"""
Core Module Package.

Infrastructure shared by the fetchers, analytics and scoring packages.

Components:
- clock: Unified time abstraction (wall time, monotonic time, sleeping)
"""

from core.clock import (
    ClockFactory,
    ClockProtocol,
    MockClock,
    SystemClock,
    to_iso8601,
)


__all__ = [
    "ClockFactory",
    "ClockProtocol",
    "MockClock",
    "SystemClock",
    "to_iso8601",
]
