"""
Clock abstractions for deterministic behavior.

Notes
-----
Engine code must not access wall-clock time directly. Callers provide a Clock.
Header-name suffixes and generated archive names are derived from it, which
keeps tests deterministic.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Protocol

NANOSECONDS_PER_SECOND = 1_000_000_000

HEADER_SUFFIX_FORMAT = "%Y-%m-%d,%H:%M:%S"
COMPACT_TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"


class Clock(Protocol):
    """A source of time for deterministic behavior."""

    def now_ns(self) -> int:
        """
        Return the current time.

        Returns
        -------
        int
            Nanoseconds since the Unix epoch.
        """
        ...


class SystemClock:
    """
    Clock backed by the system wall clock.

    Successive calls never go backwards, even if the wall clock is adjusted
    while a backup plan is being built.
    """

    def __init__(self, source: Callable[[], int] = time.time_ns) -> None:
        self._source = source
        self._last_ns = 0

    def now_ns(self) -> int:
        """
        Return the current system time.

        Returns
        -------
        int
            Nanoseconds since the Unix epoch, never lower than a previous result.
        """
        current = self._source()
        if current < self._last_ns:
            current = self._last_ns
        self._last_ns = current
        return current


@dataclass(frozen=True, slots=True)
class FixedClock:
    """Clock that always returns a fixed time (useful for tests)."""

    fixed_ns: int

    def now_ns(self) -> int:
        """
        Return the fixed time.

        Returns
        -------
        int
            The fixed nanosecond timestamp.
        """
        return self.fixed_ns


def format_header_suffix(timestamp_ns: int) -> str:
    """
    Render a nanosecond timestamp as a fixed-width header-name suffix.

    Parameters
    ----------
    timestamp_ns:
        Nanoseconds since the Unix epoch.

    Returns
    -------
    str
        Local time as ``YYYY-MM-DD,HH:MM:SS.nnnnnnnnn`` (always 29 characters).
    """
    seconds, nanoseconds = divmod(timestamp_ns, NANOSECONDS_PER_SECOND)
    stamp = datetime.fromtimestamp(seconds).strftime(HEADER_SUFFIX_FORMAT)
    return f"{stamp}.{nanoseconds:09d}"


def format_compact_timestamp(timestamp_ns: int) -> str:
    """Render a nanosecond timestamp as local ``YYYYMMDDHHMMSS``."""
    seconds = timestamp_ns // NANOSECONDS_PER_SECOND
    return datetime.fromtimestamp(seconds).strftime(COMPACT_TIMESTAMP_FORMAT)
