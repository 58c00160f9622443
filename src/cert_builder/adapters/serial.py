"""
Serial numbers derived from the wall clock.

Implements the SerialNumberSource port: the serial is the current time in
milliseconds since the epoch. Two calls landing in the same millisecond
would collide, so the source remembers the last value it issued and
bumps past it. `default_serial_source` is the single instance shared by
all assemblers that are not given their own.
"""

from __future__ import annotations

import threading
import time
from typing import Callable


class TimestampSerialNumberSource:
    """Millisecond-timestamp serials, strictly increasing per source instance."""

    def __init__(self, clock_ms: Callable[[], int] | None = None) -> None:
        self._clock_ms = clock_ms or (lambda: time.time_ns() // 1_000_000)
        self._last = 0
        self._lock = threading.Lock()

    def next_serial(self) -> int:
        with self._lock:
            serial = max(self._clock_ms(), self._last + 1)
            self._last = serial
            return serial


# Shared by every assembler built without an explicit source.
default_serial_source = TimestampSerialNumberSource()
