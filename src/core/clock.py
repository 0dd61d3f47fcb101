"""Timestamp source for record creation and updates."""

from __future__ import annotations

import threading
import time
from typing import Callable


class MonotonicClock:
    """Wall-clock nanosecond source that never goes backwards."""

    def __init__(self, source: Callable[[], int] = time.time_ns) -> None:
        self._source = source
        self._lock = threading.Lock()
        self._last_ns = 0

    def now_ns(self) -> int:
        """Return current time in nanoseconds, clamped to the last reading."""
        with self._lock:
            self._last_ns = max(self._last_ns, self._source())
            return self._last_ns
