"""
Keyed store of in-flight timed events (event name -> start time).
Start and finish calls may arrive from different threads.
"""
from __future__ import annotations

import threading
import time
from typing import Callable, Dict, Tuple

from core.analytics.errors import TimedEventStateError
from core.analytics.events import AnalyticsEvent


class TimedEventStore:
    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._started: Dict[str, Tuple[AnalyticsEvent, float]] = {}
        self._lock = threading.Lock()

    def start(self, event: AnalyticsEvent) -> None:
        # Restarting a running name replaces the earlier start.
        started_at = self._clock()
        with self._lock:
            self._started[event.name] = (event, started_at)

    def finish(self, event_name: str) -> Tuple[AnalyticsEvent, float]:
        """Remove the running event and return it with its elapsed seconds."""
        finished_at = self._clock()
        with self._lock:
            entry = self._started.pop(event_name, None)
        if entry is None:
            raise TimedEventStateError(event_name)
        event, started_at = entry
        return event, max(0.0, finished_at - started_at)

    def is_running(self, event_name: str) -> bool:
        with self._lock:
            return event_name in self._started

    def __len__(self) -> int:
        with self._lock:
            return len(self._started)
