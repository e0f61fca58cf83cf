"""
Errors raised by the analytics layer outside of payload serialization.
"""
from __future__ import annotations


class AnalyticsError(Exception):
    """Base class for analytics state errors."""


class TimedEventStateError(AnalyticsError, RuntimeError):
    """A timed event was ended without a matching start."""

    def __init__(self, event_name: str) -> None:
        super().__init__(
            f"Attempted ending an event that was never started (or was previously ended): {event_name}"
        )
        self.event_name = event_name
