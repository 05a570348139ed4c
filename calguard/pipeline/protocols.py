"""Collaborator protocols (structural interfaces).

The pipeline talks to the calendar backend and to the AI model only through
these Protocols, so any client that has the right methods can be plugged in.
"""

from __future__ import annotations

from typing import Any, Protocol


class CalendarEventSource(Protocol):
    """Upstream calendar client (e.g. a Google Calendar API wrapper)."""

    def list_events(self, time_min: str, time_max: str) -> list[dict[str, Any]]:
        """Return raw events between two RFC 3339 timestamps."""
        ...


class SchedulingAdvisor(Protocol):
    """The third-party AI model. Only ever sees sanitized data."""

    def advise(self, safe_events: list[dict[str, Any]], request: str) -> Any:
        """Answer a scheduling request given the sanitized calendar."""
        ...
