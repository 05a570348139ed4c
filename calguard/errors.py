"""Error hierarchy for the calendar protection pipeline.

Only three conditions surface as exceptions. Everything else (missing
fields, null sub-objects, malformed entries) is handled as a no-op.

None of these errors are retryable: the pipeline is pure and deterministic,
so running the same batch again reproduces the same failure.
"""

from __future__ import annotations

from typing import Any, Sequence


class CalendarProtectionError(Exception):
    """Base error for the calendar protection pipeline.

    All calguard-specific errors inherit from this.
    """

    pass


class InvalidInputError(CalendarProtectionError):
    """Raw batch is not an event list or an ``{"items": [...]}`` envelope.

    Attributes:
        received_type: Name of the type that was passed in

    Retry: Never retryable - fix the caller's payload.
    """

    def __init__(self, received: Any) -> None:
        self.received_type = type(received).__name__
        super().__init__(
            f"Invalid calendar data format: expected a list of events or "
            f"an object with 'items', got {self.received_type}"
        )


class UnknownProtectionLevelError(CalendarProtectionError):
    """Requested protection level is not MINIMAL, STANDARD or MAXIMUM.

    Attributes:
        level: The level that was requested

    Retry: Never retryable - pick a supported level.
    """

    def __init__(self, level: Any) -> None:
        self.level = level
        super().__init__(f"Unknown protection level: {level}")


class DataSafetyValidationError(CalendarProtectionError):
    """Sanitized output still looks unsafe and strict mode is on.

    Attributes:
        issues: Every flagged path with its reason

    Retry: Never retryable - the same input yields the same issues.
    """

    def __init__(self, issues: Sequence[str]) -> None:
        self.issues = list(issues)
        super().__init__(
            f"Data safety validation failed: {', '.join(self.issues)}"
        )
