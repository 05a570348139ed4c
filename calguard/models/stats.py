"""Processing statistics, safety reports and the orchestrator's result type."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class ProcessingStats:
    """Cumulative counters for one orchestrator instance.

    ``sensitive_data_removed`` is a length-delta heuristic, not an exact
    redaction count.
    """

    events_processed: int = 0
    attendees_anonymized: int = 0
    conference_data_removed: int = 0
    sensitive_data_removed: int = 0
    last_processed: str | None = None

    def merge(self, other: ProcessingStats) -> None:
        """Add another batch's counters into this one."""
        self.events_processed += other.events_processed
        self.attendees_anonymized += other.attendees_anonymized
        self.conference_data_removed += other.conference_data_removed
        self.sensitive_data_removed += other.sensitive_data_removed
        if other.last_processed is not None:
            self.last_processed = other.last_processed

    def to_dict(self) -> dict[str, Any]:
        return {
            "eventsProcessed": self.events_processed,
            "attendeesAnonymized": self.attendees_anonymized,
            "conferenceDataRemoved": self.conference_data_removed,
            "sensitiveDataRemoved": self.sensitive_data_removed,
            "lastProcessed": self.last_processed,
        }


@dataclass
class SafetyReport:
    """Outcome of a safety scan. Each issue names a path and a reason."""

    is_safe: bool
    issues: list[str] = field(default_factory=list)

    @classmethod
    def from_issues(cls, issues: list[str]) -> SafetyReport:
        return cls(is_safe=not issues, issues=issues)

    def to_dict(self) -> dict[str, Any]:
        return {"isSafe": self.is_safe, "issues": list(self.issues)}


@dataclass
class ProtectionResult:
    """What ``process_calendar_data`` hands back to the upstream caller."""

    safe_data: list[dict[str, Any]]
    stats: dict[str, Any]
    protection_level: str
    processing_time_ms: float
    safety_validation: SafetyReport

    def to_dict(self) -> dict[str, Any]:
        """Serialize with the camelCase keys the HTTP layer returns."""
        return {
            "safeData": self.safe_data,
            "stats": self.stats,
            "protectionLevel": self.protection_level,
            "processingTimeMs": self.processing_time_ms,
            "safetyValidation": self.safety_validation.to_dict(),
        }
