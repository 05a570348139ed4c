"""Data model for calendar events, protection levels and pipeline results."""

from calguard.models.stats import ProcessingStats, ProtectionResult, SafetyReport
from calguard.models.types import (
    CalendarEvent,
    EventMetadata,
    IdentityCategory,
    LocationClass,
    MeetingLabel,
    OrganizationClass,
    Person,
    ProtectionLevel,
)

__all__ = [
    "CalendarEvent",
    "EventMetadata",
    "IdentityCategory",
    "LocationClass",
    "MeetingLabel",
    "OrganizationClass",
    "Person",
    "ProcessingStats",
    "ProtectionLevel",
    "ProtectionResult",
    "SafetyReport",
]
