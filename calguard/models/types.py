"""Core type definitions: protection levels, identity categories, event shapes."""

from __future__ import annotations

from enum import Enum
from typing import Any, TypedDict

from calguard.errors import UnknownProtectionLevelError


class ProtectionLevel(Enum):
    """How much detail survives sanitization.

    MINIMAL only strips conference credentials, STANDARD produces the
    anonymized minimal projection, MAXIMUM additionally collapses summaries
    to fixed labels and drops everything but timing metadata.
    """

    MINIMAL = "MINIMAL"
    STANDARD = "STANDARD"
    MAXIMUM = "MAXIMUM"

    @classmethod
    def parse(cls, value: ProtectionLevel | str | None) -> ProtectionLevel:
        """Resolve an enum member or its name (case-insensitive).

        Raises:
            UnknownProtectionLevelError: If value names no level.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                pass
        raise UnknownProtectionLevelError(value)


class IdentityCategory(Enum):
    """Scope of a pseudonym table. Each category has its own counter."""

    PERSON = "person"
    ORGANIZATION = "organization"
    LOCATION = "location"
    PROJECT = "project"


class OrganizationClass(Enum):
    """Relationship of an email domain to us. Used as pseudonym prefix."""

    CLIENT_FIRM = "CLIENT_FIRM"
    OUR_COMPANY = "OUR_COMPANY"
    VENDOR = "VENDOR"
    EXTERNAL_ORG = "EXTERNAL_ORG"


class LocationClass(Enum):
    """Coarse kind of place. Preserved so the AI keeps some semantics."""

    VIRTUAL_MEETING = "VIRTUAL_MEETING"
    CONFERENCE_ROOM = "CONFERENCE_ROOM"
    OFFICE_LOCATION = "OFFICE_LOCATION"
    DINING_LOCATION = "DINING_LOCATION"
    GENERAL_LOCATION = "GENERAL_LOCATION"


class MeetingLabel(Enum):
    """Fixed summary vocabulary for MAXIMUM protection."""

    MEETING_TYPE_A = "MEETING_TYPE_A"  # meeting
    MEETING_TYPE_B = "MEETING_TYPE_B"  # call
    MEETING_TYPE_C = "MEETING_TYPE_C"  # standup
    MEETING_TYPE_D = "MEETING_TYPE_D"  # review
    MEETING_TYPE_E = "MEETING_TYPE_E"  # sync
    MEETING_TYPE_F = "MEETING_TYPE_F"  # demo
    MEETING_TYPE_G = "MEETING_TYPE_G"  # interview
    MEETING_TYPE_OTHER = "MEETING_TYPE_OTHER"


# -- Google Calendar API shapes (wire keys are camelCase) --


class EventTime(TypedDict, total=False):
    dateTime: str
    date: str
    timeZone: str


class Person(TypedDict, total=False):
    email: str
    displayName: str
    responseStatus: str
    optional: bool
    self: bool


class ExtendedProperties(TypedDict, total=False):
    private: dict[str, Any]
    shared: dict[str, Any]


class CalendarEvent(TypedDict, total=False):
    """One event as returned by the Calendar API ``events.list`` call."""

    id: str
    iCalUID: str
    summary: str
    description: str
    location: str
    start: EventTime
    end: EventTime
    attendees: list[Person]
    creator: Person
    organizer: Person
    conferenceData: dict[str, Any]
    hangoutLink: str
    htmlLink: str
    extendedProperties: ExtendedProperties
    status: str
    transparency: str
    recurrence: list[str]
    recurringEventId: str


class EventMetadata(TypedDict, total=False):
    """Computed scheduling facts attached to every sanitized event."""

    duration: int | None  # minutes
    attendeeCount: int
    isAllDay: bool
    hasAttendees: bool
    isRecurring: bool
    dayOfWeek: str | None
