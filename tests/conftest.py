"""Shared fixtures: seeded Faker and realistic calendar events."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Callable

import pytest
from faker import Faker

SUMMARIES = [
    "Team Meeting",
    "Weekly Sync",
    "Daily Standup",
    "Design Review",
    "Candidate Interview",
    "Product Demo",
    "Quick call",
]


@pytest.fixture
def fake() -> Faker:
    """Seeded Faker so generated batches are reproducible."""
    instance = Faker()
    instance.seed_instance(1234)
    return instance


@pytest.fixture
def sample_event() -> dict[str, Any]:
    """A fully populated event with every kind of sensitive field."""
    return {
        "id": "evt123",
        "iCalUID": "evt123@google.com",
        "summary": "Confidential Project ABC-1234 Review",
        "description": (
            "Discuss budget with jane.doe@bigcorp.com\n"
            "Join: https://company.zoom.us/j/87654321098"
        ),
        "location": "Conference Room B",
        "start": {"dateTime": "2024-01-15T10:00:00-08:00", "timeZone": "America/Los_Angeles"},
        "end": {"dateTime": "2024-01-15T11:00:00-08:00", "timeZone": "America/Los_Angeles"},
        "attendees": [
            {"email": "jane.doe@bigcorp.com", "displayName": "Jane Doe", "responseStatus": "accepted"},
            {"email": "bob@yourcompany.com", "responseStatus": "needsAction", "optional": True},
        ],
        "organizer": {"email": "bob@yourcompany.com", "self": True},
        "conferenceData": {
            "entryPoints": [
                {"entryPointType": "video", "uri": "https://meet.google.com/abc-defg-hij"},
            ],
            "conferenceId": "abc-defg-hij",
        },
        "hangoutLink": "https://meet.google.com/abc-defg-hij",
        "extendedProperties": {
            "private": {"crmId": "123"},
            "shared": {"room": "blue", "contact": "jane.doe@bigcorp.com"},
        },
    }


@pytest.fixture
def event_factory(fake: Faker) -> Callable[..., dict[str, Any]]:
    """Build random events whose attendees come from a fixed pool of addresses."""
    pool = [fake.unique.email() for _ in range(6)]

    def make(attendees: int = 3, **overrides: Any) -> dict[str, Any]:
        start = datetime(2024, 1, 15, 9, tzinfo=timezone.utc) + timedelta(hours=fake.random_int(0, 500))
        end = start + timedelta(minutes=fake.random_element([15, 30, 45, 60, 90]))
        event: dict[str, Any] = {
            "id": fake.uuid4(),
            "summary": fake.random_element(SUMMARIES),
            "description": fake.sentence(),
            "start": {"dateTime": start.isoformat()},
            "end": {"dateTime": end.isoformat()},
        }
        if attendees:
            event["attendees"] = [
                {"email": email, "responseStatus": "accepted"}
                for email in fake.random_sample(pool, length=attendees)
            ]
        event.update(overrides)
        return event

    return make
