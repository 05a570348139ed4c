"""Allowlist for suppressing false positive project-name detections.

Any run of capitalized words looks like a project or client name to the
phrase heuristic. Titles like "Weekly Team Sync" or "Google Calendar" carry
no private information and are what the AI needs to understand the event,
so they are kept verbatim.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable


@dataclass
class MeetingPhraseAllowlist:
    """Suppress known false positives from the capitalized-phrase heuristic.

    A phrase is allowed when it is a listed phrase, or when every word in it
    is a generic scheduling word.
    """

    DEFAULT_PHRASES: frozenset[str] = field(
        default=frozenset({
            "google calendar", "microsoft teams", "zoom meeting",
            "board meeting", "team meeting", "daily standup",
            "project review", "budget review", "team sync",
            "daily standup meeting", "standup meeting",
        }),
        repr=False,
    )

    GENERIC_WORDS: frozenset[str] = field(
        default=frozenset({
            # Cadence
            "daily", "weekly", "biweekly", "monthly", "quarterly", "annual", "yearly",
            # Meeting kinds
            "meeting", "call", "standup", "sync", "review", "demo", "interview",
            "planning", "retro", "retrospective", "kickoff", "huddle", "workshop",
            "training", "onboarding", "offsite", "webinar", "lunch", "breakfast",
            "dinner", "coffee", "catchup", "check", "status", "update", "session",
            # Audiences
            "team", "board", "staff", "all", "hands", "one", "on", "with", "and",
            "the", "company", "department", "group", "leadership", "project",
            "sprint", "product", "design", "engineering", "sales", "marketing",
            # Tools
            "google", "calendar", "microsoft", "teams", "zoom", "webex", "slack",
        }),
        repr=False,
    )

    extra_phrases: frozenset[str] = field(default_factory=frozenset)

    @property
    def all_phrases(self) -> frozenset[str]:
        """All phrases in the allowlist (default + extra)."""
        return self.DEFAULT_PHRASES | self.extra_phrases

    def is_allowed(self, phrase: str) -> bool:
        """Check if a phrase is generic (case-insensitive)."""
        normalized = " ".join(phrase.lower().split())
        if not normalized:
            return False
        if normalized in self.all_phrases:
            return True
        return all(word in self.GENERIC_WORDS for word in normalized.split())

    @classmethod
    def with_phrases(cls, phrases: Iterable[str]) -> MeetingPhraseAllowlist:
        """Build an allowlist with extra organization-specific phrases."""
        return cls(extra_phrases=frozenset(" ".join(p.lower().split()) for p in phrases))
