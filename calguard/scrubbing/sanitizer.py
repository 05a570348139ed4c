"""Full event sanitization: conference redaction plus identity pseudonymization.

This is what STANDARD and MAXIMUM protection run on every event. The steps
are applied in a fixed order to a deep copy of the event:

1. conference credentials and deep links are removed (PatternRedactor)
2. attendees, creator and organizer are pseudonymized
3. summary and description are rewritten: secrets, embedded addresses,
   @mentions, ticket/project codes, sensitive keywords and proper-noun
   phrases are replaced
4. location is redacted, then pseudonymized by kind
5. private extended properties are dropped, shared ones filtered
6. event IDs are replaced by fresh random tokens

Start, end and recurrence are never touched.
"""

from __future__ import annotations

import copy
import logging
import re
import string
import threading
from datetime import datetime, timezone
from typing import Any, Mapping

from faker import Faker

from calguard.config import (
    CODE_MARKER,
    MINIMAL_SAFE_FIELDS,
    SENSITIVE_KEYWORDS,
    SENSITIVE_WORD_MARKER,
)
from calguard.models.stats import SafetyReport
from calguard.models.types import EventMetadata
from calguard.scrubbing.allowlist import MeetingPhraseAllowlist
from calguard.scrubbing.anonymizer import IdentityAnonymizer
from calguard.scrubbing.recognizers import (
    URL_SCHEME,
    PhoneRecognizer,
    RedactingRecognizer,
    get_pii_number_recognizers,
)
from calguard.scrubbing.redactor import PatternRedactor, collapse_markers
from calguard.scrubbing.safety import SafetyValidator
from calguard.scrubbing.secrets import contains_secret, redact_secrets

logger = logging.getLogger(__name__)

# Single-label domains ("bob@localhost") count as addresses too
_EMAIL_RE = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9][A-Za-z0-9-]*(?:\.[A-Za-z0-9-]+)*")
_MENTION_RE = re.compile(r"(?<![\w.])@[A-Za-z][\w.-]{1,30}")

# Ticket, PR and project references
_CODE_RES = (
    re.compile(r"\b[A-Z]{2,4}-\d{3,6}\b"),
    re.compile(r"\b\d{4}-\d{4}\b"),
    re.compile(r"\bticket\s*#?\s*\d+", re.IGNORECASE),
    re.compile(r"\bpr\s*#?\s*\d+", re.IGNORECASE),
    re.compile(r"\bissue\s*#?\s*\d+", re.IGNORECASE),
    re.compile(r"\bbug\s*#?\s*\d+", re.IGNORECASE),
)

_KEYWORD_RE = re.compile(
    r"\b(?:" + "|".join(re.escape(k) for k in SENSITIVE_KEYWORDS) + r")\b",
    re.IGNORECASE,
)

_COMPANY_RE = re.compile(r"\b(?:[A-Z]{2,}|[A-Z][a-z]+)[ \t]+(?:Corp|Inc|LLC|Ltd|GmbH)\b\.?")
_PHRASE_RE = re.compile(r"\b[A-Z][a-z]+(?:[ \t]+[A-Z][a-z]+)+\b")

_URL_RE = re.compile(URL_SCHEME, re.IGNORECASE)
_LONG_DIGITS_RE = re.compile(r"\d{9,}")

_WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


def _parse_event_time(value: Any) -> datetime | None:
    """Parse a ``{dateTime}`` or all-day ``{date}`` block. Naive means UTC."""
    if not isinstance(value, Mapping):
        return None
    raw = value.get("dateTime") or value.get("date")
    if not raw or not isinstance(raw, str):
        return None
    try:
        parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except (ValueError, TypeError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def calculate_duration(start: Any, end: Any) -> int | None:
    """Minutes between two event times, rounded. None if either is unusable."""
    start_dt = _parse_event_time(start)
    end_dt = _parse_event_time(end)
    if start_dt is None or end_dt is None:
        return None
    return round((end_dt - start_dt).total_seconds() / 60)


class EventSanitizer:
    """Turns raw calendar events into pseudonymized, credential-free events.

    Args:
        anonymizer: Pseudonym tables; shared with whoever maps AI results back
        redactor: Conference credential redaction
        allowlist: Capitalized phrases that are not treated as project names
        seed: Seed for the random event-ID generator (tests only)
    """

    def __init__(
        self,
        anonymizer: IdentityAnonymizer | None = None,
        redactor: PatternRedactor | None = None,
        allowlist: MeetingPhraseAllowlist | None = None,
        seed: int | None = None,
    ) -> None:
        self.anonymizer = anonymizer or IdentityAnonymizer()
        self.redactor = redactor or PatternRedactor()
        self.allowlist = allowlist or MeetingPhraseAllowlist()
        self.validator = SafetyValidator()
        self._phone_recognizer = PhoneRecognizer()
        self._pii_recognizers: list[RedactingRecognizer] = get_pii_number_recognizers()
        self._faker = Faker()
        if seed is not None:
            self._faker.seed_instance(seed)
        self._faker_lock = threading.Lock()

    # -- Event IDs --

    def generate_anonymous_id(self) -> str:
        """Fresh opaque token. Not derived from the original, not reversible."""
        with self._faker_lock:
            suffix = self._faker.lexify("?" * 12, letters=string.ascii_lowercase)
        return f"anon_{suffix}"

    # -- People --

    def anonymize_person_entry(self, person: Any, keep: tuple[str, ...] = ("responseStatus", "optional")) -> Any:
        """Pseudonymize one attendee/creator/organizer record.

        Only ``keep`` keys plus email and displayName survive, and each only
        if the source record had it.
        """
        if not isinstance(person, Mapping):
            return person
        email = person.get("email")
        display_name = person.get("displayName")
        pseudonym = self.anonymizer.anonymize_person(email, display_name)

        result: dict[str, Any] = {key: person[key] for key in keep if key in person}
        if "email" in person:
            result["email"] = self.anonymizer.anonymize_email(email) if email else email
        if "displayName" in person:
            result["displayName"] = pseudonym if pseudonym else display_name
        return result

    # -- Free text --

    def sanitize_text(self, text: Any) -> Any:
        """Rewrite summary/description text so no identifying fragment survives."""
        if not text or not isinstance(text, str):
            return text

        text = redact_secrets(text)
        text = _EMAIL_RE.sub(lambda m: self.anonymizer.anonymize_email(m.group(0)) or "", text)
        text = _MENTION_RE.sub(lambda m: self.anonymizer.anonymize_person(None, m.group(0)) or "", text)
        for recognizer in self._pii_recognizers:
            text = recognizer.redact(text)
        for code_re in _CODE_RES:
            text = code_re.sub(CODE_MARKER, text)
        text = _KEYWORD_RE.sub(SENSITIVE_WORD_MARKER, text)
        text = _COMPANY_RE.sub(lambda m: self.anonymizer.anonymize_project(m.group(0)) or "", text)
        text = _PHRASE_RE.sub(self._replace_phrase, text)

        return collapse_markers(text).strip()

    def _replace_phrase(self, match: re.Match[str]) -> str:
        phrase = match.group(0)
        if self.allowlist.is_allowed(phrase):
            return phrase
        return self.anonymizer.anonymize_project(phrase) or phrase

    def contains_sensitive_data(self, value: Any) -> bool:
        """Heuristic check used to filter shared extended properties."""
        if value is None:
            return False
        text = value if isinstance(value, str) else str(value)
        if not text:
            return False
        return bool(
            _EMAIL_RE.search(text)
            or self._phone_recognizer.matches(text)
            or _URL_RE.search(text)
            or _LONG_DIGITS_RE.search(text)
            or _KEYWORD_RE.search(text)
            or any(code_re.search(text) for code_re in _CODE_RES)
            or contains_secret(text)
            or self.redactor.contains_conference_data(text)
        )

    def _sanitize_extended_properties(self, props: Any) -> Any:
        if not isinstance(props, Mapping):
            return props
        cleaned: dict[str, Any] = {}
        shared = props.get("shared")
        if isinstance(shared, Mapping):
            cleaned["shared"] = {
                key: value for key, value in shared.items() if not self.contains_sensitive_data(value)
            }
        return cleaned

    # -- Events --

    def sanitize_event(self, event: Any) -> Any:
        """Sanitize one event. The input is never mutated.

        Non-mapping input is returned unchanged.
        """
        if not isinstance(event, Mapping):
            return event

        sanitized = self.redactor.sanitize_conference_block(copy.deepcopy(dict(event)))
        for key in ("summary", "description"):
            if key in sanitized:
                sanitized[key] = self.redactor.redact_conference_artifacts(sanitized[key])

        attendees = sanitized.get("attendees")
        if isinstance(attendees, list):
            sanitized["attendees"] = [self.anonymize_person_entry(a) for a in attendees]
        for key in ("creator", "organizer"):
            if key in sanitized:
                sanitized[key] = self.anonymize_person_entry(sanitized[key], keep=("self",))

        for key in ("summary", "description"):
            if key in sanitized:
                sanitized[key] = self.sanitize_text(sanitized[key])

        if sanitized.get("location"):
            location = self.redactor.sanitize_location(sanitized["location"])
            sanitized["location"] = self.anonymizer.anonymize_location(location)

        if "extendedProperties" in sanitized:
            sanitized["extendedProperties"] = self._sanitize_extended_properties(
                sanitized["extendedProperties"]
            )

        sanitized["id"] = self.generate_anonymous_id()
        if "iCalUID" in sanitized:
            sanitized["iCalUID"] = self.generate_anonymous_id()

        return sanitized

    def sanitize_events(self, events: list[Any]) -> list[Any]:
        return [self.sanitize_event(event) for event in events]

    @staticmethod
    def calculate_duration(start: Any, end: Any) -> int | None:
        return calculate_duration(start, end)

    def build_metadata(self, event: Any) -> EventMetadata:
        """Scheduling facts the AI may see even at MAXIMUM protection."""
        if not isinstance(event, Mapping):
            event = {}
        start = event.get("start")
        attendees = event.get("attendees")
        attendee_count = len(attendees) if isinstance(attendees, list) else 0
        start_dt = _parse_event_time(start)

        return {
            "duration": calculate_duration(start, event.get("end")),
            "attendeeCount": attendee_count,
            "isAllDay": isinstance(start, Mapping) and bool(start.get("date")) and not start.get("dateTime"),
            "hasAttendees": attendee_count > 0,
            "isRecurring": bool(event.get("recurrence")) or bool(event.get("recurringEventId")),
            "dayOfWeek": _WEEKDAYS[start_dt.weekday()] if start_dt else None,
        }

    def create_minimal_safe_data(self, events: list[Any]) -> list[dict[str, Any]]:
        """Sanitize and project events onto the fields the AI is allowed to see.

        Anything that is not an event mapping becomes an empty projection so
        positions line up with the input batch.
        """
        projected: list[dict[str, Any]] = []
        for event in events:
            sanitized = self.sanitize_event(event if isinstance(event, Mapping) else {})
            safe = {key: sanitized[key] for key in MINIMAL_SAFE_FIELDS if key in sanitized}
            safe["metadata"] = self.build_metadata(sanitized)
            projected.append(safe)
        return projected

    def validate_safety(self, data: Any) -> SafetyReport:
        report = self.validator.validate(data)
        if not report.is_safe:
            logger.debug("residual_pii_detected issues=%d", len(report.issues))
        return report

    def map_results_back(self, payload: Any) -> Any:
        return self.anonymizer.map_back(payload)

    def reset(self) -> None:
        self.anonymizer.reset()
