"""Conference credential redaction.

Strips join links, meeting IDs, passcodes and dial-in numbers out of event
text. This is the only scrubbing applied at MINIMAL protection, and the
first step of every other level.
"""

from __future__ import annotations

import copy
import logging
import re
from typing import Any, Mapping

from calguard.config import (
    ALL_MARKERS,
    CONFERENCE_HOSTS,
    CONFERENCE_PLACEHOLDER,
    CREDENTIAL_KEYWORDS,
    DEEP_LINK_FIELDS,
    MEETING_INFO_MARKER,
    VIRTUAL_MEETING_FALLBACK,
)
from calguard.models.stats import SafetyReport
from calguard.scrubbing.recognizers import (
    PhoneRecognizer,
    RedactingRecognizer,
    get_conference_recognizers,
)

logger = logging.getLogger(__name__)

_CREDENTIAL_KEYWORD_RE = re.compile(
    r"\b(?:" + "|".join(re.escape(k) for k in CREDENTIAL_KEYWORDS) + r")\b",
    re.IGNORECASE,
)

# A line that mentions a credential keyword is only dropped if it also
# carries something that looks like the credential itself
_CREDENTIAL_VALUE_RES = (
    re.compile(r"\d{6,}"),
    re.compile(r":\s*[A-Za-z0-9]{4,}"),
    re.compile(r"https?://", re.IGNORECASE),
)

_MARKER_RUN_RES = tuple(
    (marker, re.compile(re.escape(marker) + r"(?:\s*" + re.escape(marker) + r")+"))
    for marker in ALL_MARKERS
)


def collapse_markers(text: str) -> str:
    """Collapse runs of the same marker (with whitespace between) into one."""
    for marker, run_re in _MARKER_RUN_RES:
        text = run_re.sub(marker, text)
    return text


def _looks_credential_bearing(line: str) -> bool:
    return any(r.search(line) for r in _CREDENTIAL_VALUE_RES)


class PatternRedactor:
    """Removes meeting-join credentials from calendar text and event blocks.

    All methods are total: missing or empty input comes back unchanged and
    nothing raises. Events passed in are never mutated.

    Args:
        recognizers: Conference recognizers to fold, in order. Defaults to
            every supported provider followed by the generic catch-alls.
    """

    def __init__(self, recognizers: list[RedactingRecognizer] | None = None) -> None:
        self.recognizers = recognizers if recognizers is not None else get_conference_recognizers()
        self.phone_recognizer = PhoneRecognizer()

    def redact_conference_artifacts(self, text: str | None) -> str | None:
        """Strip links, IDs, passcodes and phone numbers from free text.

        Args:
            text: Summary, description or location text

        Returns:
            Redacted, trimmed text (input unchanged if empty or not a string)
        """
        if not text or not isinstance(text, str):
            return text

        redacted = text
        for recognizer in self.recognizers:
            redacted = recognizer.redact(redacted)
        redacted = self.phone_recognizer.redact(redacted)

        kept = [
            line
            for line in redacted.split("\n")
            if not (_CREDENTIAL_KEYWORD_RE.search(line) and _looks_credential_bearing(line))
        ]
        redacted = "\n".join(kept)

        return collapse_markers(redacted).strip()

    def contains_conference_data(self, text: Any) -> bool:
        """True if text names a meeting provider host or a credential keyword."""
        if not text or not isinstance(text, str):
            return False
        lowered = text.lower()
        if any(host in lowered for host in CONFERENCE_HOSTS):
            return True
        return bool(_CREDENTIAL_KEYWORD_RE.search(text))

    def sanitize_location(self, location: str | None) -> str | None:
        """Redact a location, falling back to "Virtual Meeting".

        The fallback applies when nothing meaningful is left: the result is
        empty, still holds a meeting marker, or still names a provider.
        """
        if not location or not isinstance(location, str):
            return location
        redacted = self.redact_conference_artifacts(location)
        if (
            not redacted
            or MEETING_INFO_MARKER in redacted
            or self.contains_conference_data(redacted)
        ):
            return VIRTUAL_MEETING_FALLBACK
        return redacted

    def sanitize_conference_block(self, event: Mapping[str, Any]) -> dict[str, Any]:
        """Replace conferenceData with a placeholder and drop deep links.

        Returns:
            A shallow copy of the event; the input is untouched
        """
        if not isinstance(event, Mapping):
            return event  # type: ignore[return-value]
        cleaned = dict(event)
        if cleaned.get("conferenceData") is not None:
            cleaned["conferenceData"] = dict(CONFERENCE_PLACEHOLDER)
        for key in DEEP_LINK_FIELDS:
            cleaned.pop(key, None)
        return cleaned

    def _sanitize_extended_properties(self, props: Any) -> Any:
        if not isinstance(props, Mapping):
            return props
        cleaned: dict[str, Any] = {}
        for scope, values in props.items():
            if isinstance(values, Mapping):
                cleaned[scope] = {
                    key: value
                    for key, value in values.items()
                    if not self.contains_conference_data(value)
                }
            else:
                cleaned[scope] = values
        return cleaned

    def redact_event(self, event: Mapping[str, Any]) -> dict[str, Any]:
        """Conference-only scrub of one event (MINIMAL protection).

        Attendees, organizer and everything else pass through untouched.
        """
        if not isinstance(event, Mapping):
            return event  # type: ignore[return-value]
        cleaned = self.sanitize_conference_block(copy.deepcopy(dict(event)))

        for key in ("summary", "description"):
            if key in cleaned:
                cleaned[key] = self.redact_conference_artifacts(cleaned[key])
        if "location" in cleaned:
            cleaned["location"] = self.sanitize_location(cleaned["location"])
        if "extendedProperties" in cleaned:
            cleaned["extendedProperties"] = self._sanitize_extended_properties(
                cleaned["extendedProperties"]
            )

        return cleaned

    def validate_redaction(self, event: Mapping[str, Any]) -> SafetyReport:
        """Report any conference data that survived redaction."""
        issues: list[str] = []
        if not isinstance(event, Mapping):
            return SafetyReport.from_issues(issues)

        for key in ("summary", "description", "location"):
            value = event.get(key)
            if self.contains_conference_data(value):
                issues.append(f"Conference data detected in {key}: {value[:50]}...")

        conference = event.get("conferenceData")
        if isinstance(conference, Mapping) and conference.get("entryPoints"):
            issues.append("Conference data object still contains entry points")
        if event.get("hangoutLink"):
            issues.append("Hangout link still present")

        if issues:
            logger.debug("conference_data_survived issues=%d", len(issues))
        return SafetyReport.from_issues(issues)
