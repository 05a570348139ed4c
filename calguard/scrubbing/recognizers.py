"""Presidio pattern recognizers for conference credentials and outbound PII.

Each recognizer owns an ordered list of patterns that share one entity type
and one replacement marker. Redaction folds the patterns left-to-right, so
provider-specific grammars run before the generic catch-alls that would
otherwise swallow half of a match.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from presidio_analyzer import Pattern, PatternRecognizer, RecognizerResult

from calguard.config import MEETING_INFO_MARKER, PHONE_MARKER, PII_MARKER

if TYPE_CHECKING:
    from presidio_analyzer.nlp_engine import NlpArtifacts

# Presidio defaults to DOTALL | MULTILINE as well; patterns here spell out
# their own line handling
REGEX_FLAGS = re.IGNORECASE

# Any scheme, typos like "htp://" included
URL_SCHEME = r"\b[a-z][a-z0-9+.-]*://"

PHONE_NANP = r"(?:\+?1[-.\s]?)?\(?[2-9]\d{2}\)?[-.\s]?\d{3}[-.\s]?\d{4}"
PHONE_INTERNATIONAL = r"\+\d{1,3}[-.\s]?\d{2,4}[-.\s]?\d{2,4}[-.\s]?\d{2,4}"


def replace_results(text: str, results: list[RecognizerResult], marker: str) -> str:
    """Replace non-overlapping result spans with ``marker``, end to start."""
    for result in sorted(results, key=lambda r: r.start, reverse=True):
        text = text[: result.start] + marker + text[result.end :]
    return text


class RedactingRecognizer(PatternRecognizer):
    """A presidio ``PatternRecognizer`` whose matches collapse to one marker.

    Args:
        supported_entity: Entity type reported on every result
        marker: Replacement written by ``redact``
        patterns: Ordered patterns; order matters for ``redact``
        name: Recognizer name, the class name by default
    """

    def __init__(
        self,
        supported_entity: str,
        marker: str,
        patterns: list[Pattern],
        name: str | None = None,
    ) -> None:
        super().__init__(
            supported_entity=supported_entity,
            patterns=patterns,
            name=name or type(self).__name__,
            supported_language="en",
        )
        self.marker = marker
        self._compiled = [(p, re.compile(p.regex, REGEX_FLAGS)) for p in self.patterns]

    @property
    def entity_type(self) -> str:
        return self.supported_entities[0]

    def analyze(
        self,
        text: str,
        entities: list[str] | None = None,
        nlp_artifacts: NlpArtifacts | None = None,
        regex_flags: int | None = None,
    ) -> list[RecognizerResult]:
        """Find matches of every pattern in the original text."""
        if not text:
            return []
        return super().analyze(
            text,
            entities or self.supported_entities,
            nlp_artifacts=nlp_artifacts,
            regex_flags=regex_flags or REGEX_FLAGS,
        )

    def matches(self, text: str) -> bool:
        return bool(self.analyze(text))

    def _pattern_results(
        self, text: str, pattern: Pattern, compiled: re.Pattern[str]
    ) -> list[RecognizerResult]:
        return [
            RecognizerResult(
                entity_type=self.entity_type,
                start=match.start(),
                end=match.end(),
                score=pattern.score,
            )
            for match in compiled.finditer(text)
            if match.end() > match.start()
        ]

    def redact(self, text: str) -> str:
        """Apply each pattern in order, replacing its matches with the marker.

        Later patterns see the output of earlier ones, so a provider link
        already turned into a marker is never half-matched again.
        """
        if not text:
            return text
        for pattern, compiled in self._compiled:
            text = replace_results(text, self._pattern_results(text, pattern, compiled), self.marker)
        return text


# =============================================================================
# Conference providers
# =============================================================================


class ZoomRecognizer(RedactingRecognizer):
    """Join links, numeric meeting IDs, passcodes and dial-in blocks."""

    PATTERNS = [
        Pattern("ZOOM_JOIN_LINK", r"(?:https?://)?(?:[\w-]+\.)*zoom\.us/j/\d+(?:\?\S*)?", 0.95),
        Pattern("ZOOM_ANY_LINK", r"(?:https?://)?(?:[\w-]+\.)*zoom\.us/\S*", 0.9),
        Pattern("MEETING_ID", r"meeting[ \t]*id[ \t]*[:#]?[ \t]*\d[\d \t-]{7,16}\d", 0.85),
        Pattern(
            "PASSCODE",
            r"\b(?:passcode|password|pwd)\b[ \t]*(?:[:=#][ \t]*\S+|[ \t]\S*\d\S*)",
            0.8,
        ),
        Pattern("ONE_TAP_MOBILE", r"one\s*tap\s*mobile[\s\S]{0,200}?\d+#", 0.85),
        Pattern("TAP_CODE", r"\*\w+#", 0.6),
        Pattern(
            "DIAL_BY_LOCATION",
            r"dial\s*by\s*your\s*location[\s\S]{0,600}?find\s*your\s*local\s*number",
            0.85,
        ),
    ]

    def __init__(self) -> None:
        super().__init__(
            supported_entity="CONFERENCE_ARTIFACT",
            marker=MEETING_INFO_MARKER,
            patterns=self.PATTERNS,
        )


class TeamsRecognizer(RedactingRecognizer):
    """Meetup-join links and phone conference IDs."""

    PATTERNS = [
        Pattern("TEAMS_MEETUP_JOIN", r"(?:https?://)?teams\.microsoft\.com/l/meetup-join/\S+", 0.95),
        Pattern("TEAMS_LIVE_MEET", r"(?:https?://)?teams\.live\.com/meet/\S+", 0.95),
        Pattern(
            "CONFERENCE_ID",
            r"(?:phone[ \t]*)?conference[ \t]*id[ \t]*[:#]?[ \t]*\d[\d \t]*#?",
            0.85,
        ),
    ]

    def __init__(self) -> None:
        super().__init__(
            supported_entity="CONFERENCE_ARTIFACT",
            marker=MEETING_INFO_MARKER,
            patterns=self.PATTERNS,
        )


class GoogleMeetRecognizer(RedactingRecognizer):
    """Short-slug meeting links."""

    PATTERNS = [
        Pattern("MEET_SLUG_LINK", r"(?:https?://)?meet\.google\.com/[a-z-]+", 0.95),
        Pattern("MEET_SHORT_LINK", r"(?:https?://)?g\.co/meet/\S+", 0.95),
    ]

    def __init__(self) -> None:
        super().__init__(
            supported_entity="CONFERENCE_ARTIFACT",
            marker=MEETING_INFO_MARKER,
            patterns=self.PATTERNS,
        )


class WebexRecognizer(RedactingRecognizer):
    """Personal-room links plus meeting-number and access-code grammars."""

    PATTERNS = [
        Pattern("WEBEX_ROOM_LINK", r"(?:https?://)?[\w-]+\.webex\.com/(?:meet|join)/\S+", 0.95),
        Pattern("WEBEX_ANY_LINK", r"(?:https?://)?(?:[\w-]+\.)*webex\.com/\S*", 0.9),
        Pattern("MEETING_NUMBER", r"meeting[ \t]*number[ \t]*[:#]?[ \t]*\d+(?:[ \t]\d+)*", 0.85),
        Pattern("ACCESS_CODE", r"access[ \t]*code[ \t]*[:#]?[ \t]*\d+(?:[ \t]\d+)*", 0.85),
    ]

    def __init__(self) -> None:
        super().__init__(
            supported_entity="CONFERENCE_ARTIFACT",
            marker=MEETING_INFO_MARKER,
            patterns=self.PATTERNS,
        )


class DialInRecognizer(RedactingRecognizer):
    """Provider-neutral dial-in instructions and labelled join URLs."""

    PATTERNS = [
        Pattern(
            "JOIN_BY_PHONE",
            r"join\s*by\s*phone[\s\S]{0,120}?\d{3}[-.\s]?\d{3}[-.\s]?\d{4}",
            0.85,
        ),
        Pattern("DIAL_IN", r"dial[\s-]*in[\s\S]{0,80}?\d{3}[-.\s]?\d{3}[-.\s]?\d{4}", 0.85),
        Pattern(
            "PHONE_WITH_ACCESS_CODE",
            r"\+?\d{1,3}[-.\s]?\d{3}[-.\s]?\d{3}[-.\s]?\d{4}[\s\S]{0,80}?access\s*code",
            0.8,
        ),
        Pattern(
            "LABELLED_JOIN_URL",
            r"(?:meeting|join)[ \t]*url[ \t]*:?[ \t]*" + URL_SCHEME + r"\S+",
            0.9,
        ),
    ]

    def __init__(self) -> None:
        super().__init__(
            supported_entity="CONFERENCE_ARTIFACT",
            marker=MEETING_INFO_MARKER,
            patterns=self.PATTERNS,
        )


class GenericUrlRecognizer(RedactingRecognizer):
    """Any remaining link, whatever the scheme."""

    PATTERNS = [
        Pattern("ANY_SCHEME_URL", URL_SCHEME + r"\S+", 0.7),
        Pattern("WWW_HOST", r"\bwww\.[\w-]+(?:\.[\w-]+)+\S*", 0.6),
    ]

    def __init__(self) -> None:
        super().__init__(supported_entity="URL", marker=MEETING_INFO_MARKER, patterns=self.PATTERNS)


class PhoneRecognizer(RedactingRecognizer):
    """North American and "+country" phone numbers.

    The safety validator uses the same patterns, so anything it would flag
    has already been redacted.
    """

    PATTERNS = [
        Pattern("PHONE_NANP", PHONE_NANP, 0.7),
        Pattern("PHONE_INTERNATIONAL", PHONE_INTERNATIONAL, 0.6),
    ]

    def __init__(self) -> None:
        super().__init__(supported_entity="PHONE_NUMBER", marker=PHONE_MARKER, patterns=self.PATTERNS)


# =============================================================================
# Numeric identifiers
# =============================================================================


class UsSsnRecognizer(RedactingRecognizer):
    PATTERNS = [Pattern("SSN_DASHED", r"\b\d{3}-\d{2}-\d{4}\b", 0.7)]

    def __init__(self) -> None:
        super().__init__(supported_entity="US_SSN", marker=PII_MARKER, patterns=self.PATTERNS)


class CreditCardRecognizer(RedactingRecognizer):
    PATTERNS = [Pattern("CARD_16_DIGIT", r"\b(?:\d{4}[-\s]?){3}\d{4}\b", 0.6)]

    def __init__(self) -> None:
        super().__init__(supported_entity="CREDIT_CARD", marker=PII_MARKER, patterns=self.PATTERNS)


class IPAddressRecognizer(RedactingRecognizer):
    """IPv4 only, strict octets to avoid matching version numbers."""

    PATTERNS = [
        Pattern(
            "IPV4_STRICT",
            r"\b(?:(?:25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)\.){3}(?:25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)\b",
            0.6,
        ),
    ]

    def __init__(self) -> None:
        super().__init__(supported_entity="IP_ADDRESS", marker=PII_MARKER, patterns=self.PATTERNS)


def get_conference_recognizers() -> list[RedactingRecognizer]:
    """Return conference recognizers in the order they must be applied.

    Provider grammars first, generic dial-in and URL catch-alls last.
    """
    return [
        ZoomRecognizer(),
        TeamsRecognizer(),
        GoogleMeetRecognizer(),
        WebexRecognizer(),
        DialInRecognizer(),
        GenericUrlRecognizer(),
    ]


def get_pii_number_recognizers() -> list[RedactingRecognizer]:
    """SSN, card and IP recognizers, applied to free text and outbound data."""
    return [
        UsSsnRecognizer(),
        CreditCardRecognizer(),
        IPAddressRecognizer(),
    ]
