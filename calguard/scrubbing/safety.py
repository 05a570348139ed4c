"""Last-line check for residual PII in an outbound payload.

Walks every string leaf of the data that is about to leave the process and
reports anything that still looks like an address, a phone number, a link,
a government or card number, an IP address, a file path or a secret. Issues
name the path to the offending value, e.g. ``[0].attendees[1].email``.
"""

from __future__ import annotations

import re
from typing import Any, Iterator, Mapping

from calguard.config import ALL_MARKERS
from calguard.models.stats import SafetyReport
from calguard.scrubbing.recognizers import (
    URL_SCHEME,
    PhoneRecognizer,
    RedactingRecognizer,
    get_pii_number_recognizers,
)
from calguard.scrubbing.secrets import contains_secret

# Pseudonymized addresses are the one legitimate use of "@"
_PSEUDONYM_EMAIL_PREFIX = re.compile(r"\bPERSON_\d+@")
_URL_RE = re.compile(URL_SCHEME, re.IGNORECASE)

# "C:\Users\x" or "/home/x"; a slash inside a word ("Q1/Q2", "and/or") is not a path
_FILE_PATH_RES = (
    re.compile(r"\b[C-Z]:\\[\w\\]+"),
    re.compile(r"(?<![\w/:])/\w+(?:/\w*)*"),
)
# IANA zone names such as "America/Los_Angeles" or "Etc/GMT+8"
_TIME_ZONE_RE = re.compile(r"^[A-Z][A-Za-z]+(?:/[A-Za-z0-9_+-]+)+$")

_REASONS = {
    "US_SSN": "SSN pattern",
    "CREDIT_CARD": "credit card pattern",
    "IP_ADDRESS": "IP address",
}


def iter_string_leaves(data: Any, path: str = "") -> Iterator[tuple[str, str]]:
    """Yield ``(path, text)`` for every string inside a JSON-shaped value."""
    if isinstance(data, str):
        yield path or "$", data
    elif isinstance(data, Mapping):
        for key, value in data.items():
            yield from iter_string_leaves(value, f"{path}.{key}" if path else str(key))
    elif isinstance(data, (list, tuple)):
        for index, value in enumerate(data):
            yield from iter_string_leaves(value, f"{path}[{index}]")


def looks_like_file_path(text: str) -> bool:
    """True for local paths, ignoring zone names and already-redacted text."""
    if _TIME_ZONE_RE.match(text) or any(marker in text for marker in ALL_MARKERS):
        return False
    return any(pattern.search(text) for pattern in _FILE_PATH_RES)


class SafetyValidator:
    """Scans outbound data for anything sanitization should have removed."""

    def __init__(self) -> None:
        self.phone_recognizer = PhoneRecognizer()
        self.pii_recognizers: list[RedactingRecognizer] = get_pii_number_recognizers()

    def check_text(self, text: str) -> list[str]:
        """Reasons this string is unsafe, empty if it is clean."""
        reasons: list[str] = []
        if "@" in _PSEUDONYM_EMAIL_PREFIX.sub("", text):
            reasons.append("email")
        if self.phone_recognizer.matches(text):
            reasons.append("phone number")
        if _URL_RE.search(text):
            reasons.append("URL")
        for recognizer in self.pii_recognizers:
            if recognizer.matches(text):
                reasons.append(_REASONS.get(recognizer.entity_type, recognizer.entity_type))
        if looks_like_file_path(text):
            reasons.append("file path")
        if contains_secret(text):
            reasons.append("secret")
        return reasons

    def validate(self, data: Any) -> SafetyReport:
        issues = [
            f"Potential {reason} found at {path}"
            for path, text in iter_string_leaves(data)
            for reason in self.check_text(text)
        ]
        return SafetyReport.from_issues(issues)


def validate_safety(data: Any) -> SafetyReport:
    """Convenience wrapper around ``SafetyValidator().validate``."""
    return SafetyValidator().validate(data)
