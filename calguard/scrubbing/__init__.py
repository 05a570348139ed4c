"""Scrubbing module.

Conference credential redaction, reversible identity pseudonymization and
the outbound safety check. Conference artifacts and PII-shaped numbers are
found by presidio pattern recognizers, secrets by detect-secrets plus custom
rules; event IDs are replaced with Faker-generated tokens.
"""

from __future__ import annotations

from calguard.scrubbing.allowlist import MeetingPhraseAllowlist
from calguard.scrubbing.anonymizer import AnonymizationRecord, IdentityAnonymizer
from calguard.scrubbing.redactor import PatternRedactor
from calguard.scrubbing.safety import SafetyValidator, validate_safety
from calguard.scrubbing.sanitizer import EventSanitizer, calculate_duration
from calguard.scrubbing.secrets import SecretFinding, detect_secrets_in_text

__all__ = [
    "AnonymizationRecord",
    "EventSanitizer",
    "IdentityAnonymizer",
    "MeetingPhraseAllowlist",
    "PatternRedactor",
    "SafetyValidator",
    "SecretFinding",
    "calculate_duration",
    "detect_secrets_in_text",
    "validate_safety",
]
