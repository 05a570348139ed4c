"""Pipeline configuration: rule tables, domain directory and protection options.

The tables here ARE the policy. Recognizing a new provider keyword, a new
sensitive word or a new client domain means editing one row.
"""

from __future__ import annotations

import os
from dataclasses import asdict, dataclass, field, fields, replace
from typing import Any, Mapping

from calguard.models.types import LocationClass, MeetingLabel, OrganizationClass

# -- Replacement markers --

MEETING_INFO_MARKER = "[MEETING_INFO_REMOVED]"
PHONE_MARKER = "[PHONE_REMOVED]"
CODE_MARKER = "[CODE_REMOVED]"
SENSITIVE_WORD_MARKER = "[SENSITIVE_WORD_REMOVED]"
SECRET_MARKER = "[SECRET_REMOVED]"
PII_MARKER = "[PII_REMOVED]"

ALL_MARKERS: tuple[str, ...] = (
    MEETING_INFO_MARKER,
    PHONE_MARKER,
    CODE_MARKER,
    SENSITIVE_WORD_MARKER,
    SECRET_MARKER,
    PII_MARKER,
)

# Location text used when nothing but conference data was left
VIRTUAL_MEETING_FALLBACK = "Virtual Meeting"

# Replacement for a structured conferenceData block
CONFERENCE_PLACEHOLDER: dict[str, str] = {
    "type": "VIRTUAL_MEETING",
    "note": "details removed",
}

# Event fields that link straight into a meeting or the calendar UI
DEEP_LINK_FIELDS: tuple[str, ...] = ("hangoutLink", "htmlLink")

# -- Conference credentials --

# A line mentioning one of these is dropped if it also looks credential-bearing
CREDENTIAL_KEYWORDS: tuple[str, ...] = (
    "meeting id",
    "passcode",
    "password",
    "access code",
    "conference id",
    "dial-in",
    "pin",
    "security code",
    "host key",
)

CONFERENCE_HOSTS: tuple[str, ...] = (
    "zoom.us",
    "teams.microsoft.com",
    "teams.live.com",
    "meet.google.com",
    "g.co/meet",
    "webex.com",
)

# -- Content sensitivity --

SENSITIVE_KEYWORDS: tuple[str, ...] = (
    "confidential",
    "internal",
    "private",
    "nda",
    "proprietary",
    "secret",
    "restricted",
    "classified",
    "budget",
    "salary",
    "contract",
    "negotiation",
    "acquisition",
    "merger",
)

# Original summary+description must shrink by more than this many
# characters before an event counts towards sensitive_data_removed
SENSITIVE_SHRINK_SLACK = 50

# -- Organizations --

DEFAULT_CLIENT_DOMAINS: frozenset[str] = frozenset({"bigcorp.com", "enterprise.com"})
DEFAULT_INTERNAL_DOMAINS: frozenset[str] = frozenset({"yourcompany.com", "internal.com"})
DEFAULT_VENDOR_DOMAINS: frozenset[str] = frozenset(
    {"zoom.us", "microsoft.com", "google.com", "slack.com"}
)

# -- Locations (first matching row wins) --

LOCATION_KEYWORDS: tuple[tuple[LocationClass, tuple[str, ...]], ...] = (
    (
        LocationClass.VIRTUAL_MEETING,
        ("zoom", "teams", "meet", "webex", "hangout", "virtual", "online"),
    ),
    (LocationClass.CONFERENCE_ROOM, ("conference", "room", "boardroom")),
    (LocationClass.OFFICE_LOCATION, ("office", "building", "floor", "headquarters")),
    (LocationClass.DINING_LOCATION, ("restaurant", "cafe", "café", "coffee", "bistro", "diner")),
)

# -- MAXIMUM-level summary labels --

# Multi-word rows are tried before any single-word row
MULTI_WORD_LABELS: tuple[tuple[str, MeetingLabel], ...] = (
    ("daily standup meeting", MeetingLabel.MEETING_TYPE_C),
    ("standup meeting", MeetingLabel.MEETING_TYPE_C),
    ("team meeting", MeetingLabel.MEETING_TYPE_A),
    ("board meeting", MeetingLabel.MEETING_TYPE_D),
)

SINGLE_WORD_LABELS: tuple[tuple[str, MeetingLabel], ...] = (
    ("meeting", MeetingLabel.MEETING_TYPE_A),
    ("call", MeetingLabel.MEETING_TYPE_B),
    ("standup", MeetingLabel.MEETING_TYPE_C),
    ("review", MeetingLabel.MEETING_TYPE_D),
    ("sync", MeetingLabel.MEETING_TYPE_E),
    ("demo", MeetingLabel.MEETING_TYPE_F),
    ("interview", MeetingLabel.MEETING_TYPE_G),
)

# -- Outbound projections --

MINIMAL_SAFE_FIELDS: tuple[str, ...] = (
    "start",
    "end",
    "summary",
    "attendees",
    "status",
    "transparency",
)

MAXIMUM_METADATA_FIELDS: tuple[str, ...] = (
    "hasAttendees",
    "duration",
    "dayOfWeek",
    "isRecurring",
)


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_domains(name: str, default: frozenset[str]) -> frozenset[str]:
    raw = os.environ.get(name)
    if not raw:
        return default
    return frozenset(d.strip().lower() for d in raw.split(",") if d.strip())


@dataclass(frozen=True)
class OrganizationDirectory:
    """Known email domains, used to classify organizations.

    A subdomain belongs to its parent: ``eu.bigcorp.com`` is a client when
    ``bigcorp.com`` is listed.
    """

    client_domains: frozenset[str] = DEFAULT_CLIENT_DOMAINS
    internal_domains: frozenset[str] = DEFAULT_INTERNAL_DOMAINS
    vendor_domains: frozenset[str] = DEFAULT_VENDOR_DOMAINS

    def classify(self, domain: str) -> OrganizationClass:
        """Classify a domain. Client wins over internal, internal over vendor."""
        domain = domain.strip().lower()
        if self._matches(domain, self.client_domains):
            return OrganizationClass.CLIENT_FIRM
        if self._matches(domain, self.internal_domains):
            return OrganizationClass.OUR_COMPANY
        if self._matches(domain, self.vendor_domains):
            return OrganizationClass.VENDOR
        return OrganizationClass.EXTERNAL_ORG

    @staticmethod
    def _matches(domain: str, known: frozenset[str]) -> bool:
        return any(domain == k or domain.endswith("." + k) for k in known)

    @classmethod
    def from_env(cls) -> OrganizationDirectory:
        """Build from comma-separated CALGUARD_*_DOMAINS variables."""
        return cls(
            client_domains=_env_domains("CALGUARD_CLIENT_DOMAINS", DEFAULT_CLIENT_DOMAINS),
            internal_domains=_env_domains("CALGUARD_INTERNAL_DOMAINS", DEFAULT_INTERNAL_DOMAINS),
            vendor_domains=_env_domains("CALGUARD_VENDOR_DOMAINS", DEFAULT_VENDOR_DOMAINS),
        )


# camelCase option names accepted from JSON callers
_OPTION_ALIASES: dict[str, str] = {
    "strictMode": "strict_mode",
    "allowMinimalLocation": "allow_minimal_location",
    "preserveTimePatterns": "preserve_time_patterns",
    "enableLogging": "enable_logging",
    "maxWorkers": "max_workers",
}


@dataclass(frozen=True)
class ProtectionConfig:
    """Orchestrator options.

    ``allow_minimal_location`` and ``preserve_time_patterns`` are accepted
    and reported but do not change behavior yet.
    """

    strict_mode: bool = False
    allow_minimal_location: bool = True
    preserve_time_patterns: bool = True
    enable_logging: bool = False
    max_workers: int = 1
    directory: OrganizationDirectory = field(default_factory=OrganizationDirectory)

    def merged(self, patch: Mapping[str, Any]) -> ProtectionConfig:
        """Return a copy with ``patch`` applied.

        Args:
            patch: Option names in snake_case or camelCase

        Raises:
            ValueError: If a key names no option.
        """
        known = {f.name for f in fields(self)}
        changes: dict[str, Any] = {}
        for key, value in patch.items():
            name = _OPTION_ALIASES.get(key, key)
            if name not in known:
                raise ValueError(f"Unknown protection option: {key}")
            changes[name] = value
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        """Options as reported by ``get_stats()`` (camelCase, no directory)."""
        values = asdict(self)
        values.pop("directory")
        reverse = {v: k for k, v in _OPTION_ALIASES.items()}
        return {reverse[k]: v for k, v in values.items()}

    @classmethod
    def production(cls) -> ProtectionConfig:
        """Strict and quiet: residual PII is an error."""
        return cls(strict_mode=True, enable_logging=False)

    @classmethod
    def development(cls) -> ProtectionConfig:
        """Lenient and verbose: residual PII is a logged warning."""
        return cls(strict_mode=False, enable_logging=True)

    @classmethod
    def from_env(cls) -> ProtectionConfig:
        """Build from CALGUARD_STRICT_MODE / _ENABLE_LOGGING / _MAX_WORKERS."""
        try:
            workers = int(os.environ.get("CALGUARD_MAX_WORKERS", "1"))
        except ValueError:
            workers = 1
        return cls(
            strict_mode=_env_flag("CALGUARD_STRICT_MODE", False),
            enable_logging=_env_flag("CALGUARD_ENABLE_LOGGING", False),
            max_workers=max(workers, 1),
            directory=OrganizationDirectory.from_env(),
        )
