"""Consistent, reversible pseudonymization of calendar identities.

Same real identity → same pseudonym for the lifetime of the instance, so the
AI sees a coherent picture ("PERSON_3 is in every standup") and its answer
can be mapped back to real people before it reaches the user.
"""

from __future__ import annotations

import re
import threading
from dataclasses import dataclass
from typing import Any, Mapping

from calguard.config import LOCATION_KEYWORDS, OrganizationDirectory
from calguard.models.types import IdentityCategory, LocationClass

_ORG_PREFIXES = "CLIENT_FIRM|OUR_COMPANY|VENDOR|EXTERNAL_ORG"

# "PERSON_3@CLIENT_FIRM_1" as produced by anonymize_email
_COMPOSITE_EMAIL = r"\b(?P<person>PERSON_\d+)@(?P<org>(?:" + _ORG_PREFIXES + r")_\d+)\b"


@dataclass(frozen=True)
class AnonymizationRecord:
    """One row of the reverse table."""

    category: IdentityCategory
    original: str
    pseudonym: str


class IdentityAnonymizer:
    """Bidirectional pseudonym tables for persons, organizations, locations and projects.

    Each category has its own counter. Organization subclasses share one
    counter, as do location subclasses, so ``CLIENT_FIRM_1`` and
    ``VENDOR_2`` are never both "1". Keys are exact strings: two spellings
    of the same address get two pseudonyms, which keeps ``map_back`` a true
    inverse.

    Thread-safe: all table access is serialized by a re-entrant lock.

    Args:
        directory: Domain lists used to classify organizations
    """

    def __init__(self, directory: OrganizationDirectory | None = None) -> None:
        self.directory = directory or OrganizationDirectory()
        self._lock = threading.RLock()
        self._forward: dict[IdentityCategory, dict[str, str]] = {c: {} for c in IdentityCategory}
        self._counters: dict[IdentityCategory, int] = {c: 0 for c in IdentityCategory}
        self._reverse: dict[str, AnonymizationRecord] = {}
        self._restore_pattern: re.Pattern[str] | None = None

    def _mint(self, category: IdentityCategory, original: str, prefix: str) -> str:
        with self._lock:
            table = self._forward[category]
            existing = table.get(original)
            if existing is not None:
                return existing
            self._counters[category] += 1
            pseudonym = f"{prefix}_{self._counters[category]}"
            table[original] = pseudonym
            self._reverse[pseudonym] = AnonymizationRecord(category, original, pseudonym)
            self._restore_pattern = None
            return pseudonym

    def anonymize_person(self, email: str | None, display_name: str | None = None) -> str | None:
        """Pseudonym for a person, keyed by email, else display name.

        Returns:
            ``PERSON_n``, or None when neither key is present
        """
        key = email or display_name
        if not key:
            return None
        return self._mint(IdentityCategory.PERSON, key, "PERSON")

    def anonymize_organization(self, domain: str | None) -> str | None:
        """Pseudonym for an email domain, prefixed with its relationship to us."""
        if not domain:
            return None
        org_class = self.directory.classify(domain)
        return self._mint(IdentityCategory.ORGANIZATION, domain, org_class.value)

    def anonymize_location(self, location: str | None) -> str | None:
        """Pseudonym for a place, prefixed with its coarse kind."""
        if not location:
            return None
        return self._mint(IdentityCategory.LOCATION, location, self.classify_location(location).value)

    def anonymize_project(self, name: str | None) -> str | None:
        if not name:
            return None
        return self._mint(IdentityCategory.PROJECT, name, "PROJECT")

    def anonymize_email(self, email: str | None) -> str | None:
        """Rewrite an address as ``PERSON_n@ORG_m``.

        Addresses without a domain collapse to the bare person pseudonym.
        """
        if not email:
            return None
        person = self.anonymize_person(email)
        _, _, domain = email.rpartition("@")
        if "@" not in email or not domain:
            return person
        return f"{person}@{self.anonymize_organization(domain)}"

    @staticmethod
    def classify_location(location: str) -> LocationClass:
        lowered = location.lower()
        for location_class, keywords in LOCATION_KEYWORDS:
            if any(keyword in lowered for keyword in keywords):
                return location_class
        return LocationClass.GENERAL_LOCATION

    def lookup(self, pseudonym: str) -> AnonymizationRecord | None:
        with self._lock:
            return self._reverse.get(pseudonym)

    def map_back(self, value: Any) -> Any:
        """Restore original identifiers anywhere inside a JSON-shaped value.

        Strings are rewritten token by token, containers are rebuilt with
        the same shape. Mapping keys and non-string scalars pass through,
        and unknown pseudonyms are left as they are.
        """
        if isinstance(value, str):
            return self._restore_text(value)
        if isinstance(value, Mapping):
            return {key: self.map_back(item) for key, item in value.items()}
        if isinstance(value, list):
            return [self.map_back(item) for item in value]
        if isinstance(value, tuple):
            return tuple(self.map_back(item) for item in value)
        return value

    def _pattern(self) -> tuple[re.Pattern[str] | None, dict[str, AnonymizationRecord]]:
        with self._lock:
            if not self._reverse:
                return None, {}
            if self._restore_pattern is None:
                # Longest first so PERSON_12 wins over PERSON_1
                tokens = sorted(self._reverse, key=len, reverse=True)
                self._restore_pattern = re.compile(
                    _COMPOSITE_EMAIL + r"|\b(?P<token>" + "|".join(map(re.escape, tokens)) + r")\b"
                )
            return self._restore_pattern, dict(self._reverse)

    def _restore_text(self, text: str) -> str:
        pattern, reverse = self._pattern()
        if pattern is None or not text:
            return text

        def restore(match: re.Match[str]) -> str:
            token = match.group("token")
            if token is not None:
                return reverse[token].original

            person = reverse.get(match.group("person"))
            org = reverse.get(match.group("org"))
            if person is None:
                org_text = org.original if org else match.group("org")
                return f"{match.group('person')}@{org_text}"
            if "@" in person.original:
                return person.original
            org_text = org.original if org else match.group("org")
            return f"{person.original}@{org_text}"

        return pattern.sub(restore, text)

    def get_stats(self) -> dict[str, int]:
        """Number of distinct originals seen per category."""
        with self._lock:
            return {
                "personsAnonymized": len(self._forward[IdentityCategory.PERSON]),
                "organizationsAnonymized": len(self._forward[IdentityCategory.ORGANIZATION]),
                "locationsAnonymized": len(self._forward[IdentityCategory.LOCATION]),
                "projectsAnonymized": len(self._forward[IdentityCategory.PROJECT]),
            }

    def reset(self) -> None:
        """Forget every mapping and restart all counters at 1."""
        with self._lock:
            for table in self._forward.values():
                table.clear()
            for category in self._counters:
                self._counters[category] = 0
            self._reverse.clear()
            self._restore_pattern = None
