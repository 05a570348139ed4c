"""Tests for the identity anonymizer.

Verifies consistent pseudonymization: same input produces the same
pseudonym, different inputs never collide, and map_back is a true inverse.
"""

from __future__ import annotations

import threading

import pytest

from calguard.config import OrganizationDirectory
from calguard.models.types import IdentityCategory
from calguard.scrubbing.anonymizer import IdentityAnonymizer


@pytest.fixture
def anonymizer() -> IdentityAnonymizer:
    return IdentityAnonymizer()


class TestPersons:
    """Tests for person pseudonyms."""

    def test_consistent_same_input(self, anonymizer: IdentityAnonymizer) -> None:
        """Same address should produce the same pseudonym every time."""
        first = anonymizer.anonymize_person("jane@bigcorp.com")
        second = anonymizer.anonymize_person("jane@bigcorp.com")

        assert first == second == "PERSON_1"

    def test_counter_increments_per_distinct_input(self, anonymizer: IdentityAnonymizer) -> None:
        assert anonymizer.anonymize_person("a@example.com") == "PERSON_1"
        assert anonymizer.anonymize_person("b@example.com") == "PERSON_2"
        assert anonymizer.anonymize_person("a@example.com") == "PERSON_1"

    def test_display_name_used_without_email(self, anonymizer: IdentityAnonymizer) -> None:
        pseudonym = anonymizer.anonymize_person(None, "Jane Doe")

        assert pseudonym == "PERSON_1"
        assert anonymizer.map_back(pseudonym) == "Jane Doe"

    def test_nothing_to_key_on(self, anonymizer: IdentityAnonymizer) -> None:
        assert anonymizer.anonymize_person(None, None) is None
        assert anonymizer.anonymize_person("", "") is None

    def test_keys_are_exact(self, anonymizer: IdentityAnonymizer) -> None:
        """Different spellings get different pseudonyms so each maps back exactly."""
        lower = anonymizer.anonymize_person("jane@bigcorp.com")
        upper = anonymizer.anonymize_person("Jane@BigCorp.com")

        assert lower != upper
        assert anonymizer.map_back(upper) == "Jane@BigCorp.com"


class TestOrganizations:
    """Tests for domain classification and the shared organization counter."""

    def test_classes_share_one_counter(self, anonymizer: IdentityAnonymizer) -> None:
        assert anonymizer.anonymize_organization("bigcorp.com") == "CLIENT_FIRM_1"
        assert anonymizer.anonymize_organization("yourcompany.com") == "OUR_COMPANY_2"
        assert anonymizer.anonymize_organization("zoom.us") == "VENDOR_3"
        assert anonymizer.anonymize_organization("example.org") == "EXTERNAL_ORG_4"

    def test_subdomain_inherits_class(self, anonymizer: IdentityAnonymizer) -> None:
        assert anonymizer.anonymize_organization("eu.bigcorp.com") == "CLIENT_FIRM_1"

    def test_custom_directory(self) -> None:
        directory = OrganizationDirectory(client_domains=frozenset({"initech.com"}))
        anonymizer = IdentityAnonymizer(directory)

        assert anonymizer.anonymize_organization("initech.com") == "CLIENT_FIRM_1"
        assert anonymizer.anonymize_organization("bigcorp.com") == "EXTERNAL_ORG_2"


class TestLocationsAndProjects:
    def test_location_classes(self, anonymizer: IdentityAnonymizer) -> None:
        assert anonymizer.anonymize_location("Conference Room B") == "CONFERENCE_ROOM_1"
        assert anonymizer.anonymize_location("Blue Bottle Coffee") == "DINING_LOCATION_2"
        assert anonymizer.anonymize_location("42 Elm Street") == "GENERAL_LOCATION_3"
        assert anonymizer.anonymize_location("Virtual Meeting") == "VIRTUAL_MEETING_4"

    def test_project(self, anonymizer: IdentityAnonymizer) -> None:
        assert anonymizer.anonymize_project("Phoenix Rollout") == "PROJECT_1"
        assert anonymizer.anonymize_project("Phoenix Rollout") == "PROJECT_1"
        assert anonymizer.anonymize_project(None) is None

    def test_categories_have_separate_counters(self, anonymizer: IdentityAnonymizer) -> None:
        anonymizer.anonymize_person("a@example.com")
        anonymizer.anonymize_person("b@example.com")

        assert anonymizer.anonymize_project("Atlas") == "PROJECT_1"


class TestEmails:
    def test_composite_email(self, anonymizer: IdentityAnonymizer) -> None:
        assert anonymizer.anonymize_email("jane@bigcorp.com") == "PERSON_1@CLIENT_FIRM_1"

    def test_address_without_domain(self, anonymizer: IdentityAnonymizer) -> None:
        assert anonymizer.anonymize_email("jane") == "PERSON_1"

    def test_composite_maps_back_to_address(self, anonymizer: IdentityAnonymizer) -> None:
        pseudonym = anonymizer.anonymize_email("jane@bigcorp.com")

        assert anonymizer.map_back(pseudonym) == "jane@bigcorp.com"


class TestMapBack:
    """Tests for restoring originals in AI responses."""

    def test_inverse_for_every_category(self, anonymizer: IdentityAnonymizer) -> None:
        originals = {
            anonymizer.anonymize_person("jane@bigcorp.com"): "jane@bigcorp.com",
            anonymizer.anonymize_organization("bigcorp.com"): "bigcorp.com",
            anonymizer.anonymize_location("Conference Room B"): "Conference Room B",
            anonymizer.anonymize_project("Phoenix Rollout"): "Phoenix Rollout",
        }

        for pseudonym, original in originals.items():
            assert anonymizer.map_back(pseudonym) == original

    def test_nested_structure(self, anonymizer: IdentityAnonymizer) -> None:
        """Strings are restored at any depth; keys and scalars pass through."""
        email = anonymizer.anonymize_email("jane@bigcorp.com")
        project = anonymizer.anonymize_project("Phoenix Rollout")
        payload = {
            "suggestions": [
                {
                    "with": [email],
                    "note": f"Ask PERSON_1 about {project}",
                    "score": 0.9,
                    "confirmed": True,
                    "room": None,
                }
            ],
            "PERSON_1": ("PERSON_1",),
        }

        restored = anonymizer.map_back(payload)

        assert restored == {
            "suggestions": [
                {
                    "with": ["jane@bigcorp.com"],
                    "note": "Ask jane@bigcorp.com about Phoenix Rollout",
                    "score": 0.9,
                    "confirmed": True,
                    "room": None,
                }
            ],
            "PERSON_1": ("jane@bigcorp.com",),
        }

    def test_longest_token_wins(self, anonymizer: IdentityAnonymizer) -> None:
        """PERSON_10 must not be read as PERSON_1 followed by '0'."""
        for i in range(1, 11):
            anonymizer.anonymize_person(f"user{i}@example.com")

        assert anonymizer.map_back("PERSON_10 and PERSON_1") == "user10@example.com and user1@example.com"

    def test_unknown_pseudonym_unchanged(self, anonymizer: IdentityAnonymizer) -> None:
        anonymizer.anonymize_person("jane@bigcorp.com")

        assert anonymizer.map_back("PERSON_99 joined") == "PERSON_99 joined"

    def test_idempotent_on_plain_text(self, anonymizer: IdentityAnonymizer) -> None:
        assert anonymizer.map_back("nothing to see") == "nothing to see"

    def test_lookup(self, anonymizer: IdentityAnonymizer) -> None:
        anonymizer.anonymize_project("Atlas")

        record = anonymizer.lookup("PROJECT_1")

        assert record is not None
        assert record.category is IdentityCategory.PROJECT
        assert record.original == "Atlas"
        assert anonymizer.lookup("PROJECT_2") is None


class TestStatsAndReset:
    def test_get_stats(self, anonymizer: IdentityAnonymizer) -> None:
        anonymizer.anonymize_email("jane@bigcorp.com")
        anonymizer.anonymize_location("Conference Room B")

        assert anonymizer.get_stats() == {
            "personsAnonymized": 1,
            "organizationsAnonymized": 1,
            "locationsAnonymized": 1,
            "projectsAnonymized": 0,
        }

    def test_reset_restarts_counters(self, anonymizer: IdentityAnonymizer) -> None:
        anonymizer.anonymize_person("a@example.com")
        anonymizer.anonymize_person("b@example.com")

        anonymizer.reset()

        assert anonymizer.map_back("PERSON_2") == "PERSON_2"
        assert anonymizer.anonymize_person("b@example.com") == "PERSON_1"
        assert anonymizer.get_stats()["personsAnonymized"] == 1


class TestThreadSafety:
    def test_concurrent_minting_is_consistent(self, anonymizer: IdentityAnonymizer) -> None:
        """Racing threads agree on one pseudonym per input and never reuse a counter."""
        emails = [f"user{i}@example.com" for i in range(50)]
        results: list[dict[str, str]] = []
        lock = threading.Lock()

        def worker() -> None:
            seen = {email: anonymizer.anonymize_person(email) for email in emails}
            with lock:
                results.append(seen)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert all(r == results[0] for r in results)
        assert sorted(results[0].values(), key=lambda p: int(p.split("_")[1])) == [
            f"PERSON_{i}" for i in range(1, 51)
        ]
