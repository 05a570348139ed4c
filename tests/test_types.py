"""Tests for core types and result models."""

from __future__ import annotations

import pytest

from calguard.errors import CalendarProtectionError, DataSafetyValidationError, InvalidInputError, UnknownProtectionLevelError
from calguard.models.stats import ProcessingStats, ProtectionResult, SafetyReport
from calguard.models.types import ProtectionLevel


class TestProtectionLevel:
    def test_parse_names(self) -> None:
        assert ProtectionLevel.parse("MAXIMUM") is ProtectionLevel.MAXIMUM
        assert ProtectionLevel.parse(" minimal ") is ProtectionLevel.MINIMAL
        assert ProtectionLevel.parse(ProtectionLevel.STANDARD) is ProtectionLevel.STANDARD

    @pytest.mark.parametrize("value", ["HIGH", "", None, 3])
    def test_parse_rejects(self, value: object) -> None:
        with pytest.raises(UnknownProtectionLevelError):
            ProtectionLevel.parse(value)  # type: ignore[arg-type]


class TestErrors:
    def test_hierarchy(self) -> None:
        for error in (
            InvalidInputError(None),
            UnknownProtectionLevelError("X"),
            DataSafetyValidationError(["a"]),
        ):
            assert isinstance(error, CalendarProtectionError)

    def test_messages(self) -> None:
        assert "got NoneType" in str(InvalidInputError(None))
        assert str(UnknownProtectionLevelError("X")) == "Unknown protection level: X"
        error = DataSafetyValidationError(["first", "second"])
        assert str(error) == "Data safety validation failed: first, second"
        assert error.issues == ["first", "second"]


class TestProcessingStats:
    def test_merge(self) -> None:
        total = ProcessingStats(events_processed=2, attendees_anonymized=3)
        batch = ProcessingStats(
            events_processed=1,
            attendees_anonymized=4,
            conference_data_removed=1,
            sensitive_data_removed=1,
            last_processed="2024-01-15T18:00:00+00:00",
        )

        total.merge(batch)

        assert total.to_dict() == {
            "eventsProcessed": 3,
            "attendeesAnonymized": 7,
            "conferenceDataRemoved": 1,
            "sensitiveDataRemoved": 1,
            "lastProcessed": "2024-01-15T18:00:00+00:00",
        }


class TestProtectionResult:
    def test_to_dict(self) -> None:
        result = ProtectionResult(
            safe_data=[{"summary": "MEETING_TYPE_A"}],
            stats={"eventsProcessed": 1},
            protection_level="MAXIMUM",
            processing_time_ms=1.5,
            safety_validation=SafetyReport.from_issues([]),
        )

        assert result.to_dict() == {
            "safeData": [{"summary": "MEETING_TYPE_A"}],
            "stats": {"eventsProcessed": 1},
            "protectionLevel": "MAXIMUM",
            "processingTimeMs": 1.5,
            "safetyValidation": {"isSafe": True, "issues": []},
        }
