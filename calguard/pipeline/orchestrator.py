"""ProtectionOrchestrator: picks a protection level and enforces the safety gate.

MINIMAL  -> conference credentials removed, everything else verbatim
STANDARD -> full sanitization, minimal safe projection
MAXIMUM  -> STANDARD, then summaries collapse to fixed labels and only
            timing metadata survives
"""

from __future__ import annotations

import logging
import re
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Any, Callable, Mapping

from calguard.config import (
    MAXIMUM_METADATA_FIELDS,
    MULTI_WORD_LABELS,
    SENSITIVE_SHRINK_SLACK,
    SINGLE_WORD_LABELS,
    ProtectionConfig,
)
from calguard.errors import DataSafetyValidationError, InvalidInputError
from calguard.models.stats import ProcessingStats, ProtectionResult, SafetyReport
from calguard.models.types import MeetingLabel, ProtectionLevel
from calguard.scrubbing.anonymizer import IdentityAnonymizer
from calguard.scrubbing.redactor import PatternRedactor
from calguard.scrubbing.sanitizer import EventSanitizer

logger = logging.getLogger(__name__)


def _word_rows(
    rows: tuple[tuple[str, MeetingLabel], ...],
) -> tuple[tuple[re.Pattern[str], MeetingLabel], ...]:
    return tuple((re.compile(rf"\b{re.escape(phrase)}\b", re.IGNORECASE), label) for phrase, label in rows)


_MULTI_WORD_RES = _word_rows(MULTI_WORD_LABELS)
_SINGLE_WORD_RES = _word_rows(SINGLE_WORD_LABELS)


def label_summary(summary: str | None) -> str | None:
    """Collapse a summary to a MeetingLabel value.

    Rows match whole words only ("recall" is not a call), and multi-word
    rows are tried before single words, so "Daily Standup Meeting" is a
    standup rather than a generic meeting.
    """
    if not summary:
        return None
    for pattern, label in _MULTI_WORD_RES + _SINGLE_WORD_RES:
        if pattern.search(summary):
            return label.value
    return MeetingLabel.MEETING_TYPE_OTHER.value


def _extract_events(raw_batch: Any) -> list[Any]:
    if isinstance(raw_batch, list):
        return raw_batch
    if isinstance(raw_batch, Mapping) and isinstance(raw_batch.get("items"), list):
        return raw_batch["items"]
    raise InvalidInputError(raw_batch)


class ProtectionOrchestrator:
    """Runs calendar batches through the chosen protection level.

    One instance owns one pseudonym table, so results from the AI must be
    mapped back through the same instance that produced the request.

    Args:
        config: Options; defaults to ``ProtectionConfig()``
        sanitizer: Full sanitizer; built on ``config.directory`` if omitted
        redactor: Conference redactor; shared with the sanitizer if omitted
    """

    def __init__(
        self,
        config: ProtectionConfig | None = None,
        sanitizer: EventSanitizer | None = None,
        redactor: PatternRedactor | None = None,
    ) -> None:
        self.config = config or ProtectionConfig()
        if sanitizer is None:
            redactor = redactor or PatternRedactor()
            sanitizer = EventSanitizer(
                anonymizer=IdentityAnonymizer(self.config.directory),
                redactor=redactor,
            )
        self.sanitizer = sanitizer
        self.redactor = redactor or sanitizer.redactor
        self.stats = ProcessingStats()
        self._stats_lock = threading.Lock()

    @classmethod
    def production(cls) -> ProtectionOrchestrator:
        return cls(ProtectionConfig.production())

    @classmethod
    def development(cls) -> ProtectionOrchestrator:
        return cls(ProtectionConfig.development())

    def _log(self, level: int, msg: str, *args: Any) -> None:
        if self.config.enable_logging:
            logger.log(level, msg, *args)

    def _map(self, fn: Callable[[Any], Any], events: list[Any]) -> list[Any]:
        """Apply fn per event, on a thread pool when configured. Order is kept."""
        if self.config.max_workers > 1 and len(events) > 1:
            with ThreadPoolExecutor(max_workers=self.config.max_workers) as pool:
                return list(pool.map(fn, events))
        return [fn(event) for event in events]

    # -- Levels --

    def apply_minimal_protection(self, events: list[Any]) -> list[Any]:
        return self._map(self.redactor.redact_event, events)

    def apply_standard_protection(self, events: list[Any]) -> list[dict[str, Any]]:
        return self._map(lambda event: self.sanitizer.create_minimal_safe_data([event])[0], events)

    def apply_maximum_protection(self, events: list[Any]) -> list[dict[str, Any]]:
        reduced: list[dict[str, Any]] = []
        for event in self.apply_standard_protection(events):
            metadata = event.get("metadata", {})
            reduced.append({
                "start": event.get("start"),
                "end": event.get("end"),
                "summary": label_summary(event.get("summary")),
                "metadata": {key: metadata.get(key) for key in MAXIMUM_METADATA_FIELDS},
            })
        return reduced

    # -- Entry points --

    def process_calendar_data(
        self,
        raw_batch: Any,
        level: ProtectionLevel | str = ProtectionLevel.STANDARD,
    ) -> ProtectionResult:
        """Sanitize a batch of events at the given protection level.

        Args:
            raw_batch: List of events, or a mapping with a list under "items"
            level: ProtectionLevel or its name

        Returns:
            ProtectionResult with the outbound data and the safety report

        Raises:
            InvalidInputError: If raw_batch has no recognizable event list
            UnknownProtectionLevelError: If level names no protection level
            DataSafetyValidationError: If residual PII is found in strict mode
        """
        started = time.perf_counter()
        events = _extract_events(raw_batch)
        protection = ProtectionLevel.parse(level)
        self._log(logging.INFO, "processing_calendar_data events=%d level=%s", len(events), protection.value)

        if protection is ProtectionLevel.MINIMAL:
            safe_data = self.apply_minimal_protection(events)
        elif protection is ProtectionLevel.STANDARD:
            safe_data = self.apply_standard_protection(events)
        else:
            safe_data = self.apply_maximum_protection(events)

        report = self.sanitizer.validate_safety(safe_data)
        if not report.is_safe:
            if self.config.strict_mode:
                self._log(logging.ERROR, "safety_validation_failed issues=%d", len(report.issues))
                raise DataSafetyValidationError(report.issues)
            self._log(
                logging.WARNING,
                "safety_validation_warnings issues=%d first=%s",
                len(report.issues),
                report.issues[0],
            )

        batch_stats = self._batch_stats(events, safe_data)
        with self._stats_lock:
            self.stats.merge(batch_stats)
            stats = self.stats.to_dict()

        elapsed_ms = (time.perf_counter() - started) * 1000
        self._log(
            logging.INFO,
            "processed_calendar_data events=%d level=%s elapsed_ms=%.1f",
            len(events),
            protection.value,
            elapsed_ms,
        )
        return ProtectionResult(
            safe_data=safe_data,
            stats=stats,
            protection_level=protection.value,
            processing_time_ms=elapsed_ms,
            safety_validation=report,
        )

    @staticmethod
    def _batch_stats(originals: list[Any], processed: list[Any]) -> ProcessingStats:
        stats = ProcessingStats(
            events_processed=len(originals),
            last_processed=datetime.now(timezone.utc).isoformat(),
        )
        for original, output in zip(originals, processed):
            if not isinstance(original, Mapping):
                continue
            attendees = original.get("attendees")
            if isinstance(attendees, list):
                stats.attendees_anonymized += len(attendees)

            output = output if isinstance(output, Mapping) else {}
            conference = output.get("conferenceData")
            if original.get("conferenceData") is not None and not (
                isinstance(conference, Mapping) and conference.get("entryPoints")
            ):
                stats.conference_data_removed += 1

            before = len(original.get("summary") or "") + len(original.get("description") or "")
            after = len(output.get("summary") or "") + len(output.get("description") or "")
            if before > after + SENSITIVE_SHRINK_SLACK:
                stats.sensitive_data_removed += 1
        return stats

    def process_external_result(self, payload: Any) -> Any:
        """Restore original identifiers in an AI response of any shape."""
        return self.sanitizer.map_results_back(payload)

    def validate_data_safety(self, data: Any) -> SafetyReport:
        return self.sanitizer.validate_safety(data)

    def get_stats(self) -> dict[str, Any]:
        with self._stats_lock:
            stats = self.stats.to_dict()
        stats["sanitizerStats"] = self.sanitizer.anonymizer.get_stats()
        stats["options"] = self.config.to_dict()
        return stats

    def configure(self, patch: Mapping[str, Any] | None = None, **changes: Any) -> ProtectionConfig:
        """Merge option changes into the current config.

        Accepts snake_case or camelCase names, as a mapping, keywords or both.

        Raises:
            ValueError: If an option name is unknown
        """
        merged = dict(patch or {})
        merged.update(changes)
        self.config = self.config.merged(merged)
        self._log(logging.INFO, "protection_configured options=%s", sorted(merged))
        return self.config

    def reset(self) -> None:
        """Forget all pseudonyms and zero the statistics."""
        self.sanitizer.reset()
        with self._stats_lock:
            self.stats = ProcessingStats()
        self._log(logging.INFO, "protection_reset")
