"""AdvisorGate: the only path from calendar data to the AI model and back."""

from __future__ import annotations

import logging
from typing import Any

from calguard.models.types import ProtectionLevel
from calguard.pipeline.orchestrator import ProtectionOrchestrator
from calguard.pipeline.protocols import SchedulingAdvisor

logger = logging.getLogger(__name__)


class AdvisorGate:
    """Sanitizes events, asks the advisor, and de-anonymizes its answer.

    The advisor is never called if protection fails; orchestrator errors
    propagate unchanged.
    """

    def __init__(self, orchestrator: ProtectionOrchestrator, advisor: SchedulingAdvisor) -> None:
        self._orchestrator = orchestrator
        self._advisor = advisor

    def suggest(
        self,
        events: Any,
        request: str,
        level: ProtectionLevel | str = ProtectionLevel.STANDARD,
    ) -> Any:
        """Answer a scheduling request without exposing raw calendar data."""
        result = self._orchestrator.process_calendar_data(events, level)
        if not result.safety_validation.is_safe:
            logger.warning(
                "advisor_request_with_safety_warnings level=%s issues=%d",
                result.protection_level,
                len(result.safety_validation.issues),
            )
        answer = self._advisor.advise(result.safe_data, request)
        return self._orchestrator.process_external_result(answer)
