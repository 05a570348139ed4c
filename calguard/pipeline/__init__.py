"""Protection pipeline: level selection, safety gate and the AI round-trip."""

from __future__ import annotations

from calguard.pipeline.advisor_gate import AdvisorGate
from calguard.pipeline.orchestrator import ProtectionOrchestrator, label_summary
from calguard.pipeline.protocols import CalendarEventSource, SchedulingAdvisor

__all__ = [
    "AdvisorGate",
    "CalendarEventSource",
    "ProtectionOrchestrator",
    "SchedulingAdvisor",
    "label_summary",
]
