"""Calendar privacy sanitization.

Strips meeting credentials and pseudonymizes identities in calendar data
before it is sent to an external AI model, and maps the model's answer back.
"""

from __future__ import annotations

from calguard.config import OrganizationDirectory, ProtectionConfig
from calguard.errors import (
    CalendarProtectionError,
    DataSafetyValidationError,
    InvalidInputError,
    UnknownProtectionLevelError,
)
from calguard.models import ProtectionLevel, ProtectionResult, SafetyReport
from calguard.pipeline import AdvisorGate, ProtectionOrchestrator

__all__ = [
    "AdvisorGate",
    "CalendarProtectionError",
    "DataSafetyValidationError",
    "InvalidInputError",
    "OrganizationDirectory",
    "ProtectionConfig",
    "ProtectionLevel",
    "ProtectionOrchestrator",
    "ProtectionResult",
    "SafetyReport",
    "UnknownProtectionLevelError",
]
