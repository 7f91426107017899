"""
noisesurvey Compliance Enumerations

Survey validation enumerations.
"""

from enum import Enum


class IssueSeverity(str, Enum):
    """Severity of a survey validation issue."""
    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"


class IssueCategory(str, Enum):
    """Display category of a survey validation issue."""
    EQUIPMENT = "Equipment"
    CALIBRATION = "Calibration"
    EQUIPMENT_REFERENCE = "Equipment Reference"
    AREAS = "Areas"
    MEASUREMENTS = "Measurements"
    CONTROLS = "Controls"
    HEARING_PROTECTION = "Hearing Protection"
    AUDIOMETRY = "Audiometry"
    AUDIOMETRY_STS = "Audiometry - STS"


class CheckCategory(str, Enum):
    """
    Survey checks, in evaluation order.

    Issues are reported in this order within each severity.
    """
    EQUIPMENT = "equipment"
    REFERENCES = "references"
    MEASUREMENTS = "measurements"
    CONTROLS = "controls"
    HEARING_PROTECTION = "hearing_protection"
    AUDIOMETRY = "audiometry"
