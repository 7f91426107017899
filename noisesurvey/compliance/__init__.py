"""
noisesurvey Compliance Module

Cross-validates a whole survey (areas, equipment, measurements, controls,
hearing protection and audiometry) for SANS 10083 completeness and
produces a categorized issue list.
"""

from .enums import (
    IssueSeverity,
    IssueCategory,
    CheckCategory,
)

from .schema import (
    ValidationIssue,
    ValidationSummary,
    ValidationResult,
)

from .checkers import (
    SurveyContext,
    SurveyChecker,
    EquipmentChecker,
    EquipmentReferenceChecker,
    MeasurementChecker,
    ControlsChecker,
    HearingProtectionChecker,
    AudiometryChecker,
    get_checker,
    SURVEY_CHECKERS,
)

from .engine import (
    SurveyValidationEngine,
    validate_survey,
)

__all__ = [
    # Enumerations
    "IssueSeverity",
    "IssueCategory",
    "CheckCategory",

    # Schema
    "ValidationIssue",
    "ValidationSummary",
    "ValidationResult",

    # Checkers
    "SurveyContext",
    "SurveyChecker",
    "EquipmentChecker",
    "EquipmentReferenceChecker",
    "MeasurementChecker",
    "ControlsChecker",
    "HearingProtectionChecker",
    "AudiometryChecker",
    "get_checker",
    "SURVEY_CHECKERS",

    # Engine
    "SurveyValidationEngine",
    "validate_survey",
]
