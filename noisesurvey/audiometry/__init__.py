"""
noisesurvey Audiometry Engine

Hearing threshold averages, standard threshold shift detection, WHO
hearing loss grading and per-employee hearing conservation summaries.
"""

from .results import (
    STSResult,
    HearingLossClassification,
    AudiometrySummary,
    AudiogramValidation,
)

from .calculators import (
    calculate_hta,
    detect_sts,
    classify_hearing_loss,
    age_correction_iso1999,
    employee_age,
    get_audiometry_summary,
    validate_audiogram,
    create_empty_audiogram,
)

from .reducers import apply_new_test

__all__ = [
    # Results
    "STSResult",
    "HearingLossClassification",
    "AudiometrySummary",
    "AudiogramValidation",

    # Calculators
    "calculate_hta",
    "detect_sts",
    "classify_hearing_loss",
    "age_correction_iso1999",
    "employee_age",
    "get_audiometry_summary",
    "validate_audiogram",
    "create_empty_audiogram",

    # Reducers
    "apply_new_test",
]
