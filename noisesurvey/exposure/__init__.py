"""
noisesurvey Exposure Engine

Converts dB(A) readings into LAeq, LEX,8h and dose, and classifies the
result into SANS 10083 zones and action levels.
"""

from .results import (
    ZoneClassification,
    ComplianceCheck,
    ExposureSummary,
)

from .calculators import (
    average_laeq,
    calculate_lex8h,
    calculate_noise_dose,
    permitted_exposure_time,
    max_permissible_level,
    classify_zone,
    check_compliance,
    get_exposure_summary,
    summarize_measurement,
    summarize_readings,
    worst_case_exposure,
)

__all__ = [
    # Results
    "ZoneClassification",
    "ComplianceCheck",
    "ExposureSummary",

    # Calculators
    "average_laeq",
    "calculate_lex8h",
    "calculate_noise_dose",
    "permitted_exposure_time",
    "max_permissible_level",
    "classify_zone",
    "check_compliance",
    "get_exposure_summary",
    "summarize_measurement",
    "summarize_readings",
    "worst_case_exposure",
]
