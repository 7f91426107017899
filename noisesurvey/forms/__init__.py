"""
noisesurvey Form Validation

Field-level checks for survey information, equipment, readings and
exposure times.
"""

from .validators import (
    FieldValidation,
    INFO_KEYS,
    validate_survey_info,
    validate_equipment_entry,
    validate_equipment_list,
    validate_noise_reading,
    validate_exposure_time,
)

__all__ = [
    "FieldValidation",
    "INFO_KEYS",
    "validate_survey_info",
    "validate_equipment_entry",
    "validate_equipment_list",
    "validate_noise_reading",
    "validate_exposure_time",
]
