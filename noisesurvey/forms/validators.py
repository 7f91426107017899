"""
noisesurvey Form Validators

Per-field checks for the data entry screens: survey information,
equipment entries, single noise readings and exposure times.

Each validator returns a FieldValidation mapping field names to
messages. Keys listed in INFO_KEYS are informational and do not make a
form invalid.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Dict, Mapping, Optional, Sequence

from ..core.coercion import add_years, is_blank, parse_date, try_parse_number
from ..core.constants import (
    CALIBRATION_CRITERIA,
    READING_MAX_DB,
    READING_MIN_DB,
    READING_VERY_HIGH_DB,
    SANS_EXPOSURE,
)
from ..core.enums import EquipmentType
from ..core.models import Equipment


INFO_KEYS = frozenset({"noiseLevelInfo"})

CLIENT_MIN_LENGTH = 2
CLIENT_MAX_LENGTH = 100
REFERENCE_MIN_LENGTH = 2
MAX_SURVEY_DAYS = 365
MAX_EXPOSURE_HOURS = 24.0
AREA_REF_MAX_DB = 140.0


@dataclass
class FieldValidation:
    """Result of validating one form."""
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return not any(key not in INFO_KEYS for key in self.errors)

    def to_dict(self) -> Dict[str, Any]:
        return {"is_valid": self.is_valid, "errors": dict(self.errors)}


def _text(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    return value if isinstance(value, str) else ("" if value is None else str(value))


def _format_number(value: float) -> str:
    return f"{value:g}"


# =============================================================================
# SURVEY INFORMATION
# =============================================================================

def validate_survey_info(data: Mapping[str, Any], as_of: Optional[date] = None) -> FieldValidation:
    """
    Validate the survey information step.

    Args:
        data: camelCase survey fields (client, project, site, startDate,
            endDate, description)
        as_of: Reference date for the future start check (defaults to today)
    """
    today = as_of or date.today()
    errors: Dict[str, str] = {}

    client = _text(data, "client")
    if is_blank(client):
        errors["client"] = "Client name is required"
    elif len(client) < CLIENT_MIN_LENGTH:
        errors["client"] = "Client name must be at least 2 characters"
    elif len(client) > CLIENT_MAX_LENGTH:
        errors["client"] = "Client name must be less than 100 characters"

    project = _text(data, "project")
    if is_blank(project):
        errors["project"] = "Project reference is required"
    elif len(project) < REFERENCE_MIN_LENGTH:
        errors["project"] = "Project reference must be at least 2 characters"

    site = _text(data, "site")
    if is_blank(site):
        errors["site"] = "Site location is required for SANAS reporting"
    elif len(site) < REFERENCE_MIN_LENGTH:
        errors["site"] = "Site location must be at least 2 characters"

    start_text = _text(data, "startDate")
    start = parse_date(start_text)
    if is_blank(start_text):
        errors["startDate"] = "Survey start date is required"
    elif start is None:
        errors["startDate"] = "Invalid date format"
    elif start > today + timedelta(days=MAX_SURVEY_DAYS):
        errors["startDate"] = "Start date cannot be more than 1 year in the future"

    end_text = _text(data, "endDate")
    end = parse_date(end_text)
    if is_blank(end_text):
        errors["endDate"] = "Survey end date is required"
    elif end is None:
        errors["endDate"] = "Invalid date format"
    elif start is not None:
        if end < start:
            errors["endDate"] = "End date must be on or after start date"
        elif (end - start).days > MAX_SURVEY_DAYS:
            errors["endDate"] = "Survey duration exceeds 1 year. Please verify dates."

    if is_blank(_text(data, "description")):
        errors["description"] = "Survey description/department is required"

    return FieldValidation(errors)


# =============================================================================
# EQUIPMENT
# =============================================================================

def _check_reference_reading(errors: Dict[str, str], key: str, label: str, value: str, required: str) -> None:
    if is_blank(value):
        errors[key] = required
        return
    level = try_parse_number(value)
    if level is None:
        errors[key] = f"{label} must be a valid number"
    elif not CALIBRATION_CRITERIA.reference_spl_min_db <= level <= CALIBRATION_CRITERIA.reference_spl_max_db:
        errors[key] = f"{label} reading unusual (expected 90-125 dB). Please verify."


def validate_equipment_entry(equipment: Equipment, as_of: Optional[date] = None) -> FieldValidation:
    """
    Validate one equipment entry.

    Calibrators additionally need a current certificate, pre/during/post
    reference readings in 90-125 dB and pre/post drift within 1 dB.
    """
    today = as_of or date.today()
    errors: Dict[str, str] = {}

    if equipment.type == EquipmentType.UNSPECIFIED:
        errors["type"] = "Equipment type is required"

    if is_blank(equipment.name):
        errors["name"] = "Equipment name/model is required"
    elif len(equipment.name) < 2:
        errors["name"] = "Equipment name must be at least 2 characters"

    if is_blank(equipment.serial):
        errors["serial"] = "Serial number is required for equipment traceability"

    if not equipment.is_calibrator:
        return FieldValidation(errors)

    certificate = parse_date(equipment.calibration_date)
    if is_blank(equipment.calibration_date):
        errors["calibrationDate"] = "Calibration certificate date is required (SANS 10083)"
    elif certificate is None:
        errors["calibrationDate"] = "Invalid calibration date"
    elif certificate > today:
        errors["calibrationDate"] = "Calibration date cannot be in the future"
    elif add_years(certificate, CALIBRATION_CRITERIA.certificate_validity_years) < today:
        errors["calibrationDate"] = (
            "WARNING: Calibration certificate may be expired (>1 year old). "
            "Verify calibration is current per SANS 10083."
        )

    _check_reference_reading(errors, "pre", "Pre-calibration", equipment.pre,
                             "Pre-calibration reading is required for traceability")
    _check_reference_reading(errors, "during", "During-calibration", equipment.during,
                             "During-calibration reading is required")
    _check_reference_reading(errors, "post", "Post-calibration", equipment.post,
                             "Post-calibration reading is required for traceability")

    pre = try_parse_number(equipment.pre)
    post = try_parse_number(equipment.post)
    if pre is not None and post is not None:
        drift = abs(pre - post)
        if drift > CALIBRATION_CRITERIA.drift_limit_db:
            errors["calibrationDrift"] = (
                f"ALERT: Calibration drift of {drift:.1f} dB exceeds acceptable limit "
                "(±1 dB per SANS 10083). Calibrator may require servicing."
            )

    if not is_blank(equipment.area_ref):
        area_ref = try_parse_number(equipment.area_ref)
        if area_ref is None:
            errors["areaRef"] = "Area reference must be a valid number"
        elif not 0 <= area_ref <= AREA_REF_MAX_DB:
            errors["areaRef"] = "Area reference value out of range (0-140 dB)"

    return FieldValidation(errors)


def validate_equipment_list(equipment: Sequence[Equipment]) -> FieldValidation:
    """At least one sound level meter must be registered."""
    errors: Dict[str, str] = {}
    if not equipment:
        errors["equipment"] = "At least one Sound Level Meter (SLM) is required for SANS 10083 compliance"
    elif not any(eq.is_slm for eq in equipment):
        errors["equipment"] = "At least one Sound Level Meter (SLM) is required. Only calibrators found."
    return FieldValidation(errors)


# =============================================================================
# MEASUREMENTS
# =============================================================================

def validate_noise_reading(noise_level: str, measurement_type: Optional[str] = None) -> FieldValidation:
    """
    Plausibility of a single dB(A) reading.

    Continuous readings above 85 dB(A) get an informational note that
    does not invalidate the reading.
    """
    errors: Dict[str, str] = {}

    if is_blank(noise_level):
        errors["noiseLevel"] = "Noise level is required"
        return FieldValidation(errors)

    level = try_parse_number(noise_level)
    if level is None:
        errors["noiseLevel"] = "Noise level must be a valid number"
    elif level < 0:
        errors["noiseLevel"] = "Noise level cannot be negative"
    elif level < READING_MIN_DB:
        errors["noiseLevel"] = (
            "Unusually low noise level (< 30 dB(A)). Typical ambient is 30-45 dB(A). Please verify."
        )
    elif level > READING_MAX_DB:
        errors["noiseLevel"] = (
            "CRITICAL: Noise level exceeds 140 dB(A) pain threshold. "
            "Verify measurement and equipment calibration."
        )
    elif level > READING_VERY_HIGH_DB:
        errors["noiseLevel"] = "WARNING: Extremely high noise level (> 120 dB(A)). Verify measurement is correct."
    elif level > SANS_EXPOSURE.action_level_db and measurement_type == "continuous":
        errors["noiseLevelInfo"] = (
            "Noise level exceeds 85 dB(A) exposure limit. Area requires noise zone designation."
        )

    return FieldValidation(errors)


def validate_exposure_time(exposure_time: str, shift_duration: str) -> FieldValidation:
    """Exposure time must be within (0, 24] hours and not exceed the shift."""
    errors: Dict[str, str] = {}
    exposure = try_parse_number(exposure_time)
    shift = try_parse_number(shift_duration)

    if is_blank(exposure_time):
        errors["exposureTime"] = "Exposure time is required"
    elif exposure is None:
        errors["exposureTime"] = "Exposure time must be a valid number"
    elif exposure <= 0:
        errors["exposureTime"] = "Exposure time must be greater than 0"
    elif exposure > MAX_EXPOSURE_HOURS:
        errors["exposureTime"] = "Exposure time cannot exceed 24 hours"

    if exposure is not None and shift is not None and exposure > shift:
        errors["exposureTime"] = (
            f"Exposure time ({_format_number(exposure)}h) exceeds shift duration "
            f"({_format_number(shift)}h). Please verify."
        )

    return FieldValidation(errors)
