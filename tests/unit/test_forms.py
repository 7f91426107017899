"""
Unit tests for data entry form validators.
"""

import copy

import pytest

from conftest import AS_OF, CALIBRATOR, SLM

from noisesurvey.core.models import Equipment
from noisesurvey.forms import (
    FieldValidation,
    validate_equipment_entry,
    validate_equipment_list,
    validate_exposure_time,
    validate_noise_reading,
    validate_survey_info,
)


@pytest.fixture
def survey_info():
    return {
        "client": "Acme Mining",
        "project": "NS-2025-01",
        "site": "Rustenburg Shaft 3",
        "startDate": "2025-05-01",
        "endDate": "2025-05-03",
        "description": "Annual noise survey",
    }


def calibrator(**changes):
    data = copy.deepcopy(CALIBRATOR)
    data.update(changes)
    return Equipment.from_dict(data)


class TestFieldValidation:
    """Tests for the validation result."""

    def test_info_keys_do_not_invalidate(self):
        assert FieldValidation({"noiseLevelInfo": "note"}).is_valid
        assert not FieldValidation({"noiseLevel": "bad"}).is_valid

    def test_to_dict(self):
        assert FieldValidation().to_dict() == {"is_valid": True, "errors": {}}


# =============================================================================
# SURVEY INFORMATION
# =============================================================================

class TestSurveyInfo:
    """Tests for the survey information step."""

    def test_complete_form(self, survey_info):
        assert validate_survey_info(survey_info, AS_OF).errors == {}

    def test_required_fields(self):
        errors = validate_survey_info({}, AS_OF).errors
        assert errors == {
            "client": "Client name is required",
            "project": "Project reference is required",
            "site": "Site location is required for SANAS reporting",
            "startDate": "Survey start date is required",
            "endDate": "Survey end date is required",
            "description": "Survey description/department is required",
        }

    def test_lengths(self, survey_info):
        survey_info.update(client="A", project="P", site="S")
        errors = validate_survey_info(survey_info, AS_OF).errors
        assert errors["client"] == "Client name must be at least 2 characters"
        assert errors["project"] == "Project reference must be at least 2 characters"
        assert errors["site"] == "Site location must be at least 2 characters"

        survey_info["client"] = "x" * 101
        assert validate_survey_info(survey_info, AS_OF).errors["client"] == (
            "Client name must be less than 100 characters"
        )

    def test_bad_dates(self, survey_info):
        survey_info.update(startDate="01/05/2025", endDate="soon")
        errors = validate_survey_info(survey_info, AS_OF).errors
        assert errors["startDate"] == "Invalid date format"
        assert errors["endDate"] == "Invalid date format"

    def test_end_before_start(self, survey_info):
        survey_info["endDate"] = "2025-04-30"
        assert validate_survey_info(survey_info, AS_OF).errors == {
            "endDate": "End date must be on or after start date"
        }

    def test_same_day_survey(self, survey_info):
        survey_info["endDate"] = survey_info["startDate"]
        assert validate_survey_info(survey_info, AS_OF).is_valid

    def test_long_survey(self, survey_info):
        survey_info["endDate"] = "2026-05-02"
        assert validate_survey_info(survey_info, AS_OF).errors["endDate"] == (
            "Survey duration exceeds 1 year. Please verify dates."
        )

    def test_far_future_start(self, survey_info):
        survey_info.update(startDate="2026-06-02", endDate="2026-06-03")
        assert validate_survey_info(survey_info, AS_OF).errors == {
            "startDate": "Start date cannot be more than 1 year in the future"
        }


# =============================================================================
# EQUIPMENT
# =============================================================================

class TestEquipmentEntry:
    """Tests for single equipment entries."""

    def test_valid_slm(self):
        assert validate_equipment_entry(Equipment.from_dict(SLM), AS_OF).is_valid

    def test_valid_calibrator(self):
        assert validate_equipment_entry(calibrator(), AS_OF).errors == {}

    def test_identity_fields(self):
        errors = validate_equipment_entry(Equipment.from_dict({"id": "x", "name": "Q"}), AS_OF).errors
        assert errors == {
            "type": "Equipment type is required",
            "name": "Equipment name must be at least 2 characters",
            "serial": "Serial number is required for equipment traceability",
        }

    def test_calibrator_certificate(self):
        assert validate_equipment_entry(calibrator(calibrationDate=""), AS_OF).errors == {
            "calibrationDate": "Calibration certificate date is required (SANS 10083)"
        }
        assert validate_equipment_entry(calibrator(calibrationDate="2025-13-01"), AS_OF).errors == {
            "calibrationDate": "Invalid calibration date"
        }
        assert validate_equipment_entry(calibrator(calibrationDate="2025-06-02"), AS_OF).errors == {
            "calibrationDate": "Calibration date cannot be in the future"
        }
        old = validate_equipment_entry(calibrator(calibrationDate="2024-05-01"), AS_OF)
        assert old.errors["calibrationDate"].startswith("WARNING: Calibration certificate may be expired")

    def test_reference_readings(self):
        errors = validate_equipment_entry(calibrator(pre="", during="abc", post="80"), AS_OF).errors
        assert errors == {
            "pre": "Pre-calibration reading is required for traceability",
            "during": "During-calibration must be a valid number",
            "post": "Post-calibration reading unusual (expected 90-125 dB). Please verify.",
        }

    def test_drift_alert(self):
        errors = validate_equipment_entry(calibrator(post="115.5"), AS_OF).errors
        assert errors == {
            "calibrationDrift": "ALERT: Calibration drift of 1.5 dB exceeds acceptable limit "
                                "(±1 dB per SANS 10083). Calibrator may require servicing."
        }

    def test_area_reference(self):
        assert validate_equipment_entry(calibrator(areaRef="x"), AS_OF).errors == {
            "areaRef": "Area reference must be a valid number"
        }
        assert validate_equipment_entry(calibrator(areaRef="150"), AS_OF).errors == {
            "areaRef": "Area reference value out of range (0-140 dB)"
        }
        assert validate_equipment_entry(calibrator(areaRef="94"), AS_OF).is_valid


class TestEquipmentList:
    """Tests for the equipment list requirement."""

    def test_needs_an_slm(self):
        assert not validate_equipment_list([]).is_valid
        assert validate_equipment_list([calibrator()]).errors == {
            "equipment": "At least one Sound Level Meter (SLM) is required. Only calibrators found."
        }
        assert validate_equipment_list([Equipment.from_dict(SLM)]).is_valid


# =============================================================================
# MEASUREMENTS
# =============================================================================

class TestNoiseReading:
    """Tests for single reading plausibility."""

    @pytest.mark.parametrize("value, message", [
        ("", "Noise level is required"),
        ("loud", "Noise level must be a valid number"),
        ("-5", "Noise level cannot be negative"),
        ("25", "Unusually low noise level"),
        ("141", "CRITICAL:"),
        ("125", "WARNING: Extremely high"),
    ])
    def test_invalid_readings(self, value, message):
        result = validate_noise_reading(value)
        assert not result.is_valid
        assert result.errors["noiseLevel"].startswith(message)

    def test_normal_reading(self):
        assert validate_noise_reading("92").errors == {}

    def test_continuous_over_85_is_informational(self):
        result = validate_noise_reading("92", "continuous")
        assert result.is_valid
        assert set(result.errors) == {"noiseLevelInfo"}


class TestExposureTime:
    """Tests for exposure time entry."""

    @pytest.mark.parametrize("value, message", [
        ("", "Exposure time is required"),
        ("abc", "Exposure time must be a valid number"),
        ("0", "Exposure time must be greater than 0"),
        ("25", "Exposure time cannot exceed 24 hours"),
    ])
    def test_invalid(self, value, message):
        assert validate_exposure_time(value, "").errors == {"exposureTime": message}

    def test_exceeds_shift(self):
        assert validate_exposure_time("10", "8").errors == {
            "exposureTime": "Exposure time (10h) exceeds shift duration (8h). Please verify."
        }

    def test_within_shift(self):
        assert validate_exposure_time("7.5", "8").is_valid
