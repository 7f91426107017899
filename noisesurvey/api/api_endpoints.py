"""
api/api_endpoints.py - FastAPI endpoints for the noise survey engines

Provides REST endpoints for live single-area and single-employee feedback
and for whole-survey validation. Payloads use the survey JSON shapes
(camelCase keys, area keys as JSON path strings).
"""

from __future__ import annotations
from datetime import date
from typing import Any, Dict, List, Optional, Union
import logging

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from ..audiometry.calculators import detect_sts, get_audiometry_summary, validate_audiogram
from ..audiometry.reducers import apply_new_test
from ..bootstrap.config import ValidationConfig
from ..compliance.engine import SurveyValidationEngine
from ..core.area_key import AreaKey
from ..core.area_tree import AreaNotFoundError, delete_area
from ..core.models import (
    AudiogramData,
    AudiometryTest,
    Employee,
    HearingProtectionDevice,
    Measurement,
    SurveyData,
    SurveyDataError,
)
from ..exposure.calculators import summarize_measurement, summarize_readings
from ..protection.calculators import (
    assess_devices,
    get_protection_summary,
    recommend_best_device,
)

logger = logging.getLogger("api.api_endpoints")


# =============================================================================
# API MODELS (Pydantic)
# =============================================================================

class SurveyValidateRequest(BaseModel):
    """Request model for whole-survey validation."""
    survey: Dict[str, Any] = Field(description="Survey snapshot (camelCase JSON)")
    as_of: Optional[date] = Field(default=None, description="Reference date for date checks")


class AreaDeleteRequest(BaseModel):
    """Request model for area deletion."""
    survey: Dict[str, Any] = Field(description="Survey snapshot (camelCase JSON)")
    area_key: Union[str, Dict[str, Optional[int]]] = Field(
        description='Area path, e.g. {"main": 0, "sub": 1} or its key string',
    )


class ReadingsRequest(BaseModel):
    """Request model for exposure from raw readings."""
    readings: List[Union[float, str]] = Field(description="LAeq readings in dB(A)")
    exposure_hours: float = Field(default=8.0, gt=0, le=24, description="Daily exposure time (h)")
    shift_hours: Optional[float] = Field(default=None, gt=0, le=24, description="Shift duration (h)")


class MeasurementRequest(BaseModel):
    """Request model for exposure of one recorded measurement."""
    measurement: Dict[str, Any]


class ProtectionRequest(BaseModel):
    """Request model for hearing protection assessment."""
    actual_lex8h: float = Field(description="Unprotected LEX,8h in dB(A)")
    devices: List[Dict[str, Any]] = Field(default_factory=list)


class EmployeeRequest(BaseModel):
    """Request model for an employee audiometry summary."""
    employee: Dict[str, Any]
    as_of: Optional[date] = None


class STSRequest(BaseModel):
    """Request model for standard threshold shift detection."""
    baseline: Dict[str, Any] = Field(description="Baseline audiogram")
    current: Dict[str, Any] = Field(description="Current audiogram")


class AudiogramRequest(BaseModel):
    """Request model for audiogram validation."""
    audiogram: Dict[str, Any]


class NewTestRequest(BaseModel):
    """Request model for recording a new audiometry test."""
    employee: Dict[str, Any]
    test: Dict[str, Any]


# =============================================================================
# API ROUTER
# =============================================================================

router = APIRouter(
    prefix="/api/v1",
    tags=["noise-survey"],
)

_validation_config: Optional[ValidationConfig] = None


def set_validation_config(config: Optional[ValidationConfig]) -> None:
    """Set the thresholds used by survey validation endpoints."""
    global _validation_config
    _validation_config = config


def survey_error_response(error: Exception, code: str) -> Dict[str, Any]:
    """Structured error detail."""
    return {"error": str(error), "code": code}


def _parse_survey(data: Dict[str, Any]) -> SurveyData:
    try:
        return SurveyData.from_dict(data)
    except SurveyDataError as e:
        raise HTTPException(status_code=400, detail=survey_error_response(e, "SURVEY_400"))


# =============================================================================
# SURVEY ENDPOINTS
# =============================================================================

@router.post("/survey/validate")
async def validate_survey_endpoint(request: SurveyValidateRequest):
    """
    Validate a whole survey for SANS 10083 completeness.

    Returns:
        ValidationResult JSON; ``is_valid`` is false when any critical
        issue is found.
    """
    survey = _parse_survey(request.survey)
    result = SurveyValidationEngine(_validation_config).evaluate(survey, request.as_of)
    return result.to_dict()


@router.post("/survey/areas/delete")
async def delete_area_endpoint(request: AreaDeleteRequest):
    """
    Delete an area and its subtree.

    Returns:
        Updated survey JSON with every area-keyed map re-keyed.
    """
    survey = _parse_survey(request.survey)
    try:
        key = AreaKey.coerce(request.area_key)
    except (TypeError, ValueError) as e:
        raise HTTPException(status_code=400, detail=survey_error_response(e, "AREA_400"))

    try:
        updated = delete_area(survey, key)
    except AreaNotFoundError as e:
        raise HTTPException(status_code=404, detail=survey_error_response(e, "AREA_404"))

    return updated.to_dict()


# =============================================================================
# EXPOSURE ENDPOINTS
# =============================================================================

@router.post("/exposure/summary")
async def exposure_summary_endpoint(request: ReadingsRequest):
    """LEX,8h, dose, zone and compliance from raw readings."""
    summary = summarize_readings(request.readings, request.exposure_hours, request.shift_hours)
    return summary.to_dict()


@router.post("/exposure/measurement")
async def measurement_exposure_endpoint(request: MeasurementRequest):
    """Exposure summary for one recorded measurement."""
    return summarize_measurement(Measurement.from_dict(request.measurement)).to_dict()


# =============================================================================
# PROTECTION ENDPOINTS
# =============================================================================

def _devices(request: ProtectionRequest) -> List[HearingProtectionDevice]:
    return [HearingProtectionDevice.from_dict(d) for d in request.devices]


@router.post("/protection/summary")
async def protection_summary_endpoint(request: ProtectionRequest):
    """
    Protection effectiveness of the representative device.

    Returns:
        ProtectionSummary JSON, or null when there is nothing to assess.
    """
    summary = get_protection_summary(request.actual_lex8h, _devices(request))
    return summary.to_dict() if summary else None


@router.post("/protection/recommend")
async def recommend_device_endpoint(request: ProtectionRequest):
    """Best issued device plus the adequacy of every device."""
    devices = _devices(request)
    recommendation = recommend_best_device(devices, request.actual_lex8h)
    return {
        "recommendation": recommendation.to_dict() if recommendation else None,
        "assessments": [a.to_dict() for a in assess_devices(request.actual_lex8h, devices)],
    }


# =============================================================================
# AUDIOMETRY ENDPOINTS
# =============================================================================

@router.post("/audiometry/summary")
async def audiometry_summary_endpoint(request: EmployeeRequest):
    """Hearing conservation summary for one employee."""
    employee = Employee.from_dict(request.employee)
    return get_audiometry_summary(employee, request.as_of).to_dict()


@router.post("/audiometry/sts")
async def detect_sts_endpoint(request: STSRequest):
    """Standard threshold shift between two audiograms."""
    result = detect_sts(
        AudiogramData.from_dict(request.baseline),
        AudiogramData.from_dict(request.current),
    )
    return result.to_dict()


@router.post("/audiometry/validate")
async def validate_audiogram_endpoint(request: AudiogramRequest):
    """Completeness and range check of an audiogram."""
    return validate_audiogram(AudiogramData.from_dict(request.audiogram)).to_dict()


@router.post("/audiometry/tests")
async def add_test_endpoint(request: NewTestRequest):
    """
    Record a new test for an employee.

    Returns:
        Updated employee JSON; the STS flag stays set once detected.
    """
    employee = Employee.from_dict(request.employee)
    test = AudiometryTest.from_dict(request.test)
    updated = apply_new_test(employee, test)
    logger.debug(f"Recorded {test.test_type.value} test for {employee.display_name}")
    return updated.to_dict()


def create_survey_router(config: Optional[ValidationConfig] = None) -> APIRouter:
    """
    Create the survey API router.

    Args:
        config: Validation thresholds for survey validation endpoints

    Returns:
        Configured APIRouter
    """
    set_validation_config(config)
    return router
