"""
noisesurvey Core Domain Model

Survey entities, enumerations, SANS 10083 constants, input coercion and
area tree addressing shared by every engine.
"""

from .enums import (
    EquipmentType,
    NoiseZone,
    ComplianceLevel,
    ComplianceSeverity,
    DisplaySeverity,
    RatingType,
    DeviceCondition,
    AdequacyLevel,
    Ear,
    AffectedEar,
    STSSeverity,
    HearingLossClass,
    AudiometryTestType,
    Gender,
    SurveyStatus,
)

from .constants import (
    SANS_EXPOSURE,
    HPD_CRITERIA,
    AUDIOMETRY_CRITERIA,
    CALIBRATION_CRITERIA,
    ExposureCriteria,
    ProtectionCriteria,
    AudiometryCriteria,
    CalibrationCriteria,
    AUDIOGRAM_FREQUENCIES,
    STS_FREQUENCIES,
    PTA_FREQUENCIES,
)

from .area_key import AreaKey, rekey_after_delete

from .models import (
    SurveyDataError,
    Equipment,
    Area,
    NoiseSource,
    Measurement,
    HearingProtectionDevice,
    Controls,
    Exposure,
    EarThresholds,
    AudiogramData,
    AudiometryTest,
    Employee,
    SurveyData,
    AREA_MAP_FIELDS,
)

from .area_tree import (
    AreaNotFoundError,
    LeafArea,
    collect_leaf_areas,
    find_area,
    area_exists,
    area_name,
    delete_area,
)

__all__ = [
    # Enumerations
    "EquipmentType",
    "NoiseZone",
    "ComplianceLevel",
    "ComplianceSeverity",
    "DisplaySeverity",
    "RatingType",
    "DeviceCondition",
    "AdequacyLevel",
    "Ear",
    "AffectedEar",
    "STSSeverity",
    "HearingLossClass",
    "AudiometryTestType",
    "Gender",
    "SurveyStatus",

    # Constants
    "SANS_EXPOSURE",
    "HPD_CRITERIA",
    "AUDIOMETRY_CRITERIA",
    "CALIBRATION_CRITERIA",
    "ExposureCriteria",
    "ProtectionCriteria",
    "AudiometryCriteria",
    "CalibrationCriteria",
    "AUDIOGRAM_FREQUENCIES",
    "STS_FREQUENCIES",
    "PTA_FREQUENCIES",

    # Area keys
    "AreaKey",
    "rekey_after_delete",

    # Models
    "SurveyDataError",
    "Equipment",
    "Area",
    "NoiseSource",
    "Measurement",
    "HearingProtectionDevice",
    "Controls",
    "Exposure",
    "EarThresholds",
    "AudiogramData",
    "AudiometryTest",
    "Employee",
    "SurveyData",
    "AREA_MAP_FIELDS",

    # Area tree
    "AreaNotFoundError",
    "LeafArea",
    "collect_leaf_areas",
    "find_area",
    "area_exists",
    "area_name",
    "delete_area",
]
