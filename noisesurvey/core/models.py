"""
noisesurvey Survey Data Model

Entity dataclasses for a noise survey snapshot. The surrounding
application owns the snapshot and passes it in; calculations read it and
never mutate it (entities are frozen, changes go through
``dataclasses.replace``).

``from_dict`` accepts the form layer's camelCase JSON and tolerates
missing keys; ``to_dict`` emits the same shape.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Type, TypeVar
import logging

from .area_key import AreaKey
from .coercion import parse_number
from .constants import AUDIOGRAM_FREQUENCIES
from .enums import (
    AudiometryTestType,
    DeviceCondition,
    Ear,
    EquipmentType,
    Gender,
)

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)
T = TypeVar("T")


class SurveyDataError(ValueError):
    """Raised when a payload cannot be read as a survey snapshot at all."""


def _enum(enum_cls: Type[E], value: Any, default: E) -> E:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        return default


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _optional_text(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return _text(value)


def _text_list(values: Any) -> List[str]:
    if not isinstance(values, (list, tuple)):
        return []
    return [_text(v) for v in values]


def _records(values: Any, parse: Callable[[Mapping[str, Any]], T]) -> List[T]:
    if not isinstance(values, (list, tuple)):
        return []
    return [parse(v) for v in values if isinstance(v, Mapping)]


# =============================================================================
# EQUIPMENT
# =============================================================================

@dataclass(frozen=True)
class Equipment:
    """Sound level meter or acoustic calibrator used in the survey."""
    id: str
    type: EquipmentType = EquipmentType.UNSPECIFIED
    name: str = ""
    serial: str = ""
    weighting: str = ""
    response_impulse: str = ""
    response_leq: str = ""

    # Field calibration readings (dB, as entered)
    pre: str = ""
    during: str = ""
    post: str = ""
    area_ref: str = ""

    calibration_date: Optional[str] = None  # Certificate date (calibrators)
    start_date: Optional[str] = None
    end_date: Optional[str] = None

    @property
    def is_slm(self) -> bool:
        return self.type == EquipmentType.SLM

    @property
    def is_calibrator(self) -> bool:
        return self.type == EquipmentType.CALIBRATOR

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "name": self.name,
            "serial": self.serial,
            "weighting": self.weighting,
            "responseImpulse": self.response_impulse,
            "responseLEQ": self.response_leq,
            "pre": self.pre,
            "during": self.during,
            "post": self.post,
            "areaRef": self.area_ref,
            "calibrationDate": self.calibration_date,
            "startDate": self.start_date,
            "endDate": self.end_date,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Equipment":
        return cls(
            id=_text(data.get("id")),
            type=_enum(EquipmentType, data.get("type", ""), EquipmentType.UNSPECIFIED),
            name=_text(data.get("name")),
            serial=_text(data.get("serial")),
            weighting=_text(data.get("weighting")),
            response_impulse=_text(data.get("responseImpulse")),
            response_leq=_text(data.get("responseLEQ")),
            pre=_text(data.get("pre")),
            during=_text(data.get("during")),
            post=_text(data.get("post")),
            area_ref=_text(data.get("areaRef")),
            calibration_date=_optional_text(data.get("calibrationDate")),
            start_date=_optional_text(data.get("startDate")),
            end_date=_optional_text(data.get("endDate")),
        )


# =============================================================================
# AREA TREE
# =============================================================================

@dataclass(frozen=True)
class Area:
    """Node of the area tree (main, sub or sub-sub area)."""
    id: str
    name: str
    sub_areas: List["Area"] = field(default_factory=list)
    details_completed: bool = False
    process: str = ""
    notes: str = ""

    @property
    def is_leaf(self) -> bool:
        return not self.sub_areas

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "subAreas": [a.to_dict() for a in self.sub_areas],
            "detailsCompleted": self.details_completed,
            "process": self.process,
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Area":
        return cls(
            id=_text(data.get("id")),
            name=_text(data.get("name")),
            sub_areas=_records(data.get("subAreas"), Area.from_dict),
            details_completed=bool(data.get("detailsCompleted", False)),
            process=_text(data.get("process")),
            notes=_text(data.get("notes")),
        )


# =============================================================================
# PER-AREA RECORDS
# =============================================================================

@dataclass(frozen=True)
class NoiseSource:
    """Noise source logged for an area."""
    source: str = ""
    description: str = ""
    mit: str = ""
    type: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "description": self.description,
            "mit": self.mit,
            "type": self.type,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "NoiseSource":
        return cls(
            source=_text(data.get("source")),
            description=_text(data.get("description")),
            mit=_text(data.get("mit")),
            type=_text(data.get("type")),
        )


@dataclass(frozen=True)
class Measurement:
    """Sound measurement taken in an area."""
    shift_duration: str = ""  # hours
    exposure_time: str = ""  # hours
    slm_id: str = ""
    calibrator_id: str = ""
    measurement_count: str = ""
    area_leq: List[str] = field(default_factory=list)
    readings: List[str] = field(default_factory=list)  # dB(A)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "shiftDuration": self.shift_duration,
            "exposureTime": self.exposure_time,
            "slmId": self.slm_id,
            "calibratorId": self.calibrator_id,
            "measurementCount": self.measurement_count,
            "areaLeq": list(self.area_leq),
            "readings": list(self.readings),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Measurement":
        return cls(
            shift_duration=_text(data.get("shiftDuration")),
            exposure_time=_text(data.get("exposureTime")),
            slm_id=_text(data.get("slmId")),
            calibrator_id=_text(data.get("calibratorId")),
            measurement_count=_text(data.get("measurementCount")),
            area_leq=_text_list(data.get("areaLeq")),
            readings=_text_list(data.get("readings")),
        )


@dataclass(frozen=True)
class HearingProtectionDevice:
    """Hearing protection device (HPD) issued in an area."""
    type: str = ""
    manufacturer: str = ""
    snr_or_nrr: str = "SNR"  # "SNR" or "NRR"
    snr_value: str = ""  # rating in dB, as entered
    condition: DeviceCondition = DeviceCondition.UNSPECIFIED
    condition_comment: str = ""
    training: str = "Yes"
    fitting: str = "Yes"
    maintenance: str = "Yes"

    @property
    def is_good_condition(self) -> bool:
        return self.condition == DeviceCondition.GOOD

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "manufacturer": self.manufacturer,
            "snrOrNrr": self.snr_or_nrr,
            "snrValue": self.snr_value,
            "condition": self.condition.value,
            "conditionComment": self.condition_comment,
            "training": self.training,
            "fitting": self.fitting,
            "maintenance": self.maintenance,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "HearingProtectionDevice":
        return cls(
            type=_text(data.get("type")),
            manufacturer=_text(data.get("manufacturer")),
            snr_or_nrr=_text(data.get("snrOrNrr", "SNR")),
            snr_value=_text(data.get("snrValue")),
            condition=_enum(DeviceCondition, data.get("condition", ""), DeviceCondition.UNSPECIFIED),
            condition_comment=_text(data.get("conditionComment")),
            training=_text(data.get("training", "Yes")),
            fitting=_text(data.get("fitting", "Yes")),
            maintenance=_text(data.get("maintenance", "Yes")),
        )


@dataclass(frozen=True)
class Controls:
    """Engineering and administrative noise controls documented for an area."""
    engineering: str = ""
    admin_controls: List[str] = field(default_factory=list)
    custom_admin: str = ""

    @property
    def has_engineering(self) -> bool:
        return bool(self.engineering.strip())

    @property
    def has_admin(self) -> bool:
        return bool(self.admin_controls) or bool(self.custom_admin.strip())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "engineering": self.engineering,
            "adminControls": list(self.admin_controls),
            "customAdmin": self.custom_admin,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Controls":
        return cls(
            engineering=_text(data.get("engineering")),
            admin_controls=_text_list(data.get("adminControls")),
            custom_admin=_text(data.get("customAdmin")),
        )


@dataclass(frozen=True)
class Exposure:
    """Exposure notes and prohibited-area flags for an area."""
    exposure: str = ""
    exposure_detail: str = ""
    prohibited: str = ""
    prohibited_detail: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "exposure": self.exposure,
            "exposureDetail": self.exposure_detail,
            "prohibited": self.prohibited,
            "prohibitedDetail": self.prohibited_detail,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Exposure":
        return cls(
            exposure=_text(data.get("exposure")),
            exposure_detail=_text(data.get("exposureDetail")),
            prohibited=_text(data.get("prohibited")),
            prohibited_detail=_text(data.get("prohibitedDetail")),
        )


# =============================================================================
# AUDIOMETRY
# =============================================================================

@dataclass(frozen=True)
class EarThresholds:
    """Hearing thresholds for one frequency (dB HL)."""
    left: float = 0.0
    right: float = 0.0

    def get(self, ear: Ear) -> float:
        return self.left if Ear(ear) == Ear.LEFT else self.right

    def to_dict(self) -> Dict[str, float]:
        return {"left": self.left, "right": self.right}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EarThresholds":
        return cls(
            left=parse_number(data.get("left")),
            right=parse_number(data.get("right")),
        )


@dataclass(frozen=True)
class AudiogramData:
    """
    Pure tone audiogram: frequency (Hz) -> left/right thresholds.

    A complete audiogram covers all of AUDIOGRAM_FREQUENCIES; missing
    frequencies read as 0 dB HL and are reported by validate_audiogram.
    """
    thresholds: Dict[int, EarThresholds] = field(default_factory=dict)

    def threshold(self, frequency: int, ear: Ear) -> float:
        entry = self.thresholds.get(frequency)
        if entry is None:
            return 0.0
        return entry.get(ear)

    def has_frequency(self, frequency: int) -> bool:
        return frequency in self.thresholds

    @classmethod
    def from_values(
        cls,
        values: Mapping[int, Tuple[float, float]],
    ) -> "AudiogramData":
        """Build from ``{frequency: (left, right)}``."""
        return cls(
            thresholds={int(f): EarThresholds(float(l), float(r)) for f, (l, r) in values.items()}
        )

    def to_dict(self) -> Dict[str, Any]:
        return {str(f): self.thresholds[f].to_dict() for f in sorted(self.thresholds)}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AudiogramData":
        thresholds: Dict[int, EarThresholds] = {}
        for key, value in data.items():
            try:
                frequency = int(key)
            except (TypeError, ValueError):
                logger.warning(f"Ignoring audiogram entry with non-numeric frequency: {key!r}")
                continue
            if isinstance(value, Mapping):
                thresholds[frequency] = EarThresholds.from_dict(value)
        return cls(thresholds=thresholds)


@dataclass(frozen=True)
class AudiometryTest:
    """Single audiometric test result."""
    id: str
    test_type: AudiometryTestType
    test_date: str
    audiogram: AudiogramData = field(default_factory=AudiogramData)
    tester_name: str = ""
    tester_qualification: str = ""
    calibration_date: str = ""  # Audiometer calibration date
    notes: str = ""

    @property
    def is_baseline(self) -> bool:
        return self.test_type == AudiometryTestType.BASELINE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "testType": self.test_type.value,
            "testDate": self.test_date,
            "audiogram": self.audiogram.to_dict(),
            "testerName": self.tester_name,
            "testerQualification": self.tester_qualification,
            "calibrationDate": self.calibration_date,
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AudiometryTest":
        audiogram = data.get("audiogram")
        return cls(
            id=_text(data.get("id")),
            test_type=_enum(AudiometryTestType, data.get("testType"), AudiometryTestType.ANNUAL),
            test_date=_text(data.get("testDate")),
            audiogram=AudiogramData.from_dict(audiogram) if isinstance(audiogram, Mapping) else AudiogramData(),
            tester_name=_text(data.get("testerName")),
            tester_qualification=_text(data.get("testerQualification")),
            calibration_date=_text(data.get("calibrationDate")),
            notes=_text(data.get("notes")),
        )


@dataclass(frozen=True)
class Employee:
    """
    Employee enrolled in the hearing conservation programme.

    ``has_sts`` is derived from the test history and sticky once set;
    update it through ``apply_new_test`` rather than directly.
    """
    id: str
    first_name: str = ""
    last_name: str = ""
    employee_number: str = ""
    date_of_birth: str = ""
    gender: Gender = Gender.OTHER
    job_title: str = ""

    baseline_test: Optional[AudiometryTest] = None
    periodic_tests: List[AudiometryTest] = field(default_factory=list)

    has_sts: bool = False
    sts_date: Optional[str] = None  # First detection only
    sts_details: Optional[str] = None

    @property
    def display_name(self) -> str:
        """'First Last (number)' as used in issue messages."""
        return f"{self.first_name} {self.last_name} ({self.employee_number})"

    @property
    def latest_periodic_test(self) -> Optional[AudiometryTest]:
        return self.periodic_tests[-1] if self.periodic_tests else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "employeeNumber": self.employee_number,
            "dateOfBirth": self.date_of_birth,
            "gender": self.gender.value,
            "jobTitle": self.job_title,
            "baselineTest": self.baseline_test.to_dict() if self.baseline_test else None,
            "periodicTests": [t.to_dict() for t in self.periodic_tests],
            "hasSTS": self.has_sts,
            "stsDate": self.sts_date,
            "stsDetails": self.sts_details,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Employee":
        baseline = data.get("baselineTest")
        return cls(
            id=_text(data.get("id")),
            first_name=_text(data.get("firstName")),
            last_name=_text(data.get("lastName")),
            employee_number=_text(data.get("employeeNumber")),
            date_of_birth=_text(data.get("dateOfBirth")),
            gender=_enum(Gender, data.get("gender"), Gender.OTHER),
            job_title=_text(data.get("jobTitle")),
            baseline_test=AudiometryTest.from_dict(baseline) if isinstance(baseline, Mapping) else None,
            periodic_tests=_records(data.get("periodicTests"), AudiometryTest.from_dict),
            has_sts=bool(data.get("hasSTS", False)),
            sts_date=_optional_text(data.get("stsDate")),
            sts_details=_optional_text(data.get("stsDetails")),
        )


# =============================================================================
# SURVEY SNAPSHOT
# =============================================================================

# Area-keyed maps of SurveyData, in wire order: (attribute, JSON key)
AREA_MAP_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("noise_sources_by_area", "noiseSourcesByArea"),
    ("measurements_by_area", "measurementsByArea"),
    ("controls_by_area", "controlsByArea"),
    ("hearing_protection_devices", "hearingProtectionDevices"),
    ("hearing_issued_status", "hearingIssuedStatus"),
    ("exposures_by_area", "exposuresByArea"),
    ("comments_by_area", "commentsByArea"),
    ("employees_by_area", "employeesByArea"),
)


def _parse_area_map(
    raw: Any,
    parse_value: Callable[[Any], T],
    map_name: str,
) -> Dict[AreaKey, T]:
    if not isinstance(raw, Mapping):
        return {}
    result: Dict[AreaKey, T] = {}
    for key, value in raw.items():
        try:
            area_key = AreaKey.coerce(key)
        except ValueError as e:
            logger.warning(f"Dropping {map_name} entry with invalid area key: {e}")
            continue
        if area_key in result:
            logger.warning(f"Duplicate {map_name} entries for area {area_key.to_key()}; keeping {key!r}")
        result[area_key] = parse_value(value)
    return result


def _dump_area_map(mapping: Mapping[AreaKey, Any], dump_value: Callable[[Any], Any]) -> Dict[str, Any]:
    return {key.to_key(): dump_value(value) for key, value in sorted(mapping.items())}


def _list_of(parse: Callable[[Mapping[str, Any]], T]) -> Callable[[Any], List[T]]:
    return lambda value: _records(value, parse)


def _record_of(parse: Callable[[Mapping[str, Any]], T], empty: Callable[[], T]) -> Callable[[Any], T]:
    return lambda value: parse(value) if isinstance(value, Mapping) else empty()


_AREA_MAP_PARSERS: Dict[str, Callable[[Any], Any]] = {
    "noise_sources_by_area": _list_of(NoiseSource.from_dict),
    "measurements_by_area": _list_of(Measurement.from_dict),
    "controls_by_area": _record_of(Controls.from_dict, Controls),
    "hearing_protection_devices": _list_of(HearingProtectionDevice.from_dict),
    "hearing_issued_status": _text,
    "exposures_by_area": _record_of(Exposure.from_dict, Exposure),
    "comments_by_area": _text,
    "employees_by_area": _list_of(Employee.from_dict),
}


def _dump_value(value: Any) -> Any:
    if isinstance(value, list):
        return [v.to_dict() for v in value]
    if hasattr(value, "to_dict"):
        return value.to_dict()
    return value


@dataclass(frozen=True)
class SurveyData:
    """Root snapshot of a noise survey."""

    # Metadata
    id: str = ""
    client: str = ""
    project: str = ""
    site: str = ""
    survey_type: str = ""
    start_date: str = ""
    end_date: str = ""
    description: str = ""
    status: str = "In Progress"
    normal_conditions: str = "Yes"
    comments: str = ""
    created_at: Optional[str] = None
    completed_at: Optional[str] = None
    verification_comment: Optional[str] = None

    equipment: List[Equipment] = field(default_factory=list)
    areas: List[Area] = field(default_factory=list)

    # Area-keyed data
    noise_sources_by_area: Dict[AreaKey, List[NoiseSource]] = field(default_factory=dict)
    measurements_by_area: Dict[AreaKey, List[Measurement]] = field(default_factory=dict)
    controls_by_area: Dict[AreaKey, Controls] = field(default_factory=dict)
    hearing_protection_devices: Dict[AreaKey, List[HearingProtectionDevice]] = field(default_factory=dict)
    hearing_issued_status: Dict[AreaKey, str] = field(default_factory=dict)  # "Yes" / "No"
    exposures_by_area: Dict[AreaKey, Exposure] = field(default_factory=dict)
    comments_by_area: Dict[AreaKey, str] = field(default_factory=dict)
    employees_by_area: Dict[AreaKey, List[Employee]] = field(default_factory=dict)

    def measurements_for(self, key: AreaKey) -> List[Measurement]:
        return self.measurements_by_area.get(key, [])

    def devices_for(self, key: AreaKey) -> List[HearingProtectionDevice]:
        return self.hearing_protection_devices.get(key, [])

    def employees_for(self, key: AreaKey) -> List[Employee]:
        return self.employees_by_area.get(key, [])

    def equipment_ids(self) -> set:
        return {eq.id for eq in self.equipment}

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "client": self.client,
            "project": self.project,
            "site": self.site,
            "surveyType": self.survey_type,
            "startDate": self.start_date,
            "endDate": self.end_date,
            "description": self.description,
            "status": self.status,
            "normalConditions": self.normal_conditions,
            "comments": self.comments,
            "createdAt": self.created_at,
            "completedAt": self.completed_at,
            "verificationComment": self.verification_comment,
            "equipment": [eq.to_dict() for eq in self.equipment],
            "areas": [a.to_dict() for a in self.areas],
        }
        for attr, json_key in AREA_MAP_FIELDS:
            data[json_key] = _dump_area_map(getattr(self, attr), _dump_value)
        return data

    @classmethod
    def from_dict(cls, data: Any) -> "SurveyData":
        """
        Read a survey snapshot.

        Raises:
            SurveyDataError: if ``data`` is not a JSON object
        """
        if not isinstance(data, Mapping):
            raise SurveyDataError(
                f"Survey snapshot must be a JSON object, got {type(data).__name__}"
            )

        maps = {
            attr: _parse_area_map(data.get(json_key), _AREA_MAP_PARSERS[attr], json_key)
            for attr, json_key in AREA_MAP_FIELDS
        }

        return cls(
            id=_text(data.get("id")),
            client=_text(data.get("client")),
            project=_text(data.get("project")),
            site=_text(data.get("site")),
            survey_type=_text(data.get("surveyType")),
            start_date=_text(data.get("startDate")),
            end_date=_text(data.get("endDate")),
            description=_text(data.get("description")),
            status=_text(data.get("status", "In Progress")),
            normal_conditions=_text(data.get("normalConditions", "Yes")),
            comments=_text(data.get("comments")),
            created_at=_optional_text(data.get("createdAt")),
            completed_at=_optional_text(data.get("completedAt")),
            verification_comment=_optional_text(data.get("verificationComment")),
            equipment=_records(data.get("equipment"), Equipment.from_dict),
            areas=_records(data.get("areas"), Area.from_dict),
            **maps,
        )
