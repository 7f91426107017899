"""
noisesurvey Test Configuration and Fixtures

Survey snapshots in their JSON form, built the way the data entry screens
store them (string fields, area maps keyed by JSON area paths).
"""

import copy
from datetime import date
from typing import Any, Dict, List

import pytest

from noisesurvey.core.models import SurveyData


# Reference date for every date-dependent check in the suite
AS_OF = date(2025, 6, 1)

MAIN_0 = '{"main":0}'
MAIN_1 = '{"main":1}'


def audiogram(left: float, right: float = None) -> Dict[str, Dict[str, float]]:
    """Flat audiogram across the standard frequencies."""
    right = left if right is None else right
    return {
        str(f): {"left": left, "right": right}
        for f in (500, 1000, 2000, 3000, 4000, 6000, 8000)
    }


def audiometry_test(test_type: str, test_date: str, left: float, right: float = None) -> Dict[str, Any]:
    return {
        "id": f"{test_type.lower()}-{test_date}",
        "testType": test_type,
        "testDate": test_date,
        "audiogram": audiogram(left, right),
        "testerName": "A. Audiologist",
    }


def employee(number: str = "E001", baseline: Dict[str, Any] = None,
             periodic: List[Dict[str, Any]] = None, **extra) -> Dict[str, Any]:
    data = {
        "id": f"emp-{number}",
        "firstName": "Thandi",
        "lastName": "Mokoena",
        "employeeNumber": number,
        "dateOfBirth": "1980-03-15",
        "gender": "Female",
        "jobTitle": "Operator",
        "baselineTest": baseline,
        "periodicTests": periodic or [],
    }
    data.update(extra)
    return data


def measurement(readings: List[str], exposure: str = "8", shift: str = "8",
                slm: str = "slm-1", calibrator: str = "cal-1") -> Dict[str, Any]:
    return {
        "shiftDuration": shift,
        "exposureTime": exposure,
        "slmId": slm,
        "calibratorId": calibrator,
        "measurementCount": str(len(readings)),
        "readings": readings,
    }


def device(snr: str = "28", condition: str = "Good", rating: str = "SNR", **extra) -> Dict[str, Any]:
    data = {
        "type": "Earmuff",
        "manufacturer": "3M",
        "snrOrNrr": rating,
        "snrValue": snr,
        "condition": condition,
        "training": "Yes",
        "fitting": "Yes",
        "maintenance": "Yes",
    }
    data.update(extra)
    return data


SLM = {
    "id": "slm-1",
    "type": "SLM",
    "name": "Svantek 971",
    "serial": "SV-1001",
    "pre": "94.0",
    "post": "94.2",
}

CALIBRATOR = {
    "id": "cal-1",
    "type": "Calibrator",
    "name": "Svantek SV36",
    "serial": "CAL-2002",
    "pre": "114.0",
    "during": "114.0",
    "post": "114.1",
    "calibrationDate": "2025-01-15",
}


@pytest.fixture
def as_of() -> date:
    return AS_OF


@pytest.fixture
def base_survey() -> Dict[str, Any]:
    """Survey with equipment and one empty main area."""
    return {
        "id": "survey-1",
        "client": "Acme Mining",
        "project": "NS-2025-01",
        "site": "Rustenburg Shaft 3",
        "startDate": "2025-05-01",
        "endDate": "2025-05-03",
        "description": "Annual noise survey",
        "equipment": [copy.deepcopy(SLM), copy.deepcopy(CALIBRATOR)],
        "areas": [{"id": "a0", "name": "Workshop", "subAreas": []}],
    }


@pytest.fixture
def red_zone_survey(base_survey) -> Dict[str, Any]:
    """
    Workshop measured at 90/92/88 dB(A) over a full 8 h shift.

    Worst case 90.3 dB(A) (red zone). One good SNR 28 earmuff is issued;
    no controls and no employees are recorded.
    """
    survey = copy.deepcopy(base_survey)
    survey["measurementsByArea"] = {MAIN_0: [measurement(["90", "92", "88"])]}
    survey["hearingProtectionDevices"] = {MAIN_0: [device("28")]}
    survey["hearingIssuedStatus"] = {MAIN_0: "Yes"}
    return survey


@pytest.fixture
def compliant_survey(red_zone_survey) -> Dict[str, Any]:
    """Red zone survey with controls and an enrolled, recently tested employee."""
    survey = copy.deepcopy(red_zone_survey)
    survey["controlsByArea"] = {
        MAIN_0: {
            "engineering": "Acoustic enclosure on compressor",
            "adminControls": ["Job rotation", "Signage"],
            "customAdmin": "",
        }
    }
    survey["employeesByArea"] = {
        MAIN_0: [
            employee(
                "E001",
                baseline=audiometry_test("Baseline", "2024-01-10", 10),
                periodic=[audiometry_test("Annual", "2025-01-12", 12)],
            )
        ]
    }
    return survey


@pytest.fixture
def nested_survey(base_survey) -> Dict[str, Any]:
    """
    Two main areas; the first has two subs and the second sub one sub-sub.

    Plant > Mill, Plant > Crusher > Primary, Office
    """
    survey = copy.deepcopy(base_survey)
    survey["areas"] = [
        {
            "id": "plant",
            "name": "Plant",
            "subAreas": [
                {"id": "mill", "name": "Mill", "subAreas": []},
                {
                    "id": "crusher",
                    "name": "Crusher",
                    "subAreas": [{"id": "primary", "name": "Primary", "subAreas": []}],
                },
            ],
        },
        {"id": "office", "name": "Office", "subAreas": []},
    ]
    survey["commentsByArea"] = {
        '{"main":0,"sub":0}': "mill",
        '{"main":0,"sub":1}': "crusher",
        '{"main":0,"sub":1,"ss":0}': "primary",
        MAIN_1: "office",
    }
    survey["measurementsByArea"] = {
        '{"main":0,"sub":0}': [measurement(["84"])],
        '{"main":0,"sub":1,"ss":0}': [measurement(["95"])],
        MAIN_1: [measurement(["60"])],
    }
    return survey


@pytest.fixture
def red_zone_data(red_zone_survey) -> SurveyData:
    return SurveyData.from_dict(red_zone_survey)


@pytest.fixture
def nested_data(nested_survey) -> SurveyData:
    return SurveyData.from_dict(nested_survey)
