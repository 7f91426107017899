"""
Unit tests for survey compliance validation.

Tests each checker on hand-built survey snapshots and the engine's
partitioning of their issues.
"""

import copy
from datetime import date

import pytest

from conftest import AS_OF, MAIN_0, MAIN_1, audiometry_test, device, employee, measurement

from noisesurvey.bootstrap.config import ValidationConfig
from noisesurvey.compliance import (
    AudiometryChecker,
    CheckCategory,
    ControlsChecker,
    EquipmentChecker,
    EquipmentReferenceChecker,
    HearingProtectionChecker,
    IssueCategory,
    IssueSeverity,
    MeasurementChecker,
    SurveyChecker,
    SurveyContext,
    SurveyValidationEngine,
    get_checker,
    validate_survey,
)
from noisesurvey.core.area_key import AreaKey
from noisesurvey.core.models import SurveyData


def run(checker, survey, as_of=AS_OF, config=None):
    data = survey if isinstance(survey, SurveyData) else SurveyData.from_dict(survey)
    context = SurveyContext(survey=data, as_of=as_of, config=config or ValidationConfig())
    return checker.check(context)


def messages(issues):
    return [i.message for i in issues]


def severities(issues):
    return [i.severity for i in issues]


def with_readings(survey, readings):
    survey = copy.deepcopy(survey)
    survey["measurementsByArea"] = {MAIN_0: [measurement(readings)]}
    return survey


# =============================================================================
# EQUIPMENT
# =============================================================================

class TestEquipmentChecker:
    """Tests for instrument presence and calibration checks."""

    def test_no_equipment(self, base_survey):
        base_survey["equipment"] = []
        issues = run(EquipmentChecker(), base_survey)
        assert messages(issues) == [
            "No Sound Level Meter (SLM) defined",
            "No Calibrator defined",
        ]
        assert severities(issues) == [IssueSeverity.CRITICAL, IssueSeverity.CRITICAL]

    def test_missing_calibrator(self, base_survey):
        base_survey["equipment"] = base_survey["equipment"][:1]
        assert messages(run(EquipmentChecker(), base_survey)) == ["No Calibrator defined"]

    def test_missing_slm(self, base_survey):
        base_survey["equipment"] = base_survey["equipment"][1:]
        assert messages(run(EquipmentChecker(), base_survey)) == ["No Sound Level Meter (SLM) defined"]

    def test_healthy_equipment(self, base_survey):
        assert run(EquipmentChecker(), base_survey) == []

    def test_drift_over_limit_is_critical(self, base_survey):
        base_survey["equipment"][0]["post"] = "95.5"
        issues = run(EquipmentChecker(), base_survey)
        assert messages(issues) == ['SLM "Svantek 971" calibration drift 1.5 dB exceeds ±1 dB limit']
        assert issues[0].severity == IssueSeverity.CRITICAL
        assert issues[0].category == IssueCategory.CALIBRATION

    @pytest.mark.parametrize("post", ["94.7", "95.0"])
    def test_elevated_drift_is_warning(self, base_survey, post):
        base_survey["equipment"][0]["post"] = post
        issues = run(EquipmentChecker(), base_survey)
        assert severities(issues) == [IssueSeverity.WARNING]
        assert issues[0].message.endswith("is acceptable but elevated")

    def test_missing_post_reading(self, base_survey):
        base_survey["equipment"][0]["post"] = ""
        assert messages(run(EquipmentChecker(), base_survey)) == [
            'SLM "Svantek 971" missing pre/post calibration readings'
        ]

    def test_expired_certificate(self, base_survey):
        base_survey["equipment"][1]["calibrationDate"] = "2024-05-01"
        issues = run(EquipmentChecker(), base_survey)
        assert messages(issues) == ['Calibrator "Svantek SV36" calibration certificate expired']
        assert issues[0].severity == IssueSeverity.CRITICAL

    def test_certificate_near_expiry(self, base_survey):
        base_survey["equipment"][1]["calibrationDate"] = "2024-06-20"
        issues = run(EquipmentChecker(), base_survey)
        assert messages(issues) == [
            'Calibrator "Svantek SV36" calibration certificate expires on 2025-06-20'
        ]
        assert issues[0].severity == IssueSeverity.WARNING

    def test_near_expiry_window_configurable(self, base_survey):
        base_survey["equipment"][1]["calibrationDate"] = "2024-06-20"
        assert run(EquipmentChecker(), base_survey, config=ValidationConfig(near_expiry_days=10)) == []

    def test_missing_certificate(self, base_survey):
        del base_survey["equipment"][1]["calibrationDate"]
        issues = run(EquipmentChecker(), base_survey)
        assert messages(issues) == ['Calibrator "Svantek SV36" missing calibration certificate date']
        assert issues[0].severity == IssueSeverity.WARNING


class TestEquipmentReferenceChecker:
    """Tests for dangling equipment references."""

    def test_unknown_slm(self, red_zone_survey):
        red_zone_survey["measurementsByArea"][MAIN_0][0]["slmId"] = "ghost"
        issues = run(EquipmentReferenceChecker(), red_zone_survey)
        assert messages(issues) == ["Measurement #1 references non-existent SLM"]
        assert issues[0].category == IssueCategory.EQUIPMENT_REFERENCE
        assert issues[0].area_name == "Workshop"
        assert issues[0].area_key == AreaKey(0)

    def test_blank_reference_not_flagged(self, red_zone_survey):
        red_zone_survey["measurementsByArea"][MAIN_0][0]["calibratorId"] = ""
        assert run(EquipmentReferenceChecker(), red_zone_survey) == []


# =============================================================================
# MEASUREMENTS
# =============================================================================

class TestMeasurementChecker:
    """Tests for area and measurement completeness."""

    def test_no_areas(self, base_survey):
        base_survey["areas"] = []
        issues = run(MeasurementChecker(), base_survey)
        assert messages(issues) == ["No areas defined for measurement"]
        assert issues[0].category == IssueCategory.AREAS

    def test_unmeasured_area(self, base_survey):
        issues = run(MeasurementChecker(), base_survey)
        assert messages(issues) == ["No measurements recorded", "No measurements recorded in any area"]
        assert severities(issues) == [IssueSeverity.WARNING, IssueSeverity.CRITICAL]
        assert issues[0].area_name == "Workshop"
        assert issues[1].area_name is None

    def test_one_measured_area_is_enough(self, nested_survey):
        nested_survey["measurementsByArea"] = {MAIN_1: [measurement(["60"])]}
        issues = run(MeasurementChecker(), nested_survey)
        assert messages(issues) == ["No measurements recorded", "No measurements recorded"]
        assert [i.area_name for i in issues] == ["Plant > Mill", "Plant > Crusher > Primary"]

    def test_empty_readings(self, base_survey):
        survey = with_readings(base_survey, [])
        assert messages(run(MeasurementChecker(), survey)) == ["Measurement #1 has no noise readings"]

    def test_exposure_exceeds_shift(self, base_survey):
        base_survey["measurementsByArea"] = {
            MAIN_0: [measurement(["80"]), measurement(["80"], exposure="10", shift="8")]
        }
        assert messages(run(MeasurementChecker(), base_survey)) == [
            "Measurement #2: Exposure time (10h) exceeds shift duration (8h)"
        ]

    def test_parent_area_measurements_ignored(self, nested_survey):
        # Only leaves are evaluated; Plant itself has sub-areas
        nested_survey["measurementsByArea"][MAIN_0] = [measurement([])]
        assert run(MeasurementChecker(), nested_survey) == []


# =============================================================================
# CONTROLS
# =============================================================================

class TestControlsChecker:
    """Tests for controls documentation by zone."""

    def test_red_zone_requires_both(self, red_zone_survey):
        issues = run(ControlsChecker(), red_zone_survey)
        assert messages(issues) == [
            "RED ZONE (90.3 dB) - Engineering controls not documented",
            "RED ZONE (90.3 dB) - Administrative controls not documented",
        ]
        assert severities(issues) == [IssueSeverity.CRITICAL, IssueSeverity.CRITICAL]

    def test_orange_zone_warnings(self, base_survey):
        issues = run(ControlsChecker(), with_readings(base_survey, ["86"]))
        assert messages(issues) == [
            "ORANGE ZONE (86.0 dB) - Engineering controls not documented",
            "ORANGE ZONE (86.0 dB) - Administrative controls not documented",
        ]
        assert severities(issues) == [IssueSeverity.WARNING, IssueSeverity.WARNING]

    def test_custom_admin_counts(self, red_zone_survey):
        red_zone_survey["controlsByArea"] = {
            MAIN_0: {"engineering": "", "adminControls": [], "customAdmin": "Quiet room breaks"}
        }
        assert messages(run(ControlsChecker(), red_zone_survey)) == [
            "RED ZONE (90.3 dB) - Engineering controls not documented"
        ]

    def test_green_zone_needs_nothing(self, base_survey):
        assert run(ControlsChecker(), with_readings(base_survey, ["80"])) == []

    def test_protection_does_not_lift_requirement(self, red_zone_survey):
        red_zone_survey["hearingProtectionDevices"] = {MAIN_0: [device("35")]}
        assert len(run(ControlsChecker(), red_zone_survey)) == 2


# =============================================================================
# HEARING PROTECTION
# =============================================================================

class TestHearingProtectionChecker:
    """Tests for hearing protection issue and adequacy."""

    def test_adequate_protection(self, red_zone_survey):
        assert run(HearingProtectionChecker(), red_zone_survey) == []

    def test_status_no_overrides_devices(self, red_zone_survey):
        red_zone_survey["hearingIssuedStatus"] = {MAIN_0: "No"}
        issues = run(HearingProtectionChecker(), red_zone_survey)
        assert messages(issues) == ["RED ZONE (90.3 dB) - NO hearing protection issued"]
        assert issues[0].severity == IssueSeverity.CRITICAL

    def test_no_devices_is_not_issued(self, red_zone_survey):
        red_zone_survey["hearingProtectionDevices"] = {}
        assert messages(run(HearingProtectionChecker(), red_zone_survey)) == [
            "RED ZONE (90.3 dB) - NO hearing protection issued"
        ]

    def test_inadequate_device(self, red_zone_survey):
        red_zone_survey["hearingProtectionDevices"] = {MAIN_0: [device("5")]}
        issues = run(HearingProtectionChecker(), red_zone_survey)
        assert len(issues) == 1
        assert issues[0].severity == IssueSeverity.CRITICAL
        assert issues[0].message.startswith("RED ZONE (90.3 dB) - Hearing protection INADEQUATE (inadequate")
        assert "89.3" in issues[0].message

    def test_marginal_device(self, red_zone_survey):
        survey = with_readings(red_zone_survey, ["100"])
        survey["hearingProtectionDevices"] = {MAIN_0: [device("18")]}
        issues = run(HearingProtectionChecker(), survey)
        assert messages(issues) == [
            "RED ZONE (100.0 dB) - Hearing protection INADEQUATE (marginal, protected LEX,8h: 86.0 dB)"
        ]
        assert issues[0].severity == IssueSeverity.CRITICAL

    def test_over_protection_is_adequate(self, red_zone_survey):
        survey = with_readings(red_zone_survey, ["100"])
        survey["hearingProtectionDevices"] = {MAIN_0: [device("30")]}
        assert run(HearingProtectionChecker(), survey) == []

    def test_upkeep_warnings(self, red_zone_survey):
        red_zone_survey["hearingProtectionDevices"] = {
            MAIN_0: [device("28"), device("28", condition="Poor", training="No")]
        }
        issues = run(HearingProtectionChecker(), red_zone_survey)
        assert messages(issues) == [
            "1 hearing protection device(s) in poor condition",
            "Employees not trained on HPD use",
        ]
        assert severities(issues) == [IssueSeverity.WARNING, IssueSeverity.WARNING]

    def test_orange_zone_not_issued(self, base_survey):
        issues = run(HearingProtectionChecker(), with_readings(base_survey, ["86"]))
        assert messages(issues) == ["ORANGE ZONE (86.0 dB) - Hearing protection not issued"]
        assert issues[0].severity == IssueSeverity.WARNING

    def test_orange_zone_upkeep_not_checked(self, base_survey):
        survey = with_readings(base_survey, ["86"])
        survey["hearingProtectionDevices"] = {MAIN_0: [device("28", condition="Poor", training="No")]}
        assert run(HearingProtectionChecker(), survey) == []


# =============================================================================
# AUDIOMETRY
# =============================================================================

class TestAudiometryChecker:
    """Tests for hearing conservation programme checks."""

    def with_employees(self, survey, *employees):
        survey["employeesByArea"] = {MAIN_0: list(employees)}
        return survey

    def test_red_zone_requires_enrolment(self, red_zone_survey):
        issues = run(AudiometryChecker(), red_zone_survey)
        assert messages(issues) == ["No employees enrolled in hearing conservation program"]
        assert issues[0].severity == IssueSeverity.CRITICAL

    def test_red_zone_baseline_required(self, red_zone_survey):
        survey = self.with_employees(red_zone_survey, employee())
        assert messages(run(AudiometryChecker(), survey)) == [
            "Employee Thandi Mokoena (E001) lacks baseline audiogram in Red Zone (≥87 dB)"
        ]

    def test_red_zone_baseline_only_overdue(self, red_zone_survey):
        survey = self.with_employees(
            red_zone_survey, employee(baseline=audiometry_test("Baseline", "2024-01-10", 10))
        )
        issues = run(AudiometryChecker(), survey)
        assert messages(issues) == ["Employee Thandi Mokoena (E001) overdue for annual audiogram"]
        assert issues[0].severity == IssueSeverity.WARNING

    def test_orange_zone_enrolment_suggested(self, base_survey):
        issues = run(AudiometryChecker(), with_readings(base_survey, ["86"]))
        assert messages(issues) == ["Consider enrolling employees in hearing conservation program"]
        assert issues[0].severity == IssueSeverity.WARNING

    def test_compliant_employee(self, compliant_survey):
        assert run(AudiometryChecker(), compliant_survey) == []

    def test_sts_severity_recomputed(self, base_survey):
        survey = self.with_employees(
            with_readings(base_survey, ["70"]),
            employee(
                "E002",
                baseline=audiometry_test("Baseline", "2024-01-10", 10),
                periodic=[audiometry_test("Annual", "2025-01-12", 40)],
                hasSTS=True,
            ),
        )
        issues = run(AudiometryChecker(), survey)
        assert messages(issues) == ["Employee Thandi Mokoena (E002) has SEVERE Standard Threshold Shift"]
        assert issues[0].severity == IssueSeverity.CRITICAL
        assert issues[0].category == IssueCategory.AUDIOMETRY_STS

    def test_sticky_sts_without_current_shift_is_info(self, compliant_survey):
        compliant_survey["employeesByArea"][MAIN_0][0]["hasSTS"] = True
        issues = run(AudiometryChecker(), compliant_survey)
        assert messages(issues) == [
            "Employee Thandi Mokoena (E001) has Standard Threshold Shift (≥10 dB)"
        ]
        assert issues[0].severity == IssueSeverity.INFO

    def test_annual_overdue(self, compliant_survey):
        emp = compliant_survey["employeesByArea"][MAIN_0][0]
        emp["periodicTests"] = [audiometry_test("Annual", "2024-03-01", 12)]
        issues = run(AudiometryChecker(), compliant_survey)
        assert messages(issues) == ["Employee Thandi Mokoena (E001) annual audiogram overdue"]

    def test_retest_boundary(self, compliant_survey):
        context = SurveyContext(survey=SurveyData.from_dict(compliant_survey), as_of=date(2025, 6, 1))
        assert not context.is_overdue("2024-06-01")
        assert context.is_overdue("2024-05-31")
        assert not context.is_overdue("not a date")


# =============================================================================
# ENGINE
# =============================================================================

class TestSurveyValidationEngine:
    """Tests for the validation engine."""

    def test_default_checkers_registered(self):
        for category in CheckCategory:
            assert isinstance(get_checker(category), SurveyChecker)

    def test_red_zone_survey_invalid(self, red_zone_data):
        result = SurveyValidationEngine().evaluate(red_zone_data, AS_OF)
        assert not result.is_valid
        assert [i.category for i in result.critical_issues] == [
            IssueCategory.CONTROLS,
            IssueCategory.CONTROLS,
            IssueCategory.AUDIOMETRY,
        ]
        assert result.issues_for(IssueCategory.HEARING_PROTECTION) == []
        assert result.summary.total_issues == 3

    def test_compliant_survey_valid(self, compliant_survey):
        result = validate_survey(compliant_survey, AS_OF)
        assert result.is_valid
        assert result.summary.total_issues == 0

    def test_empty_survey(self):
        result = validate_survey({}, AS_OF)
        assert not result.is_valid
        assert messages(result.critical_issues) == [
            "No Sound Level Meter (SLM) defined",
            "No Calibrator defined",
            "No areas defined for measurement",
        ]
        assert result.summary.critical_count >= 3

    def test_partitions_by_severity(self, base_survey):
        base_survey["equipment"][0]["post"] = "94.7"
        result = validate_survey(base_survey, AS_OF)
        assert severities(result.all_issues) == [
            IssueSeverity.CRITICAL,
            IssueSeverity.WARNING,
            IssueSeverity.WARNING,
        ]
        assert result.summary.to_dict() == {
            "total_issues": 3,
            "critical_count": 1,
            "warning_count": 2,
            "info_count": 0,
        }

    def test_to_dict(self, red_zone_data):
        data = SurveyValidationEngine().evaluate(red_zone_data, AS_OF).to_dict()
        issue = data["critical_issues"][0]
        assert issue["severity"] == "critical"
        assert issue["category"] == "Controls"
        assert issue["area_key"] == {"main": 0}
        assert issue["area_name"] == "Workshop"

    def test_custom_checker(self, red_zone_data):
        class SilentControls(SurveyChecker):
            @property
            def category(self):
                return CheckCategory.CONTROLS

            def check(self, context):
                return []

        engine = SurveyValidationEngine()
        engine.register_checker(CheckCategory.CONTROLS, SilentControls())
        result = engine.evaluate(red_zone_data, AS_OF)
        assert result.summary.critical_count == 1

    def test_evaluate_category(self, red_zone_data):
        issues = SurveyValidationEngine().evaluate_category(red_zone_data, CheckCategory.AUDIOMETRY, AS_OF)
        assert messages(issues) == ["No employees enrolled in hearing conservation program"]

    def test_config_applied(self, base_survey):
        base_survey["equipment"][0]["post"] = "94.7"
        config = ValidationConfig(drift_warning_db=1.0)
        result = SurveyValidationEngine(config).evaluate(SurveyData.from_dict(base_survey), AS_OF)
        assert result.issues_for(IssueCategory.CALIBRATION) == []
