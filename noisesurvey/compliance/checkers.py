"""
noisesurvey Compliance Checkers

Survey checks for SANS 10083 completeness. Each checker walks the survey
and reports zero or more ValidationIssues; none of them raise on bad data.

Leaf areas (no sub-areas) are evaluated independently. Zone-gated checks
use the worst-case (highest LEX,8h) measurement of each leaf, computed
once per validation run and shared through SurveyContext.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Dict, List, Optional
import logging

from ..bootstrap.config import ValidationConfig
from ..core.area_key import AreaKey
from ..core.area_tree import LeafArea, collect_leaf_areas
from ..core.coercion import add_years, parse_date, try_parse_number
from ..core.enums import DeviceCondition, NoiseZone, STSSeverity
from ..core.models import Employee, SurveyData
from ..audiometry.calculators import get_audiometry_summary
from ..exposure.calculators import worst_case_exposure
from ..exposure.results import ExposureSummary
from ..protection.calculators import get_protection_summary
from .enums import CheckCategory, IssueCategory, IssueSeverity
from .schema import ValidationIssue

logger = logging.getLogger(__name__)


def _format_number(value: float) -> str:
    return f"{value:g}"


# =============================================================================
# CONTEXT
# =============================================================================

@dataclass
class SurveyContext:
    """Per-run view of a survey shared by all checkers."""

    survey: SurveyData
    as_of: date
    config: ValidationConfig = field(default_factory=ValidationConfig)

    _leaves: Optional[List[LeafArea]] = field(default=None, init=False, repr=False)
    _worst_cases: Dict[AreaKey, Optional[ExposureSummary]] = field(
        default_factory=dict, init=False, repr=False
    )

    @property
    def leaves(self) -> List[LeafArea]:
        if self._leaves is None:
            self._leaves = collect_leaf_areas(self.survey)
        return self._leaves

    def worst_case(self, key: AreaKey) -> Optional[ExposureSummary]:
        """Worst-case exposure of a leaf, None when it has no measurements."""
        if key not in self._worst_cases:
            self._worst_cases[key] = worst_case_exposure(self.survey.measurements_for(key))
        return self._worst_cases[key]

    def zone(self, key: AreaKey) -> Optional[NoiseZone]:
        worst = self.worst_case(key)
        return worst.zone.zone if worst else None

    def is_overdue(self, tested_on: str) -> bool:
        """True when a retest interval has passed since ``tested_on``."""
        tested = parse_date(tested_on)
        if tested is None:
            return False
        return self.as_of > add_years(tested, self.config.retest_interval_years)


# =============================================================================
# BASE CLASS
# =============================================================================

class SurveyChecker(ABC):
    """Abstract base class for survey checkers."""

    @property
    @abstractmethod
    def category(self) -> CheckCategory:
        """Check this checker implements."""
        pass

    @abstractmethod
    def check(self, context: SurveyContext) -> List[ValidationIssue]:
        """
        Evaluate the survey.

        Args:
            context: Survey and shared per-run state

        Returns:
            Issues found, in display order
        """
        pass

    def _issue(
        self,
        severity: IssueSeverity,
        category: IssueCategory,
        message: str,
        recommendation: str,
        leaf: Optional[LeafArea] = None,
    ) -> ValidationIssue:
        """Create a standardized ValidationIssue."""
        return ValidationIssue(
            severity=severity,
            category=category,
            message=message,
            recommendation=recommendation,
            area_name=leaf.name if leaf else None,
            area_key=leaf.key if leaf else None,
        )


# =============================================================================
# EQUIPMENT
# =============================================================================

class EquipmentChecker(SurveyChecker):
    """
    Instrument presence and calibration.

    - At least one SLM and one calibrator
    - SLM pre/post field calibration drift: > 1.0 dB critical, > 0.5 dB warning
    - Calibrator certificate: expired critical, near expiry warning
    """

    @property
    def category(self) -> CheckCategory:
        return CheckCategory.EQUIPMENT

    def check(self, context: SurveyContext) -> List[ValidationIssue]:
        equipment = context.survey.equipment
        issues: List[ValidationIssue] = []
        slms = [eq for eq in equipment if eq.is_slm]
        calibrators = [eq for eq in equipment if eq.is_calibrator]

        if not slms:
            issues.append(self._issue(
                IssueSeverity.CRITICAL, IssueCategory.EQUIPMENT,
                "No Sound Level Meter (SLM) defined",
                "Add at least one SLM to conduct noise measurements",
            ))
        if not calibrators:
            issues.append(self._issue(
                IssueSeverity.CRITICAL, IssueCategory.EQUIPMENT,
                "No Calibrator defined",
                "Add at least one acoustic calibrator for field calibration",
            ))

        for slm in slms:
            issues.extend(self._check_drift(slm.name, slm.pre, slm.post, context.config))
        for calibrator in calibrators:
            issues.extend(self._check_certificate(calibrator.name, calibrator.calibration_date, context))

        return issues

    def _check_drift(self, name: str, pre: str, post: str, config: ValidationConfig) -> List[ValidationIssue]:
        pre_db = try_parse_number(pre)
        post_db = try_parse_number(post)
        if pre_db is None or post_db is None:
            return [self._issue(
                IssueSeverity.WARNING, IssueCategory.CALIBRATION,
                f'SLM "{name}" missing pre/post calibration readings',
                "Record both pre and post-survey calibration readings",
            )]

        drift = abs(pre_db - post_db)
        if drift > config.drift_limit_db:
            return [self._issue(
                IssueSeverity.CRITICAL, IssueCategory.CALIBRATION,
                f'SLM "{name}" calibration drift {drift:.1f} dB exceeds ±{_format_number(config.drift_limit_db)} dB limit',
                "Equipment failed calibration check - measurements may be invalid. "
                "Re-measure with properly calibrated equipment.",
            )]
        if drift > config.drift_warning_db:
            return [self._issue(
                IssueSeverity.WARNING, IssueCategory.CALIBRATION,
                f'SLM "{name}" calibration drift {drift:.1f} dB is acceptable but elevated',
                "Monitor equipment performance and consider servicing if drift persists",
            )]
        return []

    def _check_certificate(
        self,
        name: str,
        certificate_date: Optional[str],
        context: SurveyContext,
    ) -> List[ValidationIssue]:
        issued = parse_date(certificate_date)
        if issued is None:
            return [self._issue(
                IssueSeverity.WARNING, IssueCategory.CALIBRATION,
                f'Calibrator "{name}" missing calibration certificate date',
                "Record calibration certificate date for traceability",
            )]

        expires = add_years(issued, context.config.certificate_validity_years)
        if expires < context.as_of:
            return [self._issue(
                IssueSeverity.CRITICAL, IssueCategory.CALIBRATION,
                f'Calibrator "{name}" calibration certificate expired',
                "Obtain fresh calibration certificate from SANAS-accredited laboratory",
            )]
        if expires - timedelta(days=context.config.near_expiry_days) <= context.as_of:
            return [self._issue(
                IssueSeverity.WARNING, IssueCategory.CALIBRATION,
                f'Calibrator "{name}" calibration certificate expires on {expires.isoformat()}',
                "Schedule recalibration at a SANAS-accredited laboratory before the certificate lapses",
            )]
        return []


class EquipmentReferenceChecker(SurveyChecker):
    """Every measurement's SLM and calibrator must exist in the equipment list."""

    @property
    def category(self) -> CheckCategory:
        return CheckCategory.REFERENCES

    def check(self, context: SurveyContext) -> List[ValidationIssue]:
        issues: List[ValidationIssue] = []
        known = context.survey.equipment_ids()

        for leaf in context.leaves:
            for number, measurement in enumerate(context.survey.measurements_for(leaf.key), start=1):
                if measurement.slm_id and measurement.slm_id not in known:
                    issues.append(self._dangling(number, "SLM", leaf))
                if measurement.calibrator_id and measurement.calibrator_id not in known:
                    issues.append(self._dangling(number, "Calibrator", leaf))
        return issues

    def _dangling(self, number: int, kind: str, leaf: LeafArea) -> ValidationIssue:
        return self._issue(
            IssueSeverity.CRITICAL, IssueCategory.EQUIPMENT_REFERENCE,
            f"Measurement #{number} references non-existent {kind}",
            "Remove measurement or add the referenced equipment to the Equipment step",
            leaf,
        )


# =============================================================================
# MEASUREMENTS
# =============================================================================

class MeasurementChecker(SurveyChecker):
    """Areas exist and each leaf area has complete measurements."""

    @property
    def category(self) -> CheckCategory:
        return CheckCategory.MEASUREMENTS

    def check(self, context: SurveyContext) -> List[ValidationIssue]:
        if not context.leaves:
            return [self._issue(
                IssueSeverity.CRITICAL, IssueCategory.AREAS,
                "No areas defined for measurement",
                "Add at least one area in the Areas & Noise step",
            )]

        issues: List[ValidationIssue] = []
        measured_areas = 0

        for leaf in context.leaves:
            measurements = context.survey.measurements_for(leaf.key)
            if not measurements:
                issues.append(self._issue(
                    IssueSeverity.WARNING, IssueCategory.MEASUREMENTS,
                    "No measurements recorded",
                    "Add noise measurements in the Measurements step for this area",
                    leaf,
                ))
                continue

            measured_areas += 1
            for number, measurement in enumerate(measurements, start=1):
                if not measurement.readings:
                    issues.append(self._issue(
                        IssueSeverity.WARNING, IssueCategory.MEASUREMENTS,
                        f"Measurement #{number} has no noise readings",
                        "Add at least one noise reading to this measurement",
                        leaf,
                    ))

                exposure = try_parse_number(measurement.exposure_time)
                shift = try_parse_number(measurement.shift_duration)
                if exposure is not None and shift is not None and exposure > shift:
                    issues.append(self._issue(
                        IssueSeverity.WARNING, IssueCategory.MEASUREMENTS,
                        f"Measurement #{number}: Exposure time ({_format_number(exposure)}h) "
                        f"exceeds shift duration ({_format_number(shift)}h)",
                        "Verify exposure time and shift duration values",
                        leaf,
                    ))

        if measured_areas == 0:
            issues.append(self._issue(
                IssueSeverity.CRITICAL, IssueCategory.MEASUREMENTS,
                "No measurements recorded in any area",
                "Add noise measurements for at least one area",
            ))
        return issues


# =============================================================================
# CONTROLS
# =============================================================================

class ControlsChecker(SurveyChecker):
    """
    Engineering and administrative controls for noisy areas.

    Missing controls are critical in the red zone and warnings in the
    orange zone. The unprotected exposure drives this check; hearing
    protection does not reduce it.
    """

    @property
    def category(self) -> CheckCategory:
        return CheckCategory.CONTROLS

    def check(self, context: SurveyContext) -> List[ValidationIssue]:
        issues: List[ValidationIssue] = []

        for leaf in context.leaves:
            worst = context.worst_case(leaf.key)
            if worst is None or worst.zone.zone == NoiseZone.GREEN:
                continue

            controls = context.survey.controls_by_area.get(leaf.key)
            missing_engineering = controls is None or not controls.has_engineering
            missing_admin = controls is None or not controls.has_admin
            level = f"{worst.lex8h:.1f}"

            if worst.zone.zone == NoiseZone.RED:
                if missing_engineering:
                    issues.append(self._issue(
                        IssueSeverity.CRITICAL, IssueCategory.CONTROLS,
                        f"RED ZONE ({level} dB) - Engineering controls not documented",
                        "MANDATORY: Document engineering controls (isolation, damping, barriers) "
                        "for Red Zone areas",
                        leaf,
                    ))
                if missing_admin:
                    issues.append(self._issue(
                        IssueSeverity.CRITICAL, IssueCategory.CONTROLS,
                        f"RED ZONE ({level} dB) - Administrative controls not documented",
                        "MANDATORY: Document administrative controls (training, rotation, signage) "
                        "for Red Zone areas",
                        leaf,
                    ))
            else:
                if missing_engineering:
                    issues.append(self._issue(
                        IssueSeverity.WARNING, IssueCategory.CONTROLS,
                        f"ORANGE ZONE ({level} dB) - Engineering controls not documented",
                        "RECOMMENDED: Investigate and document engineering controls for Orange Zone areas",
                        leaf,
                    ))
                if missing_admin:
                    issues.append(self._issue(
                        IssueSeverity.WARNING, IssueCategory.CONTROLS,
                        f"ORANGE ZONE ({level} dB) - Administrative controls not documented",
                        "REQUIRED: Document administrative controls for hearing conservation program",
                        leaf,
                    ))
        return issues


# =============================================================================
# HEARING PROTECTION
# =============================================================================

class HearingProtectionChecker(SurveyChecker):
    """
    Hearing protection issue, adequacy and upkeep.

    Red zone: devices must be issued and adequate (critical), poor
    condition and untrained use are warnings. Orange zone: devices should
    be issued (warning).
    """

    @property
    def category(self) -> CheckCategory:
        return CheckCategory.HEARING_PROTECTION

    def check(self, context: SurveyContext) -> List[ValidationIssue]:
        issues: List[ValidationIssue] = []

        for leaf in context.leaves:
            worst = context.worst_case(leaf.key)
            if worst is None:
                continue

            devices = context.survey.devices_for(leaf.key)
            not_issued = context.survey.hearing_issued_status.get(leaf.key) == "No" or not devices
            level = f"{worst.lex8h:.1f}"

            if worst.zone.zone == NoiseZone.RED:
                if not_issued:
                    issues.append(self._issue(
                        IssueSeverity.CRITICAL, IssueCategory.HEARING_PROTECTION,
                        f"RED ZONE ({level} dB) - NO hearing protection issued",
                        "MANDATORY: Issue and document hearing protection devices for Red Zone (≥87 dB)",
                        leaf,
                    ))
                    continue

                protection = get_protection_summary(worst.lex8h, devices)
                if protection is not None and not protection.adequacy.is_adequate:
                    adequacy = protection.adequacy
                    issues.append(self._issue(
                        IssueSeverity.CRITICAL, IssueCategory.HEARING_PROTECTION,
                        f"RED ZONE ({level} dB) - Hearing protection INADEQUATE ({adequacy.level.value}, "
                        f"protected LEX,8h: {protection.protected_lex8h:.1f} dB)",
                        adequacy.recommendations[0] if adequacy.recommendations
                        else "Upgrade to higher attenuation HPD",
                        leaf,
                    ))

                poor = [d for d in devices if d.condition == DeviceCondition.POOR]
                if poor:
                    issues.append(self._issue(
                        IssueSeverity.WARNING, IssueCategory.HEARING_PROTECTION,
                        f"{len(poor)} hearing protection device(s) in poor condition",
                        "Replace damaged or worn hearing protection devices immediately",
                        leaf,
                    ))

                if any(d.training == "No" for d in devices):
                    issues.append(self._issue(
                        IssueSeverity.WARNING, IssueCategory.HEARING_PROTECTION,
                        "Employees not trained on HPD use",
                        "Provide training on correct fitting and use of hearing protection",
                        leaf,
                    ))

            elif worst.zone.zone == NoiseZone.ORANGE and not_issued:
                issues.append(self._issue(
                    IssueSeverity.WARNING, IssueCategory.HEARING_PROTECTION,
                    f"ORANGE ZONE ({level} dB) - Hearing protection not issued",
                    "RECOMMENDED: Issue hearing protection for hearing conservation program",
                    leaf,
                ))
        return issues


# =============================================================================
# AUDIOMETRY
# =============================================================================

class AudiometryChecker(SurveyChecker):
    """
    Hearing conservation programme enrolment and follow-up.

    Red zone: employees enrolled with baselines (critical) and retested
    annually (warning). Orange zone: enrolment recommended (warning).
    Any zone: STS follow-up by recomputed severity and overdue annual
    audiograms.
    """

    @property
    def category(self) -> CheckCategory:
        return CheckCategory.AUDIOMETRY

    def check(self, context: SurveyContext) -> List[ValidationIssue]:
        issues: List[ValidationIssue] = []

        for leaf in context.leaves:
            employees = context.survey.employees_for(leaf.key)
            zone = context.zone(leaf.key)

            if zone == NoiseZone.RED:
                issues.extend(self._check_red_zone(employees, leaf, context))
            elif zone == NoiseZone.ORANGE and not employees:
                issues.append(self._issue(
                    IssueSeverity.WARNING, IssueCategory.AUDIOMETRY,
                    "Consider enrolling employees in hearing conservation program",
                    "Orange Zone (85-87 dB) is at the action level. "
                    "Baseline audiograms recommended as preventive measure",
                    leaf,
                ))

            for employee in employees:
                if employee.has_sts:
                    issues.append(self._sts_issue(employee, leaf, context))

            for employee in employees:
                latest = employee.latest_periodic_test
                if latest is not None and context.is_overdue(latest.test_date):
                    issues.append(self._issue(
                        IssueSeverity.WARNING, IssueCategory.AUDIOMETRY,
                        f"Employee {employee.display_name} annual audiogram overdue",
                        "Schedule annual audiogram immediately per SANS 10083",
                        leaf,
                    ))
        return issues

    def _check_red_zone(
        self,
        employees: List[Employee],
        leaf: LeafArea,
        context: SurveyContext,
    ) -> List[ValidationIssue]:
        if not employees:
            return [self._issue(
                IssueSeverity.CRITICAL, IssueCategory.AUDIOMETRY,
                "No employees enrolled in hearing conservation program",
                "Per SANS 10083, all employees exposed to ≥85 dB must be enrolled in hearing "
                "conservation program with baseline audiograms",
                leaf,
            )]

        issues: List[ValidationIssue] = []
        for employee in employees:
            if employee.baseline_test is None:
                issues.append(self._issue(
                    IssueSeverity.CRITICAL, IssueCategory.AUDIOMETRY,
                    f"Employee {employee.display_name} lacks baseline audiogram in Red Zone (≥87 dB)",
                    "Baseline audiogram required before noise exposure per SANS 10083",
                    leaf,
                ))
            elif not employee.periodic_tests and context.is_overdue(employee.baseline_test.test_date):
                issues.append(self._issue(
                    IssueSeverity.WARNING, IssueCategory.AUDIOMETRY,
                    f"Employee {employee.display_name} overdue for annual audiogram",
                    "Annual audiometric testing required per SANS 10083",
                    leaf,
                ))
        return issues

    def _sts_issue(self, employee: Employee, leaf: LeafArea, context: SurveyContext) -> ValidationIssue:
        severity = get_audiometry_summary(employee, context.as_of).sts_severity

        if severity == STSSeverity.SEVERE:
            return self._issue(
                IssueSeverity.CRITICAL, IssueCategory.AUDIOMETRY_STS,
                f"Employee {employee.display_name} has SEVERE Standard Threshold Shift",
                "Immediate medical referral required. Remove from noise exposure until "
                "evaluation completed per SANS 10083",
                leaf,
            )
        if severity == STSSeverity.MODERATE:
            return self._issue(
                IssueSeverity.WARNING, IssueCategory.AUDIOMETRY_STS,
                f"Employee {employee.display_name} has MODERATE Standard Threshold Shift",
                "Medical evaluation required within 30 days. Ensure proper use of hearing "
                "protection per SANS 10083",
                leaf,
            )
        return self._issue(
            IssueSeverity.INFO, IssueCategory.AUDIOMETRY_STS,
            f"Employee {employee.display_name} has Standard Threshold Shift (≥10 dB)",
            "Retest audiogram within 30 days to confirm. Review hearing protection "
            "effectiveness per SANS 10083",
            leaf,
        )


# =============================================================================
# CHECKER REGISTRY
# =============================================================================

SURVEY_CHECKERS: Dict[CheckCategory, SurveyChecker] = {
    CheckCategory.EQUIPMENT: EquipmentChecker(),
    CheckCategory.REFERENCES: EquipmentReferenceChecker(),
    CheckCategory.MEASUREMENTS: MeasurementChecker(),
    CheckCategory.CONTROLS: ControlsChecker(),
    CheckCategory.HEARING_PROTECTION: HearingProtectionChecker(),
    CheckCategory.AUDIOMETRY: AudiometryChecker(),
}


def get_checker(category: CheckCategory) -> Optional[SurveyChecker]:
    """Get the default checker for a check category."""
    return SURVEY_CHECKERS.get(category)
