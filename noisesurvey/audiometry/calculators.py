"""
noisesurvey Audiometry Calculators

Audiometric evaluation per SANS 10083 and ISO 1999.

Implements:
- calculate_hta: hearing threshold average over a frequency set
- detect_sts: standard threshold shift (>= 10 dB at 2/3/4 kHz, either ear)
- classify_hearing_loss: WHO grade on the 0.5/1/2/4 kHz pure tone average
- age_correction_iso1999: linear approximation of ISO 1999 Annex B
- get_audiometry_summary: per-employee status and prioritized actions
"""

from __future__ import annotations
from datetime import date
from typing import List, Optional, Sequence, Union
import logging

from ..core.coercion import add_years, parse_date, round_half_up, whole_years_between
from ..core.constants import (
    AGE_CORRECTION_BASE_AGE,
    AGE_CORRECTION_MALE_FACTOR,
    AGE_CORRECTION_MIN_AGE,
    AGE_CORRECTION_RATES,
    AUDIOGRAM_FREQUENCIES,
    AUDIOMETRY_CRITERIA,
    PTA_FREQUENCIES,
    STS_FREQUENCIES,
)
from ..core.enums import (
    AffectedEar,
    AudiometryTestType,
    DisplaySeverity,
    Ear,
    Gender,
    HearingLossClass,
    STSSeverity,
)
from ..core.models import AudiogramData, EarThresholds, Employee
from .results import (
    AudiogramValidation,
    AudiometrySummary,
    HearingLossClassification,
    STSResult,
)

logger = logging.getLogger(__name__)


# =============================================================================
# THRESHOLD AVERAGES
# =============================================================================

def calculate_hta(
    audiogram: AudiogramData,
    frequencies: Sequence[int] = STS_FREQUENCIES,
    ear: Union[Ear, str] = Ear.LEFT,
) -> float:
    """
    Hearing threshold average (dB HL).

    Frequencies absent from the audiogram count as 0 dB HL.
    """
    if not frequencies:
        return 0.0
    ear = Ear(ear)
    return sum(audiogram.threshold(f, ear) for f in frequencies) / len(frequencies)


# =============================================================================
# STANDARD THRESHOLD SHIFT
# =============================================================================

def detect_sts(baseline: AudiogramData, current: AudiogramData) -> STSResult:
    """
    Compare a periodic audiogram against the baseline.

    STS is present when either ear's average shift at 2/3/4 kHz is at
    least 10 dB. Severity is graded on the larger of the two shifts.
    """
    left_shift = calculate_hta(current, STS_FREQUENCIES, Ear.LEFT) - calculate_hta(
        baseline, STS_FREQUENCIES, Ear.LEFT
    )
    right_shift = calculate_hta(current, STS_FREQUENCIES, Ear.RIGHT) - calculate_hta(
        baseline, STS_FREQUENCIES, Ear.RIGHT
    )

    left_sts = left_shift >= AUDIOMETRY_CRITERIA.sts_shift_db
    right_sts = right_shift >= AUDIOMETRY_CRITERIA.sts_shift_db

    if left_sts and right_sts:
        affected = AffectedEar.BOTH
    elif left_sts:
        affected = AffectedEar.LEFT
    elif right_sts:
        affected = AffectedEar.RIGHT
    else:
        affected = AffectedEar.NONE

    max_shift = max(left_shift, right_shift)
    if max_shift >= AUDIOMETRY_CRITERIA.sts_severe_db:
        severity = STSSeverity.SEVERE
        message = f"SEVERE STS: {max_shift:.1f} dB shift detected - Immediate action required"
    elif max_shift >= AUDIOMETRY_CRITERIA.sts_moderate_db:
        severity = STSSeverity.MODERATE
        message = f"MODERATE STS: {max_shift:.1f} dB shift detected - Follow-up required"
    elif max_shift >= AUDIOMETRY_CRITERIA.sts_shift_db:
        severity = STSSeverity.MILD
        message = f"MILD STS: {max_shift:.1f} dB shift detected - Monitor closely"
    else:
        severity = STSSeverity.NONE
        message = "No significant threshold shift detected"

    return STSResult(
        has_sts=left_sts or right_sts,
        left_shift=left_shift,
        right_shift=right_shift,
        affected_ear=affected,
        severity=severity,
        message=message,
    )


# =============================================================================
# HEARING LOSS GRADING
# =============================================================================

def classify_hearing_loss(
    audiogram: AudiogramData,
    ear: Union[Ear, str],
) -> HearingLossClassification:
    """
    WHO hearing loss grade for one ear.

    PTA over 500/1000/2000/4000 Hz:
    <= 25 normal, <= 40 mild, <= 60 moderate, <= 80 severe, > 80 profound.
    """
    pta = calculate_hta(audiogram, PTA_FREQUENCIES, ear)

    if pta <= AUDIOMETRY_CRITERIA.normal_max_db:
        return HearingLossClassification(pta, HearingLossClass.NORMAL, "Normal hearing", DisplaySeverity.SUCCESS)
    if pta <= AUDIOMETRY_CRITERIA.mild_max_db:
        return HearingLossClassification(
            pta, HearingLossClass.MILD, "Mild hearing loss - Monitoring recommended", DisplaySeverity.INFO
        )
    if pta <= AUDIOMETRY_CRITERIA.moderate_max_db:
        return HearingLossClassification(
            pta, HearingLossClass.MODERATE, "Moderate hearing loss - Medical evaluation recommended",
            DisplaySeverity.WARNING,
        )
    if pta <= AUDIOMETRY_CRITERIA.severe_max_db:
        return HearingLossClassification(
            pta, HearingLossClass.SEVERE, "Severe hearing loss - Medical referral required", DisplaySeverity.ERROR
        )
    return HearingLossClassification(
        pta, HearingLossClass.PROFOUND, "Profound hearing loss - Referral to ENT specialist required",
        DisplaySeverity.ERROR,
    )


# =============================================================================
# AGE CORRECTION
# =============================================================================

def age_correction_iso1999(age: float, frequency: int, gender: Union[Gender, str]) -> int:
    """
    Approximate age-related threshold correction (dB).

    Linear in years above 20 with a per-year rate rising by frequency band
    (0.1 / 0.15 / 0.3 / 0.5 dB at < 1k / 1k / 2k / >= 4k Hz), scaled by 1.2
    for males. This approximates ISO 1999 Annex B and is not a lookup of
    the standard's tables. Workers under 18 get no correction.
    """
    if age < AGE_CORRECTION_MIN_AGE:
        return 0

    years_above_base = max(0.0, age - AGE_CORRECTION_BASE_AGE)
    gender_factor = AGE_CORRECTION_MALE_FACTOR if gender == Gender.MALE else 1.0
    rate = next(
        (r for band_start, r in AGE_CORRECTION_RATES if frequency >= band_start),
        AGE_CORRECTION_RATES[-1][1],
    )

    return int(round_half_up(years_above_base * rate * gender_factor))


def employee_age(employee: Employee, as_of: Optional[date] = None) -> Optional[int]:
    """Whole years since date of birth, None when it does not parse."""
    born = parse_date(employee.date_of_birth)
    if born is None:
        return None
    return whole_years_between(born, as_of or date.today())


# =============================================================================
# EMPLOYEE SUMMARY
# =============================================================================

def _sts_recommendations(sts: STSResult) -> List[str]:
    if sts.severity == STSSeverity.SEVERE:
        actions = [
            "URGENT: Immediate medical referral required for significant hearing loss",
            "Remove from high-noise exposure until evaluation completed",
        ]
    elif sts.severity == STSSeverity.MODERATE:
        actions = [
            "Medical evaluation required within 30 days",
            "Ensure proper use of hearing protection",
        ]
    else:
        actions = [
            "Retest audiogram within 30 days to confirm STS",
            "Review hearing protection effectiveness",
        ]
    actions.append("Provide employee notification of STS per SANS 10083")
    actions.append("Investigate noise exposure and control measures")
    return actions


def _hearing_loss_recommendations(worst: HearingLossClassification) -> List[str]:
    actions = []
    if worst.classification in (HearingLossClass.PROFOUND, HearingLossClass.SEVERE):
        actions.append("Medical referral to ENT specialist required")
    elif worst.classification == HearingLossClass.MODERATE:
        actions.append("Medical evaluation recommended")
    actions.append("Ensure adequate hearing protection is provided and used correctly")
    return actions


def get_audiometry_summary(employee: Employee, as_of: Optional[date] = None) -> AudiometrySummary:
    """
    Hearing conservation summary for an employee.

    Recommendations are prioritized: STS actions first, hearing loss
    actions only when no STS is firing, then the annual retest reminder,
    with a monitoring fallback when nothing else applies.

    Args:
        employee: Employee with test history
        as_of: Reference date for the overdue check (defaults to today)

    Returns:
        AudiometrySummary; has_baseline is False without a baseline test
    """
    if employee.baseline_test is None:
        return AudiometrySummary(
            has_baseline=False,
            recommendations=["Baseline audiogram required for hearing conservation program enrollment"],
        )

    as_of = as_of or date.today()
    latest = employee.latest_periodic_test or employee.baseline_test

    sts = None
    if employee.periodic_tests:
        sts = detect_sts(employee.baseline_test.audiogram, latest.audiogram)

    left = classify_hearing_loss(latest.audiogram, Ear.LEFT)
    right = classify_hearing_loss(latest.audiogram, Ear.RIGHT)

    recommendations: List[str] = []
    sts_firing = sts is not None and sts.has_sts
    if sts_firing:
        recommendations.extend(_sts_recommendations(sts))

    worst = left if left.pta > right.pta else right
    if worst.classification != HearingLossClass.NORMAL and not sts_firing:
        recommendations.extend(_hearing_loss_recommendations(worst))

    if latest.test_type == AudiometryTestType.BASELINE:
        recommendations.append("Schedule annual audiogram per SANS 10083 requirements")
    else:
        tested = parse_date(latest.test_date)
        if tested is not None and add_years(tested, AUDIOMETRY_CRITERIA.retest_interval_years) < as_of:
            recommendations.append("Annual audiogram overdue - schedule immediately")

    if not recommendations:
        recommendations = [
            "Continue annual audiometric monitoring",
            "Maintain proper use of hearing protection",
        ]

    logger.debug(
        f"Audiometry summary for employee {employee.id}: "
        f"sts={sts.severity.value if sts else 'n/a'}, worst PTA={worst.pta:.1f}"
    )

    return AudiometrySummary(
        has_baseline=True,
        latest_test=latest,
        has_sts=sts_firing,
        sts_details=sts,
        left_hearing_loss=left,
        right_hearing_loss=right,
        recommendations=recommendations,
    )


# =============================================================================
# AUDIOGRAM ENTRY
# =============================================================================

def _format_db(value: float) -> str:
    return f"{value:g}"


def validate_audiogram(audiogram: AudiogramData) -> AudiogramValidation:
    """Check every standard frequency is present and within [-10, 120] dB HL."""
    errors: List[str] = []
    low = AUDIOMETRY_CRITERIA.threshold_min_db
    high = AUDIOMETRY_CRITERIA.threshold_max_db

    for frequency in AUDIOGRAM_FREQUENCIES:
        if not audiogram.has_frequency(frequency):
            errors.append(f"Missing data for {frequency} Hz")
            continue

        entry = audiogram.thresholds[frequency]
        if not low <= entry.left <= high:
            errors.append(f"Left ear {frequency} Hz threshold out of range: {_format_db(entry.left)} dB HL")
        if not low <= entry.right <= high:
            errors.append(f"Right ear {frequency} Hz threshold out of range: {_format_db(entry.right)} dB HL")

    return AudiogramValidation(is_valid=not errors, errors=errors)


def create_empty_audiogram() -> AudiogramData:
    """Audiogram template with every standard frequency at 0 dB HL."""
    return AudiogramData(thresholds={f: EarThresholds(0.0, 0.0) for f in AUDIOGRAM_FREQUENCIES})
