"""
noisesurvey Exposure Calculators

Daily noise exposure per SANS 10083 and ISO 9612.

Implements:
- average_laeq: energetic average of dB(A) readings
- calculate_lex8h: LEX,8h = LAeq,T + 10 log10(T / 8)
- calculate_noise_dose: 3 dB exchange rate referenced to 85 dB(A) / 8 h
- classify_zone / check_compliance: green < 85 <= orange < 87 <= red
- permitted_exposure_time / max_permissible_level: dose formula inverses

Decibel levels are always combined in the power domain, never averaged
arithmetically.
"""

from __future__ import annotations
from typing import Any, Iterable, List, Optional
import math
import logging

from ..core.coercion import parse_number, parse_numbers, round_half_up
from ..core.constants import SANS_EXPOSURE
from ..core.enums import ComplianceLevel, ComplianceSeverity, NoiseZone
from ..core.models import Measurement
from .results import ComplianceCheck, ExposureSummary, ZoneClassification

logger = logging.getLogger(__name__)


# =============================================================================
# ZONE REQUIREMENTS
# =============================================================================

GREEN_REQUIREMENTS = (
    "No special noise control requirements",
    "Routine noise monitoring recommended",
)

ORANGE_REQUIREMENTS = (
    "Hearing conservation program required",
    "Annual audiometric testing",
    "Hearing protection available",
    "Noise awareness training",
    "Engineering controls investigation",
)

RED_REQUIREMENTS = (
    "MANDATORY hearing protection (HPD)",
    "Demarcation and signage required",
    "Access control measures",
    "Annual audiometric testing",
    "Engineering controls mandatory",
    "Administrative controls required",
)

SAFE_ACTIONS = ("Continue routine monitoring",)

ACTION_LEVEL_ACTIONS = (
    "Implement hearing conservation program",
    "Provide hearing protection devices",
    "Conduct annual audiometric testing",
    "Provide noise awareness training",
    "Investigate engineering controls",
)

LIMIT_EXCEEDED_ACTIONS = (
    "IMMEDIATE: Enforce mandatory hearing protection",
    "Demarcate area with signage",
    "Implement access control",
    "Implement engineering controls",
    "Reduce exposure time if controls insufficient",
    "Medical surveillance program required",
)


# =============================================================================
# LEVEL ARITHMETIC
# =============================================================================

def average_laeq(readings: Optional[Iterable[Any]]) -> float:
    """
    Energetic average of noise readings.

    LAeq,avg = 10 log10((1/n) * sum(10^(Li/10)))

    Args:
        readings: Levels in dB(A); strings are parsed and unparseable
            entries are dropped

    Returns:
        Average level rounded to 0.1 dB, or 0 when no reading parses
    """
    levels = parse_numbers(readings)
    if not levels:
        return 0.0

    energy = sum(10 ** (level / 10) for level in levels) / len(levels)
    return round_half_up(10 * math.log10(energy), 1)


def calculate_lex8h(laeq: float, exposure_hours: float) -> float:
    """
    Daily noise exposure level normalised to 8 hours.

    Non-positive exposure time yields 0.
    """
    if exposure_hours <= 0:
        return 0.0
    return laeq + 10 * math.log10(exposure_hours / SANS_EXPOSURE.reference_time_h)


def _allowed_hours(laeq: float) -> float:
    """T_allowed = 8 * 2^((85 - L) / 3)"""
    return SANS_EXPOSURE.reference_time_h * 2 ** (
        (SANS_EXPOSURE.reference_level_db - laeq) / SANS_EXPOSURE.exchange_rate_db
    )


def calculate_noise_dose(laeq: float, exposure_hours: float) -> float:
    """
    Noise dose as a percentage of the daily allowance.

    Exposure below 85 dB(A) costs no dose.
    """
    if exposure_hours <= 0 or laeq < SANS_EXPOSURE.reference_level_db:
        return 0.0
    dose = exposure_hours / _allowed_hours(laeq) * 100
    return round_half_up(dose, 1)


def permitted_exposure_time(laeq: float) -> float:
    """Hours allowed per day at ``laeq``; a full 8 h shift below 85 dB(A)."""
    if laeq < SANS_EXPOSURE.reference_level_db:
        return SANS_EXPOSURE.reference_time_h
    return round_half_up(_allowed_hours(laeq), 2)


def max_permissible_level(exposure_hours: float) -> float:
    """
    Highest LAeq allowed for a given daily exposure duration.

    L_max = 85 + 3 log2(8 / T), capped at 85 dB(A) for T >= 8 h.
    """
    if exposure_hours <= 0:
        return 0.0
    if exposure_hours >= SANS_EXPOSURE.reference_time_h:
        return SANS_EXPOSURE.reference_level_db
    level = SANS_EXPOSURE.reference_level_db + SANS_EXPOSURE.exchange_rate_db * math.log2(
        SANS_EXPOSURE.reference_time_h / exposure_hours
    )
    return round_half_up(level, 1)


# =============================================================================
# CLASSIFICATION
# =============================================================================

def classify_zone(lex8h: float) -> ZoneClassification:
    """Classify LEX,8h into a SANS 10083 noise zone."""
    if lex8h < SANS_EXPOSURE.action_level_db:
        return ZoneClassification(
            zone=NoiseZone.GREEN,
            label="Green Zone",
            color="#10b981",
            requirements=list(GREEN_REQUIREMENTS),
        )
    if lex8h < SANS_EXPOSURE.limit_level_db:
        return ZoneClassification(
            zone=NoiseZone.ORANGE,
            label="Orange Zone",
            color="#f59e0b",
            requirements=list(ORANGE_REQUIREMENTS),
        )
    return ZoneClassification(
        zone=NoiseZone.RED,
        label="Red Zone",
        color="#ef4444",
        requirements=list(RED_REQUIREMENTS),
    )


def check_compliance(lex8h: float) -> ComplianceCheck:
    """Map LEX,8h onto SANS 10083 action / limit levels."""
    if lex8h < SANS_EXPOSURE.action_level_db:
        return ComplianceCheck(
            is_compliant=True,
            level=ComplianceLevel.SAFE,
            severity=ComplianceSeverity.INFO,
            action_required=list(SAFE_ACTIONS),
        )
    if lex8h < SANS_EXPOSURE.limit_level_db:
        return ComplianceCheck(
            is_compliant=True,
            level=ComplianceLevel.ACTION,
            severity=ComplianceSeverity.WARNING,
            action_required=list(ACTION_LEVEL_ACTIONS),
        )
    return ComplianceCheck(
        is_compliant=False,
        level=ComplianceLevel.LIMIT_EXCEEDED,
        severity=ComplianceSeverity.CRITICAL,
        action_required=list(LIMIT_EXCEEDED_ACTIONS),
    )


# =============================================================================
# SUMMARIES
# =============================================================================

def get_exposure_summary(
    laeq: float,
    exposure_hours: float,
    shift_hours: float,
) -> ExposureSummary:
    """
    Aggregate exposure assessment.

    Args:
        laeq: Equivalent continuous level during exposure (dB(A))
        exposure_hours: Time exposed per day
        shift_hours: Total shift duration

    Returns:
        ExposureSummary with LEX,8h, dose, zone and compliance
    """
    lex8h = calculate_lex8h(laeq, exposure_hours)
    permitted = permitted_exposure_time(laeq)

    summary = ExposureSummary(
        laeq=laeq,
        exposure_hours=exposure_hours,
        shift_hours=shift_hours,
        lex8h=lex8h,
        dose=calculate_noise_dose(laeq, exposure_hours),
        zone=classify_zone(lex8h),
        compliance=check_compliance(lex8h),
        permitted_time=permitted,
        exceeds_limit=exposure_hours > permitted and laeq >= SANS_EXPOSURE.reference_level_db,
    )

    logger.debug(
        f"Exposure: LAeq={laeq:.1f} T={exposure_hours}h -> LEX,8h={lex8h:.1f} "
        f"dose={summary.dose}% zone={summary.zone.zone.value}"
    )
    return summary


def summarize_measurement(measurement: Measurement) -> ExposureSummary:
    """
    Exposure summary for one recorded measurement.

    Exposure hours fall back to the shift duration and then to 8 h when
    missing or zero; shift hours fall back to 8 h.
    """
    default_hours = SANS_EXPOSURE.reference_time_h
    exposure_hours = (
        parse_number(measurement.exposure_time)
        or parse_number(measurement.shift_duration)
        or default_hours
    )
    shift_hours = parse_number(measurement.shift_duration) or default_hours
    return get_exposure_summary(average_laeq(measurement.readings), exposure_hours, shift_hours)


def worst_case_exposure(measurements: Iterable[Measurement]) -> Optional[ExposureSummary]:
    """
    Measurement summary with the highest LEX,8h.

    The first measurement wins ties. Returns None for no measurements.
    """
    worst: Optional[ExposureSummary] = None
    for measurement in measurements:
        summary = summarize_measurement(measurement)
        if worst is None or summary.lex8h > worst.lex8h:
            worst = summary
    return worst


def summarize_readings(
    readings: List[Any],
    exposure_hours: float = 8.0,
    shift_hours: Optional[float] = None,
) -> ExposureSummary:
    """Exposure summary straight from raw readings."""
    return get_exposure_summary(
        average_laeq(readings),
        exposure_hours,
        shift_hours if shift_hours is not None else exposure_hours,
    )
