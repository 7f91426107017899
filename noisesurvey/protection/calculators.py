"""
noisesurvey Protection Calculators

Hearing protection device (HPD) effectiveness per SANS 10083.

Ratings are derated for real-world fit:
- SNR (EN 352):  effective = SNR - 4
- NRR (ANSI):    effective = (NRR - 7) / 2

Protected exposure is never modelled below the 40 dB(A) ambient floor.
"""

from __future__ import annotations
from typing import List, Optional, Sequence, Union
import logging

from ..core.coercion import parse_number, try_parse_number
from ..core.constants import HPD_CRITERIA, SANS_EXPOSURE
from ..core.enums import AdequacyLevel, DisplaySeverity, RatingType
from ..core.models import HearingProtectionDevice
from ..exposure.calculators import classify_zone
from .results import AdequacyAssessment, DeviceRecommendation, ProtectionSummary

logger = logging.getLogger(__name__)

Rating = Union[RatingType, str]


# =============================================================================
# ATTENUATION
# =============================================================================

def effective_attenuation(rating_type: Rating, value: float) -> float:
    """
    Derated attenuation in dB(A).

    Unknown rating types give no attenuation.
    """
    if rating_type == RatingType.SNR:
        return max(0.0, value - HPD_CRITERIA.snr_derating_db)
    if rating_type == RatingType.NRR:
        return max(
            0.0,
            (value - HPD_CRITERIA.nrr_c_to_a_offset_db) / HPD_CRITERIA.nrr_safety_divisor,
        )
    return 0.0


def protected_exposure(actual_lex8h: float, rating_type: Rating, value: float) -> float:
    """LEX,8h at the ear with the device worn, floored at 40 dB(A)."""
    return max(
        HPD_CRITERIA.ambient_floor_db,
        actual_lex8h - effective_attenuation(rating_type, value),
    )


# =============================================================================
# ADEQUACY
# =============================================================================

def assess_adequacy(actual_lex8h: float, protected_lex8h: float) -> AdequacyAssessment:
    """
    Grade protection for an exposure.

    Over-protection (reduction > 25 dB) is reported before any
    protected-level band, so a very low protected level can still read
    as over-protected.
    """
    reduction = actual_lex8h - protected_lex8h

    if reduction > HPD_CRITERIA.over_protection_reduction_db:
        return AdequacyAssessment(
            is_adequate=True,
            level=AdequacyLevel.OVER_PROTECTED,
            message="Over-protected - may impair communication and safety awareness",
            severity=DisplaySeverity.WARNING,
            recommendations=[
                "Consider lower attenuation HPD to maintain situational awareness",
                "Ensure workers can hear warning signals and communication",
                "May cause workers to remove HPD, defeating protection",
            ],
        )

    if protected_lex8h < HPD_CRITERIA.excellent_below_db:
        return AdequacyAssessment(
            is_adequate=True,
            level=AdequacyLevel.EXCELLENT,
            message="Excellent protection - well below action levels",
            severity=DisplaySeverity.SUCCESS,
            recommendations=[
                "Current HPD provides excellent protection",
                "Continue monitoring and enforcement",
                "Maintain proper fitting and usage",
            ],
        )

    if protected_lex8h < HPD_CRITERIA.good_below_db:
        return AdequacyAssessment(
            is_adequate=True,
            level=AdequacyLevel.GOOD,
            message="Good protection - comfortably below action level",
            severity=DisplaySeverity.SUCCESS,
            recommendations=[
                "Current HPD provides good protection",
                "Ensure proper fitting and consistent usage",
                "Continue monitoring compliance",
            ],
        )

    if protected_lex8h < HPD_CRITERIA.acceptable_below_db:
        return AdequacyAssessment(
            is_adequate=True,
            level=AdequacyLevel.ACCEPTABLE,
            message="Acceptable protection - below action level",
            severity=DisplaySeverity.INFO,
            recommendations=[
                "Protection is adequate but with limited safety margin",
                "Ensure 100% wearing compliance",
                "Consider higher attenuation HPD for additional safety margin",
                "Investigate engineering controls to reduce noise at source",
            ],
        )

    # Action level still exceeded with the device worn
    if protected_lex8h < HPD_CRITERIA.marginal_below_db:
        return AdequacyAssessment(
            is_adequate=False,
            level=AdequacyLevel.MARGINAL,
            message="Marginal protection - still in Orange Zone (action level exceeded)",
            severity=DisplaySeverity.WARNING,
            recommendations=[
                "URGENT: Upgrade to higher attenuation HPD immediately",
                "Protected exposure still exceeds 85 dB(A) action level",
                "Implement engineering controls as priority",
                "Double hearing protection may be required",
                "Reduce exposure time if controls are insufficient",
            ],
        )

    return AdequacyAssessment(
        is_adequate=False,
        level=AdequacyLevel.INADEQUATE,
        message="INADEQUATE protection - still exceeds limit even with HPD",
        severity=DisplaySeverity.ERROR,
        recommendations=[
            "CRITICAL: Current HPD is insufficient - Red Zone limit exceeded",
            "IMMEDIATE ACTION: Implement double hearing protection (earplugs + earmuffs)",
            "Engineering controls MANDATORY to reduce noise at source",
            "Reduce exposure time immediately",
            "Reassess area access - consider exclusion until controls implemented",
            "Medical surveillance required for all exposed workers",
        ],
    )


# =============================================================================
# DEVICE SELECTION
# =============================================================================

def recommend_best_device(
    devices: Sequence[HearingProtectionDevice],
    actual_lex8h: float,
) -> Optional[DeviceRecommendation]:
    """
    Pick the most suitable device in good condition.

    Among devices bringing the protected level below 85 dB(A) the one with
    the least attenuation is preferred; otherwise the device closest to
    the 80 dB(A) target. Earlier devices win ties.

    Returns:
        DeviceRecommendation, or None when no devices are issued
    """
    if not devices:
        return None

    candidates = [
        (index, protected_exposure(actual_lex8h, d.snr_or_nrr, parse_number(d.snr_value)))
        for index, d in enumerate(devices)
        if d.is_good_condition
    ]

    if not candidates:
        return DeviceRecommendation(
            best_device_index=0,
            reason="No devices in good condition - all devices need replacement",
        )

    target = HPD_CRITERIA.optimal_target_db
    below_action = SANS_EXPOSURE.action_level_db

    best_index, best_level = candidates[0]
    for index, level in candidates[1:]:
        if level < below_action and best_level < below_action:
            if level > best_level:
                best_index, best_level = index, level
        elif abs(level - target) < abs(best_level - target):
            best_index, best_level = index, level

    adequacy = assess_adequacy(actual_lex8h, best_level)
    if adequacy.is_adequate:
        reason = f"Provides {adequacy.level.value} protection ({best_level:.1f} dB(A) protected level)"
    else:
        reason = (
            f"Warning: Even best device provides {adequacy.level.value} protection "
            "- additional controls needed"
        )

    logger.debug(f"Best HPD for {actual_lex8h:.1f} dB(A): device #{best_index} ({reason})")
    return DeviceRecommendation(best_device_index=best_index, reason=reason)


def representative_device(
    devices: Sequence[HearingProtectionDevice],
) -> Optional[HearingProtectionDevice]:
    """First device in good condition, else the first device."""
    if not devices:
        return None
    for device in devices:
        if device.is_good_condition:
            return device
    return devices[0]


def get_protection_summary(
    actual_lex8h: float,
    devices: Sequence[HearingProtectionDevice],
) -> Optional[ProtectionSummary]:
    """
    Protection effectiveness of the representative device.

    Returns None when there is nothing to assess: no devices, no
    exposure (0 dB(A)) or an unparseable device rating.
    """
    device = representative_device(devices)
    if device is None or actual_lex8h == 0:
        return None

    rating = try_parse_number(device.snr_value)
    if rating is None:
        logger.debug(f"Unparseable HPD rating {device.snr_value!r}, no protection summary")
        return None

    attenuation = effective_attenuation(device.snr_or_nrr, rating)
    protected_lex8h = protected_exposure(actual_lex8h, device.snr_or_nrr, rating)

    return ProtectionSummary(
        actual_lex8h=actual_lex8h,
        protected_lex8h=protected_lex8h,
        effective_attenuation=attenuation,
        actual_zone=classify_zone(actual_lex8h),
        protected_zone=classify_zone(protected_lex8h),
        adequacy=assess_adequacy(actual_lex8h, protected_lex8h),
        device_summary=(
            f"{device.type} - {device.manufacturer} "
            f"({device.snr_or_nrr}: {device.snr_value} dB)"
        ),
    )


def assess_devices(
    actual_lex8h: float,
    devices: Sequence[HearingProtectionDevice],
) -> List[AdequacyAssessment]:
    """Adequacy of every device in list order (unparseable ratings as 0 dB)."""
    return [
        assess_adequacy(
            actual_lex8h,
            protected_exposure(actual_lex8h, d.snr_or_nrr, parse_number(d.snr_value)),
        )
        for d in devices
    ]
