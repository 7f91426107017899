"""
noisesurvey Regulatory Constants

SANS 10083 exposure criteria, hearing protector derating, audiometric
thresholds and instrument calibration limits.

References:
- SANS 10083:2013 - The measurement and assessment of occupational noise
  for hearing conservation purposes
- ISO 9612:2009 - Determination of occupational noise exposure
- ISO 1999:2013 Annex B - Age-related hearing threshold (approximated)
- WHO grades of hearing impairment
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Tuple


# =============================================================================
# NOISE EXPOSURE CRITERIA (SANS 10083)
# =============================================================================

@dataclass(frozen=True)
class ExposureCriteria:
    """
    Daily noise exposure criteria.

    Dose uses a 3 dB exchange rate referenced to 85 dB(A) over 8 hours:
    T_allowed = 8 * 2^((85 - L) / 3)
    """
    reference_time_h: float = 8.0  # T0 for LEX,8h normalisation
    reference_level_db: float = 85.0  # Criterion level for dose
    exchange_rate_db: float = 3.0  # Equal-energy exchange rate

    action_level_db: float = 85.0  # Orange zone lower bound
    limit_level_db: float = 87.0  # Red zone lower bound

    def to_dict(self) -> Dict[str, float]:
        return {
            "reference_time_h": self.reference_time_h,
            "reference_level_db": self.reference_level_db,
            "exchange_rate_db": self.exchange_rate_db,
            "action_level_db": self.action_level_db,
            "limit_level_db": self.limit_level_db,
        }


# Singleton instance
SANS_EXPOSURE = ExposureCriteria()


# =============================================================================
# HEARING PROTECTION CRITERIA
# =============================================================================

@dataclass(frozen=True)
class ProtectionCriteria:
    """
    Hearing protector derating and adequacy bands.

    SNR:  effective = SNR - 4
    NRR:  effective = (NRR - 7) / 2
    """
    snr_derating_db: float = 4.0
    nrr_c_to_a_offset_db: float = 7.0
    nrr_safety_divisor: float = 2.0

    ambient_floor_db: float = 40.0  # Protected level never modelled below this

    over_protection_reduction_db: float = 25.0  # Reduction above this impairs awareness
    excellent_below_db: float = 75.0
    good_below_db: float = 80.0
    acceptable_below_db: float = 85.0
    marginal_below_db: float = 87.0

    optimal_target_db: float = 80.0  # Device selection target when none is adequate

    def to_dict(self) -> Dict[str, float]:
        return {
            "snr_derating_db": self.snr_derating_db,
            "nrr_c_to_a_offset_db": self.nrr_c_to_a_offset_db,
            "nrr_safety_divisor": self.nrr_safety_divisor,
            "ambient_floor_db": self.ambient_floor_db,
            "over_protection_reduction_db": self.over_protection_reduction_db,
            "excellent_below_db": self.excellent_below_db,
            "good_below_db": self.good_below_db,
            "acceptable_below_db": self.acceptable_below_db,
            "marginal_below_db": self.marginal_below_db,
            "optimal_target_db": self.optimal_target_db,
        }


# Singleton instance
HPD_CRITERIA = ProtectionCriteria()


# =============================================================================
# AUDIOMETRY CRITERIA
# =============================================================================

# Standard audiometric test frequencies (Hz)
AUDIOGRAM_FREQUENCIES: Tuple[int, ...] = (500, 1000, 2000, 3000, 4000, 6000, 8000)

# STS is assessed on the average shift at these frequencies
STS_FREQUENCIES: Tuple[int, ...] = (2000, 3000, 4000)

# Pure tone average for WHO grading
PTA_FREQUENCIES: Tuple[int, ...] = (500, 1000, 2000, 4000)


@dataclass(frozen=True)
class AudiometryCriteria:
    """
    Standard threshold shift and hearing loss grading thresholds.

    STS: average shift >= 10 dB at 2/3/4 kHz in either ear.
    """
    sts_shift_db: float = 10.0
    sts_moderate_db: float = 20.0
    sts_severe_db: float = 25.0

    # WHO grades on PTA (upper bounds, inclusive)
    normal_max_db: float = 25.0
    mild_max_db: float = 40.0
    moderate_max_db: float = 60.0
    severe_max_db: float = 80.0

    # Valid audiometer threshold range (dB HL)
    threshold_min_db: float = -10.0
    threshold_max_db: float = 120.0

    retest_interval_years: int = 1

    def to_dict(self) -> Dict[str, float]:
        return {
            "sts_shift_db": self.sts_shift_db,
            "sts_moderate_db": self.sts_moderate_db,
            "sts_severe_db": self.sts_severe_db,
            "normal_max_db": self.normal_max_db,
            "mild_max_db": self.mild_max_db,
            "moderate_max_db": self.moderate_max_db,
            "severe_max_db": self.severe_max_db,
            "threshold_min_db": self.threshold_min_db,
            "threshold_max_db": self.threshold_max_db,
            "retest_interval_years": self.retest_interval_years,
        }


# Singleton instance
AUDIOMETRY_CRITERIA = AudiometryCriteria()


# ISO 1999 Annex B approximation: dB per year above age 20, by lower band edge (Hz)
AGE_CORRECTION_RATES: Tuple[Tuple[int, float], ...] = (
    (4000, 0.5),
    (2000, 0.3),
    (1000, 0.15),
    (0, 0.1),
)
AGE_CORRECTION_MIN_AGE = 18
AGE_CORRECTION_BASE_AGE = 20
AGE_CORRECTION_MALE_FACTOR = 1.2


# =============================================================================
# INSTRUMENT CALIBRATION CRITERIA
# =============================================================================

@dataclass(frozen=True)
class CalibrationCriteria:
    """
    Field calibration and certificate limits for survey instruments.
    """
    drift_limit_db: float = 1.0  # |pre - post| above this fails
    drift_warning_db: float = 0.5  # |pre - post| above this is elevated
    certificate_validity_years: int = 1
    near_expiry_days: int = 30

    reference_spl_min_db: float = 90.0  # Calibrator reference tone range
    reference_spl_max_db: float = 125.0

    def to_dict(self) -> Dict[str, float]:
        return {
            "drift_limit_db": self.drift_limit_db,
            "drift_warning_db": self.drift_warning_db,
            "certificate_validity_years": self.certificate_validity_years,
            "near_expiry_days": self.near_expiry_days,
            "reference_spl_min_db": self.reference_spl_min_db,
            "reference_spl_max_db": self.reference_spl_max_db,
        }


# Singleton instance
CALIBRATION_CRITERIA = CalibrationCriteria()


# Plausible range for a single dB(A) reading
READING_MIN_DB = 30.0
READING_MAX_DB = 140.0
READING_VERY_HIGH_DB = 120.0
