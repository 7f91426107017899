"""
noisesurvey Audiometry Results

Result dataclasses for audiometric evaluation.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..core.enums import AffectedEar, DisplaySeverity, HearingLossClass, STSSeverity
from ..core.models import AudiometryTest


# =============================================================================
# STANDARD THRESHOLD SHIFT
# =============================================================================

@dataclass
class STSResult:
    """
    Standard threshold shift against the baseline audiogram.

    Shift is the change in hearing threshold average at 2/3/4 kHz;
    STS is present when either ear shifts by 10 dB or more.
    """
    has_sts: bool
    left_shift: float  # dB
    right_shift: float  # dB
    affected_ear: AffectedEar
    severity: STSSeverity
    message: str

    @property
    def max_shift(self) -> float:
        return max(self.left_shift, self.right_shift)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "has_sts": self.has_sts,
            "left_shift": round(self.left_shift, 2),
            "right_shift": round(self.right_shift, 2),
            "affected_ear": self.affected_ear.value,
            "severity": self.severity.value,
            "message": self.message,
        }


# =============================================================================
# HEARING LOSS
# =============================================================================

@dataclass
class HearingLossClassification:
    """WHO hearing loss grade for one ear."""
    pta: float  # Pure tone average, dB HL
    classification: HearingLossClass
    message: str
    severity: DisplaySeverity

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pta": round(self.pta, 2),
            "classification": self.classification.value,
            "message": self.message,
            "severity": self.severity.value,
        }


# =============================================================================
# EMPLOYEE SUMMARY
# =============================================================================

@dataclass
class AudiometrySummary:
    """Hearing conservation status of one employee."""
    has_baseline: bool
    latest_test: Optional[AudiometryTest] = None
    has_sts: bool = False
    sts_details: Optional[STSResult] = None
    left_hearing_loss: Optional[HearingLossClassification] = None
    right_hearing_loss: Optional[HearingLossClassification] = None
    recommendations: List[str] = field(default_factory=list)

    @property
    def sts_severity(self) -> STSSeverity:
        """Severity of the recomputed shift; NONE without periodic tests."""
        if self.sts_details is None:
            return STSSeverity.NONE
        return self.sts_details.severity

    def to_dict(self) -> Dict[str, Any]:
        return {
            "has_baseline": self.has_baseline,
            "latest_test": self.latest_test.to_dict() if self.latest_test else None,
            "has_sts": self.has_sts,
            "sts_details": self.sts_details.to_dict() if self.sts_details else None,
            "left_hearing_loss": self.left_hearing_loss.to_dict() if self.left_hearing_loss else None,
            "right_hearing_loss": self.right_hearing_loss.to_dict() if self.right_hearing_loss else None,
            "recommendations": list(self.recommendations),
        }


@dataclass
class AudiogramValidation:
    """Range and completeness check of an audiogram."""
    is_valid: bool
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "errors": list(self.errors),
        }
