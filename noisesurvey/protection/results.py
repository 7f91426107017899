"""
noisesurvey Protection Results

Result dataclasses for hearing protection calculations.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List

from ..core.enums import AdequacyLevel, DisplaySeverity
from ..exposure.results import ZoneClassification


@dataclass
class AdequacyAssessment:
    """
    Adequacy of hearing protection for an exposure.

    Bands are evaluated in order: over-protection first, then the
    protected level (excellent < 75 <= good < 80 <= acceptable < 85 <=
    marginal < 87 <= inadequate).
    """
    is_adequate: bool
    level: AdequacyLevel
    message: str
    severity: DisplaySeverity
    recommendations: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_adequate": self.is_adequate,
            "level": self.level.value,
            "message": self.message,
            "severity": self.severity.value,
            "recommendations": list(self.recommendations),
        }


@dataclass
class DeviceRecommendation:
    """Best device among those issued for an area."""
    best_device_index: int  # Index into the original device list
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "best_device_index": self.best_device_index,
            "reason": self.reason,
        }


@dataclass
class ProtectionSummary:
    """Protection effectiveness of the representative device for an area."""
    actual_lex8h: float
    protected_lex8h: float
    effective_attenuation: float
    actual_zone: ZoneClassification
    protected_zone: ZoneClassification
    adequacy: AdequacyAssessment
    device_summary: str  # "Earmuffs - 3M (SNR: 28 dB)"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "actual_lex8h": round(self.actual_lex8h, 2),
            "protected_lex8h": round(self.protected_lex8h, 2),
            "effective_attenuation": round(self.effective_attenuation, 2),
            "actual_zone": self.actual_zone.to_dict(),
            "protected_zone": self.protected_zone.to_dict(),
            "adequacy": self.adequacy.to_dict(),
            "device_summary": self.device_summary,
        }
