"""
noisesurvey Exposure Results

Result dataclasses for noise exposure calculations.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List

from ..core.enums import ComplianceLevel, ComplianceSeverity, NoiseZone


# =============================================================================
# ZONE CLASSIFICATION
# =============================================================================

@dataclass
class ZoneClassification:
    """SANS 10083 zone with its fixed regulatory requirements."""
    zone: NoiseZone
    label: str  # "Green Zone", "Orange Zone", "Red Zone"
    color: str  # Hex colour for dashboards
    requirements: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "zone": self.zone.value,
            "label": self.label,
            "color": self.color,
            "requirements": list(self.requirements),
        }


# =============================================================================
# COMPLIANCE CHECK
# =============================================================================

@dataclass
class ComplianceCheck:
    """
    Action level compliance for a daily exposure.

    The action level (85-87 dB(A)) is compliant but flagged; the limit
    level (>= 87 dB(A)) is non-compliant.
    """
    is_compliant: bool
    level: ComplianceLevel
    severity: ComplianceSeverity
    action_required: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_compliant": self.is_compliant,
            "level": self.level.value,
            "severity": self.severity.value,
            "action_required": list(self.action_required),
        }


# =============================================================================
# EXPOSURE SUMMARY
# =============================================================================

@dataclass
class ExposureSummary:
    """
    Aggregate exposure assessment for one measurement.

    LEX,8h = LAeq,T + 10 log10(T / 8)
    """
    # Inputs
    laeq: float  # dB(A)
    exposure_hours: float
    shift_hours: float

    # Derived
    lex8h: float  # dB(A)
    dose: float  # Percent of daily allowance
    zone: ZoneClassification
    compliance: ComplianceCheck
    permitted_time: float  # Hours allowed at laeq
    exceeds_limit: bool  # exposure_hours > permitted_time at or above 85 dB(A)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "laeq": self.laeq,
            "exposure_hours": self.exposure_hours,
            "shift_hours": self.shift_hours,
            "lex8h": round(self.lex8h, 2),
            "dose": self.dose,
            "zone": self.zone.to_dict(),
            "compliance": self.compliance.to_dict(),
            "permitted_time": self.permitted_time,
            "exceeds_limit": self.exceeds_limit,
        }
