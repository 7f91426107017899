"""
noisesurvey Hearing Protection Engine

Derates HPD ratings, computes protected exposure, grades adequacy and
recommends the most suitable device for an area.
"""

from .results import (
    AdequacyAssessment,
    DeviceRecommendation,
    ProtectionSummary,
)

from .calculators import (
    effective_attenuation,
    protected_exposure,
    assess_adequacy,
    assess_devices,
    recommend_best_device,
    representative_device,
    get_protection_summary,
)

__all__ = [
    # Results
    "AdequacyAssessment",
    "DeviceRecommendation",
    "ProtectionSummary",

    # Calculators
    "effective_attenuation",
    "protected_exposure",
    "assess_adequacy",
    "assess_devices",
    "recommend_best_device",
    "representative_device",
    "get_protection_summary",
]
