"""
noisesurvey Core Enumerations

All enumeration types shared by the calculation engines and the
survey validation engine.
"""

from enum import Enum


class EquipmentType(str, Enum):
    """Survey instrument types."""
    SLM = "SLM"                  # Sound level meter
    CALIBRATOR = "Calibrator"    # Acoustic field calibrator
    UNSPECIFIED = ""


class NoiseZone(str, Enum):
    """
    SANS 10083 noise zones.

    green: LEX,8h < 85 dB(A)
    orange: 85 <= LEX,8h < 87 dB(A)
    red: LEX,8h >= 87 dB(A)
    """
    GREEN = "green"
    ORANGE = "orange"
    RED = "red"


class ComplianceLevel(str, Enum):
    """Exposure compliance levels."""
    SAFE = "safe"
    ACTION = "action"
    LIMIT_EXCEEDED = "limit-exceeded"


class ComplianceSeverity(str, Enum):
    """Severity attached to exposure compliance checks and survey issues."""
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


class DisplaySeverity(str, Enum):
    """Severity used for display-oriented assessments (adequacy, hearing loss)."""
    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class RatingType(str, Enum):
    """Hearing protector attenuation rating schemes."""
    SNR = "SNR"  # Single Number Rating (EN 352)
    NRR = "NRR"  # Noise Reduction Rating (ANSI)


class DeviceCondition(str, Enum):
    """Physical condition of a hearing protection device."""
    GOOD = "Good"
    POOR = "Poor"
    UNSPECIFIED = ""


class AdequacyLevel(str, Enum):
    """Hearing protection adequacy bands, ordered by evaluation."""
    OVER_PROTECTED = "over-protected"
    EXCELLENT = "excellent"
    GOOD = "good"
    ACCEPTABLE = "acceptable"
    MARGINAL = "marginal"
    INADEQUATE = "inadequate"


class Ear(str, Enum):
    """Audiogram ear."""
    LEFT = "left"
    RIGHT = "right"


class AffectedEar(str, Enum):
    """Ear(s) showing a standard threshold shift."""
    LEFT = "left"
    RIGHT = "right"
    BOTH = "both"
    NONE = "none"


class STSSeverity(str, Enum):
    """Standard threshold shift severity."""
    NONE = "none"
    MILD = "mild"
    MODERATE = "moderate"
    SEVERE = "severe"


class HearingLossClass(str, Enum):
    """WHO hearing loss grades (pure tone average)."""
    NORMAL = "normal"
    MILD = "mild"
    MODERATE = "moderate"
    SEVERE = "severe"
    PROFOUND = "profound"


class AudiometryTestType(str, Enum):
    """Audiometry test types."""
    BASELINE = "Baseline"
    ANNUAL = "Annual"
    EXIT = "Exit"
    FOLLOW_UP = "Follow-up"


class Gender(str, Enum):
    """Employee gender as recorded for age correction."""
    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"


class SurveyStatus(str, Enum):
    """Lifecycle status of a survey record."""
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    SUBMITTED = "Submitted"
