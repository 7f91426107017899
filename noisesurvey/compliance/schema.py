"""
noisesurvey Compliance Schema

Validation issue and result data structures.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..core.area_key import AreaKey
from .enums import IssueCategory, IssueSeverity


@dataclass
class ValidationIssue:
    """Single finding from survey validation."""

    severity: IssueSeverity
    category: IssueCategory
    message: str
    recommendation: str
    area_name: Optional[str] = None
    area_key: Optional[AreaKey] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "severity": self.severity.value,
            "category": self.category.value,
            "message": self.message,
            "area_name": self.area_name,
            "area_key": self.area_key.to_dict() if self.area_key else None,
            "recommendation": self.recommendation,
        }


@dataclass
class ValidationSummary:
    """Issue counts by severity."""

    total_issues: int = 0
    critical_count: int = 0
    warning_count: int = 0
    info_count: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "total_issues": self.total_issues,
            "critical_count": self.critical_count,
            "warning_count": self.warning_count,
            "info_count": self.info_count,
        }


@dataclass
class ValidationResult:
    """
    Complete survey validation result.

    A survey is valid when it has no critical issues.
    """

    is_valid: bool
    critical_issues: List[ValidationIssue] = field(default_factory=list)
    warnings: List[ValidationIssue] = field(default_factory=list)
    info: List[ValidationIssue] = field(default_factory=list)
    summary: ValidationSummary = field(default_factory=ValidationSummary)

    @property
    def all_issues(self) -> List[ValidationIssue]:
        """Every issue, most severe first."""
        return [*self.critical_issues, *self.warnings, *self.info]

    def issues_for(self, category: IssueCategory) -> List[ValidationIssue]:
        return [i for i in self.all_issues if i.category == category]

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "is_valid": self.is_valid,
            "critical_issues": [i.to_dict() for i in self.critical_issues],
            "warnings": [i.to_dict() for i in self.warnings],
            "info": [i.to_dict() for i in self.info],
            "summary": self.summary.to_dict(),
        }
