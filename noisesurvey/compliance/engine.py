"""
noisesurvey Compliance Engine

Central survey validation engine.
"""

from __future__ import annotations
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Union
import logging

from ..bootstrap.config import ValidationConfig
from ..core.models import SurveyData
from .checkers import SurveyChecker, SurveyContext, get_checker
from .enums import CheckCategory, IssueSeverity
from .schema import ValidationIssue, ValidationResult, ValidationSummary

logger = logging.getLogger(__name__)


class SurveyValidationEngine:
    """
    Central survey validation engine.

    Runs one checker per CheckCategory, in category order, over a shared
    SurveyContext and partitions the issues by severity.
    """

    def __init__(self, config: Optional[ValidationConfig] = None):
        """
        Initialize validation engine.

        Args:
            config: Validation thresholds (defaults to ValidationConfig())
        """
        self.config = config or ValidationConfig()
        self._custom_checkers: Dict[CheckCategory, SurveyChecker] = {}

    def register_checker(self, category: CheckCategory, checker: SurveyChecker) -> None:
        """Register a custom checker for a category."""
        self._custom_checkers[category] = checker

    def get_checker(self, category: CheckCategory) -> Optional[SurveyChecker]:
        """Get checker for category, preferring custom over default."""
        return self._custom_checkers.get(category) or get_checker(category)

    def _context(self, survey: SurveyData, as_of: Optional[date]) -> SurveyContext:
        return SurveyContext(survey=survey, as_of=as_of or date.today(), config=self.config)

    def evaluate(self, survey: SurveyData, as_of: Optional[date] = None) -> ValidationResult:
        """
        Validate a survey snapshot.

        Args:
            survey: Survey to validate (not modified)
            as_of: Reference date for certificate and retest checks
                (defaults to today)

        Returns:
            ValidationResult; valid when there are no critical issues
        """
        context = self._context(survey, as_of)

        issues: List[ValidationIssue] = []
        for category in CheckCategory:
            checker = self.get_checker(category)
            if checker is None:
                logger.warning(f"No checker available for category {category.value}")
                continue
            found = checker.check(context)
            logger.debug(f"{category.value}: {len(found)} issue(s)")
            issues.extend(found)

        result = self._partition(issues)
        logger.info(
            f"Survey validation complete: {result.summary.critical_count} critical, "
            f"{result.summary.warning_count} warnings, {result.summary.info_count} info"
        )
        return result

    def evaluate_category(
        self,
        survey: SurveyData,
        category: CheckCategory,
        as_of: Optional[date] = None,
    ) -> List[ValidationIssue]:
        """
        Run a single check.

        Args:
            survey: Survey to validate
            category: Check to run
            as_of: Reference date (defaults to today)

        Returns:
            Issues from that check, in display order
        """
        checker = self.get_checker(category)
        if checker is None:
            logger.warning(f"No checker available for category {category.value}")
            return []
        return checker.check(self._context(survey, as_of))

    def _partition(self, issues: List[ValidationIssue]) -> ValidationResult:
        """Split issues by severity, keeping check order within each."""
        by_severity: Dict[IssueSeverity, List[ValidationIssue]] = {s: [] for s in IssueSeverity}
        for issue in issues:
            by_severity[issue.severity].append(issue)

        critical = by_severity[IssueSeverity.CRITICAL]
        return ValidationResult(
            is_valid=not critical,
            critical_issues=critical,
            warnings=by_severity[IssueSeverity.WARNING],
            info=by_severity[IssueSeverity.INFO],
            summary=ValidationSummary(
                total_issues=len(issues),
                critical_count=len(critical),
                warning_count=len(by_severity[IssueSeverity.WARNING]),
                info_count=len(by_severity[IssueSeverity.INFO]),
            ),
        )


def validate_survey(
    data: Union[SurveyData, Mapping[str, Any]],
    as_of: Optional[date] = None,
    config: Optional[ValidationConfig] = None,
) -> ValidationResult:
    """
    Validate a survey snapshot for SANS 10083 completeness.

    Args:
        data: SurveyData, or its JSON dict form
        as_of: Reference date for date-dependent checks (defaults to today)
        config: Validation thresholds (defaults to ValidationConfig())

    Raises:
        SurveyDataError: if ``data`` is a non-dict, non-SurveyData payload
    """
    survey = data if isinstance(data, SurveyData) else SurveyData.from_dict(data)
    return SurveyValidationEngine(config).evaluate(survey, as_of)
