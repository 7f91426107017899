"""
reporting/ - Survey reporting

Per-area roll-up of a survey with its validation outcome, as data or
plain text.
"""

from .summary import (
    AreaReport,
    SurveyReport,
    build_survey_report,
    format_report_text,
)

__all__ = [
    "AreaReport",
    "SurveyReport",
    "build_survey_report",
    "format_report_text",
]
