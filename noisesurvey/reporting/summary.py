"""
reporting/summary.py - Plain-text survey summary

Per-area exposure, protection and audiometry roll-up of a survey with its
validation issues, for the CLI and for attaching to survey records.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional

from ..bootstrap.config import ValidationConfig
from ..core.area_key import AreaKey
from ..core.area_tree import collect_leaf_areas
from ..core.enums import AdequacyLevel, ComplianceLevel, NoiseZone
from ..core.models import SurveyData
from ..audiometry.calculators import get_audiometry_summary
from ..compliance.engine import SurveyValidationEngine
from ..compliance.schema import ValidationResult
from ..exposure.calculators import worst_case_exposure
from ..protection.calculators import get_protection_summary


@dataclass
class AreaReport:
    """Roll-up of one leaf area."""
    key: AreaKey
    name: str
    measurement_count: int = 0

    # Worst-case exposure (None when unmeasured)
    lex8h: Optional[float] = None
    zone: Optional[NoiseZone] = None
    compliance: Optional[ComplianceLevel] = None

    # Hearing protection (None when no device assessed)
    protected_lex8h: Optional[float] = None
    adequacy: Optional[AdequacyLevel] = None

    # Audiometry
    employee_count: int = 0
    sts_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key.to_dict(),
            "name": self.name,
            "measurement_count": self.measurement_count,
            "lex8h": round(self.lex8h, 1) if self.lex8h is not None else None,
            "zone": self.zone.value if self.zone else None,
            "compliance": self.compliance.value if self.compliance else None,
            "protected_lex8h": round(self.protected_lex8h, 1) if self.protected_lex8h is not None else None,
            "adequacy": self.adequacy.value if self.adequacy else None,
            "employee_count": self.employee_count,
            "sts_count": self.sts_count,
        }


@dataclass
class SurveyReport:
    """Survey header, per-area roll-up and validation outcome."""
    client: str
    project: str
    site: str
    start_date: str
    end_date: str
    as_of: date
    areas: List[AreaReport] = field(default_factory=list)
    validation: Optional[ValidationResult] = None

    @property
    def zone_counts(self) -> Dict[str, int]:
        counts = {zone.value: 0 for zone in NoiseZone}
        for area in self.areas:
            if area.zone is not None:
                counts[area.zone.value] += 1
        return counts

    def to_dict(self) -> Dict[str, Any]:
        return {
            "client": self.client,
            "project": self.project,
            "site": self.site,
            "start_date": self.start_date,
            "end_date": self.end_date,
            "as_of": self.as_of.isoformat(),
            "zone_counts": self.zone_counts,
            "areas": [a.to_dict() for a in self.areas],
            "validation": self.validation.to_dict() if self.validation else None,
        }


def build_survey_report(
    survey: SurveyData,
    as_of: Optional[date] = None,
    config: Optional[ValidationConfig] = None,
) -> SurveyReport:
    """
    Summarize a survey area by area and validate it.

    Args:
        survey: Survey snapshot
        as_of: Reference date for date-dependent checks (defaults to today)
        config: Validation thresholds (defaults to ValidationConfig())
    """
    as_of = as_of or date.today()
    areas: List[AreaReport] = []

    for leaf in collect_leaf_areas(survey):
        measurements = survey.measurements_for(leaf.key)
        employees = survey.employees_for(leaf.key)
        area = AreaReport(
            key=leaf.key,
            name=leaf.name,
            measurement_count=len(measurements),
            employee_count=len(employees),
            sts_count=sum(
                1 for e in employees if get_audiometry_summary(e, as_of).has_sts
            ),
        )

        worst = worst_case_exposure(measurements)
        if worst is not None:
            area.lex8h = worst.lex8h
            area.zone = worst.zone.zone
            area.compliance = worst.compliance.level

            protection = get_protection_summary(worst.lex8h, survey.devices_for(leaf.key))
            if protection is not None:
                area.protected_lex8h = protection.protected_lex8h
                area.adequacy = protection.adequacy.level

        areas.append(area)

    return SurveyReport(
        client=survey.client,
        project=survey.project,
        site=survey.site,
        start_date=survey.start_date,
        end_date=survey.end_date,
        as_of=as_of,
        areas=areas,
        validation=SurveyValidationEngine(config).evaluate(survey, as_of),
    )


def _format_level(value: Optional[float]) -> str:
    return "N/A" if value is None else f"{value:.1f} dB(A)"


def format_report_text(report: SurveyReport) -> str:
    """Render a SurveyReport as plain text."""
    lines = [
        "NOISE SURVEY SUMMARY (SANS 10083)",
        "=" * 40,
        f"Client:  {report.client or 'N/A'}",
        f"Project: {report.project or 'N/A'}",
        f"Site:    {report.site or 'N/A'}",
        f"Period:  {report.start_date or '?'} to {report.end_date or '?'}",
        f"As of:   {report.as_of.isoformat()}",
        "",
        "Zones: " + ", ".join(f"{zone} {count}" for zone, count in report.zone_counts.items()),
        "",
        "AREAS",
        "-" * 40,
    ]

    if not report.areas:
        lines.append("No areas defined")
    for area in report.areas:
        zone = area.zone.value.upper() if area.zone else "UNMEASURED"
        lines.append(f"{area.name} [{zone}]")
        lines.append(f"  Measurements: {area.measurement_count}  LEX,8h: {_format_level(area.lex8h)}")
        if area.adequacy is not None:
            lines.append(
                f"  Protected: {_format_level(area.protected_lex8h)} ({area.adequacy.value})"
            )
        if area.employee_count:
            lines.append(f"  Employees: {area.employee_count}  STS: {area.sts_count}")

    validation = report.validation
    if validation is not None:
        summary = validation.summary
        lines += [
            "",
            "VALIDATION",
            "-" * 40,
            f"Status: {'VALID' if validation.is_valid else 'INVALID'} "
            f"({summary.critical_count} critical, {summary.warning_count} warnings, "
            f"{summary.info_count} info)",
        ]
        for issue in validation.all_issues:
            where = f" - {issue.area_name}" if issue.area_name else ""
            lines.append(f"[{issue.severity.value.upper()}] {issue.category.value}{where}: {issue.message}")

    return "\n".join(lines)
