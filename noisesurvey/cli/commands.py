"""
cli/commands.py - CLI command implementations
"""

from __future__ import annotations
from datetime import date
from typing import Optional
import argparse

from ..core.coercion import parse_date, parse_numbers
from ..compliance.engine import SurveyValidationEngine
from ..exposure.calculators import summarize_readings
from ..reporting.summary import build_survey_report, format_report_text
from .core import (
    EXIT_INVALID,
    EXIT_OK,
    CLICommand,
    CLIContext,
    CommandRegistry,
    CommandResult,
    OutputFormat,
    SurveyInputError,
    input_error,
    load_survey_file,
)


def _add_as_of(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--as-of",
        default=None,
        help="Reference date (YYYY-MM-DD) for certificate and retest checks",
    )


def _parse_as_of(value: Optional[str]) -> Optional[date]:
    """None for no date; raises SurveyInputError when unparseable."""
    if value is None:
        return None
    parsed = parse_date(value)
    if parsed is None:
        raise SurveyInputError(f"Invalid --as-of date: {value}")
    return parsed


class ValidateCommand(CLICommand):
    """Validate a survey file."""

    name = "validate"
    description = "Validate a survey JSON file for SANS 10083 completeness"
    aliases = ["check"]

    def configure_parser(self, parser: argparse.ArgumentParser) -> None:
        parser.add_argument("path", help="Path to survey JSON file")
        _add_as_of(parser)
        parser.add_argument("--json", action="store_true", help="Output in JSON format")

    def execute(self, ctx: CLIContext, args: argparse.Namespace) -> CommandResult:
        try:
            as_of = _parse_as_of(args.as_of)
            survey = load_survey_file(args.path)
        except SurveyInputError as e:
            return input_error(str(e))

        result = SurveyValidationEngine(ctx.config.validation).evaluate(survey, as_of)
        summary = result.summary

        lines = [
            f"Survey {'valid' if result.is_valid else 'INVALID'}: "
            f"{summary.critical_count} critical, {summary.warning_count} warnings, "
            f"{summary.info_count} info"
        ]
        for issue in result.all_issues:
            where = f" ({issue.area_name})" if issue.area_name else ""
            lines.append(f"  [{issue.severity.value.upper()}] {issue.category.value}{where}: {issue.message}")
            if ctx.verbose:
                lines.append(f"      -> {issue.recommendation}")

        return CommandResult(
            success=True,
            message="\n".join(lines),
            data=result.to_dict(),
            format_hint="report",
            exit_code=EXIT_OK if result.is_valid else EXIT_INVALID,
        )


class SummaryCommand(CLICommand):
    """Print an area-by-area survey summary."""

    name = "summary"
    description = "Summarize a survey JSON file area by area"
    aliases = ["report"]

    def configure_parser(self, parser: argparse.ArgumentParser) -> None:
        parser.add_argument("path", help="Path to survey JSON file")
        _add_as_of(parser)
        parser.add_argument("--json", action="store_true", help="Output in JSON format")

    def execute(self, ctx: CLIContext, args: argparse.Namespace) -> CommandResult:
        try:
            as_of = _parse_as_of(args.as_of)
            survey = load_survey_file(args.path)
        except SurveyInputError as e:
            return input_error(str(e))

        report = build_survey_report(survey, as_of, ctx.config.validation)
        return CommandResult(
            success=True,
            message=format_report_text(report),
            data=report.to_dict(),
            format_hint="report",
        )


class ExposureCommand(CLICommand):
    """Compute exposure from raw readings."""

    name = "exposure"
    description = "Compute LEX,8h, dose and zone from dB(A) readings"
    aliases = ["lex"]

    def configure_parser(self, parser: argparse.ArgumentParser) -> None:
        parser.add_argument("readings", nargs="+", help="LAeq readings in dB(A)")
        parser.add_argument("--hours", type=float, default=8.0, help="Daily exposure time (h)")
        parser.add_argument("--shift", type=float, default=None, help="Shift duration (h)")
        parser.add_argument("--json", action="store_true", help="Output in JSON format")

    def execute(self, ctx: CLIContext, args: argparse.Namespace) -> CommandResult:
        if not parse_numbers(args.readings):
            return input_error("No numeric readings given")
        if args.hours <= 0:
            return input_error("--hours must be greater than 0")

        summary = summarize_readings(args.readings, args.hours, args.shift)
        data = summary.to_dict()
        if ctx.output_format == OutputFormat.JSON:
            return CommandResult(success=True, message="Exposure summary", data=data)

        return CommandResult(
            success=True,
            message=f"{summary.zone.label}: LEX,8h {summary.lex8h:.1f} dB(A)",
            data={
                "LAeq": f"{summary.laeq:.1f} dB(A)",
                "Exposure": f"{summary.exposure_hours:g} h",
                "Dose": f"{summary.dose:g}%",
                "Permitted time": f"{summary.permitted_time:g} h",
                "Compliance": summary.compliance.level.value,
                "Exceeds limit": "Yes" if summary.exceeds_limit else "No",
            },
        )


class ServeCommand(CLICommand):
    """Run the HTTP API."""

    name = "serve"
    description = "Serve the HTTP API with uvicorn"
    aliases = ["api"]

    def configure_parser(self, parser: argparse.ArgumentParser) -> None:
        parser.add_argument("--host", default=None, help="API host")
        parser.add_argument("--port", type=int, default=None, help="API port")

    def execute(self, ctx: CLIContext, args: argparse.Namespace) -> CommandResult:
        from ..bootstrap.entrypoints import run_api

        if args.host:
            ctx.config.api.host = args.host
        if args.port:
            ctx.config.api.port = args.port

        run_api(ctx.config)
        return CommandResult(success=True, message="Server stopped")


DEFAULT_COMMANDS = [
    ValidateCommand,
    SummaryCommand,
    ExposureCommand,
    ServeCommand,
]


def register_default_commands(registry: CommandRegistry) -> None:
    """Register the built-in commands."""
    for command_cls in DEFAULT_COMMANDS:
        registry.register(command_cls())
