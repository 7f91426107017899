"""
cli/ - Command line interface

Survey validation, summaries and quick exposure calculations over survey
JSON files.
"""

from .core import (
    OutputFormat,
    CLIContext,
    CommandResult,
    CLICommand,
    CommandRegistry,
    SurveyInputError,
    command_registry,
    load_survey_file,
    format_output,
    EXIT_OK,
    EXIT_INVALID,
    EXIT_INPUT_ERROR,
)

from .commands import (
    ValidateCommand,
    SummaryCommand,
    ExposureCommand,
    ServeCommand,
    register_default_commands,
)

__all__ = [
    # Core
    "OutputFormat",
    "CLIContext",
    "CommandResult",
    "CLICommand",
    "CommandRegistry",
    "SurveyInputError",
    "command_registry",
    "load_survey_file",
    "format_output",
    "EXIT_OK",
    "EXIT_INVALID",
    "EXIT_INPUT_ERROR",
    # Commands
    "ValidateCommand",
    "SummaryCommand",
    "ExposureCommand",
    "ServeCommand",
    "register_default_commands",
]
