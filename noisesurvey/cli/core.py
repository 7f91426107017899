"""
cli/core.py - Core CLI infrastructure
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional
import argparse
import json
import logging

from ..bootstrap.config import NoiseSurveyConfig
from ..core.models import SurveyData, SurveyDataError

logger = logging.getLogger("cli")

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_INPUT_ERROR = 2


class OutputFormat(Enum):
    """Output format options."""
    TEXT = "text"
    JSON = "json"


class SurveyInputError(Exception):
    """Survey file could not be read or parsed."""


@dataclass
class CLIContext:
    """Context for CLI operations."""

    config: NoiseSurveyConfig = field(default_factory=NoiseSurveyConfig)

    # Output settings
    output_format: OutputFormat = OutputFormat.TEXT
    verbose: bool = False


@dataclass
class CommandResult:
    """Result of a CLI command execution."""

    success: bool = True
    message: str = ""
    data: Any = None
    error: Optional[str] = None

    # For display formatting; "report" prints the message only
    format_hint: str = "text"
    exit_code: int = EXIT_OK

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "message": self.message,
            "data": self.data,
            "error": self.error,
        }


class CLICommand(ABC):
    """Base class for CLI commands."""

    name: str = "command"
    description: str = "Base command"
    aliases: List[str] = []

    @abstractmethod
    def execute(self, ctx: CLIContext, args: argparse.Namespace) -> CommandResult:
        """Execute the command."""
        pass

    def configure_parser(self, parser: argparse.ArgumentParser) -> None:
        """Configure argument parser for this command."""
        pass


class CommandRegistry:
    """Registry for CLI commands."""

    def __init__(self):
        self._commands: Dict[str, CLICommand] = {}
        self._aliases: Dict[str, str] = {}

    def register(self, command: CLICommand) -> None:
        """Register a command."""
        self._commands[command.name] = command
        for alias in command.aliases:
            self._aliases[alias] = command.name

    def get(self, name: str) -> Optional[CLICommand]:
        """Get command by name or alias."""
        if name in self._commands:
            return self._commands[name]
        if name in self._aliases:
            return self._commands[self._aliases[name]]
        return None

    def list_commands(self) -> List[str]:
        """List all command names."""
        return list(self._commands.keys())

    def get_all(self) -> Dict[str, CLICommand]:
        """Get all commands."""
        return dict(self._commands)


# Global registry
command_registry = CommandRegistry()


def load_survey_file(path: str) -> SurveyData:
    """
    Read a survey snapshot from a JSON file.

    Raises:
        SurveyInputError: if the file is missing, unreadable, not JSON or
            not a survey object
    """
    survey_path = Path(path)
    try:
        with open(survey_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        raise SurveyInputError(f"File not found: {survey_path}")
    except json.JSONDecodeError as e:
        raise SurveyInputError(f"Invalid JSON in {survey_path}: {e}")
    except OSError as e:
        raise SurveyInputError(f"Cannot read {survey_path}: {e}")

    try:
        return SurveyData.from_dict(data)
    except SurveyDataError as e:
        raise SurveyInputError(f"{survey_path}: {e}")


def input_error(message: str) -> CommandResult:
    """Result for unusable command input."""
    logger.error(message)
    return CommandResult(success=False, error=message, exit_code=EXIT_INPUT_ERROR)


def format_output(result: CommandResult, format: OutputFormat) -> str:
    """Format command result for display."""
    if format == OutputFormat.JSON:
        return json.dumps(result.to_dict(), indent=2, default=str)

    if not result.success:
        return f"Error: {result.error}"

    if result.format_hint == "report":
        return result.message

    output = result.message
    if result.data:
        if isinstance(result.data, dict):
            for k, v in result.data.items():
                output += f"\n  {k}: {v}"
        else:
            output += f"\n{result.data}"
    return output
