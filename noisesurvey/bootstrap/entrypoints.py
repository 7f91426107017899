"""
bootstrap/entrypoints.py - Application entry points

Provides the CLI and API server entry points.
"""

from __future__ import annotations
from typing import IO, List
import argparse
import json
import logging
import sys

logger = logging.getLogger("bootstrap.entrypoints")

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]

# Handlers installed by setup_logging, replaced on the next call
_installed_handlers: List[logging.Handler] = []


class JSONFormatter(logging.Formatter):
    """One JSON object per log record."""

    def format(self, record: logging.LogRecord) -> str:
        return json.dumps({
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        })


def setup_logging(
    level: str = "INFO",
    log_file: str = None,
    json_format: bool = False,
    stream: IO[str] = None,
) -> None:
    """
    Configure application logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional log file path
        json_format: Use JSON format for logs
        stream: Console stream (defaults to stdout)
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    if json_format:
        formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )

    # Console handler
    console_handler = logging.StreamHandler(stream or sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(log_level)

    # Root logger
    root_logger = logging.getLogger()
    for handler in _installed_handlers:
        root_logger.removeHandler(handler)
        handler.close()
    _installed_handlers.clear()
    root_logger.setLevel(log_level)
    root_logger.addHandler(console_handler)
    _installed_handlers.append(console_handler)

    # File handler
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        file_handler.setLevel(log_level)
        root_logger.addHandler(file_handler)
        _installed_handlers.append(file_handler)

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    """Top-level parser with one subparser per registered command."""
    from ..cli.commands import register_default_commands
    from ..cli.core import command_registry

    parser = argparse.ArgumentParser(
        description="SANS 10083 noise survey validation",
        prog="noisesurvey",
    )

    parser.add_argument(
        "-c", "--config",
        help="Path to configuration file",
        default=None,
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        default=None,
        help="Log level (defaults to the configured level)",
    )
    parser.add_argument(
        "--log-file",
        help="Log file path",
        default=None,
    )

    register_default_commands(command_registry)
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True
    for name, command in command_registry.get_all().items():
        sub = subparsers.add_parser(
            name,
            help=command.description,
            description=command.description,
            aliases=command.aliases,
        )
        command.configure_parser(sub)
        sub.set_defaults(handler=command)

    return parser


def cli_main(args: List[str] = None) -> int:
    """
    CLI entry point.

    Args:
        args: Command line arguments (defaults to sys.argv)

    Returns:
        Exit code
    """
    parser = build_parser()
    parsed = parser.parse_args(args)

    from .config import load_config
    from ..cli.core import CLIContext, OutputFormat, format_output

    config = load_config(parsed.config)

    # Setup logging; stdout carries command output
    log_level = "DEBUG" if parsed.verbose else (parsed.log_level or config.logging.level)
    setup_logging(
        level=log_level,
        log_file=parsed.log_file or config.logging.log_file,
        json_format=config.logging.json_logs,
        stream=sys.stderr,
    )

    ctx = CLIContext(
        config=config,
        output_format=OutputFormat.JSON if getattr(parsed, "json", False) else OutputFormat.TEXT,
        verbose=parsed.verbose,
    )

    try:
        result = parsed.handler.execute(ctx, parsed)
        output = format_output(result, ctx.output_format)
        if output:
            print(output)
        return result.exit_code

    except KeyboardInterrupt:
        print("\nInterrupted")
        return 130
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        return 1


def api_main(args: List[str] = None) -> int:
    """
    API server entry point.

    Args:
        args: Command line arguments

    Returns:
        Exit code
    """
    parser = argparse.ArgumentParser(
        description="Noise survey API server",
        prog="noisesurvey-api",
    )

    parser.add_argument(
        "-c", "--config",
        help="Path to configuration file",
        default=None,
    )
    parser.add_argument(
        "-p", "--port",
        type=int,
        help="API port",
        default=None,
    )
    parser.add_argument(
        "-H", "--host",
        help="API host",
        default=None,
    )
    parser.add_argument(
        "-w", "--workers",
        type=int,
        help="Number of workers",
        default=None,
    )
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        default="INFO",
        help="Log level",
    )

    parsed = parser.parse_args(args)

    # Setup logging
    setup_logging(level=parsed.log_level)

    try:
        from .config import load_config

        config = load_config(parsed.config)

        # Override config with CLI args
        if parsed.port:
            config.api.port = parsed.port
        if parsed.host:
            config.api.host = parsed.host
        if parsed.workers:
            config.api.workers = parsed.workers

        run_api(config)
        return 0

    except KeyboardInterrupt:
        print("\nShutting down...")
        return 130
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        return 1


def run_api(config) -> None:
    """Serve the HTTP API with uvicorn until interrupted."""
    import uvicorn

    from ..api.app import create_app

    logger.info(f"Starting API server on {config.api.host}:{config.api.port}")
    if config.api.workers > 1:
        # Worker processes build their own app from the loaded config
        uvicorn.run(
            "noisesurvey.api.app:create_app",
            factory=True,
            host=config.api.host,
            port=config.api.port,
            workers=config.api.workers,
            log_level=config.logging.level.lower(),
        )
    else:
        uvicorn.run(
            create_app(config),
            host=config.api.host,
            port=config.api.port,
            log_level=config.logging.level.lower(),
        )


def main() -> None:
    """Console script entry point."""
    sys.exit(cli_main())


def api() -> None:
    """Console script entry point for the API server."""
    sys.exit(api_main())


if __name__ == "__main__":
    main()
