"""
bootstrap/ - Bootstrap Layer

Provides configuration loading, logging setup and the CLI / API entry points.
"""

from .config import (
    NoiseSurveyConfig,
    ValidationConfig,
    APIConfig,
    LoggingConfig,
    load_config,
    get_config,
    reset_config,
)

from .entrypoints import (
    cli_main,
    api_main,
    run_api,
    setup_logging,
)


__all__ = [
    # Config
    "NoiseSurveyConfig",
    "ValidationConfig",
    "APIConfig",
    "LoggingConfig",
    "load_config",
    "get_config",
    "reset_config",
    # Entry Points
    "cli_main",
    "api_main",
    "run_api",
    "setup_logging",
]
