"""
api/ - HTTP API

FastAPI router and application exposing the survey engines.
"""

from .api_endpoints import (
    router,
    create_survey_router,
    set_validation_config,
    survey_error_response,
)

from .app import create_app

__all__ = [
    "router",
    "create_survey_router",
    "set_validation_config",
    "survey_error_response",
    "create_app",
]
