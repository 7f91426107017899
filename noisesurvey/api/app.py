"""
api/app.py - FastAPI application

Wires the survey router with CORS and health endpoints.
"""

from __future__ import annotations
from datetime import datetime, timezone
from typing import Optional
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..bootstrap.config import NoiseSurveyConfig, get_config
from .api_endpoints import create_survey_router

logger = logging.getLogger("api.app")


def create_app(config: Optional[NoiseSurveyConfig] = None) -> FastAPI:
    """
    Create FastAPI application.

    Args:
        config: Application configuration (defaults to the loaded config)

    Returns:
        FastAPI application instance
    """
    config = config or get_config()
    api_config = config.api

    app = FastAPI(
        title="Noise Survey API",
        description="SANS 10083 noise survey calculations and validation",
        version=__version__,
        docs_url=api_config.docs_url if api_config.enable_docs else None,
        redoc_url="/redoc" if api_config.enable_docs else None,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=api_config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(create_survey_router(config.validation))

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "version": __version__,
            "environment": config.environment,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    @app.get("/")
    async def root():
        """API index."""
        return {
            "name": "Noise Survey API",
            "version": __version__,
            "endpoints": {
                "docs": api_config.docs_url if api_config.enable_docs else None,
                "health": "/health",
                "api": "/api/v1",
            },
        }

    logger.info(f"API application created (environment={config.environment})")
    return app
