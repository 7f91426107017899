"""
bootstrap/config.py - Application configuration

Provides configuration loading from files, environment variables, and defaults.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from pathlib import Path
import os
import json
import logging

from ..core.constants import CALIBRATION_CRITERIA, AUDIOMETRY_CRITERIA

logger = logging.getLogger("bootstrap.config")


@dataclass
class ValidationConfig:
    """Survey validation thresholds that sites may tighten."""

    near_expiry_days: int = CALIBRATION_CRITERIA.near_expiry_days
    certificate_validity_years: int = CALIBRATION_CRITERIA.certificate_validity_years
    drift_limit_db: float = CALIBRATION_CRITERIA.drift_limit_db
    drift_warning_db: float = CALIBRATION_CRITERIA.drift_warning_db
    retest_interval_years: int = AUDIOMETRY_CRITERIA.retest_interval_years

    @classmethod
    def from_env(cls) -> "ValidationConfig":
        return cls(
            near_expiry_days=int(os.getenv(
                "NOISESURVEY_NEAR_EXPIRY_DAYS", str(CALIBRATION_CRITERIA.near_expiry_days))),
            certificate_validity_years=int(os.getenv(
                "NOISESURVEY_CERT_VALIDITY_YEARS", str(CALIBRATION_CRITERIA.certificate_validity_years))),
            drift_limit_db=float(os.getenv(
                "NOISESURVEY_DRIFT_LIMIT_DB", str(CALIBRATION_CRITERIA.drift_limit_db))),
            drift_warning_db=float(os.getenv(
                "NOISESURVEY_DRIFT_WARNING_DB", str(CALIBRATION_CRITERIA.drift_warning_db))),
            retest_interval_years=int(os.getenv(
                "NOISESURVEY_RETEST_INTERVAL_YEARS", str(AUDIOMETRY_CRITERIA.retest_interval_years))),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "near_expiry_days": self.near_expiry_days,
            "certificate_validity_years": self.certificate_validity_years,
            "drift_limit_db": self.drift_limit_db,
            "drift_warning_db": self.drift_warning_db,
            "retest_interval_years": self.retest_interval_years,
        }


@dataclass
class APIConfig:
    """API server configuration."""

    host: str = "0.0.0.0"
    port: int = 8000
    workers: int = 1
    enable_docs: bool = True
    docs_url: str = "/docs"
    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    @classmethod
    def from_env(cls) -> "APIConfig":
        cors = os.getenv("NOISESURVEY_API_CORS_ORIGINS", "*")
        return cls(
            host=os.getenv("NOISESURVEY_API_HOST", "0.0.0.0"),
            port=int(os.getenv("NOISESURVEY_API_PORT", "8000")),
            workers=int(os.getenv("NOISESURVEY_API_WORKERS", "1")),
            enable_docs=os.getenv("NOISESURVEY_API_ENABLE_DOCS", "true").lower() == "true",
            docs_url=os.getenv("NOISESURVEY_API_DOCS_URL", "/docs"),
            cors_origins=cors.split(",") if cors else ["*"],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "host": self.host,
            "port": self.port,
            "workers": self.workers,
            "enable_docs": self.enable_docs,
            "docs_url": self.docs_url,
            "cors_origins": list(self.cors_origins),
        }


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    log_file: Optional[str] = None
    json_logs: bool = False

    @classmethod
    def from_env(cls) -> "LoggingConfig":
        return cls(
            level=os.getenv("NOISESURVEY_LOG_LEVEL", "INFO"),
            format=os.getenv("NOISESURVEY_LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"),
            log_file=os.getenv("NOISESURVEY_LOG_FILE"),
            json_logs=os.getenv("NOISESURVEY_JSON_LOGS", "false").lower() == "true",
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level,
            "log_file": self.log_file,
            "json_logs": self.json_logs,
        }


@dataclass
class NoiseSurveyConfig:
    """Root configuration for the noisesurvey application."""

    environment: str = "development"
    debug: bool = False
    version: str = "1.0.0"

    validation: ValidationConfig = field(default_factory=ValidationConfig)
    api: APIConfig = field(default_factory=APIConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_env(cls) -> "NoiseSurveyConfig":
        """Create configuration from environment variables."""
        return cls(
            environment=os.getenv("NOISESURVEY_ENVIRONMENT", "development"),
            debug=os.getenv("NOISESURVEY_DEBUG", "false").lower() == "true",
            validation=ValidationConfig.from_env(),
            api=APIConfig.from_env(),
            logging=LoggingConfig.from_env(),
        )

    @classmethod
    def from_file(cls, filepath: str) -> "NoiseSurveyConfig":
        """Load configuration from JSON file."""
        path = Path(filepath)
        if not path.exists():
            logger.warning(f"Config file not found: {filepath}, using defaults")
            return cls.from_env()

        with open(path) as f:
            data = json.load(f)

        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: Dict[str, Any]) -> "NoiseSurveyConfig":
        """Create config from dictionary, overriding environment values."""
        config = cls.from_env()

        if "environment" in data:
            config.environment = data["environment"]
        if "debug" in data:
            config.debug = data["debug"]

        for section in ("validation", "api", "logging"):
            if section in data:
                target = getattr(config, section)
                for key, value in data[section].items():
                    if hasattr(target, key):
                        setattr(target, key, value)
                    else:
                        logger.warning(f"Ignoring unknown config key: {section}.{key}")

        return config

    def to_dict(self) -> Dict[str, Any]:
        """Serialize config to dictionary."""
        return {
            "environment": self.environment,
            "debug": self.debug,
            "version": self.version,
            "validation": self.validation.to_dict(),
            "api": self.api.to_dict(),
            "logging": self.logging.to_dict(),
        }


# Global config instance
_config: Optional[NoiseSurveyConfig] = None


def load_config(filepath: str = None) -> NoiseSurveyConfig:
    """
    Load configuration from file or environment.

    Args:
        filepath: Optional path to JSON config file

    Returns:
        NoiseSurveyConfig instance
    """
    global _config

    if filepath:
        _config = NoiseSurveyConfig.from_file(filepath)
    else:
        default_paths = [
            "./noisesurvey.json",
            "./config/noisesurvey.json",
            os.path.expanduser("~/.noisesurvey/config.json"),
        ]

        for path in default_paths:
            if Path(path).exists():
                logger.info(f"Loading config from: {path}")
                _config = NoiseSurveyConfig.from_file(path)
                return _config

        _config = NoiseSurveyConfig.from_env()

    logger.info(f"Configuration loaded: environment={_config.environment}")
    return _config


def get_config() -> NoiseSurveyConfig:
    """Get current configuration, loading if needed."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Forget the loaded configuration (tests, reloads)."""
    global _config
    _config = None
