"""
Decoder Configuration
=====================

This module handles configuration loading for the AEDAT4 decoder.

Configuration Sources (in order of precedence):
    1. Environment variables (highest priority)
    2. aedat.yaml file
    3. Default values (lowest priority)

Environment Variable Mapping:
    AEDAT_CONNECT_TIMEOUT -> transport.connect_timeout_seconds
    AEDAT_READ_TIMEOUT    -> transport.read_timeout_seconds
    AEDAT_LOG_LEVEL       -> logging.level
    AEDAT_LOG_FORMAT      -> logging.format

Example:
    from aedat.config import get_settings

    settings = get_settings()

    print(settings.transport.read_timeout_seconds)
    print(settings.logging.level)
"""

import os
import logging
from pathlib import Path
from typing import Optional, TextIO

import yaml
from pydantic import BaseModel, Field, field_validator


logger = logging.getLogger(__name__)


# =============================================================================
# Configuration Models
# =============================================================================

class TransportConfig(BaseModel):
    """Socket transport configuration. None means fully blocking."""

    connect_timeout_seconds: Optional[float] = Field(
        default=None,
        gt=0,
        description="Seconds to wait when connecting to a socket source",
    )
    read_timeout_seconds: Optional[float] = Field(
        default=None,
        gt=0,
        description="Seconds to wait on each socket read",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="text", description="Log format: json or text")

    @field_validator("format")
    @classmethod
    def _check_format(cls, value: str) -> str:
        if value not in ("json", "text"):
            raise ValueError("format must be 'json' or 'text'")
        return value


class Settings(BaseModel):
    """
    Main settings class for the decoder.

    Loads configuration from YAML file and environment variables.
    Environment variables take precedence over file values.
    """

    transport: TransportConfig = Field(default_factory=TransportConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# =============================================================================
# Configuration Loading
# =============================================================================

def load_config(config_path: Optional[str] = None) -> Settings:
    """
    Load configuration from YAML file and environment variables.

    Priority (highest to lowest):
        1. Environment variables
        2. YAML config file
        3. Default values

    Args:
        config_path: Path to aedat.yaml. If None, searches the working directory.

    Returns:
        Settings: Loaded configuration
    """
    if config_path is None:
        for path in (Path("aedat.yaml"), Path("aedat.yml")):
            if path.exists():
                config_path = str(path)
                break

    config_data = {}
    if config_path and Path(config_path).exists():
        logger.info(f"Loading config from: {config_path}")
        with open(config_path, "r") as f:
            config_data = yaml.safe_load(f) or {}
    else:
        logger.debug("No config file found, using defaults and environment variables")

    _apply_env_overrides(config_data)

    return Settings.model_validate(config_data)


def _apply_env_overrides(config_data: dict) -> None:
    """Apply environment variable overrides to config data."""

    # Transport settings
    if env_connect := os.environ.get("AEDAT_CONNECT_TIMEOUT"):
        config_data.setdefault("transport", {})["connect_timeout_seconds"] = float(env_connect)
    if env_read := os.environ.get("AEDAT_READ_TIMEOUT"):
        config_data.setdefault("transport", {})["read_timeout_seconds"] = float(env_read)

    # Logging settings
    if env_log := os.environ.get("AEDAT_LOG_LEVEL"):
        config_data.setdefault("logging", {})["level"] = env_log
    if env_format := os.environ.get("AEDAT_LOG_FORMAT"):
        config_data.setdefault("logging", {})["format"] = env_format


LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

JSON_LOG_FORMAT = '{"time": "%(asctime)s", "level": "%(levelname)s", "module": "%(name)s", "message": "%(message)s"}'
TEXT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(settings: Settings, stream: Optional[TextIO] = None) -> logging.Logger:
    """
    Attach a handler to the `aedat` logger based on settings.

    The root logger is left alone, so host applications keep their own
    configuration. Calling this again replaces the previous handler.

    Args:
        settings: Loaded settings
        stream: Output stream (default: stderr)

    Returns:
        The configured `aedat` logger
    """
    package_logger = logging.getLogger("aedat")
    package_logger.setLevel(getattr(logging, settings.logging.level.upper(), logging.INFO))

    log_format = JSON_LOG_FORMAT if settings.logging.format == "json" else TEXT_LOG_FORMAT
    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter(log_format, datefmt=LOG_DATE_FORMAT))
    handler.set_name("aedat")

    for existing in list(package_logger.handlers):
        if existing.get_name() == "aedat":
            package_logger.removeHandler(existing)
            existing.close()
    package_logger.addHandler(handler)
    package_logger.propagate = False
    return package_logger


# =============================================================================
# Shared Settings Instance
# =============================================================================

_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Return the shared settings, loading them on first use.

    Nothing is read at import time; a bad AEDAT_* variable or aedat.yaml
    surfaces here, in the first caller that needs the settings.
    """
    global _settings
    if _settings is None:
        _settings = load_config()
    return _settings


def set_settings(settings: Optional[Settings]) -> None:
    """Replace the shared settings (None reloads them on next use)."""
    global _settings
    _settings = settings
