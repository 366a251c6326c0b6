"""
Configuration models for gql_fetch.

This module defines the settings that can be loaded from files and the
environment. The client configuration itself lives in ``gql_fetch.models``.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, Field

from ..models import ClientConfig


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(default=LogLevel.INFO, description="Default logging level")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log message format",
    )
    enable_console: bool = Field(default=True, description="Enable console logging")
    enable_structured: bool = Field(
        default=False, description="Enable structured JSON logging"
    )
    mask_sensitive: bool = Field(
        default=True, description="Mask tokens and credentials in log output"
    )

    # Component-specific log levels
    component_levels: Dict[str, LogLevel] = Field(
        default_factory=dict, description="Per-component log levels"
    )


class Settings(BaseModel):
    """Everything the command line and applications load at start-up."""

    client: Optional[ClientConfig] = Field(
        default=None, description="Client configuration; None when no endpoint is configured"
    )
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
