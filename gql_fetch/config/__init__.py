"""
Configuration management for gql_fetch.

Settings come from YAML/JSON files and ``GQL_FETCH_*`` environment variables
and are validated with pydantic.
"""

from .loader import ENV_PREFIX, ConfigLoader, load_config
from .models import LoggingConfig, LogLevel, Settings

__all__ = [
    "ConfigLoader",
    "load_config",
    "ENV_PREFIX",
    "LoggingConfig",
    "LogLevel",
    "Settings",
]
