"""
Configuration loader for gql_fetch.

This module handles loading settings from configuration files (YAML or JSON)
and ``GQL_FETCH_*`` environment variables. Environment values win over file
values.
"""

import json
import os
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, Union

import yaml

from .models import Settings

ENV_PREFIX = "GQL_FETCH_"


def _to_bool(value: str) -> bool:
    lower = value.strip().lower()
    if lower in ("true", "yes", "1", "on"):
        return True
    if lower in ("false", "no", "0", "off"):
        return False
    raise ValueError(f"Invalid boolean value: {value!r}")


def _to_headers(value: str) -> Dict[str, str]:
    """Parse ``Name: value`` pairs separated by ``;``."""
    headers: Dict[str, str] = {}
    for item in value.split(";"):
        if not item.strip():
            continue
        name, sep, header_value = item.partition(":")
        if not sep:
            raise ValueError(f"Invalid header {item!r}, expected 'Name: value'")
        headers[name.strip()] = header_value.strip()
    return headers


# env suffix -> (config path, converter)
ENV_MAPPINGS: Dict[str, Tuple[Tuple[str, ...], Callable[[str], Any]]] = {
    # Client
    "ENDPOINT": (("client", "endpoint"), str),
    "HEADERS": (("client", "headers"), _to_headers),
    "TIMEOUT_MS": (("client", "timeout_ms"), int),
    "MAX_RETRIES": (("client", "max_retries"), int),
    "RETRY_BASE_DELAY": (("client", "retry_base_delay"), float),
    "CACHE_ENABLED": (("client", "cache_enabled"), _to_bool),
    "CACHE_MAX_AGE_SECONDS": (("client", "cache_max_age_seconds"), float),
    # Logging
    "LOG_LEVEL": (("logging", "level"), lambda v: v.strip().upper()),
    "LOG_FORMAT": (("logging", "format"), str),
    "LOG_STRUCTURED": (("logging", "enable_structured"), _to_bool),
}


class ConfigLoader:
    """Configuration loader with support for multiple sources."""

    def __init__(self, environ: Optional[Mapping[str, str]] = None) -> None:
        """
        Initialize configuration loader.

        Args:
            environ: Environment mapping; ``os.environ`` by default
        """
        self.config_paths = [
            Path("gql_fetch.yaml"),
            Path("gql_fetch.yml"),
            Path("gql_fetch.json"),
            Path.home() / ".gql_fetch" / "config.yaml",
            Path.home() / ".gql_fetch" / "config.yml",
            Path.home() / ".gql_fetch" / "config.json",
        ]
        self.environ = os.environ if environ is None else environ

    def load_config(self, config_file: Optional[Union[str, Path]] = None) -> Settings:
        """
        Load settings from all available sources.

        Args:
            config_file: Specific config file to load

        Returns:
            Settings with file and environment values merged
        """
        config_data: Dict[str, Any] = {}

        file_config = self._load_from_file(config_file)
        if file_config:
            config_data.update(file_config)

        env_config = self._load_from_environment()
        if env_config:
            config_data = self._deep_merge(config_data, env_config)

        return Settings(**config_data)

    def _load_from_file(
        self, config_file: Optional[Union[str, Path]] = None
    ) -> Optional[Dict[str, Any]]:
        """Load configuration from file."""
        if config_file:
            config_path = Path(config_file)
            if not config_path.exists():
                raise ValueError(f"Config file not found: {config_path}")
            return self._parse_config_file(config_path)

        for config_path in self.config_paths:
            if config_path.exists():
                return self._parse_config_file(config_path)

        return None

    def _parse_config_file(self, config_path: Path) -> Dict[str, Any]:
        """Parse configuration file based on extension."""
        suffix = config_path.suffix.lower()
        if suffix not in (".yaml", ".yml", ".json"):
            raise ValueError(f"Unsupported config file format: {config_path.suffix}")

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                if suffix == ".json":
                    data = json.load(f)
                else:
                    data = yaml.safe_load(f)
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise ValueError(f"Failed to parse config file {config_path}: {e}")

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file {config_path} must contain a mapping")
        return data

    def _load_from_environment(self) -> Dict[str, Any]:
        """Load configuration from environment variables."""
        config: Dict[str, Any] = {}

        for suffix, (config_path, convert) in ENV_MAPPINGS.items():
            env_var = f"{ENV_PREFIX}{suffix}"
            value = self.environ.get(env_var)
            if value is None:
                continue

            try:
                converted_value = convert(value)
            except ValueError as e:
                raise ValueError(f"Invalid value for {env_var}: {e}")

            current = config
            for key in config_path[:-1]:
                current = current.setdefault(key, {})
            current[config_path[-1]] = converted_value

        return config

    def _deep_merge(
        self, base: Dict[str, Any], override: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if (
                key in result
                and isinstance(result[key], dict)
                and isinstance(value, dict)
            ):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result


def load_config(
    config_file: Optional[Union[str, Path]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    """Load settings using a fresh ``ConfigLoader``."""
    return ConfigLoader(environ).load_config(config_file)
