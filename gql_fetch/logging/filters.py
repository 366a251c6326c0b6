"""
Custom logging filters for gql_fetch.

Masks credentials that may end up in log messages (request headers, endpoint
URLs with user info) and restricts records to a component.
"""

import logging
import re
from typing import List, Optional, Pattern, Set, Tuple


class SensitiveDataFilter(logging.Filter):
    """Filter to mask sensitive data in log messages."""

    def __init__(self) -> None:
        super().__init__()

        # (pattern, replacement)
        self.rules: List[Tuple[Pattern[str], str]] = [
            # API keys and tokens
            (
                re.compile(
                    r'(api[_-]?key|token|secret)(["\']?\s*[:=]\s*["\']?)([A-Za-z0-9+/=._-]{8,})',
                    re.IGNORECASE,
                ),
                r"\1\2***MASKED***",
            ),
            # Bearer / Basic credentials, with or without an Authorization prefix
            (
                re.compile(r"\b(bearer|basic)(\s+)([A-Za-z0-9+/=._-]{8,})", re.IGNORECASE),
                r"\1\2***MASKED***",
            ),
            (
                re.compile(
                    r'(authorization["\']?\s*[:=]\s*["\']?)(?!bearer\b|basic\b)([^\s"\',}]+)',
                    re.IGNORECASE,
                ),
                r"\1***MASKED***",
            ),
            # Passwords
            (
                re.compile(r'(password|passwd|pwd)(["\']?\s*[:=]\s*["\']?)([^\s"\',}]+)', re.IGNORECASE),
                r"\1\2***MASKED***",
            ),
            # URLs with credentials
            (re.compile(r"(https?://[^:/\s]+):([^@/\s]+)@", re.IGNORECASE), r"\1:***MASKED***@"),
        ]

    def mask(self, message: str) -> str:
        for pattern, replacement in self.rules:
            message = pattern.sub(replacement, message)
        return message

    def filter(self, record: logging.LogRecord) -> bool:
        """Filter log record to mask sensitive data."""
        try:
            record.msg = self.mask(record.getMessage())
            record.args = ()
        except Exception:
            # If masking fails, let the record through untouched
            pass
        return True


class ComponentFilter(logging.Filter):
    """Filter for component-specific logging."""

    def __init__(self, component: str, allowed_levels: Optional[Set[str]] = None) -> None:
        """
        Initialize component filter.

        Args:
            component: Logger name prefix to accept
            allowed_levels: Set of allowed log levels
        """
        super().__init__()
        self.component = component
        self.allowed_levels = allowed_levels or {
            "DEBUG",
            "INFO",
            "WARNING",
            "ERROR",
            "CRITICAL",
        }

    def filter(self, record: logging.LogRecord) -> bool:
        if not record.name.startswith(self.component):
            return False
        return record.levelname in self.allowed_levels
