"""
Shallow GraphQL query shape check.

This is not a parser: it only looks for an operation keyword so obviously
broken documents are rejected before any network traffic.
"""

from __future__ import annotations

import re

OPERATION_KEYWORDS = ("query", "mutation", "subscription")

_WHITESPACE = re.compile(r"\s+")


def validate_query(query: str) -> bool:
    """
    Check that a query document looks like a GraphQL operation.

    Args:
        query: GraphQL document text

    Returns:
        True if the document is non-empty and contains one of the
        operation keywords (case-insensitive, whitespace ignored)
    """
    if not query:
        return False

    normalized = _WHITESPACE.sub("", query.lower())
    return any(keyword in normalized for keyword in OPERATION_KEYWORDS)

