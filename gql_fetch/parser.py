"""
GraphQL response parsing.

Turns a raw response body into a ``GraphQLResponse``. Optional fields that are
missing or malformed fall back to defaults; only a body that is not a JSON
object at all is an error.
"""

from __future__ import annotations

import json
from typing import Any, List, Union

from .exceptions import ResponseParseError
from .models import GraphQLError, GraphQLResponse

UNKNOWN_ERROR = "Unknown error"


class ResponseParser:
    """Parser for GraphQL-over-HTTP response bodies."""

    def parse(self, raw: Union[str, bytes]) -> GraphQLResponse:
        """
        Parse a response body.

        Args:
            raw: Response body, as text or as UTF-8 bytes

        Returns:
            Parsed response

        Raises:
            ResponseParseError: If the body is not UTF-8 or not a JSON object
        """
        if isinstance(raw, bytes):
            try:
                raw_text = raw.decode("utf-8")
            except UnicodeDecodeError as e:
                raise ResponseParseError(
                    f"Invalid JSON response: {e}",
                    raw_text=raw.decode("utf-8", errors="replace"),
                )
        else:
            raw_text = raw

        try:
            payload = json.loads(raw_text)
        except (TypeError, ValueError) as e:
            raise ResponseParseError(f"Invalid JSON response: {e}", raw_text=raw_text)

        return self.parse_payload(payload, raw_text=raw_text)

    def parse_payload(self, payload: Any, raw_text: str = "") -> GraphQLResponse:
        """Build a response from an already decoded document."""
        if not isinstance(payload, dict):
            raise ResponseParseError(
                f"Expected a JSON object, got {type(payload).__name__}", raw_text=raw_text
            )

        return GraphQLResponse(
            data=payload.get("data"),
            errors=tuple(self._parse_errors(payload.get("errors"))),
            extensions=payload.get("extensions"),
        )

    def _parse_errors(self, errors: Any) -> List[GraphQLError]:
        if not isinstance(errors, list):
            return []
        return [self._parse_error(entry) for entry in errors]

    def _parse_error(self, entry: Any) -> GraphQLError:
        if not isinstance(entry, dict):
            return GraphQLError(message=UNKNOWN_ERROR)

        message = entry.get("message")
        if not isinstance(message, str):
            message = UNKNOWN_ERROR

        path = entry.get("path")
        segments = tuple(str(segment) for segment in path) if isinstance(path, list) else ()

        extensions = entry.get("extensions")
        if not isinstance(extensions, dict):
            extensions = None

        return GraphQLError(message=message, path=segments, extensions=extensions)


_default_parser = ResponseParser()


def parse_response(raw: Union[str, bytes]) -> GraphQLResponse:
    """Parse a response body with the default parser."""
    return _default_parser.parse(raw)
