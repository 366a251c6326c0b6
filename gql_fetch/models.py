"""
GraphQL models and data structures.

This module defines the request/response value types used by the pipeline and
the client configuration model.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    TypeAdapter,
    ValidationError,
    field_validator,
)

# Structured JSON document as produced by ``json.loads``.
JSONValue = Union[None, bool, int, float, str, List[Any], Dict[str, Any]]

_HTTP_URL = TypeAdapter(HttpUrl)


@dataclass(frozen=True)
class GraphQLRequest:
    """A GraphQL operation: query document, variables and operation name."""

    query: str
    variables: Dict[str, Any] = field(default_factory=dict)
    operation_name: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        """Build the JSON body sent to the server."""
        payload: Dict[str, Any] = {
            "query": self.query,
            "variables": self.variables,
        }

        if self.operation_name is not None:
            payload["operationName"] = self.operation_name

        return payload


def new_request(
    query: str,
    variables: Optional[Mapping[str, Any]] = None,
    operation_name: Optional[str] = None,
) -> GraphQLRequest:
    """
    Create a request without validating it.

    Validation happens when the request is executed, so requests can be
    built ahead of time.
    """
    return GraphQLRequest(
        query=query,
        variables=dict(variables) if variables is not None else {},
        operation_name=operation_name,
    )


@dataclass(frozen=True)
class GraphQLError:
    """A single normalized GraphQL error."""

    message: str
    path: Tuple[Union[str, int], ...] = ()
    extensions: Optional[Dict[str, Any]] = None

    def __post_init__(self) -> None:
        if not isinstance(self.path, tuple):
            object.__setattr__(self, "path", tuple(self.path))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the GraphQL wire shape."""
        result: Dict[str, Any] = {"message": self.message}
        if self.path:
            result["path"] = list(self.path)
        if self.extensions is not None:
            result["extensions"] = self.extensions
        return result


@dataclass(frozen=True)
class GraphQLResponse:
    """Parsed result of a GraphQL operation."""

    data: JSONValue = None
    errors: Tuple[GraphQLError, ...] = ()
    extensions: Optional[Dict[str, Any]] = None

    def __post_init__(self) -> None:
        if not isinstance(self.errors, tuple):
            object.__setattr__(self, "errors", tuple(self.errors))

    @classmethod
    def from_error(cls, error: GraphQLError) -> "GraphQLResponse":
        """Response carrying a single error and no data."""
        return cls(errors=(error,))

    @property
    def is_success(self) -> bool:
        """True when the server reported no errors, whatever ``data`` holds."""
        return len(self.errors) == 0

    @property
    def error_messages(self) -> List[str]:
        return [error.message for error in self.errors]

    def get_data(self, path: Optional[str] = None) -> Any:
        """
        Get data from result with optional path.

        Args:
            path: Dot-separated path to data (e.g., "account.balance.amount")

        Returns:
            Data at the specified path or full data if no path
        """
        if self.data is None:
            return None

        if not path:
            return self.data

        current = self.data
        for key in path.split("."):
            if isinstance(current, dict) and key in current:
                current = current[key]
            else:
                return None

        return current

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the GraphQL wire shape."""
        result: Dict[str, Any] = {}
        if self.data is not None:
            result["data"] = self.data
        if self.errors:
            result["errors"] = [error.to_dict() for error in self.errors]
        if self.extensions is not None:
            result["extensions"] = self.extensions
        return result

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)

    def describe(self) -> str:
        """Multi-line human readable dump, used for debugging and the CLI."""
        lines = ["GraphQL Response:"]
        data = json.dumps(self.data, ensure_ascii=False) if self.data is not None else "null"
        lines.append(f"  Data: {data}")

        if self.errors:
            lines.append("  Errors:")
            for error in self.errors:
                lines.append(f"    - {error.message}")
                if error.path:
                    lines.append("      Path: " + " -> ".join(str(p) for p in error.path))

        if self.extensions is not None:
            lines.append(f"  Extensions: {json.dumps(self.extensions, ensure_ascii=False)}")

        return "\n".join(lines)


class ClientConfig(BaseModel):
    """Configuration for the GraphQL client."""

    model_config = ConfigDict(extra="forbid")

    # Endpoint settings
    endpoint: str = Field(description="GraphQL endpoint URL, posted to exactly as given")
    headers: Dict[str, str] = Field(default_factory=dict, description="Headers sent with every request")

    # Request settings
    timeout_ms: int = Field(default=30000, gt=0, description="Per-attempt timeout in milliseconds")
    max_retries: int = Field(default=3, ge=0, description="Retries after the first failed attempt")
    retry_base_delay: float = Field(
        default=1.0, ge=0, description="Backoff unit in seconds; retry k waits k times this"
    )

    # Caching
    cache_enabled: bool = Field(default=True, description="Enable response caching")
    cache_max_age_seconds: float = Field(default=300.0, gt=0, description="Cached response max age")

    @field_validator("endpoint")
    @classmethod
    def validate_endpoint(cls, v: str) -> str:
        """Require an http(s) URL but keep the configured spelling."""
        try:
            _HTTP_URL.validate_python(v)
        except ValidationError:
            raise ValueError(f"Invalid endpoint URL: {v!r}")
        return v

    @property
    def endpoint_url(self) -> str:
        return self.endpoint

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000.0
