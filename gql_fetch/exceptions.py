"""
Exception hierarchy for the GraphQL request pipeline.

Every failure the pipeline expects is a ``GQLFetchError``. The client turns
these into entries of ``GraphQLResponse.errors`` so ``execute`` itself does not
raise; the classes still matter because the retry loop decides what to retry
by looking at the exception type.
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, Optional, Sequence, Union

import aiohttp

from .models import GraphQLError


class GQLFetchError(Exception):
    """
    Base exception for all pipeline failures.

    Attributes:
        message: Human-readable error message
        url: Endpoint that caused the error (if applicable)
        details: Additional error details as keyword arguments
    """

    code = "CLIENT_ERROR"

    def __init__(self, message: str, url: Optional[str] = None, **kwargs: Any) -> None:
        super().__init__(message)
        self.message = message
        self.url = url
        self.details = kwargs

    def extensions(self) -> Dict[str, Any]:
        """Extensions attached to the synthetic response error."""
        return {"code": self.code}

    def to_graphql_error(self) -> GraphQLError:
        """Represent this failure as a single GraphQL error entry."""
        return GraphQLError(message=self.message, extensions=self.extensions())


class QueryValidationError(GQLFetchError):
    """Raised locally when a query document fails the shape check."""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str = "Invalid GraphQL query", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class TransportError(GQLFetchError):
    """
    Raised when a single transport attempt fails before a response arrives.

    Transport errors are transient by definition and are retried.
    """

    code = "TRANSPORT_ERROR"


class NetworkError(TransportError):
    """Connection refused, DNS failure, dropped connection and similar."""

    code = "NETWORK_ERROR"


class TimeoutError(TransportError):
    """
    Raised when an attempt exceeds the per-attempt timeout.

    Attributes:
        timeout_value: The timeout value that was exceeded (in seconds)
    """

    code = "TIMEOUT"

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        timeout_value: Optional[float] = None,
    ) -> None:
        super().__init__(message, url)
        self.timeout_value = timeout_value


class TerminalError(GQLFetchError):
    """Failures that stop the retry loop immediately."""


class HTTPStatusError(TerminalError):
    """Raised for any non-200 response."""

    code = "HTTP_ERROR"

    def __init__(
        self,
        status_code: int,
        response_text: str = "",
        url: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        super().__init__(f"HTTP Error: {status_code} - {response_text}", url)
        self.status_code = status_code
        self.response_text = response_text
        self.headers = headers or {}

    def extensions(self) -> Dict[str, Any]:
        return {"code": self.code, "status": self.status_code}


class ResponseParseError(TerminalError):
    """Raised when a response body is not UTF-8 JSON holding an object."""

    code = "PARSE_ERROR"

    def __init__(self, message: str, raw_text: Optional[str] = None, url: Optional[str] = None) -> None:
        super().__init__(message, url)
        self.raw_text = raw_text


class RequestEncodingError(TerminalError):
    """Raised when request variables cannot be encoded as JSON."""

    code = "ENCODING_ERROR"


class RetriesExhaustedError(GQLFetchError):
    """
    Raised when every allowed attempt failed with a transport error.

    Attributes:
        retries: Configured retry budget
        last_error: The exception raised by the final attempt
    """

    code = "RETRIES_EXHAUSTED"

    def __init__(
        self,
        retries: int,
        last_error: BaseException,
        url: Optional[str] = None,
    ) -> None:
        super().__init__(
            f"Request failed after {retries} retries: {_error_message(last_error)}", url
        )
        self.retries = retries
        self.last_error = last_error

    @property
    def attempts(self) -> int:
        return self.retries + 1


class GraphQLClientError(GQLFetchError):
    """
    Raised by convenience helpers when a response carries errors.

    Built from the first error of the response so call sites that prefer
    exceptions get the server's message, path and extensions.
    """

    code = "GRAPHQL_ERROR"

    def __init__(
        self,
        message: str,
        path: Sequence[Union[str, int]] = (),
        extensions: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.path = tuple(path)
        self.graphql_extensions = extensions

    @classmethod
    def from_error(cls, error: GraphQLError) -> "GraphQLClientError":
        return cls(error.message, error.path, error.extensions)

    def to_graphql_error(self) -> GraphQLError:
        return GraphQLError(
            message=self.message, path=self.path, extensions=self.graphql_extensions
        )


def _error_message(error: BaseException) -> str:
    if isinstance(error, GQLFetchError):
        return error.message
    return str(error) or type(error).__name__


class ErrorHandler:
    """Converts aiohttp and asyncio exceptions into pipeline exceptions."""

    @staticmethod
    def handle_aiohttp_error(
        error: BaseException, url: Optional[str] = None, timeout: Optional[float] = None
    ) -> TransportError:
        """
        Convert a transport-level exception to a ``TransportError`` subclass.

        Args:
            error: The original exception
            url: The endpoint that caused the error
            timeout: Per-attempt timeout in seconds, recorded on timeouts

        Returns:
            Appropriate TransportError subclass
        """
        if isinstance(error, asyncio.TimeoutError):
            return TimeoutError(
                f"Request timed out after {timeout}s" if timeout else "Request timed out",
                url=url,
                timeout_value=timeout,
            )

        elif isinstance(error, aiohttp.ClientSSLError):
            return NetworkError(f"SSL error: {error}", url=url)

        elif isinstance(error, aiohttp.ClientConnectorError):
            return NetworkError(f"Connector error: {error}", url=url)

        elif isinstance(error, aiohttp.ClientConnectionError):
            return NetworkError(f"Connection error: {error}", url=url)

        elif isinstance(error, aiohttp.ClientPayloadError):
            return NetworkError(f"Payload error: {error}", url=url)

        else:
            return NetworkError(f"Unexpected network error: {error}", url=url)

    @staticmethod
    def is_retryable_error(error: BaseException) -> bool:
        """
        Decide whether an attempt failure may be retried.

        Terminal errors are final; every other ``Exception`` raised by a
        transport attempt counts as transient.
        """
        if isinstance(error, (TerminalError, QueryValidationError, RetriesExhaustedError)):
            return False
        return isinstance(error, Exception)
