"""
gql_fetch - GraphQL over HTTP with response caching and retries.

The request pipeline derives a cache key, serves fresh cached responses,
rejects malformed documents locally, retries transport failures with a
linear backoff and normalizes the server's ``errors`` array.
"""

from .builders import (
    build_account_query,
    build_accounts_query,
    build_create_account_mutation,
    build_trial_balance_query,
)
from .cache import CacheEntry, CacheStore, generate_cache_key
from .client import GraphQLClient
from .convenience import (
    create_account,
    fetch_field,
    get_account,
    get_account_by_code,
    get_accounts,
    get_trial_balance,
)
from .exceptions import (
    ErrorHandler,
    GQLFetchError,
    GraphQLClientError,
    HTTPStatusError,
    NetworkError,
    QueryValidationError,
    RequestEncodingError,
    ResponseParseError,
    RetriesExhaustedError,
    TerminalError,
    TimeoutError,
    TransportError,
)
from .models import (
    ClientConfig,
    GraphQLError,
    GraphQLRequest,
    GraphQLResponse,
    JSONValue,
    new_request,
)
from .parser import ResponseParser, parse_response
from .retry import RetryConfig, RetryExecutor
from .transport import AiohttpTransport, BaseTransport, TransportResponse
from .validator import validate_query

__version__ = "1.0.0"

__all__ = [
    # Client
    "GraphQLClient",
    "ClientConfig",
    # Models
    "GraphQLRequest",
    "GraphQLResponse",
    "GraphQLError",
    "JSONValue",
    "new_request",
    # Pipeline parts
    "CacheStore",
    "CacheEntry",
    "generate_cache_key",
    "ResponseParser",
    "parse_response",
    "RetryConfig",
    "RetryExecutor",
    "BaseTransport",
    "AiohttpTransport",
    "TransportResponse",
    "validate_query",
    # Exceptions
    "GQLFetchError",
    "QueryValidationError",
    "TransportError",
    "NetworkError",
    "TimeoutError",
    "TerminalError",
    "HTTPStatusError",
    "RequestEncodingError",
    "ResponseParseError",
    "RetriesExhaustedError",
    "GraphQLClientError",
    "ErrorHandler",
    # Builders and helpers
    "build_account_query",
    "build_accounts_query",
    "build_create_account_mutation",
    "build_trial_balance_query",
    "fetch_field",
    "get_account",
    "get_account_by_code",
    "get_accounts",
    "create_account",
    "get_trial_balance",
]
