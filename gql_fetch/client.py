"""
GraphQL client implementation.

This module ties the pipeline together: cache lookup, query validation, the
retry loop around the HTTP transport, response parsing and cache store.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict, Mapping, Optional

from .cache import CacheStore
from .exceptions import (
    GQLFetchError,
    HTTPStatusError,
    QueryValidationError,
    RequestEncodingError,
)
from .models import ClientConfig, GraphQLRequest, GraphQLResponse
from .parser import ResponseParser
from .retry import RetryConfig, RetryExecutor
from .transport import JSON_HEADERS, AiohttpTransport, BaseTransport
from .validator import validate_query

logger = logging.getLogger(__name__)


class GraphQLClient:
    """
    GraphQL client with response caching and retries.

    ``execute`` never raises for expected failures: validation problems,
    transport errors, bad status codes and unparseable bodies all come back
    as entries in ``GraphQLResponse.errors``. Always branch on
    ``response.is_success``.

    Examples:
        Basic query:
        ```python
        config = ClientConfig(endpoint="https://api.example.com/graphql")

        async with GraphQLClient(config) as client:
            request = new_request(
                "query GetAccount($id: ID!) { account(id: $id) { id name } }",
                variables={"id": 1},
            )
            response = await client.execute(request)
            if response.is_success:
                print(response.get_data("account.name"))
        ```

        Custom transport (e.g. in tests):
        ```python
        client = GraphQLClient(config, transport=my_transport)
        ```
    """

    def __init__(
        self,
        config: ClientConfig,
        transport: Optional[BaseTransport] = None,
        cache: Optional[CacheStore] = None,
        parser: Optional[ResponseParser] = None,
        retry_executor: Optional[RetryExecutor] = None,
    ):
        """
        Initialize GraphQL client.

        Args:
            config: Client configuration
            transport: HTTP transport; an aiohttp transport by default
            cache: Response cache; built from the config by default
            parser: Response parser
            retry_executor: Retry loop; built from the config by default
        """
        self.config = config
        self._transport = transport or AiohttpTransport()
        self._cache = cache or CacheStore(max_age_seconds=config.cache_max_age_seconds)
        self._parser = parser or ResponseParser()
        self._retry = retry_executor or RetryExecutor(
            RetryConfig(
                max_retries=config.max_retries,
                base_delay=config.retry_base_delay,
            ),
            url=config.endpoint_url,
        )

        self._headers: Dict[str, str] = {**config.headers, **JSON_HEADERS}

    @classmethod
    def from_endpoint(
        cls,
        endpoint: str,
        headers: Optional[Mapping[str, str]] = None,
        **options: Any,
    ) -> "GraphQLClient":
        """Build a client from keyword configuration."""
        config = ClientConfig(endpoint=endpoint, headers=dict(headers or {}), **options)
        return cls(config)

    async def __aenter__(self) -> "GraphQLClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    @property
    def cache(self) -> CacheStore:
        return self._cache

    @property
    def headers(self) -> Dict[str, str]:
        """Headers sent with every request."""
        return dict(self._headers)

    async def execute(self, request: GraphQLRequest) -> GraphQLResponse:
        """
        Execute a GraphQL operation.

        Args:
            request: Operation to send

        Returns:
            Parsed response, or a response holding one synthetic error
        """
        try:
            body = self._encode(request)
        except RequestEncodingError as e:
            logger.debug("Rejected request with unencodable variables: %s", e.message)
            return GraphQLResponse.from_error(e.to_graphql_error())

        cache_key = self._cache.key(request)

        if self.config.cache_enabled:
            cached = self._cache.get(cache_key)
            if cached is not None:
                logger.debug("Cache hit for operation %s", request.operation_name or "<anonymous>")
                return cached

        if not validate_query(request.query):
            logger.debug("Rejected invalid query document")
            return GraphQLResponse.from_error(QueryValidationError().to_graphql_error())

        try:
            response = await self._retry.run(lambda: self._attempt(body))
        except GQLFetchError as e:
            return GraphQLResponse.from_error(e.to_graphql_error())

        if self.config.cache_enabled and response.is_success:
            self._cache.put(cache_key, response)
            logger.debug("Cached response for operation %s", request.operation_name or "<anonymous>")

        return response

    @staticmethod
    def _encode(request: GraphQLRequest) -> str:
        """Serialize the wire body; raises ``RequestEncodingError``."""
        try:
            return json.dumps(request.to_payload(), ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise RequestEncodingError(f"Cannot encode request variables: {e}") from e

    async def _attempt(self, body: str) -> GraphQLResponse:
        """One POST plus parse; raises on transport, status or parse failure."""
        url = self.config.endpoint_url
        result = await self._transport.post(
            url,
            body,
            headers=self._headers,
            timeout=self.config.timeout_seconds,
        )

        if result.status != 200:
            logger.error("GraphQL endpoint returned HTTP %d", result.status)
            raise HTTPStatusError(result.status, result.text, url=url, headers=result.headers)

        return self._parser.parse(result.content)

    def execute_sync(self, request: GraphQLRequest) -> GraphQLResponse:
        """
        Blocking variant of ``execute``.

        Must not be called from inside a running event loop.
        """
        return asyncio.run(self._execute_and_release(request))

    async def _execute_and_release(self, request: GraphQLRequest) -> GraphQLResponse:
        # The aiohttp session is bound to the loop that created it.
        try:
            return await self.execute(request)
        finally:
            await self._transport.close()

    def clear_cache(self) -> None:
        self._cache.clear()

    def remove_cache_entry(self, request: GraphQLRequest) -> bool:
        """Drop the cached response for ``request``, if any."""
        return self._cache.remove(self._cache.key(request))

    def get_cache_stats(self) -> Dict[str, Any]:
        return self._cache.stats()

    async def close(self) -> None:
        """Release the transport. The cache is kept until cleared explicitly."""
        await self._transport.close()
