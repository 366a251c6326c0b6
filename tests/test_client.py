"""
Tests for the GraphQL client pipeline.
"""

import asyncio
from decimal import Decimal

import pytest

from gql_fetch import (
    ClientConfig,
    GraphQLClient,
    GraphQLResponse,
    NetworkError,
    new_request,
)
from gql_fetch.transport import AiohttpTransport, TransportResponse

from .conftest import ENDPOINT, StubTransport

ACCOUNT_QUERY = "query GetAccount { account(id: 1) { id } }"


class TestClientCreation:
    """Test client construction."""

    def test_defaults(self, client_config):
        """A client built from config gets an aiohttp transport and a cache."""
        client = GraphQLClient(client_config)

        assert client.config == client_config
        assert isinstance(client._transport, AiohttpTransport)
        assert client.cache.max_age_seconds == 300.0
        assert len(client.cache) == 0

    def test_json_headers_forced(self):
        """Content-Type and Accept cannot be overridden by config headers."""
        client = GraphQLClient.from_endpoint(
            ENDPOINT,
            headers={"Content-Type": "text/plain", "X-Tenant": "acme"},
        )

        assert client.headers == {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "X-Tenant": "acme",
        }

    def test_from_endpoint_options(self):
        client = GraphQLClient.from_endpoint(ENDPOINT, max_retries=1, cache_enabled=False)

        assert client.config.max_retries == 1
        assert client.config.cache_enabled is False


class TestExecute:
    """Test execute()."""

    @pytest.mark.asyncio
    async def test_end_to_end_success_and_cache_hit(self, make_client):
        """A successful response is cached and served without a second call."""
        transport = StubTransport({"data": {"account": {"id": 1}}})
        client = make_client(transport)
        request = new_request(ACCOUNT_QUERY)

        first = await client.execute(request)

        assert first.is_success
        assert first.data == {"account": {"id": 1}}
        assert client.cache.key(request) in client.cache

        second = await client.execute(new_request(ACCOUNT_QUERY))

        assert second == first
        assert transport.call_count == 1

    @pytest.mark.asyncio
    async def test_wire_request(self, make_client):
        """The POST carries the payload, forced headers and per-attempt timeout."""
        transport = StubTransport({"data": {"user": None}})
        client = make_client(transport, timeout_ms=5000)

        await client.execute(new_request("query GetUser { user }", {"id": 7}, "GetUser"))

        call = transport.calls[0]
        assert call["url"] == ENDPOINT
        assert call["payload"] == {
            "query": "query GetUser { user }",
            "variables": {"id": 7},
            "operationName": "GetUser",
        }
        assert call["headers"]["Authorization"] == "Bearer test-token"
        assert call["headers"]["Content-Type"] == "application/json"
        assert call["headers"]["Accept"] == "application/json"
        assert call["timeout"] == 5.0

    @pytest.mark.asyncio
    async def test_validation_short_circuit(self, make_client):
        """Documents without an operation keyword never reach the network."""
        transport = StubTransport({"data": {}})
        client = make_client(transport)

        response = await client.execute(new_request("invalid document"))

        assert response.data is None
        assert response.error_messages == ["Invalid GraphQL query"]
        assert response.errors[0].extensions == {"code": "VALIDATION_ERROR"}
        assert transport.call_count == 0
        assert len(client.cache) == 0

    @pytest.mark.asyncio
    async def test_empty_query_is_invalid(self, make_client):
        transport = StubTransport({"data": {}})
        client = make_client(transport)

        response = await client.execute(new_request(""))

        assert response.error_messages == ["Invalid GraphQL query"]
        assert transport.call_count == 0

    @pytest.mark.asyncio
    async def test_cache_checked_before_validation(self, make_client):
        """A fresh cache entry is returned even for a document that would fail validation."""
        transport = StubTransport({"data": {}})
        client = make_client(transport)
        request = new_request("{ account { id } }")
        cached = GraphQLResponse(data={"account": {"id": 3}})
        client.cache.put(client.cache.key(request), cached)

        assert await client.execute(request) == cached
        assert transport.call_count == 0

    @pytest.mark.asyncio
    async def test_retry_bound(self, make_client, sleep_recorder):
        """An always failing transport gets max_retries + 1 attempts."""
        transport = StubTransport(NetworkError("Connection refused"))
        client = make_client(transport, max_retries=2)

        response = await client.execute(new_request(ACCOUNT_QUERY))

        assert transport.call_count == 3
        assert sleep_recorder.delays == [1.0, 2.0]
        assert response.data is None
        assert response.error_messages == [
            "Request failed after 2 retries: Connection refused"
        ]
        assert response.errors[0].extensions == {"code": "RETRIES_EXHAUSTED"}
        assert len(client.cache) == 0

    @pytest.mark.asyncio
    async def test_recovers_after_transport_failure(self, make_client):
        transport = StubTransport(NetworkError("reset"), {"data": {"ok": True}})
        client = make_client(transport)

        response = await client.execute(new_request("query { ok }"))

        assert response.is_success
        assert transport.call_count == 2

    @pytest.mark.asyncio
    async def test_http_status_is_terminal(self, make_client, sleep_recorder):
        """Non-200 responses are reported with status and body, without retries."""
        transport = StubTransport(TransportResponse(status=503, content=b"Service Unavailable"))
        client = make_client(transport)

        response = await client.execute(new_request(ACCOUNT_QUERY))

        assert transport.call_count == 1
        assert sleep_recorder.delays == []
        assert response.error_messages == ["HTTP Error: 503 - Service Unavailable"]
        assert response.errors[0].extensions == {"code": "HTTP_ERROR", "status": 503}

    @pytest.mark.asyncio
    async def test_parse_error_is_terminal(self, make_client):
        transport = StubTransport(TransportResponse(status=200, content=b"<html>oops</html>"))
        client = make_client(transport)

        response = await client.execute(new_request(ACCOUNT_QUERY))

        assert transport.call_count == 1
        assert len(response.errors) == 1
        assert response.errors[0].message.startswith("Invalid JSON response")
        assert response.errors[0].extensions == {"code": "PARSE_ERROR"}

    @pytest.mark.asyncio
    async def test_non_utf8_body_is_a_parse_error(self, make_client, sleep_recorder):
        """Undecodable bytes in a 200 body fail once, without retries."""
        transport = StubTransport(TransportResponse(status=200, content=b'{"data": "\xff\xfe"}'))
        client = make_client(transport)

        response = await client.execute(new_request(ACCOUNT_QUERY))

        assert transport.call_count == 1
        assert sleep_recorder.delays == []
        assert response.errors[0].extensions == {"code": "PARSE_ERROR"}
        assert response.errors[0].message.startswith("Invalid JSON response")

    @pytest.mark.asyncio
    async def test_non_utf8_error_body_keeps_status(self, make_client):
        transport = StubTransport(TransportResponse(status=502, content=b"bad \xff gateway"))
        client = make_client(transport)

        response = await client.execute(new_request(ACCOUNT_QUERY))

        assert transport.call_count == 1
        assert response.error_messages == ["HTTP Error: 502 - bad \ufffd gateway"]
        assert response.errors[0].extensions == {"code": "HTTP_ERROR", "status": 502}

    @pytest.mark.asyncio
    async def test_unencodable_variables_are_reported(self, make_client):
        """Variables json cannot encode give one error and no network call."""
        transport = StubTransport({"data": {}})
        client = make_client(transport)

        response = await client.execute(
            new_request("mutation { x }", {"amount": Decimal("1.50")})
        )

        assert transport.call_count == 0
        assert len(response.errors) == 1
        assert response.errors[0].extensions == {"code": "ENCODING_ERROR"}
        assert "Decimal" in response.errors[0].message
        assert len(client.cache) == 0

    @pytest.mark.asyncio
    async def test_graphql_errors_are_returned_not_cached(self, make_client):
        """Server-reported errors pass through and are never cached."""
        transport = StubTransport(
            {
                "data": {"account": None},
                "errors": [{"message": "Account not found", "path": ["account"]}],
            }
        )
        client = make_client(transport)
        request = new_request(ACCOUNT_QUERY)

        response = await client.execute(request)
        await client.execute(request)

        assert response.error_messages == ["Account not found"]
        assert response.errors[0].path == ("account",)
        assert response.data == {"account": None}
        assert transport.call_count == 2
        assert len(client.cache) == 0

    @pytest.mark.asyncio
    async def test_cache_disabled(self, make_client):
        """With caching off every call reaches the network and nothing is stored."""
        transport = StubTransport({"data": {"a": 1}})
        client = make_client(transport, cache_enabled=False)
        request = new_request("query { a }")

        await client.execute(request)
        await client.execute(request)

        assert transport.call_count == 2
        assert len(client.cache) == 0

    @pytest.mark.asyncio
    async def test_expired_entry_triggers_refetch(self, client_config):
        """Once an entry is older than max age the server is asked again."""
        now = [0.0]
        transport = StubTransport({"data": {"a": 1}}, {"data": {"a": 2}})
        client = GraphQLClient(client_config, transport=transport)
        client._cache._clock = lambda: now[0]
        request = new_request("query { a }")

        assert (await client.execute(request)).data == {"a": 1}
        now[0] = 301.0
        assert (await client.execute(request)).data == {"a": 2}
        assert transport.call_count == 2

    @pytest.mark.asyncio
    async def test_concurrent_identical_requests_both_hit_network(self, make_client):
        """There is no single-flight de-duplication; both callers go to the server."""
        release = asyncio.Event()

        class SlowTransport(StubTransport):
            async def post(self, url, body, headers, timeout):
                await release.wait()
                return await super().post(url, body, headers, timeout)

        transport = SlowTransport({"data": {"a": 1}})
        client = make_client(transport)
        request = new_request("query { a }")

        tasks = [asyncio.ensure_future(client.execute(request)) for _ in range(2)]
        await asyncio.sleep(0)
        release.set()
        results = await asyncio.gather(*tasks)

        assert transport.call_count == 2
        assert results[0] == results[1]
        assert len(client.cache) == 1

    @pytest.mark.asyncio
    async def test_cancellation_leaves_cache_untouched(self, client_config):
        """A cancelled execute never writes a partial response."""
        transport = StubTransport(NetworkError("down"), {"data": {"a": 1}})
        client = GraphQLClient(client_config.model_copy(update={"retry_base_delay": 10.0}), transport=transport)

        task = asyncio.ensure_future(client.execute(new_request("query { a }")))
        await asyncio.sleep(0.01)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task

        assert transport.call_count == 1
        assert len(client.cache) == 0


class TestCacheManagement:
    """Test cache helpers and close()."""

    @pytest.mark.asyncio
    async def test_remove_cache_entry(self, make_client):
        transport = StubTransport({"data": {"a": 1}})
        client = make_client(transport)
        request = new_request("query { a }")

        await client.execute(request)
        assert client.remove_cache_entry(request) is True
        assert client.remove_cache_entry(request) is False

        await client.execute(request)
        assert transport.call_count == 2

    @pytest.mark.asyncio
    async def test_clear_cache(self, make_client):
        transport = StubTransport({"data": {"a": 1}})
        client = make_client(transport)

        await client.execute(new_request("query { a }"))
        await client.execute(new_request("query { b }"))
        assert len(client.cache) == 2

        client.clear_cache()
        assert len(client.cache) == 0
        assert client.get_cache_stats()["entries"] == 0

    @pytest.mark.asyncio
    async def test_close_releases_transport_but_keeps_cache(self, make_client):
        """Closing does not clear cached responses."""
        transport = StubTransport({"data": {"a": 1}})
        client = make_client(transport)

        await client.execute(new_request("query { a }"))
        await client.close()

        assert transport.closed is True
        assert len(client.cache) == 1

    @pytest.mark.asyncio
    async def test_async_context_manager_closes(self, make_client):
        transport = StubTransport({"data": {"a": 1}})

        async with make_client(transport) as client:
            await client.execute(new_request("query { a }"))

        assert transport.closed is True


class TestExecuteSync:
    """Test the blocking wrapper."""

    def test_execute_sync(self, make_client):
        transport = StubTransport({"data": {"a": 1}})
        client = make_client(transport)

        response = client.execute_sync(new_request("query { a }"))

        assert response.data == {"a": 1}
        assert transport.call_count == 1
        assert transport.closed is True

    def test_execute_sync_reports_errors(self):
        client = GraphQLClient(
            ClientConfig(endpoint=ENDPOINT, max_retries=0),
            transport=StubTransport(NetworkError("down")),
        )

        response = client.execute_sync(new_request("query { a }"))

        assert response.error_messages == ["Request failed after 0 retries: down"]


class TestEndpoint:
    @pytest.mark.asyncio
    async def test_bare_host_endpoint_is_posted_verbatim(self, make_client):
        transport = StubTransport({"data": {"a": 1}})
        client = make_client(transport, config=ClientConfig(endpoint="https://api.example.com"))

        await client.execute(new_request("query { a }"))

        assert transport.calls[0]["url"] == "https://api.example.com"
