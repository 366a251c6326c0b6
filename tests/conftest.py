"""
Shared test fixtures and configuration for the gql_fetch test suite.
"""

import json
from typing import Any, Dict, List, Mapping, Optional, Union

import pytest

from gql_fetch import ClientConfig, GraphQLClient, RetryConfig, RetryExecutor
from gql_fetch.transport import BaseTransport, TransportResponse

ENDPOINT = "https://api.example.com/graphql"


class StubTransport(BaseTransport):
    """
    Transport double that replays scripted outcomes.

    Each outcome is either a ``TransportResponse``, a JSON-serializable dict
    (sent as a 200 body) or an exception instance to raise. The last outcome
    repeats once the script runs out.
    """

    def __init__(self, *outcomes: Union[TransportResponse, Dict[str, Any], BaseException]):
        self.outcomes = list(outcomes)
        self.calls: List[Dict[str, Any]] = []
        self.closed = False

    @property
    def call_count(self) -> int:
        return len(self.calls)

    async def post(
        self,
        url: str,
        body: str,
        headers: Mapping[str, str],
        timeout: float,
    ) -> TransportResponse:
        self.calls.append(
            {
                "url": url,
                "body": body,
                "payload": json.loads(body),
                "headers": dict(headers),
                "timeout": timeout,
            }
        )
        index = min(len(self.calls) - 1, len(self.outcomes) - 1)
        outcome = self.outcomes[index]

        if isinstance(outcome, BaseException):
            raise outcome
        if isinstance(outcome, TransportResponse):
            return outcome
        return TransportResponse(status=200, content=json.dumps(outcome).encode("utf-8"))

    async def close(self) -> None:
        self.closed = True


class SleepRecorder:
    """Replacement for ``asyncio.sleep`` that records delays."""

    def __init__(self) -> None:
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def client_config() -> ClientConfig:
    """Default client configuration for tests."""
    return ClientConfig(endpoint=ENDPOINT, headers={"Authorization": "Bearer test-token"})


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def make_client(client_config: ClientConfig, sleep_recorder: SleepRecorder):
    """Factory building a client around a StubTransport with instant retries."""

    def _make(
        transport: StubTransport,
        config: Optional[ClientConfig] = None,
        **overrides: Any,
    ) -> GraphQLClient:
        cfg = config or client_config
        if overrides:
            cfg = cfg.model_copy(update=overrides)
        executor = RetryExecutor(
            RetryConfig(max_retries=cfg.max_retries, base_delay=cfg.retry_base_delay),
            sleep=sleep_recorder,
        )
        return GraphQLClient(cfg, transport=transport, retry_executor=executor)

    return _make
