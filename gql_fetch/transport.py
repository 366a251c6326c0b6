"""
HTTP transport for GraphQL requests.

A transport performs exactly one POST per call and reports either the raw
response or a ``TransportError``. Retrying is the caller's business.
"""

from __future__ import annotations

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional

import aiohttp

from .exceptions import ErrorHandler

logger = logging.getLogger(__name__)

USER_AGENT = "gql-fetch/1.0"

JSON_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


@dataclass
class TransportResponse:
    """Raw result of one HTTP round trip."""

    status: int
    content: bytes = b""
    headers: Dict[str, str] = field(default_factory=dict)
    response_time: float = 0.0

    @property
    def text(self) -> str:
        """Body decoded for display; undecodable bytes are replaced."""
        return self.content.decode("utf-8", errors="replace")


class BaseTransport(ABC):
    """Interface the client uses to reach the server."""

    @abstractmethod
    async def post(
        self,
        url: str,
        body: str,
        headers: Mapping[str, str],
        timeout: float,
    ) -> TransportResponse:
        """
        POST an encoded JSON body.

        Args:
            url: Endpoint URL
            body: JSON request body
            headers: Request headers
            timeout: Timeout for this attempt in seconds

        Raises:
            TransportError: If no response was received
        """

    @abstractmethod
    async def close(self) -> None:
        """Release network resources."""


class AiohttpTransport(BaseTransport):
    """
    Transport backed by a lazily created ``aiohttp.ClientSession``.

    The session is opened on the first request and closed by ``close``; a
    closed transport opens a new session if it is used again.
    """

    def __init__(
        self,
        session: Optional[aiohttp.ClientSession] = None,
        connector_limit: int = 100,
        connector_limit_per_host: int = 30,
    ):
        """
        Initialize transport.

        Args:
            session: Externally owned session; it is not closed by ``close``
            connector_limit: Total connection pool size
            connector_limit_per_host: Connections per host
        """
        self._session = session
        self._owns_session = session is None
        self._connector_limit = connector_limit
        self._connector_limit_per_host = connector_limit_per_host

    @property
    def closed(self) -> bool:
        return self._session is None or self._session.closed

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(
                limit=self._connector_limit,
                limit_per_host=self._connector_limit_per_host,
                ttl_dns_cache=300,
                enable_cleanup_closed=True,
            )
            self._session = aiohttp.ClientSession(
                connector=connector,
                headers={"User-Agent": USER_AGENT},
                raise_for_status=False,
            )
            self._owns_session = True
        return self._session

    async def post(
        self,
        url: str,
        body: str,
        headers: Mapping[str, str],
        timeout: float,
    ) -> TransportResponse:
        session = self._get_session()
        start_time = time.time()

        try:
            async with session.post(
                url,
                data=body,
                headers=dict(headers),
                timeout=aiohttp.ClientTimeout(total=timeout),
            ) as response:
                content = await response.read()
                return TransportResponse(
                    status=response.status,
                    content=content,
                    headers=dict(response.headers),
                    response_time=time.time() - start_time,
                )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise ErrorHandler.handle_aiohttp_error(e, url=url, timeout=timeout) from e

    async def close(self) -> None:
        if self._session is not None and not self._session.closed and self._owns_session:
            await self._session.close()
        self._session = None
