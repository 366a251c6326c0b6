"""
Retry loop around a single transport attempt.

Transport failures are retried with a linear backoff: the k-th retry waits
``base_delay * k`` seconds. Terminal errors (non-200 status, unparseable
body) stop the loop at once.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, TypeVar

from .exceptions import ErrorHandler, RetriesExhaustedError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class RetryConfig:
    """Configuration for retry behavior."""

    max_retries: int = 3
    base_delay: float = 1.0

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if self.base_delay < 0:
            raise ValueError("base_delay must be >= 0")

    def calculate_delay(self, attempt: int) -> float:
        """
        Delay before the retry that follows failed attempt ``attempt``.

        Args:
            attempt: Number of failed attempts so far (1-based)

        Returns:
            Delay in seconds
        """
        return self.base_delay * attempt


class RetryExecutor:
    """
    Runs an attempt function until it succeeds or the retry budget is spent.

    Examples:
        ```python
        executor = RetryExecutor(RetryConfig(max_retries=2))
        response = await executor.run(lambda: transport_attempt(payload))
        ```
    """

    def __init__(
        self,
        config: Optional[RetryConfig] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        url: Optional[str] = None,
    ):
        """
        Initialize the executor.

        Args:
            config: Retry configuration
            sleep: Coroutine used to wait between attempts
            url: Endpoint, recorded on raised errors
        """
        self.config = config or RetryConfig()
        self._sleep = sleep
        self._url = url

    async def run(
        self,
        attempt_fn: Callable[[], Awaitable[T]],
        max_retries: Optional[int] = None,
    ) -> T:
        """
        Call ``attempt_fn`` with retries.

        Args:
            attempt_fn: Zero-argument coroutine function making one attempt
            max_retries: Override for the configured retry budget

        Returns:
            Whatever the first successful attempt returns

        Raises:
            TerminalError: Propagated unchanged from the attempt
            RetriesExhaustedError: If all ``max_retries + 1`` attempts failed
        """
        retries = self.config.max_retries if max_retries is None else max_retries
        attempts = 0

        while True:
            try:
                return await attempt_fn()
            except Exception as e:
                if not ErrorHandler.is_retryable_error(e):
                    raise

                attempts += 1
                if attempts > retries:
                    logger.error(
                        "Giving up after %d attempts: %s", attempts, e
                    )
                    raise RetriesExhaustedError(retries, e, url=self._url) from e

                delay = self.config.calculate_delay(attempts)
                logger.warning(
                    "Attempt %d/%d failed (%s), retrying in %.2fs",
                    attempts,
                    retries + 1,
                    e,
                    delay,
                )
                if delay > 0:
                    await self._sleep(delay)
