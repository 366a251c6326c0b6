"""
Response cache for GraphQL operations.

Responses are indexed by a key derived from the request text and expire
lazily: ``get`` ignores a stale entry but leaves it in place until it is
overwritten, removed or the store is cleared.
"""

from __future__ import annotations

import copy
import json
import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from .models import GraphQLRequest, GraphQLResponse

logger = logging.getLogger(__name__)

DEFAULT_MAX_AGE = 300.0


def generate_cache_key(request: GraphQLRequest) -> str:
    """
    Derive the cache key for a request.

    The key is ``query | variables | operationName`` with variables serialized
    in insertion order, so two requests whose variables differ only in key
    order get different keys.
    """
    variables = json.dumps(request.variables, ensure_ascii=False)
    operation_name = json.dumps(request.operation_name)
    return f"{request.query}|{variables}|{operation_name}"


@dataclass
class CacheEntry:
    """Stored response and its write time."""

    response: GraphQLResponse
    stored_at: float

    def age(self, now: float) -> float:
        return now - self.stored_at


class CacheStore:
    """
    In-memory response cache with time-based expiry.

    Stored responses are copied on write and on read, so callers never hold
    a reference to the cached state.

    Examples:
        ```python
        store = CacheStore(max_age_seconds=60)
        key = store.key(request)
        store.put(key, response)
        cached = store.get(key)
        ```
    """

    def __init__(
        self,
        max_age_seconds: float = DEFAULT_MAX_AGE,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the store.

        Args:
            max_age_seconds: Entries older than this are treated as misses
            clock: Time source in seconds
        """
        if max_age_seconds <= 0:
            raise ValueError("max_age_seconds must be positive")

        self.max_age_seconds = max_age_seconds
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._stats = {
            "hits": 0,
            "misses": 0,
            "stale": 0,
            "sets": 0,
            "deletes": 0,
        }

    @staticmethod
    def key(request: GraphQLRequest) -> str:
        return generate_cache_key(request)

    def get(self, key: str) -> Optional[GraphQLResponse]:
        """
        Get a fresh cached response.

        Args:
            key: Cache key

        Returns:
            Copy of the cached response, or None if missing or expired
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._stats["misses"] += 1
                return None

            if entry.age(self._clock()) > self.max_age_seconds:
                self._stats["misses"] += 1
                self._stats["stale"] += 1
                logger.debug("Cache entry expired for key %.60s", key)
                return None

            self._stats["hits"] += 1
            return copy.deepcopy(entry.response)

    def put(self, key: str, response: GraphQLResponse) -> None:
        """Store a response, replacing any previous entry for the key."""
        snapshot = copy.deepcopy(response)
        with self._lock:
            self._entries[key] = CacheEntry(response=snapshot, stored_at=self._clock())
            self._stats["sets"] += 1

    def remove(self, key: str) -> bool:
        """Remove one entry. Returns True when something was removed."""
        with self._lock:
            removed = self._entries.pop(key, None) is not None
            if removed:
                self._stats["deletes"] += 1
            return removed

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def stats(self) -> Dict[str, float]:
        """Counters plus current size and hit rate."""
        with self._lock:
            lookups = self._stats["hits"] + self._stats["misses"]
            return {
                **self._stats,
                "entries": len(self._entries),
                "hit_rate": self._stats["hits"] / lookups if lookups else 0.0,
            }
