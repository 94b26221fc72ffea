"""In-process TTL cache for search results, keyed by (query, options)."""

import logging
import time
from collections.abc import Callable
from typing import Generic, TypeVar

from cachetools import TTLCache

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAXSIZE = 256


class SearchCache(Generic[T]):
    """Bounded, expiring map from (query, params) to a cached value.

    Usage::

        cache = SearchCache(ttl_seconds=1800)
        hit = cache.get("python engineer", opts.cache_key())
        if hit is None:
            ...
            cache.set("python engineer", opts.cache_key(), results)

    ``clock`` defaults to ``time.monotonic`` and can be replaced in tests.
    Expired entries are evicted on every write, not only when read.
    """

    def __init__(
        self,
        ttl_seconds: float,
        clock: Callable[[], float] = time.monotonic,
        maxsize: int = DEFAULT_MAXSIZE,
    ) -> None:
        self._entries: TTLCache = TTLCache(maxsize=maxsize, ttl=ttl_seconds, timer=clock)

    def get(self, query: str, params: str) -> T | None:
        value = self._entries.get((query, params))
        if value is None:
            logger.debug("Cache miss for %r", query)
        return value

    def set(self, query: str, params: str, value: T) -> None:
        self._entries[(query, params)] = value

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        self._entries.expire()
        return len(self._entries)
