"""
Client-side query cache.

Holds the most recent result of each remote query (catalog, profile,
rewards) and refetches on demand once invalidated. The reveal flow reads
the catalog snapshot from here and invalidates it after a reveal.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

Fetcher = Callable[[], Awaitable[T]]


class CachedQuery(Generic[T]):
    """
    A single cached query.

    The value is fetched lazily on first `get()` and again after
    `invalidate()`. `peek()` never fetches.
    """

    def __init__(self, key: str, fetcher: Fetcher[T], initial: T | None = None) -> None:
        self.key = key
        self._fetcher = fetcher
        self._value: T | None = initial
        self._stale = initial is None
        self._lock = asyncio.Lock()

    @property
    def is_stale(self) -> bool:
        return self._stale

    def peek(self) -> T | None:
        """Current value, possibly stale, without fetching."""
        return self._value

    def set(self, value: T) -> None:
        self._value = value
        self._stale = False

    def invalidate(self) -> None:
        self._stale = True

    async def get(self) -> T | None:
        """
        Return the cached value, fetching it first when stale.

        Concurrent callers share one fetch. A fetcher result of None is
        cached like any other value.

        Raises:
            Whatever the fetcher raises; the query stays stale.
        """
        async with self._lock:
            if self._stale:
                self.set(await self._fetcher())
                logger.debug("query_fetched", extra={"query": self.key})
            return self._value


class QueryCache:
    """Registry of cached queries, addressed by key."""

    def __init__(self) -> None:
        self._queries: dict[str, CachedQuery[Any]] = {}

    def register(self, key: str, fetcher: Fetcher[T], initial: T | None = None) -> CachedQuery[T]:
        query: CachedQuery[T] = CachedQuery(key, fetcher, initial)
        self._queries[key] = query
        return query

    def query(self, key: str) -> CachedQuery[Any]:
        """
        Look up a registered query.

        Raises:
            KeyError: If no query is registered under `key`
        """
        return self._queries[key]

    def peek(self, key: str) -> Any:
        """Current value for `key`, or None if unknown or never fetched."""
        query = self._queries.get(key)
        return query.peek() if query is not None else None

    async def get(self, key: str) -> Any:
        return await self.query(key).get()

    def invalidate(self, *keys: str) -> list[str]:
        """
        Mark queries stale. Unknown keys are skipped.

        Returns:
            Keys that were invalidated
        """
        invalidated: list[str] = []
        for key in keys:
            query = self._queries.get(key)
            if query is None:
                logger.warning("invalidate_unknown_query", extra={"query": key})
                continue
            query.invalidate()
            invalidated.append(key)
        return invalidated

    async def refetch(self, *keys: str) -> dict[str, bool]:
        """
        Refetch stale queries concurrently.

        A failed fetch is logged and leaves its query stale; it does not
        abort the others.

        Returns:
            Dict mapping key to whether it now holds a fresh value
        """
        targets = [
            self._queries[k] for k in keys if k in self._queries and self._queries[k].is_stale
        ]
        results = await asyncio.gather(*(q.get() for q in targets), return_exceptions=True)

        outcome: dict[str, bool] = {}
        for query, result in zip(targets, results, strict=True):
            if isinstance(result, BaseException):
                logger.error(
                    "query_refetch_failed",
                    extra={"query": query.key, "error": type(result).__name__},
                )
                outcome[query.key] = False
            else:
                outcome[query.key] = True
        return outcome
