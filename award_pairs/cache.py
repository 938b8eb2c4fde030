"""In-memory cache for trip summaries with in-flight request coalescing."""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


def make_key(destination: Optional[str], days: Optional[int]) -> str:
    return f"{destination or 'unknown'}|{days or 0}"


class SummaryCache:
    """Process-lifetime cache; entries are never evicted.

    Concurrent callers asking for the same key share one upstream call: the
    first caller starts the load and registers it as in flight, later callers
    await that same task. A failed load is removed from the in-flight map so
    the next call retries.

    Create one per process (or one per test) and pass it to whoever needs it.
    """

    def __init__(self):
        self._values: dict[str, Any] = {}
        self._in_flight: dict[str, asyncio.Task] = {}

    def get(self, key: str) -> Optional[Any]:
        return self._values.get(key)

    def set(self, key: str, value: Any) -> None:
        self._values[key] = value

    def __contains__(self, key: str) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)

    def in_flight(self, key: str) -> bool:
        return key in self._in_flight

    async def get_or_create(self, key: str, factory: Callable[[], Awaitable[Any]]) -> Any:
        """Return the cached value for *key*, loading it with *factory* at most once at a time."""
        if key in self._values:
            logger.debug(f"Summary cache hit for {key}")
            return self._values[key]

        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._load(key, factory))
            self._in_flight[key] = task
        else:
            logger.debug(f"Joining in-flight summary load for {key}")

        # One waiter being cancelled must not cancel the shared load
        return await asyncio.shield(task)

    async def _load(self, key: str, factory: Callable[[], Awaitable[Any]]) -> Any:
        try:
            value = await factory()
        except BaseException:
            self._in_flight.pop(key, None)
            raise
        self._values[key] = value
        self._in_flight.pop(key, None)
        return value

    def clear(self) -> None:
        self._values.clear()
