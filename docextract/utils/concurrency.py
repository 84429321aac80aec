import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator


class ConcurrencyGate:
    """Counting semaphore bounding simultaneous in-flight calls.

    The gate limits request concurrency; the token bucket limits request
    volume. Permits are only handed out through ``permit()`` so every acquire
    is paired with exactly one release.
    """

    def __init__(self, max_concurrent: int):
        if max_concurrent < 1:
            raise ValueError("max_concurrent must be at least 1")
        self.max_concurrent = max_concurrent
        self._semaphore = asyncio.Semaphore(max_concurrent)
        self.in_flight = 0
        self.high_water_mark = 0

    @asynccontextmanager
    async def permit(self) -> AsyncIterator[None]:
        """Hold one permit for the duration of the block."""
        await self._semaphore.acquire()
        self.in_flight += 1
        self.high_water_mark = max(self.high_water_mark, self.in_flight)
        try:
            yield
        finally:
            self.in_flight -= 1
            self._semaphore.release()

    @property
    def available(self) -> int:
        return self.max_concurrent - self.in_flight
