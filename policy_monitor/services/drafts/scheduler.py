"""Single-slot FIFO request scheduler with a minimum spacing between call starts."""
from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RequestScheduler:
    """Serialize coroutine calls: one in flight, FIFO, >= min_interval between starts.

    ``clock`` and ``sleep`` are injectable so tests can drive time by hand.
    """

    def __init__(
        self,
        min_interval: float = 5.0,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._lock = asyncio.Lock()
        self._last_start: float | None = None
        self._pending = 0

    @property
    def pending(self) -> int:
        """Calls submitted and not yet finished (including the one in flight)."""
        return self._pending

    async def submit(self, func: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any) -> T:
        self._pending += 1
        try:
            async with self._lock:
                if self._last_start is not None:
                    wait = self._last_start + self.min_interval - self._clock()
                    if wait > 0:
                        logger.debug("Request scheduler waiting %.2fs (%d queued)", wait, self._pending - 1)
                        await self._sleep(wait)
                self._last_start = self._clock()
                return await func(*args, **kwargs)
        finally:
            self._pending -= 1
