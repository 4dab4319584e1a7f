"""Politeness pacing between successive page requests to a target site.

Page audits against one site run strictly one after another. The pacer
enforces a minimum interval between the end of one page audit and the
start of the next so the target server sees a bounded request rate.
The sleep function and clock are injectable so tests can run without
real delays.
"""

import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional


logger = logging.getLogger(__name__)


DEFAULT_REQUEST_INTERVAL = 1.0


class RequestPacer:
    """Minimum-interval pacer for sequential requests to one host."""

    def __init__(
        self,
        min_interval: float = DEFAULT_REQUEST_INTERVAL,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic
    ):
        """Initialize request pacer.

        Args:
            min_interval: Minimum seconds between the previous mark and the next request
            sleep: Coroutine function used to wait
            clock: Monotonic clock returning seconds
        """
        if min_interval < 0:
            raise ValueError(f"min_interval must be >= 0, got {min_interval}")

        self.min_interval = min_interval
        self._sleep = sleep
        self._clock = clock
        self._last_mark: Optional[float] = None

        self._stats = {
            "marks": 0,
            "waits": 0,
            "total_wait_seconds": 0.0
        }

    def mark(self) -> None:
        """Record that a request just completed."""
        self._last_mark = self._clock()
        self._stats["marks"] += 1

    def time_until_ready(self) -> float:
        """Seconds left before the next request may start."""
        if self._last_mark is None or self.min_interval <= 0:
            return 0.0
        elapsed = self._clock() - self._last_mark
        return max(0.0, self.min_interval - elapsed)

    async def wait(self) -> float:
        """Wait until the minimum interval since the last mark has passed.

        Returns:
            Seconds waited
        """
        delay = self.time_until_ready()
        if delay <= 0:
            return 0.0

        logger.debug(f"Pacing next request by {delay:.2f}s")
        await self._sleep(delay)

        self._stats["waits"] += 1
        self._stats["total_wait_seconds"] += delay
        return delay

    def get_stats(self) -> dict:
        """Get pacer statistics."""
        return {
            **self._stats,
            "min_interval": self.min_interval
        }
