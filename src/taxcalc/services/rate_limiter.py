"""Token bucket limiting outbound calls to the computation engine."""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from collections.abc import Callable

from taxcalc.errors import RateLimitError

logger = logging.getLogger(__name__)


class RateLimiter:
    """Allows one call per ``interval`` seconds with a burst of one.

    Callers reserve the next free slot under a lock and then sleep until it
    arrives, so concurrent waiters are released one interval apart in arrival
    order. The first call never waits.
    """

    def __init__(self, interval: float, clock: Callable[[], float] = time.monotonic):
        if interval <= 0:
            raise ValueError("rate limit interval must be positive")
        self.interval = interval
        self._clock = clock
        self._lock = threading.Lock()
        self._next_slot = float("-inf")
        self.waits = 0

    def _reserve(self) -> tuple[float, float]:
        with self._lock:
            self.waits += 1
            now = self._clock()
            slot = max(now, self._next_slot)
            self._next_slot = slot + self.interval
            return slot, slot - now

    def _release(self, slot: float) -> None:
        with self._lock:
            # Only hand the slot back if nobody queued behind it.
            if self._next_slot == slot + self.interval:
                self._next_slot = slot

    async def wait(self, cancel: asyncio.Event | None = None) -> None:
        """Block until a token is available.

        Args:
            cancel: Optional event; setting it aborts the wait.

        Raises:
            RateLimitError: If ``cancel`` is set before a token is available.
        """
        if cancel is not None and cancel.is_set():
            raise RateLimitError("rate limit wait canceled")

        slot, delay = self._reserve()
        if delay <= 0:
            return

        logger.debug("Waiting %.3fs for rate limit", delay)
        try:
            if cancel is None:
                await asyncio.sleep(delay)
                return
            await asyncio.wait_for(cancel.wait(), timeout=delay)
        except asyncio.TimeoutError:
            return
        except asyncio.CancelledError:
            self._release(slot)
            raise

        self._release(slot)
        raise RateLimitError("rate limit wait canceled")
