"""Async rate limiter guarding every call to the monday.com API.

Admission is bounded by two constraints at once: a concurrency ceiling and a
token reservoir that is topped up on a fixed interval.  Work that cannot be
admitted waits in a FIFO queue; throttling only ever delays a call.

Usage::

    limiter = RateLimiter(max_concurrent=10, reservoir=60, refresh_interval=60)
    result = await limiter.schedule(client.post, url, json=payload)

All state is mutated between awaits of a single event loop, so admission
checks need no lock.
"""

import asyncio
import logging
import time
from collections import deque
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from flowboard.services.errors import RateLimitExceeded

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RateLimiter:
    """FIFO limiter with a concurrency cap and a replenishing reservoir."""

    def __init__(
        self,
        max_concurrent: int = 10,
        reservoir: int = 60,
        refresh_interval: float = 60.0,
        refresh_amount: int | None = None,
        min_interval: float = 0.0,
        max_queue: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Args:
            max_concurrent: Maximum number of calls in flight at once.
            reservoir: Tokens available at start, and the most ever banked.
            refresh_interval: Seconds between reservoir top-ups.
            refresh_amount: Tokens added per top-up (defaults to *reservoir*).
            min_interval: Minimum seconds between two dispatches.
            max_queue: Reject new calls with ``RateLimitExceeded`` once this
                many are waiting.  ``None`` queues without bound.
            clock: Monotonic time source, in seconds.
        """
        if max_concurrent < 1 or reservoir < 1:
            raise ValueError("max_concurrent and reservoir must be positive")
        self._max_concurrent = max_concurrent
        self._capacity = reservoir
        self._tokens = reservoir
        self._refresh_interval = refresh_interval
        self._refresh_amount = refresh_amount if refresh_amount is not None else reservoir
        self._min_interval = min_interval
        self._max_queue = max_queue
        self._clock = clock

        self._running = 0
        self._waiters: deque[asyncio.Future[None]] = deque()
        self._last_refill: float | None = None
        self._next_start = 0.0
        self._timer: asyncio.TimerHandle | None = None

    def counts(self) -> dict[str, int]:
        """Snapshot of queued/running calls and remaining reservoir tokens."""
        self._refill(self._clock())
        return {
            "queued": sum(1 for w in self._waiters if not w.done()),
            "running": self._running,
            "reservoir": self._tokens,
        }

    async def schedule(
        self, fn: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any
    ) -> T:
        """Wait for admission, run ``fn(*args, **kwargs)`` and return its result."""
        await self._acquire()
        try:
            return await fn(*args, **kwargs)
        finally:
            self._release()

    # -- admission ---------------------------------------------------------

    async def _acquire(self) -> None:
        now = self._clock()
        self._refill(now)
        if not self._waiters and self._can_start(now):
            self._start(now)
            return

        if self._max_queue is not None and len(self._waiters) >= self._max_queue:
            raise RateLimitExceeded(
                f"Rate limiter queue is full ({self._max_queue} waiting)", status=429
            )

        fut: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._waiters.append(fut)
        if self._tokens == 0:
            logger.debug(
                "Rate limit reservoir depleted; %d request(s) queued",
                len(self._waiters),
            )
        self._wake()
        try:
            await fut
        except asyncio.CancelledError:
            if fut.done() and not fut.cancelled():
                # Admitted, but the caller went away before running
                self._release()
            else:
                try:
                    self._waiters.remove(fut)
                except ValueError:
                    pass
            raise

    def _release(self) -> None:
        self._running -= 1
        self._wake()

    def _can_start(self, now: float) -> bool:
        return (
            self._running < self._max_concurrent
            and self._tokens > 0
            and now >= self._next_start
        )

    def _start(self, now: float) -> None:
        self._running += 1
        self._tokens -= 1
        self._next_start = now + self._min_interval

    def _refill(self, now: float) -> None:
        if self._last_refill is None:
            self._last_refill = now
            return
        elapsed = now - self._last_refill
        if elapsed < self._refresh_interval:
            return
        ticks = int(elapsed // self._refresh_interval)
        self._tokens = min(self._capacity, self._tokens + ticks * self._refresh_amount)
        self._last_refill += ticks * self._refresh_interval

    def _wake(self) -> None:
        """Admit queued callers from the head while capacity allows."""
        now = self._clock()
        self._refill(now)
        while self._waiters:
            fut = self._waiters[0]
            if fut.done():
                self._waiters.popleft()
                continue
            if not self._can_start(now):
                break
            self._waiters.popleft()
            self._start(now)
            fut.set_result(None)

        if not self._waiters or self._running >= self._max_concurrent:
            # Either nothing to do, or a release will wake us again
            return

        delay = 0.0
        if self._tokens == 0 and self._last_refill is not None:
            delay = max(delay, self._last_refill + self._refresh_interval - now)
        if now < self._next_start:
            delay = max(delay, self._next_start - now)
        self._arm_timer(delay)

    def _arm_timer(self, delay: float) -> None:
        if self._timer is not None:
            self._timer.cancel()
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(max(delay, 0.0), self._on_timer)

    def _on_timer(self) -> None:
        self._timer = None
        self._wake()
