# src/llm/gate.py - v1
"""Concurrency gate in front of the AI endpoint.

Two constraints are enforced together:
  - at most ``max_concurrent`` slots are outstanding at any time, granted to
    waiters in FIFO order;
  - consecutive grants are spaced by at least ``rate_limit_delay_s``, measured
    from the previous grant.

All counter and queue mutations happen between awaits on a single event
loop, so they are atomic with respect to other tasks. A slot is handed
directly from the releasing task to the next waiter, which rules out
overshoot when a newcomer races a woken waiter.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections import deque
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Callable

logger = logging.getLogger(__name__)


class GateSlot:
    """Permit for one in-flight call. Releasing twice is a no-op."""

    __slots__ = ("_gate", "_released", "granted_at")

    def __init__(self, gate: ConcurrencyGate, granted_at: float) -> None:
        self._gate = gate
        self._released = False
        self.granted_at = granted_at

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> None:
        if self._released:
            return
        self._released = True
        self._gate._release_capacity()


class ConcurrencyGate:
    """FIFO slot limiter with minimum pacing between grants.

    Args:
        max_concurrent: Number of simultaneously outstanding slots.
        rate_limit_delay_s: Minimum gap between consecutive grants.
        clock: Monotonic clock, replaceable in tests.
        sleep: Awaitable sleep, replaceable in tests.
    """

    def __init__(
        self,
        max_concurrent: int = 2,
        rate_limit_delay_s: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        if max_concurrent < 1:
            raise ValueError("max_concurrent must be >= 1")
        self._capacity = max_concurrent
        self.rate_limit_delay_s = rate_limit_delay_s
        self._clock = clock
        self._sleep = sleep
        self._active = 0
        self._waiters: deque[asyncio.Future[None]] = deque()
        self._pace_lock = asyncio.Lock()
        self._last_grant: float | None = None

    # --- Introspection ---

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def active(self) -> int:
        """Slots currently held."""
        return self._active

    @property
    def queue_length(self) -> int:
        """Tasks waiting for capacity."""
        return sum(1 for w in self._waiters if not w.done())

    # --- Public API ---

    async def acquire(self) -> GateSlot:
        """Wait for capacity, then for pacing, and return a held slot.

        Cancellation at either wait leaves the gate exactly as it was.
        """
        await self._acquire_capacity()
        try:
            granted_at = await self._wait_for_pacing()
        except BaseException:
            self._release_capacity()
            raise
        return GateSlot(self, granted_at)

    def release(self, slot: GateSlot) -> None:
        """Release *slot*. Never raises, safe to call more than once."""
        slot.release()

    @asynccontextmanager
    async def slot(self) -> AsyncIterator[GateSlot]:
        """Hold a slot for the duration of the block, released on every exit."""
        held = await self.acquire()
        try:
            yield held
        finally:
            held.release()

    def resize(self, max_concurrent: int) -> None:
        """Change capacity. Growing wakes queued waiters immediately;
        shrinking takes effect as held slots are released."""
        if max_concurrent < 1:
            raise ValueError("max_concurrent must be >= 1")
        self._capacity = max_concurrent
        while self._active < self._capacity and self._hand_over():
            self._active += 1

    # --- Internals ---

    async def _acquire_capacity(self) -> None:
        if self._active < self._capacity and not self._waiters:
            self._active += 1
            return

        waiter: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        logger.debug("Gate full (%d/%d), queued at position %d",
                     self._active, self._capacity, len(self._waiters))
        try:
            await waiter
        except asyncio.CancelledError:
            if waiter.done() and not waiter.cancelled():
                # Slot was already handed to us; pass it on.
                self._release_capacity()
            else:
                try:
                    self._waiters.remove(waiter)
                except ValueError:
                    pass
            raise

    def _hand_over(self) -> bool:
        """Grant capacity to the oldest live waiter, if any."""
        while self._waiters:
            waiter = self._waiters.popleft()
            if not waiter.done():
                waiter.set_result(None)
                return True
        return False

    def _release_capacity(self) -> None:
        if self._active > self._capacity:
            # Shrunk while held: drop the slot instead of handing it on.
            self._active -= 1
            return
        if not self._hand_over():
            self._active -= 1

    async def _wait_for_pacing(self) -> float:
        async with self._pace_lock:
            if self._last_grant is not None:
                while True:
                    remaining = self._last_grant + self.rate_limit_delay_s - self._clock()
                    if remaining <= 0:
                        break
                    await self._sleep(remaining)
            self._last_grant = self._clock()
            return self._last_grant
