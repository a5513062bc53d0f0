"""Scheduling port used by pollers.

Pollers never touch the event loop clock directly. They ask a Ticker for
the current time, for a one-shot timer, and to run a cycle in the
background. AsyncioTicker is the production implementation; ManualTicker
is a virtual clock that tests advance explicitly.
"""

import asyncio
import heapq
import itertools
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Coroutine, Optional, Protocol


class TimerHandle(Protocol):
    """Handle to a scheduled one-shot callback."""

    def cancel(self) -> None: ...


class Ticker(ABC):
    """Clock and scheduler abstraction injected into pollers."""

    @abstractmethod
    def now(self) -> float:
        """Current time in seconds on a monotonic scale."""

    @abstractmethod
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        """Run callback once, delay seconds from now.

        Raises:
            RuntimeError: If the ticker cannot schedule (no running loop)
        """

    @abstractmethod
    def spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task:
        """Run coro in the background and keep a reference until it finishes."""


class AsyncioTicker(Ticker):
    """Ticker backed by the running asyncio event loop."""

    def __init__(self):
        self._tasks: set[asyncio.Task] = set()

    def now(self) -> float:
        return time.monotonic()

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        loop = asyncio.get_running_loop()
        return loop.call_later(max(0.0, delay), callback)

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task


class _ManualTimer:
    __slots__ = ("when", "seq", "callback", "cancelled")

    def __init__(self, when: float, seq: int, callback: Callable[[], None]):
        self.when = when
        self.seq = seq
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True

    def __lt__(self, other: "_ManualTimer") -> bool:
        return (self.when, self.seq) < (other.when, other.seq)


class ManualTicker(Ticker):
    """Virtual clock for deterministic tests.

    Time only moves when advance() or advance_to() is awaited. Due timers
    fire in order, and after each one the ticker lets spawned tasks run
    until they finish or block on something the ticker does not control
    (for example a transport future the test resolves later).

    Example:
        ticker = ManualTicker()
        poller = Poller(feed, transport, ticker=ticker)
        poller.start()
        await ticker.advance_to(1.0)
    """

    # Idle event loop iterations before spawned tasks are treated as blocked
    SETTLE_ROUNDS = 100

    def __init__(self, start: float = 0.0):
        self._now = float(start)
        self._timers: list[_ManualTimer] = []
        self._seq = itertools.count()
        self._tasks: set[asyncio.Task] = set()

    def now(self) -> float:
        return self._now

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        timer = _ManualTimer(self._now + max(0.0, delay), next(self._seq), callback)
        heapq.heappush(self._timers, timer)
        return timer

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    @property
    def pending_timers(self) -> int:
        """Number of scheduled, not cancelled timers."""
        return sum(1 for timer in self._timers if not timer.cancelled)

    @property
    def next_deadline(self) -> Optional[float]:
        """Fire time of the earliest live timer, or None."""
        self._drop_cancelled()
        return self._timers[0].when if self._timers else None

    async def advance(self, seconds: float) -> None:
        """Move the clock forward by seconds, firing due timers."""
        await self.advance_to(self._now + seconds)

    async def advance_to(self, target: float) -> None:
        """Move the clock to target, firing every timer due at or before it."""
        await self.settle()
        while True:
            self._drop_cancelled()
            if not self._timers or self._timers[0].when > target:
                break
            timer = heapq.heappop(self._timers)
            self._now = max(self._now, timer.when)
            timer.callback()
            await self.settle()
        self._now = max(self._now, target)

    async def settle(self) -> None:
        """Let spawned tasks run until none of them makes progress.

        Progress is measured in event loop iterations, never wall-clock
        time: settling stops once SETTLE_ROUNDS consecutive iterations pass
        without a spawned task finishing or a new one being spawned.
        """
        await asyncio.sleep(0)
        idle_rounds = 0
        while self._tasks and idle_rounds < self.SETTLE_ROUNDS:
            before = set(self._tasks)
            await asyncio.sleep(0)
            if set(self._tasks) == before:
                idle_rounds += 1
            else:
                idle_rounds = 0

    def _drop_cancelled(self) -> None:
        while self._timers and self._timers[0].cancelled:
            heapq.heappop(self._timers)
