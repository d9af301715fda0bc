"""
Plan Engine - Deferral

Yield primitives used between auto-proceeding steps. The engine never
recurses into the next step, it hands a callback to a Deferral.
"""
import asyncio
from collections import deque
from typing import Awaitable, Callable, Deque, Set

from ..config.logging import get_logger

logger = get_logger("executor.deferral")

Callback = Callable[[], Awaitable[None]]


class Deferral:
    """Schedules a coroutine callback to run later on the event loop."""

    def defer(self, callback: Callback, delay_seconds: float = 0.0) -> None:
        raise NotImplementedError


class AsyncioDeferral(Deferral):
    """
    Runs callbacks as asyncio tasks after a sleep.

    Must be used from inside a running event loop.
    """

    def __init__(self):
        self._tasks: Set[asyncio.Task] = set()

    def defer(self, callback: Callback, delay_seconds: float = 0.0) -> None:
        loop = asyncio.get_running_loop()
        task = loop.create_task(self._run_later(callback, delay_seconds))
        # Keep a strong reference until done
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def _run_later(self, callback: Callback, delay_seconds: float) -> None:
        await asyncio.sleep(max(delay_seconds, 0.0))
        try:
            await callback()
        except Exception:
            logger.exception("Deferred callback failed")

    async def wait_idle(self) -> None:
        """Wait until no deferred callback is pending, including follow-ups."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def cancel_all(self) -> None:
        for task in list(self._tasks):
            task.cancel()


class QueuedDeferral(Deferral):
    """
    Collects callbacks in a FIFO queue and runs them on demand.

    Delays are ignored, which makes loop progress fully deterministic.
    """

    def __init__(self):
        self._queue: Deque[Callback] = deque()

    def defer(self, callback: Callback, delay_seconds: float = 0.0) -> None:
        self._queue.append(callback)

    @property
    def pending(self) -> int:
        return len(self._queue)

    async def run_next(self) -> bool:
        """
        Run the oldest queued callback.

        Returns:
            False if the queue was empty
        """
        if not self._queue:
            return False
        callback = self._queue.popleft()
        await callback()
        return True

    async def run_all(self, limit: int = 10_000) -> int:
        """
        Run callbacks until the queue is empty.

        Returns:
            Number of callbacks run
        """
        ran = 0
        while self._queue:
            if ran >= limit:
                raise RuntimeError(f"Deferral queue did not drain after {limit} callbacks")
            await self.run_next()
            ran += 1
        return ran
