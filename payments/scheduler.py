"""
Background scheduling for delayed notification stages.

Stages run as asyncio tasks on the serving event loop, detached from the
request that scheduled them. There is no cancellation: once scheduled, a
sequence runs to the end.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Coroutine, Any

logger = logging.getLogger(__name__)

SleepFn = Callable[[float], Awaitable[None]]


class Scheduler(ABC):
    """Runs coroutines in the background and provides the sleep they use."""

    @abstractmethod
    def schedule(self, coro: Coroutine[Any, Any, None], name: str = "") -> None:
        """Start `coro` without waiting for it."""
        pass

    @abstractmethod
    async def sleep(self, seconds: float) -> None:
        pass


class AsyncioScheduler(Scheduler):
    """
    Scheduler backed by asyncio.create_task.

    Holds a strong reference to every task until it finishes; the event
    loop itself only keeps weak ones.
    """

    def __init__(self, sleep: SleepFn = asyncio.sleep):
        self._sleep = sleep
        self._tasks: set[asyncio.Task] = set()

    def schedule(self, coro: Coroutine[Any, Any, None], name: str = "") -> None:
        task = asyncio.create_task(coro, name=name or None)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)

    async def sleep(self, seconds: float) -> None:
        await self._sleep(seconds)

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(
                f"Background task {task.get_name()} failed: {error}",
                exc_info=error,
            )

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait for every scheduled task (shutdown and tests)."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
