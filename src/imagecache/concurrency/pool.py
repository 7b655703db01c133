"""Bounded fire-and-forget pool for background cache writes."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)


class BackgroundTaskPool:
    """Runs blocking callables in worker threads without the caller awaiting them.

    At most ``max_workers`` callables run at once; the rest wait on a
    semaphore. A failure is logged and handed to ``on_error``; it never
    reaches the code that submitted the work.
    """

    def __init__(
        self,
        max_workers: int = 4,
        on_error: Callable[[BaseException], None] | None = None,
    ) -> None:
        self._max_workers = max_workers
        self._semaphore = asyncio.Semaphore(max_workers)
        self._on_error = on_error
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def max_workers(self) -> int:
        return self._max_workers

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def submit(
        self,
        fn: Callable[..., Any],
        *args: Any,
        description: str = "",
    ) -> asyncio.Task[None]:
        """Schedule ``fn(*args)`` on a worker thread. Must be called from a running loop."""

        async def worker() -> None:
            async with self._semaphore:
                await asyncio.to_thread(fn, *args)

        task = asyncio.get_running_loop().create_task(worker())
        self._tasks.add(task)
        task.add_done_callback(lambda t: self._finished(t, description or _describe(fn)))
        return task

    async def drain(self) -> None:
        """Wait for every submitted task, including ones submitted while waiting."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _finished(self, task: asyncio.Task[None], description: str) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            logger.warning("Background task cancelled: %s", description)
            return
        exc = task.exception()
        if exc is None:
            return
        logger.error("Background task failed: %s: %s", description, exc, exc_info=exc)
        if self._on_error is not None:
            self._on_error(exc)


def _describe(fn: Callable[..., Any]) -> str:
    return getattr(fn, "__qualname__", None) or repr(fn)
