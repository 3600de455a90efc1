"""Cancellation scope shared by the coordinator and the tasks it spawns.

Cancelling a Lifetime does not interrupt in-flight requests. Each
continuation checks `cancelled` once after it resumes and drops its result
if the consumer is gone.
"""

import asyncio
from collections.abc import Coroutine
from typing import Any


class Lifetime:
    def __init__(self) -> None:
        self._cancelled = False
        self._tasks: set[asyncio.Task] = set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task:
        """Run coro in the background, holding a reference until it finishes."""
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def drain(self) -> None:
        """Wait for every spawned task that is still running."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
