# file: src/swipe_stack/tasks.py
import asyncio
import logging
from typing import Any, Coroutine, Optional, Protocol, Set

logger = logging.getLogger(__name__)


class Spawner(Protocol):
    def spawn(self, coro: Coroutine[Any, Any, Any], name: Optional[str] = None) -> Any: ...

    def cancel_all(self) -> None: ...


class TaskRunner:
    """
    Fire-and-forget dispatch on the running event loop.

    Tasks are kept in a set until done (the loop itself only keeps weak
    references). A task that dies with an exception is logged here, since
    nobody awaits it.
    """

    def __init__(self) -> None:
        self._tasks: Set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def spawn(self, coro: Coroutine[Any, Any, Any], name: Optional[str] = None) -> asyncio.Task:
        loop = asyncio.get_running_loop()
        task = loop.create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("background task %s failed", task.get_name(), exc_info=exc)

    async def drain(self) -> None:
        # tasks may spawn follow-up tasks (feedback -> replenish), loop until quiet
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def cancel_all(self) -> None:
        n = 0
        for task in list(self._tasks):
            if not task.done():
                task.cancel()
                n += 1
        if n:
            logger.info("Cancelled %d background task(s)", n)
