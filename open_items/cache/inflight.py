"""Per-selection coalescing of concurrent refreshes."""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

logger = logging.getLogger(__name__)


class InFlightRegistry:
    """
    Map of selection key -> running refresh task.

    Holding a key's slot is the lock; the slot is released when the refresh
    settles, whatever its outcome. Callers that arrive while a refresh for
    the same key is running await that task instead of starting another one.
    Refreshes for different keys run independently.
    """

    def __init__(self):
        self._tasks: Dict[str, "asyncio.Task[Any]"] = {}

    def get(self, selection_key: str) -> Optional["asyncio.Task[Any]"]:
        return self._tasks.get(selection_key)

    def is_running(self, selection_key: str) -> bool:
        return selection_key in self._tasks

    def start(
        self,
        selection_key: str,
        factory: Callable[[], Awaitable[Any]],
    ) -> "asyncio.Task[Any]":
        """
        Return the running task for a key, starting one from factory if there is none.

        Must be called from inside the event loop. The check and the insert
        happen without an intervening await, so two callers can never both
        start a refresh for the same key.
        """
        task = self._tasks.get(selection_key)
        if task is not None:
            logger.debug("Joining in-flight refresh for %r", selection_key)
            return task

        async def run() -> Any:
            try:
                return await factory()
            finally:
                # Release before waiters resume so the next request starts fresh
                if self._tasks.get(selection_key) is asyncio.current_task():
                    del self._tasks[selection_key]

        task = asyncio.ensure_future(run())
        self._tasks[selection_key] = task
        return task

    async def run(self, selection_key: str, factory: Callable[[], Awaitable[Any]]) -> Any:
        """
        Start or join the refresh for a key and wait for its result.

        A waiter being cancelled does not cancel the shared refresh.
        """
        return await asyncio.shield(self.start(selection_key, factory))

    def __len__(self) -> int:
        return len(self._tasks)
