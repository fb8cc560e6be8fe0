"""Fire-and-forget scheduling for persistence writes."""

import asyncio
from typing import Any, Awaitable, Set

from loguru import logger


class BackgroundWrites:
    """Run write coroutines on the current loop without blocking the caller.

    Tasks are kept referenced until done so they are not garbage collected
    mid-flight. ``flush()`` awaits everything still pending.
    """

    def __init__(self):
        self._pending: Set[asyncio.Task] = set()

    def schedule(self, write: Awaitable[Any]) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop (sync caller): nothing can run the write
            logger.debug("No running event loop, write skipped")
            if asyncio.iscoroutine(write):
                write.close()
            return

        task = loop.create_task(write)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def flush(self) -> None:
        while self._pending:
            await asyncio.gather(*list(self._pending))
