"""
Asyncio tick source for headless sessions.

Runs a background task on the current event loop.
"""

import asyncio
from typing import Optional

from timeledger.domain.errors import InvalidStateError
from .base import TickSource


class AsyncioTickSource(TickSource):
    """Fires ``ticked`` from an asyncio task sleeping one interval per tick"""

    def __init__(self, interval_ms: int = 1000):
        super().__init__(interval_ms)
        self._task: Optional[asyncio.Task] = None

    def arm(self):
        if self.is_armed:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            raise InvalidStateError("AsyncioTickSource needs a running event loop") from None
        self._task = loop.create_task(self._run())

    def disarm(self):
        if self._task is not None:
            self._task.cancel()
            self._task = None

    @property
    def is_armed(self) -> bool:
        return self._task is not None and not self._task.done()

    async def _run(self):
        interval = self.interval_ms / 1000
        while True:
            await asyncio.sleep(interval)
            self.ticked.emit()
