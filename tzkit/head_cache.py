"""
Short-lived, deduplicated cache of the node's head block.

Every confirmation tracker polls the head. To keep N concurrent trackers from
issuing N identical requests, the fetch is shared: a fetch started less than
``ttl`` seconds ago (per the injected ``clock``) is reused by every caller,
including callers that arrive while it is still in flight.

Example:
    cache = HeadCache()
    head = await cache.get(rpc.get_block)
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Dict, Optional

log = logging.getLogger(__name__)

__all__ = ["HeadCache"]

Clock = Callable[[], float]


class HeadCache:
    def __init__(self, *, ttl: float = 1.0, clock: Clock = time.monotonic) -> None:
        self.ttl = ttl
        self.clock = clock
        self._task: Optional[asyncio.Future] = None
        self._started_at = 0.0

    def _fresh(self) -> bool:
        return self._task is not None and (self.clock() - self._started_at) < self.ttl

    async def get(self, fetch: Callable[[], Awaitable[Dict[str, Any]]]) -> Dict[str, Any]:
        task = self._task
        if task is None or not self._fresh():
            log.debug("head cache miss; fetching head block")
            self._started_at = self.clock()
            task = self._task = asyncio.ensure_future(fetch())
            task.add_done_callback(self._drop_failed)
        # shield: a cancelled waiter must not cancel the shared fetch
        return await asyncio.shield(task)

    def _drop_failed(self, task: asyncio.Future) -> None:
        if task.cancelled() or task.exception() is not None:
            if self._task is task:
                self._task = None

    def invalidate(self) -> None:
        self._task = None
