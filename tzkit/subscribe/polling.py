"""
Block-polling subscribe provider.

Polls the head block every ``poll_interval`` seconds, drops repeats of the
same hash, and feeds :class:`~tzkit.subscribe.subscription.Subscription`
channels:

- ``subscribe("head")`` emits each new head's hash,
- ``subscribe_operation(filter)`` emits ``{"hash": op_hash, **content}`` for
  every content of every new block that matches ``filter``.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, List, Optional

from .filters import Filter, evaluate_filter
from .subscription import Subscription

log = logging.getLogger(__name__)

__all__ = ["PollingSubscribeProvider", "DEFAULT_POLL_INTERVAL", "iter_block_contents"]

DEFAULT_POLL_INTERVAL = 20.0


def iter_block_contents(block: Dict[str, Any]) -> Iterator[Dict[str, Any]]:
    for validation_pass in block.get("operations") or []:
        for op in validation_pass or []:
            for content in op.get("contents") or []:
                yield {"hash": op.get("hash"), **content}


class _NewBlocks:
    """Poll callable returning ``[block]`` for a new head and ``[]`` for a repeat."""

    def __init__(self, context: Any) -> None:
        self._context = context
        self._last_hash: Optional[str] = None

    async def __call__(self) -> List[Dict[str, Any]]:
        block = await self._context.rpc.get_block()
        if block.get("hash") == self._last_hash:
            return []
        self._last_hash = block.get("hash")
        log.debug("new head %s", self._last_hash)
        return [block]


class PollingSubscribeProvider:
    def __init__(self, context: Any, poll_interval: float = DEFAULT_POLL_INTERVAL) -> None:
        self.context = context
        self.poll_interval = poll_interval

    def subscribe(self, channel: str = "head") -> Subscription:
        if channel != "head":
            raise ValueError(f"unsupported channel {channel!r}; only 'head' is available")
        blocks = _NewBlocks(self.context)

        async def poll() -> List[str]:
            return [b["hash"] for b in await blocks()]

        return Subscription(poll, self.poll_interval, name="head").start()

    def subscribe_operation(self, filter: Filter) -> Subscription:
        blocks = _NewBlocks(self.context)

        async def poll() -> List[Dict[str, Any]]:
            return [
                content
                for block in await blocks()
                for content in iter_block_contents(block)
                if evaluate_filter(content, filter)
            ]

        return Subscription(poll, self.poll_interval, name="operations").start()
