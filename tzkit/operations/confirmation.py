"""
Confirmation tracking for injected operations.

A :class:`ConfirmationTracker` polls the head block through the context's
:class:`~tzkit.head_cache.HeadCache` until the tracked hash shows up, then
keeps polling until the head is ``confirmations`` levels past the inclusion
level.

States: ``pending`` -> ``found`` -> ``confirmed`` | ``timed_out``.

The tick budget of one ``confirmation()`` call is
``ceil(timeout / interval) + 1``; the first tick fires immediately and ticks
of one call never overlap. Concurrent calls on the same tracker share the
memoized inclusion level but keep their own depth, interval and budget.
"""

from __future__ import annotations

import asyncio
import logging
import math
from enum import Enum
from typing import Any, Dict, Optional

from ..errors import ConfirmationTimeoutError, PollingConfigError

log = logging.getLogger(__name__)

__all__ = ["ConfirmationState", "ConfirmationTracker", "VALIDATION_PASSES"]

# Blocks carry one operation list per validation pass.
VALIDATION_PASSES = 4


class ConfirmationState(str, Enum):
    PENDING = "pending"
    FOUND = "found"
    CONFIRMED = "confirmed"
    TIMED_OUT = "timed_out"


class ConfirmationTracker:
    def __init__(self, op_hash: str, context: Any) -> None:
        self.op_hash = op_hash
        self.context = context
        self.state = ConfirmationState.PENDING
        self._found_at: Optional[int] = None

    @property
    def found_at(self) -> Optional[int]:
        return self._found_at

    async def current_head(self) -> Dict[str, Any]:
        return await self.context.head_cache.get(self.context.rpc.get_block)

    def _scan(self, head: Dict[str, Any]) -> bool:
        passes = head.get("operations") or []
        for i in range(VALIDATION_PASSES - 1, -1, -1):
            if i >= len(passes):
                continue
            for op in passes[i] or []:
                if op.get("hash") == self.op_hash:
                    return True
        return False

    async def confirmation(
        self,
        confirmations: Optional[int] = None,
        interval: Optional[float] = None,
        timeout: Optional[float] = None,
    ) -> int:
        """
        Wait until the operation is ``confirmations`` blocks deep and return
        the level at which that depth was reached (inclusion level +
        ``confirmations``).

        Unset arguments fall back to the context's polling config.

        Raises
        ------
        PollingConfigError
            ``interval`` or ``timeout`` is not positive.
        ConfirmationTimeoutError
            The tick budget ran out first.
        """
        cfg = self.context.config
        depth = cfg.default_confirmation_count if confirmations is None else confirmations
        interval = cfg.confirmation_polling_interval if interval is None else interval
        timeout = cfg.confirmation_polling_timeout if timeout is None else timeout
        if timeout <= 0:
            raise PollingConfigError("Timeout must be more than 0")
        if interval <= 0:
            raise PollingConfigError("Interval must be more than 0")

        timeout_at = math.ceil(timeout / interval) + 1
        count = 0
        while True:
            count += 1
            if count > timeout_at:
                if self.state is not ConfirmationState.CONFIRMED:
                    self.state = ConfirmationState.TIMED_OUT
                log.debug("confirmation of %s timed out after %d polls", self.op_hash, count - 1)
                raise ConfirmationTimeoutError(op_hash=self.op_hash, ticks=count - 1, found_at=self._found_at)

            head = await self.current_head()
            level = int(head["header"]["level"])
            if self._found_at is None and self._scan(head):
                self._found_at = level
                if self.state is ConfirmationState.PENDING:
                    self.state = ConfirmationState.FOUND
                log.debug("operation %s found at level %d", self.op_hash, level)

            if self._found_at is not None and level - self._found_at >= depth:
                self.state = ConfirmationState.CONFIRMED
                return self._found_at + depth

            await asyncio.sleep(interval)
