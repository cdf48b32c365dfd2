"""
Default forging and injection delegates backed by the node RPC.

The operation pipeline only needs two narrow capabilities, described by the
:class:`Forger` and :class:`Injector` protocols. Anything that satisfies them
(a local forger, a broadcast relay, a test double) can be swapped into a
:class:`~tzkit.context.Context`.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Protocol, runtime_checkable

log = logging.getLogger(__name__)

__all__ = ["Forger", "Injector", "RpcForger", "RpcInjector"]


@runtime_checkable
class Forger(Protocol):
    async def forge(self, operation: Mapping[str, Any]) -> str:
        """Serialize ``{branch, contents}`` into hex bytes."""
        ...


@runtime_checkable
class Injector(Protocol):
    async def inject(self, signed_bytes: str) -> str:
        """Broadcast signed hex bytes and return the operation hash."""
        ...


class RpcForger:
    """Forges through ``/helpers/forge/operations`` on the context's current node."""

    def __init__(self, context: Any) -> None:
        self._context = context

    async def forge(self, operation: Mapping[str, Any]) -> str:
        payload = {"branch": operation["branch"], "contents": operation["contents"]}
        opbytes = await self._context.rpc.forge_operations(payload)
        log.debug("forged %d contents into %d bytes", len(payload["contents"]), len(opbytes) // 2)
        return opbytes


class RpcInjector:
    def __init__(self, context: Any) -> None:
        self._context = context

    async def inject(self, signed_bytes: str) -> str:
        op_hash = await self._context.rpc.inject_operation(signed_bytes)
        log.info("injected operation %s", op_hash)
        return op_hash
