"""
Context: the configuration record every provider reads from.

A context holds the RPC client, the signer, an optional protocol hint, the
polling configuration, the forging and injection delegates and the head
cache. Operation handles keep a :meth:`Context.clone` so a provider swap on
the live context does not affect confirmations already in flight.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Iterable, Optional

from .config import PollingConfig
from .head_cache import HeadCache
from .rpc.delegates import Forger, Injector, RpcForger, RpcInjector
from .signer.base import Signer
from .signer.noop import NoopSigner

log = logging.getLogger(__name__)

__all__ = ["Context"]


class Context:
    def __init__(
        self,
        rpc: Any,
        signer: Optional[Signer] = None,
        proto: Optional[str] = None,
        config: Optional[PollingConfig] = None,
        *,
        forger: Optional[Forger] = None,
        injector: Optional[Injector] = None,
        head_cache: Optional[HeadCache] = None,
    ) -> None:
        self._rpc = rpc
        self.signer: Signer = signer or NoopSigner()
        self.proto = proto
        self.config = config or PollingConfig()
        self.forger: Forger = forger or RpcForger(self)
        self.injector: Injector = injector or RpcInjector(self)
        self.head_cache = head_cache or HeadCache()

    @property
    def rpc(self) -> Any:
        return self._rpc

    @rpc.setter
    def rpc(self, value: Any) -> None:
        # Heads cached from the previous node must not leak to the new one.
        self._rpc = value
        self.head_cache = HeadCache(ttl=self.head_cache.ttl, clock=self.head_cache.clock)

    def clone(self) -> "Context":
        """
        Shallow snapshot. The clone shares the RPC client, signer, delegates
        and head cache with this context but later assignments on either side
        are not seen by the other.
        """
        twin = copy.copy(self)
        twin.config = copy.copy(self.config)
        if isinstance(self.forger, RpcForger):
            twin.forger = RpcForger(twin)
        if isinstance(self.injector, RpcInjector):
            twin.injector = RpcInjector(twin)
        return twin

    async def is_any_protocol_active(
        self, protocols: Iterable[str], next_protocol: Optional[str] = None
    ) -> bool:
        """
        True if the active protocol is one of ``protocols``.

        The explicit ``proto`` hint wins; otherwise ``next_protocol`` is used
        when the caller already has head metadata, and only then is the head
        metadata fetched.
        """
        known = set(protocols)
        if self.proto:
            return self.proto in known
        if next_protocol is None:
            metadata = await self.rpc.get_block_metadata()
            next_protocol = metadata["next_protocol"]
        return next_protocol in known
