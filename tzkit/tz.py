"""
Account-level queries and fundraiser activation.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from decimal import Decimal
from typing import Optional

from .operations.builders import create_activation_operation
from .operations.emitter import OperationEmitter
from .operations.operation import Operation

log = logging.getLogger(__name__)

__all__ = ["RpcTzProvider"]

# Activations are authenticated by the secret, not by a signature.
_ZERO_SIGNATURE = "0" * 128


class RpcTzProvider(OperationEmitter):
    async def get_balance(self, address: str) -> Decimal:
        """Balance in mutez."""
        return await self.rpc.get_balance(address)

    async def get_delegate(self, address: str) -> Optional[str]:
        return await self.rpc.get_delegate(address)

    async def activate(self, pkh: str, secret: str) -> Operation:
        forged = await self.prepare_and_forge(create_activation_operation(pkh, secret), pkh)
        signed_bytes = forged.opbytes + _ZERO_SIGNATURE
        op_hash = await self.context.injector.inject(signed_bytes)
        log.info("activated %s in %s", pkh, op_hash)
        return Operation(op_hash, replace(forged, opbytes=signed_bytes), [], self.context.clone())
