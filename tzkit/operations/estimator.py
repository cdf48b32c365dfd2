"""
Estimation provider: dry-run an operation and derive an :class:`Estimate`.

Each method builds the same content a real submission would, with
placeholder maxima for fee, gas and storage, then prepares, forges and
simulates it with a stub signature. Nothing is signed or broadcast.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from decimal import Decimal
from typing import Any, Dict, List, Optional, Type, TypeVar

from ..constants import (
    ESTIMATE_PLACEHOLDERS,
    PROTO_005,
    SIGNATURE_STUB,
    DefaultGasLimit,
    DefaultStorageLimit,
)
from .builders import (
    DelegateParams,
    OriginateParams,
    RegisterDelegateParams,
    TransferParams,
    create_origination_operation,
    create_register_delegate_operation,
    create_set_delegate_operation,
    create_transfer_operation,
)
from .emitter import OperationEmitter
from .estimate import Estimate
from .types import Content

log = logging.getLogger(__name__)

__all__ = ["RpcEstimateProvider", "coerce_params"]

P = TypeVar("P")


def coerce_params(params: Optional[P], cls: Type[P], kwargs: Dict[str, Any]) -> P:
    """Accept either a ready parameter record or its fields as keywords."""
    if params is not None:
        if kwargs:
            raise TypeError("pass either a parameter record or keyword arguments, not both")
        return params
    return cls(**kwargs)


def _with_placeholders(params: P) -> P:
    return replace(params, **ESTIMATE_PLACEHOLDERS)


def _results_of_kind(op_response: Dict[str, Any], kind: str) -> List[Dict[str, Any]]:
    """The content's own result followed by every internal operation result; missing ones are skipped."""
    for content in op_response.get("contents") or []:
        if content.get("kind") != kind:
            continue
        metadata = content.get("metadata") or {}
        internal = [r.get("result") for r in metadata.get("internal_operation_results") or []]
        return [r for r in [metadata.get("operation_result"), *internal] if r]
    return []


class RpcEstimateProvider(OperationEmitter):
    async def _create_estimate(
        self,
        content: Content,
        source: Optional[str],
        *,
        default_storage: int,
        minimum_gas: int = 0,
    ) -> Estimate:
        forged = await self.prepare_and_forge(content, source)
        operation: Dict[str, Any] = {
            "branch": forged.branch,
            "contents": forged.contents,
            "signature": SIGNATURE_STUB,
        }
        if await self.context.is_any_protocol_active(PROTO_005, forged.protocol):
            operation = {"operation": operation, "chain_id": await self.rpc.get_chain_id()}

        simulation = await self.simulate(operation)
        gas = Decimal(0)
        storage = Decimal(0)
        for result in _results_of_kind(simulation.op_response, content["kind"]):
            gas += Decimal(str(result.get("consumed_gas") or 0))
            storage += Decimal(str(result.get("paid_storage_size_diff") or 0))

        estimate = Estimate(max(gas, Decimal(minimum_gas)), storage + default_storage, len(forged.opbytes) // 2)
        log.debug("estimated %s: %r", content["kind"], estimate)
        return estimate

    async def originate(self, params: Optional[OriginateParams] = None, **kwargs: Any) -> Estimate:
        params = coerce_params(params, OriginateParams, kwargs)
        pkh = await self.signer.public_key_hash()
        content = create_origination_operation(_with_placeholders(params), pkh)
        return await self._create_estimate(
            content, params.source or pkh, default_storage=int(DefaultStorageLimit.ORIGINATION)
        )

    async def transfer(self, params: Optional[TransferParams] = None, **kwargs: Any) -> Estimate:
        params = coerce_params(params, TransferParams, kwargs)
        pkh = await self.signer.public_key_hash()
        content = create_transfer_operation(_with_placeholders(params))
        return await self._create_estimate(
            content, params.source or pkh, default_storage=int(DefaultStorageLimit.TRANSFER)
        )

    async def set_delegate(self, params: Optional[DelegateParams] = None, **kwargs: Any) -> Estimate:
        params = coerce_params(params, DelegateParams, kwargs)
        source = params.source or await self.signer.public_key_hash()
        content = create_set_delegate_operation(_with_placeholders(replace(params, source=source)))
        return await self._create_estimate(
            content,
            source,
            default_storage=int(DefaultStorageLimit.DELEGATION),
            minimum_gas=int(DefaultGasLimit.DELEGATION),
        )

    async def register_delegate(self, params: Optional[RegisterDelegateParams] = None, **kwargs: Any) -> Estimate:
        params = coerce_params(params, RegisterDelegateParams, kwargs)
        pkh = await self.signer.public_key_hash()
        content = create_register_delegate_operation(_with_placeholders(params), pkh)
        return await self._create_estimate(
            content,
            pkh,
            default_storage=int(DefaultStorageLimit.DELEGATION),
            minimum_gas=int(DefaultGasLimit.DELEGATION),
        )
