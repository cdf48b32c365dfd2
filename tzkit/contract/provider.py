"""
Contract provider: estimate, build, sign and inject manager operations.

Every submitting method follows the same path:

1. estimate fee/gas/storage for whatever the caller left unset,
2. build the content (:mod:`tzkit.operations.builders`),
3. prepare + forge, sign + preapply + inject,
4. wrap the injection in a tagged :class:`~tzkit.operations.operation.Operation`.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Awaitable, Callable, Optional, TypeVar

from ..constants import PROTO_005
from ..context import Context
from ..errors import InvalidDelegationSource
from ..operations.builders import (
    DelegateParams,
    OriginateParams,
    RegisterDelegateParams,
    TransferParams,
    create_origination_operation,
    create_register_delegate_operation,
    create_set_delegate_operation,
    create_transfer_operation,
)
from ..operations.emitter import OperationEmitter
from ..operations.estimate import Estimate
from ..operations.estimator import RpcEstimateProvider, coerce_params
from ..operations.operation import HandleKind, Operation
from ..operations.types import ForgedOperation
from .contract import ContractAbstraction

log = logging.getLogger(__name__)

__all__ = ["RpcContractProvider"]

P = TypeVar("P", TransferParams, OriginateParams, DelegateParams, RegisterDelegateParams)


class RpcContractProvider(OperationEmitter):
    def __init__(self, context: Context, estimator: RpcEstimateProvider) -> None:
        super().__init__(context)
        self.estimator = estimator

    async def _estimate(self, params: P, estimator: Callable[[P], Awaitable[Estimate]]) -> P:
        """Fill only the limits the caller left unset; explicit values win."""
        if params.fee is not None and params.gas_limit is not None and params.storage_limit is not None:
            return params
        estimate = await estimator(params)
        return replace(
            params,
            fee=params.fee if params.fee is not None else estimate.suggested_fee_mutez,
            gas_limit=params.gas_limit if params.gas_limit is not None else estimate.gas_limit,
            storage_limit=params.storage_limit if params.storage_limit is not None else estimate.storage_limit,
        )

    # --- reads ---------------------------------------------------------------

    async def get_storage(self, address: str) -> Any:
        return await self.rpc.get_storage(address)

    async def at(self, address: str) -> ContractAbstraction:
        """Load ``address`` and resolve its entrypoint table."""
        script = await self.rpc.get_script(address)
        entrypoints: Any = {}
        legacy = not await self.context.is_any_protocol_active(PROTO_005)
        if not legacy:
            entrypoints = (await self.rpc.get_entrypoints(address)).get("entrypoints") or {}
        contract = ContractAbstraction(address, script, entrypoints, self, legacy=legacy)
        log.debug("loaded %r", contract)
        return contract

    # --- submissions -----------------------------------------------------------

    async def originate(self, params: Optional[OriginateParams] = None, **kwargs: Any) -> Operation:
        params = coerce_params(params, OriginateParams, kwargs)
        params = await self._estimate(params, self.estimator.originate)
        pkh = await self.signer.public_key_hash()
        content = create_origination_operation(params, pkh)
        forged = await self.prepare_and_forge(content, params.source or pkh)
        injected = await self.sign_and_inject(forged)
        return Operation.from_injection(injected, kind=HandleKind.ORIGINATION, contract_provider=self)

    async def transfer(self, params: Optional[TransferParams] = None, **kwargs: Any) -> Operation:
        params = coerce_params(params, TransferParams, kwargs)
        params = await self._estimate(params, self.estimator.transfer)
        content = create_transfer_operation(params)
        forged = await self.prepare_and_forge(content, params.source)
        injected = await self.sign_and_inject(forged)
        return Operation.from_injection(injected, kind=HandleKind.TRANSACTION)

    async def set_delegate(self, params: Optional[DelegateParams] = None, **kwargs: Any) -> Operation:
        """
        Set (or, with ``delegate=None``, withdraw) the delegate of ``source``.

        Since protocol 005 a contract cannot be the source of a delegation;
        use the contract's ``do`` entrypoint with a manager lambda instead.
        """
        params = coerce_params(params, DelegateParams, kwargs)
        if params.source and params.source.lower().startswith("kt1"):
            if await self.context.is_any_protocol_active(PROTO_005):
                raise InvalidDelegationSource(params.source)
        params = await self._estimate(params, self.estimator.set_delegate)
        source = params.source or await self.signer.public_key_hash()
        content = create_set_delegate_operation(replace(params, source=source))
        forged = await self.prepare_and_forge(content, source)
        injected = await self.sign_and_inject(forged)
        return Operation.from_injection(injected, kind=HandleKind.DELEGATION)

    async def register_delegate(self, params: Optional[RegisterDelegateParams] = None, **kwargs: Any) -> Operation:
        params = coerce_params(params, RegisterDelegateParams, kwargs)
        params = await self._estimate(params, self.estimator.register_delegate)
        pkh = await self.signer.public_key_hash()
        content = create_register_delegate_operation(params, pkh)
        forged = await self.prepare_and_forge(content, pkh)
        injected = await self.sign_and_inject(forged)
        return Operation.from_injection(injected, kind=HandleKind.DELEGATION)

    # --- external signing ------------------------------------------------------

    async def get_transfer_signature_hash(self, params: Optional[TransferParams] = None, **kwargs: Any) -> ForgedOperation:
        """Forged transfer for an external signer; sign ``opbytes`` with watermark 0x03."""
        params = coerce_params(params, TransferParams, kwargs)
        params = await self._estimate(params, self.estimator.transfer)
        return await self.prepare_and_forge(create_transfer_operation(params), params.source)

    async def sign_and_broadcast(self, params: TransferParams, prefix_sig: str, sbytes: str) -> Operation:
        """Inject a transfer signed outside this process."""
        params = await self._estimate(params, self.estimator.transfer)
        source = params.source or await self.signer.public_key_hash()
        forged = await self.prepare_and_forge(create_transfer_operation(params), source)
        injected = await self.inject(forged, prefix_sig, sbytes)
        return Operation.from_injection(injected, kind=HandleKind.TRANSACTION)
