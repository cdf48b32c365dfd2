"""
Operation emitter: prepare, forge, simulate, sign and inject.

Every provider that submits or simulates operations extends
:class:`OperationEmitter`. The call chain is

    prepare_operation -> forge -> (simulate | sign_and_inject -> inject)

and each stage returns an immutable record from :mod:`tzkit.operations.types`.

Notes
-----
- The counter baseline is fetched on every prepare call; nothing is cached
  across calls, so two concurrent submissions never reuse a stale counter.
- Preapply runs before injection. A group with any failed content is never
  broadcast.
"""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from typing import Any, List, Mapping, Optional, Sequence, Union

from ..constants import (
    GENERIC_OPERATION_WATERMARK,
    PROTO_005,
    DefaultFee,
    DefaultGasLimit,
    DefaultStorageLimit,
)
from ..context import Context
from ..errors import InvalidSourceError, OperationFailedError, PreapplyError, PreparationError
from ..utils.format import to_wire_string
from .builders import create_reveal_operation
from .types import (
    Content,
    ForgedOperation,
    InjectionResult,
    OpKind,
    PreparedOperation,
    SimulationResult,
    is_fee_bearing,
    is_source_bearing,
)

log = logging.getLogger(__name__)

__all__ = ["OperationEmitter"]

# Fields the 005 protocol generation no longer accepts.
_OBSOLETE_005_FIELDS = ("manager_pubkey", "spendable", "delegatable")


def _wire_or_zero(value: Any) -> str:
    return "0" if value is None else to_wire_string(value)


async def _nothing() -> None:
    return None


class OperationEmitter:
    def __init__(self, context: Context) -> None:
        self.context = context

    @property
    def rpc(self) -> Any:
        return self.context.rpc

    @property
    def signer(self) -> Any:
        return self.context.signer

    # --- prepare -----------------------------------------------------------

    async def prepare_operation(
        self,
        operation: Union[Content, Sequence[Content]],
        source: Optional[str] = None,
    ) -> PreparedOperation:
        """
        Build a fully populated unsigned group from one or more contents.

        Fetches the head header and metadata (and, when any content is
        source-bearing, the source's counter and manager key) concurrently,
        prepends a reveal if the key is unrevealed, assigns counters,
        normalizes numeric fields to wire strings and applies the active
        protocol's field policy.
        """
        ops: List[Content] = [dict(c) for c in operation] if isinstance(operation, (list, tuple)) else [dict(operation)]
        requires_source = any(is_source_bearing(op) for op in ops)
        pkh = source or await self.signer.public_key_hash()

        header, metadata, contract, manager = await asyncio.gather(
            self.rpc.get_block_header(),
            self.rpc.get_block_metadata(),
            self.rpc.get_contract(pkh) if requires_source else _nothing(),
            self.rpc.get_manager_key(pkh) if requires_source else _nothing(),
        )
        if not header:
            raise PreparationError("Unable to fetch latest block header")
        if not metadata:
            raise PreparationError("Unable to fetch latest metadata")

        have_manager = manager.get("key") if isinstance(manager, Mapping) else manager
        if requires_source and not have_manager:
            reveal = create_reveal_operation(
                await self.signer.public_key(),
                pkh,
                fee=int(DefaultFee.REVEAL),
                gas_limit=int(DefaultGasLimit.REVEAL),
                storage_limit=int(DefaultStorageLimit.REVEAL),
            )
            ops.insert(0, reveal)
            log.debug("manager key of %s is unrevealed; prepending reveal", pkh)

        baseline = int((contract or {}).get("counter") or "0")
        next_protocol = metadata.get("next_protocol")
        proto005 = await self.context.is_any_protocol_active(PROTO_005, next_protocol)

        counter = baseline
        contents: List[Content] = []
        for op in ops:
            content = self._normalize(op, pkh)
            if is_fee_bearing(content):
                counter += 1
                content["counter"] = str(counter)
            if content.get("kind") == OpKind.TRANSACTION.value and proto005:
                src = str(content.get("source") or "")
                if src.lower().startswith("kt1"):
                    raise InvalidSourceError(source=src, protocol=next_protocol or self.context.proto)
            if proto005:
                for key in _OBSOLETE_005_FIELDS:
                    content.pop(key, None)
            contents.append(content)

        log.debug(
            "prepared %d contents for %s on %s (counter %d -> %d)",
            len(contents),
            pkh,
            header.get("hash"),
            baseline,
            counter,
        )
        return PreparedOperation(
            branch=header["hash"],
            contents=contents,
            protocol=next_protocol,
            counter=counter,
        )

    @staticmethod
    def _normalize(op: Content, pkh: str) -> Content:
        content = dict(op)
        if is_source_bearing(content) and not content.get("source"):
            content["source"] = pkh
        if is_fee_bearing(content):
            content["fee"] = _wire_or_zero(content.get("fee"))
            content["gas_limit"] = _wire_or_zero(content.get("gas_limit"))
            content["storage_limit"] = _wire_or_zero(content.get("storage_limit"))
        kind = content.get("kind")
        if kind == OpKind.ORIGINATION.value and content.get("balance") is not None:
            content["balance"] = to_wire_string(content["balance"])
        if kind == OpKind.TRANSACTION.value and content.get("amount") is not None:
            content["amount"] = to_wire_string(content["amount"])
        return content

    # --- forge / simulate --------------------------------------------------

    async def forge(self, prepared: PreparedOperation) -> ForgedOperation:
        opbytes = await self.context.forger.forge(prepared.to_group())
        return ForgedOperation(
            opbytes=opbytes,
            branch=prepared.branch,
            contents=prepared.contents,
            protocol=prepared.protocol,
            counter=prepared.counter,
        )

    async def prepare_and_forge(
        self,
        operation: Union[Content, Sequence[Content]],
        source: Optional[str] = None,
    ) -> ForgedOperation:
        return await self.forge(await self.prepare_operation(operation, source))

    async def simulate(self, operation: Mapping[str, Any]) -> SimulationResult:
        """Dry-run ``operation`` through ``run_operation``; nothing is broadcast."""
        response = await self.rpc.run_operation(operation)
        return SimulationResult(op_response=response, operation=dict(operation), context=self.context.clone())

    # --- sign / inject -----------------------------------------------------

    async def sign_and_inject(self, forged: ForgedOperation) -> InjectionResult:
        signed = await self.signer.sign(forged.opbytes, GENERIC_OPERATION_WATERMARK)
        return await self.inject(forged, signed.prefix_sig, signed.sbytes)

    async def inject(self, forged: ForgedOperation, prefix_sig: str, sbytes: str) -> InjectionResult:
        """
        Preapply the signed group and, only if every content applied, inject
        ``sbytes``.

        Raises
        ------
        PreapplyError
            The node did not answer preapply with a list of result groups.
        OperationFailedError
            At least one content has status ``failed``; carries every
            failed content's ``errors`` in content order.
        """
        signed = dataclasses.replace(forged, opbytes=sbytes, signature=prefix_sig)
        response = await self.rpc.preapply_operations([signed.to_group()])
        if not isinstance(response, list):
            raise PreapplyError(response)

        results: List[Content] = []
        for group in response:
            results.extend((group or {}).get("contents") or [])

        errors: List[Any] = []
        for content in results:
            op_result = ((content.get("metadata") or {}).get("operation_result")) or {}
            if op_result.get("status") == "failed":
                errors.extend(op_result.get("errors") or [])
        if errors:
            log.warning("preapply rejected operation on %s with %d error(s)", signed.branch, len(errors))
            raise OperationFailedError(errors=errors)

        op_hash = await self.context.injector.inject(sbytes)
        return InjectionResult(hash=op_hash, forged=signed, results=results, context=self.context.clone())
