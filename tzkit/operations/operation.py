"""
Operation handle returned by every successful injection.

One class covers every kind of submission. The :class:`HandleKind` tag says
which content the handle is about; kind-specific properties (``amount``,
``delegate``, ``contract_address``, ...) read from that content and its
preapply result and return ``None`` on handles of another kind.

Examples
--------
    op = await toolkit.contract.transfer(to="tz1...", amount=1)
    level = await op.confirmation(1)
    print(op.hash, op.status, op.consumed_gas)
"""

from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from . import results as _r
from .confirmation import ConfirmationState, ConfirmationTracker
from .types import Content, ForgedOperation, InjectionResult, OpKind

if TYPE_CHECKING:  # pragma: no cover
    from ..contract.contract import ContractAbstraction

__all__ = ["HandleKind", "Operation"]


class HandleKind(str, Enum):
    OPERATION = "operation"
    TRANSACTION = "transaction"
    DELEGATION = "delegation"
    ORIGINATION = "origination"


_CONTENT_KIND = {
    HandleKind.TRANSACTION: OpKind.TRANSACTION.value,
    HandleKind.DELEGATION: OpKind.DELEGATION.value,
    HandleKind.ORIGINATION: OpKind.ORIGINATION.value,
}


def _decimal(value: Any) -> Optional[Decimal]:
    return None if value is None else Decimal(str(value))


class Operation:
    __slots__ = ("hash", "forged", "results", "context", "kind", "_tracker", "_contract_provider")

    def __init__(
        self,
        hash: str,
        forged: ForgedOperation,
        results: List[Content],
        context: Any,
        *,
        kind: HandleKind = HandleKind.OPERATION,
        contract_provider: Any = None,
    ) -> None:
        self.hash = hash
        self.forged = forged
        self.results = list(results)
        self.context = context
        self.kind = kind
        self._tracker = ConfirmationTracker(hash, context)
        self._contract_provider = contract_provider

    @classmethod
    def from_injection(
        cls,
        injected: InjectionResult,
        *,
        kind: HandleKind = HandleKind.OPERATION,
        contract_provider: Any = None,
    ) -> "Operation":
        return cls(
            injected.hash,
            injected.forged,
            injected.results,
            injected.context,
            kind=kind,
            contract_provider=contract_provider,
        )

    def __repr__(self) -> str:
        return f"Operation(kind={self.kind.value}, hash={self.hash!r}, status={self.status!r})"

    # --- confirmation ------------------------------------------------------

    @property
    def raw(self) -> ForgedOperation:
        return self.forged

    @property
    def included_in_block(self) -> Optional[int]:
        """Inclusion level once a confirmation poll has seen the hash."""
        return self._tracker.found_at

    @property
    def confirmation_state(self) -> ConfirmationState:
        return self._tracker.state

    async def confirmation(
        self,
        confirmations: Optional[int] = None,
        interval: Optional[float] = None,
        timeout: Optional[float] = None,
    ) -> int:
        return await self._tracker.confirmation(confirmations, interval, timeout)

    # --- generic -----------------------------------------------------------

    @property
    def status(self) -> str:
        return _r.result_status(self.results)

    @property
    def _content_kind(self) -> Optional[str]:
        return _CONTENT_KIND.get(self.kind)

    @property
    def params(self) -> Optional[Content]:
        """The submitted content this handle is about (wire shape)."""
        kind = self._content_kind
        return _r.find_content(self.forged.contents, kind) if kind else None

    @property
    def operation_results(self) -> Optional[Dict[str, Any]]:
        kind = self._content_kind
        return _r.operation_result(self.results, kind) if kind else None

    def _param(self, key: str) -> Any:
        params = self.params
        return params.get(key) if params else None

    @property
    def fee(self) -> Optional[Decimal]:
        return _decimal(self._param("fee"))

    @property
    def gas_limit(self) -> Optional[Decimal]:
        return _decimal(self._param("gas_limit"))

    @property
    def storage_limit(self) -> Optional[Decimal]:
        return _decimal(self._param("storage_limit"))

    @property
    def consumed_gas(self) -> Optional[Decimal]:
        kind = self._content_kind
        return _r.consumed_gas(self.results, kind) if kind else None

    @property
    def errors(self) -> List[Any]:
        kind = self._content_kind
        return _r.result_errors(self.results, kind) if kind else []

    # --- transaction / origination -------------------------------------------

    @property
    def storage_diff(self) -> Optional[Decimal]:
        if self.kind not in (HandleKind.TRANSACTION, HandleKind.ORIGINATION):
            return None
        return _r.storage_diff(self.results, self._content_kind)

    @property
    def storage_size(self) -> Optional[Decimal]:
        if self.kind is not HandleKind.TRANSACTION:
            return None
        return _r.storage_size(self.results, self._content_kind)

    @property
    def amount(self) -> Optional[Decimal]:
        """Transferred amount in mutez."""
        if self.kind is not HandleKind.TRANSACTION:
            return None
        return _decimal(self._param("amount"))

    @property
    def destination(self) -> Optional[str]:
        if self.kind is not HandleKind.TRANSACTION:
            return None
        return self._param("destination")

    # --- delegation ----------------------------------------------------------

    @property
    def delegate(self) -> Optional[str]:
        if self.kind is not HandleKind.DELEGATION:
            return None
        return self._param("delegate")

    @property
    def is_register_operation(self) -> Optional[bool]:
        if self.kind is not HandleKind.DELEGATION:
            return None
        return self.delegate is not None and self.delegate == self._param("source")

    # --- origination -----------------------------------------------------------

    @property
    def contract_address(self) -> Optional[str]:
        if self.kind is not HandleKind.ORIGINATION:
            return None
        return _r.originated_contract(self.results)

    async def contract(
        self,
        confirmations: Optional[int] = None,
        interval: Optional[float] = None,
        timeout: Optional[float] = None,
    ) -> "ContractAbstraction":
        """Wait for confirmation, then load the originated contract."""
        if self.kind is not HandleKind.ORIGINATION or self._contract_provider is None:
            raise TypeError(f"{self.kind.value} handles have no originated contract")
        address = self.contract_address
        if not address:
            raise ValueError(f"no originated contract in results of {self.hash}")
        await self.confirmation(confirmations, interval, timeout)
        return await self._contract_provider.at(address)
