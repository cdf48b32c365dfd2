"""
Parameter records and content builders for manager operations.

Builders turn an ergonomic parameter record into a content dict in the
node's JSON shape. Fee, gas and storage that the caller left as ``None`` stay
``None`` here; the contract provider fills them from an estimate, and the
preparer writes ``"0"`` for anything still unset.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

from ..utils.michelson import encode_value
from ..utils.format import Number, format_amount, to_wire_string
from .types import Content, OpKind

__all__ = [
    "TransferParams",
    "OriginateParams",
    "DelegateParams",
    "RegisterDelegateParams",
    "create_transfer_operation",
    "create_origination_operation",
    "create_set_delegate_operation",
    "create_register_delegate_operation",
    "create_reveal_operation",
    "create_activation_operation",
]

Micheline = Union[Dict[str, Any], List[Any]]


@dataclass(slots=True)
class TransferParams:
    to: str
    amount: Number
    source: Optional[str] = None
    fee: Optional[int] = None
    gas_limit: Optional[int] = None
    storage_limit: Optional[int] = None
    mutez: bool = False
    parameter: Optional[Micheline] = None


@dataclass(slots=True)
class OriginateParams:
    """Exactly one of ``init`` (Micheline) or ``storage`` (Python value) must be given."""

    code: List[Any]
    init: Optional[Micheline] = None
    storage: Any = None
    balance: Number = "0"
    delegate: Optional[str] = None
    spendable: bool = False
    delegatable: bool = False
    source: Optional[str] = None
    fee: Optional[int] = None
    gas_limit: Optional[int] = None
    storage_limit: Optional[int] = None


@dataclass(slots=True)
class DelegateParams:
    source: Optional[str] = None
    delegate: Optional[str] = None
    fee: Optional[int] = None
    gas_limit: Optional[int] = None
    storage_limit: Optional[int] = None


@dataclass(slots=True)
class RegisterDelegateParams:
    fee: Optional[int] = None
    gas_limit: Optional[int] = None
    storage_limit: Optional[int] = None


def _limits(params: Any) -> Content:
    return {"fee": params.fee, "gas_limit": params.gas_limit, "storage_limit": params.storage_limit}


def create_transfer_operation(params: TransferParams) -> Content:
    amount = params.amount if params.mutez else format_amount("tz", "mutez", params.amount)
    op: Content = {
        "kind": OpKind.TRANSACTION.value,
        **_limits(params),
        "amount": to_wire_string(amount),
        "destination": params.to,
    }
    if params.parameter:
        op["parameters"] = params.parameter
    return op


def _storage_type(code: List[Any]) -> Any:
    for section in code:
        if isinstance(section, dict) and section.get("prim") == "storage":
            return section["args"][0]
    raise ValueError("contract code has no storage section")


def create_origination_operation(params: OriginateParams, public_key_hash: str) -> Content:
    if params.storage is not None and params.init is not None:
        raise ValueError("storage and init cannot be set at the same time; use one of them")
    if params.storage is not None:
        storage = encode_value(_storage_type(params.code), params.storage)
    else:
        storage = params.init
    op: Content = {
        "kind": OpKind.ORIGINATION.value,
        **_limits(params),
        "balance": to_wire_string(format_amount("tz", "mutez", params.balance)),
        "manager_pubkey": public_key_hash,
        "spendable": params.spendable,
        "delegatable": params.delegatable,
        "script": {"code": params.code, "storage": storage},
    }
    if params.delegate:
        op["delegate"] = params.delegate
    return op


def create_set_delegate_operation(params: DelegateParams) -> Content:
    op: Content = {
        "kind": OpKind.DELEGATION.value,
        "source": params.source,
        **_limits(params),
    }
    if params.delegate:
        op["delegate"] = params.delegate
    return op


def create_register_delegate_operation(params: RegisterDelegateParams, source: str) -> Content:
    return {"kind": OpKind.DELEGATION.value, **_limits(params), "delegate": source}


def create_reveal_operation(public_key: str, source: str, *, fee: int, gas_limit: int, storage_limit: int) -> Content:
    return {
        "kind": OpKind.REVEAL.value,
        "fee": fee,
        "public_key": public_key,
        "source": source,
        "gas_limit": gas_limit,
        "storage_limit": storage_limit,
    }


def create_activation_operation(pkh: str, secret: str) -> Content:
    return {"kind": OpKind.ACTIVATION.value, "pkh": pkh, "secret": secret}
