"""
Lambdas for contracts built on the ``manager.tz`` template.

After Babylon, scripted accounts (former KT1 "spendable" accounts) are driven
by sending them a ``lambda unit (list operation)`` to their ``do``
entrypoint. These helpers return that lambda as Micheline.

    contract = await toolkit.contract.at("KT1...")
    op = await contract.method("do", set_delegate("tz1...")).send()
"""

from __future__ import annotations

from typing import Any, Dict, List

__all__ = ["set_delegate", "remove_delegate", "transfer_implicit", "transfer_to_contract"]

Micheline = List[Any]


def _prim(prim: str, *args: Any) -> Dict[str, Any]:
    node: Dict[str, Any] = {"prim": prim}
    if args:
        node["args"] = list(args)
    return node


_DROP_NIL_OPERATION = [_prim("DROP"), _prim("NIL", _prim("operation"))]


def set_delegate(key_hash: str) -> Micheline:
    return [
        *_DROP_NIL_OPERATION,
        _prim("PUSH", _prim("key_hash"), {"string": key_hash}),
        _prim("SOME"),
        _prim("SET_DELEGATE"),
        _prim("CONS"),
    ]


def remove_delegate() -> Micheline:
    return [
        *_DROP_NIL_OPERATION,
        _prim("NONE", _prim("key_hash")),
        _prim("SET_DELEGATE"),
        _prim("CONS"),
    ]


def transfer_implicit(key_hash: str, mutez: int) -> Micheline:
    return [
        *_DROP_NIL_OPERATION,
        _prim("PUSH", _prim("key_hash"), {"string": key_hash}),
        _prim("IMPLICIT_ACCOUNT"),
        _prim("PUSH", _prim("mutez"), {"int": str(mutez)}),
        _prim("UNIT"),
        _prim("TRANSFER_TOKENS"),
        _prim("CONS"),
    ]


def transfer_to_contract(address: str, mutez: int) -> Micheline:
    return [
        *_DROP_NIL_OPERATION,
        _prim("PUSH", _prim("address"), {"string": address}),
        _prim("CONTRACT", _prim("unit")),
        [_prim("IF_NONE", [[_prim("UNIT"), _prim("FAILWITH")]], [])],
        _prim("PUSH", _prim("mutez"), {"int": str(mutez)}),
        _prim("UNIT"),
        _prim("TRANSFER_TOKENS"),
        _prim("CONS"),
    ]
