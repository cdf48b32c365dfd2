"""
Boolean filters over operation contents observed in new blocks.

A filter is one of

    {"opHash": "oo..."}                 the enclosing operation's hash
    {"kind": "transaction"}
    {"source": "tz1..."}
    {"destination": "KT1..."}
    {"and": [filter, ...]}              every sub-filter holds
    {"or": [filter, ...]}               at least one sub-filter holds
    [filter, ...]                       same as "and"

``evaluate_filter`` receives the content merged with its operation hash
(``{"hash": op_hash, **content}``). Keys of one mapping combine like "and":
``{"kind": "transaction", "destination": "KT1..."}`` needs both to hold.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Union

from ..errors import FilterError

__all__ = ["Filter", "evaluate_filter", "evaluate_expression"]

Filter = Union[Mapping[str, Any], List[Any]]
OpContent = Mapping[str, Any]


def _metadata(op: OpContent) -> Dict[str, Any]:
    return op.get("metadata") or {}


def evaluate_op_hash(op: OpContent, op_hash: str) -> bool:
    return op.get("hash") == op_hash


def evaluate_kind(op: OpContent, kind: str) -> bool:
    return op.get("kind") == kind


def evaluate_source(op: OpContent, source: str) -> bool:
    kind = op.get("kind")
    if kind == "endorsement":
        return "metadata" in op and _metadata(op).get("delegate") == source
    if kind == "activate_account":
        return "metadata" in op and op.get("pkh") == source
    return "source" in op and op.get("source") == source


def evaluate_destination(op: OpContent, destination: str) -> bool:
    kind = op.get("kind")
    if kind == "delegation":
        return op.get("delegate") == destination
    if kind == "origination":
        originated = (_metadata(op).get("operation_result") or {}).get("originated_contracts")
        return isinstance(originated, list) and destination in originated
    if kind == "transaction":
        return op.get("destination") == destination
    return False


_PREDICATES = (
    ("opHash", evaluate_op_hash),
    ("source", evaluate_source),
    ("kind", evaluate_kind),
    ("destination", evaluate_destination),
)


def evaluate_expression(op: OpContent, expression: Mapping[str, Any]) -> bool:
    present = [key for key in ("and", "or") if key in expression]
    if not present or any(not isinstance(expression[key], list) for key in present):
        raise FilterError("Filter expression must contain either and/or property")
    if "and" in expression and not all(evaluate_filter(op, f) for f in expression["and"]):
        return False
    if "or" in expression and not any(evaluate_filter(op, f) for f in expression["or"]):
        return False
    return True


def _evaluate_mapping(op: OpContent, f: Mapping[str, Any]) -> bool:
    """Every recognised key of ``f`` must hold; a mapping with none matches nothing."""
    checks = [(key, fn) for key, fn in _PREDICATES if key in f]
    has_expression = "and" in f or "or" in f
    if not checks and not has_expression:
        return False
    if has_expression and not evaluate_expression(op, f):
        return False
    return all(fn(op, f[key]) for key, fn in checks)


def evaluate_filter(op: OpContent, filter: Filter) -> bool:
    filters = list(filter) if isinstance(filter, list) else [filter]
    for f in filters:
        if not isinstance(f, Mapping):
            raise FilterError(f"filter must be a mapping or a list, got {type(f).__name__}")
        if not _evaluate_mapping(op, f):
            return False
    return True
