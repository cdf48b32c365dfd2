"""
Accessors over preapply result contents.

Handles keep the raw per-content results returned by preapply; these
functions read the kind-specific figures out of them. They return ``None``
when the content or the field is absent.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

from .types import Content

__all__ = [
    "find_content",
    "operation_result",
    "result_status",
    "consumed_gas",
    "storage_diff",
    "storage_size",
    "result_errors",
    "originated_contract",
]


def find_content(contents: Sequence[Content], kind: str) -> Optional[Content]:
    for content in contents:
        if content.get("kind") == kind:
            return content
    return None


def operation_result(results: Sequence[Content], kind: str) -> Optional[Dict[str, Any]]:
    content = find_content(results, kind)
    if content is None:
        return None
    return (content.get("metadata") or {}).get("operation_result")


def result_status(results: Sequence[Content]) -> str:
    """Status of the first content's result, ``"unknown"`` without metadata."""
    for content in results[:1]:
        op_result = (content.get("metadata") or {}).get("operation_result")
        if op_result and op_result.get("status"):
            return op_result["status"]
    return "unknown"


def _decimal_field(results: Sequence[Content], kind: str, field: str) -> Optional[Decimal]:
    op_result = operation_result(results, kind)
    if not op_result or op_result.get(field) is None:
        return None
    return Decimal(str(op_result[field]))


def consumed_gas(results: Sequence[Content], kind: str) -> Optional[Decimal]:
    return _decimal_field(results, kind, "consumed_gas")


def storage_diff(results: Sequence[Content], kind: str) -> Optional[Decimal]:
    return _decimal_field(results, kind, "paid_storage_size_diff")


def storage_size(results: Sequence[Content], kind: str) -> Optional[Decimal]:
    return _decimal_field(results, kind, "storage_size")


def result_errors(results: Sequence[Content], kind: str) -> List[Any]:
    op_result = operation_result(results, kind)
    return list((op_result or {}).get("errors") or [])


def originated_contract(results: Sequence[Content]) -> Optional[str]:
    op_result = operation_result(results, "origination")
    contracts = (op_result or {}).get("originated_contracts") or []
    return contracts[0] if contracts else None
