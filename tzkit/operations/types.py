"""
Shapes flowing through the operation pipeline.

Contents are plain dicts in the node's JSON shape (``{"kind": "transaction",
"amount": "1500000", ...}``); the records below wrap a group of them at each
pipeline stage.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

__all__ = [
    "OpKind",
    "FEE_BEARING",
    "SOURCE_BEARING",
    "is_fee_bearing",
    "is_source_bearing",
    "Content",
    "PreparedOperation",
    "ForgedOperation",
    "SimulationResult",
    "InjectionResult",
]

Content = Dict[str, Any]


class OpKind(str, Enum):
    ENDORSEMENT = "endorsement"
    SEED_NONCE_REVELATION = "seed_nonce_revelation"
    DOUBLE_ENDORSEMENT_EVIDENCE = "double_endorsement_evidence"
    DOUBLE_BAKING_EVIDENCE = "double_baking_evidence"
    ACTIVATION = "activate_account"
    PROPOSALS = "proposals"
    BALLOT = "ballot"
    REVEAL = "reveal"
    TRANSACTION = "transaction"
    ORIGINATION = "origination"
    DELEGATION = "delegation"


FEE_BEARING = frozenset({OpKind.REVEAL, OpKind.TRANSACTION, OpKind.ORIGINATION, OpKind.DELEGATION})
SOURCE_BEARING = frozenset({OpKind.TRANSACTION, OpKind.ORIGINATION, OpKind.DELEGATION})


def _kind(content: Content) -> Optional[OpKind]:
    try:
        return OpKind(content.get("kind"))
    except ValueError:
        return None


def is_fee_bearing(content: Content) -> bool:
    return _kind(content) in FEE_BEARING


def is_source_bearing(content: Content) -> bool:
    return _kind(content) in SOURCE_BEARING


@dataclass(frozen=True, slots=True)
class PreparedOperation:
    """An unsigned group ready for forging. ``counter`` is the last one assigned."""

    branch: str
    contents: List[Content]
    protocol: str
    counter: int

    def to_group(self) -> Dict[str, Any]:
        return {"branch": self.branch, "contents": self.contents}


@dataclass(frozen=True, slots=True)
class ForgedOperation:
    opbytes: str
    branch: str
    contents: List[Content]
    protocol: str
    counter: int
    signature: Optional[str] = None

    def to_group(self) -> Dict[str, Any]:
        group: Dict[str, Any] = {
            "branch": self.branch,
            "contents": self.contents,
            "protocol": self.protocol,
        }
        if self.signature is not None:
            group["signature"] = self.signature
        return group


@dataclass(frozen=True, slots=True)
class SimulationResult:
    op_response: Dict[str, Any]
    operation: Dict[str, Any]
    context: Any


@dataclass(frozen=True, slots=True)
class InjectionResult:
    hash: str
    forged: ForgedOperation
    results: List[Content] = field(default_factory=list)
    context: Any = None
