"""
Protocol constants shared by the preparer, the estimator and the builders.

Fee values are in mutez, gas in gas units, storage in bytes.
"""

from __future__ import annotations

from decimal import Decimal
from enum import Enum, IntEnum
from typing import Dict, Tuple

__all__ = [
    "DefaultGasLimit",
    "DefaultFee",
    "DefaultStorageLimit",
    "Protocols",
    "PROTOCOL_GROUPS",
    "PROTO_005",
    "GENERIC_OPERATION_WATERMARK",
    "SIGNATURE_STUB",
    "ESTIMATE_PLACEHOLDERS",
    "MINIMAL_FEE_MUTEZ",
    "MINIMAL_FEE_PER_BYTE_MUTEZ",
    "MINIMAL_FEE_PER_STORAGE_BYTE_MUTEZ",
    "MINIMAL_FEE_PER_GAS_MUTEZ",
    "GAS_BUFFER",
]


class DefaultGasLimit(IntEnum):
    DELEGATION = 10600
    ORIGINATION = 10600
    TRANSFER = 10600
    REVEAL = 10600


class DefaultFee(IntEnum):
    DELEGATION = 1257
    ORIGINATION = 10000
    TRANSFER = 10000
    REVEAL = 1420


class DefaultStorageLimit(IntEnum):
    DELEGATION = 0
    ORIGINATION = 257
    TRANSFER = 300
    REVEAL = 300


class Protocols(str, Enum):
    Pt24m4xi = "Pt24m4xiPbLDhVgVfABUjirbmda3yohdN82Sp9FeuAXJ4eV9otd"
    PsBABY5H = "PsBABY5HQTSkA4297zNHfsZNKtxULfL18y95qb3m53QJiXGmrbU"
    PsBabyM1 = "PsBabyM1eUXZseaJdmXFApDSBqj8YBfwELoxZHHW77EMcAbbwAS"


# Protocol generations. "005" (Babylon) removed contract-as-source for
# transactions and dropped manager_pubkey/spendable/delegatable.
PROTOCOL_GROUPS: Dict[str, Tuple[str, ...]] = {
    "004": (Protocols.Pt24m4xi.value,),
    "005": (Protocols.PsBABY5H.value, Protocols.PsBabyM1.value),
}
PROTO_005 = PROTOCOL_GROUPS["005"]

# Watermark byte prepended to forged bytes before signing a generic operation.
GENERIC_OPERATION_WATERMARK = b"\x03"

# Well-formed but non-verifying signature for run_operation.
SIGNATURE_STUB = (
    "edsigtkpiSSschcaCt9pUVrpNPf7TTcgvgDEDD6NCEHMy8NNQJCGnMfLZzYoQj74yLjo9wx6MPVV29CvVzgi7qEcEUok3k7AuMg"
)

# Upper bounds used while simulating, so the dry run never fails on limits.
ESTIMATE_PLACEHOLDERS = {"fee": 30000, "storage_limit": 60000, "gas_limit": 800000}

# --- fee formula constants (mutez) ------------------------------------------

MINIMAL_FEE_MUTEZ = 100
MINIMAL_FEE_PER_BYTE_MUTEZ = 1
MINIMAL_FEE_PER_STORAGE_BYTE_MUTEZ = 1000
MINIMAL_FEE_PER_GAS_MUTEZ = Decimal("0.1")
GAS_BUFFER = 100
