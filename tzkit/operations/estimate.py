"""
Estimate: fee, burn and limit figures derived from a dry run.

An :class:`Estimate` is built by the estimation provider from simulation
output (consumed gas, paid storage, forged size) and exposes the protocol
minimum-fee formulas as read-only properties. All arithmetic is exact
(``Decimal``); rounding happens only where the formula says ``ceil``.

    gas_limit            = gas + GAS_BUFFER
    storage_limit        = max(storage, 0)
    burn_fee_mutez       = ceil(storage_limit * 1000)
    operation_fee_mutez  = gas_limit * 0.1 + op_size * 1
    minimal_fee_mutez    = ceil(100 + operation_fee_mutez)
    suggested_fee_mutez  = ceil(operation_fee_mutez + 2 * 100)
    total_cost           = minimal_fee_mutez + burn_fee_mutez
"""

from __future__ import annotations

import math
from decimal import Decimal
from typing import Any, Dict, Union

from ..constants import (
    GAS_BUFFER,
    MINIMAL_FEE_MUTEZ,
    MINIMAL_FEE_PER_BYTE_MUTEZ,
    MINIMAL_FEE_PER_GAS_MUTEZ,
    MINIMAL_FEE_PER_STORAGE_BYTE_MUTEZ,
)

__all__ = ["Estimate"]

Number = Union[int, str, Decimal]


def _ceil(d: Decimal) -> int:
    return int(math.ceil(d))


class Estimate:
    __slots__ = ("_gas", "_storage", "_op_size", "_base_fee")

    def __init__(self, gas: Number, storage: Number, op_size: Number, base_fee: Number = MINIMAL_FEE_MUTEZ) -> None:
        self._gas = Decimal(gas)
        self._storage = Decimal(storage)
        self._op_size = Decimal(op_size)
        self._base_fee = Decimal(base_fee)

    # --- limits ------------------------------------------------------------

    @property
    def gas_limit(self) -> int:
        return _ceil(self._gas + GAS_BUFFER)

    @property
    def storage_limit(self) -> int:
        return _ceil(max(self._storage, Decimal(0)))

    @property
    def op_size(self) -> int:
        return int(self._op_size)

    # --- fees (mutez) --------------------------------------------------------

    @property
    def burn_fee_mutez(self) -> int:
        return _ceil(self.storage_limit * Decimal(MINIMAL_FEE_PER_STORAGE_BYTE_MUTEZ))

    @property
    def operation_fee_mutez(self) -> Decimal:
        return self.gas_limit * MINIMAL_FEE_PER_GAS_MUTEZ + self._op_size * MINIMAL_FEE_PER_BYTE_MUTEZ

    @property
    def minimal_fee_mutez(self) -> int:
        return _ceil(MINIMAL_FEE_MUTEZ + self.operation_fee_mutez)

    @property
    def suggested_fee_mutez(self) -> int:
        """Minimal fee plus one more base fee of margin."""
        return _ceil(self.operation_fee_mutez + MINIMAL_FEE_MUTEZ * 2)

    @property
    def using_base_fee_mutez(self) -> int:
        return int(max(self._base_fee, Decimal(MINIMAL_FEE_MUTEZ))) + _ceil(self.operation_fee_mutez)

    @property
    def total_cost(self) -> int:
        return self.minimal_fee_mutez + self.burn_fee_mutez

    # --- misc ----------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return {
            "gas_limit": self.gas_limit,
            "storage_limit": self.storage_limit,
            "op_size": self.op_size,
            "burn_fee_mutez": self.burn_fee_mutez,
            "minimal_fee_mutez": self.minimal_fee_mutez,
            "suggested_fee_mutez": self.suggested_fee_mutez,
            "total_cost": self.total_cost,
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Estimate):
            return NotImplemented
        return (self._gas, self._storage, self._op_size, self._base_fee) == (
            other._gas,
            other._storage,
            other._op_size,
            other._base_fee,
        )

    def __hash__(self) -> int:
        return hash((self._gas, self._storage, self._op_size, self._base_fee))

    def __repr__(self) -> str:
        return (
            f"Estimate(gas_limit={self.gas_limit}, storage_limit={self.storage_limit}, "
            f"op_size={self.op_size}, suggested_fee_mutez={self.suggested_fee_mutez})"
        )
