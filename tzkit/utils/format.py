"""
Exact unit conversion between tz, mtz and mutez, and wire formatting.

All arithmetic is done with :class:`decimal.Decimal`; floats are converted
through ``str()`` so ``1.5`` becomes exactly ``Decimal("1.5")``.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Union

__all__ = ["Unit", "UNITS", "to_decimal", "format_amount", "to_wire_string"]

Number = Union[int, float, str, Decimal]
Unit = str

UNITS = {"tz": 6, "mtz": 3, "mutez": 0}


def to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise TypeError("booleans are not amounts")
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def format_amount(from_unit: Unit, to_unit: Unit, amount: Number) -> Decimal:
    """
    Convert ``amount`` from one unit to another.

    >>> to_wire_string(format_amount("tz", "mutez", 1.5))
    '1500000'
    """
    try:
        shift = UNITS[from_unit] - UNITS[to_unit]
    except KeyError as exc:
        raise ValueError(f"unknown unit {exc.args[0]!r}; expected one of {sorted(UNITS)}") from None
    return to_decimal(amount).scaleb(shift)


def to_wire_string(value: Number) -> str:
    """Render a number as a plain decimal string (no exponent, no trailing zeros)."""
    if isinstance(value, int) and not isinstance(value, bool):
        return str(int(value))
    d = to_decimal(value)
    if d == d.to_integral_value():
        return str(int(d))
    return format(d.normalize(), "f")
