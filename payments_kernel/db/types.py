"""
Module: payments_kernel.db.types
Responsibility: Column types and helpers for fixed-point money.  Centralizes
    precision and rounding so every model and service uses one definition.
Architecture position: Kernel > DB.  May be imported by models/, domain/,
    services/, and selectors/.  MUST NOT import from any of those layers.

Invariants enforced:
    - No floats anywhere in money handling.  Amounts are Decimal in Python
      and integer minor units (cents) in the database, which is exact on
      every backend (SQLite has no native DECIMAL).
    - MONEY_DECIMAL_PLACES is the canonical precision; round_money() is the
      only sanctioned rounding function.

Failure modes:
    - ValueError when a bound value is a float or has sub-cent precision.
"""

from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import BigInteger
from sqlalchemy.types import TypeDecorator

MONEY_DECIMAL_PLACES = 2
DEFAULT_ROUNDING = ROUND_HALF_UP

_MINOR_UNITS = Decimal(10) ** MONEY_DECIMAL_PLACES
_QUANTUM = Decimal(1).scaleb(-MONEY_DECIMAL_PLACES)

# Signed 64-bit range of the BigInteger column, in cents.
MAX_MINOR_UNITS = 2**63 - 1
MAX_AMOUNT = Decimal(MAX_MINOR_UNITS).scaleb(-MONEY_DECIMAL_PLACES)


def round_money(value: Decimal, rounding: str = DEFAULT_ROUNDING) -> Decimal:
    """Quantize a Decimal to MONEY_DECIMAL_PLACES."""
    return value.quantize(_QUANTUM, rounding=rounding)


def to_minor_units(value: Decimal) -> int:
    """
    Convert a Decimal amount to integer cents.

    Raises:
        ValueError: If value is a float, carries sub-cent precision, or does
            not fit in a signed 64-bit count of cents.
    """
    if isinstance(value, float):
        raise ValueError(f"Float money value refused: {value!r}")
    amount = Decimal(value)
    cents = amount * _MINOR_UNITS
    if cents != cents.to_integral_value():
        raise ValueError(f"Sub-cent precision refused: {amount}")
    if abs(cents) > MAX_MINOR_UNITS:
        raise ValueError(f"Amount outside the storable range: {amount}")
    return int(cents)


def from_minor_units(value: int) -> Decimal:
    """Convert integer cents back to a 2-place Decimal."""
    return round_money(Decimal(value) / _MINOR_UNITS)


class MoneyAmount(TypeDecorator):
    """
    Decimal money stored as BigInteger minor units.

    Guarantees:
        - Bound values are converted with to_minor_units (exact or refused).
        - Loaded values (including SUM aggregates over the column) come back
          as Decimal quantized to 2 places.
    """

    impl = BigInteger
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return to_minor_units(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return from_minor_units(int(value))
