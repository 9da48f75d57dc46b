"""Pure domain logic: clock, money parsing, deposit cap rule."""

from payments_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from payments_kernel.domain.deposit_cap import (
    DEFAULT_CAP_RATIO,
    DepositCapDecision,
    DepositCapPolicy,
    ZeroOutstandingPolicy,
)
from payments_kernel.domain.money import parse_amount

__all__ = [
    "Clock",
    "SystemClock",
    "DeterministicClock",
    "DEFAULT_CAP_RATIO",
    "DepositCapDecision",
    "DepositCapPolicy",
    "ZeroOutstandingPolicy",
    "parse_amount",
]
