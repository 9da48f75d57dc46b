"""
DepositCapPolicy -- the deposit limit rule, as a pure function.

Responsibility:
    Decides whether a client deposit is admissible given the client's
    outstanding total (sum of prices of unpaid jobs).  A deposit is refused
    when amount / outstanding exceeds the cap ratio (0.25 by default).

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.  The Deposit Cap
    Processor reads the outstanding total under lock and asks this policy
    for a decision inside the same transaction.

Zero outstanding:
    The ratio is undefined when the client owes nothing.  The policy makes
    the choice explicit through ZeroOutstandingPolicy:
        REJECT   (default) -- the cap is 25% of nothing, so every positive
                              deposit exceeds it.
        UNCAPPED           -- no obligation means no cap; any deposit passes.

Exactness:
    amount / outstanding > ratio is evaluated as amount > outstanding * ratio
    with Decimal arithmetic, so no division or rounding takes place.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum


class ZeroOutstandingPolicy(str, Enum):
    """What to do with a deposit when the client has no unpaid jobs."""

    REJECT = "reject"
    UNCAPPED = "uncapped"


DEFAULT_CAP_RATIO = Decimal("0.25")


@dataclass(frozen=True)
class DepositCapDecision:
    """Outcome of a cap evaluation.  max_deposit is None when uncapped."""

    allowed: bool
    amount: Decimal
    outstanding: Decimal
    max_deposit: Decimal | None
    reason: str


@dataclass(frozen=True)
class DepositCapPolicy:
    """
    Cap rule parameters.

    Guarantees:
        - ratio is a Decimal in (0, 1].
        - evaluate() never divides and never rounds.
    """

    ratio: Decimal = DEFAULT_CAP_RATIO
    zero_outstanding: ZeroOutstandingPolicy = ZeroOutstandingPolicy.REJECT

    def __post_init__(self) -> None:
        if isinstance(self.ratio, float):
            raise ValueError(f"Cap ratio must be a Decimal, got float {self.ratio!r}")
        if not (Decimal("0") < Decimal(self.ratio) <= Decimal("1")):
            raise ValueError(f"Cap ratio must be in (0, 1], got {self.ratio}")
        object.__setattr__(self, "ratio", Decimal(self.ratio))
        object.__setattr__(
            self, "zero_outstanding", ZeroOutstandingPolicy(self.zero_outstanding)
        )

    def max_deposit(self, outstanding: Decimal) -> Decimal | None:
        """Largest admissible deposit, or None when there is no cap."""
        if outstanding <= 0:
            if self.zero_outstanding == ZeroOutstandingPolicy.UNCAPPED:
                return None
            return Decimal("0.00")
        return outstanding * self.ratio

    def evaluate(self, amount: Decimal, outstanding: Decimal) -> DepositCapDecision:
        cap = self.max_deposit(outstanding)

        if cap is None:
            return DepositCapDecision(
                allowed=True,
                amount=amount,
                outstanding=outstanding,
                max_deposit=None,
                reason="no outstanding jobs; deposits uncapped",
            )

        if amount > cap:
            if outstanding <= 0:
                reason = "no outstanding jobs; deposits rejected"
            else:
                reason = f"amount exceeds {self.ratio} of outstanding total"
            return DepositCapDecision(
                allowed=False,
                amount=amount,
                outstanding=outstanding,
                max_deposit=cap,
                reason=reason,
            )

        return DepositCapDecision(
            allowed=True,
            amount=amount,
            outstanding=outstanding,
            max_deposit=cap,
            reason="within cap",
        )
