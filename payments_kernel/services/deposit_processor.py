"""
DepositCapProcessor -- top up a client's balance within the deposit cap.

Responsibility:
    Credits a client's balance by a positive amount when the amount does
    not exceed the cap ratio (0.25 by default) of the client's outstanding
    total.  Returns a ``DepositResult`` whose status is one of a closed set
    of kinds.

Architecture position:
    Kernel > Services -- imperative shell, owns the transaction boundary.
    The cap decision is the pure DepositCapPolicy; the outstanding total
    comes from RegistrySelector; the credit goes through AccountStore.

Deposit flow:
    deposit_to_client(target_user_id, amount)
      1. Validate amount (Decimal/int/str, > 0, cents)     (INVALID_AMOUNT)
      2. Lock the target profile row                       (UNKNOWN_USER)
      3. Target must be a client                           (INVALID_ACTOR_ROLE)
      4. Read the outstanding total in the same transaction
      5. Evaluate the cap                                  (DEPOSIT_EXCEEDS_CAP)
      6. Credit and commit                                 (INVALID_AMOUNT on overflow)

Invariants enforced:
    - Balance never decreases: only credit() is applied, with amount > 0.
    - The outstanding total is read after the target row is locked and
      inside the transaction that applies the credit.

Failure modes:
    - TRANSACTION_FAILED: a SQLAlchemy error ended the unit of work.
    - Deposits are not idempotent: a retried call deposits again.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from uuid import UUID
from uuid import uuid4 as _uuid4

from sqlalchemy.orm import Session, sessionmaker

from payments_kernel.domain.deposit_cap import DepositCapPolicy
from payments_kernel.domain.money import parse_amount
from payments_kernel.exceptions import (
    DepositExceedsCapError,
    InvalidAmountError,
    TransactionFailureError,
    UnknownUserError,
)
from payments_kernel.logging_config import LogContext, get_logger
from payments_kernel.selectors.registry_selector import RegistrySelector
from payments_kernel.services.account_store import AccountStore
from payments_kernel.services.base import unit_of_work

logger = get_logger("services.deposit_processor")


class DepositStatus(str, Enum):
    """Outcome of a deposit."""

    DEPOSITED = "deposited"
    INVALID_AMOUNT = "invalid_amount"
    UNKNOWN_USER = "unknown_user"
    INVALID_ACTOR_ROLE = "invalid_actor_role"
    DEPOSIT_EXCEEDS_CAP = "deposit_exceeds_cap"
    TRANSACTION_FAILED = "transaction_failed"


@dataclass(frozen=True)
class DepositResult:
    """Result of a deposit.  max_deposit is None when no cap applied."""

    status: DepositStatus
    target_id: UUID
    amount: Decimal | None = None
    balance: Decimal | None = None
    outstanding: Decimal | None = None
    max_deposit: Decimal | None = None
    message: str | None = None

    @property
    def is_success(self) -> bool:
        return self.status == DepositStatus.DEPOSITED


class DepositCapProcessor:
    """
    Deposits into client balances.

    Contract:
        Accepts an open Session and runs each deposit as its own
        transaction on it.  The cap policy defaults to 25% of outstanding
        with deposits refused when nothing is outstanding.
    """

    def __init__(self, session: Session, cap_policy: DepositCapPolicy | None = None):
        self._session = session
        self._cap_policy = cap_policy or DepositCapPolicy()

    def deposit_to_client(
        self, target_user_id: UUID, amount: Decimal | int | str
    ) -> DepositResult:
        """
        Credit amount to target_user_id's balance if within the cap.

        Postconditions:
            - DEPOSITED: balance increased by amount, committed.
            - Any other status: the database is unchanged.
        """
        correlation_id = str(_uuid4())
        with LogContext.bind(
            correlation_id=correlation_id,
            operation="deposit_to_client",
            target_id=str(target_user_id),
        ):
            logger.info("deposit_started", extra={"amount": str(amount)})
            t0 = time.monotonic()

            try:
                parsed = parse_amount(amount)
            except InvalidAmountError as exc:
                logger.warning(
                    "deposit_rejected",
                    extra={"status": DepositStatus.INVALID_AMOUNT.value, "reason": exc.reason},
                )
                return DepositResult(
                    status=DepositStatus.INVALID_AMOUNT,
                    target_id=target_user_id,
                    message=str(exc),
                )

            try:
                with unit_of_work(self._session, "deposit_to_client"):
                    result = self._do_deposit(target_user_id, parsed)
                    if result.is_success:
                        self._session.commit()
                    else:
                        self._session.rollback()
            except TransactionFailureError as exc:
                duration_ms = round((time.monotonic() - t0) * 1000, 2)
                logger.error(
                    "deposit_transaction_failed",
                    extra={"duration_ms": duration_ms},
                    exc_info=True,
                )
                return DepositResult(
                    status=DepositStatus.TRANSACTION_FAILED,
                    target_id=target_user_id,
                    amount=parsed,
                    message=str(exc),
                )

            duration_ms = round((time.monotonic() - t0) * 1000, 2)
            if not result.is_success:
                logger.warning(
                    "deposit_rejected",
                    extra={"status": result.status.value, "reason": result.message},
                )
            logger.info(
                "deposit_completed",
                extra={"status": result.status.value, "duration_ms": duration_ms},
            )
            return result

    def _do_deposit(self, target_user_id: UUID, amount: Decimal) -> DepositResult:
        """Deposit logic without transaction management."""
        accounts = AccountStore(self._session)

        try:
            target = accounts.lock_profile(target_user_id)
        except UnknownUserError as exc:
            return DepositResult(
                status=DepositStatus.UNKNOWN_USER,
                target_id=target_user_id,
                amount=amount,
                message=str(exc),
            )

        if not target.is_client:
            return DepositResult(
                status=DepositStatus.INVALID_ACTOR_ROLE,
                target_id=target_user_id,
                amount=amount,
                message=f"Profile {target.id} is not a client",
            )

        outstanding = RegistrySelector(self._session).outstanding_total(target.id)
        decision = self._cap_policy.evaluate(amount, outstanding)

        if not decision.allowed:
            exc = DepositExceedsCapError(
                profile_id=str(target.id),
                amount=str(amount),
                outstanding=str(outstanding),
                cap_ratio=str(self._cap_policy.ratio),
            )
            return DepositResult(
                status=DepositStatus.DEPOSIT_EXCEEDS_CAP,
                target_id=target_user_id,
                amount=amount,
                balance=target.balance,
                outstanding=outstanding,
                max_deposit=decision.max_deposit,
                message=f"{exc} ({decision.reason})",
            )

        try:
            balance = accounts.credit(target, amount)
        except InvalidAmountError as exc:
            return DepositResult(
                status=DepositStatus.INVALID_AMOUNT,
                target_id=target_user_id,
                amount=amount,
                balance=target.balance,
                outstanding=outstanding,
                max_deposit=decision.max_deposit,
                message=str(exc),
            )

        return DepositResult(
            status=DepositStatus.DEPOSITED,
            target_id=target.id,
            amount=amount,
            balance=balance,
            outstanding=outstanding,
            max_deposit=decision.max_deposit,
            message=f"Deposited {amount}",
        )


def deposit_to_client(
    session_factory: sessionmaker[Session],
    target_user_id: UUID,
    amount: Decimal | int | str,
    cap_policy: DepositCapPolicy | None = None,
) -> DepositResult:
    """Deposit in a session of its own, closed on every exit path."""
    with session_factory() as session:
        return DepositCapProcessor(session, cap_policy).deposit_to_client(
            target_user_id, amount
        )
