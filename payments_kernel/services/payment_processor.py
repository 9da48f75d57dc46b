"""
JobPaymentProcessor -- pay for a job as one atomic unit of work.

Responsibility:
    Moves a job's price from the client's balance to the contractor's
    balance and marks the job paid, all or nothing.  Returns a
    ``PaymentResult`` whose status is one of a closed set of kinds.

Architecture position:
    Kernel > Services -- imperative shell, owns the transaction boundary.
    Delegates row locking and mutation to AccountStore and JobRegistry.

Payment flow:
    pay_for_job(acting_profile_id, job_id)
      1. Resolve the actor; it must be a client            (UNKNOWN_USER,
                                                            INVALID_ACTOR_ROLE)
      2. Lock the job through the client's contracts       (JOB_NOT_OWNED_BY_ACTOR)
      3. Refuse a job that is already paid                 (JOB_ALREADY_PAID)
      4. Lock client and contractor rows, ascending id
      5. Debit client, credit contractor                   (INSUFFICIENT_BALANCE,
                                                            INVALID_AMOUNT)
      6. Mark the job paid with payment_date = clock.now()
      7. Commit on PAID, rollback otherwise

Invariants enforced:
    - Conservation: client delta + contractor delta == 0.
    - Single payment: the job row is locked before the paid flag is read,
      so concurrent payments of one job serialize and only the first sees
      paid=False.
    - No partial transfer: every exit path that is not PAID rolls back.
    - Lock order: job row, then profile rows in ascending id order.

Failure modes:
    - TRANSACTION_FAILED: a SQLAlchemy error (lock timeout, lost
      connection, failed commit) ended the unit of work; nothing applied.
    - Any other exception is re-raised after rollback.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID
from uuid import uuid4 as _uuid4

from sqlalchemy.orm import Session, sessionmaker

from payments_kernel.domain.clock import Clock, SystemClock
from payments_kernel.exceptions import (
    InsufficientBalanceError,
    InvalidActorRoleError,
    InvalidAmountError,
    JobNotOwnedByActorError,
    TransactionFailureError,
    UnknownUserError,
)
from payments_kernel.logging_config import LogContext, get_logger
from payments_kernel.models.profile import ProfileType
from payments_kernel.services.account_store import AccountStore
from payments_kernel.services.base import unit_of_work
from payments_kernel.services.job_registry import JobRegistry

logger = get_logger("services.payment_processor")


class PaymentStatus(str, Enum):
    """Outcome of a job payment."""

    PAID = "paid"
    INVALID_ACTOR_ROLE = "invalid_actor_role"
    UNKNOWN_USER = "unknown_user"
    JOB_NOT_OWNED_BY_ACTOR = "job_not_owned_by_actor"
    JOB_ALREADY_PAID = "job_already_paid"
    INSUFFICIENT_BALANCE = "insufficient_balance"
    INVALID_AMOUNT = "invalid_amount"
    TRANSACTION_FAILED = "transaction_failed"


@dataclass(frozen=True)
class PaymentResult:
    """Result of a job payment.  Balances are post-commit values on PAID."""

    status: PaymentStatus
    job_id: UUID
    actor_id: UUID
    contractor_id: UUID | None = None
    amount: Decimal | None = None
    client_balance: Decimal | None = None
    contractor_balance: Decimal | None = None
    payment_date: datetime | None = None
    message: str | None = None

    @property
    def is_success(self) -> bool:
        return self.status == PaymentStatus.PAID


class JobPaymentProcessor:
    """
    Pays for jobs.

    Contract:
        Accepts an open Session and runs each payment as its own
        transaction on it.  The session should carry no pending changes of
        the caller's: they would be committed or rolled back with the
        payment.

    Guarantees:
        - Commit on PAID, rollback on every other outcome.
        - Exactly one PaymentResult per call; exceptions other than storage
          failures propagate after rollback.
    """

    def __init__(self, session: Session, clock: Clock | None = None):
        self._session = session
        self._clock = clock or SystemClock()

    def pay_for_job(self, acting_profile_id: UUID, job_id: UUID) -> PaymentResult:
        """
        Pay for job_id on behalf of acting_profile_id.

        Postconditions:
            - PAID: client debited, contractor credited, job paid, committed.
            - Any other status: the database is unchanged.

        Raises:
            Exception: Re-raises any non-storage exception after rollback.
        """
        correlation_id = str(_uuid4())
        with LogContext.bind(
            correlation_id=correlation_id,
            operation="pay_for_job",
            actor_id=str(acting_profile_id),
            job_id=str(job_id),
        ):
            logger.info("payment_started")
            t0 = time.monotonic()

            try:
                with unit_of_work(self._session, "pay_for_job"):
                    result = self._do_pay_for_job(acting_profile_id, job_id)
                    if result.is_success:
                        self._session.commit()
                    else:
                        self._session.rollback()
            except TransactionFailureError as exc:
                duration_ms = round((time.monotonic() - t0) * 1000, 2)
                logger.error(
                    "payment_transaction_failed",
                    extra={"duration_ms": duration_ms},
                    exc_info=True,
                )
                return PaymentResult(
                    status=PaymentStatus.TRANSACTION_FAILED,
                    job_id=job_id,
                    actor_id=acting_profile_id,
                    message=str(exc),
                )

            duration_ms = round((time.monotonic() - t0) * 1000, 2)
            if not result.is_success:
                logger.warning(
                    "payment_rejected",
                    extra={"status": result.status.value, "reason": result.message},
                )
            logger.info(
                "payment_completed",
                extra={
                    "status": result.status.value,
                    "duration_ms": duration_ms,
                    "amount": str(result.amount) if result.amount is not None else None,
                },
            )
            return result

    def _do_pay_for_job(self, acting_profile_id: UUID, job_id: UUID) -> PaymentResult:
        """Payment logic without transaction management."""
        accounts = AccountStore(self._session)
        registry = JobRegistry(self._session)

        def rejected(status: PaymentStatus, message: str, **fields) -> PaymentResult:
            return PaymentResult(
                status=status,
                job_id=job_id,
                actor_id=acting_profile_id,
                message=message,
                **fields,
            )

        try:
            client = accounts.resolve_actor(acting_profile_id, ProfileType.CLIENT)
        except UnknownUserError as exc:
            return rejected(PaymentStatus.UNKNOWN_USER, str(exc))
        except InvalidActorRoleError as exc:
            return rejected(PaymentStatus.INVALID_ACTOR_ROLE, str(exc))

        try:
            job = registry.lock_job_for_client(job_id, client.id)
        except JobNotOwnedByActorError as exc:
            return rejected(PaymentStatus.JOB_NOT_OWNED_BY_ACTOR, str(exc))

        if job.paid:
            return rejected(
                PaymentStatus.JOB_ALREADY_PAID,
                f"Job {job.id} already paid",
                amount=job.price,
                payment_date=job.payment_date,
            )

        contractor_id = registry.contractor_id_for(job)
        locked = accounts.lock_profiles([client.id, contractor_id])
        client, contractor = locked[client.id], locked[contractor_id]

        try:
            accounts.transfer(client, contractor, job.price)
        except InsufficientBalanceError as exc:
            return rejected(
                PaymentStatus.INSUFFICIENT_BALANCE,
                str(exc),
                contractor_id=contractor_id,
                amount=job.price,
                client_balance=client.balance,
            )
        except InvalidAmountError as exc:
            # Contractor balance would leave the storable range.
            return rejected(
                PaymentStatus.INVALID_AMOUNT,
                str(exc),
                contractor_id=contractor_id,
                amount=job.price,
            )

        registry.mark_paid(job, self._clock.now())

        return PaymentResult(
            status=PaymentStatus.PAID,
            job_id=job.id,
            actor_id=client.id,
            contractor_id=contractor.id,
            amount=job.price,
            client_balance=client.balance,
            contractor_balance=contractor.balance,
            payment_date=job.payment_date,
            message=f"Paid {job.price} for job {job.id}",
        )


def pay_for_job(
    session_factory: sessionmaker[Session],
    acting_profile_id: UUID,
    job_id: UUID,
    clock: Clock | None = None,
) -> PaymentResult:
    """Pay for a job in a session of its own, closed on every exit path."""
    with session_factory() as session:
        return JobPaymentProcessor(session, clock).pay_for_job(acting_profile_id, job_id)
