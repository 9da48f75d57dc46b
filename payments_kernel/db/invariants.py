"""
ORM-level invariant enforcement for balances and job payment state.

This is the first of two layers guarding persisted state:

  Layer 1: THIS FILE (Session before_flush listener)
    - Catches violations produced through Python/SQLAlchemy code
    - Fires before any SQL reaches the database, so the transaction is
      aborted with a typed exception

  Layer 2: CHECK constraints on the tables (models/profile.py, models/job.py)
    - Catch raw SQL and bulk UPDATE statements

Rules (both layers):

Entity   | Rule
---------|------------------------------------------------------------------
Profile  | balance >= 0
Job      | paid may go False -> True, never True -> False
Job      | payment_date is set iff paid is True
Job      | payment_date of a paid job never changes

Usage:
    register_invariant_listeners()    # make_session_factory() calls this
    unregister_invariant_listeners()  # tests that bypass the guard only
"""

from sqlalchemy import event
from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import get_history

from payments_kernel.exceptions import NegativeBalanceError, PaymentStateViolationError
from payments_kernel.logging_config import get_logger

logger = get_logger("db.invariants")


def _check_profile_balance(profile) -> None:
    balance = profile.balance
    if balance is not None and balance < 0:
        logger.error(
            "invariant_violation_blocked",
            extra={
                "entity_type": "Profile",
                "entity_id": str(profile.id),
                "field": "balance",
                "balance": str(balance),
            },
        )
        raise NegativeBalanceError(profile_id=str(profile.id), balance=str(balance))


def _check_job_payment_state(job) -> None:
    paid_history = get_history(job, "paid")
    date_history = get_history(job, "payment_date")

    was_paid = bool(paid_history.deleted and paid_history.deleted[0])
    if not paid_history.deleted and paid_history.unchanged:
        was_paid = bool(paid_history.unchanged[0])

    is_paid = bool(job.paid)
    reason = None

    if was_paid and not is_paid:
        reason = "paid job cannot be marked unpaid"
    elif is_paid != (job.payment_date is not None):
        reason = "payment_date must be set if and only if paid is true"
    elif was_paid and date_history.deleted and date_history.added:
        reason = "payment_date of a paid job cannot change"

    if reason is not None:
        logger.error(
            "invariant_violation_blocked",
            extra={"entity_type": "Job", "entity_id": str(job.id), "reason": reason},
        )
        raise PaymentStateViolationError(job_id=str(job.id), reason=reason)


def _check_invariants_before_flush(session, flush_context, instances):
    from payments_kernel.models.job import Job
    from payments_kernel.models.profile import Profile

    for obj in list(session.new) + list(session.dirty):
        if isinstance(obj, Profile):
            _check_profile_balance(obj)
        elif isinstance(obj, Job):
            _check_job_payment_state(obj)


def register_invariant_listeners() -> None:
    """Register the before_flush guard on all sessions (idempotent)."""
    if not event.contains(Session, "before_flush", _check_invariants_before_flush):
        event.listen(Session, "before_flush", _check_invariants_before_flush)


def unregister_invariant_listeners() -> None:
    """
    Remove the before_flush guard.

    WARNING: Only use this in tests that need to reach the database-level
    CHECK constraints directly.
    """
    if event.contains(Session, "before_flush", _check_invariants_before_flush):
        event.remove(Session, "before_flush", _check_invariants_before_flush)
