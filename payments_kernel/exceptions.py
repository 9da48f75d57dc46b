"""
Typed Exception Hierarchy for the Payments Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Money movement must fail precisely. Callers catch by type, never by parsing
messages, and every exception carries:
  1. A CODE class attribute (machine-readable, transport-safe)
  2. Structured DATA as instance attributes (ids, amounts as strings)

Stores and guards raise these exceptions. The processors translate them into
the closed set of result statuses returned to the caller (see
services/payment_processor.py and services/deposit_processor.py), so no
exception type leaks into the response-mapping layer.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    PaymentsKernelError (base)
    |
    +-- ActorError
    |   +-- UnknownUserError
    |   +-- InvalidActorRoleError
    |
    +-- JobError
    |   +-- JobNotOwnedByActorError
    |   +-- JobAlreadyPaidError
    |
    +-- BalanceError
    |   +-- InsufficientBalanceError
    |   +-- DepositExceedsCapError
    |   +-- InvalidAmountError
    |   +-- NegativeBalanceError
    |
    +-- InvariantError
    |   +-- PaymentStateViolationError
    |
    +-- TransactionError
        +-- TransactionFailureError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category     | Code                     | When Raised
-------------|--------------------------|-------------------------------------------
Actor        | UNKNOWN_USER             | Profile id does not exist
             | INVALID_ACTOR_ROLE       | Profile role does not permit the operation
-------------|--------------------------|-------------------------------------------
Job          | JOB_NOT_OWNED_BY_ACTOR   | No contract of the client contains the job
             | JOB_ALREADY_PAID         | Job paid flag already true
-------------|--------------------------|-------------------------------------------
Balance      | INSUFFICIENT_BALANCE     | Client balance below job price
             | DEPOSIT_EXCEEDS_CAP      | Deposit above ratio of outstanding total
             | INVALID_AMOUNT           | Non-positive, float, or sub-cent amount
             | NEGATIVE_BALANCE         | A flush would persist balance < 0
-------------|--------------------------|-------------------------------------------
Invariant    | PAYMENT_STATE_VIOLATION  | Job un-paid, or paid/payment_date mismatch
-------------|--------------------------|-------------------------------------------
Transaction  | TRANSACTION_FAILURE      | Unit of work could not commit; rolled back
===============================================================================
"""


class PaymentsKernelError(Exception):
    """
    Base exception for all payments kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "PAYMENTS_KERNEL_ERROR"


# Actor-related exceptions


class ActorError(PaymentsKernelError):
    """Base exception for profile/actor errors."""

    code: str = "ACTOR_ERROR"


class UnknownUserError(ActorError):
    """Profile with given ID was not found."""

    code: str = "UNKNOWN_USER"

    def __init__(self, profile_id: str):
        self.profile_id = profile_id
        super().__init__(f"Profile not found: {profile_id}")


class InvalidActorRoleError(ActorError):
    """Profile role does not permit the requested operation."""

    code: str = "INVALID_ACTOR_ROLE"

    def __init__(self, profile_id: str, actual_role: str, required_role: str):
        self.profile_id = profile_id
        self.actual_role = actual_role
        self.required_role = required_role
        super().__init__(
            f"Profile {profile_id} has role '{actual_role}', "
            f"operation requires '{required_role}'"
        )


# Job-related exceptions


class JobError(PaymentsKernelError):
    """Base exception for job errors."""

    code: str = "JOB_ERROR"


class JobNotOwnedByActorError(JobError):
    """No contract owned by the acting client contains the job."""

    code: str = "JOB_NOT_OWNED_BY_ACTOR"

    def __init__(self, job_id: str, profile_id: str):
        self.job_id = job_id
        self.profile_id = profile_id
        super().__init__(f"Job {job_id} is not under a contract of client {profile_id}")


class JobAlreadyPaidError(JobError):
    """Payment attempted on a job that is already paid."""

    code: str = "JOB_ALREADY_PAID"

    def __init__(self, job_id: str, payment_date: str | None = None):
        self.job_id = job_id
        self.payment_date = payment_date
        super().__init__(f"Job {job_id} already paid (payment_date: {payment_date})")


# Balance-related exceptions


class BalanceError(PaymentsKernelError):
    """Base exception for balance errors."""

    code: str = "BALANCE_ERROR"


class InsufficientBalanceError(BalanceError):
    """Client balance is below the amount to debit."""

    code: str = "INSUFFICIENT_BALANCE"

    def __init__(self, profile_id: str, balance: str, required: str):
        self.profile_id = profile_id
        self.balance = balance
        self.required = required
        super().__init__(
            f"Insufficient balance for profile {profile_id}: "
            f"balance={balance}, required={required}"
        )


class DepositExceedsCapError(BalanceError):
    """Deposit amount exceeds the allowed share of the outstanding total."""

    code: str = "DEPOSIT_EXCEEDS_CAP"

    def __init__(self, profile_id: str, amount: str, outstanding: str, cap_ratio: str):
        self.profile_id = profile_id
        self.amount = amount
        self.outstanding = outstanding
        self.cap_ratio = cap_ratio
        super().__init__(
            f"Deposit {amount} for profile {profile_id} exceeds cap "
            f"({cap_ratio} of outstanding {outstanding})"
        )


class InvalidAmountError(BalanceError):
    """Monetary amount is not a positive, cent-precise Decimal."""

    code: str = "INVALID_AMOUNT"

    def __init__(self, amount: str, reason: str):
        self.amount = amount
        self.reason = reason
        super().__init__(f"Invalid amount {amount}: {reason}")


class NegativeBalanceError(BalanceError):
    """A flush would persist a negative balance."""

    code: str = "NEGATIVE_BALANCE"

    def __init__(self, profile_id: str, balance: str):
        self.profile_id = profile_id
        self.balance = balance
        super().__init__(f"Profile {profile_id} balance would become negative: {balance}")


# Invariant exceptions


class InvariantError(PaymentsKernelError):
    """Base exception for persisted-state invariant violations."""

    code: str = "INVARIANT_ERROR"


class PaymentStateViolationError(InvariantError):
    """Job paid/payment_date state change is not allowed."""

    code: str = "PAYMENT_STATE_VIOLATION"

    def __init__(self, job_id: str, reason: str):
        self.job_id = job_id
        self.reason = reason
        super().__init__(f"Payment state violation on job {job_id}: {reason}")


# Transaction exceptions


class TransactionError(PaymentsKernelError):
    """Base exception for unit-of-work failures."""

    code: str = "TRANSACTION_ERROR"


class TransactionFailureError(TransactionError):
    """
    The atomic unit of work could not be committed.

    Always means the transaction was rolled back and nothing was applied.
    Safe to retry for idempotent operations.
    """

    code: str = "TRANSACTION_FAILURE"

    def __init__(self, operation: str, cause: str):
        self.operation = operation
        self.cause = cause
        super().__init__(f"Transaction for {operation} rolled back: {cause}")
