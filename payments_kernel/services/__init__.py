"""Kernel services: stores (flush only) and processors (own transactions)."""

from payments_kernel.services.account_store import AccountStore
from payments_kernel.services.base import BaseService, unit_of_work
from payments_kernel.services.deposit_processor import (
    DepositCapProcessor,
    DepositResult,
    DepositStatus,
    deposit_to_client,
)
from payments_kernel.services.job_registry import JobRegistry
from payments_kernel.services.payment_processor import (
    JobPaymentProcessor,
    PaymentResult,
    PaymentStatus,
    pay_for_job,
)

__all__ = [
    "AccountStore",
    "BaseService",
    "unit_of_work",
    "JobRegistry",
    "JobPaymentProcessor",
    "PaymentResult",
    "PaymentStatus",
    "pay_for_job",
    "DepositCapProcessor",
    "DepositResult",
    "DepositStatus",
    "deposit_to_client",
]
