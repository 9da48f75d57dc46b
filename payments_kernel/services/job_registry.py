"""
JobRegistry -- locked access to jobs for payment.

Responsibility:
    Locks a job through the client that owns it (ownership check and row
    lock in one statement), resolves the contractor to pay, and flips the
    one-way paid flag.

Architecture position:
    Kernel > Services -- imperative shell.  Called by JobPaymentProcessor
    inside its unit of work; never commits.

Invariants enforced:
    - Ownership: a job is only returned when its contract's client_id is
      the acting client.
    - One-way paid flag: mark_paid() refuses a job that is already paid.
      The lock taken by lock_job_for_client() means the paid flag read here
      is the committed value, so two payments of the same job serialize and
      the second one sees paid=True.

Failure modes:
    - JobNotOwnedByActorError: job missing, or owned by another client.
    - JobAlreadyPaidError: mark_paid() on a paid job.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import select

from payments_kernel.exceptions import JobAlreadyPaidError, JobNotOwnedByActorError
from payments_kernel.logging_config import get_logger
from payments_kernel.models.contract import Contract
from payments_kernel.models.job import Job
from payments_kernel.services.base import BaseService

logger = get_logger("services.job_registry")


class JobRegistry(BaseService):
    """Job rows for the payment path."""

    def lock_job_for_client(self, job_id: UUID, client_id: UUID) -> Job:
        """
        Lock the job row if it belongs to a contract of client_id.

        A missing job and a job under someone else's contract are reported
        the same way, so a caller cannot discover job ids it does not own.

        Raises:
            JobNotOwnedByActorError: No such job under the client's contracts.
        """
        job = self.session.execute(
            select(Job)
            .join(Contract, Contract.id == Job.contract_id)
            .where(Job.id == job_id, Contract.client_id == client_id)
            .with_for_update(of=Job)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

        if job is None:
            raise JobNotOwnedByActorError(job_id=str(job_id), profile_id=str(client_id))

        logger.debug(
            "job_locked",
            extra={"job_id": str(job.id), "paid": job.paid, "price": str(job.price)},
        )
        return job

    def contractor_id_for(self, job: Job) -> UUID:
        """Contractor of the contract the job belongs to."""
        return self.session.execute(
            select(Contract.contractor_id).where(Contract.id == job.contract_id)
        ).scalar_one()

    def mark_paid(self, job: Job, paid_at: datetime) -> Job:
        """
        Set paid=True and payment_date on a locked, unpaid job.

        Raises:
            JobAlreadyPaidError: If the job is already paid.
        """
        if job.paid:
            raise JobAlreadyPaidError(
                job_id=str(job.id),
                payment_date=job.payment_date.isoformat() if job.payment_date else None,
            )

        job.paid = True
        job.payment_date = paid_at
        self.session.flush()

        logger.info(
            "job_marked_paid",
            extra={"job_id": str(job.id), "payment_date": paid_at.isoformat()},
        )
        return job
