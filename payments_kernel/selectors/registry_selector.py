"""
Module: payments_kernel.selectors.registry_selector
Responsibility: Read-only queries over contracts and jobs: contract lookup
    restricted to its parties, non-terminated contracts of a profile,
    unpaid jobs under in-progress contracts, and the outstanding total that
    drives the deposit cap.
Architecture position: Kernel > Selectors.  May import from models/ and
    selectors/base.py.

Invariants enforced:
    - Party scoping: every contract/job query is filtered on the profile
      being either the client or the contractor, so no query returns rows
      of an unrelated contract.
    - outstanding_total() covers unpaid jobs under every contract of the
      client, whatever the contract status, and returns Decimal("0.00")
      rather than None when there are none.

Failure modes:
    - Returns None / empty lists when nothing matches; never raises for
      missing rows.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, or_, select

from payments_kernel.models.contract import Contract, ContractStatus
from payments_kernel.models.job import Job
from payments_kernel.selectors.base import BaseSelector


@dataclass(frozen=True)
class ContractView:
    """Read-only view of a contract."""

    id: UUID
    terms: str
    status: ContractStatus
    client_id: UUID
    contractor_id: UUID


@dataclass(frozen=True)
class JobView:
    """Read-only view of a job."""

    id: UUID
    description: str
    price: Decimal
    paid: bool
    payment_date: datetime | None
    contract_id: UUID


def _contract_view(contract: Contract) -> ContractView:
    return ContractView(
        id=contract.id,
        terms=contract.terms,
        status=ContractStatus(contract.status),
        client_id=contract.client_id,
        contractor_id=contract.contractor_id,
    )


def _job_view(job: Job) -> JobView:
    return JobView(
        id=job.id,
        description=job.description,
        price=job.price,
        paid=bool(job.paid),
        payment_date=job.payment_date,
        contract_id=job.contract_id,
    )


def _is_party(profile_id: UUID):
    return or_(Contract.client_id == profile_id, Contract.contractor_id == profile_id)


class RegistrySelector(BaseSelector):
    """
    Contract and job queries scoped to a profile.

    Guarantees:
        - Every method returns DTOs or Decimal, never ORM instances.
        - List results are ordered by creation time, then id.
    """

    def get_contract_for_party(
        self, contract_id: UUID, profile_id: UUID
    ) -> ContractView | None:
        """Contract by id, or None when profile_id is not one of its parties."""
        contract = self.session.execute(
            select(Contract).where(Contract.id == contract_id, _is_party(profile_id))
        ).scalar_one_or_none()
        return _contract_view(contract) if contract is not None else None

    def list_active_contracts(self, profile_id: UUID) -> list[ContractView]:
        """Contracts of the profile that are not terminated."""
        contracts = self.session.execute(
            select(Contract)
            .where(_is_party(profile_id), Contract.status != ContractStatus.TERMINATED.value)
            .order_by(Contract.created_at, Contract.id)
        ).scalars()
        return [_contract_view(c) for c in contracts]

    def list_unpaid_jobs(self, profile_id: UUID) -> list[JobView]:
        """Unpaid jobs under the profile's in-progress contracts."""
        jobs = self.session.execute(
            select(Job)
            .join(Contract, Contract.id == Job.contract_id)
            .where(
                _is_party(profile_id),
                Contract.status == ContractStatus.IN_PROGRESS.value,
                Job.paid.is_not(True),
            )
            .order_by(Job.created_at, Job.id)
        ).scalars()
        return [_job_view(j) for j in jobs]

    def find_job_for_client(self, job_id: UUID, client_id: UUID) -> JobView | None:
        """Job by id when it sits under a contract of client_id."""
        job = self.session.execute(
            select(Job)
            .join(Contract, Contract.id == Job.contract_id)
            .where(Job.id == job_id, Contract.client_id == client_id)
        ).scalar_one_or_none()
        return _job_view(job) if job is not None else None

    def outstanding_total(self, client_id: UUID) -> Decimal:
        """
        Sum of prices of the client's unpaid jobs across all its contracts.

        Called by the deposit processor after the client row is locked, so
        the value is read inside the deposit's transaction.
        """
        total = self.session.execute(
            select(func.sum(Job.price))
            .join(Contract, Contract.id == Job.contract_id)
            .where(Contract.client_id == client_id, Job.paid.is_not(True))
        ).scalar_one()
        return total if total is not None else Decimal("0.00")
