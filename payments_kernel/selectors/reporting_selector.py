"""
Module: payments_kernel.selectors.reporting_selector
Responsibility: Read-only earnings aggregates over paid jobs: the profession
    that earned the most, and the clients that paid the most, within a
    payment-date window.
Architecture position: Kernel > Selectors.  May import from models/ and
    selectors/base.py.

Window semantics:
    start and end are optional and inclusive.  Naive datetimes are taken to
    be UTC; aware datetimes are converted to UTC before comparison, matching
    how payment dates are stamped.

Failure modes:
    - ValueError if start > end or limit < 1.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, select

from payments_kernel.models.contract import Contract
from payments_kernel.models.job import Job
from payments_kernel.models.profile import Profile
from payments_kernel.selectors.base import BaseSelector

DEFAULT_BEST_CLIENTS_LIMIT = 2


@dataclass(frozen=True)
class ProfessionEarnings:
    profession: str
    total_earned: Decimal


@dataclass(frozen=True)
class ClientPayments:
    client_id: UUID
    full_name: str
    total_paid: Decimal


def _as_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class ReportingSelector(BaseSelector):
    """Earnings reports derived from paid jobs at query time."""

    def _paid_in_window(self, query, start: datetime | None, end: datetime | None):
        start, end = _as_utc(start), _as_utc(end)
        if start is not None and end is not None and start > end:
            raise ValueError(f"Window start {start} is after end {end}")

        query = query.where(Job.paid.is_(True))
        if start is not None:
            query = query.where(Job.payment_date >= start)
        if end is not None:
            query = query.where(Job.payment_date <= end)
        return query

    def best_profession(
        self,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> ProfessionEarnings | None:
        """
        Contractor profession with the highest paid total in the window.

        Ties are broken by profession name.  Returns None when no job was
        paid in the window.
        """
        earned = func.sum(Job.price).label("earned")
        query = (
            select(Profile.profession, earned)
            .select_from(Job)
            .join(Contract, Contract.id == Job.contract_id)
            .join(Profile, Profile.id == Contract.contractor_id)
        )
        query = (
            self._paid_in_window(query, start, end)
            .group_by(Profile.profession)
            .order_by(earned.desc(), Profile.profession)
            .limit(1)
        )

        row = self.session.execute(query).first()
        if row is None:
            return None
        return ProfessionEarnings(profession=row.profession, total_earned=row.earned)

    def best_clients(
        self,
        start: datetime | None = None,
        end: datetime | None = None,
        limit: int = DEFAULT_BEST_CLIENTS_LIMIT,
    ) -> list[ClientPayments]:
        """Clients ordered by total paid in the window, highest first."""
        if limit < 1:
            raise ValueError(f"limit must be at least 1, got {limit}")

        total_paid = func.sum(Job.price).label("total_paid")
        query = (
            select(Profile.id, Profile.first_name, Profile.last_name, total_paid)
            .select_from(Job)
            .join(Contract, Contract.id == Job.contract_id)
            .join(Profile, Profile.id == Contract.client_id)
        )
        query = (
            self._paid_in_window(query, start, end)
            .group_by(Profile.id, Profile.first_name, Profile.last_name)
            .order_by(total_paid.desc(), Profile.id)
            .limit(limit)
        )

        return [
            ClientPayments(
                client_id=row.id,
                full_name=f"{row.first_name} {row.last_name}",
                total_paid=row.total_paid,
            )
            for row in self.session.execute(query)
        ]
