"""
Module: payments_kernel.models.job
Responsibility: ORM persistence for jobs, the billable units of work under a
    contract.
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    - price > 0 (ck_job_price_positive).
    - payment_date is set iff paid (ck_job_payment_date_matches_paid).
    - paid goes False -> True at most once (db/invariants.py).
    - Only services/job_registry.py marks a job paid.
"""

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Index, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from payments_kernel.db.base import TrackedBase, UUIDString

if TYPE_CHECKING:
    from payments_kernel.models.contract import Contract


class Job(TrackedBase):
    """A priced unit of work with a one-way paid flag."""

    __tablename__ = "jobs"

    __table_args__ = (
        CheckConstraint("price > 0", name="ck_job_price_positive"),
        CheckConstraint(
            "(paid AND payment_date IS NOT NULL) OR "
            "(NOT paid AND payment_date IS NULL)",
            name="ck_job_payment_date_matches_paid",
        ),
        Index("idx_job_contract", "contract_id"),
        Index("idx_job_paid", "paid"),
    )

    description: Mapped[str] = mapped_column(Text, nullable=False)

    price: Mapped[Decimal] = mapped_column(nullable=False)

    paid: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    payment_date: Mapped[datetime | None] = mapped_column(nullable=True)

    contract_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("contracts.id"),
        nullable=False,
    )

    contract: Mapped["Contract"] = relationship(
        "Contract",
        back_populates="jobs",
    )

    def __repr__(self) -> str:
        state = f"paid {self.payment_date.isoformat()}" if self.paid else "unpaid"
        return f"<Job {self.id}: {self.price} {state}>"
