"""
Module: payments_kernel.models.contract
Responsibility: ORM persistence for contracts linking exactly one client
    profile and one contractor profile.
Architecture position: Kernel > Models.  May import from db/ only.

Status transitions are outside this core; contracts are read-only to the
payment and deposit processors.
"""

from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from payments_kernel.db.base import TrackedBase, UUIDString

if TYPE_CHECKING:
    from payments_kernel.models.job import Job
    from payments_kernel.models.profile import Profile


class ContractStatus(str, Enum):
    """Contract lifecycle status."""

    NEW = "new"
    IN_PROGRESS = "in_progress"
    TERMINATED = "terminated"


class Contract(TrackedBase):
    """Agreement between one client and one contractor, containing jobs."""

    __tablename__ = "contracts"

    __table_args__ = (
        Index("idx_contract_client", "client_id"),
        Index("idx_contract_contractor", "contractor_id"),
        Index("idx_contract_status", "status"),
    )

    terms: Mapped[str] = mapped_column(Text, nullable=False)

    status: Mapped[ContractStatus] = mapped_column(
        String(20),
        nullable=False,
        default=ContractStatus.NEW,
    )

    client_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("profiles.id"),
        nullable=False,
    )

    contractor_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("profiles.id"),
        nullable=False,
    )

    client: Mapped["Profile"] = relationship(
        "Profile",
        foreign_keys=[client_id],
        back_populates="client_contracts",
    )

    contractor: Mapped["Profile"] = relationship(
        "Profile",
        foreign_keys=[contractor_id],
        back_populates="contractor_contracts",
    )

    jobs: Mapped[list["Job"]] = relationship(
        "Job",
        back_populates="contract",
    )

    def __repr__(self) -> str:
        return f"<Contract {self.id}: {self.status}>"
