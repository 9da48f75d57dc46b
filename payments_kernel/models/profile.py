"""
Module: payments_kernel.models.profile
Responsibility: ORM persistence for profiles, the accounts of clients and
    contractors.  The balance column is the only shared mutable money state
    in the system.
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    - balance >= 0 (CHECK constraint ck_profile_balance_non_negative, plus
      the before_flush guard in db/invariants.py).
    - balance is changed only through services/account_store.py.

Failure modes:
    - IntegrityError if a raw UPDATE drives balance below zero.
"""

from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from payments_kernel.db.base import TrackedBase

if TYPE_CHECKING:
    from payments_kernel.models.contract import Contract


class ProfileType(str, Enum):
    """Role of a profile.  Clients pay and deposit; contractors get paid."""

    CLIENT = "client"
    CONTRACTOR = "contractor"


class Profile(TrackedBase):
    """
    A client or contractor account holding a monetary balance.

    Guarantees:
        - profile_type is set at creation and never changes in this core.
        - balance is a 2-place Decimal stored as integer cents.
    """

    __tablename__ = "profiles"

    __table_args__ = (
        CheckConstraint("balance >= 0", name="ck_profile_balance_non_negative"),
        Index("idx_profile_type", "profile_type"),
        Index("idx_profile_profession", "profession"),
    )

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)

    last_name: Mapped[str] = mapped_column(String(100), nullable=False)

    profession: Mapped[str] = mapped_column(String(100), nullable=False)

    profile_type: Mapped[ProfileType] = mapped_column(
        String(20),
        nullable=False,
    )

    balance: Mapped[Decimal] = mapped_column(
        nullable=False,
        default=Decimal("0.00"),
    )

    client_contracts: Mapped[list["Contract"]] = relationship(
        "Contract",
        foreign_keys="Contract.client_id",
        back_populates="client",
    )

    contractor_contracts: Mapped[list["Contract"]] = relationship(
        "Contract",
        foreign_keys="Contract.contractor_id",
        back_populates="contractor",
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def is_client(self) -> bool:
        return ProfileType(self.profile_type) == ProfileType.CLIENT

    def __repr__(self) -> str:
        return f"<Profile {self.id}: {self.full_name} ({self.profile_type}) balance={self.balance}>"
