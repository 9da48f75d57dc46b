"""
AccountStore -- the only code path that changes a profile balance.

Responsibility:
    Resolves profiles (actor resolution), takes exclusive row locks on
    profiles, and applies credits, debits and transfers to locked rows.

Architecture position:
    Kernel > Services -- imperative shell.  Used by the payment and deposit
    processors inside their unit of work.

Invariants enforced:
    - Exclusive read-then-write: a balance can only be changed on a row
      locked by this store in the current transaction
      (``SELECT ... FOR UPDATE`` with populate_existing, so the value
      used for the decision is the value being overwritten).
    - Non-negative balance: debit refuses to go below zero.
    - Conservation: transfer debits and credits the same amount.
    - Lock order: lock_profiles() locks rows in ascending id order.

Failure modes:
    - UnknownUserError: profile id not found.
    - InvalidActorRoleError: resolved actor has the wrong role.
    - InsufficientBalanceError: debit larger than the locked balance.
    - InvalidAmountError: non-positive amount.
    - RuntimeError: mutation attempted on a row this store did not lock.
"""

from decimal import Decimal
from typing import Iterable
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from payments_kernel.db.types import MAX_AMOUNT, round_money
from payments_kernel.exceptions import (
    InsufficientBalanceError,
    InvalidActorRoleError,
    InvalidAmountError,
    UnknownUserError,
)
from payments_kernel.logging_config import get_logger
from payments_kernel.models.profile import Profile, ProfileType
from payments_kernel.services.base import BaseService

logger = get_logger("services.account_store")


class AccountStore(BaseService):
    """
    Profile rows with locked balance mutation.

    Guarantees:
        - Every credit/debit is applied to a row locked in this transaction.
        - Balances never go below zero through this store.
        - Does NOT call ``session.commit()`` -- the caller controls boundaries.
    """

    def __init__(self, session: Session):
        super().__init__(session)
        self._locked: set[UUID] = set()

    def get_profile(self, profile_id: UUID) -> Profile:
        """
        Resolve a profile without locking it.

        Raises:
            UnknownUserError: If no profile has this id.
        """
        profile = self.session.get(Profile, profile_id)
        if profile is None:
            raise UnknownUserError(str(profile_id))
        return profile

    def resolve_actor(
        self,
        profile_id: UUID,
        required_role: ProfileType | None = None,
    ) -> Profile:
        """
        Resolve the profile performing an operation and check its role.

        Raises:
            UnknownUserError: If no profile has this id.
            InvalidActorRoleError: If required_role is given and differs.
        """
        profile = self.get_profile(profile_id)
        if required_role is not None and ProfileType(profile.profile_type) != required_role:
            raise InvalidActorRoleError(
                profile_id=str(profile.id),
                actual_role=ProfileType(profile.profile_type).value,
                required_role=required_role.value,
            )
        return profile

    def lock_profile(self, profile_id: UUID) -> Profile:
        """
        Read a profile under an exclusive row lock held until the
        transaction ends.

        Raises:
            UnknownUserError: If no profile has this id.
        """
        profile = self.session.execute(
            select(Profile)
            .where(Profile.id == profile_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

        if profile is None:
            raise UnknownUserError(str(profile_id))

        self._locked.add(profile.id)
        logger.debug(
            "profile_locked",
            extra={"profile_id": str(profile.id), "balance": str(profile.balance)},
        )
        return profile

    def lock_profiles(self, profile_ids: Iterable[UUID]) -> dict[UUID, Profile]:
        """Lock several profiles, one at a time, in ascending id order."""
        locked: dict[UUID, Profile] = {}
        for profile_id in sorted(set(profile_ids), key=str):
            locked[profile_id] = self.lock_profile(profile_id)
        return locked

    def credit(self, profile: Profile, amount: Decimal) -> Decimal:
        """
        Add amount to a locked profile's balance; returns the new balance.

        Raises:
            InvalidAmountError: If the new balance would exceed MAX_AMOUNT.
        """
        self._require_lock(profile)
        self._require_positive(amount)

        before = profile.balance
        if before + amount > MAX_AMOUNT:
            raise InvalidAmountError(
                str(amount), f"balance would exceed the maximum of {MAX_AMOUNT}"
            )
        profile.balance = round_money(before + amount)
        self.session.flush()

        logger.info(
            "balance_credited",
            extra={
                "profile_id": str(profile.id),
                "amount": str(amount),
                "balance_before": str(before),
                "balance_after": str(profile.balance),
            },
        )
        return profile.balance

    def debit(self, profile: Profile, amount: Decimal) -> Decimal:
        """
        Subtract amount from a locked profile's balance.

        Raises:
            InsufficientBalanceError: If the locked balance is below amount.
        """
        self._require_lock(profile)
        self._require_positive(amount)

        before = profile.balance
        if before < amount:
            raise InsufficientBalanceError(
                profile_id=str(profile.id),
                balance=str(before),
                required=str(amount),
            )

        profile.balance = round_money(before - amount)
        self.session.flush()

        logger.info(
            "balance_debited",
            extra={
                "profile_id": str(profile.id),
                "amount": str(amount),
                "balance_before": str(before),
                "balance_after": str(profile.balance),
            },
        )
        return profile.balance

    def transfer(self, payer: Profile, payee: Profile, amount: Decimal) -> None:
        """
        Move amount from payer to payee.  Both rows must already be locked.

        The debit runs first, so an insufficient balance aborts before any
        credit is applied.
        """
        total_before = payer.balance + payee.balance
        self.debit(payer, amount)
        self.credit(payee, amount)
        # Conservation: the two deltas cancel out.
        assert payer.balance + payee.balance == total_before, (
            "conservation violated: transfer changed the combined balance"
        )

    def _require_lock(self, profile: Profile) -> None:
        if profile.id not in self._locked:
            raise RuntimeError(
                f"Balance mutation on profile {profile.id} requires a row lock "
                "taken through AccountStore.lock_profile()"
            )

    @staticmethod
    def _require_positive(amount: Decimal) -> None:
        if amount <= 0:
            raise InvalidAmountError(str(amount), "amount must be positive")
