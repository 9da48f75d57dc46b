"""
ReportingSelector tests: best profession and best clients by paid totals.
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from payments_kernel.models import ProfileType
from payments_kernel.selectors.reporting_selector import ReportingSelector


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


@pytest.fixture
def paid_history(create_profile, create_contract, create_job):
    """
    Paid jobs in August 2020 plus one unpaid job:

        alice -> programmer  200 (08-15) + 100 (08-17)
        bob   -> musician    250 (08-16)
        carol -> programmer  120 (08-18)
        alice -> musician    500 unpaid
    """
    alice = create_profile(ProfileType.CLIENT, first_name="Alice", last_name="Smith")
    bob = create_profile(ProfileType.CLIENT, first_name="Bob", last_name="Jones")
    carol = create_profile(ProfileType.CLIENT, first_name="Carol", last_name="White")
    programmer = create_profile(ProfileType.CONTRACTOR, profession="Programmer")
    musician = create_profile(ProfileType.CONTRACTOR, profession="Musician")

    alice_prog = create_contract(alice, programmer)
    create_job(alice_prog, "200.00", paid=True, payment_date=utc(2020, 8, 15, 19, 11, 26))
    create_job(alice_prog, "100.00", paid=True, payment_date=utc(2020, 8, 17, 9, 0))
    create_job(
        create_contract(bob, musician), "250.00", paid=True,
        payment_date=utc(2020, 8, 16, 12, 0),
    )
    create_job(
        create_contract(carol, programmer), "120.00", paid=True,
        payment_date=utc(2020, 8, 18, 12, 0),
    )
    create_job(create_contract(alice, musician), "500.00")

    return {"alice": alice, "bob": bob, "carol": carol}


class TestBestProfession:

    def test_over_whole_history(self, session, paid_history):
        best = ReportingSelector(session).best_profession()

        assert best.profession == "Programmer"
        assert best.total_earned == Decimal("420.00")

    def test_window_changes_winner(self, session, paid_history):
        best = ReportingSelector(session).best_profession(
            utc(2020, 8, 16), utc(2020, 8, 17, 23, 59)
        )

        assert best.profession == "Musician"
        assert best.total_earned == Decimal("250.00")

    def test_window_bounds_are_inclusive(self, session, paid_history):
        exact = utc(2020, 8, 15, 19, 11, 26)

        best = ReportingSelector(session).best_profession(exact, exact)

        assert best.total_earned == Decimal("200.00")

    def test_naive_bounds_read_as_utc(self, session, paid_history):
        best = ReportingSelector(session).best_profession(
            datetime(2020, 8, 18), datetime(2020, 8, 19)
        )

        assert best.profession == "Programmer"
        assert best.total_earned == Decimal("120.00")

    def test_empty_window(self, session, paid_history):
        assert ReportingSelector(session).best_profession(utc(2021, 1, 1), utc(2021, 2, 1)) is None

    def test_inverted_window_refused(self, session):
        with pytest.raises(ValueError):
            ReportingSelector(session).best_profession(utc(2021, 1, 2), utc(2021, 1, 1))


class TestBestClients:

    def test_default_limit_two(self, session, paid_history):
        clients = ReportingSelector(session).best_clients()

        assert [c.full_name for c in clients] == ["Alice Smith", "Bob Jones"]
        assert [c.total_paid for c in clients] == [Decimal("300.00"), Decimal("250.00")]
        assert clients[0].client_id == paid_history["alice"].id

    def test_explicit_limit(self, session, paid_history):
        clients = ReportingSelector(session).best_clients(limit=10)

        assert [c.full_name for c in clients] == ["Alice Smith", "Bob Jones", "Carol White"]

    def test_window(self, session, paid_history):
        clients = ReportingSelector(session).best_clients(
            utc(2020, 8, 17), utc(2020, 8, 31), limit=5
        )

        assert [(c.full_name, c.total_paid) for c in clients] == [
            ("Carol White", Decimal("120.00")),
            ("Alice Smith", Decimal("100.00")),
        ]

    def test_limit_must_be_positive(self, session):
        with pytest.raises(ValueError):
            ReportingSelector(session).best_clients(limit=0)
