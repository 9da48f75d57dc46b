#!/usr/bin/env python3
"""
Seed the database with a demonstration set of profiles, contracts and jobs.

Drops all tables, recreates them, inserts the dataset, and commits.  The
database URL comes from payments_config (defaults.yaml, an optional
override file, or PAYMENTS_DATABASE_URL / DATABASE_URL).

Usage:
    python3 scripts/seed_data.py
    python3 scripts/seed_data.py --config path/to/override.yaml
"""

import argparse
import sys
from datetime import datetime, timezone
from decimal import Decimal

from payments_config import get_settings
from payments_config.bridges import build_engine_from_settings, configure_kernel_logging
from payments_kernel.db.engine import (
    create_tables,
    drop_tables,
    make_session_factory,
    session_scope,
)
from payments_kernel.logging_config import get_logger
from payments_kernel.models import Contract, ContractStatus, Job, Profile, ProfileType

logger = get_logger("scripts.seed_data")

# (key, first_name, last_name, profession, type, balance)
PROFILES = [
    ("ada", "Ada", "Byron", "Analyst", ProfileType.CLIENT, "1150.00"),
    ("grace", "Grace", "Brewster", "Admiral", ProfileType.CLIENT, "231.11"),
    ("alan", "Alan", "Sherborne", "Cryptographer", ProfileType.CLIENT, "451.30"),
    ("edsger", "Edsger", "Rotterdam", "Professor", ProfileType.CLIENT, "1.30"),
    ("linus", "Linus", "Helsinki", "Programmer", ProfileType.CONTRACTOR, "64.00"),
    ("margaret", "Margaret", "Hamilton", "Programmer", ProfileType.CONTRACTOR, "1214.00"),
    ("clara", "Clara", "Wieck", "Musician", ProfileType.CONTRACTOR, "121.00"),
    ("ludwig", "Ludwig", "Bonn", "Musician", ProfileType.CONTRACTOR, "314.00"),
]

# (key, terms, status, client, contractor)
CONTRACTS = [
    ("c1", "Fixed-price website build", ContractStatus.TERMINATED, "ada", "linus"),
    ("c2", "Hourly backend work", ContractStatus.IN_PROGRESS, "ada", "margaret"),
    ("c3", "Wedding performance", ContractStatus.IN_PROGRESS, "grace", "clara"),
    ("c4", "Piano lessons", ContractStatus.IN_PROGRESS, "grace", "ludwig"),
    ("c5", "Cipher review", ContractStatus.NEW, "alan", "margaret"),
    ("c6", "Compiler audit", ContractStatus.IN_PROGRESS, "edsger", "linus"),
    ("c7", "Album recording", ContractStatus.IN_PROGRESS, "alan", "ludwig"),
]

# (contract, description, price, payment_date or None)
JOBS = [
    ("c1", "Landing page", "200.00", None),
    ("c2", "Payment endpoint", "201.00", None),
    ("c3", "Rehearsal", "202.00", None),
    ("c4", "First month", "200.00", None),
    ("c7", "Mixing", "200.00", None),
    ("c7", "Mastering", "2020.00", datetime(2020, 8, 15, 19, 11, 26, tzinfo=timezone.utc)),
    ("c2", "Database schema", "200.00", datetime(2020, 8, 15, 19, 11, 26, tzinfo=timezone.utc)),
    ("c3", "Performance", "200.00", datetime(2020, 8, 16, 19, 11, 26, tzinfo=timezone.utc)),
    ("c1", "Contact form", "200.00", datetime(2020, 8, 17, 19, 11, 26, tzinfo=timezone.utc)),
    ("c5", "Key schedule", "200.00", datetime(2020, 8, 17, 19, 11, 26, tzinfo=timezone.utc)),
    ("c3", "Encore", "21.00", datetime(2020, 8, 10, 19, 11, 26, tzinfo=timezone.utc)),
    ("c4", "Second month", "21.00", datetime(2020, 8, 15, 19, 11, 26, tzinfo=timezone.utc)),
    ("c6", "Parser review", "121.00", datetime(2020, 8, 15, 19, 11, 26, tzinfo=timezone.utc)),
    ("c6", "Optimizer review", "121.00", datetime(2020, 8, 14, 23, 11, 26, tzinfo=timezone.utc)),
]


def seed(session_factory) -> dict[str, int]:
    """Insert the dataset in one transaction; returns row counts."""
    with session_scope(session_factory) as session:
        profiles: dict[str, Profile] = {}
        for key, first, last, profession, kind, balance in PROFILES:
            profiles[key] = Profile(
                first_name=first,
                last_name=last,
                profession=profession,
                profile_type=kind.value,
                balance=Decimal(balance),
            )
        session.add_all(profiles.values())
        session.flush()

        contracts: dict[str, Contract] = {}
        for key, terms, status, client, contractor in CONTRACTS:
            contracts[key] = Contract(
                terms=terms,
                status=status.value,
                client_id=profiles[client].id,
                contractor_id=profiles[contractor].id,
            )
        session.add_all(contracts.values())
        session.flush()

        session.add_all(
            Job(
                description=description,
                price=Decimal(price),
                paid=paid_at is not None,
                payment_date=paid_at,
                contract_id=contracts[contract].id,
            )
            for contract, description, price, paid_at in JOBS
        )

    return {"profiles": len(PROFILES), "contracts": len(CONTRACTS), "jobs": len(JOBS)}


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--config", help="Override YAML settings file")
    args = parser.parse_args()

    settings = get_settings(args.config)
    configure_kernel_logging(settings)
    engine = build_engine_from_settings(settings)

    try:
        drop_tables(engine)
        create_tables(engine)
        counts = seed(make_session_factory(engine))
    finally:
        engine.dispose()

    logger.info("seed_completed", extra=counts)
    print(
        f"Seeded {counts['profiles']} profiles, {counts['contracts']} contracts, "
        f"{counts['jobs']} jobs into {settings.database.url}"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
