"""
Config -> Kernel Bridges.

Functions that turn ``KernelSettings`` into kernel inputs.  They live here
because the kernel must never import payments_config.

Usage:
    settings = get_settings()
    configure_kernel_logging(settings)
    engine = build_engine_from_settings(settings)
    factory = make_session_factory(engine)
    policy = build_cap_policy(settings)
"""

from __future__ import annotations

from sqlalchemy.engine import Engine

from payments_config.schema import KernelSettings
from payments_kernel.db.engine import build_engine
from payments_kernel.domain.deposit_cap import DepositCapPolicy, ZeroOutstandingPolicy
from payments_kernel.logging_config import configure_logging


def build_cap_policy(settings: KernelSettings) -> DepositCapPolicy:
    return DepositCapPolicy(
        ratio=settings.deposits.cap_ratio,
        zero_outstanding=ZeroOutstandingPolicy(settings.deposits.zero_outstanding_policy),
    )


def build_engine_from_settings(settings: KernelSettings) -> Engine:
    db = settings.database
    return build_engine(
        db.url,
        echo=db.echo_sql,
        pool_size=db.pool_size,
        max_overflow=db.max_overflow,
        pool_timeout=db.pool_timeout,
        lock_timeout_ms=db.lock_timeout_ms,
    )


def configure_kernel_logging(settings: KernelSettings) -> None:
    configure_logging(level=settings.logging.level)
