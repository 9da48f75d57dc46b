"""
Settings schema (``payments_config.schema``).

Frozen dataclasses produced by the loader.  Field defaults mirror
``defaults.yaml`` so a settings object can also be built directly in tests.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal


@dataclass(frozen=True)
class DatabaseSettings:
    """Connection and locking parameters."""

    url: str = "sqlite:///payments.sqlite3"
    echo_sql: bool = False
    pool_size: int = 20
    max_overflow: int = 10
    pool_timeout: int = 30
    lock_timeout_ms: int = 5000


@dataclass(frozen=True)
class DepositSettings:
    """Deposit cap rule parameters (see payments_kernel.domain.deposit_cap)."""

    cap_ratio: Decimal = Decimal("0.25")
    zero_outstanding_policy: str = "reject"


@dataclass(frozen=True)
class LoggingSettings:
    level: str = "INFO"


@dataclass(frozen=True)
class KernelSettings:
    """Complete runtime settings for the payments kernel."""

    database: DatabaseSettings = field(default_factory=DatabaseSettings)
    deposits: DepositSettings = field(default_factory=DepositSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)
