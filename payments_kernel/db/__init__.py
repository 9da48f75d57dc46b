"""Database layer - engine, base classes, money types, invariant guards."""

from payments_kernel.db.base import Base, TrackedBase, UUIDString
from payments_kernel.db.engine import (
    build_engine,
    create_tables,
    drop_tables,
    make_session_factory,
    session_scope,
)
from payments_kernel.db.invariants import (
    register_invariant_listeners,
    unregister_invariant_listeners,
)
from payments_kernel.db.types import MoneyAmount, round_money

__all__ = [
    "build_engine",
    "make_session_factory",
    "session_scope",
    "create_tables",
    "drop_tables",
    "register_invariant_listeners",
    "unregister_invariant_listeners",
    "Base",
    "TrackedBase",
    "UUIDString",
    "MoneyAmount",
    "round_money",
]
