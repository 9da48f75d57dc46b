"""
Module: payments_kernel.db.engine
Responsibility: SQLAlchemy engine construction, session factories, and the
    transactional scope helper.  Single point of database connection
    configuration for the kernel.
Architecture position: Kernel > DB.  May import from db/base.py.  Only
    create_tables/drop_tables import models (to populate metadata).

Invariants enforced:
    - No process-wide engine.  Callers build an engine, derive a session
      factory from it, and pass the factory (or a session) explicitly to
      every operation.
    - PostgreSQL runs at READ COMMITTED with explicit row locks
      (SELECT ... FOR UPDATE) wherever a read feeds a balance mutation.
      lock_timeout bounds how long a transaction waits for a row.
    - SQLite (development and tests) starts every transaction with
      BEGIN IMMEDIATE, taking the database write lock up front, so units of
      work execute serially.  FOR UPDATE is a no-op there; the immediate
      lock provides the same exclusion.  Foreign keys are switched on.

Failure modes:
    - OperationalError when a lock cannot be obtained in time
      (lock_timeout on PostgreSQL, busy timeout on SQLite).  Processors
      roll back and report TRANSACTION_FAILED.
"""

from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker

from payments_kernel.db.invariants import register_invariant_listeners
from payments_kernel.logging_config import get_logger

logger = get_logger("db.engine")


def build_engine(
    database_url: str,
    echo: bool = False,
    pool_size: int = 20,
    max_overflow: int = 10,
    pool_timeout: int = 30,
    lock_timeout_ms: int = 5000,
) -> Engine:
    """
    Build an engine for PostgreSQL or SQLite.

    Args:
        database_url: SQLAlchemy URL (postgresql://... or sqlite:///path).
        echo: If True, log all SQL statements.
        pool_size: Connections kept in the pool (PostgreSQL).
        max_overflow: Connections beyond pool_size (PostgreSQL).
        pool_timeout: Seconds to wait for a pooled connection.
        lock_timeout_ms: Maximum wait for a row lock (PostgreSQL) or for
            the database write lock (SQLite).

    Returns:
        A configured Engine.  Dispose it when done.
    """
    url = make_url(database_url)

    if url.get_backend_name() == "sqlite":
        engine = create_engine(
            url,
            echo=echo,
            connect_args={
                "timeout": lock_timeout_ms / 1000,
                "check_same_thread": False,
            },
        )
        _install_sqlite_transaction_hooks(engine)
    else:
        engine = create_engine(
            url,
            echo=echo,
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_timeout=pool_timeout,
            pool_pre_ping=True,
            isolation_level="READ COMMITTED",
            connect_args={"options": f"-c lock_timeout={lock_timeout_ms}"},
        )

    logger.info(
        "engine_built",
        extra={
            "dialect": engine.dialect.name,
            "pool_size": pool_size,
            "lock_timeout_ms": lock_timeout_ms,
            "echo": echo,
        },
    )
    return engine


def _install_sqlite_transaction_hooks(engine: Engine) -> None:
    """Take over pysqlite transaction handling so BEGIN IMMEDIATE is emitted."""

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        # Disable pysqlite's own BEGIN handling; the "begin" hook below owns it.
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def make_session_factory(engine: Engine) -> sessionmaker[Session]:
    """
    Session factory bound to engine; objects stay readable after commit.

    Also registers the before_flush invariant guard (db/invariants.py).
    """
    register_invariant_listeners()
    return sessionmaker(bind=engine, expire_on_commit=False)


@contextmanager
def session_scope(
    session_factory: sessionmaker[Session],
) -> Generator[Session, None, None]:
    """
    Provide a transactional scope around a series of operations.

    Postconditions: On normal exit, the session is committed and closed.
        On exception, the session is rolled back and closed, and the
        exception is re-raised.

    Usage:
        with session_scope(factory) as session:
            session.add(entity)
    """
    session = session_factory()
    logger.debug("transaction_started")
    try:
        yield session
        session.commit()
        logger.debug("transaction_committed")
    except Exception:
        session.rollback()
        logger.warning("transaction_rolled_back", exc_info=True)
        raise
    finally:
        session.close()


def create_tables(engine: Engine) -> None:
    """Create all kernel tables (idempotent)."""
    from payments_kernel.db.base import Base
    import payments_kernel.models  # noqa: F401

    Base.metadata.create_all(engine)


def drop_tables(engine: Engine) -> None:
    """Drop all kernel tables. Use with caution - primarily for testing."""
    from payments_kernel.db.base import Base
    import payments_kernel.models  # noqa: F401

    Base.metadata.drop_all(engine)


def is_postgres(engine: Engine) -> bool:
    """Check if the engine is PostgreSQL."""
    return engine.dialect.name == "postgresql"
