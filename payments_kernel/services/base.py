"""
BaseService -- abstract base for kernel services, and the unit-of-work
helper used by the processors.

Responsibility:
    Stores (AccountStore, JobRegistry) receive a SQLAlchemy ``Session`` and
    use ``session.flush()`` only -- never ``commit()`` or ``rollback()``.
    Processors own the transaction boundary and wrap their work in
    ``unit_of_work()``, which guarantees a rollback on every failing exit
    path and converts storage failures into ``TransactionFailureError``.

Invariants enforced:
    - Stores never end a transaction; a payment touching three rows is one
      atomic unit because nothing commits until the processor does.
    - Any exception inside a unit of work leaves nothing applied.
"""

from abc import ABC
from contextlib import contextmanager
from typing import Generator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from payments_kernel.exceptions import TransactionFailureError
from payments_kernel.logging_config import get_logger

logger = get_logger("services.base")


class BaseService(ABC):
    """
    Abstract base class for kernel stores.

    Contract:
        Accepts a Session from the caller and persists changes with
        ``session.flush()`` inside the caller's transaction.

    Non-goals:
        - Does NOT manage transaction lifecycle (commit/rollback).
    """

    def __init__(self, session: Session):
        self.session = session


@contextmanager
def unit_of_work(session: Session, operation: str) -> Generator[Session, None, None]:
    """
    Roll back on any exception raised inside the block.

    SQLAlchemy errors (lock timeout, lost connection, constraint failure,
    failed commit) are re-raised as TransactionFailureError; every other
    exception is re-raised unchanged after the rollback.
    """
    try:
        yield session
    except SQLAlchemyError as exc:
        session.rollback()
        logger.warning(
            "unit_of_work_rolled_back",
            extra={"operation": operation, "cause": type(exc).__name__},
        )
        raise TransactionFailureError(operation, f"{type(exc).__name__}: {exc}") from exc
    except BaseException:
        session.rollback()
        logger.warning(
            "unit_of_work_rolled_back",
            extra={"operation": operation},
            exc_info=True,
        )
        raise
