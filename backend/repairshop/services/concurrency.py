# Overview: Transaction scoping and row locking shared by the write services.

from __future__ import annotations

from contextlib import contextmanager

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from ..errors import PersistenceError
from ..extensions import db


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE; use begin_write_lock() first there.
    """
    return query.with_for_update()


def begin_write_lock() -> None:
    """
    Take the database write lock up front on SQLite.

    Must be the first statement of the unit of work. Other engines rely on
    lock_for_update() row locks and this is a no-op.
    """
    if db.engine.dialect.name == "sqlite":
        db.session.execute(text("BEGIN IMMEDIATE"))


def _persistence_error(exc: SQLAlchemyError) -> PersistenceError:
    return PersistenceError(
        "Storage operation failed",
        details={"reason": exc.__class__.__name__},
    )


@contextmanager
def storage_errors():
    """Translate storage engine failures on reads into PersistenceError."""
    try:
        yield
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise _persistence_error(exc) from exc


@contextmanager
def unit_of_work():
    """
    Run a block as a single transaction on the current session.

    Commits when the block finishes. Any exception rolls the whole block back
    before propagating, so nothing partial is ever visible. The connection goes
    back to the pool on commit or rollback.
    """
    try:
        yield db.session
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise _persistence_error(exc) from exc
    except Exception:
        db.session.rollback()
        raise
