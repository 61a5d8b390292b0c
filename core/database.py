"""
core/database.py -- Engine factory and error translation shared by the stores.

auth/store.py and posts/store.py each own their tables but build their engine
and translate driver errors the same way, so that logic lives here once.

Security: stores use SQLAlchemy Core with bound parameters only. No f-strings
in SQL.

Layer rule: core/ is the kernel. No imports from api/, auth/, or posts/.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from core.errors import StoreConflictError, StoreError

logger = logging.getLogger("marketplace.store")


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def create_store_engine(db_url: str) -> Engine:
    """Build an Engine for db_url.

    SQLite gets check_same_thread=False because FastAPI runs sync handlers in
    a thread pool, plus WAL mode. Any other backend is a plain create_engine().
    """
    connect_args: dict = {}
    if db_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    engine = create_engine(db_url, connect_args=connect_args)
    if db_url.startswith("sqlite"):
        event.listen(engine, "connect", _set_wal_mode)
    return engine


def ping(engine: Engine) -> bool:
    """Return True if a trivial query succeeds. Used by the health endpoint."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError:
        logger.exception("Database ping failed")
        return False


@contextmanager
def translate_errors(operation: str) -> Iterator[None]:
    """Re-raise driver errors as StoreConflictError / StoreError.

    Callers above the store only ever see the core error taxonomy, never
    sqlalchemy exceptions. The original exception is chained for logs.
    """
    try:
        yield
    except IntegrityError as exc:
        logger.info("Constraint violation during %s", operation)
        raise StoreConflictError(f"{operation}: constraint violation") from exc
    except SQLAlchemyError as exc:
        logger.error("Database error during %s: %s", operation, exc)
        raise StoreError(f"{operation} failed") from exc
