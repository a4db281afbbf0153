"""
Database configuration and session management.
Uses SQLAlchemy 2.0 sync sessions; FastAPI runs the sync endpoints in its threadpool.

Every public write operation goes through ``run_atomic``: one transaction,
committed fully or rolled back fully, re-run from scratch on transient errors.
"""

import os
import time
from collections.abc import Callable, Generator
from contextlib import contextmanager
from typing import TypeVar

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DBAPIError, OperationalError
from sqlalchemy.orm import sessionmaker, Session

from shared.config.logging import get_logger
from shared.config.settings import settings, DATABASE_URL
from shared.utils.backoff import calculate_retry_delay_with_jitter
from shared.utils.exceptions import DatabaseError

logger = get_logger(__name__)

T = TypeVar("T")


def _calculate_pool_size() -> int:
    """
    Pool size based on CPU cores: (2 * cores) + 1, capped at 20.
    """
    cores = os.cpu_count() or 4
    return min(cores * 2 + 1, 20)


def configure_sqlite(engine: Engine) -> Engine:
    """
    Make SQLite serialize writers at transaction start.

    pysqlite defers BEGIN until the first write, which lets two transactions
    read the same state and then race. Emitting BEGIN IMMEDIATE takes the
    database write lock up front, which stands in for the row locks
    (SELECT ... FOR UPDATE) that PostgreSQL provides.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        # Hand transaction control to SQLAlchemy's "begin" event
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


def build_engine(url: str, **kwargs) -> Engine:
    """Create an engine with pool settings suited to the backend."""
    if url.startswith("sqlite"):
        connect_args = {
            "check_same_thread": False,
            "timeout": settings.db_lock_timeout_seconds,
        }
        connect_args.update(kwargs.pop("connect_args", {}))
        return configure_sqlite(
            create_engine(url, connect_args=connect_args, **kwargs)
        )

    return create_engine(
        url,
        pool_pre_ping=True,  # Verify connections before using
        pool_size=_calculate_pool_size(),
        max_overflow=15,
        pool_timeout=30,  # Wait max 30s for connection from pool
        pool_recycle=1800,  # Recycle connections after 30 minutes
        connect_args={"connect_timeout": 10},
        echo=False,
        **kwargs,
    )


engine = build_engine(DATABASE_URL)

# Session factory
SessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
)


def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency for database sessions.

    Usage:
        @router.get("/tables/status")
        def tables_status(db: Session = Depends(get_db)):
            ...

    The session is automatically closed after the request completes.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def get_db_context() -> Generator[Session, None, None]:
    """
    Context manager for database sessions outside of FastAPI.

    Usage:
        with get_db_context() as db:
            db.scalars(select(Bill)).all()
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def safe_commit(db: Session) -> None:
    """
    Commit with automatic rollback on failure.

    Raises the original exception after rolling back.
    """
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise


def is_transient_error(exc: Exception) -> bool:
    """
    True for errors where re-running the whole transaction can succeed:
    deadlocks, lock timeouts, serialization failures, "database is locked"
    and dropped connections.
    """
    if isinstance(exc, OperationalError):
        return True
    return isinstance(exc, DBAPIError) and exc.connection_invalidated


def run_atomic(
    db: Session,
    operation: Callable[[], T],
    *,
    name: str,
    max_retries: int | None = None,
    retry_delay: float | None = None,
) -> T:
    """
    Run ``operation`` as one transaction on ``db``.

    Commits when it returns, rolls back when it raises. Transient database
    errors re-run the operation from scratch up to ``max_retries`` times with
    exponential backoff; any other database error, or exhausting the retries,
    raises DatabaseError. Application errors propagate unchanged.

    Usage:
        order = run_atomic(db, lambda: self._create(table_id, items), name="create_order")
    """
    if max_retries is None:
        max_retries = settings.db_transaction_max_retries
    if retry_delay is None:
        retry_delay = settings.db_transaction_retry_delay

    attempt = 0
    while True:
        try:
            result = operation()
            db.commit()
            return result
        except DBAPIError as exc:
            db.rollback()
            if is_transient_error(exc) and attempt < max_retries:
                delay = calculate_retry_delay_with_jitter(attempt, retry_delay, max_delay=2.0)
                logger.warning(
                    "Transient database error, retrying transaction",
                    operation=name,
                    attempt=attempt + 1,
                    max_retries=max_retries,
                    delay=round(delay, 3),
                    error=str(exc.orig),
                )
                attempt += 1
                time.sleep(delay)
                continue
            raise DatabaseError(name, attempts=attempt + 1, error=str(exc.orig)) from exc
        except Exception:
            db.rollback()
            raise
