"""
Database - Ledger Store Engine.

============================================================
READ-ONLY ACCESS TO THE LEDGER SNAPSHOT
============================================================

This module owns the single connection the supply pipeline
holds against the ledger store.

Requirements:
- SQLAlchemy Core with PostgreSQL (SQLite for local fixtures)
- One connection, acquired once, released on EVERY exit path
- Structured logging of connection lifecycle
- Hard failures when the store is unreachable

No statement issued through this module writes to the store.

============================================================
"""

import logging
from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from core.config import get_database_url
from core.exceptions import LedgerConnectionError

logger = logging.getLogger(__name__)


# =============================================================
# DATABASE ENGINE
# =============================================================


def _redact(url: str) -> str:
    return url.split("@")[-1]


def create_database_engine(
    database_url: Optional[str] = None,
    echo: bool = False,
) -> Engine:
    """
    Create a SQLAlchemy engine for the ledger store.

    Args:
        database_url: SQLAlchemy URL (default: from environment)
        echo: Log SQL statements

    Returns:
        SQLAlchemy Engine
    """
    url = database_url or get_database_url()

    logger.info(f"Creating database engine for: {_redact(url)}")

    engine = create_engine(
        url,
        echo=echo,
        pool_pre_ping=True,
    )

    @event.listens_for(engine, "connect")
    def on_connect(dbapi_conn, connection_record):
        logger.debug("Ledger connection established")

    return engine


# =============================================================
# CONNECTION SCOPE
# =============================================================


@contextmanager
def ledger_connection(
    engine: Optional[Engine] = None,
    database_url: Optional[str] = None,
) -> Generator[Connection, None, None]:
    """
    Context manager holding the pipeline's single ledger connection.

    Usage:
        with ledger_connection(engine) as conn:
            reader = LedgerReader(conn)
            ...

    The connection is closed whether the body completes or raises.
    An engine created here is also disposed; a caller-supplied engine
    is left to its owner.

    Raises:
        LedgerConnectionError if the store cannot be reached
    """
    owns_engine = engine is None
    if engine is None:
        engine = create_database_engine(database_url)

    try:
        try:
            conn = engine.connect()
        except OperationalError as e:
            logger.error(f"Ledger connection failed: {e}")
            raise LedgerConnectionError(
                "Cannot connect to ledger store",
                context={"url": _redact(str(engine.url))},
                cause=e,
            ) from e

        try:
            yield conn
        finally:
            conn.close()
            logger.debug("Ledger connection released")
    finally:
        if owns_engine:
            engine.dispose()


def verify_database_connection(conn: Connection) -> bool:
    """
    Verify the ledger connection is working.

    Returns:
        True if the probe succeeded

    Raises:
        LedgerConnectionError if the probe fails
    """
    try:
        conn.execute(text("SELECT 1")).fetchone()
    except SQLAlchemyError as e:
        logger.error(f"Ledger connection probe failed: {e}")
        raise LedgerConnectionError("Ledger store probe failed", cause=e) from e

    logger.info("Ledger connection verified successfully")
    return True
