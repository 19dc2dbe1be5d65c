"""
Database utility helpers.

Provides consistent transaction handling for SQLite connections used by the
repositories. Every store failure leaves the repository as a BackendError.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from typing import Iterator

from src.core.exceptions import BackendError
from src.utils.logging_config import get_logger


logger = get_logger(__name__)


@contextmanager
def transactional(conn: sqlite3.Connection) -> Iterator[sqlite3.Connection]:
    """
    Provide a transactional scope around a series of database operations.

    Ensures an explicit BEGIN/COMMIT pair and performs rollback when any
    exception escapes the context block. sqlite errors are re-raised as
    BackendError; other exceptions propagate unchanged after the rollback.
    """
    try:
        conn.execute("BEGIN")
        yield conn
    except sqlite3.Error as exc:
        logger.error("transaction_rollback", error=str(exc))
        conn.rollback()
        raise BackendError(f"Database transaction failed: {exc}") from exc
    except Exception:
        conn.rollback()
        raise
    else:
        conn.commit()
