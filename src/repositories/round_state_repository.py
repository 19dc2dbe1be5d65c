"""
Repository for the single-row round_state table.
"""

from __future__ import annotations

import sqlite3
from typing import Iterable, Optional

from src.core.database import get_db_connection
from src.core.exceptions import BackendError
from src.domain.models import RoundPhase
from src.utils.datetime_helpers import utc_now_iso
from src.utils.logging_config import get_logger

logger = get_logger(__name__)


class RoundStateRepository:
    """Reads and compare-and-sets the current round phase."""

    def __init__(self, db: Optional[sqlite3.Connection] = None) -> None:
        self._owns_connection = db is None
        self._db = db or get_db_connection()

    def close(self) -> None:
        """Close the managed connection when the repository created it."""
        if self._owns_connection:
            try:
                self._db.close()
            except sqlite3.Error as exc:  # pragma: no cover
                logger.warning("round_state_close_failed", error=str(exc))

    def get_phase(self) -> RoundPhase:
        try:
            row = self._db.execute("SELECT phase FROM round_state WHERE id = 1").fetchone()
        except sqlite3.Error as exc:
            raise BackendError(f"Query failed: {exc}") from exc
        if row is None:
            return RoundPhase.IDLE
        return RoundPhase(row[0])

    def transition(self, allowed_from: Iterable[RoundPhase], target: RoundPhase) -> bool:
        """
        Move to ``target`` only if the stored phase is one of ``allowed_from``.

        The check and the write are a single UPDATE, so two admins racing on
        the same transition cannot both win.

        Returns:
            True when the phase changed, False when the stored phase did not match.
        """
        sources = [phase.value for phase in allowed_from]
        placeholders = ", ".join("?" for _ in sources)
        try:
            cursor = self._db.execute(
                f"""
                UPDATE round_state
                SET phase = ?, updated_at_utc = ?
                WHERE id = 1 AND phase IN ({placeholders})
                """,
                [target.value, utc_now_iso(), *sources],
            )
            self._db.commit()
        except sqlite3.Error as exc:
            self._db.rollback()
            raise BackendError(f"Round state update failed: {exc}") from exc
        return cursor.rowcount == 1
