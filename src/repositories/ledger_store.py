"""
Repository for the game ledger: profiles, votes, bets and bet history.

Every write commits on its own unless it runs inside an outer
``transactional`` block, in which case the outer block commits. No method
holds state between calls; each mutation is a full read-modify-write round
trip against SQLite.
"""

from __future__ import annotations

import json
import sqlite3
from typing import Any, Dict, Iterable, List, Optional, Sequence

from src.core.database import get_db_connection
from src.core.exceptions import BackendError, GameError, NotFoundError, ValidationError
from src.domain.models import Bet, BetHistoryRecord, UserProfile, Vote
from src.utils.database_utils import transactional
from src.utils.datetime_helpers import utc_now_iso
from src.utils.logging_config import get_logger

logger = get_logger(__name__)

UPDATABLE_PROFILE_FIELDS = frozenset(
    {"username", "total_coins", "available_coins", "mvp_points", "is_admin", "voted"}
)


class LedgerStore:
    """Table-oriented access to the game ledger."""

    def __init__(self, db: Optional[sqlite3.Connection] = None) -> None:
        self._owns_connection = db is None
        self._db = db or get_db_connection()

    @property
    def db(self) -> sqlite3.Connection:
        return self._db

    def close(self) -> None:
        """Close the managed connection when the repository created it."""
        if self._owns_connection:
            try:
                self._db.close()
            except sqlite3.Error as exc:  # pragma: no cover
                logger.warning("ledger_store_close_failed", error=str(exc))

    # ------------------------------------------------------------------
    # Low-level helpers
    # ------------------------------------------------------------------

    def _query(self, sql: str, params: Sequence[Any] = ()) -> List[sqlite3.Row]:
        try:
            return self._db.execute(sql, params).fetchall()
        except sqlite3.Error as exc:
            raise BackendError(f"Query failed: {exc}") from exc

    def _write(
        self,
        sql: str,
        params: Sequence[Any] = (),
        *,
        integrity_error: Optional[GameError] = None,
    ) -> sqlite3.Cursor:
        outer_transaction = self._db.in_transaction
        try:
            cursor = self._db.execute(sql, params)
            if not outer_transaction:
                self._db.commit()
            return cursor
        except sqlite3.Error as exc:
            if not outer_transaction:
                self._db.rollback()
            if integrity_error is not None and isinstance(exc, sqlite3.IntegrityError):
                raise integrity_error from exc
            raise BackendError(f"Write failed: {exc}") from exc

    # ------------------------------------------------------------------
    # Profiles
    # ------------------------------------------------------------------

    def get_profile(self, user_id: int) -> UserProfile:
        """
        Load a profile by ID.

        Raises:
            NotFoundError: If no profile exists for the ID
        """
        rows = self._query("SELECT * FROM user_profiles WHERE id = ?", (user_id,))
        if not rows:
            raise NotFoundError(f"Profile {user_id} not found")
        return UserProfile.from_row(rows[0])

    def find_profile_by_username(self, username: str) -> Optional[UserProfile]:
        rows = self._query(
            "SELECT * FROM user_profiles WHERE username = ?", (username,)
        )
        return UserProfile.from_row(rows[0]) if rows else None

    def list_profiles(self, *, non_admin_only: bool = False) -> List[UserProfile]:
        """Return profiles ordered by banked coins, richest first."""
        query = "SELECT * FROM user_profiles"
        if non_admin_only:
            query += " WHERE is_admin = FALSE"
        query += " ORDER BY total_coins DESC, id ASC"
        return [UserProfile.from_row(row) for row in self._query(query)]

    def create_profile(
        self,
        username: str,
        *,
        starting_coins: int,
        is_admin: bool = False,
    ) -> UserProfile:
        """
        Insert a new profile with an empty round allocation.

        Raises:
            ValidationError: If the username is already taken
        """
        now = utc_now_iso()
        cursor = self._write(
            """
            INSERT INTO user_profiles (
                username,
                total_coins,
                available_coins,
                mvp_points,
                is_admin,
                voted,
                created_at_utc,
                updated_at_utc
            ) VALUES (?, ?, 0, 0, ?, FALSE, ?, ?)
            """,
            (username, starting_coins, is_admin, now, now),
            integrity_error=ValidationError(f"Username '{username}' is already taken"),
        )

        logger.info("profile_created", user_id=cursor.lastrowid, username=username)
        return self.get_profile(cursor.lastrowid)

    def update_profile(self, user_id: int, **fields: Any) -> UserProfile:
        """
        Apply a partial update to a profile and return the stored result.

        Raises:
            ValueError: If an unknown field is passed
            NotFoundError: If the profile does not exist
            BackendError: If the store rejects the write (e.g. negative coins)
        """
        unknown = set(fields) - UPDATABLE_PROFILE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update profile fields: {sorted(unknown)}")
        if not fields:
            return self.get_profile(user_id)

        assignments = ", ".join(f"{column} = ?" for column in fields)
        params = list(fields.values()) + [utc_now_iso(), user_id]
        cursor = self._write(
            f"UPDATE user_profiles SET {assignments}, updated_at_utc = ? WHERE id = ?",
            params,
        )

        if cursor.rowcount == 0:
            raise NotFoundError(f"Profile {user_id} not found")
        return self.get_profile(user_id)

    def reset_voted_flags(self) -> int:
        """Clear every user's voted flag. Returns the number of rows touched."""
        cursor = self._write(
            "UPDATE user_profiles SET voted = FALSE, updated_at_utc = ?",
            (utc_now_iso(),),
        )
        return cursor.rowcount

    def clear_available_coins(self) -> int:
        """Zero every non-admin round allocation without refunding it."""
        cursor = self._write(
            """
            UPDATE user_profiles
            SET available_coins = 0, updated_at_utc = ?
            WHERE is_admin = FALSE
            """,
            (utc_now_iso(),),
        )
        return cursor.rowcount

    # ------------------------------------------------------------------
    # Votes
    # ------------------------------------------------------------------

    def list_votes(self, match_id: str) -> List[Vote]:
        rows = self._query(
            "SELECT * FROM user_votes WHERE match_id = ? ORDER BY id", (match_id,)
        )
        return [Vote.from_row(row) for row in rows]

    def get_vote(self, user_id: int, match_id: str) -> Optional[Vote]:
        rows = self._query(
            "SELECT * FROM user_votes WHERE user_id = ? AND match_id = ?",
            (user_id, match_id),
        )
        return Vote.from_row(rows[0]) if rows else None

    def upsert_vote(self, user_id: int, match_id: str, picks: Sequence[str]) -> Vote:
        """Replace the user's vote for the match (delete-then-insert)."""
        first, second, third = picks
        with transactional(self._db) as conn:
            conn.execute(
                "DELETE FROM user_votes WHERE user_id = ? AND match_id = ?",
                (user_id, match_id),
            )
            conn.execute(
                """
                INSERT INTO user_votes (
                    user_id, first_place, second_place, third_place, match_id, created_at_utc
                ) VALUES (?, ?, ?, ?, ?, ?)
                """,
                (user_id, first, second, third, match_id, utc_now_iso()),
            )

        vote = self.get_vote(user_id, match_id)
        if vote is None:  # pragma: no cover - insert just committed
            raise BackendError("Vote was not stored")
        return vote

    # ------------------------------------------------------------------
    # Bets
    # ------------------------------------------------------------------

    def list_bets(
        self,
        match_id: str,
        *,
        user_id: Optional[int] = None,
        resolved: Optional[bool] = None,
    ) -> List[Bet]:
        """Return bets for a match, optionally filtered by user and resolution."""
        query = "SELECT * FROM user_bets WHERE match_id = ?"
        params: List[Any] = [match_id]

        if user_id is not None:
            query += " AND user_id = ?"
            params.append(user_id)

        if resolved is not None:
            query += " AND resolved = ?"
            params.append(resolved)

        query += " ORDER BY id"
        return [Bet.from_row(row) for row in self._query(query, params)]

    def get_bet(self, bet_id: int) -> Bet:
        rows = self._query("SELECT * FROM user_bets WHERE id = ?", (bet_id,))
        if not rows:
            raise NotFoundError(f"Bet {bet_id} not found")
        return Bet.from_row(rows[0])

    def insert_bet(
        self,
        user_id: int,
        player: str,
        prop: str,
        amount: int,
        odds: float,
        match_id: str,
    ) -> Bet:
        cursor = self._write(
            """
            INSERT INTO user_bets (
                user_id, player, prop, amount, odds, resolved, won, match_id, created_at_utc
            ) VALUES (?, ?, ?, ?, ?, FALSE, FALSE, ?, ?)
            """,
            (user_id, player, prop, amount, odds, match_id, utc_now_iso()),
        )
        return self.get_bet(cursor.lastrowid)

    def resolve_bet_record(self, bet_id: int, won: bool) -> Bet:
        """
        Mark an unresolved bet as won or lost.

        Raises:
            NotFoundError: If the bet does not exist
            ValidationError: If the bet was already resolved
        """
        cursor = self._write(
            """
            UPDATE user_bets
            SET resolved = TRUE, won = ?, resolved_at_utc = ?
            WHERE id = ? AND resolved = FALSE
            """,
            (won, utc_now_iso(), bet_id),
        )
        if cursor.rowcount == 0:
            bet = self.get_bet(bet_id)
            raise ValidationError(f"Bet {bet.id} is already resolved")
        return self.get_bet(bet_id)

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def append_history(
        self, user_id: int, label: str, bets_snapshot: Iterable[Dict[str, Any]]
    ) -> BetHistoryRecord:
        cursor = self._write(
            """
            INSERT INTO bet_history (user_id, match_name, bets_data, created_at_utc)
            VALUES (?, ?, ?, ?)
            """,
            (user_id, label, json.dumps(list(bets_snapshot)), utc_now_iso()),
        )
        rows = self._query("SELECT * FROM bet_history WHERE id = ?", (cursor.lastrowid,))
        return BetHistoryRecord.from_row(rows[0])

    def list_history(self, user_id: int) -> List[BetHistoryRecord]:
        """Return a user's history records, newest first."""
        rows = self._query(
            """
            SELECT * FROM bet_history
            WHERE user_id = ?
            ORDER BY created_at_utc DESC, id DESC
            """,
            (user_id,),
        )
        return [BetHistoryRecord.from_row(row) for row in rows]

    def count_history(self, user_id: int) -> int:
        rows = self._query(
            "SELECT COUNT(*) FROM bet_history WHERE user_id = ?", (user_id,)
        )
        return int(rows[0][0])
