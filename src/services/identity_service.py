"""
Identity Service - local credential store and session for MVP Arena.

Registers username/password pairs (bcrypt hashes in the credentials table),
authenticates them to a profile ID, and tracks the signed-in user of this
service instance.
"""

from __future__ import annotations

import sqlite3
from typing import Optional

from src.core.config import Config
from src.core.exceptions import BackendError, ValidationError
from src.repositories.ledger_store import LedgerStore
from src.utils.database_utils import transactional
from src.utils.datetime_helpers import utc_now_iso
from src.utils.logging_config import get_logger
from src.utils.passwords import hash_password, verify_password

logger = get_logger(__name__)

INVALID_CREDENTIALS = "Invalid username or password"


class IdentityService:
    """Service issuing and validating credentials."""

    def __init__(self, store: Optional[LedgerStore] = None) -> None:
        self.store = store or LedgerStore()
        self.db = self.store.db
        self._session_user_id: Optional[int] = None

    def register(self, username: str, password: str) -> int:
        """
        Create a credential and its profile, then sign the new user in.

        Args:
            username: Unique username
            password: Secret of at least Config.MIN_PASSWORD_LENGTH characters

        Returns:
            The new user ID

        Raises:
            ValidationError: If the password is too short or the username is taken
        """
        username = (username or "").strip()
        if not username:
            raise ValidationError("Username is required")
        if len(password or "") < Config.MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {Config.MIN_PASSWORD_LENGTH} characters long"
            )
        if self._find_credential(username) is not None:
            raise ValidationError(f"Username '{username}' is already taken")

        password_hash = hash_password(password)
        with transactional(self.db) as conn:
            profile = self.store.create_profile(
                username, starting_coins=Config.STARTING_COINS
            )
            conn.execute(
                """
                INSERT INTO credentials (user_id, username, password_hash, created_at_utc)
                VALUES (?, ?, ?, ?)
                """,
                (profile.id, username, password_hash, utc_now_iso()),
            )

        self._session_user_id = profile.id
        logger.info("user_registered", user_id=profile.id, username=username)
        return profile.id

    def authenticate(self, username: str, password: str) -> int:
        """
        Check a username/password pair and start a session.

        Raises:
            ValidationError: If the pair does not match a credential
        """
        credential = self._find_credential((username or "").strip())
        if credential is None or not verify_password(password or "", credential["password_hash"]):
            logger.warning("authentication_failed", username=username)
            raise ValidationError(INVALID_CREDENTIALS)

        self._session_user_id = credential["user_id"]
        logger.info("user_authenticated", user_id=self._session_user_id)
        return self._session_user_id

    def current_session(self) -> Optional[int]:
        return self._session_user_id

    def sign_out(self) -> None:
        if self._session_user_id is not None:
            logger.info("user_signed_out", user_id=self._session_user_id)
        self._session_user_id = None

    def _find_credential(self, username: str) -> Optional[sqlite3.Row]:
        try:
            return self.db.execute(
                "SELECT user_id, password_hash FROM credentials WHERE username = ?",
                (username,),
            ).fetchone()
        except sqlite3.Error as exc:
            raise BackendError(f"Credential lookup failed: {exc}") from exc
