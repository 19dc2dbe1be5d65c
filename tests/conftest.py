"""Shared fixtures: an in-memory game database and profile/phase helpers."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from src.core.config import DEFAULT_PLAYER_ROSTER, DEFAULT_PROP_CATALOGUE, Config
from src.core.database import get_db_connection
from src.domain.models import RoundPhase, UserProfile
from src.repositories.ledger_store import LedgerStore
from src.services.round_state_service import RoundStateService


@pytest.fixture(autouse=True)
def default_config(monkeypatch: pytest.MonkeyPatch) -> None:
    """Pin the game settings so a developer's .env cannot change test outcomes."""
    monkeypatch.setattr(Config, "STARTING_COINS", 100)
    monkeypatch.setattr(Config, "DEFAULT_DISTRIBUTION", 10)
    monkeypatch.setattr(Config, "DEFAULT_ODDS", 4)
    monkeypatch.setattr(Config, "MIN_PASSWORD_LENGTH", 6)
    monkeypatch.setattr(Config, "CURRENT_MATCH_ID", "current")
    monkeypatch.setattr(Config, "PLAYER_ROSTER", list(DEFAULT_PLAYER_ROSTER))
    monkeypatch.setattr(Config, "PROP_CATALOGUE", list(DEFAULT_PROP_CATALOGUE))


@pytest.fixture
def db():
    conn = get_db_connection(":memory:")
    yield conn
    conn.close()


@pytest.fixture
def store(db) -> LedgerStore:
    return LedgerStore(db)


@pytest.fixture
def rounds(db) -> RoundStateService:
    return RoundStateService(db=db)


@pytest.fixture
def make_profile(store: LedgerStore) -> Callable[..., UserProfile]:
    """Create a profile and set its balances directly."""

    def _make(
        username: str,
        total_coins: int = 100,
        available_coins: int = 0,
        is_admin: bool = False,
    ) -> UserProfile:
        profile = store.create_profile(username, starting_coins=total_coins, is_admin=is_admin)
        if available_coins:
            profile = store.update_profile(profile.id, available_coins=available_coins)
        return profile

    return _make


@pytest.fixture
def set_phase(db) -> Callable[[RoundPhase], None]:
    """Force the stored round phase, bypassing the transition rules."""

    def _set(phase: RoundPhase) -> None:
        db.execute("UPDATE round_state SET phase = ? WHERE id = 1", (phase.value,))
        db.commit()

    return _set
