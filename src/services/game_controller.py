"""
Game Controller - explicit application state and the intent handlers.

The presentation layer keeps one ``AppState`` per session and passes it to
every handler; each handler returns a new ``AppState`` instead of touching
page-level globals. Admin handlers refuse to run for non-admin sessions.
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass, field, replace
from typing import Iterable, List, Optional

from src.core.exceptions import ValidationError
from src.domain.models import Bet, BetSlip, RoundPhase, UserProfile
from src.repositories.ledger_store import LedgerStore
from src.services.coin_ledger_service import CoinLedgerService
from src.services.identity_service import IdentityService
from src.services.round_state_service import RoundStateService
from src.services.settlement_service import Resolver, SettlementResult, SettlementService
from src.services.voting_service import VotingService
from src.utils.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class AppState:
    """
    Everything a screen needs to render for one session.

    Attributes:
        profile: Signed-in user's profile (None when signed out)
        phase: Current round phase
        bets: Signed-in user's unsettled bets
        notice: Human-readable message about the last action
        last_settlement: Result of the last settlement run in this session
    """

    profile: Optional[UserProfile] = None
    phase: RoundPhase = RoundPhase.IDLE
    bets: List[Bet] = field(default_factory=list)
    notice: Optional[str] = None
    last_settlement: Optional[SettlementResult] = None

    @property
    def signed_in(self) -> bool:
        return self.profile is not None

    @property
    def is_admin(self) -> bool:
        return bool(self.profile and self.profile.is_admin)

    @property
    def betting_open(self) -> bool:
        return self.phase.betting_open

    @property
    def match_active(self) -> bool:
        return self.phase.match_active


class GameController:
    """Wires the services together behind user intents."""

    def __init__(self, db: Optional[sqlite3.Connection] = None) -> None:
        self.store = LedgerStore(db)
        self.rounds = RoundStateService(db=self.store.db)
        self.identity = IdentityService(self.store)
        self.coins = CoinLedgerService(self.store, self.rounds)
        self.voting = VotingService(self.store)
        self.settlement = SettlementService(self.store, self.rounds)

    def close(self) -> None:
        self.store.close()

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    def refresh(self, state: AppState, notice: Optional[str] = None) -> AppState:
        """Reload the session's profile, bets and round phase from the store."""
        user_id = self.identity.current_session()
        phase = self.rounds.current_phase()
        if user_id is None:
            return replace(state, profile=None, bets=[], phase=phase, notice=notice)

        return replace(
            state,
            profile=self.store.get_profile(user_id),
            bets=self.coins.list_user_bets(user_id),
            phase=phase,
            notice=notice,
        )

    def sign_up(self, state: AppState, username: str, password: str) -> AppState:
        self.identity.register(username, password)
        return self.refresh(state, notice=f"Welcome, {username.strip()}!")

    def sign_in(self, state: AppState, username: str, password: str) -> AppState:
        self.identity.authenticate(username, password)
        return self.refresh(state, notice="Signed in")

    def sign_out(self, state: AppState) -> AppState:
        self.identity.sign_out()
        return AppState(phase=state.phase, notice="Signed out")

    # ------------------------------------------------------------------
    # Player intents
    # ------------------------------------------------------------------

    def submit_vote(self, state: AppState, first: str, second: str, third: str) -> AppState:
        profile = self._require_profile(state)
        self.voting.submit_vote(profile, first, second, third)
        return self.refresh(state, notice="Vote submitted")

    def place_bets(self, state: AppState, slips: Iterable[BetSlip]) -> AppState:
        """Place bets in order against the session's cached balance."""
        profile = self._require_profile(state)
        placed, _ = self.coins.place_bets(profile, slips)
        return self.refresh(state, notice=f"Placed {len(placed)} bet(s)")

    # ------------------------------------------------------------------
    # Admin intents
    # ------------------------------------------------------------------

    def start_match(self, state: AppState) -> AppState:
        self._require_admin(state)
        self.rounds.advance("start_match")
        self.voting.reset_voting()
        return self.refresh(state, notice="Match started; voting is open")

    def reset_voting(self, state: AppState) -> AppState:
        self._require_admin(state)
        self.voting.reset_voting()
        return self.refresh(state, notice="Voting reset")

    def open_betting(self, state: AppState, amount: Optional[int] = None) -> AppState:
        self._require_admin(state)
        result = self.coins.open_betting(amount)
        return self.refresh(
            state,
            notice=f"Betting open; distributed {result.total_distributed} coins to "
            f"{len(result.allocations)} players",
        )

    def close_betting(self, state: AppState) -> AppState:
        self._require_admin(state)
        self.coins.close_betting()
        return self.refresh(state, notice="Betting closed; unspent coins forfeited")

    def end_match(self, state: AppState, resolve: Resolver) -> AppState:
        self._require_admin(state)
        result = self.settlement.end_match(resolve)
        if result.is_noop:
            notice = "Match ended; no open bets to settle"
        else:
            notice = (
                f"Match ended; settled {result.bets_resolved} bets for "
                f"{len(result.users)} players, paying {result.total_winnings} coins"
            )
        return replace(self.refresh(state, notice=notice), last_settlement=result)

    def award_mvp_points(self, state: AppState, first: str, second: str, third: str) -> AppState:
        self._require_admin(state)
        awarded = self.voting.award_mvp_points(first, second, third)
        return self.refresh(state, notice=f"Awarded MVP points to {len(awarded)} players")

    # ------------------------------------------------------------------
    # Guards
    # ------------------------------------------------------------------

    @staticmethod
    def _require_profile(state: AppState) -> UserProfile:
        if state.profile is None:
            raise ValidationError("Sign in first")
        return state.profile

    def _require_admin(self, state: AppState) -> UserProfile:
        profile = self._require_profile(state)
        if not profile.is_admin:
            logger.warning("admin_action_denied", user_id=profile.id)
            raise ValidationError("Only the admin can do that")
        return profile
