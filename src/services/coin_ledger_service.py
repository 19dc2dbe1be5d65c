"""
Coin Ledger Service - round allocations and bet placement.

This service handles:
- Distributing a flat allocation from each user's bank for the betting round
- Closing betting and forfeiting unspent allocations
- Placing prop bets against the caller's last-known round balance
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from src.core.config import Config
from src.core.exceptions import BackendError, GameError, ValidationError
from src.domain.models import Bet, BetSlip, UserProfile
from src.repositories.ledger_store import LedgerStore
from src.services.round_state_service import RoundStateService
from src.utils.logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class DistributionResult:
    """
    Outcome of a coin distribution.

    Attributes:
        amount: Requested flat allocation per user
        allocations: Mapping of user_id → coins moved to the round allocation
        failed_user_ids: Users whose update failed (not rolled back for others)
    """

    amount: int
    allocations: Dict[int, int] = field(default_factory=dict)
    failed_user_ids: List[int] = field(default_factory=list)

    @property
    def total_distributed(self) -> int:
        return sum(self.allocations.values())


class CoinLedgerService:
    """Service for round coin allocations and bet placement."""

    def __init__(
        self,
        store: Optional[LedgerStore] = None,
        rounds: Optional[RoundStateService] = None,
        match_id: Optional[str] = None,
    ) -> None:
        self.store = store or LedgerStore()
        self.rounds = rounds or RoundStateService(db=self.store.db)
        self.match_id = match_id or Config.CURRENT_MATCH_ID

    # ------------------------------------------------------------------
    # Admin: distribution and closing
    # ------------------------------------------------------------------

    def open_betting(self, amount: Optional[int] = None) -> DistributionResult:
        """
        Open the betting round and distribute coins to every non-admin user.

        The phase moves first, so a repeated call is rejected before any
        coins are moved a second time.
        """
        amount = Config.DEFAULT_DISTRIBUTION if amount is None else amount
        self._validate_amount(amount, "Distribution amount")
        self.rounds.advance("open_betting")
        return self.distribute_coins(amount)

    def distribute_coins(self, amount: Optional[int] = None) -> DistributionResult:
        """
        Move ``min(amount, total_coins)`` from each non-admin bank to the round.

        Each user's update is written independently. Failures are collected,
        and raised together once every user has been attempted.

        Raises:
            ValidationError: If amount is not a positive whole number
            BackendError: If any user's update failed
        """
        amount = Config.DEFAULT_DISTRIBUTION if amount is None else amount
        self._validate_amount(amount, "Distribution amount")

        result = DistributionResult(amount=amount)
        for profile in self.store.list_profiles(non_admin_only=True):
            allocation = min(amount, profile.total_coins)
            try:
                self.store.update_profile(
                    profile.id,
                    available_coins=allocation,
                    total_coins=profile.total_coins - allocation,
                )
            except GameError as exc:
                logger.error(
                    "coin_distribution_user_failed",
                    user_id=profile.id,
                    error=str(exc),
                )
                result.failed_user_ids.append(profile.id)
                continue
            result.allocations[profile.id] = allocation

        logger.info(
            "coins_distributed",
            amount=amount,
            users=len(result.allocations),
            total_distributed=result.total_distributed,
            failed=len(result.failed_user_ids),
        )

        if result.failed_user_ids:
            raise BackendError(
                "Coin distribution failed for users "
                + ", ".join(str(user_id) for user_id in result.failed_user_ids)
                + "; other users were updated"
            )
        return result

    def close_betting(self) -> int:
        """
        Close the betting round and forfeit every unspent allocation.

        Returns:
            Number of profiles whose allocation was zeroed
        """
        self.rounds.advance("close_betting")
        cleared = self.store.clear_available_coins()
        logger.info("betting_closed", profiles_cleared=cleared)
        return cleared

    # ------------------------------------------------------------------
    # Players: betting
    # ------------------------------------------------------------------

    def place_bet(
        self,
        user: UserProfile,
        player: str,
        prop: str,
        amount: int,
        odds: Optional[float] = None,
    ) -> Tuple[Bet, UserProfile]:
        """
        Place a prop bet and deduct it from the round allocation.

        The balance check uses ``user`` as last seen by the caller; it is not
        re-read from the store before the write.

        Args:
            user: Caller's last-known profile
            player: Player the bet is on
            prop: Proposition (e.g. "Assist")
            amount: Coins staked
            odds: Payout multiplier (defaults to Config.DEFAULT_ODDS)

        Returns:
            Tuple of (stored bet, updated profile)

        Raises:
            ValidationError: If betting is closed or the bet is invalid
        """
        odds = Config.DEFAULT_ODDS if odds is None else odds
        self._validate_bet(user, player, prop, amount, odds)
        self.rounds.require_betting_open()

        bet = self.store.insert_bet(
            user_id=user.id,
            player=player.strip(),
            prop=prop.strip(),
            amount=amount,
            odds=odds,
            match_id=self.match_id,
        )
        updated = self.store.update_profile(
            user.id, available_coins=user.available_coins - amount
        )

        logger.info(
            "bet_placed",
            bet_id=bet.id,
            user_id=user.id,
            player=bet.player,
            prop=bet.prop,
            amount=amount,
            odds=odds,
        )
        return bet, updated

    def place_bets(
        self, user: UserProfile, slips: Iterable[BetSlip]
    ) -> Tuple[List[Bet], UserProfile]:
        """
        Place several bets one after another.

        The cached profile returned by each placement is used to check the
        next slip. Stops at the first rejected slip; earlier bets stay placed.
        """
        placed: List[Bet] = []
        current = user
        for slip in slips:
            bet, current = self.place_bet(
                current, slip.player, slip.prop, slip.amount, slip.odds
            )
            placed.append(bet)
        return placed, current

    def list_user_bets(self, user_id: int) -> List[Bet]:
        """Return the user's unsettled bets; settled ones live in bet history."""
        return self.store.list_bets(self.match_id, user_id=user_id, resolved=False)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    @staticmethod
    def _validate_amount(amount: int, label: str) -> None:
        if isinstance(amount, bool) or not isinstance(amount, int):
            raise ValidationError(f"{label} must be a whole number of coins")
        if amount <= 0:
            raise ValidationError(f"{label} must be positive")

    def _validate_bet(
        self, user: UserProfile, player: str, prop: str, amount: int, odds: float
    ) -> None:
        if not player or not player.strip():
            raise ValidationError("Choose a player to bet on")
        if not prop or not prop.strip():
            raise ValidationError("Choose a prop to bet on")
        self._validate_amount(amount, "Bet amount")
        if odds <= 0:
            raise ValidationError("Odds must be positive")
        if amount > user.available_coins:
            raise ValidationError(
                f"Bet of {amount} coins exceeds your available balance of {user.available_coins}"
            )
