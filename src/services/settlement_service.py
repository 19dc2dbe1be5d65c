"""
Settlement Service - Preview and execute match settlement.

This service handles:
- Resolving every open bet through an injected outcome decision
- Crediting winnings (stake × odds) to each user's bank
- Appending one history record per settled user ("Match N")
- Forfeiting unspent round allocations
- Resetting votes and returning the round to idle

Every outcome is decided before anything is written, so a resolver error
leaves the ledger untouched. Each user then settles in its own transaction;
settlement is not atomic across users and a store failure part-way leaves
earlier users settled. Only unresolved bets are loaded, so running it again
after a completed settlement changes nothing.
"""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, Dict, List, Mapping, Optional

from src.core.config import Config
from src.core.exceptions import ValidationError
from src.domain.models import Bet, BetHistoryRecord, UserProfile
from src.repositories.ledger_store import LedgerStore
from src.services.round_state_service import RoundStateService
from src.utils.database_utils import transactional
from src.utils.logging_config import get_logger

logger = get_logger(__name__)

Resolver = Callable[[Bet], bool]


@dataclass
class UserSettlement:
    """
    Settlement outcome for one user.

    Attributes:
        user_id: ID of the user
        username: Display name of the user
        resolved_bets: Bets resolved this round, with outcomes
        winnings: Coins credited to total_coins
        history_record: History record appended for the round
    """

    user_id: int
    username: str
    resolved_bets: List[Bet] = field(default_factory=list)
    winnings: int = 0
    history_record: Optional[BetHistoryRecord] = None


@dataclass
class SettlementPreview:
    """
    Winnings a given set of outcomes would produce, without writing.

    Attributes:
        per_user_winnings: Mapping of user_id → coins that would be credited
        missing_bet_ids: Open bets with no outcome supplied
    """

    per_user_winnings: Dict[int, int]
    missing_bet_ids: List[int]

    @property
    def total_winnings(self) -> int:
        return sum(self.per_user_winnings.values())


@dataclass
class SettlementResult:
    """Result of a completed settlement."""

    users: List[UserSettlement] = field(default_factory=list)

    @property
    def bets_resolved(self) -> int:
        return sum(len(user.resolved_bets) for user in self.users)

    @property
    def total_winnings(self) -> int:
        return sum(user.winnings for user in self.users)

    @property
    def is_noop(self) -> bool:
        return not self.users


def calculate_payout(amount: int, odds: float) -> int:
    """
    Coins paid for a winning bet: stake × odds, rounded half-up to whole coins.

    The stake itself is not returned on top; it left available_coins at
    placement.
    """
    payout = Decimal(amount) * Decimal(str(odds))
    return int(payout.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def outcomes_resolver(outcomes: Mapping[int, bool]) -> Resolver:
    """
    Build a resolver from a precomputed bet_id → won mapping.

    Raises (when called):
        ValidationError: If a bet has no outcome in the mapping
    """

    def resolve(bet: Bet) -> bool:
        if bet.id not in outcomes:
            raise ValidationError(f"Missing outcome for bet {bet.id}")
        return bool(outcomes[bet.id])

    return resolve


class SettlementService:
    """Service for settling a match's open bets."""

    def __init__(
        self,
        store: Optional[LedgerStore] = None,
        rounds: Optional[RoundStateService] = None,
        match_id: Optional[str] = None,
    ) -> None:
        self.store = store or LedgerStore()
        self.rounds = rounds or RoundStateService(db=self.store.db)
        self.match_id = match_id or Config.CURRENT_MATCH_ID

    def open_bets(self) -> List[Bet]:
        """Unresolved bets of the current match, oldest first."""
        return self.store.list_bets(self.match_id, resolved=False)

    def preview_settlement(self, outcomes: Mapping[int, bool]) -> SettlementPreview:
        """
        Preview winnings for the given outcomes without committing anything.

        Args:
            outcomes: Mapping of bet_id → won

        Returns:
            SettlementPreview with per-user winnings and bets lacking an outcome
        """
        per_user: Dict[int, int] = {}
        missing: List[int] = []

        for bet in self.open_bets():
            if bet.id not in outcomes:
                missing.append(bet.id)
                continue
            per_user.setdefault(bet.user_id, 0)
            if outcomes[bet.id]:
                per_user[bet.user_id] += calculate_payout(bet.amount, bet.odds)

        return SettlementPreview(per_user_winnings=per_user, missing_bet_ids=missing)

    def end_match(self, resolve: Resolver) -> SettlementResult:
        """
        Settle every open bet and close out the match.

        Args:
            resolve: Decision function returning True when a bet's
                proposition came true. Called once per bet, in order,
                before any write.

        Returns:
            SettlementResult describing every settled user
        """
        logger.info("settlement_started", match_id=self.match_id)

        open_bets = self.open_bets()
        profiles: Dict[int, UserProfile] = {
            profile.id: profile for profile in self.store.list_profiles()
        }

        grouped: "OrderedDict[int, List[Bet]]" = OrderedDict()
        for bet in open_bets:
            grouped.setdefault(bet.user_id, []).append(bet)

        # Every outcome is decided before the first write
        decisions: Dict[int, bool] = {bet.id: bool(resolve(bet)) for bet in open_bets}

        result = SettlementResult()
        for user_id, bets in grouped.items():
            profile = profiles.get(user_id) or self.store.get_profile(user_id)
            result.users.append(self._settle_user(profile, bets, decisions))

        forfeited = self.store.clear_available_coins()
        self.store.reset_voted_flags()
        self.rounds.advance("end_match")

        logger.info(
            "settlement_completed",
            match_id=self.match_id,
            users=len(result.users),
            bets_resolved=result.bets_resolved,
            total_winnings=result.total_winnings,
            forfeited_allocations=forfeited,
        )
        return result

    def _settle_user(
        self, profile: UserProfile, bets: List[Bet], decisions: Mapping[int, bool]
    ) -> UserSettlement:
        """Resolve, credit and record one user's bets in a single transaction."""
        settlement = UserSettlement(user_id=profile.id, username=profile.username)

        with transactional(self.store.db):
            for bet in bets:
                won = decisions[bet.id]
                stored = self.store.resolve_bet_record(bet.id, won)
                settlement.resolved_bets.append(stored)
                if won:
                    settlement.winnings += calculate_payout(stored.amount, stored.odds)

            if settlement.winnings > 0:
                self.store.update_profile(
                    profile.id, total_coins=profile.total_coins + settlement.winnings
                )

            label = f"Match {self.store.count_history(profile.id) + 1}"
            settlement.history_record = self.store.append_history(
                profile.id,
                label,
                [bet.to_snapshot() for bet in settlement.resolved_bets],
            )

        logger.info(
            "user_settled",
            user_id=profile.id,
            bets=len(settlement.resolved_bets),
            winnings=settlement.winnings,
            match_name=label,
        )
        return settlement
