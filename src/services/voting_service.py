"""
Voting Service - MVP podium votes and their ranked tally.

Each vote names a first, second and third place; the tally weights them
5, 3 and 2 points. The same weights score users' predictions against the
official podium to award MVP points.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from src.core.config import Config
from src.core.exceptions import ValidationError
from src.domain.models import UserProfile, Vote
from src.repositories.ledger_store import LedgerStore
from src.utils.logging_config import get_logger

logger = get_logger(__name__)

PODIUM_POINTS: Tuple[int, int, int] = (5, 3, 2)


@dataclass(frozen=True)
class PlayerScore:
    """A player's aggregated vote score."""

    player: str
    points: int


def validate_podium(first: str, second: str, third: str) -> Tuple[str, str, str]:
    """
    Normalise and check a podium of three player names.

    Returns:
        The stripped names

    Raises:
        ValidationError: If a name is blank or the names are not pairwise distinct
    """
    picks = tuple((name or "").strip() for name in (first, second, third))
    if not all(picks):
        raise ValidationError("Pick a player for first, second and third place")
    if len(set(picks)) != len(picks):
        raise ValidationError("Each podium pick must be a different player")
    return picks  # type: ignore[return-value]


def tally_votes(votes: Iterable[Vote], players: Sequence[str]) -> List[PlayerScore]:
    """
    Rank players by vote score.

    Every known player starts at zero; picks naming a player outside the
    roster add that player after the roster in first-seen order. Ties keep
    roster order.

    Args:
        votes: Votes to aggregate
        players: Known player roster

    Returns:
        Every player with their score, highest first
    """
    scores: Dict[str, int] = {player: 0 for player in players}

    for vote in votes:
        for player, points in zip(vote.picks, PODIUM_POINTS):
            scores[player] = scores.get(player, 0) + points

    ranked = sorted(scores.items(), key=lambda item: item[1], reverse=True)
    return [PlayerScore(player=player, points=points) for player, points in ranked]


def score_prediction(vote: Vote, podium: Sequence[str]) -> int:
    """Points earned by a vote: each pick in its exact podium slot earns that slot's weight."""
    return sum(
        points
        for pick, actual, points in zip(vote.picks, podium, PODIUM_POINTS)
        if pick == actual
    )


class VotingService:
    """Service for MVP votes, tallies and prediction points."""

    def __init__(
        self,
        store: Optional[LedgerStore] = None,
        match_id: Optional[str] = None,
        players: Optional[Sequence[str]] = None,
    ) -> None:
        self.store = store or LedgerStore()
        self.match_id = match_id or Config.CURRENT_MATCH_ID
        self.players = list(players if players is not None else Config.PLAYER_ROSTER)

    def submit_vote(
        self, user: UserProfile, first: str, second: str, third: str
    ) -> Tuple[Vote, UserProfile]:
        """
        Store the user's podium vote, replacing any earlier vote for the match.

        Raises:
            ValidationError: If picks are blank or repeated (nothing is written)
        """
        picks = validate_podium(first, second, third)

        vote = self.store.upsert_vote(user.id, self.match_id, picks)
        updated = self.store.update_profile(user.id, voted=True)

        logger.info("vote_submitted", user_id=user.id, match_id=self.match_id, picks=list(picks))
        return vote, updated

    def list_votes(self) -> List[Vote]:
        return self.store.list_votes(self.match_id)

    def tally(self) -> List[PlayerScore]:
        return tally_votes(self.list_votes(), self.players)

    def reset_voting(self) -> int:
        """Clear every voted flag; votes, bets and coins are untouched."""
        reset = self.store.reset_voted_flags()
        logger.info("voting_reset", profiles=reset)
        return reset

    def award_mvp_points(self, first: str, second: str, third: str) -> Dict[int, int]:
        """
        Score every stored vote against the official podium and credit MVP points.

        Returns:
            Mapping of user_id → points awarded (users scoring zero are omitted)
        """
        podium = validate_podium(first, second, third)

        awarded: Dict[int, int] = {}
        for vote in self.list_votes():
            points = score_prediction(vote, podium)
            if points == 0:
                continue
            profile = self.store.get_profile(vote.user_id)
            self.store.update_profile(profile.id, mvp_points=profile.mvp_points + points)
            awarded[profile.id] = points

        logger.info("mvp_points_awarded", podium=list(podium), users=len(awarded))
        return awarded
