"""
View-model builders consumed read-only by the presentation layer.

Each function turns domain records into plain dataclasses so a renderer
(Streamlit, CLI, tests) never touches the store directly.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Sequence

from src.domain.models import Bet, BetHistoryRecord, UserProfile
from src.services.settlement_service import calculate_payout
from src.services.voting_service import PlayerScore

WIN_COLOR = "green"
LOSS_COLOR = "red"
OPEN_COLOR = "gray"


@dataclass(frozen=True)
class LeaderboardRow:
    rank: int
    username: str
    total_coins: int
    available_coins: int
    mvp_points: int
    voted: bool


@dataclass(frozen=True)
class MvpRow:
    rank: int
    player: str
    points: int


@dataclass(frozen=True)
class BetRow:
    bet_id: int
    player: str
    prop: str
    amount: int
    odds: float
    status: str
    color: str
    potential_payout: int


@dataclass(frozen=True)
class HistoryBetLine:
    player: str
    prop: str
    amount: int
    odds: float
    status: str
    color: str
    payout: int


@dataclass(frozen=True)
class HistoryEntry:
    match_name: str
    created_at_utc: str
    bets: List[HistoryBetLine]
    total_won: int


def profile_summary(profile: UserProfile) -> str:
    """One-line balance summary shown in the header."""
    summary = (
        f"{profile.username} · {profile.total_coins} coins banked · "
        f"{profile.available_coins} available"
    )
    if profile.is_admin:
        summary += " · admin"
    return summary


def leaderboard_rows(profiles: Iterable[UserProfile]) -> List[LeaderboardRow]:
    """Non-admin players ranked by banked coins; ties keep input order."""
    players = [profile for profile in profiles if not profile.is_admin]
    ranked = sorted(players, key=lambda profile: profile.total_coins, reverse=True)
    return [
        LeaderboardRow(
            rank=index,
            username=profile.username,
            total_coins=profile.total_coins,
            available_coins=profile.available_coins,
            mvp_points=profile.mvp_points,
            voted=profile.voted,
        )
        for index, profile in enumerate(ranked, start=1)
    ]


def mvp_rows(tally: Sequence[PlayerScore]) -> List[MvpRow]:
    return [
        MvpRow(rank=index, player=score.player, points=score.points)
        for index, score in enumerate(tally, start=1)
    ]


def bet_rows(bets: Iterable[Bet]) -> List[BetRow]:
    """Rows for a user's bets in the current match."""
    rows = []
    for bet in bets:
        if not bet.resolved:
            status, color = "open", OPEN_COLOR
        elif bet.won:
            status, color = "won", WIN_COLOR
        else:
            status, color = "lost", LOSS_COLOR
        rows.append(
            BetRow(
                bet_id=bet.id,
                player=bet.player,
                prop=bet.prop,
                amount=bet.amount,
                odds=bet.odds,
                status=status,
                color=color,
                potential_payout=calculate_payout(bet.amount, bet.odds),
            )
        )
    return rows


def history_entries(records: Iterable[BetHistoryRecord]) -> List[HistoryEntry]:
    """History entries with each bet colour-coded green (won) or red (lost)."""
    entries = []
    for record in records:
        lines = []
        for snapshot in record.bets_data:
            won = bool(snapshot.get("won"))
            amount = int(snapshot.get("amount", 0))
            odds = float(snapshot.get("odds", 0))
            payout = calculate_payout(amount, odds) if won else 0
            lines.append(
                HistoryBetLine(
                    player=snapshot.get("player", ""),
                    prop=snapshot.get("prop", ""),
                    amount=amount,
                    odds=odds,
                    status="won" if won else "lost",
                    color=WIN_COLOR if won else LOSS_COLOR,
                    payout=payout,
                )
            )
        entries.append(
            HistoryEntry(
                match_name=record.match_name,
                created_at_utc=record.created_at_utc or "",
                bets=lines,
                total_won=sum(line.payout for line in lines),
            )
        )
    return entries
