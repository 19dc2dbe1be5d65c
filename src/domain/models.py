"""
Domain records for MVP Arena.

Repositories return these frozen dataclasses; services compute the next write
from them and never mutate them in place.
"""

from __future__ import annotations

import json
import sqlite3
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional


class RoundPhase(Enum):
    """Phases of a match round."""

    IDLE = "IDLE"
    ACTIVE = "ACTIVE"
    BETTING_OPEN = "BETTING_OPEN"
    BETTING_CLOSED = "BETTING_CLOSED"

    @property
    def match_active(self) -> bool:
        return self is not RoundPhase.IDLE

    @property
    def betting_open(self) -> bool:
        return self is RoundPhase.BETTING_OPEN


@dataclass(frozen=True)
class UserProfile:
    """
    A player's profile and coin balances.

    Attributes:
        id: Profile ID (shared with the credential)
        username: Unique display name
        total_coins: Banked coins
        available_coins: Coins allocated for the open betting round
        mvp_points: Points earned from MVP predictions
        is_admin: Whether the user runs the match
        voted: Whether the user voted in the current round
    """

    id: int
    username: str
    total_coins: int
    available_coins: int
    mvp_points: int = 0
    is_admin: bool = False
    voted: bool = False
    created_at_utc: Optional[str] = None
    updated_at_utc: Optional[str] = None

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "UserProfile":
        return cls(
            id=row["id"],
            username=row["username"],
            total_coins=int(row["total_coins"]),
            available_coins=int(row["available_coins"]),
            mvp_points=int(row["mvp_points"]),
            is_admin=bool(row["is_admin"]),
            voted=bool(row["voted"]),
            created_at_utc=row["created_at_utc"],
            updated_at_utc=row["updated_at_utc"],
        )


@dataclass(frozen=True)
class Vote:
    """A user's MVP podium vote for one match."""

    user_id: int
    first_place: str
    second_place: str
    third_place: str
    match_id: str
    id: Optional[int] = None
    created_at_utc: Optional[str] = None

    @property
    def picks(self) -> List[str]:
        return [self.first_place, self.second_place, self.third_place]

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "Vote":
        return cls(
            id=row["id"],
            user_id=row["user_id"],
            first_place=row["first_place"],
            second_place=row["second_place"],
            third_place=row["third_place"],
            match_id=row["match_id"],
            created_at_utc=row["created_at_utc"],
        )


@dataclass(frozen=True)
class Bet:
    """
    A prop bet on a player.

    ``won`` is meaningful only once ``resolved`` is True.
    """

    id: int
    user_id: int
    player: str
    prop: str
    amount: int
    odds: float
    resolved: bool = False
    won: bool = False
    match_id: str = "current"
    created_at_utc: Optional[str] = None

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "Bet":
        return cls(
            id=row["id"],
            user_id=row["user_id"],
            player=row["player"],
            prop=row["prop"],
            amount=int(row["amount"]),
            odds=float(row["odds"]),
            resolved=bool(row["resolved"]),
            won=bool(row["won"]),
            match_id=row["match_id"],
            created_at_utc=row["created_at_utc"],
        )

    def to_snapshot(self) -> Dict[str, Any]:
        """Serialisable form stored in history records."""
        return {
            "id": self.id,
            "player": self.player,
            "prop": self.prop,
            "amount": self.amount,
            "odds": self.odds,
            "won": self.won,
        }


@dataclass(frozen=True)
class BetHistoryRecord:
    """Append-only snapshot of one user's settled bets for a match."""

    id: int
    user_id: int
    match_name: str
    bets_data: List[Dict[str, Any]]
    created_at_utc: Optional[str] = None

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "BetHistoryRecord":
        return cls(
            id=row["id"],
            user_id=row["user_id"],
            match_name=row["match_name"],
            bets_data=json.loads(row["bets_data"]),
            created_at_utc=row["created_at_utc"],
        )


@dataclass(frozen=True)
class BetSlip:
    """A bet the user intends to place; not yet persisted."""

    player: str
    prop: str
    amount: int
    odds: Optional[float] = None

