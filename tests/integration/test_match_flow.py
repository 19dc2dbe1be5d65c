"""
Integration tests for a full match round.

Covers the complete flow against a real SQLite schema:
- Registration, voting and the live tally
- Coin distribution and bet placement
- Closing betting, settlement, history and MVP points
"""

from __future__ import annotations

import pytest

from src.core.exceptions import ValidationError
from src.core.seed_data import insert_admin_account
from src.domain.models import BetSlip, RoundPhase
from src.services.game_controller import AppState, GameController
from src.services.settlement_service import outcomes_resolver
from src.services.view_models import history_entries, leaderboard_rows


@pytest.fixture
def controller(db) -> GameController:
    insert_admin_account(db, username="admin", password="admin-pass")
    db.commit()
    return GameController(db)


def _sign_in(controller: GameController, username: str, password: str) -> AppState:
    return controller.sign_in(AppState(), username, password)


def test_full_match_round(controller: GameController) -> None:
    alice = controller.sign_up(AppState(), "alice", "alice-pass")
    bob = controller.sign_up(AppState(), "bob", "bob-pass")

    admin = _sign_in(controller, "admin", "admin-pass")
    admin = controller.start_match(admin)

    alice = controller.submit_vote(_sign_in(controller, "alice", "alice-pass"), "Alex", "Jordan", "Sam")
    bob = controller.submit_vote(_sign_in(controller, "bob", "bob-pass"), "Jordan", "Alex", "Sam")

    tally = controller.voting.tally()
    assert [(s.player, s.points) for s in tally[:3]] == [("Alex", 8), ("Jordan", 8), ("Sam", 4)]

    admin = controller.open_betting(_sign_in(controller, "admin", "admin-pass"), 10)
    assert admin.phase is RoundPhase.BETTING_OPEN

    alice = _sign_in(controller, "alice", "alice-pass")
    assert (alice.profile.total_coins, alice.profile.available_coins) == (90, 10)
    alice = controller.place_bets(alice, [BetSlip("Sam", "Goal", 5), BetSlip("Alex", "Assist", 3)])

    bob = _sign_in(controller, "bob", "bob-pass")
    bob = controller.place_bets(bob, [BetSlip("Jordan", "Goal", 10)])
    assert bob.profile.available_coins == 0

    with pytest.raises(ValidationError):
        controller.place_bets(bob, [BetSlip("Jordan", "Assist", 1)])

    admin = controller.close_betting(_sign_in(controller, "admin", "admin-pass"))
    # alice state predates the close and still shows 2 coins available
    with pytest.raises(ValidationError, match="Betting round is closed"):
        controller.place_bets(alice, [BetSlip("Sam", "Goal", 1)])

    alice_after_close = controller.store.get_profile(alice.profile.id)
    assert alice_after_close.available_coins == 0
    assert alice_after_close.total_coins == 90

    open_bets = controller.settlement.open_bets()
    outcomes = {bet.id: bet.player == "Sam" for bet in open_bets}
    preview = controller.settlement.preview_settlement(outcomes)
    assert preview.per_user_winnings == {alice.profile.id: 20, bob.profile.id: 0}

    admin = controller.end_match(_sign_in(controller, "admin", "admin-pass"), outcomes_resolver(outcomes))
    assert admin.phase is RoundPhase.IDLE
    assert admin.last_settlement.total_winnings == 20

    alice_profile = controller.store.get_profile(alice.profile.id)
    bob_profile = controller.store.get_profile(bob.profile.id)
    assert alice_profile.total_coins == 110
    assert bob_profile.total_coins == 90
    assert alice_profile.voted is False

    (entry,) = history_entries(controller.store.list_history(alice.profile.id))
    assert entry.match_name == "Match 1"
    assert [line.color for line in entry.bets] == ["green", "red"]

    rows = leaderboard_rows(controller.store.list_profiles())
    assert [row.username for row in rows] == ["alice", "bob"]

    controller.award_mvp_points(admin, "Alex", "Jordan", "Sam")
    assert controller.store.get_profile(alice.profile.id).mvp_points == 10
    assert controller.store.get_profile(bob.profile.id).mvp_points == 2


def test_end_match_twice_changes_nothing(controller: GameController) -> None:
    alice = controller.sign_up(AppState(), "alice", "alice-pass")
    admin = _sign_in(controller, "admin", "admin-pass")
    admin = controller.open_betting(controller.start_match(admin), 10)

    alice = controller.place_bets(_sign_in(controller, "alice", "alice-pass"), [BetSlip("Sam", "Goal", 5)])
    admin = _sign_in(controller, "admin", "admin-pass")
    controller.end_match(admin, lambda bet: True)

    second = controller.end_match(admin, lambda bet: True)

    assert second.last_settlement.is_noop is True
    assert controller.store.get_profile(alice.profile.id).total_coins == 110
    assert controller.store.count_history(alice.profile.id) == 1


def test_second_round_distribution_starts_from_settled_bank(controller: GameController) -> None:
    alice = controller.sign_up(AppState(), "alice", "alice-pass")
    admin = _sign_in(controller, "admin", "admin-pass")

    controller.open_betting(controller.start_match(admin), 10)
    controller.close_betting(admin)
    controller.end_match(admin, lambda bet: True)

    controller.open_betting(controller.start_match(admin), 10)

    profile = controller.store.get_profile(alice.profile.id)
    assert (profile.total_coins, profile.available_coins) == (80, 10)
