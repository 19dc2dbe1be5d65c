"""Unit tests for the application state and intent handlers."""

from __future__ import annotations

import pytest

from src.core.exceptions import ValidationError
from src.core.seed_data import insert_admin_account
from src.domain.models import BetSlip, RoundPhase
from src.services.game_controller import AppState, GameController


@pytest.fixture
def controller(db) -> GameController:
    insert_admin_account(db, username="admin", password="admin-pass")
    db.commit()
    return GameController(db)


@pytest.fixture
def admin_state(controller: GameController) -> AppState:
    return controller.sign_in(AppState(), "admin", "admin-pass")


def test_sign_up_returns_signed_in_state(controller: GameController) -> None:
    state = controller.sign_up(AppState(), "alice", "secret1")

    assert state.signed_in is True
    assert state.profile.username == "alice"
    assert state.profile.total_coins == 100
    assert state.phase is RoundPhase.IDLE
    assert state.notice == "Welcome, alice!"


def test_handlers_do_not_mutate_the_input_state(controller: GameController) -> None:
    before = AppState()

    after = controller.sign_up(before, "alice", "secret1")

    assert before.profile is None
    assert after is not before


def test_sign_out_clears_profile(controller: GameController) -> None:
    state = controller.sign_up(AppState(), "alice", "secret1")

    state = controller.sign_out(state)

    assert state.signed_in is False
    assert controller.identity.current_session() is None


def test_player_intents_require_sign_in(controller: GameController) -> None:
    with pytest.raises(ValidationError, match="Sign in first"):
        controller.submit_vote(AppState(), "Alex", "Jordan", "Sam")


def test_admin_intents_reject_players(controller: GameController) -> None:
    state = controller.sign_up(AppState(), "alice", "secret1")

    with pytest.raises(ValidationError, match="Only the admin"):
        controller.start_match(state)
    assert controller.rounds.current_phase() is RoundPhase.IDLE


def test_admin_runs_the_round(controller: GameController, admin_state: AppState) -> None:
    assert admin_state.is_admin is True

    state = controller.start_match(admin_state)
    assert state.phase is RoundPhase.ACTIVE
    assert state.match_active is True

    state = controller.open_betting(state, 10)
    assert state.betting_open is True
    # the admin never receives a round allocation
    assert state.profile.available_coins == 0

    state = controller.close_betting(state)
    assert state.phase is RoundPhase.BETTING_CLOSED

    state = controller.end_match(state, lambda bet: True)
    assert state.phase is RoundPhase.IDLE
    assert state.last_settlement.is_noop is True


def test_place_bets_refreshes_balance_and_bets(controller: GameController, admin_state: AppState) -> None:
    player = controller.sign_up(AppState(), "alice", "secret1")
    controller.sign_in(AppState(), "admin", "admin-pass")
    controller.open_betting(controller.start_match(admin_state), 10)
    player = controller.sign_in(player, "alice", "secret1")

    player = controller.place_bets(player, [BetSlip("Sam", "Goal", 4)])

    assert player.profile.available_coins == 6
    assert [bet.amount for bet in player.bets] == [4]
    assert player.notice == "Placed 1 bet(s)"


def test_submit_vote_sets_voted(controller: GameController) -> None:
    state = controller.sign_up(AppState(), "alice", "secret1")

    state = controller.submit_vote(state, "Alex", "Jordan", "Sam")

    assert state.profile.voted is True
    assert state.notice == "Vote submitted"
