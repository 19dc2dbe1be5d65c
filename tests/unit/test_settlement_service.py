"""Unit tests for match settlement."""

from __future__ import annotations

import pytest

from src.core.exceptions import BackendError, ValidationError
from src.domain.models import RoundPhase
from src.repositories.ledger_store import LedgerStore
from src.services.round_state_service import RoundStateService
from src.services.settlement_service import (
    SettlementService,
    calculate_payout,
    outcomes_resolver,
)


@pytest.fixture
def service(store: LedgerStore, rounds: RoundStateService) -> SettlementService:
    return SettlementService(store, rounds)


@pytest.mark.parametrize(
    "amount, odds, expected",
    [(5, 4, 20), (3, 2.5, 8), (1, 1.5, 2), (2, 1.25, 3), (7, 1.0, 7)],
)
def test_calculate_payout_rounds_half_up(amount, odds, expected) -> None:
    assert calculate_payout(amount, odds) == expected


def test_outcomes_resolver_rejects_unknown_bets(store, make_profile) -> None:
    user = make_profile("alice")
    bet = store.insert_bet(user.id, "Sam", "Goal", 5, 4, "current")
    resolve = outcomes_resolver({})

    with pytest.raises(ValidationError, match=f"bet {bet.id}"):
        resolve(bet)


class TestEndMatch:
    def test_winning_bet_pays_stake_times_odds(self, service, store, make_profile) -> None:
        user = make_profile("alice", total_coins=90)
        bet = store.insert_bet(user.id, "Sam", "Goal", 5, 4, "current")

        result = service.end_match(lambda b: True)

        assert store.get_profile(user.id).total_coins == 110
        stored = store.get_bet(bet.id)
        assert stored.resolved is True
        assert stored.won is True
        history = store.list_history(user.id)
        assert len(history) == 1
        assert history[0].match_name == "Match 1"
        assert history[0].bets_data[0]["won"] is True
        assert result.total_winnings == 20
        assert result.bets_resolved == 1

    def test_losing_bets_pay_nothing(self, service, store, make_profile) -> None:
        user = make_profile("alice", total_coins=90)
        store.insert_bet(user.id, "Sam", "Goal", 5, 4, "current")

        result = service.end_match(lambda b: False)

        assert store.get_profile(user.id).total_coins == 90
        assert result.users[0].winnings == 0
        assert store.list_history(user.id)[0].bets_data[0]["won"] is False

    def test_rerun_is_a_noop(self, service, store, make_profile) -> None:
        user = make_profile("alice", total_coins=90)
        store.insert_bet(user.id, "Sam", "Goal", 5, 4, "current")
        service.end_match(lambda b: True)

        result = service.end_match(lambda b: True)

        assert result.is_noop is True
        assert store.get_profile(user.id).total_coins == 110
        assert store.count_history(user.id) == 1

    def test_history_label_counts_previous_matches(self, service, store, make_profile) -> None:
        user = make_profile("alice")
        store.insert_bet(user.id, "Sam", "Goal", 1, 4, "current")
        service.end_match(lambda b: False)
        store.insert_bet(user.id, "Alex", "Goal", 1, 4, "current")

        service.end_match(lambda b: True)

        assert [r.match_name for r in store.list_history(user.id)] == ["Match 2", "Match 1"]

    def test_users_without_bets_get_no_history(self, service, store, make_profile) -> None:
        bettor = make_profile("bettor")
        idle = make_profile("idle")
        store.insert_bet(bettor.id, "Sam", "Goal", 2, 4, "current")

        result = service.end_match(lambda b: True)

        assert [user.user_id for user in result.users] == [bettor.id]
        assert store.list_history(idle.id) == []

    def test_end_match_forfeits_allocations_and_resets_round(
        self, service, store, rounds, set_phase, make_profile
    ) -> None:
        user = make_profile("alice", available_coins=3)
        store.update_profile(user.id, voted=True)
        set_phase(RoundPhase.BETTING_CLOSED)

        service.end_match(lambda b: True)

        after = store.get_profile(user.id)
        assert after.voted is False
        assert after.available_coins == 0
        assert rounds.current_phase() is RoundPhase.IDLE

    def test_missing_outcome_writes_nothing(self, service, store, rounds, set_phase, make_profile) -> None:
        user = make_profile("alice", total_coins=90, available_coins=2)
        won = store.insert_bet(user.id, "Sam", "Goal", 5, 4, "current")
        late = store.insert_bet(user.id, "Alex", "Assist", 3, 4, "current")
        set_phase(RoundPhase.BETTING_CLOSED)

        with pytest.raises(ValidationError, match=f"bet {late.id}"):
            service.end_match(outcomes_resolver({won.id: True}))

        assert store.get_bet(won.id).resolved is False
        after = store.get_profile(user.id)
        assert (after.total_coins, after.available_coins) == (90, 2)
        assert store.list_history(user.id) == []
        assert rounds.current_phase() is RoundPhase.BETTING_CLOSED

    def test_rerun_after_missing_outcome_pays_every_win(self, service, store, make_profile) -> None:
        user = make_profile("alice", total_coins=90)
        won = store.insert_bet(user.id, "Sam", "Goal", 5, 4, "current")
        late = store.insert_bet(user.id, "Alex", "Assist", 3, 4, "current")
        with pytest.raises(ValidationError):
            service.end_match(outcomes_resolver({won.id: True}))

        service.end_match(outcomes_resolver({won.id: True, late.id: False}))

        assert store.get_profile(user.id).total_coins == 110
        (record,) = store.list_history(user.id)
        assert [(bet["id"], bet["won"]) for bet in record.bets_data] == [(won.id, True), (late.id, False)]

    def test_store_failure_rolls_back_that_users_bets(self, service, store, make_profile, monkeypatch) -> None:
        user = make_profile("alice", total_coins=90)
        bet = store.insert_bet(user.id, "Sam", "Goal", 5, 4, "current")

        def fail_history(*args, **kwargs):
            raise BackendError("history write failed")

        monkeypatch.setattr(store, "append_history", fail_history)

        with pytest.raises(BackendError):
            service.end_match(lambda b: True)

        assert store.get_bet(bet.id).resolved is False
        assert store.get_profile(user.id).total_coins == 90

    def test_resolver_sees_each_open_bet_once(self, service, store, make_profile) -> None:
        alice = make_profile("alice")
        bob = make_profile("bob")
        first = store.insert_bet(alice.id, "Sam", "Goal", 1, 4, "current")
        second = store.insert_bet(bob.id, "Sam", "Goal", 2, 4, "current")
        third = store.insert_bet(alice.id, "Alex", "Assist", 3, 4, "current")
        seen = []

        def resolve(bet):
            seen.append(bet.id)
            return bet.id == third.id

        result = service.end_match(resolve)

        assert sorted(seen) == [first.id, second.id, third.id]
        winnings = {user.user_id: user.winnings for user in result.users}
        assert winnings == {alice.id: 12, bob.id: 0}


class TestPreview:
    def test_preview_does_not_write(self, service, store, make_profile) -> None:
        user = make_profile("alice", total_coins=90)
        win = store.insert_bet(user.id, "Sam", "Goal", 5, 4, "current")
        loss = store.insert_bet(user.id, "Alex", "Goal", 2, 4, "current")

        preview = service.preview_settlement({win.id: True, loss.id: False})

        assert preview.per_user_winnings == {user.id: 20}
        assert preview.missing_bet_ids == []
        assert preview.total_winnings == 20
        assert store.get_profile(user.id).total_coins == 90
        assert len(service.open_bets()) == 2

    def test_preview_reports_missing_outcomes(self, service, store, make_profile) -> None:
        user = make_profile("alice")
        bet = store.insert_bet(user.id, "Sam", "Goal", 5, 4, "current")

        preview = service.preview_settlement({})

        assert preview.missing_bet_ids == [bet.id]
        assert preview.per_user_winnings == {}
