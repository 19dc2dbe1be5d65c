"""Unit tests for MVP votes, the tally and prediction points."""

from __future__ import annotations

import pytest

from src.core.exceptions import ValidationError
from src.domain.models import Vote
from src.repositories.ledger_store import LedgerStore
from src.services.voting_service import (
    PlayerScore,
    VotingService,
    score_prediction,
    tally_votes,
    validate_podium,
)


def _vote(first: str, second: str, third: str, user_id: int = 1) -> Vote:
    return Vote(user_id=user_id, first_place=first, second_place=second, third_place=third, match_id="current")


@pytest.fixture
def service(store: LedgerStore) -> VotingService:
    return VotingService(store, players=["A", "B", "C", "D"])


class TestTally:
    def test_tied_players_keep_roster_order(self) -> None:
        result = tally_votes([_vote("A", "B", "C"), _vote("B", "A", "C")], ["A", "B", "C", "D"])

        assert result == [
            PlayerScore("A", 8),
            PlayerScore("B", 8),
            PlayerScore("C", 4),
            PlayerScore("D", 0),
        ]

    def test_roster_order_breaks_ties_even_when_reversed(self) -> None:
        result = tally_votes([_vote("A", "B", "C"), _vote("B", "A", "C")], ["B", "A", "C"])

        assert [score.player for score in result] == ["B", "A", "C"]

    def test_no_votes_lists_every_player_at_zero(self) -> None:
        result = tally_votes([], ["A", "B"])

        assert result == [PlayerScore("A", 0), PlayerScore("B", 0)]

    def test_unknown_players_are_appended(self) -> None:
        result = tally_votes([_vote("Z", "A", "B")], ["A", "B"])

        assert result == [PlayerScore("Z", 5), PlayerScore("A", 3), PlayerScore("B", 2)]


class TestPodium:
    def test_validate_podium_strips_names(self) -> None:
        assert validate_podium(" A", "B ", "C") == ("A", "B", "C")

    @pytest.mark.parametrize(
        "picks",
        [("A", "A", "B"), ("A", "B", "A"), ("A", "B", "B"), ("A", "", "B"), ("A", " B", "B ")],
    )
    def test_validate_podium_rejects_blank_or_repeated(self, picks) -> None:
        with pytest.raises(ValidationError):
            validate_podium(*picks)

    def test_score_prediction_counts_exact_slots_only(self) -> None:
        podium = ("A", "B", "C")

        assert score_prediction(_vote("A", "B", "C"), podium) == 10
        assert score_prediction(_vote("A", "C", "B"), podium) == 5
        assert score_prediction(_vote("B", "A", "C"), podium) == 2
        assert score_prediction(_vote("C", "A", "B"), podium) == 0


class TestVotingService:
    def test_submit_vote_marks_user_as_voted(self, service, store, make_profile) -> None:
        user = make_profile("alice")

        vote, updated = service.submit_vote(user, "A", "B", "C")

        assert vote.picks == ["A", "B", "C"]
        assert updated.voted is True
        assert store.get_profile(user.id).voted is True

    def test_resubmission_replaces_vote(self, service, make_profile) -> None:
        user = make_profile("alice")

        service.submit_vote(user, "A", "B", "C")
        service.submit_vote(user, "D", "C", "B")

        votes = service.list_votes()
        assert len(votes) == 1
        assert votes[0].picks == ["D", "C", "B"]

    def test_duplicate_picks_write_nothing(self, service, store, make_profile) -> None:
        user = make_profile("alice")

        with pytest.raises(ValidationError):
            service.submit_vote(user, "A", "A", "B")

        assert service.list_votes() == []
        assert store.get_profile(user.id).voted is False

    def test_tally_uses_stored_votes(self, service, make_profile) -> None:
        alice = make_profile("alice")
        bob = make_profile("bob")
        service.submit_vote(alice, "A", "B", "C")
        service.submit_vote(bob, "B", "A", "C")

        assert [(s.player, s.points) for s in service.tally()] == [
            ("A", 8),
            ("B", 8),
            ("C", 4),
            ("D", 0),
        ]

    def test_reset_voting_clears_flags_but_keeps_votes(self, service, store, make_profile) -> None:
        user = make_profile("alice")
        service.submit_vote(user, "A", "B", "C")

        service.reset_voting()

        assert store.get_profile(user.id).voted is False
        assert len(service.list_votes()) == 1

    def test_award_mvp_points(self, service, store, make_profile) -> None:
        alice = make_profile("alice")
        bob = make_profile("bob")
        carol = make_profile("carol")
        service.submit_vote(alice, "A", "B", "C")
        service.submit_vote(bob, "A", "C", "B")
        service.submit_vote(carol, "D", "C", "B")

        awarded = service.award_mvp_points("A", "B", "C")

        assert awarded == {alice.id: 10, bob.id: 5}
        assert store.get_profile(alice.id).mvp_points == 10
        assert store.get_profile(bob.id).mvp_points == 5
        assert store.get_profile(carol.id).mvp_points == 0

    def test_award_mvp_points_rejects_repeated_podium(self, service, make_profile) -> None:
        with pytest.raises(ValidationError):
            service.award_mvp_points("A", "A", "B")
