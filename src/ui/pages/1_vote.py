"""
MVP Vote page - pick the match podium and follow the live tally.
"""

from dataclasses import asdict
from typing import Optional, Sequence

import streamlit as st

from src.domain.models import Vote
from src.services.game_controller import AppState, GameController
from src.services.view_models import mvp_rows
from src.ui.utils.state_management import (
    get_app_state,
    get_controller,
    render_notice,
    run_intent,
)

PAGE_TITLE = "MVP Vote"
PAGE_ICON = ":material/how_to_vote:"


def _default_index(players: Sequence[str], pick: Optional[str], fallback: int) -> int:
    if pick in players:
        return list(players).index(pick)
    return min(fallback, len(players) - 1)


def render_vote_form(controller: GameController, state: AppState) -> None:
    players = controller.voting.players
    existing: Optional[Vote] = controller.store.get_vote(
        state.profile.id, controller.voting.match_id
    )
    picks = existing.picks if existing else (None, None, None)

    if existing:
        st.caption(
            f"Your current vote: 1st {existing.first_place} · 2nd {existing.second_place} "
            f"· 3rd {existing.third_place}. Submitting again replaces it."
        )

    with st.form("vote_form"):
        first = st.selectbox("1st place (5 pts)", players, index=_default_index(players, picks[0], 0))
        second = st.selectbox("2nd place (3 pts)", players, index=_default_index(players, picks[1], 1))
        third = st.selectbox("3rd place (2 pts)", players, index=_default_index(players, picks[2], 2))
        submitted = st.form_submit_button("Submit vote", type="primary")

    if submitted:
        run_intent(controller.submit_vote, first, second, third)


def render_tally(controller: GameController) -> None:
    st.subheader("Live tally")
    rows = mvp_rows(controller.voting.tally())
    st.dataframe([asdict(row) for row in rows], hide_index=True)


def main() -> None:
    st.title(f"{PAGE_ICON} {PAGE_TITLE}")
    render_notice()

    controller = get_controller()
    state = get_app_state()

    if not state.signed_in:
        st.info("Sign in on the Account page to vote.")
        return

    if not state.match_active:
        st.info("No match is running. Votes count toward the next match once the admin starts it.")

    render_vote_form(controller, state)
    render_tally(controller)


if __name__ == "__main__":
    main()
