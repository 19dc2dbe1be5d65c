"""
Bets page - place prop bets with available coins and track their status.

Bets can only be placed while the betting round is open. Each stake leaves
available_coins immediately; winning bets pay stake × odds at settlement.
"""

from typing import List

import streamlit as st

from src.core.config import Config
from src.domain.models import BetSlip
from src.services.game_controller import AppState, GameController
from src.services.view_models import BetRow, bet_rows
from src.ui.utils.formatters import (
    format_coins,
    format_odds,
    format_phase,
    format_status_badge,
)
from src.ui.utils.state_management import (
    get_app_state,
    get_controller,
    render_notice,
    run_intent,
)

PAGE_TITLE = "Bets"
PAGE_ICON = ":material/casino:"


def render_bet_form(controller: GameController, state: AppState) -> None:
    available = state.profile.available_coins
    st.metric("Available to bet", format_coins(available))

    if available <= 0:
        st.info("You have no coins available for this round.")
        return

    with st.form("bet_form"):
        player = st.selectbox("Player", Config.PLAYER_ROSTER, key="bet_player")
        prop = st.selectbox("Proposition", Config.PROP_CATALOGUE, key="bet_prop")
        amount = st.number_input(
            "Stake",
            min_value=1,
            max_value=max(available, 1),
            value=1,
            step=1,
            key="bet_amount",
        )
        st.caption(f"Odds {format_odds(Config.DEFAULT_ODDS)}")
        submitted = st.form_submit_button("Place bet", type="primary")

    if submitted:
        slip = BetSlip(player=player, prop=prop, amount=int(amount))
        run_intent(controller.place_bets, [slip])


def render_bet_rows(rows: List[BetRow]) -> None:
    st.subheader("Your open bets")
    if not rows:
        st.caption("No open bets. Settled bets are listed on the History page.")
        return

    for row in rows:
        st.markdown(
            f"{format_status_badge(row.status)} **{row.player}** · {row.prop} · "
            f"{format_coins(row.amount)} at {format_odds(row.odds)} "
            f"(pays {format_coins(row.potential_payout)})"
        )


def main() -> None:
    st.title(f"{PAGE_ICON} {PAGE_TITLE}")
    render_notice()

    controller = get_controller()
    state = get_app_state()

    if not state.signed_in:
        st.info("Sign in on the Account page to place bets.")
        return

    st.caption(format_phase(state.phase))
    if state.betting_open:
        render_bet_form(controller, state)
    else:
        st.info("Betting round is closed.")

    render_bet_rows(bet_rows(state.bets))


if __name__ == "__main__":
    main()
