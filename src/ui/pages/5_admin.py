"""
Admin Console - run the match round and settle open bets.

Round flow: start match → open betting (distributes coins) → close betting
(forfeits unspent coins) → end match (settles every open bet with the
outcomes marked below, writes history and returns the round to idle).
"""

from typing import Dict, List

import streamlit as st

from src.core.config import Config
from src.domain.models import Bet
from src.services.game_controller import AppState, GameController
from src.services.settlement_service import SettlementResult, outcomes_resolver
from src.ui.utils.formatters import format_coins, format_odds, format_phase
from src.ui.utils.state_management import (
    get_app_state,
    get_controller,
    render_notice,
    run_intent,
)

PAGE_TITLE = "Admin Console"
PAGE_ICON = ":material/admin_panel_settings:"

OUTCOME_OPTIONS = ("Lost", "Won")


def render_round_controls(controller: GameController, state: AppState) -> None:
    st.subheader("Round")
    st.caption(f"Current phase: {format_phase(state.phase)}")

    col1, col2, col3 = st.columns(3)
    with col1:
        if st.button("Start match", key="form_start_match"):
            run_intent(controller.start_match)
        if st.button("Reset voting", key="form_reset_voting"):
            run_intent(controller.reset_voting)
    with col2:
        amount = st.number_input(
            "Coins per player",
            min_value=1,
            value=Config.DEFAULT_DISTRIBUTION,
            step=1,
            key="form_distribution_amount",
        )
        if st.button("Open betting", key="form_open_betting", type="primary"):
            run_intent(controller.open_betting, int(amount))
    with col3:
        if st.button("Close betting", key="form_close_betting"):
            run_intent(controller.close_betting)


def render_mvp_award(controller: GameController) -> None:
    st.subheader("Official MVP podium")
    players = controller.voting.players
    with st.form("form_mvp_award"):
        first = st.selectbox("1st place", players, index=0)
        second = st.selectbox("2nd place", players, index=min(1, len(players) - 1))
        third = st.selectbox("3rd place", players, index=min(2, len(players) - 1))
        submitted = st.form_submit_button("Award MVP points")

    if submitted:
        run_intent(controller.award_mvp_points, first, second, third)


def collect_outcomes(bets: List[Bet], usernames: Dict[int, str]) -> Dict[int, bool]:
    """Render a won/lost choice for every open bet and return bet_id → won."""
    outcomes: Dict[int, bool] = {}
    for bet in bets:
        label = (
            f"#{bet.id} {usernames.get(bet.user_id, bet.user_id)}: {bet.player} · {bet.prop} · "
            f"{format_coins(bet.amount)} at {format_odds(bet.odds)}"
        )
        choice = st.radio(
            label, OUTCOME_OPTIONS, horizontal=True, key=f"settle_bet_{bet.id}"
        )
        outcomes[bet.id] = choice == "Won"
    return outcomes


def render_settlement(controller: GameController) -> None:
    st.subheader("Settle match")
    bets = controller.settlement.open_bets()
    usernames = {profile.id: profile.username for profile in controller.store.list_profiles()}

    if not bets:
        st.caption("No open bets. Ending the match forfeits unspent coins and resets the round.")
        outcomes: Dict[int, bool] = {}
    else:
        outcomes = collect_outcomes(bets, usernames)
        preview = controller.settlement.preview_settlement(outcomes)
        st.markdown(f"**Preview:** {format_coins(preview.total_winnings)} paid out")
        for user_id, winnings in preview.per_user_winnings.items():
            st.caption(f"{usernames.get(user_id, user_id)}: +{format_coins(winnings)}")

    confirmed = st.checkbox("I have checked every outcome", key="settle_confirm")
    if st.button("End match", key="settle_end_match", type="primary", disabled=not confirmed):
        run_intent(controller.end_match, outcomes_resolver(outcomes))


def render_last_settlement(result: SettlementResult) -> None:
    with st.expander("Last settlement", expanded=True):
        if result.is_noop:
            st.caption("No bets were open.")
            return
        for user in result.users:
            st.markdown(
                f"**{user.username}** · {len(user.resolved_bets)} bets · "
                f"+{format_coins(user.winnings)} · {user.history_record.match_name}"
            )


def main() -> None:
    st.title(f"{PAGE_ICON} {PAGE_TITLE}")
    render_notice()

    controller = get_controller()
    state = get_app_state()

    if not state.is_admin:
        st.warning("Admin access required.")
        return

    render_round_controls(controller, state)
    st.divider()
    render_mvp_award(controller)
    st.divider()
    render_settlement(controller)

    if state.last_settlement is not None:
        render_last_settlement(state.last_settlement)


if __name__ == "__main__":
    main()
