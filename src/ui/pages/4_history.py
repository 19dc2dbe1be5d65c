"""
History page - settled matches for the signed-in user, newest first.
"""

from typing import List

import streamlit as st

from src.services.view_models import HistoryEntry, history_entries
from src.ui.utils.formatters import (
    format_coins,
    format_odds,
    format_status_badge,
    format_utc_datetime,
)
from src.ui.utils.state_management import get_app_state, get_controller, render_notice

PAGE_TITLE = "History"
PAGE_ICON = ":material/history:"


def render_history(entries: List[HistoryEntry]) -> None:
    if not entries:
        st.info("No settled matches yet.")
        return

    for entry in entries:
        with st.expander(
            f"{entry.match_name} · won {format_coins(entry.total_won)}", expanded=False
        ):
            st.caption(format_utc_datetime(entry.created_at_utc))
            for line in entry.bets:
                st.markdown(
                    f"{format_status_badge(line.status)} :{line.color}[**{line.player}** · "
                    f"{line.prop} · {format_coins(line.amount)} at {format_odds(line.odds)}]"
                    + (f" → {format_coins(line.payout)}" if line.payout else "")
                )


def main() -> None:
    st.title(f"{PAGE_ICON} {PAGE_TITLE}")
    render_notice()

    state = get_app_state()
    if not state.signed_in:
        st.info("Sign in on the Account page to see your history.")
        return

    records = get_controller().store.list_history(state.profile.id)
    render_history(history_entries(records))


if __name__ == "__main__":
    main()
