"""
Leaderboard page - players ranked by banked coins, with MVP points.
"""

from dataclasses import asdict

import streamlit as st

from src.services.game_controller import GameController
from src.services.view_models import leaderboard_rows
from src.ui.utils.state_management import get_controller, render_notice

PAGE_TITLE = "Leaderboard"
PAGE_ICON = ":material/leaderboard:"


def render_leaderboard(controller: GameController) -> None:
    rows = leaderboard_rows(controller.store.list_profiles(non_admin_only=True))
    if not rows:
        st.info("No players registered yet.")
        return

    st.dataframe(
        [asdict(row) for row in rows],
        hide_index=True,
        column_config={
            "rank": "#",
            "username": "Player",
            "total_coins": "Banked",
            "available_coins": "Available",
            "mvp_points": "MVP points",
            "voted": st.column_config.CheckboxColumn("Voted"),
        },
    )


def main() -> None:
    st.title(f"{PAGE_ICON} {PAGE_TITLE}")
    render_notice()
    render_leaderboard(get_controller())


if __name__ == "__main__":
    main()
