"""
MVP Arena - Streamlit shell.

Pages are defined declaratively and grouped into sections for Streamlit's
navigation API.
"""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass
from typing import List, Sequence

import streamlit as st

from src.services.view_models import profile_summary
from src.ui.utils.formatters import format_phase
from src.ui.utils.state_management import get_app_state, get_controller, set_app_state

# Configure app-wide layout and theme once.
st.set_page_config(
    page_title="MVP Arena",
    page_icon=":material/sports_soccer:",
    layout="wide",
    initial_sidebar_state="expanded",
)


@dataclass(frozen=True)
class PageSpec:
    """Metadata describing a Streamlit page."""

    title: str
    section: str
    script: str
    icon: str = ":material/article:"

    def to_navigation_page(self) -> "st.Page":
        return st.Page(self.script, title=self.title, icon=self.icon)


def _group_by_section(pages: Sequence[PageSpec]) -> "OrderedDict[str, List[PageSpec]]":
    grouped: "OrderedDict[str, List[PageSpec]]" = OrderedDict()
    for page in pages:
        grouped.setdefault(page.section, []).append(page)
    return grouped


PAGE_REGISTRY: Sequence[PageSpec] = (
    PageSpec(
        title="Account",
        section="Play",
        icon=":material/person:",
        script="pages/0_account.py",
    ),
    PageSpec(
        title="MVP Vote",
        section="Play",
        icon=":material/how_to_vote:",
        script="pages/1_vote.py",
    ),
    PageSpec(
        title="Bets",
        section="Play",
        icon=":material/casino:",
        script="pages/2_bets.py",
    ),
    PageSpec(
        title="Leaderboard",
        section="Standings",
        icon=":material/leaderboard:",
        script="pages/3_leaderboard.py",
    ),
    PageSpec(
        title="History",
        section="Standings",
        icon=":material/history:",
        script="pages/4_history.py",
    ),
    PageSpec(
        title="Admin Console",
        section="Administration",
        icon=":material/admin_panel_settings:",
        script="pages/5_admin.py",
    ),
)


def _sync_app_state() -> None:
    """Pick up changes other sessions made since this session last rendered."""
    state = get_app_state()
    set_app_state(get_controller().refresh(state, notice=state.notice))


def _render_sidebar() -> None:
    state = get_app_state()
    st.sidebar.caption(format_phase(state.phase))
    if state.signed_in:
        st.sidebar.markdown(profile_summary(state.profile))
    else:
        st.sidebar.caption("Not signed in")


def main() -> None:
    _sync_app_state()
    _render_sidebar()

    nav_structure: "OrderedDict[str, List['st.Page']]" = OrderedDict(
        (section, [page.to_navigation_page() for page in pages])
        for section, pages in _group_by_section(PAGE_REGISTRY).items()
    )
    st.navigation(nav_structure).run()


if __name__ == "__main__":
    main()
