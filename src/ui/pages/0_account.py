"""
Account page - sign in, register and sign out.

New players start with a bank of Config.STARTING_COINS coins and nothing
available to bet until the admin opens a betting round.
"""

import streamlit as st

from src.core.config import Config
from src.services.game_controller import GameController
from src.services.view_models import profile_summary
from src.ui.utils.state_management import (
    get_app_state,
    get_controller,
    render_notice,
    reset_page_state,
    run_intent,
)

PAGE_TITLE = "Account"
PAGE_ICON = ":material/person:"


def render_sign_in(controller: GameController) -> None:
    with st.form("form_sign_in"):
        username = st.text_input("Username", key="form_sign_in_username")
        password = st.text_input("Password", type="password", key="form_sign_in_password")
        submitted = st.form_submit_button("Sign in", type="primary")

    if submitted:
        run_intent(controller.sign_in, username, password)


def render_sign_up(controller: GameController) -> None:
    st.caption(
        f"New accounts start with {Config.STARTING_COINS} coins. Passwords need at "
        f"least {Config.MIN_PASSWORD_LENGTH} characters."
    )
    with st.form("form_sign_up"):
        username = st.text_input("Username", key="form_sign_up_username")
        password = st.text_input("Password", type="password", key="form_sign_up_password")
        submitted = st.form_submit_button("Create account", type="primary")

    if submitted:
        run_intent(controller.sign_up, username, password)


def main() -> None:
    st.title(f"{PAGE_ICON} {PAGE_TITLE}")
    render_notice()

    controller = get_controller()
    state = get_app_state()

    if state.signed_in:
        st.info(profile_summary(state.profile))
        if st.button("Sign out", key="form_sign_out"):
            reset_page_state()
            run_intent(controller.sign_out)
        return

    sign_in_tab, sign_up_tab = st.tabs(["Sign in", "Register"])
    with sign_in_tab:
        render_sign_in(controller)
    with sign_up_tab:
        render_sign_up(controller)


if __name__ == "__main__":
    main()
