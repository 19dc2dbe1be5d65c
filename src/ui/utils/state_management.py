"""
Session state helpers for Streamlit pages.

Each browser session owns one ``GameController`` and one ``AppState``. Pages
read the state, hand user intents to ``run_intent`` and store whatever state
the handler returns. Also includes a safe rerun wrapper and a page-state reset
utility shared by every page.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Callable, Optional, Sequence, TypeVar

import streamlit as st
import structlog

from src.core.database import get_db_connection
from src.core.exceptions import GameError
from src.services.game_controller import AppState, GameController

CONTROLLER_KEY = "game_controller"
APP_STATE_KEY = "app_state"
DEFAULT_PREFIXES: tuple[str, ...] = (
    "form_",
    "settle_",
    "vote_",
    "bet_",
)

logger = structlog.get_logger(__name__)
T = TypeVar("T")


def get_or_create_state_value(key: str, loader: Callable[[], T]) -> T:
    """
    Simple session-state cache helper for expensive objects.
    """
    if key not in st.session_state:
        st.session_state[key] = loader()
    return st.session_state[key]


def get_controller() -> GameController:
    """Return this session's controller, opening a connection on first use."""
    return get_or_create_state_value(
        CONTROLLER_KEY, lambda: GameController(get_db_connection())
    )


def get_app_state() -> AppState:
    """Return this session's state, reloaded from the store on first use."""
    if APP_STATE_KEY not in st.session_state:
        st.session_state[APP_STATE_KEY] = get_controller().refresh(AppState())
    return st.session_state[APP_STATE_KEY]


def set_app_state(state: AppState) -> AppState:
    st.session_state[APP_STATE_KEY] = state
    return state


def run_intent(
    handler: Callable[..., AppState], *args: Any, reason: Optional[str] = None
) -> Optional[AppState]:
    """
    Run a controller handler against the session state.

    Game errors are shown to the user and leave the stored state untouched.
    On success the new state is stored and the page reruns so every widget
    sees it.

    Returns:
        The new AppState, or None when the handler raised a GameError
    """
    state = get_app_state()
    try:
        new_state = handler(state, *args)
    except GameError as exc:
        logger.warning("ui_intent_failed", intent=getattr(handler, "__name__", "?"), error=str(exc))
        st.error(str(exc))
        return None

    set_app_state(new_state)
    safe_rerun(reason=reason or getattr(handler, "__name__", "user_action"))
    return new_state


def render_notice() -> None:
    """Show and clear the message left by the last successful intent."""
    state = get_app_state()
    if state.notice:
        st.success(state.notice)
        set_app_state(replace(state, notice=None))


def reset_page_state(prefixes: Sequence[str] = DEFAULT_PREFIXES) -> None:
    """
    Remove keys from ``st.session_state`` that start with any of the prefixes.

    Args:
        prefixes: Iterable of prefix strings to match against state keys.
    """
    try:
        state_keys = list(st.session_state.keys())
    except (AttributeError, RuntimeError):
        return

    for key in state_keys:
        if any(key.startswith(prefix) for prefix in prefixes):
            st.session_state.pop(key, None)


def safe_rerun(reason: str = "user_action") -> None:
    """
    Trigger ``st.rerun`` when available while capturing the reason for logging.
    """
    st.session_state["_last_rerun_reason"] = reason
    logger.debug("ui_rerun", reason=reason)

    rerun = getattr(st, "rerun", None)
    if callable(rerun):
        rerun()
