"""Display formatting utilities for Streamlit UI.

Coin amounts are whole numbers rendered with a "coins" suffix; timestamps are
stored in UTC and shown in Config.DISPLAY_TIMEZONE.
"""

from datetime import datetime
from typing import Optional, Union

import pytz

from src.core.config import Config
from src.domain.models import RoundPhase
from src.utils.datetime_helpers import parse_utc_iso

PHASE_LABELS = {
    RoundPhase.IDLE: "Waiting for the next match",
    RoundPhase.ACTIVE: "Match live · voting open",
    RoundPhase.BETTING_OPEN: "Betting open",
    RoundPhase.BETTING_CLOSED: "Betting closed · awaiting settlement",
}

STATUS_BADGES = {
    "open": ":gray[OPEN]",
    "won": ":green[WON]",
    "lost": ":red[LOST]",
}


def _display_tz():
    try:
        return pytz.timezone(Config.DISPLAY_TIMEZONE)
    except pytz.UnknownTimeZoneError:
        return pytz.utc


def format_coins(amount: Optional[int]) -> str:
    if amount is None:
        return "—"
    return f"{amount:,} coins"


def format_odds(odds: Optional[float]) -> str:
    """Render odds as a multiplier, dropping a trailing .0 ("4x", "2.5x")."""
    if odds is None:
        return "—"
    if float(odds).is_integer():
        return f"{int(odds)}x"
    return f"{odds:g}x"


def format_phase(phase: RoundPhase) -> str:
    return PHASE_LABELS.get(phase, phase.value)


def format_status_badge(status: str) -> str:
    return STATUS_BADGES.get(status, status.upper())


def format_utc_datetime(value: Union[str, datetime, None]) -> str:
    """Convert a UTC timestamp to the configured display timezone."""
    if not value:
        return "—"
    try:
        parsed = parse_utc_iso(value) if isinstance(value, str) else value
    except ValueError:
        return str(value)
    local = parsed.astimezone(_display_tz())
    return local.strftime("%Y-%m-%d %H:%M %Z")
