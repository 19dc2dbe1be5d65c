"""
Configuration management for MVP Arena.

This module handles loading and validating environment variables.
"""

import os
from typing import List, Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _int_env(key: str, default: int) -> int:
    value = os.getenv(key)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _list_env(key: str, default: List[str]) -> List[str]:
    value = os.getenv(key)
    if value is None or value.strip() == "":
        return list(default)
    return [item.strip() for item in value.split(",") if item.strip()]


DEFAULT_PLAYER_ROSTER = [
    "Alex",
    "Jordan",
    "Sam",
    "Taylor",
    "Morgan",
    "Casey",
    "Riley",
    "Jamie",
    "Drew",
    "Quinn",
]

DEFAULT_PROP_CATALOGUE = [
    "Goal",
    "Assist",
    "Clean Sheet",
    "Yellow Card",
    "Man of the Match",
]


class Config:
    """Configuration class with environment variables."""

    # Database
    DB_PATH: str = os.getenv("DB_PATH", "data/mvp_arena.db")

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT: str = os.getenv("LOG_FORMAT", "json")

    # Display
    DISPLAY_TIMEZONE: str = os.getenv("DISPLAY_TIMEZONE", "UTC")

    # Coin economy
    STARTING_COINS: int = _int_env("STARTING_COINS", 100)
    DEFAULT_DISTRIBUTION: int = _int_env("DEFAULT_DISTRIBUTION", 10)
    DEFAULT_ODDS: int = _int_env("DEFAULT_ODDS", 4)

    # Identity
    MIN_PASSWORD_LENGTH: int = _int_env("MIN_PASSWORD_LENGTH", 6)
    ADMIN_USERNAME: str = os.getenv("ADMIN_USERNAME", "admin")
    ADMIN_PASSWORD: Optional[str] = os.getenv("ADMIN_PASSWORD")

    # Match
    CURRENT_MATCH_ID: str = os.getenv("CURRENT_MATCH_ID", "current")
    PLAYER_ROSTER: List[str] = _list_env("PLAYER_ROSTER", DEFAULT_PLAYER_ROSTER)
    PROP_CATALOGUE: List[str] = _list_env("PROP_CATALOGUE", DEFAULT_PROP_CATALOGUE)

    @classmethod
    def validate(cls) -> None:
        """
        Validate that required configuration is present.

        Raises:
            ValueError: If required configuration is missing.
        """
        if not cls.DB_PATH:
            raise ValueError("DB_PATH must be configured")

        if len(cls.PLAYER_ROSTER) < 3:
            raise ValueError("PLAYER_ROSTER must name at least three players")

        if cls.DEFAULT_ODDS <= 0:
            raise ValueError("DEFAULT_ODDS must be positive")

        if not cls.ADMIN_PASSWORD:
            print("WARNING: ADMIN_PASSWORD not configured - admin account will not be seeded")
