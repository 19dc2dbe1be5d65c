"""
Seed data insertion for MVP Arena.

This module inserts the admin account required to run a match.
"""

import sqlite3
from typing import Dict, Optional

from src.core.config import Config
from src.utils.datetime_helpers import utc_now_iso
from src.utils.passwords import hash_password


def insert_seed_data(conn: sqlite3.Connection) -> None:
    """
    Insert all seed data into the database.

    Args:
        conn: SQLite database connection.
    """
    admin_id = insert_admin_account(conn)
    conn.commit()

    if admin_id is not None:
        print(f"Seed data inserted successfully (admin id {admin_id})")


def insert_admin_account(
    conn: sqlite3.Connection,
    username: Optional[str] = None,
    password: Optional[str] = None,
) -> Optional[int]:
    """
    Insert the admin profile and its credential.

    Admins never receive coin distributions, so the profile starts with the
    same bank as everyone else but is excluded from every round operation.

    Args:
        conn: SQLite database connection.
        username: Admin username. Defaults to Config.ADMIN_USERNAME.
        password: Admin password. Defaults to Config.ADMIN_PASSWORD.

    Returns:
        The admin profile ID, or None when no admin password is configured.
    """
    username = username or Config.ADMIN_USERNAME
    password = password or Config.ADMIN_PASSWORD
    if not password:
        return None

    row = conn.execute(
        "SELECT id FROM user_profiles WHERE username = ?", (username,)
    ).fetchone()
    if row is not None:
        return row[0]

    now = utc_now_iso()
    cursor = conn.execute(
        """
        INSERT INTO user_profiles
        (username, total_coins, available_coins, mvp_points, is_admin, voted,
         created_at_utc, updated_at_utc)
        VALUES (?, ?, 0, 0, TRUE, FALSE, ?, ?)
    """,
        (username, Config.STARTING_COINS, now, now),
    )
    admin_id = cursor.lastrowid

    conn.execute(
        """
        INSERT INTO credentials (user_id, username, password_hash, created_at_utc)
        VALUES (?, ?, ?, ?)
    """,
        (admin_id, username, hash_password(password), now),
    )

    return admin_id


def get_seed_data_summary(conn: sqlite3.Connection) -> Dict[str, int]:
    """
    Get a summary of seed data counts.

    Args:
        conn: SQLite database connection.

    Returns:
        Dictionary with table names and their record counts.
    """
    tables = [
        "user_profiles",
        "credentials",
        "user_votes",
        "user_bets",
        "bet_history",
    ]

    summary = {}

    for table in tables:
        cursor = conn.execute(f"SELECT COUNT(*) FROM {table}")
        summary[table] = cursor.fetchone()[0]

    return summary
