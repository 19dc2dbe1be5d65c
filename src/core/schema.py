"""
Database schema definition for MVP Arena.

This module defines the game tables with constraints, indexes and the
integrity triggers for bets and history.
"""

import sqlite3


def create_schema(conn: sqlite3.Connection) -> None:
    """
    Create all database tables with proper constraints and indexes.

    Args:
        conn: SQLite database connection.
    """
    # Create tables in dependency order
    create_user_profiles_table(conn)
    create_credentials_table(conn)
    create_user_votes_table(conn)
    create_user_bets_table(conn)
    create_bet_history_table(conn)
    create_round_state_table(conn)

    # Create triggers for data integrity
    create_history_append_only_trigger(conn)
    create_resolved_bet_immutable_trigger(conn)

    conn.commit()


def create_user_profiles_table(conn: sqlite3.Connection) -> None:
    """Create the user_profiles table."""
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS user_profiles (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            username TEXT NOT NULL UNIQUE,
            total_coins INTEGER NOT NULL DEFAULT 100 CHECK (total_coins >= 0),
            available_coins INTEGER NOT NULL DEFAULT 0 CHECK (available_coins >= 0),
            mvp_points INTEGER NOT NULL DEFAULT 0,
            is_admin BOOLEAN NOT NULL DEFAULT FALSE,
            voted BOOLEAN NOT NULL DEFAULT FALSE,
            created_at_utc TEXT NOT NULL DEFAULT (datetime('now') || 'Z'),
            updated_at_utc TEXT NOT NULL DEFAULT (datetime('now') || 'Z')
        )
    """
    )

    conn.execute(
        """
        CREATE INDEX IF NOT EXISTS idx_user_profiles_total_coins
        ON user_profiles(total_coins DESC)
    """
    )


def create_credentials_table(conn: sqlite3.Connection) -> None:
    """Create the credentials table backing the local identity provider."""
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS credentials (
            user_id INTEGER PRIMARY KEY,
            username TEXT NOT NULL UNIQUE,
            password_hash TEXT NOT NULL,
            created_at_utc TEXT NOT NULL DEFAULT (datetime('now') || 'Z'),
            FOREIGN KEY (user_id) REFERENCES user_profiles(id) ON DELETE CASCADE
        )
    """
    )


def create_user_votes_table(conn: sqlite3.Connection) -> None:
    """Create the user_votes table (one vote per user per match)."""
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS user_votes (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id INTEGER NOT NULL,
            first_place TEXT NOT NULL,
            second_place TEXT NOT NULL,
            third_place TEXT NOT NULL,
            match_id TEXT NOT NULL DEFAULT 'current',
            created_at_utc TEXT NOT NULL DEFAULT (datetime('now') || 'Z'),
            FOREIGN KEY (user_id) REFERENCES user_profiles(id) ON DELETE CASCADE,
            UNIQUE(user_id, match_id),
            CHECK (first_place != second_place),
            CHECK (first_place != third_place),
            CHECK (second_place != third_place)
        )
    """
    )

    conn.execute(
        """
        CREATE INDEX IF NOT EXISTS idx_user_votes_match_id
        ON user_votes(match_id)
    """
    )


def create_user_bets_table(conn: sqlite3.Connection) -> None:
    """Create the user_bets table."""
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS user_bets (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id INTEGER NOT NULL,
            player TEXT NOT NULL,
            prop TEXT NOT NULL,
            amount INTEGER NOT NULL CHECK (amount > 0),
            odds REAL NOT NULL DEFAULT 4 CHECK (odds > 0),
            resolved BOOLEAN NOT NULL DEFAULT FALSE,
            won BOOLEAN NOT NULL DEFAULT FALSE,
            match_id TEXT NOT NULL DEFAULT 'current',
            created_at_utc TEXT NOT NULL DEFAULT (datetime('now') || 'Z'),
            resolved_at_utc TEXT,
            FOREIGN KEY (user_id) REFERENCES user_profiles(id) ON DELETE CASCADE
        )
    """
    )

    conn.execute(
        """
        CREATE INDEX IF NOT EXISTS idx_user_bets_match_resolved
        ON user_bets(match_id, resolved)
    """
    )

    conn.execute(
        """
        CREATE INDEX IF NOT EXISTS idx_user_bets_user_id
        ON user_bets(user_id)
    """
    )


def create_bet_history_table(conn: sqlite3.Connection) -> None:
    """Create the bet_history table."""
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS bet_history (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id INTEGER NOT NULL,
            match_name TEXT NOT NULL,
            bets_data TEXT NOT NULL,
            created_at_utc TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%f', 'now') || 'Z'),
            FOREIGN KEY (user_id) REFERENCES user_profiles(id) ON DELETE CASCADE
        )
    """
    )

    conn.execute(
        """
        CREATE INDEX IF NOT EXISTS idx_bet_history_user_id
        ON bet_history(user_id, created_at_utc DESC)
    """
    )


def create_round_state_table(conn: sqlite3.Connection) -> None:
    """Create the single-row round_state table and seed the IDLE row."""
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS round_state (
            id INTEGER PRIMARY KEY CHECK (id = 1),
            phase TEXT NOT NULL DEFAULT 'IDLE'
                CHECK (phase IN ('IDLE', 'ACTIVE', 'BETTING_OPEN', 'BETTING_CLOSED')),
            updated_at_utc TEXT NOT NULL DEFAULT (datetime('now') || 'Z')
        )
    """
    )

    conn.execute("INSERT OR IGNORE INTO round_state (id, phase) VALUES (1, 'IDLE')")


def create_history_append_only_trigger(conn: sqlite3.Connection) -> None:
    """Create triggers to prevent UPDATE/DELETE on bet_history."""
    conn.execute(
        """
        CREATE TRIGGER IF NOT EXISTS prevent_history_update
        BEFORE UPDATE ON bet_history
        BEGIN
            SELECT RAISE(ABORT, 'Cannot update bet_history - append-only table');
        END
    """
    )

    conn.execute(
        """
        CREATE TRIGGER IF NOT EXISTS prevent_history_delete
        BEFORE DELETE ON bet_history
        BEGIN
            SELECT RAISE(ABORT, 'Cannot delete from bet_history - append-only table');
        END
    """
    )


def create_resolved_bet_immutable_trigger(conn: sqlite3.Connection) -> None:
    """Create triggers to prevent changes to a bet once it is resolved."""
    conn.execute(
        """
        CREATE TRIGGER IF NOT EXISTS prevent_resolved_bet_update
        BEFORE UPDATE ON user_bets
        WHEN OLD.resolved = 1
        BEGIN
            SELECT RAISE(ABORT, 'Cannot modify user_bets - bet already resolved');
        END
    """
    )

    conn.execute(
        """
        CREATE TRIGGER IF NOT EXISTS prevent_bet_delete
        BEFORE DELETE ON user_bets
        BEGIN
            SELECT RAISE(ABORT, 'Cannot delete from user_bets - bets are never deleted');
        END
    """
    )
