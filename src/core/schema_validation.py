"""
Schema validation for MVP Arena.

This module verifies that all tables exist with correct columns and constraints.
"""

import sqlite3
from typing import Dict, List


class SchemaValidationError(Exception):
    """Raised when schema validation fails."""

    pass


EXPECTED_COLUMNS: Dict[str, Dict[str, str]] = {
    "user_profiles": {
        "id": "INTEGER",
        "username": "TEXT",
        "total_coins": "INTEGER",
        "available_coins": "INTEGER",
        "mvp_points": "INTEGER",
        "is_admin": "BOOLEAN",
        "voted": "BOOLEAN",
        "created_at_utc": "TEXT",
        "updated_at_utc": "TEXT",
    },
    "credentials": {
        "user_id": "INTEGER",
        "username": "TEXT",
        "password_hash": "TEXT",
        "created_at_utc": "TEXT",
    },
    "user_votes": {
        "id": "INTEGER",
        "user_id": "INTEGER",
        "first_place": "TEXT",
        "second_place": "TEXT",
        "third_place": "TEXT",
        "match_id": "TEXT",
        "created_at_utc": "TEXT",
    },
    "user_bets": {
        "id": "INTEGER",
        "user_id": "INTEGER",
        "player": "TEXT",
        "prop": "TEXT",
        "amount": "INTEGER",
        "odds": "REAL",
        "resolved": "BOOLEAN",
        "won": "BOOLEAN",
        "match_id": "TEXT",
        "created_at_utc": "TEXT",
        "resolved_at_utc": "TEXT",
    },
    "bet_history": {
        "id": "INTEGER",
        "user_id": "INTEGER",
        "match_name": "TEXT",
        "bets_data": "TEXT",
        "created_at_utc": "TEXT",
    },
    "round_state": {
        "id": "INTEGER",
        "phase": "TEXT",
        "updated_at_utc": "TEXT",
    },
}


def validate_schema(conn: sqlite3.Connection) -> bool:
    """
    Validate the complete database schema.

    Args:
        conn: SQLite database connection.

    Returns:
        True if schema is valid.

    Raises:
        SchemaValidationError: If schema validation fails.
    """
    errors = []

    errors.extend(validate_all_tables_exist(conn))
    errors.extend(validate_table_structures(conn))
    errors.extend(validate_constraints(conn))
    errors.extend(validate_triggers(conn))

    if errors:
        error_msg = "Schema validation failed:\n" + "\n".join(f"- {error}" for error in errors)
        raise SchemaValidationError(error_msg)

    return True


def validate_all_tables_exist(conn: sqlite3.Connection) -> List[str]:
    """Return error messages for missing tables."""
    cursor = conn.execute(
        """
        SELECT name FROM sqlite_master
        WHERE type='table' AND name NOT LIKE 'sqlite_%'
    """
    )

    existing_tables = {row[0] for row in cursor.fetchall()}

    return [
        f"Missing required table: {table}"
        for table in EXPECTED_COLUMNS
        if table not in existing_tables
    ]


def validate_table_structures(conn: sqlite3.Connection) -> List[str]:
    """Return error messages for missing or mistyped columns."""
    errors = []

    for table, columns in EXPECTED_COLUMNS.items():
        cursor = conn.execute(f"PRAGMA table_info({table})")
        actual = {row[1]: row[2].upper() for row in cursor.fetchall()}
        if not actual:
            continue

        for column, expected_type in columns.items():
            if column not in actual:
                errors.append(f"Table {table}: Missing column {column}")
            elif actual[column] != expected_type:
                errors.append(
                    f"Table {table}: Column {column} has type {actual[column]}, expected {expected_type}"
                )

    return errors


def validate_constraints(conn: sqlite3.Connection) -> List[str]:
    """Return error messages for disabled foreign keys or missing unique constraints."""
    errors = []

    cursor = conn.execute("PRAGMA foreign_keys")
    if not cursor.fetchone()[0]:
        errors.append("Foreign keys are not enabled")

    unique_constraints = [
        ("user_profiles", "username"),
        ("credentials", "username"),
        ("user_votes", "user_id, match_id"),
    ]

    for table, columns in unique_constraints:
        cursor = conn.execute(f"PRAGMA index_list({table})")
        indexes = cursor.fetchall()

        found_unique = False
        for index in indexes:
            if index[2]:  # unique flag
                cursor = conn.execute(f"PRAGMA index_info({index[1]})")
                index_cols = [row[2] for row in cursor.fetchall()]
                if index_cols == columns.split(", "):
                    found_unique = True
                    break

        if not found_unique:
            errors.append(f"Table {table}: Missing unique constraint on ({columns})")

    return errors


def validate_triggers(conn: sqlite3.Connection) -> List[str]:
    """Return error messages for missing integrity triggers."""
    required_triggers = [
        "prevent_history_update",
        "prevent_history_delete",
        "prevent_resolved_bet_update",
        "prevent_bet_delete",
    ]

    cursor = conn.execute(
        """
        SELECT name FROM sqlite_master
        WHERE type='trigger' AND name NOT LIKE 'sqlite_%'
    """
    )

    existing_triggers = {row[0] for row in cursor.fetchall()}

    return [
        f"Missing required trigger: {trigger}"
        for trigger in required_triggers
        if trigger not in existing_triggers
    ]
