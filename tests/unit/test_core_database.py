"""
Unit tests for core database functionality.

Tests schema creation, validation, and seed data insertion.
"""

import os
import sqlite3
import tempfile
import unittest

from src.core import config
from src.core.database import get_db_connection, initialize_database
from src.core.schema_validation import SchemaValidationError, validate_schema
from src.core.seed_data import get_seed_data_summary, insert_admin_account
from src.utils.passwords import verify_password


class TestCoreDatabase(unittest.TestCase):
    """Test core database functionality."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.test_db_path = os.path.join(self.temp_dir, "test_mvp_arena.db")

        self.original_db_path = config.Config.DB_PATH
        self.original_admin_password = config.Config.ADMIN_PASSWORD
        config.Config.DB_PATH = self.test_db_path
        config.Config.ADMIN_PASSWORD = "admin-secret"

        self.conn = initialize_database()

    def tearDown(self):
        self.conn.close()
        for suffix in ("", "-wal", "-shm"):
            path = self.test_db_path + suffix
            if os.path.exists(path):
                os.unlink(path)
        os.rmdir(self.temp_dir)

        config.Config.DB_PATH = self.original_db_path
        config.Config.ADMIN_PASSWORD = self.original_admin_password

    def test_database_initialization(self):
        self.assertTrue(os.path.exists(self.test_db_path))

        cursor = self.conn.execute("PRAGMA foreign_keys")
        self.assertTrue(cursor.fetchone()[0])

        cursor = self.conn.execute("PRAGMA journal_mode")
        self.assertEqual(cursor.fetchone()[0], "wal")

    def test_schema_validation(self):
        try:
            validate_schema(self.conn)
        except SchemaValidationError as e:
            self.fail(f"Schema validation failed: {e}")

    def test_schema_validation_reports_missing_trigger(self):
        self.conn.execute("DROP TRIGGER prevent_bet_delete")

        with self.assertRaises(SchemaValidationError) as ctx:
            validate_schema(self.conn)
        self.assertIn("prevent_bet_delete", str(ctx.exception))

    def test_round_state_is_seeded_idle(self):
        row = self.conn.execute("SELECT phase FROM round_state WHERE id = 1").fetchone()
        self.assertEqual(row["phase"], "IDLE")

    def test_admin_account_is_seeded(self):
        profile = self.conn.execute(
            "SELECT * FROM user_profiles WHERE username = ?", (config.Config.ADMIN_USERNAME,)
        ).fetchone()
        self.assertIsNotNone(profile)
        self.assertTrue(profile["is_admin"])

        credential = self.conn.execute(
            "SELECT password_hash FROM credentials WHERE user_id = ?", (profile["id"],)
        ).fetchone()
        self.assertTrue(verify_password("admin-secret", credential["password_hash"]))

    def test_seeding_twice_keeps_one_admin(self):
        first_id = insert_admin_account(self.conn)
        second_id = insert_admin_account(self.conn)

        self.assertEqual(first_id, second_id)
        self.assertEqual(get_seed_data_summary(self.conn)["user_profiles"], 1)

    def test_admin_not_seeded_without_password(self):
        conn = get_db_connection(":memory:")
        try:
            config.Config.ADMIN_PASSWORD = None
            self.assertIsNone(insert_admin_account(conn))
            self.assertEqual(get_seed_data_summary(conn)["user_profiles"], 0)
        finally:
            conn.close()

    def test_vote_picks_must_be_distinct_in_store(self):
        cursor = self.conn.execute(
            "INSERT INTO user_profiles (username) VALUES ('voter')"
        )
        with self.assertRaises(sqlite3.IntegrityError):
            self.conn.execute(
                """
                INSERT INTO user_votes (user_id, first_place, second_place, third_place)
                VALUES (?, 'A', 'A', 'B')
                """,
                (cursor.lastrowid,),
            )


if __name__ == "__main__":
    unittest.main()
