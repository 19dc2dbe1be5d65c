"""
Development reset script for MVP Arena.

Usage:
  python scripts/reset_dev_db.py            # Reset DB file, then reseed the admin account
  python scripts/reset_dev_db.py --yes      # Skip confirmation prompt

This script deletes the SQLite database configured by Config.DB_PATH (plus
its WAL/SHM side files) and reinitializes it with schema + seed data.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Ensure project root is on sys.path so `src` imports work when executed from anywhere
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from src.core.config import Config
from src.core.database import initialize_database
from src.core.seed_data import get_seed_data_summary


def database_files(db_path: Path) -> list[Path]:
    return [db_path, Path(f"{db_path}-wal"), Path(f"{db_path}-shm")]


def main() -> None:
    parser = argparse.ArgumentParser(description="Reset the development database")
    parser.add_argument("--yes", action="store_true", help="Skip confirmation prompt")
    args = parser.parse_args()

    db_path = Path(Config.DB_PATH)

    print("\n=== MVP Arena Dev Reset ===")
    print(f"DB path: {db_path}")
    if not Config.ADMIN_PASSWORD:
        print("ADMIN_PASSWORD is not set; no admin account will be seeded.")

    if not args.yes:
        try:
            confirm = input("Type 'RESET' to proceed: ").strip()
        except KeyboardInterrupt:
            print("\nAborted.")
            return
        if confirm.upper() != "RESET":
            print("Aborted.")
            return

    for path in database_files(db_path):
        if path.exists():
            path.unlink()
            print(f"Deleted: {path}")

    conn = initialize_database()
    try:
        summary = get_seed_data_summary(conn)
    finally:
        conn.close()

    print("Reinitialized database (schema + seed data)")
    for table, count in summary.items():
        print(f"  {table}: {count}")
    print("\nReset complete. You can now rerun the app.")


if __name__ == "__main__":
    main()
