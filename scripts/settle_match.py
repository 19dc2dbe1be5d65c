"""
Settle the current match from the command line.

Usage:
  python scripts/settle_match.py --outcomes outcomes.json    # {"12": true, "13": false, ...}
  python scripts/settle_match.py --outcomes outcomes.json --dry-run
  python scripts/settle_match.py                              # Ask won/lost for every open bet

Every open bet is resolved, winnings are credited, one "Match N" history
record is written per player, votes are reset and the round returns to idle.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Dict

# Ensure project root is on sys.path so `src` imports work when executed from anywhere
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from src.core.database import get_db_connection
from src.core.exceptions import GameError
from src.domain.models import Bet
from src.repositories.ledger_store import LedgerStore
from src.services.settlement_service import SettlementService, outcomes_resolver
from src.utils.logging_config import get_logger

logger = get_logger(__name__)


def load_outcomes(path: Path) -> Dict[int, bool]:
    """Read a JSON object mapping bet IDs to won (true) or lost (false)."""
    raw = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise ValueError(f"{path} must contain a JSON object of bet_id → won")
    return {int(bet_id): bool(won) for bet_id, won in raw.items()}


def ask_outcome(bet: Bet) -> bool:
    prompt = f"Bet #{bet.id}: {bet.player} · {bet.prop} · {bet.amount} at {bet.odds:g}x - won? [y/N] "
    return input(prompt).strip().lower() in ("y", "yes")


def main() -> int:
    parser = argparse.ArgumentParser(description="Settle every open bet of the current match")
    parser.add_argument("--outcomes", type=Path, help="JSON file mapping bet IDs to won/lost")
    parser.add_argument("--dry-run", action="store_true", help="Preview winnings without writing")
    parser.add_argument("--db", help="Database path (defaults to Config.DB_PATH)")
    args = parser.parse_args()

    store = LedgerStore(get_db_connection(args.db))
    service = SettlementService(store)
    try:
        bets = service.open_bets()
        print(f"Open bets: {len(bets)}")

        if args.outcomes:
            outcomes = load_outcomes(args.outcomes)
        elif args.dry_run:
            parser.error("--dry-run needs --outcomes")
        else:
            outcomes = {bet.id: ask_outcome(bet) for bet in bets}

        preview = service.preview_settlement(outcomes)
        if preview.missing_bet_ids:
            print(f"Missing outcomes for bets: {preview.missing_bet_ids}")
            return 1
        for user_id, winnings in preview.per_user_winnings.items():
            print(f"  user {user_id}: +{winnings}")
        print(f"Total payout: {preview.total_winnings}")

        if args.dry_run:
            return 0

        result = service.end_match(outcomes_resolver(outcomes))
        print(f"Settled {result.bets_resolved} bets for {len(result.users)} players.")
        return 0
    except GameError as exc:
        logger.error("settle_match_failed", error=str(exc))
        print(f"Settlement failed: {exc}")
        return 1
    finally:
        store.db.close()


if __name__ == "__main__":
    sys.exit(main())
