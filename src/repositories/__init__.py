"""Repository package exports."""

from .ledger_store import LedgerStore
from .round_state_repository import RoundStateRepository

__all__ = ["LedgerStore", "RoundStateRepository"]
