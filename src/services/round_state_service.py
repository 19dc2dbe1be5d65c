"""
Round State Service - guards admin actions with an explicit phase machine.

Phases advance IDLE → ACTIVE → BETTING_OPEN → BETTING_CLOSED → IDLE. Every
transition is a compare-and-set in the store, so re-running an admin action
(double click, second admin) is rejected instead of applied twice.
"""

from __future__ import annotations

from typing import Dict, FrozenSet, Optional, Tuple

from src.core.exceptions import ValidationError
from src.domain.models import RoundPhase
from src.repositories.round_state_repository import RoundStateRepository
from src.utils.logging_config import get_logger

logger = get_logger(__name__)

ALL_PHASES: FrozenSet[RoundPhase] = frozenset(RoundPhase)

TRANSITIONS: Dict[str, Tuple[FrozenSet[RoundPhase], RoundPhase]] = {
    "start_match": (frozenset({RoundPhase.IDLE}), RoundPhase.ACTIVE),
    "open_betting": (frozenset({RoundPhase.ACTIVE}), RoundPhase.BETTING_OPEN),
    "close_betting": (frozenset({RoundPhase.BETTING_OPEN}), RoundPhase.BETTING_CLOSED),
    "end_match": (ALL_PHASES, RoundPhase.IDLE),
}


class RoundStateService:
    """Service that owns the match round phase."""

    def __init__(self, repository: Optional[RoundStateRepository] = None, db=None) -> None:
        self.repository = repository or RoundStateRepository(db)

    def current_phase(self) -> RoundPhase:
        return self.repository.get_phase()

    def require_betting_open(self) -> None:
        """
        Raises:
            ValidationError: If the betting round is not open
        """
        if not self.current_phase().betting_open:
            raise ValidationError("Betting round is closed")

    def advance(self, action: str) -> RoundPhase:
        """
        Apply the transition registered for ``action``.

        Args:
            action: One of the keys of TRANSITIONS

        Returns:
            The new phase

        Raises:
            ValidationError: If the current phase does not allow the action
        """
        allowed_from, target = TRANSITIONS[action]
        if not self.repository.transition(allowed_from, target):
            phase = self.current_phase()
            logger.warning("round_transition_rejected", action=action, phase=phase.value)
            raise ValidationError(
                f"Cannot {action.replace('_', ' ')} while the round is {phase.value.replace('_', ' ').lower()}"
            )

        logger.info("round_transition", action=action, phase=target.value)
        return target
