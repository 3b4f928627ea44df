"""Battle state shared by the combat managers.

:class:`BattleState` is the single record of where a battle stands: the
round, the phase of the round state machine, which side is acting, and
whether the battle is still running. Managers read and update it instead of
keeping private copies.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..data import Team, TurnPhase


@dataclass
class BattleState:
    """Round/turn bookkeeping for one battle."""

    round_number: int = 0
    phase: TurnPhase = TurnPhase.ROUND_START
    acting_team: Optional[Team] = None

    # Team that took the first half-turn of the current round
    first_team: Optional[Team] = None

    swaps_used: int = 0

    # Attacks landed in a row by the acting team this turn
    combo_count: int = 0
    is_active: bool = False
    winner: Optional[Team] = None

    # Host-loop deadline (seconds) after which an auto-resolved turn ends
    auto_turn_deadline: Optional[float] = None

    @property
    def is_first_half(self) -> bool:
        return self.acting_team is not None and self.acting_team == self.first_team

    def end(self, winner: Optional[Team]) -> None:
        """Stop the battle; no further actions or transitions are allowed."""
        self.is_active = False
        self.winner = winner
        self.phase = TurnPhase.BATTLE_OVER
        self.acting_team = None
        self.auto_turn_deadline = None
