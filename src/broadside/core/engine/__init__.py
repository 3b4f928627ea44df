"""Core engine state.

This package contains the shared battle state:
- game_state.py: Round, phase and activity bookkeeping for one battle
"""

from .game_state import BattleState

__all__ = [
    "BattleState",
]
