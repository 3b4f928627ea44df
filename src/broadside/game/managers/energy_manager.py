"""Per-team action energy and grog.

Energy pays for attacks and swaps and is refilled at the start of the team's
turn. Grog is the secondary currency the turn controller converts leftover
energy into at turn end. The pool only stores and validates amounts; when
conversions happen is decided by the turn controller.
"""

from typing import TYPE_CHECKING

from ...core.data import Team, TEAM_NAMES
from ...core.events import ResourceChanged, LogMessage
from .log_manager import LogLevel

if TYPE_CHECKING:
    from ...core.engine import BattleState
    from ...core.events import EventManager


class ResourcePool:
    """Energy and grog of one team."""

    def __init__(self, team: Team, energy_per_turn: int,
                 battle_state: "BattleState", event_manager: "EventManager"):
        """Initialize an empty pool.

        Args:
            team: Team that owns the pool
            energy_per_turn: Energy granted by each refill
            battle_state: Shared battle state (for event round numbers)
            event_manager: Event manager for ResourceChanged notifications
        """
        self.team = team
        self.energy_per_turn = energy_per_turn
        self.battle_state = battle_state
        self.event_manager = event_manager
        self.energy = 0
        self.grog = 0

    def _emit_change(self, resource: str, old_value: int, new_value: int) -> None:
        if old_value == new_value:
            return
        self.event_manager.publish(
            ResourceChanged(
                round_number=self.battle_state.round_number,
                team=self.team,
                resource=resource,
                old_value=old_value,
                new_value=new_value,
            ),
            source="ResourcePool"
        )
        self.event_manager.publish(
            LogMessage(
                round_number=self.battle_state.round_number,
                message=f"{TEAM_NAMES[self.team]} {resource}: {old_value} -> {new_value}",
                category="RESOURCE",
                level=LogLevel.DEBUG,
                source="ResourcePool"
            ),
            source="ResourcePool"
        )

    def can_afford(self, cost: int) -> bool:
        return self.energy >= max(0, cost)

    def spend(self, cost: int) -> bool:
        """Spend energy if the pool holds enough; returns False otherwise."""
        cost = max(0, cost)
        if self.energy < cost:
            return False
        old = self.energy
        self.energy -= cost
        self._emit_change("energy", old, self.energy)
        return True

    def refund(self, amount: int) -> int:
        """Give energy back, capped at one turn's worth."""
        old = self.energy
        self.energy = min(self.energy_per_turn, self.energy + max(0, amount))
        self._emit_change("energy", old, self.energy)
        return self.energy - old

    def refill(self, drain: int = 0) -> None:
        """Reset energy to the per-turn amount minus any drain."""
        old = self.energy
        self.energy = max(0, self.energy_per_turn - max(0, drain))
        self._emit_change("energy", old, self.energy)

    def drain_all(self) -> int:
        """Remove and return all remaining energy."""
        old = self.energy
        self.energy = 0
        self._emit_change("energy", old, 0)
        return old

    def add_grog(self, amount: int) -> None:
        old = self.grog
        self.grog += max(0, amount)
        self._emit_change("grog", old, self.grog)

    def spend_grog(self, amount: int) -> bool:
        amount = max(0, amount)
        if self.grog < amount:
            return False
        old = self.grog
        self.grog -= amount
        self._emit_change("grog", old, self.grog)
        return True
