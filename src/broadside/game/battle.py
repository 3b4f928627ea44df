"""
Battle orchestration.

:class:`Battle` wires the combat systems for one engagement and is the only
entry point a host loop needs: it accepts intents (attack, swap, end turn),
hands them to the executor or the turn controller, drains the event queue
and checks whether the battle is over. Every intent returns an
:class:`ActionOutcome`; nothing here raises for an illegal request.
"""

import random
from typing import Iterable, Optional

from ..core.data import CombatConfig, InvalidReason, Team, load_combat_config
from ..core.engine import BattleState
from ..core.events import EventManager, LogMessage
from .battlefield import Battlefield
from .combat.combat_executor import CombatActionExecutor
from .combat.effect_registry import EffectRegistry, create_default_registry
from .combat.outcomes import ActionOutcome
from .combat.weapons import WeaponContext, load_weapon_catalog
from .entities.combatant import Combatant
from .entities.roster import Roster
from .managers.energy_manager import ResourcePool
from .managers.log_manager import LogLevel, LogManager
from .managers.turn_manager import TurnController


class Battle:
    """Coordinates the roster, combat executor and turn controller."""

    def __init__(
        self,
        units: Iterable[Combatant],
        battlefield: Battlefield,
        config: Optional[CombatConfig] = None,
        weapons: Optional[dict[str, WeaponContext]] = None,
        registry: Optional[EffectRegistry] = None,
        auto_teams: Iterable[Team] = (),
        rng: Optional[random.Random] = None,
        event_manager: Optional[EventManager] = None,
    ):
        """Set up a battle.

        Args:
            units: Combatants in deployment order; positions must be free
            battlefield: Grid the battle takes place on
            config: Tuning constants (defaults to the packaged combat.yaml)
            weapons: Weapon catalog (defaults to the packaged weapons.yaml)
            registry: Effect hooks (defaults to the built-in hooks)
            auto_teams: Teams whose turns end by themselves after a delay
            rng: Random source for miss rolls
            event_manager: Shared event manager (a new one is created if omitted)
        """
        self.config = config or load_combat_config()
        self.weapons = weapons if weapons is not None else load_weapon_catalog()
        self.registry = registry or create_default_registry()
        self.event_manager = event_manager or EventManager()
        self.log_manager = LogManager(self.event_manager)

        self.state = BattleState()
        self.battlefield = battlefield
        self.roster = Roster()
        for unit in units:
            self.roster.add(unit)
            self.battlefield.place_unit(unit)

        self.pools = {
            team: ResourcePool(team, self.config.energy_per_turn, self.state, self.event_manager)
            for team in Team
        }
        self.executor = CombatActionExecutor(
            self.config, self.state, self.roster, self.battlefield,
            self.pools, self.registry, self.event_manager, rng=rng,
        )
        self.turn_controller = TurnController(
            self.config, self.state, self.roster, self.battlefield,
            self.pools, self.executor, self.event_manager, auto_teams=auto_teams,
        )

    def _emit_log(self, message: str, category: str = "SYSTEM", level: str = "INFO") -> None:
        """Emit a log message event."""
        level_map = {
            "DEBUG": LogLevel.DEBUG,
            "INFO": LogLevel.INFO,
            "WARNING": LogLevel.WARNING,
            "ERROR": LogLevel.ERROR
        }
        self.event_manager.publish(
            LogMessage(
                round_number=self.state.round_number,
                message=message,
                category=category,
                level=level_map.get(level, LogLevel.INFO),
                source="Battle"
            ),
            source="Battle"
        )

    @property
    def is_active(self) -> bool:
        return self.state.is_active

    @property
    def winner(self) -> Optional[Team]:
        return self.state.winner

    def start(self, now: float = 0.0) -> None:
        """Begin round 1."""
        self.turn_controller.start_battle(now)
        self.event_manager.process_events()

    # ============== Intents ==============

    def _lookup(self, unit_id: str) -> tuple[Optional[Combatant], Optional[InvalidReason]]:
        unit = self.roster.get(unit_id)
        if unit is not None:
            return unit, None
        if self.roster.is_fallen(unit_id):
            return None, InvalidReason.ATTACKER_DEAD
        return None, InvalidReason.UNKNOWN_UNIT

    def _reject(self, reason: InvalidReason, what: str) -> ActionOutcome:
        self._emit_log(f"Rejected {what}: {reason.name}", "SYSTEM", "DEBUG")
        self.event_manager.process_events()
        return ActionOutcome.invalid(reason)

    def find_default_target(self, attacker: Combatant) -> Optional[Combatant]:
        """Nearest active enemy by Manhattan distance; ties go to roster order."""
        best: Optional[Combatant] = None
        best_distance = 0
        for enemy in self.roster.enemies_of(attacker.team):
            distance = attacker.position.manhattan_distance_to(enemy.position)
            if best is None or distance < best_distance:
                best, best_distance = enemy, distance
        return best

    def issue_action(self, attacker_id: str, defender_id: Optional[str], weapon_id: str) -> ActionOutcome:
        """Attack with a weapon, optionally letting the engine pick the target.

        Args:
            attacker_id: Unit performing the attack
            defender_id: Intended target, or None for the nearest enemy
            weapon_id: Weapon catalog id

        Returns:
            Outcome of the attack
        """
        if not self.state.is_active:
            return self._reject(InvalidReason.BATTLE_NOT_ACTIVE, "attack")

        attacker, reason = self._lookup(attacker_id)
        if reason is not None:
            return self._reject(reason, "attack")

        weapon = self.weapons.get(weapon_id)
        if weapon is None:
            return self._reject(InvalidReason.UNKNOWN_WEAPON, "attack")

        if defender_id is None:
            defender = self.find_default_target(attacker)
        else:
            defender = self.roster.get(defender_id)
            if defender is None:
                reason = InvalidReason.TARGET_DEAD if self.roster.is_fallen(defender_id) else InvalidReason.NO_TARGET
                return self._reject(reason, "attack")

        outcome = self.executor.execute(attacker, defender, weapon)
        if outcome.is_valid:
            self.turn_controller.check_battle_end()
        self.event_manager.process_events()
        return outcome

    def issue_swap(self, unit_id: str, other_id: str) -> ActionOutcome:
        """Trade places between two allies."""
        if not self.state.is_active:
            return self._reject(InvalidReason.BATTLE_NOT_ACTIVE, "swap")
        unit, reason = self._lookup(unit_id)
        if reason is not None:
            return self._reject(reason, "swap")
        other = self.roster.get(other_id)
        if other is None:
            reason = InvalidReason.TARGET_DEAD if self.roster.is_fallen(other_id) else InvalidReason.UNKNOWN_UNIT
            return self._reject(reason, "swap")

        reason = self.turn_controller.swap(unit, other)
        if reason is not None:
            self.event_manager.process_events()
            return ActionOutcome.invalid(reason)

        self.turn_controller.check_battle_end()
        self.event_manager.process_events()
        return ActionOutcome.swapped()

    def end_turn(self, team: Optional[Team] = None, now: float = 0.0) -> ActionOutcome:
        """End the acting team's half-turn."""
        reason = self.turn_controller.end_turn(team, now)
        self.event_manager.process_events()
        if reason is not None:
            return ActionOutcome.invalid(reason)
        return ActionOutcome.turn_ended()

    def update(self, now: float) -> bool:
        """Advance time-driven flow; returns True if an auto-resolved turn ended."""
        ended = self.turn_controller.poll(now)
        self.event_manager.process_events()
        return ended
