"""
Combat action execution.

The executor runs one attack from validation to bookkeeping. The steps are
strictly sequential because post-attack hooks depend on whether the defender
already surrendered or died:

1. Validate attacker, defender, weapon and energy
2. Spend energy (and an arrow for ranged weapons), roll miss chance
3. Resolve row blocking against obstacles
4. Curse from a cursed tile, pre-attack hook, damage calculation
5. Apply damage to hull, health and morale; consume curse/Marked charges
6. Surrender check, then death check
7. Post-attack hook
8. Attacker counters (acted, attack count, combo chain, buzz decay)
"""
import random
from typing import TYPE_CHECKING, Optional

from ...core.data import (
    CombatConfig,
    InvalidReason,
    StatusEffectType,
    Team,
    Vector2,
    WeaponClass,
)
from ...core.events import (
    AttackBlocked,
    AttackResolved,
    LogMessage,
    MoraleDamaged,
    StatusEffectApplied,
    StatusEffectExpired,
    UnitDamaged,
    UnitDied,
    UnitHealed,
    UnitSurrendered,
)
from ..managers.log_manager import LogLevel
from .damage_calculator import DamageCalculator, DamageContext, DamageResult
from .effect_registry import AttackContext, EffectRegistry
from .outcomes import ActionOutcome
from .status_effects import StatusEffect

if TYPE_CHECKING:
    from ...core.engine import BattleState
    from ...core.events import EventManager
    from ..battlefield import Battlefield
    from ..entities.combatant import Combatant
    from ..entities.roster import Roster
    from ..managers.energy_manager import ResourcePool
    from .weapons import WeaponContext


class CombatActionExecutor:
    """Executes attacks and the secondary effects they trigger."""

    def __init__(
        self,
        config: CombatConfig,
        battle_state: "BattleState",
        roster: "Roster",
        battlefield: "Battlefield",
        pools: dict[Team, "ResourcePool"],
        registry: EffectRegistry,
        event_manager: "EventManager",
        rng: Optional[random.Random] = None,
    ):
        self.config = config
        self.battle_state = battle_state
        self.roster = roster
        self.battlefield = battlefield
        self.pools = pools
        self.registry = registry
        self.event_manager = event_manager
        self.rng = rng or random.Random()
        self.calculator = DamageCalculator(config)

    def _emit_log(self, message: str, category: str = "BATTLE", level: str = "INFO") -> None:
        """Emit a log message event."""
        level_map = {
            "DEBUG": LogLevel.DEBUG,
            "INFO": LogLevel.INFO,
            "WARNING": LogLevel.WARNING,
            "ERROR": LogLevel.ERROR
        }
        self.event_manager.publish(
            LogMessage(
                round_number=self.battle_state.round_number,
                message=message,
                category=category,
                level=level_map.get(level, LogLevel.INFO),
                source="CombatActionExecutor"
            ),
            source="CombatActionExecutor"
        )

    # ============== Attack ==============

    def validate(self, attacker: "Combatant", defender: Optional["Combatant"],
                 weapon: "WeaponContext") -> Optional[InvalidReason]:
        """Check whether an attack may run right now.

        Returns:
            The first reason the attack is illegal, or None if it may proceed
        """
        if not self.battle_state.is_active:
            return InvalidReason.BATTLE_NOT_ACTIVE
        if not attacker.is_alive:
            return InvalidReason.ATTACKER_DEAD
        if attacker not in self.roster:
            return InvalidReason.UNKNOWN_UNIT
        if attacker.is_surrendered:
            return InvalidReason.ATTACKER_SURRENDERED
        if attacker.team != self.battle_state.acting_team:
            return InvalidReason.NOT_YOUR_TURN
        if attacker.effects.is_stunned():
            return InvalidReason.ATTACKER_STUNNED
        if attacker.turn_state.has_acted:
            return InvalidReason.ALREADY_ACTED
        if defender is None:
            return InvalidReason.NO_TARGET
        if not defender.is_alive or defender not in self.roster:
            return InvalidReason.TARGET_DEAD
        if defender.is_surrendered:
            return InvalidReason.TARGET_SURRENDERED
        if defender.team == attacker.team:
            return InvalidReason.FRIENDLY_TARGET
        if weapon.weapon_class is not attacker.weapon_class:
            return InvalidReason.WRONG_WEAPON_CLASS
        if weapon.weapon_class is WeaponClass.RANGED and attacker.turn_state.arrows <= 0:
            return InvalidReason.NO_AMMO
        if not self.pools[attacker.team].can_afford(self._energy_cost(weapon)):
            return InvalidReason.INSUFFICIENT_ENERGY
        return None

    def _energy_cost(self, weapon: "WeaponContext") -> int:
        return weapon.energy_cost if weapon.energy_cost is not None else self.config.attack_energy_cost

    def execute(self, attacker: "Combatant", defender: Optional["Combatant"],
                weapon: "WeaponContext") -> ActionOutcome:
        """Run one attack.

        Args:
            attacker: Combatant issuing the attack
            defender: Intended target (re-validated here)
            weapon: Equipment used for the attack

        Returns:
            Hit, Blocked, Missed or Invalid outcome
        """
        reason = self.validate(attacker, defender, weapon)
        if reason is not None:
            self._emit_log(f"{attacker.name} cannot attack: {reason.name}", "BATTLE", "DEBUG")
            return ActionOutcome.invalid(reason)

        self.pools[attacker.team].spend(self._energy_cost(weapon))
        if weapon.weapon_class is WeaponClass.RANGED:
            attacker.turn_state.use_arrow()

        is_first_attack = attacker.turn_state.attacks_this_turn == 0

        miss_chance = attacker.effects.miss_chance()
        if miss_chance > 0 and self.rng.random() < miss_chance:
            self._emit_log(f"{attacker.name} misses {defender.name}")
            self._finish_attack(attacker, landed=False)
            return ActionOutcome.missed()

        obstacle = self.battlefield.find_blocking_obstacle(attacker.position, defender.position)
        if obstacle is not None:
            return self._resolve_blocked(attacker, defender, obstacle)

        # Curse from the attacker's tile already applies to this hit
        standing = self.battlefield.get_standing_bonus(attacker.position)
        if standing is not None and standing.applies_curse:
            self.apply_status_effect(defender, StatusEffect(
                StatusEffectType.CURSE, duration=0,
                magnitude=self.config.curse_multiplier,
                charges=self.config.curse_charges,
                source=attacker.unit_id,
            ))

        if weapon.effect_id is not None and not self.registry.has(weapon.effect_id):
            self._emit_log(f"Unknown effect '{weapon.effect_id}' on {weapon.name}; ignoring", "WARNING", "WARNING")
        hook = self.registry.resolve(weapon.effect_id)
        ctx = AttackContext(attacker, defender, weapon, self, is_first_attack=is_first_attack)

        multiplier = hook.pre_attack(ctx)
        context = self._build_damage_context(attacker, defender, weapon, multiplier, is_first_attack)
        result = self.calculator.compute(weapon.base_damage, weapon.is_melee, attacker, defender, context)
        ctx.result = result

        self._apply_result(attacker, defender, result)
        self._emit_log(f"{attacker.name} -> {defender.name}: {result.describe()}")

        surrendered, died = self.resolve_casualty(defender, attacker)
        ctx.target_surrendered = surrendered
        ctx.target_died = died

        hook.post_attack(ctx)

        self._finish_attack(attacker, landed=True)
        return ActionOutcome.hit(result, target_died=died, target_surrendered=surrendered)

    def _resolve_blocked(self, attacker: "Combatant", defender: "Combatant",
                         obstacle: Vector2) -> ActionOutcome:
        destroyed = self.battlefield.damage_obstacle(obstacle, self.config.obstacle_block_damage)
        self.event_manager.publish(
            AttackBlocked(
                round_number=self.battle_state.round_number,
                attacker=attacker,
                defender=defender,
                obstacle_position=obstacle,
                obstacle_destroyed=destroyed,
            ),
            source="CombatActionExecutor"
        )
        self._emit_log(
            f"{attacker.name}'s attack on {defender.name} blocked by obstacle at {obstacle}"
            + (" (destroyed)" if destroyed else "")
        )
        self._finish_attack(attacker, landed=False)
        return ActionOutcome.blocked(obstacle)

    def _build_damage_context(self, attacker: "Combatant", defender: "Combatant",
                              weapon: "WeaponContext", multiplier: float,
                              is_first_attack: bool) -> DamageContext:
        cfg = self.config
        bonuses: dict[str, float] = {}

        if multiplier != 1.0:
            bonuses["Weapon"] = multiplier - 1.0
        if weapon.role_tag is not None and weapon.role_tag == attacker.role:
            bonuses["Proficiency"] = attacker.stats.proficiency * cfg.proficiency_bonus_per_point
        if attacker.turn_state.is_too_drunk():
            bonuses["Drunk"] = -cfg.drunk_damage_penalty

        flat_health = flat_morale = 0
        standing = self.battlefield.get_standing_bonus(attacker.position)
        if standing is not None:
            flat_health = standing.flat_health
            flat_morale = standing.flat_morale

        max_stacks = len(cfg.focus_fire_multipliers) - 1
        return DamageContext(
            has_cover=self.battlefield.is_adjacent_to_hazard(defender.position),
            is_first_action=is_first_attack and self.battle_state.first_team == attacker.team,
            combo_count=self.battle_state.combo_count + 1,
            focus_fire_stacks=defender.turn_state.peek_focus_fire(attacker.unit_id, max_stacks),
            bonuses=bonuses,
            flat_health_bonus=flat_health,
            flat_morale_bonus=flat_morale,
            hull_bypass=weapon.hull_bypass,
        )

    def _apply_result(self, attacker: "Combatant", defender: "Combatant", result: DamageResult) -> None:
        defender.health.drain_hull(result.hull_damage)
        health_lost = defender.take_damage(result.final_health_damage)
        morale_lost = defender.lose_morale(result.final_morale_damage)

        if result.curse_consumed and defender.effects.consume_charge(StatusEffectType.CURSE):
            self._publish_expired(defender, StatusEffectType.CURSE)
        if result.marked_consumed and defender.effects.consume_charge(StatusEffectType.MARKED):
            self._publish_expired(defender, StatusEffectType.MARKED)

        max_stacks = len(self.config.focus_fire_multipliers) - 1
        defender.turn_state.register_hit_from(attacker.unit_id, max_stacks)

        round_number = self.battle_state.round_number
        self.event_manager.publish(
            UnitDamaged(round_number=round_number, unit=defender, amount=health_lost,
                        hull_absorbed=result.hull_absorbed, source=attacker.name),
            source="CombatActionExecutor"
        )
        if morale_lost:
            self.event_manager.publish(
                MoraleDamaged(round_number=round_number, unit=defender, amount=morale_lost,
                              new_morale=defender.morale_current),
                source="CombatActionExecutor"
            )
        self.event_manager.publish(
            AttackResolved(round_number=round_number, attacker=attacker, defender=defender, result=result),
            source="CombatActionExecutor"
        )

    def _finish_attack(self, attacker: "Combatant", landed: bool) -> None:
        state = attacker.turn_state
        state.has_acted = True
        state.attacks_this_turn += 1
        state.reduce_buzz(self.config.buzz_decay_on_attack)

        # A miss or a blocked shot breaks the team's combo chain
        if landed:
            self.battle_state.combo_count += 1
        else:
            self.battle_state.combo_count = 0

    # ============== Casualties ==============

    def resolve_casualty(self, unit: "Combatant", killer: Optional["Combatant"] = None) -> tuple[bool, bool]:
        """Run the surrender check, then the death check, for a damaged unit.

        Returns:
            (surrendered_now, died)
        """
        surrendered = unit.morale.check_surrender()
        if surrendered:
            self.event_manager.publish(
                UnitSurrendered(round_number=self.battle_state.round_number, unit=unit),
                source="CombatActionExecutor"
            )
            self._emit_log(f"{unit.name} surrenders!")

        died = not unit.is_alive
        if died:
            self.destroy_unit(unit, killer)
        return surrendered, died

    def destroy_unit(self, unit: "Combatant", killer: Optional["Combatant"] = None) -> None:
        """Remove a dead unit from the roster and the battlefield."""
        if not self.roster.remove(unit):
            return
        self.battlefield.remove_unit(unit)
        unit.effects.clear()
        self.event_manager.publish(
            UnitDied(round_number=self.battle_state.round_number, unit=unit, killer=killer),
            source="CombatActionExecutor"
        )
        self._emit_log(f"{unit.name} has fallen" + (f" to {killer.name}" if killer else ""))

    # ============== Services used by effect hooks and the turn controller ==============

    def apply_status_effect(self, target: "Combatant", effect: StatusEffect) -> bool:
        """Apply a status effect and announce it."""
        if not target.is_alive:
            return False
        applied = target.effects.apply(effect)
        if applied:
            self.event_manager.publish(
                StatusEffectApplied(
                    round_number=self.battle_state.round_number,
                    unit=target,
                    effect_type=effect.effect_type,
                    duration=effect.duration,
                    magnitude=effect.magnitude,
                ),
                source="CombatActionExecutor"
            )
            self._emit_log(f"{target.name} is afflicted with {effect.name}", "EFFECT")
        return applied

    def _publish_expired(self, unit: "Combatant", effect_type: StatusEffectType) -> None:
        self.event_manager.publish(
            StatusEffectExpired(round_number=self.battle_state.round_number, unit=unit, effect_type=effect_type),
            source="CombatActionExecutor"
        )

    def publish_expired(self, unit: "Combatant", effects: list[StatusEffect]) -> None:
        for effect in effects:
            self._publish_expired(unit, effect.effect_type)

    def apply_secondary_damage(self, source: Optional["Combatant"], target: "Combatant",
                               amount: int, hull_bypass: float = 0.0) -> int:
        """Deal splash-style health damage that skips the attack bonuses."""
        if not target.is_alive or target.is_surrendered or amount <= 0:
            return 0

        result = self.calculator.compute_secondary(amount, target, hull_bypass)
        target.health.drain_hull(result.hull_damage)
        dealt = target.take_damage(result.final_health_damage)
        self.event_manager.publish(
            UnitDamaged(round_number=self.battle_state.round_number, unit=target, amount=dealt,
                        hull_absorbed=result.hull_absorbed, source="splash"),
            source="CombatActionExecutor"
        )
        self.resolve_casualty(target, source)
        return dealt

    def apply_periodic_damage(self, target: "Combatant", amount: int, source: str) -> int:
        """Deal status-effect damage (bleed, fire) straight to health."""
        if not target.is_alive or amount <= 0:
            return 0

        dealt = target.take_damage(amount)
        self.event_manager.publish(
            UnitDamaged(round_number=self.battle_state.round_number, unit=target, amount=dealt,
                        hull_absorbed=0, source=source),
            source="CombatActionExecutor"
        )
        self._emit_log(f"{target.name} takes {dealt} {source} damage", "EFFECT")
        self.resolve_casualty(target)
        return dealt

    def apply_secondary_morale_damage(self, target: "Combatant", amount: int) -> int:
        if not target.is_alive or target.is_surrendered or amount <= 0:
            return 0

        lost = target.lose_morale(amount)
        if lost:
            self.event_manager.publish(
                MoraleDamaged(round_number=self.battle_state.round_number, unit=target,
                              amount=lost, new_morale=target.morale_current),
                source="CombatActionExecutor"
            )
        self.resolve_casualty(target)
        return lost

    def heal_unit(self, target: "Combatant", health: int, morale: int = 0) -> int:
        """Restore health and morale, respecting heal block; returns health restored."""
        restored = target.heal(health)
        restored_morale = target.restore_morale(morale) if morale else 0
        if restored or restored_morale:
            self.event_manager.publish(
                UnitHealed(round_number=self.battle_state.round_number, unit=target,
                           health_restored=restored, morale_restored=restored_morale),
                source="CombatActionExecutor"
            )
        return restored

    def refund_energy(self, team: Team, amount: int) -> int:
        return self.pools[team].refund(amount)

    def units_near(self, position: Vector2, radius: int, team: Optional[Team] = None) -> list["Combatant"]:
        return [u for u in self.battlefield.units_within(position, radius, team) if u.is_active]

    def unit_behind(self, attacker: "Combatant", defender: "Combatant") -> Optional["Combatant"]:
        unit = self.battlefield.unit_behind(attacker.position, defender.position)
        return unit if unit is not None and unit.is_active else None
