"""Effect hook registry.

Weapons and relics name an effect id; the registry maps that id to a hook
object with two entry points:

- ``pre_attack(ctx) -> float``: damage multiplier folded into the additive
  bonus sum (1.0 means no change)
- ``post_attack(ctx) -> None``: runs after damage, surrender and death have
  been applied, and may apply effects, deal splash damage or refund energy

Hooks read their tuning numbers from the weapon's ``params`` so a single hook
instance serves every weapon that names it. Unknown ids resolve to a shared
no-op hook.
"""

from dataclasses import dataclass
from typing import Optional, TYPE_CHECKING

from ...core.data import StatusEffectType, round_half_away
from .status_effects import StatusEffect

if TYPE_CHECKING:
    from ..entities.combatant import Combatant
    from .combat_executor import CombatActionExecutor
    from .damage_calculator import DamageResult
    from .weapons import WeaponContext


@dataclass
class AttackContext:
    """What a hook can see and do during one attack."""
    attacker: "Combatant"
    defender: "Combatant"
    weapon: "WeaponContext"
    executor: "CombatActionExecutor"
    is_first_attack: bool = False
    result: Optional["DamageResult"] = None
    target_died: bool = False
    target_surrendered: bool = False

    def param(self, key: str, default=None):
        return self.weapon.param(key, default)

    def apply_effect(self, target: "Combatant", effect: StatusEffect) -> bool:
        return self.executor.apply_status_effect(target, effect)

    def deal_damage(self, target: "Combatant", amount: int) -> int:
        """Deal secondary health damage, returning what actually landed."""
        return self.executor.apply_secondary_damage(self.attacker, target, amount, self.weapon.hull_bypass)

    def deal_morale_damage(self, target: "Combatant", amount: int) -> int:
        return self.executor.apply_secondary_morale_damage(target, amount)

    def heal(self, target: "Combatant", amount: int) -> int:
        return self.executor.heal_unit(target, amount)

    def refund_energy(self, amount: int) -> int:
        return self.executor.refund_energy(self.attacker.team, amount)


class EffectHook:
    """Base hook: no bonus and no follow-up."""

    def pre_attack(self, ctx: AttackContext) -> float:
        return 1.0

    def post_attack(self, ctx: AttackContext) -> None:
        pass


NO_OP_HOOK = EffectHook()


class EffectRegistry:
    """Maps effect identifiers to hook objects."""

    def __init__(self):
        self._hooks: dict[str, EffectHook] = {}

    def register(self, effect_id: str, hook: EffectHook) -> None:
        self._hooks[effect_id] = hook

    def unregister(self, effect_id: str) -> bool:
        return self._hooks.pop(effect_id, None) is not None

    def has(self, effect_id: Optional[str]) -> bool:
        return effect_id is not None and effect_id in self._hooks

    def resolve(self, effect_id: Optional[str]) -> EffectHook:
        """Get the hook for an id, falling back to the no-op hook."""
        if effect_id is None:
            return NO_OP_HOOK
        return self._hooks.get(effect_id, NO_OP_HOOK)

    def ids(self) -> list[str]:
        return sorted(self._hooks)


# Pre-attack bonuses

class FinisherHook(EffectHook):
    """Bonus damage against defenders below a health fraction."""

    def pre_attack(self, ctx: AttackContext) -> float:
        if ctx.defender.health.get_hp_percent() < ctx.param("threshold", 0.5):
            return 1.0 + ctx.param("bonus", 0.10)
        return 1.0


class QuickDrawHook(EffectHook):
    """Bonus damage on the attacker's first attack of the turn."""

    def pre_attack(self, ctx: AttackContext) -> float:
        if ctx.is_first_attack:
            return 1.0 + ctx.param("bonus", 0.15)
        return 1.0


# Status effect appliers

class _ApplyEffectHook(EffectHook):
    """Applies one status effect to a defender that is still standing."""
    effect_type: StatusEffectType

    def build_effect(self, ctx: AttackContext) -> StatusEffect:
        return StatusEffect(
            self.effect_type,
            duration=int(ctx.param("duration", 1)),
            magnitude=float(ctx.param("magnitude", 0.0)),
            source=ctx.attacker.unit_id,
        )

    def post_attack(self, ctx: AttackContext) -> None:
        if ctx.target_died:
            return
        ctx.apply_effect(ctx.defender, self.build_effect(ctx))


class GashHook(_ApplyEffectHook):
    effect_type = StatusEffectType.BLEED

    def build_effect(self, ctx: AttackContext) -> StatusEffect:
        return StatusEffect(
            StatusEffectType.BLEED,
            duration=int(ctx.param("duration", 2)),
            magnitude=float(ctx.param("damage", 20)),
            source=ctx.attacker.unit_id,
        )


class ConcussHook(_ApplyEffectHook):
    effect_type = StatusEffectType.STUN


class RattleHook(_ApplyEffectHook):
    effect_type = StatusEffectType.RATTLED


class ApplyHealBlockHook(_ApplyEffectHook):
    effect_type = StatusEffectType.HEAL_BLOCK


class CrackHook(_ApplyEffectHook):
    """Strips part of the hull pool and leaves the hull cracked."""
    effect_type = StatusEffectType.CRACKED

    def post_attack(self, ctx: AttackContext) -> None:
        if ctx.target_died:
            return
        ctx.defender.health.reduce_hull_percent(float(ctx.param("hull_percent", 0.15)))
        super().post_attack(ctx)


class ShrapnelHook(_ApplyEffectHook):
    """Marks the defender so the next hits against it deal more."""
    effect_type = StatusEffectType.MARKED

    def build_effect(self, ctx: AttackContext) -> StatusEffect:
        return StatusEffect(
            StatusEffectType.MARKED,
            duration=int(ctx.param("duration", 2)),
            magnitude=float(ctx.param("bonus", 0.15)),
            charges=int(ctx.param("hits", 2)),
            source=ctx.attacker.unit_id,
        )


class BadOmenHook(_ApplyEffectHook):
    """Curses the defender for a number of incoming hits."""
    effect_type = StatusEffectType.CURSE

    def build_effect(self, ctx: AttackContext) -> StatusEffect:
        cfg = ctx.executor.config
        return StatusEffect(
            StatusEffectType.CURSE,
            duration=0,
            magnitude=float(ctx.param("multiplier", cfg.curse_multiplier)),
            charges=int(ctx.param("charges", cfg.curse_charges)),
            source=ctx.attacker.unit_id,
        )


# Secondary damage and morale

class IntimidatingCutHook(EffectHook):
    """Extra morale damage against already shaken defenders."""

    def post_attack(self, ctx: AttackContext) -> None:
        if ctx.target_died or ctx.target_surrendered:
            return
        if ctx.defender.morale.get_morale_percent() < ctx.param("morale_threshold", 0.8):
            ctx.deal_morale_damage(ctx.defender, int(ctx.param("morale_damage", 15)))


class ScattershotHook(EffectHook):
    """Splashes a fraction of the health damage onto enemies around the defender."""

    def post_attack(self, ctx: AttackContext) -> None:
        if ctx.result is None:
            return
        splash = round_half_away(ctx.result.final_health_damage * ctx.param("fraction", 0.2))
        if splash <= 0:
            return
        radius = int(ctx.param("radius", 1))
        for unit in ctx.executor.units_near(ctx.defender.position, radius, ctx.defender.team):
            if unit is not ctx.defender:
                ctx.deal_damage(unit, splash)


class LineBreakHook(EffectHook):
    """Carries a fraction of the damage into the unit standing behind the defender."""

    def post_attack(self, ctx: AttackContext) -> None:
        if ctx.result is None:
            return
        behind = ctx.executor.unit_behind(ctx.attacker, ctx.defender)
        if behind is None or behind.team == ctx.attacker.team:
            return
        amount = round_half_away(ctx.result.final_health_damage * ctx.param("fraction", 0.4))
        if amount > 0:
            ctx.deal_damage(behind, amount)


# Resource hooks

class PilferHook(EffectHook):
    """The attacker helps themselves to the defender's rum."""

    def post_attack(self, ctx: AttackContext) -> None:
        ctx.attacker.turn_state.add_buzz(int(ctx.param("buzz", 10)))


class StealHealthHook(EffectHook):
    """Heals the attacker for a fraction of the health damage dealt."""

    def post_attack(self, ctx: AttackContext) -> None:
        if ctx.result is None:
            return
        amount = round_half_away(ctx.result.final_health_damage * ctx.param("fraction", 0.25))
        if amount > 0:
            ctx.heal(ctx.attacker, amount)


class RestoreEnergyOnKillHook(EffectHook):
    def post_attack(self, ctx: AttackContext) -> None:
        if ctx.target_died:
            ctx.refund_energy(int(ctx.param("energy", 1)))


def create_default_registry() -> EffectRegistry:
    """Registry preloaded with the built-in hooks."""
    registry = EffectRegistry()
    registry.register("finisher", FinisherHook())
    registry.register("quick_draw", QuickDrawHook())
    registry.register("gash", GashHook())
    registry.register("concuss", ConcussHook())
    registry.register("rattle", RattleHook())
    registry.register("crack", CrackHook())
    registry.register("shrapnel", ShrapnelHook())
    registry.register("bad_omen", BadOmenHook())
    registry.register("apply_heal_block", ApplyHealBlockHook())
    registry.register("intimidating_cut", IntimidatingCutHook())
    registry.register("scattershot", ScattershotHook())
    registry.register("line_break", LineBreakHook())
    registry.register("pilfer", PilferHook())
    registry.register("steal_health", StealHealthHook())
    registry.register("restore_energy_on_kill", RestoreEnergyOnKillHook())
    return registry
