"""Damage calculation pipeline.

Turns a resolved raw base damage into final health and morale losses.
The stages run in a fixed order and each stage feeds the next:

1. Base scaling by Power (melee) or Aim (ranged)
2. Pre-attack bonuses, summed onto a 1.0 baseline and applied once
3. Split into health and morale channels
4. Cover reduction (both channels)
5. Curse multiplier (both channels)
6. Grit damage reduction (health only)
7. Hull absorption (health only)
8. Focus-fire bonus (morale only)

Every integer-producing step rounds half away from zero. The calculator
only reads its inputs; consuming curse or Marked charges is reported on the
result and left to the caller.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ...core.data import CombatConfig, StatusEffectType, round_half_away

if TYPE_CHECKING:
    from ..entities.combatant import Combatant


@dataclass
class DamageContext:
    """Situational inputs of one damage calculation.

    Attributes:
        has_cover: Defender stands next to a hazard tile
        is_first_action: Attacker's first attack this turn on the team that went first
        combo_count: Position of this attack in the team's chain this turn (1 = first)
        focus_fire_stacks: Consecutive hits by this attacker on this defender, this one included
        bonuses: Named additive bonus terms supplied by the caller (hooks, proficiency...)
        flat_health_bonus: Flat damage added to the health channel after the split
        flat_morale_bonus: Flat damage added to the morale channel after the split
        hull_bypass: Fraction of health damage that ignores the hull pool
    """
    has_cover: bool = False
    is_first_action: bool = False
    combo_count: int = 1
    focus_fire_stacks: int = 1
    bonuses: dict[str, float] = field(default_factory=dict)
    flat_health_bonus: int = 0
    flat_morale_bonus: int = 0
    hull_bypass: float = 0.0


@dataclass
class DamageResult:
    """Outcome of one damage calculation."""
    final_health_damage: int
    final_morale_damage: int
    hull_absorbed: int = 0
    hull_damage: int = 0
    base_damage: int = 0
    damage_reduction: float = 0.0
    curse_consumed: bool = False
    marked_consumed: bool = False
    health_breakdown: list[str] = field(default_factory=list)
    morale_breakdown: list[str] = field(default_factory=list)

    @property
    def total_damage(self) -> int:
        return self.final_health_damage + self.final_morale_damage

    def describe(self) -> str:
        """One-line summary of both channels for logs."""
        return (
            f"HP {' '.join(self.health_breakdown)} | "
            f"Morale {' '.join(self.morale_breakdown)}"
        )


def grit_damage_reduction(hp_percent: float, morale_percent: float, grit: int,
                          config: CombatConfig) -> float:
    """Damage reduction from Grit.

    Wounded units and units with high morale resist more.
    """
    grit_factor = ((1.0 - hp_percent) * config.grit_low_hp_weight
                   + morale_percent * config.grit_morale_weight)
    reduction = grit_factor * max(0, grit) * config.grit_per_point
    return max(0.0, min(config.grit_dr_cap, reduction))


def first_action_bonus(speed: int, config: CombatConfig) -> float:
    return min(config.first_action_bonus_cap, speed * config.first_action_bonus_per_speed)


def combo_bonus(skill: int, combo_count: int, config: CombatConfig) -> float:
    """Bonus for the n-th attack of a chain; the first attack gets nothing."""
    chain = max(1, min(combo_count, config.max_combo_chain))
    step = max(config.combo_step_min, min(config.combo_step_max, skill * config.skill_combo_multiplier))
    return (chain - 1) * step


def focus_fire_bonus(stacks: int, config: CombatConfig) -> float:
    table = config.focus_fire_multipliers
    index = max(0, min(stacks, len(table) - 1))
    return table[index]


def _pct(value: float) -> str:
    return f"{value * 100:+.0f}%"


class DamageCalculator:
    """Computes damage results for attacks and secondary hits."""

    def __init__(self, config: CombatConfig):
        self.config = config

    def compute(
        self,
        raw_base_damage: int,
        is_melee: bool,
        attacker: "Combatant",
        defender: "Combatant",
        context: DamageContext,
    ) -> DamageResult:
        """Run the full pipeline for one hit.

        Args:
            raw_base_damage: Already-rolled weapon base damage
            is_melee: Melee (Power, morale-heavy) or ranged (Aim, health-heavy)
            attacker: Attacking combatant (read only)
            defender: Defending combatant (read only)
            context: Turn and position context for this hit

        Returns:
            DamageResult with both final channels and the mitigation breakdown
        """
        cfg = self.config
        health_notes: list[str] = []
        morale_notes: list[str] = []

        # 1. Base scaling
        scaling_stat = attacker.stats.power if is_melee else attacker.stats.aim
        base = max(0, raw_base_damage) + round_half_away(scaling_stat * cfg.scaling_coefficient)

        # 2. Pre-attack bonuses
        bonuses = dict(context.bonuses)
        if context.is_first_action:
            bonuses["FirstAction"] = first_action_bonus(attacker.stats.speed, cfg)
        if context.combo_count > 1:
            bonuses["Combo"] = combo_bonus(attacker.stats.skill, context.combo_count, cfg)
        outgoing = attacker.effects.outgoing_damage_modifier()
        if outgoing:
            bonuses["Effects"] = outgoing
        incoming = defender.effects.incoming_damage_modifier(cfg.exposed_multiplier)
        if incoming:
            bonuses["Vulnerable"] = incoming

        total_bonus = sum(bonuses.values())
        base = round_half_away(base * max(0.0, 1.0 + total_bonus))
        bonus_notes = [f"{_pct(v)}({k})" for k, v in bonuses.items() if v]

        # 3. Channel split
        if is_melee:
            health = base
            morale = round_half_away(base * cfg.melee_morale_multiplier)
            morale_notes.append(f"x{cfg.melee_morale_multiplier:g}(Melee)")
        else:
            health = round_half_away(base * cfg.ranged_hp_multiplier)
            morale = base
            health_notes.append(f"x{cfg.ranged_hp_multiplier:g}(Ranged)")

        rattled = defender.effects.morale_damage_taken_modifier()
        if rattled:
            morale = round_half_away(morale * (1.0 + rattled))
            morale_notes.append(f"{_pct(rattled)}(Rattled)")

        if context.flat_health_bonus:
            health += context.flat_health_bonus
            health_notes.append(f"+{context.flat_health_bonus}(Flat)")
        if context.flat_morale_bonus:
            morale += context.flat_morale_bonus
            morale_notes.append(f"+{context.flat_morale_bonus}(Flat)")

        # 4. Cover
        if context.has_cover:
            factor = 1.0 - cfg.cover_reduction
            health = round_half_away(health * factor)
            morale = round_half_away(morale * factor)
            health_notes.append(f"{_pct(-cfg.cover_reduction)}(Cover)")
            morale_notes.append(f"{_pct(-cfg.cover_reduction)}(Cover)")

        # 5. Curse
        curse_consumed = defender.effects.has(StatusEffectType.CURSE)
        if curse_consumed:
            multiplier = defender.effects.curse_multiplier()
            health = round_half_away(health * multiplier)
            morale = round_half_away(morale * multiplier)
            health_notes.append(f"x{multiplier:g}(Curse)")
            morale_notes.append(f"x{multiplier:g}(Curse)")

        # 6. Grit, evaluated on the defender's state before this hit
        grit = max(0, defender.stats.grit + defender.effects.grit_modifier())
        reduction = grit_damage_reduction(
            defender.health.get_hp_percent(), defender.morale.get_morale_percent(), grit, cfg
        )
        if reduction > 0:
            health = round_half_away(health * (1.0 - reduction))
            health_notes.append(f"{_pct(-reduction)}(Grit)")

        # 7. Hull
        hull_absorbed = 0
        hull_damage = 0
        hull_pool = max(0, defender.hull_current)
        if hull_pool > 0 and health > 0:
            absorbable = round_half_away(
                health * cfg.hull_absorb_percent * (1.0 - max(0.0, min(1.0, context.hull_bypass)))
            )
            hull_absorbed = max(0, min(hull_pool, absorbable))
            health -= hull_absorbed
            cracked = defender.effects.hull_damage_taken_modifier()
            hull_damage = min(hull_pool, round_half_away(hull_absorbed * (1.0 + cracked)))
            if hull_absorbed:
                health_notes.append(f"-{hull_absorbed}(Hull)")

        # 8. Focus fire
        focus = focus_fire_bonus(context.focus_fire_stacks, cfg)
        if focus > 0:
            morale = round_half_away(morale * (1.0 + focus))
            morale_notes.append(f"{_pct(focus)}(FocusFire x{context.focus_fire_stacks})")

        health = max(0, health)
        morale = max(0, morale)

        prefix = [f"{base} Base"] + bonus_notes
        return DamageResult(
            final_health_damage=health,
            final_morale_damage=morale,
            hull_absorbed=hull_absorbed,
            hull_damage=hull_damage,
            base_damage=base,
            damage_reduction=reduction,
            curse_consumed=curse_consumed,
            marked_consumed=defender.effects.has(StatusEffectType.MARKED),
            health_breakdown=prefix + health_notes + [f"= {health}"],
            morale_breakdown=prefix + morale_notes + [f"= {morale}"],
        )

    def compute_secondary(self, amount: int, defender: "Combatant", hull_bypass: float = 0.0) -> DamageResult:
        """Mitigate splash or ricochet damage.

        Secondary hits skip scaling, bonuses, curse and focus fire, but still
        pass through Grit and the hull pool.
        """
        cfg = self.config
        health = max(0, amount)

        grit = max(0, defender.stats.grit + defender.effects.grit_modifier())
        reduction = grit_damage_reduction(
            defender.health.get_hp_percent(), defender.morale.get_morale_percent(), grit, cfg
        )
        health = round_half_away(health * (1.0 - reduction))

        hull_absorbed = 0
        if defender.hull_current > 0 and health > 0:
            absorbable = round_half_away(health * cfg.hull_absorb_percent * (1.0 - hull_bypass))
            hull_absorbed = max(0, min(defender.hull_current, absorbable))
            health -= hull_absorbed

        return DamageResult(
            final_health_damage=max(0, health),
            final_morale_damage=0,
            hull_absorbed=hull_absorbed,
            hull_damage=hull_absorbed,
            base_damage=max(0, amount),
            damage_reduction=reduction,
            health_breakdown=[f"{amount} Splash", f"= {max(0, health)}"],
            morale_breakdown=["= 0"],
        )
