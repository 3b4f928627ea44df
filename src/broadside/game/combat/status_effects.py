"""Status effect store with a declared per-kind policy table.

Every combatant owns one :class:`StatusEffectStore`. How a kind stacks, when
its duration ticks, and whether it is a debuff are all read from
``EFFECT_POLICIES``. Call sites never decide these rules themselves.

Durations count owner turns. Charge-based effects (Curse, and the hit
counter on Marked) count incoming hits instead and are consumed through
:meth:`StatusEffectStore.consume_charge`.
"""

from dataclasses import dataclass
from typing import Iterator, Optional

from ...core.data import (
    StatusEffectType,
    StackPolicy,
    TickPhase,
    STATUS_EFFECT_NAMES,
    round_half_away,
)


@dataclass(frozen=True)
class EffectPolicy:
    """Static rules for one status effect kind."""
    stacking: StackPolicy
    tick_phase: TickPhase
    is_debuff: bool
    deals_damage: bool = False
    heals: bool = False


EFFECT_POLICIES: dict[StatusEffectType, EffectPolicy] = {
    # Damage over time
    StatusEffectType.BLEED: EffectPolicy(StackPolicy.STACK, TickPhase.TURN_END, True, deals_damage=True),
    StatusEffectType.FIRE: EffectPolicy(StackPolicy.REFRESH, TickPhase.TURN_START, True, deals_damage=True),
    StatusEffectType.POISON: EffectPolicy(StackPolicy.STACK, TickPhase.TURN_START, True, deals_damage=True),
    StatusEffectType.REGENERATION: EffectPolicy(StackPolicy.REFRESH, TickPhase.TURN_START, False, heals=True),

    # Action and movement gates
    StatusEffectType.STUN: EffectPolicy(StackPolicy.REFRESH, TickPhase.TURN_END, True),
    StatusEffectType.TRAP: EffectPolicy(StackPolicy.REFRESH, TickPhase.TURN_START, True),
    StatusEffectType.SLOWED: EffectPolicy(StackPolicy.REFRESH, TickPhase.TURN_START, True),
    StatusEffectType.FREE_MOVE: EffectPolicy(StackPolicy.REFRESH, TickPhase.TURN_START, False),
    StatusEffectType.KNOCKBACK_IMMUNE: EffectPolicy(StackPolicy.REFRESH, TickPhase.TURN_START, False),

    # Damage modifiers
    StatusEffectType.DAZE: EffectPolicy(StackPolicy.REFRESH, TickPhase.TURN_END, True),
    StatusEffectType.MARKED: EffectPolicy(StackPolicy.REFRESH, TickPhase.TURN_START, True),
    StatusEffectType.RATTLED: EffectPolicy(StackPolicy.REFRESH, TickPhase.TURN_END, True),
    StatusEffectType.CRACKED: EffectPolicy(StackPolicy.REFRESH, TickPhase.TURN_END, True),
    StatusEffectType.CURSE: EffectPolicy(StackPolicy.CHARGES, TickPhase.NONE, True),
    StatusEffectType.EXPOSED: EffectPolicy(StackPolicy.REFRESH, TickPhase.TURN_START, True),
    StatusEffectType.DAMAGE_BOOST: EffectPolicy(StackPolicy.REFRESH, TickPhase.TURN_START, False),
    StatusEffectType.SHIELDED: EffectPolicy(StackPolicy.REFRESH, TickPhase.TURN_START, False),
    StatusEffectType.GRIT_BOOST: EffectPolicy(StackPolicy.REFRESH, TickPhase.TURN_START, False),
    StatusEffectType.GRIT_REDUCTION: EffectPolicy(StackPolicy.REFRESH, TickPhase.TURN_START, True),

    # Misc
    StatusEffectType.HEAL_BLOCK: EffectPolicy(StackPolicy.REFRESH, TickPhase.TURN_START, True),
    StatusEffectType.MISS_CHANCE: EffectPolicy(StackPolicy.REFRESH, TickPhase.TURN_START, True),
    StatusEffectType.ENERGY_DRAIN: EffectPolicy(StackPolicy.REFRESH, TickPhase.TURN_START, True),
}


@dataclass
class StatusEffect:
    """One active effect instance.

    ``magnitude`` is the primary value (damage per tick, bonus fraction,
    curse multiplier, slow amount). ``magnitude2`` is a secondary value some
    kinds carry. ``charges`` is None for effects that only count turns.
    """
    effect_type: StatusEffectType
    duration: int
    magnitude: float = 0.0
    magnitude2: float = 0.0
    charges: Optional[int] = None
    source: Optional[str] = None

    @property
    def policy(self) -> EffectPolicy:
        return EFFECT_POLICIES[self.effect_type]

    @property
    def name(self) -> str:
        return STATUS_EFFECT_NAMES[self.effect_type]

    @property
    def is_debuff(self) -> bool:
        return self.policy.is_debuff

    def is_expired(self) -> bool:
        if self.charges is not None and self.charges <= 0:
            return True
        if self.policy.tick_phase is TickPhase.NONE:
            return False
        return self.duration <= 0


@dataclass
class EffectTick:
    """Periodic damage or healing produced by a tick."""
    effect_type: StatusEffectType
    health_damage: int = 0
    healing: int = 0


class StatusEffectStore:
    """Active status effects of a single combatant."""

    def __init__(self):
        self._effects: list[StatusEffect] = []

    def __iter__(self) -> Iterator[StatusEffect]:
        return iter(list(self._effects))

    def __len__(self) -> int:
        return len(self._effects)

    # Mutation

    def apply(self, effect: StatusEffect) -> bool:
        """Apply an effect according to its kind's stacking policy.

        Buffs are rejected while the owner is heal-blocked.

        Returns:
            True if the effect was added or refreshed
        """
        assert effect.duration >= 0, f"negative duration for {effect.name}: {effect.duration}"
        effect.duration = max(0, effect.duration)
        if effect.charges is not None:
            assert effect.charges >= 0, f"negative charges for {effect.name}: {effect.charges}"
            effect.charges = max(0, effect.charges)

        if not effect.is_debuff and self.is_heal_blocked():
            return False

        policy = effect.policy
        existing = self.get(effect.effect_type)

        if existing is None or policy.stacking is StackPolicy.STACK:
            self._effects.append(effect)
            return True

        # REFRESH and CHARGES keep a single instance per kind
        existing.duration = effect.duration
        existing.magnitude = effect.magnitude
        existing.magnitude2 = effect.magnitude2
        existing.charges = effect.charges
        existing.source = effect.source
        return True

    def remove(self, effect_type: StatusEffectType) -> int:
        """Remove every instance of a kind, returning how many were removed."""
        before = len(self._effects)
        self._effects = [e for e in self._effects if e.effect_type != effect_type]
        return before - len(self._effects)

    def clear(self) -> None:
        self._effects.clear()

    def consume_charge(self, effect_type: StatusEffectType) -> bool:
        """Spend one hit charge of an effect.

        Returns:
            True if the effect was used up and removed by this charge
        """
        effect = self.get(effect_type)
        if effect is None or effect.charges is None:
            return False

        effect.charges = max(0, effect.charges - 1)
        if effect.charges == 0:
            self._effects.remove(effect)
            return True
        return False

    def tick_turn_start(self) -> list[EffectTick]:
        """Resolve turn-start periodic effects and decrement turn-start durations."""
        return self._tick(TickPhase.TURN_START)

    def tick_turn_end(self) -> list[EffectTick]:
        """Resolve turn-end periodic effects and decrement turn-end durations."""
        return self._tick(TickPhase.TURN_END)

    def _tick(self, phase: TickPhase) -> list[EffectTick]:
        ticks = []
        heal_blocked = self.is_heal_blocked()

        for effect in self._effects:
            if effect.policy.tick_phase is not phase:
                continue

            if effect.policy.deals_damage:
                ticks.append(EffectTick(effect.effect_type, health_damage=max(0, round_half_away(effect.magnitude))))
            elif effect.policy.heals and not heal_blocked:
                ticks.append(EffectTick(effect.effect_type, healing=max(0, round_half_away(effect.magnitude))))

            effect.duration = max(0, effect.duration - 1)

        return ticks

    def remove_expired(self) -> list[StatusEffect]:
        """Drop effects whose duration or charges ran out and return them."""
        expired = [e for e in self._effects if e.is_expired()]
        if expired:
            self._effects = [e for e in self._effects if not e.is_expired()]
        return expired

    # Queries

    def get(self, effect_type: StatusEffectType) -> Optional[StatusEffect]:
        """Get the first active instance of a kind."""
        for effect in self._effects:
            if effect.effect_type == effect_type:
                return effect
        return None

    def has(self, effect_type: StatusEffectType) -> bool:
        return self.get(effect_type) is not None

    def query(self, effect_type: StatusEffectType) -> float:
        """Summed primary magnitude of all instances of a kind (0 if absent)."""
        return sum(e.magnitude for e in self._effects if e.effect_type == effect_type)

    def is_stunned(self) -> bool:
        return self.has(StatusEffectType.STUN)

    def is_trapped(self) -> bool:
        return self.has(StatusEffectType.TRAP)

    def is_heal_blocked(self) -> bool:
        return self.has(StatusEffectType.HEAL_BLOCK)

    def can_be_knocked_back(self) -> bool:
        return not self.has(StatusEffectType.KNOCKBACK_IMMUNE)

    def movement_penalty(self) -> int:
        """Tiles of movement lost to Slowed; FreeMove cancels the penalty."""
        if self.has(StatusEffectType.FREE_MOVE):
            return 0
        return max(0, round_half_away(self.query(StatusEffectType.SLOWED)))

    def incoming_damage_modifier(self, exposed_multiplier: float) -> float:
        """Additive bonus on damage this unit takes (Marked, Exposed, Shielded)."""
        modifier = self.query(StatusEffectType.MARKED) - self.query(StatusEffectType.SHIELDED)
        if self.has(StatusEffectType.EXPOSED):
            modifier += exposed_multiplier - 1.0
        return modifier

    def outgoing_damage_modifier(self) -> float:
        """Additive bonus on damage this unit deals (DamageBoost, Daze)."""
        return self.query(StatusEffectType.DAMAGE_BOOST) - self.query(StatusEffectType.DAZE)

    def morale_damage_taken_modifier(self) -> float:
        return self.query(StatusEffectType.RATTLED)

    def hull_damage_taken_modifier(self) -> float:
        return self.query(StatusEffectType.CRACKED)

    def grit_modifier(self) -> int:
        return round_half_away(
            self.query(StatusEffectType.GRIT_BOOST) - self.query(StatusEffectType.GRIT_REDUCTION)
        )

    def miss_chance(self) -> float:
        return min(1.0, max(0.0, self.query(StatusEffectType.MISS_CHANCE)))

    def energy_drain(self) -> int:
        return max(0, round_half_away(self.query(StatusEffectType.ENERGY_DRAIN)))

    def curse_multiplier(self) -> float:
        """Stored multiplier of the active curse, or 1.0 without one."""
        curse = self.get(StatusEffectType.CURSE)
        return curse.magnitude if curse is not None else 1.0
