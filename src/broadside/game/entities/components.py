"""Combat components for crew members.

This module contains the concrete component implementations a combatant is
assembled from: Actor, Stats, Health, Morale, TurnState and Effects.
"""

from typing import TYPE_CHECKING, Optional

from ...core.entities import Component
from ...core.data import (
    ComponentType,
    StatBlock,
    Team,
    UnitRole,
    Vector2,
    WeaponClass,
    ROLE_NAMES,
    round_half_away,
)
from ..combat.status_effects import StatusEffectStore

if TYPE_CHECKING:
    from ...core.entities.components import Entity


class ActorComponent(Component):
    """Component for identity and classification.

    Handles who the unit is: name, crew role, team, the class of weapon it
    fights with, and where it stands.
    """

    def __init__(self, entity: "Entity", name: str, role: UnitRole, team: Team,
                 weapon_class: WeaponClass, position: Vector2):
        """Initialize actor component.

        Args:
            entity: The entity this component belongs to
            name: Display name of the unit
            role: Crew role (Captain, Surgeon, etc.)
            team: Team affiliation
            weapon_class: Melee or ranged
            position: Grid position at deployment
        """
        super().__init__(entity)
        self.name = name
        self.role = role
        self.team = team
        self.weapon_class = weapon_class
        self.position = position

    def get_component_type(self) -> ComponentType:
        return ComponentType.ACTOR

    def get_role_name(self) -> str:
        return ROLE_NAMES[self.role]


class StatsComponent(Component):
    """Holds the frozen stat block a unit was deployed with."""

    def __init__(self, entity: "Entity", stats: StatBlock):
        super().__init__(entity)
        self.stats = stats

    def get_component_type(self) -> ComponentType:
        return ComponentType.STATS


class HealthComponent(Component):
    """Component for life, death and the hull absorption pool.

    Hit points never go below zero and the hull pool stays within
    ``[0, hull_max]``.
    """

    def __init__(self, entity: "Entity", hp_max: int, hull_max: int):
        """Initialize health component.

        Args:
            entity: The entity this component belongs to
            hp_max: Maximum hit points
            hull_max: Maximum hull pool (base + hull stat x per-point value)
        """
        super().__init__(entity)
        if hp_max < 0 or hull_max < 0:
            raise ValueError("Maximum HP and hull cannot be negative")
        self.hp_max = hp_max
        self.hp_current = hp_max
        self.hull_max = hull_max
        self.hull_current = hull_max

    def get_component_type(self) -> ComponentType:
        return ComponentType.HEALTH

    def is_alive(self) -> bool:
        return self.hp_current > 0

    def get_hp_percent(self) -> float:
        """Get current health as a fraction of maximum (0.0 to 1.0)."""
        if self.hp_max <= 0:
            return 0.0
        return self.hp_current / self.hp_max

    def take_damage(self, amount: int) -> int:
        """Apply health damage.

        Returns:
            Actual damage dealt (may be less due to overkill prevention)

        Raises:
            ValueError: If amount is negative
        """
        if amount < 0:
            raise ValueError("Damage amount cannot be negative")

        old_hp = self.hp_current
        self.hp_current = max(0, self.hp_current - amount)
        return old_hp - self.hp_current

    def heal(self, amount: int) -> int:
        """Restore health up to the maximum, returning the amount restored."""
        if amount < 0:
            raise ValueError("Healing amount cannot be negative")

        old_hp = self.hp_current
        self.hp_current = min(self.hp_max, self.hp_current + amount)
        return self.hp_current - old_hp

    def drain_hull(self, amount: int) -> int:
        """Remove hull from the pool, returning how much was actually removed."""
        assert self.hull_current >= 0, f"hull pool negative: {self.hull_current}"
        self.hull_current = max(0, self.hull_current)

        drained = min(self.hull_current, max(0, amount))
        self.hull_current -= drained
        return drained

    def reduce_hull_percent(self, fraction: float) -> int:
        """Remove a fraction of the current hull pool."""
        return self.drain_hull(round_half_away(self.hull_current * fraction))

    def restore_hull(self, amount: int) -> int:
        old_hull = self.hull_current
        self.hull_current = min(self.hull_max, self.hull_current + max(0, amount))
        return self.hull_current - old_hull


class MoraleComponent(Component):
    """Component for morale and the one-way surrender transition."""

    def __init__(self, entity: "Entity", morale_max: int, surrender_threshold: int):
        """Initialize morale component.

        Args:
            entity: The entity this component belongs to
            morale_max: Maximum morale
            surrender_threshold: Morale points below which the unit surrenders
        """
        super().__init__(entity)
        self.morale_max = morale_max
        self.morale_current = morale_max
        self.surrender_threshold = surrender_threshold
        self.has_surrendered = False

    def get_component_type(self) -> ComponentType:
        return ComponentType.MORALE

    def get_morale_percent(self) -> float:
        if self.morale_max <= 0:
            return 0.0
        return self.morale_current / self.morale_max

    def get_threshold_value(self) -> int:
        return self.surrender_threshold

    def lose_morale(self, amount: int) -> int:
        """Apply morale damage, returning the amount actually lost."""
        if amount < 0:
            raise ValueError("Morale loss cannot be negative")

        old_morale = self.morale_current
        self.morale_current = max(0, self.morale_current - amount)
        return old_morale - self.morale_current

    def restore_morale(self, amount: int) -> int:
        if amount < 0:
            raise ValueError("Morale restore cannot be negative")

        old_morale = self.morale_current
        self.morale_current = min(self.morale_max, self.morale_current + amount)
        return self.morale_current - old_morale

    def check_surrender(self) -> bool:
        """Enter the surrendered state if morale fell below the threshold.

        Returns:
            True only on the call that performs the transition
        """
        if self.has_surrendered:
            return False
        if self.morale_current < self.get_threshold_value():
            self.has_surrendered = True
            return True
        return False


class TurnStateComponent(Component):
    """Per-turn and per-round counters plus consumable personal resources."""

    def __init__(self, entity: "Entity", buzz_max: int, max_arrows: int):
        super().__init__(entity)
        self.has_acted = False
        self.attacks_this_turn = 0
        self.swap_cooldown = 0

        # Focus fire is tracked on the defender
        self.focus_fire_stacks = 0
        self.last_attacker_id: Optional[str] = None

        self.buzz_max = buzz_max
        self.buzz_current = 0

        self.max_arrows = max_arrows
        self.arrows = max_arrows

    def get_component_type(self) -> ComponentType:
        return ComponentType.TURN_STATE

    def start_turn(self, buzz_decay: int) -> None:
        """Reset per-turn counters at the owner's turn start."""
        self.has_acted = False
        self.attacks_this_turn = 0
        self.buzz_current = max(0, self.buzz_current - buzz_decay)
        if self.swap_cooldown > 0:
            self.swap_cooldown -= 1

    def reset_focus_fire(self) -> None:
        self.focus_fire_stacks = 0
        self.last_attacker_id = None

    def register_hit_from(self, attacker_id: str, max_stacks: int) -> int:
        """Record a hit for focus fire and return the new consecutive count.

        A different attacker restarts the count at 1.
        """
        if self.last_attacker_id == attacker_id:
            self.focus_fire_stacks = min(max_stacks, self.focus_fire_stacks + 1)
        else:
            self.focus_fire_stacks = 1
            self.last_attacker_id = attacker_id
        return self.focus_fire_stacks

    def peek_focus_fire(self, attacker_id: str, max_stacks: int) -> int:
        """Consecutive count a hit from this attacker would produce."""
        if self.last_attacker_id == attacker_id:
            return min(max_stacks, self.focus_fire_stacks + 1)
        return 1

    def is_too_drunk(self) -> bool:
        return self.buzz_max > 0 and self.buzz_current >= self.buzz_max

    def add_buzz(self, amount: int) -> int:
        old = self.buzz_current
        self.buzz_current = min(self.buzz_max, self.buzz_current + max(0, amount))
        return self.buzz_current - old

    def reduce_buzz(self, amount: int) -> None:
        self.buzz_current = max(0, self.buzz_current - max(0, amount))

    def use_arrow(self) -> bool:
        if self.arrows <= 0:
            return False
        self.arrows -= 1
        return True


class EffectsComponent(Component):
    """Owns the unit's status effect store."""

    def __init__(self, entity: "Entity"):
        super().__init__(entity)
        self.store = StatusEffectStore()

    def get_component_type(self) -> ComponentType:
        return ComponentType.EFFECTS
