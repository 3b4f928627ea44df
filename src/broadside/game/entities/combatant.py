"""Component-based Combatant facade.

A Combatant wraps an Entity assembled from the combat components and exposes
the frequently used state as properties, while mutations that other systems
need (damage, healing, morale loss) go through small, checked methods.
"""

from typing import Optional, cast

from ...core.data import (
    CombatConfig,
    ComponentType,
    StatBlock,
    Team,
    UnitRole,
    Vector2,
    WeaponClass,
)
from ...core.entities import Entity
from ..combat.status_effects import StatusEffectStore
from .components import (
    ActorComponent,
    EffectsComponent,
    HealthComponent,
    MoraleComponent,
    StatsComponent,
    TurnStateComponent,
)


def create_combatant_entity(
    name: str,
    role: UnitRole,
    team: Team,
    weapon_class: WeaponClass,
    stats: StatBlock,
    position: Vector2,
    config: CombatConfig,
    unit_id: Optional[str] = None,
) -> Entity:
    """Create a complete combatant entity from a finalized stat block.

    Args:
        name: Display name
        role: Crew role
        team: Team affiliation
        weapon_class: Melee or ranged
        stats: Stat block produced by the external generator
        position: Deployment position
        config: Combat constants (hull scaling, surrender threshold, ammo)
        unit_id: Stable id; a UUID is generated if omitted

    Returns:
        Entity with every combat component attached
    """
    entity = Entity(unit_id)

    hull_max = config.base_hull + stats.hull * config.hull_per_point
    max_arrows = config.default_max_arrows if weapon_class is WeaponClass.RANGED else 0

    entity.add_component(ActorComponent(entity, name, role, team, weapon_class, position))
    entity.add_component(StatsComponent(entity, stats))
    entity.add_component(HealthComponent(entity, stats.health, hull_max))
    entity.add_component(MoraleComponent(entity, stats.morale, config.surrender_threshold))
    entity.add_component(TurnStateComponent(entity, stats.buzz, max_arrows))
    entity.add_component(EffectsComponent(entity))

    return entity


class Combatant:
    """A crew member taking part in a battle.

    Property Access Patterns:
    1. **Core properties**: combatant.hp_current, combatant.is_alive, combatant.team
    2. **Component access**: combatant.health.hull_max, combatant.turn_state.arrows

    Examples:
        if combatant.can_act:
            combatant.turn_state.has_acted = True
        combatant.effects.is_stunned()
    """

    def __init__(
        self,
        name: str,
        role: UnitRole,
        team: Team,
        weapon_class: WeaponClass,
        stats: StatBlock,
        position: Vector2,
        config: Optional[CombatConfig] = None,
        unit_id: Optional[str] = None,
    ):
        self.entity = create_combatant_entity(
            name, role, team, weapon_class, stats, position,
            config or CombatConfig(), unit_id or name,
        )

    def __repr__(self) -> str:
        return f"Combatant({self.name!r}, {self.team.name}, hp={self.hp_current}/{self.hp_max})"

    # ============== Core Properties ==============

    @property
    def unit_id(self) -> str:
        return self.entity.entity_id

    @property
    def name(self) -> str:
        return self.actor.name

    @property
    def role(self) -> UnitRole:
        return self.actor.role

    @property
    def team(self) -> Team:
        return self.actor.team

    @property
    def weapon_class(self) -> WeaponClass:
        return self.actor.weapon_class

    @property
    def is_melee(self) -> bool:
        return self.actor.weapon_class is WeaponClass.MELEE

    @property
    def is_captain(self) -> bool:
        return self.actor.role is UnitRole.CAPTAIN

    @property
    def position(self) -> Vector2:
        return self.actor.position

    @position.setter
    def position(self, value: Vector2) -> None:
        self.actor.position = value

    @property
    def stats(self) -> StatBlock:
        return self.stats_component.stats

    @property
    def hp_current(self) -> int:
        return self.health.hp_current

    @property
    def hp_max(self) -> int:
        return self.health.hp_max

    @property
    def hull_current(self) -> int:
        return self.health.hull_current

    @property
    def morale_current(self) -> int:
        return self.morale.morale_current

    @property
    def morale_max(self) -> int:
        return self.morale.morale_max

    @property
    def is_alive(self) -> bool:
        return self.health.is_alive()

    @property
    def is_surrendered(self) -> bool:
        return self.morale.has_surrendered

    @property
    def is_active(self) -> bool:
        """Alive and not surrendered: still counts for its team."""
        return self.is_alive and not self.is_surrendered

    @property
    def can_act(self) -> bool:
        return (
            self.is_active
            and not self.turn_state.has_acted
            and not self.effects.is_stunned()
        )

    # ============== Component Access ==============

    @property
    def actor(self) -> ActorComponent:
        return cast(ActorComponent, self.entity.require_component(ComponentType.ACTOR))

    @property
    def stats_component(self) -> StatsComponent:
        return cast(StatsComponent, self.entity.require_component(ComponentType.STATS))

    @property
    def health(self) -> HealthComponent:
        return cast(HealthComponent, self.entity.require_component(ComponentType.HEALTH))

    @property
    def morale(self) -> MoraleComponent:
        return cast(MoraleComponent, self.entity.require_component(ComponentType.MORALE))

    @property
    def turn_state(self) -> TurnStateComponent:
        return cast(TurnStateComponent, self.entity.require_component(ComponentType.TURN_STATE))

    @property
    def effects(self) -> StatusEffectStore:
        return cast(EffectsComponent, self.entity.require_component(ComponentType.EFFECTS)).store

    # ============== Mutations ==============

    def take_damage(self, amount: int) -> int:
        """Apply health damage, clamping at zero."""
        return self.health.take_damage(max(0, amount))

    def lose_morale(self, amount: int) -> int:
        """Apply morale damage, clamping at zero."""
        return self.morale.lose_morale(max(0, amount))

    def heal(self, amount: int) -> int:
        """Restore health unless heal-blocked."""
        if not self.is_alive or self.effects.is_heal_blocked():
            return 0
        return self.health.heal(max(0, amount))

    def restore_morale(self, amount: int) -> int:
        """Restore morale unless heal-blocked or surrendered."""
        if not self.is_active or self.effects.is_heal_blocked():
            return 0
        return self.morale.restore_morale(max(0, amount))
