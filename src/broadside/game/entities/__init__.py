"""Entity system components.

This package contains combatant definitions and component implementations:
- components.py: Combat components (Actor, Stats, Health, Morale, TurnState, Effects)
- combatant.py: Component-based combatants and their factory
- roster.py: Ordered collection of the combatants in a battle
"""

from .components import (
    ActorComponent,
    StatsComponent,
    HealthComponent,
    MoraleComponent,
    TurnStateComponent,
    EffectsComponent,
)
from .combatant import Combatant, create_combatant_entity
from .roster import Roster

__all__ = [
    "ActorComponent",
    "StatsComponent",
    "HealthComponent",
    "MoraleComponent",
    "TurnStateComponent",
    "EffectsComponent",
    "Combatant",
    "create_combatant_entity",
    "Roster",
]
