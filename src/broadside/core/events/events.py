"""Combat events and context.

This module defines the advisory notifications the combat engine raises for
presentation layers and tooling.

Event Design Principles:
- Events are immutable dataclasses with rich object payloads
- All events include the round number they happened in
- Events use proper enums instead of magic strings
- Nothing in the engine depends on an event being observed
"""

from dataclasses import dataclass, field
from typing import Optional, TYPE_CHECKING
from abc import ABC
from enum import Enum, auto

from ..data import Team, StatusEffectType

if TYPE_CHECKING:
    from ..data.data_structures import Vector2
    from ...game.entities.combatant import Combatant
    from ...game.combat.damage_calculator import DamageResult
    from ...game.managers.log_manager import LogLevel


class EventType(Enum):
    """Types of combat events that managers can subscribe to."""
    # Battle flow
    BATTLE_STARTED = auto()
    BATTLE_ENDED = auto()
    ROUND_STARTED = auto()
    TURN_STARTED = auto()
    TURN_ENDED = auto()

    # Unit state
    UNIT_DAMAGED = auto()
    UNIT_HEALED = auto()
    MORALE_DAMAGED = auto()
    UNIT_DIED = auto()
    UNIT_SURRENDERED = auto()
    UNIT_SWAPPED = auto()

    # Status effects
    STATUS_EFFECT_APPLIED = auto()
    STATUS_EFFECT_EXPIRED = auto()

    # Resources
    RESOURCE_CHANGED = auto()

    # Attacks
    ATTACK_RESOLVED = auto()
    ATTACK_BLOCKED = auto()

    # Logging
    LOG_MESSAGE = auto()


@dataclass(frozen=True)
class GameEvent(ABC):
    """Base class for all combat events."""
    round_number: int
    event_type: EventType = field(init=False)


@dataclass(frozen=True)
class BattleStarted(GameEvent):
    """Event emitted when a battle begins."""
    player_units: int
    enemy_units: int

    def __post_init__(self):
        # Set event_type since dataclass frozen=True prevents normal assignment
        object.__setattr__(self, 'event_type', EventType.BATTLE_STARTED)


@dataclass(frozen=True)
class BattleEnded(GameEvent):
    """Event emitted when a battle ends."""
    winner: Optional[Team]
    reason: str

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.BATTLE_ENDED)


@dataclass(frozen=True)
class RoundStarted(GameEvent):
    """Event emitted when a round begins and initiative is decided."""
    first_team: Team
    player_initiative: int
    enemy_initiative: int

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.ROUND_STARTED)


@dataclass(frozen=True)
class TurnStarted(GameEvent):
    """Event emitted when a team's half-turn begins."""
    team: Team

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.TURN_STARTED)


@dataclass(frozen=True)
class TurnEnded(GameEvent):
    """Event emitted when a team's half-turn ends."""
    team: Team
    energy_converted: int = 0

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.TURN_ENDED)


@dataclass(frozen=True)
class UnitDamaged(GameEvent):
    """Event emitted for all health damage: attacks, splash, bleed, fire."""
    unit: "Combatant"
    amount: int
    hull_absorbed: int
    source: str

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.UNIT_DAMAGED)


@dataclass(frozen=True)
class UnitHealed(GameEvent):
    """Event emitted when health or morale is restored."""
    unit: "Combatant"
    health_restored: int
    morale_restored: int = 0

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.UNIT_HEALED)


@dataclass(frozen=True)
class MoraleDamaged(GameEvent):
    """Event emitted when a unit loses morale."""
    unit: "Combatant"
    amount: int
    new_morale: int

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.MORALE_DAMAGED)


@dataclass(frozen=True)
class UnitDied(GameEvent):
    """Event emitted when a unit's health reaches zero."""
    unit: "Combatant"
    killer: Optional["Combatant"] = None

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.UNIT_DIED)


@dataclass(frozen=True)
class UnitSurrendered(GameEvent):
    """Event emitted once when a unit's morale falls below the threshold."""
    unit: "Combatant"

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.UNIT_SURRENDERED)


@dataclass(frozen=True)
class UnitSwapped(GameEvent):
    """Event emitted when two allies trade places."""
    unit: "Combatant"
    other: "Combatant"

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.UNIT_SWAPPED)


@dataclass(frozen=True)
class StatusEffectApplied(GameEvent):
    """Event emitted when a status effect is applied or refreshed."""
    unit: "Combatant"
    effect_type: StatusEffectType
    duration: int
    magnitude: float

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.STATUS_EFFECT_APPLIED)


@dataclass(frozen=True)
class StatusEffectExpired(GameEvent):
    """Event emitted when a status effect runs out of turns or charges."""
    unit: "Combatant"
    effect_type: StatusEffectType

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.STATUS_EFFECT_EXPIRED)


@dataclass(frozen=True)
class ResourceChanged(GameEvent):
    """Event emitted when a team's energy or grog changes."""
    team: Team
    resource: str
    old_value: int
    new_value: int

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.RESOURCE_CHANGED)


@dataclass(frozen=True)
class AttackResolved(GameEvent):
    """Event emitted after an attack lands on its defender."""
    attacker: "Combatant"
    defender: "Combatant"
    result: "DamageResult"

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.ATTACK_RESOLVED)


@dataclass(frozen=True)
class AttackBlocked(GameEvent):
    """Event emitted when an obstacle absorbs an attack."""
    attacker: "Combatant"
    defender: "Combatant"
    obstacle_position: "Vector2"
    obstacle_destroyed: bool

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.ATTACK_BLOCKED)


@dataclass(frozen=True)
class LogMessage(GameEvent):
    """Event emitted when a log message is created."""
    message: str
    category: str
    level: "LogLevel"
    source: str

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.LOG_MESSAGE)
