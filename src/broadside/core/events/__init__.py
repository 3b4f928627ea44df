"""Event system for publisher-subscriber communication.

This package contains the complete event-driven architecture:
- event_manager.py: Publisher-subscriber event routing and coordination
- events.py: Event definitions raised by the combat engine
"""

from .event_manager import EventManager, EventPriority, QueuedEvent
from .events import (
    GameEvent,
    EventType,
    BattleStarted,
    BattleEnded,
    RoundStarted,
    TurnStarted,
    TurnEnded,
    UnitDamaged,
    UnitHealed,
    MoraleDamaged,
    UnitDied,
    UnitSurrendered,
    UnitSwapped,
    StatusEffectApplied,
    StatusEffectExpired,
    ResourceChanged,
    AttackResolved,
    AttackBlocked,
    LogMessage,
)

__all__ = [
    "EventManager",
    "EventPriority",
    "QueuedEvent",
    "GameEvent",
    "EventType",
    "BattleStarted",
    "BattleEnded",
    "RoundStarted",
    "TurnStarted",
    "TurnEnded",
    "UnitDamaged",
    "UnitHealed",
    "MoraleDamaged",
    "UnitDied",
    "UnitSurrendered",
    "UnitSwapped",
    "StatusEffectApplied",
    "StatusEffectExpired",
    "ResourceChanged",
    "AttackResolved",
    "AttackBlocked",
    "LogMessage",
]
