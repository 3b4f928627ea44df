"""Core data structures and definitions.

This package contains fundamental data types and combat definitions:
- data_structures.py: Vector2, VectorArray, StatBlock and rounding helpers
- game_enums.py: Centralized enums for teams, roles, effects and outcomes
- config.py: YAML-backed combat tuning constants
"""

from .data_structures import Vector2, VectorArray, StatBlock, round_half_away
from .game_enums import (
    Team,
    UnitRole,
    WeaponClass,
    StatType,
    StatusEffectType,
    StackPolicy,
    TickPhase,
    TurnPhase,
    OutcomeKind,
    InvalidReason,
    ComponentType,
    TEAM_NAMES,
    ROLE_NAMES,
    WEAPON_CLASS_NAMES,
    STATUS_EFFECT_NAMES,
)
from .config import CombatConfig, ConfigError, load_combat_config

__all__ = [
    "Vector2",
    "VectorArray",
    "StatBlock",
    "round_half_away",
    "Team",
    "UnitRole",
    "WeaponClass",
    "StatType",
    "StatusEffectType",
    "StackPolicy",
    "TickPhase",
    "TurnPhase",
    "OutcomeKind",
    "InvalidReason",
    "ComponentType",
    "TEAM_NAMES",
    "ROLE_NAMES",
    "WEAPON_CLASS_NAMES",
    "STATUS_EFFECT_NAMES",
    "CombatConfig",
    "ConfigError",
    "load_combat_config",
]
