"""Centralized combat enums and constants.

This module contains all core enums that are used across multiple modules,
eliminating duplication and providing a single source of truth.
"""

from enum import Enum, auto


class Team(Enum):
    """Sides taking part in a battle.

    PLAYER is "team A" and ENEMY is "team B" for turn ordering; PLAYER also
    wins initiative ties.
    """
    PLAYER = 0
    ENEMY = 1


class UnitRole(Enum):
    """Crew roles a combatant can hold."""
    CAPTAIN = auto()
    QUARTERMASTER = auto()
    HELMSMASTER = auto()
    BOATSWAIN = auto()
    SHIPWRIGHT = auto()
    MASTER_GUNNER = auto()
    MASTER_AT_ARMS = auto()
    NAVIGATOR = auto()
    SURGEON = auto()
    COOK = auto()
    SWASHBUCKLER = auto()
    DECKHAND = auto()


class WeaponClass(Enum):
    """Fundamental attack types for combat."""
    MELEE = auto()
    RANGED = auto()


class StatType(Enum):
    """The eleven attributes of a stat block."""
    HEALTH = auto()
    MORALE = auto()
    BUZZ = auto()
    POWER = auto()
    AIM = auto()
    TACTICS = auto()
    SKILL = auto()
    PROFICIENCY = auto()
    GRIT = auto()
    HULL = auto()
    SPEED = auto()


class StatusEffectType(Enum):
    """Kinds of timed or charge-based status effects."""
    BLEED = auto()
    STUN = auto()
    DAZE = auto()
    MARKED = auto()
    RATTLED = auto()
    CRACKED = auto()
    CURSE = auto()
    TRAP = auto()
    HEAL_BLOCK = auto()
    MISS_CHANCE = auto()
    SLOWED = auto()
    FREE_MOVE = auto()
    KNOCKBACK_IMMUNE = auto()
    FIRE = auto()
    POISON = auto()
    REGENERATION = auto()
    GRIT_BOOST = auto()
    GRIT_REDUCTION = auto()
    DAMAGE_BOOST = auto()
    SHIELDED = auto()
    ENERGY_DRAIN = auto()
    EXPOSED = auto()


class StackPolicy(Enum):
    """How a new effect combines with one of the same kind."""
    REFRESH = auto()   # Single instance; duration reset, magnitude replaced
    STACK = auto()     # Independent instances
    CHARGES = auto()   # Single instance counted down by incoming hits


class TickPhase(Enum):
    """Owner turn boundary at which an effect's duration decrements."""
    TURN_START = auto()
    TURN_END = auto()
    NONE = auto()


class TurnPhase(Enum):
    """States of the round state machine."""
    ROUND_START = auto()
    TEAM_A_ACTING = auto()
    TEAM_B_ACTING = auto()
    ROUND_END = auto()
    BATTLE_OVER = auto()


class OutcomeKind(Enum):
    """Result categories of an issued intent."""
    HIT = auto()
    BLOCKED = auto()
    MISSED = auto()
    SWAPPED = auto()
    TURN_ENDED = auto()
    INVALID = auto()


class InvalidReason(Enum):
    """Why an intent was rejected."""
    BATTLE_NOT_ACTIVE = auto()
    UNKNOWN_UNIT = auto()
    NOT_YOUR_TURN = auto()
    ATTACKER_DEAD = auto()
    ATTACKER_SURRENDERED = auto()
    ATTACKER_STUNNED = auto()
    ALREADY_ACTED = auto()
    INSUFFICIENT_ENERGY = auto()
    NO_AMMO = auto()
    WRONG_WEAPON_CLASS = auto()
    UNKNOWN_WEAPON = auto()
    NO_TARGET = auto()
    TARGET_DEAD = auto()
    TARGET_SURRENDERED = auto()
    FRIENDLY_TARGET = auto()
    SWAP_LIMIT_REACHED = auto()
    SWAP_ON_COOLDOWN = auto()
    HEALTH_TOO_LOW = auto()
    NOT_AN_ALLY = auto()
    TRAPPED = auto()


class ComponentType(Enum):
    """Component slots an entity can hold."""
    ACTOR = auto()
    STATS = auto()
    HEALTH = auto()
    MORALE = auto()
    TURN_STATE = auto()
    EFFECTS = auto()


# Display name mappings
TEAM_NAMES = {
    Team.PLAYER: "Player",
    Team.ENEMY: "Enemy",
}

ROLE_NAMES = {
    UnitRole.CAPTAIN: "Captain",
    UnitRole.QUARTERMASTER: "Quartermaster",
    UnitRole.HELMSMASTER: "Helmsmaster",
    UnitRole.BOATSWAIN: "Boatswain",
    UnitRole.SHIPWRIGHT: "Shipwright",
    UnitRole.MASTER_GUNNER: "Master Gunner",
    UnitRole.MASTER_AT_ARMS: "Master-at-Arms",
    UnitRole.NAVIGATOR: "Navigator",
    UnitRole.SURGEON: "Surgeon",
    UnitRole.COOK: "Cook",
    UnitRole.SWASHBUCKLER: "Swashbuckler",
    UnitRole.DECKHAND: "Deckhand",
}

WEAPON_CLASS_NAMES = {
    WeaponClass.MELEE: "Melee",
    WeaponClass.RANGED: "Ranged",
}

STATUS_EFFECT_NAMES = {
    StatusEffectType.BLEED: "Bleed",
    StatusEffectType.STUN: "Stun",
    StatusEffectType.DAZE: "Daze",
    StatusEffectType.MARKED: "Marked",
    StatusEffectType.RATTLED: "Rattled",
    StatusEffectType.CRACKED: "Cracked",
    StatusEffectType.CURSE: "Curse",
    StatusEffectType.TRAP: "Trap",
    StatusEffectType.HEAL_BLOCK: "Heal Block",
    StatusEffectType.MISS_CHANCE: "Miss Chance",
    StatusEffectType.SLOWED: "Slowed",
    StatusEffectType.FREE_MOVE: "Free Move",
    StatusEffectType.KNOCKBACK_IMMUNE: "Knockback Immune",
    StatusEffectType.FIRE: "Fire",
    StatusEffectType.POISON: "Poison",
    StatusEffectType.REGENERATION: "Regeneration",
    StatusEffectType.GRIT_BOOST: "Grit Boost",
    StatusEffectType.GRIT_REDUCTION: "Grit Reduction",
    StatusEffectType.DAMAGE_BOOST: "Damage Boost",
    StatusEffectType.SHIELDED: "Shielded",
    StatusEffectType.ENERGY_DRAIN: "Energy Drain",
    StatusEffectType.EXPOSED: "Exposed",
}
