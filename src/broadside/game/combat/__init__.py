"""Combat system components.

This package contains the core combat logic with clear separation of concerns:
- status_effects.py: Timed and charge-based effects with their stacking policy
- damage_calculator.py: Pure attack damage pipeline (health, morale, hull)
- weapons.py: Weapon catalog loaded from YAML
- effect_registry.py: Weapon effect hooks run around each attack
- outcomes.py: Typed results returned for every intent
- combat_executor.py: Attack execution and secondary effects
"""

from .status_effects import EffectPolicy, EffectTick, EFFECT_POLICIES, StatusEffect, StatusEffectStore
from .damage_calculator import DamageCalculator, DamageContext, DamageResult
from .weapons import WeaponContext, load_weapon_catalog
from .effect_registry import AttackContext, EffectHook, EffectRegistry, create_default_registry
from .outcomes import ActionOutcome

__all__ = [
    "EffectPolicy",
    "EffectTick",
    "EFFECT_POLICIES",
    "StatusEffect",
    "StatusEffectStore",
    "DamageCalculator",
    "DamageContext",
    "DamageResult",
    "WeaponContext",
    "load_weapon_catalog",
    "AttackContext",
    "EffectHook",
    "EffectRegistry",
    "create_default_registry",
    "ActionOutcome",
]
