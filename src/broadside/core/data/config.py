"""Combat tuning constants loaded from YAML.

Every formula in the damage pipeline, status effect store and turn controller
reads its constants from a :class:`CombatConfig`. The defaults match the
shipped ``assets/config/combat.yaml`` so tests can build a config without
touching the filesystem.
"""

import os
from dataclasses import dataclass, field, fields
from typing import Optional

import yaml

# Package root is two levels up from this file (broadside/core/data)
ASSETS_DIR = os.path.join(
    os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))),
    "assets",
)
DEFAULT_CONFIG_PATH = os.path.join(ASSETS_DIR, "config", "combat.yaml")


class ConfigError(Exception):
    """Raised when a configuration file is missing or malformed."""
    pass


@dataclass
class CombatConfig:
    """Tuning constants for combat resolution."""

    # Stat scaling
    scaling_coefficient: float = 1.25

    # Channel split
    ranged_hp_multiplier: float = 1.1
    melee_morale_multiplier: float = 1.1

    # Positional modifiers
    cover_reduction: float = 0.10
    exposed_multiplier: float = 1.2
    obstacle_block_damage: int = 100

    # Curse
    curse_multiplier: float = 1.5
    curse_charges: int = 2

    # Focus fire morale bonus by consecutive hit count (capped at last index)
    focus_fire_multipliers: list[float] = field(
        default_factory=lambda: [0.0, 0.0, 0.10, 0.25, 0.45, 0.65]
    )

    # Grit damage reduction
    grit_low_hp_weight: float = 0.50
    grit_morale_weight: float = 0.40
    grit_per_point: float = 0.01
    grit_dr_cap: float = 0.40

    # Hull
    base_hull: int = 0
    hull_per_point: int = 10
    hull_absorb_percent: float = 0.5

    # Initiative and combo
    first_action_bonus_per_speed: float = 0.002
    first_action_bonus_cap: float = 0.15
    skill_combo_multiplier: float = 0.002
    combo_step_min: float = 0.02
    combo_step_max: float = 0.10
    max_combo_chain: int = 5
    proficiency_bonus_per_point: float = 0.002

    # Energy
    energy_per_turn: int = 3
    attack_energy_cost: int = 1

    # Swaps
    swap_energy_cost: int = 1
    swap_cooldown_turns: int = 3
    max_swaps_per_round: int = 1
    swap_morale_penalty: float = 0.15
    min_hp_percent_to_swap: float = 0.2

    # Morale
    surrender_threshold: int = 20

    # Buzz
    buzz_decay_per_turn: int = 15
    buzz_decay_on_attack: int = 25
    drunk_damage_penalty: float = 0.2

    # Ammunition
    default_max_arrows: int = 10

    # Scheduling
    enemy_turn_delay: float = 1.5

    def __post_init__(self):
        if not self.focus_fire_multipliers:
            raise ConfigError("focus_fire_multipliers must contain at least one entry")
        if not 0.0 <= self.hull_absorb_percent <= 1.0:
            raise ConfigError(f"hull_absorb_percent must be within [0, 1]: {self.hull_absorb_percent}")
        if self.combo_step_min > self.combo_step_max:
            raise ConfigError("combo_step_min cannot exceed combo_step_max")
        if self.max_combo_chain < 1:
            raise ConfigError("max_combo_chain must be at least 1")
        if self.surrender_threshold < 0:
            raise ConfigError(f"surrender_threshold cannot be negative: {self.surrender_threshold}")


def load_combat_config(path: Optional[str] = None) -> CombatConfig:
    """Load combat constants from a YAML file.

    Keys missing from the file keep their defaults.

    Args:
        path: YAML file to read (defaults to the packaged combat.yaml)

    Returns:
        Populated CombatConfig

    Raises:
        ConfigError: If the file is missing, malformed or has unknown keys
    """
    yaml_path = path or DEFAULT_CONFIG_PATH

    try:
        with open(yaml_path, "r") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise ConfigError(f"Combat config file not found: {yaml_path}")
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {yaml_path}: {e}")

    if data is None:
        return CombatConfig()

    try:
        values = data["combat"]
    except (KeyError, TypeError):
        raise ConfigError(f"Missing top-level 'combat' section in {yaml_path}")

    known = {f.name for f in fields(CombatConfig)}
    unknown = sorted(set(values) - known)
    if unknown:
        raise ConfigError(f"Unknown combat config keys in {yaml_path}: {', '.join(unknown)}")

    return CombatConfig(**values)
