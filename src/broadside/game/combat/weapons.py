"""Weapon contexts loaded from the weapon catalog.

A weapon context is everything an attack needs to know about the equipment
used: its class, rolled base damage, energy cost, and which effect hook the
registry should resolve for it. Catalog entries are read from YAML.
"""

import os
from dataclasses import dataclass, field
from typing import Any, Optional

import yaml

from ...core.data import UnitRole, WeaponClass
from ...core.data.config import ASSETS_DIR, ConfigError

DEFAULT_WEAPONS_PATH = os.path.join(ASSETS_DIR, "data", "weapons.yaml")


@dataclass(frozen=True)
class WeaponContext:
    """Equipment used for one attack.

    Attributes:
        weapon_id: Catalog identifier
        name: Display name
        weapon_class: Melee or ranged
        base_damage: Already-rolled raw base damage
        effect_id: Effect hook identifier resolved through the registry
        role_tag: Role that gets the proficiency bonus with this weapon
        energy_cost: Energy spent per attack (None uses the configured default)
        hull_bypass: Fraction of health damage that ignores the hull pool
        params: Extra numbers read by the effect hook
    """
    weapon_id: str
    name: str
    weapon_class: WeaponClass
    base_damage: int
    effect_id: Optional[str] = None
    role_tag: Optional[UnitRole] = None
    energy_cost: Optional[int] = None
    hull_bypass: float = 0.0
    params: dict[str, Any] = field(default_factory=dict)

    @property
    def is_melee(self) -> bool:
        return self.weapon_class is WeaponClass.MELEE

    def param(self, key: str, default: Any = None) -> Any:
        return self.params.get(key, default)


def _parse_weapon(weapon_id: str, data: dict[str, Any]) -> WeaponContext:
    try:
        weapon_class = WeaponClass[data["class"].upper()]
        role_name = data.get("role")
        role_tag = UnitRole[role_name.upper()] if role_name else None
        return WeaponContext(
            weapon_id=weapon_id,
            name=data.get("name", weapon_id),
            weapon_class=weapon_class,
            base_damage=int(data["base_damage"]),
            effect_id=data.get("effect"),
            role_tag=role_tag,
            energy_cost=data.get("energy_cost"),
            hull_bypass=float(data.get("hull_bypass", 0.0)),
            params=dict(data.get("params", {})),
        )
    except KeyError as e:
        raise ConfigError(f"Invalid weapon entry '{weapon_id}': missing or unknown {e}")
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid weapon entry '{weapon_id}': {e}")


def load_weapon_catalog(path: Optional[str] = None) -> dict[str, WeaponContext]:
    """Load every weapon context from a YAML catalog.

    Args:
        path: YAML file to read (defaults to the packaged weapons.yaml)

    Returns:
        Mapping of weapon id to WeaponContext

    Raises:
        ConfigError: If the file is missing or an entry is malformed
    """
    yaml_path = path or DEFAULT_WEAPONS_PATH

    try:
        with open(yaml_path, "r") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise ConfigError(f"Weapon catalog not found: {yaml_path}")
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {yaml_path}: {e}")

    try:
        entries = data["weapons"]
    except (KeyError, TypeError):
        raise ConfigError(f"Missing top-level 'weapons' section in {yaml_path}")

    return {weapon_id: _parse_weapon(weapon_id, entry) for weapon_id, entry in entries.items()}
