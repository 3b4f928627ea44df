"""
Tests for the weapon catalog loader.
"""

import pytest

from broadside.core.data import ConfigError, UnitRole, WeaponClass
from broadside.game.combat.weapons import WeaponContext, load_weapon_catalog


class TestPackagedCatalog:
    """The shipped weapons.yaml loads cleanly."""

    def test_loads(self):
        catalog = load_weapon_catalog()

        assert "cutlass" in catalog
        cutlass = catalog["cutlass"]
        assert cutlass.weapon_class is WeaponClass.MELEE
        assert cutlass.base_damage == 60
        assert cutlass.role_tag is UnitRole.SWASHBUCKLER
        assert cutlass.param("threshold") == 0.5

    def test_optional_fields(self):
        catalog = load_weapon_catalog()

        assert catalog["blunderbuss"].energy_cost == 2
        assert catalog["musket"].hull_bypass == 0.6
        assert catalog["fists"].effect_id is None
        assert catalog["fists"].energy_cost is None

    def test_ids_match_keys(self):
        for weapon_id, weapon in load_weapon_catalog().items():
            assert weapon.weapon_id == weapon_id


class TestWeaponContext:

    def test_is_melee(self):
        weapon = WeaponContext("pistol", "Pistol", WeaponClass.RANGED, 40)
        assert not weapon.is_melee
        assert weapon.param("missing", 7) == 7


class TestLoaderErrors:
    """Malformed catalogs raise ConfigError."""

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_weapon_catalog(str(tmp_path / "nope.yaml"))

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "weapons.yaml"
        path.write_text("weapons: [unclosed")

        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_weapon_catalog(str(path))

    def test_missing_section(self, tmp_path):
        path = tmp_path / "weapons.yaml"
        path.write_text("arms: {}\n")

        with pytest.raises(ConfigError, match="weapons"):
            load_weapon_catalog(str(path))

    @pytest.mark.parametrize("entry", [
        "{name: Stick, base_damage: 5}",
        "{class: trebuchet, base_damage: 5}",
        "{class: melee}",
        "{class: melee, base_damage: lots}",
        "{class: melee, base_damage: 5, role: admiral}",
    ])
    def test_bad_entry(self, tmp_path, entry):
        path = tmp_path / "weapons.yaml"
        path.write_text(f"weapons:\n  stick: {entry}\n")

        with pytest.raises(ConfigError, match="stick"):
            load_weapon_catalog(str(path))
