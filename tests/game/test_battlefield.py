"""
Tests for the battlefield grid: cover, obstacles, occupancy and spatial queries.
"""

import pytest

from broadside.core.data import Team, Vector2
from broadside.game.battlefield import Battlefield, HazardBonus


@pytest.fixture
def battlefield():
    return Battlefield(8, 6)


class TestCover:
    """Tiles next to a hazard (8-neighbourhood) give cover."""

    def test_adjacent_tiles_get_cover(self, battlefield):
        battlefield.add_hazard(Vector2(2, 2))

        assert battlefield.is_adjacent_to_hazard(Vector2(2, 3))
        assert battlefield.is_adjacent_to_hazard(Vector2(1, 1))
        assert not battlefield.is_adjacent_to_hazard(Vector2(2, 4))
        assert not battlefield.is_adjacent_to_hazard(Vector2(2, 2))

    def test_hazard_on_the_edge(self, battlefield):
        battlefield.add_hazard(Vector2(0, 0))

        mask = battlefield.get_cover_mask()
        assert mask.sum() == 3

    def test_cover_mask_is_rebuilt(self, battlefield):
        assert not battlefield.get_cover_mask().any()
        battlefield.add_hazard(Vector2(5, 7))
        assert battlefield.is_adjacent_to_hazard(Vector2(4, 6))

    def test_outside_positions_have_no_cover(self, battlefield):
        assert not battlefield.is_adjacent_to_hazard(Vector2(-1, 0))

    def test_standing_bonus(self, battlefield):
        bonus = HazardBonus(flat_health=5, applies_curse=True)
        battlefield.add_hazard(Vector2(1, 1), bonus)

        assert battlefield.get_standing_bonus(Vector2(1, 1)) is bonus
        assert battlefield.get_standing_bonus(Vector2(1, 2)) is None

    def test_hazard_outside(self, battlefield):
        with pytest.raises(ValueError):
            battlefield.add_hazard(Vector2(6, 0))


class TestObstacles:
    """Row blocking and obstacle durability."""

    def test_nearest_obstacle_to_attacker(self, battlefield):
        battlefield.add_obstacle(Vector2(3, 2), 50)
        battlefield.add_obstacle(Vector2(3, 5), 50)

        assert battlefield.find_blocking_obstacle(Vector2(3, 0), Vector2(3, 7)) == Vector2(3, 2)
        assert battlefield.find_blocking_obstacle(Vector2(3, 7), Vector2(3, 0)) == Vector2(3, 5)

    def test_only_same_row_blocks(self, battlefield):
        battlefield.add_obstacle(Vector2(3, 2), 50)
        assert battlefield.find_blocking_obstacle(Vector2(2, 0), Vector2(3, 7)) is None

    def test_obstacles_outside_the_segment_do_not_block(self, battlefield):
        battlefield.add_obstacle(Vector2(3, 6), 50)
        assert battlefield.find_blocking_obstacle(Vector2(3, 0), Vector2(3, 6)) is None
        assert battlefield.find_blocking_obstacle(Vector2(3, 0), Vector2(3, 4)) is None

    def test_damage_obstacle(self, battlefield):
        battlefield.add_obstacle(Vector2(1, 1), 150)

        assert not battlefield.damage_obstacle(Vector2(1, 1), 100)
        assert battlefield.has_obstacle(Vector2(1, 1))
        assert battlefield.damage_obstacle(Vector2(1, 1), 100)
        assert not battlefield.has_obstacle(Vector2(1, 1))
        assert not battlefield.damage_obstacle(Vector2(1, 1), 100)

    def test_invalid_obstacles(self, battlefield):
        with pytest.raises(ValueError):
            battlefield.add_obstacle(Vector2(0, 0), 0)
        with pytest.raises(ValueError):
            battlefield.add_obstacle(Vector2(0, 9), 10)


class TestOccupancy:

    def test_place_and_remove(self, battlefield, make_combatant):
        anne = make_combatant("anne", position=Vector2(1, 1))
        battlefield.place_unit(anne)

        assert battlefield.get_unit_at(Vector2(1, 1)) is anne
        assert battlefield.remove_unit(anne)
        assert not battlefield.remove_unit(anne)

    def test_occupied_tile(self, battlefield, make_combatant):
        battlefield.place_unit(make_combatant("anne", position=Vector2(1, 1)))
        with pytest.raises(ValueError):
            battlefield.place_unit(make_combatant("mary", position=Vector2(1, 1)))

    def test_swap_positions(self, battlefield, make_combatant):
        anne = make_combatant("anne", position=Vector2(0, 0))
        mary = make_combatant("mary", position=Vector2(2, 3))
        battlefield.place_unit(anne)
        battlefield.place_unit(mary)

        battlefield.swap_positions(anne, mary)

        assert anne.position == Vector2(2, 3)
        assert battlefield.get_unit_at(Vector2(0, 0)) is mary

    def test_unit_behind(self, battlefield, make_combatant):
        bonny = make_combatant("bonny", Team.ENEMY, Vector2(2, 5))
        battlefield.place_unit(bonny)

        assert battlefield.unit_behind(Vector2(2, 0), Vector2(2, 4)) is bonny
        assert battlefield.unit_behind(Vector2(0, 0), Vector2(2, 4)) is None
        assert battlefield.unit_behind(Vector2(2, 4), Vector2(2, 4)) is None

    def test_units_within(self, battlefield, make_combatant):
        units = [
            make_combatant("anne", Team.PLAYER, Vector2(0, 0)),
            make_combatant("teach", Team.ENEMY, Vector2(0, 1)),
            make_combatant("calico", Team.ENEMY, Vector2(3, 3)),
        ]
        for unit in units:
            battlefield.place_unit(unit)

        assert battlefield.units_within(Vector2(0, 0), 1) == units[:2]
        assert battlefield.units_within(Vector2(0, 0), 6, Team.ENEMY) == units[1:]
        assert Battlefield(2, 2).units_within(Vector2(0, 0), 3) == []

    def test_invalid_dimensions(self):
        with pytest.raises(ValueError):
            Battlefield(0, 4)
