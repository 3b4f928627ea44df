"""
Unit tests for combat components and the Combatant facade.

Tests the component-based combatant: Actor, Health, Morale and TurnState
components, plus the Combatant wrapper that assembles them.
"""

import pytest

from broadside.core.data import CombatConfig, Team, UnitRole, Vector2, WeaponClass
from broadside.core.entities import Entity
from broadside.game.entities.components import (
    ActorComponent,
    HealthComponent,
    MoraleComponent,
    TurnStateComponent,
)


@pytest.fixture
def entity():
    return Entity("anne")


class TestActorComponent:
    """Test ActorComponent functionality."""

    def test_actor_creation(self, entity):
        actor = ActorComponent(entity, "Anne", UnitRole.SWASHBUCKLER, Team.PLAYER,
                               WeaponClass.MELEE, Vector2(1, 2))
        assert actor.name == "Anne"
        assert actor.get_role_name() == "Swashbuckler"
        assert actor.position == Vector2(1, 2)


class TestHealthComponent:
    """Health never goes negative; hull stays within its bounds."""

    @pytest.fixture
    def health(self, entity):
        return HealthComponent(entity, hp_max=100, hull_max=40)

    def test_take_damage(self, health):
        assert health.take_damage(30) == 30
        assert health.hp_current == 70
        assert health.get_hp_percent() == 0.7

    def test_overkill_is_clamped(self, health):
        assert health.take_damage(250) == 100
        assert health.hp_current == 0
        assert not health.is_alive()

    def test_negative_damage_rejected(self, health):
        with pytest.raises(ValueError):
            health.take_damage(-5)

    def test_heal_caps_at_max(self, health):
        health.take_damage(10)
        assert health.heal(25) == 10
        assert health.hp_current == 100

    def test_hull_drain_and_restore(self, health):
        assert health.drain_hull(15) == 15
        assert health.drain_hull(100) == 25
        assert health.hull_current == 0
        assert health.restore_hull(100) == 40

    def test_reduce_hull_percent_rounds_half_away(self, health):
        health.drain_hull(10)
        # 15% of 30 = 4.5 -> 5
        assert health.reduce_hull_percent(0.15) == 5
        assert health.hull_current == 25

    def test_zero_max_health(self, entity):
        assert HealthComponent(entity, 0, 0).get_hp_percent() == 0.0

    def test_negative_max_rejected(self, entity):
        with pytest.raises(ValueError):
            HealthComponent(entity, -1, 0)


class TestMoraleComponent:
    """Surrender is a one-way transition below the threshold."""

    @pytest.fixture
    def morale(self, entity):
        return MoraleComponent(entity, morale_max=100, surrender_threshold=20)

    def test_threshold_is_strict(self, morale):
        morale.lose_morale(80)
        assert morale.morale_current == 20
        assert not morale.check_surrender()

        morale.lose_morale(1)
        assert morale.check_surrender()
        assert morale.has_surrendered

    def test_surrender_reported_once(self, morale):
        morale.lose_morale(100)
        assert morale.check_surrender()
        assert not morale.check_surrender()

    def test_threshold_is_in_morale_points(self, entity):
        morale = MoraleComponent(entity, morale_max=1000, surrender_threshold=20)

        morale.lose_morale(803)
        assert morale.morale_current == 197
        assert not morale.check_surrender()

        morale.lose_morale(178)
        assert morale.check_surrender()

    def test_morale_floor(self, morale):
        assert morale.lose_morale(150) == 100
        assert morale.morale_current == 0

    def test_restore(self, morale):
        morale.lose_morale(50)
        assert morale.restore_morale(80) == 50


class TestTurnStateComponent:
    """Per-turn counters, focus fire, buzz and arrows."""

    @pytest.fixture
    def turn_state(self, entity):
        return TurnStateComponent(entity, buzz_max=100, max_arrows=2)

    def test_start_turn_resets_counters(self, turn_state):
        turn_state.has_acted = True
        turn_state.attacks_this_turn = 2
        turn_state.swap_cooldown = 3
        turn_state.add_buzz(40)

        turn_state.start_turn(buzz_decay=15)

        assert not turn_state.has_acted
        assert turn_state.attacks_this_turn == 0
        assert turn_state.swap_cooldown == 2
        assert turn_state.buzz_current == 25

    def test_focus_fire_counts_consecutive_hits(self, turn_state):
        assert turn_state.peek_focus_fire("anne", 5) == 1
        assert turn_state.register_hit_from("anne", 5) == 1
        assert turn_state.peek_focus_fire("anne", 5) == 2
        assert turn_state.register_hit_from("anne", 5) == 2

    def test_focus_fire_resets_on_new_attacker(self, turn_state):
        turn_state.register_hit_from("anne", 5)
        turn_state.register_hit_from("anne", 5)

        assert turn_state.peek_focus_fire("mary", 5) == 1
        assert turn_state.register_hit_from("mary", 5) == 1

    def test_focus_fire_caps(self, turn_state):
        for _ in range(10):
            turn_state.register_hit_from("anne", 3)
        assert turn_state.focus_fire_stacks == 3

        turn_state.reset_focus_fire()
        assert turn_state.last_attacker_id is None

    def test_buzz(self, turn_state):
        assert turn_state.add_buzz(150) == 100
        assert turn_state.is_too_drunk()
        turn_state.reduce_buzz(25)
        assert not turn_state.is_too_drunk()

    def test_no_buzz_capacity_never_drunk(self, entity):
        assert not TurnStateComponent(entity, buzz_max=0, max_arrows=0).is_too_drunk()

    def test_arrows(self, turn_state):
        assert turn_state.use_arrow()
        assert turn_state.use_arrow()
        assert not turn_state.use_arrow()
        assert turn_state.arrows == 0


class TestCombatant:
    """Test the Combatant facade."""

    def test_hull_pool_from_stats(self, make_combatant):
        unit = make_combatant("anne", hull=3)
        assert unit.health.hull_max == 30
        assert unit.hull_current == 30

    def test_base_hull_from_config(self, make_combatant):
        unit = make_combatant("anne", config=CombatConfig(base_hull=5), hull=1)
        assert unit.health.hull_max == 15

    def test_only_ranged_units_carry_arrows(self, make_combatant):
        assert make_combatant("jack", weapon_class=WeaponClass.RANGED).turn_state.arrows == 10
        assert make_combatant("anne").turn_state.arrows == 0

    def test_id_defaults_to_name(self, make_combatant):
        unit = make_combatant("anne")
        assert unit.unit_id == "anne"
        assert unit.entity.entity_id == "anne"

    def test_state_flags(self, make_combatant):
        unit = make_combatant("anne")
        assert unit.is_active and unit.can_act

        unit.lose_morale(90)
        unit.morale.check_surrender()
        assert unit.is_alive
        assert unit.is_surrendered
        assert not unit.is_active

    def test_damage_clamps(self, make_combatant):
        unit = make_combatant("anne")
        assert unit.take_damage(-10) == 0
        assert unit.take_damage(500) == 100
        assert not unit.is_alive
        assert unit.heal(50) == 0

    def test_surrendered_units_keep_their_morale(self, make_combatant):
        unit = make_combatant("anne")
        unit.lose_morale(90)
        unit.morale.check_surrender()

        assert unit.restore_morale(50) == 0

    def test_captain_flag(self, make_combatant):
        assert make_combatant("teach", role=UnitRole.CAPTAIN).is_captain
        assert not make_combatant("anne").is_captain
