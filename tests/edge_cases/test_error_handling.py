"""
Edge case and error handling tests.

Tests boundary conditions, invalid inputs and the rule that illegal intents
come back as typed outcomes instead of exceptions.
"""

import pytest

from broadside.core.data import (
    CombatConfig,
    ConfigError,
    InvalidReason,
    StatBlock,
    Team,
    UnitRole,
    Vector2,
)
from broadside.game.battle import Battle
from broadside.game.battlefield import Battlefield


class TestInvalidStats:
    """Stat blocks are validated when they enter the engine."""

    def test_negative_stat(self):
        with pytest.raises(ValueError):
            StatBlock(health=100, morale=100, power=-1)

    def test_non_integer_stat(self):
        with pytest.raises(ValueError):
            StatBlock(health=100.5, morale=100)


class TestInvalidConfig:

    @pytest.mark.parametrize("overrides", [
        {"focus_fire_multipliers": []},
        {"hull_absorb_percent": 1.5},
        {"combo_step_min": 0.2, "combo_step_max": 0.1},
        {"max_combo_chain": 0},
    ])
    def test_rejected(self, overrides):
        with pytest.raises(ConfigError):
            CombatConfig(**overrides)


class TestBoundaryBattles:
    """Battles at the edges of what the engine accepts."""

    def test_one_tile_battlefield(self, make_combatant):
        battle = Battle([make_combatant("anne")], Battlefield(1, 1))
        battle.start()

        # Nobody to fight: the enemy crew is already eliminated
        assert not battle.is_active
        assert battle.winner is Team.PLAYER

    def test_empty_battle(self):
        battle = Battle([], Battlefield(2, 2))
        battle.start()

        assert not battle.is_active
        assert battle.winner is None

    def test_unit_outside_the_battlefield(self, make_combatant):
        with pytest.raises(ValueError):
            Battle([make_combatant("anne", position=Vector2(5, 5))], Battlefield(2, 2))

    def test_zero_morale_unit_surrenders_on_first_hit(self, make_combatant, make_harness, make_weapon):
        anne = make_combatant("anne", Team.PLAYER, Vector2(0, 0), power=30)
        ghost = make_combatant("ghost", Team.ENEMY, Vector2(1, 3), health=300, morale=0)
        captain = make_combatant("teach", Team.ENEMY, Vector2(2, 3), role=UnitRole.CAPTAIN)
        harness = make_harness([anne, ghost, captain])
        harness.controller.start_battle()

        outcome = harness.executor.execute(anne, ghost, make_weapon())

        assert outcome.is_valid
        assert outcome.result.final_morale_damage == 108
        assert ghost.morale_current == 0
        assert ghost.is_surrendered
        assert ghost.is_alive

    def test_overkill_damage_is_clamped(self, duel, make_weapon):
        harness, attacker, defender = duel

        harness.executor.execute(attacker, defender, make_weapon(base_damage=5000))

        assert defender.hp_current == 0
        assert defender.morale_current == 0
        assert harness.controller.check_battle_end()
        assert harness.state.winner is Team.PLAYER

    def test_zero_base_damage(self, duel, make_weapon):
        harness, attacker, defender = duel
        outcome = harness.executor.execute(attacker, defender, make_weapon(base_damage=0))

        # Only the Power scaling remains: 38 * 1.02 first-action bonus
        assert outcome.result.base_damage == 39


class TestIntentsNeverRaise:
    """Every illegal intent produces an Invalid outcome."""

    @pytest.fixture
    def battle(self, make_combatant):
        units = [
            make_combatant("anne", Team.PLAYER, Vector2(0, 0), power=30),
            make_combatant("teach", Team.ENEMY, Vector2(0, 3), role=UnitRole.CAPTAIN),
        ]
        battle = Battle(units, Battlefield(4, 4))
        battle.start()
        return battle

    @pytest.mark.parametrize("attacker, defender, weapon, reason", [
        ("", "teach", "fists", InvalidReason.UNKNOWN_UNIT),
        ("anne", "", "fists", InvalidReason.NO_TARGET),
        ("anne", "teach", "", InvalidReason.UNKNOWN_WEAPON),
        ("teach", "anne", "fists", InvalidReason.NOT_YOUR_TURN),
        ("anne", "anne", "fists", InvalidReason.FRIENDLY_TARGET),
        ("anne", "teach", "flintlock", InvalidReason.WRONG_WEAPON_CLASS),
    ])
    def test_attack_rejections(self, battle, attacker, defender, weapon, reason):
        outcome = battle.issue_action(attacker, defender, weapon)

        assert not outcome.is_valid
        assert outcome.reason is reason

    def test_repeated_rejections_change_nothing(self, battle):
        for _ in range(5):
            battle.issue_action("teach", "anne", "fists")
            battle.issue_swap("anne", "teach")
            battle.end_turn(Team.ENEMY)

        assert battle.state.acting_team is Team.PLAYER
        assert battle.pools[Team.PLAYER].energy == 3
        assert battle.roster.get("anne").hp_current == 100

    def test_intents_after_the_battle(self, battle):
        battle.turn_controller.end_battle(Team.PLAYER, "test")

        assert battle.issue_action("anne", "teach", "fists").reason is InvalidReason.BATTLE_NOT_ACTIVE
        assert battle.issue_swap("anne", "anne").reason is InvalidReason.BATTLE_NOT_ACTIVE
        assert battle.end_turn().reason is InvalidReason.BATTLE_NOT_ACTIVE
        assert not battle.update(100.0)
