"""
Unit tests for the damage calculation pipeline.

Each test isolates one stage of the pipeline against the reference attack:
Power 30, base damage 60, melee, which scales to 98 before bonuses.
"""

import pytest

from broadside.core.data import StatusEffectType, Team, Vector2
from broadside.game.combat.damage_calculator import (
    DamageCalculator,
    DamageContext,
    combo_bonus,
    first_action_bonus,
    focus_fire_bonus,
    grit_damage_reduction,
)
from broadside.game.combat.status_effects import StatusEffect


@pytest.fixture
def calculator(config):
    return DamageCalculator(config)


@pytest.fixture
def attacker(make_combatant):
    return make_combatant("Anne", Team.PLAYER, Vector2(0, 0), power=30, aim=20)


@pytest.fixture
def defender(make_combatant):
    return make_combatant("Calico", Team.ENEMY, Vector2(0, 1))


class TestReferenceScenario:
    """Known-answer checks for the full pipeline."""

    def test_grit_scenario(self, calculator, attacker, make_combatant):
        """98 pre-Grit damage against Grit 20 at full health and morale lands 90."""
        defender = make_combatant("Calico", Team.ENEMY, Vector2(0, 1), grit=20)

        result = calculator.compute(60, True, attacker, defender, DamageContext())

        assert result.base_damage == 98
        assert result.damage_reduction == pytest.approx(0.08)
        assert result.final_health_damage == 90
        assert result.final_morale_damage == 108
        assert result.hull_absorbed == 0

    def test_plain_melee_split(self, calculator, attacker, defender):
        result = calculator.compute(60, True, attacker, defender, DamageContext())

        assert result.final_health_damage == 98
        assert result.final_morale_damage == 108
        assert result.total_damage == 206

    def test_plain_ranged_split(self, calculator, attacker, defender):
        """Ranged scales with Aim and favours the health channel."""
        result = calculator.compute(40, False, attacker, defender, DamageContext())

        assert result.base_damage == 65
        assert result.final_health_damage == 72
        assert result.final_morale_damage == 65

    def test_zero_damage_attack(self, calculator, make_combatant, defender):
        weakling = make_combatant("Weakling", Team.PLAYER, Vector2(0, 0))

        result = calculator.compute(0, True, weakling, defender, DamageContext())

        assert result.final_health_damage == 0
        assert result.final_morale_damage == 0
        assert result.hull_absorbed == 0
        assert defender.hp_current == 100
        assert defender.morale_current == 100

    def test_calculator_does_not_mutate(self, calculator, attacker, make_combatant):
        defender = make_combatant("Calico", Team.ENEMY, Vector2(0, 1), hull=2)
        defender.effects.apply(StatusEffect(StatusEffectType.CURSE, 0, magnitude=1.5, charges=2))

        calculator.compute(60, True, attacker, defender, DamageContext())

        assert defender.hp_current == 100
        assert defender.hull_current == 20
        assert defender.effects.get(StatusEffectType.CURSE).charges == 2

    def test_breakdown_lines(self, calculator, attacker, defender):
        result = calculator.compute(60, True, attacker, defender, DamageContext(has_cover=True))

        assert result.health_breakdown[0] == "98 Base"
        assert "(Cover)" in " ".join(result.health_breakdown)
        assert result.morale_breakdown[-1] == f"= {result.final_morale_damage}"
        assert "HP" in result.describe()


class TestPreAttackBonuses:
    """Bonuses are summed onto 1.0 and applied once."""

    @pytest.mark.parametrize("speed,expected", [(10, 100), (100, 113)])
    def test_first_action(self, calculator, make_combatant, defender, speed, expected):
        attacker = make_combatant("Anne", Team.PLAYER, Vector2(0, 0), power=30, speed=speed)

        result = calculator.compute(60, True, attacker, defender, DamageContext(is_first_action=True))

        assert result.final_health_damage == expected

    @pytest.mark.parametrize("skill,combo,expected", [
        (0, 1, 98),     # first attack of a chain gets nothing
        (0, 3, 102),    # step clamped up to 0.02
        (100, 10, 137), # step clamped to 0.10, chain capped at 5
    ])
    def test_combo(self, calculator, make_combatant, defender, skill, combo, expected):
        attacker = make_combatant("Anne", Team.PLAYER, Vector2(0, 0), power=30, skill=skill)

        result = calculator.compute(60, True, attacker, defender, DamageContext(combo_count=combo))

        assert result.final_health_damage == expected

    def test_caller_bonuses_are_additive(self, calculator, attacker, defender):
        context = DamageContext(bonuses={"Weapon": 0.10, "Proficiency": 0.05})

        result = calculator.compute(60, True, attacker, defender, context)

        # 98 * 1.15 = 112.7
        assert result.base_damage == 113

    def test_marked_defender(self, calculator, attacker, defender):
        defender.effects.apply(StatusEffect(StatusEffectType.MARKED, 2, magnitude=0.15, charges=2))

        result = calculator.compute(60, True, attacker, defender, DamageContext())

        assert result.final_health_damage == 113
        assert result.marked_consumed

    def test_exposed_defender(self, calculator, attacker, defender):
        defender.effects.apply(StatusEffect(StatusEffectType.EXPOSED, 1))

        result = calculator.compute(60, True, attacker, defender, DamageContext())

        # 98 * 1.2 = 117.6
        assert result.final_health_damage == 118

    def test_dazed_attacker(self, calculator, attacker, defender):
        attacker.effects.apply(StatusEffect(StatusEffectType.DAZE, 1, magnitude=0.10))

        result = calculator.compute(60, True, attacker, defender, DamageContext())

        assert result.final_health_damage == 88

    def test_bonuses_cannot_go_negative(self, calculator, attacker, defender):
        context = DamageContext(bonuses={"Penalty": -3.0})

        result = calculator.compute(60, True, attacker, defender, context)

        assert result.final_health_damage == 0
        assert result.final_morale_damage == 0


class TestChannelModifiers:
    """Stages after the split."""

    def test_cover_reduces_both_channels(self, calculator, attacker, defender):
        result = calculator.compute(60, True, attacker, defender, DamageContext(has_cover=True))

        assert result.final_health_damage == 88
        assert result.final_morale_damage == 97

    def test_curse_multiplies_both_channels(self, calculator, attacker, defender):
        defender.effects.apply(StatusEffect(StatusEffectType.CURSE, 0, magnitude=1.5, charges=2))

        result = calculator.compute(60, True, attacker, defender, DamageContext())

        assert result.final_health_damage == 147
        assert result.final_morale_damage == 162
        assert result.curse_consumed

    def test_rattled_raises_morale_damage(self, calculator, attacker, defender):
        defender.effects.apply(StatusEffect(StatusEffectType.RATTLED, 1, magnitude=0.2))

        result = calculator.compute(60, True, attacker, defender, DamageContext())

        assert result.final_health_damage == 98
        assert result.final_morale_damage == 130

    def test_flat_bonuses_after_split(self, calculator, attacker, defender):
        context = DamageContext(flat_health_bonus=5, flat_morale_bonus=7)

        result = calculator.compute(60, True, attacker, defender, context)

        assert result.final_health_damage == 103
        assert result.final_morale_damage == 115

    @pytest.mark.parametrize("stacks,expected_morale", [
        (1, 108),
        (2, 119),   # 108 * 1.10 = 118.8
        (3, 135),   # 108 * 1.25
        (99, 178),  # capped at the last entry, 108 * 1.65 = 178.2
    ])
    def test_focus_fire(self, calculator, attacker, defender, stacks, expected_morale):
        result = calculator.compute(60, True, attacker, defender, DamageContext(focus_fire_stacks=stacks))

        assert result.final_health_damage == 98
        assert result.final_morale_damage == expected_morale


class TestGrit:
    """Grit damage reduction on the health channel."""

    def test_wounded_defender_resists_more(self, calculator, attacker, make_combatant):
        defender = make_combatant("Calico", Team.ENEMY, Vector2(0, 1), grit=20)
        defender.take_damage(50)

        result = calculator.compute(60, True, attacker, defender, DamageContext())

        assert result.damage_reduction == pytest.approx(0.13)
        assert result.final_health_damage == 85

    def test_reduction_is_capped(self, calculator, attacker, make_combatant):
        defender = make_combatant("Calico", Team.ENEMY, Vector2(0, 1), grit=200)

        result = calculator.compute(60, True, attacker, defender, DamageContext())

        assert result.damage_reduction == pytest.approx(0.40)
        assert result.final_health_damage == 59

    def test_grit_boost_adds_to_stat(self, calculator, attacker, make_combatant):
        defender = make_combatant("Calico", Team.ENEMY, Vector2(0, 1), grit=10)
        defender.effects.apply(StatusEffect(StatusEffectType.GRIT_BOOST, 2, magnitude=10))

        result = calculator.compute(60, True, attacker, defender, DamageContext())

        assert result.final_health_damage == 90

    @pytest.mark.parametrize("morale_percent", [0.0, 0.3, 0.75, 1.0])
    @pytest.mark.parametrize("grit", [0, 15, 40, 150])
    def test_monotonic_in_missing_health(self, config, morale_percent, grit):
        """Lower health never lowers the reduction."""
        reductions = [
            grit_damage_reduction(hp / 10, morale_percent, grit, config)
            for hp in range(10, -1, -1)
        ]

        assert all(a <= b for a, b in zip(reductions, reductions[1:]))
        assert all(0.0 <= r <= config.grit_dr_cap for r in reductions)

    def test_no_grit_no_reduction(self, config):
        assert grit_damage_reduction(0.1, 1.0, 0, config) == 0.0


class TestHull:
    """Hull pool absorption."""

    def test_small_pool_absorbs_everything_it_has(self, calculator, attacker, make_combatant):
        defender = make_combatant("Calico", Team.ENEMY, Vector2(0, 1), hull=2)

        result = calculator.compute(60, True, attacker, defender, DamageContext())

        assert result.hull_absorbed == 20
        assert result.hull_damage == 20
        assert result.final_health_damage == 78

    def test_large_pool_absorbs_capped_fraction(self, calculator, attacker, make_combatant):
        defender = make_combatant("Calico", Team.ENEMY, Vector2(0, 1), hull=10)

        result = calculator.compute(60, True, attacker, defender, DamageContext())

        assert result.hull_absorbed == 49
        assert result.final_health_damage == 49

    def test_hull_bypass(self, calculator, attacker, make_combatant):
        defender = make_combatant("Calico", Team.ENEMY, Vector2(0, 1), hull=10)

        result = calculator.compute(60, True, attacker, defender, DamageContext(hull_bypass=0.5))

        assert result.hull_absorbed == 25
        assert result.final_health_damage == 73

    def test_cracked_hull_drains_faster(self, calculator, attacker, make_combatant):
        defender = make_combatant("Calico", Team.ENEMY, Vector2(0, 1), hull=10)
        defender.effects.apply(StatusEffect(StatusEffectType.CRACKED, 1, magnitude=0.5))

        result = calculator.compute(60, True, attacker, defender, DamageContext())

        assert result.hull_absorbed == 49
        assert result.hull_damage == 74

    @pytest.mark.parametrize("hull_stat", [0, 1, 3, 5, 20])
    @pytest.mark.parametrize("power", [0, 10, 30, 80])
    def test_absorption_bounds(self, config, make_combatant, hull_stat, power):
        """Never more than the pool, never more than the absorb fraction."""
        calculator = DamageCalculator(config)
        attacker = make_combatant("Anne", Team.PLAYER, Vector2(0, 0), power=power)
        defender = make_combatant("Calico", Team.ENEMY, Vector2(0, 1), hull=hull_stat)

        result = calculator.compute(60, True, attacker, defender, DamageContext())
        pre_absorb = result.final_health_damage + result.hull_absorbed

        assert result.hull_absorbed <= defender.hull_current
        assert result.hull_absorbed <= pre_absorb * config.hull_absorb_percent + 0.5
        assert result.final_health_damage >= 0


class TestSecondaryDamage:
    """Splash damage only goes through Grit and hull."""

    def test_plain_splash(self, calculator, defender):
        result = calculator.compute_secondary(20, defender)

        assert result.final_health_damage == 20
        assert result.final_morale_damage == 0

    def test_splash_against_hull(self, calculator, make_combatant):
        defender = make_combatant("Calico", Team.ENEMY, Vector2(0, 1), hull=1)

        result = calculator.compute_secondary(20, defender)

        assert result.hull_absorbed == 10
        assert result.final_health_damage == 10

    def test_splash_ignores_curse(self, calculator, defender):
        defender.effects.apply(StatusEffect(StatusEffectType.CURSE, 0, magnitude=1.5, charges=2))

        result = calculator.compute_secondary(20, defender)

        assert result.final_health_damage == 20
        assert not result.curse_consumed


class TestBonusHelpers:
    """Helper functions used by the pipeline."""

    def test_first_action_cap(self, config):
        assert first_action_bonus(0, config) == 0.0
        assert first_action_bonus(50, config) == pytest.approx(0.10)
        assert first_action_bonus(500, config) == pytest.approx(0.15)

    def test_combo_first_attack_is_free(self, config):
        assert combo_bonus(50, 1, config) == 0.0
        assert combo_bonus(50, 0, config) == 0.0

    def test_focus_fire_table_bounds(self, config):
        assert focus_fire_bonus(0, config) == 0.0
        assert focus_fire_bonus(5, config) == pytest.approx(0.65)
        assert focus_fire_bonus(50, config) == pytest.approx(0.65)
