"""
Shared fixtures for the broadside test suite.

Provides factories for stat blocks, combatants and weapons, plus a fully
wired executor harness so combat tests do not have to rebuild the battle
plumbing by hand.
"""

import os
import random
import sys

import pytest

# Make the src/ layout importable without installing the package
src_root = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "src")
sys.path.insert(0, src_root)

from broadside.core.data import (
    CombatConfig,
    StatBlock,
    Team,
    UnitRole,
    Vector2,
    WeaponClass,
)
from broadside.core.engine import BattleState
from broadside.core.events import EventManager
from broadside.game.battlefield import Battlefield
from broadside.game.combat.combat_executor import CombatActionExecutor
from broadside.game.combat.effect_registry import create_default_registry
from broadside.game.combat.weapons import WeaponContext
from broadside.game.entities.combatant import Combatant
from broadside.game.entities.roster import Roster
from broadside.game.managers.energy_manager import ResourcePool
from broadside.game.managers.turn_manager import TurnController


def build_stats(**overrides) -> StatBlock:
    """Stat block with round numbers; every stat not given is 0."""
    values = {"health": 100, "morale": 100}
    values.update(overrides)
    return StatBlock(**values)


def build_combatant(name: str, team: Team = Team.PLAYER, position: Vector2 = Vector2(0, 0),
                    role: UnitRole = UnitRole.DECKHAND, weapon_class: WeaponClass = WeaponClass.MELEE,
                    config: CombatConfig = None, **stats) -> Combatant:
    return Combatant(name, role, team, weapon_class, build_stats(**stats), position, config=config)


def build_weapon(weapon_id: str = "test_blade", base_damage: int = 60,
                 weapon_class: WeaponClass = WeaponClass.MELEE, **kwargs) -> WeaponContext:
    return WeaponContext(weapon_id=weapon_id, name=weapon_id.replace("_", " ").title(),
                         weapon_class=weapon_class, base_damage=base_damage, **kwargs)


class CombatHarness:
    """Executor, turn controller and their collaborators wired together."""

    def __init__(self, units: list[Combatant], config: CombatConfig = None,
                 width: int = 8, height: int = 8, rng: random.Random = None):
        self.config = config or CombatConfig()
        self.event_manager = EventManager()
        self.state = BattleState()
        self.battlefield = Battlefield(width, height)
        self.roster = Roster()
        for unit in units:
            self.roster.add(unit)
            self.battlefield.place_unit(unit)
        self.pools = {
            team: ResourcePool(team, self.config.energy_per_turn, self.state, self.event_manager)
            for team in Team
        }
        self.registry = create_default_registry()
        self.executor = CombatActionExecutor(
            self.config, self.state, self.roster, self.battlefield,
            self.pools, self.registry, self.event_manager, rng=rng or random.Random(0),
        )
        self.controller = TurnController(
            self.config, self.state, self.roster, self.battlefield,
            self.pools, self.executor, self.event_manager,
        )

    def events(self, event_type=None):
        """Deliver queued events and return the history."""
        self.event_manager.process_events()
        return self.event_manager.get_history(event_type)


@pytest.fixture
def config():
    """Default combat configuration."""
    return CombatConfig()


@pytest.fixture
def event_manager():
    """Create an event manager for testing."""
    return EventManager(enable_debug_logging=False)


@pytest.fixture
def battle_state():
    return BattleState()


@pytest.fixture
def make_stats():
    return build_stats


@pytest.fixture
def make_combatant():
    return build_combatant


@pytest.fixture
def make_weapon():
    return build_weapon


@pytest.fixture
def make_harness():
    return CombatHarness


@pytest.fixture
def duel():
    """One player and one enemy facing each other on row 0, battle started."""
    attacker = build_combatant("Anne", Team.PLAYER, Vector2(0, 0), speed=10, power=30)
    defender = build_combatant("Blackbeard", Team.ENEMY, Vector2(0, 3), role=UnitRole.CAPTAIN)
    harness = CombatHarness([attacker, defender])
    harness.controller.start_battle()
    return harness, attacker, defender


@pytest.fixture
def sample_positions():
    """Create a list of sample positions for testing."""
    return [
        Vector2(0, 0),
        Vector2(1, 1),
        Vector2(2, 2),
        Vector2(3, 4)
    ]
