#!/usr/bin/env python3
"""Run a scripted skirmish between two crews and print the battle log.

The enemy crew is auto-resolved: its units attack as soon as its turn starts
and the host loop's clock ends the turn once the configured delay has passed.
"""

import argparse
import os
import random
import sys

sys.path.insert(0, os.path.join(os.path.dirname(os.path.abspath(__file__)), "src"))

from broadside.core.data import StatBlock, Team, UnitRole, Vector2, WeaponClass
from broadside.game.battle import Battle
from broadside.game.battlefield import Battlefield, HazardBonus
from broadside.game.entities import Combatant

# name, role, team, weapon class, position, weapon id, stats
CREWS = [
    ("Anne", UnitRole.CAPTAIN, Team.PLAYER, WeaponClass.MELEE, Vector2(1, 1), "rapier",
     dict(health=160, morale=150, power=28, speed=12, grit=12, hull=2)),
    ("Mary", UnitRole.BOATSWAIN, Team.PLAYER, WeaponClass.MELEE, Vector2(3, 1), "boarding_axe",
     dict(health=140, morale=120, power=26, speed=9, skill=30)),
    ("Jack", UnitRole.MASTER_GUNNER, Team.PLAYER, WeaponClass.RANGED, Vector2(5, 0), "musket",
     dict(health=110, morale=100, aim=30, speed=10, proficiency=40)),
    ("Teach", UnitRole.CAPTAIN, Team.ENEMY, WeaponClass.MELEE, Vector2(2, 8), "cutlass",
     dict(health=170, morale=160, power=30, speed=11, grit=15, hull=3)),
    ("Calico", UnitRole.QUARTERMASTER, Team.ENEMY, WeaponClass.RANGED, Vector2(4, 9), "flintlock",
     dict(health=120, morale=110, aim=26, speed=10)),
    ("Bonny", UnitRole.SURGEON, Team.ENEMY, WeaponClass.MELEE, Vector2(0, 8), "bone_saw",
     dict(health=120, morale=100, power=22, speed=8)),
]

MAX_TICKS = 500
TICK_SECONDS = 0.5


def build_battle(seed: int) -> tuple[Battle, dict[str, str]]:
    battlefield = Battlefield(10, 6)
    battlefield.add_hazard(Vector2(2, 4), HazardBonus(flat_health=5))
    battlefield.add_hazard(Vector2(3, 5), HazardBonus(applies_curse=True))
    battlefield.add_obstacle(Vector2(1, 4), 150)

    units = []
    loadout = {}
    for name, role, team, weapon_class, position, weapon_id, stats in CREWS:
        units.append(Combatant(name, role, team, weapon_class, StatBlock(**stats), position))
        loadout[name] = weapon_id

    battle = Battle(units, battlefield, auto_teams=[Team.ENEMY], rng=random.Random(seed))
    return battle, loadout


def attack_with_everyone(battle: Battle, loadout: dict[str, str]) -> None:
    for unit in battle.roster.team_units(battle.state.acting_team, active_only=True):
        if not battle.is_active:
            return
        battle.issue_action(unit.unit_id, None, loadout[unit.unit_id])


def main():
    parser = argparse.ArgumentParser(description="Broadside scripted skirmish")
    parser.add_argument("--seed", type=int, default=0, help="Seed for miss rolls")
    parser.add_argument("--save-log", metavar="DIR", help="Also write the log to a file in DIR")
    args = parser.parse_args()

    battle, loadout = build_battle(args.seed)
    now = 0.0
    battle.start(now)

    acted_this_turn = None
    try:
        for _ in range(MAX_TICKS):
            if not battle.is_active:
                break
            turn = (battle.state.round_number, battle.state.acting_team)
            if turn != acted_this_turn:
                attack_with_everyone(battle, loadout)
                acted_this_turn = turn
                if battle.is_active and battle.state.acting_team not in battle.turn_controller.auto_teams:
                    battle.end_turn(now=now)
            now += TICK_SECONDS
            battle.update(now)
    except KeyboardInterrupt:
        print("\n\nBattle interrupted by user")

    for entry in battle.log_manager.get_messages():
        print(entry.format())

    if args.save_log:
        path = battle.log_manager.save_log_to_file(args.save_log)
        if path:
            print(f"\nLog saved to {path}")

    if battle.is_active:
        print("\nThe battle is still raging.")
    elif battle.winner is None:
        print("\nNo crew left standing.")
    else:
        print(f"\n{battle.winner.name.title()} crew wins!")


if __name__ == "__main__":
    main()
