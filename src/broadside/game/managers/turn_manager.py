"""
Round and turn flow.

The turn controller owns the round state machine:

    ROUND_START -> TEAM_A_ACTING / TEAM_B_ACTING (initiative winner first)
                -> the other team's turn -> ROUND_END -> ROUND_START ...

Any phase may move to BATTLE_OVER. Each phase change is checked against an
explicit table of transition rules so a wrong call order is caught early in
development instead of silently corrupting the battle state.

Turn boundaries are also where timed effects tick, where energy is refilled
(minus any energy drain) and where leftover energy is converted into grog.
Swapping positions is handled here too since its limits are per round and
per unit cooldowns count down on turn start.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, Optional

import numpy as np

from ...core.data import (
    CombatConfig,
    InvalidReason,
    round_half_away,
    StatusEffectType,
    Team,
    TEAM_NAMES,
    TurnPhase,
)
from ...core.events import (
    BattleEnded,
    BattleStarted,
    LogMessage,
    RoundStarted,
    TurnEnded,
    TurnStarted,
    UnitSwapped,
)
from ..combat.status_effects import StatusEffect
from .log_manager import LogLevel

if TYPE_CHECKING:
    from ...core.engine import BattleState
    from ...core.events import EventManager
    from ..battlefield import Battlefield
    from ..combat.combat_executor import CombatActionExecutor
    from ..entities.combatant import Combatant
    from ..entities.roster import Roster
    from .energy_manager import ResourcePool


@dataclass(frozen=True)
class TurnTransitionRule:
    """Allowed move between two phases of the round state machine."""

    from_phase: TurnPhase
    to_phase: TurnPhase
    description: str

    def matches(self, current_phase: TurnPhase, next_phase: TurnPhase) -> bool:
        return self.from_phase == current_phase and self.to_phase == next_phase


TURN_TRANSITIONS: list[TurnTransitionRule] = [
    TurnTransitionRule(TurnPhase.ROUND_START, TurnPhase.TEAM_A_ACTING, "Player won initiative"),
    TurnTransitionRule(TurnPhase.ROUND_START, TurnPhase.TEAM_B_ACTING, "Enemy won initiative"),
    TurnTransitionRule(TurnPhase.TEAM_A_ACTING, TurnPhase.TEAM_B_ACTING, "Player half ended first"),
    TurnTransitionRule(TurnPhase.TEAM_B_ACTING, TurnPhase.TEAM_A_ACTING, "Enemy half ended first"),
    TurnTransitionRule(TurnPhase.TEAM_A_ACTING, TurnPhase.ROUND_END, "Player half closed the round"),
    TurnTransitionRule(TurnPhase.TEAM_B_ACTING, TurnPhase.ROUND_END, "Enemy half closed the round"),
    TurnTransitionRule(TurnPhase.ROUND_END, TurnPhase.ROUND_START, "Next round"),
]


def other_team(team: Team) -> Team:
    return Team.ENEMY if team == Team.PLAYER else Team.PLAYER


class TurnController:
    """Drives rounds, half-turns and the swap action."""

    def __init__(
        self,
        config: CombatConfig,
        battle_state: "BattleState",
        roster: "Roster",
        battlefield: "Battlefield",
        pools: dict[Team, "ResourcePool"],
        executor: "CombatActionExecutor",
        event_manager: "EventManager",
        auto_teams: Iterable[Team] = (),
    ):
        """Initialize the controller.

        Args:
            config: Combat tuning constants
            battle_state: Shared battle state this controller mutates
            roster: Units taking part in the battle
            battlefield: Grid used for swaps
            pools: Energy/grog pool of each team
            executor: Executor used for periodic damage, healing and casualties
            event_manager: Event manager for turn notifications
            auto_teams: Teams whose turns end on their own once the host
                loop's clock passes the auto-turn deadline
        """
        self.config = config
        self.state = battle_state
        self.roster = roster
        self.battlefield = battlefield
        self.pools = pools
        self.executor = executor
        self.event_manager = event_manager
        self.auto_teams = frozenset(auto_teams)

    def _emit_log(self, message: str, category: str = "TURN", level: str = "INFO") -> None:
        """Emit a log message event."""
        level_map = {
            "DEBUG": LogLevel.DEBUG,
            "INFO": LogLevel.INFO,
            "WARNING": LogLevel.WARNING,
            "ERROR": LogLevel.ERROR
        }
        self.event_manager.publish(
            LogMessage(
                round_number=self.state.round_number,
                message=message,
                category=category,
                level=level_map.get(level, LogLevel.INFO),
                source="TurnController"
            ),
            source="TurnController"
        )

    def _transition(self, next_phase: TurnPhase) -> None:
        current = self.state.phase
        rule = next((r for r in TURN_TRANSITIONS if r.matches(current, next_phase)), None)
        assert rule is not None, f"Illegal phase transition {current.name} -> {next_phase.name}"
        self.state.phase = next_phase
        self._emit_log(f"Phase {current.name} -> {next_phase.name} ({rule.description})", "SYSTEM", "DEBUG")

    # ============== Initiative ==============

    def compute_initiative(self) -> tuple[Team, int, int]:
        """Total speed of each team's active units.

        Returns:
            (first_team, player_initiative, enemy_initiative); PLAYER wins ties
        """
        totals = {}
        for team in (Team.PLAYER, Team.ENEMY):
            speeds = np.array([u.stats.speed for u in self.roster.team_units(team, active_only=True)],
                              dtype=np.int64)
            totals[team] = int(speeds.sum())

        first = Team.PLAYER if totals[Team.PLAYER] >= totals[Team.ENEMY] else Team.ENEMY
        return first, totals[Team.PLAYER], totals[Team.ENEMY]

    # ============== Battle lifecycle ==============

    def start_battle(self, now: float = 0.0) -> None:
        """Activate the battle and open round 1."""
        assert not self.state.is_active, "Battle already started"
        self.state.is_active = True
        self.state.round_number = 0
        self.state.phase = TurnPhase.ROUND_START
        self.event_manager.publish(
            BattleStarted(
                round_number=0,
                player_units=len(self.roster.team_units(Team.PLAYER)),
                enemy_units=len(self.roster.team_units(Team.ENEMY)),
            ),
            source="TurnController"
        )
        self._emit_log("Battle begins", "BATTLE")
        self._begin_round(now)

    def end_battle(self, winner: Optional[Team], reason: str) -> None:
        """Stop the battle; later intents are rejected as BATTLE_NOT_ACTIVE."""
        if self.state.phase == TurnPhase.BATTLE_OVER:
            return
        self.state.end(winner)
        self.event_manager.publish(
            BattleEnded(round_number=self.state.round_number, winner=winner, reason=reason),
            source="TurnController"
        )
        winner_name = TEAM_NAMES[winner] if winner is not None else "Nobody"
        self._emit_log(f"Battle over: {winner_name} wins ({reason})", "BATTLE")

    def check_battle_end(self) -> bool:
        """End the battle if a captain has fallen or a team has no active units.

        Returns:
            True if the battle is over
        """
        if not self.state.is_active:
            return True

        losers = []
        for team in (Team.PLAYER, Team.ENEMY):
            if self.roster.had_captain(team):
                losers.append((team, f"{TEAM_NAMES[team]} captain has fallen"))
            elif not self.roster.team_units(team, active_only=True):
                losers.append((team, f"{TEAM_NAMES[team]} crew defeated"))

        if not losers:
            return False

        if len(losers) == 2:
            self.end_battle(None, "Both crews defeated")
        else:
            team, reason = losers[0]
            self.end_battle(other_team(team), reason)
        return True

    # ============== Rounds and turns ==============

    def _begin_round(self, now: float) -> None:
        if not self.state.is_active:
            return

        self.state.round_number += 1
        self.state.swaps_used = 0
        for unit in self.roster:
            unit.turn_state.reset_focus_fire()

        first, player_init, enemy_init = self.compute_initiative()
        self.state.first_team = first
        self.event_manager.publish(
            RoundStarted(
                round_number=self.state.round_number,
                first_team=first,
                player_initiative=player_init,
                enemy_initiative=enemy_init,
            ),
            source="TurnController"
        )
        self._emit_log(
            f"Round {self.state.round_number}: {TEAM_NAMES[first]} acts first "
            f"(initiative {player_init} vs {enemy_init})"
        )
        self._start_turn(first, now)

    def _start_turn(self, team: Team, now: float) -> None:
        self._transition(TurnPhase.TEAM_A_ACTING if team == Team.PLAYER else TurnPhase.TEAM_B_ACTING)
        self.state.acting_team = team
        self.state.combo_count = 0

        drain = 0
        for unit in self.roster.team_units(team):
            unit.turn_state.start_turn(self.config.buzz_decay_per_turn)
            for tick in unit.effects.tick_turn_start():
                if tick.health_damage:
                    self.executor.apply_periodic_damage(unit, tick.health_damage, tick.effect_type.name.lower())
                if tick.healing:
                    self.executor.heal_unit(unit, tick.healing)
            if unit.is_alive:
                # Drain counts for the turn it ticks on, even if it expires now
                drain += unit.effects.energy_drain()
                self.executor.publish_expired(unit, unit.effects.remove_expired())

        self.pools[team].refill(drain)
        self.event_manager.publish(
            TurnStarted(round_number=self.state.round_number, team=team),
            source="TurnController"
        )
        self._emit_log(f"{TEAM_NAMES[team]} turn begins")

        if self.check_battle_end():
            return

        if team in self.auto_teams:
            self.state.auto_turn_deadline = now + self.config.enemy_turn_delay
        else:
            self.state.auto_turn_deadline = None

    def end_turn(self, team: Optional[Team] = None, now: float = 0.0) -> Optional[InvalidReason]:
        """End the acting team's half-turn and advance the state machine.

        Args:
            team: Team requesting the end of turn (None means whoever is acting)
            now: Host loop time, used for the next auto-turn deadline

        Returns:
            None on success, otherwise why the request was rejected
        """
        if not self.state.is_active:
            return InvalidReason.BATTLE_NOT_ACTIVE
        acting = self.state.acting_team
        if acting is None or (team is not None and team != acting):
            return InvalidReason.NOT_YOUR_TURN

        self.state.auto_turn_deadline = None
        for unit in self.roster.team_units(acting):
            for tick in unit.effects.tick_turn_end():
                if tick.health_damage:
                    self.executor.apply_periodic_damage(unit, tick.health_damage, tick.effect_type.name.lower())
                if tick.healing:
                    self.executor.heal_unit(unit, tick.healing)
            if unit.is_alive:
                self.executor.publish_expired(unit, unit.effects.remove_expired())

        pool = self.pools[acting]
        leftover = pool.drain_all()
        pool.add_grog(leftover)
        self.event_manager.publish(
            TurnEnded(round_number=self.state.round_number, team=acting, energy_converted=leftover),
            source="TurnController"
        )
        self._emit_log(f"{TEAM_NAMES[acting]} turn ends ({leftover} energy to grog)")

        if self.check_battle_end():
            return None

        if self.state.is_first_half:
            self._start_turn(other_team(acting), now)
        else:
            self._transition(TurnPhase.ROUND_END)
            self.state.acting_team = None
            self._transition(TurnPhase.ROUND_START)
            self._begin_round(now)
        return None

    def poll(self, now: float) -> bool:
        """End an auto-resolved turn whose deadline has passed.

        Returns:
            True if a turn was ended
        """
        deadline = self.state.auto_turn_deadline
        if not self.state.is_active or deadline is None or now < deadline:
            return False
        self._emit_log(f"{TEAM_NAMES[self.state.acting_team]} turn timed out", "TURN", "DEBUG")
        self.end_turn(now=now)
        return True

    # ============== Swapping ==============

    def validate_swap(self, unit: "Combatant", other: "Combatant") -> Optional[InvalidReason]:
        """Check whether two allies may trade places right now."""
        if not self.state.is_active:
            return InvalidReason.BATTLE_NOT_ACTIVE
        if unit not in self.roster or other not in self.roster:
            return InvalidReason.UNKNOWN_UNIT
        if not unit.is_alive:
            return InvalidReason.ATTACKER_DEAD
        if unit.is_surrendered:
            return InvalidReason.ATTACKER_SURRENDERED
        if unit.team != self.state.acting_team:
            return InvalidReason.NOT_YOUR_TURN
        if unit is other or other.team != unit.team:
            return InvalidReason.NOT_AN_ALLY
        if not other.is_alive:
            return InvalidReason.TARGET_DEAD
        if other.is_surrendered:
            return InvalidReason.TARGET_SURRENDERED
        if unit.effects.is_stunned():
            return InvalidReason.ATTACKER_STUNNED
        if unit.effects.is_trapped():
            return InvalidReason.TRAPPED
        if self.state.swaps_used >= self.config.max_swaps_per_round:
            return InvalidReason.SWAP_LIMIT_REACHED
        if unit.turn_state.swap_cooldown > 0:
            return InvalidReason.SWAP_ON_COOLDOWN
        if unit.health.get_hp_percent() < self.config.min_hp_percent_to_swap:
            return InvalidReason.HEALTH_TOO_LOW
        if not self.pools[unit.team].can_afford(self.config.swap_energy_cost):
            return InvalidReason.INSUFFICIENT_ENERGY
        return None

    def swap(self, unit: "Combatant", other: "Combatant") -> Optional[InvalidReason]:
        """Trade places with an ally.

        The initiating unit pays for the move: it loses a share of its
        current morale (captains are exempt), is left Exposed until its next
        turn and goes on swap cooldown.

        Returns:
            None on success, otherwise why the swap was rejected
        """
        reason = self.validate_swap(unit, other)
        if reason is not None:
            self._emit_log(f"{unit.name} cannot swap: {reason.name}", "TURN", "DEBUG")
            return reason

        cfg = self.config
        self.pools[unit.team].spend(cfg.swap_energy_cost)
        self.battlefield.swap_positions(unit, other)
        self.state.swaps_used += 1
        unit.turn_state.swap_cooldown = cfg.swap_cooldown_turns

        self.event_manager.publish(
            UnitSwapped(round_number=self.state.round_number, unit=unit, other=other),
            source="TurnController"
        )
        self._emit_log(f"{unit.name} swaps places with {other.name}")

        self.executor.apply_status_effect(unit, StatusEffect(StatusEffectType.EXPOSED, duration=1,
                                                             source=unit.unit_id))
        if not unit.is_captain:
            penalty = round_half_away(unit.morale_current * cfg.swap_morale_penalty)
            if penalty > 0:
                self.executor.apply_secondary_morale_damage(unit, penalty)
        return None
