"""Battlefield grid consulted by the combat engine.

The grid only answers the spatial questions combat needs: which tiles give
cover, which obstacles sit between an attacker and a defender on the same
row, who stands where, and what bonus a hazard grants to the unit standing
on it. Layout generation and pathfinding live elsewhere.
"""

from dataclasses import dataclass, field
from typing import Optional, TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from ..core.data.data_structures import Vector2, VectorArray
from ..core.data.game_enums import Team

if TYPE_CHECKING:
    from .entities.combatant import Combatant


@dataclass(frozen=True)
class HazardBonus:
    """Bonus granted to an attacker standing on a hazard tile."""
    flat_health: int = 0
    flat_morale: int = 0
    applies_curse: bool = False


@dataclass
class Battlefield:
    width: int
    height: int
    hazards: NDArray[np.bool_] = field(init=False)
    obstacle_hp: NDArray[np.int16] = field(init=False)  # 0 = no obstacle
    hazard_bonuses: dict[Vector2, HazardBonus] = field(default_factory=dict)
    _occupants: dict[Vector2, "Combatant"] = field(default_factory=dict)

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Battlefield dimensions must be positive: {self.width}x{self.height}")
        self.hazards = np.zeros((self.height, self.width), dtype=np.bool_)
        self.obstacle_hp = np.zeros((self.height, self.width), dtype=np.int16)
        self._cover_mask: Optional[NDArray[np.bool_]] = None

    def is_valid_position(self, position: Vector2) -> bool:
        return 0 <= position.y < self.height and 0 <= position.x < self.width

    # ============== Hazards and cover ==============

    def add_hazard(self, position: Vector2, bonus: Optional[HazardBonus] = None) -> None:
        if not self.is_valid_position(position):
            raise ValueError(f"Hazard outside battlefield: {position}")
        self.hazards[position.y, position.x] = True
        if bonus is not None:
            self.hazard_bonuses[position] = bonus
        self._cover_mask = None

    def get_cover_mask(self) -> NDArray[np.bool_]:
        """Tiles with at least one hazard among their eight neighbours."""
        if self._cover_mask is None:
            padded = np.pad(self.hazards, 1, mode="constant", constant_values=False)
            mask = np.zeros((self.height, self.width), dtype=np.bool_)
            for dy in (-1, 0, 1):
                for dx in (-1, 0, 1):
                    if dy == 0 and dx == 0:
                        continue
                    mask |= padded[1 + dy:1 + dy + self.height, 1 + dx:1 + dx + self.width]
            self._cover_mask = mask
        return self._cover_mask

    def is_adjacent_to_hazard(self, position: Vector2) -> bool:
        if not self.is_valid_position(position):
            return False
        return bool(self.get_cover_mask()[position.y, position.x])

    def get_standing_bonus(self, position: Vector2) -> Optional[HazardBonus]:
        return self.hazard_bonuses.get(position)

    # ============== Obstacles ==============

    def add_obstacle(self, position: Vector2, hp: int) -> None:
        if not self.is_valid_position(position):
            raise ValueError(f"Obstacle outside battlefield: {position}")
        if hp <= 0:
            raise ValueError("Obstacle HP must be positive")
        self.obstacle_hp[position.y, position.x] = hp

    def has_obstacle(self, position: Vector2) -> bool:
        return self.is_valid_position(position) and self.obstacle_hp[position.y, position.x] > 0

    def find_blocking_obstacle(self, attacker_pos: Vector2, defender_pos: Vector2) -> Optional[Vector2]:
        """Nearest obstacle strictly between two units on the same row.

        Returns:
            Position of the obstacle closest to the attacker, or None
        """
        if attacker_pos.y != defender_pos.y:
            return None

        row = self.obstacle_hp[attacker_pos.y]
        low, high = sorted((attacker_pos.x, defender_pos.x))
        between = np.nonzero(row[low + 1:high] > 0)[0] + low + 1
        if len(between) == 0:
            return None

        nearest = between[np.argmin(np.abs(between - attacker_pos.x))]
        return Vector2(attacker_pos.y, int(nearest))

    def damage_obstacle(self, position: Vector2, amount: int) -> bool:
        """Damage an obstacle, returning True if it was destroyed."""
        current = int(self.obstacle_hp[position.y, position.x])
        remaining = max(0, current - max(0, amount))
        self.obstacle_hp[position.y, position.x] = remaining
        return current > 0 and remaining == 0

    # ============== Occupancy ==============

    def place_unit(self, unit: "Combatant") -> None:
        position = unit.position
        if not self.is_valid_position(position):
            raise ValueError(f"{unit.name} placed outside battlefield: {position}")
        occupant = self._occupants.get(position)
        if occupant is not None and occupant is not unit:
            raise ValueError(f"{position} already occupied by {occupant.name}")
        self._occupants[position] = unit

    def remove_unit(self, unit: "Combatant") -> bool:
        if self._occupants.get(unit.position) is unit:
            del self._occupants[unit.position]
            return True
        return False

    def get_unit_at(self, position: Vector2) -> Optional["Combatant"]:
        return self._occupants.get(position)

    def swap_positions(self, first: "Combatant", second: "Combatant") -> None:
        first_pos, second_pos = first.position, second.position
        first.position, second.position = second_pos, first_pos
        self._occupants[second_pos] = first
        self._occupants[first_pos] = second

    def unit_behind(self, attacker_pos: Vector2, defender_pos: Vector2) -> Optional["Combatant"]:
        """Unit one step past the defender along the attack direction."""
        step = Vector2(int(np.sign(defender_pos.y - attacker_pos.y)),
                       int(np.sign(defender_pos.x - attacker_pos.x)))
        if step.y == 0 and step.x == 0:
            return None
        return self._occupants.get(defender_pos + step)

    def units_within(self, center: Vector2, radius: int, team: Optional[Team] = None) -> list["Combatant"]:
        """Units within a Manhattan radius, optionally filtered by team."""
        units = [u for u in self._occupants.values() if team is None or u.team == team]
        if not units:
            return []
        distances = VectorArray([u.position for u in units]).manhattan_distance_to_point(center)
        return [unit for unit, in_range in zip(units, distances <= radius) if in_range]
