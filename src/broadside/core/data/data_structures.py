"""Core value types shared by the combat engine.

Data Flow:
1. StatBlock (generator output) -> Combatant (battle state)
2. Vector2 / VectorArray positions -> Battlefield spatial queries

Each structure is a plain value object; game logic lives in the game package.
"""

from dataclasses import dataclass, fields
from typing import Optional, Union
import math
import numpy as np
from numpy.typing import NDArray

from .game_enums import StatType


def round_half_away(value: float) -> int:
    """Round to the nearest integer, halves away from zero.

    Python's built-in ``round`` uses banker's rounding, which drifts when
    applied at every stage of the damage pipeline.
    """
    if value >= 0:
        return int(math.floor(value + 0.5))
    return -int(math.floor(-value + 0.5))


@dataclass
class Vector2:
    """2D grid position.

    Uses (y, x) ordering for direct alignment with 2D array access patterns.
    First parameter is row (y-coordinate), second is column (x-coordinate).
    """
    y: int
    x: int

    def __add__(self, other: "Vector2") -> "Vector2":
        """Vector addition."""
        return Vector2(self.y + other.y, self.x + other.x)

    def __sub__(self, other: "Vector2") -> "Vector2":
        """Vector subtraction."""
        return Vector2(self.y - other.y, self.x - other.x)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Vector2):
            return False
        return self.y == other.y and self.x == other.x

    def __hash__(self) -> int:
        return hash((self.y, self.x))

    def __iter__(self):
        """Make Vector2 iterable for unpacking (y, x order)."""
        yield self.y
        yield self.x

    def __repr__(self) -> str:
        return f"Vector2({self.y}, {self.x})"

    def manhattan_distance_to(self, other: "Vector2") -> int:
        """Calculate Manhattan distance to another vector."""
        return abs(self.y - other.y) + abs(self.x - other.x)

    def chebyshev_distance_to(self, other: "Vector2") -> int:
        """Calculate king-move distance (8-neighbourhood) to another vector."""
        return max(abs(self.y - other.y), abs(self.x - other.x))

    def to_tuple(self) -> tuple[int, int]:
        """Convert to coordinate tuple (y, x order)."""
        return (self.y, self.x)

    @classmethod
    def from_tuple(cls, coords: tuple[int, int]) -> "Vector2":
        """Create Vector2 from coordinate tuple (y, x order)."""
        return cls(coords[0], coords[1])


class VectorArray:
    """Collection of positions backed by a numpy array for batch queries."""

    def __init__(self, vectors: Optional[Union[list[Vector2], NDArray[np.int16]]] = None):
        """Initialize from a list of Vector2 objects or an (N, 2) numpy array.

        Args:
            vectors: Positions to store. If None, creates an empty array.
        """
        if vectors is None:
            self._data = np.empty((0, 2), dtype=np.int16)
        elif isinstance(vectors, list):
            if not vectors:
                self._data = np.empty((0, 2), dtype=np.int16)
            else:
                self._data = np.array([[v.y, v.x] for v in vectors], dtype=np.int16)
        else:
            if vectors.shape[-1] != 2:
                raise ValueError("Numpy array must have shape (N, 2)")
            self._data = vectors.astype(np.int16)

    @property
    def data(self) -> NDArray[np.int16]:
        return self._data

    def __len__(self) -> int:
        return len(self._data)

    def __getitem__(self, index: int) -> Vector2:
        if index >= len(self._data) or index < -len(self._data):
            raise IndexError("VectorArray index out of range")
        row = self._data[index]
        return Vector2(int(row[0]), int(row[1]))

    def __iter__(self):
        for row in self._data:
            yield Vector2(int(row[0]), int(row[1]))

    def manhattan_distance_to_point(self, target: Vector2) -> NDArray[np.int16]:
        """Calculate Manhattan distances from every position to a target point."""
        if len(self._data) == 0:
            return np.array([], dtype=np.int16)
        return (np.abs(self._data[:, 0] - target.y) + np.abs(self._data[:, 1] - target.x)).astype(np.int16)


@dataclass(frozen=True)
class StatBlock:
    """Finalized combat attributes of one combatant.

    Values come from an external generator and are frozen for the battle.
    Only non-negativity is validated here.
    """
    health: int
    morale: int
    buzz: int = 100
    power: int = 0
    aim: int = 0
    tactics: int = 0
    skill: int = 0
    proficiency: int = 0
    grit: int = 0
    hull: int = 0
    speed: int = 0

    def __post_init__(self):
        for stat_field in fields(self):
            value = getattr(self, stat_field.name)
            if not isinstance(value, int):
                raise ValueError(f"Stat {stat_field.name} must be an integer, got {value!r}")
            if value < 0:
                raise ValueError(f"Stat {stat_field.name} cannot be negative: {value}")

    def get(self, stat: StatType) -> int:
        """Look up a stat by its enum."""
        return getattr(self, stat.name.lower())
