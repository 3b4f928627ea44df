"""Explicit roster of the combatants in one battle."""

from typing import Iterator, Optional

from ...core.data import Team
from .combatant import Combatant


class Roster:
    """Ordered collection of living combatants plus a record of the fallen.

    Deployment order is preserved and used as the tie-breaker wherever the
    engine needs a deterministic choice between units.
    """

    def __init__(self, units: Optional[list[Combatant]] = None):
        self._units: list[Combatant] = []
        self._unit_id_to_index: dict[str, int] = {}
        self._fallen: dict[str, Combatant] = {}
        for unit in units or []:
            self.add(unit)

    def __len__(self) -> int:
        return len(self._units)

    def __iter__(self) -> Iterator[Combatant]:
        return iter(list(self._units))

    def __contains__(self, unit: object) -> bool:
        return isinstance(unit, Combatant) and self.get(unit.unit_id) is unit

    def add(self, unit: Combatant) -> None:
        if unit.unit_id in self._unit_id_to_index or unit.unit_id in self._fallen:
            raise ValueError(f"Duplicate unit id in roster: {unit.unit_id}")
        self._unit_id_to_index[unit.unit_id] = len(self._units)
        self._units.append(unit)

    def remove(self, unit: Combatant) -> bool:
        """Move a destroyed unit out of the roster."""
        if unit not in self:
            return False
        self._units.remove(unit)
        self._fallen[unit.unit_id] = unit
        self._unit_id_to_index = {u.unit_id: i for i, u in enumerate(self._units)}
        return True

    def get(self, unit_id: str) -> Optional[Combatant]:
        index = self._unit_id_to_index.get(unit_id)
        return self._units[index] if index is not None else None

    def is_fallen(self, unit_id: str) -> bool:
        return unit_id in self._fallen

    def team_units(self, team: Team, active_only: bool = False) -> list[Combatant]:
        """Units of a team in deployment order; active means alive and not surrendered."""
        return [u for u in self._units if u.team == team and (u.is_active or not active_only)]

    def enemies_of(self, team: Team, active_only: bool = True) -> list[Combatant]:
        return [u for u in self._units if u.team != team and (u.is_active or not active_only)]

    def captain_of(self, team: Team) -> Optional[Combatant]:
        for unit in self._units:
            if unit.team == team and unit.is_captain:
                return unit
        return None

    def had_captain(self, team: Team) -> bool:
        return any(u.team == team and u.is_captain for u in self._fallen.values())
