"""Typed results of intents issued to the engine.

Nothing in the engine raises for an illegal intent; callers inspect the
returned :class:`ActionOutcome` and decide whether to retry.
"""

from dataclasses import dataclass
from typing import Optional, TYPE_CHECKING

from ...core.data import InvalidReason, OutcomeKind

if TYPE_CHECKING:
    from ...core.data import Vector2
    from .damage_calculator import DamageResult


@dataclass(frozen=True)
class ActionOutcome:
    kind: OutcomeKind
    result: Optional["DamageResult"] = None
    obstacle: Optional["Vector2"] = None
    reason: Optional[InvalidReason] = None
    target_died: bool = False
    target_surrendered: bool = False

    @property
    def is_valid(self) -> bool:
        return self.kind is not OutcomeKind.INVALID

    @classmethod
    def hit(cls, result: "DamageResult", target_died: bool = False,
            target_surrendered: bool = False) -> "ActionOutcome":
        return cls(OutcomeKind.HIT, result=result, target_died=target_died,
                   target_surrendered=target_surrendered)

    @classmethod
    def blocked(cls, obstacle: "Vector2") -> "ActionOutcome":
        return cls(OutcomeKind.BLOCKED, obstacle=obstacle)

    @classmethod
    def missed(cls) -> "ActionOutcome":
        return cls(OutcomeKind.MISSED)

    @classmethod
    def swapped(cls) -> "ActionOutcome":
        return cls(OutcomeKind.SWAPPED)

    @classmethod
    def turn_ended(cls) -> "ActionOutcome":
        return cls(OutcomeKind.TURN_ENDED)

    @classmethod
    def invalid(cls, reason: InvalidReason) -> "ActionOutcome":
        return cls(OutcomeKind.INVALID, reason=reason)
