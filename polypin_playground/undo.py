"""Keyboard undo for the most recent pin."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from polypin_playground.geometry import Geometry, Point


@dataclass(frozen=True)
class UndoResult:
    consumed: bool
    removed: Optional[Point] = None


class UndoController:
    """Removes the last pin on the trigger key while more than one pin exists.

    The trigger key is always consumed so the host never runs its default
    action for it.
    """

    def __init__(self, trigger_key: str = "Backspace") -> None:
        self.trigger_key = trigger_key

    def matches(self, key: Optional[str]) -> bool:
        return key is not None and key.lower() == self.trigger_key.lower()

    def undo(self, geometry: Geometry) -> Optional[Point]:
        if len(geometry) <= 1:
            return None
        return geometry.remove_last()

    def handle_key(self, key: Optional[str], geometry: Geometry, *, enabled: bool = True) -> UndoResult:
        if not self.matches(key):
            return UndoResult(consumed=False)
        if not enabled:
            return UndoResult(consumed=True)
        return UndoResult(consumed=True, removed=self.undo(geometry))


__all__ = ["UndoController", "UndoResult"]
