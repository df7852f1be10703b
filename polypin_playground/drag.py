"""Pointer gesture handling for the active pin."""
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, Tuple

from polypin_playground.geometry import Geometry, PinRef, Point, as_point
from polypin_playground.hit_test import hit_last_pin


class DragState(Enum):
    IDLE = auto()
    ARMED = auto()
    DRAGGING = auto()


@dataclass(frozen=True)
class Gesture:
    """Outcome of a release: either a placement click, a finished drag, or nothing."""

    click: Optional[Point] = None
    dragged: bool = False


class DragController:
    """Idle / armed / dragging machine for the last pin.

    A press records its position whether or not it hits the last pin. Once a
    press lands on the last pin, any pointer motion drags it. A release that
    dragged nothing and travelled no further than ``threshold`` is reported as
    a placement click at the press position.
    """

    def __init__(self, threshold: float = 3.0) -> None:
        self._threshold = float(threshold)
        self._state = DragState.IDLE
        self._ref: Optional[PinRef] = None
        self._press_pos: Optional[Point] = None
        self._moved = False

    @property
    def state(self) -> DragState:
        return self._state

    @property
    def ref(self) -> Optional[PinRef]:
        return self._ref

    def press(self, point: Tuple[float, float], geometry: Geometry, radius: float) -> DragState:
        self._press_pos = as_point(point)
        self._moved = False
        self._ref = hit_last_pin(geometry, self._press_pos, radius)
        self._state = DragState.ARMED if self._ref is not None else DragState.IDLE
        return self._state

    def move(self, point: Tuple[float, float], geometry: Geometry) -> bool:
        """Track the pointer; returns True when the geometry changed."""
        if self._press_pos is None:
            return False
        current = as_point(point)
        if not self._moved:
            dx = current[0] - self._press_pos[0]
            dy = current[1] - self._press_pos[1]
            if math.hypot(dx, dy) > self._threshold:
                self._moved = True
        if self._state is DragState.ARMED and current != self._press_pos:
            self._state = DragState.DRAGGING
        if self._state is not DragState.DRAGGING:
            return False
        if not geometry.update_by_ref(self._ref, current):
            # The pin vanished underneath us (bulk replace); stop following it.
            self._state = DragState.IDLE
            self._ref = None
            return False
        return True

    def release(self) -> Gesture:
        was_dragging = self._state is DragState.DRAGGING
        click = None
        if self._press_pos is not None and not self._moved and not was_dragging:
            click = self._press_pos
        self.cancel()
        return Gesture(click=click, dragged=was_dragging)

    def cancel(self) -> None:
        self._state = DragState.IDLE
        self._ref = None
        self._press_pos = None
        self._moved = False


__all__ = ["DragController", "DragState", "Gesture"]
