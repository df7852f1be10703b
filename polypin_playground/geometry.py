"""Ordered pin geometry for the PolyPin Playground.

Pins are stored in placement order. Each pin carries a slot reference handed
out at creation time so the drag controller can follow "the pin being
dragged" even when two pins share the same coordinates.
"""
from __future__ import annotations

import itertools
import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

Point = Tuple[float, float]
PinRef = int


@dataclass(frozen=True)
class Pin:
    ref: PinRef
    point: Point


def as_point(value: Sequence[float]) -> Point:
    return (float(value[0]), float(value[1]))


def is_finite_point(point: Optional[Sequence[float]]) -> bool:
    """True when ``point`` has two finite coordinates."""
    if point is None or len(point) != 2:
        return False
    try:
        return math.isfinite(float(point[0])) and math.isfinite(float(point[1]))
    except (TypeError, ValueError):
        return False


def polyline_length(points: Iterable[Sequence[float]]) -> float:
    """Length of the open path through ``points``; non-finite points are dropped."""
    pts = np.asarray([p for p in points if is_finite_point(p)], dtype=float)
    if pts.shape[0] < 2:
        return 0.0
    diffs = np.diff(pts, axis=0)
    return float(np.sum(np.hypot(diffs[:, 0], diffs[:, 1])))


class Geometry:
    """Anchor-first sequence of pins and its mutation operations."""

    def __init__(self) -> None:
        self._pins: List[Pin] = []
        self._first_pin_fixed = False
        self._refs = itertools.count(1)

    # ------------------------------------------------------------------
    # Read access
    def __len__(self) -> int:
        return len(self._pins)

    @property
    def first_pin_fixed(self) -> bool:
        return self._first_pin_fixed

    def points(self) -> List[Point]:
        return [pin.point for pin in self._pins]

    def first(self) -> Optional[Point]:
        return self._pins[0].point if self._pins else None

    def last(self) -> Optional[Point]:
        return self._pins[-1].point if self._pins else None

    def last_ref(self) -> Optional[PinRef]:
        return self._pins[-1].ref if self._pins else None

    def contains_ref(self, ref: Optional[PinRef]) -> bool:
        return ref is not None and any(pin.ref == ref for pin in self._pins)

    def as_array(self) -> np.ndarray:
        if not self._pins:
            return np.zeros((0, 2), dtype=float)
        return np.asarray(self.points(), dtype=float)

    def polyline_length(self) -> float:
        return polyline_length(self.as_array())

    # ------------------------------------------------------------------
    # Mutation
    def _new_pin(self, point: Sequence[float]) -> Pin:
        return Pin(ref=next(self._refs), point=as_point(point))

    def fix_anchor(self) -> None:
        self._first_pin_fixed = True

    def place_first(self, point: Sequence[float]) -> PinRef:
        """Start a new polygon at ``point``; appends once the anchor is fixed."""
        if self._first_pin_fixed:
            return self.append_point(point)
        pin = self._new_pin(point)
        self._pins = [pin]
        self._first_pin_fixed = True
        return pin.ref

    def append_point(self, point: Sequence[float]) -> PinRef:
        if not self._first_pin_fixed:
            return self.place_first(point)
        pin = self._new_pin(point)
        self._pins.append(pin)
        return pin.ref

    def update_by_ref(self, ref: Optional[PinRef], point: Sequence[float]) -> bool:
        for idx, pin in enumerate(self._pins):
            if pin.ref == ref:
                self._pins[idx] = Pin(ref=pin.ref, point=as_point(point))
                return True
        return False

    def update_last(self, point: Sequence[float]) -> bool:
        return self.update_by_ref(self.last_ref(), point)

    def remove_last(self) -> Optional[Point]:
        if len(self._pins) <= 1:
            return None
        return self._pins.pop().point

    def replace_all(self, points: Iterable[Sequence[float]]) -> None:
        self._pins = [self._new_pin(p) for p in points]


__all__ = ["Geometry", "Pin", "PinRef", "Point", "as_point", "is_finite_point", "polyline_length"]
