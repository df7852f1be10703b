"""Triangular pulse driving the active pin radius."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PulseState:
    radius: float = 10.0
    growing: bool = True


def pulse_step(state: PulseState, step: float = 0.5, lo: float = 10.0, hi: float = 15.0) -> PulseState:
    """Advance the pulse by one tick.

    The bounds are checked against the current radius before moving, so the
    direction flips exactly on the tick that touches a bound.
    """
    if state.radius >= hi:
        return PulseState(radius=state.radius - step, growing=False)
    if state.radius <= lo:
        return PulseState(radius=state.radius + step, growing=True)
    delta = step if state.growing else -step
    return PulseState(radius=state.radius + delta, growing=state.growing)


class PulseAnimator:
    """Holds the pulse state between ticks."""

    def __init__(self, step: float = 0.5, lo: float = 10.0, hi: float = 15.0) -> None:
        self._step = float(step)
        self._lo = float(lo)
        self._hi = float(hi)
        self._state = PulseState(radius=self._lo, growing=True)

    @property
    def radius(self) -> float:
        return self._state.radius

    @property
    def growing(self) -> bool:
        return self._state.growing

    def tick(self) -> float:
        self._state = pulse_step(self._state, self._step, self._lo, self._hi)
        return self._state.radius


__all__ = ["PulseAnimator", "PulseState", "pulse_step"]
