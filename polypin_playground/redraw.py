"""Timed replay of an imported point list into the live geometry."""
from __future__ import annotations

import logging
from typing import Callable, List, Optional, Protocol, Sequence

from polypin_playground.geometry import Geometry, Point, as_point

log = logging.getLogger("polypin.redraw")


class TimerHandle(Protocol):
    def cancel(self) -> None:
        ...


class Scheduler(Protocol):
    """Timed-resumption primitive; the Qt host backs it with single-shot timers."""

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle:
        ...


class RedrawSequencer:
    """Append one queued point per wake-up until the queue is exhausted.

    The first point lands immediately; each further point waits
    ``interval_ms``. Starting a new run cancels the one in flight.
    """

    def __init__(
        self,
        geometry: Geometry,
        scheduler: Scheduler,
        interval_ms: int = 200,
        on_step: Optional[Callable[[int, int], None]] = None,
        on_finished: Optional[Callable[[], None]] = None,
    ) -> None:
        self._geometry = geometry
        self._scheduler = scheduler
        self._interval_ms = int(interval_ms)
        self._on_step = on_step
        self._on_finished = on_finished
        self._queue: List[Point] = []
        self._cursor = 0
        self._pending: Optional[TimerHandle] = None
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def total(self) -> int:
        return len(self._queue)

    def start(self, points: Sequence[Sequence[float]]) -> None:
        self.cancel()
        self._queue = [as_point(p) for p in points]
        self._cursor = 0
        self._geometry.fix_anchor()
        self._geometry.replace_all([])
        self._running = True
        log.info("Redraw started with %d points", len(self._queue))
        self._step()

    def cancel(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None
        if self._running:
            log.info("Redraw cancelled at %d/%d", self._cursor, len(self._queue))
        self._running = False
        self._queue = []
        self._cursor = 0

    def _step(self) -> None:
        self._pending = None
        if not self._running:
            return
        if self._cursor >= len(self._queue):
            self._finish()
            return
        self._geometry.append_point(self._queue[self._cursor])
        self._cursor += 1
        if self._on_step is not None:
            self._on_step(self._cursor, len(self._queue))
        if self._cursor >= len(self._queue):
            self._finish()
            return
        self._pending = self._scheduler.call_later(self._interval_ms, self._step)

    def _finish(self) -> None:
        count = len(self._queue)
        self._running = False
        self._queue = []
        self._cursor = 0
        log.info("Redraw finished with %d points", count)
        if self._on_finished is not None:
            self._on_finished()


__all__ = ["RedrawSequencer", "Scheduler", "TimerHandle"]
