"""Shared fakes for exercising the editor core without a Qt event loop."""
from __future__ import annotations

from concurrent.futures import Future
from typing import Any, Callable, List, Tuple

import pytest

from polypin_playground.session import EditorSession, StatusMessage


class ManualHandle:
    def __init__(self, scheduler: "ManualScheduler", due: int, callback: Callable[[], None]) -> None:
        self.scheduler = scheduler
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Virtual clock: callbacks fire only when the test advances time."""

    def __init__(self) -> None:
        self.now = 0
        self.pending: List[ManualHandle] = []
        self.delays: List[int] = []

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> ManualHandle:
        handle = ManualHandle(self, self.now + int(delay_ms), callback)
        self.pending.append(handle)
        self.delays.append(int(delay_ms))
        return handle

    def advance(self, ms: int) -> None:
        target = self.now + int(ms)
        while True:
            live = [h for h in self.pending if not h.cancelled and h.due <= target]
            if not live:
                break
            handle = min(live, key=lambda h: h.due)
            self.pending.remove(handle)
            self.now = handle.due
            handle.callback()
        self.now = target
        self.pending = [h for h in self.pending if not h.cancelled]

    def run_all(self) -> None:
        while any(not h.cancelled for h in self.pending):
            nxt = min(h.due for h in self.pending if not h.cancelled)
            self.advance(nxt - self.now)


class RecordingSurface:
    """Render surface that records the primitive calls it receives."""

    def __init__(self, width: float = 600.0, height: float = 400.0) -> None:
        self.width = width
        self.height = height
        self.calls: List[Tuple[Any, ...]] = []

    def clear(self) -> None:
        self.calls.append(("clear",))

    def draw_image(self, bitmap: Any, x: float, y: float, w: float, h: float) -> None:
        self.calls.append(("image", bitmap, x, y, w, h))

    def stroke_polyline(self, points, color: str, width: float) -> None:
        self.calls.append(("polyline", list(points), color, width))

    def draw_disc(self, center, radius: float, color: str) -> None:
        self.calls.append(("disc", tuple(center), radius, color))

    def kinds(self) -> List[str]:
        return [call[0] for call in self.calls]


class SyncExecutor:
    """Executor stand-in that runs submitted work inline."""

    def __init__(self) -> None:
        self.submitted = 0

    def submit(self, fn: Callable[[], Any]) -> Future:
        self.submitted += 1
        future: Future = Future()
        try:
            future.set_result(fn())
        except BaseException as exc:  # noqa: BLE001 - mirror executor semantics
            future.set_exception(exc)
        return future

    def shutdown(self, wait: bool = True) -> None:
        pass


class DeferredDeliver:
    """Holds completion callbacks until the test flushes them, like a GUI queue."""

    def __init__(self) -> None:
        self.queue: List[Callable[[], None]] = []

    def __call__(self, fn: Callable[[], None]) -> None:
        self.queue.append(fn)

    def flush(self) -> None:
        queued, self.queue = self.queue, []
        for fn in queued:
            fn()


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def surface() -> RecordingSurface:
    return RecordingSurface()


@pytest.fixture
def messages() -> List[StatusMessage]:
    return []


@pytest.fixture
def session(scheduler: ManualScheduler, messages: List[StatusMessage]) -> EditorSession:
    return EditorSession(scheduler, report=messages.append)


@pytest.fixture
def sync_executor() -> SyncExecutor:
    return SyncExecutor()


@pytest.fixture
def deliver() -> DeferredDeliver:
    return DeferredDeliver()
