"""Editor session: owns pin state and routes input, animation and import."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from polypin_playground.background import BackgroundLoader
from polypin_playground.config import EditorConfig
from polypin_playground.drag import DragController, DragState
from polypin_playground.errors import DecodeError, EditorError, FormatError
from polypin_playground.exchange import export_points, parse_points
from polypin_playground.geometry import Geometry, Point, as_point
from polypin_playground.pulse import PulseAnimator
from polypin_playground.redraw import RedrawSequencer, Scheduler
from polypin_playground.render import RenderStyle, RenderSurface, render_frame
from polypin_playground.undo import UndoController

log = logging.getLogger("polypin.session")


class Severity(Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


@dataclass(frozen=True)
class StatusMessage:
    text: str
    severity: Severity = Severity.INFO


class EventKind(Enum):
    PRESS = "press"
    MOVE = "move"
    RELEASE = "release"
    KEYDOWN = "keydown"


@dataclass(frozen=True)
class InputEvent:
    """Pointer or key event with coordinates already in canvas space."""

    kind: EventKind
    point: Optional[Point] = None
    key: Optional[str] = None

    @classmethod
    def press(cls, x: float, y: float) -> "InputEvent":
        return cls(EventKind.PRESS, (float(x), float(y)))

    @classmethod
    def move(cls, x: float, y: float) -> "InputEvent":
        return cls(EventKind.MOVE, (float(x), float(y)))

    @classmethod
    def release(cls, x: float, y: float) -> "InputEvent":
        return cls(EventKind.RELEASE, (float(x), float(y)))

    @classmethod
    def keydown(cls, key: str) -> "InputEvent":
        return cls(EventKind.KEYDOWN, key=key)


REDRAW_STARTED = "Redrawing from JSON..."
REDRAW_FINISHED = "Redraw complete."
IMPORT_INVALID = "Invalid JSON format."
BACKGROUND_LOADED = "Background image loaded."
BACKGROUND_FAILED = "Could not load background image."


class EditorSession:
    """Single-threaded core of the pin editor.

    Event handlers only write state; :meth:`tick` advances the pulse and
    :meth:`render` draws whatever the state is at that moment. While a scripted
    redraw runs, manual placement, drag start and undo are ignored.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        config: Optional[EditorConfig] = None,
        report: Optional[Callable[[StatusMessage], None]] = None,
        loader: Optional[BackgroundLoader] = None,
        on_change: Optional[Callable[[], None]] = None,
    ) -> None:
        self.config = config or EditorConfig()
        self.geometry = Geometry()
        self.pulse = PulseAnimator(self.config.pulse_step, self.config.pulse_min, self.config.pulse_max)
        self.drag = DragController(self.config.drag_threshold)
        self.undo_controller = UndoController(self.config.undo_key)
        self.style = RenderStyle.from_config(self.config)
        self._report = report
        self._on_change = on_change
        self._loader = loader
        self._background: Any = None
        self._closed = False
        self.sequencer = RedrawSequencer(
            self.geometry,
            scheduler,
            interval_ms=self.config.redraw_interval_ms,
            on_step=lambda _cursor, _total: self._changed(),
            on_finished=self._on_redraw_finished,
        )

    # ------------------------------------------------------------------
    # State access
    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def background(self) -> Any:
        return self._background

    @property
    def redraw_running(self) -> bool:
        return self.sequencer.running

    @property
    def drag_state(self) -> DragState:
        return self.drag.state

    def points(self) -> List[Point]:
        return self.geometry.points()

    def metrics(self) -> Dict[str, float]:
        return {
            "count": float(len(self.geometry)),
            "length": self.geometry.polyline_length(),
        }

    # ------------------------------------------------------------------
    # Status helpers
    def _post(self, text: str, severity: Severity) -> None:
        if self._report is not None:
            self._report(StatusMessage(text, severity))

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change()

    def _on_redraw_finished(self) -> None:
        self._post(REDRAW_FINISHED, Severity.INFO)
        self._changed()

    # ------------------------------------------------------------------
    # Input routing
    def handle_event(self, event: InputEvent) -> bool:
        """Route one input event; returns True when the event was consumed."""
        if self._closed:
            return False
        try:
            if event.kind is EventKind.PRESS:
                return self._on_press(event.point)
            if event.kind is EventKind.MOVE:
                return self._on_move(event.point)
            if event.kind is EventKind.RELEASE:
                return self._on_release()
            if event.kind is EventKind.KEYDOWN:
                return self._on_key(event.key)
        except EditorError as exc:
            log.warning("Event %s failed: %s", event.kind.value, exc)
            self._post(str(exc), Severity.ERROR)
            return True
        except Exception as exc:  # noqa: BLE001 - handlers never propagate
            log.exception("Unexpected failure while handling %s", event.kind.value)
            self._post(f"Unexpected error: {exc}", Severity.ERROR)
            return True
        return False

    def _on_press(self, point: Optional[Point]) -> bool:
        if point is None:
            return False
        if self.redraw_running:
            self.drag.cancel()
            return True
        state = self.drag.press(point, self.geometry, self.pulse.radius)
        log.debug("Press at %s -> %s", point, state.name)
        return True

    def _on_move(self, point: Optional[Point]) -> bool:
        if point is None:
            return False
        if self.drag.move(point, self.geometry):
            self._changed()
            return True
        return False

    def _on_release(self) -> bool:
        gesture = self.drag.release()
        if gesture.dragged:
            log.debug("Drag finished at %s", self.geometry.last())
            return True
        if gesture.click is not None and not self.redraw_running:
            self.place(gesture.click)
            return True
        return gesture.click is not None

    def _on_key(self, key: Optional[str]) -> bool:
        result = self.undo_controller.handle_key(key, self.geometry, enabled=not self.redraw_running)
        if result.removed is not None:
            self._after_undo(result.removed)
        return result.consumed

    def _after_undo(self, removed: Point) -> None:
        if self.drag.ref is not None and not self.geometry.contains_ref(self.drag.ref):
            self.drag.cancel()
        log.debug("Undo removed %s", removed)
        self._changed()

    # ------------------------------------------------------------------
    # Editing operations
    def place(self, point: Tuple[float, float]) -> None:
        """Placement click: anchor first, then append."""
        if self.redraw_running:
            return
        if not self.geometry.first_pin_fixed:
            self.geometry.place_first(as_point(point))
        else:
            self.geometry.append_point(as_point(point))
        self._changed()

    def undo(self) -> bool:
        """Remove the last pin; returns True when one was removed."""
        if self._closed or self.redraw_running:
            return False
        removed = self.undo_controller.undo(self.geometry)
        if removed is None:
            return False
        self._after_undo(removed)
        return True

    # ------------------------------------------------------------------
    # Animation
    def tick(self) -> float:
        """Advance the pulse one step; called once per frame before painting."""
        return self.pulse.tick()

    def render(self, surface: RenderSurface) -> None:
        render_frame(surface, self.geometry.points(), self.pulse.radius, self._background, self.style)

    def frame(self, surface: RenderSurface) -> None:
        self.tick()
        self.render(surface)

    # ------------------------------------------------------------------
    # Serialization
    def export_text(self) -> str:
        return export_points(self.geometry.points())

    def import_text(self, text: str) -> bool:
        """Validate ``text`` and start a scripted redraw of its points."""
        if self._closed:
            return False
        try:
            points = parse_points(text)
        except FormatError as exc:
            log.warning("Rejected import: %s", exc)
            self._post(IMPORT_INVALID, Severity.ERROR)
            return False
        self.drag.cancel()
        self.sequencer.start(points)
        self._post(REDRAW_STARTED, Severity.SUCCESS)
        self._changed()
        return True

    # ------------------------------------------------------------------
    # Background
    def set_background(self, bitmap: Any) -> None:
        self._background = bitmap
        log.info("Background image swapped")

    def clear_background(self) -> bool:
        """Drop the current bitmap; returns False when there was none."""
        if self._closed or self._background is None:
            return False
        self._background = None
        log.info("Background image cleared")
        return True

    def load_background(self, path: str | Path) -> bool:
        if self._closed or self._loader is None:
            return False

        def loaded(bitmap: Any) -> None:
            if self._closed:
                return
            self.set_background(bitmap)
            self._post(BACKGROUND_LOADED, Severity.SUCCESS)

        def failed(error: DecodeError) -> None:
            if self._closed:
                return
            self._post(BACKGROUND_FAILED, Severity.ERROR)

        self._loader.load_file(path, loaded, failed)
        return True

    # ------------------------------------------------------------------
    # Teardown
    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.sequencer.cancel()
        if self._loader is not None:
            self._loader.shutdown()
        self.drag.cancel()
        log.info("Editor session closed")


__all__ = [
    "EditorSession",
    "EventKind",
    "InputEvent",
    "Severity",
    "StatusMessage",
    "REDRAW_STARTED",
    "REDRAW_FINISHED",
    "IMPORT_INVALID",
    "BACKGROUND_LOADED",
    "BACKGROUND_FAILED",
]
