"""Qt implementations of the session's scheduler, decoder and render surface."""
from __future__ import annotations

from typing import Any, Callable, Sequence, Tuple

from PySide6.QtCore import QObject, QPointF, QRectF, Qt, QTimer, Signal, Slot
from PySide6.QtGui import QColor, QImage, QPainter, QPen, QPolygonF

from polypin_playground.errors import DecodeError

Point = Tuple[float, float]


class _TimerHandle:
    def __init__(self, timer: QTimer) -> None:
        self._timer = timer

    def cancel(self) -> None:
        if self._timer is None:
            return
        self._timer.stop()
        self._timer.deleteLater()
        self._timer = None


class QtScheduler:
    """Single-shot ``QTimer`` per request, parented to ``owner``."""

    def __init__(self, owner: QObject) -> None:
        self._owner = owner

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> _TimerHandle:  # pragma: no cover - needs event loop
        timer = QTimer(self._owner)
        timer.setSingleShot(True)
        handle = _TimerHandle(timer)

        def fire() -> None:
            handle.cancel()
            callback()

        timer.timeout.connect(fire)
        timer.start(max(0, int(delay_ms)))
        return handle


class GuiInvoker(QObject):
    """Queues callables from worker threads onto the thread that owns this object."""

    posted = Signal(object)

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self.posted.connect(self._run)

    @Slot(object)
    def _run(self, fn: Callable[[], None]) -> None:  # pragma: no cover - needs event loop
        fn()

    def __call__(self, fn: Callable[[], None]) -> None:  # pragma: no cover - needs event loop
        self.posted.emit(fn)


def decode_qimage(data: bytes) -> QImage:
    """Decode encoded image bytes; raises :class:`DecodeError` on failure."""
    if not data:
        raise DecodeError("Image file is empty")
    image = QImage.fromData(data)
    if image.isNull():
        raise DecodeError("Unsupported or corrupt image data")
    return image


class QtPainterSurface:
    """Adapter exposing the primitive drawing hooks expected by ``render_frame``."""

    def __init__(self, painter: QPainter, width: float, height: float, fill: str = "#ffffff") -> None:
        self._painter = painter
        self.width = float(width)
        self.height = float(height)
        self._fill = fill

    def _color(self, value: str) -> QColor:
        return QColor(value) if value else QColor(34, 34, 34)

    def clear(self) -> None:  # pragma: no cover - GUI painting
        self._painter.fillRect(QRectF(0.0, 0.0, self.width, self.height), self._color(self._fill))

    def draw_image(self, bitmap: Any, x: float, y: float, w: float, h: float) -> None:  # pragma: no cover - GUI painting
        self._painter.drawImage(QRectF(x, y, w, h), bitmap)

    def stroke_polyline(self, points: Sequence[Point], color: str, width: float) -> None:  # pragma: no cover - GUI painting
        pen = QPen(self._color(color), width)
        pen.setJoinStyle(Qt.RoundJoin)
        self._painter.setPen(pen)
        self._painter.setBrush(Qt.NoBrush)
        self._painter.drawPolyline(QPolygonF([QPointF(x, y) for x, y in points]))

    def draw_disc(self, center: Point, radius: float, color: str) -> None:  # pragma: no cover - GUI painting
        self._painter.setPen(Qt.NoPen)
        self._painter.setBrush(self._color(color))
        self._painter.drawEllipse(QPointF(center[0], center[1]), radius, radius)


__all__ = ["GuiInvoker", "QtPainterSurface", "QtScheduler", "decode_qimage"]
