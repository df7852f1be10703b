"""Qt widgets for the PolyPin Playground UI."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Dict, Optional

from PySide6.QtCore import QEvent, QObject, QSize, Qt, QTimer, Signal
from PySide6.QtGui import QPainter
from PySide6.QtWidgets import (
    QApplication,
    QDockWidget,
    QFileDialog,
    QGroupBox,
    QLabel,
    QLineEdit,
    QPlainTextEdit,
    QPushButton,
    QTextEdit,
    QVBoxLayout,
    QWidget,
)

from polypin_playground.background import BackgroundLoader
from polypin_playground.config import EditorConfig
from polypin_playground.qt_support import GuiInvoker, QtPainterSurface, QtScheduler, decode_qimage
from polypin_playground.session import EditorSession, InputEvent, Severity, StatusMessage

log = logging.getLogger("polypin.gui")

_KEY_NAMES = {
    Qt.Key_Backspace: "Backspace",
    Qt.Key_Delete: "Delete",
    Qt.Key_Escape: "Escape",
    Qt.Key_Return: "Enter",
    Qt.Key_Enter: "Enter",
}

_SEVERITY_COLORS = {
    Severity.SUCCESS.value: "green",
    Severity.ERROR.value: "red",
    Severity.INFO.value: "#555555",
}

IMAGE_FILTER = "Images (*.png *.jpg *.jpeg *.bmp *.gif *.webp)"


class Canvas(QWidget):
    """Drawing surface: forwards input to the session and repaints every frame."""

    status_changed = Signal(dict)
    message_posted = Signal(str, str)

    def __init__(self, config: Optional[EditorConfig] = None):
        super().__init__()
        self.config = config or EditorConfig()
        self.setObjectName("PolyPinCanvas")
        self.setFixedSize(QSize(self.config.canvas_width, self.config.canvas_height))
        self.setFocusPolicy(Qt.StrongFocus)
        self.setMouseTracking(True)
        self.setToolTip(
            "Click to add polygon points.\n"
            "Drag the pulsing last pin to move it.\n"
            f"{self.config.undo_key} removes the last pin."
        )

        self._invoker = GuiInvoker(self)
        loader = BackgroundLoader(decode_qimage, deliver=self._invoker)
        self.session = EditorSession(
            QtScheduler(self),
            self.config,
            report=self._on_status,
            loader=loader,
            on_change=self._emit_metrics,
        )

        self._key_filter_app: Optional[QApplication] = None
        self._install_key_filter()

        self._anim_timer = QTimer(self)
        self._anim_timer.setInterval(self.config.frame_interval_ms)
        self._anim_timer.timeout.connect(self._on_frame)
        self._anim_timer.start()
        self._emit_metrics()

    # ------------------------------------------------------------------
    # Window-wide key subscription
    def _install_key_filter(self) -> None:
        app = QApplication.instance()
        if app is None:
            return
        app.installEventFilter(self)
        self._key_filter_app = app

    def _release_key_filter(self) -> None:
        if self._key_filter_app is not None:
            self._key_filter_app.removeEventFilter(self)
            self._key_filter_app = None

    def eventFilter(self, watched: QObject, event: QEvent) -> bool:  # pragma: no cover - GUI entry point
        if event.type() == QEvent.KeyPress and not self._text_input_focused():
            name = _KEY_NAMES.get(event.key()) or event.text()
            if name and self.session.handle_event(InputEvent.keydown(name)):
                event.accept()
                self.update()
                return True
        return super().eventFilter(watched, event)

    @staticmethod
    def _text_input_focused() -> bool:  # pragma: no cover - GUI entry point
        focus = QApplication.focusWidget()
        return isinstance(focus, (QLineEdit, QPlainTextEdit, QTextEdit))

    # ------------------------------------------------------------------
    # Animation
    def _on_frame(self) -> None:  # pragma: no cover - GUI entry point
        self.session.tick()
        self.update()

    def paintEvent(self, event):  # pragma: no cover - GUI entry point
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing, True)
        try:
            self.session.render(QtPainterSurface(painter, self.width(), self.height()))
        finally:
            painter.end()

    # ------------------------------------------------------------------
    # Status helpers
    def _on_status(self, message: StatusMessage) -> None:
        self.message_posted.emit(message.text, message.severity.value)

    def _emit_metrics(self) -> None:
        self.status_changed.emit(self.session.metrics())

    # ------------------------------------------------------------------
    # Commands used by the controls and menus
    def export_text(self) -> str:
        return self.session.export_text()

    def import_text(self, text: str) -> bool:
        ok = self.session.import_text(text)
        self.update()
        return ok

    def load_background(self, path: str | Path) -> bool:
        return self.session.load_background(path)

    def choose_background(self, parent=None) -> None:  # pragma: no cover - GUI entry point
        path, _ = QFileDialog.getOpenFileName(parent or self, "Upload Background Image", "", IMAGE_FILTER)
        if not path:
            return
        log.info("Loading background %s", path)
        self.load_background(path)

    def clear_background(self) -> None:
        if self.session.clear_background():
            self.update()

    def undo(self) -> None:
        if self.session.undo():
            self.update()

    def shutdown(self) -> None:
        self._anim_timer.stop()
        self._release_key_filter()
        self.session.close()

    # ------------------------------------------------------------------
    # Pointer forwarding
    def mousePressEvent(self, event):  # pragma: no cover - GUI entry point
        if event.button() != Qt.LeftButton:
            return super().mousePressEvent(event)
        pos = event.position()
        self.session.handle_event(InputEvent.press(pos.x(), pos.y()))

    def mouseMoveEvent(self, event):  # pragma: no cover - GUI entry point
        pos = event.position()
        if self.session.handle_event(InputEvent.move(pos.x(), pos.y())):
            self.update()

    def mouseReleaseEvent(self, event):  # pragma: no cover - GUI entry point
        if event.button() != Qt.LeftButton:
            return super().mouseReleaseEvent(event)
        pos = event.position()
        if self.session.handle_event(InputEvent.release(pos.x(), pos.y())):
            self.update()

    def closeEvent(self, event):  # pragma: no cover - GUI entry point
        self.shutdown()
        super().closeEvent(event)


class Controls:
    """Docked JSON export/import, background upload and message panel."""

    def __init__(
        self,
        export_cb: Callable[[], str],
        import_cb: Callable[[str], bool],
        upload_cb: Callable[[], None],
    ):
        self._export_cb = export_cb
        self._import_cb = import_cb
        self._upload_cb = upload_cb
        self.dock = QDockWidget("Points")
        self.dock.setObjectName("PolyPinPointsDock")
        self.dock.setFeatures(QDockWidget.DockWidgetMovable | QDockWidget.DockWidgetFloatable)
        host = QWidget()
        layout = QVBoxLayout(host)
        layout.setContentsMargins(12, 12, 12, 12)
        layout.setSpacing(10)

        export_box = QGroupBox("Points as JSON")
        export_layout = QVBoxLayout()
        export_box.setLayout(export_layout)
        self.output = QPlainTextEdit()
        self.output.setReadOnly(True)
        self.output.setPlaceholderText("Press Generate to serialize the current pins.")
        generate = QPushButton("Generate Points JSON")
        generate.setToolTip("Write the current pins as a JSON list of {x, y} objects.")
        generate.clicked.connect(self._generate)
        export_layout.addWidget(self.output)
        export_layout.addWidget(generate)
        layout.addWidget(export_box)

        import_box = QGroupBox("Paste Points JSON to Redraw")
        import_layout = QVBoxLayout()
        import_box.setLayout(import_layout)
        self.input = QPlainTextEdit()
        self.input.setPlaceholderText('[{"x": 100, "y": 100}, {"x": 200, "y": 100}]')
        redraw = QPushButton("Redraw from JSON (Animated)")
        redraw.setToolTip("Replace the pins with the pasted list, one point at a time.")
        redraw.clicked.connect(self._redraw)
        import_layout.addWidget(self.input)
        import_layout.addWidget(redraw)
        layout.addWidget(import_box)

        upload = QPushButton("Upload Background Image")
        upload.setToolTip("Stretch an image file behind the pins.")
        upload.clicked.connect(lambda: self._upload_cb())
        layout.addWidget(upload)

        self.message = QLabel("")
        self.message.setWordWrap(True)
        layout.addWidget(self.message)

        layout.addStretch(1)
        self.dock.setWidget(host)

    def _generate(self) -> None:
        self.output.setPlainText(self._export_cb())

    def _redraw(self) -> None:
        self._import_cb(self.input.toPlainText())

    def show_message(self, text: str, severity: str) -> None:
        color = _SEVERITY_COLORS.get(severity, _SEVERITY_COLORS[Severity.INFO.value])
        self.message.setStyleSheet(f"color: {color};")
        self.message.setText(text)


def format_metrics(metrics: Dict[str, float]) -> Dict[str, str]:
    count = int(metrics.get("count", 0.0))
    length = float(metrics.get("length", 0.0))
    return {"count": f"pins: {count}", "length": f"length: {length:.1f}px"}


__all__ = ["Canvas", "Controls", "format_metrics"]
