"""Application bootstrap for the PolyPin Playground."""
from __future__ import annotations

import argparse
import logging
import sys
from typing import Dict, List, Optional

from PySide6.QtCore import Qt
from PySide6.QtWidgets import QApplication, QLabel, QMainWindow, QStatusBar

from polypin_playground.config import EditorConfig, configure_logging, load_config
from polypin_playground.widgets import Canvas, Controls, format_metrics

log = logging.getLogger("polypin.app")


class Main(QMainWindow):
    """Top-level window wiring together the canvas, controls, and chrome."""

    def __init__(self, config: Optional[EditorConfig] = None):
        super().__init__()
        self.setWindowTitle("PolyPin Playground")

        self.canvas = Canvas(config)
        self.controls = Controls(
            self.canvas.export_text,
            self.canvas.import_text,
            lambda: self.canvas.choose_background(self),
        )

        self.setCentralWidget(self.canvas)
        self.addDockWidget(Qt.RightDockWidgetArea, self.controls.dock)

        self._status_labels: Dict[str, QLabel] = {}
        self._setup_status_bar()
        self._make_menu()

        self.canvas.status_changed.connect(self._on_status_changed)
        self.canvas.message_posted.connect(self.controls.show_message)
        self.canvas.setFocus()

    # ------------------------------------------------------------------
    # UI scaffolding
    def _setup_status_bar(self) -> None:
        bar = QStatusBar()
        bar.setSizeGripEnabled(False)
        self.setStatusBar(bar)

        self._status_labels = {
            "count": QLabel("pins: 0"),
            "length": QLabel("length: 0.0px"),
        }
        status_help = {
            "count": "Number of pins placed, anchor included.",
            "length": "Length of the open path through the pins.",
        }
        for key, label in self._status_labels.items():
            label.setToolTip(status_help.get(key, ""))
            bar.addPermanentWidget(label)
        bar.showMessage("Click to add polygon points, drag the last pin, Backspace to undo.")

    def _make_menu(self) -> None:
        menu_bar = self.menuBar()
        file_menu = menu_bar.addMenu("&File")

        upload_action = file_menu.addAction("Upload Background Image...")
        upload_action.triggered.connect(lambda: self.canvas.choose_background(self))
        upload_action.setStatusTip("Stretch an image file behind the pins.")

        clear_action = file_menu.addAction("Clear Background")
        clear_action.triggered.connect(self.canvas.clear_background)
        clear_action.setStatusTip("Remove the background image.")

        quit_action = file_menu.addAction("Quit")
        quit_action.setShortcut("Ctrl+Q")
        quit_action.triggered.connect(self.close)

        edit_menu = menu_bar.addMenu("&Edit")
        undo_action = edit_menu.addAction("Undo Last Pin")
        undo_action.triggered.connect(self.canvas.undo)
        undo_action.setStatusTip("Remove the most recent pin (the anchor stays).")

    # ------------------------------------------------------------------
    def _on_status_changed(self, metrics: dict) -> None:
        for key, text in format_metrics(metrics).items():
            label = self._status_labels.get(key)
            if label is not None:
                label.setText(text)

    def closeEvent(self, event):  # pragma: no cover - GUI entry point
        self.canvas.shutdown()
        super().closeEvent(event)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="polypin-playground", description="Interactive polygon pin editor.")
    parser.add_argument("--config", help="Path to a JSON config file (overrides $POLYPIN_CONFIG).")
    parser.add_argument("--log-level", default="INFO", help="Logging level (DEBUG, INFO, WARNING, ...).")
    parser.add_argument("--background", help="Image file to load as the initial background.")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    config = load_config(args.config)
    app = QApplication(sys.argv[:1])
    window = Main(config)
    if args.background:
        window.canvas.load_background(args.background)
    window.show()
    log.info("PolyPin Playground started")
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
