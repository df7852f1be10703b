"""Runtime configuration and logging setup for the PolyPin Playground."""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

log = logging.getLogger("polypin.config")

CONFIG_ENV_VAR = "POLYPIN_CONFIG"
DEFAULT_CONFIG_NAME = "polypin_config.json"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class EditorConfig:
    """Tunable constants shared by the session, renderer and Qt host."""

    canvas_width: int = 600
    canvas_height: int = 400
    pin_radius: float = 10.0
    pulse_min: float = 10.0
    pulse_max: float = 15.0
    pulse_step: float = 0.5
    frame_interval_ms: int = 16
    redraw_interval_ms: int = 200
    drag_threshold: float = 3.0
    undo_key: str = "Backspace"
    line_color: str = "blue"
    line_width: float = 2.0
    anchor_color: str = "green"
    active_color: str = "red"

    def merged(self, overrides: Dict[str, Any]) -> "EditorConfig":
        """Return a copy with ``overrides`` applied; bad entries are skipped."""
        known = {f.name: f for f in fields(self)}
        accepted: Dict[str, Any] = {}
        for key, value in overrides.items():
            spec = known.get(key)
            if spec is None:
                log.debug("Ignoring unknown config key %r", key)
                continue
            current = getattr(self, key)
            try:
                if isinstance(current, str):
                    if not isinstance(value, str) or not value.strip():
                        raise ValueError("expected a non-empty string")
                    accepted[key] = value.strip()
                elif isinstance(current, int):
                    accepted[key] = int(value)
                else:
                    accepted[key] = float(value)
            except (TypeError, ValueError) as exc:
                log.warning("Skipping config value %s=%r: %s", key, value, exc)
        candidate = replace(self, **accepted)
        if candidate.pulse_min > candidate.pulse_max or candidate.pulse_step <= 0:
            log.warning("Pulse settings out of range; keeping %s..%s", self.pulse_min, self.pulse_max)
            candidate = replace(
                candidate,
                pulse_min=self.pulse_min,
                pulse_max=self.pulse_max,
                pulse_step=self.pulse_step,
            )
        return candidate


def _default_config_path() -> Path:
    return Path(__file__).with_name(DEFAULT_CONFIG_NAME)


def load_config(path: Optional[str | Path] = None) -> EditorConfig:
    """Load an :class:`EditorConfig`.

    Lookup order is the explicit ``path``, then ``$POLYPIN_CONFIG``, then
    ``polypin_config.json`` beside this module. A missing or unreadable file
    yields the defaults.
    """
    config = EditorConfig()
    if path is None:
        env_path = os.getenv(CONFIG_ENV_VAR)
        path = Path(env_path) if env_path else _default_config_path()
    config_path = Path(path)
    if not config_path.exists():
        return config
    try:
        with config_path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except (OSError, json.JSONDecodeError) as exc:
        log.warning("Could not read config %s: %s", config_path, exc)
        return config
    if not isinstance(data, dict):
        log.warning("Config %s must hold a JSON object", config_path)
        return config
    log.info("Loaded config from %s", config_path)
    return config.merged(data)


def configure_logging(level: str | int = "INFO") -> None:
    """Install a stream handler on the root logger for the app entry point."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("polypin").setLevel(level)


__all__ = ["EditorConfig", "load_config", "configure_logging", "CONFIG_ENV_VAR"]
