"""
Qt-agnostic frame drawing for the pin editor.
You provide a surface shim with:
- width / height
- clear()
- draw_image(bitmap, x, y, w, h)
- stroke_polyline([(x, y), ...], color, width)
- draw_disc((x, y), radius, color)
The Qt implementation lives in qt_support.py and wraps a QPainter.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional, Protocol, Sequence, Tuple

from polypin_playground.config import EditorConfig
from polypin_playground.geometry import is_finite_point

Point = Tuple[float, float]


class RenderSurface(Protocol):
    width: float
    height: float

    def clear(self) -> None:
        ...

    def draw_image(self, bitmap: Any, x: float, y: float, w: float, h: float) -> None:
        ...

    def stroke_polyline(self, points: Sequence[Point], color: str, width: float) -> None:
        ...

    def draw_disc(self, center: Point, radius: float, color: str) -> None:
        ...


@dataclass(frozen=True)
class RenderStyle:
    line_color: str = "blue"
    line_width: float = 2.0
    anchor_color: str = "green"
    active_color: str = "red"
    pin_radius: float = 10.0

    @classmethod
    def from_config(cls, config: EditorConfig) -> "RenderStyle":
        return cls(
            line_color=config.line_color,
            line_width=config.line_width,
            anchor_color=config.anchor_color,
            active_color=config.active_color,
            pin_radius=config.pin_radius,
        )


def render_frame(
    surface: RenderSurface,
    points: Sequence[Point],
    pulse_radius: float,
    background: Optional[Any] = None,
    style: Optional[RenderStyle] = None,
) -> None:
    """Draw one frame: background, polyline, anchor pin, pulsing active pin."""
    style = style or RenderStyle()
    surface.clear()

    if background is not None:
        surface.draw_image(background, 0.0, 0.0, surface.width, surface.height)

    if len(points) >= 2:
        path: List[Point] = [(float(p[0]), float(p[1])) for p in points if is_finite_point(p)]
        if len(path) >= 2:
            surface.stroke_polyline(path, style.line_color, style.line_width)

    if len(points) >= 1 and is_finite_point(points[0]):
        anchor = points[0]
        surface.draw_disc((float(anchor[0]), float(anchor[1])), style.pin_radius, style.anchor_color)

    if len(points) >= 2 and is_finite_point(points[-1]):
        active = points[-1]
        surface.draw_disc((float(active[0]), float(active[1])), float(pulse_radius), style.active_color)


__all__ = ["RenderSurface", "RenderStyle", "render_frame"]
