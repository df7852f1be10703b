"""Exchange format for pin geometry: a JSON list of ``{"x": .., "y": ..}`` objects."""
from __future__ import annotations

import json
import math
from typing import Any, List, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from polypin_playground.errors import FormatError
from polypin_playground.geometry import is_finite_point

Point = Tuple[float, float]

MIN_IMPORT_POINTS = 2


class ExchangePoint(BaseModel):
    model_config = ConfigDict(extra="ignore")

    x: float = Field(..., description="Horizontal canvas coordinate in pixels.")
    y: float = Field(..., description="Vertical canvas coordinate in pixels.")

    @field_validator("x", "y", mode="before")
    @classmethod
    def _require_number(cls, value: Any) -> float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError("coordinates must be numbers")
        try:
            number = float(value)
        except OverflowError as exc:
            raise ValueError("coordinate is out of range") from exc
        if not math.isfinite(number):
            raise ValueError("coordinates must be finite")
        return number


def _reject_constant(name: str) -> float:
    raise FormatError(f"Not valid JSON: {name} is not a number")


def export_points(points: Sequence[Sequence[float]]) -> str:
    """Serialize ``points`` to compact exchange JSON; non-finite points are left out."""
    payload = [
        ExchangePoint(x=float(p[0]), y=float(p[1])).model_dump() for p in points if is_finite_point(p)
    ]
    return json.dumps(payload, separators=(",", ":"))


def parse_points(text: str) -> List[Point]:
    """Parse exchange JSON into points.

    Raises :class:`FormatError` when the text is not JSON, is not a list, holds
    fewer than two entries, or any entry lacks finite numeric ``x`` / ``y``.
    ``NaN`` and ``Infinity`` literals are rejected, as are payloads too deep or
    too large for the decoder.
    """
    try:
        data = json.loads(text.strip(), parse_constant=_reject_constant)
    except (ValueError, RecursionError, AttributeError) as exc:
        raise FormatError(f"Not valid JSON: {exc}") from exc
    if not isinstance(data, list):
        raise FormatError("Expected a JSON list of points")
    if len(data) < MIN_IMPORT_POINTS:
        raise FormatError(f"Need at least {MIN_IMPORT_POINTS} points, got {len(data)}")
    points: List[Point] = []
    for idx, item in enumerate(data):
        try:
            parsed = ExchangePoint.model_validate(item)
        except ValidationError as exc:
            raise FormatError(f"Point {idx} is malformed: {exc.errors()[0]['msg']}") from exc
        points.append((parsed.x, parsed.y))
    return points


__all__ = ["ExchangePoint", "export_points", "parse_points", "MIN_IMPORT_POINTS"]
