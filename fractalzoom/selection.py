"""Turn a drag rectangle on the canvas into new plane bounds."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional, Tuple

from fractalzoom.complex import Complex
from fractalzoom.coords import pixel_to_plane
from fractalzoom.engine import FractalConfig

Point = Tuple[int, int]

@dataclass
class DragSelection:
    start: Point
    current: Point

    @classmethod
    def begin(cls, point: Point) -> "DragSelection":
        return cls(start=point, current=point)

    def update(self, point: Point) -> None:
        self.current = point

def _ordered(a: int, b: int) -> Optional[Tuple[int, int]]:
    if a == b:
        return None
    return (a, b) if a < b else (b, a)

def normalise_selection(selection: DragSelection) -> Optional[Tuple[int, int, int, int]]:
    """Return ``(x_min, y_min, x_max, y_max)`` or None for a zero-area drag."""
    xs = _ordered(selection.start[0], selection.current[0])
    ys = _ordered(selection.start[1], selection.current[1])
    if xs is None or ys is None:
        return None
    return xs[0], ys[0], xs[1], ys[1]

def selection_bounds(
    selection: DragSelection,
    config: FractalConfig,
    width: int,
    height: int,
) -> Optional[Tuple[Complex, Complex]]:
    box = normalise_selection(selection)
    if box is None:
        return None
    x_min, y_min, x_max, y_max = box
    return (pixel_to_plane(x_min, y_min, config, width, height),
            pixel_to_plane(x_max, y_max, config, width, height))

def aspect_height(width: int, plane_min: Complex, plane_max: Complex) -> int:
    span_x = plane_max.real - plane_min.real
    span_y = plane_max.imag - plane_min.imag
    return max(1, int(round(width * span_y / span_x)))

def zoom_to_selection(
    selection: DragSelection,
    config: FractalConfig,
    width: int,
    height: int,
) -> Optional[FractalConfig]:
    bounds = selection_bounds(selection, config, width, height)
    if bounds is None:
        return None
    plane_min, plane_max = bounds
    return replace(config, plane_min=plane_min, plane_max=plane_max)
