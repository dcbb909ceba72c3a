from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Tuple

from fractalzoom.complex import Complex
from fractalzoom.engine import FractalConfig

def plane_scale(config: FractalConfig, width: int, height: int) -> Tuple[float, float]:
    return ((config.plane_max.real - config.plane_min.real) / width,
            (config.plane_max.imag - config.plane_min.imag) / height)

def pixel_to_plane(x: float, y: float, config: FractalConfig, width: int, height: int) -> Complex:
    scale_x, scale_y = plane_scale(config, width, height)
    return Complex(x * scale_x + config.plane_min.real, y * scale_y + config.plane_min.imag)

def plane_to_pixel(point: Complex, config: FractalConfig, width: int, height: int) -> Tuple[float, float]:
    scale_x, scale_y = plane_scale(config, width, height)
    return ((point.real - config.plane_min.real) / scale_x,
            (point.imag - config.plane_min.imag) / scale_y)

@dataclass(frozen=True)
class RenderedRect:
    """On-screen rectangle the raster is displayed in, in client coordinates."""

    left: float
    top: float
    width: float
    height: float

    def contains(self, client_x: float, client_y: float) -> bool:
        return (self.left <= client_x < self.left + self.width
                and self.top <= client_y < self.top + self.height)

def client_to_canvas(
    client_x: float,
    client_y: float,
    raster_width: int,
    raster_height: int,
    rect: RenderedRect,
) -> Optional[Tuple[int, int]]:
    if rect.width <= 0 or rect.height <= 0 or not rect.contains(client_x, client_y):
        return None
    scale_x = raster_width / rect.width
    scale_y = raster_height / rect.height
    canvas_x = min(int(math.floor((client_x - rect.left) * scale_x)), raster_width - 1)
    canvas_y = min(int(math.floor((client_y - rect.top) * scale_y)), raster_height - 1)
    return canvas_x, canvas_y
