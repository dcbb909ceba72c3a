# color.py
#
# Iteration count -> hue -> RGB. Saturation and lightness are fixed; the hue
# range stops short of a full turn so escaped points never wrap back to the
# colour of the slowest-escaping ones.

from __future__ import annotations

import math
from typing import Dict, Tuple

BACKGROUND_COLOR = "#000000"
DEFAULT_SATURATION = 1.0
DEFAULT_LIGHTNESS = 0.5
HUE_OFFSET = 0.0
HUE_RANGE = 300.0

RGB = Tuple[int, int, int]

def hsl_to_rgb(hue: float, saturation: float = DEFAULT_SATURATION, lightness: float = DEFAULT_LIGHTNESS) -> RGB:
    hue = hue % 360.0
    chroma = (1.0 - abs(2.0 * lightness - 1.0)) * saturation
    x = chroma * (1.0 - abs((hue / 60.0) % 2.0 - 1.0))
    m = lightness - chroma / 2.0

    if hue < 60.0:
        r, g, b = chroma, x, 0.0
    elif hue < 120.0:
        r, g, b = x, chroma, 0.0
    elif hue < 180.0:
        r, g, b = 0.0, chroma, x
    elif hue < 240.0:
        r, g, b = 0.0, x, chroma
    elif hue < 300.0:
        r, g, b = x, 0.0, chroma
    else:
        r, g, b = chroma, 0.0, x

    return (int(math.floor((r + m) * 255.0)) % 0x100,
            int(math.floor((g + m) * 255.0)) % 0x100,
            int(math.floor((b + m) * 255.0)) % 0x100)

def rgb_to_hex(rgb: RGB) -> str:
    return "#{:02X}{:02X}{:02X}".format(*rgb)

def hex_to_rgb(color: str) -> RGB:
    value = color.lstrip("#")
    if len(value) != 6:
        raise ValueError(f"expected #RRGGBB, got {color!r}")
    return int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16)

def hue_to_rgb(hue: float) -> str:
    return rgb_to_hex(hsl_to_rgb(hue))

def iterations_to_hue(count: int, max_iterations: int, *, hue_range: float = HUE_RANGE, hue_offset: float = HUE_OFFSET) -> float:
    return (count * hue_range / max_iterations + hue_offset) % 360.0

def is_background(count: int, max_iterations: int) -> bool:
    return count >= max_iterations - 1

def map_color(count: int, max_iterations: int, *, background: str = BACKGROUND_COLOR) -> str:
    if is_background(count, max_iterations):
        return background
    return hue_to_rgb(iterations_to_hue(count, max_iterations))

class ColorMapper:
    """Memoising colour lookup for one render pass."""

    def __init__(
        self,
        max_iterations: int,
        *,
        hue_range: float = HUE_RANGE,
        hue_offset: float = HUE_OFFSET,
        background: str = BACKGROUND_COLOR,
    ):
        if max_iterations < 1:
            raise ValueError("max_iterations must be at least 1.")
        self.max_iterations = int(max_iterations)
        self.hue_range = float(hue_range)
        self.hue_offset = float(hue_offset)
        self.background = background
        self._background_rgb = hex_to_rgb(background)
        self._cache: Dict[int, RGB] = {}

    def rgb(self, count: int) -> RGB:
        cached = self._cache.get(count)
        if cached is not None:
            return cached
        if is_background(count, self.max_iterations):
            rgb = self._background_rgb
        else:
            rgb = hsl_to_rgb(iterations_to_hue(count, self.max_iterations,
                                               hue_range=self.hue_range, hue_offset=self.hue_offset))
        self._cache[count] = rgb
        return rgb

    def map(self, count: int) -> str:
        if is_background(count, self.max_iterations):
            return self.background
        return rgb_to_hex(self.rgb(count))

    def clear_cache(self) -> None:
        self._cache.clear()

    def __len__(self) -> int:
        return len(self._cache)
