from __future__ import annotations

from typing import List, Optional, Tuple

import numpy as np
from PIL import Image

from fractalzoom.color import BACKGROUND_COLOR, ColorMapper, hex_to_rgb
from fractalzoom.engine import PointBatch
from fractalzoom.util.logging_setup import get_logger

FRAME_COLOR = (255, 255, 255)

Box = Tuple[int, int, int, int]

class Canvas:
    """RGB raster that batches are painted into.

    At most one selection frame sits on top of the raster. Only the four lines
    under it are saved, and batches painted while it is up land underneath it.
    """

    def __init__(self, width: int, height: int, *, background: str = BACKGROUND_COLOR):
        self.background = background
        self._background_rgb = np.array(hex_to_rgb(background), dtype=np.uint8)
        self.buf = np.zeros((0, 0, 3), dtype=np.uint8)
        self._frame: Optional[Box] = None
        self._underlay: List[Tuple[tuple, np.ndarray]] = []
        self.resize(width, height)

    @property
    def width(self) -> int:
        return int(self.buf.shape[1])

    @property
    def height(self) -> int:
        return int(self.buf.shape[0])

    @property
    def frame(self) -> Optional[Box]:
        return self._frame

    def resize(self, width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            raise ValueError("canvas size must be positive.")
        if (height, width) != self.buf.shape[:2]:
            self.buf = np.zeros((height, width, 3), dtype=np.uint8)
        self.clear()

    def clear(self) -> None:
        get_logger("canvas").debug("clear canvas %sx%s", self.width, self.height)
        self._frame = None
        self._underlay = []
        self.buf[:, :] = self._background_rgb

    def draw_results(self, batch: PointBatch, colors: ColorMapper) -> int:
        values = batch.valid()
        n = int(values.shape[0])
        if n == 0:
            return 0
        start = batch.y_start * self.width + batch.x_start
        if start + n > self.width * self.height:
            raise ValueError(f"batch at ({batch.x_start},{batch.y_start}) with {n} points overruns the canvas.")

        frame = self._frame
        if frame is not None:
            self.undraw()

        # adjacent pixels mostly share counts, so colour each distinct count once
        counts, inverse = np.unique(values, return_inverse=True)
        palette = np.array([colors.rgb(int(c)) for c in counts], dtype=np.uint8)
        flat = self.buf.reshape(-1, 3)
        flat[start:start + n] = palette[inverse.reshape(-1)]

        if frame is not None:
            self.draw_frame(*frame)
        return n

    def _clip(self, x_start: int, y_start: int, x_end: int, y_end: int) -> Optional[Box]:
        x0, x1 = sorted((x_start, x_end))
        y0, y1 = sorted((y_start, y_end))
        x0, y0 = max(x0, 0), max(y0, 0)
        x1, y1 = min(x1, self.width - 1), min(y1, self.height - 1)
        if x0 > x1 or y0 > y1:
            return None
        return x0, y0, x1, y1

    def draw_frame(self, x_start: int, y_start: int, x_end: int, y_end: int) -> bool:
        """Outline a rectangle, replacing any frame already drawn."""
        self.undraw()
        box = self._clip(x_start, y_start, x_end, y_end)
        if box is None:
            return False
        x0, y0, x1, y1 = box
        lines = [
            (y0, slice(x0, x1 + 1)),
            (y1, slice(x0, x1 + 1)),
            (slice(y0, y1 + 1), x0),
            (slice(y0, y1 + 1), x1),
        ]
        self._underlay = [(index, self.buf[index].copy()) for index in lines]
        for index in lines:
            self.buf[index] = FRAME_COLOR
        self._frame = box
        return True

    def undraw(self) -> None:
        for index, saved in reversed(self._underlay):
            self.buf[index] = saved
        self._underlay = []
        self._frame = None

    def to_image(self) -> Image.Image:
        return Image.fromarray(self.buf)
