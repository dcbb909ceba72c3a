"""Resumable escape-time computation for Mandelbrot and Julia sets.

An engine owns a row-major cursor and one reusable result buffer. Each call to
:meth:`FractalEngine.calculate` resumes at the cursor, fills the buffer until it
is full, the raster is finished, or the time budget runs out, and hands back a
:class:`PointBatch` describing the valid prefix. The host decides when to call
again; discarding the engine is the only way to cancel.
"""

from __future__ import annotations

import math
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterator, Optional, Tuple

import numpy as np

from fractalzoom.complex import Complex, ZERO
from fractalzoom.escape_radius import find_escape_radius
from fractalzoom.util.logging_setup import get_logger

BATCH_CAPACITY = 1000
DEADLINE_CHECK_INTERVAL = 10
DEFAULT_TIME_BUDGET = 0.1
MANDELBROT_THRESHOLD = 4.0

class InvalidConfig(ValueError):
    pass

class FractalKind(str, Enum):
    MANDELBROT = "mandelbrot"
    JULIA = "julia_set"

@dataclass(frozen=True)
class FractalConfig:
    plane_min: Complex
    plane_max: Complex
    max_iterations: int
    c: Complex = ZERO

def validate_config(config: FractalConfig, width: int, height: int) -> None:
    if width <= 0 or height <= 0:
        raise InvalidConfig(f"raster size must be positive, got {width}x{height}.")
    values = (config.plane_min.real, config.plane_min.imag,
              config.plane_max.real, config.plane_max.imag,
              config.c.real, config.c.imag)
    if not all(math.isfinite(v) for v in values):
        raise InvalidConfig("plane bounds and c must be finite.")
    if not config.plane_max.real > config.plane_min.real:
        raise InvalidConfig(f"plane_max.real ({config.plane_max.real}) must exceed plane_min.real ({config.plane_min.real}).")
    if not config.plane_max.imag > config.plane_min.imag:
        raise InvalidConfig(f"plane_max.imag ({config.plane_max.imag}) must exceed plane_min.imag ({config.plane_min.imag}).")
    if config.max_iterations < 1:
        raise InvalidConfig("max_iterations must be at least 1.")

@dataclass
class FractalCursor:
    x_curr: int = 0
    y_curr: int = 0
    done: bool = False

class PointBatch:
    """Fixed-capacity result buffer; ``values[:num_points]`` are valid."""

    def __init__(self, capacity: int = BATCH_CAPACITY):
        if capacity <= 0:
            raise InvalidConfig("batch capacity must be positive.")
        self.x_start = 0
        self.y_start = 0
        self.num_points = 0
        self.values = np.zeros(capacity, dtype=np.uint32)

    @property
    def capacity(self) -> int:
        return int(self.values.shape[0])

    def valid(self) -> np.ndarray:
        return self.values[:self.num_points]

    def points(self, width: int) -> Iterator[Tuple[int, int, int]]:
        x, y = self.x_start, self.y_start
        for value in self.values[:self.num_points]:
            yield x, y, int(value)
            x += 1
            if x >= width:
                x = 0
                y += 1

class FractalEngine:
    def __init__(
        self,
        kind: FractalKind,
        config: FractalConfig,
        width: int,
        height: int,
        *,
        time_budget: float = DEFAULT_TIME_BUDGET,
        capacity: int = BATCH_CAPACITY,
        check_interval: int = DEADLINE_CHECK_INTERVAL,
        clock: Callable[[], float] = time.perf_counter,
    ):
        validate_config(config, width, height)
        if check_interval <= 0:
            raise InvalidConfig("check_interval must be positive.")

        self.kind = FractalKind(kind)
        self.config = config
        self.width = int(width)
        self.height = int(height)
        self.time_budget = float(time_budget)
        self.check_interval = int(check_interval)
        self._clock = clock

        self.scale_x = (config.plane_max.real - config.plane_min.real) / self.width
        self.scale_y = (config.plane_max.imag - config.plane_min.imag) / self.height

        if self.kind is FractalKind.JULIA:
            radius = find_escape_radius(config.c.norm())
            self.threshold = radius * radius
        else:
            self.threshold = MANDELBROT_THRESHOLD

        self.cursor = FractalCursor()
        self._batch = PointBatch(capacity)

        get_logger("engine").debug(
            "engine %s %sx%s bounds=%s..%s c=%s iterations=%s threshold=%s",
            self.kind.value, self.width, self.height, config.plane_min, config.plane_max,
            config.c, config.max_iterations, self.threshold,
        )

    @property
    def total_points(self) -> int:
        return self.width * self.height

    @property
    def points_done(self) -> int:
        return self.cursor.y_curr * self.width + self.cursor.x_curr

    def is_done(self) -> bool:
        return self.cursor.done

    def pixel_to_plane(self, x: int, y: int) -> Complex:
        return Complex(x * self.scale_x + self.config.plane_min.real,
                       y * self.scale_y + self.config.plane_min.imag)

    def iterate(self, point: Complex) -> int:
        """Escape time of the pixel mapped to ``point``.

        Returns the 1-based step at which ``|z|**2`` reached the threshold, 0 when
        the start value is already outside, and ``max_iterations`` when the orbit
        never escaped.
        """
        return self._escape_time(point.real, point.imag)

    def _escape_time(self, re: float, im: float) -> int:
        if self.kind is FractalKind.MANDELBROT:
            zr, zi = 0.0, 0.0
            cr, ci = re, im
        else:
            zr, zi = re, im
            cr, ci = self.config.c.real, self.config.c.imag

        threshold = self.threshold
        if zr * zr + zi * zi >= threshold:
            return 0

        max_iterations = self.config.max_iterations
        for idx in range(1, max_iterations + 1):
            zr, zi = zr * zr - zi * zi + cr, 2.0 * zr * zi + ci
            if zr * zr + zi * zi >= threshold:
                return idx
        return max_iterations

    def calculate(self, time_budget: Optional[float] = None) -> PointBatch:
        """Compute the next batch; the returned view is valid until the next call."""
        budget = self.time_budget if time_budget is None else float(time_budget)
        cursor = self.cursor
        batch = self._batch
        batch.x_start = cursor.x_curr
        batch.y_start = cursor.y_curr
        batch.num_points = 0
        if cursor.done:
            return batch

        start = self._clock()
        values = batch.values
        capacity = batch.capacity
        x, y = cursor.x_curr, cursor.y_curr
        x_offset, y_offset = self.config.plane_min.real, self.config.plane_min.imag
        count = 0

        while count < capacity:
            values[count] = self._escape_time(x * self.scale_x + x_offset, y * self.scale_y + y_offset)
            count += 1

            x += 1
            if x >= self.width:
                x = 0
                y += 1
                if y >= self.height:
                    cursor.done = True
                    break

            if count % self.check_interval == 0 and self._clock() - start >= budget:
                break

        cursor.x_curr = x
        cursor.y_curr = y
        batch.num_points = count
        return batch
