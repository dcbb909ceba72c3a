"""Explicit application context: one explorer per window.

Holds the settings for both fractal kinds, the raster, at most one running
engine and the in-progress mouse drag. Every state change goes through a
method here; nothing reaches into module-level state.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Optional

from fractalzoom.color import ColorMapper
from fractalzoom.config import ExplorerSettings
from fractalzoom.coords import RenderedRect, client_to_canvas
from fractalzoom.engine import FractalConfig, FractalEngine, FractalKind, InvalidConfig, validate_config
from fractalzoom.renderers.canvas import Canvas
from fractalzoom.selection import DragSelection, aspect_height, zoom_to_selection
from fractalzoom.util.logging_setup import get_logger

_CONFIG_FIELDS = ("plane_min", "plane_max", "c", "max_iterations")

class Explorer:
    def __init__(self, settings: ExplorerSettings, *, rect: Optional[RenderedRect] = None):
        self.settings = settings
        self.rect = rect
        self.canvas: Optional[Canvas] = None
        self.engine: Optional[FractalEngine] = None
        self.colors: Optional[ColorMapper] = None
        self.paused = True
        self.drag: Optional[DragSelection] = None
        self._log = get_logger("session")

    @property
    def active_config(self) -> FractalConfig:
        return self.settings.config_for()

    @property
    def rendered_rect(self) -> RenderedRect:
        if self.rect is not None:
            return self.rect
        return RenderedRect(0.0, 0.0, float(self.settings.width), float(self.settings.height))

    def _ensure_canvas(self) -> Canvas:
        if self.canvas is None:
            self.canvas = Canvas(self.settings.width, self.settings.height,
                                 background=self.settings.background_color)
        elif (self.canvas.width, self.canvas.height) != (self.settings.width, self.settings.height):
            self.canvas.resize(self.settings.width, self.settings.height)
        return self.canvas

    # ---- start / pause / clear / draw ----

    def start(self) -> bool:
        canvas = self._ensure_canvas()
        kind = self.settings.active
        config = self.active_config
        self._log.info("Start %s %sx%s iterations=%s", kind.value, self.settings.width,
                       self.settings.height, config.max_iterations)
        self.engine = FractalEngine(
            kind, config, self.settings.width, self.settings.height,
            time_budget=self.settings.time_budget,
            capacity=self.settings.batch_capacity,
        )
        self.colors = ColorMapper(config.max_iterations, background=self.settings.background_color)
        canvas.draw_results(self.engine.calculate(), self.colors)
        self.paused = self.engine.is_done()
        return not self.paused

    def draw(self) -> bool:
        if self.paused or self.engine is None or self.canvas is None or self.colors is None:
            return False
        self.canvas.draw_results(self.engine.calculate(), self.colors)
        if self.engine.is_done():
            self._log.info("Done %s (%s colours)", self.engine.kind.value, len(self.colors))
            self.paused = True
            return False
        return True

    def pause(self) -> None:
        self._log.debug("Pause")
        self.paused = True

    def resume(self) -> bool:
        if self.engine is None or self.engine.is_done():
            return False
        self._log.debug("Resume at (%s,%s)", self.engine.cursor.x_curr, self.engine.cursor.y_curr)
        self.paused = False
        return True

    def clear(self) -> None:
        self._log.debug("Clear")
        self.paused = True
        self.drag = None
        self.engine = None
        self.colors = None
        self._ensure_canvas().clear()

    # ---- parameter edits ----

    def set_active(self, kind: FractalKind) -> None:
        kind = FractalKind(kind)
        if kind is not self.settings.active:
            self.settings = replace(self.settings, active=kind)
            self.clear()

    def update_config(self, kind: Optional[FractalKind] = None, **changes: Any) -> FractalConfig:
        unknown = set(changes) - set(_CONFIG_FIELDS)
        if unknown:
            raise InvalidConfig(f"Unknown config fields: {', '.join(sorted(unknown))}")
        kind = FractalKind(kind or self.settings.active)
        config = replace(self.settings.config_for(kind), **changes)
        self.settings = self.settings.with_config(kind, config)
        self._log.info("Config %s updated: %s", kind.value, ", ".join(sorted(changes)))
        self.clear()
        return config

    def set_size(self, width: int, height: int) -> None:
        for config in self.settings.configs.values():
            validate_config(config, width, height)
        self.settings = replace(self.settings, width=int(width), height=int(height))
        self.clear()

    # ---- mouse drag ----

    def _to_canvas(self, client_x: float, client_y: float):
        return client_to_canvas(client_x, client_y, self.settings.width, self.settings.height,
                                self.rendered_rect)

    def _restore_raster(self) -> None:
        if self.canvas is not None:
            self.canvas.undraw()

    def mouse_down(self, client_x: float, client_y: float) -> bool:
        point = self._to_canvas(client_x, client_y)
        if point is None:
            return False
        self._ensure_canvas()
        self.drag = DragSelection.begin(point)
        return True

    def mouse_move(self, client_x: float, client_y: float) -> bool:
        if self.drag is None:
            return False
        self._restore_raster()
        point = self._to_canvas(client_x, client_y)
        if point is None:
            self.mouse_up()
            return False
        self.drag.update(point)
        self._ensure_canvas().draw_frame(
            self.drag.start[0], self.drag.start[1], point[0], point[1])
        return True

    def mouse_up(self, client_x: Optional[float] = None, client_y: Optional[float] = None,
                 *, keep_aspect: bool = False) -> Optional[FractalConfig]:
        if self.drag is None:
            return None
        drag = self.drag
        self.drag = None
        self._restore_raster()

        if client_x is not None and client_y is not None:
            point = self._to_canvas(client_x, client_y)
            if point is not None:
                drag.update(point)

        config = zoom_to_selection(drag, self.active_config, self.settings.width, self.settings.height)
        if config is None:
            self._log.debug("Discarding degenerate selection %s -> %s", drag.start, drag.current)
            return None

        self._log.info("Zoom %s -> %s..%s", self.settings.active.value, config.plane_min, config.plane_max)
        if keep_aspect:
            height = aspect_height(self.settings.width, config.plane_min, config.plane_max)
            self.settings = replace(self.settings, height=height)
        return self.update_config(plane_min=config.plane_min, plane_max=config.plane_max)
