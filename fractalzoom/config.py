import copy
import json
import math
import os
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional

from fractalzoom.color import hex_to_rgb
from fractalzoom.complex import Complex
from fractalzoom.engine import (
    BATCH_CAPACITY,
    DEFAULT_TIME_BUDGET,
    FractalConfig,
    FractalKind,
    InvalidConfig,
    validate_config,
)

DEFAULTS: Dict[str, Any] = {
    "width": 1024,
    "height": 600,
    "active": FractalKind.JULIA.value,
    "time_budget": DEFAULT_TIME_BUDGET,
    "batch_capacity": BATCH_CAPACITY,
    "background_color": "#000000",
    FractalKind.JULIA.value: {
        "plane_min": [-1.5, -1.5],
        "plane_max": [1.5, 1.5],
        "c": [-0.4, 0.6],
        "max_iterations": 400,
    },
    FractalKind.MANDELBROT.value: {
        "plane_min": [-2.0, -1.5],
        "plane_max": [1.0, 1.5],
        "max_iterations": 400,
    },
}

@dataclass
class ExplorerSettings:
    width: int
    height: int
    active: FractalKind
    configs: Dict[FractalKind, FractalConfig] = field(default_factory=dict)
    time_budget: float = DEFAULT_TIME_BUDGET
    batch_capacity: int = BATCH_CAPACITY
    background_color: str = "#000000"

    def config_for(self, kind: Optional[FractalKind] = None) -> FractalConfig:
        return self.configs[FractalKind(kind or self.active)]

    def with_config(self, kind: FractalKind, config: FractalConfig) -> "ExplorerSettings":
        validate_config(config, self.width, self.height)
        configs = dict(self.configs)
        configs[FractalKind(kind)] = config
        return replace(self, configs=configs)

def load_config(config_path: Optional[str]) -> Dict[str, Any]:
    if config_path:
        with open(config_path, "r", encoding="utf-8") as f:
            cfg = json.load(f)
        if not isinstance(cfg, dict):
            raise ValueError("Config JSON must be an object.")
        return cfg
    return copy.deepcopy(DEFAULTS)

def _parse_kind(value: Any) -> FractalKind:
    try:
        return FractalKind(value)
    except ValueError:
        choices = ", ".join(k.value for k in FractalKind)
        raise InvalidConfig(f"Unknown fractal kind {value!r}, expected one of: {choices}") from None

def _complex_field(section: Dict[str, Any], name: str, default: Any) -> Complex:
    try:
        return Complex.from_pair(section.get(name, default))
    except (TypeError, ValueError) as e:
        raise InvalidConfig(f"{name} must be [real, imag]: {e}") from e

def _fractal_section(cfg: Dict[str, Any], kind: FractalKind, width: int, height: int) -> FractalConfig:
    defaults = DEFAULTS[kind.value]
    section = cfg.get(kind.value, defaults)
    if not isinstance(section, dict):
        raise InvalidConfig(f"{kind.value} must be an object.")

    try:
        max_iterations = int(section.get("max_iterations", defaults["max_iterations"]))
    except (TypeError, ValueError) as e:
        raise InvalidConfig(f"{kind.value}.max_iterations must be an integer: {e}") from e

    config = FractalConfig(
        plane_min=_complex_field(section, "plane_min", defaults["plane_min"]),
        plane_max=_complex_field(section, "plane_max", defaults["plane_max"]),
        max_iterations=max_iterations,
        c=_complex_field(section, "c", defaults.get("c", [0.0, 0.0])),
    )
    try:
        validate_config(config, width, height)
    except InvalidConfig as e:
        raise InvalidConfig(f"{kind.value}: {e}") from e
    return config

def normalise_config(cfg: Dict[str, Any]) -> ExplorerSettings:
    try:
        width = int(cfg.get("width", DEFAULTS["width"]))
        height = int(cfg.get("height", DEFAULTS["height"]))
        time_budget = float(cfg.get("time_budget", DEFAULTS["time_budget"]))
        batch_capacity = int(cfg.get("batch_capacity", DEFAULTS["batch_capacity"]))
    except (TypeError, ValueError) as e:
        raise InvalidConfig(f"Invalid numeric config value: {e}") from e

    if width <= 0 or height <= 0:
        raise InvalidConfig("width/height must be positive.")
    if not (math.isfinite(time_budget) and time_budget > 0):
        raise InvalidConfig("time_budget must be a positive number of seconds.")
    if batch_capacity <= 0:
        raise InvalidConfig("batch_capacity must be positive.")

    background = str(cfg.get("background_color", DEFAULTS["background_color"]))
    try:
        hex_to_rgb(background)
    except ValueError as e:
        raise InvalidConfig(f"background_color: {e}") from e

    return ExplorerSettings(
        width=width,
        height=height,
        active=_parse_kind(cfg.get("active", DEFAULTS["active"])),
        configs={kind: _fractal_section(cfg, kind, width, height) for kind in FractalKind},
        time_budget=time_budget,
        batch_capacity=batch_capacity,
        background_color=background,
    )

def settings_to_dict(settings: ExplorerSettings) -> Dict[str, Any]:
    out: Dict[str, Any] = {
        "width": settings.width,
        "height": settings.height,
        "active": settings.active.value,
        "time_budget": settings.time_budget,
        "batch_capacity": settings.batch_capacity,
        "background_color": settings.background_color,
    }
    for kind, config in settings.configs.items():
        section = {
            "plane_min": config.plane_min.as_list(),
            "plane_max": config.plane_max.as_list(),
            "max_iterations": config.max_iterations,
        }
        if kind is FractalKind.JULIA:
            section["c"] = config.c.as_list()
        out[kind.value] = section
    return out

def save_config(path: str, settings: ExplorerSettings) -> None:
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(settings_to_dict(settings), f, indent=2, sort_keys=True)
