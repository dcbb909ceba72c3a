from __future__ import annotations

import argparse
import logging
from typing import Optional

from fractalzoom.complex import Complex
from fractalzoom.config import load_config, normalise_config, save_config, settings_to_dict
from fractalzoom.engine import FractalKind, InvalidConfig
from fractalzoom.escape_radius import find_escape_radius
from fractalzoom.pipeline import render_image, save_frame
from fractalzoom.session import Explorer
from fractalzoom.util.logging_setup import configure_logging, get_logger, shutdown_logging
from fractalzoom.util.manifest import build_manifest, write_manifest

KIND_CHOICES = [k.value for k in FractalKind]

def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="fractalzoom", description="Escape-time Mandelbrot / Julia set explorer.")
    p.add_argument("--config", type=str, default=None, help="Path to config JSON. If omitted, built-in defaults are used.")
    p.add_argument("--log-level", type=str, default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Log level.")
    p.add_argument("--log-file", type=str, default="render.log", help="Log file path (rotating). Set empty to disable file logging.")
    sub = p.add_subparsers(dest="cmd", required=True)

    r = sub.add_parser("render", help="Render the active fractal to a PNG.")
    r.add_argument("--kind", type=str, default=None, choices=KIND_CHOICES, help="Fractal to render (defaults to config.active).")
    r.add_argument("--output", type=str, default="fractal.png", help="Output PNG file.")
    r.add_argument("--time-budget", type=float, default=None, help="Seconds per batch (defaults to config.time_budget).")
    r.add_argument("--manifest", type=str, default="artifacts/run.json", help="Run manifest path. Set empty to skip.")
    r.add_argument("--no-progress", action="store_true", help="Disable the progress bar.")

    z = sub.add_parser("zoom", help="Apply a canvas drag rectangle to the plane bounds and save the config.")
    z.add_argument("coords", type=int, nargs=4, metavar=("X0", "Y0", "X1", "Y1"), help="Selection corners as inclusive pixel indices (0..width-1, 0..height-1).")
    z.add_argument("--kind", type=str, default=None, choices=KIND_CHOICES, help="Fractal to zoom (defaults to config.active).")
    z.add_argument("--keep-aspect", action="store_true", help="Recompute raster height to match the new bounds.")
    z.add_argument("--output-config", type=str, default=None, help="Where to write the config (defaults to --config).")

    e = sub.add_parser("edit", help="Edit fractal parameters and save the config.")
    e.add_argument("--kind", type=str, default=None, choices=KIND_CHOICES, help="Fractal to edit (defaults to config.active).")
    e.add_argument("--activate", action="store_true", help="Make --kind the active fractal.")
    e.add_argument("--max-iterations", type=int, default=None)
    e.add_argument("--c-real", type=float, default=None)
    e.add_argument("--c-imag", type=float, default=None)
    e.add_argument("--min-real", type=float, default=None)
    e.add_argument("--max-real", type=float, default=None)
    e.add_argument("--min-imag", type=float, default=None)
    e.add_argument("--max-imag", type=float, default=None)
    e.add_argument("--output-config", type=str, default=None, help="Where to write the config (defaults to --config).")

    rad = sub.add_parser("radius", help="Print the Julia escape radius for c.")
    rad.add_argument("c_real", type=float)
    rad.add_argument("c_imag", type=float)

    return p

def _config_target(args: argparse.Namespace) -> str:
    target = args.output_config or args.config
    if not target:
        raise ValueError("No config path to write: pass --config or --output-config.")
    return target

def _cmd_render(args: argparse.Namespace, logger: logging.Logger) -> int:
    settings = normalise_config(load_config(args.config))
    img, stats = render_image(settings, kind=args.kind, time_budget=args.time_budget, progress=not args.no_progress)
    save_frame(img, args.output)
    logger.info("Saved %s", args.output)
    if args.manifest:
        write_manifest(args.manifest, build_manifest(config=settings_to_dict(settings), render_stats=stats))
        logger.info("Run manifest written: %s", args.manifest)
    return 0

def _cmd_zoom(args: argparse.Namespace, logger: logging.Logger) -> int:
    target = _config_target(args)
    explorer = Explorer(normalise_config(load_config(args.config)))
    if args.kind:
        explorer.set_active(FractalKind(args.kind))
    x0, y0, x1, y1 = args.coords
    width, height = explorer.settings.width, explorer.settings.height
    for name, (x, y) in (("start", (x0, y0)), ("end", (x1, y1))):
        if not (0 <= x < width and 0 <= y < height):
            raise ValueError(f"Selection {name} ({x},{y}) is outside the {width}x{height} canvas; "
                             f"corners are pixel indices 0..{width - 1}, 0..{height - 1}.")
    explorer.mouse_down(x0, y0)
    config = explorer.mouse_up(x1, y1, keep_aspect=args.keep_aspect)
    if config is None:
        logger.warning("Degenerate selection, config unchanged")
        return 1
    save_config(target, explorer.settings)
    logger.info("Zoomed to %s..%s, config written: %s", config.plane_min, config.plane_max, target)
    return 0

def _cmd_edit(args: argparse.Namespace, logger: logging.Logger) -> int:
    target = _config_target(args)
    explorer = Explorer(normalise_config(load_config(args.config)))
    kind = FractalKind(args.kind) if args.kind else explorer.settings.active
    if args.activate:
        explorer.set_active(kind)

    current = explorer.settings.config_for(kind)
    changes = {}
    if args.max_iterations is not None:
        changes["max_iterations"] = args.max_iterations
    if args.c_real is not None or args.c_imag is not None:
        changes["c"] = Complex(current.c.real if args.c_real is None else args.c_real,
                               current.c.imag if args.c_imag is None else args.c_imag)
    if args.min_real is not None or args.min_imag is not None:
        changes["plane_min"] = Complex(current.plane_min.real if args.min_real is None else args.min_real,
                                       current.plane_min.imag if args.min_imag is None else args.min_imag)
    if args.max_real is not None or args.max_imag is not None:
        changes["plane_max"] = Complex(current.plane_max.real if args.max_real is None else args.max_real,
                                       current.plane_max.imag if args.max_imag is None else args.max_imag)
    if changes:
        explorer.update_config(kind, **changes)

    save_config(target, explorer.settings)
    logger.info("Config written: %s", target)
    return 0

def _cmd_radius(args: argparse.Namespace, logger: logging.Logger) -> int:
    c = Complex(args.c_real, args.c_imag)
    radius = find_escape_radius(c.norm())
    logger.debug("escape radius for c=%s |c|=%s", c, c.norm())
    print(f"{radius:.6f}")
    return 0

COMMANDS = {
    "render": _cmd_render,
    "zoom": _cmd_zoom,
    "edit": _cmd_edit,
    "radius": _cmd_radius,
}

def main(argv: Optional[list] = None) -> int:
    args = build_arg_parser().parse_args(argv)

    log_level = getattr(logging, args.log_level.upper(), logging.INFO)
    log_file = args.log_file if args.log_file and args.log_file.strip() else None
    configure_logging(level=log_level, console=True, log_file=log_file)
    logger = get_logger()

    try:
        return COMMANDS[args.cmd](args, logger)
    except InvalidConfig as e:
        logger.error("Invalid config: %s", e)
        return 2
    except (OSError, ValueError) as e:
        logger.error("%s", e)
        return 2
    finally:
        shutdown_logging()

if __name__ == "__main__":
    raise SystemExit(main())
