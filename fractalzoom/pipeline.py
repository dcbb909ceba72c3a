from __future__ import annotations

import os
import time
from dataclasses import replace
from typing import Any, Dict, Optional

from PIL import Image
from tqdm import tqdm

from fractalzoom.config import ExplorerSettings
from fractalzoom.engine import FractalKind
from fractalzoom.session import Explorer
from fractalzoom.util.logging_setup import get_logger

def run_until_done(explorer: Explorer, *, progress: bool = True, max_batches: Optional[int] = None) -> Dict[str, Any]:
    """Host loop: one ``draw()`` per frame until the engine finishes or is paused."""
    logger = get_logger()
    started = time.perf_counter()
    batches = 0

    more = explorer.start()
    batches += 1
    engine = explorer.engine
    if engine is None:
        raise RuntimeError("Explorer started without an engine.")

    with tqdm(total=engine.total_points, unit="px", desc=f"Rendering {engine.kind.value}", disable=not progress) as bar:
        bar.update(engine.points_done)
        while more:
            if max_batches is not None and batches >= max_batches:
                explorer.pause()
                break
            before = engine.points_done
            more = explorer.draw()
            batches += 1
            bar.update(engine.points_done - before)

    elapsed = time.perf_counter() - started
    stats = {
        "kind": engine.kind.value,
        "width": engine.width,
        "height": engine.height,
        "batches": batches,
        "points": engine.points_done,
        "done": engine.is_done(),
        "elapsed_seconds": round(elapsed, 4),
    }
    logger.info("Render %s batches=%s points=%s done=%s in %.2fs",
                stats["kind"], batches, stats["points"], stats["done"], elapsed)
    return stats

def render_image(
    settings: ExplorerSettings,
    *,
    kind: Optional[FractalKind] = None,
    time_budget: Optional[float] = None,
    progress: bool = True,
) -> tuple:
    if kind is not None:
        settings = replace(settings, active=FractalKind(kind))
    if time_budget is not None:
        settings = replace(settings, time_budget=float(time_budget))

    explorer = Explorer(settings)
    stats = run_until_done(explorer, progress=progress)
    if explorer.canvas is None:
        raise RuntimeError("Render finished without a canvas.")
    return explorer.canvas.to_image(), stats

def _ensure_dir(path: str) -> None:
    if path:
        os.makedirs(path, exist_ok=True)

def save_frame(img: Image.Image, path: str) -> str:
    _ensure_dir(os.path.dirname(path))
    img.save(path, format="PNG", optimize=True)
    return path
