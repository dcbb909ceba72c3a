from dataclasses import replace

import pytest
from PIL import Image

from fractalzoom.engine import FractalKind
from fractalzoom.pipeline import render_image, run_until_done, save_frame
from fractalzoom.session import Explorer

def test_render_image(small_settings):
    img, stats = render_image(small_settings, progress=False)
    assert img.size == (20, 10)
    assert stats["done"]
    assert stats["points"] == 200
    assert stats["kind"] == "mandelbrot"
    assert stats["batches"] >= 4

def test_render_other_kind(small_settings):
    img, stats = render_image(small_settings, kind=FractalKind.JULIA, time_budget=0.5, progress=False)
    assert stats["kind"] == "julia_set"
    assert img.getpixel((0, 0)) != (0, 0, 0)

def test_max_batches_pauses(small_settings):
    explorer = Explorer(replace(small_settings, batch_capacity=7))
    stats = run_until_done(explorer, progress=False, max_batches=3)
    assert not stats["done"]
    assert stats["points"] == 21
    assert explorer.paused
    assert explorer.resume()

def test_save_frame_creates_directory(tmp_path, small_settings):
    img, _ = render_image(small_settings, progress=False)
    path = save_frame(img, str(tmp_path / "out" / "frame.png"))
    with Image.open(path) as loaded:
        assert loaded.size == (20, 10)

def test_start_without_engine_raises(monkeypatch, small_settings):
    explorer = Explorer(small_settings)
    monkeypatch.setattr(explorer, "start", lambda: False)
    with pytest.raises(RuntimeError, match="without an engine"):
        run_until_done(explorer, progress=False)
