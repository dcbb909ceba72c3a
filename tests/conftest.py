import pytest

from fractalzoom.config import load_config, normalise_config

@pytest.fixture
def small_settings():
    cfg = load_config(None)
    cfg.update(width=20, height=10, batch_capacity=50, active="mandelbrot")
    cfg["mandelbrot"]["max_iterations"] = 30
    cfg["julia_set"]["max_iterations"] = 30
    return normalise_config(cfg)
