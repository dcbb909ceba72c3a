import itertools

import pytest

from fractalzoom.complex import Complex
from fractalzoom.engine import (
    MANDELBROT_THRESHOLD,
    FractalConfig,
    FractalEngine,
    FractalKind,
    InvalidConfig,
    PointBatch,
)
from fractalzoom.escape_radius import find_escape_radius

MANDELBROT = FractalConfig(plane_min=Complex(-2.0, -1.5), plane_max=Complex(1.0, 1.5), max_iterations=100)
JULIA = FractalConfig(plane_min=Complex(-1.5, -1.5), plane_max=Complex(1.5, 1.5), max_iterations=100,
                      c=Complex(-0.8, 0.156))

def frozen_clock():
    return 0.0

def drain(engine, time_budget=None):
    batches = []
    for _ in range(engine.total_points + 1):
        batch = engine.calculate(time_budget)
        batches.append((batch.x_start, batch.y_start, batch.num_points, list(batch.points(engine.width))))
        if engine.is_done():
            return batches
    raise AssertionError("engine never finished")

def test_mandelbrot_scenario():
    engine = FractalEngine(FractalKind.MANDELBROT, MANDELBROT, 100, 100)
    corner = engine.pixel_to_plane(0, 0)
    assert corner == Complex(-2.0, -1.5)
    assert engine.iterate(corner) <= 5

    centre = engine.pixel_to_plane(67, 50)
    assert centre.real == pytest.approx(0.01)
    assert centre.imag == pytest.approx(0.0)
    assert engine.iterate(centre) == MANDELBROT.max_iterations

def test_mandelbrot_uses_fixed_threshold():
    engine = FractalEngine(FractalKind.MANDELBROT, MANDELBROT, 10, 10)
    assert engine.threshold == MANDELBROT_THRESHOLD
    # z starts at 0, so even a far point takes one step
    assert engine.iterate(Complex(10.0, 10.0)) == 1

def test_julia_threshold_is_radius_squared():
    engine = FractalEngine(FractalKind.JULIA, JULIA, 10, 10)
    radius = find_escape_radius(JULIA.c.norm())
    assert engine.threshold == pytest.approx(radius * radius)

def test_julia_start_outside_escapes_immediately():
    engine = FractalEngine(FractalKind.JULIA, JULIA, 10, 10)
    assert engine.iterate(Complex(3.0, 3.0)) == 0

def test_julia_with_zero_c():
    config = FractalConfig(plane_min=Complex(-2.0, -2.0), plane_max=Complex(2.0, 2.0), max_iterations=50)
    engine = FractalEngine("julia_set", config, 10, 10)
    assert engine.kind is FractalKind.JULIA
    assert engine.iterate(Complex(0.5, 0.0)) == 50
    # threshold is about 1.0079: 1 is a fixed point, 1.003 squares past it once
    assert engine.iterate(Complex(1.0, 0.0)) == 50
    assert engine.iterate(Complex(1.003, 0.0)) == 1
    assert engine.iterate(Complex(1.1, 0.0)) == 0

def test_single_batch_covers_small_raster():
    engine = FractalEngine(FractalKind.MANDELBROT, MANDELBROT, 5, 4, capacity=20, clock=frozen_clock)
    batch = engine.calculate()
    assert engine.is_done()
    assert (batch.x_start, batch.y_start, batch.num_points) == (0, 0, 20)
    assert engine.points_done == engine.total_points

def test_every_pixel_exactly_once_in_row_major_order():
    engine = FractalEngine(FractalKind.JULIA, JULIA, 23, 17, capacity=37, clock=frozen_clock)
    batches = drain(engine)
    assert sum(n for _, _, n, _ in batches) == 23 * 17

    produced = [(x, y) for *_, points in batches for x, y, _ in points]
    assert produced == [(x, y) for y in range(17) for x in range(23)]

    for x, y, value in batches[3][3][:5]:
        assert value == engine.iterate(engine.pixel_to_plane(x, y))

def test_capacity_limits_batch_and_resumes():
    engine = FractalEngine(FractalKind.MANDELBROT, MANDELBROT, 20, 20, capacity=64, clock=frozen_clock)
    first = engine.calculate()
    assert (first.x_start, first.y_start, first.num_points) == (0, 0, 64)
    assert not engine.is_done()
    second = engine.calculate()
    assert (second.x_start, second.y_start) == (4, 3)

def test_buffer_is_reused():
    engine = FractalEngine(FractalKind.MANDELBROT, MANDELBROT, 20, 20, capacity=64, clock=frozen_clock)
    assert engine.calculate() is engine.calculate()

def test_deadline_stops_partial_batch():
    ticks = itertools.count()
    engine = FractalEngine(FractalKind.MANDELBROT, MANDELBROT, 100, 100, capacity=1000,
                           check_interval=10, clock=lambda: float(next(ticks)))
    batch = engine.calculate(0.5)
    assert batch.num_points == 10
    assert not engine.is_done()
    assert (engine.cursor.x_curr, engine.cursor.y_curr) == (10, 0)

def test_time_budget_defaults_to_constructor_value():
    ticks = itertools.count()
    engine = FractalEngine(FractalKind.MANDELBROT, MANDELBROT, 100, 100, time_budget=2.5,
                           check_interval=5, clock=lambda: float(next(ticks)))
    # clock reads 0 at start, then 1, 2, 3 at every fifth point
    assert engine.calculate().num_points == 15

def test_zero_budget_still_makes_progress():
    engine = FractalEngine(FractalKind.MANDELBROT, MANDELBROT, 30, 30, capacity=100)
    batches = drain(engine, time_budget=0.0)
    assert all(n > 0 for _, _, n, _ in batches)
    assert sum(n for _, _, n, _ in batches) == 900

def test_calculate_after_done_is_empty():
    engine = FractalEngine(FractalKind.MANDELBROT, MANDELBROT, 4, 4, clock=frozen_clock)
    engine.calculate()
    assert engine.is_done()
    batch = engine.calculate()
    assert batch.num_points == 0
    assert list(batch.points(4)) == []

@pytest.mark.parametrize("config,width,height", [
    (FractalConfig(Complex(1.0, -1.0), Complex(1.0, 1.0), 10), 10, 10),
    (FractalConfig(Complex(-1.0, 1.0), Complex(1.0, -1.0), 10), 10, 10),
    (FractalConfig(Complex(float("nan"), -1.0), Complex(1.0, 1.0), 10), 10, 10),
    (FractalConfig(Complex(-1.0, -1.0), Complex(1.0, 1.0), 10, c=Complex(float("inf"), 0.0)), 10, 10),
    (FractalConfig(Complex(-1.0, -1.0), Complex(1.0, 1.0), 0), 10, 10),
    (MANDELBROT, 0, 10),
    (MANDELBROT, 10, -1),
])
def test_invalid_construction(config, width, height):
    with pytest.raises(InvalidConfig):
        FractalEngine(FractalKind.MANDELBROT, config, width, height)

def test_invalid_batch_settings():
    with pytest.raises(InvalidConfig):
        PointBatch(0)
    with pytest.raises(InvalidConfig):
        FractalEngine(FractalKind.MANDELBROT, MANDELBROT, 10, 10, check_interval=0)
