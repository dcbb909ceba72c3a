import mpmath
import pytest

from fractalzoom.complex import Complex
from fractalzoom.escape_radius import DEFAULT_RADIUS, ESCAPE_TOLERANCE, find_escape_radius

def _residual(radius, c_norm):
    return radius * radius - radius - c_norm

@pytest.mark.parametrize("c", [Complex(0.3, -0.5), Complex(1.0, -1.0), Complex(-0.4, 0.6), Complex(0.285, 0.01)])
def test_radius_within_tolerance_above_root(c):
    c_norm = c.norm()
    radius = find_escape_radius(c_norm)
    assert _residual(radius, c_norm) >= 0.0
    assert _residual(radius, c_norm) <= ESCAPE_TOLERANCE
    assert radius <= DEFAULT_RADIUS

def test_spiral_julia_constant():
    c_norm = Complex(-0.8, 0.156).norm()
    radius = find_escape_radius(c_norm)
    # positive root of r*r - r = 0.815 is about 1.532
    assert 1.5 < radius < 1.55
    assert radius * radius - radius >= c_norm

def test_property_over_range():
    for i in range(0, 301):
        c_norm = i / 100.0
        radius = find_escape_radius(c_norm)
        assert radius == DEFAULT_RADIUS or (radius <= DEFAULT_RADIUS and _residual(radius, c_norm) >= -ESCAPE_TOLERANCE)

def test_large_c_falls_back():
    assert find_escape_radius(2.5) == DEFAULT_RADIUS
    assert find_escape_radius(100.0) == DEFAULT_RADIUS

def test_exact_at_two():
    assert find_escape_radius(2.0) == 2.0

def test_no_steps_uses_starting_radius():
    assert find_escape_radius(0.5, max_steps=0) == DEFAULT_RADIUS

def test_tolerance_is_tunable():
    c_norm = 0.75
    coarse = find_escape_radius(c_norm)
    fine = find_escape_radius(c_norm, tolerance=1e-6)
    root = float(mpmath.findroot(lambda r: r * r - r - c_norm, 2.0))
    assert fine == pytest.approx(root, abs=1e-6)
    assert coarse >= fine >= root - 1e-12
