"""Escape radius for Julia iteration.

For ``z <- z*z + c`` an orbit that reaches ``|z| = r`` with ``r*r - r >= |c|``
can only grow from there on, so ``r`` is a valid bailout. The smallest such
``r`` is the positive root of ``r*r - r - |c|``; Newton's method from 2.0
approaches it from above, and we stop as soon as we are within ``tolerance``
above the root since only an upper bound is required.
"""

from __future__ import annotations

from fractalzoom.util.logging_setup import get_logger

DEFAULT_RADIUS = 2.0
ESCAPE_TOLERANCE = 0.01
MAX_NEWTON_STEPS = 20

def find_escape_radius(
    c_norm: float,
    *,
    tolerance: float = ESCAPE_TOLERANCE,
    max_steps: int = MAX_NEWTON_STEPS,
) -> float:
    radius = DEFAULT_RADIUS

    for _ in range(max_steps):
        delta = radius * radius - radius - c_norm
        if 0.0 <= delta <= tolerance:
            break

        gradient = 2.0 * radius - 1.0
        if gradient == 0.0:
            get_logger().debug("escape radius: zero gradient for |c|=%s, using %s", c_norm, DEFAULT_RADIUS)
            radius = DEFAULT_RADIUS
            break

        radius -= delta / gradient

    if radius * radius - radius - c_norm >= 0.0 and radius <= DEFAULT_RADIUS:
        return radius

    get_logger().debug("escape radius: no acceptable root for |c|=%s (last=%s), using %s",
                       c_norm, radius, DEFAULT_RADIUS)
    return DEFAULT_RADIUS
