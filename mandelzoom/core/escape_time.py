"""
Escape-time evaluation of the quadratic map.

The orbit starts from the point itself (z0 = c), so the first step already
computes c^2 + c. A point escapes at iteration i when the i-th step leaves the
disc of radius 2. Scalar and array evaluation use the same arithmetic in the
same order and therefore agree exactly.
"""

import math
import numpy as np
from dataclasses import dataclass
from typing import Union
import logging

from .exceptions import ConfigurationError
from .viewport import ComplexPoint

logger = logging.getLogger(__name__)

ESCAPE_RADIUS = 2.0

# Marker used in iteration arrays for points that never escaped
BOUNDED_MARKER = -1


@dataclass(frozen=True)
class Escaped:
    """The orbit left the escape radius at the given iteration."""
    iteration: int


@dataclass(frozen=True)
class Bounded:
    """The orbit stayed inside the escape radius for the whole budget."""


BOUNDED = Bounded()

EscapeResult = Union[Escaped, Bounded]


def validate_max_iter(max_iter: int) -> int:
    if isinstance(max_iter, bool) or not isinstance(max_iter, (int, np.integer)):
        raise ConfigurationError("max_iter must be an integer")
    if max_iter <= 0:
        raise ConfigurationError("max_iter must be positive")
    return int(max_iter)


def evaluate(c: ComplexPoint, max_iter: int) -> EscapeResult:
    """
    Iterate z -> z^2 + c starting from z = c.

    Args:
        c: Point of the complex plane
        max_iter: Iteration budget

    Returns:
        Escaped(i) for the first step whose magnitude exceeds 2, else BOUNDED
    """
    max_iter = validate_max_iter(max_iter)
    zr, zi = c.re, c.im
    for i in range(max_iter):
        new_r = zr * zr - zi * zi + c.re
        new_i = 2.0 * zr * zi + c.im
        if math.sqrt(new_r * new_r + new_i * new_i) > ESCAPE_RADIUS:
            return Escaped(i)
        zr, zi = new_r, new_i
    return BOUNDED


class EscapeTimeEvaluator:
    """Escape-time evaluator bound to a fixed iteration budget."""

    def __init__(self, max_iter: int = 300):
        """
        Initialize evaluator.

        Args:
            max_iter: Maximum number of iterations per point
        """
        self.max_iter = validate_max_iter(max_iter)

    def evaluate(self, c: ComplexPoint) -> EscapeResult:
        """Evaluate a single point."""
        return evaluate(c, self.max_iter)

    def evaluate_array(self, c_real: np.ndarray, c_imag: np.ndarray) -> np.ndarray:
        """
        Evaluate a whole grid of points.

        Args:
            c_real: Real components of the points
            c_imag: Imaginary components of the points

        Returns:
            int32 array of escape iterations, BOUNDED_MARKER where the point
            never escaped
        """
        c_real = np.asarray(c_real, dtype=np.float64)
        c_imag = np.asarray(c_imag, dtype=np.float64)
        if c_real.shape != c_imag.shape:
            raise ConfigurationError("real and imaginary arrays must have the same shape")

        shape = c_real.shape
        cr = c_real.ravel()
        ci = c_imag.ravel()
        zr = cr.copy()
        zi = ci.copy()

        iterations = np.full(cr.shape, BOUNDED_MARKER, dtype=np.int32)
        active = np.arange(cr.size)

        for i in range(self.max_iter):
            if active.size == 0:
                break

            r = zr[active]
            m = zi[active]
            new_r = r * r - m * m + cr[active]
            new_i = 2.0 * r * m + ci[active]

            escaped = np.sqrt(new_r * new_r + new_i * new_i) > ESCAPE_RADIUS
            iterations[active[escaped]] = i

            # Only surviving orbits move on
            remaining = ~escaped
            active = active[remaining]
            zr[active] = new_r[remaining]
            zi[active] = new_i[remaining]

        logger.debug(f"Evaluated {cr.size} points, {np.count_nonzero(iterations == BOUNDED_MARKER)} bounded")
        return iterations.reshape(shape)

    @staticmethod
    def result_from_marker(value: int) -> EscapeResult:
        """Convert an iteration array entry back into an EscapeResult."""
        value = int(value)
        if value == BOUNDED_MARKER:
            return BOUNDED
        return Escaped(value)
