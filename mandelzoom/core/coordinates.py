"""
Pixel to complex-plane coordinate mapping.

The rendering surface is square. At scale 1 it spans [-2, 2] on both axes of
the complex plane; the view is scaled around, and shifted by, the viewport
offset. Pixel rows grow downwards while the imaginary axis grows upwards, so
the vertical axis is inverted.
"""

import numpy as np
from typing import Tuple
import logging

from .exceptions import ConfigurationError, PixelOutOfBoundsError
from .viewport import ComplexPoint, PixelCoordinate, ViewportState

logger = logging.getLogger(__name__)


class CoordinateMapper:
    """Bidirectional transform between pixels and plane points."""

    def __init__(self, surface_size: int):
        """
        Initialize mapper for a square surface.

        Args:
            surface_size: Width and height of the surface in pixels
        """
        if isinstance(surface_size, bool) or not isinstance(surface_size, (int, np.integer)):
            raise ConfigurationError("surface_size must be an integer")
        if surface_size <= 0:
            raise ConfigurationError("surface_size must be positive")
        self.surface_size = int(surface_size)

    @staticmethod
    def _axis_factors(state: ViewportState) -> Tuple[float, float]:
        if state.scale <= 0:
            raise ConfigurationError("scale must be positive")
        ax_factor = 2.0 * state.scale
        return ax_factor, 2.0 * ax_factor

    def pixels_per_unit(self, state: ViewportState) -> float:
        """Number of pixels covering one unit of the complex plane."""
        _, span = self._axis_factors(state)
        return self.surface_size / span

    def contains(self, pixel: PixelCoordinate) -> bool:
        """Check whether a pixel lies on the surface (bounds inclusive)."""
        return 0 <= pixel.x <= self.surface_size and 0 <= pixel.y <= self.surface_size

    def check_bounds(self, pixel: PixelCoordinate) -> None:
        if not self.contains(pixel):
            raise PixelOutOfBoundsError(pixel.x, pixel.y, self.surface_size)

    def pixel_to_plane(self, pixel: PixelCoordinate, state: ViewportState) -> ComplexPoint:
        """Convert pixel coordinates to a point of the complex plane."""
        ax_factor, span = self._axis_factors(state)
        divisor = self.surface_size / span
        re = pixel.x / divisor - ax_factor + state.offset_x
        im = -pixel.y / divisor + ax_factor + state.offset_y
        return ComplexPoint(re, im)

    def plane_to_pixel(self, point: ComplexPoint, state: ViewportState) -> PixelCoordinate:
        """Convert a plane point to the nearest pixel coordinates."""
        ax_factor, span = self._axis_factors(state)
        divisor = self.surface_size / span
        x = (point.re - state.offset_x + ax_factor) * divisor
        y = (ax_factor + state.offset_y - point.im) * divisor
        return PixelCoordinate(int(round(x)), int(round(y)))

    def pixel_to_device(self, pixel: PixelCoordinate) -> Tuple[float, float]:
        """
        Map a pixel into the fixed [-1, 1] device space.

        This placement transform ignores the viewport; it decides where
        geometry lands on the surface, not which plane point it shows.
        """
        return (2.0 * pixel.x / self.surface_size - 1.0,
                2.0 * pixel.y / self.surface_size - 1.0)

    def create_coordinate_arrays(self, state: ViewportState) -> Tuple[np.ndarray, np.ndarray]:
        """
        Create plane coordinate arrays for every pixel of the surface.

        Args:
            state: Viewport to map through

        Returns:
            Tuple of (real, imag) float64 arrays indexed [y, x], each of shape
            (surface_size + 1, surface_size + 1)
        """
        ax_factor, span = self._axis_factors(state)
        divisor = self.surface_size / span
        pixels = np.arange(self.surface_size + 1, dtype=np.float64)
        re = pixels / divisor - ax_factor + state.offset_x
        im = -pixels / divisor + ax_factor + state.offset_y
        real, imag = np.meshgrid(re, im)
        return real, imag
