"""
Fractal field generation.

The generator sweeps every pixel of the surface, including the far edge, so a
surface of size N produces (N + 1) ** 2 colored points. Columns are visited in
the outer loop and rows in the inner loop.
"""

import numpy as np
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple
import logging
import time

from .coordinates import CoordinateMapper
from .escape_time import EscapeTimeEvaluator
from .viewport import PixelCoordinate, ViewportState
from ..rendering.coloring import ColorClassifier, ColorRGB, Palette

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ColoredPoint:
    """A pixel and the color it should be drawn with."""
    pixel: PixelCoordinate
    color: ColorRGB


@dataclass(frozen=True)
class FieldSnapshot:
    """Complete, immutable result of one field generation."""
    state: ViewportState
    surface_size: int
    max_iter: int
    points: Tuple[ColoredPoint, ...]
    elapsed_seconds: float = 0.0

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[ColoredPoint]:
        return iter(self.points)


class FractalFieldGenerator:
    """Drives mapping, evaluation and coloring over the whole surface."""

    def __init__(self, surface_size: int, max_iter: int = 300,
                 palette: Optional[Palette] = None,
                 interior_color: Optional[ColorRGB] = None):
        """
        Initialize field generator.

        Args:
            surface_size: Width and height of the square surface in pixels
            max_iter: Iteration budget per point
            palette: Palette for escaped points (classic palette if None)
            interior_color: Color for bounded points (black if None)
        """
        self.mapper = CoordinateMapper(surface_size)
        self.evaluator = EscapeTimeEvaluator(max_iter)
        if interior_color is None:
            self.classifier = ColorClassifier(palette)
        else:
            self.classifier = ColorClassifier(palette, interior_color)

    @property
    def surface_size(self) -> int:
        return self.mapper.surface_size

    @property
    def max_iter(self) -> int:
        return self.evaluator.max_iter

    @property
    def palette(self) -> Palette:
        return self.classifier.palette

    @property
    def point_count(self) -> int:
        return (self.surface_size + 1) ** 2

    def iteration_grid(self, state: ViewportState) -> np.ndarray:
        """Escape iterations indexed [y, x], BOUNDED_MARKER for bounded points."""
        state.validate()
        c_real, c_imag = self.mapper.create_coordinate_arrays(state)
        return self.evaluator.evaluate_array(c_real, c_imag)

    def color_grid(self, state: ViewportState) -> np.ndarray:
        """Float RGB image indexed [y, x] with values 0-1."""
        return self.classifier.classify_array(self.iteration_grid(state))

    def generate(self, state: ViewportState) -> Iterator[ColoredPoint]:
        """
        Generate the colored point for every pixel of the surface.

        The state is read when the sweep starts; the returned iterator can be
        recreated any number of times and yields the same sequence for the
        same state.

        Args:
            state: Viewport to render

        Yields:
            ColoredPoint for each pixel, columns outer and rows inner
        """
        grid = self.iteration_grid(state)
        classify = self.classifier.classify
        to_result = self.evaluator.result_from_marker

        def sweep():
            for x in range(self.surface_size + 1):
                column = grid[:, x]
                for y in range(self.surface_size + 1):
                    color = classify(to_result(column[y]))
                    yield ColoredPoint(PixelCoordinate(x, y), color)

        return sweep()

    def snapshot(self, state: ViewportState) -> FieldSnapshot:
        """Generate the whole field eagerly as an immutable snapshot."""
        start_time = time.time()
        frozen_state = state.copy()
        points = tuple(self.generate(frozen_state))
        elapsed = time.time() - start_time

        logger.info(f"Generated {len(points)} points at scale={frozen_state.scale:g} "
                    f"offset=({frozen_state.offset_x:g}, {frozen_state.offset_y:g}) "
                    f"in {elapsed:.2f}s")

        return FieldSnapshot(
            state=frozen_state,
            surface_size=self.surface_size,
            max_iter=self.max_iter,
            points=points,
            elapsed_seconds=elapsed,
        )


def generate_field(surface_size: int, max_iter: int, state: ViewportState,
                   palette: Optional[Palette] = None) -> Iterator[ColoredPoint]:
    """Convenience wrapper around FractalFieldGenerator.generate."""
    return FractalFieldGenerator(surface_size, max_iter, palette).generate(state)
