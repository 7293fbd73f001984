"""
Main API classes for interactive Mandelbrot exploration.

This module ties the viewport, the field generator and the rendering backends
together behind a zoom controller that reacts to click events.
"""

import math
from typing import Callable, List, Optional, Union, Tuple
import logging

from .core.exceptions import ConfigurationError, ZoomInProgressError
from .core.field import FieldSnapshot, FractalFieldGenerator
from .core.viewport import FULL_VIEW_SCALE, MIN_SCALE, ComplexPoint, PixelCoordinate, ViewportState
from .io.config import EngineConfig
from .rendering.coloring import ColorRGB, PaletteRegistry

logger = logging.getLogger(__name__)

FieldListener = Callable[[FieldSnapshot], None]


def _as_pixel(pixel: Union[PixelCoordinate, Tuple[int, int]], mapper) -> PixelCoordinate:
    if not isinstance(pixel, PixelCoordinate):
        x, y = pixel
        pixel = PixelCoordinate(x, y)

    # Bounds are checked on the raw values, before any conversion to int
    mapper.check_bounds(pixel)
    if pixel.x != int(pixel.x) or pixel.y != int(pixel.y):
        raise ConfigurationError(f"Pixel coordinates must be whole numbers, got ({pixel.x}, {pixel.y})")
    return PixelCoordinate(int(pixel.x), int(pixel.y))


class ZoomController:
    """
    Zoom state machine over a single viewport.

    Zooming in recentres the view on the clicked pixel and divides the scale by
    the zoom factor; zooming out multiplies it back, never past the full view,
    where the offset snaps back to the origin. Every transition regenerates the
    field and hands the snapshot to the registered listeners.
    """

    def __init__(self, generator: FractalFieldGenerator,
                 state: Optional[ViewportState] = None,
                 zoom_factor: float = 10.0,
                 min_scale: float = MIN_SCALE):
        """
        Initialize zoom controller.

        Args:
            generator: Field generator for the surface
            state: Viewport to drive (a fresh full view if None)
            zoom_factor: Scale divisor applied per zoom-in
            min_scale: Scale floor for zoom-in
        """
        self.generator = generator
        self.state = state if state is not None else ViewportState()
        self.zoom_factor = float(zoom_factor)
        self.min_scale = float(min_scale)
        self.listeners: List[FieldListener] = []
        self.current_field: Optional[FieldSnapshot] = None
        self._regenerating = False

        if self.zoom_factor <= 1:
            raise ConfigurationError("zoom_factor must be greater than 1")
        if not 0 < self.min_scale < FULL_VIEW_SCALE:
            raise ConfigurationError("min_scale must be between 0 and 1")

    @classmethod
    def from_config(cls, config: EngineConfig) -> 'ZoomController':
        """Build a controller and its generator from an engine configuration."""
        config.validate()
        generator = FractalFieldGenerator(
            config.surface_size,
            config.max_iter,
            PaletteRegistry.get(config.palette),
            ColorRGB(*config.interior_color),
        )
        return cls(generator, zoom_factor=config.zoom_factor, min_scale=config.min_scale)

    @property
    def mapper(self):
        return self.generator.mapper

    def add_listener(self, listener: FieldListener) -> None:
        """Register a consumer that receives each regenerated field."""
        self.listeners.append(listener)

    def remove_listener(self, listener: FieldListener) -> None:
        self.listeners.remove(listener)

    def _ensure_idle(self):
        if self._regenerating:
            raise ZoomInProgressError("A field regeneration is already in progress")

    def regenerate(self) -> FieldSnapshot:
        """Generate the field for the current state and notify listeners."""
        self._ensure_idle()
        self._regenerating = True
        try:
            snapshot = self.generator.snapshot(self.state)
            self.current_field = snapshot
            for listener in self.listeners:
                listener(snapshot)
        finally:
            self._regenerating = False
        return snapshot

    def zoom_in(self, pixel: Union[PixelCoordinate, Tuple[int, int]]) -> FieldSnapshot:
        """
        Zoom into the clicked pixel.

        Args:
            pixel: Clicked pixel coordinates

        Returns:
            Snapshot of the regenerated field
        """
        self._ensure_idle()
        pixel = _as_pixel(pixel, self.mapper)

        center = self.mapper.pixel_to_plane(pixel, self.state)
        new_scale = self.state.scale / self.zoom_factor
        if new_scale < self.min_scale:
            logger.warning(f"Scale floor {self.min_scale:g} reached, results are no longer reliable")
            new_scale = self.min_scale

        self.state.offset_x = center.re
        self.state.offset_y = center.im
        self.state.scale = new_scale

        logger.info(f"Zoomed in at pixel ({pixel.x}, {pixel.y}) -> {complex(center)}, scale={new_scale:g}")
        return self.regenerate()

    def zoom_out(self) -> FieldSnapshot:
        """Zoom out by one step, recentring on the origin at the full view."""
        self._ensure_idle()

        new_scale = min(self.state.scale * self.zoom_factor, FULL_VIEW_SCALE)
        # Repeated division and multiplication by the factor drifts by a few ulps
        if math.isclose(new_scale, FULL_VIEW_SCALE, rel_tol=1e-9):
            new_scale = FULL_VIEW_SCALE

        self.state.scale = new_scale
        if new_scale == FULL_VIEW_SCALE:
            self.state.offset_x = 0.0
            self.state.offset_y = 0.0

        logger.info(f"Zoomed out, scale={new_scale:g}")
        return self.regenerate()

    def reset(self) -> FieldSnapshot:
        """Return to the full view."""
        self._ensure_idle()
        self.state.scale = FULL_VIEW_SCALE
        self.state.offset_x = 0.0
        self.state.offset_y = 0.0
        logger.info("Reset to full view")
        return self.regenerate()

    def plane_point_at(self, pixel: Union[PixelCoordinate, Tuple[int, int]]) -> ComplexPoint:
        """Plane point currently shown at a pixel."""
        pixel = _as_pixel(pixel, self.mapper)
        return self.mapper.pixel_to_plane(pixel, self.state)

    def get_exploration_info(self):
        """Get current exploration state information."""
        return {
            'scale': self.state.scale,
            'center': (self.state.offset_x, self.state.offset_y),
            'zoom_level': FULL_VIEW_SCALE / self.state.scale,
            'surface_size': self.generator.surface_size,
            'max_iterations': self.generator.max_iter,
            'palette': self.generator.palette.name,
            'points': len(self.current_field) if self.current_field is not None else 0,
        }
