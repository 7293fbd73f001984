"""
Exception hierarchy for the Mandelbrot zoom engine.

Configuration problems are caller programming errors and are raised before any
computation starts. Nothing in the engine is transient, so none of these are
meant to be retried.
"""


class MandelzoomError(Exception):
    """Base class for all engine errors."""


class ConfigurationError(MandelzoomError, ValueError):
    """Invalid surface size, iteration budget, palette, scale or request."""


class PixelOutOfBoundsError(MandelzoomError, ValueError):
    """A zoom event referenced a pixel outside the rendering surface."""

    def __init__(self, x: int, y: int, surface_size: int):
        self.x = x
        self.y = y
        self.surface_size = surface_size
        super().__init__(
            f"Pixel ({x}, {y}) is outside the surface [0, {surface_size}] x [0, {surface_size}]"
        )


class ZoomInProgressError(MandelzoomError, RuntimeError):
    """A zoom event arrived while a field regeneration was still running."""
