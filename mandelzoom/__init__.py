"""
Interactive Mandelbrot set rendering.

This library maps the pixels of a square surface onto the complex plane,
classifies each point with the escape-time algorithm, colors it from a cyclic
palette and hands the resulting point set to a rendering backend. A zoom
controller recentres and rescales the view on click events.

Example usage:
    >>> from mandelzoom import FractalFieldGenerator, ZoomController, RasterBackend
    >>> generator = FractalFieldGenerator(surface_size=400, max_iter=100)
    >>> controller = ZoomController(generator)
    >>> raster = RasterBackend(400)
    >>> controller.add_listener(raster)
    >>> controller.zoom_in((250, 150))
"""

__version__ = "1.0.0"
__author__ = "mandelzoom developers"

from mandelzoom.core.exceptions import (
    ConfigurationError,
    MandelzoomError,
    PixelOutOfBoundsError,
    ZoomInProgressError,
)
from mandelzoom.core.viewport import ComplexPoint, PixelCoordinate, ViewportState
from mandelzoom.core.coordinates import CoordinateMapper
from mandelzoom.core.escape_time import BOUNDED, Bounded, Escaped, EscapeTimeEvaluator, evaluate
from mandelzoom.core.field import ColoredPoint, FieldSnapshot, FractalFieldGenerator, generate_field
from mandelzoom.rendering.coloring import (
    CLASSIC_PALETTE,
    ColorClassifier,
    ColorRGB,
    Palette,
    PaletteRegistry,
    classify,
)
from mandelzoom.rendering.backends import RasterBackend, RenderBackend, VertexBufferBackend
from mandelzoom.rendering.image_output import ImageExporter, RenderMetadata
from mandelzoom.io.config import ConfigManager, EngineConfig
from mandelzoom.io.protocol import PointRequest, answer_request

# Main API classes
from mandelzoom.api import ZoomController

__all__ = [
    "ZoomController",
    "EngineConfig",
    "ConfigManager",
    "ViewportState",
    "ComplexPoint",
    "PixelCoordinate",
    "CoordinateMapper",
    "EscapeTimeEvaluator",
    "Escaped",
    "Bounded",
    "BOUNDED",
    "evaluate",
    "ColoredPoint",
    "FieldSnapshot",
    "FractalFieldGenerator",
    "generate_field",
    "ColorRGB",
    "Palette",
    "PaletteRegistry",
    "ColorClassifier",
    "CLASSIC_PALETTE",
    "classify",
    "RenderBackend",
    "RasterBackend",
    "VertexBufferBackend",
    "ImageExporter",
    "RenderMetadata",
    "PointRequest",
    "answer_request",
    "MandelzoomError",
    "ConfigurationError",
    "PixelOutOfBoundsError",
    "ZoomInProgressError",
]
