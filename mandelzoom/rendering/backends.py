"""
Rendering backends consuming colored point sequences.

Backends never iterate the map themselves; they only draw what the field
generator produced. Two strategies exist: immediate per-point drawing onto a
raster image, and building one interleaved vertex buffer for a GPU rasterizer.
"""

import numpy as np
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, Optional, Union
import logging

from PIL import Image, ImageDraw

from ..core.coordinates import CoordinateMapper
from ..core.field import ColoredPoint, FieldSnapshot

logger = logging.getLogger(__name__)

# Floats per vertex: device x, device y, r, g, b
VERTEX_COMPONENTS = 5

# Two triangles per point
VERTICES_PER_POINT = 6


class RenderBackend(ABC):
    """Abstract consumer of colored points."""

    def __init__(self, surface_size: int):
        self.mapper = CoordinateMapper(surface_size)

    @property
    def surface_size(self) -> int:
        return self.mapper.surface_size

    @abstractmethod
    def render(self, points: Iterable[ColoredPoint]) -> None:
        """
        Consume a complete point set, replacing whatever was rendered before.

        Args:
            points: Colored points of one field
        """
        pass

    def __call__(self, snapshot: FieldSnapshot) -> None:
        """Listener entry point for the zoom controller."""
        self.render(snapshot.points)


class RasterBackend(RenderBackend):
    """Draws every point immediately onto a Pillow image."""

    def __init__(self, surface_size: int, radius: int = 0,
                 background: tuple = (0, 0, 0)):
        """
        Initialize raster backend.

        Args:
            surface_size: Side of the square surface in pixels
            radius: 0 draws single pixels, larger values draw filled dots
            background: 8-bit background color
        """
        super().__init__(surface_size)
        if radius < 0:
            raise ValueError("radius must be non-negative")
        self.radius = radius
        self.background = tuple(background)
        self.draw_calls = 0
        self.image = self._blank()

    def _blank(self) -> Image.Image:
        # Points run from 0 to surface_size inclusive
        side = self.surface_size + 1
        return Image.new('RGB', (side, side), self.background)

    def render(self, points: Iterable[ColoredPoint]) -> None:
        self.image = self._blank()
        self.draw_calls = 0
        draw = ImageDraw.Draw(self.image)

        for point in points:
            self.plot_point(draw, point)

        logger.debug(f"Raster backend issued {self.draw_calls} draw calls")

    def plot_point(self, draw: ImageDraw.ImageDraw, point: ColoredPoint) -> None:
        """Issue the draw call for a single point."""
        x, y = point.pixel.x, point.pixel.y
        color = point.color.to_uint8_tuple()
        if self.radius == 0:
            draw.point((x, y), fill=color)
        else:
            r = self.radius
            draw.ellipse((x - r, y - r, x + r, y + r), fill=color)
        self.draw_calls += 1

    def to_array(self) -> np.ndarray:
        """Rendered image as a uint8 array indexed [y, x]."""
        return np.asarray(self.image)

    def save(self, filepath: Union[str, Path]) -> None:
        self.image.save(filepath)
        logger.info(f"Saved raster image: {filepath}")


class VertexBufferBackend(RenderBackend):
    """
    Builds an interleaved [x, y, r, g, b] float32 vertex buffer.

    Each point becomes a quad one pixel wide, split into two triangles and
    placed in device space with the viewport-independent transform. A quad
    starts at its point's device position and extends one pixel towards +x
    and +y, so the quads of the far row and column (pixel surface_size, device
    1.0) lie outside [-1, 1] and are clipped by the rasterizer.
    """

    def __init__(self, surface_size: int):
        super().__init__(surface_size)
        self.vertices = np.zeros(0, dtype=np.float32)

    @property
    def stride_bytes(self) -> int:
        return VERTEX_COMPONENTS * np.dtype(np.float32).itemsize

    @property
    def vertex_count(self) -> int:
        return self.vertices.size // VERTEX_COMPONENTS

    @property
    def pixel_extent(self) -> float:
        """Width of one pixel in device units."""
        return 2.0 / self.surface_size

    def render(self, points: Iterable[ColoredPoint]) -> None:
        points = list(points)
        buffer = np.empty((len(points), VERTICES_PER_POINT, VERTEX_COMPONENTS), dtype=np.float32)
        extent = self.pixel_extent

        for i, point in enumerate(points):
            x0, y0 = self.mapper.pixel_to_device(point.pixel)
            x1, y1 = x0 + extent, y0 + extent
            r, g, b = point.color.to_tuple()

            corners = ((x0, y0), (x1, y0), (x1, y1),
                       (x0, y0), (x1, y1), (x0, y1))
            for j, (vx, vy) in enumerate(corners):
                buffer[i, j] = (vx, vy, r, g, b)

        self.vertices = buffer.reshape(-1)
        logger.debug(f"Vertex buffer holds {self.vertex_count} vertices")

    def as_vertex_array(self) -> np.ndarray:
        """Vertex buffer viewed as an (n, 5) array."""
        return self.vertices.reshape(-1, VERTEX_COMPONENTS)

    def to_bytes(self) -> bytes:
        """Raw little-endian buffer contents for upload."""
        return self.vertices.astype('<f4', copy=False).tobytes()

    def save(self, filepath: Union[str, Path]) -> None:
        np.save(filepath, self.vertices)
        logger.info(f"Saved vertex buffer ({self.vertex_count} vertices): {filepath}")


def create_backend(name: str, surface_size: int, radius: Optional[int] = None) -> RenderBackend:
    """Create a backend by name ('raster' or 'vertices')."""
    if name == 'raster':
        return RasterBackend(surface_size, radius=radius or 0)
    if name == 'vertices':
        return VertexBufferBackend(surface_size)
    raise ValueError(f"Unknown backend '{name}'. Available: raster, vertices")
