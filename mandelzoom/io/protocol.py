"""
Point-generation request and response codec.

A request asks for the colored points of one field::

    {"height": 800, "width": 800, "max_iter": 300, "scale_factor": 1}

and the response lists every point with 8-bit color channels::

    {"points": [{"x": 0, "y": 0, "color": {"red": 0, "green": 0, "blue": 255}}, ...]}

The codec is transport-free; whoever carries the JSON around owns that.
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping, Optional
import logging

from ..core.exceptions import ConfigurationError
from ..core.field import ColoredPoint, FractalFieldGenerator
from ..core.viewport import ViewportState
from ..rendering.coloring import Palette

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PointRequest:
    """Parameters of a point-generation request."""

    height: int
    width: int
    max_iter: int
    scale_factor: float = 1.0
    offset_x: float = 0.0
    offset_y: float = 0.0

    def validate(self) -> None:
        for name in ('height', 'width', 'max_iter'):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigurationError(f"{name} must be an integer")
            if value <= 0:
                raise ConfigurationError(f"{name} must be positive")
        if self.width != self.height:
            raise ConfigurationError("Only square surfaces are supported (width must equal height)")
        for name in ('scale_factor', 'offset_x', 'offset_y'):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ConfigurationError(f"{name} must be a number")
        if self.scale_factor <= 0:
            raise ConfigurationError("scale_factor must be positive")

    @property
    def viewport(self) -> ViewportState:
        return ViewportState(float(self.scale_factor), float(self.offset_x), float(self.offset_y))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'PointRequest':
        """Decode and validate a request mapping."""
        missing = [key for key in ('height', 'width', 'max_iter') if key not in data]
        if missing:
            raise ConfigurationError(f"Missing request field(s): {', '.join(missing)}")

        request = cls(
            height=data['height'],
            width=data['width'],
            max_iter=data['max_iter'],
            scale_factor=data.get('scale_factor', 1.0),
            offset_x=data.get('offset_x', 0.0),
            offset_y=data.get('offset_y', 0.0),
        )
        request.validate()
        return request

    @classmethod
    def from_json(cls, text: str) -> 'PointRequest':
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid request JSON: {e}") from e
        if not isinstance(data, dict):
            raise ConfigurationError("Request must be a JSON object")
        return cls.from_dict(data)


def encode_point(point: ColoredPoint) -> Dict[str, Any]:
    red, green, blue = point.color.to_uint8_tuple()
    return {
        'x': point.pixel.x,
        'y': point.pixel.y,
        'color': {'red': red, 'green': green, 'blue': blue},
    }


def encode_response(points: Iterable[ColoredPoint]) -> Dict[str, Any]:
    """Build the response mapping for a sequence of colored points."""
    return {'points': [encode_point(p) for p in points]}


def answer_request(request: PointRequest, palette: Optional[Palette] = None) -> Dict[str, Any]:
    """
    Generate the field a request describes.

    Args:
        request: Decoded request
        palette: Palette for escaped points (classic palette if None)

    Returns:
        Response mapping ready for JSON serialization
    """
    request.validate()
    generator = FractalFieldGenerator(request.width, request.max_iter, palette)
    snapshot = generator.snapshot(request.viewport)
    logger.info(f"Answered point request with {len(snapshot)} points")
    return encode_response(snapshot.points)
