"""
Value types and the mutable viewport state.

The viewport is the visible window onto the complex plane. It is described by a
scale factor (1 is the full view of the set) and a plane-space offset that the
view is centred on.
"""

from dataclasses import dataclass, replace
from typing import Any, Dict
import math

from .exceptions import ConfigurationError

# Scale of the original full view
FULL_VIEW_SCALE = 1.0

# Below this scale double precision no longer resolves neighbouring pixels
MIN_SCALE = 1e-15


@dataclass(frozen=True)
class ComplexPoint:
    """A point of the complex plane."""
    re: float
    im: float

    def __complex__(self) -> complex:
        return complex(self.re, self.im)

    @classmethod
    def from_complex(cls, value: complex) -> 'ComplexPoint':
        """Create a point from a Python complex number."""
        return cls(float(value.real), float(value.imag))


@dataclass(frozen=True)
class PixelCoordinate:
    """Integer address of a pixel; rows grow downwards."""
    x: int
    y: int

    def to_tuple(self):
        return (self.x, self.y)


@dataclass
class ViewportState:
    """
    Current scale and offset of the view.

    One instance lives for the whole session. Only the zoom controller mutates
    it, and only between two field generations.
    """

    scale: float = FULL_VIEW_SCALE
    offset_x: float = 0.0
    offset_y: float = 0.0

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """Validate the viewport parameters."""
        for name in ('scale', 'offset_x', 'offset_y'):
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or isinstance(value, bool):
                raise ConfigurationError(f"{name} must be numeric")
            if not math.isfinite(value):
                raise ConfigurationError(f"{name} must be finite")
        if self.scale <= 0:
            raise ConfigurationError("scale must be positive")

    @property
    def is_full_view(self) -> bool:
        """True when the view shows the original, unzoomed set."""
        return self.scale == FULL_VIEW_SCALE and self.offset_x == 0 and self.offset_y == 0

    @property
    def center(self) -> ComplexPoint:
        return ComplexPoint(self.offset_x, self.offset_y)

    def copy(self) -> 'ViewportState':
        """Return an independent copy of this state."""
        return replace(self)

    def to_dict(self) -> Dict[str, Any]:
        """Convert state to dictionary."""
        return {'scale': self.scale, 'offset_x': self.offset_x, 'offset_y': self.offset_y}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ViewportState':
        """Create state from dictionary."""
        return cls(**data)
