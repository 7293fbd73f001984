"""
Palette management and escape-time colour classification.

Escaped points take the palette entry at ``iteration mod len(palette)``; points
that stayed bounded take a fixed interior colour that does not come from the
palette.
"""

import numpy as np
from typing import Dict, Iterable, List, Sequence, Tuple, Union, Optional
from dataclasses import dataclass
import logging
from pathlib import Path

try:
    import matplotlib
    MATPLOTLIB_AVAILABLE = True
except ImportError:
    MATPLOTLIB_AVAILABLE = False
    logging.warning("matplotlib not available - colormap palettes disabled")

from ..core.escape_time import BOUNDED_MARKER, Bounded, Escaped, EscapeResult
from ..core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ColorRGB:
    """RGB color with float components in [0, 1]."""
    r: float
    g: float
    b: float

    def __post_init__(self):
        """Validate RGB values."""
        for component in (self.r, self.g, self.b):
            if not 0 <= component <= 1:
                raise ConfigurationError("RGB components must be between 0 and 1")

    def to_tuple(self) -> Tuple[float, float, float]:
        """Convert to RGB tuple."""
        return (self.r, self.g, self.b)

    def to_uint8_tuple(self) -> Tuple[int, int, int]:
        """Convert to 8-bit RGB tuple."""
        return (int(round(self.r * 255)), int(round(self.g * 255)), int(round(self.b * 255)))

    @classmethod
    def from_uint8(cls, red: int, green: int, blue: int) -> 'ColorRGB':
        """Create a color from 8-bit channel values."""
        for component in (red, green, blue):
            if not 0 <= component <= 255:
                raise ConfigurationError("8-bit RGB components must be between 0 and 255")
        return cls(red / 255.0, green / 255.0, blue / 255.0)

    @classmethod
    def from_hex(cls, value: str) -> 'ColorRGB':
        """Create a color from a '#rrggbb' string."""
        text = value.strip().lstrip('#')
        if len(text) != 6:
            raise ConfigurationError(f"Invalid hex color: {value!r}")
        try:
            channels = [int(text[i:i + 2], 16) for i in (0, 2, 4)]
        except ValueError:
            raise ConfigurationError(f"Invalid hex color: {value!r}") from None
        return cls.from_uint8(*channels)


BLACK = ColorRGB(0.0, 0.0, 0.0)

# Colour of points that never escape
INTERIOR_COLOR = BLACK

ColorLike = Union[ColorRGB, Tuple[float, float, float]]


class Palette:
    """Fixed, ordered list of colors indexed cyclically."""

    def __init__(self, colors: Iterable[ColorLike], name: str = "Custom"):
        """
        Initialize color palette.

        Args:
            colors: Colors in the palette, at least one
            name: Human-readable name for the palette
        """
        self.name = name
        entries = []

        for color in colors:
            if isinstance(color, ColorRGB):
                entries.append(color)
            elif isinstance(color, (tuple, list)) and len(color) == 3:
                entries.append(ColorRGB(*color))
            else:
                raise ConfigurationError(f"Invalid color format: {color}")

        if not entries:
            raise ConfigurationError("Palette must contain at least one color")

        self.colors: Tuple[ColorRGB, ...] = tuple(entries)

    def __len__(self) -> int:
        return len(self.colors)

    def __getitem__(self, index: int) -> ColorRGB:
        return self.colors[index]

    def __eq__(self, other) -> bool:
        return isinstance(other, Palette) and self.colors == other.colors

    def __repr__(self) -> str:
        return f"Palette(name={self.name!r}, size={len(self.colors)})"

    def color_for(self, iteration: int) -> ColorRGB:
        """Palette entry for an escape iteration, wrapping around."""
        return self.colors[iteration % len(self.colors)]

    def to_array(self) -> np.ndarray:
        """Palette as an (n, 3) float64 array."""
        return np.array([c.to_tuple() for c in self.colors], dtype=np.float64)

    @classmethod
    def from_uint8(cls, colors: Sequence[Tuple[int, int, int]], name: str = "Custom") -> 'Palette':
        """Create palette from 8-bit RGB triples."""
        return cls([ColorRGB.from_uint8(*c) for c in colors], name=name)

    @classmethod
    def from_matplotlib(cls, cmap_name: str, n_samples: int = 16) -> 'Palette':
        """Create palette by sampling a matplotlib colormap."""
        if not MATPLOTLIB_AVAILABLE:
            raise ConfigurationError("matplotlib is required for colormap palettes")
        if n_samples < 1:
            raise ConfigurationError("n_samples must be at least 1")

        try:
            cmap = matplotlib.colormaps[cmap_name]
        except KeyError:
            raise ConfigurationError(f"Unknown matplotlib colormap '{cmap_name}'") from None

        colors = []
        for t in np.linspace(0, 1, n_samples):
            rgba = cmap(float(t))
            colors.append(ColorRGB(float(rgba[0]), float(rgba[1]), float(rgba[2])))

        return cls(colors, name=f"From_{cmap_name}")

    def save_to_file(self, filepath: Path) -> None:
        """Save palette to file in GPL format."""
        with open(filepath, 'w') as f:
            f.write("GIMP Palette\n")
            f.write(f"Name: {self.name}\n")
            f.write("#\n")

            for i, color in enumerate(self.colors):
                r, g, b = color.to_uint8_tuple()
                f.write(f"{r:3d} {g:3d} {b:3d} Color_{i}\n")

    @classmethod
    def load_from_file(cls, filepath: Path) -> 'Palette':
        """Load palette from GPL file."""
        colors = []
        name = "Loaded_Palette"

        with open(filepath, 'r') as f:
            for line in f:
                line = line.strip()
                if line.startswith("Name:"):
                    name = line.split(":", 1)[1].strip()
                elif line and not line.startswith("#") and not line.startswith("GIMP"):
                    parts = line.split()
                    if len(parts) >= 3:
                        try:
                            r, g, b = int(parts[0]), int(parts[1]), int(parts[2])
                        except ValueError:
                            continue
                        colors.append(ColorRGB.from_uint8(r, g, b))

        if not colors:
            raise ConfigurationError(f"No valid colors found in {filepath}")

        return cls(colors, name)


# The six-colour palette of the original viewer
CLASSIC_PALETTE = Palette.from_uint8([
    (0, 0, 255),
    (32, 107, 203),
    (255, 100, 100),
    (255, 170, 100),
    (255, 200, 100),
    (0, 255, 0),
], name="Classic")


class PaletteRegistry:
    """Registry of named palettes."""

    _palettes: Dict[str, Palette] = {
        'classic': CLASSIC_PALETTE,
        'hot': Palette([
            (0.5, 0, 0),
            (1, 0, 0),
            (1, 0.5, 0),
            (1, 1, 0),
            (1, 1, 1),
        ], name="Hot"),
        'ocean': Palette([
            (0, 0, 0.2),
            (0, 0, 0.8),
            (0, 0.5, 1),
            (0, 1, 1),
            (0.5, 1, 1),
        ], name="Ocean"),
        'gray': Palette([
            (0.25, 0.25, 0.25),
            (0.5, 0.5, 0.5),
            (0.75, 0.75, 0.75),
            (1, 1, 1),
        ], name="Grayscale"),
    }

    @classmethod
    def register(cls, name: str, palette: Palette) -> None:
        """
        Register a palette under a name.

        Args:
            name: Unique identifier for the palette
            palette: Palette instance
        """
        if not isinstance(palette, Palette):
            raise ConfigurationError("palette must be a Palette instance")
        cls._palettes[name.lower()] = palette
        logger.info(f"Registered palette: {name}")

    @classmethod
    def get(cls, name: str) -> Palette:
        """
        Look up a palette.

        Names of the form ``mpl:<colormap>`` sample a matplotlib colormap.
        """
        key = name.lower()
        if key.startswith('mpl:'):
            return Palette.from_matplotlib(name.split(':', 1)[1])

        palette = cls._palettes.get(key)
        if palette is None:
            available = ', '.join(cls._palettes.keys())
            raise ConfigurationError(f"Unknown palette '{name}'. Available: {available}")
        return palette

    @classmethod
    def list_palettes(cls) -> List[str]:
        """Get list of registered palette names."""
        return list(cls._palettes.keys())


def classify(result: EscapeResult, palette: Palette,
             interior_color: ColorRGB = INTERIOR_COLOR) -> ColorRGB:
    """
    Map an escape result to its display color.

    Args:
        result: Outcome of the escape-time evaluation
        palette: Palette for escaped points
        interior_color: Color for bounded points

    Returns:
        Color of the point
    """
    if isinstance(result, Escaped):
        return palette.color_for(result.iteration)
    if isinstance(result, Bounded):
        return interior_color
    raise TypeError(f"Unsupported escape result: {result!r}")


class ColorClassifier:
    """Classifier bound to one palette and interior color."""

    def __init__(self, palette: Optional[Palette] = None,
                 interior_color: ColorRGB = INTERIOR_COLOR):
        self.palette = palette if palette is not None else CLASSIC_PALETTE
        self.interior_color = interior_color
        self._table = self.palette.to_array()

    def classify(self, result: EscapeResult) -> ColorRGB:
        return classify(result, self.palette, self.interior_color)

    def classify_array(self, iterations: np.ndarray) -> np.ndarray:
        """
        Color an array of escape iterations.

        Args:
            iterations: Iteration array using BOUNDED_MARKER for bounded points

        Returns:
            Float RGB array of shape iterations.shape + (3,) with values 0-1
        """
        iterations = np.asarray(iterations)
        bounded = iterations == BOUNDED_MARKER
        indices = np.where(bounded, 0, iterations) % len(self.palette)

        rgb = self._table[indices]
        rgb[bounded] = self.interior_color.to_tuple()
        return rgb
