"""
Engine configuration loading.

Configuration comes from dataclass defaults, optionally overlaid by a JSON file
and then by ``MANDELZOOM_*`` environment variables.
"""

import json
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Union
import logging

from ..core.exceptions import ConfigurationError
from ..core.viewport import MIN_SCALE

logger = logging.getLogger(__name__)

ENV_PREFIX = "MANDELZOOM_"


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclass
class EngineConfig:
    """Configuration for field generation and zooming."""

    # Surface
    surface_size: int = 800

    # Iteration
    max_iter: int = 300

    # Coloring
    palette: str = 'classic'
    interior_color: Tuple[float, float, float] = (0.0, 0.0, 0.0)

    # Zoom
    zoom_factor: float = 10.0
    min_scale: float = MIN_SCALE

    def validate(self):
        """Validate configuration parameters."""
        if isinstance(self.surface_size, bool) or not isinstance(self.surface_size, int):
            raise ConfigurationError("surface_size must be an integer")
        if self.surface_size <= 0:
            raise ConfigurationError("surface_size must be positive")

        if isinstance(self.max_iter, bool) or not isinstance(self.max_iter, int):
            raise ConfigurationError("max_iter must be an integer")
        if self.max_iter <= 0:
            raise ConfigurationError("max_iter must be positive")

        if not isinstance(self.palette, str) or not self.palette:
            raise ConfigurationError("palette must be a non-empty name")

        if not isinstance(self.interior_color, (tuple, list)) or len(self.interior_color) != 3:
            raise ConfigurationError("interior_color must be (r, g, b)")
        if not all(_is_number(c) and 0 <= c <= 1 for c in self.interior_color):
            raise ConfigurationError("interior_color components must be between 0 and 1")

        for name in ('zoom_factor', 'min_scale'):
            if not _is_number(getattr(self, name)):
                raise ConfigurationError(f"{name} must be a number")

        if self.zoom_factor <= 1:
            raise ConfigurationError("zoom_factor must be greater than 1")

        if not 0 < self.min_scale < 1:
            raise ConfigurationError("min_scale must be between 0 and 1")

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['interior_color'] = list(self.interior_color)
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'EngineConfig':
        """Create a configuration from a mapping, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(f"Unknown configuration parameter(s): {', '.join(sorted(unknown))}")

        values = dict(data)
        if isinstance(values.get('interior_color'), list):
            values['interior_color'] = tuple(values['interior_color'])

        config = cls(**values)
        config.validate()
        return config


_ENV_CASTS = {
    'surface_size': int,
    'max_iter': int,
    'palette': str,
    'zoom_factor': float,
    'min_scale': float,
}


class ConfigManager:
    """Loads and saves engine configurations."""

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        self.environ = os.environ if environ is None else environ

    def load_config(self, filepath: Union[str, Path]) -> Dict[str, Any]:
        """Read a JSON configuration file."""
        filepath = Path(filepath)
        try:
            with open(filepath, 'r') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in {filepath}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration in {filepath} must be a JSON object")

        logger.info(f"Loaded configuration from {filepath}")
        return data

    def save_config(self, config: EngineConfig, filepath: Union[str, Path]) -> None:
        """Write a configuration as JSON."""
        with open(filepath, 'w') as f:
            json.dump(config.to_dict(), f, indent=2)
        logger.info(f"Saved configuration to {filepath}")

    def environment_overrides(self) -> Dict[str, Any]:
        """Collect MANDELZOOM_* overrides from the environment."""
        overrides = {}
        for name, cast in _ENV_CASTS.items():
            raw = self.environ.get(ENV_PREFIX + name.upper())
            if raw is None:
                continue
            try:
                overrides[name] = cast(raw)
            except ValueError:
                raise ConfigurationError(f"Invalid value for {ENV_PREFIX}{name.upper()}: {raw!r}") from None
        return overrides

    def create_engine_config(self, filepath: Optional[Union[str, Path]] = None,
                             **overrides) -> EngineConfig:
        """
        Build the effective configuration.

        Args:
            filepath: Optional JSON configuration file
            **overrides: Explicit values, applied last; None values are ignored

        Returns:
            Validated configuration
        """
        data: Dict[str, Any] = {}
        if filepath is not None:
            data.update(self.load_config(filepath))
        data.update(self.environment_overrides())
        data.update({k: v for k, v in overrides.items() if v is not None})
        return EngineConfig.from_dict(data)
