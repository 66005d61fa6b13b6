"""Terrain synthesis configuration models.

Every field falls back to its documented default when the incoming value is
missing, unparseable or out of range, so a partially filled control panel
still yields a usable configuration.
"""

import math
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

DEFAULT_SCALE = 20.0
DEFAULT_HEIGHT_SCALE = 5.0
DEFAULT_OCTAVES = 4
DEFAULT_PERSISTENCE = 0.5
DEFAULT_LACUNARITY = 2.0
DEFAULT_RESOLUTION = 100
DEFAULT_WATER_LEVEL = 0.0
DEFAULT_TERRAIN_SIZE = 200.0

# Accepted octave ranges; values outside fall back to the defaults
PERSISTENCE_RANGE = (0.0, 1.0)
LACUNARITY_RANGE = (1.0, 8.0)


def _as_float(value: Any, default: float) -> float:
    """Parse a float, returning default for None, garbage or non-finite input."""
    if value is None or isinstance(value, bool):
        return default
    try:
        result = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(result):
        return default
    return result


def _as_int(value: Any, default: int) -> int:
    """Parse an int the way a slider value is parsed (truncating floats)."""
    parsed = _as_float(value, float(default))
    return int(parsed)


class OctaveConfig(BaseModel):
    """Fractal noise parameters shared by the mesh and the minimap."""

    model_config = ConfigDict(frozen=True)

    octaves: int = Field(default=DEFAULT_OCTAVES, description="Number of octaves summed")
    persistence: float = Field(
        default=DEFAULT_PERSISTENCE, description="Amplitude multiplier per octave"
    )
    lacunarity: float = Field(
        default=DEFAULT_LACUNARITY, description="Frequency multiplier per octave"
    )
    scale: float = Field(default=DEFAULT_SCALE, description="World units per noise unit")
    height_scale: float = Field(
        default=DEFAULT_HEIGHT_SCALE, description="Elevation multiplier"
    )

    @field_validator("octaves", mode="before")
    @classmethod
    def _octaves_or_default(cls, value: Any) -> int:
        # Non-positive counts are kept: they mean "no contribution"
        return _as_int(value, DEFAULT_OCTAVES)

    @field_validator("persistence", mode="before")
    @classmethod
    def _persistence_or_default(cls, value: Any) -> float:
        persistence = _as_float(value, DEFAULT_PERSISTENCE)
        low, high = PERSISTENCE_RANGE
        return persistence if low <= persistence <= high else DEFAULT_PERSISTENCE

    @field_validator("lacunarity", mode="before")
    @classmethod
    def _lacunarity_or_default(cls, value: Any) -> float:
        lacunarity = _as_float(value, DEFAULT_LACUNARITY)
        low, high = LACUNARITY_RANGE
        return lacunarity if low <= lacunarity <= high else DEFAULT_LACUNARITY

    @field_validator("scale", mode="before")
    @classmethod
    def _scale_or_default(cls, value: Any) -> float:
        scale = _as_float(value, DEFAULT_SCALE)
        return scale if scale > 0 else DEFAULT_SCALE

    @field_validator("height_scale", mode="before")
    @classmethod
    def _height_or_default(cls, value: Any) -> float:
        return _as_float(value, DEFAULT_HEIGHT_SCALE)


class BrushConfig(BaseModel):
    """Sculpting brush parameters."""

    model_config = ConfigDict(frozen=True)

    radius: float = Field(default=5.0, description="Brush radius in world units")
    strength: float = Field(default=2.0, description="Elevation added at the brush center")

    @field_validator("radius", mode="before")
    @classmethod
    def _radius_or_default(cls, value: Any) -> float:
        return _as_float(value, 5.0)

    @field_validator("strength", mode="before")
    @classmethod
    def _strength_or_default(cls, value: Any) -> float:
        return _as_float(value, 2.0)


class MinimapConfig(BaseModel):
    """Overview raster size in pixels."""

    model_config = ConfigDict(frozen=True)

    width: int = Field(default=200, description="Raster width in pixels")
    height: int = Field(default=200, description="Raster height in pixels")

    @field_validator("width", "height", mode="before")
    @classmethod
    def _size_or_default(cls, value: Any) -> int:
        size = _as_int(value, 200)
        return size if size >= 0 else 200


class BiomePalette(BaseModel):
    """Hex colors for each biome band, lowest band first."""

    model_config = ConfigDict(frozen=True)

    deep_water: str = "#004488"
    shallow_water: str = "#0088cc"
    beach: str = "#faebd7"
    grassland: str = "#8fbc8f"
    low_mountains: str = "#a9a9a9"
    high_mountains: str = "#ffffff"

    @field_validator(
        "deep_water",
        "shallow_water",
        "beach",
        "grassland",
        "low_mountains",
        "high_mountains",
        mode="before",
    )
    @classmethod
    def _valid_hex(cls, value: Any, info: ValidationInfo) -> str:
        default = cls.model_fields[info.field_name].default
        if not isinstance(value, str):
            return default
        text = value.strip().lstrip("#")
        if len(text) != 6:
            return default
        try:
            int(text, 16)
        except ValueError:
            return default
        return "#" + text.lower()

    def rgb(self) -> list[tuple[int, int, int]]:
        """Return the six colors as RGB byte triples, lowest band first."""
        colors = [
            self.deep_water,
            self.shallow_water,
            self.beach,
            self.grassland,
            self.low_mountains,
            self.high_mountains,
        ]
        return [hex_to_rgb(color) for color in colors]


def hex_to_rgb(color: str) -> tuple[int, int, int]:
    """Convert "#rrggbb" to an (r, g, b) byte triple."""
    value = int(color.lstrip("#"), 16)
    return (value >> 16) & 0xFF, (value >> 8) & 0xFF, value & 0xFF


class TerrainSettings(BaseModel):
    """Complete terrain session configuration."""

    model_config = ConfigDict(frozen=True)

    seed: int | None = Field(
        default=None, description="Permutation seed (None = fresh terrain every time)"
    )
    resolution: int = Field(
        default=DEFAULT_RESOLUTION, description="Grid segments per edge"
    )
    terrain_width: float = Field(
        default=DEFAULT_TERRAIN_SIZE, description="Plane extent along x"
    )
    terrain_depth: float = Field(
        default=DEFAULT_TERRAIN_SIZE, description="Plane extent along y"
    )
    water_level: float = Field(
        default=DEFAULT_WATER_LEVEL, description="Elevation of the water plane"
    )

    octave: OctaveConfig = Field(default_factory=OctaveConfig)
    brush: BrushConfig = Field(default_factory=BrushConfig)
    minimap: MinimapConfig = Field(default_factory=MinimapConfig)
    palette: BiomePalette = Field(default_factory=BiomePalette)

    @field_validator("seed", mode="before")
    @classmethod
    def _seed_or_none(cls, value: Any) -> int | None:
        if value is None:
            return None
        try:
            seed = int(value)
        except (TypeError, ValueError, OverflowError):
            return None
        return seed if seed >= 0 else None

    @field_validator("resolution", mode="before")
    @classmethod
    def _resolution_or_default(cls, value: Any) -> int:
        resolution = _as_int(value, DEFAULT_RESOLUTION)
        return resolution if resolution >= 0 else DEFAULT_RESOLUTION

    @field_validator("terrain_width", "terrain_depth", mode="before")
    @classmethod
    def _extent_or_default(cls, value: Any) -> float:
        extent = _as_float(value, DEFAULT_TERRAIN_SIZE)
        return extent if extent > 0 else DEFAULT_TERRAIN_SIZE

    @field_validator("water_level", mode="before")
    @classmethod
    def _water_or_default(cls, value: Any) -> float:
        return _as_float(value, DEFAULT_WATER_LEVEL)

    @field_validator("octave", "brush", "minimap", "palette", mode="before")
    @classmethod
    def _section_or_default(cls, value: Any) -> Any:
        # A missing or malformed section is replaced by its defaults
        if value is None or not isinstance(value, (dict, BaseModel)):
            return {}
        return value

    def with_changes(self, **changes: Any) -> "TerrainSettings":
        """Return validated settings with top-level or octave fields replaced.

        Octave and brush fields may be passed flat, e.g.
        ``with_changes(scale=30, water_level=2)``.
        """
        data = self.model_dump()
        sections = {
            "octave": OctaveConfig.model_fields,
            "brush": BrushConfig.model_fields,
        }
        for key, value in changes.items():
            for section, fields in sections.items():
                if key in fields:
                    data[section][key] = value
                    break
            else:
                if key not in TerrainSettings.model_fields:
                    raise TypeError(f"Unknown terrain setting: {key}")
                data[key] = value
        return TerrainSettings.model_validate(data)


def load_settings(path: Path) -> TerrainSettings:
    """Load terrain settings from a TOML file.

    Args:
        path: Path to the TOML file.

    Returns:
        Parsed TerrainSettings.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        tomllib.TOMLDecodeError: If the TOML is malformed.
    """
    with open(path, "rb") as f:
        data = tomllib.load(f)
    return TerrainSettings.model_validate(data)
