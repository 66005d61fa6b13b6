"""Height-based biome classification relative to the water level."""

from enum import Enum

import numpy as np
from numpy.typing import ArrayLike, NDArray

from .config import BiomePalette

# Exclusive upper bounds for the land bands, in world units
BEACH_MAX = 5.0
GRASSLAND_MAX = 15.0
LOW_MOUNTAINS_MAX = 25.0

# Band above the water plane that still counts as shallow water
SHALLOW_WATER_DEPTH = 1.0


class Biome(str, Enum):
    """Terrain color bands, lowest first."""

    DEEP_WATER = "deep_water"
    SHALLOW_WATER = "shallow_water"
    BEACH = "beach"
    GRASSLAND = "grassland"
    LOW_MOUNTAINS = "low_mountains"
    HIGH_MOUNTAINS = "high_mountains"

    @property
    def band(self) -> int:
        """Compact band index (0 = deep water) used in arrays."""
        return _BAND_INDEX[self]

    @property
    def is_water(self) -> bool:
        return self in _WATER_BIOMES


BIOMES = tuple(Biome)

_BAND_INDEX = {biome: index for index, biome in enumerate(BIOMES)}

_WATER_BIOMES = frozenset({
    Biome.DEEP_WATER,
    Biome.SHALLOW_WATER,
})

_DEFAULT_PALETTE = BiomePalette()


def classify(elevation: float, water_level: float) -> Biome:
    """Classify a single elevation. First matching band wins."""
    if elevation < water_level:
        return Biome.DEEP_WATER
    if elevation < water_level + SHALLOW_WATER_DEPTH:
        return Biome.SHALLOW_WATER
    if elevation < BEACH_MAX:
        return Biome.BEACH
    if elevation < GRASSLAND_MAX:
        return Biome.GRASSLAND
    if elevation < LOW_MOUNTAINS_MAX:
        return Biome.LOW_MOUNTAINS
    return Biome.HIGH_MOUNTAINS


def biome_from_band(band: int) -> Biome:
    """Convert a band index back to its Biome."""
    return BIOMES[band]


def biome_colors(palette: BiomePalette | None = None) -> NDArray[np.uint8]:
    """Return a (6, 3) uint8 lookup table of band colors."""
    palette = palette or _DEFAULT_PALETTE
    return np.array(palette.rgb(), dtype=np.uint8)


def classify_color(
    elevation: float,
    water_level: float,
    palette: BiomePalette | None = None,
) -> tuple[int, int, int]:
    """Classify an elevation straight to its RGB byte triple."""
    palette = palette or _DEFAULT_PALETTE
    return palette.rgb()[classify(elevation, water_level).band]


def classify_grid(elevations: ArrayLike, water_level: float) -> NDArray[np.uint8]:
    """Classify an elevation array into band indices.

    Bands are assigned from the highest threshold down so that the lowest
    matching band overwrites, which reproduces first-match-wins ordering of
    :func:`classify` even when ``water_level`` sits above the land bands.

    Args:
        elevations: Elevation values (any shape).
        water_level: Elevation of the water plane.

    Returns:
        Array of band indices with the same shape as ``elevations``.
    """
    z = np.asarray(elevations, dtype=np.float64)
    bands = np.full(z.shape, Biome.HIGH_MOUNTAINS.band, dtype=np.uint8)

    bands[z < LOW_MOUNTAINS_MAX] = Biome.LOW_MOUNTAINS.band
    bands[z < GRASSLAND_MAX] = Biome.GRASSLAND.band
    bands[z < BEACH_MAX] = Biome.BEACH.band
    bands[z < water_level + SHALLOW_WATER_DEPTH] = Biome.SHALLOW_WATER.band
    bands[z < water_level] = Biome.DEEP_WATER.band

    return bands
