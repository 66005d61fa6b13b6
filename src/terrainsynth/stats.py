"""Biome coverage statistics."""

import numpy as np
import structlog
from numpy.typing import NDArray

from .biomes import BIOMES, Biome

logger = structlog.get_logger()


def biome_coverage(bands: NDArray[np.uint8]) -> dict[Biome, float]:
    """Fraction of cells in each biome band.

    Returns:
        Mapping of every Biome to its fraction; all zeros for an empty array.
    """
    total = bands.size
    counts = np.bincount(bands.reshape(-1), minlength=len(BIOMES))
    if total == 0:
        return {biome: 0.0 for biome in BIOMES}
    return {biome: float(counts[biome.band]) / total for biome in BIOMES}


def log_biome_coverage(bands: NDArray[np.uint8], source: str) -> None:
    """Log biome coverage percentages."""
    coverage = biome_coverage(bands)
    logger.info(
        "biome_coverage",
        source=source,
        cells=int(bands.size),
        **{biome.value: f"{fraction:.1%}" for biome, fraction in coverage.items()},
    )
