"""Low-resolution overview raster.

The minimap re-samples the fractal pipeline directly at its own resolution
instead of downsampling the mesh, so its size is independent of the grid
resolution.
"""

from pathlib import Path

import numpy as np
import structlog
from numpy.typing import NDArray
from PIL import Image

from .biomes import biome_colors, classify_grid
from .config import BiomePalette, OctaveConfig
from .fractal import fractal_elevation_grid
from .noise import SimplexNoise

logger = structlog.get_logger()


def render_minimap(
    noise: SimplexNoise,
    width: int,
    height: int,
    water_level: float,
    config: OctaveConfig,
    terrain_width: float = 200.0,
    terrain_depth: float = 200.0,
    palette: BiomePalette | None = None,
) -> NDArray[np.uint8]:
    """Render an RGBA overview of the terrain.

    Pixel (px, py) samples world point
    ``(px / width * terrain_width - terrain_width / 2,
    py / height * terrain_depth - terrain_depth / 2)``.

    Args:
        noise: Noise source shared with the mesh.
        width: Raster width in pixels.
        height: Raster height in pixels.
        water_level: Elevation of the water plane.
        config: Octave parameters shared with the mesh.
        terrain_width: World extent along x.
        terrain_depth: World extent along y.
        palette: Biome colors.

    Returns:
        (height, width, 4) uint8 array with alpha 255.
    """
    width = max(int(width), 0)
    height = max(int(height), 0)
    raster = np.zeros((height, width, 4), dtype=np.uint8)
    if width == 0 or height == 0:
        return raster

    world_x = np.arange(width, dtype=np.float64) / width * terrain_width - terrain_width / 2
    world_y = np.arange(height, dtype=np.float64) / height * terrain_depth - terrain_depth / 2

    elevation = fractal_elevation_grid(noise, world_x[np.newaxis, :], world_y[:, np.newaxis], config)
    bands = classify_grid(elevation, water_level)

    raster[..., :3] = biome_colors(palette)[bands]
    raster[..., 3] = 255
    return raster


def save_minimap(path: Path, raster: NDArray[np.uint8]) -> None:
    """Save a minimap raster as a PNG.

    Args:
        path: Output path.
        raster: (height, width, 4) uint8 raster from :func:`render_minimap`.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.fromarray(raster).save(path)
    logger.info("minimap_saved", path=str(path), width=raster.shape[1], height=raster.shape[0])
