"""Terrain persistence: save and load sculpted heightfields."""

import json
import math
import zipfile
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

import numpy as np
import structlog

from .biomes import classify_grid
from .config import TerrainSettings
from .exceptions import TerrainFormatError
from .heightfield import (
    Grid,
    band_colors,
    build_grid,
    compute_vertex_normals,
    expected_vertex_count,
)
from .noise import PermutationTable

logger = structlog.get_logger()

FORMAT_VERSION = 1

_REQUIRED_ARRAYS = ("positions", "perm", "metadata")


@dataclass
class LoadedTerrain:
    """Terrain restored from disk."""

    grid: Grid
    table: PermutationTable
    settings: TerrainSettings
    metadata: dict


def save_terrain(
    path: Path,
    grid: Grid,
    table: PermutationTable,
    settings: TerrainSettings,
) -> None:
    """Save a terrain to disk.

    Uses numpy's compressed .npz format. The permutation table is stored so
    the same noise can be rebuilt on load.

    Args:
        path: Output path (should end with .npz).
        grid: Grid to save, including any sculpted elevation.
        table: Permutation table of the noise that produced the grid.
        settings: Settings in effect when the grid was produced.
    """
    metadata = {
        "version": FORMAT_VERSION,
        "resolution": grid.resolution,
        "width": grid.width,
        "depth": grid.depth,
        "settings": settings.model_dump(mode="json"),
        "generated_at": datetime.now(timezone.utc).isoformat(),
    }

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "wb") as f:
        np.savez_compressed(
            f,
            positions=grid.positions,
            perm=np.asarray(table.base),
            metadata=np.frombuffer(json.dumps(metadata).encode("utf-8"), dtype=np.uint8),
        )

    size_kb = path.stat().st_size / 1024
    logger.info("terrain_saved", path=str(path), size_kb=round(size_kb, 1))


def load_terrain(path: Path) -> LoadedTerrain:
    """Load a terrain from disk.

    Colors are re-derived from the stored elevations and the saved water
    level, and normals are recomputed.

    Args:
        path: Path to .npz file.

    Returns:
        LoadedTerrain with grid, permutation table, settings and metadata.

    Raises:
        FileNotFoundError: If file doesn't exist.
        TerrainFormatError: If file format is invalid.
    """
    if not path.exists():
        raise FileNotFoundError(f"Terrain file not found: {path}")

    arrays = _read_arrays(path)
    metadata = _decode_metadata(arrays["metadata"])

    if metadata.get("version") != FORMAT_VERSION:
        raise TerrainFormatError(
            f"Unsupported terrain format version: {metadata.get('version')}"
        )

    try:
        table = PermutationTable.from_permutation(arrays["perm"])
        settings = TerrainSettings.model_validate(metadata.get("settings") or {})
        resolution = int(metadata.get("resolution", 0))
        width = float(metadata.get("width", settings.terrain_width))
        depth = float(metadata.get("depth", settings.terrain_depth))
        positions = np.asarray(arrays["positions"], dtype=np.float64)
    except (TypeError, ValueError, OverflowError) as e:
        raise TerrainFormatError(f"Invalid terrain file: {e}") from e

    if not (0 < width < math.inf and 0 < depth < math.inf):
        raise TerrainFormatError(f"Invalid terrain file: extent {width} x {depth}")
    if positions.shape != (expected_vertex_count(resolution), 3):
        raise TerrainFormatError(
            f"Invalid terrain file: positions shape {positions.shape} "
            f"does not match resolution {resolution}"
        )

    grid = build_grid(resolution, width, depth)
    grid.positions[:, 2] = positions[:, 2]
    if grid.vertex_count:
        grid.bands = classify_grid(grid.positions[:, 2], settings.water_level)
        grid.colors = band_colors(grid.bands, settings.palette)
        grid.normals = compute_vertex_normals(grid.positions, grid.indices)

    logger.info(
        "terrain_loaded",
        path=str(path),
        resolution=grid.resolution,
        vertices=grid.vertex_count,
    )
    return LoadedTerrain(grid=grid, table=table, settings=settings, metadata=metadata)


def _read_arrays(path: Path) -> dict[str, np.ndarray]:
    """Read the required arrays, rejecting anything that isn't a terrain archive."""
    try:
        data = np.load(path, allow_pickle=False)
    except (OSError, EOFError, ValueError, zipfile.BadZipFile) as e:
        raise TerrainFormatError(f"Invalid terrain file: {e}") from e

    if not isinstance(data, np.lib.npyio.NpzFile):
        raise TerrainFormatError("Invalid terrain file: not an .npz archive")

    with data:
        for key in _REQUIRED_ARRAYS:
            if key not in data:
                raise TerrainFormatError(f"Invalid terrain file: missing '{key}' array")
        try:
            return {key: data[key] for key in _REQUIRED_ARRAYS}
        except (OSError, EOFError, ValueError, zipfile.BadZipFile) as e:
            raise TerrainFormatError(f"Invalid terrain file: {e}") from e


def _decode_metadata(raw: np.ndarray) -> dict:
    try:
        metadata = json.loads(raw.tobytes().decode("utf-8"))
    except ValueError as e:
        raise TerrainFormatError(f"Invalid terrain metadata: {e}") from e
    if not isinstance(metadata, dict):
        raise TerrainFormatError("Invalid terrain metadata: expected a JSON object")
    return metadata
