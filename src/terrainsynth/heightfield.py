"""Per-vertex heightfield mesh buffers.

The grid is laid out like a row-major plane mesh: ``resolution + 1`` vertices
per edge, row 0 at ``y = +depth / 2`` and column 0 at ``x = -width / 2``.
Elevation lives in the z column of ``positions``. Colors and normals are
derived data and are recomputed after every elevation change.
"""

from dataclasses import dataclass

import numpy as np
import structlog
from numpy.typing import ArrayLike, NDArray

from .biomes import biome_colors, classify_grid
from .brush import apply_brush
from .config import BiomePalette, OctaveConfig
from .fractal import fractal_elevation_grid
from .noise import SimplexNoise

logger = structlog.get_logger()


@dataclass
class Grid:
    """Vertex grid owned by a HeightfieldBuffer."""

    resolution: int
    width: float
    depth: float
    positions: NDArray[np.float64]
    colors: NDArray[np.float32]
    normals: NDArray[np.float32]
    indices: NDArray[np.uint32]
    bands: NDArray[np.uint8]

    @property
    def vertex_count(self) -> int:
        return len(self.positions)

    @property
    def elevation(self) -> NDArray[np.float64]:
        """Elevation as a (rows, cols) view onto the position buffer."""
        side = self.resolution + 1 if self.vertex_count else 0
        return self.positions[:, 2].reshape(side, side)


@dataclass(frozen=True)
class MeshBuffers:
    """Flat buffers handed to a renderer."""

    positions: NDArray[np.float32]
    colors: NDArray[np.float32]
    normals: NDArray[np.float32]
    indices: NDArray[np.uint32]


def expected_vertex_count(resolution: int) -> int:
    """Number of vertices for a grid with ``resolution`` segments per edge."""
    if resolution <= 0:
        return 0
    return (resolution + 1) ** 2


def build_grid(resolution: int, width: float, depth: float) -> Grid:
    """Allocate a flat grid at the given resolution.

    Args:
        resolution: Segments per edge. Zero or less gives an empty grid.
        width: Extent along x.
        depth: Extent along y.

    Returns:
        Grid with z = 0, zeroed colors, upward normals and triangle indices.
    """
    if resolution <= 0:
        return Grid(
            resolution=0,
            width=width,
            depth=depth,
            positions=np.zeros((0, 3), dtype=np.float64),
            colors=np.zeros((0, 3), dtype=np.float32),
            normals=np.zeros((0, 3), dtype=np.float32),
            indices=np.zeros(0, dtype=np.uint32),
            bands=np.zeros(0, dtype=np.uint8),
        )

    side = resolution + 1
    segment_width = width / resolution
    segment_depth = depth / resolution

    xs = np.arange(side, dtype=np.float64) * segment_width - width / 2
    ys = depth / 2 - np.arange(side, dtype=np.float64) * segment_depth
    grid_x, grid_y = np.meshgrid(xs, ys)

    positions = np.zeros((side * side, 3), dtype=np.float64)
    positions[:, 0] = grid_x.ravel()
    positions[:, 1] = grid_y.ravel()

    normals = np.zeros((side * side, 3), dtype=np.float32)
    normals[:, 2] = 1.0

    return Grid(
        resolution=resolution,
        width=width,
        depth=depth,
        positions=positions,
        colors=np.zeros((side * side, 3), dtype=np.float32),
        normals=normals,
        indices=_grid_indices(resolution),
        bands=np.zeros(side * side, dtype=np.uint8),
    )


def _grid_indices(resolution: int) -> NDArray[np.uint32]:
    """Two counter-clockwise triangles per cell."""
    side = resolution + 1
    iy, ix = np.meshgrid(np.arange(resolution), np.arange(resolution), indexing="ij")
    a = ix + side * iy
    b = ix + side * (iy + 1)
    c = (ix + 1) + side * (iy + 1)
    d = (ix + 1) + side * iy
    faces = np.stack([a, b, d, b, c, d], axis=-1)
    return faces.reshape(-1).astype(np.uint32)


def compute_vertex_normals(
    positions: NDArray[np.float64],
    indices: NDArray[np.uint32],
) -> NDArray[np.float32]:
    """Compute smooth vertex normals.

    Face normals (unnormalized, so weighted by triangle area) are summed
    onto each vertex and the result normalized. Vertices touched by no face
    keep a zero normal.

    Args:
        positions: (N, 3) vertex positions.
        indices: Flat triangle index list.

    Returns:
        (N, 3) unit normals.
    """
    normals = np.zeros(positions.shape, dtype=np.float64)
    if len(indices) == 0:
        return normals.astype(np.float32)

    faces = indices.reshape(-1, 3).astype(np.intp)
    va = positions[faces[:, 0]]
    vb = positions[faces[:, 1]]
    vc = positions[faces[:, 2]]
    face_normals = np.cross(vc - vb, va - vb)

    for corner in range(3):
        np.add.at(normals, faces[:, corner], face_normals)

    lengths = np.linalg.norm(normals, axis=1, keepdims=True)
    np.divide(normals, lengths, out=normals, where=lengths > 0)
    return normals.astype(np.float32)


class HeightfieldBuffer:
    """Authoritative mesh buffer for one terrain.

    Single writer: callers serialize ``regenerate`` and ``patch``. A
    regeneration builds a complete new Grid and swaps it in; if it fails the
    previous grid is left untouched.
    """

    def __init__(
        self,
        width: float = 200.0,
        depth: float = 200.0,
        palette: BiomePalette | None = None,
    ):
        """Initialize HeightfieldBuffer.

        Args:
            width: Plane extent along x, independent of resolution.
            depth: Plane extent along y, independent of resolution.
            palette: Biome colors (defaults to the standard palette).
        """
        self.width = width
        self.depth = depth
        self.palette = palette
        self.grid = build_grid(0, width, depth)

    def regenerate(
        self,
        noise: SimplexNoise,
        resolution: int,
        config: OctaveConfig,
        water_level: float,
        width: float | None = None,
        depth: float | None = None,
        palette: BiomePalette | None = None,
    ) -> Grid:
        """Rebuild the grid at ``resolution`` from fractal noise.

        New extents and palette are only adopted once the grid is built, so
        a failure leaves the buffer exactly as it was.

        Args:
            noise: Noise source.
            resolution: Segments per edge.
            config: Octave parameters.
            water_level: Water level for classification.
            width: New extent along x (None keeps the current one).
            depth: New extent along y (None keeps the current one).
            palette: New biome colors (None keeps the current ones).

        Returns:
            The newly installed Grid.
        """
        width = self.width if width is None else width
        depth = self.depth if depth is None else depth
        palette = self.palette if palette is None else palette

        grid = build_grid(resolution, width, depth)
        if grid.vertex_count:
            grid.positions[:, 2] = fractal_elevation_grid(
                noise, grid.positions[:, 0], grid.positions[:, 1], config
            )
            self._refresh_derived(grid, water_level, palette)

        self.width = width
        self.depth = depth
        self.palette = palette
        self.grid = grid
        logger.debug(
            "heightfield_regenerated",
            resolution=grid.resolution,
            vertices=grid.vertex_count,
        )
        return grid

    def patch(
        self,
        center: ArrayLike,
        radius: float,
        strength: float,
        water_level: float,
    ) -> int:
        """Apply a brush stroke in place.

        Args:
            center: Brush center (x, y, z) in grid coordinates.
            radius: Brush radius.
            strength: Elevation added at the center.
            water_level: Water level for re-classification.

        Returns:
            Number of vertices modified.
        """
        affected = apply_brush(self.grid.positions, center, radius, strength)
        count = int(np.count_nonzero(affected))
        if count:
            self._refresh_derived(self.grid, water_level, self.palette)
        return count

    def recolor(self, water_level: float, palette: BiomePalette | None = None) -> None:
        """Re-classify the current elevations without touching them.

        Args:
            water_level: Water level for classification.
            palette: New biome colors (None keeps the current ones).
        """
        palette = self.palette if palette is None else palette
        grid = self.grid
        if grid.vertex_count:
            bands = classify_grid(grid.positions[:, 2], water_level)
            grid.colors = band_colors(bands, palette)
            grid.bands = bands
        self.palette = palette

    def install(self, grid: Grid) -> None:
        """Swap in a prebuilt grid, e.g. one restored from disk."""
        self.width = grid.width
        self.depth = grid.depth
        self.grid = grid

    def snapshot(self) -> MeshBuffers:
        """Copy the current grid into flat renderer buffers."""
        grid = self.grid
        return MeshBuffers(
            positions=grid.positions.astype(np.float32).reshape(-1),
            colors=grid.colors.reshape(-1).copy(),
            normals=grid.normals.reshape(-1).copy(),
            indices=grid.indices.copy(),
        )

    def _refresh_derived(
        self, grid: Grid, water_level: float, palette: BiomePalette | None
    ) -> None:
        grid.bands = classify_grid(grid.positions[:, 2], water_level)
        grid.colors = band_colors(grid.bands, palette)
        grid.normals = compute_vertex_normals(grid.positions, grid.indices)


def band_colors(
    bands: NDArray[np.uint8],
    palette: BiomePalette | None = None,
) -> NDArray[np.float32]:
    """Map band indices to float RGB colors in [0, 1]."""
    lookup = biome_colors(palette).astype(np.float32) / 255.0
    return lookup[bands]
