"""Procedural terrain synthesis.

Simplex noise, fractal elevation, biome classification, sculpting and a
minimap overview for an editable heightfield mesh.
"""

from .biomes import Biome, classify, classify_color, classify_grid
from .brush import apply_brush, brush_falloff
from .config import (
    BiomePalette,
    BrushConfig,
    MinimapConfig,
    OctaveConfig,
    TerrainSettings,
    load_settings,
)
from .exceptions import TerrainError, TerrainFormatError
from .fractal import fractal_elevation, fractal_elevation_grid
from .heightfield import (
    Grid,
    HeightfieldBuffer,
    MeshBuffers,
    build_grid,
    compute_vertex_normals,
    expected_vertex_count,
)
from .minimap import render_minimap, save_minimap
from .noise import GRADIENTS_2D, PermutationTable, SimplexNoise
from .persistence import LoadedTerrain, load_terrain, save_terrain
from .session import TerrainSession
from .stats import biome_coverage

__all__ = [
    # Noise
    "GRADIENTS_2D",
    "PermutationTable",
    "SimplexNoise",
    # Fractal
    "fractal_elevation",
    "fractal_elevation_grid",
    # Biomes
    "Biome",
    "classify",
    "classify_color",
    "classify_grid",
    "biome_coverage",
    # Heightfield
    "Grid",
    "HeightfieldBuffer",
    "MeshBuffers",
    "build_grid",
    "compute_vertex_normals",
    "expected_vertex_count",
    # Brush
    "apply_brush",
    "brush_falloff",
    # Minimap
    "render_minimap",
    "save_minimap",
    # Session
    "TerrainSession",
    # Config
    "BiomePalette",
    "BrushConfig",
    "MinimapConfig",
    "OctaveConfig",
    "TerrainSettings",
    "load_settings",
    # Persistence
    "LoadedTerrain",
    "load_terrain",
    "save_terrain",
    # Exceptions
    "TerrainError",
    "TerrainFormatError",
]
