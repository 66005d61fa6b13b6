"""Terrain session: wires noise, mesh buffer, brush and minimap together."""

from typing import Any

import numpy as np
import structlog
from numpy.typing import ArrayLike, NDArray

from .config import TerrainSettings
from .heightfield import Grid, HeightfieldBuffer, MeshBuffers
from .minimap import render_minimap
from .noise import SimplexNoise
from .persistence import LoadedTerrain
from .stats import log_biome_coverage

logger = structlog.get_logger()

# Changing any of these requires resampling the noise
_SYNTHESIS_FIELDS = frozenset({"resolution", "terrain_width", "terrain_depth", "octave"})
# These only re-classify the current elevations
_RECOLOR_FIELDS = frozenset({"water_level", "palette"})


class TerrainSession:
    """Owns one editable terrain and its overview raster.

    All mutations go through this class so that colors, normals and the
    minimap are refreshed after every elevation change. Not thread-safe:
    drive it from one thread.
    """

    def __init__(self, settings: TerrainSettings | None = None):
        """Initialize TerrainSession.

        Args:
            settings: Terrain settings. Defaults are used when omitted.
        """
        self.settings = settings or TerrainSettings()
        self.noise = SimplexNoise(seed=self.settings.seed)
        self.buffer = self._new_buffer()
        self.minimap: NDArray[np.uint8] = np.zeros((0, 0, 4), dtype=np.uint8)

    @classmethod
    def from_saved(cls, loaded: LoadedTerrain) -> "TerrainSession":
        """Resume a session from a terrain restored from disk."""
        session = cls(loaded.settings)
        session.noise = SimplexNoise.from_table(loaded.table)
        session.buffer.install(loaded.grid)
        session.refresh_minimap()
        return session

    @property
    def grid(self) -> Grid:
        return self.buffer.grid

    def generate(self) -> None:
        """Synthesize the mesh from the current noise and settings."""
        self._rebuild(self.settings, self.noise)
        self.refresh_minimap()

    def regenerate(self) -> None:
        """Discard the noise and build a new, unrelated terrain.

        A pinned ``settings.seed`` reproduces the same terrain instead.
        """
        noise = SimplexNoise(seed=self.settings.seed)
        self._rebuild(self.settings, noise)
        self.noise = noise
        logger.info("noise_regenerated", seed=noise.seed)
        self.refresh_minimap()

    def update_settings(self, **changes: Any) -> TerrainSettings:
        """Apply setting changes and refresh whatever they affect.

        Water level and palette changes only re-classify colors, so sculpted
        elevation survives. Synthesis changes rebuild the mesh from noise.
        The new settings are committed only after the mesh is updated.

        Returns:
            The new settings.
        """
        previous = self.settings
        settings = previous.with_changes(**changes)

        changed = {
            name
            for name in TerrainSettings.model_fields
            if getattr(previous, name) != getattr(settings, name)
        }
        if not changed:
            return previous

        logger.debug("settings_changed", fields=sorted(changed))

        if changed & _SYNTHESIS_FIELDS:
            self._rebuild(settings, self.noise)
        elif changed & _RECOLOR_FIELDS:
            self.buffer.recolor(settings.water_level, settings.palette)

        self.settings = settings
        if changed & (_SYNTHESIS_FIELDS | _RECOLOR_FIELDS | {"minimap"}):
            self.refresh_minimap()
        return settings

    def set_water_level(self, level: float) -> None:
        """Move the water plane and re-classify the terrain."""
        self.update_settings(water_level=level)

    def sculpt(
        self,
        center: ArrayLike,
        radius: float | None = None,
        strength: float | None = None,
    ) -> int:
        """Apply one brush stroke around ``center``.

        Args:
            center: Brush center (x, y, z) in grid coordinates.
            radius: Brush radius (defaults to ``settings.brush.radius``).
            strength: Peak elevation delta (defaults to ``settings.brush.strength``).

        Returns:
            Number of vertices modified.
        """
        brush = self.settings.brush
        radius = brush.radius if radius is None else radius
        strength = brush.strength if strength is None else strength

        count = self.buffer.patch(center, radius, strength, self.settings.water_level)
        logger.debug("terrain_sculpted", radius=radius, strength=strength, vertices=count)
        if count:
            self.refresh_minimap()
        return count

    def refresh_minimap(self) -> NDArray[np.uint8]:
        """Re-render the overview raster from the noise pipeline."""
        settings = self.settings
        self.minimap = render_minimap(
            self.noise,
            settings.minimap.width,
            settings.minimap.height,
            settings.water_level,
            settings.octave,
            terrain_width=settings.terrain_width,
            terrain_depth=settings.terrain_depth,
            palette=settings.palette,
        )
        return self.minimap

    def snapshot(self) -> MeshBuffers:
        """Latest complete mesh buffers for a renderer."""
        return self.buffer.snapshot()

    def _new_buffer(self) -> HeightfieldBuffer:
        settings = self.settings
        return HeightfieldBuffer(
            width=settings.terrain_width,
            depth=settings.terrain_depth,
            palette=settings.palette,
        )

    def _rebuild(self, settings: TerrainSettings, noise: SimplexNoise) -> None:
        grid = self.buffer.regenerate(
            noise,
            settings.resolution,
            settings.octave,
            settings.water_level,
            width=settings.terrain_width,
            depth=settings.terrain_depth,
            palette=settings.palette,
        )
        logger.info(
            "terrain_generated",
            resolution=grid.resolution,
            vertices=grid.vertex_count,
            seed=noise.seed,
        )
        if grid.vertex_count:
            log_biome_coverage(grid.bands, source="mesh")
