"""Tests for the minimap rasterizer."""

import numpy as np
import pytest
from PIL import Image

from terrainsynth.biomes import classify_color
from terrainsynth.config import OctaveConfig
from terrainsynth.fractal import fractal_elevation
from terrainsynth.minimap import render_minimap, save_minimap
from terrainsynth.noise import SimplexNoise


class TestRenderMinimap:
    """Tests for raster generation."""

    @pytest.mark.parametrize(("width", "height"), [(200, 200), (64, 32), (1, 1), (17, 50)])
    def test_output_dimensions(
        self, noise: SimplexNoise, octave_config: OctaveConfig, width: int, height: int
    ) -> None:
        """Raster has exactly the requested size."""
        raster = render_minimap(noise, width, height, 0.0, octave_config)
        assert raster.shape == (height, width, 4)
        assert raster.dtype == np.uint8

    def test_fully_opaque(self, noise: SimplexNoise, octave_config: OctaveConfig) -> None:
        """Every pixel has alpha 255."""
        raster = render_minimap(noise, 40, 30, 0.0, octave_config)
        assert np.all(raster[..., 3] == 255)

    def test_pixels_match_pipeline(self, noise: SimplexNoise) -> None:
        """Each pixel is the classified fractal elevation at its world point."""
        config = OctaveConfig(height_scale=20.0)
        width, height = 20, 10
        raster = render_minimap(noise, width, height, 1.5, config)

        for px, py in [(0, 0), (5, 3), (19, 9), (10, 5)]:
            world_x = px / width * 200.0 - 100.0
            world_y = py / height * 200.0 - 100.0
            elevation = fractal_elevation(noise, world_x, world_y, config)
            assert tuple(raster[py, px, :3]) == classify_color(elevation, 1.5)

    def test_independent_of_mesh_extent_sampling(self, noise: SimplexNoise) -> None:
        """Terrain extent sets the world window the raster covers."""
        config = OctaveConfig()
        small = render_minimap(noise, 16, 16, 0.0, config, terrain_width=50, terrain_depth=50)
        large = render_minimap(noise, 16, 16, 0.0, config, terrain_width=400, terrain_depth=400)
        assert small.shape == large.shape
        # Pixel (8, 8) is the world origin for any extent
        np.testing.assert_array_equal(small[8, 8], large[8, 8])

    def test_zero_size(self, noise: SimplexNoise, octave_config: OctaveConfig) -> None:
        """Zero width or height gives an empty raster of the requested shape."""
        assert render_minimap(noise, 0, 10, 0.0, octave_config).shape == (10, 0, 4)
        assert render_minimap(noise, 10, 0, 0.0, octave_config).shape == (0, 10, 4)

    def test_water_level_floods(self, noise: SimplexNoise, octave_config: OctaveConfig) -> None:
        """A very high water level paints everything deep water."""
        raster = render_minimap(noise, 16, 16, 1000.0, octave_config)
        assert np.all(raster[..., 0] == 0)
        assert np.all(raster[..., 1] == 68)
        assert np.all(raster[..., 2] == 136)


class TestSaveMinimap:
    """Tests for PNG output."""

    def test_writes_png(self, tmp_path, noise: SimplexNoise, octave_config: OctaveConfig) -> None:
        """Saved image has the raster's size and pixels."""
        raster = render_minimap(noise, 24, 12, 0.0, octave_config)
        path = tmp_path / "maps" / "minimap.png"
        save_minimap(path, raster)

        assert path.exists()
        with Image.open(path) as image:
            assert image.size == (24, 12)
            assert image.mode == "RGBA"
            np.testing.assert_array_equal(np.asarray(image), raster)
