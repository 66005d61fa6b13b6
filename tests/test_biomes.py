"""Tests for biome classification."""

import numpy as np
import pytest

from terrainsynth.biomes import (
    BIOMES,
    Biome,
    biome_colors,
    biome_from_band,
    classify,
    classify_color,
    classify_grid,
)
from terrainsynth.config import BiomePalette


class TestClassify:
    """Tests for single-value classification."""

    @pytest.mark.parametrize(
        ("elevation", "expected"),
        [
            (-1.0, Biome.DEEP_WATER),
            (0.5, Biome.SHALLOW_WATER),
            (4.9, Biome.BEACH),
            (14.9, Biome.GRASSLAND),
            (24.9, Biome.LOW_MOUNTAINS),
            (30.0, Biome.HIGH_MOUNTAINS),
        ],
    )
    def test_bands_at_sea_level(self, elevation: float, expected: Biome) -> None:
        """Each band is reached at water level 0."""
        assert classify(elevation, 0.0) == expected

    def test_thresholds_are_exclusive_upper_bounds(self) -> None:
        """A value exactly on a threshold falls into the band above."""
        assert classify(0.0, 0.0) == Biome.SHALLOW_WATER
        assert classify(1.0, 0.0) == Biome.BEACH
        assert classify(5.0, 0.0) == Biome.GRASSLAND
        assert classify(15.0, 0.0) == Biome.LOW_MOUNTAINS
        assert classify(25.0, 0.0) == Biome.HIGH_MOUNTAINS

    def test_water_bands_follow_water_level(self) -> None:
        """Water bands are relative to the water level."""
        assert classify(8.0, 10.0) == Biome.DEEP_WATER
        assert classify(10.5, 10.0) == Biome.SHALLOW_WATER
        assert classify(11.0, 10.0) == Biome.GRASSLAND

    def test_high_water_floods_land_bands(self) -> None:
        """Water wins over land bands when the water level is above them."""
        assert classify(27.0, 30.0) == Biome.DEEP_WATER
        assert classify(30.5, 30.0) == Biome.SHALLOW_WATER
        assert classify(31.0, 30.0) == Biome.HIGH_MOUNTAINS

    def test_low_water_skips_to_beach(self) -> None:
        """With a low water level, low land is beach."""
        assert classify(-3.0, -5.0) == Biome.BEACH

    def test_monotonic_in_elevation(self) -> None:
        """Band index never decreases as elevation rises."""
        elevations = np.linspace(-20, 40, 601)
        bands = [classify(float(z), 0.0).band for z in elevations]
        assert bands == sorted(bands)


class TestBiome:
    """Tests for the Biome enum."""

    def test_band_order(self) -> None:
        """Bands are numbered lowest first."""
        assert [biome.band for biome in BIOMES] == list(range(6))
        assert Biome.DEEP_WATER.band == 0
        assert Biome.HIGH_MOUNTAINS.band == 5

    def test_band_round_trip(self) -> None:
        """biome_from_band inverts Biome.band."""
        for biome in Biome:
            assert biome_from_band(biome.band) == biome

    def test_water_flags(self) -> None:
        """Only the two water bands are water."""
        assert Biome.DEEP_WATER.is_water
        assert Biome.SHALLOW_WATER.is_water
        assert not Biome.BEACH.is_water
        assert not Biome.HIGH_MOUNTAINS.is_water


class TestColors:
    """Tests for biome colors."""

    def test_default_palette(self) -> None:
        """Default colors match the standard palette."""
        colors = biome_colors()
        assert colors.shape == (6, 3)
        assert colors.dtype == np.uint8
        assert tuple(colors[Biome.DEEP_WATER.band]) == (0, 68, 136)
        assert tuple(colors[Biome.SHALLOW_WATER.band]) == (0, 136, 204)
        assert tuple(colors[Biome.BEACH.band]) == (250, 235, 215)
        assert tuple(colors[Biome.GRASSLAND.band]) == (143, 188, 143)
        assert tuple(colors[Biome.LOW_MOUNTAINS.band]) == (169, 169, 169)
        assert tuple(colors[Biome.HIGH_MOUNTAINS.band]) == (255, 255, 255)

    def test_classify_color(self) -> None:
        """Elevation maps straight to its band color."""
        assert classify_color(2.0, 0.0) == (250, 235, 215)
        assert classify_color(-2.0, 0.0) == (0, 68, 136)

    def test_custom_palette(self) -> None:
        """A reconfigured palette changes colors but not bands."""
        palette = BiomePalette(beach="#ff0000")
        assert classify_color(2.0, 0.0, palette) == (255, 0, 0)
        assert classify(2.0, 0.0) == Biome.BEACH


class TestClassifyGrid:
    """Tests for vectorized classification."""

    @pytest.mark.parametrize("water_level", [-10.0, 0.0, 3.5, 12.0, 30.0])
    def test_matches_scalar(self, water_level: float) -> None:
        """Vectorized bands equal scalar classification at every water level."""
        elevations = np.linspace(-40, 50, 901)
        bands = classify_grid(elevations, water_level)
        expected = [classify(float(z), water_level).band for z in elevations]
        assert bands.tolist() == expected

    def test_preserves_shape(self) -> None:
        """Output has the input's shape."""
        elevations = np.zeros((7, 3))
        bands = classify_grid(elevations, 0.0)
        assert bands.shape == (7, 3)
        assert bands.dtype == np.uint8
