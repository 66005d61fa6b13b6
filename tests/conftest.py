"""Shared test fixtures for terrain synthesis tests."""

import pytest
import structlog

from terrainsynth.config import MinimapConfig, OctaveConfig, TerrainSettings
from terrainsynth.noise import SimplexNoise
from terrainsynth.session import TerrainSession


@pytest.fixture(autouse=True)
def reset_structlog():
    """Undo any structlog configuration a test (e.g. the CLI) applies."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def noise() -> SimplexNoise:
    """Noise with a fixed seed."""
    return SimplexNoise(seed=1234)


@pytest.fixture
def octave_config() -> OctaveConfig:
    """Default octave parameters."""
    return OctaveConfig()


@pytest.fixture
def flat_config() -> OctaveConfig:
    """Zero octaves: every elevation is exactly 0."""
    return OctaveConfig(octaves=0)


@pytest.fixture
def small_settings() -> TerrainSettings:
    """Small, seeded terrain that generates quickly."""
    return TerrainSettings(
        seed=7,
        resolution=16,
        minimap=MinimapConfig(width=32, height=24),
    )


@pytest.fixture
def session(small_settings: TerrainSettings) -> TerrainSession:
    """Generated session on the small settings."""
    session = TerrainSession(small_settings)
    session.generate()
    return session
