"""Fractal (multi-octave) elevation built on simplex noise."""

import numpy as np
from numpy.typing import ArrayLike, NDArray

from .config import OctaveConfig
from .noise import SimplexNoise


def fractal_elevation(
    noise: SimplexNoise,
    x: float,
    y: float,
    config: OctaveConfig,
) -> float:
    """Compute the elevation at a single world-space point.

    Sums ``config.octaves`` noise samples, each at ``lacunarity`` times the
    previous frequency and ``persistence`` times the previous amplitude,
    then multiplies by ``height_scale``.

    Args:
        noise: Noise source.
        x: World x coordinate.
        y: World y coordinate.
        config: Octave parameters.

    Returns:
        Elevation in world units. Exactly 0.0 when ``octaves <= 0``.
    """
    total = 0.0
    amplitude = 1.0
    frequency = 1.0
    for _ in range(config.octaves):
        value = noise.sample(x / config.scale * frequency, y / config.scale * frequency)
        total += value * amplitude
        amplitude *= config.persistence
        frequency *= config.lacunarity
    return total * config.height_scale


def fractal_elevation_grid(
    noise: SimplexNoise,
    xs: ArrayLike,
    ys: ArrayLike,
    config: OctaveConfig,
) -> NDArray[np.float64]:
    """Vectorized form of :func:`fractal_elevation`.

    Used for both mesh vertices and minimap pixels so that the two stay
    consistent at their own resolutions.

    Args:
        noise: Noise source.
        xs: World x coordinates (any shape).
        ys: World y coordinates, broadcastable against ``xs``.
        config: Octave parameters.

    Returns:
        Elevation array with the broadcast shape of the inputs.
    """
    x, y = np.broadcast_arrays(
        np.asarray(xs, dtype=np.float64), np.asarray(ys, dtype=np.float64)
    )
    total = np.zeros(x.shape, dtype=np.float64)

    amplitude = 1.0
    frequency = 1.0
    for _ in range(config.octaves):
        # Runaway frequencies become non-finite coordinates, which sample as 0
        with np.errstate(over="ignore", invalid="ignore"):
            xf = x / config.scale * frequency
            yf = y / config.scale * frequency
        values = noise.sample_grid(xf, yf)
        total += values * amplitude
        amplitude *= config.persistence
        frequency *= config.lacunarity

    return total * config.height_scale
