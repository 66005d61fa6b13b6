"""Localized terrain deformation (sculpting brush)."""

import numpy as np
from numpy.typing import ArrayLike, NDArray


def brush_falloff(distance: ArrayLike, radius: float) -> NDArray[np.float64]:
    """Cosine falloff: 1 at the center, exactly 0 at and beyond ``radius``.

    Args:
        distance: Distances from the brush center.
        radius: Brush radius. Non-positive radii give zero everywhere.

    Returns:
        Weights in [0, 1] with the shape of ``distance``.
    """
    d = np.asarray(distance, dtype=np.float64)
    if radius <= 0:
        return np.zeros(d.shape, dtype=np.float64)
    inside = d < radius
    weights = np.cos(np.where(inside, d, 0.0) / radius * np.pi / 2)
    return np.where(inside, weights, 0.0)


def apply_brush(
    positions: NDArray[np.float64],
    center: ArrayLike,
    radius: float,
    strength: float,
) -> NDArray[np.bool_]:
    """Raise (or lower, for negative strength) vertices around a point.

    Distances are full 3D distances against each vertex's current
    elevation, so repeated strokes compound. The delta is additive and
    unbounded.

    Args:
        positions: (N, 3) vertex positions, modified in place (column 2).
        center: Brush center (x, y, z) in the same frame as ``positions``.
        radius: Brush radius.
        strength: Elevation added at distance 0.

    Returns:
        Boolean mask of the vertices that were modified.
    """
    if radius <= 0 or len(positions) == 0:
        return np.zeros(len(positions), dtype=bool)

    c = np.asarray(center, dtype=np.float64).reshape(3)
    distance = np.sqrt(np.sum((positions - c) ** 2, axis=1))

    affected = distance < radius
    positions[affected, 2] += strength * brush_falloff(distance[affected], radius)
    return affected
