"""2D simplex gradient noise.

Provides a seeded permutation table and a simplex noise sampler with both a
scalar and a vectorized (numpy) evaluation path. The two paths perform the
same floating point operations in the same order, so they agree
element-wise.
"""

import math
from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike, NDArray

# Skew/unskew factors between input space and the triangular lattice
F2 = 0.5 * (math.sqrt(3.0) - 1.0)
G2 = (3.0 - math.sqrt(3.0)) / 6.0

# Normalizes the summed corner contributions to roughly [-1, 1]
NOISE_SCALE = 70.0

# Coordinates beyond this magnitude (or non-finite) sample as 0.0
MAX_COORDINATE = 1e300

# Twelve gradient directions indexed by perm_mod12. Diagonals fill slots
# 0-3 and 8-11, axis directions slots 4-7.
GRADIENTS_2D = np.array(
    [
        [1, 1], [-1, 1], [1, -1], [-1, -1],
        [1, 0], [-1, 0], [0, 1], [0, -1],
        [1, 1], [-1, 1], [1, -1], [-1, -1],
    ],
    dtype=np.float64,
)

_GRAD_X = tuple(float(g) for g in GRADIENTS_2D[:, 0])
_GRAD_Y = tuple(float(g) for g in GRADIENTS_2D[:, 1])


@dataclass(frozen=True)
class PermutationTable:
    """Shuffled lattice hash table.

    ``perm`` holds a permutation of 0..255 repeated twice so that
    ``perm[i + perm[j]]`` never needs an extra wrap. ``perm_mod12`` caches
    ``perm % 12`` as the gradient index.
    """

    perm: NDArray[np.uint8]
    perm_mod12: NDArray[np.uint8]

    @classmethod
    def from_permutation(cls, base: ArrayLike) -> "PermutationTable":
        """Build a table from a 256-entry permutation of 0..255.

        Raises:
            ValueError: If ``base`` is not a permutation of 0..255.
        """
        p = np.asarray(base)
        if p.shape != (256,) or not np.array_equal(np.sort(p), np.arange(256)):
            raise ValueError("Permutation table base must be a permutation of 0..255")

        perm = p[np.arange(512) & 255].astype(np.uint8)
        perm_mod12 = (perm % 12).astype(np.uint8)
        perm.flags.writeable = False
        perm_mod12.flags.writeable = False
        return cls(perm=perm, perm_mod12=perm_mod12)

    @classmethod
    def shuffled(cls, rng: np.random.Generator) -> "PermutationTable":
        """Build a table from a Fisher-Yates shuffle of 0..255.

        Args:
            rng: Uniform random source driving the shuffle.
        """
        p = list(range(256))
        for i in range(255, 0, -1):
            r = int(rng.random() * (i + 1))
            p[i], p[r] = p[r], p[i]
        return cls.from_permutation(p)

    @property
    def base(self) -> NDArray[np.uint8]:
        """The underlying 256-entry permutation."""
        return self.perm[:256]


class SimplexNoise:
    """Seeded 2D simplex noise sampler.

    Each instance owns one immutable PermutationTable. Regenerating terrain
    means building a new instance; samples taken from an old instance stay
    reproducible against that instance only.
    """

    def __init__(
        self,
        seed: int | None = None,
        rng: np.random.Generator | None = None,
    ):
        """Initialize SimplexNoise.

        Args:
            seed: Seed for the permutation shuffle. None draws fresh entropy;
                the seed used is available as ``self.seed``.
            rng: Explicit random source. Takes precedence over ``seed``, in
                which case ``self.seed`` is None.
        """
        if rng is None:
            if seed is None:
                seed = int(np.random.SeedSequence().entropy % (2**63))
            rng = np.random.default_rng(seed)
        else:
            seed = None
        self.seed = seed
        self.table = PermutationTable.shuffled(rng)
        self._perm = self.table.perm.tolist()
        self._perm_mod12 = self.table.perm_mod12.tolist()

    @classmethod
    def from_table(cls, table: PermutationTable) -> "SimplexNoise":
        """Rebuild a sampler around an existing table (e.g. loaded from disk)."""
        noise = cls.__new__(cls)
        noise.seed = None
        noise.table = table
        noise._perm = table.perm.tolist()
        noise._perm_mod12 = table.perm_mod12.tolist()
        return noise

    def sample(self, x: float, y: float) -> float:
        """Sample noise at a single point.

        Returns:
            Noise value in roughly [-1, 1]. Non-finite or out-of-range
            coordinates give 0.0.
        """
        if not (abs(x) <= MAX_COORDINATE and abs(y) <= MAX_COORDINATE):
            return 0.0

        s = (x + y) * F2
        i = math.floor(x + s)
        j = math.floor(y + s)
        t = (i + j) * G2
        x0 = x - (i - t)
        y0 = y - (j - t)

        # Strict comparison: on the diagonal the (0, 1) corner is chosen
        if x0 > y0:
            i1, j1 = 1, 0
        else:
            i1, j1 = 0, 1

        x1 = x0 - i1 + G2
        y1 = y0 - j1 + G2
        x2 = x0 - 1.0 + 2.0 * G2
        y2 = y0 - 1.0 + 2.0 * G2

        ii = i & 255
        jj = j & 255

        n0 = self._corner(x0, y0, ii, jj)
        n1 = self._corner(x1, y1, ii + i1, jj + j1)
        n2 = self._corner(x2, y2, ii + 1, jj + 1)

        return NOISE_SCALE * (n0 + n1 + n2)

    def _corner(self, x: float, y: float, i: int, j: int) -> float:
        """Contribution of one simplex corner."""
        t = 0.5 - x * x - y * y
        if t < 0:
            return 0.0
        gi = self._perm_mod12[i + self._perm[j]]
        return t * t * t * t * (_GRAD_X[gi] * x + _GRAD_Y[gi] * y)

    def sample_grid(self, xs: ArrayLike, ys: ArrayLike) -> NDArray[np.float64]:
        """Sample noise at many points at once.

        Args:
            xs: X coordinates (any shape).
            ys: Y coordinates, broadcastable against ``xs``.

        Returns:
            Array of noise values with the broadcast shape of the inputs.
            Points with a non-finite or out-of-range coordinate are 0.0, as in
            :meth:`sample`.
        """
        x, y = np.broadcast_arrays(
            np.asarray(xs, dtype=np.float64), np.asarray(ys, dtype=np.float64)
        )
        valid = (np.abs(x) <= MAX_COORDINATE) & (np.abs(y) <= MAX_COORDINATE)
        if not valid.all():
            x = np.where(valid, x, 0.0)
            y = np.where(valid, y, 0.0)

        s = (x + y) * F2
        # Lattice cells stay float so huge coordinates hash like the scalar path
        i = np.floor(x + s)
        j = np.floor(y + s)
        t = (i + j) * G2
        x0 = x - (i - t)
        y0 = y - (j - t)

        upper = x0 > y0
        i1 = upper.astype(np.int64)
        j1 = 1 - i1

        x1 = x0 - i1 + G2
        y1 = y0 - j1 + G2
        x2 = x0 - 1.0 + 2.0 * G2
        y2 = y0 - 1.0 + 2.0 * G2

        ii = np.mod(i, 256).astype(np.int64)
        jj = np.mod(j, 256).astype(np.int64)

        perm = self.table.perm.astype(np.int64)
        perm_mod12 = self.table.perm_mod12.astype(np.int64)

        with np.errstate(over="ignore", invalid="ignore"):
            total = (
                _corner_grid(x0, y0, perm_mod12[ii + perm[jj]])
                + _corner_grid(x1, y1, perm_mod12[ii + i1 + perm[jj + j1]])
                + _corner_grid(x2, y2, perm_mod12[ii + 1 + perm[jj + 1]])
            )
        return np.where(valid, NOISE_SCALE * total, 0.0)


def _corner_grid(
    x: NDArray[np.float64],
    y: NDArray[np.float64],
    gi: NDArray[np.int64],
) -> NDArray[np.float64]:
    """Vectorized corner contribution; zero where the falloff is negative."""
    t = 0.5 - x * x - y * y
    dot = GRADIENTS_2D[gi, 0] * x + GRADIENTS_2D[gi, 1] * y
    contribution = t * t * t * t * dot
    return np.where(t < 0, 0.0, contribution)
