from __future__ import annotations

import numpy as np

from relief.gradient import IslandGradient
from relief.noise import GradientNoise2D, fbm2


class IslandHeight:
    """Default raw height function: fractal noise lifted by the island gradient.

    Deterministic for a given seed and size. Coordinates are grid cells; they
    are scaled to the unit square before sampling.
    """

    vectorized = True

    def __init__(self, *, seed: int, size: int):
        size = int(size)
        if size <= 0:
            raise ValueError("size must be > 0")
        self.seed = int(seed)
        self.size = size

        rng = np.random.default_rng(self.seed)
        self.gradient = IslandGradient(rng)
        self.noise = GradientNoise2D(seed=int(rng.integers(0, 2**31 - 1)))

    def __call__(self, x: np.ndarray, y: np.ndarray) -> np.ndarray:
        scale = float(self.size)
        u = np.asarray(x, dtype=np.float64) / scale
        v = np.asarray(y, dtype=np.float64) / scale

        n = fbm2(self.noise, u, v, octaves=5, lacunarity=2.0, gain=0.6, frequency=2.0)
        # Pull the noise up into a mostly positive band before adding the shape.
        return (n + 0.5) / 2.0 + self.gradient.at(u, v)
