from __future__ import annotations

import numpy as np

_GRADIENTS = np.array(
    [
        [1.0, 0.0],
        [-1.0, 0.0],
        [0.0, 1.0],
        [0.0, -1.0],
        [1.0, 1.0],
        [-1.0, 1.0],
        [1.0, -1.0],
        [-1.0, -1.0],
    ],
    dtype=np.float64,
)
_GRADIENTS /= np.linalg.norm(_GRADIENTS, axis=1, keepdims=True)


def fade(t: np.ndarray) -> np.ndarray:
    """Quintic fade curve of Improved Perlin Noise."""
    return t * t * t * (t * (t * 6.0 - 15.0) + 10.0)


def lerp(a: np.ndarray, b: np.ndarray, t: np.ndarray) -> np.ndarray:
    return a + t * (b - a)


def permutation_table(seed: int) -> np.ndarray:
    rng = np.random.default_rng(int(seed))
    p = rng.permutation(256).astype(np.int32)
    return np.concatenate([p, p])


class GradientNoise2D:
    """Vectorized 2D Perlin gradient noise, roughly in [-1, 1]."""

    def __init__(self, *, seed: int = 0):
        self.seed = int(seed)
        self.perm = permutation_table(self.seed)

    def _corner(self, hashed: np.ndarray, dx: np.ndarray, dy: np.ndarray) -> np.ndarray:
        g = _GRADIENTS[hashed % len(_GRADIENTS)]
        return g[..., 0] * dx + g[..., 1] * dy

    def noise(self, x: np.ndarray, y: np.ndarray) -> np.ndarray:
        x = np.asarray(x, dtype=np.float64)
        y = np.asarray(y, dtype=np.float64)

        x0 = np.floor(x)
        y0 = np.floor(y)
        xi = x0.astype(np.int64) & 255
        yi = y0.astype(np.int64) & 255
        xf = x - x0
        yf = y - y0

        p = self.perm
        row0 = p[xi]
        row1 = p[(xi + 1) & 255]

        n00 = self._corner(p[row0 + yi], xf, yf)
        n01 = self._corner(p[row0 + ((yi + 1) & 255)], xf, yf - 1.0)
        n10 = self._corner(p[row1 + yi], xf - 1.0, yf)
        n11 = self._corner(p[row1 + ((yi + 1) & 255)], xf - 1.0, yf - 1.0)

        u = fade(xf)
        v = fade(yf)
        return lerp(lerp(n00, n10, u), lerp(n01, n11, u), v)


def fbm2(
    noise: GradientNoise2D,
    x: np.ndarray,
    y: np.ndarray,
    *,
    octaves: int = 5,
    lacunarity: float = 2.0,
    gain: float = 0.6,
    frequency: float = 2.0,
) -> np.ndarray:
    """Fractal Brownian motion, normalized by the total amplitude."""

    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)

    amp = 1.0
    freq = float(frequency)
    total = np.zeros_like(x, dtype=np.float64)
    amp_sum = 0.0

    for _ in range(max(int(octaves), 1)):
        total += amp * noise.noise(x * freq, y * freq)
        amp_sum += amp
        amp *= float(gain)
        freq *= float(lacunarity)

    return total / amp_sum
