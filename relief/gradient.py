from __future__ import annotations

import math

import numpy as np


class IslandGradient:
    """Falloff field that shapes the landmass, in unit coordinates.

    A strong peak sits at the center with two weaker satellite peaks at random
    angles; a fourth point subtracts, carving a bay. Values are clamped to
    [0, 1].
    """

    def __init__(self, rng: np.random.Generator, *, quotient: float = 0.025):
        self.quotient = float(quotient)

        center = 0.5
        angle1 = float(rng.uniform(0.0, math.tau))
        angle2 = float(rng.uniform(0.0, math.tau))
        choice = int(rng.integers(1, 3))
        angle3 = angle1 + math.pi if choice == 1 else 0.5 * (angle1 + angle2)

        self.points = np.array(
            [
                [center, center],
                [center + 0.225 * math.cos(angle1), center + 0.225 * math.sin(angle1)],
                [center + 0.25 * math.cos(angle2), center + 0.25 * math.sin(angle2)],
                [center + 0.275 * math.cos(angle3), center + 0.275 * math.sin(angle3)],
            ],
            dtype=np.float64,
        )

    def at(self, x: np.ndarray, y: np.ndarray) -> np.ndarray:
        x = np.asarray(x, dtype=np.float64)
        y = np.asarray(y, dtype=np.float64)

        g = []
        for px, py in self.points:
            d = np.hypot(x - px, y - py)
            g.append(self.quotient / np.maximum(d, 1e-9))

        value = (g[0] * 1.4 + g[1] * 0.5 + g[2] * 0.75 - g[3] * g[3]) * 1.5
        return np.clip(value, 0.0, 1.0)
