from __future__ import annotations

import time

import numpy as np

from isleform.elevation import ElevationField
from isleform.erosion import ErosionSimulator
from isleform.watershed import WatershedBuilder
from relief.island import IslandHeight


def _timeit(label: str, fn):
    t0 = time.perf_counter()
    out = fn()
    t1 = time.perf_counter()
    print(f"{label}: {(t1 - t0) * 1000.0:.2f} ms")
    return out


def main() -> None:
    """Quick CPU benchmark of the three generation stages.

    Droplets run one at a time in Python, so erosion dominates.
    """

    seed = 0
    size = 256
    cycles = 5_000

    height_fn = IslandHeight(seed=seed, size=size)
    field = _timeit(
        f"Elevation: {size}x{size}",
        lambda: ElevationField.from_height_function(size, height_fn),
    )

    sim = ErosionSimulator(field, np.random.default_rng(seed))
    _timeit(f"Erosion: {cycles} cycles", lambda: sim.erode(cycles))

    builder = WatershedBuilder(field)
    rivers = _timeit("Watershed", builder.build)
    print(f"rivers={len(rivers)} segments={len(builder.segments(rivers))}")


if __name__ == "__main__":
    main()
