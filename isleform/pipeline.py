from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

import numpy as np
import structlog

from isleform.config import IslandConfig
from isleform.elevation import ElevationField, HeightFunction
from isleform.erosion import ErosionSimulator
from isleform.river import River
from isleform.watershed import RiverSegment, WatershedBuilder
from relief.island import IslandHeight

logger = structlog.get_logger()


@dataclass(frozen=True)
class Island:
    seed: int
    field: ElevationField
    rivers: list[River]
    segments: list[RiverSegment]


def build_field(
    *,
    seed: int,
    size: int,
    config: IslandConfig | None = None,
    height_fn: HeightFunction | None = None,
) -> ElevationField:
    config = config or IslandConfig()
    if height_fn is None:
        height_fn = IslandHeight(seed=int(seed), size=int(size))
    return ElevationField.from_height_function(
        int(size), height_fn, config=config.elevation
    )


def erode_in_stages(
    field: ElevationField,
    *,
    seed: int,
    stages: int,
    cycles: int,
    config: IslandConfig | None = None,
) -> Iterator[ElevationField]:
    """Erode in ``stages`` batches of ``cycles`` droplets, yielding after each.

    The same field object is yielded every time; copy what you need to keep.
    """

    config = config or IslandConfig()
    stages = int(stages)
    if stages < 0:
        raise ValueError("stages must be >= 0")

    sim = ErosionSimulator(field, np.random.default_rng(int(seed)), config=config.erosion)
    for stage in range(stages):
        sim.erode(int(cycles))
        logger.debug("Erosion stage finished", stage=stage + 1, stages=stages)
        yield field


def generate_island(
    *,
    seed: int,
    size: int,
    cycles: int,
    config: IslandConfig | None = None,
    height_fn: HeightFunction | None = None,
) -> Island:
    """Build, erode and drain one island.

    Pure function of its arguments: the same seed reproduces the same island.
    """

    config = config or IslandConfig()
    field = build_field(seed=seed, size=size, config=config, height_fn=height_fn)

    if int(cycles) > 0:
        for _ in erode_in_stages(field, seed=seed, stages=1, cycles=cycles, config=config):
            pass

    builder = WatershedBuilder(field, config=config.watershed)
    rivers = builder.build()
    segments = builder.segments(rivers)

    logger.info(
        "Island generated",
        seed=int(seed),
        size=int(size),
        cycles=int(cycles),
        rivers=len(rivers),
        segments=len(segments),
    )
    return Island(seed=int(seed), field=field, rivers=rivers, segments=segments)
