from __future__ import annotations

import numpy as np
import pytest

from isleform.config import SEA_LEVEL, ElevationConfig, IslandConfig
from isleform.elevation import vectorized
from isleform.pipeline import build_field, erode_in_stages, generate_island


@vectorized
def _cone(x: np.ndarray, y: np.ndarray) -> np.ndarray:
    return 1.0 - np.hypot(x - 23.5, y - 23.5) / 16.0


CONFIG = IslandConfig(elevation=ElevationConfig(border_width=6))


def test_generate_island_is_deterministic() -> None:
    a = generate_island(seed=4, size=48, cycles=150, config=CONFIG, height_fn=_cone)
    b = generate_island(seed=4, size=48, cycles=150, config=CONFIG, height_fn=_cone)

    assert a.seed == 4
    assert np.array_equal(a.field.ground, b.field.ground)
    assert np.array_equal(a.field.pool, b.field.pool)
    assert a.segments == b.segments
    assert [r.cells for r in a.rivers] == [r.cells for r in b.rivers]


def test_generate_island_without_erosion() -> None:
    island = generate_island(seed=0, size=48, cycles=0, config=CONFIG, height_fn=_cone)
    reference = build_field(seed=0, size=48, config=CONFIG, height_fn=_cone)
    assert np.array_equal(island.field.ground, reference.ground)
    for seg in island.segments:
        assert seg.order >= 1


def test_build_field_defaults_to_island_height() -> None:
    a = build_field(seed=2, size=64)
    b = build_field(seed=2, size=64)
    assert a.size == 64
    assert np.array_equal(a.ground, b.ground)
    assert bool(np.any(a.ground > SEA_LEVEL))


def test_default_island_has_land_on_small_grids() -> None:
    for size in (32, 64, 96):
        for seed in range(6):
            field = build_field(seed=seed, size=size)
            assert bool(np.any(field.ground > SEA_LEVEL)), (size, seed)


def test_generate_default_island() -> None:
    island = generate_island(seed=0, size=64, cycles=100)
    assert island.field.size == 64
    assert bool(np.any(island.field.ground > SEA_LEVEL))
    assert len(island.field.coast) > 0


def test_erode_in_stages_yields_after_each_stage() -> None:
    field = build_field(seed=1, size=48, config=CONFIG, height_fn=_cone)
    initial = field.copy()

    snapshots = [
        stage.copy()
        for stage in erode_in_stages(field, seed=1, stages=3, cycles=40, config=CONFIG)
    ]
    assert len(snapshots) == 3
    assert not np.array_equal(snapshots[0].ground, initial.ground)
    assert not np.array_equal(snapshots[2].ground, snapshots[0].ground)
    assert np.array_equal(snapshots[2].ground, field.ground)


def test_erode_in_stages_rejects_negative_stages() -> None:
    field = build_field(seed=1, size=48, config=CONFIG, height_fn=_cone)
    with pytest.raises(ValueError):
        next(erode_in_stages(field, seed=1, stages=-1, cycles=10))
