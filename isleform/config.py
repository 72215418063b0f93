from __future__ import annotations

from dataclasses import dataclass, field

SEA_LEVEL = 0.0
# Stream density above which a cell counts as part of an established stream.
STREAM_THRESHOLD = 0.3


@dataclass(frozen=True)
class ElevationConfig:
    # Band along every edge that is forced under water: a fraction of the
    # grid size (30 cells on an 800 grid), unless a width in cells is given.
    border_fraction: float = 0.0375
    border_width: int | None = None
    sea_level_nudge: float = 0.01
    # Vertical exaggeration applied to height differences when estimating normals.
    normal_scale: float = 40.0


@dataclass(frozen=True)
class ErosionConfig:
    """Droplet simulation constants.

    Defaults follow the simple particle-based hydraulic erosion model; the
    same config and the same RNG stream reproduce a run bit-for-bit.
    """

    dt: float = 0.8
    density: float = 1.0
    min_volume: float = 0.01
    friction: float = 0.05
    evap_rate: float = 0.001
    deposition_rate: float = 0.1
    # Stream cells carry flow further: less friction, less evaporation.
    stream_friction_bias: float = 0.5
    stream_evaporation_bias: float = 0.2
    stream_threshold: float = STREAM_THRESHOLD
    settle_acceleration: float = 0.01
    stream_refresh_interval: int = 250
    stream_learning_rate: float = 0.2
    # Pool height one unit of droplet volume buys on a single cell.
    volume_factor: float = 0.01
    drainage_rate: float = 0.001
    drain_sediment_kept: float = 0.1
    max_spills: int = 5


@dataclass(frozen=True)
class WatershedConfig:
    seed_threshold: float = 0.8
    max_seeds: int = 5
    min_river_length: int = 3


@dataclass(frozen=True)
class IslandConfig:
    elevation: ElevationConfig = field(default_factory=ElevationConfig)
    erosion: ErosionConfig = field(default_factory=ErosionConfig)
    watershed: WatershedConfig = field(default_factory=WatershedConfig)
