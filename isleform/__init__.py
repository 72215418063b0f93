from __future__ import annotations

from isleform.config import (
    SEA_LEVEL,
    ElevationConfig,
    ErosionConfig,
    IslandConfig,
    WatershedConfig,
)
from isleform.elevation import (
    ElevationError,
    ElevationField,
    HeightFunction,
    Surface,
    sea_level_threshold,
    vectorized,
)
from isleform.erosion import Droplet, ErosionSimulator, Step
from isleform.grid import Grid
from isleform.log import configure_logging
from isleform.pipeline import Island, build_field, erode_in_stages, generate_island
from isleform.river import River, RiverTopologyError
from isleform.strahler import combine, combine_all
from isleform.watershed import RiverSegment, WatershedBuilder

__all__ = [
    "SEA_LEVEL",
    "Droplet",
    "ElevationConfig",
    "ElevationError",
    "ElevationField",
    "ErosionConfig",
    "ErosionSimulator",
    "Grid",
    "HeightFunction",
    "Island",
    "IslandConfig",
    "River",
    "RiverSegment",
    "RiverTopologyError",
    "Step",
    "Surface",
    "WatershedBuilder",
    "WatershedConfig",
    "build_field",
    "combine",
    "combine_all",
    "configure_logging",
    "erode_in_stages",
    "generate_island",
    "sea_level_threshold",
    "vectorized",
]
