from __future__ import annotations

import math
from collections import deque
from enum import Enum
from typing import Protocol

import numpy as np
import structlog

from isleform.config import SEA_LEVEL, STREAM_THRESHOLD, ElevationConfig
from isleform.grid import Grid

logger = structlog.get_logger()


class ElevationError(ValueError):
    """Raised when no valid elevation field can be built."""


class HeightFunction(Protocol):
    """Pure, deterministic raw height at a grid coordinate.

    Plain callables are called once per cell with float coordinates. Callables
    marked with @vectorized receive whole float64 coordinate arrays instead
    and must return an array of the same shape.
    """

    def __call__(self, x: float, y: float) -> float:  # pragma: no cover
        ...


def vectorized(fn):
    """Mark a height function as operating on whole coordinate arrays."""
    fn.vectorized = True
    return fn


class Surface(Enum):
    OCEAN = "ocean"
    POOL = "pool"
    STREAM = "stream"
    GROUND = "ground"


def border_band(
    size: int,
    border_width: int | None = None,
    *,
    fraction: float = 0.0375,
) -> int:
    """Effective border width in cells: never wider than half the grid, never zero.

    Without an explicit ``border_width`` the band scales with the grid.
    """

    size = int(size)
    width = round(size * float(fraction)) if border_width is None else int(border_width)
    return max(1, min(width, (size - 1) // 2))


def _evaluate(height_fn: HeightFunction, x: np.ndarray, y: np.ndarray) -> np.ndarray:
    if getattr(height_fn, "vectorized", False):
        z = np.asarray(height_fn(x, y), dtype=np.float64)
    else:
        z = np.vectorize(height_fn, otypes=[np.float64])(x, y)
    try:
        return np.broadcast_to(z, x.shape).astype(np.float64)
    except ValueError as exc:
        raise ElevationError(
            f"height function returned shape {z.shape}, expected {x.shape}"
        ) from exc


def sea_level_threshold(
    height_fn: HeightFunction,
    size: int,
    *,
    border_width: int | None = None,
    border_fraction: float = 0.0375,
    nudge: float = 0.01,
) -> float:
    """Highest raw height inside the border band, plus a small nudge.

    Subtracting this from every raw height puts the whole band under water.
    """

    size = int(size)
    if size <= 0:
        raise ElevationError("size must be > 0")

    band = border_band(size, border_width, fraction=border_fraction)
    ys, xs = np.mgrid[0:size, 0:size]
    in_band = (xs < band) | (xs >= size - band) | (ys < band) | (ys >= size - band)

    samples = _evaluate(
        height_fn,
        xs[in_band].astype(np.float64),
        ys[in_band].astype(np.float64),
    )
    samples = samples[np.isfinite(samples)]
    if samples.size == 0:
        raise ElevationError("no finite height sample in the border band")
    return float(np.max(samples)) + float(nudge)


class ElevationField:
    """Square island height grid with its coast and pool/stream surface state.

    Heights live in flat arrays indexed by ``Grid.to_idx``:

    - ``ground``: terrain height, land normalized to (0, 1], water below 0
    - ``pool``: standing water on top of the ground
    - ``stream``: decaying density of recent droplet traffic, in [0, 1]

    The surface height seen by droplets and renderers is ``ground + pool``.
    """

    def __init__(
        self,
        heights: np.ndarray,
        *,
        config: ElevationConfig | None = None,
        sea_level_threshold: float = 0.0,
    ) -> None:
        h = np.asarray(heights, dtype=np.float64)
        if h.ndim != 2 or h.shape[0] != h.shape[1]:
            raise ElevationError("heights must be a square 2D array")
        if h.shape[0] == 0:
            raise ElevationError("heights must not be empty")

        self.config = config or ElevationConfig()
        self.size = int(h.shape[0])
        self.grid = Grid.square(self.size)
        self.sea_level_threshold = float(sea_level_threshold)

        self.ground = h.reshape(-1).copy()
        self.pool = np.zeros_like(self.ground)
        self.stream = np.zeros_like(self.ground)

        self.ocean = np.zeros(self.ground.shape, dtype=bool)
        self.coast: list[tuple[int, int]] = []
        self.lakes = 0

        self._find_coast()
        self._level_lakes()

    @classmethod
    def from_height_function(
        cls,
        size: int,
        height_fn: HeightFunction,
        *,
        config: ElevationConfig | None = None,
    ) -> ElevationField:
        """Build an island from a raw height function.

        Raw heights are shifted so the border band sits below sea level, then
        land is normalized into (0, 1] while water keeps its negative depth.
        """

        config = config or ElevationConfig()
        size = int(size)
        if size <= 0:
            raise ElevationError("size must be > 0")

        sea = sea_level_threshold(
            height_fn,
            size,
            border_width=config.border_width,
            border_fraction=config.border_fraction,
            nudge=config.sea_level_nudge,
        )

        ys, xs = np.mgrid[0:size, 0:size]
        z = _evaluate(height_fn, xs.astype(np.float64), ys.astype(np.float64)) - sea

        land = z > SEA_LEVEL
        if bool(np.any(land)):
            z[land] /= float(np.max(z[land]))

        field = cls(z, config=config, sea_level_threshold=sea)
        logger.info(
            "Elevation field built",
            size=size,
            sea_level_threshold=round(sea, 6),
            land_cells=int(np.count_nonzero(field.ground > SEA_LEVEL)),
            coast_cells=len(field.coast),
            lakes=field.lakes,
        )
        return field

    def _find_coast(self) -> None:
        grid = self.grid
        ground = self.ground

        visited = np.zeros(ground.shape, dtype=bool)
        visited[0] = True
        if ground[0] > SEA_LEVEL:
            self.coast = [grid.from_idx(0)]
            return

        self.ocean[0] = True
        active = deque([0])
        coast: list[tuple[int, int]] = []
        while active:
            i = active.popleft()
            for j in grid.neighbor_indices(i):
                if visited[j]:
                    continue
                visited[j] = True
                if ground[j] > SEA_LEVEL:
                    coast.append(grid.from_idx(j))
                else:
                    self.ocean[j] = True
                    active.append(j)
        self.coast = coast

    def _level_lakes(self) -> None:
        # Inland water that the ocean fill never reached is raised to the
        # lowest land cell around it, its natural spill height.
        grid = self.grid
        ground = self.ground
        seen = self.ocean.copy()

        for start in np.flatnonzero((ground <= SEA_LEVEL) & ~self.ocean):
            start = int(start)
            if seen[start]:
                continue
            seen[start] = True

            region = [start]
            active = [start]
            shore = math.inf
            while active:
                i = active.pop()
                for j in grid.neighbor_indices(i):
                    h = float(ground[j])
                    if h > SEA_LEVEL:
                        shore = min(shore, h)
                        continue
                    if seen[j]:
                        continue
                    seen[j] = True
                    region.append(j)
                    active.append(j)

            if math.isfinite(shore):
                ground[region] = shore
                self.lakes += 1

    def copy(self) -> ElevationField:
        """Independent snapshot, e.g. to keep a stage of an ongoing erosion."""

        out = object.__new__(ElevationField)
        out.config = self.config
        out.size = self.size
        out.grid = self.grid
        out.sea_level_threshold = self.sea_level_threshold
        out.ground = self.ground.copy()
        out.pool = self.pool.copy()
        out.stream = self.stream.copy()
        out.ocean = self.ocean.copy()
        out.coast = list(self.coast)
        out.lakes = self.lakes
        return out

    def __len__(self) -> int:
        return len(self.ground)

    def to_idx(self, x: int, y: int) -> int:
        return self.grid.to_idx(x, y)

    def from_idx(self, idx: int) -> tuple[int, int]:
        return self.grid.from_idx(idx)

    def height(self, x: int, y: int) -> float:
        idx = self.grid.to_idx(x, y)
        return float(self.ground[idx] + self.pool[idx])

    def ground_at(self, x: int, y: int) -> float:
        return float(self.ground[self.grid.to_idx(x, y)])

    def surface_height(self, idx: int) -> float:
        return float(self.ground[idx] + self.pool[idx])

    def surface(self, idx: int, *, stream_threshold: float = STREAM_THRESHOLD) -> Surface:
        if self.ground[idx] < SEA_LEVEL:
            return Surface.OCEAN
        if self.pool[idx] > 0.0:
            return Surface.POOL
        if self.stream[idx] > stream_threshold:
            return Surface.STREAM
        return Surface.GROUND

    def normal(self, x: int, y: int) -> np.ndarray:
        """Unit surface normal by central differencing of the 4 neighbors.

        Water returns straight down. Edge cells difference against themselves.
        """

        idx = self.grid.to_idx(x, y)
        if self.ground[idx] + self.pool[idx] <= SEA_LEVEL:
            return np.array([0.0, 0.0, -1.0], dtype=np.float64)

        grid = self.grid
        left = grid.to_idx(*grid.clamp(x - 1, y))
        right = grid.to_idx(*grid.clamp(x + 1, y))
        top = grid.to_idx(*grid.clamp(x, y - 1))
        bottom = grid.to_idx(*grid.clamp(x, y + 1))

        scale = float(self.config.normal_scale)
        rl = self.surface_height(left) - self.surface_height(right)
        bt = self.surface_height(top) - self.surface_height(bottom)

        n = np.array([rl * scale, bt * scale, -2.0], dtype=np.float64)
        return n / np.linalg.norm(n)

    def heights(self) -> np.ndarray:
        """Surface heights as a (size, size) array indexed [y, x]."""
        return (self.ground + self.pool).reshape(self.size, self.size)

    def ground_heights(self) -> np.ndarray:
        return self.ground.reshape(self.size, self.size).copy()

    def water_depth(self) -> np.ndarray:
        return self.pool.reshape(self.size, self.size).copy()
