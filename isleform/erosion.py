"""Particle-based hydraulic erosion.

Droplets spawn on land, roll downhill following the surface normal, trade
sediment with the ground and end in the ocean, off the map, or in a pool they
fill until it spills over a drain. Cells droplets pass through accumulate a
stream density that later droplets follow more easily.
"""

from __future__ import annotations

import heapq
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

import numpy as np
import structlog

from isleform.config import SEA_LEVEL, ErosionConfig
from isleform.elevation import ElevationField, Surface

logger = structlog.get_logger()


class UniformSource(Protocol):
    """The subset of ``numpy.random.Generator`` the simulator draws from."""

    def integers(self, low: int, high: int) -> int:  # pragma: no cover
        ...

    def random(self) -> float:  # pragma: no cover
        ...


class Step(Enum):
    MOVED = "moved"
    EVAPORATED = "evaporated"
    LOST = "lost"
    OCEAN = "ocean"
    SETTLED = "settled"
    POOLED = "pooled"


@dataclass
class Droplet:
    position: np.ndarray
    velocity: np.ndarray = field(default_factory=lambda: np.zeros(2, dtype=np.float64))
    volume: float = 1.0
    sediment: float = 0.0

    @property
    def cell(self) -> tuple[int, int]:
        return int(self.position[0]), int(self.position[1])

    @property
    def sediment_mass(self) -> float:
        # ``sediment`` is a concentration; the carried mass scales with volume.
        return self.volume * self.sediment


class ErosionSimulator:
    """Runs erosion cycles over an elevation field, mutating it in place.

    One droplet is simulated to completion before the next begins; the same
    field, config and RNG stream always produce the same result.
    """

    def __init__(
        self,
        elevation: ElevationField,
        rng: UniformSource,
        *,
        config: ErosionConfig | None = None,
    ) -> None:
        self.elevation = elevation
        self.rng = rng
        self.config = config or ErosionConfig()
        self.tracked = np.zeros(len(elevation), dtype=bool)
        self.cycles = 0

    def erode(self, cycles: int) -> None:
        cycles = int(cycles)
        if cycles < 0:
            raise ValueError("cycles must be >= 0")

        if not self.has_land():
            logger.warning("No land to erode, skipping", cycles=cycles)
            return

        interval = int(self.config.stream_refresh_interval)
        for _ in range(cycles):
            self.cycle()
            self.cycles += 1
            if interval > 0 and (self.cycles % interval) == 0:
                self.refresh_streams()

        logger.info(
            "Erosion cycles completed",
            cycles=cycles,
            total_cycles=self.cycles,
            pool_cells=int(np.count_nonzero(self.elevation.pool > 0.0)),
            stream_cells=int(
                np.count_nonzero(self.elevation.stream > self.config.stream_threshold)
            ),
        )

    def has_land(self) -> bool:
        return bool(np.any(self.elevation.ground > SEA_LEVEL))

    def spawn(self) -> Droplet:
        """Drop a fresh droplet somewhere over land."""

        if not self.has_land():
            raise ValueError("elevation field has no land to spawn on")

        size = self.elevation.size
        while True:
            x = int(self.rng.integers(0, size))
            y = int(self.rng.integers(0, size))
            if self.elevation.ground_at(x, y) > SEA_LEVEL:
                break

        # Jitter around the cell center, well clear of the cell's edges.
        jx = 0.25 + 0.5 * float(self.rng.random())
        jy = 0.25 + 0.5 * float(self.rng.random())
        return Droplet(position=np.array([x + jx, y + jy], dtype=np.float64))

    def cycle(self) -> Droplet:
        drop = self.spawn()
        for _ in range(int(self.config.max_spills)):
            self.descend(drop)
            if drop.volume <= self.config.min_volume:
                break
            if not self.flood(drop):
                break
        return drop

    def descend(self, drop: Droplet) -> Step:
        outcome = Step.EVAPORATED
        while drop.volume > self.config.min_volume:
            outcome = self.step(drop)
            if outcome is not Step.MOVED:
                return outcome
        return Step.EVAPORATED

    def step(self, drop: Droplet) -> Step:
        """Advance a droplet by one timestep and exchange sediment."""

        cfg = self.config
        fld = self.elevation
        dt = float(cfg.dt)

        x, y = drop.cell
        idx = fld.to_idx(x, y)
        self.tracked[idx] = True

        if fld.ground[idx] < SEA_LEVEL:
            self._deposit_in_ocean(drop, idx)
            return Step.OCEAN

        stream = float(fld.stream[idx])
        friction = cfg.friction * (1.0 - cfg.stream_friction_bias * stream)
        evap = cfg.evap_rate * (1.0 - cfg.stream_evaporation_bias * stream)

        # a = F / m with m = volume * density.
        accel = fld.normal(x, y)[:2] / (drop.volume * cfg.density)
        drop.velocity += dt * accel
        drop.position += dt * drop.velocity
        drop.velocity *= 1.0 - dt * friction

        px, py = float(drop.position[0]), float(drop.position[1])
        if px < 0.0 or py < 0.0 or px >= fld.size or py >= fld.size:
            # Off the map; the sediment goes with it.
            drop.volume = 0.0
            return Step.LOST

        nx, ny = drop.cell
        nidx = fld.to_idx(nx, ny)

        if (
            fld.stream[nidx] > cfg.stream_threshold
            and float(np.linalg.norm(dt * accel)) < cfg.settle_acceleration
        ):
            return Step.SETTLED

        if fld.pool[nidx] > 0.0:
            return Step.POOLED

        if fld.ground[nidx] < SEA_LEVEL:
            self.tracked[nidx] = True
            self._deposit_in_ocean(drop, nidx)
            return Step.OCEAN

        # Carrying capacity only exists moving downhill.
        speed = float(np.linalg.norm(drop.velocity))
        c_eq = max(0.0, drop.volume * speed * (fld.ground[idx] - fld.ground[nidx]))
        c_diff = c_eq - drop.sediment
        drop.sediment += dt * cfg.deposition_rate * c_diff
        fld.ground[idx] -= dt * drop.volume * cfg.deposition_rate * c_diff

        # Evaporation keeps the carried mass: concentration rises as volume falls.
        drop.volume *= 1.0 - dt * evap
        drop.sediment /= 1.0 - dt * evap
        return Step.MOVED

    def _deposit_in_ocean(self, drop: Droplet, idx: int) -> None:
        cfg = self.config
        self.elevation.ground[idx] += cfg.dt * drop.volume * cfg.deposition_rate * drop.sediment
        drop.sediment = 0.0
        drop.volume = 0.0

    def flood(self, drop: Droplet) -> bool:
        """Pour the droplet's remaining volume into the pool at its cell.

        Returns True when the pool spills over a drain; the droplet is moved to
        the drain and may descend again. Returns False when the droplet is used
        up raising the pool.
        """

        cfg = self.config
        fld = self.elevation
        grid = fld.grid

        x, y = drop.cell
        start = fld.to_idx(x, y)
        pool = self._pool_extent(start)
        level = max(fld.surface_height(i) for i in pool)

        shore: list[tuple[float, int]] = []
        queued = set(pool)

        def push_shore(i: int) -> None:
            for j in grid.neighbor_indices(i):
                if j in queued:
                    continue
                kind = fld.surface(j, stream_threshold=cfg.stream_threshold)
                if kind is Surface.GROUND or kind is Surface.STREAM:
                    queued.add(j)
                    heapq.heappush(shore, (fld.surface_height(j), j))

        for i in pool:
            push_shore(i)

        while drop.volume > cfg.min_volume and shore:
            h, j = heapq.heappop(shore)

            if h < level:
                # Spill: the pool drains slowly through its lowest outlet.
                lowered = (1.0 - cfg.drainage_rate) * level + cfg.drainage_rate * h
                self._set_level(pool, lowered)
                jx, jy = grid.from_idx(j)
                drop.position = np.array([jx, jy], dtype=np.float64)
                drop.velocity = np.zeros(2, dtype=np.float64)
                drop.sediment *= cfg.drain_sediment_kept
                return True

            gap = h - level
            needed = gap * (len(pool) + 1) / cfg.volume_factor
            if drop.volume < needed:
                rise = drop.volume * cfg.volume_factor / (len(pool) + 1)
                self._set_level(pool, level + rise)
                drop.volume = 0.0
                return False

            drop.volume -= needed
            pool.append(j)
            level = h
            self._set_level(pool, level)
            push_shore(j)

        # Enclosed basin with nowhere left to spread.
        drop.volume = 0.0
        return False

    def _pool_extent(self, start: int) -> list[int]:
        fld = self.elevation
        if fld.pool[start] <= 0.0:
            return [start]

        extent = [start]
        seen = {start}
        active = [start]
        while active:
            i = active.pop()
            for j in fld.grid.neighbor_indices(i):
                if j in seen or fld.pool[j] <= 0.0:
                    continue
                seen.add(j)
                extent.append(j)
                active.append(j)
        return extent

    def _set_level(self, cells: list[int], level: float) -> None:
        fld = self.elevation
        for i in cells:
            fld.pool[i] = max(0.0, level - fld.ground[i])

    def refresh_streams(self) -> None:
        """Blend recent droplet traffic into the stream density, then reset it."""

        rate = float(self.config.stream_learning_rate)
        fld = self.elevation
        fld.stream *= 1.0 - rate
        fld.stream += rate * self.tracked.astype(np.float64)
        self.tracked[:] = False
