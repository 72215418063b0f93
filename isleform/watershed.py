from __future__ import annotations

from dataclasses import dataclass

import numpy as np
import structlog

from isleform.config import WatershedConfig
from isleform.elevation import ElevationField
from isleform.river import River

logger = structlog.get_logger()


@dataclass(frozen=True)
class RiverSegment:
    start: tuple[int, int]
    end: tuple[int, int]
    order: int


class WatershedBuilder:
    """Extract a forest of river trees from an (eroded) elevation field.

    Read-only with respect to the field.
    """

    def __init__(
        self,
        elevation: ElevationField,
        *,
        config: WatershedConfig | None = None,
    ) -> None:
        self.elevation = elevation
        self.config = config or WatershedConfig()

    def seeds(self) -> list[int]:
        """Highest cells above the seed threshold, highest first."""

        h = self.elevation.heights().reshape(-1)
        candidates = np.flatnonzero(h > float(self.config.seed_threshold))
        if candidates.size == 0:
            return []
        ranked = candidates[np.argsort(-h[candidates], kind="stable")]
        return [int(i) for i in ranked[: int(self.config.max_seeds)]]

    def trace_all(self) -> list[River]:
        return [River.trace(self.elevation, seed) for seed in self.seeds()]

    def build(self) -> list[River]:
        traces = sorted(self.trace_all(), key=len, reverse=True)

        merged: list[River] = []
        for river in traces:
            target = next((r for r in merged if r.mouth == river.mouth), None)
            if target is None:
                merged.append(river)
            else:
                target.merge(river)

        min_length = int(self.config.min_river_length)
        rivers = [r for r in merged if r.prune(min_length=min_length)]

        logger.info(
            "Watershed built",
            traces=len(traces),
            merged=len(merged),
            rivers=len(rivers),
        )
        return rivers

    def segments(self, rivers: list[River]) -> list[RiverSegment]:
        grid = self.elevation.grid
        return [
            RiverSegment(start=grid.from_idx(a), end=grid.from_idx(b), order=order)
            for river in rivers
            for a, b, order in river.segments()
        ]
