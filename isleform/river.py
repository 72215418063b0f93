from __future__ import annotations

from collections.abc import Iterator, Sequence

from isleform.config import SEA_LEVEL
from isleform.elevation import ElevationField
from isleform.strahler import combine_all


class RiverTopologyError(RuntimeError):
    """A merge would break the branch/split invariant. Always a bug."""


class River:
    """A river as an owned tree of cell sequences.

    ``cells`` runs from the mouth (index 0) to the source. ``order`` holds one
    stream order per position. Each branch is ``(split, river)`` where the
    branch's first cell is ``cells[split]`` of its parent.
    """

    def __init__(self, cells: Sequence[int]) -> None:
        self.cells = [int(c) for c in cells]
        if not self.cells:
            raise ValueError("a river needs at least one cell")
        self.order = [0] * len(self.cells)
        self.branches: list[tuple[int, River]] = []

    @classmethod
    def trace(cls, elevation: ElevationField, start: int) -> River:
        """Follow the steepest strictly-downhill path from ``start`` to water.

        The water cell itself is not part of the river. A trace that stalls
        on a pit or plateau simply ends there.
        """

        grid = elevation.grid
        cells = [int(start)]
        visited = {int(start)}
        current = int(start)

        while True:
            best = -1
            best_h = elevation.surface_height(current)
            for j in grid.neighbor_indices(current):
                if j in visited:
                    continue
                h = elevation.surface_height(j)
                if h < best_h:
                    best = j
                    best_h = h

            if best < 0 or best_h <= SEA_LEVEL:
                break

            cells.append(best)
            visited.add(best)
            current = best

        cells.reverse()
        return cls(cells)

    def __len__(self) -> int:
        return len(self.cells)

    def __repr__(self) -> str:
        return f"River(len={len(self.cells)}, order={self.root_order}, branches={len(self.branches)})"

    @property
    def mouth(self) -> int:
        return self.cells[0]

    @property
    def source(self) -> int:
        return self.cells[-1]

    @property
    def root_order(self) -> int:
        return self.order[0]

    def merge(self, other: River) -> None:
        self.add_branch(other.cells)

    def add_branch(self, cells: Sequence[int]) -> None:
        """Fold a mouth-first cell sequence into this tree."""

        present = set(self.cells)
        downstream = [c for c in cells if c in present]
        upstream = [c for c in cells if c not in present]

        k = len(downstream)
        if k == 0 or list(cells[:k]) != self.cells[:k]:
            raise RiverTopologyError(
                "merged cells must share a downstream prefix with the river"
            )

        if not upstream:
            return

        if k == len(self.cells):
            self.cells.extend(upstream)
            self.order.extend([0] * len(upstream))
            return

        split = k - 1
        junction = self.cells[split]

        for at, branch in self.branches:
            if at == split and branch.cells[1] == upstream[0]:
                branch.add_branch([junction, *upstream])
                self.update_order(split)
                return

        self.branches.append((split, River([junction, *upstream])))
        self.update_order(split)

    def update_order(self, split: int) -> None:
        """Recompute orders from ``split`` back down to the mouth."""

        upstream = self.order[split + 1] if split + 1 < len(self.order) else 0
        for idx in range(split, -1, -1):
            orders = [b.root_order for at, b in self.branches if at == idx]
            if orders:
                upstream = combine_all([*orders, upstream])
            self.order[idx] = upstream

    def prune(self, *, min_length: int = 3) -> bool:
        """Drop order-0 reaches. Returns False if nothing worth keeping is left."""

        if self.root_order < 1:
            return False

        keep = len(self.order)
        while keep > 0 and self.order[keep - 1] == 0:
            keep -= 1
        del self.cells[keep:]
        del self.order[keep:]

        if len(self.cells) < int(min_length):
            return False

        self.branches = [
            (at, branch)
            for at, branch in self.branches
            if at < keep and branch.prune(min_length=min_length)
        ]
        return True

    def walk(self) -> Iterator[tuple[River, int, River]]:
        """Yield ``(parent, split, branch)`` for every branch, depth first."""
        for at, branch in self.branches:
            yield self, at, branch
            yield from branch.walk()

    def segments(self) -> list[tuple[int, int, int]]:
        """Consecutive cell pairs with the order of the upstream cell."""

        out = [
            (self.cells[i], self.cells[i + 1], self.order[i + 1])
            for i in range(len(self.cells) - 1)
        ]
        for _, branch in self.branches:
            out.extend(branch.segments())
        return out
