from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

# 8-connected neighborhood, in a fixed order so ties resolve deterministically.
NEIGHBORS_8 = (
    (-1, -1),
    (-1, 0),
    (-1, 1),
    (0, -1),
    (0, 1),
    (1, -1),
    (1, 0),
    (1, 1),
)


@dataclass(frozen=True)
class Grid:
    """Row-major linearization of a width x height cell grid.

    Index arithmetic is always bounds-checked; an out-of-range coordinate is a
    caller bug and raises IndexError.
    """

    width: int
    height: int

    def __post_init__(self) -> None:
        if int(self.width) <= 0 or int(self.height) <= 0:
            raise ValueError("width and height must be > 0")

    @classmethod
    def square(cls, size: int) -> Grid:
        return cls(int(size), int(size))

    def __len__(self) -> int:
        return self.width * self.height

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def to_idx(self, x: int, y: int) -> int:
        if not self.in_bounds(x, y):
            raise IndexError(f"cell {(x, y)} is outside a {self.width}x{self.height} grid")
        return x + y * self.width

    def from_idx(self, idx: int) -> tuple[int, int]:
        if not 0 <= idx < len(self):
            raise IndexError(f"index {idx} is outside a grid of {len(self)} cells")
        return idx % self.width, idx // self.width

    def neighbors(self, x: int, y: int) -> Iterator[tuple[int, int]]:
        """Yield the in-bounds 8-connected neighbors of (x, y)."""
        for dx, dy in NEIGHBORS_8:
            nx = x + dx
            ny = y + dy
            if 0 <= nx < self.width and 0 <= ny < self.height:
                yield nx, ny

    def neighbor_indices(self, idx: int) -> Iterator[int]:
        x, y = self.from_idx(idx)
        for nx, ny in self.neighbors(x, y):
            yield nx + ny * self.width

    def clamp(self, x: int, y: int) -> tuple[int, int]:
        return min(max(x, 0), self.width - 1), min(max(y, 0), self.height - 1)
