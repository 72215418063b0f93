from __future__ import annotations

import pytest

from isleform.grid import Grid


def test_index_roundtrip_square() -> None:
    grid = Grid.square(20)
    assert len(grid) == 400
    seen = set()
    for y in range(20):
        for x in range(20):
            idx = grid.to_idx(x, y)
            assert grid.from_idx(idx) == (x, y)
            seen.add(idx)
    assert seen == set(range(400))


def test_index_roundtrip_non_square() -> None:
    grid = Grid(7, 13)
    for idx in range(len(grid)):
        x, y = grid.from_idx(idx)
        assert 0 <= x < 7
        assert 0 <= y < 13
        assert grid.to_idx(x, y) == idx
    assert grid.to_idx(6, 0) == 6
    assert grid.to_idx(0, 1) == 7


def test_out_of_bounds_raises() -> None:
    grid = Grid(4, 3)
    with pytest.raises(IndexError):
        grid.to_idx(-1, 0)
    with pytest.raises(IndexError):
        grid.to_idx(4, 0)
    with pytest.raises(IndexError):
        grid.to_idx(0, 3)
    with pytest.raises(IndexError):
        grid.from_idx(12)
    with pytest.raises(IndexError):
        grid.from_idx(-1)


def test_rejects_empty_grid() -> None:
    with pytest.raises(ValueError):
        Grid(0, 5)


def test_neighbors_stay_in_bounds() -> None:
    grid = Grid.square(5)
    assert len(list(grid.neighbors(0, 0))) == 3
    assert len(list(grid.neighbors(2, 0))) == 5
    assert len(list(grid.neighbors(2, 2))) == 8
    assert sorted(grid.neighbor_indices(0)) == [1, 5, 6]


def test_clamp() -> None:
    grid = Grid(4, 3)
    assert grid.clamp(-1, 1) == (0, 1)
    assert grid.clamp(5, 7) == (3, 2)
    assert grid.clamp(2, 1) == (2, 1)
