from __future__ import annotations

import io

import numpy as np
import pytest
from PIL import Image

from isleform.elevation import ElevationField
from isleform.watershed import RiverSegment
from viz.render import (
    OCEAN_RGB,
    draw_rivers,
    heightmap_to_npy_bytes,
    heightmap_to_png_bytes,
    island_rgb,
    rgb_to_png_bytes,
    stroke_width,
    surface_normals,
)

PNG_MAGIC = b"\x89PNG\r\n\x1a\n"


def _field() -> ElevationField:
    z = np.full((16, 16), -0.3, dtype=np.float64)
    ys, xs = np.mgrid[0:16, 0:16]
    d = np.hypot(xs - 7.5, ys - 7.5)
    z[d < 5.0] = 1.0 - d[d < 5.0] / 5.0
    return ElevationField(z)


def test_island_rgb_shape_and_ocean_color() -> None:
    field = _field()
    rgb = island_rgb(field)
    assert rgb.shape == (16, 16, 3)
    assert rgb.dtype == np.uint8

    expected = np.clip(OCEAN_RGB * (1.0 - 0.3 / 3.0), 0, 255).astype(np.uint8)
    assert np.array_equal(rgb[0, 0], expected)
    assert not np.array_equal(rgb[7, 7], expected)


def test_pools_are_tinted() -> None:
    field = _field()
    dry = island_rgb(field)
    field.pool[field.to_idx(7, 7)] = 0.05
    wet = island_rgb(field)
    assert not np.array_equal(dry[7, 7], wet[7, 7])


def test_surface_normals_are_unit_vectors() -> None:
    n = surface_normals(_field().heights())
    assert n.shape == (16, 16, 3)
    assert np.allclose(np.linalg.norm(n, axis=-1), 1.0)

    with pytest.raises(ValueError):
        surface_normals(np.zeros(4))


def test_stroke_width_grows_with_order() -> None:
    assert stroke_width(0) == 1
    assert stroke_width(1) == 1
    assert stroke_width(3) == 3


def test_draw_rivers_strokes_segments() -> None:
    rgb = np.zeros((16, 16, 3), dtype=np.uint8)
    out = draw_rivers(
        rgb,
        [RiverSegment(start=(2, 8), end=(12, 8), order=1)],
        color=(255, 0, 0),
    )
    assert out.shape == rgb.shape
    assert tuple(out[8, 5]) == (255, 0, 0)
    assert tuple(out[2, 5]) == (0, 0, 0)
    assert not rgb.any()

    with pytest.raises(ValueError):
        draw_rivers(np.zeros((4, 4)), [])


def test_rgb_to_png_bytes() -> None:
    data = rgb_to_png_bytes(np.zeros((3, 5, 3), dtype=np.uint8))
    assert data[:8] == PNG_MAGIC
    img = Image.open(io.BytesIO(data))
    assert img.size == (5, 3)
    assert img.mode == "RGB"


def test_heightmap_to_png_bytes() -> None:
    z = np.arange(12, dtype=np.float64).reshape(3, 4)
    data = heightmap_to_png_bytes(z)
    assert data[:8] == PNG_MAGIC
    arr = np.array(Image.open(io.BytesIO(data)))
    assert arr.shape == (3, 4)
    assert arr.min() == 0
    assert arr.max() == 255


def test_heightmap_to_png_bytes_constant_map() -> None:
    data = heightmap_to_png_bytes(np.full((5, 6), 7.0))
    arr = np.array(Image.open(io.BytesIO(data)))
    assert arr.max() == 0


def test_heightmap_to_npy_bytes() -> None:
    z = np.arange(6, dtype=np.float64).reshape(2, 3)
    out = np.load(io.BytesIO(heightmap_to_npy_bytes(z)))
    assert np.array_equal(out, z)


def test_heightmap_exports_share_formats() -> None:
    z = np.array([[0, 2], [4, 8]], dtype=np.int32)
    img = Image.open(io.BytesIO(heightmap_to_png_bytes(z)))
    assert img.mode == "L"
    assert np.array(img).tolist() == [[0, 63], [127, 255]]

    out = np.load(io.BytesIO(heightmap_to_npy_bytes(z)))
    assert out.dtype == np.float64
    assert np.array_equal(out, z)
