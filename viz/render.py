from __future__ import annotations

import io
from collections.abc import Iterable

import numpy as np
from PIL import Image, ImageDraw

from isleform.config import SEA_LEVEL
from isleform.elevation import ElevationField
from isleform.watershed import RiverSegment

OCEAN_RGB = np.array([70.0, 107.0, 159.0], dtype=np.float64)
LAND_RGB = np.array([108.0, 152.0, 95.0], dtype=np.float64)
POOL_RGB = np.array([86.0, 128.0, 176.0], dtype=np.float64)
RIVER_RGB = (70, 107, 159)
SUN = (-0.25, 0.75, -1.5)


def surface_normals(height: np.ndarray, *, normal_scale: float = 40.0) -> np.ndarray:
    """Central-difference normals for a whole grid, shape (H, W, 3).

    Same estimate as ``ElevationField.normal`` with edges clamped; water is
    not special-cased here.
    """

    h = np.asarray(height, dtype=np.float64)
    if h.ndim != 2:
        raise ValueError("height must be a 2D array")

    p = np.pad(h, 1, mode="edge")
    rl = p[1:-1, :-2] - p[1:-1, 2:]
    bt = p[:-2, 1:-1] - p[2:, 1:-1]

    n = np.stack(
        [rl * float(normal_scale), bt * float(normal_scale), np.full_like(h, -2.0)],
        axis=-1,
    )
    return n / np.linalg.norm(n, axis=-1, keepdims=True)


def island_rgb(
    field: ElevationField,
    *,
    sun: tuple[float, float, float] = SUN,
) -> np.ndarray:
    """Diffuse-lit terrain as uint8 RGB, ocean shaded darker with depth."""

    h = field.heights()
    light_dir = np.asarray(sun, dtype=np.float64)
    light_dir = light_dir / np.linalg.norm(light_dir)

    normals = surface_normals(h, normal_scale=field.config.normal_scale)
    light = np.clip(normals @ light_dir, 0.0, 1.0)

    rgb = LAND_RGB * light[..., None]

    pool = field.water_depth() > 0.0
    rgb[pool] = POOL_RGB * (0.6 + 0.4 * light[pool, None])

    water = h <= SEA_LEVEL
    depth = np.clip(1.0 + h / 3.0, 0.0, 1.0)
    rgb[water] = OCEAN_RGB * depth[water, None]

    return np.clip(rgb, 0.0, 255.0).astype(np.uint8)


def stroke_width(order: int) -> int:
    return max(1, int(order))


def draw_rivers(
    rgb: np.ndarray,
    segments: Iterable[RiverSegment],
    *,
    color: tuple[int, int, int] = RIVER_RGB,
) -> np.ndarray:
    """Return a copy of ``rgb`` with river segments stroked by stream order."""

    a = np.asarray(rgb)
    if a.ndim != 3 or a.shape[2] != 3:
        raise ValueError("rgb must be an (H, W, 3) array")

    img = Image.fromarray(a.astype(np.uint8))
    draw = ImageDraw.Draw(img)
    for seg in segments:
        draw.line([seg.start, seg.end], fill=color, width=stroke_width(seg.order))
    return np.asarray(img).copy()


def _encode_png(pixels: np.ndarray) -> bytes:
    out = io.BytesIO()
    Image.fromarray(pixels.astype(np.uint8)).save(out, format="PNG")
    return out.getvalue()


def rgb_to_png_bytes(rgb: np.ndarray) -> bytes:
    a = np.asarray(rgb)
    if a.ndim != 3 or a.shape[2] != 3:
        raise ValueError("rgb must be an (H, W, 3) array")
    return _encode_png(a)


def heightmap_to_png_bytes(z: np.ndarray) -> bytes:
    """8-bit grayscale PNG of a height grid, stretched over its own range.

    A flat grid encodes as all zeros.
    """

    z = np.asarray(z, dtype=np.float64)
    if z.ndim != 2:
        raise ValueError("expected a 2D array")

    span = float(np.ptp(z))
    gray = np.zeros(z.shape) if span == 0.0 else (z - float(z.min())) / span * 255.0
    return _encode_png(np.clip(gray, 0.0, 255.0))


def heightmap_to_npy_bytes(z: np.ndarray) -> bytes:
    """Raw float64 heights in .npy format, for lossless reloads."""

    out = io.BytesIO()
    np.save(out, np.asarray(z, dtype=np.float64), allow_pickle=False)
    return out.getvalue()
