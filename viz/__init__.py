from viz.render import (
    draw_rivers,
    heightmap_to_npy_bytes,
    heightmap_to_png_bytes,
    island_rgb,
    rgb_to_png_bytes,
    surface_normals,
)

__all__ = [
    "draw_rivers",
    "heightmap_to_npy_bytes",
    "heightmap_to_png_bytes",
    "island_rgb",
    "rgb_to_png_bytes",
    "surface_normals",
]
