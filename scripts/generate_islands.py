from __future__ import annotations

import argparse
from pathlib import Path

from isleform.log import configure_logging
from isleform.pipeline import build_field, erode_in_stages
from isleform.watershed import WatershedBuilder
from viz.render import draw_rivers, island_rgb, rgb_to_png_bytes


def main(argv: list[str] | None = None) -> None:
    """Render a series of islands, one PNG per erosion stage."""

    parser = argparse.ArgumentParser(description=main.__doc__)
    parser.add_argument("--seeds", type=int, default=12)
    parser.add_argument("--size", type=int, default=256)
    parser.add_argument("--stages", type=int, default=4)
    parser.add_argument("--cycles", type=int, default=5_000)
    parser.add_argument("--out", type=Path, default=Path("islands"))
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args(argv)

    configure_logging(args.log_level)
    args.out.mkdir(parents=True, exist_ok=True)

    for seed in range(args.seeds):
        field = build_field(seed=seed, size=args.size)
        (args.out / f"island_{seed + 1:02d}a.png").write_bytes(
            rgb_to_png_bytes(island_rgb(field))
        )

        stages = erode_in_stages(field, seed=seed, stages=args.stages, cycles=args.cycles)
        for stage, eroded in enumerate(stages, start=1):
            builder = WatershedBuilder(eroded)
            segments = builder.segments(builder.build())
            rgb = draw_rivers(island_rgb(eroded), segments)
            label = chr(ord("a") + stage)
            (args.out / f"island_{seed + 1:02d}{label}.png").write_bytes(rgb_to_png_bytes(rgb))


if __name__ == "__main__":
    main()
