"""Command-line interface for terrain synthesis."""

import argparse
import logging
import time
import tomllib
from pathlib import Path

import structlog


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        description="Synthesize a fractal terrain heightfield and minimap"
    )
    parser.add_argument("--config", type=str, help="Path to a TOML settings file")
    parser.add_argument(
        "--load",
        type=str,
        default=None,
        help="Resume from a saved .npz terrain instead of generating",
    )
    parser.add_argument("--seed", type=int, default=None, help="Permutation seed")
    parser.add_argument(
        "--resolution", type=int, default=None, help="Grid segments per edge (default: 100)"
    )
    parser.add_argument("--scale", type=float, default=None, help="Noise scale (default: 20)")
    parser.add_argument(
        "--height", type=float, default=None, help="Height multiplier (default: 5)"
    )
    parser.add_argument("--octaves", type=int, default=None, help="Octave count (default: 4)")
    parser.add_argument(
        "--persistence", type=float, default=None, help="Amplitude decay (default: 0.5)"
    )
    parser.add_argument(
        "--lacunarity", type=float, default=None, help="Frequency growth (default: 2.0)"
    )
    parser.add_argument(
        "--water-level", type=float, default=None, help="Water plane elevation (default: 0)"
    )
    parser.add_argument(
        "--sculpt",
        type=float,
        nargs=3,
        action="append",
        metavar=("X", "Y", "Z"),
        default=[],
        help="Apply a brush stroke at X Y Z (repeatable)",
    )
    parser.add_argument(
        "--output",
        "-o",
        type=str,
        default=None,
        help="Save the terrain to this .npz path",
    )
    parser.add_argument(
        "--minimap", type=str, default=None, help="Save the minimap to this .png path"
    )
    parser.add_argument(
        "--minimap-size", type=int, default=None, help="Minimap edge in pixels (default: 200)"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")
    return parser


def _overrides(args: argparse.Namespace) -> dict:
    """Collect CLI values that override the loaded settings."""
    flat = {
        "seed": args.seed,
        "resolution": args.resolution,
        "scale": args.scale,
        "height_scale": args.height,
        "octaves": args.octaves,
        "persistence": args.persistence,
        "lacunarity": args.lacunarity,
        "water_level": args.water_level,
    }
    changes = {key: value for key, value in flat.items() if value is not None}
    if args.minimap_size is not None:
        changes["minimap"] = {"width": args.minimap_size, "height": args.minimap_size}
    return changes


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for terrain synthesis."""
    args = build_parser().parse_args(argv)

    # Configure structlog
    level = logging.DEBUG if args.verbose else logging.INFO
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
    )
    logger = structlog.get_logger()

    # Import here to avoid slow startup for --help
    from .config import TerrainSettings, load_settings
    from .exceptions import TerrainFormatError
    from .minimap import save_minimap
    from .persistence import load_terrain, save_terrain
    from .session import TerrainSession

    start_time = time.time()

    if args.load:
        try:
            loaded = load_terrain(Path(args.load))
        except (FileNotFoundError, TerrainFormatError) as e:
            logger.error("load_failed", path=args.load, error=str(e))
            return 1
        session = TerrainSession.from_saved(loaded)
        session.update_settings(**_overrides(args))
    else:
        if args.config:
            try:
                settings = load_settings(Path(args.config))
            except FileNotFoundError:
                logger.error("config_not_found", path=args.config)
                return 1
            except tomllib.TOMLDecodeError as e:
                logger.error("config_invalid", path=args.config, error=str(e))
                return 1
            logger.info("config_loaded", path=args.config)
        else:
            settings = TerrainSettings()
        settings = settings.with_changes(**_overrides(args))
        session = TerrainSession(settings)
        session.generate()

    for x, y, z in args.sculpt:
        session.sculpt((x, y, z))

    gen_time = time.time() - start_time
    grid = session.grid

    print(f"Terrain {grid.resolution}x{grid.resolution} ({grid.vertex_count:,} vertices)")
    if grid.vertex_count:
        print(f"Elevation range: {grid.positions[:, 2].min():.2f} .. {grid.positions[:, 2].max():.2f}")
    print(f"Done in {gen_time:.2f}s")

    if args.output:
        output_path = Path(args.output)
        save_terrain(output_path, grid, session.noise.table, session.settings)
        print(f"Saved terrain to {output_path}")

    if args.minimap:
        minimap_path = Path(args.minimap)
        save_minimap(minimap_path, session.minimap)
        print(f"Saved minimap to {minimap_path}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
