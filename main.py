#!/usr/bin/env python
"""
geomap - Geological map rendering from shapefiles.

Main entry point for the command line.

Usage
-----
    uv run python main.py geology.shp --faults faults.shp --crs EPSG:32611 -o map.png

or:
    python main.py geology.shp -o map.pdf
"""

import argparse
import sys
from pathlib import Path

# Add repo root to path so the package imports without installation
repo_path = Path(__file__).parent
if str(repo_path) not in sys.path:
    sys.path.insert(0, str(repo_path))


def build_parser() -> argparse.ArgumentParser:
    """Create the command line parser."""
    parser = argparse.ArgumentParser(
        prog="geomap",
        description="Reproject and plot geologic unit polygons and faults.",
    )
    parser.add_argument("polygons", help="Geologic unit polygon shapefile")
    parser.add_argument("-o", "--output", required=True, help="Output PNG, PDF or SVG")
    parser.add_argument("--faults", help="Fault line shapefile")
    parser.add_argument("--crs", help="Target CRS, EPSG code or PROJ string")
    parser.add_argument("--assume-crs", help="CRS for layers without .prj")
    parser.add_argument("--config", default="config.json", help="JSON config file")
    parser.add_argument("--field", help="Attribute used for colors")
    parser.add_argument("--mode", choices=["prefix", "rgb", "value"], help="Color mode")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv=None) -> int:
    """
    Main entry point for geomap.

    Returns
    -------
    int
        Exit code (0 for success, non-zero for error).
    """
    from loguru import logger

    args = build_parser().parse_args(argv)

    # Configure logging
    logger.remove()
    logger.add(
        sys.stderr,
        format="<green>{time:HH:mm:ss}</green> | "
               "<level>{level: <8}</level> | "
               "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
               "<level>{message}</level>",
        level="DEBUG" if args.verbose else "INFO"
    )

    from geomap.config import load_config
    from geomap.core.geology_map import render_map

    try:
        cfg = load_config(args.config)
        if args.crs:
            cfg.target_crs = args.crs
        if args.assume_crs:
            cfg.assume_crs = args.assume_crs
        if args.field:
            cfg.unit_field = args.field
        if args.mode:
            cfg.color_mode = args.mode

        out_path = render_map(args.polygons, args.output, args.faults, cfg)
    except (FileNotFoundError, KeyError, TypeError, ValueError) as e:
        logger.error(f"Failed to render map: {e}")
        return 1

    logger.info(f"Map written to {out_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
