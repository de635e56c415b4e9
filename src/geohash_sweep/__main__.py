"""Command-line entrypoint for geohash_sweep."""

from __future__ import annotations

import argparse
import logging
import math
import sys
from collections.abc import Sequence

from geohash_sweep.config import SweepSettings, load_settings
from geohash_sweep.contracts import Point
from geohash_sweep.errors import GeoHashError
from geohash_sweep.hashing.geohash import GeoHash
from geohash_sweep.iterate.base import HashGrid, HashIterator
from geohash_sweep.iterate.radial import RadialIterator
from geohash_sweep.iterate.rectangle import RectangleIterator
from geohash_sweep.iterate.track import TrackIterator

logger = logging.getLogger(__name__)


def _parse_point(value: str) -> Point:
    """Parse a `lat,lon` pair."""
    try:
        lat_text, lon_text = value.split(",")
        return Point(float(lat_text), float(lon_text))
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid point: {value}") from exc


def build_parser() -> argparse.ArgumentParser:
    """Create and return the top-level CLI parser."""
    parser = argparse.ArgumentParser(
        prog="geohash_sweep",
        description="Geohash encoding and coverage sweeps.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s 0.1.0",
    )
    parser.add_argument("--log-level", default=None, help="Overrides GEOHASH_SWEEP_LOG_LEVEL.")

    subparsers = parser.add_subparsers(dest="command")

    encode = subparsers.add_parser("encode", help="Encode a point into a base-32 cell.")
    encode.add_argument("--lat", type=float, required=True)
    encode.add_argument("--lon", type=float, required=True)
    encode.add_argument("--bits", type=int, default=None)

    decode = subparsers.add_parser("decode", help="Print the centre and box of a base-32 cell.")
    decode.add_argument("geohash")

    rectangle = subparsers.add_parser("rectangle", help="List the cells intersecting a box.")
    rectangle.add_argument("--lat-min", type=float, required=True)
    rectangle.add_argument("--lat-max", type=float, required=True)
    rectangle.add_argument("--lon-min", type=float, required=True)
    rectangle.add_argument("--lon-max", type=float, required=True)
    rectangle.add_argument("--bits", type=int, default=None)

    radial = subparsers.add_parser("radial", help="List the cells within a radius of a point.")
    radial.add_argument("--lat", type=float, required=True)
    radial.add_argument("--lon", type=float, required=True)
    radial.add_argument("--radius-m", type=float, default=None)
    radial.add_argument("--bits", type=int, default=None)

    track = subparsers.add_parser("track", help="List the cells within a radius of a polyline.")
    track.add_argument("points", nargs="+", type=_parse_point, metavar="LAT,LON")
    track.add_argument("--radius-m", type=float, default=None)
    track.add_argument("--bits", type=int, default=None)

    return parser


def _grid_too_large(grid: HashGrid, settings: SweepSettings) -> bool:
    if grid.cell_count > settings.max_cells:
        print(f"sweep of {grid.cell_count} cells exceeds {settings.max_cells}", file=sys.stderr)
        return True
    return False


def _print_sweep(iterator: HashIterator, settings: SweepSettings, with_distance: bool = False) -> int:
    count = 0
    for cell in iterator:
        if count >= settings.max_cells:
            print(f"sweep exceeds {settings.max_cells} cells", file=sys.stderr)
            return 2
        count += 1
        if with_distance:
            distance = getattr(iterator, "distance_m", math.nan)
            print(f"{cell.to_base32()} {distance:.2f}")
        else:
            print(cell.to_base32())
    logger.info("sweep produced %d cells", count)
    return 0


def _run(args: argparse.Namespace, settings: SweepSettings) -> int:
    bits = args.bits if getattr(args, "bits", None) is not None else settings.default_bits
    radius_m = args.radius_m if getattr(args, "radius_m", None) is not None else settings.default_radius_m

    if args.command == "encode":
        print(GeoHash.with_bit_precision(args.lat, args.lon, bits).to_base32())
        return 0

    if args.command == "decode":
        cell = GeoHash.from_base32(args.geohash)
        center = cell.center
        box = cell.bounding_box
        print(
            f"bits={cell.precision} "
            f"center={center.latitude:.7f},{center.longitude:.7f} "
            f"box={box.min_latitude:.7f},{box.min_longitude:.7f},{box.max_latitude:.7f},{box.max_longitude:.7f}"
        )
        return 0

    if args.command == "rectangle":
        iterator = RectangleIterator.over_box(args.lat_min, args.lon_min, args.lat_max, args.lon_max, bits)
        if _grid_too_large(iterator.grid, settings):
            return 2
        return _print_sweep(iterator, settings)

    if args.command == "radial":
        radial = RadialIterator(args.lat, args.lon, radius_m, bits)
        if _grid_too_large(radial.window, settings):
            return 2
        return _print_sweep(radial, settings, with_distance=True)

    if args.command == "track":
        track = TrackIterator(args.points, None, radius_m, bits)
        if _grid_too_large(track.grid, settings):
            return 2
        return _print_sweep(track, settings, with_distance=True)

    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Run the CLI application."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return 0
    settings = load_settings()
    logging.basicConfig(level=(args.log_level or settings.log_level).upper())

    try:
        return _run(args, settings)
    except GeoHashError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
