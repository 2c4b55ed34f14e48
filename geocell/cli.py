"""
Command-line access to coverings and cell lookups.

Usage:
    geocell cover --lat -33.8568 --lon 151.2153 --radius 5000 [--max-cells 8]
    geocell cover --bbox -34 -33 151 152 --interior --out covering.json
    geocell cell --lat 51.5074 --lon -0.1278 --level 12
    geocell cell --token 89c25
"""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from pydantic import ValidationError

from geocell import __version__
from geocell.cell import Cell
from geocell.cellid import CellId
from geocell.config import configure_logging, settings
from geocell.coverer import RegionCoverer
from geocell.errors import GeoCellError
from geocell.geo.constants import EARTH_RADIUS_M
from geocell.models import BoundingBox, CapGeometry, Covering, CoveringOptions, Location
from geocell.validation import validate_level

logger = logging.getLogger("geocell")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="geocell", description="Hierarchical cells on the sphere")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("--log-level", default=None, help="Logging level (default from settings)")
    sub = p.add_subparsers(dest="command", required=True)

    cover = sub.add_parser("cover", help="Cover a circle or bounding box with cells")
    shape = cover.add_mutually_exclusive_group(required=True)
    shape.add_argument("--radius", type=float, help="Circle radius in meters (needs --lat/--lon)")
    shape.add_argument(
        "--bbox",
        type=float,
        nargs=4,
        metavar=("MIN_LAT", "MAX_LAT", "MIN_LON", "MAX_LON"),
        help="Bounding box in degrees",
    )
    cover.add_argument("--lat", type=float, help="Circle center latitude")
    cover.add_argument("--lon", type=float, help="Circle center longitude")
    cover.add_argument("--min-level", type=int, default=settings.default_min_level)
    cover.add_argument("--max-level", type=int, default=settings.default_max_level)
    cover.add_argument("--level-mod", type=int, default=settings.default_level_mod)
    cover.add_argument("--max-cells", type=int, default=settings.default_max_cells)
    cover.add_argument("--interior", action="store_true", help="Only cells inside the shape")
    cover.add_argument("--out", help="Write JSON here instead of stdout")

    cell = sub.add_parser("cell", help="Describe one cell")
    cell.add_argument("--token", help="Cell token")
    cell.add_argument("--lat", type=float, help="Latitude of a point in the cell")
    cell.add_argument("--lon", type=float, help="Longitude of a point in the cell")
    cell.add_argument("--level", type=int, default=30, help="Level of the cell containing the point")
    return p


def _region(args: argparse.Namespace):
    if args.bbox is not None:
        min_lat, max_lat, min_lon, max_lon = args.bbox
        return BoundingBox(
            min_lat=min_lat, max_lat=max_lat, min_lon=min_lon, max_lon=max_lon
        ).to_rect()
    if args.lat is None or args.lon is None:
        raise GeoCellError("--radius needs --lat and --lon")
    return CapGeometry(center=Location(lat=args.lat, lon=args.lon), radius=args.radius).to_cap()


def cover_command(args: argparse.Namespace) -> dict:
    options = CoveringOptions(
        min_level=args.min_level,
        max_level=args.max_level,
        level_mod=args.level_mod,
        max_cells=args.max_cells,
    )
    coverer = RegionCoverer(options)
    region = _region(args)
    if args.interior:
        cells = coverer.get_interior_covering_cells(region)
    else:
        cells = coverer.get_covering_cells(region)
    logger.info(f"Covered region with {len(cells)} cells")
    return Covering.from_cells(cells, coverer.options, interior=args.interior).model_dump()


def cell_command(args: argparse.Namespace) -> dict:
    if args.token is not None:
        cell_id = CellId.from_token(args.token)
    elif args.lat is not None and args.lon is not None:
        validate_level(args.level)
        location = Location(lat=args.lat, lon=args.lon)
        cell_id = CellId.from_latlng(location.to_latlng()).parent(args.level)
    else:
        raise GeoCellError("Give --token, or --lat and --lon")

    cell = Cell(cell_id)
    center = cell_id.to_latlng()
    return {
        "token": cell_id.to_token(),
        "id": cell_id.id,
        "face": cell.face,
        "level": cell.level,
        "path": str(cell_id),
        "center": Location(lat=center.lat_degrees, lon=center.lng_degrees).model_dump(),
        "bounds": BoundingBox.from_rect(cell.rect_bound()).model_dump(),
        "area_m2": cell.exact_area() * EARTH_RADIUS_M**2,
    }


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    try:
        if args.command == "cover":
            payload = cover_command(args)
        else:
            payload = cell_command(args)
    except (GeoCellError, ValidationError) as e:
        logger.error(f"{args.command} failed: {e}")
        return 2

    text = json.dumps(payload, indent=2)
    if getattr(args, "out", None):
        out = Path(args.out)
        out.write_text(text, encoding="utf-8")
        print(f"Wrote {len(payload['tokens'])} cells to {out}")
    else:
        print(text)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
