"""Command line entry point: load tracks, render the map, optionally export SVG."""

from __future__ import annotations

import argparse
from datetime import datetime
import logging
from pathlib import Path
from typing import Optional, Sequence

from .config import EXPORT_SCALE, GRID_ANCHOR_END, GRID_ANCHOR_START, INIT_ZOOM, OPTIONS_FILE
from .errors import IGCAnalyzerError
from .export import render_svg
from .filters import DateFilter
from .ingest import ingest_files, summarize_failures
from .models import Viewport
from .options_store import OptionsStore
from .rendering import render_map
from .track_map import OverlayConfig, TrackMap


def _setup_logging() -> None:
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(
            level=logging.INFO,
            format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        )


def _parse_date(value: str) -> datetime:
    try:
        return datetime.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Invalid date '{value}'") from exc


def _build_parser() -> argparse.ArgumentParser:
    """Return the CLI argument parser."""

    parser = argparse.ArgumentParser(
        description=(
            "Plot decoded flight tracks on an interactive map with a grid"
            " aligned to the launch baseline and flag tracks straying from it."
        )
    )
    parser.add_argument("tracks", nargs="+", type=Path, help="Decoded track JSON files")
    parser.add_argument(
        "--output",
        type=Path,
        default=Path("maps") / "tracks.html",
        help="HTML map output path (default: maps/tracks.html)",
    )
    parser.add_argument("--svg", type=Path, help="Optional SVG export path")
    parser.add_argument(
        "--scale",
        type=int,
        default=EXPORT_SCALE,
        help=f"Upscale factor for the SVG export (default: {EXPORT_SCALE})",
    )
    parser.add_argument("--zoom", type=float, default=INIT_ZOOM)
    parser.add_argument("--min-date", type=_parse_date)
    parser.add_argument("--max-date", type=_parse_date)
    parser.add_argument(
        "--options",
        type=Path,
        default=Path(OPTIONS_FILE),
        help="Saved map options (JSON); ignored when missing",
    )
    return parser


def _initial_viewport(track_map: TrackMap, zoom: float) -> Viewport:
    bounds = track_map.bounds(zoom)
    if bounds is None:
        bounds = Viewport.from_points([GRID_ANCHOR_START, GRID_ANCHOR_END], zoom)
    return bounds.padded(0.1)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entry point used via ``python -m igc_analyzer``."""

    parser = _build_parser()
    args = parser.parse_args(argv)
    _setup_logging()

    options = OptionsStore(args.options).load()
    try:
        track_map = TrackMap(OverlayConfig.from_settings(), options)
    except IGCAnalyzerError as exc:
        logging.error("Invalid baseline configuration: %s", exc)
        return 1

    report = ingest_files(args.tracks, track_map)
    if report.failures:
        count, names = summarize_failures(report)
        logging.warning("%d file(s) failed to load: %s", count, names)
    if not report.loaded:
        logging.error("No tracks loaded")
        return 1

    if args.min_date or args.max_date:
        track_map.apply_filters(DateFilter(args.min_date, args.max_date))

    viewport = _initial_viewport(track_map, args.zoom)
    render_map(track_map, viewport, output_html_path=args.output)
    logging.info("Map written to %s", args.output)

    if args.svg is not None:
        paths = track_map.export_paths(viewport, args.scale)
        bounds = track_map.rendering_projection.pixel_bounds(viewport).scaled(args.scale)
        args.svg.parent.mkdir(parents=True, exist_ok=True)
        args.svg.write_text(render_svg(paths, bounds), encoding="utf-8")
        logging.info("SVG export with %d paths written to %s", len(paths), args.svg)
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
