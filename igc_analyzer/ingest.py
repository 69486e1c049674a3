"""Loading decoded track documents into a :class:`TrackMap`.

Flight recorder files are decoded upstream; this module reads the decoder's
JSON output. A document is either one track object or a list of them::

    {"filename": "2024-05-01-Flight.igc",
     "timestamp": "2024-05-01T10:02:11Z",
     "callsign": "XY", "glider_type": "ASK 21", "registration": "PH-123",
     "num_flight": "4",
     "points": [[51.55, 4.93], [51.56, 4.94]]}

``points`` may be replaced by an encoded ``polyline`` string.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import datetime
import json
import logging
from pathlib import Path
from typing import Any, List, Mapping, Optional, Sequence, Tuple, Union

from polyline import decode as polyline_decode

from .config import INGEST_MAX_WORKERS
from .errors import TrackFormatError
from .models import LatLon, RawTrack, Track
from .track_map import TrackMap

PathLike = Union[str, Path]

LOGGER = logging.getLogger(__name__)

_METADATA_FIELDS = ("pilot", "callsign", "glider_type", "registration", "num_flight")


@dataclass(slots=True)
class IngestFailure:
    name: str
    error: str


@dataclass(slots=True)
class IngestReport:
    """Outcome of loading a batch of files."""

    loaded: List[Track] = field(default_factory=list)
    failures: List[IngestFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


def decode_polyline(encoded: str) -> List[LatLon]:
    """Decode an encoded polyline string into a list of (lat, lon) tuples."""

    if not encoded:
        return []
    try:
        decoded = polyline_decode(encoded)
    except (ValueError, TypeError, IndexError) as exc:
        raise TrackFormatError("Unable to decode polyline") from exc
    return [(float(lat), float(lon)) for lat, lon in decoded]


def _parse_points(raw: Any) -> List[LatLon]:
    if not isinstance(raw, list):
        raise TrackFormatError("Track 'points' must be a list of [lat, lon] pairs")
    points: List[LatLon] = []
    for index, item in enumerate(raw):
        try:
            lat, lon = item
            lat_f, lon_f = float(lat), float(lon)
        except (TypeError, ValueError) as exc:
            raise TrackFormatError(f"Invalid point at index {index}: {item!r}") from exc
        if not (-90.0 <= lat_f <= 90.0 and -180.0 <= lon_f <= 180.0):
            raise TrackFormatError(f"Point out of range at index {index}: {item!r}")
        points.append((lat_f, lon_f))
    return points


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if value in (None, ""):
        return None
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError as exc:
        raise TrackFormatError(f"Invalid timestamp {value!r}") from exc


def parse_track(payload: Mapping[str, Any], default_filename: str) -> RawTrack:
    """Convert one decoded track mapping into a :class:`RawTrack`.

    Raises:
        TrackFormatError: If coordinates are missing or malformed.
    """

    if not isinstance(payload, Mapping):
        raise TrackFormatError("Track entry must be a JSON object")
    if "points" in payload:
        points = _parse_points(payload["points"])
    elif "polyline" in payload:
        points = decode_polyline(str(payload["polyline"]))
    else:
        raise TrackFormatError("Track has neither 'points' nor 'polyline'")
    if not points:
        raise TrackFormatError("Track has no GPS points")
    metadata = {
        key: (str(payload[key]) if payload.get(key) not in (None, "") else None)
        for key in _METADATA_FIELDS
    }
    return RawTrack(
        points=points,
        filename=str(payload.get("filename") or default_filename),
        timestamp=_parse_timestamp(payload.get("timestamp")),
        **metadata,
    )


def load_track_file(path: PathLike) -> List[RawTrack]:
    """Read every track stored in a JSON document.

    Raises:
        TrackFormatError: If the file cannot be read or parsed.
    """

    file_path = Path(path)
    try:
        document = json.loads(file_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise TrackFormatError(f"Unable to read {file_path.name}: {exc}") from exc
    entries = document if isinstance(document, list) else [document]
    if not entries:
        raise TrackFormatError(f"{file_path.name} contains no tracks")
    return [parse_track(entry, file_path.name) for entry in entries]


def ingest_files(
    paths: Sequence[PathLike],
    track_map: TrackMap,
    *,
    max_workers: int = INGEST_MAX_WORKERS,
) -> IngestReport:
    """Load files in parallel and add their tracks one at a time.

    Files are decoded on worker threads; tracks are added on the calling
    thread in completion order, so the resulting track order need not match
    ``paths``. A failing file is recorded in the report and does not affect
    the others.
    """

    report = IngestReport()
    if not paths:
        return report
    workers = max(1, min(max_workers, len(paths)))
    with ThreadPoolExecutor(max_workers=workers) as executor:
        future_map = {executor.submit(load_track_file, path): Path(path) for path in paths}
        for future in as_completed(future_map):
            path = future_map[future]
            try:
                raws = future.result()
            except TrackFormatError as exc:
                LOGGER.error("Failed to load %s: %s", path.name, exc)
                report.failures.append(IngestFailure(name=path.name, error=str(exc)))
                continue
            report.loaded.extend(track_map.add_track(raw) for raw in raws)
    LOGGER.info(
        "Loaded %d tracks from %d files (%d failed)",
        len(report.loaded),
        len(paths),
        len(report.failures),
    )
    return report


def summarize_failures(report: IngestReport) -> Tuple[int, str]:
    names = ", ".join(sorted(f.name for f in report.failures))
    return len(report.failures), names


__all__ = [
    "IngestFailure",
    "IngestReport",
    "decode_polyline",
    "parse_track",
    "load_track_file",
    "ingest_files",
    "summarize_failures",
]
