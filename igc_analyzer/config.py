"""Central configuration for the IGC track analyzer.

All values are constants imported by the rest of the package. Adjust as needed
for your airfield. Most values can be overridden from environment variables
(optionally via a local `.env`).
"""

from __future__ import annotations

import importlib
import os


def _env_float(key: str, default: float) -> float:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _env_int(key: str, default: int) -> int:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_bool(key: str, default: bool) -> bool:
    value = os.getenv(key)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    return default


# Load .env variables when python-dotenv is available.
_load_dotenv = None
try:
    _dotenv_mod = importlib.import_module("dotenv")
    _load_dotenv = getattr(_dotenv_mod, "load_dotenv", None)
except Exception:
    _load_dotenv = None

if callable(_load_dotenv):
    # Load .env from the current directory or any parent folder.
    _load_dotenv()


# ---------------------------------------------------------------------------
# Baseline
# ---------------------------------------------------------------------------
# Fixed anchors defining the baseline, as (lat, lon) in degrees. The start
# anchor sits on the extended launch field line, the end anchor at the winch.
GRID_ANCHOR_START = (
    _env_float("GRID_ANCHOR_START_LAT", 51.55166),
    _env_float("GRID_ANCHOR_START_LON", 4.93284),
)
GRID_ANCHOR_END = (
    _env_float("GRID_ANCHOR_END_LAT", 51.56619),
    _env_float("GRID_ANCHOR_END_LON", 4.94022),
)

# Metric CRS used for baseline offsets. Empty means "derive the UTM zone from
# the anchors".
METRIC_CRS = os.getenv("METRIC_CRS", "EPSG:32631")

# CRS of the interactive map; grid geometry is built in this projection.
RENDER_CRS = "EPSG:3857"

# Tile edge length in pixels; defines pixel space at a given zoom.
TILE_SIZE = 256


# ---------------------------------------------------------------------------
# Map view
# ---------------------------------------------------------------------------
INIT_COORDS = (51.55802, 4.93596)
INIT_ZOOM = _env_int("INIT_ZOOM", 14)

# Theme applied when no saved options exist. "No map" disables tiles.
DEFAULT_THEME = os.getenv("DEFAULT_THEME", "CartoDB.DarkMatter")

# Tile providers offered by the settings layer, mapped to folium tile names.
AVAILABLE_THEMES = {
    "CartoDB.DarkMatter": "CartoDB dark_matter",
    "CartoDB.Positron": "CartoDB positron",
    "OpenStreetMap.Mapnik": "OpenStreetMap",
    "No map": None,
}

DEFAULT_LINE_COLOR = "#0CB1E8"
DEFAULT_LINE_WEIGHT = 1.0
DEFAULT_LINE_OPACITY = 0.5
DEFAULT_LINE_SMOOTH_FACTOR = 1.0
# Replace the style of already drawn tracks when options change.
DEFAULT_OVERRIDE_EXISTING = _env_bool("DEFAULT_OVERRIDE_EXISTING", True)
# Colour tracks by the activity type encoded in their filename.
DEFAULT_DETECT_COLORS = _env_bool("DEFAULT_DETECT_COLORS", True)


# ---------------------------------------------------------------------------
# Grid overlay
# ---------------------------------------------------------------------------
# Distance between gridlines in metres.
GRID_SPACING_M = _env_float("GRID_SPACING_M", 250.0)

# Padding around the viewport, in grid steps, so lines do not pop in at the
# edges while panning.
GRID_PADDING_STEPS = 1.5

# Upper bound on lines per axis. Views needing more produce no grid.
GRID_MAX_LINES_PER_AXIS = _env_int("GRID_MAX_LINES_PER_AXIS", 2000)

GRID_LINE_STYLE = {"color": "#ffffff", "opacity": 0.25, "weight": 1}
BASELINE_LINE_STYLE = {
    "color": "#ffcc00",
    "opacity": 0.9,
    "weight": 2,
    "dash_array": "6 4",
}


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------
# Tracks whose maximum offset from the baseline exceeds this (strictly) are
# flagged.
DEVIATION_THRESHOLD_M = _env_float("DEVIATION_THRESHOLD_M", 700.0)
DEVIATION_COLOR = "#ff3b3b"
DEVIATION_MIN_WEIGHT = _env_float("DEVIATION_MIN_WEIGHT", 2.0)

# (class name, filename regex, colour). First match wins.
ACTIVITY_COLOR_PATTERNS = (
    ("hike", r"-(Hike|Walk)\.gpx", "#ffc0cb"),
    ("run", r"-Run\.gpx", "#ff0000"),
    ("ride", r"-Ride\.gpx", "#00ffff"),
)


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------
# Upscale factor for vector export.
EXPORT_SCALE = _env_int("EXPORT_SCALE", 2)

# Pixel coordinates are rounded to 1/EXPORT_QUANTIZE_FACTOR of a pixel.
EXPORT_QUANTIZE_FACTOR = 10


# ---------------------------------------------------------------------------
# Ingestion / persistence
# ---------------------------------------------------------------------------
# Parallel readers used when loading several track files at once.
INGEST_MAX_WORKERS = _env_int("INGEST_MAX_WORKERS", 4)

# Where the settings layer persists map options.
OPTIONS_FILE = os.getenv("OPTIONS_FILE", "igc_analyzer_options.json")
