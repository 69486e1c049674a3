"""JSON persistence for map options."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional, Union

from .config import OPTIONS_FILE
from .models import MapOptions

PathLike = Union[str, Path]

LOGGER = logging.getLogger(__name__)


class OptionsStore:
    """Save and restore :class:`MapOptions` in a single JSON file.

    Only called when options are saved from or restored into the settings
    layer; the analysis code never reads the file itself.
    """

    def __init__(self, path: PathLike = OPTIONS_FILE) -> None:
        self.path = Path(path)

    def save(self, options: MapOptions) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps(options.to_dict(), indent=2, sort_keys=True), encoding="utf-8"
        )
        LOGGER.debug("Saved options to %s", self.path)

    def load(self) -> Optional[MapOptions]:
        """Return the stored options, or ``None`` when absent or unusable."""

        if not self.path.exists():
            return None
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            LOGGER.warning("Ignoring unreadable options file %s: %s", self.path, exc)
            return None
        if not isinstance(payload, dict):
            LOGGER.warning("Ignoring options file %s: expected a JSON object", self.path)
            return None
        try:
            return MapOptions.from_dict(payload)
        except ValueError as exc:
            LOGGER.warning("Ignoring invalid options in %s: %s", self.path, exc)
            return None


__all__ = ["OptionsStore"]
