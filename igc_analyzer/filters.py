"""Date filters deciding which tracks are shown."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from .models import Track

_MIN_DATE = datetime(1900, 1, 1)
_MAX_DATE = datetime(2500, 1, 1)


def _comparable(value: datetime, reference: datetime) -> datetime:
    """Align naive/aware datetimes so they can be compared."""

    if value.tzinfo is None and reference.tzinfo is not None:
        return value.replace(tzinfo=timezone.utc)
    if value.tzinfo is not None and reference.tzinfo is None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


@dataclass(frozen=True, slots=True)
class DateFilter:
    """Inclusive date window; missing bounds are open-ended.

    Tracks without a timestamp are never hidden.
    """

    min_date: Optional[datetime] = None
    max_date: Optional[datetime] = None

    def hides(self, track: Track) -> bool:
        timestamp = track.timestamp
        if timestamp is None:
            return False
        lower = _comparable(self.min_date or _MIN_DATE, timestamp)
        upper = _comparable(self.max_date or _MAX_DATE, timestamp)
        return lower > timestamp or upper < timestamp


__all__ = ["DateFilter"]
