"""Timezone offset resolution for birth data.

The precise offset normally comes from an external lookup service supplied by
the caller. When none is available the offset is estimated from the longitude,
which is wrong wherever political zones drift from solar time.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import Callable, Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..exceptions import InvalidDateTimeError

logger = logging.getLogger(__name__)

# (lat, lon, local naive datetime) -> offset hours from UTC
TimezoneLookup = Callable[[float, float, datetime], float]


def estimate_timezone_offset(lon: float) -> float:
    """Rough offset: 15° of longitude per hour, rounded half up."""

    return float(math.floor(lon / 15.0 + 0.5))


def offset_for_zone(zone: str, local_dt: datetime) -> float:
    """UTC offset in hours of an IANA zone at a local wall-clock time."""

    try:
        tz = ZoneInfo(zone)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise InvalidDateTimeError(f"Unknown timezone: {zone}") from exc
    offset = local_dt.replace(tzinfo=tz).utcoffset()
    return offset.total_seconds() / 3600.0


def resolve_offset(
    lat: float,
    lon: float,
    local_dt: datetime,
    lookup: Optional[TimezoneLookup] = None,
) -> Tuple[float, bool]:
    """Return ``(offset_hours, estimated)`` for a birth place and local time."""

    if lookup is not None:
        try:
            return float(lookup(lat, lon, local_dt)), False
        except Exception as exc:
            logger.warning(
                "timezone_lookup_failed",
                extra={"lat": lat, "lon": lon, "error": repr(exc)},
            )
    offset = estimate_timezone_offset(lon)
    logger.warning("timezone_offset_estimated", extra={"lon": lon, "offset": offset})
    return offset, True
