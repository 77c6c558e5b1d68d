"""Natal and current chart construction."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

from ..exceptions import (
    HouseCalculationError,
    IncompletePositions,
    InvalidCoordinatesError,
    InvalidDateTimeError,
    ProviderUnavailable,
)
from ..schemas.charts import CelestialPosition, Chart, ChartMetadata
from . import houses as houses_svc
from .constants import BODIES, REQUIRED_BODIES
from .ephem import EphemerisClient, default_client
from .timezones import TimezoneLookup, offset_for_zone, resolve_offset

logger = logging.getLogger(__name__)

# placeholder angles used when the house calculation fails
FALLBACK_ASCENDANT = 0.0
FALLBACK_MIDHEAVEN = 270.0


def validate_coordinates(lat: float, lon: float) -> None:
    if not -90 <= lat <= 90:
        raise InvalidCoordinatesError(f"Latitude must be between -90 and 90, got {lat}")
    if not -180 <= lon <= 180:
        raise InvalidCoordinatesError(f"Longitude must be between -180 and 180, got {lon}")


def parse_local_datetime(date_str: str, time_str: str) -> datetime:
    try:
        return datetime.fromisoformat(f"{date_str}T{time_str}")
    except ValueError as exc:
        raise InvalidDateTimeError(f"Invalid date/time: {date_str!r} {time_str!r}") from exc


def local_to_utc(local_dt: datetime, tz_offset_hours: float) -> datetime:
    # 13:20 at UTC+1 is 12:20 UTC
    return (local_dt - timedelta(hours=tz_offset_hours)).replace(tzinfo=timezone.utc)


def _house_layout(instant: datetime, lat: float, lon: float):
    try:
        return houses_svc.houses(instant, lat, lon)
    except HouseCalculationError as exc:
        logger.warning("house_calculation_failed", extra={"lat": lat, "lon": lon, "error": str(exc)})
        return None


def calculate_chart(
    instant: datetime,
    lat: float,
    lon: float,
    client: EphemerisClient,
    *,
    kind: str = "current",
    date: Optional[str] = None,
    time: Optional[str] = None,
    tz_offset: Optional[float] = None,
    tz_estimated: bool = False,
    calculated_at: Optional[datetime] = None,
) -> Chart:
    """Build a chart for a UTC instant and a geographic location.

    Raises ProviderUnavailable when the ephemeris is not ready and
    IncompletePositions when the Sun or Moon is missing. Any other body that
    the ephemeris cannot produce is left out of the chart.
    """

    validate_coordinates(lat, lon)
    if not client.ready:
        raise ProviderUnavailable(f"Ephemeris backend {client.backend.name!r} is not available")

    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    else:
        instant = instant.astimezone(timezone.utc)

    raw = client.positions(BODIES, instant)
    missing_required = [b for b in REQUIRED_BODIES if raw.get(b) is None]
    if missing_required:
        raise IncompletePositions(missing_required)
    missing = [b for b in BODIES if raw.get(b) is None]
    if missing:
        logger.warning("chart_bodies_missing", extra={"bodies": missing})

    layout = _house_layout(instant, lat, lon)
    if layout is not None:
        cusps = layout["cusps"]
        ascendant = CelestialPosition.from_degree(layout["asc"])
        midheaven = CelestialPosition.from_degree(layout["mc"])
        cusp_positions = [CelestialPosition.from_degree(c) for c in cusps]
        house_system = layout["system"]
    else:
        cusps = []
        ascendant = CelestialPosition.from_degree(FALLBACK_ASCENDANT)
        midheaven = CelestialPosition.from_degree(FALLBACK_MIDHEAVEN)
        cusp_positions = []
        house_system = "Unknown"

    bodies: Dict[str, CelestialPosition] = {}
    for body in BODIES:
        lon_deg = raw.get(body)
        if lon_deg is None:
            continue
        house = houses_svc.house_of(lon_deg, cusps) if len(cusps) == 12 else None
        bodies[body] = CelestialPosition.from_degree(lon_deg, house=house)

    metadata = ChartMetadata(
        kind=kind,
        date=date,
        time=time,
        latitude=lat,
        longitude=lon,
        timezone_offset=tz_offset,
        timezone_estimated=tz_estimated,
        utc_datetime=instant,
        calculated_at=calculated_at or datetime.now(timezone.utc),
    )
    return Chart(
        **bodies,
        ascendant=ascendant,
        midheaven=midheaven,
        houses=cusp_positions,
        house_system=house_system,
        metadata=metadata,
    )


async def _ready_client(client: Optional[EphemerisClient]) -> EphemerisClient:
    client = client or default_client()
    if not await client.ensure_ready():
        raise ProviderUnavailable(f"Ephemeris backend {client.backend.name!r} failed to initialize")
    return client


async def calculate_natal_chart(
    date: str,
    time: str,
    lat: float,
    lon: float,
    tz_offset_hours: Optional[float] = None,
    *,
    timezone_name: Optional[str] = None,
    client: Optional[EphemerisClient] = None,
    tz_lookup: Optional[TimezoneLookup] = None,
) -> Chart:
    """Natal chart from local birth date/time at a place.

    When ``tz_offset_hours`` is missing the offset comes from ``timezone_name``,
    then from ``tz_lookup``, and finally from a longitude estimate.
    """

    validate_coordinates(lat, lon)
    local_dt = parse_local_datetime(date, time)
    client = await _ready_client(client)

    estimated = False
    if tz_offset_hours is None:
        if timezone_name:
            tz_offset_hours = offset_for_zone(timezone_name, local_dt)
        else:
            tz_offset_hours, estimated = resolve_offset(lat, lon, local_dt, tz_lookup)

    utc_dt = local_to_utc(local_dt, tz_offset_hours)
    logger.info(
        "natal_chart_requested",
        extra={"local": local_dt.isoformat(), "utc": utc_dt.isoformat(), "tz_offset": tz_offset_hours},
    )
    return calculate_chart(
        utc_dt,
        lat,
        lon,
        client,
        kind="natal",
        date=date,
        time=time,
        tz_offset=tz_offset_hours,
        tz_estimated=estimated,
    )


async def calculate_current_chart(
    lat: float,
    lon: float,
    instant: Optional[datetime] = None,
    *,
    client: Optional[EphemerisClient] = None,
) -> Chart:
    client = await _ready_client(client)
    return calculate_chart(instant or datetime.now(timezone.utc), lat, lon, client, kind="current")
