"""Placidus house cusps and angles.

Angles come from the local sidereal time and the mean obliquity. The
intermediate cusps are solved iteratively: each cusp is the ecliptic point
whose right ascension sits a third (or two thirds) of its own semi-arc away
from the meridian. Above the polar circles the semi-arcs stop existing for
part of the ecliptic, so the whole chart switches to equal houses.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import Dict, List, Optional

from ..exceptions import HouseCalculationError
from .astro_math import julian_day, local_sidereal_time, normalize, obliquity

logger = logging.getLogger(__name__)

POLAR_LATITUDE = 66.5
MAX_ITERATIONS = 100
TOLERANCE = 1e-10

# house number -> (fraction of semi-arc, above horizon, equal-step RA offset from RAMC)
PLACIDUS_CUSPS = {
    11: (1.0 / 3.0, True, 30.0),
    12: (2.0 / 3.0, True, 60.0),
    2: (2.0 / 3.0, False, 120.0),
    3: (1.0 / 3.0, False, 150.0),
}


def ra_to_longitude(ra: float, eps: float) -> float:
    """Ecliptic longitude of the ecliptic point with right ascension ``ra``."""

    r = math.radians(ra)
    return normalize(math.degrees(math.atan2(math.sin(r), math.cos(r) * math.cos(math.radians(eps)))))


def midheaven(ramc: float, eps: float) -> float:
    return ra_to_longitude(ramc, eps)


def ascendant(ramc: float, eps: float, lat: float) -> float:
    r = math.radians(ramc)
    e = math.radians(eps)
    y = -math.cos(r)
    x = math.sin(r) * math.cos(e) + math.tan(math.radians(lat)) * math.sin(e)
    # the bare atan2 points at the descendant
    return normalize(math.degrees(math.atan2(y, x)) + 180.0)


def _declination(lon: float, eps: float) -> float:
    return math.asin(math.sin(math.radians(eps)) * math.sin(math.radians(lon)))


def _placidus_cusp(ramc: float, eps: float, lat: float, fraction: float, above: bool, offset: float) -> Optional[float]:
    tan_lat = math.tan(math.radians(lat))
    ra = ramc + offset
    for _ in range(MAX_ITERATIONS):
        arg = -tan_lat * math.tan(_declination(ra_to_longitude(ra, eps), eps))
        if not -1.0 <= arg <= 1.0:
            return None
        diurnal = math.degrees(math.acos(arg))
        if above:
            new_ra = ramc + fraction * diurnal
        else:
            new_ra = ramc + 180.0 - fraction * (180.0 - diurnal)
        if abs(new_ra - ra) < TOLERANCE:
            ra = new_ra
            break
        ra = new_ra
    return ra_to_longitude(ra, eps)


def equal_houses(asc: float) -> List[float]:
    cusps: Dict[int, float] = {h: normalize(asc + 30.0 * (h - 1)) for h in (1, 2, 3, 10, 11, 12)}
    for house in (4, 5, 6, 7, 8, 9):
        opposite = house + 6 if house <= 6 else house - 6
        cusps[house] = normalize(cusps[opposite] + 180.0)
    return [cusps[h] for h in range(1, 13)]


def placidus_houses(ramc: float, eps: float, lat: float, mc: float, asc: float) -> List[float]:
    cusps: Dict[int, float] = {1: asc, 10: mc}
    for house, (fraction, above, offset) in PLACIDUS_CUSPS.items():
        lon = _placidus_cusp(ramc, eps, lat, fraction, above, offset)
        if lon is None:
            logger.debug("placidus_cusp_fallback", extra={"house": house, "latitude": lat})
            lon = ra_to_longitude(ramc + offset, eps)
        cusps[house] = lon
    for house in (1, 2, 3, 10, 11, 12):
        opposite = house + 6 if house <= 6 else house - 6
        cusps[opposite] = normalize(cusps[house] + 180.0)
    return [cusps[h] for h in range(1, 13)]


def houses(instant: datetime, lat: float, lon: float) -> Dict[str, object]:
    """Ascendant, Midheaven and 12 cusps (Placidus, or Equal above the polar circles)."""

    try:
        eps = obliquity(julian_day(instant))
        ramc = local_sidereal_time(instant, lon) * 15.0
        mc = midheaven(ramc, eps)
        asc = ascendant(ramc, eps, lat)
        if abs(lat) > POLAR_LATITUDE:
            system = "Equal"
            cusps = equal_houses(asc)
        else:
            system = "Placidus"
            cusps = placidus_houses(ramc, eps, lat, mc, asc)
    except (ValueError, ArithmeticError) as exc:
        raise HouseCalculationError(f"house calculation failed at lat={lat}, lon={lon}: {exc}") from exc

    if any(math.isnan(c) for c in cusps + [asc, mc]):
        raise HouseCalculationError(f"house calculation produced NaN at lat={lat}, lon={lon}")

    return {"asc": asc, "mc": mc, "cusps": cusps, "system": system}


def house_of(lon: float, cusps: List[float]) -> int:
    """House number (1..12) whose band [cusp_i, cusp_i+1) contains ``lon``."""

    lon = normalize(lon)
    for i in range(12):
        current = cusps[i]
        following = cusps[(i + 1) % 12]
        if current > following:
            # band crosses 0° Aries
            if lon >= current or lon < following:
                return i + 1
        elif current <= lon < following:
            return i + 1
    return 1
