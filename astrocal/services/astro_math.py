"""Time and coordinate helpers shared by the house and transit calculators.

Everything here is pure arithmetic so it can be unit-tested without the Swiss
Ephemeris bindings. Invalid input (NaN, inf) is not guarded and simply
propagates through the formulas.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Tuple

from .constants import SIGN_OFFSETS, SIGNS, ZodiacSign

J2000 = 2451545.0
UNIX_EPOCH_JD = 2440587.5


def normalize(deg: float) -> float:
    """Normalize degrees to the [0, 360) range."""

    out = deg % 360.0
    # tiny negative inputs round up to exactly 360.0
    return 0.0 if out >= 360.0 else out


def _as_utc(instant: datetime) -> datetime:
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


def julian_day(instant: datetime) -> float:
    """Julian Day (UT) for an instant; naive datetimes are read as UTC."""

    return _as_utc(instant).timestamp() / 86400.0 + UNIX_EPOCH_JD


def centuries_since_j2000(jd: float) -> float:
    return (jd - J2000) / 36525.0


def obliquity(jd: float) -> float:
    """Mean obliquity of the ecliptic in degrees."""

    t = centuries_since_j2000(jd)
    return 23.439291 - 0.0130042 * t - 0.00000164 * t * t + 0.000000504 * t * t * t


def equation_of_equinoxes(jd: float) -> float:
    """Nutation in right ascension (degrees), low-precision series."""

    t = centuries_since_j2000(jd)
    omega = math.radians(125.04452 - 1934.136261 * t)
    sun_mean = math.radians(280.4665 + 36000.7698 * t)
    moon_mean = math.radians(218.3165 + 481267.8813 * t)
    dpsi_arcsec = (
        -17.20 * math.sin(omega)
        - 1.32 * math.sin(2 * sun_mean)
        - 0.23 * math.sin(2 * moon_mean)
        + 0.21 * math.sin(2 * omega)
    )
    return dpsi_arcsec / 3600.0 * math.cos(math.radians(obliquity(jd)))


def greenwich_sidereal_degrees(jd: float, nutation: bool = False) -> float:
    t = centuries_since_j2000(jd)
    gmst = (
        280.46061837
        + 360.98564736629 * (jd - J2000)
        + 0.000387933 * t * t
        - t * t * t / 38710000.0
    )
    if nutation:
        gmst += equation_of_equinoxes(jd)
    return normalize(gmst)


def local_sidereal_time(instant: datetime, longitude: float, nutation: bool = False) -> float:
    """Local sidereal time in hours [0, 24); east longitude is positive."""

    gst_hours = greenwich_sidereal_degrees(julian_day(instant), nutation) / 15.0
    lst = (gst_hours + longitude / 15.0) % 24.0
    return 0.0 if lst >= 24.0 else lst


def to_zodiac_position(absolute_degree: float) -> Tuple[ZodiacSign, float]:
    """Split an absolute ecliptic longitude into (sign, degree within sign)."""

    lon = normalize(absolute_degree)
    index = min(int(lon // 30.0), 11)
    sign = SIGNS[index]
    return sign, lon - SIGN_OFFSETS[sign]


def to_absolute_degree(sign: ZodiacSign | str, degree_in_sign: float) -> float:
    return SIGN_OFFSETS[ZodiacSign(sign)] + float(degree_in_sign)


def angular_separation(a: float, b: float) -> float:
    """Shortest arc between two longitudes, in [0, 180]."""

    d = abs(normalize(a) - normalize(b))
    return 360.0 - d if d > 180.0 else d


__all__ = [
    "angular_separation",
    "equation_of_equinoxes",
    "julian_day",
    "local_sidereal_time",
    "normalize",
    "obliquity",
    "to_absolute_degree",
    "to_zodiac_position",
]
