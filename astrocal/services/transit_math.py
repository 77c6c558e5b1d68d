"""Mathematical helpers for transit calculations.

These utilities are intentionally kept free of heavy runtime dependencies so
they can be unit-tested without requiring the Swiss Ephemeris bindings.
"""

from __future__ import annotations

from .astro_math import angular_separation


def aspect_orb(transit_lon: float, natal_lon: float, aspect_angle: float) -> float:
    """Return the distance in degrees from the exact aspect angle."""

    return abs(angular_separation(transit_lon, natal_lon) - aspect_angle)


def is_applying(
    transit_lon: float,
    transit_lon_later: float,
    natal_lon: float,
    aspect_angle: float,
) -> bool:
    """Determine whether a transit aspect is applying.

    A transit is considered *applying* when the orb to the exact aspect is
    smaller at the later sample than at the current one, i.e. the aspect is
    tightening. Otherwise it is *separating*.

    Parameters
    ----------
    transit_lon
        Ecliptic longitude of the transiting body at the sample instant.
    transit_lon_later
        Ecliptic longitude of the same body a short time later (one hour for
        the daily transit list).
    natal_lon
        The fixed ecliptic longitude of the natal point.
    aspect_angle
        The exact angular difference for the aspect (e.g. 0° for conjunction,
        90° for a square).
    """

    now = aspect_orb(transit_lon, natal_lon, aspect_angle)
    later = aspect_orb(transit_lon_later, natal_lon, aspect_angle)
    return later < now


__all__ = ["aspect_orb", "is_applying"]
