"""Daily transit-to-natal aspects, scored and ranked for the calendar.

Transiting positions are sampled once per day at local noon, so a fast body
such as the Moon is only resolved to that instant. Every ordered pair of
transiting and natal bodies that forms an aspect becomes a ``TransitEvent``;
the score exists to rank up to a hundred pairs down to a readable top list.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date as Date, datetime, time, timedelta, timezone, tzinfo
from typing import Iterable, List, Optional

from ..schemas.charts import Chart
from ..schemas.transits import TransitEvent
from .aspects import AspectDefinition, aspect_color, classify
from .astro_math import angular_separation
from .constants import ANGULAR_HOUSES, BODIES, PLANET_SYMBOLS, display_name
from .ephem import EphemerisClient, default_client
from .transit_math import is_applying

logger = logging.getLogger(__name__)

# 0-10 scale; the Moon is the most personal, Mercury the least
PLANET_IMPORTANCE = {
    "sun": 9,
    "moon": 10,
    "mercury": 5,
    "venus": 6,
    "mars": 7,
    "jupiter": 7,
    "saturn": 8,
    "uranus": 6,
    "neptune": 6,
    "pluto": 7,
}

CLOSENESS_WEIGHT = 0.50
ASPECT_WEIGHT = 0.20
IMPORTANCE_WEIGHT = 0.15
ANGULAR_HOUSE_BONUS = 0.12
APPLYING_BONUS = 0.05
MOON_DAMPING = 0.5
MOON_TIGHT_ORB = 3.0

SAMPLE_HOUR = 12
APPLYING_STEP = timedelta(hours=1)


@dataclass(frozen=True)
class ScoreBreakdown:
    closeness: float
    aspect_weight: float
    planet_importance: float
    angular_house_bonus: float
    applying_bonus: float
    raw: float
    damping: float
    score: float


def score_transit(
    aspect: AspectDefinition,
    orb: float,
    transit_body: str,
    natal_body: str,
    natal_house: Optional[int] = None,
    applying: bool = False,
) -> ScoreBreakdown:
    """Composite 0..1 score for one transit aspect."""

    closeness = max(0.0, (aspect.orb - orb) / aspect.orb)
    importance = (PLANET_IMPORTANCE.get(transit_body, 5) + PLANET_IMPORTANCE.get(natal_body, 5)) / 20.0
    angular = ANGULAR_HOUSE_BONUS if natal_house in ANGULAR_HOUSES else 0.0
    applying_bonus = APPLYING_BONUS if applying else 0.0

    raw = (
        CLOSENESS_WEIGHT * closeness
        + ASPECT_WEIGHT * aspect.weight
        + IMPORTANCE_WEIGHT * importance
        + angular
        + applying_bonus
    )
    clamped = min(1.0, max(0.0, raw))
    # Moon aspects happen every day; only tight ones keep their full weight
    damping = MOON_DAMPING if transit_body == "moon" and orb > MOON_TIGHT_ORB else 1.0
    return ScoreBreakdown(
        closeness=closeness,
        aspect_weight=aspect.weight,
        planet_importance=importance,
        angular_house_bonus=angular,
        applying_bonus=applying_bonus,
        raw=raw,
        damping=damping,
        score=clamped * damping,
    )


def event_id(day: Date, transit_body: str, natal_body: str, aspect_name: str) -> str:
    return f"transit-{day:%Y%m%d}-{transit_body}-{natal_body}-{aspect_name}"


def event_title(transit_body: str, natal_body: str, aspect_symbol: str) -> str:
    return (
        f"{PLANET_SYMBOLS.get(transit_body, '')} {display_name(transit_body)} {aspect_symbol} "
        f"natal {PLANET_SYMBOLS.get(natal_body, '')} {display_name(natal_body)}"
    )


def sample_timezone(natal_chart: Chart, tz: Optional[tzinfo] = None) -> tzinfo:
    if tz is not None:
        return tz
    offset = natal_chart.metadata.timezone_offset
    if offset is None:
        return timezone.utc
    return timezone(timedelta(hours=offset))


def sample_instant(day: Date, tz: tzinfo) -> datetime:
    return datetime.combine(day, time(SAMPLE_HOUR), tzinfo=tz)


def _sort_key(e: TransitEvent) -> tuple:
    return (-e.score, e.orb, e.id)


def transits_for_date(
    day: Date,
    natal_chart: Chart,
    client: EphemerisClient,
    tz: Optional[tzinfo] = None,
    aspect_types: Optional[Iterable[str]] = None,
) -> List[TransitEvent]:
    """All transit-to-natal aspects for ``day``, best score first."""

    wanted = set(aspect_types) if aspect_types else None
    sample = sample_instant(day, sample_timezone(natal_chart, tz))
    now_lons = client.positions(BODIES, sample)
    later_lons = client.positions(BODIES, sample + APPLYING_STEP)
    natal_bodies = natal_chart.bodies()

    events: List[TransitEvent] = []
    for t_name in BODIES:
        t_lon = now_lons.get(t_name)
        if t_lon is None:
            continue
        t_later = later_lons.get(t_name)
        for n_name, n_pos in natal_bodies.items():
            angle = angular_separation(t_lon, n_pos.absolute_degree)
            match = classify(angle)
            if match is None:
                continue
            if wanted is not None and match.name not in wanted:
                continue
            orb = round(match.orb, 2)
            applying = t_later is not None and is_applying(
                t_lon, t_later, n_pos.absolute_degree, match.aspect.angle
            )
            breakdown = score_transit(match.aspect, orb, t_name, n_name, n_pos.house, applying)
            events.append(
                TransitEvent(
                    id=event_id(day, t_name, n_name, match.name),
                    title=event_title(t_name, n_name, match.symbol),
                    date=day,
                    color=aspect_color(match.name),
                    transit_body=t_name,
                    natal_body=n_name,
                    aspect_name=match.name,
                    aspect_symbol=match.symbol,
                    orb=orb,
                    angle=round(angle, 2),
                    score=breakdown.score,
                    applying=applying,
                )
            )

    events.sort(key=_sort_key)
    logger.debug("transits_computed", extra={"day": day.isoformat(), "count": len(events)})
    return events


def top_transits(events: List[TransitEvent], n: int) -> List[TransitEvent]:
    return sorted(events, key=_sort_key)[:n]


def get_transit_events_for_date(
    day: Date,
    natal_chart: Optional[Chart],
    client: Optional[EphemerisClient] = None,
    limit: Optional[int] = None,
    tz: Optional[tzinfo] = None,
    aspect_types: Optional[Iterable[str]] = None,
) -> List[TransitEvent]:
    """Ranked transit events for a calendar day; empty without a natal chart."""

    if natal_chart is None:
        logger.debug("transits_no_natal_chart", extra={"day": day.isoformat()})
        return []
    events = transits_for_date(day, natal_chart, client or default_client(), tz, aspect_types)
    if limit is not None:
        return top_transits(events, limit)
    return events
