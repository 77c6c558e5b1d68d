"""Plain-text rendering of charts and transit lists."""

from typing import List, Optional

from ..schemas.charts import CelestialPosition, Chart
from ..schemas.transits import TransitEvent
from .constants import BODIES, PLANET_SYMBOLS, display_name


def fmt_position(pos: Optional[CelestialPosition]) -> str:
    if pos is None:
        return "unavailable"
    return f"{pos.degree_in_sign:.2f}° {pos.sign.value}"


def fmt_offset(offset: Optional[float]) -> str:
    if offset is None:
        return "UTC"
    return f"UTC{'+' if offset >= 0 else ''}{offset:g}"


def format_chart(chart: Optional[Chart]) -> str:
    if chart is None:
        return "No birth chart available"

    meta = chart.metadata
    lines = ["Birth Chart" if meta.kind == "natal" else "Current Chart", ""]
    if meta.date:
        lines.append(f"Date: {meta.date}")
        lines.append(f"Time: {meta.time} (Local)")
    else:
        lines.append(f"Instant: {meta.utc_datetime.isoformat()}")
    lines.append(f"Location: {meta.latitude}°, {meta.longitude}°")
    lines.append(f"Timezone: {fmt_offset(meta.timezone_offset)}{' (estimated)' if meta.timezone_estimated else ''}")
    lines.append("")

    lines.append("Planets:")
    for body in BODIES:
        pos = chart.position(body)
        house = f"  House {pos.house}" if pos is not None and pos.house else ""
        lines.append(f"{PLANET_SYMBOLS[body]} {display_name(body):<8} {fmt_position(pos)}{house}")
    lines.append("")

    lines.append("Angles:")
    lines.append(f"Ascendant: {fmt_position(chart.ascendant)}")
    lines.append(f"Midheaven: {fmt_position(chart.midheaven)}")

    if len(chart.houses) == 12:
        lines.append("")
        lines.append(f"Houses ({chart.house_system}):")
        for i, cusp in enumerate(chart.houses):
            lines.append(f"  House {i + 1}: {fmt_position(cusp)}")

    return "\n".join(lines)


def format_transits(events: List[TransitEvent]) -> str:
    if not events:
        return "No transits"
    rows = []
    for e in events:
        phase = "applying" if e.applying else "separating"
        rows.append(f"{e.score:.3f}  {e.title}  orb {e.orb:.2f}° ({phase})")
    return "\n".join(rows)
