from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

from .astro_math import angular_separation


@dataclass(frozen=True)
class AspectDefinition:
    """An aspect with its exact angle, allowed orb and ranking weight."""
    name: str
    angle: float
    orb: float
    symbol: str
    weight: float


@dataclass(frozen=True)
class AspectMatch:
    aspect: AspectDefinition
    orb: float

    @property
    def name(self) -> str:
        return self.aspect.name

    @property
    def symbol(self) -> str:
        return self.aspect.symbol


# Priority order matters: the first aspect whose orb window contains the angle wins.
ASPECTS: List[AspectDefinition] = [
    AspectDefinition("Conjunction", 0.0, 8.0, "☌", 1.00),
    AspectDefinition("Opposition", 180.0, 8.0, "☍", 0.90),
    AspectDefinition("Trine", 120.0, 8.0, "△", 0.80),
    AspectDefinition("Square", 90.0, 7.0, "□", 0.85),
    AspectDefinition("Sextile", 60.0, 6.0, "⚹", 0.60),
    AspectDefinition("Inconjunct", 150.0, 3.0, "⚻", 0.40),
]

ASPECTS_BY_NAME: Dict[str, AspectDefinition] = {a.name: a for a in ASPECTS}

ASPECT_ALIASES = {"quincunx": "Inconjunct"}

ASPECT_COLORS = {
    "Conjunction": "#7c3aed",
    "Opposition": "#ef4444",
    "Square": "#f59e0b",
    "Trine": "#10b981",
    "Sextile": "#3b82f6",
    "Inconjunct": "#64748b",
}
DEFAULT_COLOR = "#6b7280"


def canonical_aspect(name: str) -> str:
    alias = ASPECT_ALIASES.get(name.lower())
    if alias:
        return alias
    return name[:1].upper() + name[1:].lower()


def aspect_color(name: str) -> str:
    return ASPECT_COLORS.get(name, DEFAULT_COLOR)


def classify(angle: float) -> Optional[AspectMatch]:
    """Match a separation in [0, 180] against the aspect table."""

    for aspect in ASPECTS:
        orb = abs(angle - aspect.angle)
        if orb <= aspect.orb:
            return AspectMatch(aspect, orb)
    return None


def find_aspects(positions: Dict[str, float]) -> List[dict]:
    """Aspects between every unordered pair of points, tightest first."""

    res = []
    names = list(positions.keys())
    for i in range(len(names)):
        for j in range(i + 1, len(names)):
            p1, p2 = names[i], names[j]
            d = angular_separation(positions[p1], positions[p2])
            match = classify(d)
            if match is None:
                continue
            res.append({
                "p1": p1,
                "p2": p2,
                "type": match.name,
                "symbol": match.symbol,
                "orb": round(match.orb, 2),
                "angle": round(d, 2),
            })
    return sorted(res, key=lambda x: x["orb"])
