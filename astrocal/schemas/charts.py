from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..services.astro_math import normalize, to_zodiac_position
from ..services.constants import ANGLES, BODIES, REQUIRED_BODIES, ZodiacSign

ChartKind = Literal["natal", "current"]
HouseSystem = Literal["Placidus", "Equal", "Unknown"]


class CelestialPosition(BaseModel):
    model_config = ConfigDict(frozen=True)

    sign: ZodiacSign
    degree_in_sign: float = Field(..., ge=0, lt=30)
    absolute_degree: float = Field(..., ge=0, lt=360)
    house: Optional[int] = Field(None, ge=1, le=12)

    @classmethod
    def from_degree(cls, absolute_degree: float, house: Optional[int] = None) -> "CelestialPosition":
        sign, within = to_zodiac_position(absolute_degree)
        return cls(
            sign=sign,
            degree_in_sign=within,
            absolute_degree=normalize(absolute_degree),
            house=house,
        )


class ChartMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: ChartKind
    date: Optional[str] = None  # YYYY-MM-DD, local birth date
    time: Optional[str] = None  # HH:MM, local birth time
    latitude: float
    longitude: float
    timezone_offset: Optional[float] = None
    timezone_estimated: bool = False
    utc_datetime: datetime
    calculated_at: datetime


class Chart(BaseModel):
    """Positions of the ten tracked bodies, the angles and the house cusps.

    Minor bodies may be missing when the ephemeris could not produce them;
    Sun, Moon and the Ascendant are always present on a valid chart.
    """

    model_config = ConfigDict(frozen=True)

    sun: Optional[CelestialPosition] = None
    moon: Optional[CelestialPosition] = None
    mercury: Optional[CelestialPosition] = None
    venus: Optional[CelestialPosition] = None
    mars: Optional[CelestialPosition] = None
    jupiter: Optional[CelestialPosition] = None
    saturn: Optional[CelestialPosition] = None
    uranus: Optional[CelestialPosition] = None
    neptune: Optional[CelestialPosition] = None
    pluto: Optional[CelestialPosition] = None
    ascendant: CelestialPosition
    midheaven: CelestialPosition
    houses: List[CelestialPosition] = Field(default_factory=list)
    house_system: HouseSystem = "Placidus"
    metadata: ChartMetadata

    def position(self, body: str) -> Optional[CelestialPosition]:
        if body not in BODIES and body not in ANGLES:
            raise KeyError(body)
        return getattr(self, body)

    def bodies(self) -> Dict[str, CelestialPosition]:
        """Present bodies keyed by id, in display order."""
        return {b: getattr(self, b) for b in BODIES if getattr(self, b) is not None}

    @property
    def is_valid(self) -> bool:
        return all(getattr(self, b) is not None for b in REQUIRED_BODIES) and self.ascendant is not None

    @property
    def is_complete(self) -> bool:
        return all(getattr(self, b) is not None for b in BODIES)

    @property
    def house_cusps(self) -> List[float]:
        return [h.absolute_degree for h in self.houses]


class ChartRequestBase(BaseModel):
    latitude: float = Field(..., ge=-90, le=90, description="Latitude in decimal degrees")
    longitude: float = Field(..., ge=-180, le=180, description="Longitude in decimal degrees, east positive")


class NatalChartRequest(ChartRequestBase):
    date: str = Field(..., description="Local birth date, YYYY-MM-DD", examples=["1990-06-15"])
    time: str = Field(..., description="Local birth time, HH:MM", examples=["12:00"])
    tz_offset_hours: Optional[float] = Field(
        None, ge=-14, le=14, description="Offset from UTC in hours; estimated when omitted"
    )
    timezone: Optional[str] = Field(None, description="IANA timezone name, used when no offset is given")


class CurrentChartRequest(ChartRequestBase):
    instant: Optional[datetime] = Field(None, description="Instant to chart; defaults to now")


class AspectRow(BaseModel):
    """One aspect between two chart points."""

    p1: str
    p2: str
    type: str
    symbol: str
    orb: float = Field(..., ge=0, description="Distance from the exact angle, degrees")
    angle: float = Field(..., ge=0, le=180, description="Angular separation, degrees")


class ChartResponse(BaseModel):
    chart: Chart
    aspects: List[AspectRow]
    engine_version: str
