from datetime import date as Date
from typing import List, Optional, Union

from pydantic import BaseModel, Field

from .charts import Chart


class CalendarEvent(BaseModel):
    id: str
    title: str
    date: Date
    start_time: int = Field(0, ge=0, le=1440, description="Minutes after local midnight")
    end_time: int = Field(1440, ge=0, le=1440)
    color: Optional[str] = None


class TransitEvent(CalendarEvent):
    transit_body: str
    natal_body: str
    aspect_name: str
    aspect_symbol: str
    orb: float
    angle: float
    score: float
    applying: bool = False


class TransitsDayRequest(BaseModel):
    date: Date
    natal_chart: Optional[Chart] = None
    tz_offset_hours: Optional[float] = Field(None, ge=-14, le=14)
    limit: Optional[int] = Field(None, ge=1, description="Return only the top-N events")
    aspect_types: Optional[List[str]] = None


class TransitsDayResponse(BaseModel):
    meta: dict
    events: List[TransitEvent]


class CalendarDayResponse(BaseModel):
    date: Date
    events: List[Union[TransitEvent, CalendarEvent]]
