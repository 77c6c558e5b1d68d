from datetime import date as Date

from fastapi import APIRouter, Depends, HTTPException

from ..schemas import CalendarDayResponse, CalendarEvent, ChartResponse, NatalChartRequest
from ..services.chart import calculate_natal_chart
from ..services.chart_store import ChartStore
from ..services.ephem import EphemerisClient
from .charts import chart_response
from .deps import chart_store, ephemeris_client

router = APIRouter(prefix="/v1/calendar", tags=["calendar"])


@router.put("/birth-chart", response_model=ChartResponse)
async def register_birth_chart(
    req: NatalChartRequest,
    client: EphemerisClient = Depends(ephemeris_client),
    store: ChartStore = Depends(chart_store),
):
    chart = await calculate_natal_chart(
        req.date,
        req.time,
        req.latitude,
        req.longitude,
        req.tz_offset_hours,
        timezone_name=req.timezone,
        client=client,
    )
    store.save_birth_chart(chart)
    return chart_response(chart, client)


@router.get("/birth-chart", response_model=ChartResponse)
async def get_birth_chart(
    client: EphemerisClient = Depends(ephemeris_client),
    store: ChartStore = Depends(chart_store),
):
    chart = store.load_birth_chart()
    if chart is None:
        raise HTTPException(status_code=404, detail="No birth chart registered")
    return chart_response(chart, client)


@router.delete("/birth-chart", status_code=204)
def delete_birth_chart(store: ChartStore = Depends(chart_store)):
    store.clear_birth_chart()


@router.post("/events", response_model=CalendarEvent, status_code=201)
def create_event(event: CalendarEvent, store: ChartStore = Depends(chart_store)):
    store.add_event(event)
    return event


@router.put("/events/{event_id}", response_model=CalendarEvent)
def edit_event(event_id: str, event: CalendarEvent, store: ChartStore = Depends(chart_store)):
    if event.id != event_id:
        raise HTTPException(status_code=422, detail="Event id does not match path")
    if not store.edit_event(event):
        raise HTTPException(status_code=404, detail="Event not found")
    return event


@router.delete("/events/{event_id}", status_code=204)
def delete_event(event_id: str, store: ChartStore = Depends(chart_store)):
    if not store.delete_event(event_id):
        raise HTTPException(status_code=404, detail="Event not found")


@router.get("/{day}", response_model=CalendarDayResponse)
async def day_events(
    day: Date,
    client: EphemerisClient = Depends(ephemeris_client),
    store: ChartStore = Depends(chart_store),
):
    return CalendarDayResponse(date=day, events=store.events_for_date(day, client))
