from datetime import timedelta, timezone

from fastapi import APIRouter, Depends

from ..schemas import TransitsDayRequest, TransitsDayResponse
from ..services.aspects import canonical_aspect
from ..services.ephem import EphemerisClient
from ..services.transits_engine import get_transit_events_for_date
from .deps import ephemeris_client

router = APIRouter(prefix="/v1/transits", tags=["transits"])


@router.post("/day", response_model=TransitsDayResponse)
async def transits_for_day(req: TransitsDayRequest, client: EphemerisClient = Depends(ephemeris_client)):
    tz = timezone(timedelta(hours=req.tz_offset_hours)) if req.tz_offset_hours is not None else None
    aspect_types = [canonical_aspect(a) for a in req.aspect_types] if req.aspect_types else None
    events = get_transit_events_for_date(
        req.date,
        req.natal_chart,
        client,
        limit=req.limit,
        tz=tz,
        aspect_types=aspect_types,
    )
    meta = {
        "date": req.date.isoformat(),
        "count": len(events),
        "has_natal_chart": req.natal_chart is not None,
        "engine_version": client.version,
    }
    return TransitsDayResponse(meta=meta, events=events)
