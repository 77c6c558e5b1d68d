from fastapi import APIRouter, Depends

from ..schemas import ChartResponse, CurrentChartRequest, NatalChartRequest
from ..schemas.charts import Chart
from ..services import aspects as aspects_svc
from ..services.chart import calculate_current_chart, calculate_natal_chart
from ..services.ephem import EphemerisClient
from .deps import ephemeris_client

router = APIRouter(prefix="/v1/charts", tags=["charts"])


def chart_response(chart: Chart, client: EphemerisClient) -> ChartResponse:
    points = {name: pos.absolute_degree for name, pos in chart.bodies().items()}
    if chart.house_system != "Unknown":
        points["ascendant"] = chart.ascendant.absolute_degree
        points["midheaven"] = chart.midheaven.absolute_degree
    return ChartResponse(
        chart=chart,
        aspects=aspects_svc.find_aspects(points),
        engine_version=client.version,
    )


@router.post("/natal", response_model=ChartResponse)
async def natal_chart(req: NatalChartRequest, client: EphemerisClient = Depends(ephemeris_client)):
    chart = await calculate_natal_chart(
        req.date,
        req.time,
        req.latitude,
        req.longitude,
        req.tz_offset_hours,
        timezone_name=req.timezone,
        client=client,
    )
    return chart_response(chart, client)


@router.post("/current", response_model=ChartResponse)
async def current_chart(req: CurrentChartRequest, client: EphemerisClient = Depends(ephemeris_client)):
    chart = await calculate_current_chart(req.latitude, req.longitude, req.instant, client=client)
    return chart_response(chart, client)
