from .charts import (
    AspectRow,
    CelestialPosition,
    Chart,
    ChartMetadata,
    ChartResponse,
    CurrentChartRequest,
    NatalChartRequest,
)

from .transits import (
    CalendarDayResponse,
    CalendarEvent,
    TransitEvent,
    TransitsDayRequest,
    TransitsDayResponse,
)
