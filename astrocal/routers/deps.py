from ..exceptions import ProviderUnavailable
from ..services.chart_store import STORE, ChartStore
from ..services.ephem import EphemerisClient, default_client


async def ephemeris_client() -> EphemerisClient:
    client = default_client()
    if not await client.ensure_ready():
        raise ProviderUnavailable(f"Ephemeris backend {client.backend.name!r} failed to initialize")
    return client


def chart_store() -> ChartStore:
    return STORE
