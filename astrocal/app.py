import logging
import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .exceptions import (
    AstroCalError,
    IncompletePositions,
    InvalidCoordinatesError,
    InvalidDateTimeError,
    ProviderUnavailable,
)
from .middleware.logging import LoggingMiddleware
from .routers import calendar as calendar_router
from .routers import charts as charts_router
from .routers import transits as transits_router
from .services.ephem import default_client, init_ephemeris

logger = logging.getLogger(__name__)

app = FastAPI(title="astrocal", version="0.1.0")

app_env = os.getenv("APP_ENV")
is_dev = app_env is None or app_env.lower() in {"dev", "development"}

if is_dev:
    app.add_middleware(
        CORSMiddleware,
        allow_origin_regex=r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        max_age=86400,
    )
else:
    allowed = [o.strip() for o in os.getenv("ALLOWED_ORIGINS", "").split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        max_age=86400,
    )

app.add_middleware(LoggingMiddleware)

app.include_router(charts_router.router)
app.include_router(transits_router.router)
app.include_router(calendar_router.router)


@app.on_event("startup")
async def _warm_ephemeris() -> None:
    await init_ephemeris()


def _error(status_code: int, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": type(exc).__name__, "message": str(exc), "detail": None},
    )


@app.exception_handler(ProviderUnavailable)
async def provider_unavailable_handler(request: Request, exc: ProviderUnavailable):
    return _error(503, exc)


@app.exception_handler(IncompletePositions)
async def incomplete_positions_handler(request: Request, exc: IncompletePositions):
    logger.error("chart_incomplete_positions", extra={"missing": list(exc.missing)})
    return _error(500, exc)


@app.exception_handler(InvalidCoordinatesError)
async def invalid_coordinates_handler(request: Request, exc: InvalidCoordinatesError):
    return _error(422, exc)


@app.exception_handler(InvalidDateTimeError)
async def invalid_datetime_handler(request: Request, exc: InvalidDateTimeError):
    return _error(422, exc)


@app.exception_handler(AstroCalError)
async def astrocal_error_handler(request: Request, exc: AstroCalError):
    logger.error("unhandled_engine_error", exc_info=exc)
    return _error(500, exc)


@app.get("/__health")
def health():
    client = default_client()
    return {"ok": True, "ephemeris": client.state.value, "engine_version": client.version}
