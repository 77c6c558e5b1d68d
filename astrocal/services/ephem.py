"""Ephemeris provider: geocentric ecliptic longitudes for the tracked bodies.

Positions come from a pluggable backend. The canonical backend wraps the Swiss
Ephemeris bindings; the mean-longitude backend is a low-precision alternate
that needs no external library. Callers never talk to a backend directly: they
go through an :class:`EphemerisClient`, which owns the load/readiness lifecycle.
"""

from __future__ import annotations

import asyncio
import importlib
import logging
import os
import time
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from .astro_math import centuries_since_j2000, julian_day, normalize

logger = logging.getLogger(__name__)

DEFAULT_INIT_TIMEOUT = float(os.getenv("EPHEMERIS_INIT_TIMEOUT", "5.0"))
DEFAULT_POLL_INTERVAL = float(os.getenv("EPHEMERIS_POLL_INTERVAL", "0.1"))

# body id -> attribute name on the swisseph module
SWE_BODY_CODES: Dict[str, str] = {
    "sun": "SUN",
    "moon": "MOON",
    "mercury": "MERCURY",
    "venus": "VENUS",
    "mars": "MARS",
    "jupiter": "JUPITER",
    "saturn": "SATURN",
    "uranus": "URANUS",
    "neptune": "NEPTUNE",
    "pluto": "PLUTO",
}

# (L0, rate per Julian century) mean longitude at J2000
MEAN_ELEMENTS: Dict[str, tuple] = {
    "sun": (280.46646, 36000.76983),
    "moon": (218.3165, 481267.8813),
    "mercury": (252.25, 149472.68),
    "venus": (181.98, 58517.82),
    "mars": (355.43, 19140.30),
    "jupiter": (34.35, 3034.91),
    "saturn": (50.08, 1222.11),
    "uranus": (314.05, 428.49),
    "neptune": (304.35, 218.46),
    "pluto": (238.96, 144.96),
}


def _backend_name() -> str:
    raw_backend = os.getenv("EPHEMERIS_BACKEND")
    return raw_backend.strip().lower() if raw_backend else "swieph"


def init_paths(swe: Any, ephe_dir: str | os.PathLike[str] | None) -> None:
    """Set the Swiss Ephemeris file search path when available."""

    if not ephe_dir:
        return

    path = os.fspath(ephe_dir)
    if os.path.isdir(path):
        swe.set_ephe_path(path)


class SwissEphemerisBackend:
    """Positions from the Swiss Ephemeris (``pyswisseph``)."""

    name = "swisseph"

    def __init__(self, mode: Optional[str] = None, ephe_dir: Optional[str] = None) -> None:
        self.mode = (mode or _backend_name()).lower()
        self.ephe_dir = ephe_dir if ephe_dir is not None else os.getenv("EPHEMERIS_DIR")
        self._swe: Any = None
        self._flag = 0

    @property
    def version(self) -> str:
        if self._swe is None:
            return "swisseph-unloaded"
        return f"swisseph-{getattr(self._swe, 'version', 'unknown')}"

    def load(self) -> None:
        swe = importlib.import_module("swisseph")
        init_paths(swe, self.ephe_dir)
        flag = swe.FLG_MOSEPH if self.mode == "moseph" else swe.FLG_SWIEPH
        # probe one position so a broken install fails here rather than per body
        swe.calc_ut(2451545.0, swe.SUN, flag)
        self._swe = swe
        self._flag = flag

    def longitude(self, body: str, jd_ut: float) -> float:
        code = getattr(self._swe, SWE_BODY_CODES[body])
        values, _ = self._swe.calc_ut(jd_ut, code, self._flag)
        return normalize(values[0])


class MeanLongitudeBackend:
    """Mean-longitude polynomials; accurate only to a few degrees.

    Kept as a dependency-free alternate for environments without the Swiss
    Ephemeris. Not suitable for house placement of fast bodies.
    """

    name = "mean"
    version = "mean-longitude-1"

    def load(self) -> None:
        return None

    def longitude(self, body: str, jd_ut: float) -> float:
        l0, rate = MEAN_ELEMENTS[body]
        t = centuries_since_j2000(jd_ut)
        lon = l0 + rate * t
        if body == "sun":
            lon += 0.0003032 * t * t
        return normalize(lon)


def backend_from_env():
    if _backend_name() == "mean":
        return MeanLongitudeBackend()
    return SwissEphemerisBackend()


class EphemerisState(str, Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    FAILED = "failed"


class EphemerisClient:
    """Lifecycle wrapper around an ephemeris backend.

    ``ensure_ready`` must be awaited once before positions can be read. A
    client that fails to become ready within ``timeout`` stays failed.
    """

    def __init__(
        self,
        backend: Any = None,
        timeout: float = DEFAULT_INIT_TIMEOUT,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        self.backend = backend if backend is not None else backend_from_env()
        self.timeout = timeout
        self.poll_interval = poll_interval
        self.state = EphemerisState.UNINITIALIZED
        self.last_error: Optional[BaseException] = None

    @property
    def ready(self) -> bool:
        return self.state is EphemerisState.READY

    @property
    def version(self) -> str:
        return getattr(self.backend, "version", self.backend.name)

    async def ensure_ready(self) -> bool:
        if self.state is EphemerisState.READY:
            return True
        if self.state is EphemerisState.FAILED:
            return False

        deadline = time.monotonic() + self.timeout
        attempts = 0
        while True:
            attempts += 1
            try:
                self.backend.load()
            except Exception as exc:
                self.last_error = exc
            else:
                self.state = EphemerisState.READY
                logger.info(
                    "ephemeris_ready",
                    extra={"backend": self.backend.name, "attempts": attempts},
                )
                return True

            if time.monotonic() >= deadline:
                self.state = EphemerisState.FAILED
                logger.error(
                    "ephemeris_init_failed",
                    extra={
                        "backend": self.backend.name,
                        "attempts": attempts,
                        "error": repr(self.last_error),
                    },
                )
                return False
            await asyncio.sleep(self.poll_interval)

    def position(self, body: str, instant: datetime) -> Optional[float]:
        """Ecliptic longitude of ``body`` at ``instant`` or None when unavailable."""

        if not self.ready:
            logger.error("ephemeris_not_ready", extra={"body": body, "state": self.state.value})
            return None
        try:
            return self.backend.longitude(body, julian_day(instant))
        except Exception:
            logger.warning("ephemeris_body_failed", extra={"body": body}, exc_info=True)
            return None

    def positions(self, bodies, instant: datetime) -> Dict[str, Optional[float]]:
        return {body: self.position(body, instant) for body in bodies}


_DEFAULT_CLIENT: Optional[EphemerisClient] = None


def default_client() -> EphemerisClient:
    """Process-wide client built from environment configuration."""

    global _DEFAULT_CLIENT
    if _DEFAULT_CLIENT is None:
        _DEFAULT_CLIENT = EphemerisClient()
    return _DEFAULT_CLIENT


def reset_default_client() -> None:
    global _DEFAULT_CLIENT
    _DEFAULT_CLIENT = None


async def init_ephemeris(client: Optional[EphemerisClient] = None) -> bool:
    return await (client or default_client()).ensure_ready()
