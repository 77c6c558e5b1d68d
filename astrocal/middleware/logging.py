"""Access log: one JSON object per request on stdout, when LOGGING_ENABLED=true."""

import json
import os
import time
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

QUIET_PATHS = frozenset({"/__health"})


def access_logging_enabled() -> bool:
    return os.getenv("LOGGING_ENABLED", "false").lower() == "true"


class LoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        if not access_logging_enabled() or request.url.path in QUIET_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        record = {
            "ts": round(time.time(), 3),
            "client": request.client.host if request.client else None,
            "method": request.method,
            "path": request.url.path,
            "query": str(request.url.query) or None,
            "status": response.status_code,
            "latency_ms": round((time.perf_counter() - started) * 1000, 2),
        }
        print(json.dumps(record), flush=True)
        return response
