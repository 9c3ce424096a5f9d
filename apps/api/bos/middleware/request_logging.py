from __future__ import annotations

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from bos.metrics import observe_http_request, resolve_http_path_label


logger = logging.getLogger("bos.request")

# Probe endpoints are counted in metrics but not logged.
QUIET_PATHS = frozenset({"/health", "/metrics"})


def _request_fields(request: Request, status_code: int, started: float) -> dict[str, object]:
    duration_ms = round((time.perf_counter() - started) * 1000, 2)
    path = resolve_http_path_label(request)
    observe_http_request(method=request.method, path=path, status=status_code, duration=duration_ms / 1000)
    context = getattr(request.state, "context", None)
    return {
        "method": request.method,
        "path": path,
        "status_code": status_code,
        "duration_ms": duration_ms,
        "user_id": getattr(context, "user_id", None),
    }


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):  # type: ignore[no-untyped-def]
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            logger.error("http.error", exc_info=True, extra=_request_fields(request, 500, started))
            raise

        fields = _request_fields(request, response.status_code, started)
        if fields["path"] not in QUIET_PATHS:
            logger.info("http.request", extra=fields)
        return response
