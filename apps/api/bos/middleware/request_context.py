from __future__ import annotations

import uuid

from opentelemetry import trace
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from bos.context import RequestContext, normalize_correlation_id, reset_correlation_id, set_correlation_id


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Binds a correlation id and a ``RequestContext`` to every request.

    The id comes from ``x-correlation-id`` when it is a well-formed token and is
    generated otherwise. It is echoed as both ``x-correlation-id`` and
    ``x-request-id``.
    """

    async def dispatch(self, request: Request, call_next):  # type: ignore[no-untyped-def]
        correlation_id = normalize_correlation_id(request.headers.get("x-correlation-id")) or str(uuid.uuid4())
        request.state.correlation_id = correlation_id
        request.state.context = RequestContext(request_id=correlation_id, correlation_id=correlation_id)

        span = trace.get_current_span()
        if span is not None and span.is_recording():
            span.set_attribute("correlation_id", correlation_id)

        token = set_correlation_id(correlation_id)
        try:
            response = await call_next(request)
        finally:
            reset_correlation_id(token)

        response.headers["x-correlation-id"] = correlation_id
        response.headers["x-request-id"] = request.state.context.request_id
        return response
