"""
HTTP middleware: request logging and correlation ids.

Each request gets a request id (taken from an incoming X-Request-ID header or
generated), bound to structlog contextvars and echoed in the response header.
One `http_request` line is logged per request with its status and duration.
"""

from __future__ import annotations

import time
import uuid
from typing import Awaitable, Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from stellar_explorer.explorer_logging import bind_request, get_logger

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        bind_request(request_id, method=request.method, path=request.url.path)
        t0 = time.perf_counter()
        response = await call_next(request)
        duration_ms = round((time.perf_counter() - t0) * 1000, 2)
        response.headers[REQUEST_ID_HEADER] = request_id
        logger.info("http_request", status=response.status_code, duration_ms=duration_ms)
        return response
