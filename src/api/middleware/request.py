"""Request middleware for the ROI API.

Provides:
- Request ID middleware (X-Request-ID header, per-request timing log)
- Response headers middleware (API version, no caching of financial figures)
"""

from __future__ import annotations

import logging
import time
import uuid

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from src.api.version import API_VERSION

logger = logging.getLogger(__name__)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Attach a request ID to every request and response.

    A client-supplied X-Request-ID is preserved; otherwise a UUID4 is
    generated. The ID is stored on ``request.state`` so error handlers can
    echo it back.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "%s %s -> %d in %.1fms [%s]",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            request_id,
        )
        response.headers["X-Request-ID"] = request_id
        return response


class ResponseHeadersMiddleware(BaseHTTPMiddleware):
    """Add the API version and cache directives to every response."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Cache-Control"] = "no-store"
        response.headers["X-API-Version"] = API_VERSION
        return response
