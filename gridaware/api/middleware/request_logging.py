"""
Grid Aware – Request Logging Middleware
========================================
Attaches a correlation-ID to every request, logs it with timing and the
resolved client address, and echoes the ID in the response headers.

Usage in main.py:
    from gridaware.api.middleware.request_logging import RequestLoggingMiddleware
    app.add_middleware(RequestLoggingMiddleware)
"""

from __future__ import annotations

import time
import uuid

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware

from gridaware.features.visitor import resolve_visitor_ip

QUIET_PREFIXES = ("/api/v1/health", "/static")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs every HTTP request with:
      - Correlation-ID (X-Correlation-ID header, generated when absent)
      - method, path and status code
      - response time in ms
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        corr_id = request.headers.get("X-Correlation-ID") or uuid.uuid4().hex[:12]

        with logger.contextualize(request_id=corr_id):
            t0 = time.perf_counter()
            try:
                response = await call_next(request)
            except Exception as exc:
                logger.exception("Unhandled exception in request {}: {}", corr_id, exc)
                response = JSONResponse(
                    status_code=500,
                    content={"detail": "Internal Server Error", "request_id": corr_id},
                )

            elapsed_ms = round((time.perf_counter() - t0) * 1000, 2)
            path = request.url.path
            if not path.startswith(QUIET_PREFIXES):
                logger.info(
                    "{method} {path} → {status} ({ms}ms) [{cid}] client={ip}",
                    method=request.method,
                    path=path,
                    status=response.status_code,
                    ms=elapsed_ms,
                    cid=corr_id,
                    ip=resolve_visitor_ip(request.headers, request.client.host if request.client else None),
                )

            response.headers["X-Correlation-ID"] = corr_id
            response.headers["X-Response-Time-Ms"] = str(elapsed_ms)
            return response
