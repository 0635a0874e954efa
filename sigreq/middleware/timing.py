"""
Per-request id and duration.

Each response carries ``X-Request-ID`` (echoed from the caller when sent)
and ``X-Request-Duration-Ms``. Requests are logged at DEBUG, or WARNING
when slower than SLOW_THRESHOLD_MS, or ERROR on a 5xx. Health checks are
not logged.
"""

import logging
import time
import uuid

from flask import Flask, g, request

logger = logging.getLogger(__name__)

_QUIET_PREFIXES = ("/api/v1/health", "/static")

# Graph round-trips dominate; a list page with name resolution takes a few
# hundred ms, the dashboard fan-out somewhat more.
SLOW_THRESHOLD_MS = 3000


def _level_for(status: int, duration_ms: float) -> int:
    if status >= 500:
        return logging.ERROR
    if duration_ms > SLOW_THRESHOLD_MS:
        return logging.WARNING
    return logging.DEBUG


def init_request_timing(app: Flask):
    @app.before_request
    def _begin():
        g.request_started = time.perf_counter()
        g.request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:12]

    @app.after_request
    def _finish(response):
        started = getattr(g, "request_started", None)
        if started is None:
            return response

        duration_ms = (time.perf_counter() - started) * 1000
        response.headers["X-Request-ID"] = g.request_id
        response.headers["X-Request-Duration-Ms"] = f"{duration_ms:.1f}"

        if not request.path.startswith(_QUIET_PREFIXES):
            logger.log(
                _level_for(response.status_code, duration_ms),
                "%s %s -> %d (%.0fms)",
                request.method, request.path, response.status_code, duration_ms,
                extra={
                    "method": request.method,
                    "path": request.path,
                    "status": response.status_code,
                    "duration_ms": round(duration_ms, 1),
                    "remote_addr": request.remote_addr,
                },
            )
        return response
