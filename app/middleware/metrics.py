# app/middleware/metrics.py
import logging
import time
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)


def new_metrics() -> dict:
    return {"requests": 0, "total_response_ms": 0.0}


class MetricsMiddleware(BaseHTTPMiddleware):
    """
    Collects in-process request counters on app.state.metrics:
      - total requests
      - total response time (ms)
    Counters are per process; /metrics reads them.
    NOTE: do NOT touch app.state in __init__; it may not exist while the middleware stack builds.
    """

    async def dispatch(self, request: Request, call_next):
        metrics = getattr(request.app.state, "metrics", None)
        if metrics is None:
            metrics = request.app.state.metrics = new_metrics()

        start = time.perf_counter()
        response: Response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000.0

        metrics["requests"] = metrics.get("requests", 0) + 1
        metrics["total_response_ms"] = metrics.get("total_response_ms", 0.0) + elapsed_ms

        logger.debug(
            f"{request.method} {request.url.path} -> {response.status_code} in {elapsed_ms:.1f} ms"
        )
        return response
