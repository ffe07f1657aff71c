"""Request tracing: request ids, latency metrics and access logging"""

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from split_ledger.infrastructure.observability.metrics import request_duration_histogram

REQUEST_ID_HEADER = "X-Request-ID"
UNMATCHED_ROUTE = "unmatched"

logger = logging.getLogger("split_ledger.access")


def _route_template(request: Request) -> str:
    # "/transactions/{transaction_id}", never the raw path; unrouted requests share one label
    route = request.scope.get("route")
    return getattr(route, "path", UNMATCHED_ROUTE)


class RequestTracingMiddleware(BaseHTTPMiddleware):
    """
    Tag every request with an id and time it.

    An inbound X-Request-ID is reused so callers can correlate retries of the
    same posting; otherwise a fresh uuid4 is issued. The id is echoed on the
    response and available to handlers as request.state.request_id.
    """

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id
        started = time.perf_counter()

        response = await call_next(request)

        elapsed = time.perf_counter() - started
        endpoint = _route_template(request)
        request_duration_histogram.labels(
            method=request.method,
            endpoint=endpoint,
            status=response.status_code,
        ).observe(elapsed)
        logger.debug(
            "Request handled",
            extra={
                "request_id": request_id,
                "method": request.method,
                "endpoint": endpoint,
                "status": response.status_code,
                "duration_ms": round(elapsed * 1000, 2),
            },
        )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
