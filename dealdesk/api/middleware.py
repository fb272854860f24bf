"""Request tracing, access logging and latency metrics"""

import re
import time
import uuid
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from dealdesk.infrastructure.observability.logging import log_request
from dealdesk.infrastructure.observability.metrics import request_duration_histogram

REQUEST_ID_HEADER = "X-Request-ID"

# Caller-supplied ids are echoed into logs, so keep them short and printable
_REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")


def _route_template(request: Request) -> str:
    # Matched route path ("/v1/deals/analyze") keeps metric labels bounded
    route = request.scope.get("route")
    return getattr(route, "path", request.url.path)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Carry the caller's X-Request-ID through the request, or mint one"""

    async def dispatch(self, request: Request, call_next):
        incoming = request.headers.get(REQUEST_ID_HEADER, "")
        request_id = incoming if _REQUEST_ID_PATTERN.match(incoming) else str(uuid.uuid4())
        request.state.request_id = request_id

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class MetricsMiddleware(BaseHTTPMiddleware):
    """Time each request, label it by route template and write an access log line"""

    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - started

        endpoint = _route_template(request)
        request_duration_histogram.labels(
            method=request.method,
            endpoint=endpoint,
            status=response.status_code,
        ).observe(elapsed)

        log_request(
            request_id=getattr(request.state, "request_id", None),
            method=request.method,
            endpoint=endpoint,
            status=response.status_code,
            duration_ms=elapsed * 1000,
        )
        return response
