"""
Access log and HTTP metrics for every request.

Each request carries an X-Request-ID (taken from the client or generated),
exposed on request.state for handlers and echoed on the response.
"""
import json
import time
import uuid
from typing import Callable

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from lib.logging import get_logger
from lib.prometheus_metrics import observe_http_request, update_uptime

logger = get_logger("access")

REQUEST_ID_HEADER = "X-Request-ID"
UNTRACKED_PATHS = {"/metrics"}
# Label for requests no route matched (404s)
UNMATCHED_ROUTE = "unmatched"


def route_template(request: Request) -> str:
    """"/api/influencers" rather than the raw URL, to keep label cardinality bounded"""
    route = request.scope.get("route")
    return getattr(route, "path", UNMATCHED_ROUTE)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id

        started = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - started

        response.headers[REQUEST_ID_HEADER] = request_id

        endpoint = route_template(request)
        if endpoint not in UNTRACKED_PATHS:
            observe_http_request(
                request.method,
                endpoint,
                response.status_code,
                elapsed,
                response.headers.get("content-length"),
            )
        update_uptime()

        logger.info(json.dumps({
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "query": request.url.query or None,
            "status": response.status_code,
            "dur_ms": round(elapsed * 1000, 2),
        }))

        return response


def install_logging(app: FastAPI):
    app.add_middleware(RequestLoggingMiddleware)
