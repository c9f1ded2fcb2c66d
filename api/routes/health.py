"""
Health check and metrics endpoints
"""
import time

from fastapi import APIRouter, Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from lib.db import db
from lib.logging import get_logger
from lib.prometheus_metrics import health_check_status
from lib.settings import settings

router = APIRouter(tags=["ops"])
logger = get_logger(__name__)


@router.get("/healthz")
async def health_check(request: Request, response: Response):
    """
    Health check endpoint
    Returns: {"ok": true} with 200 if healthy, 503 if the database is unreachable
    """
    start = time.time()

    if settings.store_backend == "memory":
        healthy = True
        database = "memory"
    else:
        healthy = await db.health_check()
        database = "connected" if healthy else "disconnected"

    health_check_status.labels(check_type="database").set(1 if healthy else 0)
    if not healthy:
        logger.warning("Health check failed: database unreachable")

    response.status_code = 200 if healthy else 503
    return {
        "ok": healthy,
        "database": database,
        "latency_ms": round((time.time() - start) * 1000, 2),
        "request_id": getattr(request.state, "request_id", None),
    }


@router.get("/metrics", response_class=Response)
async def metrics():
    """Prometheus-compatible metrics endpoint"""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
