"""
Demo endpoints - environment presence check and JSON echo
"""
import os
from datetime import datetime, timezone

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from lib.logging import get_logger
from lib.responses import parse_json_body

router = APIRouter(prefix="/api/hello", tags=["demo"])
logger = get_logger(__name__)


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@router.get("")
async def hello():
    """
    Report which secrets are configured.
    Only presence flags are returned, never the values.
    """
    return {
        "message": "Hello from Fraterny API!",
        "timestamp": _timestamp(),
        "status": "success",
        "hasJwtSecret": bool(os.environ.get("JWT_SECRET")),
        "hasDbUrl": bool(os.environ.get("DATABASE_URL")),
    }


@router.post("")
async def echo(request: Request):
    """Echo back a JSON body; 400 if it doesn't parse"""
    try:
        body = parse_json_body(await request.body())
    except ValueError as e:
        logger.info(f"Rejected invalid JSON body: {e}")
        return JSONResponse(
            status_code=400,
            content={"message": "Invalid JSON data", "status": "error"},
        )

    return {
        "message": "Data received successfully!",
        "received": body,
        "timestamp": _timestamp(),
        "status": "success",
    }
