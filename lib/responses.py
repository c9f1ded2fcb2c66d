"""Uniform {status, message, data} response envelope and strict JSON body parsing"""
import json
from typing import Any, Optional

from fastapi.responses import JSONResponse

SUCCESS = "success"
ERROR = "error"


def envelope(
    status: str,
    message: str,
    data: Any = None,
    count: Optional[int] = None,
) -> dict[str, Any]:
    body: dict[str, Any] = {"status": status, "data": data, "message": message}
    if count is not None:
        body["count"] = count
    return body


def success_response(
    message: str,
    data: Any = None,
    count: Optional[int] = None,
    status_code: int = 200,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=envelope(SUCCESS, message, data, count),
    )


def error_response(message: str, status_code: int, data: Any = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=envelope(ERROR, message, data),
    )


def _reject_constant(token: str):
    raise ValueError(f"Non-standard JSON constant: {token}")


def parse_json_body(raw: bytes) -> Any:
    """
    Decode a request body as strict JSON. NaN, Infinity and -Infinity are
    rejected since they can't be rendered back into a response.
    Raises ValueError (JSONDecodeError and UnicodeDecodeError included).
    """
    return json.loads(raw, parse_constant=_reject_constant)
