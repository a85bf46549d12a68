"""
Response envelope helpers

Every endpoint answers {success, message, data?, error?, statusCode}.
"""
from typing import Any, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def envelope(
    success: bool,
    message: str,
    status_code: int,
    data: Any = None,
    error: Optional[str] = None,
) -> dict:
    body = {"success": success, "message": message}
    if data is not None:
        body["data"] = jsonable_encoder(data, by_alias=True)
    if error is not None:
        body["error"] = error
    body["statusCode"] = status_code
    return body


def success_response(message: str, data: Any = None, status_code: int = 200) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=envelope(True, message, status_code, data=data))


def failure_response(message: str, status_code: int, error: Optional[str] = None, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=envelope(False, message, status_code, error=error),
        headers=headers,
    )
