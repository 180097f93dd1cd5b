"""
Error envelope and exception handlers

Every error leaves the API as
    {"success": false, "error": {"code": ..., "message": ..., "details": [...]}}

Services raise fastapi.HTTPException. `detail` is either a message string or a
dict with "message" and optionally "code" and "details" (itemized reasons).
"""

import logging
from typing import Any, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import ENVIRONMENT

logger = logging.getLogger(__name__)

STATUS_CODES = {
    400: "VALIDATION_ERROR",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    410: "GONE",
    429: "RATE_LIMIT_EXCEEDED",
    500: "INTERNAL_ERROR",
}


def api_error(
    status_code: int,
    message: str,
    code: Optional[str] = None,
    details: Optional[Any] = None,
    headers: Optional[dict[str, str]] = None,
) -> HTTPException:
    """Build an HTTPException carrying a structured detail"""
    detail: dict[str, Any] = {"message": message}
    if code:
        detail["code"] = code
    if details:
        detail["details"] = details
    return HTTPException(status_code=status_code, detail=detail, headers=headers)


def error_body(code: str, message: str, details: Optional[Any] = None) -> dict:
    error: dict[str, Any] = {"code": code, "message": message}
    if details:
        error["details"] = details
    return {"success": False, "error": error}


def format_validation_errors(errors: list[dict]) -> list[dict[str, str]]:
    """Flatten pydantic errors into [{field, message}] with dotted paths"""
    details = []
    for err in errors:
        # Drop the "body"/"query"/"path" prefix
        loc = [str(part) for part in err.get("loc", ())]
        if loc and loc[0] in ("body", "query", "path", "header", "cookie"):
            loc = loc[1:]
        message = err.get("msg", "Invalid value")
        if message.startswith("Value error, "):
            message = message[len("Value error, ") :]
        details.append({"field": ".".join(loc), "message": message})
    return details


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    detail = exc.detail
    code = STATUS_CODES.get(exc.status_code, "ERROR")
    details = None
    if isinstance(detail, dict):
        message = detail.get("message", "Request failed")
        code = detail.get("code", code)
        details = detail.get("details")
    else:
        message = str(detail)

    if exc.status_code >= 500:
        logger.error(f"❌ {request.method} {request.url.path} - {exc.status_code}: {message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(code, message, details),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Request validation failures are 400 VALIDATION_ERROR with field details"""
    details = format_validation_errors(exc.errors())
    logger.warning(f"⚠️ Validation error for {request.url.path}: {details}")
    message = "; ".join(
        f"{d['field']}: {d['message']}" if d["field"] else d["message"] for d in details
    )
    return JSONResponse(
        status_code=400,
        content=error_body("VALIDATION_ERROR", message or "Invalid request", details),
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"❌ Unhandled error on {request.method} {request.url.path}: {exc}")
    message = "Internal server error" if ENVIRONMENT == "production" else str(exc)
    return JSONResponse(status_code=500, content=error_body("INTERNAL_ERROR", message))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
