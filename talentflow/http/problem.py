"""Problem+JSON utilities and global exception handlers.

Defines the RFC 7807 media type and the handler callables that render
``HTTPException``, request validation failures and unexpected exceptions as
application/problem+json responses.
"""

from __future__ import annotations

import logging

from fastapi import HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

PROBLEM_MEDIA_TYPE = "application/problem+json"

logger = logging.getLogger(__name__)


async def handle_http_exception(request: Request, exc: HTTPException) -> JSONResponse:  # noqa: D401
    status_code = int(exc.status_code or 500)
    if isinstance(exc.detail, dict):
        detail = dict(exc.detail)
        detail.setdefault("status", status_code)
    else:
        detail = {"title": "Error", "status": status_code, "detail": str(exc.detail or "")}
    # Preserve upstream headers (e.g. ETag)
    headers = {str(k): str(v) for k, v in (exc.headers or {}).items()}
    logger.info(
        "http_problem method=%s path=%s status=%s code=%s",
        request.method,
        request.url.path,
        status_code,
        detail.get("code"),
    )
    return JSONResponse(
        detail,
        status_code=status_code,
        media_type=PROBLEM_MEDIA_TYPE,
        headers=headers or None,
    )


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:  # noqa: D401
    problem = {
        "title": "Invalid Request",
        "status": 422,
        "detail": "Request validation failed",
        "code": "request_invalid",
        "errors": jsonable_encoder(exc.errors()),
    }
    logger.info("request_validation_failed path=%s errors=%s", request.url.path, len(problem["errors"]))
    return JSONResponse(problem, status_code=422, media_type=PROBLEM_MEDIA_TYPE)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:  # noqa: D401
    logger.error("unexpected_error method=%s path=%s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        {"title": "Internal Server Error", "status": 500, "code": "internal_error"},
        status_code=500,
        media_type=PROBLEM_MEDIA_TYPE,
    )


__all__ = [
    "PROBLEM_MEDIA_TYPE",
    "handle_http_exception",
    "handle_request_validation_error",
    "handle_unexpected_error",
]
