# This file renders every failure as the same JSON error body with request trace fields.
# Caller contract violations become 400s, missing units 404s, and anything unexpected a safe 500.

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from pkgview.api.errors import APIError, InvalidArgumentError, NotFoundError
from pkgview.api.response_envelope import request_id_of

logger = logging.getLogger(__name__)

# Domain errors whose message is safe to show as-is.
_DOMAIN_ERRORS: dict[type[Exception], tuple[int, str]] = {
    InvalidArgumentError: (400, "INVALID_ARGUMENT"),
    NotFoundError: (404, "NOT_FOUND"),
}


def error_response(
    request: Request,
    *,
    status_code: int,
    error_code: str,
    message: str,
    details: Any | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error_code": error_code,
            "message": message,
            "details": details,
            "request_id": request_id_of(request),
            "timestamp": datetime.now(tz=UTC).isoformat(),
        },
    )


def register_error_handlers(app: FastAPI) -> None:
    """Register exception handlers on `app`."""

    async def domain_error_handler(request: Request, exc: Exception) -> JSONResponse:
        status_code, error_code = next(
            mapping for error_type, mapping in _DOMAIN_ERRORS.items() if isinstance(exc, error_type)
        )
        if status_code == 404:
            logger.info("Not found: %s", exc)
        return error_response(request, status_code=status_code, error_code=error_code, message=str(exc))

    for error_type in _DOMAIN_ERRORS:
        app.add_exception_handler(error_type, domain_error_handler)

    @app.exception_handler(APIError)
    async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
        return error_response(
            request,
            status_code=exc.status_code,
            error_code=exc.error_code,
            message=exc.message,
            details=exc.details,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        details = [
            {"loc": list(error.get("loc", ())), "msg": error.get("msg", ""), "type": error.get("type", "")}
            for error in exc.errors()
        ]
        return error_response(
            request,
            status_code=422,
            error_code="VALIDATION_ERROR",
            message="Invalid request parameters.",
            details=details,
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        return error_response(request, status_code=exc.status_code, error_code="HTTP_ERROR", message=str(exc.detail))

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error for %s %s", request.method, request.url.path, exc_info=exc)
        return error_response(
            request,
            status_code=500,
            error_code="INTERNAL_SERVER_ERROR",
            message="The server encountered an unexpected error.",
        )
