# File: common/exceptions/exception_handlers.py
from typing import Optional

import sentry_sdk
from fastapi import FastAPI, Request, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.status import HTTP_400_BAD_REQUEST, HTTP_500_INTERNAL_SERVER_ERROR

from common.logging.logger import log_error, log_warning
from common.schemas.standard_response import ErrorResponse


def build_error_response(status_code: int, error: str, error_code: Optional[str] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse.from_exception(error, error_code).model_dump(exclude_none=True)
    )


def format_validation_errors(exc: RequestValidationError) -> str:
    details = []
    for err in exc.errors():
        loc = err.get("loc", [])
        field = loc[-1] if loc else "field"
        details.append(f"{field}: {err.get('msg', 'Invalid input.')}")
    return "; ".join(details)


def register_exception_handlers(app: FastAPI):
    """
    Every error leaves the API as an ErrorResponse envelope.

    Body validation failures (unknown fields, over-long descriptions, bad
    enum values) are reported as 400 rather than FastAPI's default 422.
    """

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        error_message = format_validation_errors(exc)
        log_warning("Request validation failed", extra={
            "path": request.url.path,
            "method": request.method,
            "errors": error_message,
        })
        return build_error_response(HTTP_400_BAD_REQUEST, error_message, "VALIDATION_ERROR")

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        error_code = getattr(exc, "error_code", None)
        log_warning("Request rejected", extra={
            "path": request.url.path,
            "method": request.method,
            "status_code": exc.status_code,
            "error_code": error_code,
            "detail": str(exc.detail),
        })
        return build_error_response(exc.status_code, str(exc.detail), error_code)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        log_error("Unhandled exception", extra={
            "path": request.url.path,
            "method": request.method,
            "error": str(exc),
        }, exc_info=True)
        sentry_sdk.capture_exception(exc)
        return build_error_response(HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error", "INTERNAL_ERROR")
