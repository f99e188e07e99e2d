# File: src/api/middleware/error_middleware.py

import sentry_sdk
from fastapi.exceptions import HTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response, JSONResponse

from common.logging.logger import log_error
from common.schemas.standard_response import ErrorResponse


class ErrorLoggingMiddleware(BaseHTTPMiddleware):
    """Last line of defence: anything that escapes the routers becomes a logged 500."""

    async def dispatch(self, request: Request, call_next) -> Response:
        try:
            return await call_next(request)

        except HTTPException:
            raise

        except Exception as exc:
            log_error("Unhandled error in middleware", extra={
                "path": request.url.path,
                "method": request.method,
                "error": str(exc),
                "client_ip": request.client.host if request.client else "unknown",
            }, exc_info=True)
            sentry_sdk.capture_exception(exc)

            return JSONResponse(
                status_code=500,
                content=ErrorResponse(error="Internal Server Error", error_code="INTERNAL_ERROR").model_dump()
            )
