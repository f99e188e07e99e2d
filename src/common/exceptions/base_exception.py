# File: common/exceptions/base_exception.py
from typing import Optional

from fastapi import HTTPException, status


class AppHTTPException(HTTPException):
    """HTTP error with a stable machine-readable code next to the translated detail."""

    default_code = "ERROR"

    def __init__(self, status_code: int, detail: str, error_code: Optional[str] = None):
        super().__init__(status_code=status_code, detail=detail)
        self.error_code = error_code or self.default_code


class ValidationException(AppHTTPException):
    default_code = "VALIDATION_ERROR"

    def __init__(self, detail: str = "Invalid request parameters.", error_code: Optional[str] = None):
        super().__init__(status.HTTP_400_BAD_REQUEST, detail, error_code)


class UnauthorizedException(AppHTTPException):
    default_code = "UNAUTHORIZED"

    def __init__(self, detail: str = "Unauthorized access.", error_code: Optional[str] = None):
        super().__init__(status.HTTP_401_UNAUTHORIZED, detail, error_code)


class ForbiddenException(AppHTTPException):
    default_code = "FORBIDDEN"

    def __init__(self, detail: str = "You do not have permission to access this resource.", error_code: Optional[str] = None):
        super().__init__(status.HTTP_403_FORBIDDEN, detail, error_code)


# Reporting or blocking yourself: a forbidden action answered as a bad request
class SelfActionException(ForbiddenException):
    default_code = "SELF_ACTION"

    def __init__(self, detail: str = "You cannot target yourself.", error_code: Optional[str] = None):
        AppHTTPException.__init__(self, status.HTTP_400_BAD_REQUEST, detail, error_code)


class NotFoundException(AppHTTPException):
    default_code = "NOT_FOUND"

    def __init__(self, detail: str = "Resource not found.", error_code: Optional[str] = None):
        super().__init__(status.HTTP_404_NOT_FOUND, detail, error_code)


# Raised for duplicate reports, duplicate blocks and moderation on closed reports
class ConflictException(AppHTTPException):
    default_code = "CONFLICT"

    def __init__(self, detail: str = "Resource conflict detected.", error_code: Optional[str] = None):
        super().__init__(status.HTTP_409_CONFLICT, detail, error_code)


class InternalServerErrorException(AppHTTPException):
    default_code = "INTERNAL_ERROR"

    def __init__(self, detail: str = "Internal server error occurred.", error_code: Optional[str] = None):
        super().__init__(status.HTTP_500_INTERNAL_SERVER_ERROR, detail, error_code)


class ServiceUnavailableException(AppHTTPException):
    default_code = "SERVICE_UNAVAILABLE"

    def __init__(self, detail: str = "Service temporarily unavailable. Please try again later.", error_code: Optional[str] = None):
        super().__init__(status.HTTP_503_SERVICE_UNAVAILABLE, detail, error_code)
