# File: common/schemas/standard_response.py

from typing import Any, Optional
from pydantic import BaseModel, Field


class StandardResponse(BaseModel):
    success: bool = Field(True, description="Always true for successful responses")
    message: Optional[str] = Field(None, description="Descriptive message for response.")
    data: Optional[Any] = Field(None, description="Payload or result")

    @staticmethod
    def ok(data: Any = None, message: str = "Success"):
        return StandardResponse(success=True, message=message, data=data)


class ErrorResponse(BaseModel):
    success: bool = Field(False, description="Always false for error responses")
    error: str = Field(..., examples=["Report not found"])
    error_code: Optional[str] = Field(None, examples=["REPORT_404"])

    @staticmethod
    def from_exception(error: str, error_code: Optional[str] = None):
        return ErrorResponse(error=error, error_code=error_code)
