# File: common/schemas/request_base.py

from typing import Optional, Literal

from pydantic import BaseModel, Field, ConfigDict


class BaseRequestModel(BaseModel):
    """
    Base model for all API request bodies.
    Includes shared metadata like language and tracking fields.
    """

    response_language: Literal["en", "es"] = Field(
        default="en",
        description="Language for response messages (e.g., 'en' for English, 'es' for Spanish)"
    )

    request_id: Optional[str] = Field(
        default=None,
        max_length=36,
        description="Optional request ID for traceability and debugging"
    )

    model_config = ConfigDict(
        extra="forbid",  # Reject extra fields
        str_strip_whitespace=True,
        validate_assignment=True
    )
