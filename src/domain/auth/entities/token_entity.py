# File: domain/auth/entities/token_entity.py
from typing import Optional

from pydantic import BaseModel, Field


class TokenPayload(BaseModel):
    """Access token claims this service relies on."""

    sub: str = Field(..., description="Subject identifier (user ID)")
    role: str = Field("user", description="User role (user or admin)")
    jti: Optional[str] = Field(default=None, description="JWT identifier")
    iat: Optional[int] = Field(default=None, description="Issued-at timestamp")
    exp: Optional[int] = Field(default=None, description="Expiration timestamp")
    session_id: Optional[str] = Field(default=None, description="Session identifier")


class CurrentUser(BaseModel):
    user_id: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"
