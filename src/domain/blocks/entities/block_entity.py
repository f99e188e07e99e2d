from datetime import datetime
from typing import Optional, Dict, Any

from pydantic import BaseModel, Field, ConfigDict

from common.utils.date_utils import utc_now

BLOCK_REASON_MAX_LENGTH = 500


class Block(BaseModel):
    id: Optional[str] = Field(default=None, alias="_id")
    blocker_user_id: str  # who blocked
    blocked_user_id: str  # who was blocked
    reason: Optional[str] = Field(default=None, max_length=BLOCK_REASON_MAX_LENGTH)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    model_config = ConfigDict(populate_by_name=True)

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(exclude={"id"})


class MutualBlockStatus(BaseModel):
    a_blocked_b: bool
    b_blocked_a: bool

    @property
    def any_block(self) -> bool:
        return self.a_blocked_b or self.b_blocked_a
