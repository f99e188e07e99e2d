from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any

from pydantic import BaseModel, Field, ConfigDict

from common.utils.date_utils import utc_now


class NotificationType(str, Enum):
    REPORT_RESOLVED = "report_resolved"
    MODERATION_WARNING = "moderation_warning"
    MODERATION_SUSPENSION = "moderation_suspension"
    MODERATION_BAN = "moderation_ban"
    CONTENT_REMOVED = "content_removed"


class NotificationData(BaseModel):
    art_name: Optional[str] = None
    image_link: Optional[str] = None


class Notification(BaseModel):
    id: Optional[str] = Field(default=None, alias="_id")  # MongoDB ID
    recipient_user_id: str
    actor_user_id: Optional[str] = None  # who triggered it, if anyone
    type: NotificationType
    title: str = ""
    message: str
    image_id: Optional[str] = None
    report_id: Optional[str] = None
    data: Optional[NotificationData] = None
    read_at: Optional[datetime] = None  # None means unread
    created_at: datetime = Field(default_factory=utc_now)

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    @property
    def is_read(self) -> bool:
        return self.read_at is not None

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(exclude={"id"}, exclude_none=True) | {"read_at": None}
