from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, ConfigDict

from common.utils.date_utils import ensure_utc, millis_until, utc_now


class ReportReason(str, Enum):
    # Content
    INAPPROPRIATE_CONTENT = "inappropriate_content"
    NUDITY_SEXUAL = "nudity_sexual"
    VIOLENCE_GRAPHIC = "violence_graphic"
    HATE_SPEECH = "hate_speech"
    # IP / legal
    COPYRIGHT_VIOLATION = "copyright_violation"
    TRADEMARK_VIOLATION = "trademark_violation"
    # Behavior
    HARASSMENT = "harassment"
    SPAM = "spam"
    SCAM_FRAUD = "scam_fraud"
    IMPERSONATION = "impersonation"
    # Other
    OTHER = "other"


class ReportStatus(str, Enum):
    PENDING = "pending"
    UNDER_REVIEW = "under_review"
    RESOLVED = "resolved"
    DISMISSED = "dismissed"


class ReportTargetType(str, Enum):
    IMAGE = "image"
    USER = "user"


class ResolutionAction(str, Enum):
    NO_ACTION = "no_action"
    WARNING_ISSUED = "warning_issued"
    CONTENT_REMOVED = "content_removed"
    USER_SUSPENDED = "user_suspended"
    USER_BANNED = "user_banned"


ACTIVE_STATUSES = (ReportStatus.PENDING, ReportStatus.UNDER_REVIEW)
TERMINAL_STATUSES = (ReportStatus.RESOLVED, ReportStatus.DISMISSED)

ALLOWED_TRANSITIONS = {
    ReportStatus.PENDING: {ReportStatus.UNDER_REVIEW, ReportStatus.RESOLVED, ReportStatus.DISMISSED},
    ReportStatus.UNDER_REVIEW: {ReportStatus.RESOLVED, ReportStatus.DISMISSED},
    ReportStatus.RESOLVED: set(),
    ReportStatus.DISMISSED: set(),
}

SLA_AT_RISK_HOURS = 4
DESCRIPTION_MAX_LENGTH = 1000
RESOLUTION_NOTES_MAX_LENGTH = 2000

DATETIME_FIELDS = ("created_at", "updated_at", "sla_deadline", "resolved_at")


def is_valid_reason(value: Any) -> bool:
    return value in {r.value for r in ReportReason}


def is_valid_status(value: Any) -> bool:
    return value in {s.value for s in ReportStatus}


def is_terminal(status: str) -> bool:
    return status in {s.value for s in TERMINAL_STATUSES}


def can_transition(current: str, new: str) -> bool:
    return ReportStatus(new) in ALLOWED_TRANSITIONS[ReportStatus(current)]


def reason_label(reason: ReportReason) -> str:
    return reason.name.replace("_", " ").lower().capitalize()


class ContentSnapshot(BaseModel):
    image_link: Optional[str] = None
    image_name: Optional[str] = None
    image_description: Optional[str] = None
    user_name: Optional[str] = None
    user_email: Optional[str] = None


class Report(BaseModel):
    id: Optional[str] = Field(default=None, alias="_id")
    reporter_user_id: str
    target_type: ReportTargetType
    target_image_id: Optional[str] = None
    target_user_id: str
    reason: ReportReason
    description: str = Field(default="", max_length=DESCRIPTION_MAX_LENGTH)
    status: ReportStatus = ReportStatus.PENDING

    sla_deadline: datetime
    sla_breached: bool = False

    resolved_at: Optional[datetime] = None
    resolved_by_admin_id: Optional[str] = None
    resolution_action: Optional[ResolutionAction] = None
    resolution_notes: Optional[str] = Field(default=None, max_length=RESOLUTION_NOTES_MAX_LENGTH)

    content_snapshot: ContentSnapshot = Field(default_factory=ContentSnapshot)

    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    @classmethod
    def new(
        cls,
        reporter_user_id: str,
        target_type: ReportTargetType,
        target_user_id: str,
        reason: ReportReason,
        description: str,
        snapshot: ContentSnapshot,
        sla_hours: int,
        target_image_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> "Report":
        created_at = now or utc_now()
        return cls(
            reporter_user_id=reporter_user_id,
            target_type=target_type,
            target_image_id=target_image_id,
            target_user_id=target_user_id,
            reason=reason,
            description=description or "",
            content_snapshot=snapshot,
            sla_deadline=created_at + timedelta(hours=sla_hours),
            created_at=created_at,
            updated_at=created_at,
        )

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(exclude={"id"})


def sla_time_remaining(report: Dict[str, Any], now: Optional[datetime] = None) -> Optional[int]:
    """Milliseconds left before the deadline, None once the report is closed."""
    if is_terminal(report.get("status")):
        return None
    return millis_until(report["sla_deadline"], now)


def is_sla_at_risk(report: Dict[str, Any], now: Optional[datetime] = None) -> bool:
    remaining = sla_time_remaining(report, now)
    return remaining is not None and remaining < SLA_AT_RISK_HOURS * 60 * 60 * 1000


def report_to_public(report: Dict[str, Any], now: Optional[datetime] = None, with_sla: bool = True) -> Dict[str, Any]:
    data = dict(report)
    if "_id" in data:
        data["id"] = data.pop("_id")
    for field in DATETIME_FIELDS:
        if isinstance(data.get(field), datetime):
            data[field] = ensure_utc(data[field])
    if with_sla and "sla_deadline" in data:
        data["sla_time_remaining"] = sla_time_remaining(data, now)
        data["sla_at_risk"] = is_sla_at_risk(data, now)
    return data
