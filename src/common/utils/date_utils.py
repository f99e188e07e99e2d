# File: common/utils/date_utils.py

from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """Returns current UTC time as aware datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """MongoDB hands back naive UTC datetimes; make them aware again."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def truncate_to_millis(value: datetime) -> datetime:
    """BSON dates carry millisecond precision."""
    return value.replace(microsecond=(value.microsecond // 1000) * 1000)




def millis_until(deadline: datetime, now: Optional[datetime] = None) -> int:
    """Milliseconds from now until deadline, never negative."""
    now = now or utc_now()
    remaining = (ensure_utc(deadline) - now).total_seconds() * 1000
    return max(0, int(remaining))
