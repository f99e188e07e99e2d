from enum import Enum


# Stored on user documents next to warning_count, suspended_until, ban_reason,
# last_moderation_action and moderated_report_ids. Profile fields belong to the
# profile service and are only read here for snapshots and summaries.
class ModerationStatus(str, Enum):
    ACTIVE = "active"
    WARNED = "warned"
    SUSPENDED = "suspended"
    BANNED = "banned"
