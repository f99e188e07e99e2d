# File: src/domain/notification/services/templates/moderation_templates.py

TEMPLATE_KEYS = [
    "report_resolved",
    "report_content_removed",
    "report_dismissed",
    "moderation_warning",
    "moderation_suspension",
    "moderation_ban",
    "content_removed",
]

TEMPLATE_VARIABLES = {
    "report_resolved": {},
    "report_content_removed": {},
    "report_dismissed": {},
    "moderation_warning": {},
    "moderation_suspension": {"days": "int", "until": "str"},
    "moderation_ban": {"reason": "str"},
    "content_removed": {"art_name": "str"},
}
