# File: domain/notification/services/builder.py
from typing import Literal

from common.logging.logger import log_debug, log_error
from common.translations.messages import get_message
from .templates.moderation_templates import TEMPLATE_KEYS, TEMPLATE_VARIABLES

SUPPORTED_LANGUAGES = ["en", "es"]


async def build_notification_content(
        template_key: str,
        language: Literal["en", "es"] = "en",
        variables: dict = None
) -> dict:
    if language not in SUPPORTED_LANGUAGES:
        language = "en"

    if template_key not in TEMPLATE_KEYS:
        raise ValueError(f"Unknown notification template: {template_key}")

    variables = variables or {}
    title_key = f"notification.{template_key}.title"
    body_key = f"notification.{template_key}.body"

    required_vars = TEMPLATE_VARIABLES.get(template_key, {})
    missing_vars = [var for var in required_vars if var not in variables]
    if missing_vars:
        log_error("Missing variables in template", extra={"template_key": template_key, "missing": missing_vars})
        raise ValueError(f"Missing variables for {template_key}: {missing_vars}")

    try:
        title = get_message(title_key, lang=language).format(**variables)
        body = get_message(body_key, lang=language).format(**variables)
    except KeyError as e:
        log_error("Template key not found", extra={"template_key": template_key, "error": str(e)})
        raise ValueError(f"Template {template_key} missing variable {str(e)} for language {language}")

    log_debug("Notification content built", extra={"template_key": template_key, "language": language})
    return {"title": title, "body": body}
