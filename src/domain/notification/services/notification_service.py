# File: src/domain/notification/services/notification_service.py
import html
from datetime import datetime
from typing import Optional, Dict, Any

from motor.motor_asyncio import AsyncIOMotorDatabase

from common.config.settings import settings
from common.logging.logger import log_error, log_info, log_warning
from common.translations.messages import get_message
from domain.notification.entities.notification_entity import Notification, NotificationType, NotificationData
from domain.notification.services.builder import build_notification_content
from infrastructure.database.mongodb.repositories.notification_repository import NotificationRepository
from infrastructure.database.mongodb.repositories.user_repository import UserRepository
from infrastructure.external.email.email_client import EmailClient, email_client as default_email_client


def build_notification_email_html(app_name: str, recipient_name: Optional[str], title: str, message: str) -> str:
    year = datetime.now().year
    app_name = html.escape(app_name)
    safe_name = html.escape(recipient_name or "there")
    message = html.escape(message)
    title_html = f'<h2 style="font-size:18px;margin:12px 0">{html.escape(title)}</h2>' if title else ""
    return f"""<!doctype html>
<html>
<head><meta charset="utf-8"/><meta name="viewport" content="width=device-width,initial-scale=1"/></head>
<body style="margin:0;background:#f7f7f7;font-family:Arial,Helvetica,sans-serif;color:#333">
  <div style="max-width:620px;margin:24px auto;background:#fff;border:1px solid #eee;border-radius:10px;overflow:hidden">
    <div style="padding:20px 24px;border-bottom:1px solid #eee;text-align:center">
      <h1 style="margin:0;font-size:20px">{app_name}</h1>
    </div>
    <div style="padding:22px 24px">
      <p style="margin-top:0">Hi {safe_name},</p>
      {title_html}
      <p style="line-height:1.5;margin:12px 0">{message}</p>
      <p style="color:#777;font-size:12px;margin-top:28px">If you didn't expect this email, you can ignore it.</p>
    </div>
    <div style="padding:14px 24px;background:#fafafa;border-top:1px solid #eee;color:#888;text-align:center;font-size:12px">
      &copy; {year} {app_name}. All rights reserved.
    </div>
  </div>
</body>
</html>"""


class NotificationService:
    def __init__(self, db: AsyncIOMotorDatabase, email_client: EmailClient = None):
        self.notifications = NotificationRepository(db)
        self.users = UserRepository(db)
        self.email_client = email_client or default_email_client

    async def send(
        self,
        recipient_id: str,
        notification_type: NotificationType,
        template_key: str,
        variables: Dict[str, Any] = None,
        message_override: Optional[str] = None,
        report_id: Optional[str] = None,
        image_id: Optional[str] = None,
        actor_id: Optional[str] = None,
        data: Optional[NotificationData] = None,
        language: str = "en",
    ) -> str:
        """
        Persist an in-app notification, then attempt the matching email.

        The email is a best-effort step after the insert: its failure is
        logged and never undoes the notification.
        """
        content = await build_notification_content(template_key, language=language, variables=variables or {})
        notification = Notification(
            recipient_user_id=recipient_id,
            actor_user_id=actor_id,
            type=notification_type,
            title=content["title"],
            message=message_override or content["body"],
            report_id=report_id,
            image_id=image_id,
            data=data,
        )

        notification_id = await self.notifications.insert(notification.to_document())
        notification.id = notification_id

        log_info("Notification created", extra={
            "notification_id": notification_id,
            "recipient_id": recipient_id,
            "type": notification.type,
            "report_id": report_id,
        })

        await self._send_email(notification, language)
        return notification_id

    async def _send_email(self, notification: Notification, language: str) -> bool:
        try:
            recipient = await self.users.get(notification.recipient_user_id)
            if not recipient or not recipient.get("email"):
                log_warning("Notification email skipped, recipient has no email", extra={
                    "notification_id": notification.id,
                    "recipient_id": notification.recipient_user_id,
                })
                return False

            subject_key = f"email.subject.{notification.type}"
            subject = get_message(subject_key, lang=language)
            if subject == subject_key:
                subject = notification.title or "Notification"

            recipient_name = recipient.get("name") or recipient["email"].split("@")[0]
            body_html = build_notification_email_html(
                app_name=settings.APP_NAME,
                recipient_name=recipient_name,
                title=notification.title,
                message=notification.message,
            )
            await self.email_client.send(recipient["email"], subject, body_html)
            return True
        except Exception as e:
            log_error("Notification email send failed", extra={
                "notification_id": notification.id,
                "recipient_id": notification.recipient_user_id,
                "error": str(e),
            })
            return False
