# File: src/infrastructure/external/email/email_client.py
import asyncio
import hashlib
import smtplib
from email.message import EmailMessage

from common.config.settings import settings
from common.logging.logger import log_info, log_error


class EmailDeliveryError(Exception):
    """Raised when the SMTP server rejects or cannot accept a message."""


def mask_email(email: str) -> str:
    return hashlib.sha256(email.lower().encode("utf-8")).hexdigest()[:12]


def build_message(to_email: str, subject: str, body_html: str) -> EmailMessage:
    msg = EmailMessage()
    msg["From"] = settings.SMTP_FROM_EMAIL
    msg["To"] = to_email
    msg["Subject"] = subject
    msg.set_content(body_html, subtype="html")
    return msg


class EmailClient:
    def _deliver(self, msg: EmailMessage) -> None:
        # implicit TLS on 465, STARTTLS otherwise
        use_ssl = settings.SMTP_TLS and settings.SMTP_PORT == 465
        smtp_class = smtplib.SMTP_SSL if use_ssl else smtplib.SMTP
        with smtp_class(
            host=settings.SMTP_HOST,
            port=settings.SMTP_PORT,
            timeout=settings.SLA_ALERT_EMAIL_TIMEOUT_SECONDS,
        ) as connection:
            if settings.SMTP_TLS and not use_ssl:
                connection.starttls()
            if settings.SMTP_USER and settings.SMTP_PASSWORD:
                connection.login(settings.SMTP_USER, settings.SMTP_PASSWORD)
            connection.send_message(msg)

    async def send(self, to_email: str, subject: str, body_html: str) -> None:
        if settings.MOCK_EMAIL:
            log_info("MOCK email sent", extra={"to": mask_email(to_email), "subject": subject})
            return

        msg = build_message(to_email, subject, body_html)
        try:
            # smtplib is blocking, keep it off the event loop
            loop = asyncio.get_running_loop()
            await loop.run_in_executor(None, self._deliver, msg)
            log_info("Email sent", extra={"to": mask_email(to_email), "subject": subject})
        except (smtplib.SMTPException, OSError) as e:
            log_error("Failed to send email", extra={"to": mask_email(to_email), "subject": subject, "error": str(e)})
            raise EmailDeliveryError(str(e)) from e


email_client = EmailClient()
