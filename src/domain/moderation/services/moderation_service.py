# File: src/domain/moderation/services/moderation_service.py
"""
Admin actions that close a report and act on its target.

Every action first settles the report with a status-guarded update, so
two admins racing on the same report cannot both apply it. Repeating an
action that already closed the report returns the stored outcome with
``replayed=True``; a different action on a closed report is a conflict.
User changes are recorded per report id, so a replay finishes a user write
that failed after the report was settled and never applies one twice.
Notifications and asset deletion are side effects: their failures are
logged and reported, the action still succeeds.
"""
from datetime import datetime, timedelta
from typing import Optional, Dict, Any, Tuple

import sentry_sdk
from motor.motor_asyncio import AsyncIOMotorDatabase

from common.base_service.base_service import BaseService
from common.config.settings import settings
from common.exceptions.base_exception import ValidationException, NotFoundException, ConflictException
from common.logging.logger import log_info, log_warning, log_error
from common.translations.messages import get_message
from common.utils.date_utils import utc_now, ensure_utc
from domain.notification.entities.notification_entity import NotificationType, NotificationData
from domain.notification.services.notification_service import NotificationService
from domain.reports.entities.report_entity import (
    ReportStatus, ResolutionAction, ACTIVE_STATUSES, RESOLUTION_NOTES_MAX_LENGTH,
    is_terminal, report_to_public
)
from domain.reports.services.report_service import ReportService
from domain.users.entities.user_entity import ModerationStatus
from infrastructure.external.storage.storage_client import StorageClient, StorageError, storage_client as default_storage_client

MIN_SUSPENSION_DAYS = 1
MAX_SUSPENSION_DAYS = 365

DEFAULT_WARNING_NOTES = "Warning issued for community guideline violation"
DEFAULT_REMOVAL_NOTES = "Content removed for violating community guidelines"
DEFAULT_DISMISS_NOTES = "Report dismissed - no violation found"
ALREADY_REMOVED_NOTES = "Content was already removed"


def default_suspension_notes(days: int) -> str:
    return f"User suspended for {days} days due to community guideline violations"


class ModerationService(BaseService):
    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        notification_service: NotificationService = None,
        storage: StorageClient = None
    ):
        super().__init__()
        self.report_service = ReportService(db)
        self.reports = self.report_service.reports
        self.users = self.report_service.users
        self.images = self.report_service.images
        self.notifications = notification_service or NotificationService(db)
        self.storage = storage or default_storage_client

    # === Shared steps ===

    @staticmethod
    def _check_notes(notes: Optional[str], language: str):
        if notes and len(notes) > RESOLUTION_NOTES_MAX_LENGTH:
            raise ValidationException(detail=get_message(
                "moderation.notes_too_long", language, {"max": RESOLUTION_NOTES_MAX_LENGTH}
            ))

    @staticmethod
    def _closed_with(report: Dict[str, Any], action: ResolutionAction, language: str) -> bool:
        """True when the report is already closed by this action; raises when closed by another."""
        if not is_terminal(report["status"]):
            return False
        if report.get("resolution_action") == action.value:
            log_info("Moderation action replayed", extra={"report_id": report["_id"], "action": action.value})
            return True
        raise ConflictException(detail=get_message(
            "report.already_handled", language, {"action": report.get("resolution_action") or report["status"]}
        ), error_code="REPORT_ALREADY_HANDLED")

    async def _settle(
        self,
        report: Dict[str, Any],
        admin_id: str,
        action: ResolutionAction,
        notes: str,
        language: str,
        status: ReportStatus = ReportStatus.RESOLVED
    ) -> Optional[Dict[str, Any]]:
        """Close the report; None means a concurrent call closed it with the same action first."""
        now = utc_now()
        updated = await self.reports.update_if_status(
            report["_id"],
            [s.value for s in ACTIVE_STATUSES],
            {
                "status": status.value,
                "resolved_at": now,
                "resolved_by_admin_id": admin_id,
                "resolution_action": action.value,
                "resolution_notes": notes,
                "updated_at": now,
            }
        )
        if updated:
            log_info("Report settled", extra={
                "report_id": report["_id"], "status": status.value, "action": action.value, "admin_id": admin_id
            })
            return updated

        latest = await self.report_service.get_or_404(report["_id"], language)
        self._closed_with(latest, action, language)
        return None

    async def _notify(self, recipient_id: Optional[str], notification_type: NotificationType, template_key: str, **kwargs):
        if not recipient_id:
            return
        try:
            await self.notifications.send(recipient_id, notification_type, template_key, **kwargs)
        except Exception as e:
            log_error("Moderation notification failed", extra={
                "recipient_id": recipient_id, "type": notification_type.value, "error": str(e)
            }, exc_info=True)
            sentry_sdk.capture_exception(e)

    async def _notify_reporter(self, report: Dict[str, Any], admin_id: str, template_key: str = "report_resolved"):
        await self._notify(
            report["reporter_user_id"],
            NotificationType.REPORT_RESOLVED,
            template_key,
            report_id=report["_id"],
            actor_id=admin_id,
        )

    async def _target_user(self, report: Dict[str, Any], verb: str, language: str) -> Dict[str, Any]:
        if not report.get("target_user_id"):
            raise ValidationException(detail=get_message("moderation.no_target_user", language, {"verb": verb}))
        user = await self.users.get(report["target_user_id"])
        if not user:
            raise NotFoundException(detail=get_message("moderation.target_user_not_found", language))
        return user

    async def _moderate_user(
        self,
        report: Dict[str, Any],
        admin_id: str,
        action: ResolutionAction,
        verb: str,
        notes: str,
        fields: Dict[str, Any],
        language: str,
        inc: Optional[Dict[str, int]] = None
    ) -> Tuple[Dict[str, Any], bool, bool]:
        """
        Settle the report, then apply its outcome to the target user.

        The user write is keyed by report id, so it runs on replays too: a
        retry after a failed user write finishes the job instead of stopping
        at the already-settled report. Returns ``(user, applied, replayed)``
        where ``applied`` is true only for the call that changed the user.
        """
        replayed = self._closed_with(report, action, language)
        await self._target_user(report, verb, language)

        if not replayed and not await self._settle(report, admin_id, action, notes, language):
            replayed = True

        user, applied = await self.users.apply_moderation(report["target_user_id"], report["_id"], fields, inc=inc)
        if not user:
            # deleted between the existence check and the update
            log_warning("Moderated user disappeared", extra={"user_id": report["target_user_id"]})
            return {"_id": report["target_user_id"], **fields}, False, replayed
        if applied and replayed:
            log_info("Moderation outcome applied on retry", extra={
                "report_id": report["_id"], "user_id": user["_id"], "action": action.value
            })
        return user, applied, replayed

    # === Actions ===

    async def warn_user(self, report_id: str, admin_id: str, message: Optional[str] = None, language: str = "en") -> Dict[str, Any]:
        self._check_notes(message, language)
        report = await self.report_service.get_or_404(report_id, language)

        user, applied, replayed = await self._moderate_user(
            report, admin_id, ResolutionAction.WARNING_ISSUED, "warn", message or DEFAULT_WARNING_NOTES,
            {"moderation_status": ModerationStatus.WARNED.value, "last_moderation_action": utc_now()},
            language,
            inc={"warning_count": 1},
        )
        if applied:
            await self._notify(
                report["target_user_id"],
                NotificationType.MODERATION_WARNING,
                "moderation_warning",
                message_override=message,
                report_id=report["_id"],
                actor_id=admin_id,
            )
            await self._notify_reporter(report, admin_id)
            log_info("User warned", extra={"report_id": report_id, "user_id": report["target_user_id"], "admin_id": admin_id})

        return {
            "message": get_message("moderation.warned", language),
            "data": {
                "user_id": user["_id"],
                "warning_count": user.get("warning_count", 0),
                "moderation_status": user.get("moderation_status"),
                "replayed": replayed,
            },
        }

    async def suspend_user(
        self,
        report_id: str,
        admin_id: str,
        duration_days: Optional[int] = None,
        message: Optional[str] = None,
        language: str = "en"
    ) -> Dict[str, Any]:
        days = settings.DEFAULT_SUSPENSION_DAYS if duration_days is None else duration_days
        if not MIN_SUSPENSION_DAYS <= days <= MAX_SUSPENSION_DAYS:
            raise ValidationException(detail=get_message(
                "moderation.invalid_duration", language, {"min": MIN_SUSPENSION_DAYS, "max": MAX_SUSPENSION_DAYS}
            ))
        self._check_notes(message, language)
        report = await self.report_service.get_or_404(report_id, language)

        now = utc_now()
        suspended_until = now + timedelta(days=days)
        user, applied, replayed = await self._moderate_user(
            report, admin_id, ResolutionAction.USER_SUSPENDED, "suspend", message or default_suspension_notes(days),
            {
                "moderation_status": ModerationStatus.SUSPENDED.value,
                "suspended_until": suspended_until,
                "last_moderation_action": now,
            },
            language,
        )
        if applied:
            await self._notify(
                report["target_user_id"],
                NotificationType.MODERATION_SUSPENSION,
                "moderation_suspension",
                variables={"days": days, "until": suspended_until.strftime("%Y-%m-%d")},
                message_override=message,
                report_id=report["_id"],
                actor_id=admin_id,
            )
            await self._notify_reporter(report, admin_id)
            log_info("User suspended", extra={
                "report_id": report_id, "user_id": report["target_user_id"], "days": days, "admin_id": admin_id
            })

        stored_until = user.get("suspended_until")
        return {
            "message": get_message("moderation.suspended", language, {"days": days}),
            "data": {
                "user_id": user["_id"],
                "suspended_until": ensure_utc(stored_until) if isinstance(stored_until, datetime) else stored_until,
                "moderation_status": user.get("moderation_status"),
                "replayed": replayed,
            },
        }

    async def ban_user(self, report_id: str, admin_id: str, reason: Optional[str], language: str = "en") -> Dict[str, Any]:
        reason = (reason or "").strip()
        if not reason:
            raise ValidationException(detail=get_message("moderation.ban_reason_required", language))
        self._check_notes(reason, language)
        report = await self.report_service.get_or_404(report_id, language)

        user, applied, replayed = await self._moderate_user(
            report, admin_id, ResolutionAction.USER_BANNED, "ban", reason,
            {
                "moderation_status": ModerationStatus.BANNED.value,
                "ban_reason": reason,
                "last_moderation_action": utc_now(),
            },
            language,
        )
        if applied:
            await self._notify(
                report["target_user_id"],
                NotificationType.MODERATION_BAN,
                "moderation_ban",
                variables={"reason": reason},
                report_id=report["_id"],
                actor_id=admin_id,
            )
            await self._notify_reporter(report, admin_id)
            log_info("User banned", extra={"report_id": report_id, "user_id": report["target_user_id"], "admin_id": admin_id})

        return {
            "message": get_message("moderation.banned", language),
            "data": {
                "user_id": user["_id"],
                "moderation_status": user.get("moderation_status"),
                "ban_reason": user.get("ban_reason"),
                "replayed": replayed,
            },
        }

    async def remove_content(
        self,
        report_id: str,
        admin_id: str,
        notify_target: bool = True,
        reason: Optional[str] = None,
        language: str = "en"
    ) -> Dict[str, Any]:
        self._check_notes(reason, language)
        report = await self.report_service.get_or_404(report_id, language)
        image_id = report.get("target_image_id")
        if not image_id:
            raise ValidationException(detail=get_message("moderation.no_image", language))

        snapshot = report.get("content_snapshot") or {}
        if self._closed_with(report, ResolutionAction.CONTENT_REMOVED, language):
            return {
                "message": get_message("moderation.content_already_removed", language),
                "data": {"removed_image_id": image_id, "image_name": snapshot.get("image_name"), "replayed": True},
            }

        image = await self.images.get(image_id)
        if not image:
            await self._settle(report, admin_id, ResolutionAction.CONTENT_REMOVED, ALREADY_REMOVED_NOTES, language)
            log_info("Reported image already gone", extra={"report_id": report_id, "image_id": image_id})
            return {
                "message": get_message("moderation.content_already_removed", language),
                "data": {"removed_image_id": image_id, "image_name": snapshot.get("image_name"), "replayed": False},
            }

        # both deletions are idempotent, so they run before the report is claimed
        if image.get("image_link"):
            try:
                await self.storage.delete_asset(image["image_link"])
            except StorageError as e:
                log_error("Asset deletion failed, continuing with removal", extra={
                    "report_id": report_id, "image_id": image_id, "error": str(e)
                })
                sentry_sdk.capture_exception(e)
        await self.images.delete(image_id)

        settled = await self._settle(
            report, admin_id, ResolutionAction.CONTENT_REMOVED, reason or DEFAULT_REMOVAL_NOTES, language
        )
        if settled:
            if notify_target:
                await self._notify(
                    report.get("target_user_id"),
                    NotificationType.CONTENT_REMOVED,
                    "content_removed",
                    variables={"art_name": image.get("name") or ""},
                    message_override=reason,
                    report_id=report["_id"],
                    actor_id=admin_id,
                    data=NotificationData(art_name=image.get("name"), image_link=snapshot.get("image_link")),
                )
            await self._notify_reporter(report, admin_id, "report_content_removed")
            log_info("Content removed", extra={"report_id": report_id, "image_id": image_id, "admin_id": admin_id})

        return {
            "message": get_message("moderation.content_removed", language),
            "data": {"removed_image_id": image_id, "image_name": image.get("name"), "replayed": not settled},
        }

    async def dismiss(self, report_id: str, admin_id: str, reason: Optional[str] = None, language: str = "en") -> Dict[str, Any]:
        self._check_notes(reason, language)
        report = await self.report_service.get_or_404(report_id, language)

        if self._closed_with(report, ResolutionAction.NO_ACTION, language):
            return {
                "message": get_message("moderation.dismissed", language),
                "data": {**report_to_public(report), "replayed": True},
            }

        settled = await self._settle(
            report, admin_id, ResolutionAction.NO_ACTION, reason or DEFAULT_DISMISS_NOTES, language,
            status=ReportStatus.DISMISSED
        )
        replayed = settled is None
        if replayed:
            settled = await self.report_service.get_or_404(report_id, language)
        else:
            await self._notify_reporter(report, admin_id, "report_dismissed")
            log_info("Report dismissed", extra={"report_id": report_id, "admin_id": admin_id})

        return {
            "message": get_message("moderation.dismissed", language),
            "data": {**report_to_public(settled), "replayed": replayed},
        }
