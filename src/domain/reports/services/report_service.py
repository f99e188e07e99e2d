# File: src/domain/reports/services/report_service.py
from datetime import datetime, timedelta
from typing import Optional, Dict, Any, List

from motor.motor_asyncio import AsyncIOMotorDatabase

from common.base_service.base_service import BaseService
from common.config.settings import settings
from common.exceptions.base_exception import (
    ValidationException, NotFoundException, SelfActionException, ConflictException
)
from common.logging.logger import log_info
from common.translations.messages import get_message
from common.utils.date_utils import utc_now, truncate_to_millis
from common.utils.pagination import clamp_pagination, paginate_response
from common.validators.validators import is_valid_object_id
from domain.content_filter.services.content_filter import analyze
from domain.reports.entities.report_entity import (
    Report, ContentSnapshot, ReportReason, ReportStatus, ReportTargetType,
    ACTIVE_STATUSES, SLA_AT_RISK_HOURS, DESCRIPTION_MAX_LENGTH,
    is_valid_reason, is_valid_status, is_terminal, can_transition, reason_label, report_to_public
)
from infrastructure.database.mongodb.repositories.image_repository import ImageRepository
from infrastructure.database.mongodb.repositories.report_repository import ReportRepository
from infrastructure.database.mongodb.repositories.user_repository import UserRepository

ADMIN_SORT_FIELDS = ("created_at", "sla_deadline", "status")
REPORTER_LIST_FIELDS = {
    "target_type": 1, "reason": 1, "status": 1, "created_at": 1, "resolved_at": 1, "content_snapshot": 1,
}
RELATED_REPORTS_LIMIT = 5


def _summary(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if not doc:
        return None
    data = dict(doc)
    data["id"] = data.pop("_id")
    return data


def list_reasons() -> List[Dict[str, str]]:
    return [{"key": r.name, "value": r.value, "label": reason_label(r)} for r in ReportReason]


class ReportService(BaseService):
    def __init__(self, db: AsyncIOMotorDatabase):
        super().__init__()
        self.reports = ReportRepository(db)
        self.users = UserRepository(db)
        self.images = ImageRepository(db)

    # === Submission ===

    @staticmethod
    def _validate_submission(reason: Any, description: Optional[str], language: str):
        if not reason or not is_valid_reason(reason):
            raise ValidationException(detail=get_message("report.invalid_reason", language))
        if description and len(description) > DESCRIPTION_MAX_LENGTH:
            raise ValidationException(detail=get_message(
                "report.description_too_long", language, {"max": DESCRIPTION_MAX_LENGTH}
            ))

    async def _ensure_not_duplicate(self, reporter_id: str, target_query: Dict[str, Any], now: datetime, message_key: str, language: str):
        since = now - timedelta(hours=settings.REPORT_DUPLICATE_WINDOW_HOURS)
        existing = await self.reports.find_recent_open_report(reporter_id, target_query, since)
        if existing:
            log_info("Duplicate report rejected", extra={"reporter_id": reporter_id, "existing_report_id": existing["_id"]})
            raise ConflictException(detail=get_message(message_key, language), error_code="DUPLICATE_REPORT")

    async def _create(self, report: Report, language: str) -> Dict[str, Any]:
        report_id = await self.reports.insert(report.to_document())
        log_info("Report submitted", extra={
            "report_id": report_id,
            "reporter_id": report.reporter_user_id,
            "target_type": report.target_type,
            "target_user_id": report.target_user_id,
            "target_image_id": report.target_image_id,
            "reason": report.reason,
            "sla_deadline": report.sla_deadline.isoformat(),
        })
        return {
            "report_id": report_id,
            "status": report.status,
            "sla_deadline": report.sla_deadline,
            "message": get_message("report.submitted", language, {"hours": settings.REPORT_SLA_HOURS}),
        }

    async def submit_image_report(
        self,
        reporter_id: str,
        image_id: str,
        reason: str,
        description: Optional[str] = None,
        language: str = "en"
    ) -> Dict[str, Any]:
        if not is_valid_object_id(image_id):
            raise ValidationException(detail=get_message("report.invalid_image_id", language))
        self._validate_submission(reason, description, language)

        image = await self.images.get(image_id)
        if not image:
            raise NotFoundException(detail=get_message("report.image_not_found", language))

        owner_id = image.get("user_id")
        if owner_id == reporter_id:
            raise SelfActionException(detail=get_message("report.self_content", language))

        now = truncate_to_millis(utc_now())
        await self._ensure_not_duplicate(
            reporter_id, {"target_image_id": image_id}, now, "report.duplicate_content", language
        )

        owner = await self.users.get_summary(owner_id) or {}
        snapshot = ContentSnapshot(
            image_link=image.get("image_link"),
            image_name=image.get("name"),
            image_description=image.get("description"),
            user_name=owner.get("name"),
            user_email=owner.get("email"),
        )
        report = Report.new(
            reporter_user_id=reporter_id,
            target_type=ReportTargetType.IMAGE,
            target_image_id=image_id,
            target_user_id=owner_id,
            reason=ReportReason(reason),
            description=description,
            snapshot=snapshot,
            sla_hours=settings.REPORT_SLA_HOURS,
            now=now,
        )
        return await self._create(report, language)

    async def submit_user_report(
        self,
        reporter_id: str,
        user_id: str,
        reason: str,
        description: Optional[str] = None,
        language: str = "en"
    ) -> Dict[str, Any]:
        if not is_valid_object_id(user_id):
            raise ValidationException(detail=get_message("report.invalid_user_id", language))
        self._validate_submission(reason, description, language)

        target = await self.users.get_summary(user_id)
        if not target:
            raise NotFoundException(detail=get_message("report.user_not_found", language))

        if user_id == reporter_id:
            raise SelfActionException(detail=get_message("report.self_user", language))

        now = truncate_to_millis(utc_now())
        await self._ensure_not_duplicate(
            reporter_id,
            {"target_user_id": user_id, "target_type": ReportTargetType.USER.value},
            now,
            "report.duplicate_user",
            language,
        )

        report = Report.new(
            reporter_user_id=reporter_id,
            target_type=ReportTargetType.USER,
            target_user_id=user_id,
            reason=ReportReason(reason),
            description=description,
            snapshot=ContentSnapshot(user_name=target.get("name"), user_email=target.get("email")),
            sla_hours=settings.REPORT_SLA_HOURS,
            now=now,
        )
        return await self._create(report, language)

    # === State machine ===

    async def get_or_404(self, report_id: str, language: str = "en") -> Dict[str, Any]:
        if not is_valid_object_id(report_id):
            raise ValidationException(detail=get_message("report.invalid_id", language))
        report = await self.reports.get(report_id)
        if not report:
            raise NotFoundException(detail=get_message("report.not_found", language))
        return report

    async def set_status(self, report_id: str, new_status: str, admin_id: str, language: str = "en") -> Dict[str, Any]:
        if not new_status or not is_valid_status(new_status):
            raise ValidationException(detail=get_message("report.invalid_status", language))
        report = await self.get_or_404(report_id, language)
        current = report["status"]

        if current == new_status:
            log_info("Report status unchanged", extra={"report_id": report_id, "status": current})
            return report_to_public(report)

        if is_terminal(current):
            raise ConflictException(detail=get_message("report.already_closed", language, {"status": current}))
        if not can_transition(current, new_status):
            raise ConflictException(detail=get_message(
                "report.invalid_transition", language, {"current": current, "status": new_status}
            ))

        now = utc_now()
        update_fields: Dict[str, Any] = {"status": new_status, "updated_at": now}
        if is_terminal(new_status):
            update_fields["resolved_at"] = now
            update_fields["resolved_by_admin_id"] = admin_id

        updated = await self.reports.update_if_status(report_id, [current], update_fields)
        if not updated:
            # status moved underneath us
            latest = await self.get_or_404(report_id, language)
            raise ConflictException(detail=get_message("report.already_closed", language, {"status": latest["status"]}))

        log_info("Report status updated", extra={
            "report_id": report_id, "from": current, "to": new_status, "admin_id": admin_id
        })
        return report_to_public(updated)

    async def mark_breached(self, now: Optional[datetime] = None) -> int:
        now = now or utc_now()
        flipped = await self.reports.mark_breached(now)
        if flipped:
            log_info("Reports marked as SLA breached", extra={"count": flipped})
        return flipped

    async def at_risk(self, window_hours: float, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
        """Unresolved reports whose deadline falls in (now, now + window], soonest first."""
        now = now or utc_now()
        return await self.reports.find_due_between(now, now + timedelta(hours=window_hours))

    async def pending_count(self) -> int:
        return await self.reports.count_by_status(ReportStatus.PENDING)

    # === Listings ===

    async def list_for_reporter(self, reporter_id: str, page: Any = 1, limit: Any = 20) -> Dict[str, Any]:
        page, limit, skip = clamp_pagination(page, limit, default_limit=20, max_limit=50)
        query = {"reporter_user_id": reporter_id}
        docs = await self.reports.paginate(
            query, skip=skip, limit=limit, sort=[("created_at", -1)], projection=REPORTER_LIST_FIELDS
        )
        total = await self.reports.count(query)
        items = [report_to_public(doc, with_sla=False) for doc in docs]
        return paginate_response(items, total, page, limit, items_key="reports")

    async def _populate(self, docs: List[Dict[str, Any]], now: datetime) -> List[Dict[str, Any]]:
        user_ids = [d["reporter_user_id"] for d in docs] + [d["target_user_id"] for d in docs if d.get("target_user_id")]
        users = await self.users.get_summaries(user_ids)
        images = await self.images.get_summaries([d["target_image_id"] for d in docs if d.get("target_image_id")])

        items = []
        for doc in docs:
            item = report_to_public(doc, now)
            item["reporter"] = _summary(users.get(doc["reporter_user_id"]))
            item["target_user"] = _summary(users.get(doc.get("target_user_id")))
            item["target_image"] = _summary(images.get(doc.get("target_image_id")))
            items.append(item)
        return items

    async def list_for_admin(
        self,
        status: Optional[str] = None,
        reason: Optional[str] = None,
        sla_at_risk: Optional[bool] = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
        page: Any = 1,
        limit: Any = 20,
        now: Optional[datetime] = None
    ) -> Dict[str, Any]:
        now = now or utc_now()
        page, limit, skip = clamp_pagination(page, limit, default_limit=20, max_limit=100)

        # unknown filter values are ignored
        query: Dict[str, Any] = {}
        if status and is_valid_status(status):
            query["status"] = status
        if reason and is_valid_reason(reason):
            query["reason"] = reason
        if sla_at_risk:
            query["status"] = {"$in": [s.value for s in ACTIVE_STATUSES]}
            query["sla_deadline"] = {"$lte": now + timedelta(hours=SLA_AT_RISK_HOURS)}

        sort_field = sort_by if sort_by in ADMIN_SORT_FIELDS else "created_at"
        direction = 1 if sort_order == "asc" else -1

        docs = await self.reports.paginate(query, skip=skip, limit=limit, sort=[(sort_field, direction)])
        total = await self.reports.count(query)
        items = await self._populate(docs, now)
        return paginate_response(items, total, page, limit, items_key="reports")

    async def stats(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        now = now or utc_now()
        active = [s.value for s in ACTIVE_STATUSES]

        by_status = {s.value: await self.reports.count_by_status(s) for s in ReportStatus}
        at_risk = await self.reports.count({
            "status": {"$in": active},
            "sla_deadline": {"$gt": now, "$lte": now + timedelta(hours=SLA_AT_RISK_HOURS)},
        })
        breached = await self.reports.count({"sla_breached": True})
        last_24h = await self.reports.count({"created_at": {"$gte": now - timedelta(hours=24)}})
        last_7d = await self.reports.count({"created_at": {"$gte": now - timedelta(days=7)}})
        breakdown = await self.reports.reason_breakdown()

        return {
            "by_status": by_status,
            "sla": {"at_risk": at_risk, "breached": breached},
            "activity": {"last_24_hours": last_24h, "last_7_days": last_7d},
            "by_reason": [{"reason": row["_id"], "count": row["count"]} for row in breakdown],
            "needs_attention": by_status[ReportStatus.PENDING.value] + at_risk,
        }

    async def get_detail(self, report_id: str, language: str = "en", now: Optional[datetime] = None) -> Dict[str, Any]:
        now = now or utc_now()
        report = await self.get_or_404(report_id, language)

        reporter = await self.users.get_summary(report["reporter_user_id"])
        target_user = await self.users.get_summary(report.get("target_user_id"))
        resolved_by = await self.users.get_summary(report.get("resolved_by_admin_id"))
        target_image = None
        if report.get("target_image_id"):
            image = await self.images.get(report["target_image_id"])
            if image:
                target_image = {
                    "id": image["_id"],
                    "name": image.get("name"),
                    "image_link": image.get("image_link"),
                    "description": image.get("description"),
                    "price": image.get("price"),
                    "category": image.get("category"),
                }

        related = await self.reports.find_related(report, limit=RELATED_REPORTS_LIMIT)

        data = report_to_public(report, now)
        data["reporter"] = _summary(reporter)
        data["target_user"] = _summary(target_user)
        data["target_image"] = target_image
        data["resolved_by"] = _summary(resolved_by)

        return {
            "report": data,
            "related_reports": [report_to_public(r, with_sla=False) for r in related],
            "sla_time_remaining": data["sla_time_remaining"],
            "content_analysis": analyze(report.get("description")),
        }
