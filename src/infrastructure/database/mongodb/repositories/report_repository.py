# File: src/infrastructure/database/mongodb/repositories/report_repository.py
from datetime import datetime
from typing import Optional, Dict, Any, List, Tuple

from motor.motor_asyncio import AsyncIOMotorDatabase

from domain.reports.entities.report_entity import ReportStatus, ACTIVE_STATUSES, TERMINAL_STATUSES
from infrastructure.database.mongodb.repository import MongoRepository

REPORTS_COLLECTION = "reports"


class ReportRepository:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.repo = MongoRepository(db, REPORTS_COLLECTION)

    async def insert(self, report_data: Dict[str, Any]) -> str:
        return await self.repo.insert_one(report_data)

    async def get(self, report_id: str) -> Optional[Dict[str, Any]]:
        return await self.repo.find_one({"_id": report_id})

    async def find_recent_open_report(
        self,
        reporter_id: str,
        target_query: Dict[str, Any],
        since: datetime
    ) -> Optional[Dict[str, Any]]:
        query = {
            "reporter_user_id": reporter_id,
            "created_at": {"$gte": since},
            "status": {"$in": [s.value for s in ACTIVE_STATUSES]},
            **target_query,
        }
        return await self.repo.find_one(query)

    async def update(self, report_id: str, update_fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return await self.repo.find_one_and_update({"_id": report_id}, update_fields)

    async def update_if_status(
        self,
        report_id: str,
        expected_statuses: List[str],
        update_fields: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        """Apply the update only while the report is still in one of expected_statuses."""
        return await self.repo.find_one_and_update(
            {"_id": report_id, "status": {"$in": list(expected_statuses)}},
            update_fields
        )

    async def mark_breached(self, now: datetime) -> int:
        return await self.repo.update_many(
            {
                "status": {"$in": [s.value for s in ACTIVE_STATUSES]},
                "sla_deadline": {"$lt": now},
                "sla_breached": False,
            },
            {"sla_breached": True, "updated_at": now}
        )

    async def find_due_between(self, after: Optional[datetime], until: datetime) -> List[Dict[str, Any]]:
        """Unresolved reports with after < sla_deadline <= until, soonest deadline first."""
        deadline_query: Dict[str, Any] = {"$lte": until}
        if after is not None:
            deadline_query["$gt"] = after
        return await self.repo.find(
            {
                "status": {"$in": [s.value for s in ACTIVE_STATUSES]},
                "sla_deadline": deadline_query,
            },
            sort=[("sla_deadline", 1)]
        )

    async def find_closed_ids(self, report_ids: List[str]) -> List[str]:
        if not report_ids:
            return []
        docs = await self.repo.find(
            {
                "_id": {"$in": report_ids},
                "status": {"$in": [s.value for s in TERMINAL_STATUSES]},
            },
            projection={"_id": 1}
        )
        return [doc["_id"] for doc in docs]

    async def count(self, query: Dict[str, Any]) -> int:
        return await self.repo.count(query)

    async def count_by_status(self, status: ReportStatus) -> int:
        return await self.repo.count({"status": status.value})

    async def paginate(
        self,
        query: Dict[str, Any],
        skip: int,
        limit: int,
        sort: List[Tuple[str, int]],
        projection: Optional[Dict[str, Any]] = None
    ) -> List[Dict[str, Any]]:
        return await self.repo.find_with_pagination(query, skip=skip, limit=limit, sort=sort, projection=projection)

    async def find_related(self, report: Dict[str, Any], limit: int = 5) -> List[Dict[str, Any]]:
        if report.get("target_image_id"):
            query = {"target_image_id": report["target_image_id"]}
        else:
            query = {"target_user_id": report["target_user_id"]}
        query["_id"] = {"$ne": report["_id"]}
        return await self.repo.find(
            query,
            projection={"reason": 1, "status": 1, "created_at": 1, "resolved_at": 1, "resolution_action": 1},
            sort=[("created_at", -1)],
            limit=limit
        )

    async def reason_breakdown(self) -> List[Dict[str, Any]]:
        return await self.repo.aggregate([
            {"$match": {"status": {"$in": [s.value for s in ACTIVE_STATUSES]}}},
            {"$group": {"_id": "$reason", "count": {"$sum": 1}}},
            {"$sort": {"count": -1}},
        ])

    async def ensure_indexes(self):
        await self.repo.create_index([("status", 1), ("sla_deadline", 1)])
        await self.repo.create_index([("target_user_id", 1), ("status", 1)])
        await self.repo.create_index([("reporter_user_id", 1), ("created_at", -1)])
        await self.repo.create_index([("target_image_id", 1)])
