# File: src/infrastructure/database/mongodb/repositories/notification_repository.py
from typing import Dict, Any, List

from motor.motor_asyncio import AsyncIOMotorDatabase

from infrastructure.database.mongodb.repository import MongoRepository

NOTIFICATIONS_COLLECTION = "notifications"


class NotificationRepository:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.repo = MongoRepository(db, NOTIFICATIONS_COLLECTION)

    async def insert(self, notification_data: Dict[str, Any]) -> str:
        return await self.repo.insert_one(notification_data)

    async def find_for_recipient(self, recipient_id: str, limit: int = 50) -> List[Dict[str, Any]]:
        return await self.repo.find(
            {"recipient_user_id": recipient_id},
            sort=[("created_at", -1)],
            limit=limit
        )

    async def ensure_indexes(self):
        await self.repo.create_index([("recipient_user_id", 1), ("created_at", -1)])
        await self.repo.create_index([("recipient_user_id", 1), ("read_at", 1)])
