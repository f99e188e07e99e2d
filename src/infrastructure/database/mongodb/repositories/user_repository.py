# File: src/infrastructure/database/mongodb/repositories/user_repository.py
from typing import Optional, Dict, Any, List, Tuple

from motor.motor_asyncio import AsyncIOMotorDatabase

from infrastructure.database.mongodb.repository import MongoRepository

USERS_COLLECTION = "users"

PUBLIC_USER_FIELDS = {"name": 1, "email": 1, "profile_picture_link": 1, "moderation_status": 1, "warning_count": 1}


class UserRepository:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.repo = MongoRepository(db, USERS_COLLECTION)

    async def get(self, user_id: str) -> Optional[Dict[str, Any]]:
        return await self.repo.find_one({"_id": user_id})

    async def get_summary(self, user_id: Optional[str]) -> Optional[Dict[str, Any]]:
        if not user_id:
            return None
        return await self.repo.find_one({"_id": user_id}, projection=PUBLIC_USER_FIELDS)

    async def get_summaries(self, user_ids: List[str]) -> Dict[str, Dict[str, Any]]:
        if not user_ids:
            return {}
        docs = await self.repo.find({"_id": {"$in": list(set(user_ids))}}, projection=PUBLIC_USER_FIELDS)
        return {doc["_id"]: doc for doc in docs}

    async def apply_moderation(
        self,
        user_id: str,
        report_id: str,
        update_fields: Dict[str, Any],
        inc: Optional[Dict[str, int]] = None
    ) -> Tuple[Optional[Dict[str, Any]], bool]:
        """
        Apply one report's outcome to the user at most once.

        Returns the user document and whether this call applied the change.
        A repeat for a report already recorded in ``moderated_report_ids``
        leaves the user untouched.
        """
        updated = await self.repo.find_one_and_update(
            {"_id": user_id, "moderated_report_ids": {"$ne": report_id}},
            update_fields,
            inc=inc,
            add_to_set={"moderated_report_ids": report_id},
        )
        if updated:
            return updated, True
        return await self.get(user_id), False
