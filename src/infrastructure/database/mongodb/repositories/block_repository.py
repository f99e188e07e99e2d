# File: src/infrastructure/database/mongodb/repositories/block_repository.py
from typing import Optional, Dict, Any, List

from motor.motor_asyncio import AsyncIOMotorDatabase

from infrastructure.database.mongodb.repository import MongoRepository

BLOCKS_COLLECTION = "blocks"


class BlockRepository:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.repo = MongoRepository(db, BLOCKS_COLLECTION)

    async def insert(self, block_data: Dict[str, Any]) -> str:
        return await self.repo.insert_one(block_data)

    async def find_edge(self, blocker_id: str, blocked_id: str) -> Optional[Dict[str, Any]]:
        return await self.repo.find_one({"blocker_user_id": blocker_id, "blocked_user_id": blocked_id})

    async def delete_edge(self, blocker_id: str, blocked_id: str) -> int:
        return await self.repo.delete_one({"blocker_user_id": blocker_id, "blocked_user_id": blocked_id})

    async def blocked_ids(self, blocker_id: str) -> List[str]:
        docs = await self.repo.find({"blocker_user_id": blocker_id}, projection={"blocked_user_id": 1})
        return [doc["blocked_user_id"] for doc in docs]

    async def list_for_blocker(self, blocker_id: str, skip: int, limit: int) -> List[Dict[str, Any]]:
        return await self.repo.find_with_pagination(
            {"blocker_user_id": blocker_id},
            skip=skip,
            limit=limit,
            sort=[("created_at", -1)]
        )

    async def count_for_blocker(self, blocker_id: str) -> int:
        return await self.repo.count({"blocker_user_id": blocker_id})

    async def ensure_indexes(self):
        await self.repo.create_index([("blocker_user_id", 1), ("blocked_user_id", 1)], unique=True)
        await self.repo.create_index([("blocked_user_id", 1)])
