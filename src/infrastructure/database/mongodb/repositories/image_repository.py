# File: src/infrastructure/database/mongodb/repositories/image_repository.py
from typing import Optional, Dict, Any, List

from motor.motor_asyncio import AsyncIOMotorDatabase

from infrastructure.database.mongodb.repository import MongoRepository

IMAGES_COLLECTION = "images"

LISTING_FIELDS = {
    "user_id": 1, "artist_name": 1, "name": 1, "description": 1, "price": 1,
    "image_link": 1, "views": 1, "category": 1, "created_at": 1, "sold_status": 1,
}


class ImageRepository:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.repo = MongoRepository(db, IMAGES_COLLECTION)

    async def get(self, image_id: str) -> Optional[Dict[str, Any]]:
        return await self.repo.find_one({"_id": image_id})

    async def get_summaries(self, image_ids: List[str]) -> Dict[str, Dict[str, Any]]:
        if not image_ids:
            return {}
        docs = await self.repo.find({"_id": {"$in": list(set(image_ids))}}, projection={"name": 1, "image_link": 1})
        return {doc["_id"]: doc for doc in docs}

    async def delete(self, image_id: str) -> int:
        return await self.repo.delete_one({"_id": image_id})

    async def list_listings(self, query: Dict[str, Any], skip: int, limit: int) -> List[Dict[str, Any]]:
        return await self.repo.find_with_pagination(
            query, skip=skip, limit=limit, sort=[("created_at", -1)], projection=LISTING_FIELDS
        )

    async def count(self, query: Dict[str, Any]) -> int:
        return await self.repo.count(query)

    async def ensure_indexes(self):
        await self.repo.create_index([("user_id", 1), ("created_at", -1)])
        await self.repo.create_index([("category", 1)])
